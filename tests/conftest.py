"""
Pytest configuration for P-Touch printer tests.

Provides a scripted fake transport, a status frame builder, and the
command-line option that enables hardware tests.
"""

from collections import deque

import pytest

from ptouch import PTouchDevice, PTouchPrinter
from ptouch.device import STATUS_FRAME_LENGTH
from ptouch.exceptions import TimeoutError


def pytest_addoption(parser):
    """Add command-line options for hardware tests."""
    parser.addoption(
        "--device",
        action="store",
        default=None,
        help="Printer model for hardware tests (e.g. pt-p710bt)",
    )


def make_frame(
    error1=0,
    error2=0,
    media_width=12,
    media_kind=0x01,
    status_type=0x00,
    phase=0x00,
    notification=0x00,
    tape_colour=0x01,
    text_colour=0x08,
) -> bytes:
    """Build a 32-byte status frame, defaulting to 12mm white laminated tape."""
    frame = bytearray(STATUS_FRAME_LENGTH)
    frame[0] = 0x80
    frame[1] = 0x20
    frame[2] = ord("B")
    frame[3] = ord("0")
    frame[8] = error1
    frame[9] = error2
    frame[10] = media_width
    frame[11] = media_kind
    frame[18] = status_type
    frame[20] = phase
    frame[22] = notification
    frame[24] = tape_colour
    frame[25] = text_colour
    return bytes(frame)


class FakeTransport:
    """
    In-memory transport that records writes and replays scripted reads.

    Each scripted read is either bytes (returned as-is) or an exception
    instance (raised). Reads past the end of the script time out.
    """

    def __init__(self, reads=()):
        self.writes: list[bytes] = []
        self.reads = deque(reads)
        self.read_count = 0
        self.is_connected = True

    def write(self, data: bytes) -> None:
        self.writes.append(bytes(data))

    def read(self, length: int = STATUS_FRAME_LENGTH) -> bytes:
        self.read_count += 1
        if not self.reads:
            raise TimeoutError("No scripted response")
        item = self.reads.popleft()
        if isinstance(item, Exception):
            raise item
        return item

    def disconnect(self) -> None:
        self.is_connected = False


@pytest.fixture
def frame():
    """Status frame builder."""
    return make_frame


@pytest.fixture
def transport():
    """Empty fake transport; tests append to `transport.reads`."""
    return FakeTransport()


@pytest.fixture
def printer_device(request):
    """Get the printer model from command line."""
    label = request.config.getoption("--device")
    if label is None:
        pytest.skip("No printer device provided (use --device=pt-p710bt)")
    return PTouchDevice.from_label(label)


@pytest.fixture
def connected_printer(printer_device):
    """Provide a connected printer instance."""
    printer = PTouchPrinter(device=printer_device)
    printer.set_debug(True)

    try:
        printer.connect()
    except Exception as e:
        pytest.skip(f"Could not connect to {printer_device.label}: {e}")

    yield printer

    printer.disconnect()
