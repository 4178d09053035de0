"""
USB Connection Handler for P-Touch Printers.

Handles USB bulk communication using the pyusb library. A printer exposes
one bulk OUT endpoint for commands and one bulk IN endpoint for 32-byte
status frames; both share the connection timeout.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import usb.core
import usb.util

from .device import BROTHER_VID, STATUS_FRAME_LENGTH, PTouchDevice
from .exceptions import (
    ConnectionError,
    DeviceNotFoundError,
    EndpointError,
    TimeoutError,
)
from .responses import DeviceInfo

log = logging.getLogger(__name__)


@dataclass
class PrinterEntry:
    """A supported printer found on the USB bus.

    Attributes:
        device: Printer model
        index: Position among attached printers of the same model
        bus: USB bus number
        address: USB device address on the bus
    """
    device: PTouchDevice
    index: int
    bus: Optional[int]
    address: Optional[int]

    def __str__(self) -> str:
        return f"{self.device.label} #{self.index} [bus {self.bus}, address {self.address}]"


def _find(device: PTouchDevice) -> list:
    try:
        return list(usb.core.find(find_all=True, idVendor=BROTHER_VID, idProduct=device.value))
    except usb.core.NoBackendError as e:
        raise ConnectionError(f"No USB backend available: {e}") from e


def _is_bulk(endpoint, direction: int) -> bool:
    return (
        usb.util.endpoint_type(endpoint.bmAttributes) == usb.util.ENDPOINT_TYPE_BULK
        and usb.util.endpoint_direction(endpoint.bEndpointAddress) == direction
    )


class USBConnection:
    """Manages the USB connection to a P-Touch printer."""

    DEFAULT_TIMEOUT = 0.5  # seconds

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout
        self.device = None
        self.ep_out = None
        self.ep_in = None

    @property
    def _timeout_ms(self) -> int:
        return int(self.timeout * 1000)

    @classmethod
    def scan(cls) -> list[PrinterEntry]:
        """List all attached printers of every supported model."""
        printers = []
        for model in PTouchDevice:
            found = _find(model)
            for index, dev in enumerate(found):
                printers.append(PrinterEntry(
                    device=model,
                    index=index,
                    bus=getattr(dev, "bus", None),
                    address=getattr(dev, "address", None),
                ))
        return printers

    def connect(self, device: PTouchDevice, index: int = 0) -> None:
        """
        Open a printer and locate its bulk endpoints.

        Args:
            device: Printer model to look for
            index: Which printer to use if several of this model are attached

        Raises:
            DeviceNotFoundError: If no such printer is attached
            EndpointError: If the bulk endpoints cannot be found
            ConnectionError: On any other USB failure
        """
        matches = _find(device)
        log.debug("Found %d matching %s device(s)", len(matches), device.label)

        if index < 0 or index >= len(matches):
            raise DeviceNotFoundError(
                f"Device index ({index}) exceeds number of discovered "
                f"{device.label} devices ({len(matches)})"
            )

        dev = matches[index]

        try:
            dev.reset()

            try:
                cfg = dev.get_active_configuration()
            except usb.core.USBError:
                dev.set_configuration()
                cfg = dev.get_active_configuration()

            intf = cfg[(0, 0)]

            try:
                if dev.is_kernel_driver_active(intf.bInterfaceNumber):
                    log.debug("Detaching kernel driver from interface %d", intf.bInterfaceNumber)
                    dev.detach_kernel_driver(intf.bInterfaceNumber)
            except NotImplementedError:
                # Not supported by the backend (macOS, Windows)
                pass
        except usb.core.USBError as e:
            raise ConnectionError(f"Failed to open {device.label}: {e}") from e

        ep_out = usb.util.find_descriptor(
            intf, custom_match=lambda e: _is_bulk(e, usb.util.ENDPOINT_OUT)
        )
        ep_in = usb.util.find_descriptor(
            intf, custom_match=lambda e: _is_bulk(e, usb.util.ENDPOINT_IN)
        )

        if ep_out is None or ep_in is None:
            usb.util.dispose_resources(dev)
            raise EndpointError("Failed to locate command and status endpoints")

        log.debug(
            "Using endpoints OUT 0x%02X IN 0x%02X",
            ep_out.bEndpointAddress,
            ep_in.bEndpointAddress,
        )

        self.device = dev
        self.ep_out = ep_out
        self.ep_in = ep_in

    def disconnect(self) -> None:
        """Release the device handle."""
        if self.device is not None:
            usb.util.dispose_resources(self.device)
        self.device = None
        self.ep_out = None
        self.ep_in = None

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise ConnectionError("Not connected to printer")

    def write(self, data: bytes) -> None:
        """
        Write a command frame to the bulk OUT endpoint.

        Raises:
            TimeoutError: If the write times out or is short
            ConnectionError: On any other USB failure
        """
        self._require_connection()

        try:
            written = self.ep_out.write(data, timeout=self._timeout_ms)
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Write timed out after {self.timeout}s") from e
        except usb.core.USBError as e:
            raise ConnectionError(f"Write failed: {e}") from e

        if written != len(data):
            raise TimeoutError(f"Short write: {written} of {len(data)} bytes")

    def read(self, length: int = STATUS_FRAME_LENGTH) -> bytes:
        """
        Read one frame from the bulk IN endpoint.

        Raises:
            TimeoutError: If the read times out or is short
            ConnectionError: On any other USB failure
        """
        self._require_connection()

        try:
            data = bytes(self.ep_in.read(length, timeout=self._timeout_ms))
        except usb.core.USBTimeoutError as e:
            raise TimeoutError(f"Read timed out after {self.timeout}s") from e
        except usb.core.USBError as e:
            raise ConnectionError(f"Read failed: {e}") from e

        if len(data) != length:
            raise TimeoutError(f"Short read: {len(data)} of {length} bytes")

        log.debug("RX: %s", data.hex())
        return data

    def info(self) -> DeviceInfo:
        """
        Read manufacturer, product and serial string descriptors.

        Raises:
            ConnectionError: If the device reports no string languages
        """
        self._require_connection()

        try:
            languages = self.device.langids
        except (usb.core.USBError, ValueError) as e:
            raise ConnectionError(f"Failed to read languages: {e}") from e

        if not languages:
            raise ConnectionError("No supported languages")

        language = languages[0]
        try:
            return DeviceInfo(
                manufacturer=usb.util.get_string(self.device, self.device.iManufacturer, language) or "",
                product=usb.util.get_string(self.device, self.device.iProduct, language) or "",
                serial=usb.util.get_string(self.device, self.device.iSerialNumber, language) or "",
            )
        except usb.core.USBError as e:
            raise ConnectionError(f"Failed to read device strings: {e}") from e

    @property
    def is_connected(self) -> bool:
        """Check if currently connected."""
        return self.device is not None
