"""
High-Level P-Touch Printer Interface.

Provides a simple API for querying and printing labels on Brother P-Touch
printers over USB, plus the raw command API used to drive the printer
step by step.
"""

import logging
from typing import Optional, Sequence

from .canvas import Canvas
from .commands import Commands
from .connection import PrinterEntry, USBConnection
from .device import (
    STATUS_FRAME_LENGTH,
    AdvancedMode,
    CompressionMode,
    Mode,
    PrintInfo,
    PTouchDevice,
    VariousMode,
)
from .exceptions import ConnectionError, MediaError, TimeoutError
from .image import ImageProcessor, ImageSource
from .responses import DeviceInfo, Status
from .session import PrintSession, RetryPolicy

log = logging.getLogger(__name__)


class PTouchPrinter:
    """
    High-level interface to a P-Touch label printer.

    All calls block for at most the connection timeout per transfer; a
    print additionally blocks while the completion poll runs.
    """

    DEFAULT_DEVICE = PTouchDevice.PT_P710BT

    def __init__(
        self,
        device: PTouchDevice = DEFAULT_DEVICE,
        index: int = 0,
        timeout: float = USBConnection.DEFAULT_TIMEOUT,
        retry: RetryPolicy = RetryPolicy(),
    ):
        """
        Initialize printer interface.

        Args:
            device: Printer model to connect to
            index: Which printer to use if several of this model are attached
            timeout: Per-transfer USB timeout in seconds
            retry: Completion poll bounds for print jobs
        """
        self.device = device
        self.index = index
        self.retry = retry
        self.connection = USBConnection(timeout=timeout)

    def set_debug(self, enabled: bool):
        """Enable/disable debug logging for the whole package."""
        logging.getLogger("ptouch").setLevel(logging.DEBUG if enabled else logging.NOTSET)

    @classmethod
    def scan(cls) -> list[PrinterEntry]:
        """Scan for attached P-Touch printers."""
        return USBConnection.scan()

    def connect(self) -> None:
        """
        Open the printer and reset it to a known state.

        Raises:
            ConnectionError: If the printer cannot be opened
        """
        log.info("Connecting to %s #%d...", self.device.label, self.index)
        self.connection.connect(self.device, self.index)
        self.invalidate()
        self.init()
        log.info("Connected")

    def disconnect(self) -> None:
        """Disconnect from the printer."""
        self.connection.disconnect()
        log.info("Disconnected")

    def _write(self, data: bytes) -> None:
        if not self.connection.is_connected:
            raise ConnectionError("Not connected to printer")
        log.debug("TX: %s", data.hex() if len(data) < 50 else data[:50].hex() + "...")
        self.connection.write(data)

    # --- Raw command API ---

    def null(self) -> None:
        self._write(Commands.null())

    def init(self) -> None:
        self._write(Commands.init())

    def invalidate(self) -> None:
        self._write(Commands.invalidate())

    def status_request(self) -> None:
        self._write(Commands.status_request())

    def switch_mode(self, mode: Mode) -> None:
        self._write(Commands.switch_mode(mode))

    def set_status_notify(self, enabled: bool) -> None:
        self._write(Commands.set_status_notify(enabled))

    def set_print_info(self, info: PrintInfo) -> None:
        self._write(Commands.set_print_info(info))

    def set_various_mode(self, mode: VariousMode) -> None:
        self._write(Commands.set_various_mode(mode))

    def set_advanced_mode(self, mode: AdvancedMode) -> None:
        self._write(Commands.set_advanced_mode(mode))

    def set_margin(self, dots: int) -> None:
        self._write(Commands.set_margin(dots))

    def set_page_no(self, number: int) -> None:
        self._write(Commands.set_page_no(number))

    def set_compression_mode(self, mode: CompressionMode) -> None:
        self._write(Commands.set_compression_mode(mode))

    def raster_transfer(self, data: bytes) -> None:
        self._write(Commands.raster_transfer(data))

    def raster_zero(self) -> None:
        self._write(Commands.raster_zero())

    def print(self) -> None:
        self._write(Commands.print())

    def print_and_feed(self) -> None:
        self._write(Commands.print_and_feed())

    def read_status(self) -> Status:
        """
        Read one status frame.

        Raises:
            TimeoutError: If no complete frame arrives in time
        """
        frame = self.connection.read(STATUS_FRAME_LENGTH)
        status = Status.parse(frame)
        if status is None:
            raise TimeoutError(f"Short status frame ({len(frame)} bytes)")
        return status

    # --- Queries ---

    def info(self) -> DeviceInfo:
        """Fetch manufacturer, product and serial strings."""
        return self.connection.info()

    def status(self) -> Status:
        """
        Query the printer status.

        Resets the printer first so the reply is not interleaved with a
        half-sent command.
        """
        self.invalidate()
        self.init()
        self.status_request()
        status = self.read_status()
        log.debug("Device status: %r", status)
        return status

    # --- Printing ---

    def print_raw(
        self,
        lines: Sequence[bytes],
        info: PrintInfo,
        compress: bool = False,
        feed: bool = True,
    ) -> Status:
        """
        Print pre-rendered raster lines.

        Args:
            lines: Raster lines in column order
            info: Print information for the job
            compress: Send lines TIFF compressed
            feed: Feed and cut after printing

        Returns:
            Final status frame

        Raises:
            DeviceError: If the printer reports an error
            TimeoutError: If printing does not complete in time
        """
        if not self.connection.is_connected:
            raise ConnectionError("Not connected to printer")

        session = PrintSession(
            self.connection,
            compression=CompressionMode.TIFF if compress else CompressionMode.NONE,
            feed=feed,
            retry=self.retry,
        )
        return session.run(lines, info)

    def print_canvas(
        self,
        canvas: Canvas,
        compress: bool = False,
        status: Optional[Status] = None,
    ) -> Status:
        """
        Print a canvas on the loaded media.

        Args:
            canvas: Canvas whose height is the printable span of the media
            compress: Send lines TIFF compressed
            status: Current status, queried from the printer if omitted

        Raises:
            MediaError: If no supported media is loaded
            SizeMismatchError: If the canvas height does not fit the media
            DeviceError: If the printer reports an error
            TimeoutError: If printing does not complete in time
        """
        if status is None:
            status = self.status()

        margins = status.margins
        if not margins.is_valid:
            raise MediaError(
                f"Unsupported media: {status.media_kind.name} {status.media_width}mm"
            )

        lines = canvas.export_raster(margins)
        info = PrintInfo(
            kind=status.media_kind,
            width=status.media_width,
            length=0,
            raster_count=len(lines),
            recover=True,
        )
        log.info("Printing %d columns on %dmm %s", len(lines), status.media_width,
                 status.media_kind.name)
        return self.print_raw(lines, info, compress=compress)

    def print_image(self, image: ImageSource, compress: bool = False, rotate: bool = False) -> Status:
        """
        Print an image scaled to the loaded media.

        Raises:
            ImageError: If the image cannot be loaded
            MediaError: If no supported media is loaded
        """
        status = self.status()
        margins = status.margins
        if not margins.is_valid:
            raise MediaError(
                f"Unsupported media: {status.media_kind.name} {status.media_width}mm"
            )

        canvas = ImageProcessor(margins.printable_span).to_canvas(image, rotate=rotate)
        return self.print_canvas(canvas, compress=compress, status=status)

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to a printer."""
        return self.connection.is_connected
