"""
Exception hierarchy for the P-Touch driver.

Every error raised by this package derives from PrinterError so callers
can catch the whole family in one place.
"""


class PrinterError(Exception):
    """Base exception for all printer errors."""

    pass


class ConnectionError(PrinterError):
    """Error connecting to or communicating with printer."""

    pass


class DeviceNotFoundError(ConnectionError):
    """No matching USB device, or the requested index is out of range."""

    pass


class EndpointError(ConnectionError):
    """The device does not expose the expected bulk endpoints."""

    pass


class TimeoutError(PrinterError):
    """A transfer was short, or the printer did not finish in time."""

    pass


class PrintError(PrinterError):
    """Error during print operation."""

    pass


class DeviceError(PrintError):
    """The printer reported an error in a status frame.

    Attributes:
        error1: Error information 1 flags (no media, cutter jam, ...)
        error2: Error information 2 flags (wrong media, cover open, ...)
    """

    def __init__(self, error1, error2):
        self.error1 = error1
        self.error2 = error2
        super().__init__(f"Printer reported error: {error1!r} {error2!r}")


class MediaError(PrinterError):
    """Loaded media is missing or not supported for printing."""

    pass


class RenderError(PrinterError):
    """Error drawing into or exporting a canvas."""

    pass


class OutOfRangeError(RenderError, IndexError):
    """Pixel coordinates fall outside the canvas."""

    pass


class SizeMismatchError(RenderError):
    """Canvas height does not match the printable span of the media."""

    pass


class ImageError(PrinterError):
    """Error processing image for printing."""

    pass


class CompressionError(PrinterError, ValueError):
    """Codec input is malformed or outside the supported size."""

    pass
