"""Brother P-Touch Label Printer Driver for USB."""

__version__ = "0.1.0"

from .canvas import Canvas
from .commands import Commands
from .compression import compress, decompress
from .connection import PrinterEntry, USBConnection
from .device import (
    AdvancedMode,
    CompressionMode,
    Error1,
    Error2,
    Margins,
    MediaKind,
    Mode,
    Notification,
    Phase,
    PrintInfo,
    PTouchDevice,
    StatusType,
    TapeColour,
    TextColour,
    VariousMode,
    media_margins,
)
from .exceptions import (
    CompressionError,
    ConnectionError,
    DeviceError,
    DeviceNotFoundError,
    EndpointError,
    ImageError,
    MediaError,
    OutOfRangeError,
    PrinterError,
    PrintError,
    RenderError,
    SizeMismatchError,
    TimeoutError,
)
from .image import MAX_IMAGE_DIMENSION, MAX_IMAGE_PIXELS, ImageProcessor, ImageSizeError
from .printer import PTouchPrinter
from .responses import DeviceInfo, Status
from .session import PrintSession, RetryPolicy, SessionState

__all__ = [
    "PTouchPrinter",
    "Canvas",
    "Commands",
    "compress",
    "decompress",
    "PrintSession",
    "RetryPolicy",
    "SessionState",
    "USBConnection",
    "PrinterEntry",
    "Status",
    "DeviceInfo",
    "ImageProcessor",
    "MAX_IMAGE_DIMENSION",
    "MAX_IMAGE_PIXELS",
    "PTouchDevice",
    "Mode",
    "MediaKind",
    "StatusType",
    "Phase",
    "Notification",
    "TapeColour",
    "TextColour",
    "CompressionMode",
    "Error1",
    "Error2",
    "VariousMode",
    "AdvancedMode",
    "Margins",
    "media_margins",
    "PrintInfo",
    "PrinterError",
    "ConnectionError",
    "DeviceNotFoundError",
    "EndpointError",
    "TimeoutError",
    "PrintError",
    "DeviceError",
    "MediaError",
    "RenderError",
    "OutOfRangeError",
    "SizeMismatchError",
    "ImageError",
    "ImageSizeError",
    "CompressionError",
]
