"""
P-Touch Device Definitions.

Enumerations, flag sets and media tables shared by the command encoder,
the status decoder and the print session. Values follow the Brother
raster command reference for the PT-E550W / PT-P750W / PT-P710BT.
"""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Optional

# USB vendor id for all Brother devices
BROTHER_VID = 0x04F9

# Print head and protocol geometry
PRINT_HEAD_DOTS = 128
RASTER_LINE_BYTES = PRINT_HEAD_DOTS // 8
STATUS_FRAME_LENGTH = 32


class PTouchDevice(IntEnum):
    """Supported label makers, valued by USB product id."""
    PT_E550W = 0x2060
    PT_P750W = 0x2062
    PT_P710BT = 0x20AF

    @property
    def label(self) -> str:
        """Command-line name, e.g. "pt-p710bt"."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_label(cls, label: str) -> "PTouchDevice":
        """Look up a device by its command-line name."""
        for device in cls:
            if device.label == label.lower():
                return device
        raise ValueError(
            f"Unknown device: {label}. Supported devices: {[d.label for d in cls]}"
        )


class _ByteEnum(IntEnum):
    """IntEnum decoded from a single status byte."""

    @classmethod
    def from_byte(cls, value: int):
        """Decode a byte, mapping unrecognised values to the fallback member."""
        try:
            return cls(value)
        except ValueError:
            return cls._fallback()

    @classmethod
    def _fallback(cls):
        return cls["UNKNOWN"]


class _ByteFlags(IntFlag):
    """IntFlag decoded from a single byte, dropping undefined bits."""

    @classmethod
    def from_byte(cls, value: int):
        known = 0
        for flag in cls.__members__.values():
            known |= flag.value
        return cls(value & known)


class Mode(IntEnum):
    """Command mode selected with switch_mode."""
    ESCP = 0x00
    RASTER = 0x01
    TEMPLATE = 0x03


class MediaKind(_ByteEnum):
    """Media type reported at status byte 11."""
    NONE = 0x00
    LAMINATED_TAPE = 0x01
    NON_LAMINATED_TAPE = 0x03
    HEAT_SHRINK_TUBE = 0x11
    INCOMPATIBLE = 0xFF

    @classmethod
    def _fallback(cls):
        return cls.INCOMPATIBLE


class StatusType(_ByteEnum):
    """Reason a status frame was sent (status byte 18)."""
    REPLY = 0x00
    COMPLETED = 0x01
    ERROR = 0x02
    EXIT_INTERFACE = 0x03
    TURNED_OFF = 0x04
    NOTIFICATION = 0x05
    PHASE_CHANGE = 0x06
    UNKNOWN = -1


class Phase(_ByteEnum):
    """Coarse operating state (status byte 20)."""
    EDITING = 0x00
    PRINTING = 0x01
    UNKNOWN = -1


class Notification(_ByteEnum):
    """Notification number (status byte 22)."""
    NOT_AVAILABLE = 0x00
    COVER_OPEN = 0x01
    COVER_CLOSED = 0x02
    UNKNOWN = -1


class TapeColour(_ByteEnum):
    """Tape colour code (status byte 24)."""
    WHITE = 0x01
    OTHER = 0x02
    CLEAR = 0x03
    RED = 0x04
    BLUE = 0x05
    YELLOW = 0x06
    GREEN = 0x07
    BLACK = 0x08
    CLEAR_WHITE_TEXT = 0x09
    MATTE_WHITE = 0x20
    MATTE_CLEAR = 0x21
    MATTE_SILVER = 0x22
    SATIN_GOLD = 0x23
    SATIN_SILVER = 0x24
    BLUE_D = 0x30
    RED_D = 0x31
    FLUORESCENT_ORANGE = 0x40
    FLUORESCENT_YELLOW = 0x41
    BERRY_PINK_S = 0x50
    LIGHT_GRAY_S = 0x51
    LIME_GREEN_S = 0x52
    YELLOW_F = 0x60
    PINK_F = 0x61
    BLUE_F = 0x62
    WHITE_HEAT_SHRINK = 0x70
    WHITE_FLEX_ID = 0x90
    YELLOW_FLEX_ID = 0x91
    CLEANING = 0xF0
    STENCIL = 0xF1
    INCOMPATIBLE = 0xFF

    @classmethod
    def _fallback(cls):
        return cls.INCOMPATIBLE


class TextColour(_ByteEnum):
    """Text (ink) colour code (status byte 25)."""
    WHITE = 0x01
    OTHER = 0x02
    RED = 0x04
    BLUE = 0x05
    BLACK = 0x08
    GOLD = 0x0A
    BLUE_F = 0x62
    CLEANING = 0xF0
    STENCIL = 0xF1
    INCOMPATIBLE = 0xFF

    @classmethod
    def _fallback(cls):
        return cls.INCOMPATIBLE


class CompressionMode(IntEnum):
    """Raster data compression."""
    NONE = 0x00
    TIFF = 0x02


class Error1(_ByteFlags):
    """Error information 1 (status byte 8)."""
    NO_MEDIA = 1 << 0
    CUTTER_JAM = 1 << 2
    WEAK_BATTERY = 1 << 3
    HIGH_VOLTAGE_ADAPTER = 1 << 6


class Error2(_ByteFlags):
    """Error information 2 (status byte 9)."""
    WRONG_MEDIA = 1 << 0
    COVER_OPEN = 1 << 4
    OVERHEATING = 1 << 5


class VariousMode(_ByteFlags):
    """Flags for the various-mode command."""
    AUTO_CUT = 1 << 6
    MIRROR = 1 << 7


class AdvancedMode(_ByteFlags):
    """Flags for the advanced-mode command."""
    HALF_CUT = 1 << 2
    NO_CHAIN = 1 << 3
    SPECIAL_TAPE = 1 << 4
    HIGH_RES = 1 << 6
    NO_BUFFER_CLEAR = 1 << 7


@dataclass(frozen=True)
class Margins:
    """Dot layout of one raster line for a given media.

    leading_margin + printable_span + trailing_margin is PRINT_HEAD_DOTS
    for every known media and zero for unknown media.
    """
    leading_margin: int
    printable_span: int
    trailing_margin: int

    @property
    def is_valid(self) -> bool:
        return self.printable_span > 0

    def __iter__(self):
        return iter((self.leading_margin, self.printable_span, self.trailing_margin))


NO_MARGINS = Margins(0, 0, 0)

# TZe tape, keyed by width in mm as reported at status byte 10
TAPE_MARGINS = {
    4: Margins(52, 24, 52),  # 3.5mm
    6: Margins(48, 32, 48),
    9: Margins(39, 50, 39),
    12: Margins(29, 70, 29),
    18: Margins(8, 112, 8),
    24: Margins(0, 128, 0),
}

# HSe heat shrink tube, reported widths round up the nominal size
TUBE_MARGINS = {
    6: Margins(50, 28, 50),  # 5.8mm
    9: Margins(40, 48, 40),  # 8.8mm
    12: Margins(31, 66, 31),  # 11.7mm
    18: Margins(11, 106, 11),  # 17.7mm
    24: Margins(0, 128, 0),  # 23.6mm
}


def media_margins(kind: MediaKind, width_mm: int) -> Margins:
    """
    Look up the raster margins for a media kind and width.

    Returns:
        The media margins, or Margins(0, 0, 0) for unsupported media.
        Callers must check Margins.is_valid before printing.
    """
    if kind in (MediaKind.LAMINATED_TAPE, MediaKind.NON_LAMINATED_TAPE):
        return TAPE_MARGINS.get(width_mm, NO_MARGINS)
    if kind == MediaKind.HEAT_SHRINK_TUBE:
        return TUBE_MARGINS.get(width_mm, NO_MARGINS)
    return NO_MARGINS


@dataclass
class PrintInfo:
    """Parameters for the print-information command.

    Attributes:
        kind: Media kind, omitted from the command when None
        width: Tape width in mm, omitted when None
        length: Tape length in mm, always 0 for continuous tape
        raster_count: Number of raster lines that follow
        recover: Enable print recovery
    """
    kind: Optional[MediaKind] = None
    width: Optional[int] = None
    length: Optional[int] = None
    raster_count: int = 0
    recover: bool = True
