"""
Response Parsers for P-Touch Printers.

Decodes the fixed 32-byte status frame sent on the bulk IN endpoint in
reply to a status request, and whenever status notifications are enabled
and the printer changes state.
"""

from dataclasses import dataclass
from typing import Optional

from .device import (
    STATUS_FRAME_LENGTH,
    Error1,
    Error2,
    Margins,
    MediaKind,
    Notification,
    Phase,
    StatusType,
    TapeColour,
    TextColour,
    media_margins,
)


@dataclass(frozen=True)
class Status:
    """
    Parsed status frame.

    Frame structure (32 bytes):
        Offset  Length  Field
        0       1       Model id
        1-7     7       Fixed / reserved
        8       1       Error information 1
        9       1       Error information 2
        10      1       Media width (mm)
        11      1       Media type
        12-17   6       Reserved
        18      1       Status type
        19      1       Phase type
        20      1       Phase number
        21      1       Reserved
        22      1       Notification number
        23      1       Reserved
        24      1       Tape colour
        25      1       Text colour
        26-31   6       Reserved
    """

    model: int
    error1: Error1
    error2: Error2
    media_width: int
    media_kind: MediaKind
    status_type: StatusType
    phase: Phase
    notification: Notification
    tape_colour: TapeColour
    text_colour: TextColour
    raw_data: bytes = b""

    @classmethod
    def parse(cls, data: bytes) -> Optional["Status"]:
        """
        Parse a status frame.

        Unrecognised enum values decode to their UNKNOWN / INCOMPATIBLE
        member and undefined error bits are dropped, so any 32-byte frame
        parses.

        Args:
            data: Raw frame bytes (expected 32 bytes)

        Returns:
            Status instance, or None if the frame is not 32 bytes long
        """
        if len(data) != STATUS_FRAME_LENGTH:
            return None

        return cls(
            model=data[0],
            error1=Error1.from_byte(data[8]),
            error2=Error2.from_byte(data[9]),
            media_width=data[10],
            media_kind=MediaKind.from_byte(data[11]),
            status_type=StatusType.from_byte(data[18]),
            phase=Phase.from_byte(data[20]),
            notification=Notification.from_byte(data[22]),
            tape_colour=TapeColour.from_byte(data[24]),
            text_colour=TextColour.from_byte(data[25]),
            raw_data=bytes(data),
        )

    @property
    def has_errors(self) -> bool:
        return bool(self.error1) or bool(self.error2)

    @property
    def margins(self) -> Margins:
        """Raster margins for the loaded media (all zero if unsupported)."""
        return media_margins(self.media_kind, self.media_width)

    def __str__(self) -> str:
        return (
            f"Status(\n"
            f"  model=0x{self.model:02X},\n"
            f"  error1={self.error1!r},\n"
            f"  error2={self.error2!r},\n"
            f"  media={self.media_kind.name} {self.media_width}mm,\n"
            f"  status_type={self.status_type.name},\n"
            f"  phase={self.phase.name},\n"
            f"  notification={self.notification.name},\n"
            f"  tape_colour={self.tape_colour.name},\n"
            f"  text_colour={self.text_colour.name}\n"
            f")"
        )


@dataclass
class DeviceInfo:
    """USB string descriptors of a connected printer."""

    manufacturer: str
    product: str
    serial: str

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.product} (serial {self.serial})"
