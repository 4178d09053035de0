"""
P-Touch Raster Command Definitions.

Builders for every command frame in the Brother raster protocol. Each
builder returns the exact bytes to write to the bulk OUT endpoint;
multi-byte values are little-endian.
"""

from .device import (
    AdvancedMode,
    CompressionMode,
    Mode,
    PrintInfo,
    VariousMode,
)

ESC = 0x1B

# Number of null bytes that clears any partially received command
INVALIDATE_LENGTH = 100

PRINT_INFO_LENGTH = 13

# Print information "valid flag" bits
PI_KIND = 0x02
PI_WIDTH = 0x04
PI_LENGTH = 0x08
PI_RECOVER = 0x80


def _check_range(name: str, value: int, maximum: int) -> None:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} must be between 0 and {maximum}, got {value}")


class Commands:
    """Command builders for P-Touch printers."""

    @staticmethod
    def null() -> bytes:
        """Single null byte (no operation)."""
        return b"\x00"

    @staticmethod
    def init() -> bytes:
        """Initialize: clear the print buffer and reset settings."""
        return bytes([ESC, 0x40])

    @staticmethod
    def invalidate() -> bytes:
        """Flush any partially received command with null bytes."""
        return bytes(INVALIDATE_LENGTH)

    @staticmethod
    def status_request() -> bytes:
        """Ask the printer to send one 32-byte status frame."""
        return bytes([ESC, 0x69, 0x53])

    @staticmethod
    def switch_mode(mode: Mode) -> bytes:
        """Select ESC/P, raster or template command mode."""
        return bytes([ESC, 0x69, 0x61, mode])

    @staticmethod
    def set_status_notify(enabled: bool) -> bytes:
        """Enable or disable automatic status notifications (0 = enabled)."""
        return bytes([ESC, 0x69, 0x21, 0x00 if enabled else 0x01])

    @staticmethod
    def set_print_info(info: PrintInfo) -> bytes:
        """
        Describe the media and the number of raster lines that follow.

        Layout (13 bytes):
            0-2    ESC i z
            3      Valid flags (kind, width, length, recover)
            4      Media kind
            5      Media width (mm)
            6      Media length (mm)
            7-10   Raster line count (little-endian uint32)
            11     Starting page (0)
            12     Fixed 0
        """
        _check_range("Raster count", info.raster_count, 0xFFFFFFFF)

        buffer = bytearray(PRINT_INFO_LENGTH)
        buffer[0:3] = bytes([ESC, 0x69, 0x7A])

        if info.kind is not None:
            buffer[3] |= PI_KIND
            buffer[4] = info.kind & 0xFF

        if info.width is not None:
            _check_range("Media width", info.width, 0xFF)
            buffer[3] |= PI_WIDTH
            buffer[5] = info.width

        if info.length is not None:
            _check_range("Media length", info.length, 0xFF)
            buffer[3] |= PI_LENGTH
            buffer[6] = info.length

        buffer[7:11] = info.raster_count.to_bytes(4, "little")

        if info.recover:
            buffer[3] |= PI_RECOVER

        return bytes(buffer)

    @staticmethod
    def set_various_mode(mode: VariousMode) -> bytes:
        """Auto-cut and mirror printing flags."""
        return bytes([ESC, 0x69, 0x4D, mode & 0xFF])

    @staticmethod
    def set_advanced_mode(mode: AdvancedMode) -> bytes:
        """Half-cut, chain printing and resolution flags."""
        return bytes([ESC, 0x69, 0x4B, mode & 0xFF])

    @staticmethod
    def set_margin(dots: int) -> bytes:
        """Feed margin in dots (little-endian uint16)."""
        _check_range("Margin", dots, 0xFFFF)
        return bytes([ESC, 0x69, 0x64]) + dots.to_bytes(2, "little")

    @staticmethod
    def set_page_no(number: int) -> bytes:
        """Cut after every `number` labels when auto-cut is on."""
        _check_range("Page number", number, 0xFF)
        return bytes([ESC, 0x69, 0x41, number])

    @staticmethod
    def set_compression_mode(mode: CompressionMode) -> bytes:
        """Select uncompressed or TIFF (PackBits) raster data."""
        return bytes([0x4D, mode])

    @staticmethod
    def raster_transfer(data: bytes) -> bytes:
        """
        Send one raster line.

        Args:
            data: Raw or compressed line bytes
        """
        _check_range("Raster data length", len(data), 0xFFFF)
        return bytes([0x47]) + len(data).to_bytes(2, "little") + bytes(data)

    @staticmethod
    def raster_zero() -> bytes:
        """Send one blank raster line."""
        return bytes([0x5A])

    @staticmethod
    def print() -> bytes:
        """Print without feeding (more pages follow)."""
        return bytes([0x0C])

    @staticmethod
    def print_and_feed() -> bytes:
        """Print the last page and feed."""
        return bytes([0x1A])
