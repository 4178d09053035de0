"""
Bitmap canvas for label rendering.

The canvas is stored column by column: one column per raster line, with
the column height fixed to the printable span of the tape. Columns are
added on demand as content is drawn further along the tape, so renderers
never need to know the label length up front.
"""

import logging

from .device import RASTER_LINE_BYTES, Margins
from .exceptions import OutOfRangeError, SizeMismatchError

log = logging.getLogger(__name__)


class Canvas:
    """
    Growable 1-bit canvas.

    x runs along the tape (one column per raster line), y runs across the
    tape (one row per print head dot). Within a column, pixel y is bit
    y % 8 of byte y // 8; the height is padded to whole bytes internally.
    """

    def __init__(self, height: int, min_width: int = 0):
        """
        Create a blank canvas.

        Args:
            height: Number of dots across the tape
            min_width: Number of blank columns to allocate up front
        """
        if height <= 0:
            raise ValueError(f"Canvas height must be positive, got {height}")
        if min_width < 0:
            raise ValueError(f"Canvas width must not be negative, got {min_width}")

        self._height = height
        self._column_bytes = (height + 7) // 8
        self._columns: list[bytearray] = [self._blank_column() for _ in range(min_width)]

    def _blank_column(self) -> bytearray:
        return bytearray(self._column_bytes)

    def _check_y(self, x: int, y: int) -> None:
        if x < 0 or y < 0 or y >= self._height:
            raise OutOfRangeError(
                f"Pixel ({x}, {y}) outside canvas height {self._height}"
            )

    @property
    def width(self) -> int:
        return len(self._columns)

    @property
    def height(self) -> int:
        return self._height

    def size(self) -> tuple[int, int]:
        """Return (width, height) in pixels."""
        return len(self._columns), self._height

    def set(self, x: int, y: int, on: bool = True) -> None:
        """
        Set or clear one pixel, growing the canvas if x is past the end.

        Raises:
            OutOfRangeError: If y is outside the canvas height
        """
        self._check_y(x, y)

        while x >= len(self._columns):
            self._columns.append(self._blank_column())

        mask = 1 << (y % 8)
        if on:
            self._columns[x][y // 8] |= mask
        else:
            self._columns[x][y // 8] &= ~mask & 0xFF

    def get(self, x: int, y: int) -> bool:
        """
        Read one pixel. Reading never grows the canvas.

        Raises:
            OutOfRangeError: If (x, y) is outside the canvas
        """
        self._check_y(x, y)
        if x >= len(self._columns):
            raise OutOfRangeError(
                f"Pixel ({x}, {y}) outside canvas width {len(self._columns)}"
            )
        return bool(self._columns[x][y // 8] & (1 << (y % 8)))

    def pad(self, columns: int) -> int:
        """Append blank columns and return the number added."""
        for _ in range(columns):
            self._columns.append(self._blank_column())
        return columns

    def clear(self) -> None:
        """Turn every pixel off, keeping the current width."""
        self._columns = [self._blank_column() for _ in self._columns]

    def export_packed(self) -> bytes:
        """
        Export the canvas row by row, 8 pixels per byte.

        The width is padded up to a multiple of 8. Pixel (x, y) is bit
        x % 8 (LSB first) of byte x // 8 + y * padded_width // 8.
        """
        padded_width = (len(self._columns) + 7) // 8 * 8
        row_bytes = padded_width // 8
        buffer = bytearray(row_bytes * self._height)

        for x, column in enumerate(self._columns):
            mask = 1 << (x % 8)
            for y in range(self._height):
                if column[y // 8] & (1 << (y % 8)):
                    buffer[x // 8 + y * row_bytes] |= mask

        return bytes(buffer)

    def export_raster(self, margins: Margins) -> list[bytes]:
        """
        Export one raster line per column, aligned to the media margins.

        Pixel y lands on print head dot y + leading_margin. Dot 0 is bit 7
        (MSB) of byte 0 of the raster line.

        Raises:
            SizeMismatchError: If the canvas height is not the printable span
        """
        if self._height != margins.printable_span:
            raise SizeMismatchError(
                f"Canvas height ({self._height}) does not match printable "
                f"span ({margins.printable_span})"
            )

        log.debug(
            "Exporting %d raster lines (margins %d/%d/%d)",
            len(self._columns),
            margins.leading_margin,
            margins.printable_span,
            margins.trailing_margin,
        )

        lines = []
        for column in self._columns:
            line = bytearray(RASTER_LINE_BYTES)
            for y in range(self._height):
                if column[y // 8] & (1 << (y % 8)):
                    offset = y + margins.leading_margin
                    line[offset // 8] |= 1 << (7 - offset % 8)
            lines.append(bytes(line))

        return lines

    def __repr__(self) -> str:
        return f"Canvas(width={len(self._columns)}, height={self._height})"
