"""
Label layout rendering.

A label is a list of operations laid out one after another along the
tape. Each operation paints onto a shared canvas starting at the current
column and advances the column by the width it used.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from .barcodes import BarcodeType, QRErrorCorrection, generate_barcode, generate_qr
from .canvas import Canvas
from .exceptions import RenderError
from .image import ImageProcessor

log = logging.getLogger(__name__)


@dataclass
class RenderConfig:
    """Canvas limits for rendering.

    Attributes:
        height: Canvas height in dots (printable span of the tape)
        min_width: Minimum label length in columns
        max_width: Maximum label length in columns
    """
    height: int = 64
    min_width: int = 32
    max_width: int = 1024


@dataclass
class Pad:
    """Blank space along the tape."""
    count: int


@dataclass
class Qr:
    """QR code, as large as fits across the tape."""
    code: str
    error_correction: QRErrorCorrection = "M"


@dataclass
class Barcode:
    """1D barcode spanning the tape minus `y_offset` at each edge."""
    code: str
    barcode_type: BarcodeType = "code128"
    y_offset: int = 4
    double: bool = False


@dataclass
class Picture:
    """Image file scaled to the tape height."""
    file: Union[str, Path]
    threshold: int = 128
    rotate: bool = False


Op = Union[Pad, Qr, Barcode, Picture]


@dataclass
class Render:
    """Paint a sequence of operations onto a canvas."""

    config: RenderConfig = field(default_factory=RenderConfig)

    def render(self, ops: list[Op]) -> Canvas:
        """
        Render operations left to right.

        Returns:
            Canvas at least `min_width` columns wide

        Raises:
            RenderError: If the label exceeds `max_width` or an operation
                cannot be rendered
        """
        canvas = Canvas(self.config.height, self.config.min_width)
        x = 0

        for op in ops:
            if isinstance(op, Pad):
                used = op.count
            elif isinstance(op, Qr):
                used = self._render_qr(canvas, x, op)
            elif isinstance(op, Barcode):
                used = self._render_barcode(canvas, x, op)
            elif isinstance(op, Picture):
                used = self._render_picture(canvas, x, op)
            else:
                raise RenderError(f"Unsupported render operation: {op!r}")

            log.debug("Rendered %r at x=%d (%d columns)", op, x, used)
            x += used

            if x > self.config.max_width:
                raise RenderError(
                    f"Label length ({x}) exceeds maximum ({self.config.max_width})"
                )

        if x > canvas.width:
            canvas.pad(x - canvas.width)

        return canvas

    def _paint(self, canvas: Canvas, x: int, image) -> int:
        # Centre across the tape
        y = max(0, (canvas.height - image.height) // 2)
        return ImageProcessor(canvas.height).paint(image, canvas, x, y)

    def _render_qr(self, canvas: Canvas, x: int, op: Qr) -> int:
        try:
            img = generate_qr(op.code, canvas.height, error_correction=op.error_correction)
        except ValueError as e:
            raise RenderError(f"Cannot render QR code: {e}") from e
        return self._paint(canvas, x, img)

    def _render_barcode(self, canvas: Canvas, x: int, op: Barcode) -> int:
        height = canvas.height - 2 * op.y_offset
        try:
            img = generate_barcode(op.code, height, barcode_type=op.barcode_type, double=op.double)
        except ValueError as e:
            raise RenderError(f"Cannot render barcode: {e}") from e
        return self._paint(canvas, x, img)

    def _render_picture(self, canvas: Canvas, x: int, op: Picture) -> int:
        processor = ImageProcessor(canvas.height, threshold=op.threshold)
        img = processor.prepare(processor.load(op.file), rotate=op.rotate)
        return processor.paint(img, canvas, x)
