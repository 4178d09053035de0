"""
Coverage test pattern generator for P-Touch labels.

Generates test patterns to validate print area boundaries and margin
alignment across the tape.
"""

from PIL import Image, ImageDraw

from .canvas import Canvas
from .image import ImageProcessor


def generate_coverage_pattern(
    height: int,
    width: int = 128,
    border_width: int = 2,
    grid_spacing: int = 16,
) -> Image.Image:
    """
    Generate a coverage test pattern for print area validation.

    The pattern includes:
    - Border rectangle at the edges of the printable span
    - Corner markers (filled squares)
    - Center crosshair
    - Grid tick marks for measurement

    Args:
        height: Pattern height in pixels (printable span of the tape)
        width: Pattern length along the tape in pixels
        border_width: Border line thickness in pixels
        grid_spacing: Spacing between grid tick marks in pixels

    Returns:
        PIL Image with 1-bit test pattern (mode "1")
    """
    img = Image.new("1", (width, height), color=1)  # White background
    draw = ImageDraw.Draw(img)

    draw.rectangle(
        [0, 0, width - 1, height - 1],
        outline=0,
        width=border_width,
    )

    # Corner markers scale down on narrow tape
    corner_size = max(2, min(8, height // 4))
    corners = [
        (0, 0),
        (width - corner_size, 0),
        (0, height - corner_size),
        (width - corner_size, height - corner_size),
    ]
    for cx, cy in corners:
        draw.rectangle([cx, cy, cx + corner_size - 1, cy + corner_size - 1], fill=0)

    center_x, center_y = width // 2, height // 2
    crosshair_size = max(2, min(10, height // 4))
    draw.line(
        [(center_x - crosshair_size, center_y), (center_x + crosshair_size, center_y)],
        fill=0,
        width=1,
    )
    draw.line(
        [(center_x, center_y - crosshair_size), (center_x, center_y + crosshair_size)],
        fill=0,
        width=1,
    )

    tick_length = max(1, min(4, height // 8))

    # Ticks along the tape (top and bottom edges)
    for x in range(grid_spacing, width, grid_spacing):
        draw.line([(x, 0), (x, tick_length)], fill=0)
        draw.line([(x, height - tick_length - 1), (x, height - 1)], fill=0)

    # Ticks across the tape (start and end of the label)
    for y in range(grid_spacing, height, grid_spacing):
        draw.line([(0, y), (tick_length, y)], fill=0)
        draw.line([(width - tick_length - 1, y), (width - 1, y)], fill=0)

    return img


def coverage_canvas(height: int, width: int = 128) -> Canvas:
    """Paint the coverage pattern onto a new canvas."""
    canvas = Canvas(height)
    ImageProcessor(height).paint(generate_coverage_pattern(height, width), canvas)
    return canvas
