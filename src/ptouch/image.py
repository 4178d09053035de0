"""
Image Processing for P-Touch Printers.

Converts images to and from canvases. Image width runs along the tape
and image height across it, so a landscape image prints as a label
reading left to right.
"""

from io import BytesIO
from pathlib import Path
from typing import Union

from PIL import Image

from .canvas import Canvas
from .exceptions import ImageError

# Image size limits to prevent memory exhaustion from malicious/malformed images
MAX_IMAGE_DIMENSION = 10000  # Maximum width or height in pixels
MAX_IMAGE_PIXELS = 10_000_000  # Maximum total pixels (10 megapixels)

ImageSource = Union[str, Path, bytes, Image.Image]


class ImageSizeError(ImageError, ValueError):
    """Image dimensions exceed safety limits."""

    pass


class ImageProcessor:
    """Fit images to the printable span and paint them onto canvases."""

    def __init__(self, height: int, threshold: int = 128):
        """
        Initialize processor.

        Args:
            height: Target height in pixels (the printable span of the tape)
            threshold: Grayscale threshold for black/white conversion (0-255)
        """
        self.height = height
        self.threshold = threshold

    def load(self, source: ImageSource) -> Image.Image:
        """
        Load an image from various sources.

        Args:
            source: File path, bytes, or PIL Image

        Returns:
            PIL Image object

        Raises:
            ImageSizeError: If image dimensions exceed safety limits
            ImageError: If the image cannot be loaded
        """
        try:
            if isinstance(source, Image.Image):
                img = source
            elif isinstance(source, (str, Path)):
                path = Path(source)
                if not path.exists():
                    raise ImageError(f"Image file not found: {path}")
                img = Image.open(path)
            elif isinstance(source, bytes):
                img = Image.open(BytesIO(source))
            else:
                raise ImageError(f"Unsupported image type: {type(source)}")
        except ImageError:
            raise
        except Exception as e:
            raise ImageError(f"Failed to load image: {e}") from e

        # Validate image dimensions to prevent memory exhaustion
        if img.width > MAX_IMAGE_DIMENSION or img.height > MAX_IMAGE_DIMENSION:
            raise ImageSizeError(
                f"Image dimensions ({img.width}x{img.height}) exceed maximum "
                f"({MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION})"
            )
        if img.width * img.height > MAX_IMAGE_PIXELS:
            raise ImageSizeError(
                f"Image pixel count ({img.width * img.height:,}) exceeds "
                f"maximum ({MAX_IMAGE_PIXELS:,})"
            )

        return img

    def prepare(self, image: Image.Image, rotate: bool = False, fit: bool = True) -> Image.Image:
        """
        Prepare image for printing.

        Args:
            image: Source image
            rotate: Rotate 90 degrees (for portrait artwork)
            fit: Scale so the image height matches the printable span

        Returns:
            Processed 1-bit image
        """
        # Flatten transparency onto white before thresholding
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            background = Image.new("RGBA", image.size, (255, 255, 255, 255))
            image = Image.alpha_composite(background, image.convert("RGBA"))

        if image.mode != "L":
            image = image.convert("L")

        if rotate:
            image = image.rotate(90, expand=True)

        # Resize to the tape height while maintaining aspect ratio
        if fit and image.height != self.height:
            ratio = self.height / image.height
            new_width = max(1, int(image.width * ratio))
            image = image.resize((new_width, self.height), Image.Resampling.LANCZOS)

        # Black pixels are where heat is applied
        image = image.point(lambda x: 0 if x < self.threshold else 255, mode="1")

        return image

    def paint(self, image: Image.Image, canvas: Canvas, x: int = 0, y: int = 0) -> int:
        """
        Paint the black pixels of an image onto a canvas.

        Rows that fall outside the canvas height are clipped.

        Returns:
            Number of columns the image occupies
        """
        if image.mode != "1":
            image = image.convert("1")

        # Touch the last column so trailing white space still takes room
        if image.width > 0 and x + image.width > canvas.width:
            canvas.pad(x + image.width - canvas.width)

        pixels = image.load()
        for row in range(image.height):
            target_y = y + row
            if target_y < 0 or target_y >= canvas.height:
                continue
            for col in range(image.width):
                if pixels[col, row] == 0:
                    canvas.set(x + col, target_y, True)

        return image.width

    def to_canvas(self, source: ImageSource, rotate: bool = False) -> Canvas:
        """Load, prepare and paint an image onto a new canvas."""
        img = self.prepare(self.load(source), rotate=rotate)
        canvas = Canvas(self.height)
        self.paint(img, canvas)
        return canvas


def canvas_to_image(canvas: Canvas) -> Image.Image:
    """
    Render a canvas as a 1-bit PIL image (black on white).

    Uses the packed export, whose bits are LSB first, so the raw decoder
    mode is the inverted, bit-reversed "1;IR".
    """
    width, height = canvas.size()
    if width == 0:
        return Image.new("1", (1, height), color=1)

    padded_width = (width + 7) // 8 * 8
    img = Image.frombytes("1", (padded_width, height), canvas.export_packed(), "raw", "1;IR")
    return img.crop((0, 0, width, height))


def save_preview(canvas: Canvas, path: Union[str, Path], scale: int = 1) -> Path:
    """
    Save a canvas as an image file for preview.

    Args:
        canvas: Canvas to export
        path: Output file (format from the extension, e.g. .png)
        scale: Integer magnification

    Returns:
        The output path
    """
    img = canvas_to_image(canvas)
    if scale > 1:
        img = img.resize((img.width * scale, img.height * scale), Image.Resampling.NEAREST)

    path = Path(path)
    try:
        img.save(path)
    except (OSError, ValueError) as e:
        raise ImageError(f"Failed to save preview: {e}") from e
    return path
