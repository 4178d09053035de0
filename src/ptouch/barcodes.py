"""
Barcode and QR Code Generation for P-Touch Labels.

Images are sized to fit across the tape: their height never exceeds the
requested printable span.

Requires optional dependencies:
    pip install ptouch[barcodes]
"""

from io import BytesIO
from typing import Literal

from PIL import Image

# Barcode types supported
BarcodeType = Literal["code128", "code39", "ean13", "upca"]

BARCODE_TYPES = ("code128", "code39", "ean13", "upca")

# QR code error correction levels
QRErrorCorrection = Literal["L", "M", "Q", "H"]


def _check_barcode_dependency() -> None:
    """Check that python-barcode is installed."""
    try:
        import barcode  # noqa: F401
    except ImportError:
        raise ImportError(
            "python-barcode is required for barcode generation. "
            "Install with: pip install ptouch[barcodes]"
        ) from None


def _check_qrcode_dependency() -> None:
    """Check that qrcode is installed."""
    try:
        import qrcode  # noqa: F401
    except ImportError:
        raise ImportError(
            "qrcode is required for QR code generation. Install with: pip install ptouch[barcodes]"
        ) from None


def _threshold(img: Image.Image) -> Image.Image:
    return img.convert("L").point(lambda x: 0 if x < 128 else 255, mode="1")


def generate_barcode(
    data: str,
    height: int,
    barcode_type: BarcodeType = "code128",
    double: bool = False,
) -> Image.Image:
    """
    Generate a barcode image.

    Args:
        data: The data to encode in the barcode
        height: Height of the bars in pixels (across the tape)
        barcode_type: Type of barcode (code128, code39, ean13, upca)
        double: Draw every module two pixels wide

    Returns:
        PIL Image in 1-bit mode (black and white), exactly `height` tall

    Raises:
        ImportError: If python-barcode is not installed
        ValueError: If barcode_type is invalid or data cannot be encoded
    """
    _check_barcode_dependency()

    import barcode
    from barcode.errors import BarcodeError
    from barcode.writer import ImageWriter

    if barcode_type not in BARCODE_TYPES:
        raise ValueError(
            f"Invalid barcode type: {barcode_type}. Supported types: {list(BARCODE_TYPES)}"
        )
    if height <= 0:
        raise ValueError(f"Barcode height must be positive, got {height}")

    barcode_class = barcode.get_barcode_class(barcode_type)

    # Render one pixel per module; human readable text would not fit the tape
    writer = ImageWriter()
    options = {
        "module_width": 0.2,
        "module_height": 5.0,
        "dpi": 127,  # 0.2mm modules -> 1 pixel
        "write_text": False,
        "quiet_zone": 1.0,
    }

    try:
        bc = barcode_class(data, writer=writer)
    except BarcodeError as e:
        raise ValueError(f"Invalid {barcode_type} data: {e}") from e

    buffer = BytesIO()
    bc.write(buffer, options=options)
    buffer.seek(0)

    img = Image.open(buffer)
    img = _threshold(img)

    # Keep one row of bars and stretch it across the tape
    bars = img.crop((0, img.height // 2, img.width, img.height // 2 + 1))
    module = 2 if double else 1
    return bars.resize((bars.width * module, height), Image.Resampling.NEAREST)


def generate_qr(
    data: str,
    height: int,
    error_correction: QRErrorCorrection = "M",
    border: int = 1,
) -> Image.Image:
    """
    Generate a QR code image.

    The largest whole-pixel module size that fits `height` is used.

    Args:
        data: The data to encode (URL, text, etc.)
        height: Maximum image size in pixels (across the tape)
        error_correction: Error correction level (L=7%, M=15%, Q=25%, H=30%)
        border: Quiet zone in modules

    Returns:
        PIL Image in 1-bit mode (black and white)

    Raises:
        ImportError: If qrcode is not installed
        ValueError: If the code does not fit in `height` pixels
    """
    _check_qrcode_dependency()

    import qrcode
    from qrcode.constants import (
        ERROR_CORRECT_H,
        ERROR_CORRECT_L,
        ERROR_CORRECT_M,
        ERROR_CORRECT_Q,
    )

    # Map error correction levels
    ec_map = {
        "L": ERROR_CORRECT_L,
        "M": ERROR_CORRECT_M,
        "Q": ERROR_CORRECT_Q,
        "H": ERROR_CORRECT_H,
    }

    if error_correction not in ec_map:
        raise ValueError(
            f"Invalid error correction: {error_correction}. Supported levels: {list(ec_map)}"
        )

    qr = qrcode.QRCode(
        version=None,  # Auto-detect version based on data
        error_correction=ec_map[error_correction],
        box_size=1,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    modules = qr.modules_count + 2 * border
    box_size = height // modules
    if box_size < 1:
        raise ValueError(
            f"QR code needs {modules} pixels but only {height} are available"
        )

    img = qr.make_image(fill_color="black", back_color="white")

    # Convert to PIL Image if needed (qrcode returns PilImage wrapper)
    if hasattr(img, "get_image"):
        img = img.get_image()

    img = _threshold(img)
    return img.resize((modules * box_size, modules * box_size), Image.Resampling.NEAREST)
