"""
Command-Line Interface for P-Touch Printers.

Usage:
    ptouch scan                      - List attached printers
    ptouch info                      - Show USB device strings
    ptouch status                    - Show printer status
    ptouch print IMAGE               - Print an image
    ptouch qr DATA                   - Print a QR code
    ptouch barcode DATA              - Print a barcode
    ptouch preview KIND VALUE OUTPUT - Render a label to an image file
    ptouch test                      - Print a coverage test pattern
"""

import logging
import sys

import click

from .barcodes import BARCODE_TYPES
from .canvas import Canvas
from .coverage import coverage_canvas
from .device import TAPE_MARGINS, PTouchDevice
from .exceptions import (
    ConnectionError,
    ImageError,
    MediaError,
    PrintError,
    PrinterError,
    RenderError,
    TimeoutError,
)
from .image import save_preview
from .printer import PTouchPrinter
from .render import Barcode, Pad, Picture, Qr, Render, RenderConfig

log = logging.getLogger(__name__)

DEVICE_LABELS = [d.label for d in PTouchDevice]


def _printer(ctx) -> PTouchPrinter:
    opts = ctx.obj
    printer = PTouchPrinter(
        device=PTouchDevice.from_label(opts["device"]),
        index=opts["index"],
        timeout=opts["timeout"],
    )
    printer.set_debug(opts["debug"])
    return printer


def _report(e: PrinterError) -> None:
    """Print an error message for a failed command and exit."""
    if isinstance(e, ConnectionError):
        click.echo(f"Connection error: {e}", err=True)
    elif isinstance(e, TimeoutError):
        click.echo(f"Timeout: {e}", err=True)
    elif isinstance(e, MediaError):
        click.echo(f"Media error: {e}", err=True)
    elif isinstance(e, ImageError):
        click.echo(f"Image error: {e}", err=True)
    elif isinstance(e, RenderError):
        click.echo(f"Render error: {e}", err=True)
    elif isinstance(e, PrintError):
        click.echo(f"Print error: {e}", err=True)
    else:
        click.echo(f"Printer error: {e}", err=True)
    sys.exit(1)


def _ops(kind: str, value: str, pad: int) -> list:
    if kind == "qr":
        body = Qr(value)
    elif kind == "barcode":
        body = Barcode(value)
    else:
        body = Picture(value)
    return [Pad(pad), body, Pad(pad)]


def _render(ops: list, height: int) -> Canvas:
    try:
        return Render(RenderConfig(height=height)).render(ops)
    except ImportError as e:
        click.echo(str(e), err=True)
        sys.exit(1)


def _print_ops(ctx, ops: list, compress: bool) -> None:
    printer = _printer(ctx)

    try:
        click.echo(f"Connecting to {printer.device.label}...")
        printer.connect()

        status = printer.status()
        margins = status.margins
        if not margins.is_valid:
            raise MediaError(
                f"Unsupported media: {status.media_kind.name} {status.media_width}mm"
            )

        canvas = _render(ops, margins.printable_span)
        click.echo(f"Printing {canvas.width} columns on {status.media_width}mm tape...")
        printer.print_canvas(canvas, compress=compress, status=status)
        click.echo("Print complete!")
    except PrinterError as e:
        _report(e)
    finally:
        printer.disconnect()


@click.group()
@click.option("--debug/--no-debug", default=False, help="Enable debug output")
@click.option(
    "--device",
    type=click.Choice(DEVICE_LABELS),
    default=PTouchPrinter.DEFAULT_DEVICE.label,
    show_default=True,
    help="Printer model",
)
@click.option("--index", default=0, help="Printer index when several are attached")
@click.option("--timeout", default=0.5, help="USB transfer timeout in seconds")
@click.option("--pad", default=16, help="Blank columns at the start and end of renders")
@click.option(
    "--media-width",
    default=12,
    help="Tape width in mm to assume when no printer is attached",
)
@click.pass_context
def main(ctx, debug, device, index, timeout, pad, media_width):
    """Brother P-Touch Label Printer CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj.update(
        debug=debug,
        device=device,
        index=index,
        timeout=timeout,
        pad=pad,
        media_width=media_width,
    )


@main.command()
def scan():
    """List attached P-Touch printers."""
    try:
        printers = PTouchPrinter.scan()
    except PrinterError as e:
        _report(e)

    if not printers:
        click.echo("No printers found.", err=True)
        return

    click.echo(f"Found {len(printers)} printer(s):\n")
    for p in printers:
        click.echo(f"  {p}")


@main.command()
@click.pass_context
def info(ctx):
    """Show manufacturer, product and serial number."""
    printer = _printer(ctx)

    try:
        printer.connect()
        click.echo(str(printer.info()))
    except PrinterError as e:
        _report(e)
    finally:
        printer.disconnect()


@main.command()
@click.pass_context
def status(ctx):
    """Show the printer status and loaded media."""
    printer = _printer(ctx)

    try:
        printer.connect()
        click.echo(str(printer.status()))
    except PrinterError as e:
        _report(e)
    finally:
        printer.disconnect()


@main.command("print")
@click.argument("image", type=click.Path(exists=True))
@click.option("--rotate", is_flag=True, help="Rotate the image 90 degrees")
@click.option("--threshold", type=click.IntRange(0, 255), default=128, help="Black/white threshold")
@click.option("--compress", is_flag=True, help="Send raster lines compressed")
@click.pass_context
def print_image(ctx, image, rotate, threshold, compress):
    """Print an image file scaled to the tape."""
    ops = [Pad(ctx.obj["pad"]), Picture(image, threshold=threshold, rotate=rotate), Pad(ctx.obj["pad"])]
    _print_ops(ctx, ops, compress)


@main.command()
@click.argument("data")
@click.option(
    "--error-correction",
    type=click.Choice(["L", "M", "Q", "H"]),
    default="M",
    help="Error correction level (L=7%%, M=15%%, Q=25%%, H=30%%)",
)
@click.option("--compress", is_flag=True, help="Send raster lines compressed")
@click.pass_context
def qr(ctx, data, error_correction, compress):
    """Print a QR code.

    DATA is the content to encode (URL, text, etc.).

    Examples:
        ptouch qr "https://example.com"
        ptouch --device pt-p750w qr "Hello" --error-correction H
    """
    ops = [Pad(ctx.obj["pad"]), Qr(data, error_correction), Pad(ctx.obj["pad"])]
    _print_ops(ctx, ops, compress)


@main.command()
@click.argument("data")
@click.option(
    "--type",
    "barcode_type",
    type=click.Choice(BARCODE_TYPES),
    default="code128",
    help="Barcode type (default: code128)",
)
@click.option("--double", is_flag=True, help="Draw bars two pixels per module")
@click.option("--compress", is_flag=True, help="Send raster lines compressed")
@click.pass_context
def barcode(ctx, data, barcode_type, double, compress):
    """Print a barcode.

    DATA is the content to encode (numbers/text depending on barcode type).
    """
    ops = [
        Pad(ctx.obj["pad"]),
        Barcode(data, barcode_type=barcode_type, double=double),
        Pad(ctx.obj["pad"]),
    ]
    _print_ops(ctx, ops, compress)


@main.command()
@click.argument("kind", type=click.Choice(["qr", "barcode", "image"]))
@click.argument("value")
@click.argument("output", type=click.Path(dir_okay=False))
@click.option("--scale", default=4, help="Preview magnification")
@click.pass_context
def preview(ctx, kind, value, output, scale):
    """Render a label to an image file.

    Uses the tape loaded in the printer when one is attached, otherwise
    the width given by --media-width.

    Examples:
        ptouch preview qr "https://example.com" label.png
        ptouch --media-width 24 preview image logo.png label.png
    """
    height = None
    printer = _printer(ctx)

    try:
        printer.connect()
        margins = printer.status().margins
        if margins.is_valid:
            height = margins.printable_span
    except PrinterError as e:
        log.debug("No printer status available: %s", e)
    finally:
        printer.disconnect()

    if height is None:
        width = ctx.obj["media_width"]
        if width not in TAPE_MARGINS:
            click.echo(f"Unsupported media width: {width}mm", err=True)
            sys.exit(1)
        height = TAPE_MARGINS[width].printable_span
        click.echo(f"Using default media width ({width}mm, {height} px)")

    try:
        canvas = _render(_ops(kind, value, ctx.obj["pad"]), height)
        path = save_preview(canvas, output, scale=scale)
    except PrinterError as e:
        _report(e)

    click.echo(f"Preview written to {path} ({canvas.width}x{canvas.height} px)")


@main.command()
@click.option("--width", default=128, help="Test pattern length in columns")
@click.option("--compress", is_flag=True, help="Send raster lines compressed")
@click.pass_context
def test(ctx, width, compress):
    """Print a coverage test pattern to validate the print area.

    Prints a pattern with border, corner markers, center crosshair,
    and grid ticks to verify the printable area boundaries.
    """
    printer = _printer(ctx)

    try:
        printer.connect()
        status = printer.status()
        margins = status.margins
        if not margins.is_valid:
            raise MediaError(
                f"Unsupported media: {status.media_kind.name} {status.media_width}mm"
            )

        click.echo(f"Printing coverage pattern ({width}x{margins.printable_span} px)...")
        printer.print_canvas(
            coverage_canvas(margins.printable_span, width),
            compress=compress,
            status=status,
        )

        click.echo("Coverage pattern printed!")
        click.echo("\nVerify:")
        click.echo("  - Border visible on all 4 edges (no clipping)")
        click.echo("  - Corner markers at label corners")
        click.echo("  - Center crosshair well-centered")
    except PrinterError as e:
        _report(e)
    finally:
        printer.disconnect()


if __name__ == "__main__":
    main()
