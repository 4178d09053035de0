"""Tests for CLI functionality."""

import pytest
from click.testing import CliRunner
from PIL import Image

from ptouch.cli import main
from ptouch.connection import PrinterEntry
from ptouch.device import PTouchDevice
from ptouch.exceptions import DeviceError, DeviceNotFoundError
from ptouch.responses import DeviceInfo, Status


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def printer_cls(mocker):
    """Replace PTouchPrinter in the CLI; the instance is `printer_cls.return_value`."""
    return mocker.patch("ptouch.cli.PTouchPrinter")


@pytest.fixture
def printer(printer_cls, frame):
    """Mock printer with 12mm tape loaded."""
    instance = printer_cls.return_value
    instance.device = PTouchDevice.PT_P710BT
    instance.status.return_value = Status.parse(frame(media_width=12))
    instance.print_canvas.return_value = Status.parse(frame(status_type=0x01))
    return instance


@pytest.fixture
def no_printer(printer_cls):
    """Mock printer that is not attached."""
    instance = printer_cls.return_value
    instance.connect.side_effect = DeviceNotFoundError("No pt-p710bt devices")
    return instance


class TestMain:
    """Test the command group."""

    def test_help_lists_commands(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("scan", "info", "status", "print", "qr", "barcode", "preview", "test"):
            assert command in result.output

    def test_invalid_device(self, runner):
        result = runner.invoke(main, ["--device", "ql-700", "status"])
        assert result.exit_code != 0
        assert "ql-700" in result.output

    def test_device_options_passed(self, runner, printer, printer_cls):
        result = runner.invoke(
            main, ["--device", "pt-p750w", "--index", "1", "--timeout", "2", "status"]
        )
        assert result.exit_code == 0
        printer_cls.assert_called_once_with(
            device=PTouchDevice.PT_P750W, index=1, timeout=2.0
        )

    def test_debug_flag(self, runner, printer):
        runner.invoke(main, ["--debug", "status"])
        printer.set_debug.assert_called_once_with(True)


class TestScan:
    """Test the scan command."""

    def test_no_printers(self, runner, printer_cls):
        printer_cls.scan.return_value = []
        result = runner.invoke(main, ["scan"])
        assert result.exit_code == 0
        assert "No printers found." in result.output

    def test_lists_printers(self, runner, printer_cls):
        printer_cls.scan.return_value = [PrinterEntry(PTouchDevice.PT_P710BT, 0, 1, 7)]
        result = runner.invoke(main, ["scan"])
        assert "Found 1 printer(s)" in result.output
        assert "pt-p710bt #0 [bus 1, address 7]" in result.output


class TestQueries:
    """Test info and status."""

    def test_status(self, runner, printer):
        result = runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "LAMINATED_TAPE 12mm" in result.output
        printer.disconnect.assert_called_once()

    def test_status_not_found(self, runner, no_printer):
        result = runner.invoke(main, ["status"])
        assert result.exit_code == 1
        assert "Connection error" in result.output
        no_printer.disconnect.assert_called_once()

    def test_info(self, runner, printer):
        printer.info.return_value = DeviceInfo("Brother", "PT-P710BT", "E6Z1")
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0
        assert "Brother PT-P710BT (serial E6Z1)" in result.output


class TestPrint:
    """Test printing commands."""

    def test_print_image(self, runner, printer, tmp_path):
        path = tmp_path / "logo.png"
        Image.new("L", (10, 10), color=0).save(path)

        result = runner.invoke(main, ["--pad", "4", "print", str(path), "--compress"])

        assert result.exit_code == 0, result.output
        assert "Print complete!" in result.output
        canvas = printer.print_canvas.call_args.args[0]
        assert canvas.size() == (78, 70)
        assert printer.print_canvas.call_args.kwargs["compress"] is True

    def test_print_missing_file(self, runner, printer):
        result = runner.invoke(main, ["print", "/nonexistent.png"])
        assert result.exit_code == 2

    def test_print_no_media(self, runner, printer, frame, tmp_path):
        path = tmp_path / "logo.png"
        Image.new("L", (10, 10)).save(path)
        printer.status.return_value = Status.parse(frame(media_kind=0x00))

        result = runner.invoke(main, ["print", str(path)])

        assert result.exit_code == 1
        assert "Media error" in result.output
        printer.print_canvas.assert_not_called()

    def test_print_device_error(self, runner, printer, tmp_path):
        path = tmp_path / "logo.png"
        Image.new("L", (10, 10)).save(path)
        printer.print_canvas.side_effect = DeviceError(0, 0)

        result = runner.invoke(main, ["print", str(path)])

        assert result.exit_code == 1
        assert "Print error" in result.output

    def test_coverage_test(self, runner, printer):
        result = runner.invoke(main, ["test", "--width", "96"])
        assert result.exit_code == 0
        assert "Coverage pattern printed!" in result.output
        canvas = printer.print_canvas.call_args.args[0]
        assert canvas.size() == (96, 70)

    @pytest.mark.barcodes
    def test_qr(self, runner, printer):
        result = runner.invoke(main, ["qr", "https://example.com", "--error-correction", "H"])
        assert result.exit_code == 0, result.output
        canvas = printer.print_canvas.call_args.args[0]
        assert canvas.height == 70

    @pytest.mark.barcodes
    def test_barcode(self, runner, printer):
        result = runner.invoke(main, ["barcode", "12345", "--type", "code39"])
        assert result.exit_code == 0, result.output
        printer.print_canvas.assert_called_once()


class TestPreview:
    """Test preview rendering."""

    def test_preview_image_without_printer(self, runner, no_printer, tmp_path):
        src = tmp_path / "logo.png"
        Image.new("L", (10, 10), color=0).save(src)
        out = tmp_path / "preview.png"

        result = runner.invoke(
            main,
            ["--media-width", "24", "--pad", "0", "preview", "image", str(src), str(out), "--scale", "1"],
        )

        assert result.exit_code == 0, result.output
        assert "Using default media width (24mm, 128 px)" in result.output
        with Image.open(out) as img:
            assert img.size == (128, 128)

    def test_preview_uses_loaded_tape(self, runner, printer, frame, tmp_path):
        src = tmp_path / "logo.png"
        Image.new("L", (10, 10), color=0).save(src)
        printer.status.return_value = Status.parse(frame(media_width=6))
        out = tmp_path / "preview.png"

        result = runner.invoke(main, ["--pad", "0", "preview", "image", str(src), str(out), "--scale", "1"])

        assert result.exit_code == 0, result.output
        with Image.open(out) as img:
            assert img.size == (32, 32)

    def test_unsupported_media_width(self, runner, no_printer, tmp_path):
        result = runner.invoke(
            main, ["--media-width", "36", "preview", "qr", "x", str(tmp_path / "out.png")]
        )
        assert result.exit_code == 1
        assert "Unsupported media width" in result.output

    @pytest.mark.barcodes
    def test_preview_qr(self, runner, no_printer, tmp_path):
        out = tmp_path / "qr.png"
        result = runner.invoke(main, ["preview", "qr", "https://example.com", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
