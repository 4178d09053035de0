"""Tests for USB connection handling."""

from unittest.mock import MagicMock

import pytest
import usb.core
import usb.util

from ptouch.connection import PrinterEntry, USBConnection
from ptouch.device import BROTHER_VID, PTouchDevice
from ptouch.exceptions import (
    ConnectionError,
    DeviceNotFoundError,
    EndpointError,
    TimeoutError,
)


def make_endpoint(address, attributes=usb.util.ENDPOINT_TYPE_BULK):
    ep = MagicMock()
    ep.bEndpointAddress = address
    ep.bmAttributes = attributes
    return ep


def make_usb_device(endpoints=None, bus=1, address=4):
    """Build a mock pyusb device with one interface holding `endpoints`."""
    if endpoints is None:
        endpoints = [make_endpoint(0x02), make_endpoint(0x81)]

    intf = MagicMock()
    intf.bInterfaceNumber = 0
    intf.__iter__.side_effect = lambda: iter(endpoints)

    cfg = MagicMock()
    cfg.__getitem__.return_value = intf

    dev = MagicMock()
    dev.bus = bus
    dev.address = address
    dev.get_active_configuration.return_value = cfg
    dev.is_kernel_driver_active.return_value = False
    return dev


@pytest.fixture
def find(mocker):
    """Patch usb.core.find; tests set `find.return_value`."""
    return mocker.patch("ptouch.connection.usb.core.find", return_value=[])


@pytest.fixture
def dispose(mocker):
    return mocker.patch("ptouch.connection.usb.util.dispose_resources")


class TestScan:
    """Test printer discovery."""

    def test_no_printers(self, find):
        assert USBConnection.scan() == []

    def test_lists_all_models(self, find):
        """Every supported product id is queried."""
        USBConnection.scan()
        products = [call.kwargs["idProduct"] for call in find.call_args_list]
        assert products == [d.value for d in PTouchDevice]
        assert all(call.kwargs["idVendor"] == BROTHER_VID for call in find.call_args_list)

    def test_entries_are_indexed_per_model(self, find):
        def fake_find(find_all, idVendor, idProduct):
            if idProduct == PTouchDevice.PT_P710BT:
                return [make_usb_device(address=5), make_usb_device(address=6)]
            return []

        find.side_effect = fake_find
        printers = USBConnection.scan()

        assert printers == [
            PrinterEntry(PTouchDevice.PT_P710BT, 0, 1, 5),
            PrinterEntry(PTouchDevice.PT_P710BT, 1, 1, 6),
        ]
        assert str(printers[1]) == "pt-p710bt #1 [bus 1, address 6]"

    def test_missing_backend(self, find):
        find.side_effect = usb.core.NoBackendError("No backend available")
        with pytest.raises(ConnectionError, match="backend"):
            USBConnection.scan()


class TestConnect:
    """Test opening a printer."""

    def test_connect_finds_endpoints(self, find):
        dev = make_usb_device()
        find.return_value = [dev]
        conn = USBConnection()

        conn.connect(PTouchDevice.PT_P710BT)

        assert conn.is_connected
        assert conn.ep_out.bEndpointAddress == 0x02
        assert conn.ep_in.bEndpointAddress == 0x81
        dev.reset.assert_called_once()

    def test_connect_selects_index(self, find):
        first, second = make_usb_device(), make_usb_device()
        find.return_value = [first, second]
        conn = USBConnection()

        conn.connect(PTouchDevice.PT_P750W, index=1)

        assert conn.device is second

    def test_index_out_of_range(self, find):
        find.return_value = [make_usb_device()]
        with pytest.raises(DeviceNotFoundError, match="exceeds number"):
            USBConnection().connect(PTouchDevice.PT_P710BT, index=1)

    def test_no_device(self, find):
        with pytest.raises(DeviceNotFoundError):
            USBConnection().connect(PTouchDevice.PT_E550W)

    def test_device_not_found_is_connection_error(self):
        assert issubclass(DeviceNotFoundError, ConnectionError)
        assert issubclass(EndpointError, ConnectionError)

    def test_sets_configuration_when_unconfigured(self, find):
        dev = make_usb_device()
        cfg = dev.get_active_configuration.return_value
        dev.get_active_configuration.side_effect = [usb.core.USBError("not configured"), cfg]
        find.return_value = [dev]

        USBConnection().connect(PTouchDevice.PT_P710BT)

        dev.set_configuration.assert_called_once()

    def test_detaches_kernel_driver(self, find):
        dev = make_usb_device()
        dev.is_kernel_driver_active.return_value = True
        find.return_value = [dev]

        USBConnection().connect(PTouchDevice.PT_P710BT)

        dev.detach_kernel_driver.assert_called_once_with(0)

    def test_kernel_driver_query_unsupported(self, find):
        dev = make_usb_device()
        dev.is_kernel_driver_active.side_effect = NotImplementedError
        find.return_value = [dev]

        conn = USBConnection()
        conn.connect(PTouchDevice.PT_P710BT)

        assert conn.is_connected

    def test_reset_failure(self, find):
        dev = make_usb_device()
        dev.reset.side_effect = usb.core.USBError("Access denied")
        find.return_value = [dev]

        with pytest.raises(ConnectionError, match="Access denied"):
            USBConnection().connect(PTouchDevice.PT_P710BT)

    def test_missing_in_endpoint(self, find, dispose):
        dev = make_usb_device(endpoints=[make_endpoint(0x02)])
        find.return_value = [dev]
        conn = USBConnection()

        with pytest.raises(EndpointError):
            conn.connect(PTouchDevice.PT_P710BT)

        dispose.assert_called_once_with(dev)
        assert not conn.is_connected

    def test_interrupt_endpoint_ignored(self, find, dispose):
        """Only bulk endpoints are used."""
        endpoints = [
            make_endpoint(0x02),
            make_endpoint(0x83, attributes=usb.util.ENDPOINT_TYPE_INTR),
        ]
        find.return_value = [make_usb_device(endpoints=endpoints)]

        with pytest.raises(EndpointError):
            USBConnection().connect(PTouchDevice.PT_P710BT)


@pytest.fixture
def connected(find):
    find.return_value = [make_usb_device()]
    conn = USBConnection(timeout=0.25)
    conn.connect(PTouchDevice.PT_P710BT)
    return conn


class TestTransfers:
    """Test bulk reads and writes."""

    def test_write(self, connected):
        connected.ep_out.write.return_value = 3
        connected.write(b"\x1b\x69\x53")
        connected.ep_out.write.assert_called_once_with(b"\x1b\x69\x53", timeout=250)

    def test_short_write(self, connected):
        connected.ep_out.write.return_value = 1
        with pytest.raises(TimeoutError, match="Short write"):
            connected.write(b"\x1b\x40")

    def test_write_timeout(self, connected):
        connected.ep_out.write.side_effect = usb.core.USBTimeoutError("timeout")
        with pytest.raises(TimeoutError):
            connected.write(b"\x00")

    def test_write_usb_error(self, connected):
        connected.ep_out.write.side_effect = usb.core.USBError("pipe error")
        with pytest.raises(ConnectionError, match="Write failed"):
            connected.write(b"\x00")

    def test_read(self, connected):
        connected.ep_in.read.return_value = bytearray(32)
        assert connected.read(32) == bytes(32)
        connected.ep_in.read.assert_called_once_with(32, timeout=250)

    def test_short_read(self, connected):
        connected.ep_in.read.return_value = bytearray(8)
        with pytest.raises(TimeoutError, match="Short read"):
            connected.read(32)

    def test_read_timeout(self, connected):
        connected.ep_in.read.side_effect = usb.core.USBTimeoutError("timeout")
        with pytest.raises(TimeoutError, match="timed out"):
            connected.read()

    def test_write_when_disconnected(self):
        with pytest.raises(ConnectionError, match="Not connected"):
            USBConnection().write(b"\x00")

    def test_read_when_disconnected(self):
        with pytest.raises(ConnectionError, match="Not connected"):
            USBConnection().read()

    def test_disconnect(self, connected, dispose):
        dev = connected.device
        connected.disconnect()
        dispose.assert_called_once_with(dev)
        assert not connected.is_connected

    def test_disconnect_when_not_connected(self, dispose):
        USBConnection().disconnect()
        dispose.assert_not_called()


class TestInfo:
    """Test string descriptor reads."""

    def test_info(self, connected, mocker):
        connected.device.langids = (0x0409,)
        strings = {1: "Brother", 2: "PT-P710BT", 3: "E6Z123456"}
        connected.device.iManufacturer = 1
        connected.device.iProduct = 2
        connected.device.iSerialNumber = 3
        mocker.patch(
            "ptouch.connection.usb.util.get_string",
            side_effect=lambda dev, index, lang: strings[index],
        )

        info = connected.info()

        assert info.manufacturer == "Brother"
        assert info.product == "PT-P710BT"
        assert info.serial == "E6Z123456"

    def test_no_languages(self, connected):
        connected.device.langids = ()
        with pytest.raises(ConnectionError, match="No supported languages"):
            connected.info()
