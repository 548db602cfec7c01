"""Unit tests for ConnectionManager lifecycle and validation."""

from __future__ import annotations

import threading

import pytest
import serial

from xtools.exceptions import (
    AlreadyConnectedError,
    DeviceError,
    NotConnectedError,
    StateError,
    ValidationError,
)
from xtools.serial.connection import READ_TIMEOUT_S, ConnectionManager
from xtools.serial.models import ConnectionConfig, ConnectionState, Parity


class TestConnect:
    def test_connect_opens_with_bounded_timeout(self, manager, serial_factory):
        status = manager.connect(ConnectionConfig(port="COM3", baud_rate=9600))

        assert status.state == ConnectionState.CONNECTED
        assert status.config.port == "COM3"
        kwargs = serial_factory.last.kwargs
        assert kwargs["baudrate"] == 9600
        assert kwargs["bytesize"] == 8
        assert kwargs["stopbits"] == 1
        assert kwargs["parity"] == serial.PARITY_NONE
        assert kwargs["timeout"] == READ_TIMEOUT_S
        assert 0 < kwargs["timeout"] < 0.1

    def test_parity_mapping_and_normalization(self, manager, serial_factory):
        manager.connect(ConnectionConfig(port="COM3", parity="EVEN", data_bits=7, stop_bits=2))

        assert serial_factory.last.kwargs["parity"] == serial.PARITY_EVEN
        assert manager.status().config.parity is Parity.EVEN

    def test_second_connect_is_already_connected(self, manager, serial_factory):
        manager.connect(ConnectionConfig(port="COM3", baud_rate=9600))

        with pytest.raises(AlreadyConnectedError):
            manager.connect(ConnectionConfig(port="COM4", baud_rate=115200))

        status = manager.status()
        assert status.state == ConnectionState.CONNECTED
        assert status.config.port == "COM3"
        assert status.config.baud_rate == 9600
        assert len(serial_factory.instances) == 1

    def test_already_connected_is_state_error(self, manager):
        manager.connect(ConnectionConfig(port="COM3"))
        with pytest.raises(StateError):
            manager.connect(ConnectionConfig(port="COM3"))

    @pytest.mark.parametrize("config", [
        ConnectionConfig(port="COM3", baud_rate=0),
        ConnectionConfig(port="COM3", baud_rate=-9600),
        ConnectionConfig(port="COM3", data_bits=9),
        ConnectionConfig(port="COM3", data_bits=4),
        ConnectionConfig(port="COM3", stop_bits=3),
        ConnectionConfig(port="COM3", parity="mark"),
        ConnectionConfig(port=""),
    ])
    def test_invalid_config_rejected_without_opening(self, manager, serial_factory, config):
        with pytest.raises(ValidationError):
            manager.connect(config)

        assert serial_factory.instances == []
        assert manager.status().state == ConnectionState.DISCONNECTED

    def test_open_failure_is_device_error(self, manager, serial_factory):
        serial_factory.error = serial.SerialException("could not open port 'COM9': FileNotFoundError")

        with pytest.raises(DeviceError, match="COM9"):
            manager.connect(ConnectionConfig(port="COM9"))

        assert manager.status().state == ConnectionState.DISCONNECTED
        assert manager.last_config is None

    def test_permission_denied_is_device_error(self, manager, serial_factory):
        serial_factory.error = PermissionError(13, "Permission denied")

        with pytest.raises(DeviceError):
            manager.connect(ConnectionConfig(port="/dev/ttyS0"))
        assert not manager.is_connected


class TestDisconnect:
    def test_disconnect_releases_handle(self, manager, serial_factory):
        manager.connect(ConnectionConfig(port="COM3"))
        manager.disconnect()

        assert serial_factory.last.is_open is False
        assert manager.status().state == ConnectionState.DISCONNECTED
        assert manager.status().config is None

    def test_disconnect_when_disconnected(self, manager):
        with pytest.raises(NotConnectedError):
            manager.disconnect()

    def test_disconnect_succeeds_even_if_close_fails(self, manager, serial_factory):
        manager.connect(ConnectionConfig(port="COM3"))
        serial_factory.last.fail_close = True

        manager.disconnect()

        assert not manager.is_connected
        manager.connect(ConnectionConfig(port="COM3"))
        assert manager.is_connected

    def test_last_config_survives_disconnect(self, manager):
        manager.connect(ConnectionConfig(port="COM3", baud_rate=57600))
        manager.disconnect()

        assert manager.last_config.baud_rate == 57600

    def test_context_manager_disconnects(self, serial_factory):
        with ConnectionManager(serial_factory=serial_factory) as mgr:
            mgr.connect(ConnectionConfig(port="COM3"))
        assert serial_factory.last.is_open is False


class TestSession:
    def test_session_requires_connection(self, manager):
        with pytest.raises(NotConnectedError):
            with manager.session():
                pass

    def test_session_yields_handle(self, manager, serial_factory):
        manager.connect(ConnectionConfig(port="COM3"))
        with manager.session() as handle:
            assert handle is serial_factory.last

    def test_disconnect_waits_for_session(self, manager):
        manager.connect(ConnectionConfig(port="COM3"))
        entered = threading.Event()
        release = threading.Event()
        order: list[str] = []

        def hold():
            with manager.session():
                entered.set()
                release.wait(2)
                order.append("io_done")

        worker = threading.Thread(target=hold)
        worker.start()
        entered.wait(2)

        closer = threading.Thread(target=lambda: (manager.disconnect(), order.append("disconnected")))
        closer.start()
        release.set()
        worker.join(2)
        closer.join(2)

        assert order == ["io_done", "disconnected"]

    def test_status_never_raises(self, manager):
        assert manager.status().connected is False
