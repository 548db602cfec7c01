"""Ownership of the single serial device handle.

The ConnectionManager is the only object that ever holds the open
``serial.Serial``. Every read or write goes through :meth:`session`,
which holds the manager's lock for the duration of that one call, so a
periodic poller and a blocking REPL can share one manager safely.
"""

from __future__ import annotations

import dataclasses
import threading
from contextlib import contextmanager
from typing import Callable, Iterator

import serial

from xtools.exceptions import (
    AlreadyConnectedError,
    DeviceError,
    NotConnectedError,
    ValidationError,
)
from xtools.serial.models import (
    VALID_DATA_BITS,
    VALID_STOP_BITS,
    ConnectionConfig,
    ConnectionState,
    ConnectionStatus,
    Parity,
)
from xtools.utils.logging import get_logger

logger = get_logger(__name__)

# Bounded read timeout; read_available never waits longer than this.
READ_TIMEOUT_S = 0.01
WRITE_TIMEOUT_S = 1.0

_PARITY_MAP = {
    Parity.NONE: serial.PARITY_NONE,
    Parity.ODD: serial.PARITY_ODD,
    Parity.EVEN: serial.PARITY_EVEN,
}


def validate_config(config: ConnectionConfig) -> ConnectionConfig:
    """Check every field of a ConnectionConfig and normalize parity.

    Raises:
        ValidationError: If any field is outside its allowed domain.
    """
    if not config.port or not config.port.strip():
        raise ValidationError("Port name must not be empty")
    baud = config.baud_rate
    if isinstance(baud, bool) or not isinstance(baud, int) or baud <= 0:
        raise ValidationError(f"Baud rate must be a positive integer, got {baud!r}")
    if config.data_bits not in VALID_DATA_BITS:
        raise ValidationError(f"Data bits must be one of {VALID_DATA_BITS}, got {config.data_bits!r}")
    if config.stop_bits not in VALID_STOP_BITS:
        raise ValidationError(f"Stop bits must be one of {VALID_STOP_BITS}, got {config.stop_bits!r}")
    try:
        parity = Parity(str(config.parity).lower())
    except ValueError as exc:
        raise ValidationError(
            f"Parity must be one of none/odd/even, got {config.parity!r}"
        ) from exc
    return dataclasses.replace(config, port=config.port.strip(), parity=parity)


class ConnectionManager:
    """Owns at most one open serial port for the whole process.

    Usage:
        manager = ConnectionManager()
        manager.connect(ConnectionConfig(port="/dev/ttyUSB0", baud_rate=9600))
        with manager.session() as handle:
            handle.write(b"AT\\r\\n")
        manager.disconnect()
    """

    def __init__(
        self,
        serial_factory: Callable[..., serial.Serial] = serial.Serial,
        read_timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._serial_factory = serial_factory
        self._read_timeout = read_timeout
        self._lock = threading.Lock()
        self._handle: serial.Serial | None = None
        self._config: ConnectionConfig | None = None
        self._last_config: ConnectionConfig | None = None

    @property
    def is_connected(self) -> bool:
        return self._config is not None

    @property
    def last_config(self) -> ConnectionConfig | None:
        """Config of the most recent successful connect, kept after disconnect."""
        return self._last_config

    def status(self) -> ConnectionStatus:
        """Return the current state and config snapshot. Never raises."""
        config = self._config
        if config is None:
            return ConnectionStatus(state=ConnectionState.DISCONNECTED)
        return ConnectionStatus(state=ConnectionState.CONNECTED, config=config)

    def connect(self, config: ConnectionConfig) -> ConnectionStatus:
        """Open the port described by config.

        Raises:
            AlreadyConnectedError: If a port is already open.
            ValidationError: If config has an out-of-domain field.
            DeviceError: If the OS refuses to open the port.
        """
        with self._lock:
            if self._handle is not None:
                raise AlreadyConnectedError(
                    f"Already connected to {self._config.port}; disconnect first"
                )
            config = validate_config(config)

            logger.info("serial_connecting", port=config.port, baud_rate=config.baud_rate)
            try:
                handle = self._serial_factory(
                    port=config.port,
                    baudrate=config.baud_rate,
                    bytesize=config.data_bits,
                    stopbits=config.stop_bits,
                    parity=_PARITY_MAP[config.parity],
                    timeout=self._read_timeout,
                    write_timeout=WRITE_TIMEOUT_S,
                    xonxoff=False,
                    rtscts=False,
                )
            except ValueError as exc:
                raise ValidationError(f"Invalid serial parameters: {exc}") from exc
            except (serial.SerialException, OSError) as exc:
                logger.warning("serial_connect_failed", port=config.port, error=str(exc))
                raise DeviceError(f"Cannot open serial port {config.port}: {exc}") from exc

            self._handle = handle
            self._config = config
            self._last_config = config
            logger.info("serial_connected", port=config.port, baud_rate=config.baud_rate)
            return ConnectionStatus(state=ConnectionState.CONNECTED, config=config)

    def disconnect(self) -> None:
        """Close the open port.

        The manager always ends up disconnected, even if closing fails.

        Raises:
            NotConnectedError: If no port is open.
        """
        with self._lock:
            if self._handle is None:
                raise NotConnectedError("Not connected")
            port = self._config.port
            logger.info("serial_disconnecting", port=port)
            try:
                self._handle.close()
            except (serial.SerialException, OSError) as exc:
                logger.warning("serial_close_error", port=port, error=str(exc))
            finally:
                self._handle = None
                self._config = None
            logger.info("serial_disconnected", port=port)

    @contextmanager
    def session(self) -> Iterator[serial.Serial]:
        """Hold the device lock for one I/O call and yield the open handle.

        Raises:
            NotConnectedError: If no port is open.
        """
        with self._lock:
            if self._handle is None:
                raise NotConnectedError("Not connected")
            yield self._handle

    def __enter__(self) -> ConnectionManager:
        return self

    def __exit__(self, *args: object) -> None:
        if self.is_connected:
            self.disconnect()
