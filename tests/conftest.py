"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import serial
import structlog

from xtools.config import ConfigStore
from xtools.context import AppContext
from xtools.history import History
from xtools.serial.connection import ConnectionManager


class FakeSerial:
    """In-memory stand-in for serial.Serial that records writes."""

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.port = kwargs.get("port")
        self.written = bytearray()
        self.rx = bytearray()
        self.is_open = True
        self.fail_write = False
        self.fail_read = False
        self.fail_close = False
        self.read_calls: list[int] = []

    def feed(self, data: bytes) -> None:
        self.rx.extend(data)

    @property
    def in_waiting(self) -> int:
        if self.fail_read:
            raise serial.SerialException("device reports readiness to read but returned no data")
        return len(self.rx)

    def read(self, size: int = 1) -> bytes:
        self.read_calls.append(size)
        chunk = bytes(self.rx[:size])
        del self.rx[:size]
        return chunk

    def write(self, data: bytes) -> int:
        if self.fail_write:
            raise serial.SerialTimeoutException("Write timeout")
        self.written.extend(data)
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.is_open = False
        if self.fail_close:
            raise OSError("I/O error")


class FakeSerialFactory:
    """serial_factory that hands out FakeSerial objects or raises on demand."""

    def __init__(self) -> None:
        self.instances: list[FakeSerial] = []
        self.error: Exception | None = None

    def __call__(self, **kwargs) -> FakeSerial:
        if self.error is not None:
            raise self.error
        port = FakeSerial(**kwargs)
        self.instances.append(port)
        return port

    @property
    def last(self) -> FakeSerial:
        return self.instances[-1]


@pytest.fixture()
def serial_factory() -> FakeSerialFactory:
    return FakeSerialFactory()


@pytest.fixture()
def manager(serial_factory: FakeSerialFactory) -> ConnectionManager:
    return ConnectionManager(serial_factory=serial_factory)


@pytest.fixture()
def config_store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "config.json")


@pytest.fixture()
def history(tmp_path: Path) -> History:
    return History(tmp_path / "history.txt")


@pytest.fixture()
def app_context(manager: ConnectionManager, config_store: ConfigStore) -> AppContext:
    return AppContext(manager=manager, config_store=config_store)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo setup_logging() from CLI tests, which binds the runner's streams."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)
