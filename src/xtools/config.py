"""Application configuration model and its JSON file store."""

from __future__ import annotations

import json
from enum import StrEnum
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, Field, field_validator

from xtools.exceptions import PersistenceError, UnknownKeyError, ValidationError
from xtools.serial.models import (
    COMMON_BAUD_RATES,
    DEFAULT_BAUD_RATE,
    VALID_DATA_BITS,
    VALID_STOP_BITS,
    Parity,
)
from xtools.storage import default_config_path
from xtools.utils.logging import get_logger

logger = get_logger(__name__)


class NewlineType(StrEnum):
    """Line ending appended to text sends."""
    CRLF = "crlf"
    LF = "lf"
    CR = "cr"

    @property
    def chars(self) -> str:
        return {"crlf": "\r\n", "lf": "\n", "cr": "\r"}[self.value]


class SerialSettings(BaseModel):
    """Serial parameters remembered between sessions."""

    port: str = ""
    baud_rate: int = Field(default=DEFAULT_BAUD_RATE, gt=0)
    custom_baud_rate: int = Field(default=0, ge=0)
    data_bits: int = 8
    stop_bits: int = 1
    parity: Parity = Parity.NONE
    hex_mode: bool = False
    append_newline: bool = True
    newline_type: NewlineType = NewlineType.CRLF

    @field_validator("data_bits")
    @classmethod
    def _check_data_bits(cls, v: int) -> int:
        if v not in VALID_DATA_BITS:
            raise ValueError(f"data_bits must be one of {VALID_DATA_BITS}")
        return v

    @field_validator("stop_bits")
    @classmethod
    def _check_stop_bits(cls, v: int) -> int:
        if v not in VALID_STOP_BITS:
            raise ValueError(f"stop_bits must be one of {VALID_STOP_BITS}")
        return v

    @field_validator("parity", mode="before")
    @classmethod
    def _lower_parity(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v

    @property
    def line_ending(self) -> str:
        return self.newline_type.chars if self.append_newline else ""


class DisplaySettings(BaseModel):
    """Display preferences for the log view."""

    auto_scroll: bool = True
    show_timestamp: bool = True
    show_hex: bool = False
    font_size: int = Field(default=14, gt=0)
    terminal_mode: bool = False


class AppConfig(BaseModel):
    """Root configuration persisted as JSON."""

    serial: SerialSettings = Field(default_factory=SerialSettings)
    display: DisplaySettings = Field(default_factory=DisplaySettings)


# Flat key names accepted by the REPL ``config`` command.
CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "port": ("serial", "port"),
    "baud": ("serial", "baud_rate"),
    "custom_baud": ("serial", "custom_baud_rate"),
    "data": ("serial", "data_bits"),
    "stop": ("serial", "stop_bits"),
    "parity": ("serial", "parity"),
    "hex_mode": ("serial", "hex_mode"),
    "append_newline": ("serial", "append_newline"),
    "newline": ("serial", "newline_type"),
    "auto_scroll": ("display", "auto_scroll"),
    "show_timestamp": ("display", "show_timestamp"),
    "show_hex": ("display", "show_hex"),
    "font_size": ("display", "font_size"),
    "terminal_mode": ("display", "terminal_mode"),
}


def _lookup(key: str) -> tuple[str, str]:
    try:
        return CONFIG_KEYS[key]
    except KeyError:
        raise UnknownKeyError(
            f"Unknown config key: {key!r} (known: {', '.join(CONFIG_KEYS)})"
        ) from None


def get_value(config: AppConfig, key: str) -> Any:
    """Return the value behind a flat config key.

    Raises:
        UnknownKeyError: If key is not in CONFIG_KEYS.
    """
    section, name = _lookup(key)
    return getattr(getattr(config, section), name)


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, StrEnum):
        return value.value
    return str(value)


def with_value(config: AppConfig, key: str, raw: str) -> AppConfig:
    """Return a copy of config with key set from its string form.

    Raises:
        UnknownKeyError: If key is not in CONFIG_KEYS.
        ValidationError: If raw does not validate for that field.
    """
    section, name = _lookup(key)
    data = config.model_dump(mode="json")
    data[section][name] = raw
    try:
        return AppConfig.model_validate(data)
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        raise ValidationError(f"Invalid value for {key}: {raw!r} ({first['msg']})") from exc


def with_connection(config: AppConfig, port: str, baud_rate: int) -> AppConfig:
    """Return a copy of config remembering a successful connection.

    A common rate is stored as ``baud`` and clears ``custom_baud``; any
    other rate is stored as ``custom_baud``.
    """
    updated = config.model_copy(deep=True)
    updated.serial.port = port
    if baud_rate in COMMON_BAUD_RATES:
        updated.serial.baud_rate = baud_rate
        updated.serial.custom_baud_rate = 0
    else:
        updated.serial.custom_baud_rate = baud_rate
    return updated


class ConfigStore:
    """Loads and saves AppConfig as pretty-printed JSON.

    Args:
        path: Config file location; defaults to the per-user app dir.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_config_path()

    @property
    def path(self) -> Path:
        return self._path

    def read(self) -> AppConfig:
        """Read the config file.

        A missing file yields defaults.

        Raises:
            PersistenceError: If the file exists but cannot be read or parsed.
        """
        if not self._path.exists():
            return AppConfig()
        try:
            content = self._path.read_text(encoding="utf-8")
            return AppConfig.model_validate(json.loads(content))
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Failed to read config {self._path}: {exc}") from exc
        except (json.JSONDecodeError, pydantic.ValidationError) as exc:
            raise PersistenceError(f"Failed to parse config {self._path}: {exc}") from exc

    def load(self) -> tuple[AppConfig, str | None]:
        """Read the config, degrading to defaults with a warning message."""
        try:
            return self.read(), None
        except PersistenceError as exc:
            logger.warning("config_load_failed", path=str(self._path), error=str(exc))
            return AppConfig(), str(exc)

    def save(self, config: AppConfig) -> None:
        """Write config to disk.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to save config {self._path}: {exc}") from exc
        logger.debug("config_saved", path=str(self._path))
