"""File locations and plain file writes for persisted state."""

from __future__ import annotations

from pathlib import Path

import click

from xtools.exceptions import PersistenceError

APP_NAME = "xtools"


def app_dir() -> Path:
    """Platform-specific per-user directory for config and history."""
    return Path(click.get_app_dir(APP_NAME))


def default_config_path() -> Path:
    return app_dir() / "config.json"


def default_history_path() -> Path:
    return app_dir() / "history.txt"


def save_log(path: str | Path, content: str) -> Path:
    """Write exported log text to path, creating parent directories.

    Raises:
        PersistenceError: If the file cannot be written.
    """
    target = Path(path).expanduser()
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Failed to save log to {target}: {exc}") from exc
    return target
