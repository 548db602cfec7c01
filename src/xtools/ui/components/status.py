"""Connection status badge."""

from __future__ import annotations

from nicegui import ui

from xtools.serial.models import ConnectionStatus
from xtools.ui.theme import COLORS


def connection_badge() -> ui.label:
    """Create a badge label; update it with :func:`set_connection_badge`."""
    return ui.label("DISCONNECTED").classes("px-2 py-1 rounded text-xs font-bold")


def set_connection_badge(label: ui.label, status: ConnectionStatus) -> None:
    """Reflect a ConnectionStatus in a badge created by connection_badge()."""
    if status.connected:
        color = COLORS["connected"]
        c = status.config
        label.text = f"CONNECTED  {c.port} @ {c.baud_rate}"
    else:
        color = COLORS["text_dim"]
        label.text = "DISCONNECTED"
    label.style(f"background: {color}20; color: {color}; border: 1px solid {color}40")
