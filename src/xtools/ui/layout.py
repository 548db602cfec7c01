"""Shared page layout with header and content area."""

from __future__ import annotations

from typing import Callable

from nicegui import ui

from xtools.ui.theme import COLORS, CSS


def page_layout(title: str, content_fn: Callable) -> None:
    """Create the standard page layout.

    Args:
        title: Page title displayed in the header.
        content_fn: Callable that builds the page content.
    """
    ui.add_css(CSS)
    ui.dark_mode(True)
    ui.colors(primary=COLORS["accent"])

    with ui.header(elevated=True).classes("q-pa-sm"):
        with ui.row().classes("w-full items-center no-wrap q-gutter-md"):
            ui.label("XTOOLS").classes("text-h6 text-bold").style(
                f"color: {COLORS['accent']}; letter-spacing: 0.15em;"
            )
            ui.label("|").style(f"color: {COLORS['text_dim']};")
            ui.label(title).classes("text-subtitle1").style(
                f"color: {COLORS['text']};"
            )

    with ui.column().classes("q-pa-md w-full").style(
        f"background-color: {COLORS['background']};"
    ):
        content_fn()
