"""NiceGUI web dashboard setup and page registration."""

from __future__ import annotations

import os
import secrets

from fastapi import FastAPI
from nicegui import ui

from xtools.context import AppContext


def setup_ui(fastapi_app: FastAPI, ctx: AppContext) -> None:
    """Register NiceGUI pages with the FastAPI application."""

    @ui.page("/")
    def index():
        from xtools.ui.pages.terminal import terminal_page
        terminal_page(ctx)

    storage_secret = os.environ.get("XTOOLS_STORAGE_SECRET") or secrets.token_hex(32)

    ui.run_with(
        fastapi_app,
        title="xTools - Serial Terminal",
        storage_secret=storage_secret,
    )
