"""FastAPI application factory and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from xtools.context import AppContext
from xtools.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(enable_ui: bool = True, context: AppContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        enable_ui: Whether to mount the NiceGUI web dashboard.
        context: Application context to serve; one is created if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    ctx = context or AppContext()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if context is None:
            setup_logging()
        logger.info("xtools_api_starting")
        yield
        # Close the port on server exit
        ctx.shutdown()
        logger.info("xtools_api_stopped")

    app = FastAPI(
        title="xTools API",
        description="Serial terminal: ports, connection, traffic, and settings",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.context = ctx

    from xtools.api.routes import serial, settings
    app.include_router(serial.router, prefix="/api")
    app.include_router(settings.router, prefix="/api")

    if enable_ui:
        from xtools.ui.main import setup_ui
        setup_ui(app, ctx)

    return app
