"""API routes for configuration and log export."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from xtools.api.deps import get_context, to_http
from xtools.config import AppConfig
from xtools.context import AppContext
from xtools.exceptions import XToolsError

router = APIRouter(tags=["settings"])


class SaveLogRequest(BaseModel):
    path: str
    content: str | None = None


@router.get("/config")
async def get_config(ctx: AppContext = Depends(get_context)) -> AppConfig:
    """Return the active configuration."""
    return ctx.get_config()


@router.put("/config")
async def save_config(config: AppConfig, ctx: AppContext = Depends(get_context)) -> AppConfig:
    """Replace and persist the configuration."""
    try:
        await asyncio.to_thread(ctx.save_config, config)
    except XToolsError as exc:
        raise to_http(exc) from exc
    return config


@router.post("/log")
async def save_log(req: SaveLogRequest, ctx: AppContext = Depends(get_context)) -> dict:
    """Write log text to a file. Without content, the traffic log is rendered."""
    content = req.content
    if content is None:
        display = ctx.config.display
        content = ctx.traffic.render(display.show_timestamp, display.show_hex) if ctx.traffic else ""
    try:
        path = await asyncio.to_thread(ctx.save_log, req.path, content)
    except XToolsError as exc:
        raise to_http(exc) from exc
    return {"path": str(path), "bytes": len(content.encode("utf-8"))}


@router.delete("/log")
async def clear_log(ctx: AppContext = Depends(get_context)) -> dict:
    """Clear the in-memory traffic log."""
    if ctx.traffic is not None:
        ctx.traffic.clear()
    return {"cleared": True}
