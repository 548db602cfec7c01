"""API routes for port enumeration, connection, and traffic."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from xtools.api.deps import get_context, to_http
from xtools.context import AppContext
from xtools.exceptions import XToolsError
from xtools.serial.models import ConnectionStatus, DataEntry, Parity, PortInfo

router = APIRouter(prefix="/serial", tags=["serial"])


class ConnectRequest(BaseModel):
    port: str
    baud_rate: int = 115200
    data_bits: int = 8
    stop_bits: int = 1
    parity: Parity = Parity.NONE


class SendRequest(BaseModel):
    data: str
    hex_mode: bool = False


class ReadResponse(BaseModel):
    entries: list[DataEntry] = Field(default_factory=list)


@router.get("/ports")
async def list_ports(ctx: AppContext = Depends(get_context)) -> list[PortInfo]:
    """List available serial ports."""
    try:
        return await asyncio.to_thread(ctx.list_ports)
    except XToolsError as exc:
        raise to_http(exc) from exc


@router.post("/connect")
async def connect(req: ConnectRequest, ctx: AppContext = Depends(get_context)) -> ConnectionStatus:
    """Open the serial port."""
    try:
        return await asyncio.to_thread(
            ctx.connect, req.port, req.baud_rate, req.data_bits, req.stop_bits, req.parity
        )
    except XToolsError as exc:
        raise to_http(exc) from exc


@router.post("/disconnect")
async def disconnect(ctx: AppContext = Depends(get_context)) -> ConnectionStatus:
    """Close the serial port."""
    try:
        await asyncio.to_thread(ctx.disconnect)
    except XToolsError as exc:
        raise to_http(exc) from exc
    return ctx.status()


@router.get("/status")
async def status(ctx: AppContext = Depends(get_context)) -> ConnectionStatus:
    """Current connection state."""
    return ctx.status()


@router.post("/send")
async def send(req: SendRequest, ctx: AppContext = Depends(get_context)) -> DataEntry:
    """Send text or hex data."""
    try:
        return await asyncio.to_thread(ctx.send, req.data, req.hex_mode)
    except XToolsError as exc:
        raise to_http(exc) from exc


@router.get("/read")
async def read(ctx: AppContext = Depends(get_context)) -> ReadResponse:
    """Drain and return whatever has been received."""
    try:
        entries = await asyncio.to_thread(ctx.read_available)
    except XToolsError as exc:
        raise to_http(exc) from exc
    return ReadResponse(entries=entries)
