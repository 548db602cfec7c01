"""Request dependencies and error translation for API routes."""

from __future__ import annotations

from fastapi import HTTPException, Request

from xtools.context import AppContext
from xtools.exceptions import (
    DeviceError,
    PersistenceError,
    StateError,
    ValidationError,
    XToolsError,
)


def get_context(request: Request) -> AppContext:
    """Return the AppContext attached to the running application."""
    return request.app.state.context


def to_http(exc: XToolsError) -> HTTPException:
    """Map a core error onto an HTTP status code."""
    if isinstance(exc, ValidationError):
        status = 422
    elif isinstance(exc, StateError):
        status = 409
    elif isinstance(exc, DeviceError):
        status = 502
    elif isinstance(exc, PersistenceError):
        status = 500
    else:
        status = 400
    return HTTPException(status_code=status, detail={"error": type(exc).__name__, "message": str(exc)})
