"""Exception hierarchy for the serial core and its front-ends."""

from __future__ import annotations


class XToolsError(Exception):
    """Base exception for all xTools errors."""

    def __init__(self, message: str, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(message)


class ValidationError(XToolsError):
    """Bad parameters; nothing was changed."""


class InvalidHexError(ValidationError):
    """Hex payload contains a token that is not a whole number of bytes."""


class UnknownCommandError(ValidationError):
    """REPL input does not start with a known command."""


class UnknownKeyError(ValidationError):
    """Config key is not one of the known keys."""


class StateError(XToolsError):
    """Operation is not valid in the current connection state."""


class AlreadyConnectedError(StateError):
    """A connection is already open."""


class NotConnectedError(StateError):
    """No connection is open."""


class DeviceError(XToolsError):
    """OS-level failure opening, reading, writing, or enumerating ports."""


class PersistenceError(XToolsError):
    """Config, history, or log file could not be read or written."""
