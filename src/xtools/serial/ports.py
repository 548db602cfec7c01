"""Serial port enumeration."""

from __future__ import annotations

from serial.tools import list_ports as _list_ports

from xtools.exceptions import DeviceError
from xtools.serial.models import PortInfo
from xtools.utils.logging import get_logger

logger = get_logger(__name__)


def _describe(port) -> str:
    """Build a human-readable description for a pyserial ListPortInfo."""
    if getattr(port, "vid", None) is not None:
        manufacturer = port.manufacturer or ""
        product = port.product or ""
        if manufacturer or product:
            return f"{manufacturer} - {product}"
    description = port.description or ""
    if description in ("", "n/a"):
        return "Unknown"
    return description


def list_ports() -> list[PortInfo]:
    """Enumerate serial ports currently exposed by the OS, sorted by name.

    Raises:
        DeviceError: If the OS enumeration call fails.
    """
    try:
        found = _list_ports.comports()
    except (OSError, ValueError) as exc:
        raise DeviceError(f"Failed to enumerate serial ports: {exc}") from exc

    ports = [PortInfo(name=p.device, description=_describe(p)) for p in found]
    ports.sort(key=lambda p: p.name)
    return ports


def list_ports_or_warn() -> tuple[list[PortInfo], str | None]:
    """Enumerate ports, degrading to an empty list with a warning message."""
    try:
        return list_ports(), None
    except DeviceError as exc:
        logger.warning("port_enumeration_failed", error=str(exc))
        return [], str(exc)
