"""Serial port enumeration, connection ownership, and buffered I/O."""

from xtools.serial.channel import IOChannel
from xtools.serial.connection import ConnectionManager
from xtools.serial.hexcodec import decode_hex, encode_hex
from xtools.serial.models import (
    ConnectionConfig,
    ConnectionState,
    ConnectionStatus,
    DataEntry,
    Direction,
    Parity,
    PortInfo,
)
from xtools.serial.poller import Poller
from xtools.serial.ports import list_ports
from xtools.serial.traffic import TrafficLog

__all__ = [
    "ConnectionConfig",
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "DataEntry",
    "Direction",
    "IOChannel",
    "Parity",
    "Poller",
    "PortInfo",
    "TrafficLog",
    "decode_hex",
    "encode_hex",
    "list_ports",
]
