"""Data model for ports, connection settings, and logged traffic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BAUD_RATE = 115200

COMMON_BAUD_RATES = [
    300,
    1200,
    2400,
    4800,
    9600,
    19200,
    38400,
    57600,
    115200,
    230400,
    460800,
    921600,
]

VALID_DATA_BITS = (5, 6, 7, 8)
VALID_STOP_BITS = (1, 2)


class Parity(StrEnum):
    """Parity checking mode."""
    NONE = "none"
    ODD = "odd"
    EVEN = "even"


class ConnectionState(StrEnum):
    """Lifecycle state of the single device connection."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class Direction(StrEnum):
    """Traffic direction relative to this host."""
    TX = "tx"
    RX = "rx"


class PortInfo(BaseModel):
    """An available serial port as reported by the OS."""

    name: str
    description: str = ""


@dataclass(frozen=True)
class ConnectionConfig:
    """Settings used to open a port. Immutable while the port is open."""

    port: str
    baud_rate: int = DEFAULT_BAUD_RATE
    data_bits: int = 8
    stop_bits: int = 1
    parity: Parity = Parity.NONE


class ConnectionStatus(BaseModel):
    """Snapshot of the connection state and the config it was opened with."""

    state: ConnectionState = ConnectionState.DISCONNECTED
    config: ConnectionConfig | None = None

    @property
    def connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED


class DataEntry(BaseModel):
    """One logged unit of traffic in either direction."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=datetime.now)
    text: str
    hex: str
    direction: Direction

    @property
    def time_str(self) -> str:
        """Timestamp as HH:MM:SS.mmm."""
        return self.timestamp.strftime("%H:%M:%S.%f")[:-3]

    def format_line(self, show_timestamp: bool = True, show_hex: bool = False) -> str:
        """Render the entry as one line of log text."""
        body = self.hex if show_hex else self.text.rstrip("\r\n")
        line = f"{self.direction.value.upper()}: {body}"
        if show_timestamp:
            line = f"[{self.time_str}] {line}"
        return line
