"""Process-wide application context shared by the REPL and dashboard."""

from __future__ import annotations

from pathlib import Path

from xtools.config import AppConfig, ConfigStore
from xtools.serial.channel import IOChannel
from xtools.serial.connection import ConnectionManager
from xtools.serial.models import ConnectionConfig, ConnectionStatus, DataEntry, Parity, PortInfo
from xtools.serial.ports import list_ports
from xtools.serial.traffic import TrafficLog
from xtools.storage import save_log
from xtools.utils.logging import get_logger

logger = get_logger(__name__)


class AppContext:
    """Owns the single ConnectionManager and the collaborators around it.

    Construct once at startup and pass to whichever front-end runs.

    Args:
        manager: Connection manager; a fresh one is created if omitted.
        config_store: Config persistence; the per-user file if omitted.
        keep_log: Record traffic in a TrafficLog (dashboard) or not (REPL).
    """

    def __init__(
        self,
        manager: ConnectionManager | None = None,
        config_store: ConfigStore | None = None,
        keep_log: bool = True,
    ) -> None:
        self.manager = manager or ConnectionManager()
        self.config_store = config_store or ConfigStore()
        self.traffic = TrafficLog() if keep_log else None
        self.channel = IOChannel(self.manager, self.traffic)
        self.config, self.config_warning = self.config_store.load()

    # --- Ports and connection ---

    def list_ports(self) -> list[PortInfo]:
        return list_ports()

    def connect(
        self,
        port: str,
        baud_rate: int,
        data_bits: int = 8,
        stop_bits: int = 1,
        parity: Parity | str = Parity.NONE,
    ) -> ConnectionStatus:
        return self.manager.connect(ConnectionConfig(
            port=port,
            baud_rate=baud_rate,
            data_bits=data_bits,
            stop_bits=stop_bits,
            parity=parity,
        ))

    def disconnect(self) -> None:
        self.manager.disconnect()

    def status(self) -> ConnectionStatus:
        return self.manager.status()

    # --- I/O ---

    def send(self, data: str, hex_mode: bool = False) -> DataEntry:
        return self.channel.send(data, hex_mode)

    def read_available(self) -> list[DataEntry]:
        return self.channel.read_available()

    # --- Persistence ---

    def get_config(self) -> AppConfig:
        return self.config

    def save_config(self, config: AppConfig) -> None:
        """Adopt config in memory, then persist it.

        Raises:
            PersistenceError: If writing fails; the in-memory value is kept.
        """
        self.config = config
        self.config_store.save(config)

    def save_log(self, path: str | Path, content: str) -> Path:
        return save_log(path, content)

    def shutdown(self) -> None:
        """Release the device handle if one is open."""
        if self.manager.is_connected:
            self.manager.disconnect()
        logger.info("app_context_shutdown")
