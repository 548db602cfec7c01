"""REPL command parsing and execution.

Each input line is split on whitespace and parsed into exactly one of
the command dataclasses below. An unknown first token becomes
:class:`Unrecognized`, which the processor reports as an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

import click

from xtools.config import CONFIG_KEYS, format_value, get_value, with_value
from xtools.context import AppContext
from xtools.exceptions import PersistenceError, UnknownCommandError, ValidationError
from xtools.serial.models import DEFAULT_BAUD_RATE, ConnectionConfig, DataEntry
from xtools.serial.ports import list_ports_or_warn
from xtools.utils.logging import get_logger

logger = get_logger(__name__)

COMMAND_NAMES = (
    "list",
    "connect",
    "disconnect",
    "send",
    "hex",
    "config",
    "status",
    "clear",
    "help",
    "exit",
    "quit",
)


@dataclass(frozen=True)
class ListPorts:
    pass


@dataclass(frozen=True)
class Connect:
    port: str
    baud_rate: int | None = None


@dataclass(frozen=True)
class Disconnect:
    pass


@dataclass(frozen=True)
class Send:
    data: str


@dataclass(frozen=True)
class SendHex:
    data: str


@dataclass(frozen=True)
class Config:
    key: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class Status:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Unrecognized:
    name: str


Command = Union[
    ListPorts, Connect, Disconnect, Send, SendHex, Config,
    Status, Clear, Help, Exit, Unrecognized,
]


def _no_args(name: str, args: list[str]) -> None:
    if args:
        raise ValidationError(f"Usage: {name} (takes no arguments)")


def parse_line(line: str) -> Command | None:
    """Parse one REPL line. Blank lines give None.

    Raises:
        ValidationError: If a known command has malformed arguments.
    """
    tokens = line.split()
    if not tokens:
        return None
    name, args = tokens[0], tokens[1:]

    if name == "list":
        _no_args(name, args)
        return ListPorts()
    if name == "connect":
        if not args or len(args) > 2:
            raise ValidationError("Usage: connect <port> [baud]")
        baud = None
        if len(args) == 2:
            try:
                baud = int(args[1])
            except ValueError:
                raise ValidationError(f"Invalid baud rate: {args[1]!r}") from None
        return Connect(port=args[0], baud_rate=baud)
    if name == "disconnect":
        _no_args(name, args)
        return Disconnect()
    if name == "send":
        if not args:
            raise ValidationError("Usage: send <data...>")
        return Send(data=" ".join(args))
    if name == "hex":
        if not args:
            raise ValidationError("Usage: hex <bytes...>  (e.g. hex 48 65 6C 6C 6F)")
        return SendHex(data=" ".join(args))
    if name == "config":
        if not args:
            return Config()
        if len(args) == 1:
            return Config(key=args[0])
        return Config(key=args[0], value=" ".join(args[1:]))
    if name == "status":
        _no_args(name, args)
        return Status()
    if name == "clear":
        _no_args(name, args)
        return Clear()
    if name == "help":
        return Help()
    if name in ("exit", "quit"):
        return Exit()
    return Unrecognized(name=name)


class Outcome(Enum):
    CONTINUE = "continue"
    EXIT = "exit"


HELP_TEXT = """
Commands:

  Ports:
    list                   List available serial ports
    connect <port> [baud]  Connect (e.g. connect COM3 115200)
    disconnect             Close the connection
    status                 Show connection status

  Data:
    send <data...>         Send text (configured line ending appended)
    hex <bytes...>         Send hex bytes (e.g. hex 48 65 6C 6C 6F)

  Settings:
    config                 Show all settings
    config <key>           Show one setting
    config <key> <value>   Change and save a setting

  Other:
    clear                  Clear the screen
    help                   Show this help
    exit, quit             Disconnect and leave

Tab completes commands, port names, and config keys.
"""


def format_entry(entry: DataEntry, hex_label: bool = False) -> str:
    """Format an entry the way the REPL echoes traffic."""
    label = entry.direction.value.upper()
    if hex_label:
        return f"[{entry.time_str}] {label} HEX: {entry.hex}"
    text = entry.text.rstrip("\r\n")
    return f"[{entry.time_str}] {label}: {text}"


class CommandProcessor:
    """Executes parsed commands against an AppContext.

    Args:
        context: Shared application context.
        echo: Output sink, click.echo by default.
    """

    def __init__(self, context: AppContext, echo: Callable[[str], None] = click.echo) -> None:
        self._ctx = context
        self._echo = echo
        self._handlers: dict[type, Callable] = {
            ListPorts: self._list,
            Connect: self._connect,
            Disconnect: self._disconnect,
            Send: self._send,
            SendHex: self._send_hex,
            Config: self._config,
            Status: self._status,
            Clear: self._clear,
            Help: self._help,
            Exit: self._exit,
            Unrecognized: self._unrecognized,
        }

    def run_line(self, line: str) -> Outcome:
        """Parse and execute one line.

        Raises:
            XToolsError: Any validation, state, or device error.
        """
        command = parse_line(line)
        if command is None:
            return Outcome.CONTINUE
        return self.execute(command)

    def execute(self, command: Command) -> Outcome:
        handler = self._handlers[type(command)]
        return handler(command) or Outcome.CONTINUE

    def default_baud(self) -> int:
        """Last successfully used baud rate, else the configured one."""
        last = self._ctx.manager.last_config
        if last is not None:
            return last.baud_rate
        return self._ctx.config.serial.baud_rate or DEFAULT_BAUD_RATE

    # --- Handlers ---

    def _list(self, cmd: ListPorts) -> None:
        ports, warning = list_ports_or_warn()
        if warning:
            self._echo(f"WARNING: {warning}")
        if not ports:
            self._echo("No serial ports found.")
            return
        self._echo("Available ports:")
        for i, p in enumerate(ports, start=1):
            self._echo(f"  [{i}] {p.name} - {p.description}")

    def _connect(self, cmd: Connect) -> None:
        settings = self._ctx.config.serial
        baud = cmd.baud_rate if cmd.baud_rate is not None else self.default_baud()
        status = self._ctx.manager.connect(ConnectionConfig(
            port=cmd.port,
            baud_rate=baud,
            data_bits=settings.data_bits,
            stop_bits=settings.stop_bits,
            parity=settings.parity,
        ))
        self._echo(f"Connected to {status.config.port} @ {status.config.baud_rate} bps")
        updated = self._ctx.config.model_copy(deep=True)
        updated.serial.port = status.config.port
        updated.serial.baud_rate = status.config.baud_rate
        self._persist(updated)

    def _disconnect(self, cmd: Disconnect) -> None:
        self._ctx.manager.disconnect()
        self._echo("Disconnected")

    def _send(self, cmd: Send) -> None:
        entry = self._ctx.channel.send(cmd.data + self._ctx.config.serial.line_ending)
        self._echo(format_entry(entry))

    def _send_hex(self, cmd: SendHex) -> None:
        entry = self._ctx.channel.send(cmd.data, hex_mode=True)
        self._echo(format_entry(entry, hex_label=True))

    def _config(self, cmd: Config) -> None:
        if cmd.key is None:
            width = max(len(k) for k in CONFIG_KEYS)
            for key in CONFIG_KEYS:
                value = format_value(get_value(self._ctx.config, key))
                self._echo(f"  {key:<{width}}  {value}")
            return
        if cmd.value is None:
            self._echo(format_value(get_value(self._ctx.config, cmd.key)))
            return
        updated = with_value(self._ctx.config, cmd.key, cmd.value)
        self._persist(updated)
        self._echo(f"{cmd.key} = {format_value(get_value(updated, cmd.key))}")

    def _status(self, cmd: Status) -> None:
        status = self._ctx.manager.status()
        if not status.connected:
            self._echo("Status: disconnected")
            return
        c = status.config
        frame = f"{c.data_bits}{c.parity.value[0].upper()}{c.stop_bits}"
        self._echo(f"Status: connected to {c.port} @ {c.baud_rate} bps ({frame})")

    def _clear(self, cmd: Clear) -> None:
        click.clear()

    def _help(self, cmd: Help) -> None:
        self._echo(HELP_TEXT)

    def _exit(self, cmd: Exit) -> Outcome:
        if self._ctx.manager.is_connected:
            self._ctx.manager.disconnect()
        return Outcome.EXIT

    def _unrecognized(self, cmd: Unrecognized) -> None:
        raise UnknownCommandError(f"Unknown command: {cmd.name}. Type 'help' for a list")

    def _persist(self, config) -> None:
        try:
            self._ctx.save_config(config)
        except PersistenceError as exc:
            logger.warning("config_save_failed", error=str(exc))
            self._echo(f"WARNING: {exc}")
