"""Interactive read-eval-print loop over the shared AppContext."""

from __future__ import annotations

from typing import Callable

import click

from xtools.cli.commands import CommandProcessor, Outcome, format_entry
from xtools.cli.completion import CompletionContext, complete
from xtools.context import AppContext
from xtools.exceptions import PersistenceError, XToolsError
from xtools.history import History
from xtools.serial.models import DataEntry
from xtools.serial.poller import Poller
from xtools.serial.ports import list_ports_or_warn
from xtools.utils.logging import get_logger

try:
    import readline
except ImportError:  # Windows without pyreadline: no line editing
    readline = None

logger = get_logger(__name__)

PROMPT = "xtools> "

BANNER = """
  xTools CLI - interactive serial terminal
  Tab completes commands. Type 'help' for a list.
"""


def _port_names() -> list[str]:
    ports, _ = list_ports_or_warn()
    return [p.name for p in ports]


class Repl:
    """Blocking command loop.

    Args:
        context: Shared application context.
        history: Persisted history; the per-user file if omitted.
        input_fn: Line reader, ``input`` by default.
        echo: Output sink, ``click.echo`` by default.
        live_rx: Print received data from a background poller.
    """

    def __init__(
        self,
        context: AppContext,
        history: History | None = None,
        input_fn: Callable[[str], str] = input,
        echo: Callable[[str], None] = click.echo,
        live_rx: bool = True,
    ) -> None:
        self._ctx = context
        self._history = history if history is not None else History()
        self._input = input_fn
        self._echo = echo
        self._processor = CommandProcessor(context, echo=echo)
        self._completion = CompletionContext(port_names=_port_names)
        self._poller = Poller(context.channel, self._print_rx, self._print_rx_error) if live_rx else None
        self._history_warned = False

    @property
    def history(self) -> History:
        return self._history

    @property
    def _uses_readline(self) -> bool:
        return readline is not None and self._input is input

    def run(self) -> None:
        """Loop until exit/quit or end of input, then release the port."""
        self._echo(BANNER)
        self._load_history()
        if self._ctx.config_warning:
            self._echo(f"WARNING: {self._ctx.config_warning} (using defaults)")
        self._install_completer()
        if self._poller is not None:
            self._poller.start()
        try:
            while True:
                try:
                    line = self._input(PROMPT)
                except EOFError:
                    self._echo("")
                    break
                except KeyboardInterrupt:
                    self._echo("^C")
                    continue
                except UnicodeDecodeError as exc:
                    logger.debug("input_decode_failed", error=str(exc))
                    self._echo(f"ERROR: Input is not valid text ({exc.reason})")
                    continue
                if self.handle_line(line) is Outcome.EXIT:
                    break
        finally:
            if self._poller is not None:
                self._poller.stop()
            self._ctx.shutdown()
            self._echo("Bye.")

    def handle_line(self, line: str) -> Outcome:
        """Record and execute one line; errors are printed, never raised."""
        line = line.strip()
        if not line:
            return Outcome.CONTINUE
        self._record(line)
        try:
            return self._processor.run_line(line)
        except XToolsError as exc:
            logger.debug("command_failed", line=line, error=str(exc))
            self._echo(f"ERROR: {exc}")
            return Outcome.CONTINUE

    def complete(self, line: str) -> list[str]:
        return complete(line, self._completion)

    # --- History ---

    def _load_history(self) -> None:
        warning = self._history.load()
        if warning:
            self._echo(f"WARNING: {warning}")
        if self._uses_readline:
            readline.clear_history()
            for line in self._history.lines:
                readline.add_history(line)

    def _record(self, line: str) -> None:
        try:
            self._history.append(line)
        except PersistenceError as exc:
            if not self._history_warned:
                self._history_warned = True
                self._echo(f"WARNING: {exc}")

    # --- readline integration ---

    def _install_completer(self) -> None:
        if not self._uses_readline:
            return
        readline.set_completer_delims(" \t\n")
        readline.set_completer(self._readline_complete)
        readline.parse_and_bind("tab: complete")

    def _readline_complete(self, text: str, state: int) -> str | None:
        line = readline.get_line_buffer()[:readline.get_endidx()]
        matches = self.complete(line)
        return matches[state] if state < len(matches) else None

    # --- Live receive ---

    def _print_rx(self, entries: list[DataEntry]) -> None:
        for entry in entries:
            self._echo(format_entry(entry))

    def _print_rx_error(self, exc: Exception) -> None:
        self._echo(f"ERROR: {exc} (use 'disconnect' if the device is gone)")
