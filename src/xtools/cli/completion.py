"""Tab completion for the REPL.

``complete`` is a pure function of the text before the cursor and a
CompletionContext; it never touches the connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

from xtools.cli.commands import COMMAND_NAMES
from xtools.config import CONFIG_KEYS


@dataclass(frozen=True)
class CompletionContext:
    """Live candidate sources for second-level completion."""

    port_names: Callable[[], Sequence[str]] = lambda: ()
    config_keys: Sequence[str] = field(default_factory=lambda: tuple(CONFIG_KEYS))


def complete(line: str, context: CompletionContext) -> list[str]:
    """Return completion candidates for the word being typed at the end of line.

    Level 0 completes command names; level 1 completes the argument of
    ``connect`` (port names) and ``config`` (config keys).
    """
    stripped = line.lstrip()
    if not stripped or not any(ch.isspace() for ch in stripped):
        return [c for c in COMMAND_NAMES if c.startswith(stripped)]

    parts = stripped.split(None, 1)
    head = parts[0]
    rest = parts[1] if len(parts) > 1 else ""
    if any(ch.isspace() for ch in rest):
        return []

    if head == "connect":
        candidates = context.port_names()
    elif head == "config":
        candidates = context.config_keys
    else:
        return []
    return sorted(c for c in candidates if c.startswith(rest))
