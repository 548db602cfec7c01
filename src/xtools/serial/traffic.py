"""Append-only log of sent and received traffic."""

from __future__ import annotations

import threading

from xtools.serial.models import DataEntry, Direction


class TrafficLog:
    """Ordered record of DataEntry items for one session.

    Entries are only removed by :meth:`clear`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[DataEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: DataEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[DataEntry]:
        """Return a copy of all entries in creation order."""
        with self._lock:
            return list(self._entries)

    def since(self, index: int) -> list[DataEntry]:
        """Return entries appended at or after position index."""
        with self._lock:
            return self._entries[index:]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def counts(self) -> dict[Direction, int]:
        """Number of bytes logged per direction."""
        totals = {Direction.TX: 0, Direction.RX: 0}
        for entry in self.entries():
            totals[entry.direction] += len(entry.hex.split())
        return totals

    def render(self, show_timestamp: bool = True, show_hex: bool = False) -> str:
        """Render the whole log as text, one entry per line."""
        lines = [e.format_line(show_timestamp, show_hex) for e in self.entries()]
        return "\n".join(lines) + ("\n" if lines else "")
