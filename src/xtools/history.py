"""Persisted, append-only REPL command history."""

from __future__ import annotations

from pathlib import Path

from xtools.exceptions import PersistenceError
from xtools.storage import default_history_path
from xtools.utils.logging import get_logger

logger = get_logger(__name__)


class History:
    """Ordered list of entered lines backed by a newline-delimited file.

    Consecutive duplicates are kept. Lines that cannot be decoded as
    UTF-8 or contain NUL are skipped on load, and are never written.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_history_path()
        self._lines: list[str] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lines(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def load(self) -> str | None:
        """Load lines from disk, returning a warning message on failure.

        A missing file is not an error. An unreadable file leaves the
        in-memory history empty.
        """
        self._lines = []
        if not self._path.exists():
            return None
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            logger.warning("history_load_failed", path=str(self._path), error=str(exc))
            return f"Could not read history {self._path}: {exc}"

        skipped = 0
        for chunk in raw.split(b"\n"):
            chunk = chunk.rstrip(b"\r")
            if not chunk:
                continue
            try:
                line = chunk.decode("utf-8")
            except UnicodeDecodeError:
                skipped += 1
                continue
            if "\x00" in line:
                skipped += 1
                continue
            self._lines.append(line)

        if skipped:
            logger.warning("history_lines_skipped", path=str(self._path), skipped=skipped)
            return f"Skipped {skipped} unreadable line(s) in {self._path}"
        return None

    def append(self, line: str) -> None:
        """Record line in memory and append it to the history file.

        Raises:
            PersistenceError: If the file cannot be written. The line is
                still kept in memory.
        """
        self._lines.append(line)
        try:
            data = line.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise PersistenceError(f"Line not saved to history: {exc.reason}") from exc
        if "\x00" in line:
            raise PersistenceError("Line not saved to history: contains NUL")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("ab") as fh:
                fh.write(data + b"\n")
        except OSError as exc:
            raise PersistenceError(f"Failed to write history {self._path}: {exc}") from exc
