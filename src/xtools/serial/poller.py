"""Fixed-interval background reader for front-ends without their own timer."""

from __future__ import annotations

import threading
from typing import Callable

from xtools.exceptions import DeviceError, StateError
from xtools.serial.channel import IOChannel
from xtools.serial.models import DataEntry
from xtools.utils.logging import get_logger

logger = get_logger(__name__)

POLL_INTERVAL_S = 0.05


class Poller:
    """Calls ``channel.read_available()`` every interval while connected.

    Received entries go to on_entries. A DeviceError is reported once to
    on_error and polling continues; there is no reconnect or retry.
    """

    def __init__(
        self,
        channel: IOChannel,
        on_entries: Callable[[list[DataEntry]], None],
        on_error: Callable[[Exception], None] | None = None,
        interval: float = POLL_INTERVAL_S,
    ) -> None:
        self._channel = channel
        self._on_entries = on_entries
        self._on_error = on_error
        self._interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._faulted = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="xtools-poller", daemon=True)
        self._thread.start()
        logger.debug("poller_started", interval=self._interval)

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.debug("poller_stopped")

    def poll_once(self) -> list[DataEntry]:
        """Run a single poll cycle. Not connected is a quiet no-op."""
        try:
            entries = self._channel.read_available()
        except StateError:
            self._faulted = False
            return []
        except DeviceError as exc:
            if not self._faulted:
                self._faulted = True
                if self._on_error is not None:
                    self._on_error(exc)
            return []
        self._faulted = False
        if entries:
            self._on_entries(entries)
        return entries

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.poll_once()
