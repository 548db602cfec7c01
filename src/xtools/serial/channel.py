"""Send and receive over the managed connection."""

from __future__ import annotations

import serial

from xtools.exceptions import DeviceError, ValidationError
from xtools.serial.connection import ConnectionManager
from xtools.serial.hexcodec import decode_hex, decode_text, encode_hex
from xtools.serial.models import DataEntry, Direction
from xtools.serial.traffic import TrafficLog
from xtools.utils.logging import get_logger

logger = get_logger(__name__)

READ_CHUNK_SIZE = 1024
# Upper bound on chunks drained per call so a flooding device cannot pin the lock.
MAX_CHUNKS_PER_READ = 64


class IOChannel:
    """Transcodes payloads and performs one locked I/O call at a time.

    Args:
        manager: ConnectionManager that owns the device handle.
        log: Optional TrafficLog that receives every entry produced.
    """

    def __init__(self, manager: ConnectionManager, log: TrafficLog | None = None) -> None:
        self._manager = manager
        self._log = log

    @property
    def log(self) -> TrafficLog | None:
        return self._log

    def send(self, payload: str, hex_mode: bool = False) -> DataEntry:
        """Transmit payload and return the resulting tx entry.

        In hex mode payload is parsed with :func:`decode_hex`; otherwise its
        UTF-8 bytes are written unmodified. Surrogate-escaped characters
        from a non-UTF-8 terminal go out as the raw bytes they stand for.

        Raises:
            NotConnectedError: If no port is open.
            InvalidHexError: If hex_mode is set and payload is malformed.
            ValidationError: If payload holds no bytes.
            DeviceError: If the write fails.
        """
        with self._manager.session() as handle:
            if hex_mode:
                data = decode_hex(payload)
            else:
                try:
                    data = payload.encode("utf-8", errors="surrogateescape")
                except UnicodeEncodeError as exc:
                    raise ValidationError(f"Cannot encode payload: {exc.reason}") from exc
            if not data:
                raise ValidationError("Nothing to send")
            try:
                handle.write(data)
                handle.flush()
            except (serial.SerialException, OSError) as exc:
                logger.warning("serial_write_failed", error=str(exc), size=len(data))
                raise DeviceError(f"Send failed: {exc}") from exc

        entry = DataEntry(text=decode_text(data), hex=encode_hex(data), direction=Direction.TX)
        logger.debug("serial_tx", size=len(data), hex=entry.hex)
        if self._log is not None:
            self._log.append(entry)
        return entry

    def read_available(self) -> list[DataEntry]:
        """Drain whatever is buffered at the device without blocking.

        Returns one rx entry for everything drained, or an empty list when
        nothing is pending.

        Raises:
            NotConnectedError: If no port is open.
            DeviceError: If the read fails.
        """
        data = bytearray()
        with self._manager.session() as handle:
            try:
                for _ in range(MAX_CHUNKS_PER_READ):
                    waiting = handle.in_waiting
                    if waiting <= 0:
                        break
                    chunk = handle.read(min(waiting, READ_CHUNK_SIZE))
                    if not chunk:
                        break
                    data.extend(chunk)
            except (serial.SerialException, OSError) as exc:
                logger.warning("serial_read_failed", error=str(exc))
                raise DeviceError(f"Read failed: {exc}") from exc

        if not data:
            return []
        entry = DataEntry(text=decode_text(data), hex=encode_hex(data), direction=Direction.RX)
        logger.debug("serial_rx", size=len(data))
        if self._log is not None:
            self._log.append(entry)
        return [entry]
