"""Canonical hex encoding of payload bytes and strict hex-input parsing."""

from __future__ import annotations

import re

from xtools.exceptions import InvalidHexError

_HEX_BYTE = re.compile(r"[0-9A-Fa-f]{2}")


def encode_hex(data: bytes) -> str:
    """Encode bytes as uppercase two-digit pairs separated by single spaces.

    >>> encode_hex(b"Hi")
    '48 69'
    """
    return " ".join(f"{b:02X}" for b in data)


def decode_hex(text: str) -> bytes:
    """Parse whitespace-separated hex into bytes.

    Each token is one byte written as exactly two hex digits, so
    ``"48 65"`` decodes to ``b"He"`` while ``"E"``, ``"ABC"`` and
    ``"4865"`` are rejected.

    Raises:
        InvalidHexError: If any token is not a two-digit hex byte.
    """
    out = bytearray()
    for token in text.split():
        if not _HEX_BYTE.fullmatch(token):
            raise InvalidHexError(f"Invalid hex byte: {token!r}")
        out.append(int(token, 16))
    return bytes(out)


def decode_text(data: bytes) -> str:
    """Best-effort UTF-8 decode; invalid sequences become U+FFFD."""
    return data.decode("utf-8", errors="replace")
