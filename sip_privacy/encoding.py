"""Hex helpers for the ``0x``-prefixed strings used at every boundary."""

from __future__ import annotations

import binascii
from typing import Optional, Union

from .errors import InvalidEncoding

BytesLike = Union[bytes, bytearray, str]


def to_hex(data: bytes) -> str:
    """Lowercase hex with a leading ``0x``."""
    return "0x" + bytes(data).hex()


def from_hex(text: str, *, field: str, length: Optional[int] = None) -> bytes:
    """Parse a ``0x``-prefixed hex string, optionally enforcing its length."""
    if not isinstance(text, str):
        raise InvalidEncoding(f"{field} must be a hex string", field=field)
    if not text.startswith("0x"):
        raise InvalidEncoding(f"{field} must start with 0x", field=field)
    try:
        data = binascii.unhexlify(text[2:])
    except (binascii.Error, ValueError):
        raise InvalidEncoding(f"{field} is not valid hex", field=field) from None
    if length is not None and len(data) != length:
        raise InvalidEncoding(
            f"{field} must be {length} bytes, got {len(data)}", field=field,
        )
    return data


def coerce_bytes(
    value: BytesLike,
    *,
    field: str,
    length: Optional[int] = None,
) -> bytes:
    """Accept raw bytes or ``0x`` hex and return bytes of the expected size."""
    if isinstance(value, str):
        return from_hex(value, field=field, length=length)
    if not isinstance(value, (bytes, bytearray)):
        raise InvalidEncoding(
            f"{field} must be bytes or a hex string", field=field,
        )
    if length is not None and len(value) != length:
        raise InvalidEncoding(
            f"{field} must be {length} bytes, got {len(value)}", field=field,
        )
    return bytes(value)
