"""
Scoped handling of secret buffers.

Secrets materialised inside this package live in ``bytearray`` objects
that are overwritten with random bytes and then zeroed on every exit
path.  Immutable ``bytes`` and ``int`` copies cannot be wiped from
Python; keep their lifetime as short as the surrounding code allows.
"""

from __future__ import annotations

import secrets
from contextlib import contextmanager
from typing import Iterator, Optional, Union

Wipeable = Union[bytearray, memoryview]


def secure_wipe(buffer: Wipeable) -> None:
    """Overwrite *buffer* with random bytes, then with zeros."""
    if isinstance(buffer, bytes):
        raise TypeError("bytes are immutable; pass a bytearray")
    n = len(buffer)
    if n == 0:
        return
    buffer[:] = secrets.token_bytes(n)
    buffer[:] = bytes(n)


def wipe_all(*buffers: Optional[Wipeable]) -> None:
    for buf in buffers:
        if buf is not None:
            secure_wipe(buf)


@contextmanager
def secure_buffer(data: Union[bytes, bytearray, int]) -> Iterator[bytearray]:
    """
    Yield a private ``bytearray`` copy of *data* (or *data* fresh random
    bytes when given an int) and wipe it when the block exits, including
    on exceptions.
    """
    if isinstance(data, int):
        buf = bytearray(secrets.token_bytes(data))
    else:
        buf = bytearray(data)
    try:
        yield buf
    finally:
        secure_wipe(buf)
