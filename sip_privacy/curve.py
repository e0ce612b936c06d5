"""
Curve-family capability interface.

Business logic (commitments, stealth addresses) is written once against
:class:`CurveBackend`; each supported family provides one implementation:

- :mod:`sip_privacy.secp256k1` — short Weierstrass, 33-byte compressed
  points, big-endian scalars.
- :mod:`sip_privacy.ed25519` — twisted Edwards, 32-byte points,
  little-endian scalars, RFC 8032 seed clamping.

Scalars are plain Python ``int`` values reduced modulo the group order;
points are :class:`CurvePoint` objects that support ``P + Q``, ``P - Q``,
``-P``, ``k * P`` and point equality.
"""

from __future__ import annotations

import hashlib
import secrets
from abc import ABC, abstractmethod
from typing import Optional, Union

from .constants import SCALAR_BYTES
from .errors import InvalidCurvePoint, InvalidEncoding, InvalidScalar


# ── points ──────────────────────────────────────────────────────────────
class CurvePoint(ABC):
    """Group element of one curve family."""

    __slots__ = ()

    @abstractmethod
    def is_identity(self) -> bool:
        ...

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Canonical compressed encoding; the identity has none."""

    @abstractmethod
    def _smul(self, k: int) -> CurvePoint:
        ...

    @abstractmethod
    def __add__(self, o: CurvePoint) -> CurvePoint:
        ...

    @abstractmethod
    def __neg__(self) -> CurvePoint:
        ...

    def __sub__(self, o: CurvePoint) -> CurvePoint:
        return self + (-o)

    def __rmul__(self, k) -> CurvePoint:
        if isinstance(k, int) and not isinstance(k, bool):
            return self._smul(k)
        return NotImplemented


# ── backend ─────────────────────────────────────────────────────────────
class CurveBackend(ABC):
    """Uniform point/scalar arithmetic for one curve family."""

    name: str
    order: int
    point_bytes: int
    byteorder: str

    # constructors ---------------------------------------------------------
    @property
    @abstractmethod
    def generator(self) -> CurvePoint:
        """Standard base point *G*."""

    @abstractmethod
    def identity(self) -> CurvePoint:
        ...

    @abstractmethod
    def decode_point(self, data: bytes, field: str = "point") -> CurvePoint:
        """
        Decode a compressed point, failing closed.

        Raises ``InvalidCurvePoint`` for anything that is not a valid,
        non-identity element of the prime-order group.
        """

    @abstractmethod
    def generator_candidate(self, digest: bytes) -> Optional[CurvePoint]:
        """
        Interpret a 32-byte digest as a fixed-parity compressed point.

        Returns ``None`` when the candidate is not a valid point.  Used by
        the NUMS generator search.
        """

    @abstractmethod
    def scalar_from_private(self, private_key: bytes, field: str = "private_key") -> int:
        """Turn a 32-byte private key into the scalar it represents."""

    @abstractmethod
    def random_private_key(self) -> bytes:
        ...

    # group operations -----------------------------------------------------
    def base_mul(self, k: int) -> CurvePoint:
        """Compute *k · G*."""
        return (k % self.order) * self.generator

    def mul(self, k: int, point: CurvePoint) -> CurvePoint:
        return (k % self.order) * point

    def add(self, p: CurvePoint, q: CurvePoint) -> CurvePoint:
        return p + q

    def sub(self, p: CurvePoint, q: CurvePoint) -> CurvePoint:
        return p - q

    def encode_point(self, point: CurvePoint) -> bytes:
        return point.to_bytes()

    def public_key_from_private(self, private_key: bytes) -> CurvePoint:
        return self.base_mul(self.scalar_from_private(private_key))

    # scalars --------------------------------------------------------------
    def reduce(self, value: Union[int, bytes]) -> int:
        """Reduce an int, or bytes read in the family's byte order, mod *n*."""
        if isinstance(value, (bytes, bytearray)):
            value = int.from_bytes(value, self.byteorder)
        return value % self.order

    def scalar_to_bytes(self, k: int) -> bytes:
        return (k % self.order).to_bytes(SCALAR_BYTES, self.byteorder)

    def scalar_from_bytes(self, data: bytes, field: str = "scalar") -> int:
        """Strict decoding: exactly 32 bytes, value below the group order."""
        if len(data) != SCALAR_BYTES:
            raise InvalidEncoding(
                f"{field} must be {SCALAR_BYTES} bytes, got {len(data)}",
                field=field,
            )
        k = int.from_bytes(data, self.byteorder)
        if k >= self.order:
            raise InvalidScalar(f"{field} out of range", field=field)
        return k

    def hash_to_scalar(self, *parts: bytes) -> int:
        """SHA-256 over *parts*, read in the family's byte order, mod *n*."""
        h = hashlib.sha256()
        for p in parts:
            h.update(p)
        return self.reduce(h.digest())

    def random_scalar(self) -> int:
        """Uniform in [1, n-1] via rejection sampling."""
        while True:
            c = int.from_bytes(secrets.token_bytes(SCALAR_BYTES), self.byteorder)
            if 0 < c < self.order:
                return c

    def _check_point_length(self, data: bytes, field: str) -> None:
        if not isinstance(data, (bytes, bytearray)):
            raise InvalidCurvePoint(f"{field} must be bytes", field=field)
        if len(data) != self.point_bytes:
            raise InvalidCurvePoint(
                f"{field} must be {self.point_bytes} bytes, got {len(data)}",
                field=field,
            )

    def __repr__(self) -> str:
        return f"CurveBackend({self.name})"
