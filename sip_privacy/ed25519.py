"""
ed25519 backend via libsodium.

Group operations use the ``noclamp`` scalar-multiplication primitives
exposed by PyNaCl, so a scalar is always used exactly as given.  Clamping
happens in one place only, :func:`clamp`, when a 32-byte *seed* is turned
into a scalar (RFC 8032 §5.1.5).  A scalar that is already a scalar (for
example a recovered stealth private key) must never be fed back through
the seed path: hashing it again yields an unrelated key.

References
----------
- RFC 8032  Edwards-Curve Digital Signature Algorithm (EdDSA)
"""

from __future__ import annotations

import hashlib
import secrets
from typing import Optional

import nacl.bindings
import nacl.exceptions

from .constants import CURVE_ED25519, ED25519_POINT_BYTES, SCALAR_BYTES
from .curve import CurveBackend, CurvePoint
from .errors import InvalidCurvePoint, InvalidEncoding
from .memory import secure_buffer

# ── ed25519 constants ───────────────────────────────────────────────────
ORDER = 2**252 + 27742317777372353535851937790883648493
FIELD_PRIME = 2**255 - 19
IDENTITY_BYTES = b"\x01" + b"\x00" * 31


def clamp(seed: bytes) -> int:
    """
    RFC 8032 seed → scalar: SHA-512(seed)[:32], clear the low 3 bits,
    clear bit 255, set bit 254, little-endian.
    """
    with secure_buffer(hashlib.sha512(seed).digest()[:32]) as a:
        a[0] &= 248
        a[31] &= 127
        a[31] |= 64
        return int.from_bytes(a, "little")


class Ed25519Point(CurvePoint):
    """Point on edwards25519 in the prime-order subgroup, or the identity."""

    __slots__ = ("_b",)

    def __init__(self, data: bytes) -> None:
        self._b = data

    @classmethod
    def identity(cls) -> Ed25519Point:
        return cls(IDENTITY_BYTES)

    @classmethod
    def from_secret(cls, k: int) -> Ed25519Point:
        """Compute *k · G* without clamping *k*."""
        k %= ORDER
        if k == 0:
            return cls.identity()
        return cls(nacl.bindings.crypto_scalarmult_ed25519_base_noclamp(
            k.to_bytes(SCALAR_BYTES, "little")))

    def to_bytes(self) -> bytes:
        if self.is_identity():
            raise InvalidCurvePoint("the identity has no point encoding here")
        return self._b

    def is_identity(self) -> bool:
        return self._b == IDENTITY_BYTES

    # group operations -------------------------------------------------------
    def _smul(self, k: int) -> Ed25519Point:
        k %= ORDER
        if self.is_identity() or k == 0:
            return Ed25519Point.identity()
        return Ed25519Point(nacl.bindings.crypto_scalarmult_ed25519_noclamp(
            k.to_bytes(SCALAR_BYTES, "little"), self._b))

    def __neg__(self) -> Ed25519Point:
        if self.is_identity():
            return self
        raw = bytearray(self._b)
        raw[31] ^= 0x80           # flip the sign of x
        return Ed25519Point(bytes(raw))

    def __add__(self, o: CurvePoint) -> Ed25519Point:
        if not isinstance(o, Ed25519Point):
            return NotImplemented
        if self.is_identity():
            return o
        if o.is_identity():
            return self
        return Ed25519Point(nacl.bindings.crypto_core_ed25519_add(self._b, o._b))

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Ed25519Point):
            return False
        return self._b == o._b

    def __hash__(self) -> int:
        return hash(self._b)

    def __repr__(self) -> str:
        if self.is_identity():
            return "Ed25519Point(∞)"
        return f"Ed25519Point(0x{self._b.hex()[:16]}…)"


class Ed25519Backend(CurveBackend):
    """Twisted-Edwards family used for the non-EVM chains."""

    name = CURVE_ED25519
    order = ORDER
    point_bytes = ED25519_POINT_BYTES
    byteorder = "little"

    def __init__(self) -> None:
        self._g = Ed25519Point.from_secret(1)

    @property
    def generator(self) -> Ed25519Point:
        return self._g

    def identity(self) -> Ed25519Point:
        return Ed25519Point.identity()

    def base_mul(self, k: int) -> Ed25519Point:
        return Ed25519Point.from_secret(k)

    def decode_point(self, data: bytes, field: str = "point") -> Ed25519Point:
        self._check_point_length(data, field)
        try:
            valid = nacl.bindings.crypto_core_ed25519_is_valid_point(bytes(data))
        except nacl.exceptions.CryptoError:
            valid = False
        if not valid:
            raise InvalidCurvePoint(
                f"{field} is not a prime-order point on ed25519", field=field,
            )
        return Ed25519Point(bytes(data))

    def generator_candidate(self, digest: bytes) -> Optional[Ed25519Point]:
        raw = bytearray(digest)
        raw[31] &= 0x7F           # fixed sign bit
        if not nacl.bindings.crypto_core_ed25519_is_valid_point(bytes(raw)):
            return None
        return Ed25519Point(bytes(raw))

    def scalar_from_private(self, private_key: bytes, field: str = "private_key") -> int:
        """A private key here is a 32-byte seed; clamp it, then reduce."""
        if not isinstance(private_key, (bytes, bytearray)):
            raise InvalidEncoding(f"{field} must be bytes", field=field)
        if len(private_key) != SCALAR_BYTES:
            raise InvalidEncoding(
                f"{field} must be {SCALAR_BYTES} bytes, got {len(private_key)}",
                field=field,
            )
        return clamp(bytes(private_key)) % ORDER

    def random_private_key(self) -> bytes:
        return secrets.token_bytes(SCALAR_BYTES)


ED25519 = Ed25519Backend()
