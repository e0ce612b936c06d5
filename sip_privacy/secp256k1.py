"""
secp256k1 backend via libsecp256k1.

Every scalar multiplication and point addition is delegated to the C
library ``coincurve``, which wraps Bitcoin Core's libsecp256k1.  Points
use the SEC 1 compressed encoding (33 bytes, 0x02/0x03 parity prefix);
scalars are big-endian and a private key *is* its scalar.

References
----------
- SEC 2 v2 §2.4.1  secp256k1 domain parameters
- SEC 1 v2 §2.3.3  compressed point encoding
"""

from __future__ import annotations

from typing import Optional

from coincurve import PrivateKey as _SK, PublicKey as _PK

from .constants import CURVE_SECP256K1, SCALAR_BYTES, SECP256K1_POINT_BYTES
from .curve import CurveBackend, CurvePoint
from .errors import InvalidCurvePoint, InvalidEncoding, InvalidScalar

# ── secp256k1 constants ─────────────────────────────────────────────────
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F


class Secp256k1Point(CurvePoint):
    """
    Point on secp256k1.

    The identity (point at infinity) is represented by a flag rather than
    a ``coincurve.PublicKey``; libsecp256k1 cannot hold or serialise it.
    """

    __slots__ = ("_pk", "_inf")

    def __init__(self, *, pk: Optional[_PK] = None, infinity: bool = False):
        self._pk: Optional[_PK] = pk
        self._inf: bool = infinity

    # constructors -----------------------------------------------------------
    @classmethod
    def identity(cls) -> Secp256k1Point:
        return cls(infinity=True)

    @classmethod
    def from_secret(cls, k: int) -> Secp256k1Point:
        """Compute *k · G* with the fixed-base path."""
        k %= ORDER
        if k == 0:
            return cls.identity()
        return cls(pk=_SK(k.to_bytes(SCALAR_BYTES, "big")).public_key)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        if self._inf:
            raise InvalidCurvePoint("the identity has no compressed encoding")
        return self._pk.format(compressed=True)  # type: ignore[union-attr]

    def to_bytes_uncompressed(self) -> bytes:
        if self._inf:
            raise InvalidCurvePoint("the identity has no uncompressed encoding")
        return self._pk.format(compressed=False)  # type: ignore[union-attr]

    def is_identity(self) -> bool:
        return self._inf

    # group operations -------------------------------------------------------
    def _smul(self, k: int) -> Secp256k1Point:
        k %= ORDER
        if self._inf or k == 0:
            return Secp256k1Point.identity()
        copy = _PK(self._pk.format())  # type: ignore[union-attr]
        return Secp256k1Point(pk=copy.multiply(k.to_bytes(SCALAR_BYTES, "big")))

    def __neg__(self) -> Secp256k1Point:
        if self._inf:
            return self
        raw = bytearray(self._pk.format(compressed=True))  # type: ignore
        raw[0] ^= 0x01            # 0x02 ↔ 0x03 flip parity
        return Secp256k1Point(pk=_PK(bytes(raw)))

    def __add__(self, o: CurvePoint) -> Secp256k1Point:
        if not isinstance(o, Secp256k1Point):
            return NotImplemented
        if self._inf:
            return o
        if o._inf:
            return self
        # P + (-P) = O; libsecp256k1 refuses to return the identity
        if self._pk.format() == (-o)._pk.format():  # type: ignore
            return Secp256k1Point.identity()
        return Secp256k1Point(pk=_PK.combine_keys(
            [self._pk, o._pk]))  # type: ignore[list-item]

    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Secp256k1Point):
            return False
        if self._inf and o._inf:
            return True
        if self._inf or o._inf:
            return False
        return self._pk.format() == o._pk.format()  # type: ignore

    def __hash__(self) -> int:
        return hash(b"" if self._inf else self.to_bytes())

    def __repr__(self) -> str:
        if self._inf:
            return "Secp256k1Point(∞)"
        return f"Secp256k1Point(0x{self.to_bytes().hex()[:16]}…)"


class Secp256k1Backend(CurveBackend):
    """Weierstrass family used for EVM chains."""

    name = CURVE_SECP256K1
    order = ORDER
    point_bytes = SECP256K1_POINT_BYTES
    byteorder = "big"

    def __init__(self) -> None:
        self._g = Secp256k1Point(pk=_SK(b"\x00" * 31 + b"\x01").public_key)

    @property
    def generator(self) -> Secp256k1Point:
        return self._g

    def identity(self) -> Secp256k1Point:
        return Secp256k1Point.identity()

    def base_mul(self, k: int) -> Secp256k1Point:
        return Secp256k1Point.from_secret(k)

    def decode_point(self, data: bytes, field: str = "point") -> Secp256k1Point:
        self._check_point_length(data, field)
        if data[0] not in (0x02, 0x03):
            raise InvalidCurvePoint(
                f"{field} must use a 0x02/0x03 compressed prefix", field=field,
            )
        try:
            return Secp256k1Point(pk=_PK(bytes(data)))
        except ValueError:
            raise InvalidCurvePoint(
                f"{field} is not a point on secp256k1", field=field,
            ) from None

    def generator_candidate(self, digest: bytes) -> Optional[Secp256k1Point]:
        x = int.from_bytes(digest, "big")
        if x == 0 or x >= FIELD_PRIME:
            return None
        try:
            return Secp256k1Point(pk=_PK(b"\x02" + digest))
        except ValueError:
            return None

    def scalar_from_private(self, private_key: bytes, field: str = "private_key") -> int:
        if not isinstance(private_key, (bytes, bytearray)):
            raise InvalidEncoding(f"{field} must be bytes", field=field)
        k = self.scalar_from_bytes(bytes(private_key), field)
        if k == 0:
            raise InvalidScalar(f"{field} must be non-zero", field=field)
        return k

    def random_private_key(self) -> bytes:
        return self.scalar_to_bytes(self.random_scalar())


SECP256K1 = Secp256k1Backend()
