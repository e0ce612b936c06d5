"""
Pedersen commitments over a pluggable curve backend.

A Pedersen commitment to *v* with blinding *r* is:

    C = v·G + r·H

where G is the curve's base point and H is a second generator whose
discrete log relative to G nobody knows (derived by a public NUMS search,
see :func:`derive_generators`).

Security:
- Perfectly hiding — C reveals no information about *v* as long as *r*
  is uniform and non-zero.
- Computationally binding — opening C to (v', r') ≠ (v, r) requires
  log_G(H).
- Additively homomorphic — C(v1, r1) + C(v2, r2) = C(v1 + v2, r1 + r2).

The generator constants and the domain string are shared with the
external proving circuits; they must not change.

References
----------
- Pedersen (1991). "Non-Interactive and Information-Theoretic Secure
  Verifiable Secret Sharing."  CRYPTO 1991.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Union

from .chains import backend_by_name
from .constants import (
    CURVE_SECP256K1,
    GENERATOR_SEARCH_LIMIT,
    PEDERSEN_H_DOMAIN,
    SCALAR_BYTES,
)
from .curve import CurveBackend, CurvePoint
from .encoding import BytesLike, coerce_bytes, to_hex
from .errors import InvalidScalar
from .hash import generator_candidate, hash_identifier
from .memory import secure_buffer
from .proofs import CommitmentWitness

logger = logging.getLogger(__name__)


# ── generators ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GeneratorSet:
    """Immutable (G, H) pair plus the search parameters that produced H."""

    backend: CurveBackend
    G: CurvePoint
    H: CurvePoint
    domain: bytes
    counter: int

    @property
    def zero_commitment(self) -> bytes:
        """
        Sentinel standing for the identity point: all-zero bytes of the
        family's point width.  No valid compressed point has this form.
        """
        return b"\x00" * self.backend.point_bytes


def derive_generators(
    backend: CurveBackend,
    domain: bytes = PEDERSEN_H_DOMAIN,
) -> GeneratorSet:
    """
    Find H by try-and-increment (NUMS — Nothing Up My Sleeve).

    For counter = 0, 1, …, 255: digest = SHA-256(domain ‖ ":" ‖ counter),
    read as a fixed-parity compressed point.  The first candidate that
    decodes to a valid point other than the identity and G is H.  Any
    implementation following the same steps lands on the same point.
    """
    G = backend.generator
    for counter in range(GENERATOR_SEARCH_LIMIT):
        candidate = backend.generator_candidate(generator_candidate(domain, counter))
        if candidate is None or candidate.is_identity() or candidate == G:
            continue
        logger.debug(
            "derived Pedersen H on %s at counter %d", backend.name, counter,
        )
        return GeneratorSet(
            backend=backend, G=G, H=candidate, domain=domain, counter=counter,
        )
    raise RuntimeError(f"failed to derive NUMS generator H on {backend.name}")


@lru_cache(maxsize=None)
def default_generators(curve: str = CURVE_SECP256K1) -> GeneratorSet:
    """Protocol generators for *curve*, computed once on first use."""
    return derive_generators(backend_by_name(curve))


# ── commitments ─────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Commitment:
    """
    Public commitment point plus the secret blinding factor.

    ``point`` may be published; ``blinding`` must stay with the committer,
    who needs it to open or combine the commitment later.
    """

    point: bytes
    blinding: bytes

    def hex(self) -> str:
        return to_hex(self.point)

    def __repr__(self) -> str:
        return f"Commitment(point={self.hex()}, blinding=<redacted>)"


CommitmentLike = Union[Commitment, BytesLike]


class PedersenEngine:
    """
    Commit, open and combine Pedersen commitments.

    Parameters
    ----------
    generators : GeneratorSet, optional
        Generator configuration; defaults to the secp256k1 protocol set.
    """

    def __init__(self, generators: Optional[GeneratorSet] = None) -> None:
        self._gens = generators if generators is not None else default_generators()
        self._curve = self._gens.backend

    @property
    def generators(self) -> GeneratorSet:
        return self._gens

    @property
    def zero_commitment(self) -> bytes:
        return self._gens.zero_commitment

    # validation -------------------------------------------------------------
    def _check_value(self, value: int) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidScalar("value must be an integer", field="value")
        if not 0 <= value < self._curve.order:
            raise InvalidScalar(
                "value must satisfy 0 <= value < group order", field="value",
            )
        return value

    def _check_blinding(self, blinding: BytesLike, field: str = "blinding") -> int:
        raw = coerce_bytes(blinding, field=field, length=SCALAR_BYTES)
        with secure_buffer(raw) as buf:
            r = self._curve.reduce(bytes(buf))
        if r == 0:
            raise InvalidScalar(f"{field} must be non-zero", field=field)
        return r

    def _decode(self, commitment: CommitmentLike, field: str) -> CurvePoint:
        if isinstance(commitment, Commitment):
            commitment = commitment.point
        raw = coerce_bytes(commitment, field=field)
        if raw == self.zero_commitment:
            return self._curve.identity()
        return self._curve.decode_point(raw, field=field)

    def _encode(self, point: CurvePoint) -> bytes:
        if point.is_identity():
            return self.zero_commitment
        return self._curve.encode_point(point)

    def _compute(self, value: int, r: int) -> CurvePoint:
        if value == 0:
            return r * self._gens.H
        return (value * self._gens.G) + (r * self._gens.H)

    # public API -------------------------------------------------------------
    def generate_blinding(self) -> bytes:
        """Fresh uniform, non-zero blinding factor."""
        return self._curve.scalar_to_bytes(self._curve.random_scalar())

    def commit(self, value: int, blinding: Optional[BytesLike] = None) -> Commitment:
        """
        Commit(v, r) → C = v·G + r·H.

        A missing *blinding* is drawn from the OS CSPRNG.  Supplied blinding
        is reduced modulo the group order; a zero result is rejected since
        it leaves v·G openable by anyone.
        """
        self._check_value(value)
        if blinding is None:
            r = self._curve.random_scalar()
        else:
            r = self._check_blinding(blinding)
        C = self._compute(value, r)
        return Commitment(point=self._encode(C), blinding=self._curve.scalar_to_bytes(r))

    def commit_identifier(
        self,
        identifier: Any,
        blinding: Optional[BytesLike] = None,
    ) -> Commitment:
        """Commit to a sender identifier (address string or bytes)."""
        if not isinstance(identifier, (str, bytes, bytearray)) or not identifier:
            raise InvalidScalar(
                "identifier must be non-empty text or bytes", field="identifier",
            )
        return self.commit(self.identifier_scalar(identifier), blinding)

    def identifier_scalar(self, identifier: Any) -> int:
        return self._curve.reduce(hash_identifier(identifier))

    def verify_opening(
        self,
        commitment: CommitmentLike,
        value: int,
        blinding: BytesLike,
    ) -> bool:
        """
        Check that *commitment* opens to (value, blinding), as points.

        A blinding that reduces to zero raises ``InvalidScalar``, as in
        :meth:`commit`; otherwise anyone could open the bare point v·G.
        """
        self._check_value(value)
        r = self._check_blinding(blinding)
        point = self._decode(commitment, "commitment")
        return point == self._compute(value, r)

    def add_commitments(self, c1: CommitmentLike, c2: CommitmentLike) -> bytes:
        """C1 + C2, committing to v1 + v2 under r1 + r2."""
        p1 = self._decode(c1, "c1")
        p2 = self._decode(c2, "c2")
        return self._encode(p1 + p2)

    def subtract_commitments(self, c1: CommitmentLike, c2: CommitmentLike) -> bytes:
        """
        C1 − C2, committing to v1 − v2 under r1 − r2.

        Equal openings give the identity, returned as the zero-commitment
        sentinel.
        """
        p1 = self._decode(c1, "c1")
        p2 = self._decode(c2, "c2")
        return self._encode(p1 - p2)

    def add_blindings(self, b1: BytesLike, b2: BytesLike) -> bytes:
        r1 = self._curve.reduce(coerce_bytes(b1, field="b1", length=SCALAR_BYTES))
        r2 = self._curve.reduce(coerce_bytes(b2, field="b2", length=SCALAR_BYTES))
        return self._curve.scalar_to_bytes(r1 + r2)

    def subtract_blindings(self, b1: BytesLike, b2: BytesLike) -> bytes:
        r1 = self._curve.reduce(coerce_bytes(b1, field="b1", length=SCALAR_BYTES))
        r2 = self._curve.reduce(coerce_bytes(b2, field="b2", length=SCALAR_BYTES))
        return self._curve.scalar_to_bytes(r1 - r2)

    def witness(self, commitment: Commitment, value: int) -> CommitmentWitness:
        """
        Package an opening for a proof provider: the commitment point as
        the public input, (value, blinding) as the private witness.
        """
        if not self.verify_opening(commitment, value, commitment.blinding):
            raise InvalidScalar(
                "value does not open the commitment", field="value",
            )
        return CommitmentWitness(
            commitment=commitment.point,
            value=value,
            blinding=commitment.blinding,
            curve=self._curve.name,
        )


def commit(value: int, blinding: Optional[BytesLike] = None) -> Commitment:
    """Module-level shortcut using the default secp256k1 generators."""
    return PedersenEngine().commit(value, blinding)


def verify_opening(commitment: CommitmentLike, value: int, blinding: BytesLike) -> bool:
    return PedersenEngine().verify_opening(commitment, value, blinding)
