"""
Dual-key stealth addresses (DKSAP) on either curve family.

A recipient publishes a meta-address (K_spend, K_view) once.  For every
payment the sender derives a fresh one-time address that only the
recipient can recognise and spend from:

    sender                                recipient
    ------                                ---------
    r  ← random,  R = r·G
    S  = r·K_spend                        S' = k_spend·R   (= S)
    d  = SHA-256(S)                       d' = SHA-256(S')
    h  = d mod n,  tag = d[0]             h' = d' mod n
    P  = K_view + h·G                     p  = k_view + h'  (mod n),  p·G = P

Only (P, R, tag) are published.  The view tag lets a scanner reject
about 255 out of 256 foreign announcements after a single scalar
multiplication.

ed25519 pitfall: *p* is a raw scalar, not a seed.  Its public key is
``p·G`` computed directly; running it through the RFC 8032 seed
procedure produces an unrelated key.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple, Union

from .chains import chain_address, get_backend
from .constants import META_ADDRESS_SCHEME, SCALAR_BYTES
from .curve import CurveBackend, CurvePoint
from .encoding import BytesLike, coerce_bytes, from_hex, to_hex
from .errors import InvalidEncoding, KeyMismatch
from .hash import hash_shared_secret, view_tag as _view_tag
from .memory import secure_buffer

logger = logging.getLogger(__name__)


# ── data types ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MetaAddress:
    """Long-lived recipient identity: two public points and a chain tag."""

    spending_key: bytes
    viewing_key: bytes
    chain: str

    def encode(self) -> str:
        return encode_meta_address(self)

    @classmethod
    def decode(cls, text: str) -> MetaAddress:
        return decode_meta_address(text)

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class GeneratedMetaAddress:
    """A fresh meta-address together with the two private keys behind it."""

    meta_address: MetaAddress
    spending_private_key: bytes
    viewing_private_key: bytes

    def __repr__(self) -> str:
        return (
            f"GeneratedMetaAddress(meta_address={self.meta_address.encode()}, "
            "spending_private_key=<redacted>, viewing_private_key=<redacted>)"
        )


@dataclass(frozen=True)
class StealthAddress:
    """One-time address announced to the settlement layer."""

    address: bytes
    ephemeral_public_key: bytes
    view_tag: int
    chain: str

    def to_dict(self) -> Dict[str, Union[str, int]]:
        return {
            "address": to_hex(self.address),
            "ephemeralPublicKey": to_hex(self.ephemeral_public_key),
            "viewTag": self.view_tag,
            "chain": self.chain,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Union[str, int]]) -> StealthAddress:
        try:
            address = data["address"]
            ephemeral = data["ephemeralPublicKey"]
            tag = data["viewTag"]
            chain = data["chain"]
        except (KeyError, TypeError) as exc:
            raise InvalidEncoding(
                f"stealth address record missing {exc}", field="stealth_address",
            ) from None
        return cls(
            address=from_hex(address, field="address"),
            ephemeral_public_key=from_hex(ephemeral, field="ephemeral_public_key"),
            view_tag=tag,  # type: ignore[arg-type]
            chain=chain,  # type: ignore[arg-type]
        )


@dataclass
class ScanReport:
    """Outcome of scanning a batch of announcements."""

    scanned: int = 0
    full_checks: int = 0
    matches: List[StealthAddress] = field(default_factory=list)


MetaAddressLike = Union[MetaAddress, str]


# ── meta-address text form ──────────────────────────────────────────────

def encode_meta_address(meta: MetaAddress) -> str:
    """``sip:<chain>:0x<spendingKey>:0x<viewingKey>``."""
    _validate_meta(meta)
    return ":".join((
        META_ADDRESS_SCHEME,
        meta.chain,
        to_hex(meta.spending_key),
        to_hex(meta.viewing_key),
    ))


def decode_meta_address(text: str) -> MetaAddress:
    """Parse and fully validate the text form of a meta-address."""
    if not isinstance(text, str):
        raise InvalidEncoding("meta-address must be a string", field="meta_address")
    parts = text.split(":")
    if len(parts) != 4 or parts[0] != META_ADDRESS_SCHEME:
        raise InvalidEncoding(
            "meta-address must look like sip:<chain>:0x<spend>:0x<view>",
            field="meta_address",
        )
    _, chain, spend_hex, view_hex = parts
    backend = get_backend(chain)
    meta = MetaAddress(
        spending_key=from_hex(spend_hex, field="spending_key", length=backend.point_bytes),
        viewing_key=from_hex(view_hex, field="viewing_key", length=backend.point_bytes),
        chain=chain,
    )
    _validate_meta(meta)
    return meta


# ── validation ──────────────────────────────────────────────────────────

def _validate_meta(meta: MetaAddress) -> Tuple[CurveBackend, CurvePoint, CurvePoint]:
    if not isinstance(meta, MetaAddress):
        raise InvalidEncoding("expected a MetaAddress", field="meta_address")
    backend = get_backend(meta.chain)
    k_spend = backend.decode_point(meta.spending_key, field="spending_key")
    k_view = backend.decode_point(meta.viewing_key, field="viewing_key")
    return backend, k_spend, k_view


def _validate_stealth(stealth: StealthAddress) -> Tuple[CurveBackend, CurvePoint, CurvePoint]:
    if not isinstance(stealth, StealthAddress):
        raise InvalidEncoding("expected a StealthAddress", field="stealth_address")
    backend = get_backend(stealth.chain)
    tag = stealth.view_tag
    if not isinstance(tag, int) or isinstance(tag, bool) or not 0 <= tag <= 0xFF:
        raise InvalidEncoding("view_tag must be an int in 0..255", field="view_tag")
    P = backend.decode_point(stealth.address, field="address")
    R = backend.decode_point(stealth.ephemeral_public_key, field="ephemeral_public_key")
    return backend, P, R


def _private_scalar(backend: CurveBackend, key: BytesLike, field: str) -> int:
    raw = coerce_bytes(key, field=field, length=SCALAR_BYTES)
    with secure_buffer(raw) as buf:
        return backend.scalar_from_private(buf, field=field)


def _shared_digest(backend: CurveBackend, k: int, point: CurvePoint) -> bytes:
    S = backend.mul(k, point)
    return hash_shared_secret(backend.encode_point(S))


# ── sender side ─────────────────────────────────────────────────────────

def generate_meta_address(chain: str) -> GeneratedMetaAddress:
    """Draw independent spending and viewing keys for *chain*."""
    backend = get_backend(chain)
    spending = backend.random_private_key()
    viewing = backend.random_private_key()
    meta = MetaAddress(
        spending_key=backend.encode_point(backend.public_key_from_private(spending)),
        viewing_key=backend.encode_point(backend.public_key_from_private(viewing)),
        chain=chain,
    )
    return GeneratedMetaAddress(
        meta_address=meta,
        spending_private_key=spending,
        viewing_private_key=viewing,
    )


def derive_address(meta: MetaAddressLike) -> StealthAddress:
    """
    Derive a fresh one-time address for the owner of *meta*.

    The ephemeral private key and the shared secret stay inside this call;
    only (P, R, view tag) are returned.
    """
    if isinstance(meta, str):
        meta = decode_meta_address(meta)
    backend, k_spend, k_view = _validate_meta(meta)
    chain = meta.chain

    with secure_buffer(backend.random_private_key()) as eph:
        r = backend.scalar_from_private(eph, field="ephemeral_key")
        R = backend.base_mul(r)
        digest = _shared_digest(backend, r, k_spend)
    h = backend.reduce(digest)
    P = k_view + backend.base_mul(h)

    stealth = StealthAddress(
        address=backend.encode_point(P),
        ephemeral_public_key=backend.encode_point(R),
        view_tag=_view_tag(digest),
        chain=chain,
    )
    logger.debug(
        "derived stealth address on %s (view tag 0x%02x)", chain, stealth.view_tag,
    )
    return stealth


# ── recipient side ──────────────────────────────────────────────────────

def recover_private_key(
    stealth: StealthAddress,
    spending_private_key: BytesLike,
    viewing_private_key: BytesLike,
) -> bytes:
    """
    Recover the one-time private scalar p = k_view + h (mod n).

    Returned as 32 bytes in the family's byte order.  On ed25519 this is a
    scalar, not a seed; use :func:`public_key_from_scalar` for its public
    key.  Raises ``KeyMismatch`` when the keys do not own *stealth*.
    """
    backend, P, R = _validate_stealth(stealth)
    k_spend = _private_scalar(backend, spending_private_key, "spending_private_key")
    k_view = _private_scalar(backend, viewing_private_key, "viewing_private_key")

    h = backend.reduce(_shared_digest(backend, k_spend, R))
    p = (k_view + h) % backend.order
    if backend.base_mul(p) != P:
        raise KeyMismatch(
            "keys do not own this stealth address", field="stealth_address",
        )
    return backend.scalar_to_bytes(p)


def public_key_from_scalar(chain: str, scalar: BytesLike) -> bytes:
    """Encoded public point ``k·G`` of a raw scalar, with no seed hashing."""
    backend = get_backend(chain)
    raw = coerce_bytes(scalar, field="scalar", length=SCALAR_BYTES)
    with secure_buffer(raw) as buf:
        k = backend.scalar_from_bytes(bytes(buf), field="scalar")
    return backend.encode_point(backend.base_mul(k))


def check_view_tag(stealth: StealthAddress, spending_private_key: BytesLike) -> bool:
    """Cheap pre-filter: one scalar multiplication and a hash."""
    backend, _, R = _validate_stealth(stealth)
    k_spend = _private_scalar(backend, spending_private_key, "spending_private_key")
    return _view_tag(_shared_digest(backend, k_spend, R)) == stealth.view_tag


def _scan_one(
    backend: CurveBackend,
    stealth: StealthAddress,
    P: CurvePoint,
    R: CurvePoint,
    k_spend: int,
    K_view: CurvePoint,
    report: ScanReport,
) -> bool:
    digest = _shared_digest(backend, k_spend, R)
    if _view_tag(digest) != stealth.view_tag:
        return False
    report.full_checks += 1
    expected = K_view + backend.base_mul(backend.reduce(digest))
    return hmac.compare_digest(backend.encode_point(expected), backend.encode_point(P))


def scan(
    candidate: StealthAddress,
    spending_private_key: BytesLike,
    viewing_private_key: BytesLike,
) -> bool:
    """True when *candidate* was derived from this recipient's meta-address."""
    report = scan_many([candidate], spending_private_key, viewing_private_key)
    return bool(report.matches)


def scan_many(
    candidates: Iterable[StealthAddress],
    spending_private_key: BytesLike,
    viewing_private_key: BytesLike,
) -> ScanReport:
    """
    Scan announcements, running the full recomputation only for those
    whose view tag matches.

    All candidates must belong to the same curve family as the keys, i.e.
    share the first candidate's chain family.
    """
    candidates = list(candidates)
    report = ScanReport()
    if not candidates:
        return report

    checked = [_validate_stealth(c) for c in candidates]
    backend = checked[0][0]
    for c, (b, _, _) in zip(candidates, checked):
        if b is not backend:
            raise InvalidEncoding(
                f"candidate on {c.chain} mixes curve families", field="chain",
            )

    k_spend = _private_scalar(backend, spending_private_key, "spending_private_key")
    k_view = _private_scalar(backend, viewing_private_key, "viewing_private_key")
    K_view = backend.base_mul(k_view)

    for stealth, (_, P, R) in zip(candidates, checked):
        report.scanned += 1
        if _scan_one(backend, stealth, P, R, k_spend, K_view, report):
            report.matches.append(stealth)

    logger.debug(
        "scanned %d announcements on %s: %d full checks, %d matches",
        report.scanned, backend.name, report.full_checks, len(report.matches),
    )
    return report


def to_chain_address(stealth: StealthAddress) -> str:
    """Account-style rendering of the one-time address on its chain."""
    return chain_address(stealth.chain, stealth.address)
