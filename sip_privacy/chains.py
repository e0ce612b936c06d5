"""
Chain tag → curve backend lookup.

The table in :data:`sip_privacy.constants.CHAIN_CURVES` is the only place
where chain identifiers are interpreted; everything else asks
:func:`get_backend` for a :class:`~sip_privacy.curve.CurveBackend`.
"""

from __future__ import annotations

from typing import Dict, List

from Crypto.Hash import keccak

from .constants import CHAIN_CURVES, CURVE_ED25519, CURVE_SECP256K1
from .curve import CurveBackend
from .ed25519 import ED25519
from .encoding import to_hex
from .errors import UnsupportedChain
from .secp256k1 import SECP256K1, Secp256k1Point

_BACKENDS: Dict[str, CurveBackend] = {
    CURVE_SECP256K1: SECP256K1,
    CURVE_ED25519: ED25519,
}


def supported_chains() -> List[str]:
    return sorted(CHAIN_CURVES)


def curve_for_chain(chain: str) -> str:
    if not isinstance(chain, str) or chain not in CHAIN_CURVES:
        raise UnsupportedChain(f"unsupported chain {chain!r}", field="chain")
    return CHAIN_CURVES[chain]


def get_backend(chain: str) -> CurveBackend:
    """Backend for *chain*; raises ``UnsupportedChain`` for unknown tags."""
    return _BACKENDS[curve_for_chain(chain)]


def backend_by_name(curve: str) -> CurveBackend:
    try:
        return _BACKENDS[curve]
    except KeyError:
        raise UnsupportedChain(f"unknown curve {curve!r}", field="curve") from None


def is_evm_chain(chain: str) -> bool:
    return curve_for_chain(chain) == CURVE_SECP256K1


def keccak256(data: bytes) -> bytes:
    return keccak.new(digest_bits=256, data=data).digest()


def checksum_address(address20: bytes) -> str:
    """EIP-55 mixed-case rendering of a 20-byte account address."""
    lower = address20.hex()
    digest = keccak256(lower.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(lower)
    )


def evm_address(point: Secp256k1Point) -> str:
    """Account address of a secp256k1 public point: keccak(X ‖ Y)[12:]."""
    raw = point.to_bytes_uncompressed()[1:]
    return checksum_address(keccak256(raw)[12:])


def chain_address(chain: str, point_bytes: bytes) -> str:
    """
    Render an encoded public point as the account form used on *chain*.

    EVM chains get an EIP-55 address.  ed25519 chains get the ``0x`` hex
    of the 32-byte account key; base58 and similar presentation formats
    belong to the wallet adapters.
    """
    backend = get_backend(chain)
    point = backend.decode_point(point_bytes, field="address")
    if backend is SECP256K1:
        return evm_address(point)  # type: ignore[arg-type]
    return to_hex(backend.encode_point(point))
