"""
Boundary to external zero-knowledge proof systems.

Circuits and provers live outside this package.  What crosses the
boundary is a :class:`CommitmentWitness`: the commitment point as the
public input and the opening (value, blinding) as the private witness.
The circuit hard-codes the same generators and domain strings as
:mod:`sip_privacy.commitment`, otherwise no proof will ever verify.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List

from .encoding import to_hex


@dataclass(frozen=True)
class CommitmentWitness:
    """Opening of one Pedersen commitment, ready for a prover."""

    commitment: bytes
    value: int
    blinding: bytes
    curve: str

    def public_inputs(self) -> List[str]:
        return [to_hex(self.commitment)]

    def private_inputs(self) -> Dict[str, str]:
        return {"value": str(self.value), "blinding": to_hex(self.blinding)}

    def __repr__(self) -> str:
        return (
            f"CommitmentWitness(commitment={to_hex(self.commitment)}, "
            f"curve={self.curve}, value=<redacted>, blinding=<redacted>)"
        )


class ProofProvider(ABC):
    """
    A proving backend (Noir, Halo2, …) plugged in by the caller.

    ``kind`` names the statement being proven, e.g. ``"funding"`` or
    ``"validity"``; its meaning is defined by the provider.
    """

    @abstractmethod
    def prove(self, kind: str, witness: CommitmentWitness) -> bytes:
        """Return an opaque proof for *witness*."""

    @abstractmethod
    def verify(self, kind: str, public_inputs: List[str], proof: bytes) -> bool:
        """Check *proof* against the public inputs only."""
