"""
sip_privacy test fixtures
"""

import pytest

from sip_privacy import (
    ED25519,
    SECP256K1,
    PedersenEngine,
    default_generators,
    generate_master_key,
    generate_meta_address,
)

EVM_CHAIN = "ethereum"
EDWARDS_CHAIN = "solana"


@pytest.fixture(params=[SECP256K1, ED25519], ids=["secp256k1", "ed25519"])
def backend(request):
    """Each curve family in turn."""
    return request.param


@pytest.fixture
def engine() -> PedersenEngine:
    """Commitment engine on the default secp256k1 generators."""
    return PedersenEngine()


@pytest.fixture(params=["secp256k1", "ed25519"])
def any_engine(request) -> PedersenEngine:
    """Commitment engine on each curve family."""
    return PedersenEngine(default_generators(request.param))


@pytest.fixture(params=[EVM_CHAIN, EDWARDS_CHAIN, "near"])
def chain(request) -> str:
    return request.param


@pytest.fixture
def recipient(chain):
    return generate_meta_address(chain)


@pytest.fixture
def master_key():
    return generate_master_key()
