"""
sip_privacy: privacy primitives for cross-chain transactions.

Hides the three facts a public ledger leaks about a transfer:

- **Recipient** — dual-key stealth addresses on secp256k1 (EVM chains)
  and ed25519 (Solana, NEAR, Aptos, Sui).
- **Amount / sender** — Pedersen commitments with a NUMS second
  generator, additively homomorphic.
- **Selective disclosure** — hierarchical viewing keys and
  XChaCha20-Poly1305 encrypted records for auditors.

Quick start
-----------
::

    from sip_privacy import (
        PedersenEngine, generate_meta_address, derive_address,
        recover_private_key,
    )

    recipient = generate_meta_address("solana")
    stealth = derive_address(recipient.meta_address)
    key = recover_private_key(
        stealth,
        recipient.spending_private_key,
        recipient.viewing_private_key,
    )

    engine = PedersenEngine()
    c1 = engine.commit(1_000_000_000)
    c2 = engine.commit(500_000_000)
    total = engine.add_commitments(c1, c2)
    assert engine.verify_opening(
        total, 1_500_000_000, engine.add_blindings(c1.blinding, c2.blinding),
    )
"""

__version__ = "0.1.0"

# ── errors ──────────────────────────────────────────────────────────────
from .errors import (
    PrivacyError,
    InvalidEncoding,
    InvalidCurvePoint,
    InvalidScalar,
    UnsupportedChain,
    MissingViewingKey,
    KeyMismatch,
    DecryptionFailed,
)

# ── curve backends ──────────────────────────────────────────────────────
from .curve import CurveBackend, CurvePoint
from .secp256k1 import SECP256K1
from .ed25519 import ED25519
from .chains import (
    get_backend,
    supported_chains,
    is_evm_chain,
    chain_address,
)

# ── commitments ─────────────────────────────────────────────────────────
from .commitment import (
    Commitment,
    GeneratorSet,
    PedersenEngine,
    derive_generators,
    default_generators,
)
from .proofs import CommitmentWitness, ProofProvider

# ── stealth addresses ───────────────────────────────────────────────────
from .stealth import (
    MetaAddress,
    GeneratedMetaAddress,
    StealthAddress,
    ScanReport,
    generate_meta_address,
    encode_meta_address,
    decode_meta_address,
    derive_address,
    recover_private_key,
    public_key_from_scalar,
    check_view_tag,
    scan,
    scan_many,
    to_chain_address,
)

# ── viewing keys ────────────────────────────────────────────────────────
from .viewing import (
    ViewingKey,
    EncryptedRecord,
    TransactionRecord,
    generate_master_key,
    derive_child,
    encrypt_for_viewing,
    decrypt_with_viewing,
)

# ── policy ──────────────────────────────────────────────────────────────
from .policy import (
    PrivacyLevel,
    PrivacyConfig,
    get_privacy_config,
    is_valid_privacy_level,
    is_private,
    supports_viewing_key,
    privacy_description,
)

# ── secret handling ─────────────────────────────────────────────────────
from .memory import secure_wipe, secure_buffer, wipe_all

__all__ = [
    "__version__",
    # errors
    "PrivacyError", "InvalidEncoding", "InvalidCurvePoint", "InvalidScalar",
    "UnsupportedChain", "MissingViewingKey", "KeyMismatch", "DecryptionFailed",
    # curves
    "CurveBackend", "CurvePoint", "SECP256K1", "ED25519",
    "get_backend", "supported_chains", "is_evm_chain", "chain_address",
    # commitments
    "Commitment", "GeneratorSet", "PedersenEngine",
    "derive_generators", "default_generators",
    "CommitmentWitness", "ProofProvider",
    # stealth
    "MetaAddress", "GeneratedMetaAddress", "StealthAddress", "ScanReport",
    "generate_meta_address", "encode_meta_address", "decode_meta_address",
    "derive_address", "recover_private_key", "public_key_from_scalar",
    "check_view_tag", "scan", "scan_many", "to_chain_address",
    # viewing keys
    "ViewingKey", "EncryptedRecord", "TransactionRecord",
    "generate_master_key", "derive_child",
    "encrypt_for_viewing", "decrypt_with_viewing",
    # policy
    "PrivacyLevel", "PrivacyConfig", "get_privacy_config",
    "is_valid_privacy_level", "is_private", "supports_viewing_key",
    "privacy_description",
    # memory
    "secure_wipe", "secure_buffer", "wipe_all",
]
