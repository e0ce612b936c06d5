"""
Protocol constants shared by the privacy primitives.

These values are part of the wire contract with external zero-knowledge
circuits and compliance tooling: changing any of them changes generator
points, derived keys or ciphertext formats.
"""

# ── sizes ───────────────────────────────────────────────────────────────
SCALAR_BYTES = 32
SECP256K1_POINT_BYTES = 33
ED25519_POINT_BYTES = 32
VIEWING_KEY_BYTES = 32
XCHACHA_NONCE_BYTES = 24

# ── domain separators ───────────────────────────────────────────────────
PEDERSEN_H_DOMAIN = b"SIP-PEDERSEN-GENERATOR-H-v1"
GENERATOR_SEARCH_LIMIT = 256
VIEWING_KDF_SALT = b"SIP-VIEWING-KEY-ENCRYPTION-V1"
TAG_IDENTIFIER = b"SIP/v1/identifier"

# ── text encodings ──────────────────────────────────────────────────────
META_ADDRESS_SCHEME = "sip"
DEFAULT_VIEWING_PATH = "m/0"

# payload types of an encrypted record; bound into the AEAD associated data
RECORD_TYPE_MAPPING = "mapping"
RECORD_TYPE_TRANSACTION = "transaction"

# ── curve families ──────────────────────────────────────────────────────
CURVE_SECP256K1 = "secp256k1"
CURVE_ED25519 = "ed25519"

# chain tag → curve family; EVM chains use secp256k1
CHAIN_CURVES = {
    "ethereum": CURVE_SECP256K1,
    "polygon": CURVE_SECP256K1,
    "arbitrum": CURVE_SECP256K1,
    "optimism": CURVE_SECP256K1,
    "base": CURVE_SECP256K1,
    "solana": CURVE_ED25519,
    "near": CURVE_ED25519,
    "aptos": CURVE_ED25519,
    "sui": CURVE_ED25519,
}
