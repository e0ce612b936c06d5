"""
Hierarchical viewing keys and selective disclosure.

A viewing key is a 32-byte symmetric secret with a path (``m/0``,
``m/0/auditor/2024``, …).  Child keys come from HMAC-SHA512 keyed with the
parent key, so a child reveals nothing about its parent or siblings.

Records are encrypted with XChaCha20-Poly1305 under a per-key
encryption key derived by HKDF-SHA256:

    k_enc = HKDF(ikm = key, salt = "SIP-VIEWING-KEY-ENCRYPTION-V1",
                 info = path, L = 32)

Each ciphertext carries SHA-256(key) so a holder can route records to
the right key without attempting decryption.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import math
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

import nacl.bindings
import nacl.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .constants import (
    DEFAULT_VIEWING_PATH,
    RECORD_TYPE_MAPPING,
    RECORD_TYPE_TRANSACTION,
    VIEWING_KDF_SALT,
    VIEWING_KEY_BYTES,
    XCHACHA_NONCE_BYTES,
)
from .encoding import from_hex, to_hex
from .errors import DecryptionFailed, InvalidEncoding, KeyMismatch
from .hash import key_hash
from .memory import secure_buffer, secure_wipe

logger = logging.getLogger(__name__)


# ── data types ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ViewingKey:
    """Symmetric disclosure key, its hierarchical path and public hash."""

    key: bytes
    path: str
    hash: bytes

    @classmethod
    def from_bytes(cls, key: bytes, path: str = DEFAULT_VIEWING_PATH) -> ViewingKey:
        if not isinstance(key, (bytes, bytearray)) or len(key) != VIEWING_KEY_BYTES:
            raise InvalidEncoding(
                f"viewing key must be {VIEWING_KEY_BYTES} bytes", field="key",
            )
        _check_path(path)
        return cls(key=bytes(key), path=path, hash=key_hash(key))

    def to_dict(self) -> Dict[str, str]:
        return {"key": to_hex(self.key), "path": self.path, "hash": to_hex(self.hash)}

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> ViewingKey:
        try:
            key = from_hex(data["key"], field="key", length=VIEWING_KEY_BYTES)
            path = data["path"]
        except (KeyError, TypeError):
            raise InvalidEncoding("viewing key record is incomplete", field="key") from None
        vk = cls.from_bytes(key, path)
        if "hash" in data and from_hex(data["hash"], field="hash") != vk.hash:
            raise InvalidEncoding("hash does not match key bytes", field="hash")
        return vk

    def __repr__(self) -> str:
        return f"ViewingKey(path={self.path!r}, hash={to_hex(self.hash)}, key=<redacted>)"


@dataclass(frozen=True)
class EncryptedRecord:
    """
    XChaCha20-Poly1305 ciphertext (tag included), nonce and key hash.

    ``record_type`` says whether the plaintext decrypts to a plain mapping
    or a :class:`TransactionRecord`; it is authenticated with the
    ciphertext.
    """

    ciphertext: bytes
    nonce: bytes
    key_hash: bytes
    record_type: str = RECORD_TYPE_MAPPING

    def to_dict(self) -> Dict[str, str]:
        return {
            "ciphertext": to_hex(self.ciphertext),
            "nonce": to_hex(self.nonce),
            "viewingKeyHash": to_hex(self.key_hash),
            "recordType": self.record_type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> EncryptedRecord:
        try:
            ciphertext, nonce, kh = data["ciphertext"], data["nonce"], data["viewingKeyHash"]
            record_type = data.get("recordType", RECORD_TYPE_MAPPING)
        except (KeyError, TypeError, AttributeError):
            raise InvalidEncoding(
                "encrypted record is incomplete", field="encrypted_record",
            ) from None
        _check_record_type(record_type)
        return cls(
            ciphertext=from_hex(ciphertext, field="ciphertext"),
            nonce=from_hex(nonce, field="nonce", length=XCHACHA_NONCE_BYTES),
            key_hash=from_hex(kh, field="viewingKeyHash", length=32),
            record_type=record_type,
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Transaction metadata disclosed to viewing-key holders."""

    sender: str
    recipient: str
    amount: str
    timestamp: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sender": self.sender,
            "recipient": self.recipient,
            "amount": self.amount,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TransactionRecord:
        try:
            return cls(
                sender=str(data["sender"]),
                recipient=str(data["recipient"]),
                amount=str(data["amount"]),
                timestamp=int(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError):
            raise InvalidEncoding("not a transaction record", field="record") from None


RecordLike = Union[TransactionRecord, Mapping[str, Any]]
_RECORD_TYPES = (RECORD_TYPE_MAPPING, RECORD_TYPE_TRANSACTION)


# ── helpers ─────────────────────────────────────────────────────────────

def _check_path(path: str) -> None:
    if not isinstance(path, str) or not path:
        raise InvalidEncoding("path must be a non-empty string", field="path")
    if any(not part for part in path.split("/")):
        raise InvalidEncoding(f"path {path!r} has an empty segment", field="path")


def _check_key(viewing_key: ViewingKey) -> None:
    if not isinstance(viewing_key, ViewingKey):
        raise InvalidEncoding("expected a ViewingKey", field="viewing_key")
    if len(viewing_key.key) != VIEWING_KEY_BYTES:
        raise InvalidEncoding(
            f"viewing key must be {VIEWING_KEY_BYTES} bytes", field="viewing_key",
        )


def _check_record_type(record_type: Any) -> None:
    if record_type not in _RECORD_TYPES:
        raise InvalidEncoding(
            f"unknown record type {record_type!r}", field="record_type",
        )


def _check_json(value: Any) -> None:
    """Reject anything that would not come back unchanged from JSON."""
    if value is None or isinstance(value, (bool, int, str)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidEncoding("record holds a non-finite number", field="record")
        return
    if isinstance(value, list):
        for item in value:
            _check_json(item)
        return
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise InvalidEncoding(
                    f"record key {k!r} is not a string", field="record",
                )
            _check_json(v)
        return
    raise InvalidEncoding(
        f"record holds a {type(value).__name__}, which JSON does not round-trip",
        field="record",
    )


def _serialize(record: RecordLike) -> Tuple[bytes, str]:
    """Canonical JSON of *record* and its record type."""
    if isinstance(record, TransactionRecord):
        if TransactionRecord.from_dict(record.as_dict()) != record:
            raise InvalidEncoding(
                "transaction record fields must be str, str, str, int", field="record",
            )
        record, record_type = record.as_dict(), RECORD_TYPE_TRANSACTION
    elif isinstance(record, Mapping):
        record, record_type = dict(record), RECORD_TYPE_MAPPING
    else:
        raise InvalidEncoding("record must be a mapping", field="record")
    _check_json(record)
    plaintext = json.dumps(
        record, sort_keys=True, separators=(",", ":"), allow_nan=False,
    ).encode("utf-8")
    return plaintext, record_type


def _associated_data(kh: bytes, record_type: str) -> bytes:
    # plain mappings keep the bare key hash
    if record_type == RECORD_TYPE_MAPPING:
        return kh
    return kh + b":" + record_type.encode("ascii")


def _encryption_key(viewing_key: ViewingKey) -> bytearray:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=VIEWING_KDF_SALT,
        info=viewing_key.path.encode("utf-8"),
    )
    return bytearray(hkdf.derive(viewing_key.key))


# ── key hierarchy ───────────────────────────────────────────────────────

def generate_master_key(path: str = DEFAULT_VIEWING_PATH) -> ViewingKey:
    """Fresh 32-byte master key at *path*."""
    _check_path(path)
    with secure_buffer(VIEWING_KEY_BYTES) as buf:
        return ViewingKey.from_bytes(bytes(buf), path)


def derive_child(parent: ViewingKey, segment: str) -> ViewingKey:
    """
    Child key = HMAC-SHA512(parent.key, segment)[:32] at
    ``parent.path + "/" + segment``.

    *segment* may itself contain ``/`` (``"auditor/2024"``); it is used
    verbatim as the HMAC message.
    """
    _check_key(parent)
    if not isinstance(segment, str) or not segment:
        raise InvalidEncoding("segment must be a non-empty string", field="segment")
    if any(not part for part in segment.split("/")):
        raise InvalidEncoding(f"segment {segment!r} has an empty part", field="segment")

    mac = hmac.new(parent.key, segment.encode("utf-8"), hashlib.sha512)
    with secure_buffer(mac.digest()) as digest:
        return ViewingKey.from_bytes(bytes(digest[:VIEWING_KEY_BYTES]), f"{parent.path}/{segment}")


def key_matches(record: EncryptedRecord, viewing_key: ViewingKey) -> bool:
    """Constant-time check of a record's key hash against *viewing_key*."""
    return hmac.compare_digest(record.key_hash, key_hash(viewing_key.key))


# ── selective disclosure ────────────────────────────────────────────────

def encrypt_for_viewing(record: RecordLike, viewing_key: ViewingKey) -> EncryptedRecord:
    """
    Encrypt *record* so that holders of *viewing_key* can read it.

    Only JSON-shaped records are accepted: string keys at every depth,
    lists rather than tuples, finite numbers.  Anything else raises
    ``InvalidEncoding`` instead of coming back altered.
    """
    _check_key(viewing_key)
    plaintext, record_type = _serialize(record)
    kh = key_hash(viewing_key.key)
    nonce = secrets.token_bytes(XCHACHA_NONCE_BYTES)

    enc_key = _encryption_key(viewing_key)
    try:
        ciphertext = nacl.bindings.crypto_aead_xchacha20poly1305_ietf_encrypt(
            plaintext, _associated_data(kh, record_type), nonce, bytes(enc_key),
        )
    finally:
        secure_wipe(enc_key)
    logger.debug(
        "encrypted %d-byte %s record for key path %s",
        len(plaintext), record_type, viewing_key.path,
    )
    return EncryptedRecord(
        ciphertext=ciphertext, nonce=nonce, key_hash=kh, record_type=record_type,
    )


def decrypt_with_viewing(
    record: EncryptedRecord,
    viewing_key: ViewingKey,
) -> Union[TransactionRecord, Dict[str, Any]]:
    """
    Decrypt a record disclosed to *viewing_key*.

    Returns a :class:`TransactionRecord` when one was encrypted, otherwise
    the decoded mapping.  Raises ``KeyMismatch`` before any decryption
    when the attached key hash does not belong to *viewing_key*, and a
    bare ``DecryptionFailed`` for every authentication or decoding failure
    after that.
    """
    _check_key(viewing_key)
    if not isinstance(record, EncryptedRecord):
        raise InvalidEncoding("expected an EncryptedRecord", field="encrypted_record")
    _check_record_type(record.record_type)
    if len(record.nonce) != XCHACHA_NONCE_BYTES:
        raise InvalidEncoding(
            f"nonce must be {XCHACHA_NONCE_BYTES} bytes", field="nonce",
        )
    if not key_matches(record, viewing_key):
        raise KeyMismatch(
            "record was not encrypted for this viewing key", field="viewing_key",
        )

    enc_key = _encryption_key(viewing_key)
    try:
        plaintext = nacl.bindings.crypto_aead_xchacha20poly1305_ietf_decrypt(
            record.ciphertext,
            _associated_data(record.key_hash, record.record_type),
            record.nonce,
            bytes(enc_key),
        )
        data = json.loads(plaintext.decode("utf-8"))
    except (nacl.exceptions.CryptoError, UnicodeDecodeError, ValueError):
        raise DecryptionFailed() from None
    finally:
        secure_wipe(enc_key)
    if not isinstance(data, dict):
        raise DecryptionFailed()
    if record.record_type == RECORD_TYPE_TRANSACTION:
        try:
            return TransactionRecord.from_dict(data)
        except InvalidEncoding:
            raise DecryptionFailed() from None
    return data
