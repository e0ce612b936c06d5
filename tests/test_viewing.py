"""
Viewing key and selective disclosure tests
"""

import dataclasses
import hashlib
import hmac

import nacl.bindings
import pytest

from sip_privacy import (
    DecryptionFailed,
    EncryptedRecord,
    InvalidEncoding,
    KeyMismatch,
    TransactionRecord,
    ViewingKey,
    decrypt_with_viewing,
    derive_child,
    encrypt_for_viewing,
    generate_master_key,
)
from sip_privacy.viewing import key_matches

RECORD = TransactionRecord(
    sender="0x1234567890abcdef1234567890abcdef12345678",
    recipient="0xabcdefabcdefabcdefabcdefabcdefabcdefabcd",
    amount="1000000000000000000",
    timestamp=1_700_000_000,
)


class TestKeyHierarchy:
    """Master keys and HMAC-SHA512 child derivation."""

    def test_master_key(self, master_key):
        assert len(master_key.key) == 32
        assert master_key.path == "m/0"
        assert generate_master_key().key != master_key.key

    def test_custom_master_path(self):
        assert generate_master_key("m/44").path == "m/44"

    def test_hash_is_over_raw_bytes(self, master_key):
        assert master_key.hash == hashlib.sha256(master_key.key).digest()
        assert master_key.hash != hashlib.sha256(master_key.key.hex().encode()).digest()

    def test_child_derivation(self, master_key):
        child = derive_child(master_key, "auditor")
        expected = hmac.new(master_key.key, b"auditor", hashlib.sha512).digest()[:32]
        assert child.key == expected
        assert child.path == "m/0/auditor"
        assert child.hash == hashlib.sha256(expected).digest()

    def test_multi_level_segment(self, master_key):
        child = derive_child(master_key, "auditor/2024")
        assert child.path == "m/0/auditor/2024"
        assert child.key == hmac.new(master_key.key, b"auditor/2024", hashlib.sha512).digest()[:32]

    def test_deterministic(self, master_key):
        assert derive_child(master_key, "tax") == derive_child(master_key, "tax")

    def test_siblings_differ(self, master_key):
        a = derive_child(master_key, "auditor")
        b = derive_child(master_key, "regulator")
        assert a.key != b.key
        assert a.hash != b.hash

    def test_child_does_not_open_parent_records(self, master_key):
        child = derive_child(master_key, "auditor")
        encrypted = encrypt_for_viewing(RECORD, master_key)
        with pytest.raises(KeyMismatch):
            decrypt_with_viewing(encrypted, child)
        grandchild = derive_child(child, "q1")
        assert grandchild.key not in (child.key, master_key.key)

    @pytest.mark.parametrize("segment", ["", "a//b", "/a", "a/", None, 7])
    def test_invalid_segment(self, master_key, segment):
        with pytest.raises(InvalidEncoding) as exc:
            derive_child(master_key, segment)
        assert exc.value.field == "segment"

    @pytest.mark.parametrize("path", ["", "m//0", "m/0/"])
    def test_invalid_path(self, path):
        with pytest.raises(InvalidEncoding):
            generate_master_key(path)

    def test_from_bytes_length(self):
        with pytest.raises(InvalidEncoding):
            ViewingKey.from_bytes(b"\x01" * 31)

    def test_dict_round_trip(self, master_key):
        data = master_key.to_dict()
        assert data["key"].startswith("0x")
        assert ViewingKey.from_dict(data) == master_key

    def test_dict_with_wrong_hash(self, master_key):
        data = master_key.to_dict()
        data["hash"] = "0x" + "00" * 32
        with pytest.raises(InvalidEncoding):
            ViewingKey.from_dict(data)

    def test_repr_hides_key(self, master_key):
        assert master_key.key.hex() not in repr(master_key)


class TestDisclosure:
    """XChaCha20-Poly1305 encryption to a viewing key."""

    def test_round_trip(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        assert encrypted.record_type == "transaction"
        assert decrypt_with_viewing(encrypted, master_key) == RECORD

    def test_plain_mapping(self, master_key):
        record = {"memo": "invoice 42", "amount": "5", "items": [1, 2, 3]}
        encrypted = encrypt_for_viewing(record, master_key)
        assert decrypt_with_viewing(encrypted, master_key) == record

    def test_record_shape(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        assert len(encrypted.nonce) == 24
        assert encrypted.key_hash == master_key.hash
        assert key_matches(encrypted, master_key)

    def test_fresh_nonce(self, master_key):
        a = encrypt_for_viewing(RECORD, master_key)
        b = encrypt_for_viewing(RECORD, master_key)
        assert a.nonce != b.nonce
        assert a.ciphertext != b.ciphertext

    def test_child_key_round_trip(self, master_key):
        child = derive_child(master_key, "auditor/2024")
        encrypted = encrypt_for_viewing(RECORD, child)
        assert decrypt_with_viewing(encrypted, child).amount == RECORD.amount

    def test_wrong_key_fails_before_decryption(self, master_key, monkeypatch):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        calls = []
        monkeypatch.setattr(
            nacl.bindings,
            "crypto_aead_xchacha20poly1305_ietf_decrypt",
            lambda *args: calls.append(args),
        )
        with pytest.raises(KeyMismatch) as exc:
            decrypt_with_viewing(encrypted, generate_master_key())
        assert exc.value.field == "viewing_key"
        assert calls == []

    def test_tampered_ciphertext(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        flipped = bytearray(encrypted.ciphertext)
        flipped[0] ^= 0x01
        with pytest.raises(DecryptionFailed) as exc:
            decrypt_with_viewing(
                dataclasses.replace(encrypted, ciphertext=bytes(flipped)), master_key,
            )
        assert str(exc.value) == "decryption failed"

    def test_tampered_tag(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        flipped = bytearray(encrypted.ciphertext)
        flipped[-1] ^= 0x80
        with pytest.raises(DecryptionFailed):
            decrypt_with_viewing(
                dataclasses.replace(encrypted, ciphertext=bytes(flipped)), master_key,
            )

    def test_tampered_nonce(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        nonce = bytearray(encrypted.nonce)
        nonce[5] ^= 0xFF
        with pytest.raises(DecryptionFailed):
            decrypt_with_viewing(dataclasses.replace(encrypted, nonce=bytes(nonce)), master_key)

    def test_same_bytes_other_path(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        moved = ViewingKey.from_bytes(master_key.key, "m/1")
        assert key_matches(encrypted, moved)
        with pytest.raises(DecryptionFailed):
            decrypt_with_viewing(encrypted, moved)

    def test_short_nonce(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        with pytest.raises(InvalidEncoding) as exc:
            decrypt_with_viewing(dataclasses.replace(encrypted, nonce=b"\x00" * 12), master_key)
        assert exc.value.field == "nonce"

    def test_not_json_serializable(self, master_key):
        with pytest.raises(InvalidEncoding) as exc:
            encrypt_for_viewing({"when": object()}, master_key)
        assert exc.value.field == "record"

    def test_not_a_mapping(self, master_key):
        with pytest.raises(InvalidEncoding):
            encrypt_for_viewing(["a", "b"], master_key)

    @pytest.mark.parametrize("record", [
        {"t": (1, 2)},
        {"n": {7: "x"}},
        {"deep": [{"ok": 1, 2: "bad"}]},
        {"x": float("nan")},
        {"x": float("inf")},
        {"s": {"a", "b"}},
    ])
    def test_rejects_values_json_would_alter(self, master_key, record):
        with pytest.raises(InvalidEncoding) as exc:
            encrypt_for_viewing(record, master_key)
        assert exc.value.field == "record"

    def test_nested_mapping_round_trip(self, master_key):
        record = {"n": {"7": "x"}, "t": [1, 2.5, None, True], "memo": "ünïcode"}
        assert decrypt_with_viewing(encrypt_for_viewing(record, master_key), master_key) == record

    def test_transaction_record_field_types(self, master_key):
        with pytest.raises(InvalidEncoding):
            encrypt_for_viewing(TransactionRecord("a", "b", 1, 2), master_key)

    def test_transaction_record_round_trip_type(self, master_key):
        record = TransactionRecord("a", "b", "1", 2)
        opened = decrypt_with_viewing(encrypt_for_viewing(record, master_key), master_key)
        assert isinstance(opened, TransactionRecord)
        assert opened == record

    def test_record_type_is_authenticated(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        with pytest.raises(DecryptionFailed):
            decrypt_with_viewing(
                dataclasses.replace(encrypted, record_type="mapping"), master_key,
            )

    def test_unknown_record_type(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        with pytest.raises(InvalidEncoding) as exc:
            decrypt_with_viewing(dataclasses.replace(encrypted, record_type="blob"), master_key)
        assert exc.value.field == "record_type"

    def test_not_a_viewing_key(self):
        with pytest.raises(InvalidEncoding):
            encrypt_for_viewing(RECORD, b"\x00" * 32)


class TestEncryptedRecord:
    """Dictionary form of encrypted records."""

    def test_dict_round_trip(self, master_key):
        encrypted = encrypt_for_viewing(RECORD, master_key)
        data = encrypted.to_dict()
        assert set(data) == {"ciphertext", "nonce", "viewingKeyHash", "recordType"}
        restored = EncryptedRecord.from_dict(data)
        assert restored == encrypted
        assert decrypt_with_viewing(restored, master_key) == RECORD

    def test_dict_missing_field(self, master_key):
        data = encrypt_for_viewing(RECORD, master_key).to_dict()
        del data["viewingKeyHash"]
        with pytest.raises(InvalidEncoding):
            EncryptedRecord.from_dict(data)

    def test_dict_without_record_type_is_a_mapping(self, master_key):
        data = encrypt_for_viewing({"memo": "hi"}, master_key).to_dict()
        del data["recordType"]
        restored = EncryptedRecord.from_dict(data)
        assert decrypt_with_viewing(restored, master_key) == {"memo": "hi"}

    def test_transaction_record_from_bad_dict(self):
        with pytest.raises(InvalidEncoding):
            TransactionRecord.from_dict({"sender": "a", "recipient": "b", "amount": "1"})
