"""
Hash functions for the privacy primitives.

Two conventions are in use:

* Plain SHA-256 wherever an external circuit or counterparty recomputes
  the value (generator search, stealth shared secret, viewing-key hash).
  These are part of the wire contract and carry their own domain strings
  where they need one.
* BIP-340 style tagged hashes for values only this package produces:

      H_tag(x) = SHA-256( SHA-256(tag) ‖ SHA-256(tag) ‖ x )
"""

from __future__ import annotations

import hashlib
from typing import Any

from .constants import TAG_IDENTIFIER


# ── internal helpers ────────────────────────────────────────────────────
def _tagged_hasher(tag: bytes) -> hashlib._Hash:
    """Return a SHA-256 context pre-loaded with the BIP-340 tag prefix."""
    tag_hash = hashlib.sha256(tag).digest()
    h = hashlib.sha256()
    h.update(tag_hash)
    h.update(tag_hash)
    return h


def _encode_item(item: Any) -> bytes:
    """
    Canonical, length-prefixed encoding of a hash input.

    Only bytes, text and non-negative ints appear in this package; any
    other type is a programming error.
    """
    if isinstance(item, (bytes, bytearray)):
        return len(item).to_bytes(4, "big") + bytes(item)
    if isinstance(item, str):
        return _encode_item(item.encode("utf-8"))
    if isinstance(item, int) and not isinstance(item, bool) and item >= 0:
        return _encode_item(item.to_bytes((item.bit_length() + 7) // 8 or 1, "big"))
    raise TypeError(f"cannot hash item of type {type(item).__name__}")


def _tagged_hash(tag: bytes, *args: Any) -> bytes:
    h = _tagged_hasher(tag)
    for a in args:
        h.update(_encode_item(a))
    return h.digest()


# ── public hash functions ───────────────────────────────────────────────

def sha256(*parts: bytes) -> bytes:
    """SHA-256 over the plain concatenation of *parts*."""
    h = hashlib.sha256()
    for p in parts:
        h.update(p)
    return h.digest()


def generator_candidate(domain: bytes, counter: int) -> bytes:
    """
    Digest tried at step *counter* of the NUMS generator search.

    SHA-256(domain ‖ ":" ‖ decimal(counter)), so the search is easy to
    reproduce from any language.
    """
    return sha256(domain, b":", str(counter).encode("ascii"))


def hash_shared_secret(shared_point: bytes) -> bytes:
    """Digest of an encoded ECDH shared point; feeds both h and the view tag."""
    return sha256(shared_point)


def view_tag(shared_digest: bytes) -> int:
    """First byte of the shared-secret digest."""
    return shared_digest[0]


def key_hash(key: bytes) -> bytes:
    """Identifying hash of raw viewing-key bytes (never their hex form)."""
    return sha256(bytes(key))


def hash_identifier(identifier: Any) -> bytes:
    """Tagged hash of a sender identifier prior to committing to it."""
    return _tagged_hash(TAG_IDENTIFIER, identifier)
