"""
Error taxonomy for the privacy primitives.

Malformed input at a boundary raises one of the ``ValueError`` subclasses
below, each naming the offending field.  Cryptographic verification
outcomes (a wrong opening, a non-matching scan) are plain booleans and
never raise.
"""

from __future__ import annotations

from typing import Optional


class PrivacyError(Exception):
    """Base class for every error raised by :mod:`sip_privacy`."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class InvalidEncoding(PrivacyError, ValueError):
    """Malformed hex, point, address or record encoding."""


class InvalidCurvePoint(PrivacyError, ValueError):
    """Bytes that do not decode to a usable group element."""


class InvalidScalar(PrivacyError, ValueError):
    """Zero blinding factor, out-of-range value or bad private key."""


class UnsupportedChain(PrivacyError, ValueError):
    """Chain tag that maps to no known curve family."""


class MissingViewingKey(PrivacyError, ValueError):
    """A privacy level that needs a viewing key was used without one."""


class KeyMismatch(PrivacyError):
    """Key does not match the record or address it was applied to."""


class DecryptionFailed(PrivacyError):
    """Authenticated decryption failed.

    Deliberately carries no detail about whether the key or the
    ciphertext was at fault.
    """

    def __init__(self) -> None:
        super().__init__("decryption failed")
