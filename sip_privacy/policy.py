"""
Privacy levels and the primitives each one makes mandatory.

1. **TRANSPARENT** — nothing hidden; no primitive is used.
2. **SHIELDED** — sender, amount and recipient hidden: stealth address
   plus Pedersen commitments.
3. **COMPLIANT** — shielded, and the transaction metadata is encrypted
   to a viewing key so an auditor holding it can read the details.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import InvalidEncoding, MissingViewingKey
from .viewing import ViewingKey


class PrivacyLevel(Enum):
    """How much of a transaction is hidden from the public ledger."""

    TRANSPARENT = "transparent"
    SHIELDED = "shielded"
    COMPLIANT = "compliant"

    @classmethod
    def parse(cls, level: Union[PrivacyLevel, str]) -> PrivacyLevel:
        if isinstance(level, cls):
            return level
        try:
            return cls(level)
        except ValueError:
            raise InvalidEncoding(
                f"unknown privacy level {level!r}", field="level",
            ) from None


_DESCRIPTIONS = {
    PrivacyLevel.TRANSPARENT: "Public transaction - all details visible on-chain",
    PrivacyLevel.SHIELDED: "Private transaction - sender, amount, and recipient hidden",
    PrivacyLevel.COMPLIANT: "Private with audit - hidden but viewable with key",
}


@dataclass(frozen=True)
class PrivacyConfig:
    """Which primitives a transaction at *level* must use."""

    level: PrivacyLevel
    use_stealth: bool
    hide_amounts: bool
    encrypt_for_viewing: bool
    viewing_key: Optional[ViewingKey] = None


def get_privacy_config(
    level: Union[PrivacyLevel, str],
    viewing_key: Optional[ViewingKey] = None,
) -> PrivacyConfig:
    """
    Resolve *level* to its mandatory primitives.

    ``COMPLIANT`` requires *viewing_key*; the other levels ignore it.
    """
    level = PrivacyLevel.parse(level)
    if level is PrivacyLevel.TRANSPARENT:
        return PrivacyConfig(level, False, False, False)
    if level is PrivacyLevel.SHIELDED:
        return PrivacyConfig(level, True, True, False)
    if viewing_key is None:
        raise MissingViewingKey(
            "compliant mode requires a viewing key", field="viewing_key",
        )
    if not isinstance(viewing_key, ViewingKey):
        raise InvalidEncoding("expected a ViewingKey", field="viewing_key")
    return PrivacyConfig(level, True, True, True, viewing_key)


def is_valid_privacy_level(level: str) -> bool:
    return level in {lvl.value for lvl in PrivacyLevel}


def is_private(level: Union[PrivacyLevel, str]) -> bool:
    return PrivacyLevel.parse(level) is not PrivacyLevel.TRANSPARENT


def supports_viewing_key(level: Union[PrivacyLevel, str]) -> bool:
    return PrivacyLevel.parse(level) is PrivacyLevel.COMPLIANT


def privacy_description(level: Union[PrivacyLevel, str]) -> str:
    return _DESCRIPTIONS[PrivacyLevel.parse(level)]
