"""
Privacy level tests
"""

import pytest

from sip_privacy import (
    InvalidEncoding,
    MissingViewingKey,
    PrivacyLevel,
    get_privacy_config,
    is_private,
    is_valid_privacy_level,
    privacy_description,
    supports_viewing_key,
)


class TestPrivacyConfig:
    """Mandatory primitives per level."""

    def test_transparent(self):
        config = get_privacy_config("transparent")
        assert config.level is PrivacyLevel.TRANSPARENT
        assert not (config.use_stealth or config.hide_amounts or config.encrypt_for_viewing)

    def test_shielded(self):
        config = get_privacy_config(PrivacyLevel.SHIELDED)
        assert config.use_stealth and config.hide_amounts
        assert not config.encrypt_for_viewing
        assert config.viewing_key is None

    def test_compliant(self, master_key):
        config = get_privacy_config("compliant", master_key)
        assert config.use_stealth and config.hide_amounts and config.encrypt_for_viewing
        assert config.viewing_key is master_key

    def test_compliant_without_key(self):
        with pytest.raises(MissingViewingKey) as exc:
            get_privacy_config(PrivacyLevel.COMPLIANT)
        assert exc.value.field == "viewing_key"

    def test_compliant_with_raw_bytes(self):
        with pytest.raises(InvalidEncoding):
            get_privacy_config("compliant", b"\x00" * 32)

    def test_key_ignored_below_compliant(self, master_key):
        assert get_privacy_config("shielded", master_key).viewing_key is None

    def test_unknown_level(self):
        with pytest.raises(InvalidEncoding) as exc:
            get_privacy_config("secret")
        assert exc.value.field == "level"


class TestLevelHelpers:
    """Predicates and descriptions."""

    @pytest.mark.parametrize("level", ["transparent", "shielded", "compliant"])
    def test_valid_levels(self, level):
        assert is_valid_privacy_level(level)

    @pytest.mark.parametrize("level", ["", "Shielded", "private"])
    def test_invalid_levels(self, level):
        assert not is_valid_privacy_level(level)

    def test_is_private(self):
        assert not is_private("transparent")
        assert is_private("shielded")
        assert is_private(PrivacyLevel.COMPLIANT)

    def test_supports_viewing_key(self):
        assert supports_viewing_key("compliant")
        assert not supports_viewing_key("shielded")

    def test_descriptions(self):
        assert privacy_description("transparent").startswith("Public")
        assert "hidden" in privacy_description("shielded")
        assert "viewable" in privacy_description("compliant")
