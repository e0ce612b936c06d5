"""
Secret buffer and encoding helper tests
"""

import pytest

from sip_privacy import InvalidEncoding, secure_buffer, secure_wipe, wipe_all
from sip_privacy.encoding import coerce_bytes, from_hex, to_hex


class TestWiping:
    """Scoped zeroisation of secret buffers."""

    def test_secure_wipe(self):
        buf = bytearray(b"\xaa" * 32)
        secure_wipe(buf)
        assert buf == bytearray(32)

    def test_wipe_memoryview(self):
        backing = bytearray(b"\x11" * 16)
        secure_wipe(memoryview(backing))
        assert backing == bytearray(16)

    def test_wipe_rejects_bytes(self):
        with pytest.raises(TypeError):
            secure_wipe(b"secret")

    def test_wipe_all_skips_none(self):
        a, b = bytearray(b"\x01" * 4), bytearray(b"\x02" * 4)
        wipe_all(a, None, b)
        assert a == b == bytearray(4)

    def test_buffer_is_a_copy(self):
        secret = b"\x42" * 32
        with secure_buffer(secret) as buf:
            assert buf == bytearray(secret)
            held = buf
        assert held == bytearray(32)
        assert secret == b"\x42" * 32

    def test_random_buffer(self):
        with secure_buffer(32) as buf:
            assert len(buf) == 32
            held = buf
        assert held == bytearray(32)

    def test_wiped_on_exception(self):
        with pytest.raises(RuntimeError):
            with secure_buffer(b"\x07" * 8) as buf:
                held = buf
                raise RuntimeError("boom")
        assert held == bytearray(8)


class TestHexEncoding:
    """0x-prefixed boundary encoding."""

    def test_to_hex(self):
        assert to_hex(b"\x00\xff") == "0x00ff"

    def test_from_hex(self):
        assert from_hex("0x00FF", field="x") == b"\x00\xff"

    @pytest.mark.parametrize("text", ["00ff", "0x0f0", "0xzz", 5])
    def test_from_hex_rejects(self, text):
        with pytest.raises(InvalidEncoding) as exc:
            from_hex(text, field="blinding")
        assert exc.value.field == "blinding"

    def test_length_enforced(self):
        with pytest.raises(InvalidEncoding):
            from_hex("0x" + "00" * 31, field="key", length=32)

    def test_coerce_bytes(self):
        assert coerce_bytes(bytearray(b"\x01\x02"), field="x") == b"\x01\x02"
        assert coerce_bytes("0x0102", field="x", length=2) == b"\x01\x02"
        with pytest.raises(InvalidEncoding):
            coerce_bytes(12, field="x")
