"""Tests for core/string_utils.py."""

from ffwatch.core.string_utils import decode_with_fallback


class TestDecodeWithFallback:
    """Tests for decode_with_fallback."""

    def test_valid_utf8(self) -> None:
        assert decode_with_fallback("durée=1".encode()) == "durée=1"

    def test_invalid_utf8_reinterpreted_as_latin1(self) -> None:
        assert decode_with_fallback(b"caf\xe9") == "café"

    def test_every_byte_value_decodes(self) -> None:
        data = bytes(range(256))
        assert len(decode_with_fallback(data)) == 256

    def test_empty(self) -> None:
        assert decode_with_fallback(b"") == ""
