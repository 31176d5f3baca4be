"""
Tests for attribution code generation and verification.
"""

import string

import pytest

from tg_redirect.core.exceptions import CodeGenerationError
from tg_redirect.services.code_codec import MAX_CODE_LENGTH, CodeCodec

CODE_ALPHABET = string.ascii_letters + string.digits + "-_"


class TestCodeGeneration:
    """Test generate()."""

    def test_generated_code_is_url_safe(self, codec):
        """Codes fit in a Telegram start parameter."""
        code = codec.generate()
        assert len(code) == 30
        assert len(code) <= MAX_CODE_LENGTH
        assert all(ch in CODE_ALPHABET for ch in code), f"Unexpected character in {code}"

    def test_generated_codes_are_unique(self, codec):
        codes = {codec.generate() for _ in range(500)}
        assert len(codes) == 500

    def test_generated_code_verifies(self, codec):
        for _ in range(50):
            code = codec.generate()
            assert codec.verify(code), f"Fresh code failed verification: {code}"

    def test_empty_secret_rejected(self):
        with pytest.raises(CodeGenerationError):
            CodeCodec("")


class TestCodeVerification:
    """Test verify() and is_well_formed()."""

    def test_any_single_character_change_fails(self, codec):
        """Replacing any one character breaks the signature."""
        code = codec.generate()
        for i, original in enumerate(code):
            replacement = "A" if original != "A" else "B"
            tampered = code[:i] + replacement + code[i + 1:]
            assert not codec.verify(tampered), f"Tampered code at index {i} still verified"

    def test_code_from_other_secret_fails(self, codec):
        other = CodeCodec("another-secret-that-is-also-long-enough")
        assert not codec.verify(other.generate())

    def test_truncated_and_extended_codes_fail(self, codec):
        code = codec.generate()
        assert not codec.verify(code[:-1])
        assert not codec.verify(code + "A")

    def test_short_codes_fail(self, codec):
        """Codes shorter than signature + minimum payload never verify."""
        assert not codec.verify("abc")
        assert not codec.verify("A" * 17)

    def test_malformed_codes_fail(self, codec):
        for code in ["", "abc def", "abc/def", "abc.def", "é" * 20, "A" * 65]:
            assert not codec.verify(code), f"Should not verify: {code!r}"

    def test_is_well_formed(self):
        assert CodeCodec.is_well_formed("abc-DEF_123")
        assert CodeCodec.is_well_formed("A" * MAX_CODE_LENGTH)
        assert not CodeCodec.is_well_formed("")
        assert not CodeCodec.is_well_formed("A" * (MAX_CODE_LENGTH + 1))
        assert not CodeCodec.is_well_formed("abc!")
        assert not CodeCodec.is_well_formed("abc=")
        assert not CodeCodec.is_well_formed(None)
        assert not CodeCodec.is_well_formed("abc\n")
        assert not CodeCodec.is_well_formed("\nabc")

    def test_trailing_newline_fails(self, codec):
        assert not codec.verify(codec.generate() + "\n")
