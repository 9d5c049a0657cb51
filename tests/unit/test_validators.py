"""
Unit Tests for Argument Validators and the Error Taxonomy
"""

import pytest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'python-core'))

from cryptoadapter.errors import (
    CryptoError,
    EngineError,
    HashFinalizedError,
    IncompatibleKeyError,
    InvalidArgTypeError,
    InvalidArgValueError,
    InvalidKeyObjectTypeError,
    OutOfRangeError,
    describe_received,
)
from cryptoadapter.validators import (
    INT32_MAX,
    INT32_MIN,
    is_bytes_like,
    is_number,
    validate_int32,
    validate_object,
    validate_string,
    validate_uint32,
)


class TestValidators:
    """Test cases for argument-shape validators."""

    def test_is_number_excludes_bool(self):
        """Test that bool is never treated as a number."""
        assert is_number(1)
        assert is_number(1.5)
        assert not is_number(True)
        assert not is_number("1")

    def test_is_bytes_like(self):
        """Test bytes-like detection."""
        assert is_bytes_like(b"")
        assert is_bytes_like(bytearray())
        assert is_bytes_like(memoryview(b""))
        assert not is_bytes_like("")

    def test_int32_bounds(self):
        """Test the signed 32-bit range."""
        validate_int32(INT32_MIN, "n")
        validate_int32(INT32_MAX, "n")
        validate_int32(2.0, "n")
        with pytest.raises(OutOfRangeError):
            validate_int32(INT32_MAX + 1, "n")
        with pytest.raises(OutOfRangeError):
            validate_int32(INT32_MIN - 1, "n")

    def test_int32_rejects_fractions(self):
        """Test that fractional numbers are out of range."""
        with pytest.raises(OutOfRangeError) as exc_info:
            validate_int32(1.5, "n")
        assert "an integer" in str(exc_info.value)

    def test_int32_rejects_non_numbers(self):
        """Test that non-numbers are type errors."""
        with pytest.raises(InvalidArgTypeError):
            validate_int32("1", "n")
        with pytest.raises(InvalidArgTypeError):
            validate_int32(True, "n")

    def test_uint32(self):
        """Test the unsigned 32-bit range."""
        validate_uint32(0, "n")
        validate_uint32(2 ** 32 - 1, "n")
        with pytest.raises(OutOfRangeError):
            validate_uint32(-1, "n")
        with pytest.raises(OutOfRangeError):
            validate_uint32(0, "n", positive=True)

    def test_validate_string_and_object(self):
        """Test string and mapping validation."""
        validate_string("x", "name")
        validate_object({}, "options")
        with pytest.raises(InvalidArgTypeError):
            validate_string(b"x", "name")
        with pytest.raises(InvalidArgTypeError):
            validate_object([], "options")


class TestErrors:
    """Test cases for the error taxonomy."""

    def test_codes_and_str(self):
        """Test that errors render their code."""
        err = HashFinalizedError()
        assert err.code == "ERR_CRYPTO_HASH_FINALIZED"
        assert str(err) == "Digest already called [ERR_CRYPTO_HASH_FINALIZED]"
        assert isinstance(err, CryptoError)

    def test_builtin_bases(self):
        """Test that shape errors are also builtin errors."""
        assert isinstance(InvalidArgTypeError("x", ["str"], 1), TypeError)
        assert isinstance(InvalidArgValueError("x", 1), ValueError)
        assert isinstance(OutOfRangeError("x", ">= 0", -1), ValueError)
        assert isinstance(InvalidKeyObjectTypeError("secret", "private"), TypeError)

    def test_invalid_arg_type_message(self):
        """Test the accepted shapes listed in type errors."""
        err = InvalidArgTypeError("data", ["str", "bytes", "bytearray"], 5)
        assert err.message == (
            'The "data" argument must be of type str, bytes or bytearray. Received type int (5)'
        )

    def test_invalid_arg_value_names_property(self):
        """Test that dotted names are reported as properties."""
        err = InvalidArgValueError("options.private_key", None)
        assert err.message == "The property 'options.private_key' is invalid. Received None"

    def test_incompatible_key_message(self):
        """Test the incompatible key message."""
        err = IncompatibleKeyError("key types for Diffie-Hellman", "x25519 and ec")
        assert err.message == "Incompatible key types for Diffie-Hellman: x25519 and ec"
        assert err.code == "ERR_CRYPTO_INCOMPATIBLE_KEY"

    def test_engine_error_code_override(self):
        """Test that a code can be given per instance."""
        assert EngineError("boom").code == "ERR_CRYPTO_OPERATION_FAILED"
        assert EngineError("boom", code="ERR_CUSTOM").code == "ERR_CUSTOM"

    def test_describe_received(self):
        """Test the rendering of received values."""
        assert describe_received(None) == "Received None"
        assert describe_received([]) == "Received an instance of list"
        assert describe_received("x" * 40).endswith("...)")
