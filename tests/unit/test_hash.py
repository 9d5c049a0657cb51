"""
Unit Tests for the Hash Adapter

This module tests the incremental update/finalize state machine, copy
semantics and argument handling of Hash.
"""

import pytest
import base64
import hashlib
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'python-core'))

from cryptoadapter.hash import Hash, HashOptions, HashState, create_hash, get_hashes
from cryptoadapter.errors import (
    EngineError,
    HashFinalizedError,
    HashUpdateFailedError,
    IllegalConstructorError,
    InvalidArgTypeError,
    InvalidArgValueError,
    OutOfRangeError,
    UnknownEncodingError,
)


class TestCreateHash:
    """Test cases for Hash construction."""

    def test_sha256(self):
        """Test a basic SHA-256 digest."""
        result = create_hash("sha256").update("abc").digest("hex")
        assert result == hashlib.sha256(b"abc").hexdigest()

    @pytest.mark.parametrize("name,reference", [
        ("SHA256", "sha256"),
        ("RSA-SHA256", "sha256"),
        ("sha3-256", "sha3_256"),
        ("blake2b512", "blake2b"),
        ("sha512", "sha512"),
        ("md5", "md5"),
    ])
    def test_algorithm_names(self, name, reference):
        """Test OpenSSL-style digest names."""
        result = create_hash(name).update(b"data").digest()
        assert result == hashlib.new(reference, b"data").digest()

    def test_direct_construction_is_illegal(self):
        """Test that Hash cannot be constructed directly."""
        with pytest.raises(IllegalConstructorError) as exc_info:
            Hash("sha256")
        assert exc_info.value.code == "ERR_ILLEGAL_CONSTRUCTOR"
        with pytest.raises(IllegalConstructorError):
            Hash()

    def test_algorithm_must_be_string(self):
        """Test that the algorithm name is type checked."""
        with pytest.raises(InvalidArgTypeError):
            create_hash(256)

    def test_unknown_algorithm(self):
        """Test that the engine rejects unknown algorithms."""
        with pytest.raises(EngineError) as exc_info:
            create_hash("sha-9000")
        assert exc_info.value.message == "Digest method not supported"

    def test_shake_default_lengths(self):
        """Test the natural output lengths of the SHAKE functions."""
        assert create_hash("shake128").digest() == hashlib.shake_128(b"").digest(16)
        assert create_hash("shake256").digest() == hashlib.shake_256(b"").digest(32)

    def test_shake_output_length(self):
        """Test a custom XOF output length."""
        result = create_hash("shake256", {"output_length": 64}).update(b"x").digest()
        assert result == hashlib.shake_256(b"x").digest(64)

    def test_output_length_with_hash_options(self):
        """Test that HashOptions is accepted."""
        result = create_hash("shake128", HashOptions(output_length=5)).digest()
        assert len(result) == 5

    def test_zero_output_length(self):
        """Test that an XOF may produce an empty digest."""
        assert create_hash("shake128", {"output_length": 0}).digest() == b""

    def test_fixed_length_algorithm(self):
        """Test output lengths on fixed-output algorithms."""
        assert len(create_hash("sha256", {"output_length": 32}).digest()) == 32
        with pytest.raises(EngineError) as exc_info:
            create_hash("sha256", {"output_length": 16})
        assert "invalid digest size" in str(exc_info.value)

    def test_output_length_validation(self):
        """Test unsigned 32-bit validation of output_length."""
        with pytest.raises(OutOfRangeError):
            create_hash("shake256", {"output_length": -1})
        with pytest.raises(OutOfRangeError):
            create_hash("shake256", {"output_length": 1.5})
        with pytest.raises(InvalidArgTypeError):
            create_hash("shake256", {"output_length": "16"})

    def test_non_mapping_options_ignored(self):
        """Test that unusable options mean no options."""
        assert HashOptions.coerce("junk") == HashOptions()
        assert len(create_hash("sha256", "junk").digest()) == 32

    def test_get_hashes(self):
        """Test the list of supported digests."""
        names = get_hashes()
        assert names == sorted(names)
        for name in ("sha256", "sha512", "sha3-256", "shake256"):
            assert name in names
        for name in names:
            create_hash(name)


class TestUpdate:
    """Test cases for Hash.update."""

    def test_chaining_and_order(self):
        """Test that update returns self and preserves order."""
        h = create_hash("sha256")
        assert h.update(b"a") is h
        h.update(bytearray(b"b")).update(memoryview(b"c"))
        assert h.digest() == hashlib.sha256(b"abc").digest()

    def test_text_encodings(self):
        """Test text input under named encodings."""
        expected = hashlib.sha256(b"abc").digest()
        assert create_hash("sha256").update("616263", "hex").digest() == expected
        assert create_hash("sha256").update("YWJj", "base64").digest() == expected
        assert create_hash("sha256").update("abc", "buffer").digest() == expected
        assert create_hash("sha256").update("abc", "latin1").digest() == expected

    def test_default_encoding_is_utf8(self):
        """Test that text defaults to UTF-8."""
        result = create_hash("sha256").update("héllo").digest()
        assert result == hashlib.sha256("héllo".encode("utf-8")).digest()

    def test_invalid_hex(self):
        """Test that malformed hex text is rejected."""
        with pytest.raises(InvalidArgValueError):
            create_hash("sha256").update("abc", "hex")
        with pytest.raises(InvalidArgValueError):
            create_hash("sha256").update("zz", "hex")

    def test_unknown_encoding(self):
        """Test that unknown encodings are rejected and leave the hash usable."""
        h = create_hash("sha256")
        with pytest.raises(UnknownEncodingError):
            h.update("abc", "rot13")
        h.update("abc")
        assert h.digest() == hashlib.sha256(b"abc").digest()

    @pytest.mark.parametrize("value", [None, 12, 1.5, ["a"], {"a": 1}])
    def test_invalid_data_type(self, value):
        """Test that data must be text or bytes-like."""
        with pytest.raises(InvalidArgTypeError) as exc_info:
            create_hash("sha256").update(value)
        assert '"data"' in str(exc_info.value)

    def test_engine_update_failure(self):
        """Test that an engine refusal surfaces as an update failure."""
        strided = memoryview(bytearray(b"abcd"))[::2]
        with pytest.raises(HashUpdateFailedError) as exc_info:
            create_hash("sha256").update(strided)
        assert exc_info.value.code == "ERR_CRYPTO_HASH_UPDATE_FAILED"


class TestFinalize:
    """Test cases for the finalize-once state machine."""

    def test_state_transition(self):
        """Test the ACTIVE to FINALIZED transition."""
        h = create_hash("sha256")
        assert h.state is HashState.ACTIVE
        assert not h.finalized
        h.digest()
        assert h.state is HashState.FINALIZED
        assert h.finalized

    def test_digest_twice(self):
        """Test that the second digest always fails."""
        h = create_hash("sha256")
        h.digest()
        with pytest.raises(HashFinalizedError):
            h.digest()
        with pytest.raises(HashFinalizedError):
            h.digest("hex")

    def test_update_after_digest(self):
        """Test that update fails after digest."""
        h = create_hash("sha256")
        h.digest()
        with pytest.raises(HashFinalizedError):
            h.update(b"more")

    def test_finalized_check_precedes_type_check(self):
        """Test that state is checked before the data shape."""
        h = create_hash("sha256")
        h.digest()
        with pytest.raises(HashFinalizedError):
            h.update(12)

    def test_bad_output_encoding_does_not_finalize(self):
        """Test that output encoding is checked before finalizing."""
        h = create_hash("sha256").update(b"abc")
        with pytest.raises(UnknownEncodingError):
            h.digest("rot13")
        assert not h.finalized
        assert h.digest() == hashlib.sha256(b"abc").digest()

    def test_output_encodings(self):
        """Test digest output encodings."""
        expected = hashlib.sha256(b"abc").digest()
        assert create_hash("sha256").update(b"abc").digest("buffer") == expected
        assert create_hash("sha256").update(b"abc").digest("base64") == (
            base64.b64encode(expected).decode()
        )


class TestCopy:
    """Test cases for Hash.copy."""

    def test_copy_is_independent(self):
        """Test that copies do not alias state."""
        original = create_hash("sha256").update(b"common")
        branch = original.copy()
        original.update(b"-left")
        branch.update(b"-right")
        assert original.digest() == hashlib.sha256(b"common-left").digest()
        assert branch.digest() == hashlib.sha256(b"common-right").digest()

    def test_copy_is_active(self):
        """Test that a copy starts active."""
        original = create_hash("sha256")
        branch = original.copy()
        assert isinstance(branch, Hash)
        assert branch.state is HashState.ACTIVE
        original.digest()
        assert not branch.finalized
        branch.digest()

    def test_copy_after_digest(self):
        """Test that a finalized hash cannot be copied."""
        h = create_hash("sha256")
        h.digest()
        with pytest.raises(HashFinalizedError):
            h.copy()

    def test_copy_with_output_length(self):
        """Test re-parameterizing an XOF on copy."""
        original = create_hash("shake256", {"output_length": 64}).update(b"x")
        short = original.copy({"output_length": 16})
        natural = original.copy()
        assert short.digest() == hashlib.shake_256(b"x").digest(16)
        assert natural.digest() == hashlib.shake_256(b"x").digest(32)
        assert original.digest() == hashlib.shake_256(b"x").digest(64)

    def test_copy_validates_output_length(self):
        """Test that copy validates output_length like construction."""
        h = create_hash("shake256")
        with pytest.raises(OutOfRangeError):
            h.copy({"output_length": -5})
        with pytest.raises(EngineError):
            create_hash("sha256").copy({"output_length": 8})
        assert not h.finalized
