"""
Fuzz Tests for cryptoadapter

Property tests with hypothesis: chunked hashing, copy branching, XOF lengths,
encoding round trips and constructor argument resolution.
"""

import pytest
import hashlib
import hypothesis.strategies as st
from hypothesis import given, settings, Verbosity
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'python-core'))

from cryptoadapter.dh import DHPrimeParameters, DHSizeParameters, resolve_dh_arguments
from cryptoadapter.encoding import encode, to_bytes
from cryptoadapter.errors import HashFinalizedError
from cryptoadapter.hash import create_hash


# Hypothesis strategies for fuzz testing
binary_data = st.binary(min_size=0, max_size=1024)
chunk_lists = st.lists(st.binary(min_size=0, max_size=128), min_size=0, max_size=16)
algorithms = st.sampled_from(["sha1", "sha256", "sha512", "sha3-256", "blake2b512", "shake128"])
reference_names = {
    "sha1": "sha1",
    "sha256": "sha256",
    "sha512": "sha512",
    "sha3-256": "sha3_256",
    "blake2b512": "blake2b",
    "shake128": "shake_128",
}
text_encodings = st.sampled_from(["hex", "base64", "base64url", "latin1"])
int32_values = st.integers(min_value=-(2 ** 31), max_value=2 ** 31 - 1)


def reference_digest(algorithm, data):
    ref = hashlib.new(reference_names[algorithm], data)
    if algorithm == "shake128":
        return ref.digest(16)
    return ref.digest()


class TestHashFuzzing:
    """Fuzz tests for the Hash adapter."""

    @given(algorithm=algorithms, chunks=chunk_lists)
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_chunked_updates(self, algorithm, chunks):
        """Any chunking gives the digest of the concatenation."""
        h = create_hash(algorithm)
        for chunk in chunks:
            h.update(chunk)
        assert h.digest() == reference_digest(algorithm, b"".join(chunks))

    @given(algorithm=algorithms, chunks=chunk_lists)
    @settings(verbosity=Verbosity.quiet, max_examples=50)
    def test_stream_matches_direct(self, algorithm, chunks):
        """Streaming the chunks gives the direct digest."""
        h = create_hash(algorithm)
        for chunk in chunks:
            h.write(chunk)
        h.end()
        assert h.read() == reference_digest(algorithm, b"".join(chunks))
        with pytest.raises(HashFinalizedError):
            h.digest()

    @given(prefix=binary_data, left=binary_data, right=binary_data)
    @settings(verbosity=Verbosity.quiet, max_examples=50)
    def test_copy_branches(self, prefix, left, right):
        """A copy branches the digest state at the copy point."""
        original = create_hash("sha256").update(prefix)
        branch = original.copy()
        original.update(left)
        branch.update(right)
        assert original.digest() == hashlib.sha256(prefix + left).digest()
        assert branch.digest() == hashlib.sha256(prefix + right).digest()

    @given(data=binary_data, length=st.integers(min_value=0, max_value=512))
    @settings(verbosity=Verbosity.quiet, max_examples=50)
    def test_xof_lengths(self, data, length):
        """SHAKE256 honours any output length."""
        result = create_hash("shake256", {"output_length": length}).update(data).digest()
        assert result == hashlib.shake_256(data).digest(length)


class TestEncodingFuzzing:
    """Fuzz tests for the Encoding Boundary."""

    @given(data=binary_data, encoding=text_encodings)
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_round_trip(self, data, encoding):
        """Text encodings decode back to the original bytes."""
        assert to_bytes(encode(data, encoding), encoding, strict=True) == data

    @given(data=binary_data)
    @settings(verbosity=Verbosity.quiet, max_examples=50)
    def test_buffer_is_identity(self, data):
        """The buffer sentinel returns bytes unchanged."""
        assert encode(data, "buffer") == data


class TestArgumentFuzzing:
    """Fuzz tests for DiffieHellman argument resolution."""

    @given(size=int32_values)
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_int32_sizes_resolve(self, size):
        """Every signed 32-bit size resolves to a size variant."""
        assert resolve_dh_arguments(size) == DHSizeParameters(bits=size, generator=2)

    @given(prime=st.binary(min_size=1, max_size=64), generator=st.integers(min_value=2, max_value=2 ** 31 - 1))
    @settings(verbosity=Verbosity.quiet, max_examples=100)
    def test_legacy_shift(self, prime, generator):
        """A generator in the encoding position is always shifted."""
        resolved = resolve_dh_arguments(prime, generator)
        assert resolved == DHPrimeParameters(prime=prime, generator=generator)
