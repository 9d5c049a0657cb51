"""
cryptoadapter Hash Adapter

Incremental digest object with finalize-once semantics:

    >>> h = create_hash("sha256")
    >>> h.update("hello ").update(b"world")
    >>> h.digest("hex")

A Hash is also a push-style transform. Chunks written to it update the digest
and ``end()`` pushes the digest bytes downstream once. Both paths share one
HashState, so a direct digest() after the stream has ended fails exactly like
a second direct digest() does.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Union

from .encoding import BUFFER, UTF8, check_output_encoding, encode, to_bytes, validate_encoding
from .engine import HashHandle, supported_digests
from .errors import HashFinalizedError, HashUpdateFailedError, IllegalConstructorError, InvalidArgTypeError
from .lazy_transform import LazyTransform
from .validators import BYTES_LIKE_NAMES, is_bytes_like, validate_string, validate_uint32


class HashState(Enum):
    """Lifecycle of a Hash; FINALIZED is terminal."""

    ACTIVE = "active"
    FINALIZED = "finalized"


@dataclass
class HashOptions:
    """
    Options for create_hash() and Hash.copy().

    Attributes:
        output_length: Digest length in bytes for extendable-output functions
        default_encoding: Encoding assumed for text written to the stream
    """

    output_length: Optional[int] = None
    default_encoding: Optional[str] = None

    @classmethod
    def coerce(cls, options: Any) -> "HashOptions":
        """Accept a HashOptions or a mapping; anything else means no options."""
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls(
                output_length=options.get("output_length"),
                default_encoding=options.get("default_encoding"),
            )
        return cls()


def _resolve_output_length(options: HashOptions) -> Optional[int]:
    if options.output_length is None:
        return None
    validate_uint32(options.output_length, "options.output_length")
    return int(options.output_length)


class Hash(LazyTransform):
    """
    Incremental digest of one algorithm.

    Instances come from create_hash() or Hash.copy(); calling Hash() directly
    raises IllegalConstructorError.
    """

    def __init__(self, *args, **kwargs):
        raise IllegalConstructorError("Hash", "create_hash")

    @classmethod
    def _from_handle(cls, handle: HashHandle, options: HashOptions) -> "Hash":
        instance = cls.__new__(cls)
        instance._handle = handle
        instance._state = HashState.ACTIVE
        LazyTransform.__init__(instance, options)
        return instance

    @property
    def state(self) -> HashState:
        return self._state

    @property
    def finalized(self) -> bool:
        return self._state is HashState.FINALIZED

    def _check_active(self) -> None:
        if self._state is HashState.FINALIZED:
            raise HashFinalizedError()

    def update(self, data: Any, encoding: Optional[str] = None) -> "Hash":
        """
        Feed data into the digest.

        Args:
            data: Text or bytes-like data
            encoding: Encoding of text data (UTF-8 when omitted or "buffer")

        Returns:
            self, for chaining

        Raises:
            HashFinalizedError: digest() was already called
            UnknownEncodingError: encoding is not recognized
            InvalidArgValueError: text is not valid for the encoding
            InvalidArgTypeError: data is neither text nor bytes-like
            HashUpdateFailedError: the engine refused the data
        """
        self._check_active()
        if isinstance(data, str):
            if not encoding or encoding == BUFFER:
                encoding = UTF8
            validate_encoding(data, encoding)
            data = to_bytes(data, encoding, strict=True)
        elif not is_bytes_like(data):
            raise InvalidArgTypeError("data", ["str"] + BYTES_LIKE_NAMES, data)

        if not self._handle.update(data):
            raise HashUpdateFailedError()
        return self

    def digest(self, output_encoding: Optional[str] = None) -> Union[bytes, str]:
        """
        Finalize and return the digest.

        Raw bytes are returned when ``output_encoding`` is None or "buffer",
        text otherwise. Finalization happens at most once.
        """
        self._check_active()
        check_output_encoding(output_encoding)
        result = self._handle.digest()
        self._state = HashState.FINALIZED
        return encode(result, output_encoding)

    def copy(self, options: Any = None) -> "Hash":
        """Branch the digest state into a new, active Hash."""
        self._check_active()
        options = HashOptions.coerce(options)
        handle = self._handle.copy(_resolve_output_length(options))
        return Hash._from_handle(handle, options)

    def _transform(self, chunk, encoding, callback) -> None:
        self.update(chunk, encoding)
        callback()

    def _flush(self, callback) -> None:
        self.push(self.digest())
        callback()

    def __repr__(self) -> str:
        return f"Hash({self._handle.name}, {self._state.value})"


def create_hash(algorithm: str, options: Any = None) -> Hash:
    """
    Create a Hash for ``algorithm``.

    Args:
        algorithm: Digest name, e.g. "sha256", "sha3-512", "shake256"
        options: HashOptions or a mapping with output_length/default_encoding

    Raises:
        InvalidArgTypeError: algorithm is not a string
        OutOfRangeError: output_length is not an unsigned 32-bit integer
        EngineError: unknown algorithm, or an output length the algorithm
            does not support
    """
    validate_string(algorithm, "algorithm")
    options = HashOptions.coerce(options)
    handle = HashHandle(algorithm, _resolve_output_length(options))
    return Hash._from_handle(handle, options)


def get_hashes() -> List[str]:
    """Digest names accepted by create_hash()."""
    return supported_digests()


__all__ = ["HashState", "HashOptions", "Hash", "create_hash", "get_hashes"]
