"""
cryptoadapter Error Taxonomy

Every error raised by the adapter layer derives from CryptoError and carries a
stable string code, so callers can branch on ``err.code`` instead of parsing
messages. Argument-shape and range errors additionally derive from the
matching builtin (TypeError / ValueError) so ordinary ``except`` clauses keep
working.

Categories:
    - Argument shape: InvalidArgTypeError, InvalidArgValueError
    - Range / encoding: OutOfRangeError, UnknownEncodingError
    - State: HashFinalizedError, StreamStateError
    - Engine reported: HashUpdateFailedError, InvalidPublicKeyError, EngineError
    - Key compatibility: InvalidKeyObjectTypeError, IncompatibleKeyError
"""

from typing import Any, Dict, Iterable, Optional


# ============================================================================
# Base Exception
# ============================================================================


class CryptoError(Exception):
    """
    Base exception for all adapter-layer errors.

    Attributes:
        message: Human-readable description of the error
        code: Stable identifier such as ``ERR_CRYPTO_HASH_FINALIZED``
        details: Optional structured context for diagnostics
    """

    code = "ERR_CRYPTO"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} [{self.code}]"


def describe_received(value: Any) -> str:
    """Render a received value the way argument errors report it."""
    if value is None:
        return "Received None"
    if isinstance(value, bool):
        return f"Received type bool ({value!r})"
    if isinstance(value, (int, float, str)):
        shown = repr(value)
        if len(shown) > 28:
            shown = shown[:25] + "..."
        return f"Received type {type(value).__name__} ({shown})"
    return f"Received an instance of {type(value).__name__}"


def _join_choices(choices: Iterable[str]) -> str:
    items = list(choices)
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + f" or {items[-1]}"


# ============================================================================
# Argument Shape and Range Errors
# ============================================================================


class InvalidArgTypeError(CryptoError, TypeError):
    """An argument has a type outside the accepted set."""

    code = "ERR_INVALID_ARG_TYPE"

    def __init__(self, name: str, expected: Iterable[str], actual: Any):
        expected = list(expected)
        super().__init__(
            f'The "{name}" argument must be of type {_join_choices(expected)}. '
            f"{describe_received(actual)}",
            details={"name": name, "expected": expected},
        )


class InvalidArgValueError(CryptoError, ValueError):
    """An argument has an acceptable type but an unusable value."""

    code = "ERR_INVALID_ARG_VALUE"

    def __init__(self, name: str, value: Any, reason: str = "is invalid"):
        kind = "property" if "." in name else "argument"
        super().__init__(
            f"The {kind} '{name}' {reason}. Received {value!r}",
            details={"name": name},
        )


class OutOfRangeError(CryptoError, ValueError):
    """A numeric argument falls outside its permitted range."""

    code = "ERR_OUT_OF_RANGE"

    def __init__(self, name: str, range_description: str, received: Any):
        super().__init__(
            f'The value of "{name}" is out of range. It must be {range_description}. '
            f"Received {received!r}",
            details={"name": name, "range": range_description},
        )


class UnknownEncodingError(CryptoError, ValueError):
    """A text encoding name is not recognized by the encoding boundary."""

    code = "ERR_UNKNOWN_ENCODING"

    def __init__(self, encoding: Any):
        super().__init__(f"Unknown encoding: {encoding}", details={"encoding": encoding})


class IllegalConstructorError(CryptoError, TypeError):
    """A type that must come from a factory was constructed directly."""

    code = "ERR_ILLEGAL_CONSTRUCTOR"

    def __init__(self, type_name: str, factory: str):
        super().__init__(f"Illegal constructor: use {factory}() to create a {type_name}")


# ============================================================================
# State Errors
# ============================================================================


class HashFinalizedError(CryptoError):
    """The hash was already finalized by digest()."""

    code = "ERR_CRYPTO_HASH_FINALIZED"

    def __init__(self):
        super().__init__("Digest already called")


class StreamStateError(CryptoError):
    """A stream operation was attempted after the stream ended."""

    def __init__(self, message: str, code: str):
        super().__init__(message, code=code)


# ============================================================================
# Engine Reported Errors
# ============================================================================


class HashUpdateFailedError(CryptoError):
    """The digest engine refused an update."""

    code = "ERR_CRYPTO_HASH_UPDATE_FAILED"

    def __init__(self):
        super().__init__("Hash update failed")


class InvalidPublicKeyError(CryptoError):
    """The peer public key was rejected during secret computation."""

    code = "ERR_CRYPTO_ECDH_INVALID_PUBLIC_KEY"

    def __init__(self):
        super().__init__("Public key is not valid for specified curve")


class EngineError(CryptoError):
    """
    A failure reported by the underlying cryptographic engine.

    These are surfaced to callers unchanged; the adapter never retries or
    reinterprets them.
    """

    code = "ERR_CRYPTO_OPERATION_FAILED"


# ============================================================================
# Key Compatibility Errors
# ============================================================================


class InvalidKeyObjectTypeError(CryptoError, TypeError):
    """A key object of the wrong type (secret/public/private) was supplied."""

    code = "ERR_CRYPTO_INVALID_KEY_OBJECT_TYPE"

    def __init__(self, actual: str, expected: str):
        super().__init__(
            f"Invalid key object type {actual}, expected {expected}.",
            details={"actual": actual, "expected": expected},
        )


class IncompatibleKeyError(CryptoError):
    """Two keys cannot be combined for the requested operation."""

    code = "ERR_CRYPTO_INCOMPATIBLE_KEY"

    def __init__(self, name: str, detail: str):
        super().__init__(f"Incompatible {name}: {detail}", details={"name": name})


__all__ = [
    "CryptoError",
    "describe_received",
    "InvalidArgTypeError",
    "InvalidArgValueError",
    "OutOfRangeError",
    "UnknownEncodingError",
    "IllegalConstructorError",
    "HashFinalizedError",
    "StreamStateError",
    "HashUpdateFailedError",
    "InvalidPublicKeyError",
    "EngineError",
    "InvalidKeyObjectTypeError",
    "IncompatibleKeyError",
]
