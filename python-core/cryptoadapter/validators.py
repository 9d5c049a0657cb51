"""Argument-shape validation helpers shared by the adapters."""

from collections.abc import Mapping
from typing import Any

from .errors import InvalidArgTypeError, OutOfRangeError

INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
UINT32_MAX = 2 ** 32 - 1

BYTES_LIKE_TYPES = (bytes, bytearray, memoryview)
BYTES_LIKE_NAMES = ["bytes", "bytearray", "memoryview"]


def is_bytes_like(value: Any) -> bool:
    return isinstance(value, BYTES_LIKE_TYPES)


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid size or generator
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_string(value: Any, name: str) -> None:
    if not isinstance(value, str):
        raise InvalidArgTypeError(name, ["str"], value)


def _validate_integer(value: Any, name: str, minimum: int, maximum: int) -> None:
    if not is_number(value):
        raise InvalidArgTypeError(name, ["int"], value)
    if isinstance(value, float) and not value.is_integer():
        raise OutOfRangeError(name, "an integer", value)
    if value < minimum or value > maximum:
        raise OutOfRangeError(name, f">= {minimum} && <= {maximum}", value)


def validate_int32(value: Any, name: str, minimum: int = INT32_MIN, maximum: int = INT32_MAX) -> None:
    """
    Validate a signed 32-bit integer.

    Integral floats (``2.0``) are accepted; callers convert with ``int()``.

    Raises:
        InvalidArgTypeError: value is not a number
        OutOfRangeError: value is fractional or outside [minimum, maximum]
    """
    _validate_integer(value, name, minimum, maximum)


def validate_uint32(value: Any, name: str, positive: bool = False) -> None:
    """Validate an unsigned 32-bit integer (strictly positive when asked)."""
    _validate_integer(value, name, 1 if positive else 0, UINT32_MAX)


def validate_object(value: Any, name: str) -> None:
    if not isinstance(value, Mapping):
        raise InvalidArgTypeError(name, ["dict"], value)


__all__ = [
    "INT32_MIN",
    "INT32_MAX",
    "UINT32_MAX",
    "BYTES_LIKE_TYPES",
    "BYTES_LIKE_NAMES",
    "is_bytes_like",
    "is_number",
    "validate_string",
    "validate_int32",
    "validate_uint32",
    "validate_object",
]
