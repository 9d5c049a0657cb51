"""
cryptoadapter Encoding Boundary

Converts between raw byte buffers and text at every adapter input/output
edge. Supported encodings (case-insensitive):

    utf8 (utf-8), utf16le (utf-16le, ucs2, ucs-2), latin1 (binary), ascii,
    hex, base64, base64url

The literal "buffer" is a sentinel meaning "no text transcoding": outputs stay
raw bytes and text inputs fall back to UTF-8.

Decoding is lenient by default (hex stops at the first malformed pair, base64
ignores characters outside its alphabet and missing padding). Strict decoding
rejects malformed hex instead of truncating it.
"""

import base64
import binascii
import re
from typing import Any, Optional, Union

from .errors import InvalidArgTypeError, InvalidArgValueError, UnknownEncodingError
from .validators import BYTES_LIKE_NAMES, is_bytes_like

BUFFER = "buffer"
UTF8 = "utf8"

BytesLike = Union[bytes, bytearray, memoryview]

_ALIASES = {
    "utf8": "utf8",
    "utf-8": "utf8",
    "utf16le": "utf16le",
    "utf-16le": "utf16le",
    "ucs2": "utf16le",
    "ucs-2": "utf16le",
    "latin1": "latin1",
    "binary": "latin1",
    "ascii": "ascii",
    "hex": "hex",
    "base64": "base64",
    "base64url": "base64url",
}

_HEX_RE = re.compile(r"[0-9a-fA-F]*")
_HEX_PAIR_RE = re.compile(r"[0-9a-fA-F]{2}")
_BASE64_JUNK_RE = re.compile(r"[^A-Za-z0-9+/\-_]")
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def normalize_encoding(encoding: Any) -> Optional[str]:
    """Return the canonical encoding name, or None if it is not recognized."""
    if not isinstance(encoding, str):
        return None
    return _ALIASES.get(encoding.lower())


def is_encoding(encoding: Any) -> bool:
    return normalize_encoding(encoding) is not None


def _require_encoding(encoding: Any) -> str:
    canonical = normalize_encoding(encoding)
    if canonical is None:
        raise UnknownEncodingError(encoding)
    return canonical


def validate_encoding(data: str, encoding: str) -> None:
    """
    Check that text can be decoded under the named encoding.

    Raises:
        UnknownEncodingError: encoding is not recognized
        InvalidArgValueError: hex text with an odd number of characters
    """
    canonical = _require_encoding(encoding)
    if canonical == "hex" and len(data) % 2 != 0:
        raise InvalidArgValueError("encoding", encoding, f"is invalid for data of length {len(data)}")


def _decode_hex(text: str, strict: bool) -> bytes:
    if strict:
        if len(text) % 2 != 0 or not _HEX_RE.fullmatch(text):
            raise InvalidArgValueError("data", text, "is not valid hex")
        return bytes.fromhex(text)
    out = bytearray()
    for i in range(0, len(text) - 1, 2):
        pair = text[i:i + 2]
        if not _HEX_PAIR_RE.fullmatch(pair):
            break
        out.append(int(pair, 16))
    return bytes(out)


def _decode_base64(text: str) -> bytes:
    # Everything after the first padding character is ignored
    cleaned = _BASE64_JUNK_RE.sub("", text.split("=", 1)[0]).translate(_URLSAFE_TO_STANDARD)
    if len(cleaned) % 4 == 1:
        cleaned = cleaned[:-1]
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned)
    except binascii.Error as e:
        raise InvalidArgValueError("data", text, f"is not valid base64 ({e})")


def to_bytes(text: str, encoding: Optional[str] = UTF8, strict: bool = False) -> bytes:
    """
    Decode caller-supplied text into bytes under the named encoding.

    Args:
        text: Text to convert
        encoding: Encoding name; None or "buffer" means UTF-8
        strict: Reject malformed hex instead of truncating at the first bad pair

    Returns:
        The decoded bytes
    """
    if not encoding or encoding == BUFFER:
        encoding = UTF8
    canonical = _require_encoding(encoding)

    if canonical == "utf8":
        return text.encode("utf-8", "surrogatepass")
    if canonical == "hex":
        return _decode_hex(text, strict)
    if canonical in ("base64", "base64url"):
        return _decode_base64(text)
    if canonical in ("latin1", "ascii"):
        return bytes(ord(ch) & 0xFF for ch in text)
    return text.encode("utf-16-le", "surrogatepass")


def from_bytes(data: BytesLike, encoding: str) -> str:
    """Encode bytes as text under the named encoding."""
    canonical = _require_encoding(encoding)
    raw = bytes(data)

    if canonical == "utf8":
        return raw.decode("utf-8", "replace")
    if canonical == "hex":
        return raw.hex()
    if canonical == "base64":
        return base64.b64encode(raw).decode("ascii")
    if canonical == "base64url":
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
    if canonical == "latin1":
        return raw.decode("latin-1")
    if canonical == "ascii":
        return bytes(b & 0x7F for b in raw).decode("ascii")
    return raw[:len(raw) - len(raw) % 2].decode("utf-16-le", "surrogatepass")


def encode(data: BytesLike, encoding: Optional[str] = None) -> Union[bytes, str]:
    """Return raw bytes for no encoding or "buffer", text otherwise."""
    if not encoding or encoding == BUFFER:
        return bytes(data)
    return from_bytes(data, encoding)


def check_output_encoding(encoding: Optional[str]) -> None:
    """Reject an unknown output encoding before any state changes."""
    if encoding and encoding != BUFFER:
        _require_encoding(encoding)


def get_bytes_or_view(value: Any, name: str, encoding: Optional[str] = None) -> BytesLike:
    """
    Normalize a key-like argument to bytes.

    Text is decoded with ``encoding`` (UTF-8 for None or "buffer"); bytes-like
    values are returned unchanged.

    Raises:
        InvalidArgTypeError: value is neither text nor bytes-like
    """
    if is_bytes_like(value):
        return value
    if isinstance(value, str):
        return to_bytes(value, encoding)
    raise InvalidArgTypeError(name, ["str"] + BYTES_LIKE_NAMES, value)


def to_buf(value: Any, encoding: Optional[str] = None) -> Any:
    """Convert text to bytes with ``encoding``; leave anything else alone."""
    if isinstance(value, str):
        return to_bytes(value, encoding)
    return value


__all__ = [
    "BUFFER",
    "UTF8",
    "normalize_encoding",
    "is_encoding",
    "validate_encoding",
    "to_bytes",
    "from_bytes",
    "encode",
    "check_output_encoding",
    "get_bytes_or_view",
    "to_buf",
]
