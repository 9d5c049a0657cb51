"""
cryptoadapter Diffie-Hellman Adapters

Stateful key agreement objects and the stateless key-object path:

    - DiffieHellman: parameters from a prime size in bits, or an explicit
      prime, with a generator number or generator bytes
    - DiffieHellmanGroup: parameters from a named MODP group
    - diffie_hellman: shared secret from two KeyObjects, no adapter needed

Constructor arguments are resolved by resolve_dh_arguments() into a
DHSizeParameters or DHPrimeParameters value before any engine resource is
allocated. The resolution keeps the legacy call shape
``DiffieHellman(prime, generator, gen_encoding)``, in which the encoding
argument is omitted: a key_encoding that is not an encoding name is taken as
the generator.

Example:
    >>> alice = get_diffie_hellman("modp14")
    >>> bob = get_diffie_hellman("modp14")
    >>> alice_public = alice.generate_keys()
    >>> bob_public = bob.generate_keys()
    >>> alice.compute_secret(bob_public) == bob.compute_secret(alice_public)
    True
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from .config import get_config
from .encoding import BUFFER, UTF8, check_output_encoding, encode, get_bytes_or_view, is_encoding, to_buf
from .engine import DHHandle, stateless_dh
from .errors import (
    IncompatibleKeyError,
    InvalidArgTypeError,
    InvalidArgValueError,
    InvalidKeyObjectTypeError,
    InvalidPublicKeyError,
)
from .keys import KeyObject
from .validators import BYTES_LIKE_NAMES, is_bytes_like, is_number, validate_int32, validate_object, validate_string

logger = logging.getLogger(__name__)

STATELESS_DH_KEY_TYPES = ("dh", "ec", "x25519")


# ============================================================================
# Argument Resolution
# ============================================================================


@dataclass(frozen=True)
class DHSizeParameters:
    """Generate a prime of ``bits`` bits for ``generator``."""

    bits: int
    generator: Union[int, bytes]


@dataclass(frozen=True)
class DHPrimeParameters:
    """Use an explicit big-endian ``prime`` with ``generator``."""

    prime: bytes
    generator: Union[int, bytes]


DHParameters = Union[DHSizeParameters, DHPrimeParameters]


def _is_unset(value: Any) -> bool:
    if value is None or value is False:
        return True
    if is_number(value):
        return value == 0 or value != value
    return isinstance(value, str) and value == ""


def resolve_dh_arguments(
    size_or_key: Any,
    key_encoding: Any = None,
    generator: Any = None,
    gen_encoding: Any = None,
) -> DHParameters:
    """
    Resolve DiffieHellman constructor arguments.

    Args:
        size_or_key: Prime size in bits, or the prime as text or bytes
        key_encoding: Encoding of a text prime; anything that is not an
            encoding name (nor "buffer") is taken as the generator instead
        generator: Generator number, text or bytes (default from config)
        gen_encoding: Encoding of a text generator

    Returns:
        DHSizeParameters or DHPrimeParameters

    Raises:
        InvalidArgTypeError: size_or_key or generator has an unsupported type
        OutOfRangeError: a numeric argument is not a signed 32-bit integer
    """
    numeric = is_number(size_or_key)
    if not numeric and not isinstance(size_or_key, str) and not is_bytes_like(size_or_key):
        raise InvalidArgTypeError("size_or_key", ["int", "str"] + BYTES_LIKE_NAMES, size_or_key)

    # Negative sizes pass here; the engine rejects them
    if numeric:
        validate_int32(size_or_key, "size_or_key")

    if key_encoding and not is_encoding(key_encoding) and key_encoding != BUFFER:
        logger.debug(f"Treating key_encoding {key_encoding!r} as the generator")
        gen_encoding = generator
        generator = key_encoding
        key_encoding = None

    key_encoding = key_encoding or UTF8
    gen_encoding = gen_encoding or UTF8

    if _is_unset(generator):
        generator = get_config().dh_generator
    elif is_number(generator):
        validate_int32(generator, "generator")
        generator = int(generator)
    elif isinstance(generator, str):
        generator = to_buf(generator, gen_encoding)
    elif is_bytes_like(generator):
        generator = bytes(generator)
    else:
        raise InvalidArgTypeError("generator", ["int", "str"] + BYTES_LIKE_NAMES, generator)

    if numeric:
        return DHSizeParameters(bits=int(size_or_key), generator=generator)
    return DHPrimeParameters(prime=bytes(to_buf(size_or_key, key_encoding)), generator=generator)


def _create_handle(parameters: DHParameters) -> DHHandle:
    if isinstance(parameters, DHSizeParameters):
        return DHHandle(parameters.bits, parameters.generator)
    return DHHandle(parameters.prime, parameters.generator)


# ============================================================================
# Adapters
# ============================================================================


class _DiffieHellmanBase:
    """Operations shared by DiffieHellman and DiffieHellmanGroup."""

    _handle: DHHandle

    def generate_keys(self, encoding: Optional[str] = None) -> Union[bytes, str]:
        """Generate (or re-derive) this side's key pair and return the public key."""
        check_output_encoding(encoding)
        return encode(self._handle.generate_keys(), encoding)

    def compute_secret(
        self,
        key: Any,
        input_encoding: Optional[str] = None,
        output_encoding: Optional[str] = None,
    ) -> Union[bytes, str]:
        """
        Compute the shared secret with the peer's public key.

        Args:
            key: Peer public key as bytes, or text in ``input_encoding``
            input_encoding: Encoding of a text key
            output_encoding: Encoding of the result; raw bytes when omitted

        Raises:
            InvalidArgTypeError: key is neither text nor bytes-like
            InvalidPublicKeyError: the engine rejected the peer key
            EngineError: no private key, or a peer key out of range
        """
        buf = get_bytes_or_view(key, "key", input_encoding)
        check_output_encoding(output_encoding)
        secret = self._handle.compute_secret(bytes(buf))
        if isinstance(secret, str):
            raise InvalidPublicKeyError()
        return encode(secret, output_encoding)

    def get_prime(self, encoding: Optional[str] = None) -> Union[bytes, str]:
        return encode(self._handle.get_prime(), encoding)

    def get_generator(self, encoding: Optional[str] = None) -> Union[bytes, str]:
        return encode(self._handle.get_generator(), encoding)

    def get_public_key(self, encoding: Optional[str] = None) -> Union[bytes, str]:
        return encode(self._handle.get_public_key(), encoding)

    def get_private_key(self, encoding: Optional[str] = None) -> Union[bytes, str]:
        return encode(self._handle.get_private_key(), encoding)

    def set_public_key(self, key: Any, encoding: Optional[str] = None):
        self._handle.set_public_key(bytes(get_bytes_or_view(key, "key", encoding)))
        return self

    def set_private_key(self, key: Any, encoding: Optional[str] = None):
        self._handle.set_private_key(bytes(get_bytes_or_view(key, "key", encoding)))
        return self

    @property
    def verify_error(self) -> int:
        """Validity flags recorded for the parameters when they were set (0 when sound)."""
        return self._handle.get_verify_error()


class DiffieHellman(_DiffieHellmanBase):
    """
    Diffie-Hellman key agreement over explicit or generated parameters.

    Args:
        size_or_key: Prime size in bits, or the prime as text or bytes
        key_encoding: Encoding of a text prime (see resolve_dh_arguments)
        generator: Generator number, text or bytes
        gen_encoding: Encoding of a text generator
    """

    def __init__(self, size_or_key, key_encoding=None, generator=None, gen_encoding=None):
        parameters = resolve_dh_arguments(size_or_key, key_encoding, generator, gen_encoding)
        self._handle = _create_handle(parameters)


class DiffieHellmanGroup(_DiffieHellmanBase):
    """Diffie-Hellman key agreement over a named group ("modp14" .. "modp18")."""

    def __init__(self, name: str):
        validate_string(name, "name")
        self._handle = DHHandle.from_group(name)


def create_diffie_hellman(size_or_key, key_encoding=None, generator=None, gen_encoding=None) -> DiffieHellman:
    return DiffieHellman(size_or_key, key_encoding, generator, gen_encoding)


def create_diffie_hellman_group(name: str) -> DiffieHellmanGroup:
    return DiffieHellmanGroup(name)


get_diffie_hellman = create_diffie_hellman_group


# ============================================================================
# Stateless Diffie-Hellman
# ============================================================================


def diffie_hellman(options) -> bytes:
    """
    Shared secret from two key objects of the same family.

    Args:
        options: Mapping with "private_key" (a private KeyObject) and
            "public_key" (a public or private KeyObject)

    Returns:
        Raw secret bytes

    Raises:
        InvalidArgTypeError: options is not a mapping
        InvalidArgValueError: either key is not a KeyObject
        InvalidKeyObjectTypeError: private_key is not private, or public_key
            is a secret key
        IncompatibleKeyError: families differ or are not dh, ec or x25519
    """
    validate_object(options, "options")

    private_key = options.get("private_key")
    public_key = options.get("public_key")
    if not isinstance(private_key, KeyObject):
        raise InvalidArgValueError("options.private_key", private_key)
    if not isinstance(public_key, KeyObject):
        raise InvalidArgValueError("options.public_key", public_key)

    if private_key.type != "private":
        raise InvalidKeyObjectTypeError(private_key.type, "private")
    if public_key.type not in ("public", "private"):
        raise InvalidKeyObjectTypeError(public_key.type, "private or public")

    private_type = private_key.asymmetric_key_type
    public_type = public_key.asymmetric_key_type
    if private_type != public_type or private_type not in STATELESS_DH_KEY_TYPES:
        raise IncompatibleKeyError("key types for Diffie-Hellman", f"{private_type} and {public_type}")

    return stateless_dh(private_key.handle, public_key.handle)


__all__ = [
    "STATELESS_DH_KEY_TYPES",
    "DHSizeParameters",
    "DHPrimeParameters",
    "resolve_dh_arguments",
    "DiffieHellman",
    "DiffieHellmanGroup",
    "create_diffie_hellman",
    "create_diffie_hellman_group",
    "get_diffie_hellman",
    "diffie_hellman",
]
