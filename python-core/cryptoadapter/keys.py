"""
cryptoadapter Key Objects

Thin classification wrappers around ``cryptography`` key objects. A KeyObject
records what kind of key it holds (``type``: secret, public or private) and,
for asymmetric keys, which algorithm family it belongs to
(``asymmetric_key_type``). The wrapped key itself is the engine handle used by
the stateless Diffie-Hellman path.

Features:
- Classification of cryptography private/public keys
- Secret keys from bytes or encoded text
- Private/public keys from PEM or DER
- Key pair generation for X25519, X448, EC and DH
"""

import hmac
import logging
from typing import Any, Optional, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import dh, dsa, ec, ed448, ed25519, rsa, x448, x25519

from .encoding import get_bytes_or_view
from .errors import InvalidArgTypeError, InvalidArgValueError
from .groups import find_group
from .validators import BYTES_LIKE_NAMES, is_bytes_like, validate_object, validate_string

logger = logging.getLogger(__name__)

# (private class, public class, family name)
_KEY_FAMILIES = (
    (dh.DHPrivateKey, dh.DHPublicKey, "dh"),
    (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey, "ec"),
    (x25519.X25519PrivateKey, x25519.X25519PublicKey, "x25519"),
    (x448.X448PrivateKey, x448.X448PublicKey, "x448"),
    (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey, "ed25519"),
    (ed448.Ed448PrivateKey, ed448.Ed448PublicKey, "ed448"),
    (rsa.RSAPrivateKey, rsa.RSAPublicKey, "rsa"),
    (dsa.DSAPrivateKey, dsa.DSAPublicKey, "dsa"),
)

_NAMED_CURVES = {
    "prime256v1": ec.SECP256R1,
    "secp256r1": ec.SECP256R1,
    "p-256": ec.SECP256R1,
    "secp384r1": ec.SECP384R1,
    "p-384": ec.SECP384R1,
    "secp521r1": ec.SECP521R1,
    "p-521": ec.SECP521R1,
    "secp256k1": ec.SECP256K1,
}


class KeyObject:
    """
    A classified key.

    Attributes:
        type: "secret", "public" or "private"
        asymmetric_key_type: Algorithm family of an asymmetric key, None for
            secret keys
        handle: The wrapped cryptography key (bytes for secret keys)
    """

    type: Optional[str] = None

    def __init__(self, handle: Any, asymmetric_key_type: Optional[str] = None):
        self._handle = handle
        self._asymmetric_key_type = asymmetric_key_type

    @classmethod
    def from_key(cls, key: Any) -> "KeyObject":
        """Wrap a cryptography private or public key object."""
        for private_cls, public_cls, family in _KEY_FAMILIES:
            if isinstance(key, private_cls):
                return PrivateKeyObject(key, family)
            if isinstance(key, public_cls):
                return PublicKeyObject(key, family)
        raise InvalidArgTypeError("key", ["PrivateKey", "PublicKey"], key)

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def asymmetric_key_type(self) -> Optional[str]:
        return self._asymmetric_key_type

    def _comparable(self) -> bytes:
        raise NotImplementedError

    def equals(self, other: "KeyObject") -> bool:
        if not isinstance(other, KeyObject):
            raise InvalidArgTypeError("other_key_object", ["KeyObject"], other)
        if self.type != other.type or self.asymmetric_key_type != other.asymmetric_key_type:
            return False
        return hmac.compare_digest(self._comparable(), other._comparable())

    def __repr__(self) -> str:
        family = f", {self._asymmetric_key_type}" if self._asymmetric_key_type else ""
        return f"{type(self).__name__}({self.type}{family})"


class SecretKeyObject(KeyObject):
    type = "secret"

    @property
    def symmetric_key_size(self) -> int:
        return len(self._handle)

    def export(self) -> bytes:
        return bytes(self._handle)

    def _comparable(self) -> bytes:
        return self._handle


class PublicKeyObject(KeyObject):
    type = "public"

    def _comparable(self) -> bytes:
        return self._handle.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )


class PrivateKeyObject(KeyObject):
    type = "private"

    def _comparable(self) -> bytes:
        return self._handle.private_bytes(
            serialization.Encoding.DER, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
        )


# ============================================================================
# Constructors
# ============================================================================


def _key_material(key: Any, name: str) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    if is_bytes_like(key):
        return bytes(key)
    raise InvalidArgTypeError(name, ["str"] + BYTES_LIKE_NAMES, key)


def _is_pem(data: bytes) -> bool:
    return data.lstrip().startswith(b"-----BEGIN")


def create_secret_key(key: Any, encoding: Optional[str] = None) -> SecretKeyObject:
    """Create a secret key from bytes, or from text decoded with ``encoding``."""
    return SecretKeyObject(bytes(get_bytes_or_view(key, "key", encoding)))


def create_private_key(key: Any, password: Optional[Any] = None) -> PrivateKeyObject:
    """
    Create a private key from a cryptography private key or PEM/DER bytes.

    Args:
        key: cryptography private key object, or PEM/DER encoded key material
        password: Passphrase of an encrypted key (str or bytes)

    Returns:
        PrivateKeyObject wrapping the loaded key

    Raises:
        InvalidArgTypeError: key is neither a key object nor key material
        ValueError: the key material cannot be parsed (from cryptography)
    """
    if isinstance(key, KeyObject):
        raise InvalidArgTypeError("key", ["str"] + BYTES_LIKE_NAMES, key)
    if not is_bytes_like(key) and not isinstance(key, str):
        wrapped = KeyObject.from_key(key)
        if not isinstance(wrapped, PrivateKeyObject):
            raise InvalidArgTypeError("key", ["PrivateKey"], key)
        return wrapped

    data = _key_material(key, "key")
    if isinstance(password, str):
        password = password.encode("utf-8")
    if _is_pem(data):
        loaded = serialization.load_pem_private_key(data, password=password)
    else:
        loaded = serialization.load_der_private_key(data, password=password)
    return KeyObject.from_key(loaded)


def create_public_key(key: Any) -> PublicKeyObject:
    """
    Create a public key.

    Accepts a cryptography public or private key object, a private KeyObject
    (its public half is taken), or PEM/DER encoded public or private key
    material.
    """
    if isinstance(key, PrivateKeyObject):
        return KeyObject.from_key(key.handle.public_key())
    if isinstance(key, KeyObject):
        raise InvalidArgTypeError("key", ["str"] + BYTES_LIKE_NAMES + ["PrivateKeyObject"], key)
    if not is_bytes_like(key) and not isinstance(key, str):
        wrapped = KeyObject.from_key(key)
        if isinstance(wrapped, PrivateKeyObject):
            return KeyObject.from_key(key.public_key())
        return wrapped

    data = _key_material(key, "key")
    if _is_pem(data):
        if b"PRIVATE KEY" in data:
            loaded = serialization.load_pem_private_key(data, password=None).public_key()
        else:
            loaded = serialization.load_pem_public_key(data)
    else:
        loaded = serialization.load_der_public_key(data)
    return KeyObject.from_key(loaded)


# ============================================================================
# Key Pair Generation
# ============================================================================


def _dh_parameters(options: dict) -> dh.DHParameters:
    group = options.get("group")
    if group is not None:
        validate_string(group, "options.group")
        found = find_group(group)
        if found is None:
            raise InvalidArgValueError("options.group", group, "is not a known group")
        prime, generator = found
        return dh.DHParameterNumbers(prime, generator).parameters()

    generator = options.get("generator", 2)
    prime = options.get("prime")
    if prime is not None:
        if not is_bytes_like(prime):
            raise InvalidArgTypeError("options.prime", BYTES_LIKE_NAMES, prime)
        return dh.DHParameterNumbers(int.from_bytes(prime, "big"), generator).parameters()

    prime_length = options.get("prime_length")
    if prime_length is not None:
        return dh.generate_parameters(generator=generator, key_size=prime_length)

    raise InvalidArgValueError("options", options, "must specify group, prime or prime_length")


def generate_key_pair(key_type: str, options: Optional[dict] = None) -> Tuple[PublicKeyObject, PrivateKeyObject]:
    """
    Generate a key pair.

    Args:
        key_type: "x25519", "x448", "ec" or "dh"
        options: Family parameters; "named_curve" for ec, "group" or
            "prime"/"prime_length" plus "generator" for dh

    Returns:
        Tuple of (public key, private key)
    """
    validate_string(key_type, "type")
    if options is None:
        options = {}
    validate_object(options, "options")

    if key_type == "x25519":
        private_key = x25519.X25519PrivateKey.generate()
    elif key_type == "x448":
        private_key = x448.X448PrivateKey.generate()
    elif key_type == "ec":
        curve_name = options.get("named_curve")
        validate_string(curve_name, "options.named_curve")
        curve = _NAMED_CURVES.get(curve_name.lower())
        if curve is None:
            raise InvalidArgValueError("options.named_curve", curve_name, "is not a supported curve")
        private_key = ec.generate_private_key(curve())
    elif key_type == "dh":
        private_key = _dh_parameters(options).generate_private_key()
    else:
        raise InvalidArgValueError("type", key_type, "must be a supported key type")

    logger.debug(f"Generated {key_type} key pair")
    private = KeyObject.from_key(private_key)
    public = KeyObject.from_key(private_key.public_key())
    return public, private


__all__ = [
    "KeyObject",
    "SecretKeyObject",
    "PublicKeyObject",
    "PrivateKeyObject",
    "create_secret_key",
    "create_private_key",
    "create_public_key",
    "generate_key_pair",
]
