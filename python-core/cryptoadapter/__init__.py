"""
cryptoadapter - Stream-capable adapters over hashing and Diffie-Hellman primitives.

Object handles that are constructed once, fed incrementally and finalized
once, on top of hashlib and the cryptography package.

Modules:
    hash: Hash adapter (create_hash, get_hashes) with push-style streaming
    dh: DiffieHellman, DiffieHellmanGroup and stateless diffie_hellman
    keys: Key objects and key pair generation
    engine: Engine handles wrapping hashlib and cryptography
    encoding: Text/bytes conversion under named encodings
    config: Process-wide defaults (CRYPTOADAPTER_* environment variables)
    errors: Error taxonomy with stable codes

Usage:
    >>> from cryptoadapter import create_hash
    >>> create_hash("sha256").update("abc").digest("hex")

    >>> from cryptoadapter import get_diffie_hellman
    >>> alice = get_diffie_hellman("modp14")
    >>> public_key = alice.generate_keys("base64")

    >>> from cryptoadapter import diffie_hellman, generate_key_pair
    >>> public, private = generate_key_pair("x25519")
    >>> secret = diffie_hellman({"private_key": private, "public_key": peer_public})
"""

from .config import CryptoConfig, get_config, reset_config, set_config
from .dh import (
    DHPrimeParameters,
    DHSizeParameters,
    DiffieHellman,
    DiffieHellmanGroup,
    create_diffie_hellman,
    create_diffie_hellman_group,
    diffie_hellman,
    get_diffie_hellman,
    resolve_dh_arguments,
)
from .errors import (
    CryptoError,
    EngineError,
    HashFinalizedError,
    HashUpdateFailedError,
    IllegalConstructorError,
    IncompatibleKeyError,
    InvalidArgTypeError,
    InvalidArgValueError,
    InvalidKeyObjectTypeError,
    InvalidPublicKeyError,
    OutOfRangeError,
    StreamStateError,
    UnknownEncodingError,
)
from .hash import Hash, HashOptions, HashState, create_hash, get_hashes
from .keys import (
    KeyObject,
    PrivateKeyObject,
    PublicKeyObject,
    SecretKeyObject,
    create_private_key,
    create_public_key,
    create_secret_key,
    generate_key_pair,
)

__version__ = "1.0.0"

__all__ = [
    # Hashing
    "Hash",
    "HashOptions",
    "HashState",
    "create_hash",
    "get_hashes",
    # Diffie-Hellman
    "DiffieHellman",
    "DiffieHellmanGroup",
    "DHSizeParameters",
    "DHPrimeParameters",
    "resolve_dh_arguments",
    "create_diffie_hellman",
    "create_diffie_hellman_group",
    "get_diffie_hellman",
    "diffie_hellman",
    # Keys
    "KeyObject",
    "SecretKeyObject",
    "PublicKeyObject",
    "PrivateKeyObject",
    "create_secret_key",
    "create_private_key",
    "create_public_key",
    "generate_key_pair",
    # Configuration
    "CryptoConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Errors
    "CryptoError",
    "InvalidArgTypeError",
    "InvalidArgValueError",
    "OutOfRangeError",
    "UnknownEncodingError",
    "IllegalConstructorError",
    "HashFinalizedError",
    "HashUpdateFailedError",
    "StreamStateError",
    "InvalidPublicKeyError",
    "EngineError",
    "InvalidKeyObjectTypeError",
    "IncompatibleKeyError",
]
