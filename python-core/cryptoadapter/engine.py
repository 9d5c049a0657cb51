"""
cryptoadapter Engine Handles

This module is the boundary to the primitives that do the actual math. The
adapters in hash.py and dh.py allocate exactly one handle per instance and
delegate every primitive operation to it:

    - HashHandle: incremental digest context (hashlib), including the
      extendable-output SHAKE functions
    - DHHandle: finite-field Diffie-Hellman parameters and key pair
      (cryptography's dh module)
    - stateless_dh: shared secret from two cryptography key objects
      (X25519, ECDH, DH)

Handles own their native state exclusively. They refuse copy.copy() and
copy.deepcopy(); duplicating digest state goes through HashHandle.copy().

Errors raised here are engine errors. The adapters surface them unchanged,
and so are the ValueErrors raised by the cryptography package itself.
"""

import functools
import hashlib
import logging
import secrets
from typing import Optional, Union

from cryptography.hazmat.primitives.asymmetric import dh, ec, x25519

from .config import get_config
from .errors import EngineError
from .groups import find_group

logger = logging.getLogger(__name__)

INT32_MAX = 2 ** 31 - 1

# Parameter check flags, same values as OpenSSL's DH_check()
DH_CHECK_P_NOT_PRIME = 0x01
DH_CHECK_P_NOT_SAFE_PRIME = 0x02
DH_NOT_SUITABLE_GENERATOR = 0x08

# Returned by DHHandle.compute_secret() in place of a secret when the peer key
# is rejected
INVALID_PUBLIC_KEY = "Invalid Key"


# ============================================================================
# Digest Name Resolution
# ============================================================================

# OpenSSL-style names mapped onto hashlib constructor names
_DIGEST_ALIASES = {
    "sha-1": "sha1",
    "sha-224": "sha224",
    "sha-256": "sha256",
    "sha-384": "sha384",
    "sha-512": "sha512",
    "sha512-224": "sha512_224",
    "sha512-256": "sha512_256",
    "sha3-224": "sha3_224",
    "sha3-256": "sha3_256",
    "sha3-384": "sha3_384",
    "sha3-512": "sha3_512",
    "shake128": "shake_128",
    "shake256": "shake_256",
    "blake2b512": "blake2b",
    "blake2s256": "blake2s",
    "rmd160": "ripemd160",
    "ripemd": "ripemd160",
}

_PREFERRED_NAMES = {
    "sha512_224": "sha512-224",
    "sha512_256": "sha512-256",
    "sha3_224": "sha3-224",
    "sha3_256": "sha3-256",
    "sha3_384": "sha3-384",
    "sha3_512": "sha3-512",
    "shake_128": "shake128",
    "shake_256": "shake256",
    "blake2b": "blake2b512",
    "blake2s": "blake2s256",
}

# Natural output length of the extendable-output functions, in bytes
_XOF_DEFAULT_LENGTHS = {
    "shake_128": 16,
    "shake_256": 32,
}


def _constructible(name: str) -> bool:
    try:
        hashlib.new(name)
    except ValueError:
        return False
    return True


@functools.lru_cache(maxsize=None)
def _available_digests() -> frozenset:
    # algorithms_available may list names the loaded OpenSSL providers refuse
    names = {name.lower() for name in hashlib.algorithms_available}
    return frozenset(name for name in names if _constructible(name))


def resolve_digest(algorithm: str) -> str:
    """
    Map a digest name onto the hashlib name that implements it.

    Accepts OpenSSL spellings ("sha3-256", "shake128", "blake2b512") and the
    "RSA-" signature aliases ("RSA-SHA256"), case-insensitively.

    Raises:
        EngineError: the digest is not available
    """
    name = algorithm.lower()
    if name.startswith("rsa-"):
        name = name[4:]
    name = _DIGEST_ALIASES.get(name, name)
    if name not in _available_digests():
        raise EngineError("Digest method not supported", details={"algorithm": algorithm})
    return name


def supported_digests():
    """Names of every digest HashHandle accepts, in their preferred spelling."""
    return sorted({_PREFERRED_NAMES.get(name, name) for name in _available_digests()})


# ============================================================================
# Hash Handle
# ============================================================================


class HashHandle:
    """
    Incremental digest context bound to one algorithm and output length.

    Attributes:
        name: hashlib name of the algorithm
        digest_size: Number of bytes digest() returns
        is_xof: Whether the output length is caller-configurable
    """

    def __init__(self, algorithm: str, xof_len: Optional[int] = None):
        name = resolve_digest(algorithm)
        self._setup(name, hashlib.new(name), xof_len)
        logger.debug(f"Created hash handle for {name} ({self._md_len} bytes)")

    @classmethod
    def _from_context(cls, name: str, ctx, xof_len: Optional[int]) -> "HashHandle":
        handle = cls.__new__(cls)
        handle._setup(name, ctx, xof_len)
        return handle

    def _setup(self, name: str, ctx, xof_len: Optional[int]) -> None:
        self._name = name
        self._ctx = ctx
        self._xof = name in _XOF_DEFAULT_LENGTHS
        self._md_len = _XOF_DEFAULT_LENGTHS.get(name, ctx.digest_size)
        if xof_len is not None and xof_len != self._md_len:
            if not self._xof:
                raise EngineError("invalid digest size", details={"algorithm": name, "output_length": xof_len})
            self._md_len = xof_len

    @property
    def name(self) -> str:
        return self._name

    @property
    def digest_size(self) -> int:
        return self._md_len

    @property
    def is_xof(self) -> bool:
        return self._xof

    def update(self, data) -> bool:
        """Feed bytes to the context; False when the context refuses them."""
        size = data.nbytes if isinstance(data, memoryview) else len(data)
        if size > INT32_MAX:
            raise EngineError("data is too long")
        try:
            self._ctx.update(data)
        except (BufferError, TypeError, ValueError) as e:
            logger.error(f"Digest update failed for {self._name}: {e}")
            return False
        return True

    def digest(self) -> bytes:
        if self._xof:
            return self._ctx.digest(self._md_len)
        return self._ctx.digest()

    def copy(self, xof_len: Optional[int] = None) -> "HashHandle":
        """
        Duplicate the digest state into a new, independent handle.

        The duplicate uses the algorithm's natural output length unless a new
        XOF length is given.
        """
        duplicate = HashHandle._from_context(self._name, self._ctx.copy(), xof_len)
        logger.debug(f"Copied hash handle for {self._name}")
        return duplicate

    def __copy__(self):
        raise TypeError("HashHandle owns its digest state; use HashHandle.copy()")

    def __deepcopy__(self, memo):
        raise TypeError("HashHandle owns its digest state; use HashHandle.copy()")


# ============================================================================
# Diffie-Hellman Parameter Checks
# ============================================================================

_SMALL_PRIMES = (
    3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59, 61, 67, 71, 73,
    79, 83, 89, 97, 101, 103, 107, 109, 113, 127, 131, 137, 139, 149, 151, 157,
)


def _miller_rabin_rounds(bits: int) -> int:
    # Round counts of OpenSSL's BN_prime_checks_for_size()
    if bits >= 3747:
        return 3
    if bits >= 1345:
        return 4
    if bits >= 476:
        return 5
    if bits >= 400:
        return 6
    if bits >= 347:
        return 7
    if bits >= 308:
        return 8
    if bits >= 55:
        return 27
    return 34


def is_probable_prime(n: int) -> bool:
    """Miller-Rabin probable-prime test with random bases."""
    if n < 2:
        return False
    if n == 2:
        return True
    if n % 2 == 0:
        return False
    for p in _SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for _ in range(_miller_rabin_rounds(n.bit_length())):
        a = 2 + secrets.randbelow(n - 3)
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n - 1:
                break
        else:
            return False
    return True


@functools.lru_cache(maxsize=32)
def check_dh_parameters(prime: int, generator: int) -> int:
    """
    Validity flags for a (prime, generator) pair, 0 when both look sound.

    A prime that is not prime gets DH_CHECK_P_NOT_PRIME only; a prime p whose
    (p - 1) / 2 is composite gets DH_CHECK_P_NOT_SAFE_PRIME. A generator
    outside (1, p - 1) gets DH_NOT_SUITABLE_GENERATOR.
    """
    codes = 0
    if generator <= 1 or generator >= prime - 1:
        codes |= DH_NOT_SUITABLE_GENERATOR
    if not is_probable_prime(prime):
        codes |= DH_CHECK_P_NOT_PRIME
    elif not is_probable_prime((prime - 1) // 2):
        codes |= DH_CHECK_P_NOT_SAFE_PRIME
    return codes


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian encoding (empty for zero)."""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


# ============================================================================
# Diffie-Hellman Handle
# ============================================================================


class DHHandle:
    """
    Finite-field Diffie-Hellman state: parameters plus an optional key pair.

    Built either from a prime size in bits (parameters are generated) or from
    explicit prime bytes, each combined with a generator number or generator
    bytes. DHHandle.from_group() builds one from a named group instead.

    Any prime is accepted. The validity flags reported by verify_error are
    computed once, when the parameters are set, and never recomputed.
    cryptography refuses to load parameters that fail its own check, so the
    parameters object is only built when key generation or key agreement
    first needs it.
    """

    def __init__(self, size_or_key: Union[int, bytes], generator: Union[int, bytes]):
        if isinstance(size_or_key, int):
            if not isinstance(generator, int):
                raise EngineError("DH init failed: invalid parameters")
            if size_or_key < 0 or generator < 0:
                raise EngineError("DH init failed: modulus too small")
            logger.debug(f"Generating {size_or_key}-bit DH parameters with generator {generator}")
            parameters = dh.generate_parameters(generator=generator, key_size=size_or_key)
            numbers = parameters.parameter_numbers()
            self._set_parameters(numbers.p, numbers.g, parameters)
            return

        if len(size_or_key) > INT32_MAX:
            raise EngineError("DH init failed: key is too large")
        if len(size_or_key) == 0:
            raise EngineError("DH init failed: invalid key")
        g = self._resolve_generator(generator)
        self._set_parameters(int.from_bytes(size_or_key, "big"), g)

    @classmethod
    def from_group(cls, name: str) -> "DHHandle":
        """Build a handle from a named group such as "modp14"."""
        found = find_group(name)
        if found is None:
            raise EngineError("Failed to init DHGroup: invalid group", details={"group": name})
        prime, generator = found
        handle = cls.__new__(cls)
        handle._set_parameters(prime, generator)
        return handle

    @staticmethod
    def _resolve_generator(generator: Union[int, bytes]) -> int:
        if isinstance(generator, int):
            if generator < 2:
                raise EngineError("DH init failed: generator too small")
            return generator
        if len(generator) > INT32_MAX:
            raise EngineError("DH init failed: generator is too large")
        if len(generator) == 0:
            raise EngineError("DH init failed: invalid generator")
        value = int.from_bytes(generator, "big")
        if value in (0, 1):
            raise EngineError("DH init failed: invalid generator")
        return value

    def _set_parameters(self, prime: int, generator: int, parameters=None) -> None:
        self._prime = prime
        self._generator = generator
        self._parameters = parameters
        self._parameter_numbers = None
        self._private_value: Optional[int] = None
        self._public_value: Optional[int] = None
        self._verify_error = 0
        if get_config().check_dh_parameters:
            self._verify_error = check_dh_parameters(prime, generator)
            if self._verify_error:
                logger.warning(f"DH parameter check reported flags {self._verify_error:#x}")
            else:
                logger.debug(f"DH parameters passed validity check ({prime.bit_length()} bits)")

    def _load_parameters(self, operation: str):
        """The cryptography parameter numbers and parameters, built on first use."""
        if self._parameter_numbers is None:
            try:
                numbers = dh.DHParameterNumbers(self._prime, self._generator)
                if self._parameters is None:
                    self._parameters = numbers.parameters()
            except ValueError as e:
                raise EngineError(f"{operation} failed: {e}", details={"verify_error": self._verify_error}) from e
            self._parameter_numbers = numbers
        return self._parameter_numbers, self._parameters

    @property
    def prime_size(self) -> int:
        return (self._prime.bit_length() + 7) // 8

    def generate_keys(self) -> bytes:
        """
        Generate a key pair and return the public key.

        When a private key is already set, only the public key is (re)derived
        from it.

        Raises:
            EngineError: cryptography cannot load the parameters
        """
        if self._private_value is None:
            _, parameters = self._load_parameters("DH generateKeys()")
            private_key = parameters.generate_private_key()
            self._private_value = private_key.private_numbers().x
            self._public_value = private_key.public_key().public_numbers().y
        else:
            self._public_value = pow(self._generator, self._private_value, self._prime)
        return int_to_bytes(self._public_value)

    def compute_secret(self, key) -> Union[bytes, str]:
        """
        Shared secret against the peer public key, zero-padded to the prime size.

        Returns:
            The secret bytes, or INVALID_PUBLIC_KEY when the peer key is rejected

        Raises:
            EngineError: empty key, no private key, a peer value that is
                too small (<= 1) or too large (>= p - 1), or parameters and
                private key that cryptography cannot load
        """
        if len(key) > INT32_MAX:
            raise EngineError("DH computeSecret() failed: key is too large")
        if len(key) == 0:
            raise EngineError("DH computeSecret() failed: invalid key")
        if self._private_value is None:
            raise EngineError("DH computeSecret() failed: no private key, call generate_keys() first")

        peer = int.from_bytes(key, "big")
        if peer <= 1:
            raise EngineError("DH computeSecret() failed: Supplied key is too small")
        if peer >= self._prime - 1:
            raise EngineError("DH computeSecret() failed: Supplied key is too large")

        numbers, _ = self._load_parameters("DH computeSecret()")
        own_public = dh.DHPublicNumbers(pow(self._generator, self._private_value, self._prime), numbers)
        try:
            private_key = dh.DHPrivateNumbers(self._private_value, own_public).private_key()
        except ValueError as e:
            raise EngineError(f"DH computeSecret() failed: {e}") from e

        try:
            peer_key = dh.DHPublicNumbers(peer, numbers).public_key()
            secret = private_key.exchange(peer_key)
        except ValueError as e:
            logger.debug(f"Peer public key rejected: {e}")
            return INVALID_PUBLIC_KEY
        return secret.rjust(self.prime_size, b"\x00")

    def get_prime(self) -> bytes:
        return int_to_bytes(self._prime)

    def get_generator(self) -> bytes:
        return int_to_bytes(self._generator)

    def get_public_key(self) -> bytes:
        if self._public_value is None:
            raise EngineError("No public key - did you forget to generate one?")
        return int_to_bytes(self._public_value)

    def get_private_key(self) -> bytes:
        if self._private_value is None:
            raise EngineError("No private key - did you forget to generate one?")
        return int_to_bytes(self._private_value)

    def set_public_key(self, key) -> None:
        self._public_value = int.from_bytes(key, "big")

    def set_private_key(self, key) -> None:
        self._private_value = int.from_bytes(key, "big")

    def get_verify_error(self) -> int:
        return self._verify_error

    def __copy__(self):
        raise TypeError("DHHandle owns its key material and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("DHHandle owns its key material and cannot be copied")


# ============================================================================
# Stateless Diffie-Hellman
# ============================================================================

_PRIVATE_KEY_TYPES = (x25519.X25519PrivateKey, ec.EllipticCurvePrivateKey, dh.DHPrivateKey)


def stateless_dh(private_handle, public_handle) -> bytes:
    """
    Shared secret between a private key and a peer key of the same family.

    A private peer key contributes its public half.
    """
    if isinstance(public_handle, _PRIVATE_KEY_TYPES):
        public_handle = public_handle.public_key()

    if isinstance(private_handle, x25519.X25519PrivateKey):
        return private_handle.exchange(public_handle)
    if isinstance(private_handle, ec.EllipticCurvePrivateKey):
        return private_handle.exchange(ec.ECDH(), public_handle)
    if isinstance(private_handle, dh.DHPrivateKey):
        secret = private_handle.exchange(public_handle)
        return secret.rjust((private_handle.key_size + 7) // 8, b"\x00")
    raise EngineError("Unsupported key type for Diffie-Hellman")


__all__ = [
    "DH_CHECK_P_NOT_PRIME",
    "DH_CHECK_P_NOT_SAFE_PRIME",
    "DH_NOT_SUITABLE_GENERATOR",
    "INVALID_PUBLIC_KEY",
    "resolve_digest",
    "supported_digests",
    "HashHandle",
    "is_probable_prime",
    "check_dh_parameters",
    "int_to_bytes",
    "DHHandle",
    "stateless_dh",
]
