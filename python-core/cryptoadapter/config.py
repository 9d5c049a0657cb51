"""
cryptoadapter Configuration

Process-wide defaults for the adapter layer. A CryptoConfig is built from
environment variables on first use and can be replaced programmatically, e.g.
in tests:

    >>> from cryptoadapter.config import CryptoConfig, set_config
    >>> set_config(CryptoConfig(check_dh_parameters=False))

Environment Variables:
    CRYPTOADAPTER_DEFAULT_ENCODING: default encoding for stream writes
    CRYPTOADAPTER_DH_GENERATOR: generator used when none is supplied
    CRYPTOADAPTER_CHECK_DH_PARAMETERS: "0"/"false" skips the DH validity check
"""

import os
import threading
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import InvalidArgValueError

logger = logging.getLogger(__name__)

ENV_PREFIX = "CRYPTOADAPTER_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass
class CryptoConfig:
    """
    Configuration for the adapter layer.

    Attributes:
        default_encoding: Encoding assumed for text written to a stream when
            the writer does not name one ("buffer" keeps Hash's UTF-8 default)
        dh_generator: Generator used by DiffieHellman when none is supplied
        check_dh_parameters: Run the prime/generator validity check when a DH
            handle is created; when off, verify_error stays 0
    """

    default_encoding: str = "buffer"
    dh_generator: int = 2
    check_dh_parameters: bool = True

    @classmethod
    def default(cls) -> "CryptoConfig":
        """Get default configuration."""
        return cls()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CryptoConfig":
        """Build a configuration from CRYPTOADAPTER_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls.default()

        encoding = env.get(ENV_PREFIX + "DEFAULT_ENCODING")
        if encoding:
            config.default_encoding = encoding

        generator = env.get(ENV_PREFIX + "DH_GENERATOR")
        if generator:
            try:
                config.dh_generator = int(generator)
            except ValueError:
                raise InvalidArgValueError(ENV_PREFIX + "DH_GENERATOR", generator, "must be an integer")
            if config.dh_generator < 2:
                raise InvalidArgValueError(ENV_PREFIX + "DH_GENERATOR", generator, "must be >= 2")

        check = env.get(ENV_PREFIX + "CHECK_DH_PARAMETERS")
        if check:
            lowered = check.strip().lower()
            if lowered in _TRUE_VALUES:
                config.check_dh_parameters = True
            elif lowered in _FALSE_VALUES:
                config.check_dh_parameters = False
            else:
                raise InvalidArgValueError(ENV_PREFIX + "CHECK_DH_PARAMETERS", check, "must be a boolean flag")

        return config


_config: Optional[CryptoConfig] = None
_lock = threading.Lock()


def get_config() -> CryptoConfig:
    """Return the process-wide configuration, loading it from the environment once."""
    global _config
    if _config is None:
        with _lock:
            if _config is None:
                _config = CryptoConfig.from_env()
                logger.debug(f"Loaded configuration {_config}")
    return _config


def set_config(config: CryptoConfig) -> None:
    """Replace the process-wide configuration."""
    global _config
    with _lock:
        _config = config


def reset_config() -> None:
    """Forget the current configuration so the next access reloads it."""
    global _config
    with _lock:
        _config = None


__all__ = ["CryptoConfig", "get_config", "set_config", "reset_config", "ENV_PREFIX"]
