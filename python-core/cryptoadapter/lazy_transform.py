"""
Transform whose stream state is built on first stream-style use.

Subclasses construct their own state eagerly and call
``LazyTransform.__init__(self, options)``; the Transform buffers, listener
table and flags are only allocated once a streaming method or stream-state
property is touched. Callers that only use direct methods (update/digest)
never pay for them.
"""

import logging
from collections.abc import Mapping
from typing import Any

from .config import get_config
from .stream import Transform

logger = logging.getLogger(__name__)


def _option(options: Any, name: str) -> Any:
    if options is None:
        return None
    if isinstance(options, Mapping):
        return options.get(name)
    return getattr(options, name, None)


class LazyTransform(Transform):
    """Transform with two-phase initialization."""

    def __init__(self, options: Any = None):
        self._options = options
        self._stream_initialized = False

    def _ensure_stream_state(self) -> None:
        if self._stream_initialized:
            return
        self._stream_initialized = True
        default_encoding = _option(self._options, "default_encoding") or get_config().default_encoding
        self._init_stream_state(decode_strings=False, default_encoding=default_encoding)
        logger.debug(f"Initialized stream state for {type(self).__name__} (default encoding {default_encoding})")


__all__ = ["LazyTransform"]
