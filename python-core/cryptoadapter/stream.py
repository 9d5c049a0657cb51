"""
cryptoadapter Push-Style Transform

A synchronous, minimal duplex stage: chunks written to the writable side are
handed to ``_transform`` in write order, ``end()`` runs ``_flush`` exactly
once, and whatever the hooks push comes out of the readable side, either to
"data" listeners or into a buffer drained by ``read()``.

Example:
    >>> stage = SomeTransform()
    >>> stage.on("data", chunks.append)
    >>> stage.write(b"abc")
    >>> stage.end()
"""

from typing import Any, Callable, Dict, List, Optional

from .encoding import BUFFER, UTF8, to_bytes
from .errors import InvalidArgTypeError, InvalidArgValueError, StreamStateError
from .validators import BYTES_LIKE_NAMES, is_bytes_like

EVENTS = ("data", "finish", "end")


class Transform:
    """
    Push-style transform stage.

    Subclasses implement ``_transform(chunk, encoding, callback)`` and
    optionally ``_flush(callback)``. Both receive ``callback(error=None,
    data=None)``, which raises ``error`` or pushes ``data``.
    """

    def __init__(self, decode_strings: bool = True, default_encoding: str = UTF8):
        self._init_stream_state(decode_strings, default_encoding)

    def _init_stream_state(self, decode_strings: bool, default_encoding: str) -> None:
        self._decode_strings = decode_strings
        self._default_encoding = default_encoding
        self._buffer: List[bytes] = []
        self._listeners: Dict[str, List[Callable]] = {event: [] for event in EVENTS}
        self._writable_ended = False
        self._writable_finished = False
        self._eof_pushed = False
        self._end_emitted = False

    def _ensure_stream_state(self) -> None:
        """Hook for subclasses that build the stream state on first use."""

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _transform(self, chunk: Any, encoding: str, callback: Callable) -> None:
        raise NotImplementedError("_transform() is not implemented")

    def _flush(self, callback: Callable) -> None:
        callback()

    def _callback(self, error: Optional[BaseException] = None, data: Any = None) -> None:
        if error is not None:
            raise error
        if data is not None:
            self.push(data)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Callable) -> "Transform":
        self._ensure_stream_state()
        if event not in self._listeners:
            raise InvalidArgValueError("event", event, f"must be one of {', '.join(EVENTS)}")
        self._listeners[event].append(listener)
        if event == "data" and self._buffer:
            data = b"".join(self._buffer)
            self._buffer.clear()
            self._emit("data", data)
            self._maybe_emit_end()
        return self

    def _emit(self, event: str, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)

    def _maybe_emit_end(self) -> None:
        if self._eof_pushed and not self._buffer and not self._end_emitted:
            self._end_emitted = True
            self._emit("end")

    # ------------------------------------------------------------------
    # Writable side
    # ------------------------------------------------------------------

    def write(self, chunk: Any, encoding: Optional[str] = None) -> bool:
        """Hand one chunk to ``_transform``; text is decoded first when decode_strings is set."""
        self._ensure_stream_state()
        if self._writable_ended:
            raise StreamStateError("write after end", "ERR_STREAM_WRITE_AFTER_END")

        if isinstance(chunk, str):
            encoding = encoding or self._default_encoding
            if self._decode_strings:
                chunk = to_bytes(chunk, encoding)
                encoding = BUFFER
        elif is_bytes_like(chunk):
            encoding = BUFFER
        else:
            raise InvalidArgTypeError("chunk", ["str"] + BYTES_LIKE_NAMES, chunk)

        self._transform(chunk, encoding, self._callback)
        return True

    def end(self, chunk: Any = None, encoding: Optional[str] = None) -> "Transform":
        """Write an optional last chunk, then flush and close the stream."""
        self._ensure_stream_state()
        if chunk is not None:
            self.write(chunk, encoding)
        if self._writable_ended:
            return self
        # A failed flush leaves the stream open
        self._flush(self._callback)
        self._writable_ended = True
        self._writable_finished = True
        self._emit("finish")
        self.push(None)
        return self

    # ------------------------------------------------------------------
    # Readable side
    # ------------------------------------------------------------------

    def push(self, chunk: Any) -> bool:
        """Queue a chunk for readers; None signals end of stream."""
        self._ensure_stream_state()
        if self._eof_pushed:
            raise StreamStateError("stream.push() after EOF", "ERR_STREAM_PUSH_AFTER_EOF")
        if chunk is None:
            self._eof_pushed = True
            self._maybe_emit_end()
            return False

        data = to_bytes(chunk, self._default_encoding) if isinstance(chunk, str) else bytes(chunk)
        if self._listeners["data"]:
            self._emit("data", data)
        else:
            self._buffer.append(data)
        return True

    def read(self) -> Optional[bytes]:
        """Drain and return everything buffered, or None when nothing is."""
        self._ensure_stream_state()
        if not self._buffer:
            self._maybe_emit_end()
            return None
        data = b"".join(self._buffer)
        self._buffer.clear()
        self._maybe_emit_end()
        return data

    def pipe(self, destination: Any) -> Any:
        """Forward pushed chunks and end-of-stream to ``destination``."""
        self._ensure_stream_state()
        self.on("end", lambda: destination.end())
        self.on("data", destination.write)
        return destination

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def writable_ended(self) -> bool:
        self._ensure_stream_state()
        return self._writable_ended

    @property
    def writable_finished(self) -> bool:
        self._ensure_stream_state()
        return self._writable_finished

    @property
    def readable_ended(self) -> bool:
        self._ensure_stream_state()
        return self._end_emitted


__all__ = ["EVENTS", "Transform"]
