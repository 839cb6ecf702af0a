"""Writers that encode documents into an in-memory buffer or a caller's sink."""

from __future__ import annotations
import io
from typing import Any, BinaryIO, Type

from .encoder_base import ContentEncoder


class ContentWriter:
    """Encode documents with one encoder into a sink.

    Without a sink the writer owns an in-memory buffer, readable through
    ``getvalue()``. A sink passed in stays owned by the caller and is only
    flushed, never closed.
    """

    def __init__(self, encoder: Type[ContentEncoder], sink: BinaryIO | None = None):
        self.encoder = encoder
        self._owns_sink = sink is None
        self._sink: BinaryIO = io.BytesIO() if sink is None else sink
        self._closed = False

    @property
    def format_id(self):
        return self.encoder.format_id

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, document: Any) -> "ContentWriter":
        if self._closed:
            raise ValueError("write to closed ContentWriter")
        self.encoder.dump(document, self._sink)
        return self

    def getvalue(self) -> bytes:
        """Return everything written so far (in-memory writers only)."""
        if not self._owns_sink:
            raise ValueError("getvalue() needs a writer without an external sink")
        return self._sink.getvalue()

    def flush(self) -> None:
        if not self._closed and hasattr(self._sink, "flush"):
            self._sink.flush()

    def close(self) -> None:
        """Flush the sink; the in-memory buffer stays readable after close."""
        if self._closed:
            return
        self.flush()
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"ContentWriter({self.format_id.value}, closed={self._closed})"
