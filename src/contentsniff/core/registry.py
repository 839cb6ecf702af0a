from __future__ import annotations
from pathlib import Path
from typing import Any, BinaryIO, Dict, Type

from .encoder_base import ContentEncoder
from .magic import GUESS_HEADER_LENGTH
from .model import DetectionFailure, FormatId, UnknownFormatError, UnrecognizedFormatError
from .sniffer import detect_bytes, detect_stream, detect_text
from .writer import ContentWriter


def render_header(data: Any) -> str:
    """Bounded, printable rendering of the head of `data` for error messages."""
    head = data[:GUESS_HEADER_LENGTH]
    if isinstance(head, memoryview):
        head = head.tobytes()
    text = repr(head)
    if len(data) > GUESS_HEADER_LENGTH:
        text += "..."
    return text


class FormatRegistry:
    def __init__(self) -> None:
        self._by_format: Dict[FormatId, Type[ContentEncoder]] = {}
        self._by_ext: Dict[str, FormatId] = {}

    # called from ContentEncoder.__init_subclass__
    def register(self, encoder_cls: Type[ContentEncoder], *, replace: bool = False) -> None:
        fmt = FormatId.coerce(encoder_cls.format_id)
        current = self._by_format.get(fmt)
        if current is not None and current is not encoder_cls and not replace:
            raise ValueError(f"{fmt.value} is already handled by {current.__name__}")
        self._by_format[fmt] = encoder_cls
        for ext in encoder_cls.extensions:
            self._by_ext[ext] = fmt

    def formats(self) -> list[FormatId]:
        return [f for f in FormatId if f in self._by_format]

    # --- dispatch ---
    def encoder_for(self, format_id: FormatId | str) -> Type[ContentEncoder]:
        fmt = FormatId.coerce(format_id)
        try:
            return self._by_format[fmt]
        except KeyError:
            raise UnrecognizedFormatError(format_id) from None

    def builder_for(self, format_id: FormatId | str, sink: BinaryIO | None = None) -> ContentWriter:
        """Return a writer for `format_id` over `sink`, or over a fresh in-memory buffer."""
        return ContentWriter(self.encoder_for(format_id), sink)

    def content_for(self, data: Any, offset: int | None = None, length: int | None = None) -> Type[ContentEncoder]:
        """Sniff `data` and return the encoder for its format.

        Text, bytes-like objects and binary streams are accepted; a stream is
        advanced past the bytes inspected.
        """
        if (offset is not None or length is not None) and not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"offset and length only apply to bytes-like input, not {type(data).__name__}")
        if isinstance(data, str):
            fmt = detect_text(data)
            if fmt is None:
                raise DetectionFailure(render_header(data))
        elif isinstance(data, (bytes, bytearray, memoryview)):
            start = offset or 0
            fmt = detect_bytes(data, start, length)
            if fmt is None:
                if offset is None and length is None:
                    raise DetectionFailure(render_header(data))
                size = len(data) - start if length is None else length
                raise DetectionFailure(render_header(data[start:start + size]), start, size)
        elif hasattr(data, "read"):
            detection = detect_stream(data)
            fmt = detection.format
            if fmt is None:
                raise DetectionFailure(render_header(detection.consumed))
        else:
            raise TypeError(f"Cannot sniff {type(data).__name__}")
        return self.encoder_for(fmt)

    # --- source helpers ---
    def format_for_extension(self, source: str | Path) -> FormatId | None:
        ext = Path(str(source)).suffix.lower().lstrip(".")
        return self._by_ext.get(ext) if ext else None

    def choose(self, source: str | Path, header: bytes, *, use_extension: bool = True) -> tuple[FormatId, str]:
        """Return (format, via) for a source whose leading bytes are `header`."""
        # 1) magic sniff
        fmt = detect_bytes(header)
        if fmt is not None:
            return fmt, "magic"
        # 2) extension hint
        if use_extension:
            fmt = self.format_for_extension(source)
            if fmt is not None:
                return fmt, "extension"
        raise UnknownFormatError(f"No content format for {source!s}")


# singleton used project-wide
_REGISTRY = FormatRegistry()
