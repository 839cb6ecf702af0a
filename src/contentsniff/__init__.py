"""contentsniff - guess JSON / Smile / YAML / CBOR from a short header and dispatch to a codec."""

import warnings
from typing import BinaryIO

from .core.magic import GUESS_HEADER_LENGTH
from .core.model import (                                             # re-export
    FormatId, SniffResult, DetectionFailure, UnrecognizedFormatError,
    UnknownFormatError, ParseError,
)
from .core.registry import _REGISTRY                                  # singleton
from .core.sniffer import detect_bytes, detect_text, detect_stream, StreamDetection
from .core.writer import ContentWriter
from .io import open_reader, open_reader_async

# Import encoders to trigger registration
from .encoders import cbor, json, smile, yaml  # noqa: F401


def encoder_for(format_id):
    """Return the encoder class for a format (member, name or media type)."""
    return _REGISTRY.encoder_for(format_id)


def builder_for(format_id, sink: BinaryIO | None = None) -> ContentWriter:
    """Return a writer for `format_id`, over `sink` or an in-memory buffer."""
    return _REGISTRY.builder_for(format_id, sink)


def content_for(data, offset: int | None = None, length: int | None = None):
    """Sniff `data` (str, bytes-like or binary stream) and return its encoder.

    Raises DetectionFailure when the header matches no format.
    """
    return _REGISTRY.content_for(data, offset, length)


def json_builder(sink: BinaryIO | None = None) -> ContentWriter:
    return builder_for(FormatId.JSON, sink)


def smile_builder(sink: BinaryIO | None = None) -> ContentWriter:
    return builder_for(FormatId.SMILE, sink)


def yaml_builder(sink: BinaryIO | None = None) -> ContentWriter:
    return builder_for(FormatId.YAML, sink)


def cbor_builder(sink: BinaryIO | None = None) -> ContentWriter:
    return builder_for(FormatId.CBOR, sink)


def _name(source) -> str:
    if hasattr(source, "read"):
        return str(getattr(source, "name", None) or "<stream>")
    return str(source)


def _resolve(source, header: bytes, bytes_fetched: int, use_extension: bool) -> SniffResult:
    fmt, via = _REGISTRY.choose(_name(source), header, use_extension=use_extension)
    if via == "extension":
        warnings.warn(f"{_name(source)}: header matched no format, guessed {fmt.value} from extension")
    return SniffResult(True, _name(source), fmt, None, bytes_fetched, via)


async def sniff_source(source, *, use_extension: bool = True) -> SniffResult:
    """Detect the format of a source (path, URL, or file-like object) asynchronously."""
    async with await open_reader_async(source) as reader:
        header = await reader.head(GUESS_HEADER_LENGTH)
    return _resolve(source, header, reader.bytes_fetched, use_extension)


def sniff_source_sync(source, *, use_extension: bool = True) -> SniffResult:
    """Detect the format of a source (path, URL, or file-like object) synchronously."""
    with open_reader(source) as reader:
        header = reader.head(GUESS_HEADER_LENGTH)
    return _resolve(source, header, reader.bytes_fetched, use_extension)


__all__ = [
    "FormatId", "GUESS_HEADER_LENGTH",
    "detect_bytes", "detect_text", "detect_stream", "StreamDetection",
    "encoder_for", "builder_for", "content_for", "ContentWriter",
    "json_builder", "smile_builder", "yaml_builder", "cbor_builder",
    "sniff_source", "sniff_source_sync", "SniffResult",
    "DetectionFailure", "UnrecognizedFormatError", "UnknownFormatError", "ParseError",
]
