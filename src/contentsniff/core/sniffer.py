"""Header sniffing: guess the content format from a short prefix.

A single algorithm runs over a ``HeaderSource``, which hands out leading
units (byte values, or code points for text) on demand. The adapters below
only differ in how those units are obtained:

* ``BytesHeader``  - random access into a bytes-like object
* ``TextHeader``   - random access into a ``str``; CBOR is never reported
* ``StreamHeader`` - one-pass reads from a binary stream, remembering what
  was consumed so callers can replay it
"""

from __future__ import annotations
import io
from dataclasses import dataclass
from typing import BinaryIO, Protocol, Union

from .magic import (
    GUESS_HEADER_LENGTH,
    OPEN_BRACE,
    SMILE_HEADER,
    YAML_HEADER,
    is_cbor_object_header,
)
from .model import FormatId

BytesLike = Union[bytes, bytearray, memoryview]

_SMILE_UNITS = tuple(SMILE_HEADER)
_YAML_UNITS = tuple(YAML_HEADER)


class HeaderSource(Protocol):
    """Bounded, lazily read view over the leading units of some input."""

    binary: bool    # False disables binary-only checks (CBOR)

    def unit(self, index: int) -> int | None:
        """Return the unit at `index`, or None past the end of the window."""
        ...


class BytesHeader:
    binary = True

    def __init__(self, data: BytesLike, offset: int = 0, length: int | None = None):
        view = memoryview(data).cast("B")
        if length is None:
            length = len(view) - offset
        if offset < 0 or length < 0 or offset + length > len(view):
            raise ValueError(
                f"Invalid range (offset={offset}, length={length}) for {len(view)} bytes"
            )
        self.offset = offset
        self.length = length
        self._window = view[offset:offset + min(length, GUESS_HEADER_LENGTH)]

    def unit(self, index: int) -> int | None:
        if index < len(self._window):
            return self._window[index]
        return None


class TextHeader:
    binary = False

    def __init__(self, content: str):
        self._window = content[:GUESS_HEADER_LENGTH]

    def unit(self, index: int) -> int | None:
        if index < len(self._window):
            return ord(self._window[index])
        return None


class StreamHeader:
    """Reads a binary stream one byte at a time, never past the window."""

    binary = True

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._buf = bytearray()
        self._eof = False

    @property
    def consumed(self) -> bytes:
        return bytes(self._buf)

    def unit(self, index: int) -> int | None:
        if index >= GUESS_HEADER_LENGTH:
            return None
        while len(self._buf) <= index and not self._eof:
            chunk = self._stream.read(1)
            if not chunk:
                self._eof = True
                break
            self._buf += chunk
        if index < len(self._buf):
            return self._buf[index]
        return None


def sniff(source: HeaderSource) -> FormatId | None:
    """Return the most likely format for `source`, or None if undetermined."""
    first = source.unit(0)
    if first is None:
        return None
    if first == OPEN_BRACE:
        return FormatId.JSON

    third = source.unit(2)
    if third is not None:
        head = (first, source.unit(1), third)
        if head == _SMILE_UNITS:
            return FormatId.SMILE
        if head == _YAML_UNITS:
            return FormatId.YAML
        if source.binary:
            fourth = source.unit(3)
            if fourth is not None and is_cbor_object_header(first, head[1], third, fourth):
                return FormatId.CBOR

    # JSON may sit behind whitespace or a BOM
    for index in range(1, GUESS_HEADER_LENGTH):
        unit = source.unit(index)
        if unit is None:
            break
        if unit == OPEN_BRACE:
            return FormatId.JSON
    return None


def detect_bytes(data: BytesLike, offset: int = 0, length: int | None = None) -> FormatId | None:
    """Guess the format of ``data[offset:offset + length]``."""
    return sniff(BytesHeader(data, offset, length))


def detect_text(content: str) -> FormatId | None:
    """Guess the format of a character sequence. CBOR is never detected here."""
    return sniff(TextHeader(content))


@dataclass(frozen=True)
class StreamDetection:
    format: FormatId | None
    consumed: bytes     # bytes taken off the stream while sniffing

    def replay(self, stream: BinaryIO) -> io.BufferedReader:
        """Return a reader yielding the consumed prefix followed by the rest of `stream`."""
        return io.BufferedReader(_ReplayStream(self.consumed, stream))


def detect_stream(stream: BinaryIO) -> StreamDetection:
    """Guess the format of a one-pass binary stream.

    The stream is advanced by at most ``GUESS_HEADER_LENGTH`` bytes and is not
    rewound; the bytes read are returned in ``StreamDetection.consumed``.
    Errors raised by the stream propagate unchanged.
    """
    header = StreamHeader(stream)
    found = sniff(header)
    return StreamDetection(found, header.consumed)


class _ReplayStream(io.RawIOBase):

    def __init__(self, prefix: bytes, stream: BinaryIO):
        self._prefix = memoryview(prefix)
        self._stream = stream

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if len(self._prefix):
            n = min(len(b), len(self._prefix))
            b[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        data = self._stream.read(len(b))
        if not data:
            return 0
        n = len(data)
        b[:n] = data
        return n
