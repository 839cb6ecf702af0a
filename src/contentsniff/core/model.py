from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any


class FormatId(str, Enum):
    JSON = "json"
    SMILE = "smile"
    YAML = "yaml"
    CBOR = "cbor"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]

    @classmethod
    def coerce(cls, value: Any) -> "FormatId":
        """Resolve an open value (member, name, value or media type) to a FormatId."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.name.lower(), member.media_type):
                    return member
        raise UnrecognizedFormatError(value)


_MEDIA_TYPES = {
    FormatId.JSON: "application/json",
    FormatId.SMILE: "application/smile",
    FormatId.YAML: "application/yaml",
    FormatId.CBOR: "application/cbor",
}


@dataclass(slots=True)
class SniffResult:
    success: bool
    source: str
    format: FormatId | None
    error: str | None
    bytes_fetched: int         # filled by I/O layer
    via: str | None = None     # "magic" or "extension"


class DetectionFailure(ValueError):
    """Raised when a definite format is required but the header is undetermined."""

    def __init__(self, data: str, offset: int | None = None, length: int | None = None):
        self.data = data
        self.offset = offset
        self.length = length
        if offset is None:
            msg = f"Failed to derive content format from {data}"
        else:
            msg = f"Failed to derive content format from (offset={offset}, length={length}): {data}"
        super().__init__(msg)


class UnrecognizedFormatError(ValueError):
    """Raised when a format identifier is outside the known set."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"No matching content format for {value!r}")


class UnknownFormatError(RuntimeError):
    """Raised when no format can be found for a given source."""
    pass


class ParseError(RuntimeError):
    """Raised when an encoder encounters malformed input."""
    pass
