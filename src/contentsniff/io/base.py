"""Base protocols and shared constants for the source I/O layer."""

from typing import Protocol, runtime_checkable


HTTP_TIMEOUT = 30.0          # seconds, per request
HTTP_READ_CHUNK = 1024       # streamed body chunk while collecting a header


@runtime_checkable
class HeaderReader(Protocol):
    """Protocol for synchronous source readers."""

    bytes_fetched: int  # running total
    requests_made: int

    def head(self, length: int) -> bytes:
        """Return up to `length` leading bytes; fewer only if the source is shorter."""
        ...

    def read(self) -> bytes:
        """Return the whole content of the source."""
        ...


@runtime_checkable
class AsyncHeaderReader(Protocol):
    """Protocol for asynchronous source readers."""

    bytes_fetched: int  # running total
    requests_made: int

    async def head(self, length: int) -> bytes:
        """Return up to `length` leading bytes; fewer only if the source is shorter."""
        ...

    async def read(self) -> bytes:
        """Return the whole content of the source."""
        ...
