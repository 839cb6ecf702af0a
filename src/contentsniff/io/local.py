"""Local file and file-object readers."""

import asyncio
from pathlib import Path
from typing import BinaryIO, Union


class LocalByteReader:
    """Synchronous reader over a path or a binary file object.

    Seekable sources are read from offset 0 and left where they were.
    Non-seekable ones (pipes, stdin) are read once: the header bytes are kept
    so a later ``read()`` still returns the full content.
    """

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self.bytes_fetched = 0
        self.requests_made = 0
        self._prefix = b""
        self._should_close_file = False

        if hasattr(source, 'read'):
            # BinaryIO object
            self._file = source
        else:
            # Path or str
            self._file = open(source, 'rb')
            self._should_close_file = True

    def _seekable(self) -> bool:
        return hasattr(self._file, "seekable") and self._file.seekable()

    def _read_from_start(self, length: int = -1) -> bytes:
        pos = self._file.tell()
        try:
            self._file.seek(0)
            return self._file.read(length)
        finally:
            self._file.seek(pos)

    def head(self, length: int) -> bytes:
        """Return up to `length` leading bytes."""
        if length < 0:
            raise IOError("Length cannot be negative")
        self.requests_made += 1
        if self._seekable():
            data = self._read_from_start(length)
        else:
            while len(self._prefix) < length:
                chunk = self._file.read(length - len(self._prefix))
                if not chunk:
                    break
                self._prefix += chunk
            data = self._prefix[:length]
        self.bytes_fetched += len(data)
        return data

    def read(self) -> bytes:
        """Return the whole content."""
        self.requests_made += 1
        if self._seekable():
            data = self._read_from_start()
        else:
            data = self._prefix + self._file.read()
            self._prefix = data
        self.bytes_fetched += len(data)
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the file if we opened it."""
        if self._should_close_file and self._file is not None:
            self._file.close()
            self._file = None


class LocalAsyncByteReader:
    """Asynchronous local reader - thin wrapper around sync reader."""

    def __init__(self, source: Union[Path, str, BinaryIO]):
        self._sync_reader = LocalByteReader(source)

    @property
    def bytes_fetched(self) -> int:
        return self._sync_reader.bytes_fetched

    @property
    def requests_made(self) -> int:
        return self._sync_reader.requests_made

    async def head(self, length: int) -> bytes:
        return await asyncio.to_thread(self._sync_reader.head, length)

    async def read(self) -> bytes:
        return await asyncio.to_thread(self._sync_reader.read)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying sync reader."""
        await asyncio.to_thread(self._sync_reader.close)


def open_local_reader(source: Union[Path, str, BinaryIO]) -> LocalByteReader:
    """Create a synchronous local reader."""
    return LocalByteReader(source)


async def open_local_reader_async(source: Union[Path, str, BinaryIO]) -> LocalAsyncByteReader:
    """Create an asynchronous local reader."""
    return LocalAsyncByteReader(source)
