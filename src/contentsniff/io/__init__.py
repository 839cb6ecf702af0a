"""I/O layer for contentsniff - delivers the leading bytes of a source."""

# Re-export these for import convenience
from .base import HeaderReader, AsyncHeaderReader
from .local import open_local_reader, open_local_reader_async
from .http_sync import open_http_reader
from .http_async import open_http_reader_async, close_global_client


def is_url(source) -> bool:
    return str(source).startswith(('http://', 'https://'))


def open_reader(source):
    """Factory function to create the appropriate reader for a source."""
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_reader(source)

    if is_url(source):
        return open_http_reader(str(source))
    return open_local_reader(source)


async def open_reader_async(source):
    """Factory function to create the appropriate async reader for a source."""
    if hasattr(source, 'read'):  # BinaryIO
        return await open_local_reader_async(source)

    if is_url(source):
        return await open_http_reader_async(str(source))
    return await open_local_reader_async(source)
