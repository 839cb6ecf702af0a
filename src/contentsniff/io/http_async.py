"""Asynchronous HTTP reader using httpx."""

import warnings
from contextlib import asynccontextmanager
from typing import Optional

import httpx

from .base import HTTP_TIMEOUT


# Global async client
_client: Optional[httpx.AsyncClient] = None


@asynccontextmanager
async def _get_client():
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=HTTP_TIMEOUT)

    try:
        yield _client
    finally:
        # Don't close the client here - it's shared
        pass


class HTTPAsyncByteReader:
    """Asynchronous HTTP reader asking for the header with a Range request."""

    def __init__(self, url: str):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0

    async def head(self, length: int) -> bytes:
        """Return up to `length` leading bytes of the resource."""
        if length < 0:
            raise IOError("Length cannot be negative")
        if length == 0:
            return b""
        headers = {'Range': f'bytes=0-{length - 1}'}
        self.requests_made += 1

        async with _get_client() as client:
            try:
                async with client.stream("GET", self.url, headers=headers) as response:
                    if response.status_code == 416:
                        # Range not satisfiable: the resource is empty
                        return b""
                    if response.status_code >= 400:
                        raise IOError(f"Range request failed with status {response.status_code}")
                    if response.status_code != 206:
                        warnings.warn(f"{self.url}: server ignored Range header, reading body prefix")

                    data = bytearray()
                    async for chunk in response.aiter_bytes():
                        data += chunk
                        if len(data) >= length:
                            break
            except httpx.RequestError as e:
                raise IOError(f"Range request failed: {e}")

        self.bytes_fetched += len(data)
        return bytes(data[:length])

    async def read(self) -> bytes:
        """Download the whole resource."""
        self.requests_made += 1
        async with _get_client() as client:
            try:
                response = await client.get(self.url)
            except httpx.RequestError as e:
                raise IOError(f"GET request failed: {e}")
        if response.status_code >= 400:
            raise IOError(f"GET request failed with status {response.status_code}")
        self.bytes_fetched += len(response.content)
        return response.content

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        # Client is shared, don't close it here
        pass


async def open_http_reader_async(url: str) -> HTTPAsyncByteReader:
    """Create an asynchronous HTTP reader."""
    return HTTPAsyncByteReader(url)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
