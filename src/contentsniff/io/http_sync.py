"""Synchronous HTTP reader using requests."""

import warnings

import requests

from .base import HTTP_TIMEOUT, HTTP_READ_CHUNK


# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPByteReader:
    """Synchronous HTTP reader asking for the header with a Range request."""

    def __init__(self, url: str):
        self.url = url
        self.bytes_fetched = 0
        self.requests_made = 0
        self._session = _get_session()

    def head(self, length: int) -> bytes:
        """Return up to `length` leading bytes of the resource."""
        if length < 0:
            raise IOError("Length cannot be negative")
        if length == 0:
            return b""
        headers = {'Range': f'bytes=0-{length - 1}'}
        self.requests_made += 1
        try:
            with self._session.get(self.url, headers=headers, stream=True, timeout=HTTP_TIMEOUT) as response:
                if response.status_code == 416:
                    # Range not satisfiable: the resource is empty
                    return b""
                if response.status_code >= 400:
                    raise IOError(f"Range request failed with status {response.status_code}")
                if response.status_code != 206:
                    warnings.warn(f"{self.url}: server ignored Range header, reading body prefix")

                data = bytearray()
                for chunk in response.iter_content(chunk_size=HTTP_READ_CHUNK):
                    data += chunk
                    if len(data) >= length:
                        break
        except requests.RequestException as e:
            raise IOError(f"Range request failed: {e}")

        self.bytes_fetched += len(data)
        return bytes(data[:length])

    def read(self) -> bytes:
        """Download the whole resource."""
        self.requests_made += 1
        try:
            response = self._session.get(self.url, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}")
        if response.status_code >= 400:
            raise IOError(f"GET request failed with status {response.status_code}")
        self.bytes_fetched += len(response.content)
        return response.content

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Session is shared, don't close it here
        pass


def open_http_reader(url: str) -> HTTPByteReader:
    """Create a synchronous HTTP reader."""
    return HTTPByteReader(url)
