"""Tests for HTTP I/O."""

import pytest
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from contentsniff.io.http_sync import HTTPByteReader, open_http_reader
from contentsniff.io.http_async import HTTPAsyncByteReader, open_http_reader_async, close_global_client

DOC = b'---\nname: contentsniff\nitems:\n  - 1\n  - 2\n' * 50


class _ServerMixin:

    def setup_method(self):
        """Set up test HTTP server."""
        self.server = HTTPServer(host="127.0.0.1", port=0)
        self.server.expect_request("/doc.yaml").respond_with_handler(self._handle_range)
        self.server.expect_request("/no-ranges").respond_with_handler(self._handle_no_ranges)
        self.server.expect_request("/empty").respond_with_handler(self._handle_empty)
        self.server.expect_request("/missing").respond_with_data("gone", status=404)
        self.server.start()
        self.base_url = f"http://127.0.0.1:{self.server.port}"

    def teardown_method(self):
        """Clean up test HTTP server."""
        self.server.stop()

    def _handle_range(self, request: Request) -> Response:
        """Handle requests with range support."""
        range_header = request.headers.get("Range")
        if range_header:
            # Parse range header: bytes=start-end
            start, end = map(int, range_header.replace("bytes=", "").split("-"))
            data = DOC[start:end + 1]
            return Response(
                data,
                status=206,
                headers={"Content-Range": f"bytes {start}-{start + len(data) - 1}/{len(DOC)}"},
            )
        return Response(DOC, status=200)

    def _handle_no_ranges(self, request: Request) -> Response:
        """Ignore Range and always send the whole body."""
        return Response(b'{"a": 1}', status=200)

    def _handle_empty(self, request: Request) -> Response:
        if request.headers.get("Range"):
            return Response(status=416, headers={"Content-Range": "bytes */0"})
        return Response(b"", status=200)


class TestHTTPByteReader(_ServerMixin):
    """Test synchronous HTTP reader."""

    def test_head_uses_range(self):
        reader = HTTPByteReader(f"{self.base_url}/doc.yaml")

        assert reader.head(20) == DOC[:20]
        assert reader.bytes_fetched == 20
        assert reader.requests_made == 1

        request, _ = self.server.log[-1]
        assert request.headers["Range"] == "bytes=0-19"

    def test_head_without_range_support(self):
        reader = HTTPByteReader(f"{self.base_url}/no-ranges")

        with pytest.warns(UserWarning, match="ignored Range"):
            assert reader.head(3) == b'{"a'

    def test_head_of_short_resource(self):
        reader = HTTPByteReader(f"{self.base_url}/no-ranges")

        with pytest.warns(UserWarning):
            assert reader.head(20) == b'{"a": 1}'

    def test_empty_resource(self):
        reader = HTTPByteReader(f"{self.base_url}/empty")
        assert reader.head(20) == b""

    def test_http_error(self):
        reader = HTTPByteReader(f"{self.base_url}/missing")
        with pytest.raises(IOError, match="status 404"):
            reader.head(20)
        with pytest.raises(IOError, match="status 404"):
            reader.read()

    def test_connection_error(self):
        # nothing listens on port 1
        reader = HTTPByteReader("http://127.0.0.1:1/doc.yaml")
        with pytest.raises(IOError, match="Range request failed"):
            reader.head(20)

    def test_read(self):
        reader = HTTPByteReader(f"{self.base_url}/doc.yaml")
        assert reader.read() == DOC
        assert reader.bytes_fetched == len(DOC)

    def test_context_manager(self):
        with HTTPByteReader(f"{self.base_url}/doc.yaml") as reader:
            assert reader.head(3) == b"---"

    def test_factory_function(self):
        reader = open_http_reader(f"{self.base_url}/doc.yaml")
        assert isinstance(reader, HTTPByteReader)
        assert reader.head(0) == b""
        assert reader.requests_made == 0


class TestHTTPAsyncByteReader(_ServerMixin):
    """Test asynchronous HTTP reader."""

    @pytest.mark.asyncio
    async def test_head_uses_range(self):
        try:
            reader = await open_http_reader_async(f"{self.base_url}/doc.yaml")
            assert isinstance(reader, HTTPAsyncByteReader)

            assert await reader.head(20) == DOC[:20]
            assert reader.bytes_fetched == 20
            assert reader.requests_made == 1
        finally:
            await close_global_client()

    @pytest.mark.asyncio
    async def test_head_without_range_support(self):
        try:
            reader = HTTPAsyncByteReader(f"{self.base_url}/no-ranges")
            with pytest.warns(UserWarning, match="ignored Range"):
                assert await reader.head(3) == b'{"a'
        finally:
            await close_global_client()

    @pytest.mark.asyncio
    async def test_empty_and_missing(self):
        try:
            assert await HTTPAsyncByteReader(f"{self.base_url}/empty").head(20) == b""
            with pytest.raises(IOError, match="status 404"):
                await HTTPAsyncByteReader(f"{self.base_url}/missing").head(20)
        finally:
            await close_global_client()

    @pytest.mark.asyncio
    async def test_read(self):
        try:
            async with HTTPAsyncByteReader(f"{self.base_url}/doc.yaml") as reader:
                assert await reader.read() == DOC
                assert reader.requests_made == 1
        finally:
            await close_global_client()
