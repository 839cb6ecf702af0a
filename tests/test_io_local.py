"""Tests for local file I/O."""

import pytest
import tempfile
from pathlib import Path
import io

from contentsniff.io.local import LocalByteReader, LocalAsyncByteReader, open_local_reader, open_local_reader_async


class Pipe(io.RawIOBase):
    """Non-seekable byte source, like stdin."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)

    def readable(self):
        return True

    def seekable(self):
        return False

    def readinto(self, b):
        chunk = self._buf.read(len(b))
        b[:len(chunk)] = chunk
        return len(chunk)


class TestLocalByteReader:
    """Test synchronous local reader."""

    def test_head(self):
        """Test header reads on a file."""
        test_data = b"0123456789"

        with tempfile.NamedTemporaryFile() as f:
            f.write(test_data)
            f.flush()

            reader = LocalByteReader(f.name)

            assert reader.head(5) == b"01234"
            assert reader.head(3) == b"012"

            # Check accounting
            assert reader.bytes_fetched == 8  # 5 + 3
            assert reader.requests_made == 2

            reader.close()

    def test_head_longer_than_file(self):
        """Short files return what they have."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"{}")
            f.flush()

            with LocalByteReader(f.name) as reader:
                assert reader.head(20) == b"{}"
                assert reader.bytes_fetched == 2

    def test_empty_file(self):
        """Empty files give an empty header."""
        with tempfile.NamedTemporaryFile() as f:
            with LocalByteReader(f.name) as reader:
                assert reader.head(20) == b""
                assert reader.read() == b""

    def test_read(self):
        """Test full reads after a header read."""
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"---\na: 1\n")
            f.flush()

            with LocalByteReader(f.name) as reader:
                assert reader.head(3) == b"---"
                assert reader.read() == b"---\na: 1\n"

    def test_binary_io_source(self):
        """Seekable file objects are read from the start and left in place."""
        bio = io.BytesIO(b"0123456789")
        bio.seek(4)

        reader = LocalByteReader(bio)

        assert reader.head(5) == b"01234"
        assert bio.tell() == 4
        assert reader.read() == b"0123456789"

        reader.close()
        assert not bio.closed  # not ours to close

    def test_non_seekable_source(self):
        """Pipes are read once and the header is kept for read()."""
        pipe = Pipe(b'  {"a": 1}')

        reader = LocalByteReader(pipe)

        assert reader.head(4) == b'  {"'
        assert reader.head(2) == b"  "
        assert reader.read() == b'  {"a": 1}'

    def test_path_source(self):
        """Test using Path as source."""
        with tempfile.NamedTemporaryFile(delete=False) as f:
            f.write(b"0123456789")
            f.flush()
            temp_path = Path(f.name)

        try:
            reader = LocalByteReader(temp_path)
            assert reader.head(5) == b"01234"
            reader.close()
        finally:
            temp_path.unlink()

    def test_error_conditions(self):
        """Test error conditions."""
        with tempfile.NamedTemporaryFile() as f:
            with LocalByteReader(f.name) as reader:
                with pytest.raises(IOError, match="Length cannot be negative"):
                    reader.head(-1)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalByteReader(tmp_path / "nope.json")

    def test_context_manager_closes_file(self):
        with tempfile.NamedTemporaryFile() as f:
            with LocalByteReader(f.name) as reader:
                handle = reader._file
            assert handle.closed


class TestLocalAsyncByteReader:
    """Test asynchronous local reader."""

    @pytest.mark.asyncio
    async def test_head(self):
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            reader = LocalAsyncByteReader(f.name)

            assert await reader.head(5) == b"01234"
            assert await reader.read() == b"0123456789"
            assert reader.bytes_fetched == 15
            assert reader.requests_made == 2

            await reader.close()

    @pytest.mark.asyncio
    async def test_context_manager(self):
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            async with LocalAsyncByteReader(f.name) as reader:
                assert await reader.head(5) == b"01234"
                assert reader.bytes_fetched == 5


class TestFactoryFunctions:
    """Test factory functions."""

    def test_open_local_reader(self):
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            reader = open_local_reader(f.name)
            assert isinstance(reader, LocalByteReader)
            assert reader.head(5) == b"01234"
            reader.close()

    @pytest.mark.asyncio
    async def test_open_local_reader_async(self):
        with tempfile.NamedTemporaryFile() as f:
            f.write(b"0123456789")
            f.flush()

            reader = await open_local_reader_async(f.name)
            assert isinstance(reader, LocalAsyncByteReader)
            assert await reader.head(5) == b"01234"
            await reader.close()
