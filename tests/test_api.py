"""Tests for the package-level API."""

import io

import pytest

import contentsniff
from contentsniff import (
    FormatId,
    UnknownFormatError,
    sniff_source,
    sniff_source_sync,
)
from contentsniff.io.http_async import close_global_client


@pytest.fixture
def docs(tmp_path):
    """A small directory of documents in every format."""
    paths = {}
    for fmt in FormatId:
        path = tmp_path / f"doc.{fmt.value}"
        path.write_bytes(contentsniff.encoder_for(fmt).dumps({"id": fmt.value}))
        paths[fmt] = path
    (tmp_path / "bare.yml").write_text("id: bare\n")
    (tmp_path / "notes.txt").write_text("just some notes\n")
    return tmp_path, paths


class TestSniffSourceSync:

    @pytest.mark.parametrize("fmt", list(FormatId))
    def test_magic(self, docs, fmt):
        _, paths = docs
        res = sniff_source_sync(paths[fmt])
        assert res.success
        assert res.format is fmt
        assert res.via == "magic"
        assert res.source == str(paths[fmt])
        assert 0 < res.bytes_fetched <= contentsniff.GUESS_HEADER_LENGTH

    def test_extension_fallback_warns(self, docs):
        root, _ = docs
        with pytest.warns(UserWarning, match="guessed yaml from extension"):
            res = sniff_source_sync(root / "bare.yml")
        assert res.format is FormatId.YAML
        assert res.via == "extension"

    def test_extension_fallback_disabled(self, docs):
        root, _ = docs
        with pytest.raises(UnknownFormatError):
            sniff_source_sync(root / "bare.yml", use_extension=False)

    def test_unknown(self, docs):
        root, _ = docs
        with pytest.raises(UnknownFormatError, match="notes.txt"):
            sniff_source_sync(root / "notes.txt")

    def test_file_object(self):
        res = sniff_source_sync(io.BytesIO(b"\xd9\xd9\xf7\xa0"))
        assert res.format is FormatId.CBOR
        assert res.source == "<stream>"


class TestSniffSourceAsync:

    @pytest.mark.asyncio
    async def test_local(self, docs):
        _, paths = docs
        res = await sniff_source(paths[FormatId.SMILE])
        assert res.format is FormatId.SMILE

    @pytest.mark.asyncio
    async def test_url(self, httpserver):
        httpserver.expect_request("/data").respond_with_data(b"  {\"a\": 1}")
        try:
            with pytest.warns(UserWarning):  # test server ignores Range
                res = await sniff_source(httpserver.url_for("/data"))
        finally:
            await close_global_client()
        assert res.format is FormatId.JSON
        assert res.via == "magic"


class TestBuilders:

    @pytest.mark.parametrize("factory, fmt", [
        (contentsniff.json_builder, FormatId.JSON),
        (contentsniff.smile_builder, FormatId.SMILE),
        (contentsniff.yaml_builder, FormatId.YAML),
        (contentsniff.cbor_builder, FormatId.CBOR),
    ])
    def test_named_builders(self, factory, fmt):
        writer = factory()
        assert writer.format_id is fmt
        writer.write({"x": 1})
        assert contentsniff.detect_bytes(writer.getvalue()) is fmt

    def test_builder_from_configured_name(self):
        writer = contentsniff.builder_for("application/smile")
        assert writer.format_id is FormatId.SMILE

    def test_stream_detection_then_decode(self):
        stream = io.BytesIO(contentsniff.encoder_for("yaml").dumps({"a": [1, 2]}))
        detection = contentsniff.detect_stream(stream)
        encoder = contentsniff.encoder_for(detection.format)
        assert encoder.load(detection.replay(stream)) == {"a": [1, 2]}
