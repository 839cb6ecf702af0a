"""CLI implementation for contentsniff."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer

from . import sniff_source, sniff_source_sync
from .core.magic import GUESS_HEADER_LENGTH
from .core.model import FormatId, SniffResult, UnknownFormatError, UnrecognizedFormatError, ParseError
from .core.registry import _REGISTRY
from .core.util import result_asdict
from .io import open_reader, close_global_client

app = typer.Typer(add_completion=False, help="Detect and convert JSON / Smile / YAML / CBOR content.")


def iter_sources(files: list[str]) -> list[str]:
    """Get list of sources from files argument or stdin."""
    if "-" in files:
        # stdin mode
        stdin_lines = [ln.strip() for ln in sys.stdin if ln.strip()]
        if not stdin_lines:
            return []
        return stdin_lines
    elif files:
        return list(files)
    return []


def _failed(src: str, exc: Exception) -> SniffResult:
    return SniffResult(success=False, source=src, format=None, error=str(exc), bytes_fetched=0)


async def _batch_sniff(sources: list[str], use_extension: bool) -> list[SniffResult]:
    """Asynchronously sniff a list of sources."""
    tasks = [sniff_source(src, use_extension=use_extension) for src in sources]
    try:
        results = await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        await close_global_client()
    processed_results = []
    for src, res in zip(sources, results):
        if isinstance(res, Exception):
            processed_results.append(_failed(src, res))
        else:
            processed_results.append(res)
    return processed_results


@app.command()
def detect(
    files: list[str] = typer.Argument(None, help="Files or URLs to inspect, or '-' for stdin"),
    fields: Optional[str] = typer.Option(None, "--fields", help="Comma-separated subset of keys to emit"),
    jsonl: bool = typer.Option(False, "--jsonl", help="Force JSON-lines output"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
    sync: bool = typer.Option(False, "--sync", help="Force synchronous I/O"),
    extension: bool = typer.Option(True, "--extension/--no-extension", help="Fall back to the file extension"),
):
    """Report the content format of one or many local paths or URLs."""
    sel_fields = set(fields.split(",")) if fields else None
    sources = iter_sources(files or [])

    if not sources:
        typer.echo("No input files given.", err=True)
        raise typer.Exit(code=1)

    results: list[SniffResult] = []
    if sync:
        for src in sources:
            try:
                res = sniff_source_sync(src, use_extension=extension)
            except (UnknownFormatError, OSError) as e:
                res = _failed(src, e)
            results.append(res)
    else:
        results = asyncio.run(_batch_sniff(sources, extension))

    # open output sink
    sink = open(output, "w", encoding="utf-8") if output else sys.stdout
    try:
        # choose output style
        if len(sources) == 1 and not jsonl:
            obj = result_asdict(results[0], fields=sel_fields)
            json.dump(obj, sink, indent=2)
            sink.write("\n")
        else:
            for res in results:
                obj = result_asdict(res, fields=sel_fields)
                sink.write(json.dumps(obj))
                sink.write("\n")
    finally:
        if output:
            sink.close()

    # exit code
    if any(not r.success for r in results):
        raise typer.Exit(code=1)


@app.command()
def convert(
    source: str = typer.Argument(..., help="File or URL to convert, or '-' for stdin"),
    to: str = typer.Option(..., "--to", help="Target format: json, smile, yaml or cbor"),
    output: Optional[Path] = typer.Option(None, "-o", "--output", help="Write to PATH instead of stdout"),
):
    """Decode one document in whatever format it is and re-encode it."""
    try:
        target = FormatId.coerce(to)
    except UnrecognizedFormatError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)

    stream = typer.get_binary_stream("stdin") if source == "-" else source
    try:
        with open_reader(stream) as reader:
            data = reader.read()
        fmt, _ = _REGISTRY.choose(source, data[:GUESS_HEADER_LENGTH])
        document = _REGISTRY.encoder_for(fmt).loads(data)
    except (UnknownFormatError, ParseError, OSError, ValueError) as e:
        typer.echo(f"{source}: {e}", err=True)
        raise typer.Exit(code=1)

    # output is only opened once encoding has succeeded
    try:
        with _REGISTRY.builder_for(target) as writer:
            encoded = writer.write(document).getvalue()
    except (TypeError, ValueError) as e:
        typer.echo(f"{source}: cannot encode as {target.value}: {e}", err=True)
        raise typer.Exit(code=1)

    if output:
        output.write_bytes(encoded)
    else:
        sink = typer.get_binary_stream("stdout")
        sink.write(encoded)
        sink.flush()


if __name__ == "__main__":
    app()
