from __future__ import annotations
from typing import Dict, Any, Iterable
from .model import SniffResult


def result_asdict(res: SniffResult, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    if not res.success or res.format is None:
        return {"source": res.source, "success": False, "error": res.error, "bytes_fetched": res.bytes_fetched}
    payload = {
        "source": res.source,
        "format": res.format.value,
        "media_type": res.format.media_type,
        "via": res.via,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    if fields:
        wanted = set(fields)
        payload = {k: v for k, v in payload.items() if k in wanted}
    payload.update({"success": True, "bytes_fetched": res.bytes_fetched})
    return payload
