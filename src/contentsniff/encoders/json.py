from __future__ import annotations

import json
from typing import Any, ClassVar

from ..core.encoder_base import ContentEncoder
from ..core.model import FormatId, ParseError


class JSONEncoder(ContentEncoder):
    """UTF-8 JSON through the standard library."""

    format_id: ClassVar = FormatId.JSON
    extensions: ClassVar = ("json",)
    text: ClassVar = True

    @classmethod
    def dumps(cls, obj: Any) -> bytes:
        return json.dumps(obj, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @classmethod
    def loads(cls, data: bytes) -> Any:
        # json.loads sniffs UTF-8/16/32 and a UTF-8 BOM on bytes input
        try:
            return json.loads(data)
        except ValueError as e:
            raise ParseError(f"Invalid JSON: {e}") from e
