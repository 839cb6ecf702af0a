from __future__ import annotations

from typing import Any, ClassVar

import yaml

from ..core.encoder_base import ContentEncoder
from ..core.model import FormatId, ParseError


class YAMLEncoder(ContentEncoder):
    """YAML through PyYAML's safe dumper/loader.

    Documents are written with an explicit ``---`` start marker, which is
    what the header sniffer keys on.
    """

    format_id: ClassVar = FormatId.YAML
    extensions: ClassVar = ("yaml", "yml")
    text: ClassVar = True

    @classmethod
    def dumps(cls, obj: Any) -> bytes:
        try:
            text = yaml.safe_dump(obj, explicit_start=True, allow_unicode=True, sort_keys=False)
        except yaml.YAMLError as e:
            raise TypeError(f"Not YAML serializable: {e}") from e
        return text.encode("utf-8")

    @classmethod
    def loads(cls, data: bytes) -> Any:
        try:
            return yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
