from __future__ import annotations

from typing import Any, ClassVar

import cbor2

from ..core.encoder_base import ContentEncoder
from ..core.magic import TAG_ID_SELF_DESCRIBE
from ..core.model import FormatId, ParseError

# major type 6, two-byte argument, then the tag number
_SELF_DESCRIBE_PREFIX = b"\xd9" + TAG_ID_SELF_DESCRIBE.to_bytes(2, "big")


class CBOREncoder(ContentEncoder):
    """CBOR through cbor2, prefixed with the self-describe tag (55799)."""

    format_id: ClassVar = FormatId.CBOR
    extensions: ClassVar = ("cbor",)

    @classmethod
    def dumps(cls, obj: Any) -> bytes:
        return cbor2.dumps(cbor2.CBORTag(TAG_ID_SELF_DESCRIBE, obj))

    @classmethod
    def loads(cls, data: bytes) -> Any:
        # cbor2 decodes tagged content into immutable containers, so the tag is
        # dropped before decoding to get plain dicts and lists back
        data = bytes(data)
        if data.startswith(_SELF_DESCRIBE_PREFIX):
            data = data[len(_SELF_DESCRIBE_PREFIX):]
        try:
            return cbor2.loads(data)
        except cbor2.CBORDecodeError as e:
            raise ParseError(f"Invalid CBOR: {e}") from e
