from abc import ABC, abstractmethod
from typing import Any, BinaryIO, ClassVar

from .model import FormatId


class ContentEncoder(ABC):
    # --- required by subclasses ---
    format_id: ClassVar[FormatId]
    extensions: ClassVar[tuple[str, ...]]   # file-extensions (lower, no dot)
    text: ClassVar[bool] = False             # output is UTF-8 text

    @classmethod
    @abstractmethod
    def dumps(cls, obj: Any) -> bytes:
        """Encode one document to bytes."""
        ...

    @classmethod
    @abstractmethod
    def loads(cls, data: bytes) -> Any:
        """Decode one document from bytes."""
        ...

    # --- stream helpers ---
    @classmethod
    def dump(cls, obj: Any, sink: BinaryIO) -> None:
        sink.write(cls.dumps(obj))

    @classmethod
    def load(cls, stream: BinaryIO) -> Any:
        return cls.loads(stream.read())

    # --- registry hook ---
    def __init_subclass__(cls, register: bool = True, **kw):
        super().__init_subclass__(**kw)
        if register:
            from .registry import _REGISTRY
            _REGISTRY.register(cls)           # noqa: E402
