from __future__ import annotations

import struct
from typing import Any, ClassVar

from ..core.encoder_base import ContentEncoder
from ..core.magic import SMILE_HEADER
from ..core.model import FormatId, ParseError

# 4th header byte: version 0 in the high nibble, feature flags in the low bits
FLAG_SHARED_NAMES = 0x01
FLAG_SHARED_VALUES = 0x02
FLAG_RAW_BINARY = 0x04

# value-mode tokens
TOKEN_EMPTY_STRING = 0x20
TOKEN_NULL = 0x21
TOKEN_FALSE = 0x22
TOKEN_TRUE = 0x23
TOKEN_INT32 = 0x24
TOKEN_INT64 = 0x25
TOKEN_BIG_INTEGER = 0x26
TOKEN_FLOAT32 = 0x28
TOKEN_FLOAT64 = 0x29
TOKEN_BIG_DECIMAL = 0x2A
TOKEN_LONG_ASCII = 0xE0
TOKEN_LONG_UNICODE = 0xE4
TOKEN_BINARY_7BIT = 0xE8
TOKEN_START_ARRAY = 0xF8
TOKEN_END_ARRAY = 0xF9
TOKEN_START_OBJECT = 0xFA
TOKEN_END_OBJECT = 0xFB
TOKEN_END_STRING = 0xFC
TOKEN_RAW_BINARY = 0xFD
TOKEN_END_CONTENT = 0xFF

# key-mode tokens
KEY_EMPTY = 0x20
KEY_LONG_UNICODE = 0x34

_MAX_SHARED = 1024
_MAX_SHARED_VALUE_LEN = 65

_INT32 = (-(1 << 31), (1 << 31) - 1)
_INT64 = (-(1 << 63), (1 << 63) - 1)


# ---------------------------------------------------------------------- #
def _zigzag(n: int) -> int:
    return n << 1 if n >= 0 else ((-n) << 1) - 1


def _unzigzag(z: int) -> int:
    return (z >> 1) ^ -(z & 1)


def _vint(n: int) -> bytes:
    """Unsigned VInt: 7 bits per byte, last byte flagged with 0x80 and holding 6 bits."""
    out = [0x80 | (n & 0x3F)]
    n >>= 6
    while n:
        out.append(n & 0x7F)
        n >>= 7
    return bytes(reversed(out))


def _seven_bit(value: int, nbytes: int) -> bytes:
    return bytes((value >> (7 * i)) & 0x7F for i in reversed(range(nbytes)))


class _Writer:

    def __init__(self) -> None:
        self.out = bytearray(SMILE_HEADER)
        self.out.append(0x00)  # version 0, nothing shared

    def value(self, obj: Any) -> None:
        out = self.out
        if obj is None:
            out.append(TOKEN_NULL)
        elif obj is True:
            out.append(TOKEN_TRUE)
        elif obj is False:
            out.append(TOKEN_FALSE)
        elif isinstance(obj, int):
            self._int(obj)
        elif isinstance(obj, float):
            bits = struct.unpack(">Q", struct.pack(">d", obj))[0]
            out.append(TOKEN_FLOAT64)
            out += _seven_bit(bits, 10)
        elif isinstance(obj, str):
            self._string(obj)
        elif isinstance(obj, dict):
            out.append(TOKEN_START_OBJECT)
            for key, item in obj.items():
                self._key(key)
                self.value(item)
            out.append(TOKEN_END_OBJECT)
        elif isinstance(obj, (list, tuple)):
            out.append(TOKEN_START_ARRAY)
            for item in obj:
                self.value(item)
            out.append(TOKEN_END_ARRAY)
        else:
            raise TypeError(f"Object of type {type(obj).__name__} is not Smile serializable")

    def _int(self, n: int) -> None:
        out = self.out
        if -16 <= n <= 15:
            out.append(0xC0 | _zigzag(n))
        elif _INT32[0] <= n <= _INT32[1]:
            out.append(TOKEN_INT32)
            out += _vint(_zigzag(n))
        elif _INT64[0] <= n <= _INT64[1]:
            out.append(TOKEN_INT64)
            out += _vint(_zigzag(n))
        else:
            raw = n.to_bytes((n.bit_length() + 8) // 8, "big", signed=True)
            out.append(TOKEN_BIG_INTEGER)
            out += _vint(len(raw))
            out += _encode_7bit(raw)

    def _string(self, s: str) -> None:
        out = self.out
        raw = s.encode("utf-8")
        n = len(raw)
        if n == 0:
            out.append(TOKEN_EMPTY_STRING)
        elif n == len(s):  # ASCII
            if n <= 32:
                out.append(0x40 + n - 1)
            elif n <= 64:
                out.append(0x60 + n - 33)
            else:
                out.append(TOKEN_LONG_ASCII)
                out += raw
                out.append(TOKEN_END_STRING)
                return
            out += raw
        else:
            if n <= 33:
                out.append(0x80 + n - 2)
            elif n <= 65:
                out.append(0xA0 + n - 34)
            else:
                out.append(TOKEN_LONG_UNICODE)
                out += raw
                out.append(TOKEN_END_STRING)
                return
            out += raw

    def _key(self, key: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Smile keys must be str, not {type(key).__name__}")
        out = self.out
        raw = key.encode("utf-8")
        n = len(raw)
        if n == 0:
            out.append(KEY_EMPTY)
        elif n == len(key) and n <= 64:
            out.append(0x80 + n - 1)
            out += raw
        elif n != len(key) and n <= 57:
            out.append(0xC0 + n - 2)
            out += raw
        else:
            out.append(KEY_LONG_UNICODE)
            out += raw
            out.append(TOKEN_END_STRING)


def _encode_7bit(raw: bytes) -> bytes:
    """7-bit encoding: every 7 input bytes become 8 bytes of 7 bits each.

    A trailing partial chunk keeps its leftover low bits right-aligned in
    the last output byte.
    """
    out = bytearray()
    for i in range(0, len(raw), 7):
        chunk = raw[i:i + 7]
        value = int.from_bytes(chunk, "big")
        groups = (len(chunk) * 8 + 6) // 7
        tail = len(chunk) * 8 - (groups - 1) * 7
        out += _seven_bit(value >> tail, groups - 1)
        out.append(value & ((1 << tail) - 1))
    return bytes(out)


# ---------------------------------------------------------------------- #
class _Reader:

    def __init__(self, data: bytes):
        self.data = data
        if len(data) < 4 or data[:3] != SMILE_HEADER:
            raise ParseError("Missing Smile header")
        flags = data[3]
        if flags >> 4 != 0:
            raise ParseError(f"Unsupported Smile version {flags >> 4}")
        if flags & FLAG_RAW_BINARY:
            raise ParseError("Raw binary Smile content is not supported")
        self.shared_names: list[str] | None = [] if flags & FLAG_SHARED_NAMES else None
        self.shared_values: list[str] | None = [] if flags & FLAG_SHARED_VALUES else None
        self.pos = 4

    # --- primitives ---
    def byte(self) -> int:
        if self.pos >= len(self.data):
            raise ParseError("Unexpected end of Smile content")
        b = self.data[self.pos]
        self.pos += 1
        return b

    def take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.data):
            raise ParseError("Unexpected end of Smile content")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def until_end_string(self) -> bytes:
        end = self.data.find(bytes((TOKEN_END_STRING,)), self.pos)
        if end < 0:
            raise ParseError("Unterminated Smile string")
        chunk = self.data[self.pos:end]
        self.pos = end + 1
        return chunk

    def vint(self) -> int:
        value = 0
        while True:
            b = self.byte()
            if b & 0x80:
                return (value << 6) | (b & 0x3F)
            value = (value << 7) | b

    def seven_bit(self, nbytes: int) -> int:
        value = 0
        for b in self.take(nbytes):
            value = (value << 7) | (b & 0x7F)
        return value

    @staticmethod
    def _remember(table: list[str] | None, text: str, nbytes: int = 0) -> None:
        if table is None or nbytes > _MAX_SHARED_VALUE_LEN:
            return
        if len(table) >= _MAX_SHARED:
            table.clear()
        table.append(text)

    @staticmethod
    def _lookup(table: list[str] | None, index: int, what: str) -> str:
        if table is None or index >= len(table):
            raise ParseError(f"Invalid shared {what} reference {index}")
        return table[index]

    # --- values ---
    def value(self) -> Any:
        b = self.byte()
        if 0x01 <= b <= 0x1F:
            return self._lookup(self.shared_values, b - 1, "value")
        if b == TOKEN_EMPTY_STRING:
            return ""
        if b == TOKEN_NULL:
            return None
        if b == TOKEN_FALSE:
            return False
        if b == TOKEN_TRUE:
            return True
        if b in (TOKEN_INT32, TOKEN_INT64):
            return _unzigzag(self.vint())
        if b == TOKEN_BIG_INTEGER:
            raw = self._decode_7bit(self.vint())
            return int.from_bytes(raw, "big", signed=True)
        if b == TOKEN_FLOAT32:
            bits = self.seven_bit(5)
            return struct.unpack(">f", struct.pack(">I", bits & 0xFFFFFFFF))[0]
        if b == TOKEN_FLOAT64:
            bits = self.seven_bit(10)
            return struct.unpack(">d", struct.pack(">Q", bits & 0xFFFFFFFFFFFFFFFF))[0]
        if 0x40 <= b <= 0xBF:
            if b < 0x60:
                n = (b & 0x1F) + 1
            elif b < 0x80:
                n = (b & 0x1F) + 33
            elif b < 0xA0:
                n = (b & 0x1F) + 2
            else:
                n = (b & 0x1F) + 34
            text = self.take(n).decode("utf-8")
            self._remember(self.shared_values, text, n)
            return text
        if 0xC0 <= b <= 0xDF:
            return _unzigzag(b & 0x1F)
        if b in (TOKEN_LONG_ASCII, TOKEN_LONG_UNICODE):
            return self.until_end_string().decode("utf-8")
        if 0xEC <= b <= 0xEF:
            return self._lookup(self.shared_values, ((b & 0x03) << 8) | self.byte(), "value")
        if b == TOKEN_START_ARRAY:
            items = []
            while self.data[self.pos:self.pos + 1] != bytes((TOKEN_END_ARRAY,)):
                items.append(self.value())
            self.pos += 1
            return items
        if b == TOKEN_START_OBJECT:
            obj = {}
            while True:
                key = self.key()
                if key is None:
                    return obj
                obj[key] = self.value()
        if b in (TOKEN_BIG_DECIMAL, TOKEN_BINARY_7BIT, TOKEN_RAW_BINARY):
            raise ParseError(f"Smile token 0x{b:02x} (decimal/binary) is not supported")
        raise ParseError(f"Invalid Smile token 0x{b:02x} at offset {self.pos - 1}")

    def key(self) -> str | None:
        b = self.byte()
        if b == TOKEN_END_OBJECT:
            return None
        if b == KEY_EMPTY:
            return ""
        if 0x30 <= b <= 0x33:
            return self._lookup(self.shared_names, ((b & 0x03) << 8) | self.byte(), "name")
        if b == KEY_LONG_UNICODE:
            name = self.until_end_string().decode("utf-8")
            self._remember(self.shared_names, name)
            return name
        if 0x40 <= b <= 0x7F:
            return self._lookup(self.shared_names, b & 0x3F, "name")
        if 0x80 <= b <= 0xF7:
            n = (b & 0x3F) + (1 if b < 0xC0 else 2)
            name = self.take(n).decode("utf-8")
            self._remember(self.shared_names, name)
            return name
        raise ParseError(f"Invalid Smile key token 0x{b:02x} at offset {self.pos - 1}")

    def _decode_7bit(self, nraw: int) -> bytes:
        out = bytearray()
        while nraw > 0:
            chunk = min(nraw, 7)
            groups = (chunk * 8 + 6) // 7
            tail = chunk * 8 - (groups - 1) * 7
            value = (self.seven_bit(groups - 1) << tail) | (self.byte() & ((1 << tail) - 1))
            out += value.to_bytes(chunk, "big")
            nraw -= chunk
        return bytes(out)


class SmileEncoder(ContentEncoder):
    """Smile (binary JSON) codec, writing version 0 without shared references."""

    format_id: ClassVar = FormatId.SMILE
    extensions: ClassVar = ("smile", "sml")

    @classmethod
    def dumps(cls, obj: Any) -> bytes:
        writer = _Writer()
        writer.value(obj)
        return bytes(writer.out)

    @classmethod
    def loads(cls, data: bytes) -> Any:
        reader = _Reader(bytes(data))
        try:
            result = reader.value()
        except UnicodeDecodeError as e:
            raise ParseError(f"Invalid UTF-8 in Smile string: {e}") from e
        if reader.pos < len(reader.data) and reader.data[reader.pos] == TOKEN_END_CONTENT:
            reader.pos += 1
        if reader.pos != len(reader.data):
            raise ParseError(f"Trailing data after Smile document at offset {reader.pos}")
        return result
