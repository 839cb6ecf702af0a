from __future__ import annotations

# detection never looks past this many leading units
GUESS_HEADER_LENGTH = 20

SMILE_HEADER = b":)\n"
YAML_HEADER = b"---"
OPEN_BRACE = ord("{")

# CBOR major types live in the top three bits of the initial byte
MAJOR_TYPE_MASK = 0xE0
MAJOR_TYPE_MAP = 0xA0       # 5 << 5
MAJOR_TYPE_TAG = 0xC0       # 6 << 5
TAG_ID_SELF_DESCRIBE = 0xD9F7   # 55799


def has_major_type(major_type: int, byte: int) -> bool:
    return (byte & MAJOR_TYPE_MASK) == major_type


def is_cbor_object_header(first: int, second: int, third: int, fourth: int) -> bool:
    """Return True when four bytes open a self-described CBOR map.

    The first three bytes must carry the self-describe tag (0xd9f7) and the
    fourth must start a map, the CBOR counterpart of a leading '{'.
    """
    return (
        has_major_type(MAJOR_TYPE_TAG, first)
        and (((second << 8) & 0xFF00) | (third & 0xFF)) == TAG_ID_SELF_DESCRIBE
        and has_major_type(MAJOR_TYPE_MAP, fourth)
    )
