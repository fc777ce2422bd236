"""
Debug rendering of decoded Bencode trees.

Integers print in decimal, byte strings print printable ASCII verbatim and
everything else as ``\\xNN``. Lists render as ``[v, v, ]`` and dicts as
``{k:v, k:v, }``. A document prints one top-level value per line.
"""
from .structure import BencodeDict, BencodeDocument, BencodeInt, BencodeList, BencodeString


def _render_bytes(raw: bytes) -> str:
    return "".join(chr(b) if 0x20 <= b < 0x7f else f"\\x{b:02x}" for b in raw)


def _render(value) -> str:
    if isinstance(value, BencodeInt):
        return str(value.value)
    if isinstance(value, BencodeString):
        return _render_bytes(value.value)
    if isinstance(value, BencodeList):
        return "[" + "".join(f"{_render(v)}, " for v in value.value) + "]"
    if isinstance(value, BencodeDict):
        return "{" + "".join(f"{_render_bytes(k.value)}:{_render(v)}, " for k, v in value.value) + "}"
    raise TypeError(f"Cannot render object of type {type(value)}")


def dump(obj) -> str:
    """Renders a document or a single value as text."""
    if isinstance(obj, BencodeDocument):
        return "\n".join(_render(v) for v in obj)
    return _render(obj)
