"""
Data structures for representing Bencoded types.

Every node remembers where it came from: ``offset`` is the index of its first
byte in the decoded buffer and ``length`` the number of bytes it spans. Both
are ``None`` for values built by hand.
"""
from typing import Iterator, List, Optional, Tuple

__all__ = [
    "BencodeType",
    "BencodeInt",
    "BencodeString",
    "BencodeList",
    "BencodeDict",
    "BencodeDocument",
]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class BencodeType:
    """Base class for all Bencode data types."""
    __hash__ = None

    def __init__(self, offset: Optional[int] = None, length: Optional[int] = None):
        self.offset = offset
        self.length = length

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.value == other.value

    def to_python(self):
        raise NotImplementedError


class BencodeInt(BencodeType):
    """Represents a Bencoded integer (signed 64-bit)."""
    def __init__(self, value: int, offset=None, length=None):
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("BencodeInt requires an integer.")
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError("BencodeInt value does not fit in 64 bits.")
        super().__init__(offset, length)
        self.value = value

    def __hash__(self):
        return hash(self.value)

    def to_python(self) -> int:
        return self.value

    def __repr__(self):
        return f"BencodeInt({self.value})"


class BencodeString(BencodeType):
    """Represents a Bencoded byte string."""
    def __init__(self, value: bytes, offset=None, length=None):
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError("BencodeString requires bytes.")
        super().__init__(offset, length)
        self.value = bytes(value)

    def __hash__(self):
        return hash(self.value)

    def __len__(self):
        return len(self.value)

    def text(self, encoding: str = "utf-8", errors: str = "replace") -> str:
        """Decode the raw bytes for display. The stored value stays bytes."""
        return self.value.decode(encoding, errors)

    def to_python(self) -> bytes:
        return self.value

    def __repr__(self):
        return f"BencodeString({self.value!r})"


class BencodeList(BencodeType):
    """Represents a Bencoded list."""
    def __init__(self, value: list, offset=None, length=None):
        if not isinstance(value, list):
            raise TypeError("BencodeList requires a list.")
        super().__init__(offset, length)
        self.value = value

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __getitem__(self, index):
        return self.value[index]

    def to_python(self) -> list:
        return [item.to_python() for item in self.value]

    def __repr__(self):
        return f"BencodeList({self.value!r})"


class BencodeDict(BencodeType):
    """
    Represents a Bencoded dictionary.

    Entries are kept as an ordered list of (key, value) pairs exactly as they
    appeared in the input, so duplicate and unsorted keys survive decoding.
    Lookups are linear; torrent dicts are small.
    """
    def __init__(self, value: List[Tuple[BencodeString, BencodeType]], offset=None, length=None):
        if not isinstance(value, list):
            raise TypeError("BencodeDict requires a list of (key, value) pairs.")
        # keys must be byte strings (bencode requirement)
        for k, _ in value:
            if not isinstance(k, BencodeString):
                raise TypeError("BencodeDict keys must be BencodeString.")
        super().__init__(offset, length)
        self.value = value

    @staticmethod
    def _key_bytes(key) -> bytes:
        return key.value if isinstance(key, BencodeString) else bytes(key)

    def get(self, key, default=None):
        """Return the value of the first entry with ``key``."""
        raw = self._key_bytes(key)
        for k, v in self.value:
            if k.value == raw:
                return v
        return default

    def get_all(self, key) -> list:
        raw = self._key_bytes(key)
        return [v for k, v in self.value if k.value == raw]

    def __getitem__(self, key):
        missing = object()
        found = self.get(key, missing)
        if found is missing:
            raise KeyError(key)
        return found

    def __contains__(self, key):
        raw = self._key_bytes(key)
        return any(k.value == raw for k, _ in self.value)

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.keys())

    def keys(self) -> List[bytes]:
        return [k.value for k, _ in self.value]

    def items(self) -> List[Tuple[bytes, BencodeType]]:
        return [(k.value, v) for k, v in self.value]

    def duplicate_keys(self) -> List[bytes]:
        """Keys that occur more than once, in order of their second appearance."""
        seen = set()
        dupes = []
        for k, _ in self.value:
            if k.value in seen and k.value not in dupes:
                dupes.append(k.value)
            seen.add(k.value)
        return dupes

    def is_sorted(self) -> bool:
        """True when keys are in strictly ascending raw-byte order (canonical form)."""
        keys = self.keys()
        return all(a < b for a, b in zip(keys, keys[1:]))

    def to_python(self) -> dict:
        out = {}
        for k, v in self.value:
            # first occurrence wins
            if k.value not in out:
                out[k.value] = v.to_python()
        return out

    def __repr__(self):
        return f"BencodeDict({self.value!r})"


class BencodeDocument:
    """
    Top-level sequence of values decoded from one buffer.

    ``end`` is the cursor position where decoding stopped and ``trailing`` the
    number of bytes left unread after it (non-zero only when a stray ``e``
    ended the document).
    """
    def __init__(self, values: List[BencodeType], end: int = 0, trailing: int = 0):
        self.values = values
        self.end = end
        self.trailing = trailing

    def __len__(self):
        return len(self.values)

    def __iter__(self) -> Iterator[BencodeType]:
        return iter(self.values)

    def __getitem__(self, index):
        return self.values[index]

    def dump(self) -> str:
        from .dump import dump
        return dump(self)

    def __repr__(self):
        return f"BencodeDocument({self.values!r})"
