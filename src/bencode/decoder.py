"""
Bencode decoder for BitTorrent metainfo and tracker responses.
"""
import logging
import re

from .errors import (
    BadInteger,
    BadKey,
    BadLengthPrefix,
    LengthOverflow,
    NestingTooDeep,
    UnexpectedEnd,
    UnterminatedContainer,
)
from .structure import (
    INT64_MAX,
    INT64_MIN,
    BencodeDict,
    BencodeDocument,
    BencodeInt,
    BencodeList,
    BencodeString,
)

logger = logging.getLogger(__name__)

# canonical form: no leading zeros, no "-0"
_INT_RE = re.compile(rb"-?(0|[1-9][0-9]*)")
_INT64_MAX_CHARS = len(str(INT64_MIN))  # "-9223372036854775808"

# lists and dicts nested deeper than this raise NestingTooDeep
MAX_DEPTH = 256


def _read_length_prefix(data: bytes, i: int):
    """
    Reads ``<digits>:`` starting at ``i``.
    Returns (body_start, length) after checking the body fits in ``data``.
    """
    n = len(data)
    pos = i
    while pos < n and data[pos:pos+1].isdigit():
        pos += 1

    if pos == i:
        if i >= n:
            raise UnexpectedEnd("Unexpected end of input", i)
        raise BadLengthPrefix(f"Expected string length, got {data[i:i+1]!r}", i)
    if pos >= n:
        raise UnexpectedEnd("Unexpected end of input in string length", pos)
    if data[pos:pos+1] != b":":
        raise BadLengthPrefix(f"Expected ':' after string length, got {data[pos:pos+1]!r}", pos)

    body_start = pos + 1
    digits = data[i:pos].lstrip(b"0")
    # more digits than the remaining byte count has cannot fit
    if len(digits) > len(str(n - body_start)):
        raise LengthOverflow(
            f"String length of {len(digits)} digits exceeds the {n - body_start} bytes remaining", i
        )
    length = int(digits or b"0")
    if length > n - body_start:
        raise LengthOverflow(
            f"String length {length} exceeds the {n - body_start} bytes remaining", i
        )
    return body_start, length


class BencodeDecoder:
    """
    Decodes Bencoded byte strings into a tree of Bencode types.

    Decoding is recursive descent over a single cursor. Each node is stamped
    with the offset it started at and the number of bytes it consumed.
    """
    def __init__(self, data: bytes, strict: bool = False, max_depth: int = MAX_DEPTH):
        self.data = bytes(data)
        self.i = 0  # cursor index
        self.strict = strict
        self.max_depth = max_depth
        self.depth = 0

    def decode(self) -> BencodeDocument:
        """Main decode entry point. Decodes every top-level value in the buffer."""
        values = []
        n = len(self.data)

        while self.i < n:
            if self.data[self.i:self.i+1] == b"e":
                if self.strict:
                    raise BadLengthPrefix("Stray 'e' at top level", self.i)
                logger.debug("Stray 'e' at offset %d ends the document", self.i)
                break
            values.append(self._parse_value())

        return BencodeDocument(values, end=self.i, trailing=n - self.i)

    def decode_one(self):
        """Decodes exactly one value that must span the whole buffer."""
        value = self._parse_value()
        if self.i != len(self.data):
            raise BadLengthPrefix("Trailing data after value", self.i)
        return value

    # --------------------------
    # Low-level utilities
    # --------------------------

    def _peek(self):
        if self.i >= len(self.data):
            raise UnexpectedEnd("Unexpected end of input", self.i)
        return self.data[self.i:self.i+1]

    def _consume(self, n=1):
        """Moves cursor forward by n bytes and returns the consumed chunk."""
        if self.i + n > len(self.data):
            raise UnexpectedEnd("Unexpected end of input", len(self.data))
        chunk = self.data[self.i:self.i+n]
        self.i += n
        return chunk

    def _at_container_end(self, start: int, kind: str) -> bool:
        if self.i >= len(self.data):
            raise UnterminatedContainer(f"Unterminated {kind}", start)
        return self.data[self.i:self.i+1] == b"e"

    def _enter_container(self, start: int):
        self.depth += 1
        if self.depth > self.max_depth:
            raise NestingTooDeep(f"Nesting deeper than {self.max_depth} levels", start)

    # --------------------------
    # Parsing functions
    # --------------------------

    def _parse_value(self):
        ch = self._peek()

        if ch == b'i':
            return self._parse_int()

        if ch.isdigit(): # Bencode strings start with length, which is a digit
            return self._parse_string()

        if ch == b'l':
            return self._parse_list()

        if ch == b'd':
            return self._parse_dict()

        raise BadLengthPrefix(f"Invalid token {ch!r}", self.i)

    def _parse_int(self):
        """Parses an integer from the Bencoded data."""
        start = self.i
        self._consume(1)  # skip 'i'

        end_pos = self.data.find(b'e', self.i)
        if end_pos < 0:
            raise UnexpectedEnd("Unterminated integer", start)
        number_bytes = self.data[self.i:end_pos]

        if len(number_bytes) > _INT64_MAX_CHARS:
            raise BadInteger(f"Integer of {len(number_bytes)} characters does not fit in 64 bits", start)
        if not _INT_RE.fullmatch(number_bytes) or number_bytes == b"-0":
            raise BadInteger(f"Invalid integer {number_bytes!r}", start)
        num = int(number_bytes)
        if not INT64_MIN <= num <= INT64_MAX:
            raise BadInteger(f"Integer {number_bytes!r} does not fit in 64 bits", start)

        self.i = end_pos + 1  # skip 'e'
        return BencodeInt(num, offset=start, length=self.i - start)

    def _parse_string(self):
        """Parses a byte string from the Bencoded data."""
        start = self.i
        body_start, length = _read_length_prefix(self.data, self.i)

        self.i = body_start
        string_bytes = self._consume(length)

        return BencodeString(string_bytes, offset=start, length=self.i - start)

    def _parse_list(self):
        """Parses a list from the Bencoded data."""
        start = self.i
        self._enter_container(start)
        self._consume(1)  # skip 'l'
        items = []

        while not self._at_container_end(start, "list"):
            items.append(self._parse_value())

        self._consume(1)  # skip 'e'
        self.depth -= 1
        return BencodeList(items, offset=start, length=self.i - start)

    def _parse_dict(self):
        """Parses a dictionary from the Bencoded data."""
        start = self.i
        self._enter_container(start)
        self._consume(1)  # skip 'd'
        entries = []
        seen = set()

        while not self._at_container_end(start, "dict"):
            # keys MUST be strings
            if not self.data[self.i:self.i+1].isdigit():
                raise BadKey(f"Dictionary key must be a byte string, got {self.data[self.i:self.i+1]!r}", self.i)
            key = self._parse_string()
            if key.value in seen:
                logger.debug("Duplicate dictionary key %r at offset %d", key.value, key.offset)
            seen.add(key.value)

            value = self._parse_value()
            entries.append((key, value))

        self._consume(1)  # skip 'e'
        self.depth -= 1
        return BencodeDict(entries, offset=start, length=self.i - start)


def decode(data: bytes, strict: bool = False) -> BencodeDocument:
    """
    Convenience function to decode every top-level value in ``data``.

    Decoding stops at the end of the buffer or at a stray top-level ``e``;
    with ``strict=True`` the stray ``e`` is an error instead.
    """
    return BencodeDecoder(data, strict=strict).decode()


def decode_one(data: bytes):
    """Decodes a buffer that holds exactly one value, e.g. a .torrent file."""
    return BencodeDecoder(data).decode_one()


def size_at(data: bytes, offset: int, max_depth: int = MAX_DEPTH) -> int:
    """
    Returns the number of bytes spanned by the value starting at ``offset``.

    Walks the same grammar as the decoder without building values. Integer
    bodies are only delimited, not validated.
    """
    data = bytes(data)
    n = len(data)
    if not 0 <= offset < n:
        raise UnexpectedEnd("Offset outside of buffer", offset)

    def skip(idx, depth=0):
        if idx >= n:
            raise UnexpectedEnd("Unexpected end of input", idx)
        b = data[idx:idx+1]

        # Integer: i123e
        if b == b"i":
            end = data.find(b"e", idx + 1)
            if end < 0:
                raise UnexpectedEnd("Unterminated integer", idx)
            return end + 1

        if b in (b"l", b"d") and depth >= max_depth:
            raise NestingTooDeep(f"Nesting deeper than {max_depth} levels", idx)

        # List: l ... e
        if b == b"l":
            start = idx
            idx += 1
            while True:
                if idx >= n:
                    raise UnterminatedContainer("Unterminated list", start)
                if data[idx:idx+1] == b"e":
                    return idx + 1
                idx = skip(idx, depth + 1)

        # Dict: d ... e
        if b == b"d":
            start = idx
            idx += 1
            while True:
                if idx >= n:
                    raise UnterminatedContainer("Unterminated dict", start)
                if data[idx:idx+1] == b"e":
                    return idx + 1
                if not data[idx:idx+1].isdigit():
                    raise BadKey(f"Dictionary key must be a byte string, got {data[idx:idx+1]!r}", idx)
                idx = skip(idx)  # key
                idx = skip(idx, depth + 1)  # value

        # String: len:value
        if b.isdigit():
            body_start, length = _read_length_prefix(data, idx)
            return body_start + length

        raise BadLengthPrefix(f"Invalid token {b!r}", idx)

    return skip(offset) - offset
