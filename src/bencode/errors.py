"""
Exceptions raised while decoding Bencoded data.

Each error carries the byte ``offset`` at which the problem was detected.
"""


class BencodeDecodeError(ValueError):
    """Base exception for Bencode decoding errors."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.message = message
        self.offset = offset


class UnexpectedEnd(BencodeDecodeError):
    """The cursor would read past the end of the buffer."""


class BadInteger(BencodeDecodeError):
    """An ``i...e`` body is not a canonical signed 64-bit decimal."""


class BadLengthPrefix(BencodeDecodeError):
    """A byte string length is not a decimal number, or its ':' is missing."""


class LengthOverflow(BencodeDecodeError):
    """A declared byte string length exceeds the remaining buffer."""


class BadKey(BencodeDecodeError):
    """A dictionary key is not a byte string."""


class UnterminatedContainer(BencodeDecodeError):
    """A list or dictionary has no closing 'e'."""


class NestingTooDeep(BencodeDecodeError):
    """Lists and dictionaries are nested deeper than the decoder allows."""
