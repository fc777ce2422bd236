"""
Bencode package for decoding BitTorrent data.
"""
from .decoder import MAX_DEPTH, BencodeDecoder, decode, decode_one, size_at
from .dump import dump
from .errors import (
    BadInteger,
    BadKey,
    BadLengthPrefix,
    BencodeDecodeError,
    LengthOverflow,
    NestingTooDeep,
    UnexpectedEnd,
    UnterminatedContainer,
)
from .structure import BencodeDict, BencodeDocument, BencodeInt, BencodeList, BencodeString

__all__ = [
    'decode', 'decode_one', 'size_at', 'dump', 'BencodeDecoder',
    'BencodeInt', 'BencodeString', 'BencodeList', 'BencodeDict', 'BencodeDocument',
    'BencodeDecodeError', 'UnexpectedEnd', 'BadInteger', 'BadLengthPrefix',
    'LengthOverflow', 'BadKey', 'UnterminatedContainer', 'NestingTooDeep', 'MAX_DEPTH',
]
