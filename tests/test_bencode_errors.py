import pytest

from bencode import (
    MAX_DEPTH,
    BadInteger,
    BadKey,
    BadLengthPrefix,
    BencodeDecodeError,
    LengthOverflow,
    NestingTooDeep,
    UnexpectedEnd,
    UnterminatedContainer,
    decode,
    decode_one,
    size_at,
)


@pytest.mark.parametrize("data", [b"i-0e", b"i03e", b"i-03e", b"ie", b"i-e", b"i1.5e", b"i 1e"])
def test_bad_integer(data):
    with pytest.raises(BadInteger) as exc:
        decode(data)
    assert exc.value.offset == 0


def test_negative_zero_offset_inside_list():
    with pytest.raises(BadInteger) as exc:
        decode(b"li1ei-0ee")
    assert exc.value.offset == 4


def test_integer_overflow():
    with pytest.raises(BadInteger):
        decode(b"i9223372036854775808e")


def test_unterminated_integer():
    with pytest.raises(UnexpectedEnd) as exc:
        decode(b"i42")
    assert exc.value.offset == 0


def test_truncated_string_length():
    with pytest.raises(UnexpectedEnd):
        decode(b"12")


def test_missing_colon():
    with pytest.raises(BadLengthPrefix) as exc:
        decode(b"4xspam")
    assert exc.value.offset == 1


def test_invalid_token():
    with pytest.raises(BadLengthPrefix) as exc:
        decode(b"x")
    assert exc.value.offset == 0


def test_length_overflow():
    with pytest.raises(LengthOverflow) as exc:
        decode(b"l10:shorte")
    assert exc.value.offset == 1


def test_bad_key():
    with pytest.raises(BadKey) as exc:
        decode(b"di1ei2ee")
    assert exc.value.offset == 1


def test_unterminated_list():
    with pytest.raises(UnterminatedContainer) as exc:
        decode(b"li1e")
    assert exc.value.offset == 0


def test_unterminated_nested_dict():
    with pytest.raises(UnterminatedContainer) as exc:
        decode(b"ld1:ai1e")
    assert exc.value.offset == 1


def test_dict_missing_value():
    with pytest.raises(UnexpectedEnd):
        decode(b"d1:a")


def test_strict_rejects_stray_e():
    with pytest.raises(BadLengthPrefix) as exc:
        decode(b"i1ee", strict=True)
    assert exc.value.offset == 3


def test_decode_one_rejects_trailing_data():
    with pytest.raises(BadLengthPrefix):
        decode_one(b"i1ei2e")


def test_errors_are_value_errors_with_offset_in_message():
    with pytest.raises(ValueError) as exc:
        decode(b"i-0e")
    assert isinstance(exc.value, BencodeDecodeError)
    assert "at offset 0" in str(exc.value)


@pytest.mark.parametrize("data, offset, error", [
    (b"i1e", 3, UnexpectedEnd),
    (b"i1e", -1, UnexpectedEnd),
    (b"li1e", 0, UnterminatedContainer),
    (b"di1ei1ee", 0, BadKey),
    (b"5:abc", 0, LengthOverflow),
    (b"?", 0, BadLengthPrefix),
])
def test_size_at_errors(data, offset, error):
    with pytest.raises(error):
        size_at(data, offset)


def test_integer_longer_than_int64_rejected_before_conversion():
    with pytest.raises(BadInteger) as exc:
        decode(b"i" + b"1" * 5000 + b"e")
    assert exc.value.offset == 0


def test_length_prefix_with_too_many_digits():
    data = b"9" * 5000 + b":x"
    with pytest.raises(LengthOverflow) as exc:
        decode(data)
    assert exc.value.offset == 0

    with pytest.raises(LengthOverflow) as exc:
        size_at(data, 0)
    assert exc.value.offset == 0


@pytest.mark.parametrize("data", [
    b"l" * 5000,
    b"l" * 2000 + b"e" * 2000,
    b"d1:a" * 1000 + b"e" * 1000,
])
def test_nesting_too_deep(data):
    with pytest.raises(NestingTooDeep) as exc:
        decode(data)
    too_deep = exc.value.offset
    assert data[too_deep:too_deep+1] in (b"l", b"d")

    with pytest.raises(NestingTooDeep) as exc:
        size_at(data, 0)
    assert exc.value.offset == too_deep


def test_nesting_at_limit_decodes():
    data = b"l" * MAX_DEPTH + b"e" * MAX_DEPTH
    doc = decode(data)
    assert doc[0].length == len(data)
    assert size_at(data, 0) == len(data)

    with pytest.raises(NestingTooDeep) as exc:
        decode(b"l" + data + b"e")
    assert exc.value.offset == MAX_DEPTH
