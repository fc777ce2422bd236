from bencode import decode, decode_one, size_at
from bencode.structure import BencodeInt, BencodeString, BencodeList, BencodeDict


def test_int():
    print("Testing integer decoding...")
    doc = decode(b"i42e")
    print("Decoded:", doc)
    assert len(doc) == 1
    obj = doc[0]
    assert isinstance(obj, BencodeInt)
    assert obj.value == 42
    assert size_at(b"i42e", 0) == 4


def test_negative_and_zero_int():
    assert decode(b"i-3e")[0].value == -3
    assert decode(b"i0e")[0].value == 0


def test_int_64_bit():
    data = b"i9223372036854775807e"
    assert decode(data)[0].value == 2**63 - 1
    assert decode(b"i-9223372036854775808e")[0].value == -(2**63)


def test_string():
    print("Testing string decoding...")
    obj = decode(b"4:spam")[0]
    print("Decoded:", obj)
    assert isinstance(obj, BencodeString)
    assert obj.value == b"spam"
    assert len(obj) == 4
    assert size_at(b"4:spam", 0) == 6


def test_empty_string():
    obj = decode(b"0:")[0]
    assert obj.value == b""
    assert obj.length == 2


def test_binary_string():
    data = b"2:\x00\xff"
    obj = decode(data)[0]
    assert obj.value == bytes([0x00, 0xFF])
    assert len(obj) == 2


def test_string_body_taken_verbatim():
    # 'e', ':' and digits inside a body never end the enclosing list
    data = b"l5:e:1ee3:abce"
    lst = decode(data)[0]
    assert [s.value for s in lst] == [b"e:1ee", b"abc"]
    assert lst.length == len(data)


def test_list():
    print("Testing list decoding...")
    data = b"l4:spami-3ee"
    obj = decode(data)[0]
    print("Decoded:", obj)
    assert isinstance(obj, BencodeList)
    assert len(obj) == 2
    assert obj[0] == BencodeString(b"spam")
    assert obj[1] == BencodeInt(-3)
    assert size_at(data, 0) == 12


def test_empty_containers():
    doc = decode(b"lede")
    assert isinstance(doc[0], BencodeList) and len(doc[0]) == 0
    assert isinstance(doc[1], BencodeDict) and len(doc[1]) == 0


def test_dict():
    print("Testing dictionary decoding...")
    data = b"d3:cow3:moo4:spaml1:a1:bee"
    obj = decode(data)[0]
    print("Decoded:", obj)
    assert isinstance(obj, BencodeDict)
    assert obj[b"cow"].value == b"moo"
    assert [s.value for s in obj[b"spam"]] == [b"a", b"b"]
    assert obj.keys() == [b"cow", b"spam"]
    assert size_at(data, 0) == len(data)


def test_dict_keeps_input_order_and_duplicates():
    obj = decode(b"d1:b i1e1:a i2e1:b i3ee".replace(b" ", b""))[0]
    assert obj.keys() == [b"b", b"a", b"b"]
    assert obj.get(b"b").value == 1
    assert [v.value for v in obj.get_all(b"b")] == [1, 3]
    assert obj.duplicate_keys() == [b"b"]
    assert not obj.is_sorted()


def test_dict_sorted_predicate():
    assert decode(b"d1:ai1e1:bi2ee")[0].is_sorted()
    assert decode(b"de")[0].is_sorted()


def test_binary_keys():
    obj = decode(b"d2:\x00\x01i7ee")[0]
    assert obj[b"\x00\x01"].value == 7
    assert b"\x00\x01" in obj


def test_multiple_top_level_values():
    doc = decode(b"i1e3:abcle")
    assert len(doc) == 3
    assert doc.end == 10
    assert doc.trailing == 0


def test_stray_e_ends_document():
    data = b"i1ei2eei3e"
    doc = decode(data)
    assert [v.value for v in doc] == [1, 2]
    assert doc.end == 6
    assert doc.trailing == 4


def test_empty_buffer():
    doc = decode(b"")
    assert len(doc) == 0


def test_accepts_bytearray_and_memoryview():
    assert decode(bytearray(b"i5e"))[0].value == 5
    assert decode(memoryview(b"3:abc"))[0].value == b"abc"


def test_offsets_are_recorded():
    data = b"d3:cow3:moo4:spaml1:a1:bee"
    obj = decode(data)[0]
    key, value = obj.value[1]
    assert key.offset == 11
    assert value.offset == 17
    assert value[0].offset == 18
    assert value.length == 8


def test_decode_one():
    assert decode_one(b"d1:ai1ee")[b"a"].value == 1


def test_to_python():
    obj = decode(b"d1:ali1ei2ee1:b3:xyz1:ai9ee")[0]
    assert obj.to_python() == {b"a": [1, 2], b"b": b"xyz"}


def test_equality_ignores_position():
    assert decode(b"i1ei1e")[0] == decode(b"i1ei1e")[1]
    assert BencodeString(b"x") != BencodeInt(1)
    assert hash(BencodeString(b"x")) == hash(BencodeString(b"x"))
