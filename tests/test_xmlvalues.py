import struct

import pytest

from rcokit.rcofile import RCO_NULL_PTR, RefType
from rcokit.xmlvalues import (
    ParsedRef,
    expand_fname_to_fmt,
    firmware_to_version_id,
    int_to_text,
    parse_ref,
    parse_value,
    split_comma_list,
    text_to_int,
    unknown_attrib_names,
)

TABLE = ["none", "zlib", "rlz"]


def test_split_comma_list_keeps_empty_items():
    assert split_comma_list("a,b,,c") == ["a", "b", "", "c"]


def test_split_comma_list_empty():
    assert split_comma_list("") == []


@pytest.mark.parametrize("text", ["one", "x, y ,z", ",,"])
def test_split_comma_list_round_trip(text):
    assert ",".join(split_comma_list(text)) == text


def test_expand_fname_to_fmt():
    fmt = expand_fname_to_fmt("snd_*.vag", "d")
    assert fmt == "snd_%d.vag"
    assert fmt % 2 == "snd_2.vag"


def test_expand_fname_without_star_unchanged():
    assert expand_fname_to_fmt("plain.txt", "s") == "plain.txt"


def test_text_to_int_case_insensitive():
    assert text_to_int("ZLIB", TABLE) == 1


def test_text_to_int_unknown_forms():
    assert text_to_int("unknown7", TABLE) == 7
    assert text_to_int("unknown0x10", TABLE) == 0x10


@pytest.mark.parametrize("text", ["", "bogus", "unknown"])
def test_text_to_int_rejects(text):
    with pytest.raises(ValueError):
        text_to_int(text, TABLE)


def test_int_to_text_known_and_unknown():
    assert int_to_text(2, TABLE) == "rlz"
    assert int_to_text(0x20, TABLE) == "unknown0x20"


@pytest.mark.parametrize("value", [0, 1, 2, 3, 0x1F, 0xFFFF])
def test_int_text_round_trip(value):
    assert text_to_int(int_to_text(value, TABLE), TABLE) == value


def test_table_stops_at_empty_entry():
    table = ["a", "", "c"]
    assert int_to_text(2, table) == "unknown0x2"


def test_parse_value_hex():
    assert parse_value("0x10") == 0x10
    assert parse_value("0xFFFFFFFF") == 0xFFFFFFFF


@pytest.mark.parametrize("number", [1.5, -2.25, 0.0, 100.0])
def test_parse_value_float_bits(number):
    bits = parse_value(repr(number))
    assert struct.unpack("<f", struct.pack("<I", bits))[0] == number


def test_parse_value_garbage_is_zero():
    assert parse_value("abc") == 0
    assert parse_value("") == 0


def test_parse_ref_nothing():
    assert parse_ref("Nothing") == ParsedRef(RefType.NONE, None, RCO_NULL_PTR)


def test_parse_ref_known_kinds():
    assert parse_ref("image:icon").type == RefType.IMG
    assert parse_ref("image:icon").name == "icon"
    assert parse_ref("OBJECT2:x").type == RefType.OBJ2
    assert parse_ref("event:native:/do").name == "native:/do"


def test_parse_ref_unknown_type():
    ref = parse_ref("unknown0x500:12")
    assert ref.type == 0x500
    assert ref.raw_ptr == 12
    assert ref.name is None


@pytest.mark.parametrize("text", ["noColon", "weird:x", "unknown:5"])
def test_parse_ref_rejects(text):
    with pytest.raises(ValueError):
        parse_ref(text)


@pytest.mark.parametrize(
    "text,expected",
    [("1.0", 0x70), ("1.5", 0x71), ("2.7", 0x95), ("3.0", 0x96), ("3.5", 0x100), ("5.0", 0x100)],
)
def test_firmware_versions(text, expected):
    assert firmware_to_version_id(text) == expected


def test_firmware_special_values():
    assert firmware_to_version_id("ps3") == 0x107
    assert firmware_to_version_id("unknownId0x96") == 0x96


@pytest.mark.parametrize("text", ["0.5", "7.0", "abc"])
def test_firmware_out_of_range_keeps_default(text):
    assert firmware_to_version_id(text) == 0x71


def test_unknown_attrib_names():
    names = unknown_attrib_names(3)
    assert names[0] == "unknown3"
    assert names[-1] == "unknownRef3"
    assert len(names) == len(set(names))
    assert all(name.startswith("unknown") and name.endswith("3") for name in names)