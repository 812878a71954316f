import pytest

from rcokit.labels import LabelTable
from rcokit.rcofile import RCO_NULL_PTR
from rcokit.textxml import TextLangData, parse_text_xml, read_text_file

UTF8, UTF16, UTF32 = 0, 1, 2


def test_single_utf16_entry_layout():
    labels = LabelTable()
    doc = '<TextLang><Text name="a">Hi</Text></TextLang>'.encode()
    result = parse_text_xml(doc, UTF16, labels, False)
    assert result.entries == [(0, 6, 0)]
    assert result.data == "Hi".encode("utf-16-le") + b"\0\0\0\0"
    assert labels.get(0) == "a"


def test_entries_are_aligned_and_sequential():
    labels = LabelTable()
    doc = (
        '<TextLang>\n<Text name="one">abc</Text>\n'
        '<Text name="two">xy</Text>\n</TextLang>'
    ).encode()
    result = parse_text_xml(doc, UTF16, labels, False)
    assert len(result.entries) == 2
    first, second = result.entries
    assert first[2] == 0
    assert second[2] % 4 == 0
    assert second[2] >= first[1]
    assert len(result.data) % 4 == 0
    assert labels.get(first[0]) == "one"
    assert labels.get(second[0]) == "two"


def test_big_endian_utf16():
    doc = '<TextLang><Text name="a">Hi</Text></TextLang>'.encode()
    result = parse_text_xml(doc, UTF16, LabelTable(), True)
    assert result.data.startswith("Hi".encode("utf-16-be"))


def test_utf32_round_trip():
    doc = '<TextLang><Text name="a">Hello</Text></TextLang>'.encode()
    result = parse_text_xml(doc, UTF32, LabelTable(), False)
    _, length, offset = result.entries[0]
    chunk = result.data[offset:offset + length]
    assert chunk.decode("utf-32-le") == "Hello\0"


def test_utf8_text_and_terminator():
    doc = '<TextLang><Text name="a">hello</Text></TextLang>'.encode()
    result = parse_text_xml(doc, UTF8, LabelTable(), False)
    _, length, offset = result.entries[0]
    assert result.data[offset:offset + length] == b"hello\0"


def test_utf8_single_character_counts_as_blank():
    doc = '<TextLang><Text name="a">x</Text></TextLang>'.encode()
    result = parse_text_xml(doc, UTF8, LabelTable(), False)
    assert result.entries[0][1:] == (0, RCO_NULL_PTR)
    assert result.data == b""


def test_empty_text_has_null_offset():
    doc = '<TextLang><Text name="blank"/></TextLang>'.encode()
    labels = LabelTable()
    result = parse_text_xml(doc, UTF16, labels, False)
    assert result.entries == [(0, 0, RCO_NULL_PTR)]
    assert labels.get(0) == "blank"


def test_leading_bom_is_dropped():
    plain = parse_text_xml(
        '<TextLang><Text name="a">Hi</Text></TextLang>'.encode(), UTF16, LabelTable(), False
    )
    with_bom = parse_text_xml(
        '<TextLang><Text name="a">\ufeffHi</Text></TextLang>'.encode(),
        UTF16, LabelTable(), False,
    )
    assert with_bom == plain


def test_nameless_entry_leaves_zeroed_trailer():
    doc = (
        '<TextLang><Text>lost</Text><Text name="kept">ok</Text></TextLang>'
    ).encode()
    labels = LabelTable()
    result = parse_text_xml(doc, UTF16, labels, False)
    assert len(result.entries) == 2
    assert labels.get(result.entries[0][0]) == "kept"
    assert result.entries[1] == (0, 0, 0)


def test_repeated_labels_share_offset():
    doc = (
        '<TextLang><Text name="same">ab</Text><Text name="same">cd</Text></TextLang>'
    ).encode()
    result = parse_text_xml(doc, UTF16, LabelTable(), False)
    assert result.entries[0][0] == result.entries[1][0]


def test_no_text_children_gives_empty_data():
    result = parse_text_xml(b"<TextLang></TextLang>", UTF16, LabelTable(), False)
    assert result == TextLangData()


def test_wrong_root_rejected():
    with pytest.raises(ValueError):
        parse_text_xml(b"<RcoFile/>", UTF16, LabelTable(), False)


def test_malformed_document_rejected():
    with pytest.raises(ValueError):
        parse_text_xml(b"<TextLang><Text>", UTF16, LabelTable(), False)


def test_parse_from_path(tmp_path):
    path = tmp_path / "lang.xml"
    path.write_bytes('<TextLang><Text name="a">Hi</Text></TextLang>'.encode())
    from_path = parse_text_xml(str(path), UTF16, LabelTable(), False)
    from_bytes = parse_text_xml(path.read_bytes(), UTF16, LabelTable(), False)
    assert from_path == from_bytes


def test_read_text_file_converts_bom_source(tmp_path):
    path = tmp_path / "t.txt"
    path.write_bytes(b"\xff\xfe" + "Hey".encode("utf-16-le"))
    data, length = read_text_file(path, UTF16, True)
    assert length == len("Hey".encode("utf-16-be"))
    assert data[:length] == "Hey".encode("utf-16-be")
    assert len(data) % 4 == 0
    assert data[length:] == b"\0" * (len(data) - length)


def test_read_text_file_utf8_bom_to_utf16(tmp_path):
    path = tmp_path / "t.txt"
    path.write_bytes(b"\xef\xbb\xbf" + "abc".encode())
    data, length = read_text_file(path, UTF16, False)
    assert data[:length].decode("utf-16-le") == "abc"


def test_read_text_file_without_bom_is_copied(tmp_path):
    raw = "abcd".encode("utf-16-le")
    path = tmp_path / "t.txt"
    path.write_bytes(raw)
    data, length = read_text_file(path, UTF16, False)
    assert length == len(raw)
    assert data[:length] == raw
    assert len(data) >= length + 2


def test_read_text_file_empty(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_bytes(b"")
    assert read_text_file(path, UTF16, False) == (b"", 0)


def test_read_text_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_text_file(tmp_path / "nope.txt", UTF16, False)