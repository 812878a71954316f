import pytest

from rcokit.labels import LabelTable, reorder_labels
from rcokit.rcofile import RCO_NULL_PTR


def test_first_label_at_offset_zero_and_padded():
    table = LabelTable()
    assert table.add("abc") == 0
    assert table.to_bytes() == b"abc\0"


def test_label_of_four_chars_takes_eight_bytes():
    table = LabelTable()
    table.add("abcd")
    assert table.to_bytes() == b"abcd\0\0\0\0"


def test_duplicate_label_returns_same_offset():
    table = LabelTable()
    first = table.add("page_main")
    table.add("other")
    size = len(table)
    assert table.add("page_main") == first
    assert len(table) == size


def test_get_round_trip_and_alignment():
    table = LabelTable()
    names = ["a", "bb", "ccc", "dddd", "eeeee", "unicode\u00e9"]
    offsets = [table.add(name) for name in names]
    assert [table.get(o) for o in offsets] == names
    assert all(o % 4 == 0 for o in offsets)
    assert len(table) % 4 == 0
    assert offsets == sorted(offsets)


def test_labels_after_empty_label_are_stored_again():
    table = LabelTable()
    table.add("a")
    table.add("")
    first_b = table.add("b")
    size = len(table)
    second_b = table.add("b")
    assert second_b > first_b
    assert table.get(second_b) == "b"
    assert len(table) > size
    assert table.add("a") == 0


def test_constructed_from_existing_bytes():
    table = LabelTable(b"abc\0xyz\0")
    assert table.get(4) == "xyz"
    assert table.add("xyz") == 4


def test_get_out_of_range_raises():
    table = LabelTable()
    table.add("abc")
    with pytest.raises(IndexError):
        table.get(len(table))
    with pytest.raises(IndexError):
        table.get(-1)


def test_add_with_nul_raises():
    with pytest.raises(ValueError):
        LabelTable().add("a\0b")


def test_reorder_changes_order():
    table = LabelTable()
    x = table.add("x")
    y = table.add("y")
    z = table.add("z")
    new_table, offsets = reorder_labels(table, [z, x, y])
    assert new_table.to_bytes() == b"z\0\0\0x\0\0\0y\0\0\0"
    assert [new_table.get(o) for o in offsets] == ["z", "x", "y"]


def test_reorder_deduplicates_and_passes_null():
    table = LabelTable()
    x = table.add("x")
    y = table.add("y")
    new_table, offsets = reorder_labels(table, [y, RCO_NULL_PTR, x, y])
    assert offsets[1] == RCO_NULL_PTR
    assert offsets[0] == offsets[3]
    assert new_table.get(offsets[0]) == "y"
    assert new_table.get(offsets[2]) == "x"
    assert len(new_table) == len(table)


def test_reorder_missing_label_keeps_original():
    table = LabelTable()
    x = table.add("x")
    table.add("unused")
    original = table.to_bytes()
    result_table, offsets = reorder_labels(table, [x])
    assert result_table.to_bytes() == original
    assert offsets == [x]