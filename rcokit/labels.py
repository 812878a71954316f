"""Label pools: NUL-terminated names padded to 4-byte boundaries."""

from __future__ import annotations

from collections.abc import Iterable

from .rcofile import RCO_NULL_PTR

_ENCODING = "utf-8"


def _align4(value: int) -> int:
    return (value + 3) & ~3


class LabelTable:
    """A pool of labels addressed by byte offset.

    Each label is stored NUL-terminated and padded with zeros to a multiple
    of four bytes. Adding a label that is already present returns its
    existing offset. The lookup walks the pool from the start and stops at
    the first entry that begins with a zero byte, so labels placed after an
    empty label are not found again and get stored once more.
    """

    def __init__(self, data: bytes = b"") -> None:
        self._data = bytearray(data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"LabelTable({bytes(self._data)!r})"

    def _find(self, encoded: bytes) -> int | None:
        data = self._data
        pos = 0
        while pos < len(data) and data[pos]:
            end = data.find(0, pos)
            if end < 0:
                end = len(data)
            if data[pos:end] == encoded:
                return pos
            pos = _align4(end + 1)
        return None

    def add(self, label: str) -> int:
        """Store ``label`` unless present and return its offset."""
        encoded = label.encode(_ENCODING)
        if b"\0" in encoded:
            raise ValueError(f"label may not contain a NUL character: {label!r}")
        found = self._find(encoded)
        if found is not None:
            return found
        offset = len(self._data)
        self._data += encoded + b"\0"
        self._data += b"\0" * (_align4(len(self._data)) - len(self._data))
        return offset

    def get(self, offset: int) -> str:
        """The label stored at ``offset``."""
        if offset < 0 or offset >= len(self._data):
            raise IndexError(f"label offset 0x{offset:x} out of range")
        end = self._data.find(0, offset)
        if end < 0:
            end = len(self._data)
        return self._data[offset:end].decode(_ENCODING)

    def to_bytes(self) -> bytes:
        """The raw pool contents."""
        return bytes(self._data)


def reorder_labels(table: LabelTable, labels: Iterable[int]) -> tuple[LabelTable, list[int]]:
    """Rebuild ``table`` with its labels in the order their offsets are given.

    Returns the new table and the new offset for each given offset;
    ``RCO_NULL_PTR`` offsets pass through unchanged. If the rebuilt pool
    comes out shorter than the original (some labels were never referenced),
    the original table and offsets are returned unchanged.
    """
    old_offsets = list(labels)
    new_table = LabelTable()
    new_offsets = [
        offset if offset == RCO_NULL_PTR else new_table.add(table.get(offset))
        for offset in old_offsets
    ]
    if len(new_table) < len(table):
        return table, old_offsets
    return new_table, new_offsets