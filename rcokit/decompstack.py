"""Value and marker stacks used while decompiling VSMX code."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .vsmxfile import VsmxError

log = logging.getLogger(__name__)


@dataclass
class StackItem:
    """An expression fragment on the decompiler's value stack."""

    text: str = ""
    array_flag: int = 0
    object_flag: int = 0


class ValueStack:
    """LIFO stack of expression fragments; pushed items are copied."""

    def __init__(self) -> None:
        self._items: list[StackItem] = []

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    @property
    def depth(self) -> int:
        """Zero-based depth of the top item, or -1 when empty."""
        return len(self._items) - 1

    @property
    def top(self) -> StackItem:
        """The top item itself (not a copy)."""
        if not self._items:
            raise VsmxError("Stack underflow occurred!")
        return self._items[-1]

    def push(self, item: StackItem) -> None:
        self._items.append(replace(item))

    def pop(self) -> StackItem:
        if not self._items:
            raise VsmxError("Stack underflow occurred!")
        return self._items.pop()

    def clear(self) -> None:
        self._items.clear()


@dataclass
class Marker:
    """A pending block end: the group index it closes at and the group that opened it."""

    loc: int
    src: int


class MarkerStack:
    """Stack of block-end markers; inner blocks must close before outer ones."""

    def __init__(self) -> None:
        self._items: list[Marker] = []

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    @property
    def top(self) -> Marker:
        if not self._items:
            raise VsmxError("Marker stack underflow occurred!")
        return self._items[-1]

    def push(self, marker: Marker) -> None:
        new = replace(marker)
        if self._items:
            top = self._items[-1]
            if new.loc > top.loc:
                log.warning("Bad nesting hierachy detected!")
                new.loc, top.loc = top.loc, new.loc
        self._items.append(new)

    def pop(self) -> Marker:
        if not self._items:
            raise VsmxError("Marker stack underflow occurred!")
        return self._items.pop()