"""Ordered column/value assignments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator


@dataclass(frozen=True)
class Set:
    column: Any
    value: Any


class Sets:
    """An ordered list of column assignments."""

    def __init__(self) -> None:
        self._items: list[Set] = []

    def append(self, column: Any, value: Any) -> None:
        self._items.append(Set(column, value))

    def for_each(self, fn: Callable[[Set], bool]) -> Sets:
        """Call fn on each assignment in order until it returns False."""
        for item in self._items:
            if not fn(item):
                break
        return self

    def reset(self) -> None:
        self._items.clear()

    def __iter__(self) -> Iterator[Set]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)