"""Functional options applied to objects after construction."""

from __future__ import annotations

from typing import Any, Callable


class Property:
    """A deferred change to an object."""

    def __init__(self, fn: Callable[[Any], None]) -> None:
        self._fn = fn

    def set(self, obj: Any) -> None:
        self._fn(obj)


def set_property(fn: Callable[[Any], None]) -> Property:
    return Property(fn)


class Properties(list):
    """An ordered collection of properties."""

    def apply(self, obj: Any) -> None:
        for prop in self:
            prop.set(obj)