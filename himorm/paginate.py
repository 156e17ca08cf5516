"""Pagination results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from himorm.property import Properties, Property, set_property


@dataclass
class Paginate:
    """One page of results with the counts that describe it."""

    total: int = 0
    per_page: int = 0
    current_page: int = 0
    last_page: int = 0
    items: Any = None

    def property(self, *properties: Property) -> Paginate:
        Properties(properties).apply(self)
        return self


def new_paginate(*properties: Property) -> Paginate:
    return Paginate().property(*properties)


def _setter(name: str, value: Any) -> Property:
    return set_property(lambda obj: setattr(obj, name, value))


def with_total(total: int) -> Property:
    return _setter("total", total)


def with_per_page(per_page: int) -> Property:
    return _setter("per_page", per_page)


def with_current_page(current_page: int) -> Property:
    return _setter("current_page", current_page)


def with_last_page(last_page: int) -> Property:
    return _setter("last_page", last_page)


def with_items(items: Any) -> Property:
    return _setter("items", items)


class PaginateSum(Paginate):
    """A page of results that also carries sums over the given fields."""

    def __init__(self, dest: Any, field: Any, *more: Any) -> None:
        super().__init__()
        self.dest = dest
        self.fields = [field, *more]
        self.sum: Any = None

    def paginate(self, paginate: Paginate) -> PaginateSum:
        """Copy the page figures and items from another page."""
        self.total = paginate.total
        self.per_page = paginate.per_page
        self.current_page = paginate.current_page
        self.last_page = paginate.last_page
        self.items = paginate.items
        return self