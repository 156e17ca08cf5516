"""Collections of WHERE conditions and the fluent methods that fill them."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator

from himorm.expression import (
    Between,
    Logic,
    Raw,
    Where,
    WhereRaw,
    and_where,
    apply_logic,
    or_where,
)
from himorm.utils import column_to_string


class Wheres:
    """An ordered list of conditions, each joined to the previous by AND or OR."""

    def __init__(self) -> None:
        self.logic = Logic.AND
        self.collect: list[Where] = []

    def __len__(self) -> int:
        return len(self.collect)

    def __iter__(self) -> Iterator[Where]:
        return iter(self.collect)

    def and_(self) -> Wheres:
        self.logic = Logic.AND
        return self

    def or_(self) -> Wheres:
        self.logic = Logic.OR
        return self

    def _add(self, column: str, operator: str, value: Any) -> None:
        make = and_where if self.logic is Logic.AND else or_where
        self.collect.append(make(column, operator, value))

    def raw(self, sql: str, args: Iterable[Any] = (), error: Exception | None = None) -> None:
        """Add a raw fragment; raw fragments are always joined with AND."""
        self.collect.append(and_where("", "RAW", Raw(sql, list(args), error)))

    def where_raw(self, sql: str, args: Iterable[Any] = (), error: Exception | None = None) -> None:
        """Add an already rendered group of conditions."""
        self._add("", "whereRaw", WhereRaw(sql, list(args), error))

    def where(self, column: str, operator: str, value: Any) -> None:
        self._add(column, operator, value)

    def where_in(self, column: str, value: Any) -> None:
        self._add(column, "IN", value)

    def where_not_in(self, column: str, value: Any) -> None:
        self._add(column, "NotIn", value)

    def where_null(self, column: str) -> None:
        self._add(column, "Null", None)

    def where_not_null(self, column: str) -> None:
        self._add(column, "NotNull", None)

    def where_like(self, column: str, value: Any) -> None:
        self._add(column, "Like", value)

    def where_not_like(self, column: str, value: Any) -> None:
        self._add(column, "NotLike", value)

    def where_between(self, column: str, first: Any, second: Any) -> None:
        self._add(column, "BETWEEN", Between(column, first, second))

    def pred(self) -> tuple[str, list]:
        """Render all conditions to one predicate and its arguments."""
        parts: list[str] = []
        values: list = []
        for item in self.collect:
            sql, args = item.sqlizer.to_sql()
            parts, values = apply_logic(item, sql, args, parts, values)
        return " ".join(parts), values

    def clone_from(self, other: Wheres) -> None:
        """Take over the logic and conditions of another collection."""
        self.logic = other.logic
        self.collect = list(other.collect)

    def reset(self) -> None:
        self.logic = Logic.AND
        self.collect = []


def where_raw_handle(wheres: Wheres) -> tuple[str, list]:
    return wheres.pred()


def _render(fn: Callable[[WhereRawBuilder], WhereRawBuilder]) -> tuple[str, list, Exception | None]:
    """Build a nested group; a rendering error is kept and raised when the outer predicate renders."""
    builder = fn(WhereRawBuilder())
    try:
        sql, args = builder.to_sql()
    except Exception as exc:
        return "", [], exc
    return sql, args, None


class WhereMethods:
    """Fluent condition methods for any builder holding a ``wheres`` collection."""

    wheres: Wheres

    def where(self, column: Any, operator: str, value: Any):
        self.wheres.and_().where(column_to_string(column), operator, value)
        return self

    def where_in(self, column: Any, value: Any):
        self.wheres.and_().where_in(column_to_string(column), value)
        return self

    def where_not_in(self, column: Any, value: Any):
        self.wheres.and_().where_not_in(column_to_string(column), value)
        return self

    def where_null(self, column: Any):
        self.wheres.and_().where_null(column_to_string(column))
        return self

    def where_not_null(self, column: Any):
        self.wheres.and_().where_not_null(column_to_string(column))
        return self

    def where_like(self, column: Any, value: Any):
        self.wheres.and_().where_like(column_to_string(column), value)
        return self

    def not_like(self, column: Any, value: Any):
        self.wheres.and_().where_not_like(column_to_string(column), value)
        return self

    def where_between(self, column: Any, first: Any, second: Any):
        self.wheres.and_().where_between(column_to_string(column), first, second)
        return self

    def where_raw(self, fn: Callable[[WhereRawBuilder], WhereRawBuilder]):
        sql, args, error = _render(fn)
        self.wheres.and_().where_raw(sql, args, error)
        return self

    def or_where(self, column: Any, operator: str, value: Any):
        self.wheres.or_().where(column_to_string(column), operator, value)
        return self

    def or_where_in(self, column: Any, value: Any):
        self.wheres.or_().where_in(column_to_string(column), value)
        return self

    def or_where_not_in(self, column: Any, value: Any):
        self.wheres.or_().where_not_in(column_to_string(column), value)
        return self

    def or_where_null(self, column: Any):
        self.wheres.or_().where_null(column_to_string(column))
        return self

    def or_where_not_null(self, column: Any):
        self.wheres.or_().where_not_null(column_to_string(column))
        return self

    def or_like(self, column: Any, value: Any):
        self.wheres.or_().where_like(column_to_string(column), value)
        return self

    def or_not_like(self, column: Any, value: Any):
        self.wheres.or_().where_not_like(column_to_string(column), value)
        return self

    def or_where_between(self, column: Any, first: Any, second: Any):
        self.wheres.or_().where_between(column_to_string(column), first, second)
        return self

    def or_where_raw(self, fn: Callable[[WhereRawBuilder], WhereRawBuilder]):
        sql, args, error = _render(fn)
        self.wheres.or_().where_raw(sql, args, error)
        return self


class WhereRawBuilder(WhereMethods):
    """Builds a nested group of conditions."""

    def __init__(self) -> None:
        self.wheres = Wheres()

    def to_sql(self) -> tuple[str, list]:
        return where_raw_handle(self.wheres)

    def raw(self, pred: str, *args: Any) -> WhereRawBuilder:
        self.wheres.and_().raw(pred, args)
        return self

    def or_raw(self, pred: str, *args: Any) -> WhereRawBuilder:
        self.wheres.or_().raw(pred, args)
        return self