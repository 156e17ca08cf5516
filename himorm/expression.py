"""SQL fragments: expressions, comparisons, raw parts and their logical joining."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Sqlizer(Protocol):
    """Anything that renders to a SQL fragment and its arguments."""

    def to_sql(self) -> tuple[str, list]:
        ...


def _expand(sql: str, args: list) -> tuple[str, list]:
    """Inline nested fragments given as arguments at their placeholders."""
    if not any(isinstance(arg, Sqlizer) for arg in args):
        return sql, list(args)
    out: list[str] = []
    result_args: list = []
    rest = sql
    pending = list(args)
    while pending and rest:
        index = rest.find("?")
        if index < 0:
            break
        if rest[index + 1:index + 2] == "?":
            out.append(rest[:index + 2])
            rest = rest[index + 2:]
            continue
        arg = pending.pop(0)
        if isinstance(arg, Sqlizer):
            nested_sql, nested_args = arg.to_sql()
            out.append(rest[:index])
            out.append(nested_sql)
            result_args.extend(nested_args)
        else:
            out.append(rest[:index + 1])
            result_args.append(arg)
        rest = rest[index + 1:]
    out.append(rest)
    return "".join(out), result_args


@dataclass
class Expression:
    """A literal SQL fragment with arguments, possibly carrying a deferred error."""

    sql: str
    args: list = field(default_factory=list)
    error: Exception | None = None

    def to_sql(self) -> tuple[str, list]:
        if self.error is not None:
            raise self.error
        return _expand(self.sql, self.args)


def expr(sql: str, *args: Any) -> Expression:
    """Build a SQL expression from text and arguments."""
    return Expression(sql, list(args))


@dataclass
class Between:
    column: str
    first: Any
    second: Any

    def to_sql(self) -> tuple[str, list]:
        return f"{self.column} BETWEEN ? AND ?", [self.first, self.second]


@dataclass
class Raw:
    sql: str
    args: list = field(default_factory=list)
    error: Exception | None = None

    def to_sql(self) -> tuple[str, list]:
        if self.error is not None:
            raise self.error
        return self.sql, list(self.args)


@dataclass
class WhereRaw:
    sql: str
    args: list = field(default_factory=list)
    error: Exception | None = None

    def to_sql(self) -> tuple[str, list]:
        if self.error is not None:
            raise self.error
        return self.sql, list(self.args)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


@dataclass
class _Condition:
    column: str
    value: Any = None


class Eq(_Condition):
    """Equality, NULL test or IN list depending on the value."""

    def to_sql(self) -> tuple[str, list]:
        if self.value is None:
            return f"{self.column} IS NULL", []
        if _is_sequence(self.value):
            if not self.value:
                return "(1=0)", []
            marks = ",".join("?" * len(self.value))
            return f"{self.column} IN ({marks})", list(self.value)
        return f"{self.column} = ?", [self.value]


class NotEq(_Condition):
    """Inequality, NOT NULL test or NOT IN list depending on the value."""

    def to_sql(self) -> tuple[str, list]:
        if self.value is None:
            return f"{self.column} IS NOT NULL", []
        if _is_sequence(self.value):
            if not self.value:
                return "(1=1)", []
            marks = ",".join("?" * len(self.value))
            return f"{self.column} NOT IN ({marks})", list(self.value)
        return f"{self.column} <> ?", [self.value]


class _Ordering(_Condition):
    operator = "="

    def _render(self) -> tuple[str, list]:
        if self.value is None:
            raise ValueError("cannot use null with less than or greater than operators")
        if _is_sequence(self.value):
            raise ValueError("cannot use array or slice with less than or greater than operators")
        return f"{self.column} {self.operator} ?", [self.value]


class Gt(_Ordering):
    operator = ">"

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class GtOrEq(_Ordering):
    operator = ">="

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class Lt(_Ordering):
    operator = "<"

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class LtOrEq(_Ordering):
    operator = "<="

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class _Pattern(_Condition):
    operator = "LIKE"

    def _render(self) -> tuple[str, list]:
        if self.value is None:
            raise ValueError("cannot use null with like operators")
        if _is_sequence(self.value):
            raise ValueError("cannot use array or slice with like operators")
        return f"{self.column} {self.operator} ?", [self.value]


class Like(_Pattern):
    operator = "LIKE"

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class NotLike(_Pattern):
    operator = "NOT LIKE"

    def to_sql(self) -> tuple[str, list]:
        return self._render()


class Logic(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass
class Where:
    """One condition together with the logic that joins it to the previous ones."""

    logic: Logic
    sqlizer: Sqlizer


_OPERATORS = {
    ">": Gt,
    ">=": GtOrEq,
    "<": Lt,
    "<=": LtOrEq,
    "<>": NotEq,
    "!=": NotEq,
    "Like": Like,
    "NotLike": NotLike,
    "IN": Eq,
    "NotIn": NotEq,
    "Null": Eq,
    "NotNull": NotEq,
}

_WRAPPED = {"BETWEEN": Between, "RAW": Raw, "whereRaw": WhereRaw}


def condition_handle(column: str, operator: str, value: Any) -> Sqlizer:
    """Turn a column, an operator and a value into a SQL condition."""
    wrapped = _WRAPPED.get(operator)
    if wrapped is not None:
        if not isinstance(value, wrapped):
            raise TypeError(f"operator {operator} expects a {wrapped.__name__} value")
        return value
    if isinstance(value, Sqlizer):
        try:
            expr_sql, expr_args = value.to_sql()
            error = None
        except Exception as exc:  # the error is reported when the condition is rendered
            expr_sql, expr_args, error = "", [], exc
        return Expression(f"{column} {operator} {expr_sql}", list(expr_args), error)
    return _OPERATORS.get(operator, Eq)(column, value)


def and_where(column: str, operator: str, value: Any) -> Where:
    return Where(Logic.AND, condition_handle(column, operator, value))


def or_where(column: str, operator: str, value: Any) -> Where:
    return Where(Logic.OR, condition_handle(column, operator, value))


def apply_logic(where: Where, sql: str, args: list, parts: list[str], values: list) -> tuple[list[str], list]:
    """Append a rendered condition to the predicate parts with its joining word."""
    if not parts:
        if where.logic is Logic.AND and isinstance(where.sqlizer, Raw):
            return [sql], [*values, *args]
        return [f"({sql})"], [*values, *args]
    joiner = Logic.AND.value if where.logic is Logic.AND else Logic.OR.value
    return [*parts, joiner, f"({sql})"], [*values, *args]