"""SELECT statements: columns, joins, conditions, grouping, ordering and paging."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from himorm.collection import Fetching
from himorm.connection import DEFAULT_CONNECT, Session, get_connect
from himorm.expression import Sqlizer
from himorm.utils import columns_to_string, to_string
from himorm.wheres import WhereMethods, Wheres, where_raw_handle


class JoinCase(IntEnum):
    JOIN = 1
    LEFT_JOIN = 2
    RIGHT_JOIN = 3
    INNER_JOIN = 4

    @property
    def keyword(self) -> str:
        return _JOIN_KEYWORDS[self]


_JOIN_KEYWORDS = {
    JoinCase.JOIN: "JOIN",
    JoinCase.LEFT_JOIN: "LEFT JOIN",
    JoinCase.RIGHT_JOIN: "RIGHT JOIN",
    JoinCase.INNER_JOIN: "INNER JOIN",
}


@dataclass
class Join:
    """One join clause: its kind, its ``table ON ...`` text and arguments."""

    case: JoinCase
    clause: str
    args: list = field(default_factory=list)

    def to_sql(self) -> tuple[str, list]:
        return f"{self.case.keyword} {self.clause}", list(self.args)


@dataclass
class Having:
    """One HAVING condition, given as text with arguments or as a fragment."""

    pred: Any
    args: list = field(default_factory=list)

    def to_sql(self) -> tuple[str, list]:
        if isinstance(self.pred, Sqlizer):
            return self.pred.to_sql()
        return to_string(self.pred), list(self.args)


@dataclass
class Column:
    """An extra result column, given as text with arguments or as a fragment."""

    column: Any
    args: list = field(default_factory=list)

    def to_sql(self) -> tuple[str, list]:
        if isinstance(self.column, Sqlizer):
            return self.column.to_sql()
        return to_string(self.column), list(self.args)


def _non_negative(value: int, what: str) -> int:
    if value < 0:
        raise ValueError(f"{what} cannot be negative")
    return value


class SelectBuilder(WhereMethods, Fetching):
    """Builds a SELECT statement and reads its results from a session."""

    def __init__(self, connect: str = "", *, session: Session | None = None) -> None:
        self.connect = connect or DEFAULT_CONNECT
        self.session = session if session is not None else get_connect(self.connect).session
        self.count_columns: list[str] = []
        self.sum_columns: list[str] = []
        self.is_raw = False
        self.columns: list[str] = []
        self.table = ""
        self.joins: list[Join] = []
        self.wheres = Wheres()
        self._offset: int | None = None
        self._limit: int | None = None
        self.order_bys: list[str] = []
        self.group_bys: list[str] = []
        self.havings: list[Having] = []
        self.extra_columns: list[Column] = []
        self.is_distinct = False

    def select(self, *columns: Any) -> SelectBuilder:
        self.columns.extend(columns_to_string(*columns))
        return self

    def from_(self, table: str) -> SelectBuilder:
        self.table = table
        return self

    def tx(self, tx: Session) -> SelectBuilder:
        """Run the statement on the given (transaction) session."""
        self.session = tx
        return self

    def clone(self) -> SelectBuilder:
        """Return an independent copy of this builder."""
        other = SelectBuilder.__new__(SelectBuilder)
        other.connect = self.connect
        other.session = self.session
        other.count_columns = list(self.count_columns)
        other.sum_columns = list(self.sum_columns)
        other.is_raw = self.is_raw
        other.columns = list(self.columns)
        other.table = self.table
        other.joins = list(self.joins)
        other.wheres = Wheres()
        other.wheres.clone_from(self.wheres)
        other._offset = self._offset
        other._limit = self._limit
        other.order_bys = list(self.order_bys)
        other.group_bys = list(self.group_bys)
        other.havings = list(self.havings)
        other.extra_columns = list(self.extra_columns)
        other.is_distinct = self.is_distinct
        return other

    def offset(self, offset: int) -> SelectBuilder:
        self._offset = _non_negative(offset, "offset")
        return self

    def limit(self, limit: int) -> SelectBuilder:
        self._limit = _non_negative(limit, "limit")
        return self

    def order_by(self, *order_bys: Any) -> SelectBuilder:
        self.order_bys.extend(columns_to_string(*order_bys))
        return self

    def group_by(self, *group_bys: Any) -> SelectBuilder:
        self.group_bys.extend(columns_to_string(*group_bys))
        return self

    def column(self, col: Any, *args: Any) -> SelectBuilder:
        self.extra_columns.append(Column(col, list(args)))
        return self

    def distinct(self) -> SelectBuilder:
        self.is_distinct = True
        return self

    def having(self, pred: Any, *args: Any) -> SelectBuilder:
        self.havings.append(Having(pred, list(args)))
        return self

    def _join(self, case: JoinCase, table: Any, first: Any, operator: str, second: Any, options: tuple) -> SelectBuilder:
        first_text, second_text = columns_to_string(first)[0], columns_to_string(second)[0]
        clause = f"{to_string(table)} ON {first_text} {operator} {second_text}"
        if options:
            clause += " " + " ".join(columns_to_string(*options))
        self.joins.append(Join(case, clause))
        return self

    def join(self, table: Any, first: Any, operator: str, second: Any, *options: Any) -> SelectBuilder:
        return self._join(JoinCase.JOIN, table, first, operator, second, options)

    def left_join(self, table: Any, first: Any, operator: str, second: Any, *options: Any) -> SelectBuilder:
        return self._join(JoinCase.LEFT_JOIN, table, first, operator, second, options)

    def right_join(self, table: Any, first: Any, operator: str, second: Any, *options: Any) -> SelectBuilder:
        return self._join(JoinCase.RIGHT_JOIN, table, first, operator, second, options)

    def inner_join(self, table: Any, first: Any, operator: str, second: Any, *options: Any) -> SelectBuilder:
        return self._join(JoinCase.INNER_JOIN, table, first, operator, second, options)

    def raw(self, pred: str, *args: Any) -> SelectBuilder:
        """Make the statement a raw one; its text is the raw fragments joined."""
        self.is_raw = True
        self.wheres.and_().raw(pred, args)
        return self

    def or_raw(self, pred: str, *args: Any) -> SelectBuilder:
        self.is_raw = True
        self.wheres.or_().raw(pred, args)
        return self

    def to_sql(self) -> tuple[str, list]:
        if self.is_raw:
            return where_raw_handle(self.wheres)

        is_count = bool(self.count_columns)
        columns = self.columns
        if is_count:
            columns = list(self.count_columns)
        if self.sum_columns:
            columns = list(self.sum_columns)

        parts: list[tuple[str, list]] = [(column, []) for column in columns]
        parts.extend(extra.to_sql() for extra in self.extra_columns)
        if not parts:
            raise ValueError("select statements must have at least one result column")

        args: list = []
        rendered: list[str] = []
        for sql, part_args in parts:
            if sql:
                rendered.append(sql)
                args.extend(part_args)

        pieces = ["SELECT "]
        if self.is_distinct:
            pieces.append("DISTINCT ")
        pieces.append(", ".join(rendered))
        pieces.append(f" FROM {self.table}")

        if self.joins:
            join_texts = []
            for join in self.joins:
                sql, join_args = join.to_sql()
                join_texts.append(sql)
                args.extend(join_args)
            pieces.append(" " + " ".join(join_texts))

        pred, pred_args = self.wheres.pred()
        if pred:
            pieces.append(f" WHERE {pred}")
            args.extend(pred_args)

        if self.group_bys:
            pieces.append(" GROUP BY " + ", ".join(self.group_bys))

        if self.havings:
            having_texts = []
            for having in self.havings:
                sql, having_args = having.to_sql()
                having_texts.append(sql)
                args.extend(having_args)
            pieces.append(" HAVING " + " AND ".join(having_texts))

        if self.order_bys and not is_count:
            pieces.append(" ORDER BY " + ", ".join(self.order_bys))

        if self._limit is not None:
            pieces.append(f" LIMIT {self._limit}")
        if self._offset is not None:
            pieces.append(f" OFFSET {self._offset}")

        return "".join(pieces), args