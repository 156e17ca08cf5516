"""Reading results of a select: rows, single rows, pages, counts and sums."""

from __future__ import annotations

import math
from typing import Any

from himorm.connection import Session
from himorm.paginate import Paginate, PaginateSum, new_paginate, with_items
from himorm.utils import to_string, to_strings
from himorm.wheres import Wheres

COUNT_ALIAS = "count_"
SUM_ALIAS = "sum_"


def _sum_text(value: Any) -> str:
    return "" if value is None else to_string(value)


def _fill_items(paginate: Paginate, rows: list[dict[str, Any]]) -> None:
    if isinstance(paginate.items, list):
        paginate.items[:] = rows
    else:
        paginate.items = rows


class Fetching:
    """Result methods for a select builder.

    The builder provides ``session``, ``table``, ``columns``, ``wheres``,
    ``group_bys`` and ``sum_columns`` together with ``to_sql()``, ``clone()``,
    ``limit(n)`` and ``offset(n)``.
    """

    session: Session
    table: str
    columns: list[str]
    wheres: Wheres
    group_bys: list[str]
    sum_columns: list[str]

    def _add_sum_columns(self, *columns: str):
        """Select the sums of the columns, aliased ``sum_`` alone or ``sum_<i>`` for several."""
        for index, column in enumerate(columns):
            if index == 0 and len(columns) == 1:
                self.sum_columns.append(f"SUM({column}) AS `{SUM_ALIAS}`")
            else:
                self.sum_columns.append(f"SUM({column}) AS `{SUM_ALIAS}{index}`")
        return self

    def _count_sql(self) -> tuple[str, list]:
        sql, args = self.clone().to_sql()
        return f"SELECT COUNT(*) AS `{COUNT_ALIAS}` FROM ({sql}) count_temp LIMIT 1", args

    def first(self) -> dict[str, Any] | None:
        """Return the first row, or None when nothing matches."""
        sql, args = self.limit(1).to_sql()
        rows = self.session.query(sql, args)
        return rows[0] if rows else None

    def get(self) -> list[dict[str, Any]]:
        """Return all matching rows."""
        sql, args = self.to_sql()
        return self.session.query(sql, args)

    def paginate(self, page: int, per_page: int, dest: Any = None) -> Paginate:
        """Fetch one page of rows.

        ``dest`` may be a Paginate to fill, a PaginateSum whose sums are computed
        as well, or a container (such as a list) that receives the rows.
        """
        paginate_sum: PaginateSum | None = None
        if isinstance(dest, PaginateSum):
            paginate_sum = dest
            inner = dest.dest
            paginate = inner if isinstance(inner, Paginate) else new_paginate(with_items(inner))
        elif isinstance(dest, Paginate):
            paginate = dest
        else:
            paginate = new_paginate(with_items(dest))

        paginate.per_page = per_page
        paginate.current_page = page

        if paginate_sum is not None:
            fields = to_strings(*paginate_sum.fields)
            sum_sql, args = self.clone()._add_sum_columns(*fields).limit(1).to_sql()
            rows = self.session.query(sum_sql, args)
            row = rows[0] if rows else {}
            if len(fields) > 1:
                paginate_sum.sum = row
            else:
                paginate_sum.sum = _sum_text(row.get(SUM_ALIAS))

        count_sql, args = self.clone()._count_sql()
        rows = self.session.query(count_sql, args)
        total = int(rows[0].get(COUNT_ALIAS) or 0) if rows else 0
        if total == 0:
            return paginate

        offset = (page - 1) * per_page if page > 0 else 0
        sql, args = self.offset(offset).limit(per_page).to_sql()
        _fill_items(paginate, self.session.query(sql, args))

        paginate.total = total
        paginate.last_page = math.ceil(total / per_page) if per_page > 0 else 0
        return paginate

    def _count_expression(self) -> str:
        if len(self.columns) == 1 and self.columns[0] != "*":
            column = self.columns[0]
            if "count(" in column.lower():
                return column
            return f"COUNT({column})"
        return "COUNT(*)"

    def count(self) -> int:
        """Count the matching rows, or the groups when grouped."""
        pred, args = self.wheres.pred() if len(self.wheres) else ("", [])
        where = f" WHERE {pred}" if pred else ""
        if self.group_bys:
            groups = ",".join(self.group_bys)
            sql = f"SELECT COUNT(*) FROM (SELECT 1 FROM {self.table}{where} GROUP BY {groups}) count_temp"
        else:
            sql = f"SELECT {self._count_expression()} FROM {self.table}{where}"
        rows = self.session.query(sql, args)
        if not rows:
            return 0
        value = next(iter(rows[0].values()), 0)
        return int(value or 0)

    def sum(self, column: str, *more: str) -> Any:
        """Sum one column, giving its text, or several, giving a row of ``sum_<i>`` values."""
        self._add_sum_columns(column, *more)
        sql, args = self.limit(1).to_sql()
        rows = self.session.query(sql, args)
        row = rows[0] if rows else {}
        if len(self.sum_columns) > 1:
            return row
        return _sum_text(row.get(SUM_ALIAS))