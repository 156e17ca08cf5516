"""UPDATE statements."""

from __future__ import annotations

from typing import Any

from himorm.case_when import CaseBuilder
from himorm.connection import DEFAULT_CONNECT, Session, get_connect
from himorm.execer import Execer
from himorm.expression import Expression, Sqlizer, expr
from himorm.utils import column_to_string, columns_to_string
from himorm.wheres import WhereMethods, Wheres


def _non_negative(value: int, what: str) -> int:
    if value < 0:
        raise ValueError(f"{what} cannot be negative")
    return value


class UpdateBuilder(WhereMethods):
    """Builds and runs an UPDATE statement on a named connection or a given session."""

    def __init__(self, connect: str = "", *, session: Session | None = None) -> None:
        self.connect = connect or DEFAULT_CONNECT
        self.session = session if session is not None else get_connect(self.connect).session
        self.wheres = Wheres()
        self.table_name = ""
        self.assignments: list[tuple[str, Any]] = []
        self.prefixes: list[Expression] = []
        self.suffixes: list[Expression] = []
        self.from_table = ""
        self.order_bys: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None

    def table(self, table: str) -> UpdateBuilder:
        """Set the table being updated."""
        self.table_name = table
        return self

    def tx(self, tx: Session) -> UpdateBuilder:
        """Run the statement on the given (transaction) session."""
        self.session = tx
        return self

    def prefix(self, sql: str, *args: Any) -> UpdateBuilder:
        self.prefixes.append(expr(sql, *args))
        return self

    def set(self, column: Any, value: Any) -> UpdateBuilder:
        """Assign a value; a CASE expression is bound to the column first."""
        if isinstance(value, CaseBuilder):
            value.set_field(column_to_string(column))
            return self.case_when(value)
        self.assignments.append((column_to_string(column), value))
        return self

    def case_when(self, column: CaseBuilder) -> UpdateBuilder:
        """Assign a CASE expression to the column it is bound to."""
        self.assignments.append((column_to_string(column.field), column))
        return self

    def set_map(self, clauses: dict[str, Any]) -> UpdateBuilder:
        """Assign several columns, in the order of their sorted names."""
        for key in sorted(clauses):
            self.assignments.append((key, clauses[key]))
        return self

    def from_(self, table: str) -> UpdateBuilder:
        self.from_table = table
        return self

    def order_by(self, *order_bys: Any) -> UpdateBuilder:
        self.order_bys.extend(columns_to_string(*order_bys))
        return self

    def limit(self, limit: int) -> UpdateBuilder:
        self._limit = _non_negative(limit, "limit")
        return self

    def offset(self, offset: int) -> UpdateBuilder:
        self._offset = _non_negative(offset, "offset")
        return self

    def suffix(self, sql: str, *args: Any) -> UpdateBuilder:
        self.suffixes.append(expr(sql, *args))
        return self

    @staticmethod
    def _join_parts(parts: list[Expression], args: list) -> str:
        texts = []
        for part in parts:
            sql, part_args = part.to_sql()
            texts.append(sql)
            args.extend(part_args)
        return " ".join(texts)

    def to_sql(self) -> tuple[str, list]:
        if not self.table_name:
            raise ValueError("update statements must specify a table")
        if not self.assignments:
            raise ValueError("update statements must have at least one Set clause")
        args: list = []
        pieces: list[str] = []
        if self.prefixes:
            pieces.append(self._join_parts(self.prefixes, args) + " ")
        pieces.append(f"UPDATE {self.table_name}")

        sets = []
        for column, value in self.assignments:
            if isinstance(value, Sqlizer):
                sql, value_args = value.to_sql()
                sets.append(f"{column} = {sql}")
                args.extend(value_args)
            else:
                sets.append(f"{column} = ?")
                args.append(value)
        pieces.append(" SET " + ", ".join(sets))

        if self.from_table:
            pieces.append(f" FROM {self.from_table}")

        pred, pred_args = self.wheres.pred()
        if pred:
            pieces.append(f" WHERE {pred}")
            args.extend(pred_args)

        if self.order_bys:
            pieces.append(" ORDER BY " + ", ".join(self.order_bys))
        if self._limit is not None:
            pieces.append(f" LIMIT {self._limit}")
        if self._offset is not None:
            pieces.append(f" OFFSET {self._offset}")
        if self.suffixes:
            pieces.append(" " + self._join_parts(self.suffixes, args))
        return "".join(pieces), args

    def exec(self) -> int:
        """Run the statement and return the number of affected rows."""
        return Execer(self, self.session).exec().rows_affected

    def set_wheres(self, wheres: Wheres) -> UpdateBuilder:
        self.wheres.clone_from(wheres)
        return self