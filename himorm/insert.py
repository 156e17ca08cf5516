"""INSERT statements, including multi-row inserts and ON DUPLICATE KEY UPDATE."""

from __future__ import annotations

from typing import Any

from himorm.connection import DEFAULT_CONNECT, Session, get_connect
from himorm.execer import Execer
from himorm.expression import Sqlizer
from himorm.utils import column_to_string, columns_to_string, to_strings


def _render_row(row: list[Any]) -> tuple[str, list]:
    """Render one row of values; fragments are inlined, plain values become placeholders."""
    marks: list[str] = []
    args: list = []
    for value in row:
        if isinstance(value, Sqlizer):
            sql, nested = value.to_sql()
            marks.append(sql)
            args.extend(nested)
        else:
            marks.append("?")
            args.append(value)
    return "(" + ",".join(marks) + ")", args


class InsertBuilder:
    """Builds and runs an INSERT statement on a named connection or a given session."""

    def __init__(self, connect: str = "", *, session: Session | None = None) -> None:
        self.connect = connect or DEFAULT_CONNECT
        self.session = session if session is not None else get_connect(self.connect).session
        self.table = ""
        self._columns: list[str] = []
        self._known: set[str] = set()
        self.rows: list[list[Any]] = []
        self.duplicate_updates: list[str] = []
        self.affected = 0

    @property
    def column_names(self) -> list[str]:
        return list(self._columns)

    def _add_columns(self, *names: str) -> None:
        for name in names:
            if name not in self._known:
                self._known.add(name)
                self._columns.append(name)

    def into(self, table: str) -> InsertBuilder:
        """Set the table rows are inserted into."""
        self.table = table
        return self

    def tx(self, tx: Session) -> InsertBuilder:
        """Run the statement on the given (transaction) session."""
        self.session = tx
        return self

    def columns(self, *columns: Any) -> ValuesBuilder:
        """Name the columns; rows of values follow through the returned builder."""
        self._add_columns(*columns_to_string(*columns))
        return ValuesBuilder(self)

    def column(self, column: Any, value: Any) -> InsertBuilder:
        return self.set(column, value)

    def set(self, column: Any, value: Any) -> InsertBuilder:
        """Add a column with its value to the single row being inserted."""
        self._add_columns(column_to_string(column))
        if self.rows:
            self.rows[0].append(value)
        else:
            self.rows.append([value])
        return self

    def on_duplicate_key_update(self, *assignments: Any) -> InsertBuilder:
        """Add assignments such as ``age = VALUES(age)`` used when a key already exists."""
        self.duplicate_updates.extend(to_strings(*assignments))
        return self

    def to_sql(self) -> tuple[str, list]:
        if not self.table:
            raise ValueError("insert statements must specify a table")
        if not self.rows:
            raise ValueError("insert statements must have at least one set of values or select clause")
        pieces = [f"INSERT INTO {self.table} "]
        if self._columns:
            pieces.append("(" + ",".join(self._columns) + ") ")
        rendered: list[str] = []
        args: list = []
        for row in self.rows:
            text, row_args = _render_row(row)
            rendered.append(text)
            args.extend(row_args)
        pieces.append("VALUES " + ",".join(rendered))
        sql = "".join(pieces)
        if self.duplicate_updates:
            sql += " ON DUPLICATE KEY UPDATE " + ",".join(self.duplicate_updates)
        return sql, args

    def _save(self) -> tuple[int, int]:
        result = Execer(self, self.session).exec()
        self.affected = result.rows_affected
        return result.insert_id, result.rows_affected

    def save(self) -> int:
        """Run the statement and return the number of affected rows."""
        return self._save()[1]

    def last_insert_id(self) -> int:
        """Run the statement and return the id of the inserted row."""
        return self._save()[0]


class ValuesBuilder:
    """Adds rows of values to an insert whose columns are named."""

    def __init__(self, insert_builder: InsertBuilder) -> None:
        self.insert_builder = insert_builder

    def values(self, *values: Any) -> ValuesBuilder:
        self.insert_builder.rows.append(list(values))
        return self

    def on_duplicate_key_update(self, *assignments: Any) -> ValuesBuilder:
        self.insert_builder.on_duplicate_key_update(*assignments)
        return self

    def save(self) -> int:
        return self.insert_builder.save()

    def to_sql(self) -> tuple[str, list]:
        return self.insert_builder.to_sql()