"""Running write statements built by the query builders."""

from __future__ import annotations

from typing import Any, NamedTuple

from himorm.connection import Session
from himorm.expression import Sqlizer
from himorm.utils import to_string


class ExecResult(NamedTuple):
    """What a write statement reports back."""

    insert_id: int
    rows_affected: int


def handle_args(args: list[Any]) -> list[Any]:
    """Render fragment arguments to text, inlining their own arguments at the placeholders."""
    result: list[Any] = []
    for arg in args:
        if isinstance(arg, Sqlizer):
            sql, nested = arg.to_sql()
            for value in nested:
                sql = sql.replace("?", to_string(value), 1)
            result.append(sql)
        else:
            result.append(arg)
    return result


class Execer:
    """Runs the statement of a builder on a session."""

    def __init__(self, sqlizer: Sqlizer, session: Session) -> None:
        self.sqlizer = sqlizer
        self.session = session

    def exec(self) -> ExecResult:
        """Render and run the statement; any rendering or database error is raised."""
        sql, args = self.sqlizer.to_sql()
        insert_id, affected = self.session.execute(sql, args)
        return ExecResult(insert_id, affected)