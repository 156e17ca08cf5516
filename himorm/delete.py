"""DELETE statements."""

from __future__ import annotations

from himorm.connection import DEFAULT_CONNECT, Session, get_connect
from himorm.execer import Execer
from himorm.wheres import WhereMethods, Wheres


class DeleteBuilder(WhereMethods):
    """Builds and runs a DELETE statement on a named connection or a given session."""

    def __init__(self, connect: str = "", *, session: Session | None = None) -> None:
        self.connect = connect or DEFAULT_CONNECT
        self.session = session if session is not None else get_connect(self.connect).session
        self.wheres = Wheres()
        self.table = ""

    def delete(self, table: str) -> DeleteBuilder:
        """Set the table rows are deleted from."""
        self.table = table
        return self

    def tx(self, tx: Session) -> DeleteBuilder:
        """Run the statement on the given (transaction) session."""
        self.session = tx
        return self

    def to_sql(self) -> tuple[str, list]:
        if not self.table:
            raise ValueError("delete statements must specify a From table")
        pred, args = self.wheres.pred()
        sql = f"DELETE FROM {self.table}"
        if pred:
            sql += f" WHERE {pred}"
        return sql, args

    def exec(self) -> int:
        """Run the statement and return the number of deleted rows."""
        return Execer(self, self.session).exec().rows_affected

    def set_wheres(self, wheres: Wheres) -> DeleteBuilder:
        self.wheres.clone_from(wheres)
        return self