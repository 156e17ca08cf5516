"""Entry points for statements on a named connection, in or out of a transaction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from himorm.connection import Session, get_connect
from himorm.delete import DeleteBuilder
from himorm.execer import Execer, ExecResult
from himorm.insert import InsertBuilder
from himorm.select import SelectBuilder
from himorm.update import UpdateBuilder

if TYPE_CHECKING:
    from himorm.config import DBConfig


class DB:
    """A handle on a named connection that starts queries, inserts, updates and deletes.

    After ``begin`` or ``tx`` the statements it starts run on the transaction session.
    The builder of the most recent statement is kept in ``builder``.
    """

    def __init__(self, connect: str, dbc: DBConfig | None, session: Session, *, tx_session: Session | None = None) -> None:
        self.connect = connect
        self.dbc = dbc
        self.session = session
        self.tx_session = tx_session
        self.builder: Any = None

    @property
    def in_transaction(self) -> bool:
        return self.tx_session is not None

    @property
    def active_session(self) -> Session:
        """The transaction session when one is started, the connection's session otherwise."""
        return self.tx_session if self.tx_session is not None else self.session

    def rest(self) -> DB:
        """Forget the statement being built."""
        self.builder = None
        return self

    def begin(self, *tx: Session) -> Transaction:
        """Start a transaction, or join the given transaction session."""
        session = tx[0] if tx else self.session.begin()
        self.tx_session = session
        return Transaction(self, session)

    def tx(self, tx: Session) -> Transaction:
        """Join an already started transaction session."""
        return self.begin(tx)

    def set(self, column: Any, value: Any) -> DB:
        """Assign a value on the update or insert being built."""
        if isinstance(self.builder, UpdateBuilder):
            self.builder.set(column, value)
        elif isinstance(self.builder, InsertBuilder):
            self.builder.column(column, value)
        return self

    def _insert_builder(self) -> InsertBuilder:
        if not isinstance(self.builder, InsertBuilder):
            raise TypeError("no insert statement is being built")
        return self.builder

    def last_insert_id(self) -> int:
        """Run the insert being built and return the id of the inserted row."""
        return self._insert_builder().last_insert_id()

    def save(self) -> int:
        """Run the insert being built and return the number of affected rows."""
        return self._insert_builder().save()

    def exec(self) -> int:
        """Run the update or delete being built and return the number of affected rows."""
        if isinstance(self.builder, (UpdateBuilder, DeleteBuilder)):
            return self.builder.exec()
        raise TypeError("no update or delete statement is being built")

    def raw(self, pred: str, *args: Any) -> Raw:
        """Start a raw statement."""
        return Raw(self, self.active_session, pred, list(args))

    def query(self) -> Select:
        get_connect(self.connect)
        return Select(self, self.active_session)

    def insert(self) -> InsertInto:
        get_connect(self.connect)
        return InsertInto(self, self.active_session)

    def update(self) -> UpdateTable:
        get_connect(self.connect)
        return UpdateTable(self, self.active_session)

    def delete(self) -> DeleteFrom:
        get_connect(self.connect)
        return DeleteFrom(self, self.active_session)


def db_connect(connection: str) -> DB:
    """Return a handle on the registered connection of that name."""
    found = get_connect(connection)
    return DB(connection, found.dbc, found.session)


class RawBuilder:
    """A raw statement given as text and arguments."""

    def __init__(self, db: DB, pred: str, args: list[Any], table: str = "", *, session: Session | None = None) -> None:
        self.db = db
        self.pred = pred
        self.args = list(args)
        self.table = table
        self.session = session

    def to_sql(self) -> tuple[str, list]:
        return self.pred, list(self.args)

    def get(self) -> list[dict[str, Any]]:
        """Run the statement as a query and return its rows."""
        return self.db.query().raw(self.pred, *self.args).get()

    def exec(self) -> ExecResult:
        """Run the statement and return the last insert id and the affected row count."""
        session = self.session if self.session is not None else self.db.active_session
        return Execer(self, session).exec()


class Raw:
    """A raw statement bound to a session."""

    def __init__(self, db: DB, session: Session, pred: str, args: list[Any]) -> None:
        self.db = db
        self.session = session
        self.pred = pred
        self.args = list(args)

    def exec(self) -> ExecResult:
        """Run the statement and return the last insert id and the affected row count."""
        return RawBuilder(self.db, self.pred, self.args, session=self.session).exec()

    def get(self) -> list[dict[str, Any]]:
        """Run the statement as a query and return its rows."""
        return SelectBuilder(self.db.connect, session=self.session).raw(self.pred, *self.args).get()


class Select:
    """The start of a query: optional DISTINCT, then the columns or a raw statement."""

    def __init__(self, db: DB, session: Session) -> None:
        self.db = db
        self.session = session
        self._builder: SelectBuilder | None = None

    def _select_builder(self) -> SelectBuilder:
        if self._builder is None:
            self._builder = SelectBuilder(self.db.connect, session=self.session)
            self.db.builder = self._builder
        return self._builder

    def distinct(self) -> Select:
        self._select_builder().distinct()
        return self

    def select(self, *columns: Any) -> SelectFrom:
        """Name the result columns; none means ``*``."""
        builder = self._select_builder().select(*(columns or ("*",)))
        return SelectFrom(self.db, builder)

    def raw(self, pred: str, *args: Any) -> SelectRaw:
        builder = self._select_builder().raw(pred, *args)
        return SelectRaw(self.db, builder)


class SelectRaw:
    """A raw query ready to run."""

    def __init__(self, db: DB, builder: SelectBuilder) -> None:
        self.db = db
        self.builder = builder

    def get(self) -> list[dict[str, Any]]:
        return self.builder.get()


class SelectFrom:
    """A query whose columns are named and whose table comes next."""

    def __init__(self, db: DB, builder: SelectBuilder) -> None:
        self.db = db
        self.builder = builder

    def from_(self, table: str) -> SelectBuilder:
        self.db.builder = self.builder.from_(table)
        return self.builder


class InsertInto:
    """The start of an insert; the table comes next."""

    def __init__(self, db: DB, session: Session) -> None:
        self.db = db
        self.session = session

    def into(self, table: str) -> InsertBuilder:
        builder = InsertBuilder(self.db.connect, session=self.session).into(table)
        self.db.builder = builder
        return builder


class UpdateTable:
    """The start of an update; the table comes next."""

    def __init__(self, db: DB, session: Session) -> None:
        self.db = db
        self.session = session

    def table(self, table: str) -> UpdateBuilder:
        builder = UpdateBuilder(self.db.connect, session=self.session).table(table)
        self.db.builder = builder
        return builder


class DeleteFrom:
    """The start of a delete; the table comes next."""

    def __init__(self, db: DB, session: Session) -> None:
        self.db = db
        self.session = session

    def from_(self, table: str) -> DeleteBuilder:
        builder = DeleteBuilder(self.db.connect, session=self.session).delete(table)
        self.db.builder = builder
        return builder


class Transaction:
    """Statements that run on one transaction session.

    The session is finished with ``session.commit()`` or ``session.rollback()``.
    """

    def __init__(self, db: DB, session: Session) -> None:
        self.db = db
        self.session = session

    def insert(self) -> InsertInto:
        return InsertInto(self.db, self.session)

    def update(self) -> UpdateTable:
        return UpdateTable(self.db, self.session)

    def delete(self) -> DeleteFrom:
        return DeleteFrom(self.db, self.session)

    def raw(self, pred: str, *args: Any) -> Raw:
        return Raw(self.db, self.session, pred, list(args))


class TX:
    """Runs a function inside a transaction of the given session."""

    def __init__(self, tx: Session) -> None:
        self.tx = tx

    def transaction(self, fn: Callable[[Session], Any]) -> Any:
        """Commit when fn returns, roll back and re-raise when it raises."""
        return self.tx.transaction(fn)