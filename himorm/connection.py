"""Named database connections, sessions, transactions and connection pooling."""

from __future__ import annotations

import copy
import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Iterable, Iterator

import pymysql

from himorm.log_level import LogLevel, log_level

if TYPE_CHECKING:
    from himorm.config import DBConfig

DEFAULT_CONNECT = "Default"
DEFAULT_SLOW_THRESHOLD = 3

logger = logging.getLogger("himorm")

_RED, _YELLOW, _GREEN, _RESET = "\033[31m", "\033[33m", "\033[32m", "\033[0m"


class ConnectError(Exception):
    """A connection is missing, misconfigured or used in a way it does not allow."""


@dataclass
class _Pooled:
    raw: Any
    created: float


class _Pool:
    """A small pool of DB-API connections with idle, open and lifetime limits."""

    def __init__(self, connector: Callable[[], Any], max_idle: int, max_open: int, max_lifetime: float) -> None:
        self._connector = connector
        self.max_idle = max_idle
        self.max_open = max_open
        self.max_lifetime = max_lifetime
        self._idle: deque[_Pooled] = deque()
        self._open = 0
        self._cond = threading.Condition()

    def _expired(self, item: _Pooled) -> bool:
        return self.max_lifetime > 0 and time.monotonic() - item.created >= self.max_lifetime

    def _close(self, item: _Pooled) -> None:
        self._open -= 1
        try:
            item.raw.close()
        except Exception:
            logger.debug("closing a pooled connection failed", exc_info=True)

    def acquire(self) -> _Pooled:
        with self._cond:
            while True:
                while self._idle:
                    item = self._idle.pop()
                    if self._expired(item):
                        self._close(item)
                        continue
                    return item
                if self.max_open <= 0 or self._open < self.max_open:
                    self._open += 1
                    break
                self._cond.wait()
        try:
            raw = self._connector()
        except BaseException:
            with self._cond:
                self._open -= 1
                self._cond.notify()
            raise
        return _Pooled(raw, time.monotonic())

    def release(self, item: _Pooled) -> None:
        with self._cond:
            if not self._expired(item) and len(self._idle) < self.max_idle:
                self._idle.append(item)
            else:
                self._close(item)
            self._cond.notify()

    @contextmanager
    def connection(self) -> Iterator[Any]:
        item = self.acquire()
        try:
            yield item.raw
        finally:
            self.release(item)


def _convert(sql: str, args: Iterable[Any], paramstyle: str) -> tuple[str, Any]:
    """Adapt ``?`` placeholders to the driver's parameter style."""
    params = tuple(args)
    if paramstyle == "qmark":
        return sql, params
    if not params:
        return sql, None
    return sql.replace("%", "%%").replace("?", "%s"), params


class Session:
    """Runs statements on pooled connections, or on one connection inside a transaction."""

    def __init__(
        self,
        connector: Callable[[], Any],
        *,
        paramstyle: str = "format",
        max_idle: int = 2,
        max_open: int = 0,
        max_lifetime: float = 0,
        log_level: LogLevel = LogLevel.SILENT,
        slow_threshold: float = DEFAULT_SLOW_THRESHOLD,
        colorful: bool = False,
    ) -> None:
        self._pool = _Pool(connector, max_idle, max_open, max_lifetime)
        self.paramstyle = paramstyle
        self.log_level = log_level
        self.slow_threshold = slow_threshold
        self.colorful = colorful
        self._lease: _Pooled | None = None
        self._savepoints = 0

    @property
    def in_transaction(self) -> bool:
        return self._lease is not None

    @contextmanager
    def _connection(self) -> Iterator[Any]:
        if self._lease is not None:
            yield self._lease.raw
        else:
            with self._pool.connection() as raw:
                yield raw

    def _paint(self, text: str, colour: str) -> str:
        return f"{colour}{text}{_RESET}" if self.colorful else text

    def _trace(self, sql: str, args: list, started: float, rows: int, error: Exception | None) -> None:
        if self.log_level == LogLevel.SILENT:
            return
        elapsed = time.perf_counter() - started
        text = f"[{elapsed * 1000:.3f}ms] [rows:{rows}] {sql} {args}"
        if error is not None and self.log_level >= LogLevel.ERROR:
            logger.error("%s %s", self._paint(str(error), _RED), text)
        elif self.slow_threshold > 0 and elapsed > self.slow_threshold and self.log_level >= LogLevel.WARN:
            logger.warning("%s %s", self._paint(f"SLOW SQL >= {self.slow_threshold}s", _YELLOW), text)
        elif error is None and self.log_level >= LogLevel.INFO:
            logger.info("%s", self._paint(text, _GREEN))

    def _run(self, sql: str, args: Iterable[Any], fetch: bool) -> Any:
        args = list(args)
        statement, params = _convert(sql, args, self.paramstyle)
        started = time.perf_counter()
        with self._connection() as raw:
            cursor = raw.cursor()
            try:
                cursor.execute(statement, params)
                if fetch:
                    names = [column[0] for column in cursor.description or ()]
                    result: Any = [dict(zip(names, row)) for row in cursor.fetchall()]
                    rows = len(result)
                else:
                    result = (cursor.lastrowid or 0, cursor.rowcount)
                    rows = cursor.rowcount
                    if self._lease is None:
                        raw.commit()
            except Exception as exc:
                self._trace(sql, args, started, 0, exc)
                raise
            finally:
                cursor.close()
        self._trace(sql, args, started, rows, None)
        return result

    def query(self, sql: str, args: Iterable[Any] = ()) -> list[dict[str, Any]]:
        """Run a query and return its rows as dictionaries."""
        return self._run(sql, args, fetch=True)

    def execute(self, sql: str, args: Iterable[Any] = ()) -> tuple[int, int]:
        """Run a statement and return the last insert id and the affected row count."""
        return self._run(sql, args, fetch=False)

    def begin(self) -> Session:
        """Start a transaction on a dedicated connection and return its session."""
        if self._lease is not None:
            raise ConnectError("transaction already started")
        lease = self._pool.acquire()
        try:
            start = getattr(lease.raw, "begin", None)
            if callable(start):
                start()
        except BaseException:
            self._pool.release(lease)
            raise
        bound = copy.copy(self)
        bound._lease = lease
        bound._savepoints = 0
        return bound

    def _finish(self, action: str) -> None:
        if self._lease is None:
            raise ConnectError("invalid transaction")
        lease, self._lease = self._lease, None
        try:
            getattr(lease.raw, action)()
        finally:
            self._pool.release(lease)

    def commit(self) -> None:
        self._finish("commit")

    def rollback(self) -> None:
        self._finish("rollback")

    def transaction(self, fn: Callable[[Session], Any]) -> Any:
        """Run fn in a transaction, committing on success and rolling back on any exception.

        Inside a running transaction a savepoint is used instead.
        """
        if self._lease is not None:
            self._savepoints += 1
            name = f"sp{self._savepoints}"
            self.execute(f"SAVEPOINT {name}")
            try:
                return fn(self)
            except BaseException:
                self.execute(f"ROLLBACK TO SAVEPOINT {name}")
                raise
        tx = self.begin()
        try:
            result = fn(tx)
        except BaseException:
            tx.rollback()
            raise
        tx.commit()
        return result

    def __enter__(self) -> Session:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._lease is None:
            return
        if exc_type is None:
            self.commit()
        else:
            self.rollback()


@dataclass(frozen=True)
class Connect:
    """A registered connection: its settings and its session."""

    dbc: DBConfig
    session: Session


_connects: dict[str, Connect] = {}
_lock = threading.Lock()


def _mysql_connect(dbc: DBConfig) -> Any:
    options: dict[str, Any] = {
        "host": dbc.host or "localhost",
        "user": dbc.username,
        "password": dbc.password,
        "database": dbc.database or None,
        "autocommit": True,
    }
    if dbc.port:
        options["port"] = int(dbc.port)
    if dbc.charset:
        options["charset"] = dbc.charset
    return pymysql.connect(**options)


def init(dbc: DBConfig) -> Session:
    """Open and register a named connection; an already registered name is returned as is."""
    if not dbc.connect:
        raise ConnectError("connect cannot be empty")
    with _lock:
        existing = _connects.get(dbc.connect)
        if existing is not None:
            return existing.session
        level = log_level(dbc.log_mode)
        slow = dbc.slow_threshold if dbc.slow_threshold > 0 else DEFAULT_SLOW_THRESHOLD
        session = Session(
            partial(_mysql_connect, dbc),
            paramstyle="format",
            max_idle=dbc.max_idle,
            max_open=dbc.max_open,
            max_lifetime=dbc.max_lifetime,
            log_level=level,
            slow_threshold=slow,
            colorful=dbc.colorful,
        )
        with session._pool.connection():
            pass
        _connects[dbc.connect] = Connect(dbc, session)
    return session


def get_connect(connection: str) -> Connect:
    """Return the registered connection of that name."""
    with _lock:
        found = _connects.get(connection)
    if found is None:
        raise ConnectError("connect nonexistent")
    return found


def gorm(connect: str) -> Session:
    """Return the session of a registered connection."""
    return get_connect(connect).session


def default() -> Session:
    return gorm(DEFAULT_CONNECT)