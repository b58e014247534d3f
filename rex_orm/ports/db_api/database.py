"""DB-API adapter base implementing the uniform database contract."""

from __future__ import annotations

import contextlib
from abc import ABC, abstractmethod
from typing import Any, Iterator, Mapping, Optional, Sequence

import structlog

from ...core.errors import (
    DatabaseConnectionError,
    NotConnectedError,
    QueryExecutionError,
    TransactionStateError,
)
from ...core.types import QueryResult, Row, coerce_values
from .dialects import Dialect

logger = structlog.get_logger(__name__)


def _close_cursor(cur: Any) -> None:
    close = getattr(cur, "close", None)
    if callable(close):
        close()


class DatabaseAdapter(ABC):
    """Owns one DB-API connection and its transaction state.

    States: disconnected -> connected -> connected + transaction -> connected.
    Subclasses only open the driver connection (in autocommit mode) and name
    the driver's exception types; statements, row mapping, and transaction
    bookkeeping live here.

    `connect()` on a connected adapter is a no-op. `disconnect()` rolls back
    an active transaction before releasing the connection. Nothing is retried.
    An adapter is not safe for overlapping use from several threads.
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect
        self.conn: Any | None = None
        self._in_transaction = False
        self.query_count = 0

    @abstractmethod
    def _open(self) -> Any:
        """Open and return a DB-API connection in autocommit mode."""

    @abstractmethod
    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        """Return the driver exception types to translate at the boundary."""

    def _describe(self) -> dict[str, Any]:
        """Connection details safe to log."""

        return {"dialect": self.dialect.name}

    @property
    def is_connected(self) -> bool:
        return self.conn is not None

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def _require_open_connection(self) -> Any:
        if self.conn is None:
            raise NotConnectedError("Adapter is not connected; call connect() first.")
        return self.conn

    def connect(self) -> None:
        """Open the connection. No-op when already connected."""

        if self.conn is not None:
            return
        try:
            self.conn = self._open()
        except self._driver_errors() as exc:
            logger.error("db.connect.failed", exc_info=True, **self._describe())
            raise DatabaseConnectionError(str(exc)) from exc
        self._in_transaction = False
        logger.info("db.connected", **self._describe())

    def disconnect(self) -> None:
        """Release the connection, rolling back any active transaction first."""

        conn = self.conn
        if conn is None:
            return
        rolled_back = self._in_transaction
        try:
            if self._in_transaction:
                self._run_control("ROLLBACK")
        finally:
            self._in_transaction = False
            self.conn = None
            close = getattr(conn, "close", None)
            if callable(close):
                close()
            logger.info("db.disconnected", rolled_back=rolled_back, **self._describe())

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        """Execute one statement with positional parameters."""

        conn = self._require_open_connection()
        bound = self._bind(params)
        logger.debug("db.execute", sql=sql, param_count=len(bound))
        try:
            cur = conn.cursor()
            try:
                if bound:
                    cur.execute(sql, bound)
                else:
                    cur.execute(sql)
                result = self._result(cur)
            finally:
                _close_cursor(cur)
        except self._driver_errors() as exc:
            logger.error("db.execute.failed", sql=sql, error=str(exc))
            raise QueryExecutionError(str(exc), sql=sql, params=bound) from exc
        self.query_count += 1
        return result

    def execute_many(self, sql: str, param_sets: Sequence[Sequence[Any]]) -> QueryResult:
        """Execute one statement once per parameter row."""

        conn = self._require_open_connection()
        bound_sets = [self._bind(params) for params in param_sets]
        logger.debug("db.execute_many", sql=sql, batches=len(bound_sets))
        try:
            cur = conn.cursor()
            try:
                cur.executemany(sql, bound_sets)
                row_count = max(getattr(cur, "rowcount", 0), 0)
            finally:
                _close_cursor(cur)
        except self._driver_errors() as exc:
            logger.error("db.execute.failed", sql=sql, error=str(exc))
            raise QueryExecutionError(str(exc), sql=sql) from exc
        self.query_count += len(bound_sets)
        return QueryResult(rows=[], row_count=row_count)

    def begin_transaction(self) -> None:
        self._require_open_connection()
        if self._in_transaction:
            raise TransactionStateError("A transaction is already active.")
        self._run_control("BEGIN")
        self._in_transaction = True
        logger.debug("db.transaction.begin")

    def commit(self) -> None:
        self._require_open_connection()
        if not self._in_transaction:
            raise TransactionStateError("No active transaction to commit.")
        self._run_control("COMMIT")
        self._in_transaction = False
        logger.debug("db.transaction.commit")

    def rollback(self) -> None:
        self._require_open_connection()
        if not self._in_transaction:
            raise TransactionStateError("No active transaction to roll back.")
        try:
            self._run_control("ROLLBACK")
        finally:
            self._in_transaction = False
        logger.debug("db.transaction.rollback")

    @contextlib.contextmanager
    def transaction(self) -> Iterator[DatabaseAdapter]:
        """Provide commit/rollback transaction scope."""

        self.begin_transaction()
        try:
            yield self
        except BaseException:
            if self._in_transaction and self.conn is not None:
                self.rollback()
            raise
        self.commit()

    def _run_control(self, statement: str) -> None:
        conn = self._require_open_connection()
        try:
            cur = conn.cursor()
            try:
                cur.execute(statement)
            finally:
                _close_cursor(cur)
        except self._driver_errors() as exc:
            logger.error("db.transaction.failed", statement=statement, error=str(exc))
            raise QueryExecutionError(str(exc), sql=statement) from exc

    def _bind(self, params: Optional[Sequence[Any]]) -> list[Any]:
        if params is None:
            return []
        if isinstance(params, (str, bytes, Mapping)):
            raise TypeError("params must be a positional sequence of values.")
        return [self.dialect.adapt_param(value) for value in coerce_values(params)]

    def _result(self, cursor: Any) -> QueryResult:
        last_row_id = getattr(cursor, "lastrowid", None)
        if not getattr(cursor, "description", None):
            row_count = getattr(cursor, "rowcount", -1)
            return QueryResult(
                rows=[],
                row_count=row_count if row_count and row_count > 0 else 0,
                last_row_id=last_row_id or None,
            )
        rows = [self._row_to_mapping(cursor, row) for row in cursor.fetchall()]
        return QueryResult(rows=rows, row_count=len(rows))

    def _row_to_mapping(self, cursor: Any, row: Any) -> Row:
        """Normalize row object to a dict.

        Supports mapping rows directly and tuple/list rows via
        `cursor.description`.
        """

        if isinstance(row, Mapping):
            return dict(row)

        if isinstance(row, (tuple, list)):
            cols = [d[0] for d in cursor.description]
            return dict(zip(cols, row))

        if hasattr(row, "keys"):
            return {key: row[key] for key in row.keys()}

        raise TypeError(f"Unsupported row type: {type(row)}")

    def __enter__(self) -> DatabaseAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.disconnect()
