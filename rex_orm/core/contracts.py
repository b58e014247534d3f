"""Core port contracts shared by the query builder, models, and adapters."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Optional, Protocol, Sequence

from .metadata import ColumnMetadata
from .types import QueryResult, SqlValue


class DialectPort(Protocol):
    """Dialect behavior required by query compilation and schema DDL."""

    name: str
    paramstyle: str
    supports_returning: bool
    offset_without_limit: str

    def placeholder(self, position: int) -> str: ...

    def adapt_param(self, value: SqlValue) -> Any: ...

    def column_type_sql(self, column: ColumnMetadata) -> str: ...

    def auto_pk_sql(self, pk_name: str) -> str: ...


class DatabasePort(Protocol):
    """Uniform execution and transaction contract every adapter satisfies."""

    dialect: DialectPort

    @property
    def is_connected(self) -> bool: ...

    @property
    def in_transaction(self) -> bool: ...

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult: ...

    def execute_many(
        self, sql: str, param_sets: Sequence[Sequence[Any]]
    ) -> QueryResult: ...

    def begin_transaction(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def transaction(self) -> AbstractContextManager[Any]: ...
