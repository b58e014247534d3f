"""Exception taxonomy shared by the registry, query builder, and adapters."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class RexOrmError(Exception):
    """Base class for every error raised by rex_orm."""


class UnregisteredModelError(RexOrmError, LookupError):
    """Raised when metadata is requested for a type that was never declared."""


class DuplicateColumnError(RexOrmError):
    """Raised when a model declares the same column (or a second PK) twice."""


class InvalidQueryError(RexOrmError, ValueError):
    """Raised when a query builder call or compilation is malformed."""


class IncompleteQueryError(InvalidQueryError):
    """Raised when `build()` is called before the query has its required parts."""


class ModelValidationError(RexOrmError, ValueError):
    """Raised when a model instance fails `validate()`."""


class AdapterError(RexOrmError):
    """Base class for errors reported at the database adapter boundary."""


class NotConnectedError(AdapterError):
    """Raised when an adapter operation requires an open connection."""


class TransactionStateError(AdapterError):
    """Raised on `begin/commit/rollback` calls that do not fit the current state."""


class DatabaseConnectionError(AdapterError, ConnectionError):
    """Raised when the backend cannot be reached or rejects the credentials."""


class QueryExecutionError(AdapterError):
    """Raised when the backend rejects a statement.

    The message is the backend's own error text. The failing SQL and its
    parameters are kept on the exception for inspection.
    """

    def __init__(
        self,
        message: str,
        *,
        sql: Optional[str] = None,
        params: Optional[Sequence[Any]] = None,
    ) -> None:
        super().__init__(message)
        self.sql = sql
        self.params = list(params) if params is not None else None
