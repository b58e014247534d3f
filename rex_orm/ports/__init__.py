"""Port implementations for the core contracts."""

from .db_api import (
    DatabaseAdapter,
    Dialect,
    NumericDialect,
    PostgresAdapter,
    PostgresDialect,
    SQLiteAdapter,
    SQLiteDialect,
    create_adapter,
)

__all__ = [
    "DatabaseAdapter",
    "Dialect",
    "NumericDialect",
    "PostgresAdapter",
    "PostgresDialect",
    "SQLiteAdapter",
    "SQLiteDialect",
    "create_adapter",
]
