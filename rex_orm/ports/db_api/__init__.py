"""DB-API adapters and SQL dialects."""

from .database import DatabaseAdapter
from .dialects import Dialect, NumericDialect, PostgresDialect, SQLiteDialect
from .factory import create_adapter
from .postgres import PostgresAdapter
from .sqlite import SQLiteAdapter

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
