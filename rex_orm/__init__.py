"""rex_orm: a small dataclass ORM with a fluent query builder and DB-API adapters."""

from .config import DatabaseSettings
from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .logging_config import configure_logging
from .ports import (
    DatabaseAdapter,
    Dialect,
    NumericDialect,
    PostgresAdapter,
    PostgresDialect,
    SQLiteAdapter,
    SQLiteDialect,
    create_adapter,
)

__version__ = "0.1.0"

__all__ = [
    *_core_all,
    "DatabaseAdapter",
    "DatabaseSettings",
    "Dialect",
    "NumericDialect",
    "PostgresAdapter",
    "PostgresDialect",
    "SQLiteAdapter",
    "SQLiteDialect",
    "configure_logging",
    "create_adapter",
]
