"""Concrete SQL dialect implementations for DB-API adapters."""

from __future__ import annotations

from typing import Any

from ...core.metadata import ColumnMetadata, SqlType
from ...core.types import SqlValue


class Dialect:
    """Base dialect: `?` placeholders, no RETURNING."""

    name: str = "generic"
    paramstyle: str = "qmark"
    supports_returning: bool = False
    offset_without_limit: str = ""
    type_names: dict[SqlType, str] = {}

    def placeholder(self, position: int) -> str:
        """Return the placeholder for the 1-based parameter `position`."""

        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        if self.paramstyle == "numeric":
            return f"${position}"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def adapt_param(self, value: SqlValue) -> Any:
        """Convert a `SqlValue` into what the driver expects."""

        return value

    def column_type_sql(self, column: ColumnMetadata) -> str:
        """Return the DDL type for a column."""

        if column.sql_type is SqlType.VARCHAR:
            return column.ddl_type
        return self.type_names.get(column.sql_type, column.sql_type.value)

    def auto_pk_sql(self, pk_name: str) -> str:
        """Return SQL fragment for an auto-increment integer primary key."""

        return f"{pk_name} INTEGER PRIMARY KEY"


class SQLiteDialect(Dialect):
    """SQLite dialect (`?` parameters, supports `RETURNING`)."""

    name = "sqlite"
    paramstyle = "qmark"
    supports_returning = True
    offset_without_limit = "LIMIT -1"

    def adapt_param(self, value: SqlValue) -> Any:
        if isinstance(value, bool):
            return int(value)
        return value


class PostgresDialect(Dialect):
    """PostgreSQL dialect for psycopg (`%s` positional parameters)."""

    name = "postgres"
    paramstyle = "format"
    supports_returning = True
    type_names = {
        SqlType.REAL: "DOUBLE PRECISION",
        SqlType.BLOB: "BYTEA",
    }

    def auto_pk_sql(self, pk_name: str) -> str:
        return f"{pk_name} SERIAL PRIMARY KEY"


class NumericDialect(PostgresDialect):
    """PostgreSQL dialect with native `$1, $2, ...` placeholders."""

    name = "postgres-numeric"
    paramstyle = "numeric"
