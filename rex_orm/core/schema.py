"""Schema helpers for deriving and applying table DDL from registry metadata."""

from __future__ import annotations

from typing import Any, List

from .contracts import DatabasePort, DialectPort
from .metadata import ColumnMetadata, SqlType
from .models import metadata_for


def column_sql(column: ColumnMetadata, dialect: DialectPort) -> str:
    """Build one column definition SQL fragment."""

    if column.is_primary_key and column.sql_type is SqlType.INTEGER:
        return dialect.auto_pk_sql(column.name)

    sql_parts = [column.name, dialect.column_type_sql(column)]
    if column.is_primary_key:
        sql_parts.append("PRIMARY KEY")
    elif not column.nullable:
        sql_parts.append("NOT NULL")
    if column.unique and not column.is_primary_key:
        sql_parts.append("UNIQUE")
    return " ".join(sql_parts)


def create_table_sql(
    model: Any,
    dialect: DialectPort,
    *,
    if_not_exists: bool = False,
) -> str:
    """Build `CREATE TABLE` statement for a registered model."""

    meta = metadata_for(model)
    column_definitions = [column_sql(column, dialect) for column in meta.columns]
    prefix = "CREATE TABLE IF NOT EXISTS" if if_not_exists else "CREATE TABLE"
    return (
        f"{prefix} {meta.table_name} (\n  "
        + ",\n  ".join(column_definitions)
        + "\n)"
    )


def drop_table_sql(model: Any, *, if_exists: bool = True) -> str:
    meta = metadata_for(model)
    prefix = "DROP TABLE IF EXISTS" if if_exists else "DROP TABLE"
    return f"{prefix} {meta.table_name}"


def apply_schema(
    db: DatabasePort,
    *models: Any,
    if_not_exists: bool = True,
) -> List[str]:
    """Create tables for models on a connected adapter in one transaction."""

    statements = [
        create_table_sql(model, db.dialect, if_not_exists=if_not_exists) for model in models
    ]
    with db.transaction():
        for sql in statements:
            db.execute(sql)
    return statements
