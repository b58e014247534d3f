"""Show SQL generation differences across dialects."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "rex_orm").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rex_orm import C, QueryBuilder, column, create_table_sql, entity, primary_key
from rex_orm.ports.db_api.dialects import (
    Dialect,
    NumericDialect,
    PostgresDialect,
    SQLiteDialect,
)


@entity("preview_users")
class PreviewUser:
    id: Optional[int] = primary_key()
    email: str = column("varchar", length=80, unique=True, default="")
    age: Optional[int] = None
    score: float = 0.0


def show_for_dialect(dialect: Dialect) -> None:
    print(f"\n===== {dialect.name} ({dialect.paramstyle}) =====")

    query = (
        QueryBuilder()
        .select(["id", "email"])
        .from_(PreviewUser)
        .where(C.like("email", "%@example.com"))
        .where("age", "IN", [18, 21, 30])
        .order_by("age", desc=True)
        .order_by("id")
        .offset(10)
    )
    sql, params = query.build(dialect)
    print("SQL:", sql)
    print("Params:", params)
    print("DDL:", create_table_sql(PreviewUser, dialect))


def main() -> None:
    for dialect in (Dialect(), SQLiteDialect(), PostgresDialect(), NumericDialect()):
        show_for_dialect(dialect)


if __name__ == "__main__":
    main()
