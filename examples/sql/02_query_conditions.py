"""Query builder examples: where/in/null checks/order/limit/offset/returning."""

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

from rex_orm import (
    BaseModel,
    C,
    InvalidQueryError,
    QueryBuilder,
    SQLiteAdapter,
    apply_schema,
    column,
    entity,
    primary_key,
)
from rex_orm.ports.db_api.database import DatabaseAdapter


@entity("accounts")
class Account(BaseModel):
    id: Optional[int] = primary_key()
    email: str = ""
    age: Optional[int] = None
    role: str = "user"
    active: bool = True
    deleted_at: Optional[str] = column(name="deletedAt", default=None)


def seed(db: DatabaseAdapter) -> None:
    rows = [
        ("alice@example.com", 24, "admin", True, None),
        ("bob@example.com", 30, "owner", True, None),
        ("charlie@example.com", 17, "user", True, None),
        ("dana@sample.com", 35, "user", False, None),
        ("erin@example.com", None, "auditor", True, None),
        ("frank@example.com", 40, "user", False, "2026-01-01T00:00:00"),
    ]
    sql, _ = QueryBuilder().insert(
        Account,
        {"email": "", "age": None, "role": "", "active": True, "deletedAt": None},
    ).build(db.dialect)
    # One statement, many parameter rows.
    db.execute_many(sql, rows)


def main() -> None:
    with SQLiteAdapter() as db:
        apply_schema(db, Account)
        seed(db)

        def show(label: str, query: QueryBuilder) -> None:
            rows = query.execute(db).rows
            print(f"{label}:", [Account.from_row(row).email for row in rows])

        # One condition.
        show("Admins", Account.query().where("role", "=", "admin"))

        # where() calls are joined with AND.
        show(
            "Adults at @example.com",
            Account.query().where(C.ge("age", 18)).where("email", "LIKE", "%@example.com"),
        )

        # IN / NOT IN expand to one placeholder per element.
        show("IN role(admin, auditor)", Account.query().where("role", "IN", ["admin", "auditor"]))
        show("NOT IN role(user)", Account.query().where(C.not_in("role", ["user"])))

        # NULL / NOT NULL checks.
        show("age IS NULL", Account.query().where(C.is_null("age")))
        show("deletedAt IS NOT NULL", Account.query().where("deletedAt", "IS NOT NULL"))

        # Sorting + pagination.
        show(
            "Paged (limit=2, offset=1)",
            Account.query()
            .where(C.like("email", "%@example.com"))
            .order_by("age", desc=True)
            .order_by("id")
            .limit(2)
            .offset(1),
        )

        # Projection without a model: plain rows.
        roles = QueryBuilder().select(["role"], distinct=True).from_("accounts").order_by("role")
        print("Distinct roles:", [row["role"] for row in roles.execute(db).rows])

        # UPDATE ... RETURNING on SQLite.
        bumped = (
            QueryBuilder()
            .update(Account, {"active": False})
            .where("role", "=", "auditor")
            .returning("id", "email")
            .execute(db)
        )
        print("Deactivated:", bumped.rows)

        # Unknown columns are rejected before anything reaches the database.
        try:
            Account.query().where("nickname", "=", "x").build()
        except InvalidQueryError as exc:
            print("Rejected:", exc)


if __name__ == "__main__":
    main()
