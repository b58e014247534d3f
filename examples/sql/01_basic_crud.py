"""Basic CRUD example for rex_orm entities on SQLite."""

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
    SQLiteAdapter,
    apply_schema,
    column,
    configure_logging,
    entity,
    primary_key,
)


@entity("users")
class User(BaseModel):
    # Auto primary key: save() sets this after insert.
    id: Optional[int] = primary_key()
    email: str = column("varchar", length=120, unique=True, default="")
    age: Optional[int] = None


def main() -> None:
    # Level comes from REX_ORM_LOG_LEVEL (default INFO).
    configure_logging()

    # 1) Open an in-memory SQLite database; disconnects on exit.
    with SQLiteAdapter(":memory:") as db:
        # 2) Create the table from entity metadata.
        apply_schema(db, User)

        # 3) Insert rows.
        alice = User(email="alice@example.com", age=25).save(db)
        bob = User(email="bob@example.com", age=30).save(db)
        print("Inserted:", alice, bob)

        # 4) Get by PK.
        print("Fetched by PK:", User.get(db, alice.id))

        # 5) Update: save() on an instance that already has a PK.
        bob.age = 31
        bob.save(db)
        print("Updated:", User.get(db, bob.id))

        # 6) List all rows.
        print("All users:", User.all(db))

        # 7) Delete by PK.
        print("Deleted row count:", alice.delete(db))
        print("After delete:", User.all(db))
        print("Statements executed:", db.query_count)


if __name__ == "__main__":
    main()
