from __future__ import annotations

import unittest
from typing import Optional

from rex_orm.core.errors import QueryExecutionError, UnregisteredModelError
from rex_orm.core.metadata import ColumnMetadata, MetadataRegistry, SqlType
from rex_orm.core.models import column, entity, primary_key
from rex_orm.core.schema import apply_schema, column_sql, create_table_sql, drop_table_sql
from rex_orm.ports.db_api.dialects import PostgresDialect, SQLiteDialect
from rex_orm.ports.db_api.sqlite import SQLiteAdapter

_REGISTRY = MetadataRegistry()


@entity("accounts", registry=_REGISTRY)
class Account:
    id: Optional[int] = primary_key()
    email: str = column("varchar", length=80, unique=True, default="")
    score: float = 0.0
    avatar: Optional[bytes] = None


@entity("tokens", registry=_REGISTRY)
class Token:
    token: Optional[str] = primary_key(type="varchar(32)", default=None)
    owner_id: int = column(name="ownerId", default=0)


class SchemaSqlTests(unittest.TestCase):
    def test_create_table_sql_sqlite(self) -> None:
        self.assertEqual(
            create_table_sql(Account, SQLiteDialect()),
            "CREATE TABLE accounts (\n"
            "  id INTEGER PRIMARY KEY,\n"
            "  email VARCHAR(80) NOT NULL UNIQUE,\n"
            "  score REAL NOT NULL,\n"
            "  avatar BLOB\n"
            ")",
        )

    def test_create_table_sql_postgres(self) -> None:
        self.assertEqual(
            create_table_sql(Account, PostgresDialect(), if_not_exists=True),
            "CREATE TABLE IF NOT EXISTS accounts (\n"
            "  id SERIAL PRIMARY KEY,\n"
            "  email VARCHAR(80) NOT NULL UNIQUE,\n"
            "  score DOUBLE PRECISION NOT NULL,\n"
            "  avatar BYTEA\n"
            ")",
        )

    def test_non_integer_primary_key(self) -> None:
        self.assertEqual(
            create_table_sql(Token, SQLiteDialect()),
            "CREATE TABLE tokens (\n  token VARCHAR(32) PRIMARY KEY,\n  ownerId INTEGER NOT NULL\n)",
        )

    def test_column_sql_fragments(self) -> None:
        dialect = SQLiteDialect()
        cases = [
            (ColumnMetadata("note"), "note TEXT"),
            (ColumnMetadata("note", nullable=False), "note TEXT NOT NULL"),
            (ColumnMetadata("code", unique=True), "code TEXT UNIQUE"),
            (ColumnMetadata("at", sql_type=SqlType.TIMESTAMP), "at TIMESTAMP"),
        ]
        for meta, expected in cases:
            with self.subTest(column=meta.name, expected=expected):
                self.assertEqual(column_sql(meta, dialect), expected)

    def test_drop_table_sql(self) -> None:
        self.assertEqual(drop_table_sql(Account), "DROP TABLE IF EXISTS accounts")
        self.assertEqual(drop_table_sql(Account, if_exists=False), "DROP TABLE accounts")

    def test_unregistered_model_raises(self) -> None:
        class Loose:
            pass

        with self.assertRaises(UnregisteredModelError):
            create_table_sql(Loose, SQLiteDialect())


class ApplySchemaTests(unittest.TestCase):
    def setUp(self) -> None:
        self.db = SQLiteAdapter()
        self.db.connect()

    def tearDown(self) -> None:
        self.db.disconnect()

    def test_apply_schema_creates_tables(self) -> None:
        statements = apply_schema(self.db, Account, Token)

        self.assertEqual(len(statements), 2)
        self.assertTrue(all(sql.startswith("CREATE TABLE IF NOT EXISTS") for sql in statements))
        tables = self.db.execute(
            "SELECT name FROM sqlite_master WHERE type = ? ORDER BY name", ["table"]
        ).rows
        self.assertEqual([row["name"] for row in tables], ["accounts", "tokens"])
        self.assertFalse(self.db.in_transaction)

    def test_apply_schema_is_repeatable(self) -> None:
        apply_schema(self.db, Account)
        apply_schema(self.db, Account)
        self.assertEqual(self.db.execute("SELECT COUNT(*) AS n FROM accounts").first()["n"], 0)

    def test_unique_constraint_is_enforced(self) -> None:
        apply_schema(self.db, Account)
        self.db.execute("INSERT INTO accounts (email, score) VALUES (?, ?)", ["a@x.io", 1.0])
        with self.assertRaises(QueryExecutionError):
            self.db.execute("INSERT INTO accounts (email, score) VALUES (?, ?)", ["a@x.io", 2.0])

    def test_drop_table(self) -> None:
        apply_schema(self.db, Account)
        self.db.execute(drop_table_sql(Account))
        self.db.execute(drop_table_sql(Account))
        with self.assertRaises(QueryExecutionError):
            self.db.execute("SELECT * FROM accounts")


if __name__ == "__main__":
    unittest.main()
