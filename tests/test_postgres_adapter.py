from __future__ import annotations

import importlib
import os
import unittest
from typing import Any, Optional

from rex_orm import BaseModel, PostgresAdapter, QueryBuilder, apply_schema, column, entity, primary_key
from rex_orm.core.errors import DatabaseConnectionError, QueryExecutionError, TransactionStateError
from rex_orm.core.metadata import MetadataRegistry


def _load_psycopg() -> Any:
    try:
        return importlib.import_module("psycopg")
    except (ModuleNotFoundError, ImportError):
        return None


HAS_POSTGRES_DRIVER = _load_psycopg() is not None

_REGISTRY = MetadataRegistry()


@entity("rex_pg_users", registry=_REGISTRY)
class PgUser(BaseModel):
    id: Optional[int] = primary_key()
    email: str = column("varchar", length=120, unique=True, default="")
    age: Optional[int] = None
    active: bool = True


def _connection_params() -> dict[str, Any]:
    return {
        "host": os.getenv("REX_ORM_PG_HOST", os.getenv("PGHOST", "localhost")),
        "port": int(os.getenv("REX_ORM_PG_PORT", os.getenv("PGPORT", "5432"))),
        "user": os.getenv("REX_ORM_PG_USER", os.getenv("PGUSER", "postgres")),
        "password": os.getenv(
            "REX_ORM_PG_PASSWORD",
            os.getenv("PGPASSWORD", os.getenv("POSTGRES_PASSWORD", "password")),
        ),
        "database": os.getenv("REX_ORM_PG_DATABASE", os.getenv("PGDATABASE", "postgres")),
        "connect_timeout": 3,
    }


@unittest.skipUnless(HAS_POSTGRES_DRIVER, "psycopg is not installed")
class PostgresAdapterParamsTests(unittest.TestCase):
    def test_connect_params(self) -> None:
        adapter = PostgresAdapter(
            host="db.internal",
            port=6543,
            user="app",
            password="secret",
            database="main",
            tls=True,
            connect_timeout=4,
        )
        self.assertEqual(
            adapter._connect_params(),  # noqa: SLF001
            {
                "host": "db.internal",
                "port": 6543,
                "user": "app",
                "password": "secret",
                "dbname": "main",
                "sslmode": "require",
                "connect_timeout": 4,
            },
        )
        self.assertFalse(adapter.is_connected)
        self.assertEqual(adapter.dialect.name, "postgres")

    def test_unset_options_are_omitted(self) -> None:
        adapter = PostgresAdapter()
        self.assertEqual(
            adapter._connect_params(),  # noqa: SLF001
            {"host": "localhost", "port": 5432},
        )

    def test_unreachable_server_raises_connection_error(self) -> None:
        adapter = PostgresAdapter(host="127.0.0.1", port=1, connect_timeout=1)
        with self.assertRaises(DatabaseConnectionError):
            adapter.connect()
        self.assertFalse(adapter.is_connected)


@unittest.skipUnless(HAS_POSTGRES_DRIVER, "psycopg is not installed")
class PostgresAdapterTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.db = PostgresAdapter(**_connection_params())
        try:
            cls.db.connect()
        except DatabaseConnectionError as exc:
            raise unittest.SkipTest(
                f"PostgreSQL is not reachable with configured credentials: {exc}"
            ) from exc

    @classmethod
    def tearDownClass(cls) -> None:
        cls.db.disconnect()

    def setUp(self) -> None:
        self.db.execute("DROP TABLE IF EXISTS rex_pg_users")
        apply_schema(self.db, PgUser)

    def test_save_get_update_delete(self) -> None:
        user = PgUser(email="alice@example.com", age=30).save(self.db)
        self.assertIsNotNone(user.id)

        fetched = PgUser.get(self.db, user.id)
        self.assertEqual(fetched, user)

        user.age = 31
        user.active = False
        user.save(self.db)
        self.assertEqual(PgUser.get(self.db, user.id).age, 31)
        self.assertIs(PgUser.get(self.db, user.id).active, False)

        self.assertEqual(user.delete(self.db), 1)
        self.assertIsNone(PgUser.get(self.db, user.id))

    def test_builder_placeholders_run_on_server(self) -> None:
        for email, age in (("a@x.io", 20), ("b@x.io", 30), ("c@x.io", 40)):
            PgUser(email=email, age=age).save(self.db)

        result = (
            PgUser.query()
            .where("age", "IN", [20, 40])
            .order_by("age", desc=True)
            .offset(1)
            .execute(self.db)
        )
        self.assertEqual([row["email"] for row in result.rows], ["a@x.io"])

    def test_returning_on_update(self) -> None:
        user = PgUser(email="r@x.io", age=1).save(self.db)
        result = (
            QueryBuilder()
            .update(PgUser, {"age": 2})
            .where("id", "=", user.id)
            .returning("id", "age")
            .execute(self.db)
        )
        self.assertEqual(result.rows, [{"id": user.id, "age": 2}])

    def test_transaction_rollback(self) -> None:
        with self.assertRaises(RuntimeError):
            with self.db.transaction():
                PgUser(email="tmp@x.io").save(self.db)
                raise RuntimeError("abort")
        self.assertEqual(PgUser.all(self.db), [])

    def test_transaction_state_errors(self) -> None:
        with self.assertRaises(TransactionStateError):
            self.db.commit()
        self.db.begin_transaction()
        try:
            with self.assertRaises(TransactionStateError):
                self.db.begin_transaction()
        finally:
            self.db.rollback()

    def test_constraint_violation_raises_query_error(self) -> None:
        PgUser(email="dup@x.io").save(self.db)
        with self.assertRaises(QueryExecutionError) as ctx:
            PgUser(email="dup@x.io").save(self.db)
        self.assertIn("INSERT INTO rex_pg_users", ctx.exception.sql)
        self.assertTrue(self.db.is_connected)


if __name__ == "__main__":
    unittest.main()
