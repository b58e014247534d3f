from __future__ import annotations

import importlib.util
import os
import unittest
from unittest import mock

from pydantic import ValidationError

from rex_orm.config import DatabaseSettings
from rex_orm.logging_config import configure_logging
from rex_orm.ports.db_api.factory import create_adapter
from rex_orm.ports.db_api.sqlite import SQLiteAdapter

HAS_POSTGRES_DRIVER = importlib.util.find_spec("psycopg") is not None

_CLEAN_ENV = {key: value for key, value in os.environ.items() if not key.startswith("REX_ORM_")}


class DatabaseSettingsTests(unittest.TestCase):
    def _settings(self, **env: str) -> DatabaseSettings:
        with mock.patch.dict(os.environ, {**_CLEAN_ENV, **env}, clear=True):
            return DatabaseSettings(_env_file=None)

    def test_defaults(self) -> None:
        settings = self._settings()
        self.assertEqual(settings.backend, "sqlite")
        self.assertEqual(settings.path, ":memory:")
        self.assertEqual(settings.host, "localhost")
        self.assertEqual(settings.port, 5432)
        self.assertIsNone(settings.password)
        self.assertFalse(settings.tls)
        self.assertEqual(settings.log_level, "INFO")

    def test_reads_prefixed_environment(self) -> None:
        settings = self._settings(
            REX_ORM_BACKEND="postgres",
            REX_ORM_HOST="db.internal",
            REX_ORM_PORT="6543",
            REX_ORM_USER="app",
            REX_ORM_PASSWORD="s3cret",
            REX_ORM_DATABASE="main",
            REX_ORM_TLS="true",
            REX_ORM_CONNECT_TIMEOUT="7",
        )
        self.assertEqual(settings.backend, "postgres")
        self.assertEqual(settings.host, "db.internal")
        self.assertEqual(settings.port, 6543)
        self.assertEqual(settings.user, "app")
        self.assertEqual(settings.password.get_secret_value(), "s3cret")
        self.assertNotIn("s3cret", repr(settings))
        self.assertEqual(settings.database, "main")
        self.assertTrue(settings.tls)
        self.assertEqual(settings.connect_timeout, 7)

    def test_invalid_values_raise(self) -> None:
        for env in (
            {"REX_ORM_BACKEND": "oracle"},
            {"REX_ORM_PORT": "0"},
            {"REX_ORM_PORT": "70000"},
            {"REX_ORM_CONNECT_TIMEOUT": "-1"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(ValidationError):
                    self._settings(**env)


class CreateAdapterTests(unittest.TestCase):
    def test_sqlite_from_settings(self) -> None:
        adapter = create_adapter(DatabaseSettings(_env_file=None, path="app.sqlite3"))
        self.assertIsInstance(adapter, SQLiteAdapter)
        self.assertEqual(adapter.path, "app.sqlite3")
        self.assertFalse(adapter.is_connected)

    def test_overrides_without_settings(self) -> None:
        with mock.patch.dict(os.environ, _CLEAN_ENV, clear=True):
            adapter = create_adapter(_env_file=None, path=":memory:")
        self.assertIsInstance(adapter, SQLiteAdapter)
        with adapter:
            self.assertEqual(adapter.execute("SELECT 1 AS one").first(), {"one": 1})

    def test_overrides_replace_settings_fields(self) -> None:
        settings = DatabaseSettings(_env_file=None, path="a.sqlite3")
        adapter = create_adapter(settings, path="b.sqlite3")
        self.assertEqual(adapter.path, "b.sqlite3")
        self.assertEqual(settings.path, "a.sqlite3")

    @unittest.skipUnless(HAS_POSTGRES_DRIVER, "psycopg is not installed")
    def test_postgres_from_settings(self) -> None:
        from rex_orm.ports.db_api.postgres import PostgresAdapter

        settings = DatabaseSettings(
            _env_file=None,
            backend="postgres",
            host="db.internal",
            port=6543,
            user="app",
            password="s3cret",
            database="main",
            tls=True,
        )
        adapter = create_adapter(settings)

        self.assertIsInstance(adapter, PostgresAdapter)
        self.assertEqual(adapter.password, "s3cret")
        self.assertEqual(adapter._connect_params()["sslmode"], "require")  # noqa: SLF001
        self.assertFalse(adapter.is_connected)


class ConfigureLoggingTests(unittest.TestCase):
    def test_rejects_unknown_level(self) -> None:
        with self.assertRaises(ValueError):
            configure_logging("LOUD")

    def test_configures_structlog(self) -> None:
        with mock.patch("rex_orm.logging_config.logging.basicConfig") as basic_config, mock.patch(
            "rex_orm.logging_config.structlog.configure"
        ) as configure:
            configure_logging("debug", json_format=True)

        self.assertEqual(basic_config.call_args.kwargs["level"], 10)
        processors = configure.call_args.kwargs["processors"]
        self.assertEqual(type(processors[-1]).__name__, "JSONRenderer")

    def test_level_defaults_to_settings(self) -> None:
        env = {**_CLEAN_ENV, "REX_ORM_LOG_LEVEL": "warning"}
        with mock.patch.dict(os.environ, env, clear=True), mock.patch(
            "rex_orm.logging_config.logging.basicConfig"
        ) as basic_config, mock.patch("rex_orm.logging_config.structlog.configure"):
            configure_logging()

        self.assertEqual(basic_config.call_args.kwargs["level"], 30)

    def test_console_renderer_by_default(self) -> None:
        with mock.patch.dict(os.environ, _CLEAN_ENV, clear=True), mock.patch(
            "rex_orm.logging_config.logging.basicConfig"
        ), mock.patch(
            "rex_orm.logging_config.structlog.configure"
        ) as configure:
            configure_logging()

        processors = configure.call_args.kwargs["processors"]
        self.assertEqual(type(processors[-1]).__name__, "ConsoleRenderer")


if __name__ == "__main__":
    unittest.main()
