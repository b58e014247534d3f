"""PostgreSQL adapter over `psycopg` (v3)."""

from __future__ import annotations

from typing import Any, Optional

from .database import DatabaseAdapter
from .dialects import Dialect, PostgresDialect


class PostgresAdapter(DatabaseAdapter):
    """Adapter for a network PostgreSQL server.

    `tls=True` requires an encrypted connection (`sslmode=require`). The
    connection timeout is the driver's `connect_timeout`.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        *,
        tls: bool = False,
        connect_timeout: Optional[int] = None,
        dialect: Optional[Dialect] = None,
        **connect_kwargs: Any,
    ):
        try:
            import psycopg  # type: ignore[import-not-found]
        except ImportError as exc:  # pragma: no cover - env dependent
            raise ImportError(
                "psycopg is required for PostgresAdapter. "
                "Install with `pip install rex-orm[postgres]`."
            ) from exc

        super().__init__(dialect or PostgresDialect())
        self._psycopg = psycopg
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.tls = tls
        self.connect_timeout = connect_timeout
        self._connect_kwargs = connect_kwargs

    def _connect_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"host": self.host, "port": self.port}
        if self.user is not None:
            params["user"] = self.user
        if self.password is not None:
            params["password"] = self.password
        if self.database is not None:
            params["dbname"] = self.database
        if self.tls:
            params["sslmode"] = "require"
        if self.connect_timeout is not None:
            params["connect_timeout"] = self.connect_timeout
        params.update(self._connect_kwargs)
        return params

    def _open(self) -> Any:
        return self._psycopg.connect(autocommit=True, **self._connect_params())

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (self._psycopg.Error,)

    def _describe(self) -> dict[str, Any]:
        return {
            "dialect": self.dialect.name,
            "host": self.host,
            "port": self.port,
            "database": self.database,
        }
