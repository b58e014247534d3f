"""SQLite adapter over the standard-library `sqlite3` driver."""

from __future__ import annotations

import sqlite3
from typing import Any, Optional

from .database import DatabaseAdapter
from .dialects import Dialect, SQLiteDialect


class SQLiteAdapter(DatabaseAdapter):
    """Adapter for an embedded SQLite database file (or `:memory:`).

    Note that every `connect()` on `:memory:` opens a fresh, empty database.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        dialect: Optional[Dialect] = None,
        **connect_kwargs: Any,
    ):
        super().__init__(dialect or SQLiteDialect())
        self.path = path
        self.timeout = timeout
        self._connect_kwargs = connect_kwargs

    def _open(self) -> sqlite3.Connection:
        # isolation_level=None: autocommit; transactions are explicit BEGINs.
        return sqlite3.connect(
            self.path,
            timeout=self.timeout,
            isolation_level=None,
            **self._connect_kwargs,
        )

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error,)

    def _describe(self) -> dict[str, Any]:
        return {"dialect": self.dialect.name, "path": self.path}
