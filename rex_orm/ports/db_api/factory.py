"""Build an adapter for the configured backend."""

from __future__ import annotations

from typing import Any, Optional

from ...config import DatabaseSettings
from .database import DatabaseAdapter
from .sqlite import SQLiteAdapter


def create_adapter(
    settings: Optional[DatabaseSettings] = None,
    **overrides: Any,
) -> DatabaseAdapter:
    """Return a new, disconnected adapter for `settings.backend`.

    Args:
        settings: Settings to use; read from the environment when omitted.
        **overrides: Field values replacing those in `settings`.
    """

    if settings is None:
        settings = DatabaseSettings(**overrides)
    elif overrides:
        settings = settings.model_copy(update=overrides)

    if settings.backend == "postgres":
        from .postgres import PostgresAdapter

        return PostgresAdapter(
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=settings.password.get_secret_value() if settings.password else None,
            database=settings.database,
            tls=settings.tls,
            connect_timeout=settings.connect_timeout,
        )
    return SQLiteAdapter(settings.path)
