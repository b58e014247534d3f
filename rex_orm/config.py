"""Environment-driven database settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Connection settings read from `REX_ORM_*` environment variables.

    Embedded backends use `path`; network backends use host/port/credentials.
    """

    model_config = SettingsConfigDict(
        env_prefix="REX_ORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: Literal["sqlite", "postgres"] = "sqlite"
    path: str = ":memory:"

    host: str = "localhost"
    port: int = Field(default=5432, ge=1, le=65535)
    user: Optional[str] = None
    password: Optional[SecretStr] = None
    database: Optional[str] = None
    tls: bool = False
    connect_timeout: Optional[int] = Field(default=None, ge=0)

    log_level: str = "INFO"
