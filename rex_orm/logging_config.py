"""Structured logging setup for applications using rex_orm.

The library only emits events through `structlog.get_logger(__name__)`;
it never configures logging on import. Applications call
`configure_logging()` once at startup.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import structlog

from .config import DatabaseSettings


def configure_logging(level: Optional[str] = None, *, json_format: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Minimum level name (`DEBUG`, `INFO`, ...). Defaults to
            `DatabaseSettings().log_level`, i.e. `REX_ORM_LOG_LEVEL`.
        json_format: Render JSON lines instead of colored console output.
    """

    if level is None:
        level = DatabaseSettings().log_level
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level {level!r}.")

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)

    renderers: list[Any]
    if json_format:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
