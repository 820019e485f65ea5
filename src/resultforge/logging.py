"""Structured logging for resultforge.

Library modules log through ``get_logger(__name__)`` at import time. Those
loggers are lazy: each event is rendered with whatever configuration is
active when it is emitted, so an application may call ``configure_logging``
or ``configure_from_settings`` after importing resultforge.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, TextIO

import structlog
from structlog._config import BoundLoggerLazyProxy

if TYPE_CHECKING:
    from resultforge.config import Settings


def _level_number(log_level: str) -> int:
    levels = logging.getLevelNamesMapping()
    try:
        return levels[log_level.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level: {log_level}") from None


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structured logging with structlog.

    Args:
        log_level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL), any case.
        json_format: If True, one JSON object per line; otherwise console format.
        stream: Output stream (defaults to sys.stderr).

    Raises:
        ValueError: If ``log_level`` is not a known level name.
    """
    level = _level_number(log_level)
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def configure_from_settings(settings: Settings | None = None) -> None:
    """Apply the logging options of ``Settings`` (environment by default)."""
    if settings is None:
        from resultforge.config import get_settings

        settings = get_settings()
    configure_logging(log_level=settings.log_level, json_format=settings.log_json_format)


def get_logger(name: str) -> Any:
    """Return a lazy logger that tags every event with ``logger=name``."""
    return BoundLoggerLazyProxy(
        None, logger_factory_args=(name,), initial_values={"logger": name}
    )
