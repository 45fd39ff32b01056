"""Structured logging for the service, driven by ``Settings``.

Events are plain structlog key/value pairs. Console output is colored on a
terminal and JSON lines otherwise; ``LOG_DIR`` additionally writes JSON lines
to a rotating ``dochub.log``.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.types import Processor

from dochub.lib.config import Settings, get_settings

LOG_FILE_NAME = "dochub.log"

_configured = False


def _build_handlers(settings: Settings, level: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_dir / LOG_FILE_NAME,
                maxBytes=settings.log_max_bytes,
                backupCount=settings.log_backup_count,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handlers


def _renderer(settings: Settings) -> list[Processor]:
    json_output = settings.log_json if settings.log_json is not None else not sys.stderr.isatty()
    if json_output:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(settings: Settings | None = None, force: bool = False) -> None:
    """
    Route stdlib logging and structlog through the configured handlers.

    Only the first call takes effect unless ``force`` is set, so modules may
    request a logger at import time before the application configures one.
    """
    global _configured
    if _configured and not force:
        return

    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(settings, level):
        root_logger.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderer(settings),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger, configuring logging on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("lock_acquired", project_id="proj-1")
    """
    configure_logging()

    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


def bind_context(**context: Any) -> None:
    """Bind request-scoped values (e.g. request_id) to every following log line."""
    structlog.contextvars.bind_contextvars(**context)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = ["LOG_FILE_NAME", "get_logger", "bind_context", "clear_context", "configure_logging"]
