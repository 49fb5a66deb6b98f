from __future__ import annotations

import logging
import logging.handlers
import sys
from typing import IO, Any

import structlog

from py_ledgersync.infrastructure.config.settings import BaseAppSettings, get_settings

__all__ = ["configure_logging", "get_logger"]


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _rotating_file(settings: BaseAppSettings) -> logging.Handler:
    path = str(settings.log_file)
    backups = max(1, settings.log_backup_count)
    if settings.log_rotation == "size":
        return logging.handlers.RotatingFileHandler(
            path, maxBytes=max(1024, settings.log_max_bytes), backupCount=backups, encoding="utf-8"
        )
    return logging.handlers.TimedRotatingFileHandler(
        path, when=settings.log_rotate_when, backupCount=backups, utc=settings.log_rotate_utc, encoding="utf-8"
    )


def _build_handler(settings: BaseAppSettings, stream: IO[str] | None) -> logging.Handler:
    # JSON lines go to the rotating file when one is configured, console output never does
    if settings.json_logs and settings.log_file:
        handler = _rotating_file(settings)
    else:
        handler = logging.StreamHandler(stream or sys.stdout)
    renderer: Any = structlog.processors.JSONRenderer() if settings.json_logs else structlog.dev.ConsoleRenderer()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=_shared_processors())
    )
    return handler


def configure_logging(stream: IO[str] | None = None) -> None:
    """Route structlog and stdlib logging through one handler built from settings.

    Console rendering by default, JSON when ``JSON_LOGS`` is set (to
    ``LOG_FILE`` with rotation when given). ``stream`` replaces stdout for
    the console handler; the CLI passes stderr so report output stays
    parseable. Calling it again replaces the previous handler.
    """
    settings = get_settings()
    if not settings.logging_enabled:
        logging.basicConfig(handlers=[logging.NullHandler()], level=logging.CRITICAL, force=True)
        structlog.configure(
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,  # type: ignore[arg-type]
            cache_logger_on_first_use=True,
        )
        return

    logging.basicConfig(handlers=[_build_handler(settings, stream)], level=_level(settings.log_level), force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,  # type: ignore[arg-type]
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "ledgersync") -> structlog.stdlib.BoundLogger:
    """Structured logger; logging is configured on first use when nothing else did."""
    if not logging.getLogger().handlers:
        configure_logging()
    return structlog.get_logger(name)
