"""
Structured logging configuration using structlog.
"""

import logging
import sys
from typing import Any

import structlog
from labelprint.config import settings

# Image, PDF and HTTP libraries that log every decode or request at DEBUG
QUIET_LOGGERS = ("PIL", "pypdf", "urllib3")


def configure_logging(log_level: str | None = None, development: bool | None = None) -> None:
    """
    Configure structured logging for the service.

    Console output in development, JSON lines everywhere else. Both go
    through the standard library so uvicorn and library loggers share
    the same stream.

    Args:
        log_level: Override for settings.log_level
        development: Override for settings.is_development
    """
    level = getattr(logging, (log_level or settings.log_level).upper())
    if development is None:
        development = settings.is_development

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, level))

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if development:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer()
        ]
    else:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Label added to queue", extra={"queue_size": 3})
    """
    return structlog.get_logger(name)
