"""Structured logging utilities for csiguard."""

import logging
import sys
from typing import Any

import structlog

from csiguard.core.models import ClusterCheckResult


def setup_logging(level: str = "INFO", format: str = "json", output: str = "stdout") -> None:
    """Configure structured logging for csiguard.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format: Log format (json or console)
        output: Output destination (stdout or stderr)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    stream = sys.stdout if output == "stdout" else sys.stderr

    logging.basicConfig(format="%(message)s", stream=stream, level=log_level)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if format == "json":
        processors = shared_processors + [
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def log_check_result(
    logger: structlog.BoundLogger,
    event: str,
    result: ClusterCheckResult,
    **kwargs: Any,
) -> None:
    """Log a check result, at warning level when it restricts the driver.

    Args:
        logger: Logger instance
        event: Event name
        result: Check result to log
        **kwargs: Additional context fields
    """
    context = {
        "check_name": result.check_name,
        "action": result.action.name.lower(),
        "status": result.status.value,
        "reason": result.reason,
        **kwargs,
    }
    if result.is_pass:
        logger.info(event, **context)
    else:
        logger.warning(event, **context)
