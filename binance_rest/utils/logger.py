"""
Structured logging utilities using structlog.

Provides JSON-formatted logging for production and
human-readable logging for development.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import structlog


def setup_logger(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "binance-rest",
    log_dir: Optional[str] = None
) -> structlog.BoundLogger:
    """
    Configure and return a structured logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for production, "console" for development
        service_name: Name of the service for log context
        log_dir: Directory for log files (stdout if None)

    Returns:
        Configured structlog logger instance
    """
    if log_format == "json":
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
        ]
    else:  # console format for development
        processors = [
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=True)
        ]

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"client_{datetime.utcnow().strftime('%Y-%m-%d')}.log"
        logger_factory = structlog.PrintLoggerFactory(file=open(log_file, "a"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stdout)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(service=service_name)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """
    Get a logger instance with optional name context.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Logger instance
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


class EventType:
    """Standard event types for client logging."""

    # Session events
    SESSION_OPENED = "SESSION_OPENED"
    SESSION_CLOSED = "SESSION_CLOSED"

    # Request events
    REQUEST_SENT = "REQUEST_SENT"
    RESPONSE_RECEIVED = "RESPONSE_RECEIVED"

    # Failures
    REMOTE_ERROR = "REMOTE_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
