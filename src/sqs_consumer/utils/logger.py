"""
Module: logger.py
Description: Structured logging configuration for the SQS consumer.

Configures structlog for JSON output so receiver, processor and
transport events can be shipped to CloudWatch Logs or any other
line-oriented collector.

Key Components:
- JSON output with timestamp and level fields
- configure_logging() for picking the minimum level at startup
- get_logger() helper function

Dependencies: structlog, logging, datetime
"""

import logging
import structlog
from datetime import datetime, timezone


def _add_timestamp(logger, method_name, event_dict):
    """
    Add ISO 8601 timestamp to log entries.

    Args:
        logger: Logger instance
        method_name: Log method name (info, error, etc.)
        event_dict: Current log event dictionary

    Returns:
        Updated event dictionary with timestamp
    """
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_log_level(logger, method_name, event_dict):
    """Add upper-cased log level to event dictionary."""
    event_dict["level"] = method_name.upper()
    return event_dict


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure structlog processors and minimum level.

    Called once at import time with INFO and again by the command
    line entry point with the level from settings.

    Args:
        log_level: Standard logging level name (DEBUG, INFO, ...)
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    structlog.configure(
        processors=[
            _add_timestamp,
            _add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )


configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Batch received", queue_url=url, count=3)
        {"event": "Batch received", "queue_url": "...", "count": 3, "timestamp": "...", "level": "INFO"}
    """
    return structlog.get_logger(name)
