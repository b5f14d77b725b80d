"""Structured logging utilities for tabgrouper.

This module configures structlog for the whole process. Every log entry may
carry an ``operation_id`` (set per command or bulk run) for tracing, and every
entry that passes the level filter is also kept in a bounded recent-log buffer
that the command surface can return to a UI.
"""

import logging
import sys
import threading
import time
from collections import deque
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from tabgrouper.constants import RECENT_LOG_LIMIT, SLOW_OPERATION_MS

# Context variable for operation tracking
operation_id_var: ContextVar[Optional[str]] = ContextVar("operation_id", default=None)

# Newest entry first; oldest dropped once RECENT_LOG_LIMIT is reached.
_recent_logs: deque[str] = deque(maxlen=RECENT_LOG_LIMIT)
_recent_logs_lock = threading.Lock()


def add_operation_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add operation_id to log context if available."""
    operation_id = operation_id_var.get()
    if operation_id:
        event_dict["operation_id"] = operation_id
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def record_recent(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Keep a one-line rendition of the entry in the recent-log buffer."""
    stamp = datetime.fromtimestamp(
        event_dict.get("timestamp", time.time()), tz=timezone.utc
    ).isoformat()
    level = event_dict.get("level", method_name)
    line = f"[{stamp}] {level.upper()} {event_dict.get('event', '')}"
    with _recent_logs_lock:
        _recent_logs.appendleft(line)
    return event_dict


def get_recent_logs() -> list[str]:
    """Return a copy of the recent-log buffer, newest first."""
    with _recent_logs_lock:
        return list(_recent_logs)


def clear_recent_logs() -> None:
    """Empty the recent-log buffer."""
    with _recent_logs_lock:
        _recent_logs.clear()


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_operation_id,
        add_timestamp,
        structlog.processors.add_log_level,
        record_recent,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "tabgrouper") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Context manager for tracking operation performance."""

    def __init__(
        self,
        operation: str,
        logger: Optional[structlog.stdlib.BoundLogger] = None,
        slow_ms: float = SLOW_OPERATION_MS,
    ):
        """Initialize performance logger.

        Args:
            operation: Name of the operation being timed
            logger: Logger instance to use (creates new if None)
            slow_ms: Durations above this are logged at WARNING
        """
        self.operation = operation
        self.logger = logger or get_logger()
        self.slow_ms = slow_ms
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "PerformanceLogger":
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop timing and log performance."""
        self.end_time = time.perf_counter()
        duration_ms = (self.end_time - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed",
                operation=self.operation,
                duration_ms=duration_ms,
                error=str(exc_val),
            )
        else:
            log_method = self.logger.warning if duration_ms > self.slow_ms else self.logger.debug
            log_method(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=duration_ms,
            )

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        if self.end_time == 0:
            return (time.perf_counter() - self.start_time) * 1000
        return (self.end_time - self.start_time) * 1000


def set_operation_id(operation_id: str) -> None:
    """Set operation ID in context for all subsequent logs.

    Args:
        operation_id: Unique identifier for the command or bulk run
    """
    operation_id_var.set(operation_id)


def clear_operation_id() -> None:
    """Clear operation ID from context."""
    operation_id_var.set(None)


# Initialize logging with sensible defaults
# This will be reconfigured by main.py based on environment
configure_logging()
