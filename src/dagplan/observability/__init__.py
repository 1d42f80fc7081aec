"""Observability - structured logging."""

from .logger import (
    TRACE,
    LogContext,
    clear_all_context,
    configure_logging,
    get_log_level,
    get_logger,
)

__all__ = [
    "TRACE",
    "configure_logging",
    "get_log_level",
    "get_logger",
    "clear_all_context",
    "LogContext",
]
