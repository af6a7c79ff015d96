"""
Telemetry module for byline.

Provides structured logging for pipelines.
"""

from byline.telemetry.logger import (
    BylineLogger,
    JsonFormatter,
    LogContext,
    LogLevel,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    preview_record,
    reset_log_context,
    set_log_context,
)

__all__ = [
    "BylineLogger",
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "preview_record",
    "reset_log_context",
    "set_log_context",
]
