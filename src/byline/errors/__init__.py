"""
Error hierarchy for byline.

Provides structured error types for configuration and pipeline failures.
"""

from byline.errors.base import (
    BufferTooSmallError,
    BylineError,
    ErrorContext,
    PipelineError,
    RecordTooLongError,
    ValidationError,
)

__all__ = [
    "BufferTooSmallError",
    "BylineError",
    "ErrorContext",
    "PipelineError",
    "RecordTooLongError",
    "ValidationError",
]
