"""
Base error classes for byline.

Provides a layered error hierarchy:
- BylineError: Base class for all library errors
- PipelineError: Record processing errors
- ValidationError: Invalid configuration or arguments
- RecordTooLongError: Unterminated record exceeded the size limit
- BufferTooSmallError: Caller's read buffer cannot hold the next record

Exceptions raised by the input source or by user callbacks are never
wrapped in these types; they reach the caller unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Name of the offending option or argument (e.g., 'separator')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'scan', 'pipeline', 'config')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class BylineError(Exception):
    """Base class for all byline errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> BylineError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class PipelineError(BylineError):
    """Error raised by the pipeline machinery itself.

    Raised when:
    - A map function returns the wrong type
    - The tokenizer cannot produce a record
    - A record does not fit the caller's buffer
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        operator: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="pipeline")
        if operator:
            ctx.details["operator"] = operator
        super().__init__(message, ctx)
        self.operator = operator


class ValidationError(BylineError):
    """Invalid configuration value or builder argument.

    Raised when:
    - A separator is not exactly one byte
    - A field pattern is not a valid text regular expression
    - A source produces text instead of bytes
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual


class RecordTooLongError(PipelineError):
    """An unterminated record grew past ``max_record_size``."""

    def __init__(self, size: int, limit: int) -> None:
        ctx = ErrorContext(
            source="scan",
            details={"size": size, "limit": limit},
            hint="raise max_record_size or check the separator",
        )
        super().__init__(
            f"Record of at least {size} bytes exceeds limit of {limit}",
            ctx,
            operator="scan",
        )
        self.size = size
        self.limit = limit


class BufferTooSmallError(PipelineError):
    """The caller's buffer is smaller than the pending record.

    The record stays pending, so the read can be retried with a larger
    buffer.
    """

    def __init__(self, needed: int, available: int) -> None:
        ctx = ErrorContext(
            source="reader",
            details={"needed": needed, "available": available},
            hint="use a larger buffer or OverflowPolicy.CARRY",
        )
        super().__init__(
            f"Record of {needed} bytes does not fit buffer of {available}",
            ctx,
            operator="readinto",
        )
        self.needed = needed
        self.available = available
