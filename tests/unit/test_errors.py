"""Tests for error module."""

from byline.errors import (
    BufferTooSmallError,
    BylineError,
    ErrorContext,
    PipelineError,
    RecordTooLongError,
    ValidationError,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        assert str(ErrorContext()) == ""

    def test_context_with_source(self) -> None:
        """Test context with source."""
        assert "[scan]" in str(ErrorContext(source="scan"))

    def test_context_with_field_path(self) -> None:
        """Test context with field path."""
        ctx = ErrorContext(field_path="separator")
        assert "at 'separator'" in str(ctx)

    def test_context_with_hint(self) -> None:
        """Test context with hint."""
        ctx = ErrorContext(hint="Use one byte")
        assert "(hint: Use one byte)" in str(ctx)


class TestBylineError:
    """Tests for base error class."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = BylineError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_error_with_context(self) -> None:
        """Test error with context."""
        error = BylineError("Failed", ErrorContext(source="test", hint="Try again"))
        assert "[test]" in str(error)
        assert "(hint: Try again)" in str(error)

    def test_with_hint(self) -> None:
        """Test adding hint to error."""
        error = BylineError("Failed").with_hint("Check the config")
        assert error.context.hint == "Check the config"
        assert "(hint: Check the config)" in str(error)


class TestPipelineErrors:
    """Tests for pipeline error types."""

    def test_pipeline_error(self) -> None:
        """Test operator is recorded."""
        error = PipelineError("bad result", operator="map")
        assert error.operator == "map"
        assert error.context.details["operator"] == "map"
        assert "[pipeline]" in str(error)

    def test_record_too_long(self) -> None:
        """Test size details."""
        error = RecordTooLongError(70000, 65536)
        assert isinstance(error, PipelineError)
        assert error.size == 70000
        assert error.limit == 65536
        assert error.context.source == "scan"
        assert "max_record_size" in str(error)

    def test_buffer_too_small(self) -> None:
        """Test buffer size details."""
        error = BufferTooSmallError(10, 4)
        assert isinstance(error, BylineError)
        assert (error.needed, error.available) == (10, 4)
        assert error.operator == "readinto"


class TestValidationError:
    """Tests for ValidationError."""

    def test_validation_error(self) -> None:
        """Test field, expected and actual values."""
        error = ValidationError(
            "Separator must be a single byte",
            field="separator",
            expected="bytes of length 1",
            actual=b"ab",
        )
        assert error.field == "separator"
        assert error.context.field_path == "separator"
        assert error.context.details["expected"] == "bytes of length 1"
        assert error.context.details["actual"] == b"ab"
        assert "at 'separator'" in str(error)
