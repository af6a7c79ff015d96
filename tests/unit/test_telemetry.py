"""Tests for telemetry module."""

import io
import json
import logging

import pytest

from byline import LineReader, new_reader
from byline.pipeline.reader import describe_source
from byline.telemetry import (
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


@pytest.fixture
def restore_logging():
    """Put the global logger configuration back after a test."""
    saved = (BylineLogger._level, BylineLogger._formatter, BylineLogger._handler)
    yield
    BylineLogger._level, BylineLogger._formatter, BylineLogger._handler = saved
    for logger in BylineLogger._loggers.values():
        logger.handlers.clear()
        if saved[2]:
            logger.addHandler(saved[2])
        logger.setLevel(saved[0].to_logging_level())
    clear_log_context()


def make_record(msg: str, **fields) -> logging.LogRecord:
    record = logging.LogRecord("byline.test", logging.INFO, __file__, 1, msg, None, None)
    if fields:
        record.extra_fields = fields
    return record


class TestLogContext:
    """Tests for LogContext."""

    def test_empty_context(self) -> None:
        """Test empty context."""
        assert LogContext().to_dict() == {}

    def test_context_with_fields(self) -> None:
        """Test context with fields."""
        ctx = LogContext(pipeline="ingest", source="access.log")
        assert ctx.to_dict() == {"pipeline": "ingest", "source": "access.log"}

    def test_context_with_extra(self) -> None:
        """Test context with extra fields."""
        ctx = LogContext(pipeline="ingest", extra={"shard": 3})
        assert ctx.to_dict() == {"pipeline": "ingest", "shard": 3}

    def test_set_and_get(self, restore_logging) -> None:
        """Test the context variable round trip."""
        set_log_context(LogContext(pipeline="p", extra={"run": 1}))
        ctx = get_log_context()
        assert ctx.pipeline == "p"
        assert ctx.extra == {"run": 1}
        clear_log_context()
        assert get_log_context().to_dict() == {}

    def test_reset_restores_previous(self, restore_logging) -> None:
        """Test a token puts the earlier context back."""
        set_log_context(LogContext(pipeline="outer"))
        token = set_log_context(LogContext(pipeline="inner"))
        reset_log_context(token)
        assert get_log_context().pipeline == "outer"

    def test_scopes_nest(self) -> None:
        """Test log_context blocks restore the enclosing context."""
        with log_context(LogContext(pipeline="outer", source="a.log")):
            with log_context(LogContext(pipeline="inner")):
                assert get_log_context().to_dict() == {"pipeline": "inner"}
            assert get_log_context().source == "a.log"
        assert get_log_context().to_dict() == {}

    def test_scope_restored_on_error(self) -> None:
        """Test the context is reset when the block raises."""
        with pytest.raises(RuntimeError):
            with log_context(LogContext(pipeline="p")):
                raise RuntimeError("boom")
        assert get_log_context().to_dict() == {}


class TestFormatters:
    """Tests for log formatters."""

    def test_json_formatter(self, restore_logging) -> None:
        """Test JSON output with fields and context."""
        set_log_context(LogContext(pipeline="ingest"))
        output = json.loads(JsonFormatter().format(make_record("End of stream", records=3)))
        assert output["message"] == "End of stream"
        assert output["level"] == "INFO"
        assert output["records"] == 3
        assert output["context"] == {"pipeline": "ingest"}
        assert output["timestamp"].endswith("Z")

    def test_json_without_timestamp(self) -> None:
        """Test omitting the timestamp."""
        output = json.loads(JsonFormatter(include_timestamp=False).format(make_record("x")))
        assert "timestamp" not in output

    def test_text_formatter(self) -> None:
        """Test text output appends fields."""
        line = TextFormatter().format(make_record("Filter appended", operator="map"))
        assert "| INFO     | byline.test | Filter appended" in line
        assert line.endswith("| operator=map")


class TestBylineLogger:
    """Tests for BylineLogger."""

    def test_get_logger_cached(self) -> None:
        """Test loggers are reused by name."""
        first = get_logger("byline.cached")
        second = get_logger("byline.cached")
        assert first._logger is second._logger
        assert first.name == "byline.cached"

    def test_configure_json(self, restore_logging) -> None:
        """Test configured output reaches the stream."""
        stream = io.StringIO()
        logger = get_logger("byline.configured")
        BylineLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        assert logger.is_enabled_for(LogLevel.DEBUG)
        logger.debug("hello", records=1)
        output = json.loads(stream.getvalue().strip())
        assert output["message"] == "hello"
        assert output["records"] == 1

    def test_pipeline_logs_end_of_stream(self, restore_logging) -> None:
        """Test the reader logs at debug level."""
        stream = io.StringIO()
        BylineLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        get_logger("byline.pipeline")
        LineReader(b"a\nb\n", None).map(bytes.upper).discard()
        messages = [json.loads(line) for line in stream.getvalue().splitlines()]
        end = [m for m in messages if m["message"] == "End of stream"]
        assert end and end[-1]["records"] == 2
        assert any(m["message"] == "Filter appended" for m in messages)

    def test_pipeline_logs_errors(self, restore_logging) -> None:
        """Test hard errors are logged before propagating."""
        stream = io.StringIO()
        BylineLogger.configure(level=LogLevel.DEBUG, format="text", stream=stream)
        get_logger("byline.pipeline")

        def fail(record: bytes) -> bytes:
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            LineReader(b"a\n").map(fail).read_all()
        assert "Pipeline stopped by error" in stream.getvalue()

    def test_pipeline_logs_carry_context(self, restore_logging, tmp_path) -> None:
        """Test reader log lines name the pipeline and its source."""
        stream = io.StringIO()
        BylineLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        get_logger("byline.pipeline")
        path = tmp_path / "access.log"
        path.write_bytes(b"a\nb\n")
        with path.open("rb") as source:
            new_reader(source, name="ingest").map(bytes.upper).discard()
        messages = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert messages
        for message in messages:
            assert message["context"] == {"pipeline": "ingest", "source": str(path)}
        assert get_log_context().to_dict() == {}

    def test_nested_readers_log_own_context(self, restore_logging) -> None:
        """Test a reader fed by another reader logs under each one's name."""
        stream = io.StringIO()
        BylineLogger.configure(level=LogLevel.DEBUG, format="json", stream=stream)
        get_logger("byline.pipeline")
        inner = new_reader(b"a\nb\n", name="inner")
        new_reader(inner, name="outer").discard()
        messages = [json.loads(line) for line in stream.getvalue().splitlines()]
        ends = {m["context"]["pipeline"]: m["context"] for m in messages
                if m["message"] == "End of stream"}
        assert ends["inner"] == {"pipeline": "inner", "source": "bytes"}
        assert ends["outer"] == {"pipeline": "outer", "source": "inner"}


class TestDescribeSource:
    """Tests for describe_source."""

    def test_unnamed_sources(self) -> None:
        """Test sources without a name fall back to their type."""
        assert describe_source(b"") == "bytes"
        assert describe_source(io.BytesIO()) == "BytesIO"
        assert describe_source(iter([b"x"])) == "list_iterator"


class TestPreviewRecord:
    """Tests for preview_record."""

    def test_short(self) -> None:
        """Test short records are shown whole."""
        assert preview_record(b"abc\n") == "b'abc\\n'"

    def test_long(self) -> None:
        """Test long records are cut."""
        text = preview_record(b"x" * 100, limit=4)
        assert text == "b'xxxx'... (100 bytes)"
