"""
Line reader: the pipeline exposed as a binary stream.

``LineReader`` wraps a byte source, splits it into records, runs each
record through its filter chain and hands the results out through the
standard ``io.RawIOBase`` interface. It can be read directly, iterated,
wrapped in ``io.BufferedReader``/``io.TextIOWrapper`` or drained with the
bulk helpers.

Example:
    >>> reader = LineReader(io.BytesIO(b"foo\\nbar\\nbaz"))
    >>> reader.map_string(str.upper).read_all_slice_string()
    ['FOO\\n', 'BAR\\n', 'BAZ']
"""

from __future__ import annotations

import io
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from byline.config import (
    OverflowPolicy,
    PipelineConfig,
    compile_field_pattern,
    normalize_separator,
)
from byline.errors import BufferTooSmallError
from byline.pipeline.awk import AWKCallback, PipelineState, awk_filter
from byline.pipeline.chain import (
    EMPTY,
    FilterChain,
    FilterFunc,
    grep,
    grep_pattern,
    grep_string,
    map_bytes,
    map_bytes_err,
    map_string,
    map_string_err,
)
from byline.pipeline.scan import ByteSource, Scanner
from byline.pipeline.signals import Signal
from byline.telemetry import LogContext, get_logger, log_context, preview_record

logger = get_logger("byline.pipeline")


def describe_source(source: ByteSource) -> str:
    """Short label for ``source`` in log context: its name or its type."""
    name = getattr(source, "name", None)
    if isinstance(name, (str, int)) and not isinstance(name, bool):
        return str(name)
    return type(source).__name__


@dataclass
class PipelineStats:
    """Counters for one reader.

    Attributes:
        records_read: Records produced by the tokenizer
        records_omitted: Records dropped by an omit signal
        records_emitted: Records that made it through the whole chain
        bytes_emitted: Bytes copied into callers' buffers
    """

    records_read: int = 0
    records_omitted: int = 0
    records_emitted: int = 0
    bytes_emitted: int = 0


class LineReader(io.RawIOBase):
    """Line-by-line filtering reader over a byte source.

    Each ``readinto`` call pulls records until one produces output and
    copies it into the caller's buffer. Omitted records and records that a
    filter turned into empty bytes never surface as a zero-byte read, which
    would mean end of stream.

    Iteration and ``next()`` yield whole output records, split on the
    pipeline's separator. ``readline`` is inherited from ``io.IOBase`` and
    always splits on ``b"\\n"``.

    The reader does not own its source and never closes it. It is not safe
    to read from one reader in several threads at once.
    """

    def __init__(
        self,
        source: ByteSource,
        config: PipelineConfig | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            source: Binary file object, bytes, or iterable of bytes chunks
            config: Pipeline settings (defaults: newline separator,
                whitespace field pattern)
        """
        super().__init__()
        self._config = config or PipelineConfig()
        self._scanner = Scanner(
            source,
            chunk_size=self._config.chunk_size,
            max_record_size=self._config.max_record_size,
        )
        self._chain = FilterChain()
        self._state = PipelineState(
            rs=self._config.separator,
            fs=self._config.field_pattern,
        )
        self._pending = EMPTY
        self._offset = 0
        self._exhausted = False
        self._log_context = LogContext(
            pipeline=self._config.name, source=describe_source(source)
        )
        self.stats = PipelineStats()

    def __repr__(self) -> str:
        return (
            f"LineReader(name={self._config.name!r}, "
            f"filters={len(self._chain)}, nr={self._state.nr})"
        )

    @property
    def config(self) -> PipelineConfig:
        """Settings the reader was created with."""
        return self._config

    @property
    def name(self) -> str:
        """Pipeline name used in log output."""
        return self._config.name

    @property
    def separator(self) -> bytes:
        """Active record separator."""
        return self._state.rs

    @property
    def field_pattern(self) -> re.Pattern[str]:
        """Active field separator pattern."""
        return self._state.fs

    @property
    def record_number(self) -> int:
        """Number of records read so far."""
        return self._state.nr

    @property
    def exhausted(self) -> bool:
        """Whether end of stream has been reached or a read failed."""
        return self._exhausted

    # ------------------------------------------------------------------
    # Builder methods
    # ------------------------------------------------------------------

    def set_separator(self, separator: bytes | str | int) -> LineReader:
        """Set the record separator (a single byte)."""
        self._state.rs = normalize_separator(separator)
        return self

    def set_field_pattern(self, pattern: str | re.Pattern[str]) -> LineReader:
        """Set the field separator pattern for AWK mode."""
        self._state.fs = compile_field_pattern(pattern)
        return self

    set_rs = set_separator
    set_fs = set_field_pattern

    def append(self, fn: FilterFunc, operator: str = "filter") -> LineReader:
        """Append a canonical filter function to the chain."""
        self._chain.append(fn)
        with log_context(self._log_context):
            logger.debug(
                "Filter appended",
                operator=operator,
                position=len(self._chain),
            )
        return self

    def map(self, fn: Callable[[bytes], bytes]) -> LineReader:
        """Transform each record as bytes."""
        return self.append(map_bytes(fn), "map")

    def map_err(self, fn: Callable[[bytes], bytes | Signal]) -> LineReader:
        """Transform each record as bytes; ``fn`` may return a Signal."""
        return self.append(map_bytes_err(fn), "map_err")

    def map_string(self, fn: Callable[[str], str]) -> LineReader:
        """Transform each record as text."""
        return self.append(
            map_string(fn, self._config.encoding, self._config.errors), "map_string"
        )

    def map_string_err(self, fn: Callable[[str], str | Signal]) -> LineReader:
        """Transform each record as text; ``fn`` may return a Signal."""
        return self.append(
            map_string_err(fn, self._config.encoding, self._config.errors),
            "map_string_err",
        )

    def filter(self, predicate: Callable[[bytes], bool]) -> LineReader:
        """Keep only records for which ``predicate`` is true."""
        return self.append(grep(predicate), "filter")

    def filter_string(self, predicate: Callable[[str], bool]) -> LineReader:
        """Keep only records whose text satisfies ``predicate``."""
        return self.append(
            grep_string(predicate, self._config.encoding, self._config.errors),
            "filter_string",
        )

    def filter_pattern(
        self, pattern: str | bytes | re.Pattern[str] | re.Pattern[bytes]
    ) -> LineReader:
        """Keep only records in which ``pattern`` matches."""
        return self.append(
            grep_pattern(pattern, self._config.encoding, self._config.errors),
            "filter_pattern",
        )

    grep = filter
    grep_string = filter_string
    grep_by_regexp = filter_pattern

    def awk(self, callback: AWKCallback) -> LineReader:
        """Process records AWK-style: ``callback(line, fields, vars)``.

        The callback gets the line without its separator, the fields split
        by the field pattern, and an AWKVars snapshot. It returns the new
        line (the separator is re-added if it was present and is missing)
        or a Signal.
        """
        return self.append(
            awk_filter(
                self._state, callback, self._config.encoding, self._config.errors
            ),
            "awk",
        )

    # ------------------------------------------------------------------
    # Streaming interface
    # ------------------------------------------------------------------

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        """Copy the next output record (or the rest of it) into ``buffer``.

        Returns:
            Number of bytes written; 0 only at end of stream

        Raises:
            BufferTooSmallError: Under OverflowPolicy.ERROR, when the record
                does not fit. The record stays pending.
        """
        if self.closed:
            raise ValueError("I/O operation on closed file.")

        view = memoryview(buffer).cast("B")
        size = len(view)
        if size == 0:
            return 0

        while self._offset >= len(self._pending):
            output = self._pull()
            if output is None:
                return 0
            self._pending, self._offset = output, 0

        remaining = len(self._pending) - self._offset
        if remaining > size:
            policy = self._config.overflow
            if policy is OverflowPolicy.ERROR:
                raise BufferTooSmallError(remaining, size)
            if policy is OverflowPolicy.TRUNCATE:
                view[:size] = self._pending[self._offset : self._offset + size]
                self._pending, self._offset = EMPTY, 0
                self.stats.bytes_emitted += size
                return size

        count = min(size, remaining)
        view[:count] = self._pending[self._offset : self._offset + count]
        self._offset += count
        self.stats.bytes_emitted += count
        return count

    def __iter__(self) -> Iterator[bytes]:
        """Iterate over non-empty output records."""
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        return self

    def __next__(self) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed file.")
        if self._offset < len(self._pending):
            rest = self._pending[self._offset :]
            self._pending, self._offset = EMPTY, 0
            self.stats.bytes_emitted += len(rest)
            return rest
        while (output := self._pull()) is not None:
            if output:
                self.stats.bytes_emitted += len(output)
                return output
        raise StopIteration

    def _pull(self) -> bytes | None:
        """Read records until one passes the chain; None at end of stream."""
        with log_context(self._log_context):
            return self._advance()

    def _advance(self) -> bytes | None:
        while not self._exhausted:
            try:
                record = self._scanner.next_record(self._state.rs)
            except Exception as exc:
                self._fail(exc, None)
                raise
            if record is None:
                self._finish("input")
                return None

            self._state.nr += 1
            self.stats.records_read += 1

            try:
                output, signal = self._chain.apply(record)
            except Exception as exc:
                self._fail(exc, record)
                raise

            if signal is Signal.OMIT:
                self.stats.records_omitted += 1
                continue
            if signal is Signal.EOF:
                self._finish("signal")
                return None

            self.stats.records_emitted += 1
            return output
        return None

    def _finish(self, reason: str) -> None:
        self._exhausted = True
        logger.debug(
            "End of stream",
            reason=reason,
            records=self._state.nr,
            omitted=self.stats.records_omitted,
        )

    def _fail(self, exc: Exception, record: bytes | None) -> None:
        self._exhausted = True
        logger.debug(
            "Pipeline stopped by error",
            error=repr(exc),
            nr=self._state.nr,
            record=preview_record(record) if record is not None else None,
        )

    # ------------------------------------------------------------------
    # Bulk helpers
    # ------------------------------------------------------------------

    def discard(self) -> None:
        """Read everything, dropping the output.

        Useful when filters are run only for their side effects.
        """
        for _ in self:
            pass

    def _collect(self) -> list[bytes]:
        collected: list[bytes] = []
        if self._offset < len(self._pending):
            # Remainder of a record already partly handed out by readinto
            collected.append(self._pending[self._offset :])
            self._pending, self._offset = EMPTY, 0

        def collect(record: bytes) -> bytes:
            collected.append(record)
            return EMPTY

        self.append(collect, "collect")
        self.discard()
        return collected

    def read_all_slice(self) -> list[bytes]:
        """Read all output records into a list of bytes."""
        return self._collect()

    def read_all(self) -> bytes:
        """Read all output into one bytes value."""
        return EMPTY.join(self._collect())

    def read_all_slice_string(self) -> list[str]:
        """Read all output records into a list of str."""
        encoding, errors = self._config.encoding, self._config.errors
        return [record.decode(encoding, errors) for record in self._collect()]

    def read_all_string(self) -> str:
        """Read all output into one str."""
        return self.read_all().decode(self._config.encoding, self._config.errors)


def new_reader(
    source: ByteSource,
    config: PipelineConfig | None = None,
    **options: Any,
) -> LineReader:
    """Create a LineReader, overriding ``config`` fields with ``options``.

    Example:
        >>> new_reader(b"a;b;c", separator=";").read_all_slice()
        [b'a;', b'b;', b'c']
    """
    if options:
        base = config.model_dump() if config else {}
        config = PipelineConfig(**{**base, **options})
    return LineReader(source, config)
