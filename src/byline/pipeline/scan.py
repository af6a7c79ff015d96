"""
Record tokenizer.

Splits a raw byte stream into records ending with a single-byte
separator. The separator is kept on each record; the last record of a
stream that does not end with the separator comes out unterminated.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Union

from byline.config import DEFAULT_CHUNK_SIZE
from byline.errors import RecordTooLongError, ValidationError

# Anything with read(n) -> bytes, raw bytes, or an iterable of bytes chunks
ByteSource = Union[Any, bytes, bytearray, Iterable[bytes]]


def split_record(
    data: bytes | bytearray,
    separator: bytes,
    at_eof: bool,
    start: int = 0,
    search_from: int | None = None,
) -> tuple[int, bytes | None]:
    """Find the next record in ``data[start:]``.

    Args:
        data: Buffered input
        separator: One-byte record separator
        at_eof: Whether the source has no more input
        start: Offset of the first unconsumed byte
        search_from: Offset to resume the separator search at; bytes
            before it are known not to hold the separator

    Returns:
        ``(advance, record)``. ``record`` is None when more input is needed
        or when the buffer is empty at end of stream; ``advance`` is the
        number of bytes consumed.
    """
    if at_eof and start >= len(data):
        return 0, None

    if search_from is None or search_from < start:
        search_from = start
    index = data.find(separator, search_from)
    if index >= 0:
        end = index + 1
        return end - start, bytes(data[start:end])

    if at_eof:
        return len(data) - start, bytes(data[start:])

    return 0, None


def _chunk_reader(source: ByteSource) -> Callable[[int], bytes | None]:
    """Adapt a source into ``read(size) -> bytes``, None meaning exhausted."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        pending = [bytes(source)]

        def read_once(size: int) -> bytes | None:
            return pending.pop() if pending else None

        return read_once

    if isinstance(source, str):
        raise ValidationError(
            "Source must produce bytes, not str",
            field="source",
            expected="bytes",
            actual="str",
        )

    read = getattr(source, "read", None)
    if callable(read):

        def read_stream(size: int) -> bytes | None:
            chunk = read(size)
            if isinstance(chunk, str):
                raise ValidationError(
                    "Source must produce bytes; open files in binary mode",
                    field="source",
                    expected="bytes",
                    actual="str",
                )
            return bytes(chunk) if chunk else None

        return read_stream

    if isinstance(source, Iterable):
        iterator: Iterator[Any] = iter(source)

        def read_iter(size: int) -> bytes | None:
            try:
                chunk = next(iterator)
            except StopIteration:
                return None
            if isinstance(chunk, str):
                raise ValidationError(
                    "Source chunks must be bytes, not str",
                    field="source",
                    expected="bytes",
                    actual="str",
                )
            return bytes(chunk)

        return read_iter

    raise ValidationError(
        "Unsupported source type",
        field="source",
        expected="binary file object, bytes, or iterable of bytes",
        actual=type(source).__name__,
    )


class Scanner:
    """Pulls records out of a byte source on demand.

    The scanner owns one growable buffer. Consumed bytes are tracked by an
    offset and only dropped from the front of the buffer when more input is
    appended.

    Example:
        >>> scanner = Scanner(b"foo\\nbar")
        >>> scanner.next_record(b"\\n")
        b'foo\\n'
        >>> scanner.next_record(b"\\n")
        b'bar'
        >>> scanner.next_record(b"\\n") is None
        True
    """

    def __init__(
        self,
        source: ByteSource,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_record_size: int | None = None,
    ) -> None:
        """Initialize the scanner.

        Args:
            source: Binary file object, bytes, or iterable of bytes chunks
            chunk_size: Bytes requested per read from a file object
            max_record_size: Largest unterminated record to buffer
        """
        self._read = _chunk_reader(source)
        self._chunk_size = chunk_size
        self._max_record_size = max_record_size
        self._buffer = bytearray()
        self._start = 0
        self._eof = False

    @property
    def at_eof(self) -> bool:
        """Whether the source is exhausted and the buffer drained."""
        return self._eof and self._start >= len(self._buffer)

    @property
    def buffered(self) -> int:
        """Number of unconsumed bytes held in the buffer."""
        return len(self._buffer) - self._start

    def next_record(self, separator: bytes) -> bytes | None:
        """Return the next record, or None once the input is used up.

        The separator is passed on every call so a change between pulls
        takes effect on the next record.

        Raises:
            RecordTooLongError: If an unterminated record outgrows the limit
        """
        searched = self._start
        while True:
            advance, record = split_record(
                self._buffer, separator, self._eof, self._start, searched
            )
            if record is not None:
                self._start += advance
                return record
            if self._eof:
                return None
            searched = len(self._buffer)
            self._check_size()
            searched -= self._fill()

    def _check_size(self) -> None:
        limit = self._max_record_size
        if limit is not None and self.buffered >= limit:
            raise RecordTooLongError(self.buffered, limit)

    def _fill(self) -> int:
        """Read one more chunk from the source.

        Returns:
            Number of consumed bytes dropped from the front of the buffer
        """
        chunk = self._read(self._chunk_size)
        if chunk is None:
            self._eof = True
            return 0
        dropped = self._start
        if dropped:
            del self._buffer[:dropped]
            self._start = 0
        self._buffer += chunk
        return dropped
