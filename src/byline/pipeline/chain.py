"""
Filter chain.

Every filter is normalized to one shape, ``FilterFunc``: it takes the
current record as bytes and returns the new record, or a ``Signal``.
The adapter constructors below build such functions from the callbacks
users actually write (bytes or str, plain or fallible, predicates,
regular expressions).
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from typing import Union

from byline.errors import PipelineError
from byline.pipeline.signals import Signal

FilterFunc = Callable[[bytes], Union[bytes, Signal]]

EMPTY = b""


def _as_bytes(value: object, operator: str) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    raise PipelineError(
        f"{operator} function must return bytes, got {type(value).__name__}",
        operator=operator,
    )


def _as_str(value: object, operator: str) -> str:
    if isinstance(value, str):
        return value
    raise PipelineError(
        f"{operator} function must return str, got {type(value).__name__}",
        operator=operator,
    )


def map_bytes(fn: Callable[[bytes], bytes]) -> FilterFunc:
    """Filter from an infallible bytes transform."""

    def apply(record: bytes) -> bytes:
        return _as_bytes(fn(record), "map")

    return apply


def map_bytes_err(fn: Callable[[bytes], bytes | Signal]) -> FilterFunc:
    """Filter from a bytes transform that may return a Signal."""

    def apply(record: bytes) -> bytes | Signal:
        result = fn(record)
        if isinstance(result, Signal):
            return result
        return _as_bytes(result, "map_err")

    return apply


def map_string(
    fn: Callable[[str], str],
    encoding: str = "utf-8",
    errors: str = "surrogateescape",
) -> FilterFunc:
    """Filter from an infallible str transform."""

    def apply(record: bytes) -> bytes:
        result = _as_str(fn(record.decode(encoding, errors)), "map_string")
        return result.encode(encoding, errors)

    return apply


def map_string_err(
    fn: Callable[[str], str | Signal],
    encoding: str = "utf-8",
    errors: str = "surrogateescape",
) -> FilterFunc:
    """Filter from a str transform that may return a Signal."""

    def apply(record: bytes) -> bytes | Signal:
        result = fn(record.decode(encoding, errors))
        if isinstance(result, Signal):
            return result
        return _as_str(result, "map_string_err").encode(encoding, errors)

    return apply


def grep(predicate: Callable[[bytes], bool]) -> FilterFunc:
    """Filter keeping records for which ``predicate`` is true."""

    def apply(record: bytes) -> bytes | Signal:
        if predicate(record):
            return record
        return Signal.OMIT

    return apply


def grep_string(
    predicate: Callable[[str], bool],
    encoding: str = "utf-8",
    errors: str = "surrogateescape",
) -> FilterFunc:
    """Filter keeping records whose decoded text satisfies ``predicate``."""
    return grep(lambda record: predicate(record.decode(encoding, errors)))


def grep_pattern(
    pattern: str | bytes | re.Pattern[str] | re.Pattern[bytes],
    encoding: str = "utf-8",
    errors: str = "surrogateescape",
) -> FilterFunc:
    """Filter keeping records in which ``pattern`` matches anywhere.

    Bytes patterns search the raw record; text patterns search the
    decoded record.
    """
    compiled = re.compile(pattern) if isinstance(pattern, (str, bytes)) else pattern
    if isinstance(compiled.pattern, bytes):
        return grep(lambda record: compiled.search(record) is not None)
    return grep_string(
        lambda line: compiled.search(line) is not None, encoding, errors
    )


class FilterChain:
    """Ordered list of filter functions applied to each record.

    Filters run in the order they were appended. A filter returning a
    Signal stops the chain for that record; an exception raised by a
    filter propagates out of ``apply``.

    Example:
        >>> chain = FilterChain().append(map_bytes(bytes.upper))
        >>> chain.apply(b"abc\\n")
        (b'ABC\\n', None)
    """

    def __init__(self, filters: list[FilterFunc] | None = None) -> None:
        self._filters: list[FilterFunc] = list(filters or [])

    def append(self, fn: FilterFunc) -> FilterChain:
        """Add a filter to the end of the chain.

        Returns:
            This chain, for further appends
        """
        self._filters.append(fn)
        return self

    def apply(self, record: bytes) -> tuple[bytes, Signal | None]:
        """Run ``record`` through every filter.

        Returns:
            ``(record, None)`` when all filters ran, or ``(b"", signal)``
            when a filter returned a Signal
        """
        for fn in self._filters:
            result = fn(record)
            if isinstance(result, Signal):
                return EMPTY, result
            record = result if type(result) is bytes else _as_bytes(result, "filter")
        return record, None

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[FilterFunc]:
        return iter(self._filters)
