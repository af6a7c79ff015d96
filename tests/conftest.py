"""Root pytest fixtures for byline tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator

import pytest


class ChunkedStream(io.RawIOBase):
    """Binary stream that returns at most ``chunk`` bytes per read."""

    def __init__(self, data: bytes, chunk: int) -> None:
        super().__init__()
        self._data = data
        self._chunk = chunk
        self._pos = 0
        self.reads = 0

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        self.reads += 1
        size = min(len(buffer), self._chunk, len(self._data) - self._pos)
        buffer[:size] = self._data[self._pos : self._pos + size]
        self._pos += size
        return size


class FailingStream(io.RawIOBase):
    """Binary stream that yields ``data`` and then raises ``error``."""

    def __init__(self, data: bytes, error: Exception) -> None:
        super().__init__()
        self._data = data
        self._error = error

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if not self._data:
            raise self._error
        size = min(len(buffer), len(self._data))
        buffer[:size] = self._data[:size]
        self._data = self._data[size:]
        return size


@pytest.fixture
def chunked() -> Callable[[bytes, int], ChunkedStream]:
    """Factory for streams delivering data in small chunks."""
    return ChunkedStream


@pytest.fixture
def failing() -> Callable[[bytes, Exception], FailingStream]:
    """Factory for streams that fail after their data."""
    return FailingStream


@pytest.fixture
def sample_lines() -> bytes:
    """Three newline-separated records, the last one unterminated."""
    return b"foo\nbar\nbaz"


@pytest.fixture
def chunk_iter() -> Callable[..., Iterator[bytes]]:
    """Build an iterator over the given byte chunks."""

    def build(*chunks: bytes) -> Iterator[bytes]:
        yield from chunks

    return build
