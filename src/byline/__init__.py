"""
byline: line-by-line filtering reader for byte streams.

Wraps a byte source, splits it into records on a single-byte separator,
runs each record through a chain of map/filter/AWK-style functions and
exposes the result as another binary stream.
"""
from __future__ import annotations

from byline.config import OverflowPolicy, PipelineConfig, load_config
from byline.errors import (
    BufferTooSmallError,
    BylineError,
    PipelineError,
    RecordTooLongError,
    ValidationError,
)
from byline.pipeline import (
    END_OF_STREAM,
    OMIT_LINE,
    AWKVars,
    LineReader,
    PipelineStats,
    Signal,
    new_reader,
)

__version__ = "0.1.0"

__all__ = [
    # Reader
    "LineReader",
    "PipelineStats",
    "new_reader",
    # Signals
    "END_OF_STREAM",
    "OMIT_LINE",
    "Signal",
    "AWKVars",
    # Config
    "OverflowPolicy",
    "PipelineConfig",
    "load_config",
    # Errors
    "BufferTooSmallError",
    "BylineError",
    "PipelineError",
    "RecordTooLongError",
    "ValidationError",
    # Version
    "__version__",
]
