"""
Pipeline layer - line-oriented stream processing.

This module implements the record pipeline:
- Scanner: Splits raw bytes into separator-terminated records
- FilterChain: Applies filter functions to each record in order
- awk_filter: Splits records into fields for an AWK-style callback
- LineReader: Exposes the pipeline as a readable binary stream
"""

from byline.pipeline.awk import (
    AWKCallback,
    AWKVars,
    PipelineState,
    awk_filter,
    split_fields,
)
from byline.pipeline.chain import (
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
from byline.pipeline.reader import LineReader, PipelineStats, new_reader
from byline.pipeline.scan import ByteSource, Scanner, split_record
from byline.pipeline.signals import END_OF_STREAM, OMIT_LINE, Signal

__all__ = [
    # Signals
    "END_OF_STREAM",
    "OMIT_LINE",
    "Signal",
    # Tokenizer
    "ByteSource",
    "Scanner",
    "split_record",
    # Filter chain
    "FilterChain",
    "FilterFunc",
    "grep",
    "grep_pattern",
    "grep_string",
    "map_bytes",
    "map_bytes_err",
    "map_string",
    "map_string_err",
    # AWK mode
    "AWKCallback",
    "AWKVars",
    "PipelineState",
    "awk_filter",
    "split_fields",
    # Reader
    "LineReader",
    "PipelineStats",
    "new_reader",
]
