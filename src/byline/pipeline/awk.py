"""
AWK-style field splitting.

``awk_filter`` builds a filter that strips the record separator, splits
the line into fields with the field pattern and hands line, fields and a
snapshot of the pipeline counters to a user callback.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

from byline.config import DEFAULT_FIELD_PATTERN, DEFAULT_SEPARATOR
from byline.errors import PipelineError
from byline.pipeline.chain import FilterFunc
from byline.pipeline.signals import Signal


@dataclass(frozen=True)
class AWKVars:
    """Snapshot of pipeline state passed to AWK callbacks.

    Attributes:
        nr: Number of the current record, starting at 1
        nf: Number of fields in the current record
        rs: Record separator
        fs: Field separator pattern
    """

    nr: int
    nf: int
    rs: bytes
    fs: re.Pattern[str]


@dataclass
class PipelineState:
    """Mutable counters and separators owned by one pipeline."""

    nr: int = 0
    nf: int = 0
    rs: bytes = DEFAULT_SEPARATOR
    fs: re.Pattern[str] = field(
        default_factory=lambda: re.compile(DEFAULT_FIELD_PATTERN)
    )

    def snapshot(self) -> AWKVars:
        """Freeze the current values."""
        return AWKVars(nr=self.nr, nf=self.nf, rs=self.rs, fs=self.fs)


AWKCallback = Callable[[str, list[str], AWKVars], Union[str, Signal]]


def split_fields(pattern: re.Pattern[str], line: str) -> list[str]:
    """Split ``line`` on every match of ``pattern``.

    Unlike ``re.split``, text captured by groups in the pattern is not
    returned as extra fields.
    """
    fields = []
    pos = 0
    for match in pattern.finditer(line):
        fields.append(line[pos : match.start()])
        pos = match.end()
    fields.append(line[pos:])
    return fields


def awk_filter(
    state: PipelineState,
    callback: AWKCallback,
    encoding: str = "utf-8",
    errors: str = "surrogateescape",
) -> FilterFunc:
    """Build a filter running ``callback`` on each record's fields.

    The separator and pattern are read from ``state`` on every record, so
    changes made between pulls apply to the next record. When the record
    ended with the separator and the callback's result does not, the
    separator is appended to the result.

    Args:
        state: Pipeline state; ``nf`` is updated on every record
        callback: ``(line, fields, vars) -> str | Signal``
        encoding: Text encoding of records
        errors: Codec error handler

    Returns:
        Filter function for the pipeline's chain
    """

    def apply(record: bytes) -> bytes | Signal:
        rs = state.rs
        # Checked on bytes: a separator >= 0x80 may decode as part of a
        # multi-byte character.
        terminated = record.endswith(rs)
        if terminated:
            record = record[: -len(rs)]
        line = record.decode(encoding, errors)

        fields = split_fields(state.fs, line)
        state.nf = len(fields)

        result = callback(line, fields, state.snapshot())
        if isinstance(result, Signal):
            return result
        if not isinstance(result, str):
            raise PipelineError(
                f"awk function must return str, got {type(result).__name__}",
                operator="awk",
            )

        output = result.encode(encoding, errors)
        if terminated and not output.endswith(rs):
            output += rs
        return output

    return apply
