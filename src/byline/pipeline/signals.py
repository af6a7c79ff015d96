"""
Control signals returned by filter functions.

A signal is not an error: it tells the pipeline what to do with the
current record. Real failures are raised as exceptions and propagate to
the reader's caller unchanged.
"""

from __future__ import annotations

from enum import Enum


class Signal(Enum):
    """Control value a fallible filter may return instead of a record."""

    OMIT = "omit"
    """Drop the current record and continue with the next one"""

    EOF = "eof"
    """Stop the pipeline cleanly, as if the input had ended"""

    def __repr__(self) -> str:
        return f"Signal.{self.name}"


OMIT_LINE = Signal.OMIT
END_OF_STREAM = Signal.EOF
