#!/usr/bin/env python3
"""
Basic filtering example.

This example drops comment and blank lines from a file, uppercases the
rest and writes the result to stdout.

Usage:
    python examples/basic_filters.py /etc/hosts
"""

import shutil
import sys

from byline import LineReader


def main() -> None:
    """Run filtering example."""
    path = sys.argv[1] if len(sys.argv) > 1 else "/etc/hosts"

    with open(path, "rb") as source:
        reader = (
            LineReader(source)
            .filter_string(lambda line: not line.lstrip().startswith("#"))
            .filter_pattern(rb"\S")
            .map_string(str.upper)
        )
        shutil.copyfileobj(reader, sys.stdout.buffer)

    print(f"\n{reader.stats.records_emitted} of {reader.stats.records_read} lines kept")


if __name__ == "__main__":
    main()
