#!/usr/bin/env python3
"""
AWK mode example.

Sums the size column of an access log and stops at the first line marked
END, the way ``awk '$1 == "END" {exit} {sum += $3}'`` would.

Usage:
    python examples/awk_mode.py
"""

from byline import END_OF_STREAM, OMIT_LINE, AWKVars, Signal, new_reader

ACCESS_LOG = b"""\
# path status size
/index.html 200 5120
/missing 404 0
/about.html 200 2048
END
/never-read 200 9999
"""


def main() -> None:
    """Run AWK example."""
    total = 0

    def add_size(line: str, fields: list[str], vars: AWKVars) -> str | Signal:
        nonlocal total
        if fields[0] == "END":
            return END_OF_STREAM
        if fields[0].startswith("#"):
            return OMIT_LINE
        total += int(fields[2])
        return f"{vars.nr}: {fields[0]} ({vars.nf} fields)"

    reader = new_reader(ACCESS_LOG, name="access").awk(add_size)
    for line in reader.read_all_slice_string():
        print(line, end="")

    print(f"total size: {total}")


if __name__ == "__main__":
    main()
