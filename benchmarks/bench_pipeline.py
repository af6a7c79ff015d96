#!/usr/bin/env python3
"""
Pipeline performance benchmarks.

Measures throughput and latency of the tokenizer, filter chain and reader.
"""

import io
import time
from typing import Any

from byline import LineReader, PipelineConfig
from byline.pipeline import FilterChain, Scanner, map_bytes, map_string


def generate_log_lines(count: int) -> bytes:
    """Generate mock access-log lines for benchmarking."""
    return b"".join(
        f"10.0.0.{i % 255} GET /items/{i} {200 if i % 7 else 404} {i * 13 % 5000}\n".encode()
        for i in range(count)
    )


def _result(name: str, iterations: int, records: int, elapsed: float) -> dict[str, Any]:
    return {
        "name": name,
        "iterations": iterations,
        "records": records,
        "elapsed_seconds": elapsed,
        "throughput_rps": records / elapsed if records else 0,
        "latency_us": (elapsed / records) * 1_000_000 if records else 0,
    }


def benchmark_scanner(iterations: int = 100_000) -> dict[str, Any]:
    """Benchmark raw record splitting."""
    scanner = Scanner(io.BytesIO(generate_log_lines(iterations)))

    start = time.perf_counter()
    records = 0
    while scanner.next_record(b"\n") is not None:
        records += 1
    elapsed = time.perf_counter() - start

    return _result("Scanner", iterations, records, elapsed)


def benchmark_scanner_small_chunks(iterations: int = 100_000) -> dict[str, Any]:
    """Benchmark splitting when the source delivers 512-byte reads."""
    scanner = Scanner(io.BytesIO(generate_log_lines(iterations)), chunk_size=512)

    start = time.perf_counter()
    records = 0
    while scanner.next_record(b"\n") is not None:
        records += 1
    elapsed = time.perf_counter() - start

    return _result("Scanner(chunk_size=512)", iterations, records, elapsed)


def benchmark_chain(iterations: int = 100_000) -> dict[str, Any]:
    """Benchmark a bytes and a str map in sequence."""
    chain = FilterChain().append(map_bytes(bytes.upper)).append(map_string(str.strip))
    lines = generate_log_lines(iterations).splitlines(keepends=True)

    start = time.perf_counter()
    for line in lines:
        chain.apply(line)
    elapsed = time.perf_counter() - start

    return _result("FilterChain", iterations, len(lines), elapsed)


def benchmark_awk(iterations: int = 100_000) -> dict[str, Any]:
    """Benchmark AWK mode summing a field."""
    total = 0

    def add_size(line: str, fields: list[str], vars: Any) -> str:
        nonlocal total
        total += int(fields[4])
        return line

    reader = LineReader(generate_log_lines(iterations)).awk(add_size)

    start = time.perf_counter()
    reader.discard()
    elapsed = time.perf_counter() - start

    return _result("AWK", iterations, reader.stats.records_read, elapsed)


def benchmark_full_pipeline(iterations: int = 100_000) -> dict[str, Any]:
    """Benchmark grep + awk + buffered line reads."""
    config = PipelineConfig(name="bench")
    reader = (
        LineReader(io.BytesIO(generate_log_lines(iterations)), config)
        .filter_pattern(rb" 404 ")
        .awk(lambda line, fields, vars: f"{vars.nr} {fields[2]}")
    )

    start = time.perf_counter()
    records = sum(1 for _ in io.BufferedReader(reader))
    elapsed = time.perf_counter() - start

    return _result("FullPipeline", iterations, records, elapsed)


def run_benchmarks() -> None:
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("Pipeline Benchmarks")
    print("=" * 60)
    print()

    benchmarks = [
        benchmark_scanner,
        benchmark_scanner_small_chunks,
        benchmark_chain,
        benchmark_awk,
        benchmark_full_pipeline,
    ]

    for bench in benchmarks:
        result = bench()
        print(f"{result['name']}:")
        print(f"  Iterations: {result['iterations']}")
        print(f"  Records: {result['records']}")
        print(f"  Elapsed: {result['elapsed_seconds']:.4f}s")
        print(f"  Throughput: {result['throughput_rps']:.0f} records/sec")
        print(f"  Latency: {result['latency_us']:.2f} µs/record")
        print()


if __name__ == "__main__":
    run_benchmarks()
