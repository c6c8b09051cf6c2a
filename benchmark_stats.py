#!/usr/bin/env python3
"""Benchmark script to measure runtime and memory usage of compute_window_scores."""

import argparse
import io
import random
import tempfile
import time
import tracemalloc
from pathlib import Path

from gffwindow import WindowOptions, compute_window_scores


def format_bytes(bytes_val: int) -> str:
    """Format bytes to human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if bytes_val < 1024.0:
            return f"{bytes_val:.2f} {unit}"
        bytes_val /= 1024.0
    return f"{bytes_val:.2f} TB"


def write_methylation_gff(path: Path, sequences: int, sites: int, seed: int = 1) -> None:
    """Write per-site methylation calls, one block per sequence."""
    rng = random.Random(seed)
    with open(path, "w") as handle:
        for chrom in range(1, sequences + 1):
            position = 0
            for _ in range(sites):
                position += rng.randint(1, 20)
                c = rng.randint(0, 10)
                t = rng.randint(0, 10)
                handle.write(f"chr{chrom}\tbench\tCG\t{position}\t{position}\t.\t+\t.\tc={c}; t={t}\n")


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--sequences", type=int, default=5)
    parser.add_argument("--sites", type=int, default=200000, help="Sites per sequence")
    parser.add_argument("--width", type=int, default=50)
    parser.add_argument("--step", type=int, default=50)
    parser.add_argument("--no-sort", action="store_true")
    args = parser.parse_args()

    print("=" * 80)
    print("Benchmarking compute_window_scores")
    print("=" * 80)

    with tempfile.TemporaryDirectory() as tmpdir:
        gff_path = Path(tmpdir) / "bench.gff"
        write_methylation_gff(gff_path, args.sequences, args.sites)
        print(f"GFF Source: {gff_path} ({format_bytes(gff_path.stat().st_size)})")
        print()

        options = WindowOptions(width=args.width, step=args.step, no_sort=args.no_sort)
        output = io.StringIO()

        # Start memory tracing
        tracemalloc.start()

        # Start time measurement
        start_time = time.time()

        written = compute_window_scores(str(gff_path), options, output)

        end_time = time.time()
        current, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    elapsed = end_time - start_time
    print("=" * 80)
    print("BENCHMARK RESULTS")
    print("=" * 80)
    print(f"Windows written: {written}")
    print(f"Runtime: {elapsed:.2f} seconds")
    print(f"Current memory: {format_bytes(current)}")
    print(f"Peak memory: {format_bytes(peak)}")
    print(f"Output size: {format_bytes(len(output.getvalue()))}")
    print("=" * 80)


if __name__ == "__main__":
    main()
