#!/usr/bin/env python3
"""Benchmark per-frame cost of the scene's particle fields.

Builds every effect preset at a range of particle counts and times
``ParticleField.recompute`` over many consecutive frames.

Usage:
    # Full benchmark
    python scripts/benchmark_particle_fields.py

    # Save baseline
    python scripts/benchmark_particle_fields.py --save before.json

    # Compare with baseline
    python scripts/benchmark_particle_fields.py --compare before.json
"""

# ruff: noqa: E402  # Allow path setup before importing project modules

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any

# Add the project root to Python path so running as a script works when executed
# directly via ``python scripts/benchmark_particle_fields.py``
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import numpy as np

from primordia.effects.field import ParticleField
from primordia.effects.presets import EFFECT_PRESETS

FRAME_TIME = 1 / 60


class ParticleFieldBenchmark:
    """Collects recompute timings per preset and particle count."""

    def __init__(self) -> None:
        self.results: dict[str, Any] = {}

    def run_preset(self, name: str, count: int, num_frames: int) -> dict[str, Any]:
        cfg = replace(EFFECT_PRESETS[name].build(), count=count)
        field = ParticleField(cfg, rng=np.random.default_rng(0))

        frame_times = np.empty(num_frames, dtype=np.float64)
        start = time.perf_counter()
        for frame in range(num_frames):
            frame_start = time.perf_counter()
            field.recompute(frame * FRAME_TIME)
            frame_times[frame] = time.perf_counter() - frame_start
        total_time = time.perf_counter() - start

        result = {
            "count": count,
            "frames": num_frames,
            "total_time": total_time,
            "avg_frame_time": float(frame_times.mean()),
            "p99_frame_time": float(np.percentile(frame_times, 99)),
        }
        print(
            f"  {name:<16} {count:>7} particles: "
            f"{result['avg_frame_time'] * 1_000_000:8.1f}µs avg, "
            f"{result['p99_frame_time'] * 1_000_000:8.1f}µs p99"
        )
        return result

    def save_results(self, filename: str) -> None:
        """Save collected benchmark results to ``filename``."""

        with Path(filename).open("w") as f:
            json.dump(self.results, f, indent=2)
        print(f"Results saved to {filename}")

    def compare_with_baseline(self, baseline_file: str) -> None:
        """Compare current results with a baseline JSON file."""

        try:
            with Path(baseline_file).open() as f:
                baseline = json.load(f)
        except FileNotFoundError:
            print(f"Baseline file {baseline_file} not found.")
            return
        except json.JSONDecodeError as exc:
            print(f"Error reading baseline {baseline_file}: {exc}")
            return

        print(f"\nComparison with baseline ({baseline_file}):")
        print("=" * 60)

        for test_name, current in self.results.items():
            if test_name not in baseline:
                continue
            current_time = current["avg_frame_time"]
            baseline_time = baseline[test_name]["avg_frame_time"]
            if baseline_time <= 0 or current_time <= 0:
                continue
            speedup = baseline_time / current_time
            percentage = ((current_time - baseline_time) / baseline_time) * 100
            if speedup > 1:
                verdict = f"{speedup:.2f}x faster"
            else:
                verdict = f"{1 / speedup:.2f}x slower"
            print(f"{test_name}: {verdict} ({percentage:+.1f}%)")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Particle field recompute benchmark")
    parser.add_argument("--save", type=str, help="Save results to file")
    parser.add_argument("--compare", type=str, help="Compare with baseline file")
    parser.add_argument(
        "--counts",
        type=int,
        nargs="+",
        default=[100, 1_000, 10_000, 100_000],
        help="Particle counts to test",
    )
    parser.add_argument(
        "--frames", type=int, default=1000, help="Frames to recompute per run"
    )
    args = parser.parse_args(argv)

    benchmark = ParticleFieldBenchmark()

    print("Particle Field Benchmark")
    print("=" * 55)
    for name in EFFECT_PRESETS:
        for count in args.counts:
            key = f"{name}@{count}"
            benchmark.results[key] = benchmark.run_preset(name, count, args.frames)
    print()

    budget_ms = FRAME_TIME * 1000
    worst = max(benchmark.results.items(), key=lambda kv: kv[1]["avg_frame_time"])
    print("=== SUMMARY ===")
    print(
        f"Slowest run: {worst[0]} at {worst[1]['avg_frame_time'] * 1000:.3f}ms "
        f"({worst[1]['avg_frame_time'] * 1000 / budget_ms:.1%} of a 60 FPS frame)"
    )

    if args.save:
        benchmark.save_results(args.save)

    if args.compare:
        benchmark.compare_with_baseline(args.compare)

    print("\nBenchmark complete!")


if __name__ == "__main__":
    main()
