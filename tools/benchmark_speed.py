"""
Performance Benchmark
=====================

Measures level generation and hint latency across levels, plus environment
step throughput.

Usage:
    python -m tools.benchmark_speed [--levels L ...] [--repeats R]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from sortpuzzle.sort_core.config_loader import load_config
from sortpuzzle.sort_core.env_gym import SortPuzzleEnv
from sortpuzzle.sort_core.hint_engine import best_move
from sortpuzzle.sort_core.level_generator import LevelGenerator


def benchmark_generation(
    level: int,
    repeats: int = 20,
    seed: int = 42
) -> dict:
    """
    Benchmark level generation and the greedy hint for one level.

    Args:
        level: Level index.
        repeats: Number of levels generated.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    generator = LevelGenerator(config, seed=seed)

    gen_times = []
    hint_times = []
    tube_count = 0
    for _ in range(repeats):
        start = time.perf_counter()
        data = generator.generate(level)
        gen_times.append(time.perf_counter() - start)
        tube_count = data.tube_count

        start = time.perf_counter()
        best_move(data.initial_state, config.capacity)
        hint_times.append(time.perf_counter() - start)

    return {
        "mode": "generate",
        "level": level,
        "tube_count": tube_count,
        "repeats": repeats,
        "ms_per_generate": float(np.mean(gen_times)) * 1000,
        "ms_per_hint": float(np.mean(hint_times)) * 1000,
        "max_ms_per_hint": float(np.max(hint_times)) * 1000,
    }


def benchmark_single_env(
    num_steps: int = 1000,
    seed: int = 42,
    level: int = 10
) -> dict:
    """
    Benchmark single environment performance with random legal pours.

    Args:
        num_steps: Number of steps to run.
        seed: Random seed.
        level: Level played.

    Returns:
        Dict with timing results.
    """
    env = SortPuzzleEnv(level=level)
    rng = np.random.default_rng(seed)

    def random_action() -> int:
        valid = np.flatnonzero(env.action_masks())
        return int(rng.choice(valid)) if len(valid) else 0

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        _, _, terminated, truncated, _ = env.step(random_action())
        if terminated or truncated:
            env.reset()

    # Benchmark
    env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(random_action())
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "single",
        "level": level,
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(
    levels: list = [1, 10, 30, 50, 200, 1000],
    repeats: int = 20,
    steps: int = 500
) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("SORT PUZZLE PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    for level in levels:
        print(f"Benchmarking generation + hint (level={level})...")
        result = benchmark_generation(level, repeats=repeats)
        results.append(result)
        print(f"  Tubes:       {result['tube_count']}")
        print(f"  ms/generate: {result['ms_per_generate']:.3f}")
        print(f"  ms/hint:     {result['ms_per_hint']:.3f} (max {result['max_ms_per_hint']:.3f})")
        print()

    print("Benchmarking SortPuzzleEnv (single)...")
    result = benchmark_single_env(num_steps=steps)
    print(f"  Steps/sec: {result['steps_per_second']:.1f}")
    print(f"  ms/step:   {result['ms_per_step']:.3f}")
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Level':>6} {'Tubes':>6} {'ms/gen':>10} {'ms/hint':>10}")
    print("-" * 36)
    for r in results:
        print(f"{r['level']:>6} {r['tube_count']:>6} {r['ms_per_generate']:>10.3f} {r['ms_per_hint']:>10.3f}")

    results.append(result)
    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark sort puzzle engine performance")
    parser.add_argument("--levels", type=int, nargs="+", default=[1, 10, 30, 50, 200, 1000],
                        help="Levels to benchmark")
    parser.add_argument("--repeats", type=int, default=20, help="Levels generated per benchmark")
    parser.add_argument("--steps", type=int, default=500, help="Environment steps")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer repeats)")

    args = parser.parse_args()

    run_all_benchmarks(
        levels=args.levels,
        repeats=3 if args.quick else args.repeats,
        steps=100 if args.quick else args.steps
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
