"""
Evaluation Harness
==================

Runs agent submissions against the fixed seed bank of levels and reports
solve rate and move counts.

Usage:
    python -m sortpuzzle.evaluation.run_eval --agent contestants/baseline_hint
"""

from __future__ import annotations

import argparse
import importlib.util
import json
import os
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple
import numpy as np

from sortpuzzle.sort_core.env_gym import SortPuzzleEnv


@dataclass
class EvalResult:
    """Result for a single (level, seed) episode."""
    level: int
    seed: int
    solved: bool
    moves_used: int
    invalid_moves: int
    termination_reason: str
    elapsed_time: float
    actions: Optional[List[int]] = None


@dataclass
class EvalSummary:
    """Summary of evaluation across all episodes."""
    solve_rate: float
    mean_moves: float
    std_moves: float
    median_moves: float
    total_invalid: int
    total_time: float
    results: List[EvalResult]


def load_seed_bank(path: Optional[str] = None) -> List[Tuple[int, int]]:
    """
    Load the evaluation seed bank.

    Args:
        path: Path to seed_bank.json. Uses default if None.

    Returns:
        List of (level, seed) pairs.
    """
    if path is None:
        path = os.path.join(os.path.dirname(__file__), "seed_bank.json")

    with open(path, "r") as f:
        data = json.load(f)

    return [(int(entry["level"]), int(entry["seed"])) for entry in data["episodes"]]


def load_agent(agent_path: str) -> Callable:
    """
    Load an agent from a path.

    Args:
        agent_path: Path to agent directory or agent.py file.

    Returns:
        Agent's act function.
    """
    agent_path = Path(agent_path)

    if agent_path.is_dir():
        agent_file = agent_path / "agent.py"
    else:
        agent_file = agent_path

    if not agent_file.exists():
        raise FileNotFoundError(f"Agent file not found: {agent_file}")

    spec = importlib.util.spec_from_file_location("agent_module", agent_file)
    if spec is None or spec.loader is None:
        raise ImportError(f"Failed to load agent module from {agent_file}")

    module = importlib.util.module_from_spec(spec)
    sys.modules["agent_module"] = module
    spec.loader.exec_module(module)

    # Look for SortAgent class or act function
    if hasattr(module, "SortAgent"):
        agent_class = getattr(module, "SortAgent")
        agent_instance = agent_class()
        if hasattr(agent_instance, "act"):
            return agent_instance.act
        raise AttributeError("SortAgent class must have an 'act' method")

    elif hasattr(module, "act"):
        return getattr(module, "act")

    else:
        raise AttributeError(
            f"Agent module must have either 'SortAgent' class with 'act' method "
            f"or standalone 'act' function"
        )


def evaluate_single_episode(
    agent_fn: Callable,
    level: int,
    seed: int,
    record_actions: bool = False,
    verbose: bool = False
) -> EvalResult:
    """
    Evaluate agent on a single level.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        level: Level index.
        seed: Random seed for the level generator.
        record_actions: If True, record all actions for replay.
        verbose: If True, print progress.

    Returns:
        EvalResult for this episode.
    """
    env = SortPuzzleEnv(level=level)

    obs, info = env.reset(seed=seed)

    actions = [] if record_actions else None
    invalid = 0
    start_time = time.time()

    done = False
    while not done:
        action = agent_fn(obs)

        if record_actions:
            actions.append(int(action))

        obs, _, terminated, truncated, info = env.step(action)
        if not info["valid_move"]:
            invalid += 1
        done = terminated or truncated

    elapsed = time.time() - start_time

    result = EvalResult(
        level=level,
        seed=seed,
        solved=bool(info["won"]),
        moves_used=info["moves_used"],
        invalid_moves=invalid,
        termination_reason=info["terminated_reason"],
        elapsed_time=elapsed,
        actions=actions
    )

    env.close()

    if verbose:
        print(f"  Level {level} seed {seed}: solved={result.solved}, "
              f"moves={result.moves_used}, time={elapsed:.2f}s")

    return result


def summarize_results(results: List[EvalResult], total_time: float = 0.0) -> EvalSummary:
    """
    Aggregate episode results.

    Move statistics cover solved episodes only and are NaN when nothing
    was solved.
    """
    solved_moves = [r.moves_used for r in results if r.solved]
    if solved_moves:
        mean_moves = float(np.mean(solved_moves))
        std_moves = float(np.std(solved_moves))
        median_moves = float(np.median(solved_moves))
    else:
        mean_moves = std_moves = median_moves = float("nan")

    return EvalSummary(
        solve_rate=float(np.mean([r.solved for r in results])) if results else 0.0,
        mean_moves=mean_moves,
        std_moves=std_moves,
        median_moves=median_moves,
        total_invalid=int(sum(r.invalid_moves for r in results)),
        total_time=total_time,
        results=results
    )


def _format_moves(value: float) -> str:
    return "n/a" if np.isnan(value) else f"{value:.2f}"


def evaluate_agent(
    agent_fn: Callable,
    episodes: Optional[List[Tuple[int, int]]] = None,
    record_actions: bool = False,
    verbose: bool = True
) -> EvalSummary:
    """
    Evaluate agent on all episodes in the seed bank.

    Args:
        agent_fn: Agent's act function (obs) -> action.
        episodes: List of (level, seed). Uses seed_bank.json if None.
        record_actions: If True, record actions for replay.
        verbose: If True, print progress.

    Returns:
        EvalSummary with aggregate statistics.
    """
    if episodes is None:
        episodes = load_seed_bank()

    if verbose:
        print(f"Evaluating on {len(episodes)} levels...")

    results: List[EvalResult] = []
    total_start = time.time()

    for i, (level, seed) in enumerate(episodes):
        if verbose:
            print(f"[{i+1}/{len(episodes)}] Running level {level} (seed {seed})...")

        result = evaluate_single_episode(
            agent_fn,
            level,
            seed,
            record_actions=record_actions,
            verbose=verbose
        )
        results.append(result)

    total_time = time.time() - total_start

    summary = summarize_results(results, total_time)

    if verbose:
        print()
        print("=" * 50)
        print("EVALUATION SUMMARY")
        print("=" * 50)
        print(f"Levels evaluated: {len(episodes)}")
        print(f"Solve rate:       {summary.solve_rate:.2%}")
        print(f"Mean moves:       {_format_moves(summary.mean_moves)}")
        print(f"Std deviation:    {_format_moves(summary.std_moves)}")
        print(f"Median moves:     {_format_moves(summary.median_moves)}")
        print(f"Invalid moves:    {summary.total_invalid}")
        print(f"Total time:       {total_time:.2f}s")
        print("=" * 50)

    return summary


def save_results(
    summary: EvalSummary,
    agent_name: str,
    output_path: str
) -> None:
    """Save evaluation results to JSON."""
    data = {
        "agent": agent_name,
        "timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        "solve_rate": summary.solve_rate,
        "mean_moves": summary.mean_moves,
        "std_moves": summary.std_moves,
        "median_moves": summary.median_moves,
        "total_invalid": summary.total_invalid,
        "total_time": summary.total_time,
        "results": [
            {
                "level": r.level,
                "seed": r.seed,
                "solved": r.solved,
                "moves_used": r.moves_used,
                "invalid_moves": r.invalid_moves,
                "termination_reason": r.termination_reason,
                "elapsed_time": r.elapsed_time
            }
            for r in summary.results
        ]
    }

    with open(output_path, "w") as f:
        json.dump(data, f, indent=2)

    print(f"Results saved to {output_path}")


def main():
    parser = argparse.ArgumentParser(description="Evaluate a sort puzzle agent")
    parser.add_argument(
        "--agent",
        type=str,
        required=True,
        help="Path to agent directory or agent.py file"
    )
    parser.add_argument(
        "--seeds",
        type=str,
        default=None,
        help="Path to seed bank JSON (uses default if not specified)"
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Path to save results JSON"
    )
    parser.add_argument(
        "--record",
        action="store_true",
        help="Record actions for replay"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Reduce output verbosity"
    )

    args = parser.parse_args()

    print(f"Loading agent from {args.agent}...")
    try:
        agent_fn = load_agent(args.agent)
    except (FileNotFoundError, ImportError, AttributeError) as e:
        print(f"Error loading agent: {e}")
        return 1

    episodes = None
    if args.seeds:
        episodes = load_seed_bank(args.seeds)

    summary = evaluate_agent(
        agent_fn,
        episodes=episodes,
        record_actions=args.record,
        verbose=not args.quiet
    )

    if args.output:
        agent_name = Path(args.agent).name
        save_results(summary, agent_name, args.output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
