"""
Bounded Solver
==============

Depth-first search over forward pours, trying the hint heuristic's
favourite pour first. Used to confirm generated levels are solvable and,
when enabled, as a lookahead in front of the greedy hint.

The search returns a solution, not necessarily the shortest one.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from sortpuzzle.sort_core.hint_engine import rank_moves
from sortpuzzle.sort_core.layout import Layout, Move, Unit, as_layout
from sortpuzzle.sort_core.rules import apply_move, is_win

DEFAULT_MAX_STATES = 200_000


def state_key(layout: Sequence[Sequence[Unit]]) -> Tuple:
    """Tube order does not matter for solvability."""
    return tuple(sorted((tuple(tube) for tube in layout), key=repr))


def solve(
    layout: Sequence[Sequence[Unit]],
    capacity: int,
    max_states: int = DEFAULT_MAX_STATES
) -> Optional[List[Move]]:
    """
    Find a sequence of pours that wins.

    Args:
        layout: Starting layout.
        capacity: Units per tube.
        max_states: Give up after visiting this many distinct states.

    Returns:
        Moves in order ([] if already won), or None if no solution was found
        within the budget.
    """
    start = as_layout(layout)
    if is_win(start, capacity):
        return []

    start_key = state_key(start)
    parents: Dict[Tuple, Tuple[Optional[Tuple], Optional[Move]]] = {start_key: (None, None)}
    stack: List[Tuple[Tuple, Layout]] = [(start_key, start)]

    while stack:
        key, current = stack.pop()
        ranked = sorted(rank_moves(current, capacity), key=lambda scored: scored.score)
        # Lowest score pushed first so the best pour is explored next
        for scored in ranked:
            nxt, move = apply_move(current, scored.move.source, scored.move.target, capacity)
            nxt_key = state_key(nxt)
            if nxt_key in parents:
                continue
            parents[nxt_key] = (key, move)
            if is_win(nxt, capacity):
                return _unwind(parents, nxt_key)
            if len(parents) >= max_states:
                return None
            stack.append((nxt_key, nxt))

    return None


def is_solvable(
    layout: Sequence[Sequence[Unit]],
    capacity: int,
    max_states: int = DEFAULT_MAX_STATES
) -> bool:
    """True if `solve` finds a solution within the budget."""
    return solve(layout, capacity, max_states) is not None


def replay(
    layout: Sequence[Sequence[Unit]],
    moves: Sequence[Move],
    capacity: int
) -> Layout:
    """
    Apply a sequence of pours.

    Raises:
        IllegalMoveError: If any pour is not valid at its turn.
    """
    current = as_layout(layout)
    for move in moves:
        current, _ = apply_move(current, move.source, move.target, capacity)
    return current


def _unwind(parents: Dict[Tuple, Tuple[Optional[Tuple], Optional[Move]]], key: Tuple) -> List[Move]:
    path: List[Move] = []
    parent, move = parents[key]
    while move is not None:
        path.append(move)
        parent, move = parents[parent]
    path.reverse()
    return path
