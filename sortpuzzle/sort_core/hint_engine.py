"""
Hint Engine
===========

Recommends a single next pour by scoring every legal move with an additive
heuristic and taking the first highest-scoring one.

This is a one-ply greedy pick, not a solver: it answers in constant time on
layouts of a couple dozen tubes and may recommend locally attractive moves
that are globally suboptimal. An optional bounded search can be placed in
front of it through `HintEngine(lookahead_states=...)`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from sortpuzzle.sort_core.config_loader import GameConfig, HintConfig, get_config
from sortpuzzle.sort_core.layout import IllegalMoveError, Move, Unit, is_monochromatic, top_run
from sortpuzzle.sort_core.rules import is_valid_move, is_win, legal_moves, transfer_count


@dataclass(frozen=True)
class HintWeights:
    """Additive heuristic terms."""
    complete_tube_bonus: int = 1000
    stack_bonus_per_unit: int = 50
    reveal_bonus: int = 20
    pure_dump_penalty: int = -50
    empty_dump_penalty: int = -5
    clear_source_bonus: int = 10

    @classmethod
    def from_config(cls, hint: HintConfig) -> "HintWeights":
        return cls(
            complete_tube_bonus=hint.complete_tube_bonus,
            stack_bonus_per_unit=hint.stack_bonus_per_unit,
            reveal_bonus=hint.reveal_bonus,
            pure_dump_penalty=hint.pure_dump_penalty,
            empty_dump_penalty=hint.empty_dump_penalty,
            clear_source_bonus=hint.clear_source_bonus,
        )


DEFAULT_WEIGHTS = HintWeights()


@dataclass(frozen=True)
class ScoredMove:
    """A legal move and its heuristic score."""
    move: Move
    score: int


def score_move(
    layout: Sequence[Sequence[Unit]],
    source: int,
    target: int,
    capacity: int,
    weights: HintWeights = DEFAULT_WEIGHTS
) -> int:
    """
    Heuristic desirability of a valid pour (higher is better).

    Terms:
        complete_tube_bonus   target was pure (or empty) and ends full
        stack_bonus_per_unit  per unit poured onto a non-empty target
        reveal_bonus          whole top run leaves and units remain beneath
        pure_dump_penalty     pure source poured into an empty target
        empty_dump_penalty    any other pour into an empty target
        clear_source_bonus    source ends empty

    Raises:
        IllegalMoveError: If the pour is not valid.
    """
    if not is_valid_move(layout, source, target, capacity):
        raise IllegalMoveError(f"cannot score invalid move {source}->{target}")

    from_tube = layout[source]
    to_tube = layout[target]
    color = from_tube[-1]
    run = top_run(from_tube)
    amount = transfer_count(layout, source, target, capacity)

    score = 0

    # An empty target counts as pure, so a full run moved into it completes too
    if is_monochromatic(to_tube) and len(to_tube) + amount == capacity:
        score += weights.complete_tube_bonus

    if to_tube:
        score += weights.stack_bonus_per_unit * amount

    if amount == run and len(from_tube) > run:
        score += weights.reveal_bonus

    if not to_tube:
        # A pure source would just relocate into the fresh tube
        if all(unit == color for unit in from_tube):
            score += weights.pure_dump_penalty
        else:
            score += weights.empty_dump_penalty

    if len(from_tube) == amount:
        score += weights.clear_source_bonus

    return score


def rank_moves(
    layout: Sequence[Sequence[Unit]],
    capacity: int,
    weights: HintWeights = DEFAULT_WEIGHTS
) -> List[ScoredMove]:
    """Score every legal move, in enumeration order."""
    return [
        ScoredMove(move, score_move(layout, move.source, move.target, capacity, weights))
        for move in legal_moves(layout, capacity)
    ]


def best_move(
    layout: Sequence[Sequence[Unit]],
    capacity: int,
    weights: Optional[HintWeights] = None
) -> Optional[Move]:
    """
    Recommend the best single pour.

    Returns:
        The first maximal-score move, or None when the layout is already won
        or has no legal move.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS
    if is_win(layout, capacity):
        return None

    best: Optional[ScoredMove] = None
    for scored in rank_moves(layout, capacity, weights):
        if best is None or scored.score > best.score:
            best = scored

    return best.move if best is not None else None


class HintEngine:
    """
    Hint engine bound to the configured capacity and weights.

    With `lookahead_states > 0` a bounded depth-first search runs first and
    its opening move is returned; the greedy pick is the fallback whenever
    the search exhausts its budget.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        lookahead_states: Optional[int] = None
    ):
        """
        Initialize hint engine.

        Args:
            config: Game configuration. Uses default if None.
            lookahead_states: Search budget. Config value if None, 0 disables.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._capacity = config.capacity
        self._weights = HintWeights.from_config(config.hint)
        self._lookahead_states = (
            config.hint.lookahead_states if lookahead_states is None else lookahead_states
        )

    @property
    def weights(self) -> HintWeights:
        return self._weights

    @property
    def lookahead_states(self) -> int:
        return self._lookahead_states

    def rank(self, layout: Sequence[Sequence[Unit]]) -> List[ScoredMove]:
        return rank_moves(layout, self._capacity, self._weights)

    def best_move(self, layout: Sequence[Sequence[Unit]]) -> Optional[Move]:
        """Recommend a move, or None when no hint is available."""
        if self._lookahead_states > 0 and not is_win(layout, self._capacity):
            from sortpuzzle.sort_core.solver import solve

            path = solve(layout, self._capacity, max_states=self._lookahead_states)
            if path:
                return path[0]
        return best_move(layout, self._capacity, self._weights)
