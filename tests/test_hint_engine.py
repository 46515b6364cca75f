"""
Tests for the hint heuristic and the bounded solver.
"""

import time

import pytest

from sortpuzzle.sort_core.config_loader import load_config
from sortpuzzle.sort_core.hint_engine import (
    DEFAULT_WEIGHTS,
    HintEngine,
    HintWeights,
    best_move,
    rank_moves,
    score_move,
)
from sortpuzzle.sort_core.layout import IllegalMoveError, Move
from sortpuzzle.sort_core.level_generator import generate_level
from sortpuzzle.sort_core.rng import make_rng
from sortpuzzle.sort_core.rules import apply_move, is_win, legal_moves
from sortpuzzle.sort_core.solver import is_solvable, replay, solve, state_key

R, B, G = "R", "B", "G"


@pytest.fixture
def config():
    return load_config()


class TestScoreMove:
    """Test individual heuristic terms."""

    def test_completing_moves_outscore_dumps(self):
        """Both pours that finish the red tube beat moving into the empty one."""
        layout = [[R, R, R], [R], []]

        onto_three = score_move(layout, 1, 0, 4)
        onto_one = score_move(layout, 0, 1, 4)
        dump = score_move(layout, 0, 2, 4)

        # stack 50, complete 1000, clear 10
        assert onto_three == 1060
        # stack 150, complete 1000, clear 10
        assert onto_one == 1160
        # pure dump -50, clear 10
        assert dump == -40
        assert min(onto_three, onto_one) > max(dump, score_move(layout, 1, 2, 4))

    def test_reveal_bonus(self):
        """Moving the whole top run off something beneath it earns a bonus."""
        layout = [[G, R], [R], []]

        # stack 50 + reveal 20
        assert score_move(layout, 0, 1, 4) == 70

    def test_partial_run_gets_no_reveal(self):
        layout = [[G, R, R], [B, B, R], []]

        # one unit fits: stack 50 only
        assert score_move(layout, 0, 1, 4) == 50

    def test_mixed_source_into_empty(self):
        layout = [[G, R], []]

        # empty dump -5, reveal 20
        assert score_move(layout, 0, 1, 4) == 15

    def test_clear_source_bonus(self):
        layout = [[R], [R]]

        # stack 50, clear 10
        assert score_move(layout, 0, 1, 4) == 60

    def test_full_run_into_empty_tube_completes(self):
        """An empty tube counts as pure, so a whole run poured into it completes."""
        layout = [[R, R, R, R], []]

        # complete 1000, pure dump -50, clear 10
        assert score_move(layout, 0, 1, 4) == 960

    def test_partial_run_into_empty_tube_does_not_complete(self):
        layout = [[R, R, R], []]

        # pure dump -50, clear 10
        assert score_move(layout, 0, 1, 4) == -40

    def test_custom_weights(self):
        weights = HintWeights(stack_bonus_per_unit=1, clear_source_bonus=0)

        assert score_move([[R], [R]], 0, 1, 4, weights) == 1

    def test_invalid_move_raises(self):
        with pytest.raises(IllegalMoveError):
            score_move([[R], [B]], 0, 1, 4)


class TestBestMove:
    """Test the greedy pick."""

    def test_finishes_a_tube(self):
        """The hint completes a tube rather than using the empty tube."""
        layout = [[R, R, R], [R], []]

        move = best_move(layout, 4)

        assert move is not None
        assert move.target != 2
        new_layout, _ = apply_move(layout, move.source, move.target, 4)
        assert (R, R, R, R) in new_layout

    def test_ties_go_to_first(self):
        """Equal scores resolve to the first move in enumeration order."""
        layout = [[R, B], [R, B], []]
        scores = {s.move.as_pair(): s.score for s in rank_moves(layout, 4)}
        assert scores[(0, 1)] == scores[(1, 0)]

        assert best_move(layout, 4).as_pair() == (0, 1)

    def test_prefers_completing_into_empty_tube(self):
        """Relocating a full run scores above uncovering single units."""
        layout = [[R, R, R, R], [], [B, G], [G, B]]

        assert best_move(layout, 4).as_pair() == (0, 1)

    def test_none_when_no_legal_move(self):
        assert best_move([[R, B], [B, R]], 2) is None

    def test_none_when_already_won(self):
        assert best_move([[R, R, R, R], [], [B, B, B, B]], 4) is None

    def test_returns_legal_move(self, config):
        layout = generate_level(10, rng=make_rng(3), config=config).initial_state

        move = best_move(layout, config.capacity)

        assert move in legal_moves(layout, config.capacity)

    def test_fast_on_largest_levels(self, config):
        """A single hint on the biggest layouts stays interactive."""
        layout = generate_level(1000, rng=make_rng(0), config=config).initial_state

        start = time.perf_counter()
        best_move(layout, config.capacity)

        assert time.perf_counter() - start < 1.0

    def test_rank_moves_follows_legal_moves(self):
        layout = [[R, B], [B], [], [R]]

        assert [s.move for s in rank_moves(layout, 4)] == legal_moves(layout, 4)


class TestHintEngine:
    """Test the config-bound engine."""

    def test_default_matches_greedy(self, config):
        engine = HintEngine(config)
        layout = generate_level(5, rng=make_rng(8), config=config).initial_state

        assert engine.lookahead_states == 0
        assert engine.weights == DEFAULT_WEIGHTS
        assert engine.best_move(layout) == best_move(layout, config.capacity)

    def test_lookahead_move_keeps_level_solvable(self, config):
        engine = HintEngine(config, lookahead_states=50_000)
        layout = generate_level(1, rng=make_rng(2), config=config).initial_state

        move = engine.best_move(layout)

        assert move is not None
        new_layout, _ = apply_move(layout, move.source, move.target, config.capacity)
        assert is_solvable(new_layout, config.capacity)

    def test_lookahead_none_when_won(self, config):
        engine = HintEngine(config, lookahead_states=100)

        assert engine.best_move([[R, R, R, R], []]) is None

    def test_rank(self, config):
        engine = HintEngine(config)
        layout = [[R, R, R], [R], []]

        assert max(engine.rank(layout), key=lambda s: s.score).move == Move(0, 1, R, 3)


class TestSolver:
    """Test the bounded search."""

    def test_already_won(self):
        assert solve([[R, R], []], 2) == []

    def test_simple_solution(self):
        layout = [[R, B], [B, R], []]

        path = solve(layout, 2)

        assert path is not None
        assert is_win(replay(layout, path, 2), 2)

    def test_unsolvable(self):
        assert solve([[R, B], [B, R]], 2) is None
        assert not is_solvable([[R, B], [B, R]], 2)

    def test_budget_exhaustion_returns_none(self, config):
        layout = generate_level(30, rng=make_rng(1), config=config).initial_state

        assert solve(layout, config.capacity, max_states=5) is None

    def test_state_key_ignores_tube_order(self):
        assert state_key([[R], [B, B], []]) == state_key([[], [B, B], [R]])
