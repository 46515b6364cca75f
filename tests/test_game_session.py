"""
Tests for combos, rewards and the CoreGame session flow.
"""

from dataclasses import replace

import pytest

from sortpuzzle.sort_core.config_loader import load_config
from sortpuzzle.sort_core.game import CoreGame
from sortpuzzle.sort_core.level_generator import LevelGenerator, generate_level
from sortpuzzle.sort_core.rng import make_rng
from sortpuzzle.sort_core.scoring import (
    ComboTracker,
    LevelOutcome,
    SessionStats,
    star_rating,
    streak_bonus,
    time_limit,
    win_reward,
)
from sortpuzzle.sort_core.solver import solve


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def game(config, clock):
    game = CoreGame(config=config, seed=3, clock=clock)
    game.reset(level=1, seed=3)
    return game


def play_to_win(game, step_ms=1000):
    """Play a solver path, one move every step_ms. Returns the last result."""
    path = solve(game.layout, game.config.capacity)
    assert path
    result = None
    now = 0.0
    for move in path:
        now += step_ms
        result = game.step(move.source, move.target, now_ms=now)
        assert result.valid
    return result


class TestComboTracker:
    """Test quick-move combos."""

    def test_first_move_starts_combo(self, config):
        combo = ComboTracker(config)

        assert combo.register_move(0) == 1

    def test_moves_within_window_extend(self, config):
        combo = ComboTracker(config)
        combo.register_move(0)
        combo.register_move(1000)

        assert combo.register_move(3400) == 3
        assert combo.highest == 3

    def test_slow_move_restarts(self, config):
        combo = ComboTracker(config)
        combo.register_move(0)
        combo.register_move(1000)

        assert combo.register_move(4000) == 1
        assert combo.highest == 2

    def test_window_is_exclusive(self, config):
        combo = ComboTracker(config)
        combo.register_move(0)

        assert combo.register_move(combo.window_ms) == 1

    def test_break_and_reset(self, config):
        combo = ComboTracker(config)
        combo.register_move(0)
        combo.register_move(10)

        combo.break_combo()
        assert combo.combo == 0
        assert combo.highest == 2

        combo.reset()
        assert combo.highest == 0


class TestRewards:
    """Test stars, coins and the timed clock."""

    @pytest.mark.parametrize("undos,stars", [(0, 3), (1, 2), (2, 2), (3, 1), (40, 1)])
    def test_star_rating(self, config, undos, stars):
        assert star_rating(undos, config) == stars

    @pytest.mark.parametrize("streak,bonus", [(0, 0), (1, 10), (4, 40), (5, 50), (12, 50)])
    def test_streak_bonus(self, config, streak, bonus):
        assert streak_bonus(streak, config) == bonus

    def test_win_reward(self, config):
        assert win_reward(False, 0, config) == 50
        assert win_reward(True, 0, config) == 100
        assert win_reward(True, 2, config) == 120
        assert win_reward(False, 10, config) == 100

    def test_time_limit(self, config):
        assert time_limit(1, config) == 63
        assert time_limit(50, config) == 210
        assert time_limit(500, config) == 210


class TestSessionStats:
    """Test the progression ledger."""

    def _outcome(self, undos=0, combo=4, coins=50):
        return LevelOutcome(level=1, moves=10, undo_count=undos, stars=3,
                            coins=coins, final_combo=combo)

    def test_win_updates_ledger(self):
        stats = SessionStats()

        stats.record_win(self._outcome())
        stats.record_win(self._outcome(undos=2, combo=7, coins=60))

        assert stats.total_wins == 2
        assert stats.games_played == 2
        assert stats.perfect_wins == 1
        assert stats.highest_combo == 7
        assert stats.coins_earned == 110
        assert stats.win_streak == 2

    def test_loss_and_restart_break_streak(self):
        stats = SessionStats()
        stats.record_win(self._outcome())

        stats.record_restart()
        assert stats.win_streak == 0
        assert stats.games_played == 1

        stats.record_win(self._outcome())
        stats.record_loss()
        assert stats.win_streak == 0
        assert stats.games_played == 3

    def test_to_dict(self):
        stats = SessionStats()
        stats.record_move()

        assert stats.to_dict()["total_moves"] == 1
        assert set(stats.to_dict()) == {
            "total_wins", "perfect_wins", "total_moves", "highest_combo",
            "games_played", "win_streak", "coins_earned",
        }


class TestCoreGame:
    """Test the session orchestrator."""

    def test_reset_generates_seeded_level(self, game, config):
        expected = generate_level(1, 1.0, rng=make_rng(3), config=config).initial_state

        assert game.layout == expected
        assert game.level_data.initial_state == expected
        assert game.moves_used == 0
        assert not game.is_over

    def test_invalid_pour_leaves_state(self, game):
        before = game.layout

        result = game.step(0, 0)

        assert not result.valid
        assert game.layout == before
        assert game.moves_used == 0

    def test_out_of_range_pour_raises(self, game):
        with pytest.raises(IndexError):
            game.step(0, 99)

    def test_valid_pour_and_undo(self, game):
        before = game.layout
        move = game.rules.legal_moves(before)[0]

        result = game.step(move.source, move.target, now_ms=0)

        assert result.valid
        assert result.move == move
        assert game.moves_used == 1
        assert game.combo == 1
        assert game.can_undo

        assert game.undo()
        assert game.layout == before
        assert game.undo_count == 1
        assert game.combo == 0
        assert not game.undo()

    def test_combo_uses_clock(self, game, clock):
        first = game.rules.legal_moves(game.layout)[0]
        game.step(first.source, first.target)
        clock.now = 500.0
        second = game.rules.legal_moves(game.layout)[0]

        result = game.step(second.source, second.target)

        assert result.combo == 2

    def test_win_flow(self, game):
        result = play_to_win(game)

        assert result.won
        assert result.terminated
        assert result.termination_reason == "solved"
        assert result.outcome.stars == 3
        assert result.outcome.coins == 50
        assert result.outcome.final_combo == result.outcome.moves
        assert game.stats.total_wins == 1
        assert game.stats.win_streak == 1
        assert game.hint() is None
        assert not game.step(0, 1).valid
        assert not game.can_undo

    def test_streak_bonus_on_next_win(self, game):
        play_to_win(game)
        game.reset(level=2)

        result = play_to_win(game)

        assert result.outcome.coins == 60
        assert game.stats.win_streak == 2

    def test_info_after_win(self, game):
        play_to_win(game)
        info = game.get_info()

        assert info["won"]
        assert info["stars"] == 3
        assert info["terminated_reason"] == "solved"
        assert info["highest_combo"] >= 1

    def test_restart_rescrambles_and_breaks_streak(self, game, config):
        play_to_win(game)
        game.reset(level=2, seed=4)
        start = game.layout
        move = game.rules.legal_moves(start)[0]
        game.step(move.source, move.target)

        game.restart()

        expected = LevelGenerator(config, seed=4)
        multiplier = config.difficulty.normal_multiplier
        assert expected.generate(2, multiplier).initial_state == start
        assert game.layout == expected.generate(2, multiplier).initial_state
        assert game.level == 2
        assert game.level_data.level == 2
        assert game.moves_used == 0
        assert not game.can_undo
        assert game.stats.win_streak == 0

    def test_timed_restart_resets_clock(self, config, clock):
        game = CoreGame(config=config, seed=1, clock=clock)
        game.reset(level=1, seed=1, timed=True)
        game.advance_clock(30)

        game.restart()

        assert game.timed
        assert game.time_left == 63.0
        assert game.level_data.shuffle_moves == 36
        assert game.combo == 0

    def test_restart_before_reset(self, config):
        with pytest.raises(RuntimeError):
            CoreGame(config=config).restart()

    def test_extra_tube(self, game, config):
        count = len(game.layout)

        for i in range(config.caps.max_extra_tubes):
            assert game.add_extra_tube()
            assert game.layout[-1] == ()
            assert len(game.layout) == count + i + 1

        assert not game.add_extra_tube()
        assert game.snapshot().tube_count == count + config.caps.max_extra_tubes

    def test_hint_is_legal(self, game):
        assert game.hint() in game.rules.legal_moves(game.layout)

    def test_timed_mode(self, config, clock):
        game = CoreGame(config=config, seed=1, clock=clock)
        game.reset(level=1, seed=1, timed=True)

        assert game.timed
        assert game.time_left == 63.0
        assert game.level_data.shuffle_moves == 36

        assert not game.advance_clock(60)
        assert game.advance_clock(5)
        assert game.is_over
        assert not game.is_won
        assert game.termination_reason == "time_up"
        assert game.stats.games_played == 1

    def test_clock_ignored_in_normal_mode(self, game):
        assert not game.advance_clock(10_000)
        assert not game.is_over

    def test_move_cap_truncates(self, config):
        capped = replace(config, caps=replace(config.caps, max_moves=5))
        game = CoreGame(config=capped, seed=6)
        game.reset(level=20, seed=6)

        for _ in range(5):
            move = game.rules.legal_moves(game.layout)[0]
            result = game.step(move.source, move.target, now_ms=0)

        assert result.truncated
        assert not result.won
        assert result.termination_reason == "move_cap"
        assert not game.step(move.target, move.source).valid
