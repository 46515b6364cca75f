"""
Session Scoring
===============

Combo tracking, level rewards and the session progression ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sortpuzzle.sort_core.config_loader import GameConfig, get_config


@dataclass
class LevelOutcome:
    """Record of a completed level."""
    level: int
    moves: int
    undo_count: int
    stars: int
    coins: int
    final_combo: int
    timed: bool = False

    def __repr__(self) -> str:
        return (f"LevelOutcome(level={self.level}, stars={self.stars}, "
                f"coins={self.coins}, moves={self.moves})")


def star_rating(undo_count: int, config: Optional[GameConfig] = None) -> int:
    """3 stars with no undo, 2 with a few, else 1."""
    if config is None:
        config = get_config()
    if undo_count == 0:
        return 3
    if undo_count <= config.session.two_star_max_undos:
        return 2
    return 1


def streak_bonus(win_streak: int, config: Optional[GameConfig] = None) -> int:
    """Bonus coins for consecutive wins: 10 per streak win, capped at 50."""
    if config is None:
        config = get_config()
    if win_streak <= 0:
        return 0
    session = config.session
    return min(win_streak * session.streak_bonus_per_win, session.streak_bonus_cap)


def win_reward(timed: bool, win_streak: int, config: Optional[GameConfig] = None) -> int:
    """
    Coins for winning a level.

    Args:
        timed: True in timed (challenge) mode.
        win_streak: Wins in a row before this one.
    """
    if config is None:
        config = get_config()
    base = config.session.timed_reward if timed else config.session.normal_reward
    return base + streak_bonus(win_streak, config)


def time_limit(level: int, config: Optional[GameConfig] = None) -> int:
    """Seconds on the clock in timed mode; grows with level up to a cap."""
    if config is None:
        config = get_config()
    session = config.session
    return session.base_time_seconds + min(level, session.time_level_cap) * session.time_per_level_seconds


class ComboTracker:
    """
    Tracks quick consecutive moves.

    A move made within the combo window of the previous move extends the
    combo; otherwise the combo restarts at 1. Undo drops it to 0.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize combo tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._window_ms = config.session.combo_window_ms
        self._combo: int = 0
        self._highest: int = 0
        self._last_move_ms: Optional[float] = None

    @property
    def combo(self) -> int:
        """Current combo length."""
        return self._combo

    @property
    def highest(self) -> int:
        """Longest combo since the last reset."""
        return self._highest

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def register_move(self, now_ms: float) -> int:
        """
        Record a move at `now_ms` and return the updated combo.
        """
        if self._last_move_ms is not None and now_ms - self._last_move_ms < self._window_ms:
            self._combo += 1
        else:
            self._combo = 1
        self._last_move_ms = now_ms
        self._highest = max(self._highest, self._combo)
        return self._combo

    def break_combo(self) -> None:
        """Drop the current combo (undo)."""
        self._combo = 0

    def reset(self) -> None:
        """Reset for a new level."""
        self._combo = 0
        self._highest = 0
        self._last_move_ms = None


@dataclass
class SessionStats:
    """Progression ledger across the levels of one session."""
    total_wins: int = 0
    perfect_wins: int = 0
    total_moves: int = 0
    highest_combo: int = 0
    games_played: int = 0
    win_streak: int = 0
    coins_earned: int = 0

    def record_move(self) -> None:
        self.total_moves += 1

    def record_win(self, outcome: LevelOutcome) -> None:
        """Count a completed level; extends the win streak."""
        self.total_wins += 1
        self.games_played += 1
        if outcome.undo_count == 0:
            self.perfect_wins += 1
        self.highest_combo = max(self.highest_combo, outcome.final_combo)
        self.coins_earned += outcome.coins
        self.win_streak += 1

    def record_loss(self) -> None:
        """Timed-out level: played, streak broken."""
        self.games_played += 1
        self.win_streak = 0

    def record_restart(self) -> None:
        """Restarting breaks the streak so levels can't be farmed."""
        self.win_streak = 0

    def to_dict(self) -> dict:
        return {
            "total_wins": self.total_wins,
            "perfect_wins": self.perfect_wins,
            "total_moves": self.total_moves,
            "highest_combo": self.highest_combo,
            "games_played": self.games_played,
            "win_streak": self.win_streak,
            "coins_earned": self.coins_earned,
        }
