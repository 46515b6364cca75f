"""
Core Game
=========

Session orchestrator combining level generation, move rules, hints,
combo tracking and the timed-mode clock.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sortpuzzle.sort_core.config_loader import GameConfig, get_config
from sortpuzzle.sort_core.hint_engine import HintEngine
from sortpuzzle.sort_core.layout import Layout, Move
from sortpuzzle.sort_core.level_generator import LevelData, LevelGenerator
from sortpuzzle.sort_core.palette import Palette, get_palette
from sortpuzzle.sort_core.rules import MoveRules
from sortpuzzle.sort_core.scoring import (
    ComboTracker,
    LevelOutcome,
    SessionStats,
    star_rating,
    time_limit,
    win_reward,
)
from sortpuzzle.sort_core.state_snapshot import LayoutSnapshot, SnapshotBuilder


@dataclass
class StepResult:
    """Result of a single pour attempt."""
    snapshot: LayoutSnapshot
    move: Optional[Move]
    valid: bool
    won: bool
    terminated: bool
    truncated: bool
    termination_reason: str
    combo: int
    outcome: Optional[LevelOutcome] = None


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class CoreGame:
    """
    Main puzzle session class.

    Orchestrates:
    - Level generator (RNG)
    - Move rules
    - Undo history
    - Hint engine
    - Combo tracking and session ledger
    - Timed-mode clock

    One step = one pour attempt.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility.
            clock: Millisecond clock used for combos. Monotonic time if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed
        self._clock = clock or _monotonic_ms

        # Initialize subsystems
        self._palette: Palette = get_palette(config)
        self._generator = LevelGenerator(config, seed)
        self._rules = MoveRules(config)
        self._hints = HintEngine(config)
        self._combo = ComboTracker(config)
        self._stats = SessionStats()
        self._snapshot_builder = SnapshotBuilder(config, self._palette)

        # Level state
        self._level_data: Optional[LevelData] = None
        self._level: int = 1
        self._timed: bool = False
        self._layout: Layout = ()
        self._history: List[Layout] = []
        self._moves_used: int = 0
        self._undo_count: int = 0
        self._extra_tubes: int = 0
        self._time_left: float = 0.0
        self._won: bool = False
        self._terminated: bool = False
        self._truncated: bool = False
        self._termination_reason: str = ""
        self._outcome: Optional[LevelOutcome] = None

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def rules(self) -> MoveRules:
        return self._rules

    @property
    def stats(self) -> SessionStats:
        """Session progression ledger."""
        return self._stats

    @property
    def level(self) -> int:
        return self._level

    @property
    def level_data(self) -> Optional[LevelData]:
        """The generated level currently being played."""
        return self._level_data

    @property
    def layout(self) -> Layout:
        """Current layout (immutable)."""
        return self._layout

    @property
    def moves_used(self) -> int:
        return self._moves_used

    @property
    def undo_count(self) -> int:
        return self._undo_count

    @property
    def combo(self) -> int:
        return self._combo.combo

    @property
    def timed(self) -> bool:
        return self._timed

    @property
    def time_left(self) -> float:
        return self._time_left

    @property
    def is_won(self) -> bool:
        return self._won

    @property
    def is_over(self) -> bool:
        """True if the level has ended."""
        return self._terminated or self._truncated

    @property
    def termination_reason(self) -> str:
        """Reason for level end, or empty string."""
        return self._termination_reason

    @property
    def can_undo(self) -> bool:
        return bool(self._history) and not self.is_over

    def reset(
        self,
        level: int = 1,
        seed: Optional[int] = None,
        timed: bool = False
    ) -> LayoutSnapshot:
        """
        Start a level.

        Args:
            level: Level index, >= 1.
            seed: New random seed. Continues the current sequence if None.
            timed: Timed mode scrambles harder and runs a clock.

        Returns:
            Initial snapshot.
        """
        if seed is not None:
            self._seed = seed
            self._generator.reset(seed)

        self._level = level
        self._timed = timed
        self._level_data = self._generator.generate(level, self._multiplier())
        self._start(self._level_data)
        return self._build_snapshot()

    def restart(self) -> LayoutSnapshot:
        """
        Start the current level again with a fresh scramble.

        The next layout comes from the session generator at the current
        difficulty multiplier. Clock, combo and counters reset. Breaks the
        win streak.
        """
        if self._level_data is None:
            raise RuntimeError("restart() called before reset()")
        self._stats.record_restart()
        self._level_data = self._generator.generate(self._level, self._multiplier())
        self._start(self._level_data)
        return self._build_snapshot()

    def _multiplier(self) -> float:
        difficulty = self._config.difficulty
        return difficulty.timed_multiplier if self._timed else difficulty.normal_multiplier

    def _start(self, data: LevelData) -> None:
        self._layout = data.initial_state
        self._history = []
        self._moves_used = 0
        self._undo_count = 0
        self._extra_tubes = 0
        self._time_left = float(time_limit(data.level, self._config)) if self._timed else 0.0
        self._won = False
        self._terminated = False
        self._truncated = False
        self._termination_reason = ""
        self._outcome = None
        self._combo.reset()

    def step(self, source: int, target: int, now_ms: Optional[float] = None) -> StepResult:
        """
        Attempt a pour.

        An invalid pour leaves the layout untouched and reports valid=False.

        Args:
            source: Tube to pour from.
            target: Tube to pour into.
            now_ms: Move timestamp for combos. Game clock if None.

        Returns:
            StepResult with new state and metadata.

        Raises:
            InvalidIndexError: If either index is out of range.
        """
        if self.is_over:
            return self._result(None, valid=False)

        if not self._rules.is_valid_move(self._layout, source, target):
            return self._result(None, valid=False)

        new_layout, move = self._rules.apply_move(self._layout, source, target)
        self._history.append(self._layout)
        self._layout = new_layout
        self._moves_used += 1
        self._stats.record_move()

        if now_ms is None:
            now_ms = self._clock()
        self._combo.register_move(now_ms)

        if self._rules.is_win(self._layout):
            self._finish_win()
        elif self._moves_used >= self._config.caps.max_moves:
            self._truncated = True
            self._termination_reason = "move_cap"

        return self._result(move, valid=True)

    def _finish_win(self) -> None:
        self._won = True
        self._terminated = True
        self._termination_reason = "solved"
        self._outcome = LevelOutcome(
            level=self._level,
            moves=self._moves_used,
            undo_count=self._undo_count,
            stars=star_rating(self._undo_count, self._config),
            coins=win_reward(self._timed, self._stats.win_streak, self._config),
            final_combo=self._combo.combo,
            timed=self._timed,
        )
        self._stats.record_win(self._outcome)

    def _result(self, move: Optional[Move], valid: bool) -> StepResult:
        return StepResult(
            snapshot=self._build_snapshot(),
            move=move,
            valid=valid,
            won=self._won,
            terminated=self._terminated,
            truncated=self._truncated,
            termination_reason=self._termination_reason,
            combo=self._combo.combo,
            outcome=self._outcome,
        )

    def undo(self) -> bool:
        """
        Restore the layout before the last pour.

        Returns:
            True if a pour was undone.
        """
        if not self.can_undo:
            return False
        self._layout = self._history.pop()
        self._undo_count += 1
        self._combo.break_combo()
        return True

    def add_extra_tube(self) -> bool:
        """
        Append an empty tube.

        Returns:
            False if the level is over or the extra-tube cap is reached.
        """
        if self.is_over or self._extra_tubes >= self._config.caps.max_extra_tubes:
            return False
        self._layout = self._layout + ((),)
        self._extra_tubes += 1
        return True

    def hint(self) -> Optional[Move]:
        """Recommended next pour, or None if no hint is available."""
        if self.is_over:
            return None
        return self._hints.best_move(self._layout)

    def advance_clock(self, seconds: float) -> bool:
        """
        Run the timed-mode clock.

        Returns:
            True if time ran out during this call.
        """
        if not self._timed or self.is_over:
            return False
        self._time_left = max(0.0, self._time_left - seconds)
        if self._time_left <= 0.0:
            self._terminated = True
            self._termination_reason = "time_up"
            self._stats.record_loss()
            return True
        return False

    def _build_snapshot(self) -> LayoutSnapshot:
        """Build current state snapshot."""
        return self._snapshot_builder.build(
            self._layout,
            level=self._level,
            moves_used=self._moves_used,
            undo_count=self._undo_count,
            combo=self._combo.combo,
            timed=self._timed,
            time_left=self._time_left,
        )

    def snapshot(self) -> LayoutSnapshot:
        return self._build_snapshot()

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "level": self._level,
            "moves_used": self._moves_used,
            "undo_count": self._undo_count,
            "combo": self._combo.combo,
            "highest_combo": self._combo.highest,
            "won": self._won,
            "terminated_reason": self._termination_reason,
            "time_left": self._time_left,
            "stars": self._outcome.stars if self._outcome else 0,
            "coins": self._outcome.coins if self._outcome else 0,
            "win_streak": self._stats.win_streak,
        }
