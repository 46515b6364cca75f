"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the sort puzzle.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from sortpuzzle.sort_core.config_loader import GameConfig, load_config
from sortpuzzle.sort_core.game import CoreGame
from sortpuzzle.sort_core.state_snapshot import LayoutSnapshot

# Observation keys produced from derived layout features
LAYOUT_FEATURE_KEYS = ("solved_tubes", "empty_tubes", "mixed_tubes", "legal_move_count")


def encode_action(source: int, target: int, max_tubes: int) -> int:
    """Flatten a (source, target) pair into a Discrete action."""
    return source * max_tubes + target


def decode_action(action: int, max_tubes: int) -> Tuple[int, int]:
    """Inverse of encode_action."""
    return divmod(int(action), max_tubes)


class SortPuzzleEnv(gym.Env):
    """
    Color sort puzzle as a Gymnasium environment.

    Action Space:
        Discrete(max_tubes * max_tubes)
        Action a pours tube a // max_tubes into tube a % max_tubes.

    Observation Space:
        Dict containing padded tube arrays and derived features.

    Reward:
        Always 0.0. Agents must compute their own reward from the info dict.

    Info:
        Contains won, moves_used, combo, valid_move, terminated_reason, etc.
    """

    metadata = {
        "render_modes": ["ansi"],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        level: int = 1,
        timed: bool = False,
        render_mode: Optional[str] = None,
        debug: bool = False,
    ):
        """
        Initialize sort puzzle environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            level: Level played after reset (overridable via reset options).
            timed: Timed mode (harder scramble, clock in info).
            render_mode: "ansi" for a text layout, None for headless.
            debug: If True, enables verbose debug output for agent development.
        """
        super().__init__()

        # Load config
        self._config = load_config(config_path)

        self.render_mode = render_mode
        self._level = level
        self._timed = timed
        self._debug = debug
        self._max_tubes = self._config.caps.max_tubes

        # Initialize game
        self._game = CoreGame(config=self._config)

        # Define action space
        self.action_space = spaces.Discrete(self._max_tubes * self._max_tubes)

        # Define observation space
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] SortPuzzleEnv initialized")
            print(f"[DEBUG]   Capacity: {self._config.capacity}")
            print(f"[DEBUG]   Max tubes: {self._max_tubes}")
            print(f"[DEBUG]   Level: {self._level} (timed={self._timed})")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_tubes = self._max_tubes
        capacity = self._config.capacity
        num_colors = self._config.num_colors
        max_moves = self._config.caps.max_moves

        obs_dict = {
            # Core state
            "level": spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "tube_count": spaces.Box(low=0, high=max_tubes, shape=(), dtype=np.int32),
            "capacity": spaces.Box(low=capacity, high=capacity, shape=(), dtype=np.int32),
            "moves_used": spaces.Box(low=0, high=max_moves, shape=(), dtype=np.int32),
            "undo_count": spaces.Box(low=0, high=max_moves, shape=(), dtype=np.int32),
            "combo": spaces.Box(low=0, high=max_moves, shape=(), dtype=np.int32),
            "time_left": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),

            # Tube arrays
            "tubes": spaces.Box(low=-1, high=num_colors - 1, shape=(max_tubes, capacity), dtype=np.int16),
            "tube_fill": spaces.Box(low=0, high=capacity, shape=(max_tubes,), dtype=np.int32),
            "top_color": spaces.Box(low=-1, high=num_colors - 1, shape=(max_tubes,), dtype=np.int16),
            "tube_solved": spaces.MultiBinary(max_tubes),
            "tube_mask": spaces.MultiBinary(max_tubes),
        }

        if self._config.observation.include_layout_features:
            for key in LAYOUT_FEATURE_KEYS:
                high = max_tubes * max_tubes if key == "legal_move_count" else max_tubes
                obs_dict[key] = spaces.Box(low=0, high=high, shape=(), dtype=np.int32)

        return spaces.Dict(obs_dict)

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: May contain "level" and "timed" overrides.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        options = options or {}
        self._level = int(options.get("level", self._level))
        self._timed = bool(options.get("timed", self._timed))

        snapshot = self._game.reset(level=self._level, seed=seed, timed=self._timed)

        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["valid_move"] = True

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Actions naming a tube that does not exist count as invalid pours.

        Args:
            action: Flattened (source, target) pair.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())

        source, target = decode_action(action, self._max_tubes)
        tube_count = len(self._game.layout)

        if source < tube_count and target < tube_count:
            result = self._game.step(source, target)
            snapshot = result.snapshot
            valid = result.valid
        else:
            snapshot = self._game.snapshot()
            valid = False

        terminated = self._game.is_over and not self._game_truncated()
        truncated = self._game_truncated()

        # Stuck layouts cannot progress
        if not terminated and not truncated and snapshot.legal_move_count == 0:
            truncated = True

        obs = self._snapshot_to_obs(snapshot)
        reward = 0.0

        info = self._game.get_info()
        info["valid_move"] = valid
        if truncated and not self._game.is_over:
            info["terminated_reason"] = "no_moves"

        if self._debug:
            print(f"[DEBUG] Step: {source}->{target}, valid={valid}, "
                  f"moves={info['moves_used']}, combo={info['combo']}")
            if terminated:
                print(f"[DEBUG] TERMINATED: {info.get('terminated_reason', 'unknown')}")

        return obs, reward, terminated, truncated, info

    def _game_truncated(self) -> bool:
        return self._game.is_over and self._game.termination_reason == "move_cap"

    def _snapshot_to_obs(self, snapshot: LayoutSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        obs = snapshot.to_obs_dict()
        if not self._config.observation.include_layout_features:
            for key in LAYOUT_FEATURE_KEYS:
                obs.pop(key, None)
        return obs

    def action_masks(self) -> np.ndarray:
        """Boolean mask of currently valid actions."""
        mask = np.zeros(self._max_tubes * self._max_tubes, dtype=bool)
        for move in self._game.rules.legal_moves(self._game.layout):
            mask[encode_action(move.source, move.target, self._max_tubes)] = True
        return mask

    def render(self) -> Optional[str]:
        """
        Render the current layout.

        Returns:
            Text layout if render_mode is "ansi", None otherwise.
        """
        if self.render_mode == "ansi":
            from sortpuzzle.sort_core.layout import format_layout
            return format_layout(self._game.layout)
        return None

    def close(self) -> None:
        """Clean up resources."""
        pass

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
