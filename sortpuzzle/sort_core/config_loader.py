"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple, Optional

import yaml


@dataclass(frozen=True)
class TubeConfig:
    """Tube geometry."""
    capacity: int                # Units a single tube can hold


@dataclass(frozen=True)
class ColorConfig:
    """Configuration for a single color token."""
    id: int
    name: str
    hex: str
    rgb: Tuple[int, int, int]


@dataclass(frozen=True)
class LevelConfig:
    """Level difficulty curve."""
    base_colors: int
    levels_per_color: int
    max_colors: int
    base_empty_tubes: int
    extra_empty_tube_threshold: int
    extra_empty_tubes: int
    shuffle_base_moves: int
    shuffle_moves_per_level: int
    max_shuffle_moves: int


@dataclass(frozen=True)
class DifficultyConfig:
    """Reverse-move multipliers per game mode."""
    normal_multiplier: float
    timed_multiplier: float


@dataclass(frozen=True)
class HintConfig:
    """Hint heuristic weights."""
    complete_tube_bonus: int
    stack_bonus_per_unit: int
    reveal_bonus: int
    pure_dump_penalty: int
    empty_dump_penalty: int
    clear_source_bonus: int
    lookahead_states: int


@dataclass(frozen=True)
class SessionConfig:
    """Combo window, timed-mode clock and level rewards."""
    combo_window_ms: int
    base_time_seconds: int
    time_per_level_seconds: int
    time_level_cap: int
    normal_reward: int
    timed_reward: int
    streak_bonus_per_win: int
    streak_bonus_cap: int
    two_star_max_undos: int


@dataclass(frozen=True)
class CapsConfig:
    """Episode limits."""
    max_moves: int
    max_tubes: int
    max_extra_tubes: int


@dataclass(frozen=True)
class ObservationConfig:
    """Observation space parameters."""
    include_layout_features: bool


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    tubes: TubeConfig
    palette: Tuple[ColorConfig, ...]
    levels: LevelConfig
    difficulty: DifficultyConfig
    hint: HintConfig
    session: SessionConfig
    caps: CapsConfig
    observation: ObservationConfig

    @property
    def capacity(self) -> int:
        """Units per tube."""
        return self.tubes.capacity

    @property
    def num_colors(self) -> int:
        """Total number of color tokens in the palette."""
        return len(self.palette)

    def get_color(self, color_id: int) -> ColorConfig:
        """Get color config by ID."""
        if 0 <= color_id < len(self.palette):
            return self.palette[color_id]
        raise ValueError(f"Invalid color ID: {color_id}")


def _parse_rgb(rgb_data: List) -> Tuple[int, int, int]:
    """Parse RGB color from YAML."""
    if len(rgb_data) != 3:
        raise ValueError(f"Color must have 3 values [R, G, B], got {rgb_data}")
    return (int(rgb_data[0]), int(rgb_data[1]), int(rgb_data[2]))


def _parse_color(color_id: int, color_data: dict) -> ColorConfig:
    """Parse a single palette entry from YAML."""
    return ColorConfig(
        id=color_id,
        name=str(color_data["name"]),
        hex=str(color_data.get("hex", "")),
        rgb=_parse_rgb(color_data.get("rgb", [0, 0, 0]))
    )


def _max_tube_count(levels: LevelConfig) -> int:
    """Largest tube count any level can produce."""
    empty = levels.base_empty_tubes
    if levels.max_colors > levels.extra_empty_tube_threshold:
        empty += levels.extra_empty_tubes
    return levels.max_colors + empty


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.tubes.capacity < 1:
        raise ValueError(f"tubes.capacity must be >= 1, got {config.tubes.capacity}")

    # Palette tokens are compared by name, so they must be distinct
    names = [color.name for color in config.palette]
    if len(set(names)) != len(names):
        raise ValueError(f"Palette color names must be distinct, got {names}")

    levels = config.levels
    if levels.max_colors > len(config.palette):
        raise ValueError(
            f"levels.max_colors ({levels.max_colors}) exceeds "
            f"palette size ({len(config.palette)})"
        )

    if levels.base_colors < 1 or levels.base_colors > levels.max_colors:
        raise ValueError(
            f"levels.base_colors ({levels.base_colors}) must be in "
            f"[1, {levels.max_colors}]"
        )

    if levels.levels_per_color < 1:
        raise ValueError(f"levels.levels_per_color must be >= 1, got {levels.levels_per_color}")

    if levels.max_shuffle_moves < 0:
        raise ValueError(f"levels.max_shuffle_moves must be >= 0, got {levels.max_shuffle_moves}")

    if config.difficulty.normal_multiplier <= 0 or config.difficulty.timed_multiplier <= 0:
        raise ValueError("difficulty multipliers must be positive")

    # Observation arrays must fit the largest level plus session extra tubes
    needed = _max_tube_count(levels) + config.caps.max_extra_tubes
    if config.caps.max_tubes < needed:
        raise ValueError(
            f"caps.max_tubes ({config.caps.max_tubes}) must be at least "
            f"{needed} (largest level plus max_extra_tubes)"
        )


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    tubes = TubeConfig(capacity=int(raw["tubes"]["capacity"]))

    palette = tuple(
        _parse_color(i, color_data)
        for i, color_data in enumerate(raw["palette"])
    )

    levels_data = raw["levels"]
    levels = LevelConfig(
        base_colors=int(levels_data.get("base_colors", 3)),
        levels_per_color=int(levels_data.get("levels_per_color", 3)),
        max_colors=int(levels_data.get("max_colors", len(palette))),
        base_empty_tubes=int(levels_data.get("base_empty_tubes", 2)),
        extra_empty_tube_threshold=int(levels_data.get("extra_empty_tube_threshold", 12)),
        extra_empty_tubes=int(levels_data.get("extra_empty_tubes", 1)),
        shuffle_base_moves=int(levels_data.get("shuffle_base_moves", 20)),
        shuffle_moves_per_level=int(levels_data.get("shuffle_moves_per_level", 4)),
        max_shuffle_moves=int(levels_data.get("max_shuffle_moves", 1000))
    )

    difficulty_data = raw.get("difficulty", {})
    difficulty = DifficultyConfig(
        normal_multiplier=float(difficulty_data.get("normal_multiplier", 1.0)),
        timed_multiplier=float(difficulty_data.get("timed_multiplier", 1.5))
    )

    hint_data = raw.get("hint", {})
    hint = HintConfig(
        complete_tube_bonus=int(hint_data.get("complete_tube_bonus", 1000)),
        stack_bonus_per_unit=int(hint_data.get("stack_bonus_per_unit", 50)),
        reveal_bonus=int(hint_data.get("reveal_bonus", 20)),
        pure_dump_penalty=int(hint_data.get("pure_dump_penalty", -50)),
        empty_dump_penalty=int(hint_data.get("empty_dump_penalty", -5)),
        clear_source_bonus=int(hint_data.get("clear_source_bonus", 10)),
        lookahead_states=int(hint_data.get("lookahead_states", 0))
    )

    session_data = raw.get("session", {})
    session = SessionConfig(
        combo_window_ms=int(session_data.get("combo_window_ms", 2500)),
        base_time_seconds=int(session_data.get("base_time_seconds", 60)),
        time_per_level_seconds=int(session_data.get("time_per_level_seconds", 3)),
        time_level_cap=int(session_data.get("time_level_cap", 50)),
        normal_reward=int(session_data.get("normal_reward", 50)),
        timed_reward=int(session_data.get("timed_reward", 100)),
        streak_bonus_per_win=int(session_data.get("streak_bonus_per_win", 10)),
        streak_bonus_cap=int(session_data.get("streak_bonus_cap", 50)),
        two_star_max_undos=int(session_data.get("two_star_max_undos", 2))
    )

    caps_data = raw["caps"]
    caps = CapsConfig(
        max_moves=int(caps_data["max_moves"]),
        max_tubes=int(caps_data.get("max_tubes", 24)),
        max_extra_tubes=int(caps_data.get("max_extra_tubes", 3))
    )

    obs_data = raw.get("observation", {})
    observation = ObservationConfig(
        include_layout_features=bool(obs_data.get("include_layout_features", True))
    )

    config = GameConfig(
        tubes=tubes,
        palette=palette,
        levels=levels,
        difficulty=difficulty,
        hint=hint,
        session=session,
        caps=caps,
        observation=observation
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
