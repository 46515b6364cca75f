"""
Level Generator
===============

Builds the starting layout for level N by starting from the solved layout
and scrambling it with single-unit reverse moves.

Every reverse move lifts the top unit of a non-empty tube onto any other
tube with free space, so the scramble never leaves the set of layouts
reachable from the solved one.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sortpuzzle.sort_core.config_loader import GameConfig, get_config
from sortpuzzle.sort_core.layout import Layout, Move, Unit
from sortpuzzle.sort_core.rng import RandomSource, make_rng


@dataclass(frozen=True)
class LevelParameters:
    """Sizes derived from the level index. Recomputed, never stored."""
    level: int
    color_count: int
    empty_tubes: int

    @property
    def tube_count(self) -> int:
        return self.color_count + self.empty_tubes

    @classmethod
    def for_level(
        cls,
        level: int,
        config: Optional[GameConfig] = None,
        palette_size: Optional[int] = None
    ) -> "LevelParameters":
        """
        Derive color and tube counts for a level.

        color_count = min(level // 3 + 3, max_colors, palette_size); one extra
        empty tube once the color count passes the threshold (12).

        Args:
            level: Level index.
            config: Game configuration. Uses default if None.
            palette_size: Number of available colors. Config palette size if None.
        """
        if config is None:
            config = get_config()
        if palette_size is None:
            palette_size = len(config.palette)

        levels = config.levels
        max_colors = min(levels.max_colors, palette_size)
        color_count = min(level // levels.levels_per_color + levels.base_colors, max_colors)

        empty_tubes = levels.base_empty_tubes
        if color_count > levels.extra_empty_tube_threshold:
            empty_tubes += levels.extra_empty_tubes

        return cls(level=level, color_count=color_count, empty_tubes=empty_tubes)


@dataclass(frozen=True)
class LevelData:
    """A generated level."""
    level: int
    tube_count: int
    colors: Tuple[Unit, ...]
    initial_state: Layout
    shuffle_log: Tuple[Move, ...] = field(default=(), repr=False)

    @property
    def shuffle_moves(self) -> int:
        """Number of reverse moves applied."""
        return len(self.shuffle_log)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form with fresh lists."""
        return {
            "id": self.level,
            "tubeCount": self.tube_count,
            "colors": list(self.colors),
            "initialState": [list(tube) for tube in self.initial_state],
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def shuffle_move_budget(
    level: int,
    difficulty_multiplier: float = 1.0,
    config: Optional[GameConfig] = None
) -> int:
    """
    Reverse moves applied to a level: (20 + 4 * level) * multiplier, rounded,
    capped at max_shuffle_moves (1000).
    """
    if config is None:
        config = get_config()

    levels = config.levels
    raw = (levels.shuffle_base_moves + level * levels.shuffle_moves_per_level) * difficulty_multiplier
    return min(_round_half_up(raw), levels.max_shuffle_moves)


def solved_layout(colors: Sequence[Unit], empty_tubes: int, capacity: int) -> List[List[Unit]]:
    """One full tube per color followed by empty tubes."""
    tubes: List[List[Unit]] = [[color] * capacity for color in colors]
    tubes.extend([] for _ in range(empty_tubes))
    return tubes


def reverse_move_candidates(tubes: Sequence[Sequence[Unit]], capacity: int) -> List[Tuple[int, int]]:
    """Every (src, dst) with src non-empty and dst not full, source-major."""
    candidates: List[Tuple[int, int]] = []
    tube_count = len(tubes)
    for src in range(tube_count):
        if not tubes[src]:
            continue
        for dst in range(tube_count):
            if src == dst:
                continue
            if len(tubes[dst]) >= capacity:
                continue
            candidates.append((src, dst))
    return candidates


def generate_level(
    level: int,
    difficulty_multiplier: float = 1.0,
    rng: Optional[RandomSource] = None,
    config: Optional[GameConfig] = None,
    palette: Optional[Sequence[Unit]] = None
) -> LevelData:
    """
    Generate a solvable level.

    Args:
        level: Level index, >= 1.
        difficulty_multiplier: Scales the number of reverse moves (> 0).
        rng: Source of random picks. Entropy-seeded `random.Random` if None.
        config: Game configuration. Uses default if None.
        palette: Ordered color tokens. Config palette names if None.

    Returns:
        LevelData with an immutable initial layout and the reverse-move log.

    Raises:
        ValueError: If level < 1 or difficulty_multiplier <= 0.
    """
    if config is None:
        config = get_config()
    if rng is None:
        rng = make_rng()
    if palette is None:
        palette = tuple(color.name for color in config.palette)

    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    if difficulty_multiplier <= 0:
        raise ValueError(f"difficulty_multiplier must be positive, got {difficulty_multiplier}")

    capacity = config.capacity
    params = LevelParameters.for_level(level, config, palette_size=len(palette))
    colors = tuple(palette[:params.color_count])

    tubes = solved_layout(colors, params.empty_tubes, capacity)
    log: List[Move] = []

    for _ in range(shuffle_move_budget(level, difficulty_multiplier, config)):
        candidates = reverse_move_candidates(tubes, capacity)
        if not candidates:
            break
        src, dst = candidates[rng.randrange(len(candidates))]
        color = tubes[src].pop()
        tubes[dst].append(color)
        log.append(Move(src, dst, color, 1))

    return LevelData(
        level=level,
        tube_count=len(tubes),
        colors=colors,
        initial_state=tuple(tuple(tube) for tube in tubes),
        shuffle_log=tuple(log),
    )


class LevelGenerator:
    """
    Level generator bound to a config and a random source.

    Reuse one instance to draw a reproducible series of levels from a seed.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None
    ):
        """
        Initialize generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
            rng: Explicit random source; overrides `seed`.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else make_rng(seed)

    def parameters(self, level: int) -> LevelParameters:
        return LevelParameters.for_level(level, self._config)

    def generate(self, level: int, difficulty_multiplier: float = 1.0) -> LevelData:
        """Generate the next level from this generator's random source."""
        return generate_level(level, difficulty_multiplier, rng=self._rng, config=self._config)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the random source.

        Args:
            seed: New random seed. Entropy if None.
        """
        self._rng = make_rng(seed)
