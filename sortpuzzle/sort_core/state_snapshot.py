"""
State Snapshot
==============

Packs a layout into fixed-size numpy arrays for Gymnasium observations.
Includes derived layout features for agent decision-making.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence
import numpy as np

from sortpuzzle.sort_core.config_loader import GameConfig, get_config
from sortpuzzle.sort_core.layout import Layout, Unit, as_layout, is_monochromatic
from sortpuzzle.sort_core.palette import Palette, get_palette
from sortpuzzle.sort_core.rules import is_tube_solved, legal_moves

# Padding value for empty slots and absent tubes
EMPTY_SLOT = -1


@dataclass
class LayoutSnapshot:
    """
    Complete puzzle state snapshot with derived features.

    All arrays are fixed-size with masking for variable tube counts.
    """
    # Core state
    level: int
    tube_count: int
    capacity: int
    moves_used: int
    undo_count: int
    combo: int
    timed: bool
    time_left: float

    # Derived features
    solved_tubes: int                 # Full single-color tubes
    empty_tubes: int
    mixed_tubes: int                  # Tubes holding more than one color
    legal_move_count: int

    # Tube arrays (fixed size, padded)
    tubes: np.ndarray                 # (MAX_TUBES, CAPACITY) int16, bottom first
    tube_fill: np.ndarray             # (MAX_TUBES,) int32
    top_color: np.ndarray             # (MAX_TUBES,) int16
    tube_solved: np.ndarray           # (MAX_TUBES,) bool
    tube_mask: np.ndarray             # (MAX_TUBES,) bool

    # Raw layout (not part of the observation)
    layout: Layout = ()

    def to_obs_dict(self) -> Dict[str, np.ndarray]:
        """Convert to Gymnasium observation dictionary."""
        return {
            # Core state
            "level": np.array(self.level, dtype=np.int32),
            "tube_count": np.array(self.tube_count, dtype=np.int32),
            "capacity": np.array(self.capacity, dtype=np.int32),
            "moves_used": np.array(self.moves_used, dtype=np.int32),
            "undo_count": np.array(self.undo_count, dtype=np.int32),
            "combo": np.array(self.combo, dtype=np.int32),
            "time_left": np.array(self.time_left, dtype=np.float32),

            # Derived
            "solved_tubes": np.array(self.solved_tubes, dtype=np.int32),
            "empty_tubes": np.array(self.empty_tubes, dtype=np.int32),
            "mixed_tubes": np.array(self.mixed_tubes, dtype=np.int32),
            "legal_move_count": np.array(self.legal_move_count, dtype=np.int32),

            # Tube arrays
            "tubes": self.tubes,
            "tube_fill": self.tube_fill,
            "top_color": self.top_color,
            "tube_solved": self.tube_solved,
            "tube_mask": self.tube_mask,
        }


def decode_tubes(tubes: np.ndarray, tube_mask: np.ndarray) -> Layout:
    """Rebuild an integer-colored layout from observation arrays."""
    layout = []
    for row, present in zip(tubes, tube_mask):
        if not present:
            continue
        layout.append(tuple(int(v) for v in row if v != EMPTY_SLOT))
    return tuple(layout)


class SnapshotBuilder:
    """Builds layout snapshots with pre-allocated arrays."""

    def __init__(self, config: Optional[GameConfig] = None, palette: Optional[Palette] = None):
        if config is None:
            config = get_config()
        if palette is None:
            palette = get_palette(config)

        self._config = config
        self._palette = palette
        self._capacity = config.capacity
        self._max_tubes = config.caps.max_tubes

        # Pre-allocate arrays
        self._tubes = np.full((self._max_tubes, self._capacity), EMPTY_SLOT, dtype=np.int16)
        self._tube_fill = np.zeros(self._max_tubes, dtype=np.int32)
        self._top_color = np.full(self._max_tubes, EMPTY_SLOT, dtype=np.int16)
        self._tube_solved = np.zeros(self._max_tubes, dtype=bool)
        self._tube_mask = np.zeros(self._max_tubes, dtype=bool)

    @property
    def max_tubes(self) -> int:
        return self._max_tubes

    def color_id(self, unit: Unit) -> int:
        """Palette index of a unit; integer units are taken as indices."""
        if isinstance(unit, (int, np.integer)):
            return int(unit)
        return self._palette.index_of(unit)

    def build(
        self,
        layout: Sequence[Sequence[Unit]],
        level: int = 0,
        moves_used: int = 0,
        undo_count: int = 0,
        combo: int = 0,
        timed: bool = False,
        time_left: float = 0.0
    ) -> LayoutSnapshot:
        """
        Build a snapshot of a layout.

        Raises:
            ValueError: If the layout has more tubes than caps.max_tubes.
        """
        layout = as_layout(layout)
        if len(layout) > self._max_tubes:
            raise ValueError(
                f"Layout has {len(layout)} tubes, observation holds {self._max_tubes}"
            )

        self._tubes.fill(EMPTY_SLOT)
        self._tube_fill.fill(0)
        self._top_color.fill(EMPTY_SLOT)
        self._tube_solved.fill(False)
        self._tube_mask.fill(False)

        solved = 0
        empty = 0
        mixed = 0
        for i, tube in enumerate(layout):
            self._tube_mask[i] = True
            self._tube_fill[i] = len(tube)
            for slot, unit in enumerate(tube):
                self._tubes[i, slot] = self.color_id(unit)
            if not tube:
                empty += 1
                continue
            self._top_color[i] = self.color_id(tube[-1])
            if is_tube_solved(tube, self._capacity):
                self._tube_solved[i] = True
                solved += 1
            elif not is_monochromatic(tube):
                mixed += 1

        return LayoutSnapshot(
            level=level,
            tube_count=len(layout),
            capacity=self._capacity,
            moves_used=moves_used,
            undo_count=undo_count,
            combo=combo,
            timed=timed,
            time_left=float(time_left),
            solved_tubes=solved,
            empty_tubes=empty,
            mixed_tubes=mixed,
            legal_move_count=len(legal_moves(layout, self._capacity)),
            tubes=self._tubes.copy(),
            tube_fill=self._tube_fill.copy(),
            top_color=self._top_color.copy(),
            tube_solved=self._tube_solved.copy(),
            tube_mask=self._tube_mask.copy(),
            layout=layout,
        )
