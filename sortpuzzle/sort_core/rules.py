"""
Move Rules
==========

Pure predicates and transforms over a layout: pour validity, pour size,
win detection and move application.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from sortpuzzle.sort_core.config_loader import GameConfig, get_config
from sortpuzzle.sort_core.layout import (
    IllegalMoveError,
    Layout,
    Move,
    Unit,
    check_index,
    is_monochromatic,
    top_run,
)


def is_valid_move(
    layout: Sequence[Sequence[Unit]],
    source: int,
    target: int,
    capacity: int
) -> bool:
    """
    Check whether pouring `source` into `target` is allowed.

    Capacity and emptiness are checked before color: an empty target accepts
    anything, otherwise the two top units must match.

    Raises:
        InvalidIndexError: If either index is out of range.
    """
    check_index(layout, source)
    check_index(layout, target)

    if source == target:
        return False

    from_tube = layout[source]
    to_tube = layout[target]

    if not from_tube:
        return False
    if len(to_tube) >= capacity:
        return False
    if not to_tube:
        return True

    return from_tube[-1] == to_tube[-1]


def transfer_count(
    layout: Sequence[Sequence[Unit]],
    source: int,
    target: int,
    capacity: int
) -> int:
    """
    Number of units a pour would move.

    The top run of the source, clamped to the free space of the target.
    """
    check_index(layout, source)
    check_index(layout, target)

    from_tube = layout[source]
    if not from_tube:
        return 0

    space = capacity - len(layout[target])
    return max(0, min(top_run(from_tube), space))


def is_tube_solved(tube: Sequence[Unit], capacity: int) -> bool:
    """A full tube holding a single color."""
    return len(tube) == capacity and is_monochromatic(tube)


def is_win(layout: Sequence[Sequence[Unit]], capacity: int) -> bool:
    """True if every tube is empty or solved."""
    for tube in layout:
        if not tube:
            continue
        if not is_tube_solved(tube, capacity):
            return False
    return True


def legal_moves(layout: Sequence[Sequence[Unit]], capacity: int) -> List[Move]:
    """All valid pours, source-major order, with color and count filled."""
    moves: List[Move] = []
    for i, tube in enumerate(layout):
        if not tube:
            continue
        for j in range(len(layout)):
            if i == j:
                continue
            if is_valid_move(layout, i, j, capacity):
                moves.append(Move(i, j, tube[-1], transfer_count(layout, i, j, capacity)))
    return moves


def apply_move(
    layout: Sequence[Sequence[Unit]],
    source: int,
    target: int,
    capacity: int
) -> Tuple[Layout, Move]:
    """
    Pour `source` into `target`.

    Returns:
        (new_layout, move) tuple. The input layout is left untouched.

    Raises:
        IllegalMoveError: If the pour is not valid.
        InvalidIndexError: If either index is out of range.
    """
    if not is_valid_move(layout, source, target, capacity):
        raise IllegalMoveError(_rejection_reason(layout, source, target, capacity))

    count = transfer_count(layout, source, target, capacity)
    from_tube = tuple(layout[source])
    color = from_tube[-1]

    tubes = [tuple(tube) for tube in layout]
    tubes[source] = from_tube[:-count]
    tubes[target] = tubes[target] + (color,) * count

    return tuple(tubes), Move(source, target, color, count)


def _rejection_reason(
    layout: Sequence[Sequence[Unit]],
    source: int,
    target: int,
    capacity: int
) -> str:
    if source == target:
        return "source and target are the same tube"
    if not layout[source]:
        return f"tube {source} is empty"
    if len(layout[target]) >= capacity:
        return f"tube {target} is full"
    return f"top of tube {source} does not match top of tube {target}"


class MoveRules:
    """
    Move rules bound to the configured tube capacity.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize move rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._capacity = config.capacity

    @property
    def capacity(self) -> int:
        """Units per tube."""
        return self._capacity

    def is_valid_move(self, layout: Sequence[Sequence[Unit]], source: int, target: int) -> bool:
        return is_valid_move(layout, source, target, self._capacity)

    def transfer_count(self, layout: Sequence[Sequence[Unit]], source: int, target: int) -> int:
        return transfer_count(layout, source, target, self._capacity)

    def is_win(self, layout: Sequence[Sequence[Unit]]) -> bool:
        return is_win(layout, self._capacity)

    def is_tube_solved(self, tube: Sequence[Unit]) -> bool:
        return is_tube_solved(tube, self._capacity)

    def legal_moves(self, layout: Sequence[Sequence[Unit]]) -> List[Move]:
        return legal_moves(layout, self._capacity)

    def apply_move(
        self,
        layout: Sequence[Sequence[Unit]],
        source: int,
        target: int
    ) -> Tuple[Layout, Move]:
        return apply_move(layout, source, target, self._capacity)
