"""
Layout Model
============

Immutable tube layouts and the move record shared by every engine module.

A container is a tuple of color units ordered bottom to top; a layout is a
tuple of containers. Operations never mutate a layout, they return a new one.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Hashable, Sequence, Tuple

Unit = Hashable
Container = Tuple[Unit, ...]
Layout = Tuple[Container, ...]


class InvalidIndexError(IndexError):
    """Tube index outside [0, tube_count)."""

    def __init__(self, index: int, tube_count: int):
        super().__init__(f"Tube index {index} out of range [0, {tube_count})")
        self.index = index
        self.tube_count = tube_count


class IllegalMoveError(ValueError):
    """A pour was requested that the move rules reject."""


@dataclass(frozen=True)
class Move:
    """
    A pour of the top same-colored run from one tube to another.

    `color` and `count` are None/0 when only the tube pair is known.
    """
    source: int
    target: int
    color: Unit = None
    count: int = 0

    def as_pair(self) -> Tuple[int, int]:
        return (self.source, self.target)

    def to_dict(self) -> Dict[str, int]:
        return {"from": self.source, "to": self.target}

    def __repr__(self) -> str:
        if self.count:
            return f"Move({self.source}->{self.target}, {self.count}x{self.color})"
        return f"Move({self.source}->{self.target})"


def as_layout(tubes: Sequence[Sequence[Unit]]) -> Layout:
    """Copy any nested sequence into an immutable layout."""
    return tuple(tuple(tube) for tube in tubes)


def check_index(layout: Sequence[Sequence[Unit]], index: int) -> None:
    """Raise InvalidIndexError unless 0 <= index < len(layout)."""
    if not 0 <= index < len(layout):
        raise InvalidIndexError(index, len(layout))


def top_run(container: Sequence[Unit]) -> int:
    """Length of the run of equal units at the top of a container."""
    if not container:
        return 0
    color = container[-1]
    count = 0
    for unit in reversed(container):
        if unit != color:
            break
        count += 1
    return count


def is_monochromatic(container: Sequence[Unit]) -> bool:
    """True if every unit equals the first (vacuously true when empty)."""
    return all(unit == container[0] for unit in container)


def color_counts(layout: Sequence[Sequence[Unit]]) -> Counter:
    """Number of units of each color across the whole layout."""
    return Counter(unit for tube in layout for unit in tube)


def check_conservation(layout: Sequence[Sequence[Unit]], capacity: int) -> bool:
    """True if every color present appears exactly `capacity` times."""
    return all(count == capacity for count in color_counts(layout).values())


def format_layout(layout: Sequence[Sequence[Unit]]) -> str:
    """One line per tube, bottom unit first."""
    lines = []
    for i, tube in enumerate(layout):
        units = " ".join(str(unit) for unit in tube) if tube else "-"
        lines.append(f"{i:>2}: [{units}]")
    return "\n".join(lines)
