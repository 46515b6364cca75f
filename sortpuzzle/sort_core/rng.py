"""
RNG - Injectable Random Sources
===============================

The level generator draws every choice through a `RandomSource`, so games
can be seeded from system entropy while tests replay exact pick sequences.
"""

from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence


class RandomSource(Protocol):
    """Anything that can pick an index in [0, stop)."""

    def randrange(self, stop: int) -> int:
        ...


def make_rng(seed: Optional[int] = None) -> random.Random:
    """
    Create the default random source.

    Args:
        seed: Random seed for reproducibility. System entropy if None.
    """
    return random.Random(seed)


class ScriptedRandom:
    """
    Replays a fixed sequence of picks.

    Each pick is reduced modulo the requested range, and the script cycles
    when exhausted, so any non-empty script drives any number of draws.
    """

    def __init__(self, picks: Sequence[int]):
        """
        Initialize scripted source.

        Args:
            picks: Non-negative integers returned in order.
        """
        if not picks:
            raise ValueError("ScriptedRandom needs at least one pick")
        if any(p < 0 for p in picks):
            raise ValueError("ScriptedRandom picks must be non-negative")

        self._picks: List[int] = list(picks)
        self._index: int = 0
        self._history: List[int] = []

    def randrange(self, stop: int) -> int:
        """Return the next scripted pick modulo `stop`."""
        if stop <= 0:
            raise ValueError(f"empty range for randrange({stop})")
        pick = self._picks[self._index % len(self._picks)] % stop
        self._index += 1
        self._history.append(pick)
        return pick

    @property
    def draws(self) -> int:
        """Number of picks consumed so far."""
        return self._index

    @property
    def history(self) -> List[int]:
        """Every value returned so far."""
        return list(self._history)

    def reset(self) -> None:
        """Rewind to the start of the script."""
        self._index = 0
        self._history = []
