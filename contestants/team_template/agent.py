"""
Team Template Agent
===================

Your agent must provide one of:
1. A `SortAgent` class with an `act(obs) -> action` method
2. A standalone `act(obs) -> action` function

Actions are ints in [0, max_tubes * max_tubes) encoding
`source * max_tubes + target`.
"""

from __future__ import annotations

from typing import Dict
import numpy as np

from sortpuzzle.sort_core.env_gym import encode_action
from sortpuzzle.sort_core.rules import legal_moves
from sortpuzzle.sort_core.state_snapshot import decode_tubes


class SortAgent:
    """
    Your sort puzzle agent implementation.

    Replace the strategy in `act()` with your own logic.
    """

    def __init__(self):
        """Initialize your agent. Load models, set up state, etc."""
        self.rng = np.random.default_rng()

    def act(self, obs: Dict[str, np.ndarray]) -> int:
        """
        Choose an action based on the observation.

        Args:
            obs: Dictionary containing game state.

        Returns:
            action: Flattened (source, target) pour.
        """
        layout = decode_tubes(obs["tubes"], obs["tube_mask"])
        moves = legal_moves(layout, int(obs["capacity"]))
        max_tubes = obs["tube_mask"].shape[0]
        if not moves:
            return 0
        move = moves[int(self.rng.integers(len(moves)))]
        return encode_action(move.source, move.target, max_tubes)

    def reset(self) -> None:
        """Called when a new episode starts (optional)."""
        pass


def act(obs: Dict[str, np.ndarray]) -> int:
    """Standalone act function (alternative to class-based agent)."""
    return SortAgent().act(obs)
