"""
Baseline Hint Agent - Plays the hint engine's best move.

This is a simple heuristic agent that decodes the tube arrays from the
observation and ranks every legal pour with the hint heuristic.

This serves as:
1. A working example of how to read observations and return actions
2. A baseline benchmark for agents to compare against
3. A verification that the environment API works correctly

Strategy:
- Rebuild the layout from `tubes` / `tube_mask`
- Score every legal pour with the hint heuristic
- Take the highest-scoring pour whose result has not been seen this episode
- Fall back to the plain best pour when every result was already seen
"""

from typing import Any, Dict, Optional, Set, Tuple

from sortpuzzle.sort_core.env_gym import encode_action
from sortpuzzle.sort_core.hint_engine import rank_moves
from sortpuzzle.sort_core.rules import apply_move
from sortpuzzle.sort_core.solver import state_key
from sortpuzzle.sort_core.state_snapshot import decode_tubes


class SortAgent:
    """
    Greedy agent built on the hint heuristic.

    Remembers the layouts it has produced during the episode so it does not
    pour back and forth between two tubes.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize the agent.

        Args:
            debug: If True, print decisions to stdout.
        """
        self.debug = debug
        self._seen: Set[Tuple] = set()

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset agent state for a new episode."""
        self._seen = set()

    def act(self, observation: Dict[str, Any], debug: bool = False) -> int:
        """
        Choose a pour.

        Args:
            observation: Dict of numpy arrays from the environment.
            debug: If True, print debug info for this step.

        Returns:
            Flattened (source, target) action.
        """
        if int(observation["moves_used"]) == 0:
            self.reset()

        layout = decode_tubes(observation["tubes"], observation["tube_mask"])
        capacity = int(observation["capacity"])
        max_tubes = observation["tube_mask"].shape[0]
        self._seen.add(state_key(layout))

        ranked = rank_moves(layout, capacity)
        if not ranked:
            return 0

        # Stable sort keeps enumeration order among equal scores
        ordered = sorted(ranked, key=lambda scored: -scored.score)
        choice = ordered[0]
        for scored in ordered:
            nxt, _ = apply_move(layout, scored.move.source, scored.move.target, capacity)
            key = state_key(nxt)
            if key not in self._seen:
                choice = scored
                self._seen.add(key)
                break

        if debug or self.debug:
            print(f"[Hint Agent] {len(ranked)} legal pours, "
                  f"chose {choice.move.source}->{choice.move.target} "
                  f"(score={choice.score})")

        return encode_action(choice.move.source, choice.move.target, max_tubes)


# Convenience function to create agent (used by evaluation harness)
def create_agent(**kwargs) -> SortAgent:
    """Factory function to create an agent instance."""
    return SortAgent(**kwargs)
