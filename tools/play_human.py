"""
Human Play Mode
================

Play the sort puzzle in a terminal. Tubes are printed bottom unit first.

Commands:
    - "3 5" or "3>5": Pour tube 3 into tube 5
    - u: Undo last pour
    - h: Show hint
    - t: Add an extra empty tube
    - r: Restart level
    - q: Quit

Usage:
    python -m tools.play_human [--level LEVEL] [--seed SEED] [--timed]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import Callable, Optional, Tuple

from sortpuzzle.sort_core.config_loader import load_config, GameConfig
from sortpuzzle.sort_core.game import CoreGame
from sortpuzzle.sort_core.layout import InvalidIndexError, format_layout


def parse_command(line: str) -> Tuple[str, Optional[Tuple[int, int]]]:
    """
    Parse one line of player input.

    Returns:
        (command, pour) where command is one of "move", "undo", "hint",
        "tube", "restart", "quit" or "unknown"; pour is set for "move".
    """
    text = line.strip().lower()
    keywords = {"u": "undo", "h": "hint", "t": "tube", "r": "restart", "q": "quit"}
    if text in keywords:
        return keywords[text], None

    parts = text.replace(">", " ").replace(",", " ").split()
    if len(parts) == 2 and all(p.isdigit() for p in parts):
        return "move", (int(parts[0]), int(parts[1]))
    return "unknown", None


class HumanPlayer:
    """
    Terminal sort puzzle session that walks up the levels.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        level: int = 1,
        seed: Optional[int] = None,
        timed: bool = False,
        input_fn: Callable[[str], str] = input
    ):
        if config is None:
            config = load_config()

        self._config = config
        self._timed = timed
        self._input = input_fn

        self._game = CoreGame(config=config, seed=seed)
        self._game.reset(level=level, seed=seed, timed=timed)

        self._running = True
        self._last_time = time.time()

    @property
    def game(self) -> CoreGame:
        return self._game

    def run(self) -> int:
        """Run the game loop. Returns the highest level reached."""
        print("=== Sort Puzzle ===")
        print("Pour with 'SRC DST'. u=undo h=hint t=extra tube r=restart q=quit")
        print()

        while self._running:
            self._render()
            try:
                line = self._input("> ")
            except EOFError:
                break
            self._tick_clock()
            if self._game.is_over and not self._game.is_won:
                continue
            self._handle_command(line)

        return self._game.level

    def _tick_clock(self) -> None:
        now = time.time()
        elapsed = now - self._last_time
        self._last_time = now
        if self._game.advance_clock(elapsed):
            print("\nTIME'S UP!")
            self._game.restart()
            self._last_time = time.time()

    def _handle_command(self, line: str) -> None:
        """Dispatch one input line."""
        command, pour = parse_command(line)

        if command == "quit":
            self._running = False
        elif command == "undo":
            if not self._game.undo():
                print("Nothing to undo.")
        elif command == "hint":
            move = self._game.hint()
            if move is None:
                print("No good moves. Try Undo?")
            else:
                print(f"Hint: pour {move.source} into {move.target}")
        elif command == "tube":
            if not self._game.add_extra_tube():
                print("No more extra tubes.")
        elif command == "restart":
            self._game.restart()
            print("\n=== Level Restarted ===\n")
        elif command == "move":
            self._pour(*pour)
        else:
            print("Unknown command.")

    def _pour(self, source: int, target: int) -> None:
        try:
            result = self._game.step(source, target)
        except InvalidIndexError as e:
            print(f"Error: {e}")
            return

        if not result.valid:
            print("Can't pour there.")
            return
        if result.combo > 1:
            print(f"COMBO x{result.combo}!")
        if result.won:
            outcome = result.outcome
            print(f"\nLEVEL {outcome.level} COMPLETE - {'*' * outcome.stars} "
                  f"+{outcome.coins} coins in {outcome.moves} moves\n")
            self._game.reset(level=self._game.level + 1, timed=self._timed)
            self._last_time = time.time()

    def _render(self) -> None:
        game = self._game
        header = f"Level {game.level}  moves={game.moves_used}  undos={game.undo_count}"
        if game.timed:
            header += f"  time={game.time_left:.0f}s"
        print(header)
        print(format_layout(game.layout))


def main():
    parser = argparse.ArgumentParser(description="Play the sort puzzle interactively")
    parser.add_argument("--level", type=int, default=1, help="Starting level")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--timed", action="store_true", help="Timed challenge mode")

    args = parser.parse_args()

    config = load_config()
    player = HumanPlayer(
        config=config,
        level=args.level,
        seed=args.seed,
        timed=args.timed
    )
    level = player.run()
    print(f"\nReached level {level}")
    print(player.game.stats.to_dict())
    return 0


if __name__ == "__main__":
    sys.exit(main())
