"""
Sort Core - The heart of the puzzle engine.

This module provides the pure puzzle functions (generator, move rules, hint
engine), the session orchestrator, and the Gymnasium environment wrapper.

Main exports:
- generate_level: Solvable level for a level index
- is_valid_move / transfer_count / is_win: Pour rules
- best_move: Greedy one-move hint
- CoreGame: Session with undo, combos and timed mode
- SortPuzzleEnv: Gymnasium environment for agents
- GameConfig: Configuration loaded from game_config.yaml
"""

from sortpuzzle.sort_core.config_loader import GameConfig, load_config
from sortpuzzle.sort_core.layout import (
    IllegalMoveError,
    InvalidIndexError,
    Layout,
    Move,
    as_layout,
)
from sortpuzzle.sort_core.palette import ColorToken, Palette
from sortpuzzle.sort_core.rng import ScriptedRandom, make_rng
from sortpuzzle.sort_core.level_generator import (
    LevelData,
    LevelGenerator,
    LevelParameters,
    generate_level,
)
from sortpuzzle.sort_core.rules import (
    MoveRules,
    apply_move,
    is_valid_move,
    is_win,
    legal_moves,
    transfer_count,
)
from sortpuzzle.sort_core.hint_engine import HintEngine, best_move, score_move
from sortpuzzle.sort_core.solver import solve
from sortpuzzle.sort_core.game import CoreGame
from sortpuzzle.sort_core.env_gym import SortPuzzleEnv

__all__ = [
    "GameConfig",
    "load_config",
    "IllegalMoveError",
    "InvalidIndexError",
    "Layout",
    "Move",
    "as_layout",
    "ColorToken",
    "Palette",
    "ScriptedRandom",
    "make_rng",
    "LevelData",
    "LevelGenerator",
    "LevelParameters",
    "generate_level",
    "MoveRules",
    "apply_move",
    "is_valid_move",
    "is_win",
    "legal_moves",
    "transfer_count",
    "HintEngine",
    "best_move",
    "score_move",
    "solve",
    "CoreGame",
    "SortPuzzleEnv",
]
