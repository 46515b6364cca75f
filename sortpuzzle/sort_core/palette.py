"""
Color Palette
=============

Provides convenient access to the ordered color tokens loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from sortpuzzle.sort_core.config_loader import GameConfig, ColorConfig, get_config


@dataclass
class ColorToken:
    """
    Runtime representation of a palette color.

    Layout units are the token names; the token carries the display data.
    """
    config: ColorConfig

    @property
    def id(self) -> int:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def hex(self) -> str:
        return self.config.hex

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.config.rgb

    def __repr__(self) -> str:
        return f"ColorToken({self.id}: {self.name})"


class Palette:
    """
    Ordered collection of distinct color tokens.

    Level N draws its colors from the front of the palette.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize palette from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._tokens: Tuple[ColorToken, ...] = tuple(
            ColorToken(color_config) for color_config in config.palette
        )
        self._ids = {token.name: token.id for token in self._tokens}

    def __len__(self) -> int:
        """Total number of color tokens."""
        return len(self._tokens)

    def __getitem__(self, color_id: int) -> ColorToken:
        """Get color token by ID."""
        if 0 <= color_id < len(self._tokens):
            return self._tokens[color_id]
        raise IndexError(f"Color ID {color_id} out of range [0, {len(self._tokens)})")

    def __iter__(self):
        """Iterate over all color tokens."""
        return iter(self._tokens)

    @property
    def names(self) -> Tuple[str, ...]:
        """All token names in palette order."""
        return tuple(token.name for token in self._tokens)

    def first(self, count: int) -> Tuple[str, ...]:
        """Names of the first `count` tokens, clamped to the palette size."""
        return self.names[:max(0, count)]

    def index_of(self, name: str) -> int:
        """
        Palette index of a token name.

        Raises:
            KeyError: If the name is not in the palette.
        """
        return self._ids[name]

    def get_by_name(self, name: str) -> Optional[ColorToken]:
        """Get color token by name (case-insensitive)."""
        name_lower = name.lower()
        for token in self._tokens:
            if token.name.lower() == name_lower:
                return token
        return None


# Module-level singleton
_cached_palette: Optional[Palette] = None


def get_palette(config: Optional[GameConfig] = None) -> Palette:
    """
    Get the palette singleton.

    Args:
        config: Optional config to use. Rebuilt when it differs from the cached one.

    Returns:
        Palette instance.
    """
    global _cached_palette
    if _cached_palette is None or (config is not None and config is not _cached_palette._config):
        _cached_palette = Palette(config)
    return _cached_palette
