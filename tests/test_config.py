"""
Tests for configuration loading and the color palette.
"""

from pathlib import Path

import pytest

from sortpuzzle.sort_core.config_loader import get_config, load_config, reload_config
from sortpuzzle.sort_core.palette import Palette, get_palette

DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "sortpuzzle" / "game_config.yaml"


@pytest.fixture
def config():
    return load_config()


def _write_variant(tmp_path, old, new):
    """Copy the default config with one line replaced."""
    text = DEFAULT_CONFIG.read_text()
    assert old in text
    path = tmp_path / "game_config.yaml"
    path.write_text(text.replace(old, new))
    return str(path)


class TestLoadConfig:
    """Test the default configuration."""

    def test_defaults(self, config):
        assert config.capacity == 4
        assert config.num_colors == 16
        assert config.levels.max_colors == 16
        assert config.difficulty.timed_multiplier == 1.5
        assert config.session.combo_window_ms == 2500
        assert config.caps.max_tubes == 24

    def test_hint_weights(self, config):
        hint = config.hint
        assert (hint.complete_tube_bonus, hint.stack_bonus_per_unit, hint.reveal_bonus) == (1000, 50, 20)
        assert (hint.pure_dump_penalty, hint.empty_dump_penalty, hint.clear_source_bonus) == (-50, -5, 10)

    def test_colors_have_ids_in_order(self, config):
        assert [c.id for c in config.palette] == list(range(16))
        assert config.get_color(0).name == "red"
        assert config.get_color(1).rgb == (59, 130, 246)

    def test_get_color_rejects_unknown_id(self, config):
        with pytest.raises(ValueError):
            config.get_color(99)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_explicit_path(self):
        assert load_config(str(DEFAULT_CONFIG)).capacity == 4

    def test_get_config_cached(self):
        assert get_config() is get_config()

    def test_reload_replaces_cache(self, tmp_path):
        path = _write_variant(tmp_path, "capacity: 4", "capacity: 5")
        try:
            assert reload_config(path).capacity == 5
            assert get_config().capacity == 5
        finally:
            reload_config()
        assert get_config().capacity == 4


class TestValidation:
    """Inconsistent configs are rejected at load time."""

    @pytest.mark.parametrize("old,new,match", [
        ("capacity: 4", "capacity: 0", "capacity"),
        ("max_colors: 16", "max_colors: 40", "palette size"),
        ("base_colors: 3", "base_colors: 0", "base_colors"),
        ("levels_per_color: 3", "levels_per_color: 0", "levels_per_color"),
        ("timed_multiplier: 1.5", "timed_multiplier: 0", "multipliers"),
        ("max_tubes: 24", "max_tubes: 10", "max_tubes"),
        ("name: blue,", "name: red,", "distinct"),
    ])
    def test_rejects(self, tmp_path, old, new, match):
        path = _write_variant(tmp_path, old, new)

        with pytest.raises(ValueError, match=match):
            load_config(path)


class TestPalette:
    """Test palette lookup."""

    def test_lookup(self, config):
        palette = Palette(config)

        assert len(palette) == 16
        assert palette[2].name == "green"
        assert palette[2].hex == "#22c55e"
        assert palette.index_of("navy") == 15
        assert palette.get_by_name("cyan").id == 7
        assert palette.get_by_name("nope") is None

    def test_first(self, config):
        assert Palette(config).first(3) == ("red", "blue", "green")

    def test_names_distinct(self, config):
        names = Palette(config).names
        assert len(set(names)) == len(names)

    def test_errors(self, config):
        palette = Palette(config)

        with pytest.raises(IndexError):
            palette[16]
        with pytest.raises(KeyError):
            palette.index_of("nope")

    def test_iterates_tokens(self, config):
        assert [token.name for token in Palette(config)][:2] == ["red", "blue"]

    def test_get_palette_cached(self, config):
        assert get_palette(config) is get_palette(config)
