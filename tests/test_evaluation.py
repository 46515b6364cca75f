"""
Tests for the evaluation harness, bundled agents and terminal commands.
"""

import json
import math
from pathlib import Path

import pytest

from sortpuzzle.evaluation.run_eval import (
    EvalResult,
    evaluate_agent,
    evaluate_single_episode,
    load_agent,
    load_seed_bank,
    save_results,
    summarize_results,
)
from tools.play_human import HumanPlayer, parse_command

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def hint_agent():
    return load_agent(str(ROOT / "contestants" / "baseline_hint"))


@pytest.fixture
def random_agent():
    return load_agent(str(ROOT / "contestants" / "team_template" / "agent.py"))


class TestSeedBank:
    """Test the fixed evaluation levels."""

    def test_default_bank(self):
        episodes = load_seed_bank()

        assert len(episodes) > 0
        assert all(level >= 1 for level, _ in episodes)
        assert len(set(episodes)) == len(episodes)

    def test_custom_bank(self, tmp_path):
        path = tmp_path / "bank.json"
        path.write_text(json.dumps({"episodes": [{"level": 4, "seed": 9}]}))

        assert load_seed_bank(str(path)) == [(4, 9)]


class TestLoadAgent:
    """Test agent discovery."""

    def test_loads_class_agent(self, hint_agent):
        assert callable(hint_agent)

    def test_missing_agent(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_agent(str(tmp_path))

    def test_module_without_entry_point(self, tmp_path):
        (tmp_path / "agent.py").write_text("VALUE = 1\n")

        with pytest.raises(AttributeError):
            load_agent(str(tmp_path))

    def test_loads_function_agent(self, tmp_path):
        (tmp_path / "agent.py").write_text("def act(obs):\n    return 0\n")

        assert load_agent(str(tmp_path))(None) == 0


class TestEvaluate:
    """Test episode runs."""

    def test_hint_agent_plays_only_legal_pours(self, hint_agent):
        result = evaluate_single_episode(hint_agent, level=1, seed=1001, record_actions=True)

        assert result.termination_reason in ("solved", "move_cap", "no_moves")
        assert result.invalid_moves == 0
        assert len(result.actions) == result.moves_used

    def test_random_agent_makes_only_legal_pours(self, random_agent):
        result = evaluate_single_episode(random_agent, level=2, seed=5)

        assert result.invalid_moves == 0
        assert result.moves_used > 0

    def test_summary(self, hint_agent, tmp_path):
        summary = evaluate_agent(hint_agent, episodes=[(1, 1), (2, 2)], verbose=False)

        assert len(summary.results) == 2
        assert 0.0 <= summary.solve_rate <= 1.0
        assert summary.total_invalid == 0

        out = tmp_path / "results.json"
        save_results(summary, "baseline_hint", str(out))
        data = json.loads(out.read_text())
        assert data["agent"] == "baseline_hint"
        assert len(data["results"]) == 2


class TestSummarizeResults:
    """Test aggregate statistics."""

    @staticmethod
    def _result(solved, moves):
        return EvalResult(
            level=1, seed=0, solved=solved, moves_used=moves, invalid_moves=0,
            termination_reason="solved" if solved else "move_cap", elapsed_time=0.0
        )

    def test_move_stats_cover_solved_only(self):
        results = [self._result(True, 10), self._result(True, 20), self._result(False, 500)]

        summary = summarize_results(results)

        assert summary.solve_rate == pytest.approx(2 / 3)
        assert summary.mean_moves == 15.0
        assert summary.median_moves == 15.0
        assert summary.std_moves == 5.0

    def test_nothing_solved_gives_nan(self):
        """An agent that never wins has no move statistics, not zero moves."""
        summary = summarize_results([self._result(False, 500), self._result(False, 37)])

        assert summary.solve_rate == 0.0
        assert math.isnan(summary.mean_moves)
        assert math.isnan(summary.std_moves)
        assert math.isnan(summary.median_moves)

    def test_nothing_solved_prints_na(self, monkeypatch, capsys):
        from sortpuzzle.evaluation import run_eval

        monkeypatch.setattr(
            run_eval, "evaluate_single_episode",
            lambda agent_fn, level, seed, **kwargs: self._result(False, 500)
        )

        summary = evaluate_agent(lambda obs: 0, episodes=[(1, 1), (2, 2)], verbose=True)

        assert summary.solve_rate == 0.0
        assert math.isnan(summary.mean_moves)
        out = capsys.readouterr().out
        assert "Mean moves:       n/a" in out
        assert "Median moves:     n/a" in out


class TestPlayHuman:
    """Test terminal command parsing and a scripted session."""

    @pytest.mark.parametrize("line,expected", [
        ("3 5", ("move", (3, 5))),
        ("3>5", ("move", (3, 5))),
        (" 0,1 ", ("move", (0, 1))),
        ("u", ("undo", None)),
        ("H", ("hint", None)),
        ("t", ("tube", None)),
        ("r", ("restart", None)),
        ("q", ("quit", None)),
        ("pour", ("unknown", None)),
        ("1 2 3", ("unknown", None)),
    ])
    def test_parse_command(self, line, expected):
        assert parse_command(line) == expected

    def test_scripted_session(self, capsys):
        lines = iter(["h", "t", "u", "0 0", "99 0", "q"])
        player = HumanPlayer(level=1, seed=2, input_fn=lambda prompt: next(lines))

        assert player.run() == 1

        out = capsys.readouterr().out
        assert "Hint: pour" in out
        assert "Nothing to undo." in out
        assert "Can't pour there." in out
        assert "out of range" in out
        assert len(player.game.layout) == 6
