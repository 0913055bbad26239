"""Tests for the text reports (blackjack_sim/analysis/strategy_report.py).

Tests verify that each print function produces the expected sections.
Results are built by hand so the reports run without a simulation.
"""

from __future__ import annotations

import numpy as np
import pytest

from blackjack_sim.analysis.simulator import SimulationResult, TrainingResult
from blackjack_sim.analysis.strategy_report import (
    print_adaptive_summary,
    print_policy_comparison,
    print_training_summary,
)
from blackjack_sim.engine.game_state import TrajectoryStep
from blackjack_sim.policies.adaptive import StrategyTable


def _result(name: str, mean: float) -> SimulationResult:
    return SimulationResult(
        policy_name=name,
        n_games=1_000,
        n_hands=1_020,
        mean_ev=mean,
        std_ev=1.1,
        ci_95_low=mean - 0.07,
        ci_95_high=mean + 0.07,
        n_wins=440,
        n_losses=490,
        n_pushes=90,
        source="deck",
    )


# ─── print_policy_comparison ──────────────────────────────────────────────────


class TestPrintPolicyComparison:
    def test_rows_and_deltas(self, capsys: pytest.CaptureFixture) -> None:
        print_policy_comparison({"basic": _result("basic", -0.01), "random": _result("random", -0.31)})
        out = capsys.readouterr().out
        assert "Policy Comparison" in out
        assert "basic" in out
        assert "random vs basic: -0.3000 units/game" in out

    def test_without_basic_skips_deltas(self, capsys: pytest.CaptureFixture) -> None:
        print_policy_comparison({"random": _result("random", -0.31)})
        assert "vs basic" not in capsys.readouterr().out


# ─── print_training_summary ───────────────────────────────────────────────────


class TestPrintTrainingSummary:
    def test_windows_listed(self, capsys: pytest.CaptureFixture) -> None:
        training = TrainingResult(3_000, 1_000, np.array([0.41, 0.44, 0.46]), 3_050, 1_330)
        print_training_summary(training)
        out = capsys.readouterr().out
        assert "Adaptive Training Summary" in out
        assert "Final window:      0.4600" in out
        assert "3,000" in out

    def test_no_windows(self, capsys: pytest.CaptureFixture) -> None:
        print_training_summary(TrainingResult(0, 1_000, np.array([]), 0, 0))
        assert "(no complete windows)" in capsys.readouterr().out


# ─── print_adaptive_summary ───────────────────────────────────────────────────


class TestPrintAdaptiveSummary:
    def test_untrained(self, capsys: pytest.CaptureFixture) -> None:
        print_adaptive_summary(StrategyTable())
        out = capsys.readouterr().out
        assert "Learned Table vs Basic Strategy" in out
        assert "Learned cells:   0 / 280" in out
        assert "(no disagreements)" in out

    def test_lists_disagreement(self, capsys: pytest.CaptureFixture) -> None:
        table = StrategyTable()
        # hard 16 vs 7: basic hits, learned stands
        table.update(True, [TrajectoryStep(1, 11, 4)])
        print_adaptive_summary(table)
        out = capsys.readouterr().out
        assert "Agreement:       0.0%" in out
        assert "H16" in out
        assert "0.625" in out
