"""Tests for blackjack_sim/analysis/heat_maps.py — strategy heat maps."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.figure  # noqa: E402
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

from blackjack_sim.analysis.heat_maps import (  # noqa: E402
    ACTION_LETTERS,
    DEALER_LABELS,
    agreement_rate,
    bucket_labels,
    build_adaptive_matrix,
    build_basic_strategy_matrix,
    plot_action_heatmap,
    plot_adaptive_heatmaps,
    plot_basic_strategy_heatmap,
    plot_strategy_comparison,
)
from blackjack_sim.engine.game_state import TrajectoryStep  # noqa: E402
from blackjack_sim.policies.adaptive import StrategyTable  # noqa: E402

HIT, STAND, DOUBLE, SPLIT = 0, 1, 2, 3


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def learned_table() -> StrategyTable:
    """A table that has learned STAND for hard 16 against both a 2 and a 7."""
    table = StrategyTable()
    table.update(True, [TrajectoryStep(STAND, 11, 9)])
    table.update(True, [TrajectoryStep(STAND, 11, 4)])
    return table


# ─── Labels ───────────────────────────────────────────────────────────────────


class TestLabels:
    def test_initial_labels(self) -> None:
        labels = bucket_labels()
        assert len(labels) == 28
        assert labels[0] == "A,A"
        assert labels[9] == "2,2"
        assert labels[10] == "H≥17"
        assert labels[19] == "H≤8"
        assert labels[-1] == "S13"

    def test_subsequent_labels(self) -> None:
        labels = bucket_labels(is_initial=False)
        assert len(labels) == 18
        assert labels[0] == "H≥17"

    def test_dealer_labels(self) -> None:
        assert DEALER_LABELS == ["A", "10", "9", "8", "7", "6", "5", "4", "3", "2"]

    def test_action_letters_distinct(self) -> None:
        assert len(set(ACTION_LETTERS.values())) == 4


# ─── Data builders ────────────────────────────────────────────────────────────


class TestBasicMatrix:
    @pytest.fixture(scope="class")
    def matrix(self) -> np.ndarray:
        return build_basic_strategy_matrix()

    def test_shape_and_filled(self, matrix: np.ndarray) -> None:
        assert matrix.shape == (28, 10)
        assert not np.isnan(matrix).any()

    def test_aces_always_split(self, matrix: np.ndarray) -> None:
        assert np.all(matrix[0] == SPLIT)

    def test_tens_always_stand(self, matrix: np.ndarray) -> None:
        assert np.all(matrix[1] == STAND)

    def test_hard_17_always_stands(self, matrix: np.ndarray) -> None:
        assert np.all(matrix[10] == STAND)

    def test_hard_11(self, matrix: np.ndarray) -> None:
        assert matrix[16, 0] == HIT
        assert matrix[16, 1] == DOUBLE

    def test_hard_16(self, matrix: np.ndarray) -> None:
        assert matrix[11, 9] == STAND
        assert matrix[11, 4] == HIT


class TestAdaptiveMatrix:
    def test_untrained_all_nan(self) -> None:
        codes, weights = build_adaptive_matrix(StrategyTable())
        assert codes.shape == weights.shape == (28, 10)
        assert np.isnan(codes).all()
        assert np.isnan(weights).all()

    def test_subsequent_shape(self) -> None:
        codes, _ = build_adaptive_matrix(StrategyTable(), is_initial=False)
        assert codes.shape == (18, 10)

    def test_learned_cells(self, learned_table: StrategyTable) -> None:
        codes, weights = build_adaptive_matrix(learned_table)
        assert codes[11, 9] == STAND
        assert weights[11, 9] == pytest.approx(0.625)
        assert np.count_nonzero(~np.isnan(codes)) == 2

    def test_does_not_mutate_table(self, learned_table: StrategyTable) -> None:
        before = learned_table.initial.copy()
        build_adaptive_matrix(learned_table)
        assert np.array_equal(learned_table.initial, before)


class TestAgreementRate:
    def test_untrained_is_zero(self) -> None:
        assert agreement_rate(StrategyTable()) == 0.0

    def test_half_agrees(self, learned_table: StrategyTable) -> None:
        # STAND matches vs 2 but not vs 7
        assert agreement_rate(learned_table) == pytest.approx(0.5)


# ─── Plot functions ───────────────────────────────────────────────────────────


class TestPlots:
    def test_action_heatmap(self) -> None:
        fig = plot_action_heatmap(build_basic_strategy_matrix(), "t", show=False)
        assert isinstance(fig, matplotlib.figure.Figure)
        assert len(fig.axes) == 1

    def test_basic_strategy_saves(self, tmp_path) -> None:
        path = tmp_path / "basic.png"
        plot_basic_strategy_heatmap(show=False, save_path=str(path))
        assert path.exists()
        assert path.stat().st_size > 0

    def test_adaptive_heatmaps(self, learned_table: StrategyTable) -> None:
        fig = plot_adaptive_heatmaps(learned_table, show=False)
        # two panels plus the colorbar
        assert len(fig.axes) == 3

    def test_adaptive_subsequent_untrained(self) -> None:
        fig = plot_adaptive_heatmaps(StrategyTable(), is_initial=False, show=False)
        assert isinstance(fig, matplotlib.figure.Figure)

    def test_comparison(self, learned_table: StrategyTable, tmp_path) -> None:
        path = tmp_path / "cmp.png"
        fig = plot_strategy_comparison(learned_table, show=False, save_path=str(path))
        assert len(fig.axes) == 2
        assert path.exists()
