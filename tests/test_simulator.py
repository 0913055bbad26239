"""Tests for blackjack_sim/analysis/simulator.py — Monte Carlo runs and training.

Module-scoped fixtures keep the slower simulations to one run per session.
"""

from __future__ import annotations

import numpy as np
import pytest

from blackjack_sim.analysis.simulator import (
    POLICY_NAMES,
    SimulationResult,
    TrainingResult,
    compare_policies,
    make_policy,
    simulate_games,
    train_adaptive,
)
from blackjack_sim.config import HouseRules
from blackjack_sim.policies.adaptive import AdaptivePolicy, Mode
from blackjack_sim.policies.basic_strategy import BasicStrategyPolicy
from blackjack_sim.policies.random_policy import RandomPolicy

# ─── Module-scoped fixtures ───────────────────────────────────────────────────


@pytest.fixture(scope="module")
def basic_result() -> SimulationResult:
    return simulate_games(make_policy("basic"), n_games=3_000, seed=42, return_payouts=True)


@pytest.fixture(scope="module")
def random_result() -> SimulationResult:
    return simulate_games(make_policy("random", seed=1), n_games=3_000, seed=42)


# ─── make_policy ──────────────────────────────────────────────────────────────


class TestMakePolicy:
    def test_names(self) -> None:
        assert isinstance(make_policy("basic"), BasicStrategyPolicy)
        assert isinstance(make_policy("random"), RandomPolicy)
        assert isinstance(make_policy("adaptive"), AdaptivePolicy)

    def test_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown policy"):
            make_policy("card_counter")

    def test_policy_names_constant(self) -> None:
        assert set(POLICY_NAMES) == {"basic", "random", "adaptive"}


# ─── simulate_games ───────────────────────────────────────────────────────────


class TestSimulateGames:
    def test_counts(self, basic_result: SimulationResult) -> None:
        r = basic_result
        assert r.n_games == 3_000
        assert r.n_hands >= r.n_games
        assert r.n_wins + r.n_losses + r.n_pushes == r.n_hands

    def test_payouts_attached(self, basic_result: SimulationResult) -> None:
        assert basic_result.payouts is not None
        assert basic_result.payouts.shape == (3_000,)
        assert basic_result.mean_ev == pytest.approx(float(np.mean(basic_result.payouts)))

    def test_payouts_omitted_by_default(self, random_result: SimulationResult) -> None:
        assert random_result.payouts is None

    def test_ci_brackets_mean(self, basic_result: SimulationResult) -> None:
        assert basic_result.ci_95_low < basic_result.mean_ev < basic_result.ci_95_high

    def test_basic_beats_random(
        self, basic_result: SimulationResult, random_result: SimulationResult
    ) -> None:
        assert basic_result.mean_ev > random_result.mean_ev

    def test_basic_ev_plausible(self, basic_result: SimulationResult) -> None:
        # basic strategy sits within a few percent of break-even
        assert -0.15 < basic_result.mean_ev < 0.10

    def test_same_seed_reproducible(self) -> None:
        a = simulate_games(make_policy("basic"), n_games=200, seed=9)
        b = simulate_games(make_policy("basic"), n_games=200, seed=9)
        assert a.mean_ev == b.mean_ev

    def test_shoe_source(self) -> None:
        r = simulate_games(make_policy("basic"), n_games=200, seed=3, source="shoe")
        assert r.source == "shoe"

    def test_custom_rules_scale_units(self) -> None:
        rules = HouseRules(min_bet=20.0)
        r = simulate_games(make_policy("basic"), n_games=200, seed=3, rules=rules,
                           return_payouts=True)
        # minimum bets only, so every net is a multiple of half a unit
        assert np.allclose(r.payouts * 2, np.round(r.payouts * 2))

    def test_too_few_games_raises(self) -> None:
        with pytest.raises(ValueError, match="at least 2"):
            simulate_games(make_policy("basic"), n_games=1)

    def test_str(self, basic_result: SimulationResult) -> None:
        s = str(basic_result)
        assert "basic" in s
        assert "95% CI" in s

    def test_house_edge_is_negated_ev(self, basic_result: SimulationResult) -> None:
        assert basic_result.house_edge_pct == pytest.approx(-basic_result.mean_ev * 100)


# ─── train_adaptive ───────────────────────────────────────────────────────────


class TestTrainAdaptive:
    @pytest.fixture(scope="class")
    def trained(self) -> tuple[AdaptivePolicy, TrainingResult]:
        policy = AdaptivePolicy(Mode.EXPLORE, np.random.default_rng(0))
        result = train_adaptive(policy, n_games=2_000, seed=0, window=500)
        return policy, result

    def test_windows(self, trained) -> None:
        _, result = trained
        assert len(result.success_rates) == 4
        assert np.all((0.0 <= result.success_rates) & (result.success_rates <= 1.0))

    def test_counts(self, trained) -> None:
        policy, result = trained
        assert result.hands_observed >= 2_000
        assert 0 < result.hands_reinforced <= result.hands_observed
        assert policy.hands_observed == result.hands_observed

    def test_tables_moved(self, trained) -> None:
        policy, _ = trained
        assert not np.all(policy.table.initial == 0.25)

    def test_mode_restored(self, trained) -> None:
        policy, _ = trained
        assert policy.mode is Mode.EXPLORE

    def test_partial_window_recorded(self) -> None:
        policy = make_policy("adaptive", seed=2)
        result = train_adaptive(policy, n_games=250, seed=2, window=100)
        assert len(result.success_rates) == 3

    def test_bad_window_raises(self) -> None:
        with pytest.raises(ValueError):
            train_adaptive(make_policy("adaptive"), n_games=10, window=0)

    def test_final_success_rate_empty(self) -> None:
        empty = TrainingResult(0, 100, np.array([]), 0, 0)
        assert empty.final_success_rate == 0.0


# ─── compare_policies ─────────────────────────────────────────────────────────


class TestComparePolicies:
    def test_all_policies_present(self) -> None:
        results = compare_policies(n_games=300, seed=1, training_games=300)
        assert set(results) == {"basic", "random", "adaptive"}
        assert all(r.n_games == 300 for r in results.values())
