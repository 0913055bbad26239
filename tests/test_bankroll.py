"""Tests for blackjack_sim/analysis/bankroll.py — payout distribution and ruin."""

from __future__ import annotations

import math

import numpy as np
import pytest

from blackjack_sim.analysis.bankroll import (
    BankrollRequirement,
    PayoutDistribution,
    SessionSurvival,
    adjustment_coefficient,
    compute_session_survival,
    print_bankroll_report,
    required_bankroll,
    risk_of_ruin,
    summarize_payouts,
)
from blackjack_sim.analysis.simulator import make_policy, simulate_games

# ─── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture(scope="module")
def basic_dist() -> PayoutDistribution:
    result = simulate_games(make_policy("basic"), n_games=2_000, seed=11, return_payouts=True)
    assert result.payouts is not None
    return summarize_payouts(result.payouts)


@pytest.fixture
def favourable() -> PayoutDistribution:
    """Even-money rounds won 60% of the time."""
    return summarize_payouts(np.array([1.0] * 6 + [-1.0] * 4))


@pytest.fixture
def coin_flips() -> PayoutDistribution:
    return summarize_payouts(np.array([1.0, -1.0] * 500))


# ─── summarize_payouts ────────────────────────────────────────────────────────


class TestSummarizePayouts:
    def test_values_and_probs(self) -> None:
        dist = summarize_payouts(np.array([1.5, -1.0, 1.0, 0.0]))
        assert isinstance(dist, PayoutDistribution)
        assert list(dist.values) == [-1.0, 0.0, 1.0, 1.5]
        assert dist.probs == pytest.approx([0.25] * 4)
        assert dist.mean == pytest.approx(0.375)
        assert dist.n_games == 4
        assert dist.worst == -1.0

    def test_blackjack_shares(self) -> None:
        dist = summarize_payouts(np.array([1.5, -1.0, 1.0, 0.0]))
        assert dist.p_natural == pytest.approx(0.25)
        assert dist.p_push_or_better == pytest.approx(0.75)
        assert dist.p_multi_stake == 0.0

    def test_doubled_and_split_rounds(self) -> None:
        # doubled win, doubled loss, lost split pair, plain win
        dist = summarize_payouts(np.array([2.0, -2.0, -4.0, 1.0]))
        assert dist.p_multi_stake == pytest.approx(0.75)
        assert dist.worst == -4.0

    def test_coin_flip_moments(self, coin_flips: PayoutDistribution) -> None:
        assert coin_flips.mean == pytest.approx(0.0)
        assert coin_flips.std == pytest.approx(1.0)
        assert coin_flips.skewness == pytest.approx(0.0, abs=1e-9)

    def test_single_value(self) -> None:
        dist = summarize_payouts(np.full(5, -1.0))
        assert dist.std == 0.0
        assert dist.skewness == 0.0

    def test_empty_raises(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            summarize_payouts(np.array([]))

    def test_simulated_values_are_half_units(self, basic_dist: PayoutDistribution) -> None:
        assert np.allclose(basic_dist.values * 2, np.round(basic_dist.values * 2))
        assert basic_dist.probs.sum() == pytest.approx(1.0)
        assert basic_dist.p_natural > 0.0


# ─── Risk of ruin ─────────────────────────────────────────────────────────────


class TestAdjustmentCoefficient:
    def test_even_money_walk(self, favourable: PayoutDistribution) -> None:
        # 0.6 e^-R + 0.4 e^R = 1  →  e^R = 1.5
        assert adjustment_coefficient(favourable) == pytest.approx(math.log(1.5))

    def test_non_positive_edge(self, coin_flips: PayoutDistribution) -> None:
        assert adjustment_coefficient(coin_flips) == 0.0

    def test_no_losing_rounds(self) -> None:
        assert adjustment_coefficient(summarize_payouts(np.array([1.0, 0.0]))) == math.inf

    def test_doubled_losses_lower_coefficient(self) -> None:
        # both edges are 0.4 units per round
        even = summarize_payouts(np.array([1.0] * 7 + [-1.0] * 3))
        doubled = summarize_payouts(np.array([1.0] * 8 + [-2.0] * 2))
        assert even.mean == pytest.approx(doubled.mean)
        # 0.7 e^-R + 0.3 e^R = 1  →  e^R = 7/3
        assert adjustment_coefficient(even) == pytest.approx(math.log(7.0 / 3.0))
        # 0.8 e^-R + 0.2 e^2R = 1  →  e^R = (sqrt(17) - 1) / 2
        assert adjustment_coefficient(doubled) == pytest.approx(
            math.log((math.sqrt(17.0) - 1.0) / 2.0)
        )


class TestRiskOfRuin:
    def test_even_money_matches_gamblers_ruin(self, favourable: PayoutDistribution) -> None:
        assert risk_of_ruin(favourable, 3.0) == pytest.approx((2.0 / 3.0) ** 3)

    def test_non_positive_edge_is_certain_ruin(self, coin_flips: PayoutDistribution) -> None:
        assert risk_of_ruin(coin_flips, 1_000.0) == 1.0

    def test_empty_bankroll(self, favourable: PayoutDistribution) -> None:
        assert risk_of_ruin(favourable, 0.0) == 1.0

    def test_no_losing_rounds(self) -> None:
        assert risk_of_ruin(summarize_payouts(np.array([1.5, 1.0])), 1.0) == 0.0

    def test_more_bankroll_less_risk(self, favourable: PayoutDistribution) -> None:
        assert risk_of_ruin(favourable, 10.0) < risk_of_ruin(favourable, 5.0)


class TestRequiredBankroll:
    def test_round_trips_through_risk_of_ruin(self, favourable: PayoutDistribution) -> None:
        req = required_bankroll(favourable, 0.95)
        assert isinstance(req, BankrollRequirement)
        assert req.adjustment_coefficient == pytest.approx(math.log(1.5))
        assert risk_of_ruin(favourable, req.required_bankroll) == pytest.approx(0.05)

    def test_higher_survival_needs_more(self, favourable: PayoutDistribution) -> None:
        low = required_bankroll(favourable, 0.90).required_bankroll
        high = required_bankroll(favourable, 0.99).required_bankroll
        assert high > low

    def test_non_positive_edge_raises(self, coin_flips: PayoutDistribution) -> None:
        with pytest.raises(ValueError, match="positive edge"):
            required_bankroll(coin_flips, 0.95)

    @pytest.mark.parametrize("survival_prob", [0.0, 1.0, 1.5])
    def test_survival_prob_range(self, favourable: PayoutDistribution,
                                 survival_prob: float) -> None:
        with pytest.raises(ValueError, match="survival_prob"):
            required_bankroll(favourable, survival_prob)

    def test_no_losing_rounds_needs_nothing(self) -> None:
        req = required_bankroll(summarize_payouts(np.array([1.0, 0.0])), 0.99)
        assert req.required_bankroll == 0.0


# ─── Session survival ─────────────────────────────────────────────────────────


class TestSessionSurvival:
    def test_all_losses_ruins_every_session(self) -> None:
        (s,) = compute_session_survival(summarize_payouts(np.full(5, -1.0)), [10.0],
                                        session_length=50, n_sessions=30)
        assert isinstance(s, SessionSurvival)
        assert s.survival_prob == 0.0
        # frozen at the first ruin point
        assert s.mean_final == pytest.approx(0.0)

    def test_all_wins_survives(self) -> None:
        (s,) = compute_session_survival(summarize_payouts(np.full(5, 1.0)), [1.0],
                                        session_length=20, n_sessions=10)
        assert s.survival_prob == 1.0
        assert s.mean_final == pytest.approx(21.0)

    def test_matches_ruin_probability(self, favourable: PayoutDistribution) -> None:
        (s,) = compute_session_survival(favourable, [3.0], session_length=500,
                                        n_sessions=4_000, seed=1)
        assert 1.0 - s.survival_prob == pytest.approx(risk_of_ruin(favourable, 3.0), abs=0.04)

    def test_survival_rises_with_bankroll(self, basic_dist: PayoutDistribution) -> None:
        rows = compute_session_survival(basic_dist, [5.0, 20.0, 100.0],
                                        session_length=300, n_sessions=300)
        assert [s.bankroll for s in rows] == [5.0, 20.0, 100.0]
        probs = [s.survival_prob for s in rows]
        assert probs == sorted(probs)

    def test_seeded(self, basic_dist: PayoutDistribution) -> None:
        a = compute_session_survival(basic_dist, [20.0], session_length=100, n_sessions=50, seed=3)
        b = compute_session_survival(basic_dist, [20.0], session_length=100, n_sessions=50, seed=3)
        assert a == b

    @pytest.mark.parametrize("bankroll", [0.0, -5.0])
    def test_non_positive_bankroll_raises(self, favourable: PayoutDistribution,
                                          bankroll: float) -> None:
        with pytest.raises(ValueError, match="bankrolls"):
            compute_session_survival(favourable, [10.0, bankroll])


# ─── Report ───────────────────────────────────────────────────────────────────


class TestReport:
    def test_sections_present(self, favourable: PayoutDistribution,
                              capsys: pytest.CaptureFixture[str]) -> None:
        survival = compute_session_survival(favourable, [10.0], session_length=50, n_sessions=20)
        report = print_bankroll_report(favourable, [5.0, 10.0], survival, label="basic")
        out = capsys.readouterr().out
        assert report in out
        for section in (
            "Bankroll Risk Report — basic",
            "Payout Distribution",
            "Risk of Ruin",
            "Bankroll Requirements",
            "Session Survival",
        ):
            assert section in report
        assert "Adjustment coefficient" in report

    def test_negative_edge_message(self, coin_flips: PayoutDistribution) -> None:
        report = print_bankroll_report(coin_flips)
        assert "eventually ruined" in report
        assert "Bankroll Requirements" not in report
        assert "Session Survival" not in report
