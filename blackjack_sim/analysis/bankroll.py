"""Bankroll risk for a blackjack policy, from its simulated payout distribution.

Inputs are per-game net results in betting units, as returned by
simulate_games(..., return_payouts=True). A blackjack round does not pay
plain ±1: naturals pay +1.5, doubled hands move ±2, and split rounds add a
second stake, so one round can win or lose up to four units. The ruin
figures here work from that discrete distribution directly rather than
from a mean/variance random walk.

Risk of ruin uses the adjustment coefficient R of the round distribution X,
the positive root of

    E[exp(-R * X)] = 1

For a policy with a positive edge, exp(-R * B) is the chance a bankroll of B
units is ever exhausted. It is exact for a ±1 walk, where it reduces to
(q / p) ** B, and an upper bound when rounds can lose more than one unit.
With zero or negative edge ruin is certain eventually.

Usage (standalone report):
    python -m blackjack_sim.analysis.bankroll [n_games]
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from scipy import optimize, stats

LOGGER = logging.getLogger(__name__)

SURVIVAL_LEVELS: tuple[float, ...] = (0.90, 0.95, 0.99)
BANKROLL_LEVELS: tuple[float, ...] = (20.0, 50.0, 100.0, 200.0)


@dataclass
class PayoutDistribution:
    """Empirical distribution of per-round net results.

    Attributes:
        values:   Distinct net results in units, ascending.
        probs:    Observed frequency of each value (sums to 1).
        mean:     Edge per round (units).
        std:      Population standard deviation per round.
        skewness: Fisher skewness of the raw results.
        n_games:  Rounds in the sample.
    """

    values: np.ndarray
    probs: np.ndarray
    mean: float
    std: float
    skewness: float
    n_games: int

    def prob_of(self, mask: np.ndarray) -> float:
        return float(self.probs[mask].sum())

    @property
    def p_natural(self) -> float:
        """Share of rounds paid 3:2 (net +1.5)."""
        return self.prob_of(np.isclose(self.values, 1.5))

    @property
    def p_push_or_better(self) -> float:
        return self.prob_of(self.values >= 0.0)

    @property
    def p_multi_stake(self) -> float:
        """Share of rounds that won or lost two units or more."""
        return self.prob_of(np.abs(self.values) >= 2.0)

    @property
    def worst(self) -> float:
        return float(self.values[0])


@dataclass
class BankrollRequirement:
    """Smallest bankroll whose risk of ruin is at most 1 - survival_prob."""

    survival_prob: float
    required_bankroll: float
    adjustment_coefficient: float


@dataclass
class SessionSurvival:
    """Chance a bankroll lasts a fixed-length session.

    Attributes:
        bankroll:       Starting bankroll in units.
        session_length: Rounds per session.
        survival_prob:  Fraction of sessions never dipping to ≤ 0.
        mean_final:     Mean bankroll at session end; ruined sessions count
                        at the value where they stopped.
        n_sessions:     Sessions simulated.
    """

    bankroll: float
    session_length: int
    survival_prob: float
    mean_final: float
    n_sessions: int


# ─── Distribution ─────────────────────────────────────────────────────────────


def summarize_payouts(payouts: np.ndarray) -> PayoutDistribution:
    """Collapse per-round results into their discrete distribution."""
    payouts = np.asarray(payouts, dtype=np.float64)
    if payouts.size == 0:
        raise ValueError("payouts is empty")
    values, counts = np.unique(payouts, return_counts=True)
    probs = counts / payouts.size
    mean = float(np.dot(values, probs))
    return PayoutDistribution(
        values=values,
        probs=probs,
        mean=mean,
        std=math.sqrt(float(np.dot((values - mean) ** 2, probs))),
        skewness=float(stats.skew(payouts)) if values.size > 1 else 0.0,
        n_games=int(payouts.size),
    )


# ─── Ruin ─────────────────────────────────────────────────────────────────────


def adjustment_coefficient(dist: PayoutDistribution) -> float:
    """Positive root R of E[exp(-R * X)] = 1.

    Returns 0.0 for a non-positive edge (ruin is certain) and inf when no
    round ever loses (ruin is impossible).
    """
    if dist.mean <= 0.0:
        return 0.0
    if dist.worst >= 0.0:
        return math.inf

    def excess(r: float) -> float:
        return float(np.dot(dist.probs, np.expm1(-r * dist.values)))

    # excess is convex, zero at 0 and falling there, so the root lies past
    # the first point where it turns negative
    lo = dist.mean / float(np.dot(dist.probs, dist.values**2))
    while excess(lo) >= 0.0:
        lo /= 2.0
        if lo < 1e-12:
            return 0.0
    hi = 2.0 * lo
    while excess(hi) <= 0.0:
        hi *= 2.0
    return float(optimize.brentq(excess, lo, hi))


def risk_of_ruin(dist: PayoutDistribution, bankroll: float) -> float:
    """Probability a bankroll of *bankroll* units is ever exhausted."""
    if bankroll <= 0:
        return 1.0
    r = adjustment_coefficient(dist)
    if r == 0.0:
        return 1.0
    return math.exp(-r * bankroll)


def required_bankroll(dist: PayoutDistribution, survival_prob: float) -> BankrollRequirement:
    """Invert risk_of_ruin: B = -ln(1 - survival_prob) / R.

    Raises:
        ValueError: If the edge is not positive (no finite bankroll suffices)
                    or survival_prob is outside (0, 1).
    """
    if not 0.0 < survival_prob < 1.0:
        raise ValueError(f"survival_prob must be in (0, 1), got {survival_prob}")
    r = adjustment_coefficient(dist)
    if r == 0.0:
        raise ValueError(
            f"required_bankroll() requires a positive edge; got edge={dist.mean:.6f}"
        )
    b = 0.0 if math.isinf(r) else -math.log(1.0 - survival_prob) / r
    return BankrollRequirement(survival_prob=survival_prob, required_bankroll=b,
                               adjustment_coefficient=r)


# ─── Sessions ─────────────────────────────────────────────────────────────────


def compute_session_survival(
    dist: PayoutDistribution,
    bankrolls: Sequence[float],
    session_length: int = 1000,
    n_sessions: int = 1000,
    seed: int = 0,
) -> list[SessionSurvival]:
    """Play sessions drawn from *dist* and score every bankroll against them.

    All bankrolls share the same sampled sessions, so survival is monotone in
    the bankroll. A session is ruined the first time its running bankroll
    reaches ≤ 0.
    """
    if any(b <= 0 for b in bankrolls):
        raise ValueError(f"bankrolls must be positive, got {list(bankrolls)}")

    rng = np.random.default_rng(seed)
    rounds = rng.choice(dist.values, size=(n_sessions, session_length), p=dist.probs)
    running = np.cumsum(rounds, axis=1)

    out = []
    for bankroll in bankrolls:
        ruined_at = running <= -bankroll
        ruined = ruined_at.any(axis=1)
        finals = running[:, -1].copy()
        first = ruined_at.argmax(axis=1)
        finals[ruined] = running[ruined, first[ruined]]
        out.append(
            SessionSurvival(
                bankroll=float(bankroll),
                session_length=session_length,
                survival_prob=float(1.0 - ruined.mean()),
                mean_final=float(bankroll + finals.mean()),
                n_sessions=n_sessions,
            )
        )
    LOGGER.debug("Session survival over %d bankrolls, %d sessions", len(out), n_sessions)
    return out


# ─── Output ───────────────────────────────────────────────────────────────────


def print_bankroll_report(
    dist: PayoutDistribution,
    bankrolls: Sequence[float] = BANKROLL_LEVELS,
    survival: Sequence[SessionSurvival] = (),
    *,
    label: str = "",
) -> str:
    """Format and print the payout distribution, ruin and survival tables.

    Returns:
        The formatted report string (also printed to stdout).
    """
    header = f"Bankroll Risk Report{' — ' + label if label else ''}"
    lines = [
        "=" * 70,
        header,
        "=" * 70,
        "",
        "── Payout Distribution ─────────────────────────────────────────────",
        f"  Rounds simulated : {dist.n_games:>10,}",
        f"  Edge / round     : {dist.mean:>+10.4f} units  ({dist.mean * 100:+.2f}%)",
        f"  Std deviation    : {dist.std:>10.4f} units",
        f"  Skewness         : {dist.skewness:>10.4f}",
        f"  Naturals (+1.5)  : {dist.p_natural:>10.2%}",
        f"  Push or better   : {dist.p_push_or_better:>10.2%}",
        f"  |net| ≥ 2 units  : {dist.p_multi_stake:>10.2%}",
        "",
        f"  {'Net':>6}  {'P':>8}",
    ]
    lines += [f"  {v:>+6.1f}  {p:>8.4f}" for v, p in zip(dist.values, dist.probs)]
    lines += ["", "── Risk of Ruin ────────────────────────────────────────────────────"]

    r = adjustment_coefficient(dist)
    if r == 0.0:
        lines.append("  Edge ≤ 0: every bankroll is eventually ruined.")
    else:
        lines.append(f"  Adjustment coefficient R = {r:.5f}")
        for b in bankrolls:
            lines.append(f"  Bankroll {b:>6.0f} units : P(ruin) = {risk_of_ruin(dist, b):.4%}")
        lines += ["", "── Bankroll Requirements ───────────────────────────────────────────"]
        for sp in SURVIVAL_LEVELS:
            req = required_bankroll(dist, sp)
            lines.append(f"  Survival {sp:.0%}   : {req.required_bankroll:>8.1f} units")

    if survival:
        lines += [
            "",
            "── Session Survival ────────────────────────────────────────────────",
            f"  {'Bankroll':>8}  {'Rounds':>7}  {'P(survive)':>10}  {'Mean final':>10}",
        ]
        for s in survival:
            lines.append(
                f"  {s.bankroll:>8.0f}  {s.session_length:>7,}  "
                f"{s.survival_prob:>10.1%}  {s.mean_final:>10.2f}"
            )
    lines.append("")
    report = "\n".join(lines)
    print(report)
    return report


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_sim.analysis.simulator import make_policy, simulate_games

    n_games = int(sys.argv[1]) if len(sys.argv) > 1 else 10_000
    print(f"Blackjack Bankroll Risk — {n_games:,} games per policy\n")

    for name in ("basic", "random"):
        result = simulate_games(make_policy(name, seed=7), n_games, seed=42, return_payouts=True)
        dist = summarize_payouts(result.payouts)
        print_bankroll_report(
            dist,
            survival=compute_session_survival(dist, BANKROLL_LEVELS),
            label=name,
        )
