"""Text reports for blackjack policy evaluation.

Public functions format simulator output into human-readable tables:

    print_policy_comparison(results)   — EV, CI, W/L/P and house edge per policy
    print_training_summary(training)   — windowed success rate of a training run
    print_adaptive_summary(table)      — learned table vs basic strategy
"""

from __future__ import annotations

import numpy as np

from blackjack_sim.analysis.heat_maps import (
    ACTION_LETTERS,
    DEALER_LABELS,
    agreement_rate,
    bucket_labels,
    build_adaptive_matrix,
    build_basic_strategy_matrix,
)
from blackjack_sim.analysis.simulator import SimulationResult, TrainingResult
from blackjack_sim.policies.adaptive import StrategyTable

# Conventional basic strategy under these rules (S17, double any two,
# no surrender, 3:2 natural) gives up roughly half a percent.
_REFERENCE_HOUSE_EDGE_PCT: float = 0.5


# ─── Public report functions ──────────────────────────────────────────────────

def print_policy_comparison(results: dict[str, SimulationResult]) -> None:
    """Print one row per policy: EV per game, 95% CI, outcome counts.

    Args:
        results: Mapping policy name → SimulationResult, e.g. from
                 compare_policies().
    """
    print("=" * 72)
    print("Policy Comparison  (net result per game, betting units)")
    print("=" * 72)
    print(
        f"  {'Policy':<9}  {'Games':>7}  {'EV':>8}  {'95% CI':>19}  "
        f"{'Win%':>6}  {'Edge%':>6}"
    )
    print(
        f"  {'-' * 9}  {'-' * 7}  {'-' * 8}  {'-' * 19}  "
        f"{'-' * 6}  {'-' * 6}"
    )
    for name, res in results.items():
        ci = f"[{res.ci_95_low:+.4f}, {res.ci_95_high:+.4f}]"
        print(
            f"  {name:<9}  {res.n_games:>7,}  {res.mean_ev:>+8.4f}  {ci:>19}  "
            f"{res.win_rate * 100:>5.1f}%  {res.house_edge_pct:>+5.2f}%"
        )
    print()
    print(f"  Reference: basic strategy edge ≈ {_REFERENCE_HOUSE_EDGE_PCT:.1f}% "
          "(infinite deck, these rules)")

    if "basic" in results:
        base = results["basic"].mean_ev
        for name, res in results.items():
            if name == "basic":
                continue
            print(f"  {name} vs basic: {(res.mean_ev - base):+.4f} units/game")
    print()


def print_training_summary(training: TrainingResult) -> None:
    """Print the windowed success rate of an adaptive training run."""
    rates = training.success_rates
    print("=" * 56)
    print("Adaptive Training Summary")
    print("=" * 56)
    print(f"  Games played:      {training.n_games:,}")
    print(f"  Hands observed:    {training.hands_observed:,}")
    print(f"  Hands reinforced:  {training.hands_reinforced:,}")
    if len(rates) == 0:
        print("  (no complete windows)")
        print()
        return

    print(f"  First window:      {rates[0]:.4f}")
    print(f"  Final window:      {training.final_success_rate:.4f}")
    print(f"  Best window:       {float(np.max(rates)):.4f}")
    print()
    print(f"  {'Games':>8}  {'Success':>8}")
    print(f"  {'-' * 8}  {'-' * 8}")
    step = max(1, len(rates) // 10)
    for i in range(0, len(rates), step):
        games = min((i + 1) * training.window, training.n_games)
        print(f"  {games:>8,}  {rates[i]:>8.4f}")
    print()


def print_adaptive_summary(table: StrategyTable, top_n: int = 10) -> None:
    """Print how a learned table compares with basic strategy.

    Lists the agreement rate over learned cells, then the *top_n* learned
    first-decision cells whose greedy action differs from basic strategy,
    ordered by the learned weight.

    Args:
        table: StrategyTable of an AdaptivePolicy.
        top_n: Number of disagreements to list.
    """
    basic = build_basic_strategy_matrix()
    learned, best = build_adaptive_matrix(table, is_initial=True)
    labels = bucket_labels(True)
    n_learned = int(np.sum(~np.isnan(learned)))

    print("=" * 56)
    print("Learned Table vs Basic Strategy  (first decision)")
    print("=" * 56)
    print(f"  Learned cells:   {n_learned} / {learned.size}")
    print(f"  Agreement:       {agreement_rate(table):.1%}")
    print()

    disagree = [
        (best[r, c], r, c)
        for r in range(learned.shape[0])
        for c in range(learned.shape[1])
        if not np.isnan(learned[r, c]) and learned[r, c] != basic[r, c]
    ]
    disagree.sort(reverse=True)
    if not disagree:
        print("  (no disagreements)")
        print()
        return

    print(f"  {'Hand':>6}  {'Dealer':>6}  {'Basic':>5}  {'Learned':>7}  {'Weight':>6}")
    print(f"  {'-' * 6}  {'-' * 6}  {'-' * 5}  {'-' * 7}  {'-' * 6}")
    for weight, r, c in disagree[:top_n]:
        print(
            f"  {labels[r]:>6}  {DEALER_LABELS[c]:>6}  {ACTION_LETTERS[int(basic[r, c])]:>5}  "
            f"{ACTION_LETTERS[int(learned[r, c])]:>7}  {weight:>6.3f}"
        )
    print()


# ─── Entry point ──────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import sys

    from blackjack_sim.analysis.simulator import compare_policies, make_policy, train_adaptive

    n_games = int(sys.argv[1]) if len(sys.argv) > 1 else 20_000
    print(f"Comparing policies over {n_games:,} games …")
    print_policy_comparison(compare_policies(n_games=n_games, training_games=n_games))

    policy = make_policy("adaptive", seed=0)
    print_training_summary(train_adaptive(policy, n_games))
    print_adaptive_summary(policy.table)
