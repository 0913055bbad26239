"""
Monte Carlo simulator for comparing blackjack policies.

Every game seats a fresh player with the table's starting cash, plays one
round (opening bet plus any split hands) against a fresh card source, and
records the net change in cash. Net results are reported in betting units
(net / min_bet) so that policies are compared on the same scale.

Key implementation notes:
    - Card randomness comes from one numpy Generator per run (seeded), from
      which every game's Deck/Shoe draws. Policy randomness lives in the
      policy's own Generator; make_policy() seeds it.
    - train_adaptive() runs games with train=True so the policy's observe()
      hook updates its StrategyTable after every hand.
    - compare_policies() trains an adaptive policy first and evaluates it in
      GREEDY mode.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from blackjack_sim.config import DEFAULT_RULES, HouseRules
from blackjack_sim.engine.deck import make_card_source
from blackjack_sim.engine.game_state import PlayerPolicy, new_session, play_game
from blackjack_sim.engine.rules import Outcome
from blackjack_sim.policies.adaptive import AdaptivePolicy, Mode
from blackjack_sim.policies.basic_strategy import BasicStrategyPolicy
from blackjack_sim.policies.random_policy import RandomPolicy

LOGGER = logging.getLogger(__name__)

POLICY_NAMES: tuple[str, ...] = ("basic", "random", "adaptive")


# ─── Result types ─────────────────────────────────────────────────────────────


@dataclass
class SimulationResult:
    """Aggregate statistics from a Monte Carlo run.

    Attributes:
        policy_name:  Name of the evaluated policy.
        n_games:      Rounds simulated (one opening bet each).
        n_hands:      Hands settled (> n_games when splits occurred).
        mean_ev:      Mean net result per game in betting units.
        std_ev:       Sample standard deviation of per-game net results.
        ci_95_low:    Lower bound of the 95% confidence interval for mean_ev.
        ci_95_high:   Upper bound of the 95% confidence interval for mean_ev.
        n_wins:       Hands settled as WIN.
        n_losses:     Hands settled as LOSS.
        n_pushes:     Hands settled as PUSH.
        source:       'deck' or 'shoe'.
        payouts:      Per-game net results in units (float64, length n_games),
                      or None unless return_payouts=True.
    """

    policy_name: str
    n_games: int
    n_hands: int
    mean_ev: float
    std_ev: float
    ci_95_low: float
    ci_95_high: float
    n_wins: int
    n_losses: int
    n_pushes: int
    source: str
    payouts: np.ndarray | None = None

    @property
    def win_rate(self) -> float:
        return self.n_wins / self.n_hands if self.n_hands else 0.0

    @property
    def house_edge_pct(self) -> float:
        return -self.mean_ev * 100.0

    def __str__(self) -> str:
        sign = "+" if self.mean_ev >= 0 else ""
        return (
            f"{self.policy_name:<9} | Games: {self.n_games:,} | "
            f"EV: {sign}{self.mean_ev:.4f} units | "
            f"95% CI: [{self.ci_95_low:.4f}, {self.ci_95_high:.4f}] | "
            f"W/L/P: {self.n_wins}/{self.n_losses}/{self.n_pushes}"
        )


@dataclass
class TrainingResult:
    """Progress of an adaptive training run.

    Attributes:
        n_games:          Training rounds played.
        window:           Rounds per success-rate window.
        success_rates:    Fraction of successful hands per window.
        hands_observed:   Hands fed to the update rule.
        hands_reinforced: Hands that counted as success.
    """

    n_games: int
    window: int
    success_rates: np.ndarray
    hands_observed: int
    hands_reinforced: int

    @property
    def final_success_rate(self) -> float:
        return float(self.success_rates[-1]) if len(self.success_rates) else 0.0


# ─── Policy factory ───────────────────────────────────────────────────────────


def make_policy(name: str, seed: int | None = None) -> PlayerPolicy:
    """Build a non-interactive policy by name with its own seeded Generator."""
    rng = np.random.default_rng(seed)
    if name == "basic":
        return BasicStrategyPolicy()
    if name == "random":
        return RandomPolicy(rng)
    if name == "adaptive":
        return AdaptivePolicy(Mode.EXPLOIT, rng)
    raise ValueError(f"Unknown policy {name!r}; expected one of {POLICY_NAMES}")


# ─── Core simulation loop ─────────────────────────────────────────────────────


def simulate_games(
    policy: PlayerPolicy,
    n_games: int = 10_000,
    seed: int | None = 42,
    source: str = "deck",
    rules: HouseRules = DEFAULT_RULES,
    train: bool = False,
    return_payouts: bool = False,
) -> SimulationResult:
    """Simulate n_games rounds with *policy* and return aggregate statistics.

    Args:
        policy:         Any non-interactive PlayerPolicy.
        n_games:        Number of rounds (must be ≥ 2 for a sample std).
        seed:           Seed for the card Generator; None for a
                        non-deterministic run.
        source:         'deck' (fresh 52-card deck per round) or 'shoe'.
        rules:          House rules for every round.
        train:          Pass train=True to the policy's observe() hook.
        return_payouts: Attach the per-game net array to the result.

    Returns:
        SimulationResult for the run.
    """
    if n_games < 2:
        raise ValueError(f"n_games must be at least 2, got {n_games}")

    rng = np.random.default_rng(seed)
    nets = np.empty(n_games, dtype=np.float64)
    counts = {Outcome.WIN: 0, Outcome.LOSS: 0, Outcome.PUSH: 0}
    n_hands = 0

    LOGGER.info("Simulating %d games: policy=%s source=%s train=%s",
                n_games, policy.name, source, train)

    for i in range(n_games):
        session = new_session(policy, make_card_source(source, rng), rules, train)
        for result in play_game(session):
            counts[result.outcome] += 1
            n_hands += 1
        nets[i] = (session.player.cash - rules.starting_cash) / rules.min_bet

    mean = float(np.mean(nets))
    std = float(np.std(nets, ddof=1))
    ci_margin = 1.96 * std / math.sqrt(n_games)

    result = SimulationResult(
        policy_name=policy.name,
        n_games=n_games,
        n_hands=n_hands,
        mean_ev=mean,
        std_ev=std,
        ci_95_low=mean - ci_margin,
        ci_95_high=mean + ci_margin,
        n_wins=counts[Outcome.WIN],
        n_losses=counts[Outcome.LOSS],
        n_pushes=counts[Outcome.PUSH],
        source=source,
        payouts=nets if return_payouts else None,
    )
    LOGGER.info("%s", result)
    return result


def train_adaptive(
    policy: AdaptivePolicy,
    n_games: int = 50_000,
    seed: int | None = 0,
    source: str = "deck",
    rules: HouseRules = DEFAULT_RULES,
    mode: Mode = Mode.EXPLOIT,
    window: int = 1_000,
) -> TrainingResult:
    """Train *policy* in place for n_games rounds.

    The policy plays in *mode* during training and its previous mode is
    restored afterwards.

    Returns:
        TrainingResult with the windowed success rate.
    """
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}")

    rng = np.random.default_rng(seed)
    previous_mode = policy.mode
    policy.mode = mode
    observed_start = policy.hands_observed
    reinforced_start = policy.hands_reinforced

    rates: list[float] = []
    window_hands = window_successes = 0
    LOGGER.info("Training adaptive policy for %d games (mode=%s)", n_games, mode.name)

    try:
        for i in range(n_games):
            session = new_session(policy, make_card_source(source, rng), rules, train=True)
            for result in play_game(session):
                window_hands += 1
                window_successes += int(result.success)
            if (i + 1) % window == 0:
                rates.append(window_successes / window_hands)
                LOGGER.debug("Games %d: success rate %.4f", i + 1, rates[-1])
                window_hands = window_successes = 0
    finally:
        policy.mode = previous_mode

    if window_hands:
        rates.append(window_successes / window_hands)

    result = TrainingResult(
        n_games=n_games,
        window=window,
        success_rates=np.array(rates, dtype=np.float64),
        hands_observed=policy.hands_observed - observed_start,
        hands_reinforced=policy.hands_reinforced - reinforced_start,
    )
    LOGGER.info("Training done: final success rate %.4f", result.final_success_rate)
    return result


def compare_policies(
    n_games: int = 20_000,
    seed: int = 42,
    training_games: int = 50_000,
    source: str = "deck",
    rules: HouseRules = DEFAULT_RULES,
) -> dict[str, SimulationResult]:
    """Evaluate basic, random and (trained, greedy) adaptive policies.

    All three evaluations use the same card seed.

    Returns:
        {'basic': ..., 'random': ..., 'adaptive': ...}
    """
    adaptive = make_policy("adaptive", seed)
    train_adaptive(adaptive, training_games, seed=seed + 1, source=source, rules=rules)
    adaptive.mode = Mode.GREEDY

    policies = [make_policy("basic", seed), make_policy("random", seed), adaptive]
    return {
        p.name: simulate_games(p, n_games, seed=seed, source=source, rules=rules)
        for p in policies
    }


# ─── __main__ ─────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("Policy comparison — 20,000 games each, adaptive trained on 50,000\n")
    for res in compare_policies().values():
        print(res)
