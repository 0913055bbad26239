"""
Adaptive policy: action weights learned from hand outcomes.

Two weight tables address a decision by (hand bucket, dealer bucket):

    initial     (28, 10, 4)   HIT, STAND, DOUBLE_DOWN, SPLIT   start at 0.25
    subsequent  (18, 10, 2)   HIT, STAND                       start at 0.5

Update rule, applied per trajectory step after a successful hand (one that
returned at least its own stake): add 1 to the chosen action's weight, then halve
every weight in that cell. A failed hand leaves the tables untouched. The
first step of a trajectory addresses the initial table, later steps the
subsequent table.

The cell sum after an update is (old_sum + 1) / 2, so sums drift towards 1
but are never renormalised. The weights are an exponentially decaying tally
of recent successes rather than a probability distribution: EXPLOIT sampling
treats them as raw cumulative cut points, and when they do not sum to 1 the
last action absorbs the remainder (or is never reached).

Modes:
    EXPLORE — uniform over the legal actions, ignoring the tables.
    EXPLOIT — cumulative-weight sampling over the full cell.
    GREEDY  — highest weight among the legal actions.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np

from blackjack_sim.config import (
    DEALER_BUCKETS,
    INITIAL_ACTIONS,
    INITIAL_BUCKETS,
    SUBSEQUENT_ACTIONS,
    SUBSEQUENT_BUCKETS,
)
from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.game_state import (
    DecisionContext,
    HandResult,
    PlayerPolicy,
    TrajectoryStep,
)


class Mode(Enum):
    EXPLORE = auto()
    EXPLOIT = auto()
    GREEDY = auto()


def _uniform_table(shape: tuple[int, int, int]) -> np.ndarray:
    return np.full(shape, 1.0 / shape[-1], dtype=np.float64)


@dataclass
class StrategyTable:
    """The pair of weight tables trained by one AdaptivePolicy."""
    initial: np.ndarray = field(
        default_factory=lambda: _uniform_table((INITIAL_BUCKETS, DEALER_BUCKETS, INITIAL_ACTIONS))
    )
    subsequent: np.ndarray = field(
        default_factory=lambda: _uniform_table(
            (SUBSEQUENT_BUCKETS, DEALER_BUCKETS, SUBSEQUENT_ACTIONS)
        )
    )

    def cell(self, hand_bucket: int, dealer_bucket: int, is_initial: bool) -> np.ndarray:
        """Return a view of one cell's weight vector."""
        table = self.initial if is_initial else self.subsequent
        return table[hand_bucket, dealer_bucket]

    def update(self, success: bool, trajectory: Iterable[TrajectoryStep]) -> None:
        """Reinforce every step of a successful trajectory in place.

        Args:
            success:    True if the hand returned at least its own stake.
            trajectory: (action_index, hand_bucket, dealer_bucket) steps in
                        decision order.
        """
        if not success:
            return
        for i, (action_idx, hand_bucket, dealer_bucket) in enumerate(trajectory):
            cell = self.cell(hand_bucket, dealer_bucket, is_initial=(i == 0))
            cell[action_idx] += 1.0
            cell /= 2.0


def sample_action_index(weights: np.ndarray, u: float) -> int:
    """Pick a slot by walking cumulative weights against a uniform draw.

    Returns the first index whose cumulative weight meets or exceeds *u*;
    if none does, the last index.

    Examples:
        >>> sample_action_index(np.array([0.25, 0.25, 0.25, 0.25]), 0.3)
        1
        >>> sample_action_index(np.array([0.1, 0.1]), 0.9)
        1
    """
    cumulative = 0.0
    for i, w in enumerate(weights):
        cumulative += float(w)
        if cumulative >= u:
            return i
    return len(weights) - 1


class AdaptivePolicy(PlayerPolicy):
    """Policy that samples from, and reinforces, its own StrategyTable.

    Args:
        mode: Selection mode (see Mode).
        rng:  numpy Generator for sampling. A fresh default_rng() if omitted.
    """

    name = "adaptive"

    def __init__(
        self,
        mode: Mode = Mode.EXPLOIT,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.mode = mode
        self.table = StrategyTable()
        self._rng = rng if rng is not None else np.random.default_rng()
        self.hands_observed = 0
        self.hands_reinforced = 0

    def decide(self, ctx: DecisionContext) -> Action:
        state = ctx.state
        if self.mode is Mode.EXPLORE:
            return ctx.legal_actions[int(self._rng.integers(len(ctx.legal_actions)))]

        weights = self.table.cell(state.hand_bucket, state.dealer_bucket, state.is_initial)
        if self.mode is Mode.EXPLOIT:
            return Action.from_index(sample_action_index(weights, float(self._rng.random())))
        if self.mode is Mode.GREEDY:
            legal = [a.index for a in ctx.legal_actions if a.index < len(weights)]
            return Action.from_index(max(legal, key=lambda i: weights[i]))
        raise ValueError(f"Unhandled mode: {self.mode}")

    def observe(self, result: HandResult, train: bool) -> None:
        if not train:
            return
        self.hands_observed += 1
        if result.success:
            self.hands_reinforced += 1
        self.table.update(result.success, result.trajectory)
