"""Uniform random policy: a baseline the other policies should beat."""

from __future__ import annotations

import numpy as np

from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.game_state import DecisionContext, PlayerPolicy


class RandomPolicy(PlayerPolicy):
    """Picks uniformly among the legal actions at every decision."""

    name = "random"

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    def decide(self, ctx: DecisionContext) -> Action:
        return ctx.legal_actions[int(self._rng.integers(len(ctx.legal_actions)))]
