"""
Shared pytest fixtures for blackjack simulator tests.

Provides convenience wrappers around str_to_card for building known hands,
stacked card sources for deterministic games, and a scripted policy that
replays a fixed list of actions.
"""

from __future__ import annotations

import numpy as np
import pytest

from blackjack_sim.config import HouseRules
from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.cards import str_to_card
from blackjack_sim.engine.deck import StackedDeck, create_deck
from blackjack_sim.engine.game_state import (
    DecisionContext,
    HandResult,
    PlayerPolicy,
    TableSession,
    new_session,
)


def hand(*card_strs: str) -> tuple[int, ...]:
    """Build a hand tuple from human-readable card strings.

    Examples:
        >>> hand('AS', 'AC')   # Ace of Spades, Ace of Clubs
        (51, 48)
        >>> hand('7C', '7D', '7H')
        (20, 21, 22)
    """
    return tuple(str_to_card(s) for s in card_strs)


class ScriptedPolicy(PlayerPolicy):
    """Replays *actions* in order and records every context and result."""

    name = "scripted"

    def __init__(self, *actions: Action, bet: float | None = None) -> None:
        self.actions = list(actions)
        self.bet = bet
        self.contexts: list[DecisionContext] = []
        self.results: list[tuple[HandResult, bool]] = []

    def place_bet(self, rules: HouseRules, cash: float) -> float:
        return self.bet if self.bet is not None else rules.min_bet

    def decide(self, ctx: DecisionContext) -> Action:
        self.contexts.append(ctx)
        return self.actions.pop(0)

    def observe(self, result: HandResult, train: bool) -> None:
        self.results.append((result, train))


def stacked_session(
    policy: PlayerPolicy,
    *card_strs: str,
    rules: HouseRules | None = None,
    train: bool = False,
) -> TableSession:
    """Seat *policy* at a table dealing *card_strs* in order.

    Deal order: player card 1, player card 2, dealer hole card, dealer up-card,
    then every later draw.
    """
    source = StackedDeck.from_strs(*card_strs)
    if rules is None:
        return new_session(policy, source, train=train)
    return new_session(policy, source, rules, train=train)


@pytest.fixture
def fresh_deck() -> np.ndarray:
    """Return a full 52-card deck."""
    return create_deck()


@pytest.fixture
def h():
    """Expose the hand() helper as a fixture for convenience."""
    return hand
