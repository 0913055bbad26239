"""
Card sources.

Every source exposes ``draw() -> int``; the game engine is agnostic to which
one it is handed.

    Deck        — single 52-card deck, drawn without replacement. Shuffled
                  once in place (uniform random permutation) and exhausted
                  as drawn.
    Shoe        — infinite shoe, drawn with replacement: every draw is an
                  independent uniform pick over the 52 cards.
    StackedDeck — fixed card order, for deterministic tests and replays.

Randomness comes from a numpy Generator owned by the source, so two sessions
never share random state.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

import numpy as np

from .cards import NUM_CARDS, str_to_card


class CardSource(Protocol):
    def draw(self) -> int: ...


def create_deck() -> np.ndarray:
    """Return an ordered 52-card deck as an int64 array of card indices."""
    return np.arange(NUM_CARDS, dtype=np.int64)


class Deck:
    """Finite 52-card deck without replacement.

    Args:
        rng: numpy Generator used for the shuffle. A fresh default_rng()
             is created when omitted.
    """

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()
        self._cards = create_deck()
        self._rng.shuffle(self._cards)
        self._next = 0

    def draw(self) -> int:
        """Deal the next card.

        Raises:
            ValueError: If the deck is empty.
        """
        if self._next >= len(self._cards):
            raise ValueError("Cannot deal from an empty deck.")
        card = int(self._cards[self._next])
        self._next += 1
        return card

    def cards_remaining(self) -> int:
        return len(self._cards) - self._next


class Shoe:
    """Infinite shoe: each draw is independently uniform over 52 cards."""

    def __init__(self, rng: np.random.Generator | None = None) -> None:
        self._rng = rng if rng is not None else np.random.default_rng()

    def draw(self) -> int:
        return int(self._rng.integers(NUM_CARDS))


class StackedDeck:
    """Deals a predetermined sequence of cards in order.

    Examples:
        >>> deck = StackedDeck.from_strs('10C', '6D', 'AH')
        >>> deck.draw()
        32
    """

    def __init__(self, cards: Iterable[int]) -> None:
        self._cards = list(cards)
        self._next = 0

    @classmethod
    def from_strs(cls, *card_strs: str) -> StackedDeck:
        return cls(str_to_card(s) for s in card_strs)

    def draw(self) -> int:
        if self._next >= len(self._cards):
            raise ValueError("Cannot deal from an empty deck.")
        card = self._cards[self._next]
        self._next += 1
        return card

    def cards_remaining(self) -> int:
        return len(self._cards) - self._next


def make_card_source(kind: str, rng: np.random.Generator | None = None) -> CardSource:
    """Build a random card source by name: 'deck' or 'shoe'."""
    if kind == "deck":
        return Deck(rng)
    if kind == "shoe":
        return Shoe(rng)
    raise ValueError(f"Unknown card source {kind!r}; expected 'deck' or 'shoe'")
