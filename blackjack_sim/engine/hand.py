"""
Hand evaluation: total calculation, ace re-valuation and categorisation.

Aces start at 11. While the total is over 21 and an ace is still counted as
11, one ace at a time is re-valued to 1. A hand is soft when an ace is still
counted as 11 after that adjustment.

Category precedence (mutually exclusive, recomputed on every call since a
hand grows as cards are drawn):
    PAIR > BLACKJACK > BUST > SOFT > HARD

BLACKJACK is rank-exact: only a two-card Jack + Ace qualifies. Queen/King/10
with an Ace is an ordinary soft 21.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum, auto

from .cards import RANK_ACE, RANK_JACK, RANK_VALUES


class HandCategory(Enum):
    PAIR = auto()
    BLACKJACK = auto()
    BUST = auto()
    SOFT = auto()
    HARD = auto()


def _evaluate(cards: Sequence[int]) -> tuple[int, int]:
    """Return (total, aces still counted as 11) after ace re-valuation."""
    total = 0
    high_aces = 0
    for card in cards:
        rank = card // 4
        total += RANK_VALUES[rank]
        if rank == RANK_ACE:
            high_aces += 1

    while total > 21 and high_aces > 0:
        total -= 10
        high_aces -= 1

    return total, high_aces


def calculate_total(cards: Sequence[int]) -> int:
    """Calculate the hand total with standard ace re-valuation.

    Examples:
        >>> calculate_total((str_to_card('KH'), str_to_card('QD')))
        20
        >>> calculate_total((str_to_card('AS'), str_to_card('9H')))
        20
        >>> calculate_total((str_to_card('AC'), str_to_card('AS'), str_to_card('9D')))
        21
    """
    return _evaluate(cards)[0]


def is_bust(total: int) -> bool:
    """Return True if a total exceeds 21 (bust)."""
    return total > 21


def is_soft(cards: Sequence[int]) -> bool:
    """Return True if an ace is still counted as 11 in the hand total.

    Examples:
        >>> is_soft((str_to_card('AS'), str_to_card('6H')))                     # soft 17
        True
        >>> is_soft((str_to_card('AC'), str_to_card('AS'), str_to_card('9D')))  # 11 + 1 + 9
        True
        >>> is_soft((str_to_card('AS'), str_to_card('7H'), str_to_card('8D')))  # 1 + 7 + 8
        False
    """
    return _evaluate(cards)[1] > 0


def is_pair(cards: Sequence[int]) -> bool:
    """Return True for exactly two cards of identical rank."""
    return len(cards) == 2 and cards[0] // 4 == cards[1] // 4


def is_blackjack(cards: Sequence[int]) -> bool:
    """Return True for exactly {Jack, Ace} in either order."""
    if len(cards) != 2:
        return False
    return {cards[0] // 4, cards[1] // 4} == {RANK_JACK, RANK_ACE}


def categorize(cards: Sequence[int]) -> HandCategory:
    """Classify a hand. Never cache the result; re-evaluate after each draw."""
    if is_pair(cards):
        return HandCategory.PAIR
    if is_blackjack(cards):
        return HandCategory.BLACKJACK

    total, high_aces = _evaluate(cards)
    if is_bust(total):
        return HandCategory.BUST
    if high_aces > 0:
        return HandCategory.SOFT
    return HandCategory.HARD


def describe_hand(cards: Sequence[int]) -> str:
    """Return a one-line category/total summary, e.g. 'SOFT 18'."""
    return f"{categorize(cards).name} {calculate_total(cards)}"
