"""
State indexing shared by the basic-strategy table and the adaptive tables.

A decision state is bucketed into small integer coordinates:

    Dealer up-card (10 buckets):
        A→0, 10/J/Q/K→1, 9→2, 8→3, 7→4, 6→5, 5→6, 4→7, 3→8, 2→9

    Initial player hand (28 buckets):
        0–9    PAIR by rank     A, 10, 9, 8, 7, 6, 5, 4, 3, 2
        10–19  HARD by total    ≥17, 16, 15, 14, 13, 12, 11, 10, 9, ≤8
        20–27  SOFT by total    20, 19, 18, 17, 16, 15, 14, 13

    Subsequent player hand (18 buckets):
        0–9    HARD by total    ≥17, ..., ≤8
        10–17  SOFT by total    20, ..., 13

Soft 21 shares the "≥17 hard" bucket in both layouts (bucket 10 initially,
bucket 0 afterwards), and so does a Jack+Ace natural. Soft 12 only arises as
A+A; when it is not indexed as a pair (after a split) it uses the hard-12
bucket.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

from blackjack_sim.config import DEALER_BUCKETS
from blackjack_sim.engine.cards import RANK_ACE, TEN_VALUE_RANKS, RANK_VALUES
from blackjack_sim.engine.hand import HandCategory, calculate_total, categorize, is_soft

_PAIR_OFFSET: int = 0
_INITIAL_HARD_OFFSET: int = 10
_INITIAL_SOFT_OFFSET: int = 20
_SUBSEQUENT_SOFT_OFFSET: int = 10


class DecisionState(NamedTuple):
    """What a policy observes at one decision point.

    Attributes:
        category:      HandCategory of the player's active hand.
        total:         Player total after ace re-valuation.
        pair_rank:     Rank index of the paired card, or None if not a pair.
        dealer_bucket: Dealer up-card bucket (0–9).
        hand_bucket:   Player bucket in the initial (0–27) or subsequent
                       (0–17) layout depending on ``is_initial``.
        is_initial:    True for the first decision on a hand.
    """
    category: HandCategory
    total: int
    pair_rank: int | None
    dealer_bucket: int
    hand_bucket: int
    is_initial: bool


# ─── Bucketing ────────────────────────────────────────────────────────────────

def rank_bucket(rank: int) -> int:
    """Bucket a rank index as A→0, ten-value→1, 9→2, ..., 2→9."""
    if rank == RANK_ACE:
        return 0
    if rank in TEN_VALUE_RANKS:
        return 1
    return 11 - RANK_VALUES[rank]


def dealer_bucket(card: int) -> int:
    """Bucket the dealer's up-card.

    Examples:
        >>> dealer_bucket(str_to_card('AS'))
        0
        >>> dealer_bucket(str_to_card('QH'))
        1
        >>> dealer_bucket(str_to_card('2C'))
        9
    """
    return rank_bucket(card // 4)


def dealer_value(bucket: int) -> int:
    """Invert a dealer bucket to the up-card's point value (Ace = 11)."""
    if not 0 <= bucket < DEALER_BUCKETS:
        raise ValueError(f"Dealer bucket out of range: {bucket}")
    return 11 - bucket


def _hard_offset(total: int) -> int:
    """≥17→0, 16→1, ..., 9→8, ≤8→9."""
    return min(max(17 - total, 0), 9)


def _soft_offset(total: int) -> int | None:
    """20→0, ..., 13→7; None for totals outside the soft rows."""
    if 13 <= total <= 20:
        return 20 - total
    return None


def initial_bucket(cards: Sequence[int]) -> int:
    """Bucket a hand for the initial decision (0–27).

    Raises:
        ValueError: For a busted hand, which never reaches a decision.
    """
    category = categorize(cards)
    total = calculate_total(cards)

    if category is HandCategory.PAIR:
        return _PAIR_OFFSET + rank_bucket(cards[0] // 4)
    if category is HandCategory.BUST:
        raise ValueError(f"Cannot index a busted hand (total={total})")
    if category is HandCategory.BLACKJACK:
        return _INITIAL_HARD_OFFSET
    if category is HandCategory.SOFT:
        offset = _soft_offset(total)
        if offset is not None:
            return _INITIAL_SOFT_OFFSET + offset
        return _INITIAL_HARD_OFFSET + _hard_offset(total)
    if category is HandCategory.HARD:
        return _INITIAL_HARD_OFFSET + _hard_offset(total)
    raise ValueError(f"Unhandled hand category: {category}")


def subsequent_bucket(cards: Sequence[int]) -> int:
    """Bucket a hand for a hit/stand decision after the first (0–17).

    Raises:
        ValueError: For a busted hand.
    """
    category = categorize(cards)
    total = calculate_total(cards)

    if category is HandCategory.BUST:
        raise ValueError(f"Cannot index a busted hand (total={total})")
    if category is HandCategory.BLACKJACK:
        return 0
    if category is HandCategory.PAIR:
        # Only reachable after a split; index by total like any other hand.
        soft = is_soft(cards)
    elif category is HandCategory.SOFT:
        soft = True
    elif category is HandCategory.HARD:
        soft = False
    else:
        raise ValueError(f"Unhandled hand category: {category}")

    if soft:
        offset = _soft_offset(total)
        if offset is not None:
            return _SUBSEQUENT_SOFT_OFFSET + offset
    return _hard_offset(total)


def make_decision_state(
    cards: Sequence[int],
    dealer_upcard: int,
    is_initial: bool,
) -> DecisionState:
    """Extract a DecisionState from the active hand and dealer up-card.

    Example:
        >>> make_decision_state(hand('10C', '6D'), str_to_card('7H'), True)
        DecisionState(category=<HandCategory.HARD: 5>, total=16, pair_rank=None,
                      dealer_bucket=4, hand_bucket=11, is_initial=True)
    """
    category = categorize(cards)
    pair_rank = cards[0] // 4 if category is HandCategory.PAIR else None
    bucket = initial_bucket(cards) if is_initial else subsequent_bucket(cards)
    return DecisionState(
        category=category,
        total=calculate_total(cards),
        pair_rank=pair_rank,
        dealer_bucket=dealer_bucket(dealer_upcard),
        hand_bucket=bucket,
        is_initial=is_initial,
    )
