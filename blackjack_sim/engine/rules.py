"""
Settlement: hand comparison and payout multiplier.

The multiplier is applied to the bet and the product is credited back to
cash (the bet itself was debited when it was placed):

    0.0 = lose, 1.0 = push (stake returned), 2.0 = even-money win,
    2.5 = Jack+Ace blackjack win

Settlement rules applied in order:
    1. Player BLACKJACK                       → WIN, blackjack multiplier
    2. Player ≤ 21 and dealer > 21            → WIN, 2.0
    3. Player > 21 (regardless of dealer)     → LOSS, 0.0
    4. Player total > dealer total            → WIN, 2.0
    5. Player total < dealer total            → LOSS, 0.0
    6. Equal totals                           → PUSH, 1.0
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum, auto

from blackjack_sim.config import DEFAULT_RULES, HouseRules

from .hand import HandCategory, calculate_total, categorize, is_bust


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    PUSH = auto()


def settle_hand(
    player_cards: Sequence[int],
    dealer_cards: Sequence[int],
    rules: HouseRules = DEFAULT_RULES,
) -> tuple[Outcome, float]:
    """Determine the outcome and payout multiplier for a completed hand.

    Args:
        player_cards: Player's final hand.
        dealer_cards: Dealer's final hand.
        rules:        House rules supplying the multipliers.

    Returns:
        (Outcome, multiplier) where multiplier × bet is credited to cash.
    """
    # Blackjack is checked before anything else, including a dealer natural.
    if categorize(player_cards) is HandCategory.BLACKJACK:
        return Outcome.WIN, rules.blackjack_multiplier

    player_total = calculate_total(player_cards)
    dealer_total = calculate_total(dealer_cards)

    if not is_bust(player_total) and is_bust(dealer_total):
        return Outcome.WIN, rules.win_multiplier

    # Bust-first: a busted player loses even when the dealer also busted.
    if is_bust(player_total):
        return Outcome.LOSS, 0.0

    if player_total > dealer_total:
        return Outcome.WIN, rules.win_multiplier
    if player_total < dealer_total:
        return Outcome.LOSS, 0.0
    return Outcome.PUSH, rules.push_multiplier


def calculate_payout(multiplier: float, bet: float) -> float:
    """Return the amount credited to cash for a settled bet.

    Examples:
        >>> calculate_payout(2.5, 10.0)   # blackjack on a 10 bet
        25.0
        >>> calculate_payout(0.0, 10.0)
        0.0
    """
    return multiplier * bet
