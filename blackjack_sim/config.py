"""
House rules and run-time configuration.

A single frozen HouseRules instance describes the table: bankroll the player
sits down with, betting limits, the dealer's stand total, and the payout
multipliers applied to a settled bet (multiplier × bet is credited back to
cash, so 0 = lose, 1 = stake returned, 2 = even-money win).

Table dimensions for the adaptive policy's strategy tables live here too so
the indexer, the policy and the heat maps agree on them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

# ─── Strategy-table dimensions ────────────────────────────────────────────────

INITIAL_BUCKETS: int = 28      # 10 pair + 10 hard + 8 soft
SUBSEQUENT_BUCKETS: int = 18   # 10 hard + 8 soft
DEALER_BUCKETS: int = 10       # A, 10-value, 9, ..., 2
INITIAL_ACTIONS: int = 4       # HIT, STAND, DOUBLE_DOWN, SPLIT
SUBSEQUENT_ACTIONS: int = 2    # HIT, STAND

LOG_FORMAT: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


@dataclass(frozen=True)
class HouseRules:
    """Fixed rule set for a table.

    Attributes:
        starting_cash:        Cash a fresh player sits down with.
        min_bet:              Smallest opening bet accepted.
        max_bet:              Largest opening bet accepted.
        dealer_stand_total:   Dealer draws while its total is below this.
                              Soft totals are not special-cased.
        win_multiplier:       Multiplier for an ordinary win.
        blackjack_multiplier: Multiplier for a Jack+Ace natural.
        push_multiplier:      Multiplier for equal totals.
    """

    starting_cash: float = 1000.0
    min_bet: float = 10.0
    max_bet: float = 500.0
    dealer_stand_total: int = 17
    win_multiplier: float = 2.0
    blackjack_multiplier: float = 2.5
    push_multiplier: float = 1.0

    def __post_init__(self) -> None:
        if self.min_bet <= 0:
            raise ValueError(f"min_bet must be positive, got {self.min_bet}")
        if self.max_bet < self.min_bet:
            raise ValueError(
                f"max_bet ({self.max_bet}) must be >= min_bet ({self.min_bet})"
            )
        if self.starting_cash < 0:
            raise ValueError(f"starting_cash must be non-negative, got {self.starting_cash}")
        if not 2 <= self.dealer_stand_total <= 21:
            raise ValueError(
                f"dealer_stand_total must be in [2, 21], got {self.dealer_stand_total}"
            )


DEFAULT_RULES: HouseRules = HouseRules()


def configure_logging(level: int | str = logging.WARNING) -> None:
    """Install a basic stderr handler for the blackjack_sim loggers."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)
