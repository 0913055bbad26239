"""
Fixed basic-strategy policy.

Conventional basic strategy (dealer stands on all 17s, double on any first
two cards) as a nested decision table keyed on hand category, then on total
or pair rank, then on the dealer up-card compared against coarse groups such
as 2–6, 7–8 and 9–A.

    Pairs   A,A  8,8  always split          10,10  never split
            9,9  split 2–6, 8–9              7,7    split 2–7
            6,6  split 2–6                   4,4    split 5–6
            3,3  2,2  split 2–7              5,5    played as hard 10
    Hard    ≥17 S | 13–16 S vs 2–6 | 12 S vs 4–6 | 11 D vs 2–10
            10 D vs 2–9 | 9 D vs 3–6 | otherwise H
    Soft    19–21 S | 18 D vs 3–6, S vs 2/7/8, H vs 9–A
            17 D vs 3–6 | 15–16 D vs 4–6 | 13–14 D vs 5–6 | otherwise H

Doubling is only available on the first decision of a hand. Where the table
says double but doubling is not available, hard totals and soft ≤17 hit and
soft 18 stands. Afterwards an unaffordable DOUBLE_DOWN is downgraded to HIT.
"""

from __future__ import annotations

from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.cards import RANK_ACE, RANK_VALUES, TEN_VALUE_RANKS
from blackjack_sim.engine.game_state import DecisionContext, PlayerPolicy
from blackjack_sim.engine.hand import HandCategory

from .state_index import dealer_value


# ─── Table branches ───────────────────────────────────────────────────────────

def _double_or(fallback: Action, is_initial: bool) -> Action:
    return Action.DOUBLE_DOWN if is_initial else fallback


def _should_split(pair_rank: int, dealer: int) -> bool:
    if pair_rank == RANK_ACE:
        return True
    if pair_rank in TEN_VALUE_RANKS:
        return False

    value = RANK_VALUES[pair_rank]
    if value == 9:
        return 2 <= dealer <= 6 or 8 <= dealer <= 9
    if value == 8:
        return True
    if value == 7:
        return dealer <= 7
    if value == 6:
        return dealer <= 6
    if value == 5:
        return False
    if value == 4:
        return 5 <= dealer <= 6
    # 3,3 and 2,2
    return dealer <= 7


def _hard_action(total: int, dealer: int, is_initial: bool) -> Action:
    if total >= 17:
        return Action.STAND
    if total >= 13:
        return Action.STAND if dealer <= 6 else Action.HIT
    if total == 12:
        return Action.STAND if 4 <= dealer <= 6 else Action.HIT
    if total == 11:
        return _double_or(Action.HIT, is_initial) if dealer <= 10 else Action.HIT
    if total == 10:
        return _double_or(Action.HIT, is_initial) if dealer <= 9 else Action.HIT
    if total == 9:
        return _double_or(Action.HIT, is_initial) if 3 <= dealer <= 6 else Action.HIT
    return Action.HIT


def _soft_action(total: int, dealer: int, is_initial: bool) -> Action:
    if total >= 19:
        return Action.STAND
    if total == 18:
        if 3 <= dealer <= 6:
            return _double_or(Action.STAND, is_initial)
        if dealer in (2, 7, 8):
            return Action.STAND
        return Action.HIT
    if total == 17:
        low = 3
    elif total >= 15:
        low = 4
    elif total >= 13:
        low = 5
    else:
        return Action.HIT
    return _double_or(Action.HIT, is_initial) if low <= dealer <= 6 else Action.HIT


def basic_strategy_action(
    category: HandCategory,
    total: int,
    pair_rank: int | None,
    dealer_bucket: int,
    is_initial: bool,
    can_split: bool = True,
) -> Action:
    """Look up the basic-strategy action for a decision state.

    Pure function of its arguments.

    Args:
        category:      Hand category of the active hand.
        total:         Hand total after ace re-valuation.
        pair_rank:     Rank index of the paired card (PAIR only).
        dealer_bucket: Dealer up-card bucket (0=A, 1=10-value, ..., 9=2).
        is_initial:    True on the first decision of a hand.
        can_split:     False when splitting is not on offer.

    Returns:
        The table's Action. SPLIT is only returned when is_initial and
        can_split; DOUBLE_DOWN only when is_initial.

    Raises:
        ValueError: For a BUST hand, which never reaches a decision.
    """
    dealer = dealer_value(dealer_bucket)

    if category is HandCategory.PAIR:
        if pair_rank is None:
            raise ValueError("PAIR state without a pair rank")
        if is_initial and can_split and _should_split(pair_rank, dealer):
            return Action.SPLIT
        if pair_rank == RANK_ACE:
            return _soft_action(total, dealer, is_initial)
        return _hard_action(total, dealer, is_initial)
    if category is HandCategory.BLACKJACK:
        return Action.STAND
    if category is HandCategory.SOFT:
        return _soft_action(total, dealer, is_initial)
    if category is HandCategory.HARD:
        return _hard_action(total, dealer, is_initial)
    if category is HandCategory.BUST:
        raise ValueError(f"No decision for a busted hand (total={total})")
    raise ValueError(f"Unhandled hand category: {category}")


# ─── Policy ───────────────────────────────────────────────────────────────────

class BasicStrategyPolicy(PlayerPolicy):
    """Plays the fixed basic-strategy table."""

    name = "basic"

    def decide(self, ctx: DecisionContext) -> Action:
        state = ctx.state
        can_split = (
            state.is_initial
            and state.category is HandCategory.PAIR
            and ctx.cash >= ctx.bet
        )
        action = basic_strategy_action(
            state.category,
            state.total,
            state.pair_rank,
            state.dealer_bucket,
            state.is_initial,
            can_split=can_split,
        )
        if action is Action.DOUBLE_DOWN and ctx.cash < ctx.bet:
            return Action.HIT
        return action
