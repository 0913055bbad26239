"""
Table state and complete hand simulation.

Implements the per-hand flow shared by every policy:
    DEALT → INITIAL_DECISION → [SPLIT_EXPANSION] → SUBSEQUENT_DECISIONS →
    DEALER_PLAY → SETTLEMENT → DONE

Rules modelled here:
    - The player's hands form a queue; the front hand is the one in play.
      play_game() runs play_hand() until the queue is empty, which is how the
      second hand of a split gets played.
    - DOUBLE_DOWN: bet doubles, exactly one card, straight to the dealer.
    - SPLIT: the second card seeds a new hand at the back of the queue with a
      matching bet; the original hand draws one card and continues with
      hit/stand decisions only.
    - DOUBLE_DOWN needs cash ≥ bet; SPLIT needs a pair and cash ≥ bet.
      An unaffordable or illegal choice is played as HIT.
    - A Jack+Ace natural skips the player's decisions.
    - The dealer draws to 17 (soft 17 stands) even when the player busted.

Every decision is indexed into (action, hand bucket, dealer bucket) and the
resulting trajectory is handed to the policy after settlement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import NamedTuple

from blackjack_sim.config import DEFAULT_RULES, HouseRules
from blackjack_sim.policies.state_index import DecisionState, make_decision_state

from .actions import Action
from .cards import hand_to_str
from .deck import CardSource
from .hand import HandCategory, calculate_total, categorize
from .rules import Outcome, calculate_payout, settle_hand

LOGGER = logging.getLogger(__name__)


# ─── Enumerations ─────────────────────────────────────────────────────────────

class Phase(Enum):
    DEALT = auto()
    INITIAL_DECISION = auto()
    SPLIT_EXPANSION = auto()
    SUBSEQUENT_DECISIONS = auto()
    DEALER_PLAY = auto()
    SETTLEMENT = auto()
    DONE = auto()


# ─── Participants ─────────────────────────────────────────────────────────────

@dataclass
class Player:
    """Cash balance plus a queue of hands with one bet per hand."""
    cash: float
    hands: list[list[int]] = field(default_factory=list)
    bets: list[float] = field(default_factory=list)

    def can_afford(self, amount: float) -> bool:
        return self.cash >= amount

    def place_bet(self, amount: float) -> None:
        """Open a new, empty hand with *amount* debited from cash."""
        if amount <= 0:
            raise ValueError(f"Bet must be positive, got {amount}")
        if not self.can_afford(amount):
            raise ValueError(f"Bet {amount} exceeds cash {self.cash}")
        self.cash -= amount
        self.hands.append([])
        self.bets.append(amount)

    def double_down(self) -> None:
        """Double the active hand's bet, debiting the extra stake."""
        extra = self.bets[0]
        if not self.can_afford(extra):
            raise ValueError(f"Cannot double: cash {self.cash} < bet {extra}")
        self.cash -= extra
        self.bets[0] += extra

    def split(self) -> None:
        """Move the active hand's second card into a new hand at the back of the queue."""
        hand = self.hands[0]
        stake = self.bets[0]
        if len(hand) != 2 or categorize(hand) is not HandCategory.PAIR:
            raise ValueError(f"Cannot split {hand_to_str(hand)}")
        if not self.can_afford(stake):
            raise ValueError(f"Cannot split: cash {self.cash} < bet {stake}")
        self.cash -= stake
        self.hands.append([hand.pop()])
        self.bets.append(stake)


@dataclass
class Dealer:
    """Dealer hand: cards[0] is the hole card, cards[1] the up-card."""
    cards: list[int] = field(default_factory=list)

    @property
    def upcard(self) -> int:
        return self.cards[1]

    def reset(self) -> None:
        self.cards.clear()


# ─── Decision / result types ──────────────────────────────────────────────────

class TrajectoryStep(NamedTuple):
    """One decision as recorded for the adaptive update."""
    action_index: int
    hand_bucket: int
    dealer_bucket: int


@dataclass(frozen=True)
class DecisionContext:
    """Everything a policy is shown when asked for an action."""
    state: DecisionState
    cards: tuple[int, ...]
    dealer_upcard: int
    legal_actions: tuple[Action, ...]
    cash: float
    bet: float


@dataclass
class HandResult:
    """Result of one settled hand, from the player's perspective."""
    player_cards: tuple[int, ...]
    dealer_cards: tuple[int, ...]
    bet: float                   # final stake on this hand (doubled if doubled)
    outcome: Outcome
    multiplier: float
    payout: float                # amount credited back to cash
    cash_before: float           # cash before this hand's own stake was taken
    cash_after: float
    actions: tuple[Action, ...]
    trajectory: tuple[TrajectoryStep, ...]
    phases: tuple[Phase, ...]

    @property
    def success(self) -> bool:
        """Push or better: this hand returned at least its own stake."""
        return self.cash_after >= self.cash_before

    @property
    def net(self) -> float:
        return self.cash_after - self.cash_before

    def __str__(self) -> str:
        player_str = hand_to_str(self.player_cards)
        dealer_str = hand_to_str(self.dealer_cards)
        return (
            f"Player: {player_str} ({categorize(self.player_cards).name}, "
            f"total={calculate_total(self.player_cards)}) | "
            f"Dealer: {dealer_str} (total={calculate_total(self.dealer_cards)}) | "
            f"{self.outcome.name} x{self.multiplier:g} on {self.bet:g}"
        )


# ─── Policy base ──────────────────────────────────────────────────────────────

class PlayerPolicy:
    """Base class for decision policies.

    Subclasses implement decide(); place_bet() and observe() have defaults
    (minimum bet, no learning).
    """

    name: str = "policy"

    def place_bet(self, rules: HouseRules, cash: float) -> float:
        return rules.min_bet

    def decide(self, ctx: DecisionContext) -> Action:
        raise NotImplementedError

    def observe(self, result: HandResult, train: bool) -> None:
        """Called once per settled hand."""


@dataclass
class TableSession:
    """One player/dealer pair wired to a policy and a card source."""
    player: Player
    policy: PlayerPolicy
    source: CardSource
    rules: HouseRules = DEFAULT_RULES
    dealer: Dealer = field(default_factory=Dealer)
    train: bool = False


def new_session(
    policy: PlayerPolicy,
    source: CardSource,
    rules: HouseRules = DEFAULT_RULES,
    train: bool = False,
) -> TableSession:
    """Seat a fresh player with the table's starting cash."""
    return TableSession(
        player=Player(cash=rules.starting_cash),
        policy=policy,
        source=source,
        rules=rules,
        train=train,
    )


# ─── Legal actions ────────────────────────────────────────────────────────────

def legal_initial_actions(hand: list[int], player: Player) -> tuple[Action, ...]:
    """HIT and STAND always; DOUBLE_DOWN if affordable; SPLIT on an affordable pair."""
    bet = player.bets[0]
    actions = [Action.HIT, Action.STAND]
    if player.can_afford(bet):
        actions.append(Action.DOUBLE_DOWN)
        if categorize(hand) is HandCategory.PAIR:
            actions.append(Action.SPLIT)
    return tuple(actions)


_SUBSEQUENT_ACTIONS: tuple[Action, ...] = (Action.HIT, Action.STAND)


def _coerce(action: Action, legal: tuple[Action, ...]) -> Action:
    if action in legal:
        return action
    LOGGER.debug("Illegal choice %s played as HIT (legal: %s)", action.name, legal)
    return Action.HIT


# ─── Core game simulation ─────────────────────────────────────────────────────

def play_game(session: TableSession) -> list[HandResult]:
    """Play one round: opening bet, then every hand in the player's queue.

    Returns:
        One HandResult per hand played (more than one after a split).

    Raises:
        ValueError: If the policy's bet is outside the table limits or the
                    player's cash.
    """
    player, rules = session.player, session.rules
    bet = session.policy.place_bet(rules, player.cash)
    if not rules.min_bet <= bet <= rules.max_bet:
        raise ValueError(f"Bet {bet} outside table limits [{rules.min_bet}, {rules.max_bet}]")
    player.place_bet(bet)
    session.dealer.reset()

    results = []
    while player.hands:
        results.append(play_hand(session))
    return results


def play_hand(session: TableSession) -> HandResult:
    """Play the front hand of the player's queue through to settlement.

    Success is judged per hand. A split hand's stake is debited when the
    split happens, so the wallet at entry says nothing about this hand;
    cash_before is the cash after settlement less this hand's payout plus
    its own (final) stake.

    Args:
        session: Table session; the player must have a pending hand.

    Returns:
        HandResult for the settled hand.
    """
    player, dealer, policy = session.player, session.dealer, session.policy
    source, rules = session.source, session.rules
    if not player.hands:
        raise ValueError("No pending hand to play.")

    phases = [Phase.DEALT]
    actions: list[Action] = []
    trajectory: list[TrajectoryStep] = []

    # ── Phase 1: Deal ─────────────────────────────────────────────────────────
    # A split hand arrives holding one card and is topped up here.
    hand = player.hands[0]
    while len(hand) < 2:
        hand.append(source.draw())
    if not dealer.cards:
        dealer.cards.extend((source.draw(), source.draw()))
    upcard = dealer.upcard

    def ask(legal: tuple[Action, ...], is_initial: bool) -> Action:
        state = make_decision_state(hand, upcard, is_initial)
        ctx = DecisionContext(
            state=state,
            cards=tuple(hand),
            dealer_upcard=upcard,
            legal_actions=legal,
            cash=player.cash,
            bet=player.bets[0],
        )
        action = _coerce(policy.decide(ctx), legal)
        actions.append(action)
        trajectory.append(TrajectoryStep(action.index, state.hand_bucket, state.dealer_bucket))
        LOGGER.debug("%s %s vs %d: %s", state.category.name, state.total,
                     state.dealer_bucket, action.name)
        return action

    # ── Phase 2: Initial decision ─────────────────────────────────────────────
    next_phase = Phase.DEALER_PLAY
    if categorize(hand) is not HandCategory.BLACKJACK:
        phases.append(Phase.INITIAL_DECISION)
        action = ask(legal_initial_actions(hand, player), is_initial=True)

        if action is Action.DOUBLE_DOWN:
            player.double_down()
            hand.append(source.draw())
        elif action is Action.SPLIT:
            phases.append(Phase.SPLIT_EXPANSION)
            player.split()
            hand.append(source.draw())
            next_phase = Phase.SUBSEQUENT_DECISIONS
        elif action is Action.HIT:
            hand.append(source.draw())
            next_phase = Phase.SUBSEQUENT_DECISIONS
        elif action is not Action.STAND:
            raise ValueError(f"Unhandled action: {action}")

    # ── Phase 3: Hit/stand loop ───────────────────────────────────────────────
    if next_phase is Phase.SUBSEQUENT_DECISIONS:
        phases.append(Phase.SUBSEQUENT_DECISIONS)
        while categorize(hand) not in (HandCategory.BUST, HandCategory.BLACKJACK):
            if ask(_SUBSEQUENT_ACTIONS, is_initial=False) is Action.STAND:
                break
            hand.append(source.draw())

    # ── Phase 4: Dealer play ──────────────────────────────────────────────────
    # Runs unconditionally, including after a player bust.
    phases.append(Phase.DEALER_PLAY)
    while calculate_total(dealer.cards) < rules.dealer_stand_total:
        dealer.cards.append(source.draw())

    # ── Phase 5: Settlement ───────────────────────────────────────────────────
    phases.append(Phase.SETTLEMENT)
    outcome, multiplier = settle_hand(hand, dealer.cards, rules)
    bet = player.bets[0]
    payout = calculate_payout(multiplier, bet)
    player.cash += payout
    player.hands.pop(0)
    player.bets.pop(0)
    phases.append(Phase.DONE)

    result = HandResult(
        player_cards=tuple(hand),
        dealer_cards=tuple(dealer.cards),
        bet=bet,
        outcome=outcome,
        multiplier=multiplier,
        payout=payout,
        cash_before=player.cash - payout + bet,
        cash_after=player.cash,
        actions=tuple(actions),
        trajectory=tuple(trajectory),
        phases=tuple(phases),
    )
    LOGGER.debug("%s", result)

    # Training hook: the adaptive policy updates its tables here.
    policy.observe(result, session.train)
    return result
