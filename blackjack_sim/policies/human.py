"""
Human-interactive policy and its console input channel.

The channel re-prompts until it gets a valid value: a numeric bet within the
table limits and the player's cash, and an action from the legal set. Invalid
input never leaves the channel.

Display helpers are pure formatters; they only observe hands and players.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from blackjack_sim.config import HouseRules
from blackjack_sim.engine.actions import Action
from blackjack_sim.engine.cards import card_to_words
from blackjack_sim.engine.game_state import DecisionContext, HandResult, Player, PlayerPolicy
from blackjack_sim.engine.hand import describe_hand


class InputChannel(Protocol):
    def prompt_bet(self, min_bet: float, max_bet: float, cash: float) -> float: ...

    def prompt_action(self, legal_actions: Sequence[Action]) -> Action: ...

    def show(self, lines: Sequence[str]) -> None: ...


# ─── Display ──────────────────────────────────────────────────────────────────

def render_hand(cards: Sequence[int], label: str = "Hand") -> list[str]:
    """One line per card followed by a category/total summary."""
    lines = [f"{label}:"]
    lines.extend(f"  {card_to_words(c)}" for c in cards)
    lines.append(f"  -> {describe_hand(cards)}")
    return lines


def render_player(player: Player) -> list[str]:
    return [f"Cash: {player.cash:,.2f}"]


# ─── Console channel ──────────────────────────────────────────────────────────

class ConsoleChannel:
    """Reads from input() and writes with print() unless told otherwise."""

    def __init__(
        self,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ) -> None:
        self._input = input_fn
        self._output = output_fn

    def show(self, lines: Sequence[str]) -> None:
        for line in lines:
            self._output(line)

    def prompt_bet(self, min_bet: float, max_bet: float, cash: float) -> float:
        while True:
            raw = self._input(f"Bet ({min_bet:g}-{max_bet:g}, cash {cash:g}): ")
            try:
                bet = float(raw)
            except ValueError:
                self._output(f"Not a number: {raw!r}")
                continue
            if not min_bet <= bet <= max_bet:
                self._output(f"Bet must be between {min_bet:g} and {max_bet:g}.")
                continue
            if bet > cash:
                self._output(f"Bet exceeds your cash ({cash:g}).")
                continue
            return bet

    def prompt_action(self, legal_actions: Sequence[Action]) -> Action:
        names = "/".join(a.name.lower() for a in legal_actions)
        while True:
            raw = self._input(f"Action [{names}]: ")
            try:
                action = Action.parse(raw)
            except ValueError:
                self._output(f"Unknown action: {raw!r}")
                continue
            if action not in legal_actions:
                self._output(f"{action.name.lower()} is not allowed now.")
                continue
            return action


# ─── Policy ───────────────────────────────────────────────────────────────────

class HumanPolicy(PlayerPolicy):
    """Asks a person, through an input channel, for every bet and action."""

    name = "human"

    def __init__(self, channel: InputChannel | None = None) -> None:
        self.channel = channel if channel is not None else ConsoleChannel()

    def place_bet(self, rules: HouseRules, cash: float) -> float:
        return self.channel.prompt_bet(rules.min_bet, min(rules.max_bet, cash), cash)

    def decide(self, ctx: DecisionContext) -> Action:
        lines = [f"Dealer shows: {card_to_words(ctx.dealer_upcard)}"]
        lines.extend(render_hand(ctx.cards, label=f"Your hand (bet {ctx.bet:g})"))
        self.channel.show(lines)
        return self.channel.prompt_action(ctx.legal_actions)

    def observe(self, result: HandResult, train: bool) -> None:
        lines = render_hand(result.dealer_cards, label="Dealer")
        lines.extend(render_hand(result.player_cards, label="Your hand"))
        lines.append(f"{result.outcome.name}: {result.payout:g} returned on {result.bet:g}")
        lines.append(f"Cash: {result.cash_after:,.2f}")
        self.channel.show(lines)
