"""
Command-line entry point.

    python -m blackjack_sim.play play                 interactive game at the console
    python -m blackjack_sim.play compare --games 20000
    python -m blackjack_sim.play train --games 50000 --window 1000
    python -m blackjack_sim.play bankroll --policy basic

Every subcommand accepts --seed, --source {deck,shoe} and --log-level.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence

import numpy as np

from blackjack_sim.config import DEFAULT_RULES, HouseRules, configure_logging
from blackjack_sim.engine.deck import make_card_source
from blackjack_sim.engine.game_state import new_session, play_game
from blackjack_sim.policies.human import ConsoleChannel, HumanPolicy, render_player

LOGGER = logging.getLogger(__name__)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="blackjack-sim",
        description="Play blackjack or compare blackjack policies",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for card and policy randomness (default: non-deterministic)",
    )
    parser.add_argument(
        "--source",
        choices=["deck", "shoe"],
        default="deck",
        help="Fresh 52-card deck per game, or an infinite shoe (default: deck)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--starting-cash", type=float, default=DEFAULT_RULES.starting_cash)
    parser.add_argument("--min-bet", type=float, default=DEFAULT_RULES.min_bet)
    parser.add_argument("--max-bet", type=float, default=DEFAULT_RULES.max_bet)

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("play", help="Interactive game at the console (default)")

    compare = sub.add_parser("compare", help="Monte Carlo comparison of all policies")
    compare.add_argument("--games", type=int, default=20_000,
                         help="Evaluation games per policy (default: 20000)")
    compare.add_argument("--training-games", type=int, default=50_000,
                         help="Adaptive training games (default: 50000)")

    train = sub.add_parser("train", help="Train the adaptive policy and report on it")
    train.add_argument("--games", type=int, default=50_000)
    train.add_argument("--window", type=int, default=1_000)
    train.add_argument("--save-plot", type=str, default=None,
                       help="Save a basic-vs-learned heat map to this path")

    bankroll = sub.add_parser("bankroll", help="Risk-of-ruin and bankroll report for one policy")
    bankroll.add_argument("--policy", choices=["basic", "random"], default="basic")
    bankroll.add_argument("--games", type=int, default=10_000)

    return parser.parse_args(argv)


def rules_from_args(args: argparse.Namespace) -> HouseRules:
    """Build HouseRules from the table flags (raises ValueError on bad limits)."""
    return HouseRules(
        starting_cash=args.starting_cash,
        min_bet=args.min_bet,
        max_bet=args.max_bet,
    )


# ─── Subcommands ──────────────────────────────────────────────────────────────

def run_interactive(
    rules: HouseRules,
    source: str = "deck",
    seed: int | None = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> float:
    """Play rounds at the console until the player is broke or quits.

    Returns:
        The player's final cash.
    """
    rng = np.random.default_rng(seed)
    channel = ConsoleChannel(input_fn, output_fn)
    session = new_session(HumanPolicy(channel), make_card_source(source, rng), rules)
    player = session.player

    channel.show(["Welcome to blackjack."] + render_player(player))
    while player.cash >= rules.min_bet:
        session.source = make_card_source(source, rng)
        play_game(session)
        if player.cash < rules.min_bet:
            break
        answer = input_fn("Play another hand? [y/n]: ").strip().lower()
        if answer not in ("y", "yes"):
            break

    if player.cash < rules.min_bet:
        channel.show(["You cannot cover the minimum bet. Game over."])
    channel.show([f"Final cash: {player.cash:,.2f}"])
    return player.cash


def run_compare(args: argparse.Namespace, rules: HouseRules) -> None:
    from blackjack_sim.analysis.simulator import compare_policies
    from blackjack_sim.analysis.strategy_report import print_policy_comparison

    seed = args.seed if args.seed is not None else 42
    results = compare_policies(args.games, seed, args.training_games, args.source, rules)
    print_policy_comparison(results)


def run_train(args: argparse.Namespace, rules: HouseRules) -> None:
    from blackjack_sim.analysis.simulator import make_policy, train_adaptive
    from blackjack_sim.analysis.strategy_report import (
        print_adaptive_summary,
        print_training_summary,
    )

    policy = make_policy("adaptive", args.seed)
    training = train_adaptive(policy, args.games, seed=args.seed, source=args.source,
                              rules=rules, window=args.window)
    print_training_summary(training)
    print_adaptive_summary(policy.table)

    if args.save_plot:
        import matplotlib

        matplotlib.use("Agg")
        from blackjack_sim.analysis.heat_maps import plot_strategy_comparison

        plot_strategy_comparison(policy.table, show=False, save_path=args.save_plot)
        print(f"Saved: {args.save_plot}")


def run_bankroll(args: argparse.Namespace, rules: HouseRules) -> None:
    from blackjack_sim.analysis.bankroll import (
        BANKROLL_LEVELS,
        compute_session_survival,
        print_bankroll_report,
        summarize_payouts,
    )
    from blackjack_sim.analysis.simulator import make_policy, simulate_games

    result = simulate_games(make_policy(args.policy, args.seed), args.games, seed=args.seed,
                            source=args.source, rules=rules, return_payouts=True)
    dist = summarize_payouts(result.payouts)
    # the table's own starting cash is one of the bankrolls scored
    bankrolls = sorted({*BANKROLL_LEVELS, rules.starting_cash / rules.min_bet})
    print_bankroll_report(
        dist,
        bankrolls,
        compute_session_survival(dist, bankrolls),
        label=args.policy,
    )


# ─── Entry point ──────────────────────────────────────────────────────────────

def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point."""
    args = parse_arguments(argv)
    configure_logging(args.log_level)
    rules = rules_from_args(args)
    LOGGER.info("Command %s with %s", args.command or "play", rules)

    if args.command in (None, "play"):
        run_interactive(rules, args.source, args.seed)
    elif args.command == "compare":
        run_compare(args, rules)
    elif args.command == "train":
        run_train(args, rules)
    elif args.command == "bankroll":
        run_bankroll(args, rules)
    return 0


def cli_entry_point() -> None:
    """Entry point for the console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(1)
    except (EOFError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    cli_entry_point()
