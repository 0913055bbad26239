"""
Card constants, encoding, and human-readable I/O helpers.

Card encoding (integer 0–51):
    rank_index = card // 4  ->  0=2, 1=3, ..., 7=9, 8=10, 9=J, 10=Q, 11=K, 12=A
    suit_index = card % 4   ->  0=C, 1=D, 2=H, 3=S

Cards are plain ints so hands are cheap lists/tuples and a deck is a numpy
array. String representations are used exclusively at I/O boundaries.
"""

from __future__ import annotations

from collections.abc import Sequence

# Point value lookup: index matches rank_index.
# Ace (index 12) starts at 11; the hand evaluator re-values it to 1 as needed.
RANK_VALUES: list[int] = [2, 3, 4, 5, 6, 7, 8, 9, 10, 10, 10, 10, 11]

RANK_NAMES: list[str] = ['2', '3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A']
SUIT_NAMES: list[str] = ['C', 'D', 'H', 'S']

RANK_WORDS: list[str] = [
    'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine', 'Ten',
    'Jack', 'Queen', 'King', 'Ace',
]
SUIT_WORDS: list[str] = ['Clubs', 'Diamonds', 'Hearts', 'Spades']

# Rank index for special ranks
RANK_TWO: int = 0
RANK_TEN: int = 8
RANK_JACK: int = 9
RANK_QUEEN: int = 10
RANK_KING: int = 11
RANK_ACE: int = 12

# Set of rank indices that count as 10 points (non-ace)
TEN_VALUE_RANKS: frozenset[int] = frozenset({RANK_TEN, RANK_JACK, RANK_QUEEN, RANK_KING})

NUM_CARDS: int = 52


def card_rank(card: int) -> int:
    """Return the rank index (0–12) of a card.

    Examples:
        >>> card_rank(0)   # 2 of Clubs
        0
        >>> card_rank(51)  # Ace of Spades
        12
    """
    return card // 4


def card_suit(card: int) -> int:
    """Return the suit index (0–3) of a card."""
    return card % 4


def card_value(card: int) -> int:
    """Return the initial point value of a card (Ace = 11).

    Examples:
        >>> card_value(0)    # 2 of Clubs -> 2
        2
        >>> card_value(36)   # Jack of Clubs -> 10
        10
        >>> card_value(48)   # Ace of Clubs -> 11
        11
    """
    return RANK_VALUES[card // 4]


def make_card(rank: int, suit: int = 0) -> int:
    """Build a card integer from a rank index and suit index."""
    if not 0 <= rank <= RANK_ACE or not 0 <= suit <= 3:
        raise ValueError(f"Invalid card: rank={rank}, suit={suit}")
    return rank * 4 + suit


def card_to_str(card: int) -> str:
    """Convert a card integer to its short string form.

    Examples:
        >>> card_to_str(0)   # 2 of Clubs
        '2C'
        >>> card_to_str(51)  # Ace of Spades
        'AS'
        >>> card_to_str(32)  # 10 of Clubs
        '10C'
    """
    return RANK_NAMES[card // 4] + SUIT_NAMES[card % 4]


def card_to_words(card: int) -> str:
    """Convert a card integer to a display line, e.g. 'Queen of Hearts'."""
    return f"{RANK_WORDS[card // 4]} of {SUIT_WORDS[card % 4]}"


def str_to_card(s: str) -> int:
    """Parse a short card string to its integer encoding.

    The format is <rank><suit> where suit is the last character.
    Rank can be '2'-'9', '10', 'J', 'Q', 'K', or 'A'.
    Suit can be 'C', 'D', 'H', or 'S'.

    Examples:
        >>> str_to_card('2C')
        0
        >>> str_to_card('AS')
        51
        >>> str_to_card('10C')
        32
    """
    suit_char = s[-1]
    rank_str = s[:-1]
    rank = RANK_NAMES.index(rank_str)
    suit = SUIT_NAMES.index(suit_char)
    return rank * 4 + suit


def hand_to_str(cards: Sequence[int]) -> str:
    """Convert a hand to a space-separated string.

    Examples:
        >>> hand_to_str((48, 51))
        'AC AS'
    """
    return ' '.join(card_to_str(c) for c in cards)
