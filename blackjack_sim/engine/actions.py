"""Player actions and their strategy-table slot indices."""

from __future__ import annotations

from enum import Enum


class Action(Enum):
    """Player action. The value is the slot index in a strategy-table cell.

    DOUBLE_DOWN and SPLIT only exist in the initial-decision table; the
    subsequent-decision table has the HIT and STAND slots only.
    """

    HIT = 0
    STAND = 1
    DOUBLE_DOWN = 2
    SPLIT = 3

    @property
    def index(self) -> int:
        return self.value

    @classmethod
    def from_index(cls, index: int) -> Action:
        return cls(index)

    @classmethod
    def parse(cls, text: str) -> Action:
        """Parse user text such as 'h', 'stand', 'double', 'd' or 'split'.

        Raises:
            ValueError: If the text names no action.
        """
        key = text.strip().lower().replace(' ', '_')
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(f"Unknown action {text!r}")


_ALIASES: dict[str, Action] = {
    'h': Action.HIT,
    'hit': Action.HIT,
    's': Action.STAND,
    'stand': Action.STAND,
    'd': Action.DOUBLE_DOWN,
    'double': Action.DOUBLE_DOWN,
    'double_down': Action.DOUBLE_DOWN,
    'p': Action.SPLIT,
    'split': Action.SPLIT,
}
