"""Alphabet sentinels, head moves and per-tape actions shared by every machine."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from .errors import ValidationError


class Marker(Enum):
    """Special alphabet variants that are never ordinary data symbols."""
    BLANK = "blank"
    EPSILON = "epsilon"

    def __repr__(self):
        return self.name


BLANK = Marker.BLANK
EPSILON = Marker.EPSILON

# A data symbol is a plain string; sentinels are Marker members.
Symbol = Union[str, Marker]


class Move(Enum):
    """Head movement applied after the optional write."""
    LEFT = "L"
    RIGHT = "R"
    STAY = "S"

    @property
    def offset(self):
        if self is Move.LEFT:
            return -1
        if self is Move.RIGHT:
            return 1
        return 0


@dataclass(frozen=True)
class Action:
    """What a transition does to one tape: optional write, then a move."""
    write: Optional[Symbol] = None
    move: Move = Move.STAY

    def __post_init__(self):
        if self.write is EPSILON:
            raise ValidationError("epsilon cannot be written to a tape")
        if isinstance(self.write, str) and self.write == "":
            raise ValidationError("write symbol must not be empty; use None for no write")


def symbol_text(symbol, blank_text="#", epsilon_text="ε"):
    """Render a symbol (or sentinel) the way the UI shows it."""
    if symbol is BLANK:
        return blank_text
    if symbol is EPSILON:
        return epsilon_text
    return str(symbol)
