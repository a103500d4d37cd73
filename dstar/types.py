# dstar/types.py
from __future__ import annotations
from enum import Enum
from typing import Tuple

Coord = Tuple[int, int]  # (row, col)

INFINITY = 10000.0
EPSILON = 1e-4
STRAIGHT_COST = 1.0
DIAGONAL_COST = 1.4
NO_KEY = -1.0  # min_key() of an empty open list


class Terrain(Enum):
    OPEN = "O"
    BLOCKED = "B"
    UNKNOWN_BLOCKED = "U"  # looks open on the map, blocked in reality
    START = "S"
    GOAL = "G"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def known_blocked(self) -> bool:
        return _KNOWN_BLOCKED[self]

    @property
    def actually_blocked(self) -> bool:
        return _ACTUALLY_BLOCKED[self]

    @classmethod
    def from_symbol(cls, ch: str) -> "Terrain":
        return cls(ch)


_KNOWN_BLOCKED = {
    Terrain.OPEN: False,
    Terrain.BLOCKED: True,
    Terrain.UNKNOWN_BLOCKED: False,
    Terrain.START: False,
    Terrain.GOAL: False,
}

_ACTUALLY_BLOCKED = {
    Terrain.OPEN: False,
    Terrain.BLOCKED: True,
    Terrain.UNKNOWN_BLOCKED: True,
    Terrain.START: False,
    Terrain.GOAL: False,
}


class Tag(Enum):
    NEW = "NEW"
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class MalformedMap(ValueError):
    """The map text cannot be turned into a grid world."""


class InternalInconsistency(RuntimeError):
    """The open list and the node it handed out disagree on the minimum key."""


def clamp_cost(value: float) -> float:
    return INFINITY if value >= INFINITY else value


def approx_eq(a: float, b: float, eps: float = EPSILON) -> bool:
    """Costs are equal if both are unreachable or they differ by less than eps."""
    return (a >= INFINITY and b >= INFINITY) or abs(a - b) < eps
