# dstar/heuristics.py
from .types import Coord, STRAIGHT_COST, DIAGONAL_COST

def octile(a: Coord, b: Coord) -> float:
    dr, dc = abs(a[0] - b[0]), abs(a[1] - b[1])
    return STRAIGHT_COST * abs(dr - dc) + DIAGONAL_COST * min(dr, dc)
