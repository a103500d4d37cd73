# dstar/knowledge.py
from __future__ import annotations
from typing import Set
from .types import Coord
from .grid import GridWorld

class Knowledge:
    """
    Agent's knowledge for the replan-from-scratch baseline:
    - Cells marked B on the map are known blocked from the start
    - U cells look open until the agent tries to step into one
    """
    def __init__(self, world: GridWorld):
        self.known_blocked: Set[Coord] = {
            n.coord for n in world.nodes if world.is_known_blocked(n.coord)
        }

    def is_known_blocked(self, s: Coord) -> bool:
        return s in self.known_blocked

    def mark_blocked(self, s: Coord) -> None:
        self.known_blocked.add(s)

    def traversable_for_planning(self, s: Coord) -> bool:
        return not self.is_known_blocked(s)
