# dstar/astar.py
from __future__ import annotations
from typing import Dict, List, Optional, Set, Tuple
import heapq
from .types import Coord, STRAIGHT_COST, DIAGONAL_COST
from .grid import GridWorld
from .knowledge import Knowledge
from .heuristics import octile

class AStarResult:
    def __init__(self, path: Optional[List[Coord]], expanded: Set[Coord], gvals: Dict[Coord, float]):
        self.path = path
        self.expanded = expanded
        self.gvals = gvals

def step_cost(a: Coord, b: Coord) -> float:
    return STRAIGHT_COST if a[0] == b[0] or a[1] == b[1] else DIAGONAL_COST

def astar_once(
    start: Coord,
    goal: Coord,
    world: GridWorld,
    kb: Knowledge,
    tie_break: str = "larger_g",          # or "smaller_g"
) -> AStarResult:
    """
    8-connected A* over the agent's current knowledge.
    Hidden blockages are assumed free; known-blocked cells are forbidden.
    """
    openh: List[Tuple[float, float, int, Coord]] = []
    g: Dict[Coord, float] = {start: 0.0}
    parent: Dict[Coord, Coord] = {}
    closed: Set[Coord] = set()
    counter = 0

    gkey = -g[start] if tie_break == "larger_g" else g[start]
    heapq.heappush(openh, (octile(start, goal), gkey, counter, start))
    counter += 1

    while openh:
        _, _, _, s = heapq.heappop(openh)
        if s in closed:
            continue
        closed.add(s)

        if s == goal:
            path = [s]
            while s in parent:
                s = parent[s]
                path.append(s)
            path.reverse()
            return AStarResult(path, closed, g)

        for node in world.neighbors(world.node_at(s)):
            nb = node.coord
            if not kb.traversable_for_planning(nb):
                continue
            tentative = g[s] + step_cost(s, nb)
            if nb not in g or tentative < g[nb]:
                g[nb] = tentative
                parent[nb] = s
                g_term = -tentative if tie_break == "larger_g" else tentative
                heapq.heappush(openh, (tentative + octile(nb, goal), g_term, counter, nb))
                counter += 1

    return AStarResult(None, closed, g)
