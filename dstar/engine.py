# dstar/engine.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import logging

from .grid import GridWorld, Node
from .open_list import OpenList
from .types import (
    Coord, Tag, Terrain, InternalInconsistency,
    INFINITY, NO_KEY, approx_eq, clamp_cost,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeView:
    coord: Coord
    name: str
    h: float
    k: float
    backpointer: Optional[Coord]
    tag: Tag
    terrain: Terrain
    is_agent: bool


@dataclass(frozen=True)
class Snapshot:
    rows: int
    cols: int
    agent: Coord
    cells: List[NodeView]  # row-major

    def cell(self, s: Coord) -> NodeView:
        return self.cells[s[0] * self.cols + s[1]]


class DStar:
    """
    Stentz's D*: costs are propagated outward from the goal, so every node's
    backpointer is its next hop toward the goal and h its cost to get there.
    """
    def __init__(self, world: GridWorld):
        self.world = world
        self.open = OpenList()
        self.agent: Node = world.node_at(world.start)
        self.goal: Node = world.node_at(world.goal)
        self.expansions = 0

    def _through(self, a: Node, b: Node) -> float:
        """h of b when reached via a."""
        return clamp_cost(a.h + self.world.cost(a, b))

    def insert(self, node: Node, h_new: float) -> None:
        self.open.insert_or_update(node, h_new)

    def process_state(self) -> float:
        x = self.open.peek()
        if x is None:
            return NO_KEY

        k_min = self.open.min_key()
        if not approx_eq(x.k, k_min):
            raise InternalInconsistency(
                f"open list out of sync: {x.name} has k={x.k} but min key is {k_min}")
        k_old = x.k
        self.open.remove(x)
        self.expansions += 1
        neighbors = self.world.neighbors(x)

        # RAISE: x got more expensive, try a neighbor that is already settled at or below k_old
        if k_old < x.h:
            for y in neighbors:
                if (y.h < k_old or approx_eq(y.h, k_old)) and x.h > self._through(y, x):
                    x.backpointer = y.index
                    x.h = self._through(y, x)

        if approx_eq(k_old, x.h):
            # LOWER: x is optimal, push its cost to the neighbors
            for y in neighbors:
                via_x = self._through(x, y)
                if (y.tag is Tag.NEW
                        or (y.backpointer == x.index and not approx_eq(y.h, via_x))
                        or (y.backpointer != x.index and y.h > via_x)):
                    y.backpointer = x.index
                    self.insert(y, via_x)
        else:
            # x is still raised
            for y in neighbors:
                via_x = self._through(x, y)
                if y.tag is Tag.NEW or (y.backpointer == x.index and not approx_eq(y.h, via_x)):
                    y.backpointer = x.index
                    self.insert(y, via_x)
                elif y.backpointer != x.index and y.h > via_x:
                    self.insert(x, x.h)
                elif (y.backpointer != x.index and x.h > self._through(y, x)
                        and y.tag is Tag.CLOSED and y.h > k_old):
                    self.insert(y, y.h)

        return self.open.min_key()

    def modify_cost(self, x: Node, y: Node) -> float:
        """The agent at x found that y, its next hop, is blocked."""
        _logger.debug("blockage discovered at %s while standing on %s", y.name, x.name)
        y.block()
        self.insert(y, INFINITY)
        if x.tag is Tag.CLOSED:
            self.insert(x, x.h)
        return self.open.min_key()

    def snapshot(self) -> Snapshot:
        nodes = self.world.nodes
        cells = [
            NodeView(
                coord=n.coord,
                name=n.name,
                h=n.h,
                k=n.k,
                backpointer=nodes[n.backpointer].coord if n.backpointer is not None else None,
                tag=n.tag,
                terrain=n.terrain,
                is_agent=n is self.agent,
            )
            for n in nodes
        ]
        return Snapshot(self.world.rows, self.world.cols, self.agent.coord, cells)
