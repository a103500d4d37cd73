# dstar/grid.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
import copy, os, random

from .types import (
    Coord, Terrain, Tag, MalformedMap,
    INFINITY, STRAIGHT_COST, DIAGONAL_COST,
)


@dataclass(eq=False)
class Node:
    index: int
    row: int
    col: int
    terrain: Terrain
    tag: Tag = Tag.NEW
    h: float = INFINITY
    k: float = INFINITY
    backpointer: Optional[int] = None  # index into GridWorld.nodes
    discovered: bool = False

    @property
    def coord(self) -> Coord:
        return (self.row, self.col)

    @property
    def name(self) -> str:
        return f"({self.row},{self.col})"

    def block(self) -> None:
        """The cell turned out to be blocked; this is permanent."""
        if not self.terrain.known_blocked:
            self.discovered = True
        self.terrain = Terrain.BLOCKED

    def __repr__(self) -> str:
        return (f"Node{self.name}[{self.terrain.symbol} {self.tag.value} "
                f"h={self.h:g} k={self.k:g} b={self.backpointer}]")


@dataclass
class GridWorld:
    rows: int
    cols: int
    nodes: List[Node]  # row-major
    start: Coord
    goal: Coord

    @staticmethod
    def parse(text: str) -> "GridWorld":
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        if not lines:
            raise MalformedMap("map is empty")

        cols = len(lines[0])
        nodes: List[Node] = []
        starts: List[Coord] = []
        goals: List[Coord] = []
        for r, line in enumerate(lines):
            if len(line) != cols:
                raise MalformedMap(f"row {r} has {len(line)} cells, expected {cols}")
            for c, ch in enumerate(line):
                try:
                    terrain = Terrain.from_symbol(ch)
                except ValueError:
                    raise MalformedMap(f"unknown cell {ch!r} at ({r},{c})") from None
                if terrain is Terrain.START:
                    starts.append((r, c))
                elif terrain is Terrain.GOAL:
                    goals.append((r, c))
                nodes.append(Node(len(nodes), r, c, terrain))

        for label, found in (("start", starts), ("goal", goals)):
            if len(found) != 1:
                raise MalformedMap(f"expected exactly one {label}, found {len(found)}")
        return GridWorld(len(lines), cols, nodes, starts[0], goals[0])

    @staticmethod
    def load(path: str) -> "GridWorld":
        with open(path, "r") as f:
            return GridWorld.parse(f.read())

    @staticmethod
    def random(rows: int = 20, cols: int = 20, p_blocked: float = 0.20,
               p_unknown: float = 0.10, seed: Optional[int] = None) -> "GridWorld":
        rng = random.Random(seed)
        start, goal = (0, 0), (rows - 1, cols - 1)
        lines = []
        for r in range(rows):
            row = []
            for c in range(cols):
                if (r, c) == start:
                    row.append(Terrain.START.symbol)
                elif (r, c) == goal:
                    row.append(Terrain.GOAL.symbol)
                else:
                    x = rng.random()
                    if x < p_blocked:
                        row.append(Terrain.BLOCKED.symbol)
                    elif x < p_blocked + p_unknown:
                        row.append(Terrain.UNKNOWN_BLOCKED.symbol)
                    else:
                        row.append(Terrain.OPEN.symbol)
            lines.append("".join(row))
        return GridWorld.parse("\n".join(lines))

    def to_text(self) -> str:
        out = []
        for r in range(self.rows):
            row = []
            for c in range(self.cols):
                node = self.node_at((r, c))
                # a discovered blockage is still a hidden one on the map
                row.append(Terrain.UNKNOWN_BLOCKED.symbol if node.discovered else node.terrain.symbol)
            out.append("".join(row))
        return "\n".join(out) + "\n"

    def save(self, path: str) -> None:
        d = os.path.dirname(path)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(path, "w") as f:
            f.write(self.to_text())

    def clone(self) -> "GridWorld":
        return copy.deepcopy(self)

    def in_bounds(self, s: Coord) -> bool:
        r, c = s
        return 0 <= r < self.rows and 0 <= c < self.cols

    def index(self, s: Coord) -> int:
        r, c = s
        return r * self.cols + c

    def node_at(self, s: Coord) -> Node:
        return self.nodes[self.index(s)]

    def is_blocked(self, s: Coord) -> bool:
        return self.node_at(s).terrain.actually_blocked

    def is_known_blocked(self, s: Coord) -> bool:
        return self.node_at(s).terrain.known_blocked

    def neighbors(self, node: Node) -> List[Node]:
        out = []
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if dr == 0 and dc == 0:
                    continue
                p = (node.row + dr, node.col + dc)
                if self.in_bounds(p):
                    out.append(self.node_at(p))
        return out

    def cost(self, a: Node, b: Node) -> float:
        """Cost of the move between two adjacent nodes."""
        if a.terrain.known_blocked or b.terrain.known_blocked:
            return INFINITY
        if a.row == b.row or a.col == b.col:
            return STRAIGHT_COST
        return DIAGONAL_COST
