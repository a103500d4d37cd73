# dstar/viz.py
from __future__ import annotations
import os
from typing import List, Optional, Set
from PIL import Image, ImageDraw

from .types import Coord, Terrain
from .grid import GridWorld

FLOOR = (240, 240, 240)
WALL = (0, 0, 0)
HIDDEN = (200, 200, 215)      # U cell the agent never bumped into
DISCOVERED = (150, 30, 30)    # U cell found blocked during the run
EXPANDED = (255, 200, 200)
PATH = (160, 190, 255)
START = (100, 220, 120)
GOAL = (255, 170, 80)

def _cell_color(world: GridWorld, s: Coord):
    node = world.node_at(s)
    if node.discovered:
        return DISCOVERED
    if node.terrain is Terrain.BLOCKED:
        return WALL
    if node.terrain is Terrain.UNKNOWN_BLOCKED:
        return HIDDEN
    return FLOOR

def draw_world_png(world: GridWorld,
                   path: Optional[List[Coord]],
                   expanded: Optional[Set[Coord]],
                   out_png: str,
                   cell: int = 10) -> None:
    img = Image.new("RGB", (world.cols * cell, world.rows * cell), (255, 255, 255))
    drw = ImageDraw.Draw(img)

    def fill(s: Coord, color) -> None:
        r, c = s
        x0, y0 = c * cell, r * cell
        drw.rectangle((x0, y0, x0 + cell - 1, y0 + cell - 1), fill=color)

    for r in range(world.rows):
        for c in range(world.cols):
            fill((r, c), _cell_color(world, (r, c)))

    if expanded:
        for s in expanded:
            if not world.is_blocked(s):
                fill(s, EXPANDED)

    if path and len(path) > 1:
        for s in path:
            fill(s, PATH)

    fill(world.start, START)
    fill(world.goal, GOAL)

    d = os.path.dirname(out_png)
    if d:
        os.makedirs(d, exist_ok=True)
    img.save(out_png)
