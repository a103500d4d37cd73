# dstar/__init__.py
from .types import Coord, Terrain, Tag, MalformedMap, InternalInconsistency, INFINITY, approx_eq
from .grid import GridWorld, Node
from .open_list import OpenList
from .engine import DStar, Snapshot, NodeView
from .heuristics import octile
from .knowledge import Knowledge
from .astar import astar_once, AStarResult
from .planners import dstar_run, repeated_forward, Phase, RunStats
from .trace import format_world, TraceWriter
from .viz import draw_world_png

__all__ = [
    "Coord", "Terrain", "Tag", "MalformedMap", "InternalInconsistency", "INFINITY", "approx_eq",
    "GridWorld", "Node", "OpenList",
    "DStar", "Snapshot", "NodeView",
    "octile", "Knowledge", "astar_once", "AStarResult",
    "dstar_run", "repeated_forward", "Phase", "RunStats",
    "format_world", "TraceWriter",
    "draw_world_png",
]
