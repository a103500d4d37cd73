# dstar/planners.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Set
import logging
import time

from .types import Coord, Tag, InternalInconsistency, INFINITY, approx_eq
from .grid import GridWorld
from .knowledge import Knowledge
from .astar import astar_once, step_cost
from .engine import DStar, Snapshot

_logger = logging.getLogger(__name__)

StepCallback = Callable[[Snapshot], None]


class Phase(Enum):
    SEARCHING = "searching"
    FOLLOWING = "following"
    REPLANNING = "replanning"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunStats:
    reached: bool
    moves: int
    replans: int
    expansions: int
    elapsed_sec: float
    path_taken: List[Coord]
    expanded_all: Set[Coord]
    cost: float = 0.0
    phase: Phase = Phase.SUCCEEDED
    reason: str = ""


class _StepLimit(Exception):
    pass


def dstar_run(world: GridWorld, max_steps: Optional[int] = None,
              on_step: Optional[StepCallback] = None) -> RunStats:
    """
    Drive the agent from start to goal with D*.
    The world's nodes carry the search state, so pass a fresh (or cloned) world.
    """
    ds = DStar(world)
    agent_path: List[Coord] = [ds.agent.coord]
    expanded_all: Set[Coord] = set()
    replans = 0
    moves_since_replan = 0
    travelled = 0.0
    reason = ""
    t0 = time.perf_counter()

    def emit() -> None:
        if on_step is not None:
            on_step(ds.snapshot())

    def step() -> float:
        if max_steps is not None and ds.expansions >= max_steps:
            raise _StepLimit()
        x = ds.open.peek()
        k = ds.process_state()
        if x is not None:
            expanded_all.add(x.coord)
        emit()
        return k

    ds.insert(ds.goal, 0.0)
    emit()
    phase = Phase.SEARCHING

    try:
        while phase not in (Phase.SUCCEEDED, Phase.FAILED):
            agent = ds.agent
            if phase is Phase.SEARCHING:
                k_min = ds.open.min_key()
                while agent.tag is not Tag.CLOSED and k_min >= 0:
                    k_min = step()
                if agent.tag is Tag.CLOSED:
                    phase = Phase.FOLLOWING
                else:
                    phase, reason = Phase.FAILED, f"open list exhausted before {agent.name} was reached"

            elif phase is Phase.FOLLOWING:
                if agent.tag is not Tag.CLOSED:
                    phase = Phase.SEARCHING
                    continue
                if agent.h >= INFINITY or agent.backpointer is None:
                    phase, reason = Phase.FAILED, f"no path from {agent.name}"
                    continue
                nxt = world.nodes[agent.backpointer]
                if nxt.terrain.actually_blocked:
                    phase = Phase.REPLANNING
                    continue
                travelled += world.cost(agent, nxt)
                agent_path.append(nxt.coord)
                ds.agent = nxt
                emit()
                if nxt is ds.goal:
                    phase = Phase.SUCCEEDED
                    continue
                moves_since_replan += 1
                if moves_since_replan > len(world.nodes):
                    raise InternalInconsistency(f"backpointer cycle through {nxt.name}")

            elif phase is Phase.REPLANNING:
                blocked = world.nodes[agent.backpointer]
                replans += 1
                moves_since_replan = 0
                k_min = ds.modify_cost(agent, blocked)
                emit()
                while k_min >= 0 and not (agent.tag is Tag.CLOSED and _settled(k_min, agent.h)):
                    k_min = step()
                _logger.debug("replanned around %s, %s now has h=%g", blocked.name, agent.name, agent.h)
                phase = Phase.FOLLOWING
    except _StepLimit:
        phase, reason = Phase.FAILED, f"step limit of {max_steps} reached"

    reached = phase is Phase.SUCCEEDED
    if reached:
        _logger.info("reached goal in %d moves, cost %g, %d replans", len(agent_path) - 1, travelled, replans)
    else:
        _logger.info("no path: %s", reason)
    return RunStats(reached, len(agent_path) - 1, replans, ds.expansions,
                    time.perf_counter() - t0, agent_path, expanded_all,
                    cost=travelled, phase=phase, reason=reason)


def _settled(k_min: float, h: float) -> bool:
    return k_min >= h or approx_eq(k_min, h)


def repeated_forward(world: GridWorld, tie_break: str = "larger_g") -> RunStats:
    """Baseline: replan from scratch with A* after every discovered blockage."""
    kb = Knowledge(world)
    cur = world.start

    expansions_total = 0
    replans = 0
    travelled = 0.0
    path_taken: List[Coord] = [cur]
    expanded_all: Set[Coord] = set()
    t0 = time.perf_counter()

    while cur != world.goal:
        res = astar_once(cur, world.goal, world, kb, tie_break=tie_break)
        replans += 1
        expansions_total += len(res.expanded)
        expanded_all |= res.expanded

        if res.path is None:
            return RunStats(False, len(path_taken) - 1, replans, expansions_total, time.perf_counter() - t0,
                            path_taken, expanded_all, cost=travelled, phase=Phase.FAILED,
                            reason=f"no path from {cur}")

        for step in res.path[1:]:
            if world.is_blocked(step):
                kb.mark_blocked(step)
                break
            travelled += step_cost(cur, step)
            cur = step
            path_taken.append(cur)

    return RunStats(True, len(path_taken) - 1, replans, expansions_total, time.perf_counter() - t0,
                    path_taken, expanded_all, cost=travelled)
