from collections import deque

import pytest

from dstar.grid import GridWorld
from dstar.heuristics import octile
from dstar.planners import dstar_run, repeated_forward, Phase
from dstar.types import Tag, Terrain


def open_map(rows, cols):
    cells = [["O"] * cols for _ in range(rows)]
    cells[0][0] = "S"
    cells[rows - 1][cols - 1] = "G"
    return "\n".join("".join(r) for r in cells)


def test_straight_corridor():
    st = dstar_run(GridWorld.parse("SOG"))
    assert st.reached and st.phase is Phase.SUCCEEDED
    assert st.path_taken == [(0, 0), (0, 1), (0, 2)]
    assert st.cost == pytest.approx(2.0)
    assert st.moves == 2
    assert st.replans == 0


def test_hidden_blockage_without_alternative_fails():
    world = GridWorld.parse("SUG")
    st = dstar_run(world)
    assert not st.reached
    assert st.phase is Phase.FAILED
    assert st.replans == 1
    assert st.path_taken == [(0, 0)]
    assert "no path" in st.reason
    assert world.node_at((0, 1)).terrain is Terrain.BLOCKED
    assert world.node_at((0, 1)).discovered


def test_single_diagonal_route():
    world = GridWorld.parse("SOO\nBBO\nBBG")
    st = dstar_run(world)
    assert st.reached
    assert st.path_taken == [(0, 0), (0, 1), (1, 2), (2, 2)]
    assert st.cost == pytest.approx(1.0 + 1.4 + 1.0)


def test_detour_around_discovered_blockage():
    world = GridWorld.parse("SUG\nOOO")
    st = dstar_run(world)
    assert st.reached
    assert st.replans == 1
    assert st.path_taken == [(0, 0), (1, 1), (0, 2)]
    assert st.cost == pytest.approx(2.8)
    assert world.node_at((0, 1)).discovered


def test_known_walls_are_never_entered():
    world = GridWorld.parse("SBOOO\nOBOBO\nOOOBG")
    st = dstar_run(world)
    assert st.reached
    assert st.replans == 0
    for s in st.path_taken:
        assert not world.is_blocked(s)


@pytest.mark.parametrize("rows,cols", [(1, 5), (3, 3), (4, 7), (6, 2), (5, 5)])
def test_free_grid_cost_is_octile_distance(rows, cols):
    world = GridWorld.parse(open_map(rows, cols))
    st = dstar_run(world)
    assert st.reached
    assert st.cost == pytest.approx(octile(world.start, world.goal))
    assert st.moves == max(rows, cols) - 1


def test_unreachable_goal_behind_known_walls():
    st = dstar_run(GridWorld.parse("SOB\nOOB\nBBB\nOOG"))
    assert not st.reached
    assert st.phase is Phase.FAILED
    assert st.replans == 0


def test_step_limit_ends_the_run():
    st = dstar_run(GridWorld.parse(open_map(4, 4)), max_steps=1)
    assert not st.reached
    assert st.expansions == 1
    assert "step limit" in st.reason


def test_snapshots_cover_every_step_and_keep_open_nodes_consistent():
    frames = []
    world = GridWorld.parse("SOOO\nOUBO\nOOOG")
    st = dstar_run(world, on_step=frames.append)
    assert st.reached
    assert st.replans == 1
    assert st.cost == pytest.approx(4.4)
    # initial frame, one per process_state, one per modify_cost, one per move
    assert len(frames) == 1 + st.expansions + st.replans + st.moves
    for snap in frames:
        for v in snap.cells:
            if v.tag is Tag.OPEN:
                assert v.k <= v.h
    assert frames[-1].agent == world.goal


@pytest.mark.parametrize("seed", range(6))
def test_dstar_and_repeated_astar_agree_on_reachability(seed):
    world = GridWorld.random(rows=9, cols=9, p_blocked=0.25, p_unknown=0.15, seed=seed)
    d = dstar_run(world.clone())
    a = repeated_forward(world.clone())
    assert d.reached == a.reached
    if d.reached:
        assert d.path_taken[-1] == world.goal
        assert all(not world.is_blocked(s) for s in d.path_taken)


def reachable(world):
    """Breadth-first search over the true map, 8-connected."""
    seen = {world.start}
    todo = deque([world.start])
    while todo:
        node = world.node_at(todo.popleft())
        for y in world.neighbors(node):
            if y.coord not in seen and not world.is_blocked(y.coord):
                seen.add(y.coord)
                todo.append(y.coord)
    return world.goal in seen


def test_raise_through_neighbor_at_equal_cost_finds_the_path():
    world = GridWorld.parse(
        "SOOBOOB\nOOBOUOO\nOOUOBUO\nBUOBUBO\nBBOUOOO\n"
        "UBBUUUO\nUBUBOOO\nOOOUOUO\nUOOOBOO\nOBBOOOG")
    assert reachable(world)
    st = dstar_run(world)
    assert st.reached, st.reason
    assert st.path_taken[-1] == world.goal
    assert all(not world.is_blocked(s) for s in st.path_taken)


@pytest.mark.parametrize("seed", range(400))
def test_dstar_reaches_goal_exactly_when_a_path_exists(seed):
    world = GridWorld.random(rows=10, cols=7, p_blocked=0.2, p_unknown=0.25, seed=seed)
    expected = reachable(world)
    st = dstar_run(world)
    assert st.reached == expected, st.reason


def test_repeated_forward_detour():
    world = GridWorld.parse("SUG\nOOO")
    st = repeated_forward(world)
    assert st.reached
    assert st.path_taken == [(0, 0), (1, 1), (0, 2)]
    assert st.cost == pytest.approx(2.8)
    assert st.replans == 2
    # the baseline only reads the world
    assert world.node_at((0, 1)).terrain is Terrain.UNKNOWN_BLOCKED


def test_repeated_forward_no_path():
    st = repeated_forward(GridWorld.parse("SUG"))
    assert not st.reached
    assert st.phase is Phase.FAILED
