import pytest

from dstar.grid import GridWorld
from dstar.open_list import OpenList
from dstar.types import Tag, INFINITY, NO_KEY


def open_row(n):
    return "S" + "O" * (n - 2) + "G"


@pytest.fixture
def nodes():
    return GridWorld.parse("SOOG").nodes


def test_insert_new_node(nodes):
    ol = OpenList()
    a = nodes[0]
    ol.insert_or_update(a, 3.0)
    assert (a.k, a.h, a.tag) == (3.0, 3.0, Tag.OPEN)
    assert len(ol) == 1 and a in ol
    assert ol.peek() is a
    assert ol.min_key() == 3.0


def test_update_open_node_keeps_smallest_key(nodes):
    ol = OpenList()
    a = nodes[0]
    ol.insert_or_update(a, 3.0)
    ol.insert_or_update(a, 7.0)
    assert (a.k, a.h) == (3.0, 7.0)
    ol.insert_or_update(a, 1.0)
    assert (a.k, a.h) == (1.0, 1.0)
    assert len(ol) == 1
    assert ol.min_key() == 1.0


def test_reinsert_closed_node_uses_previous_cost(nodes):
    ol = OpenList()
    a = nodes[0]
    ol.insert_or_update(a, 2.0)
    ol.remove(a)
    assert a.tag is Tag.CLOSED and a not in ol
    ol.insert_or_update(a, INFINITY)
    assert (a.k, a.h, a.tag) == (2.0, INFINITY, Tag.OPEN)

    ol.remove(a)
    ol.insert_or_update(a, 1.5)
    assert (a.k, a.h) == (1.5, 1.5)


def test_insert_is_idempotent(nodes):
    ol = OpenList()
    a, b = nodes[0], nodes[1]
    ol.insert_or_update(b, 1.0)
    ol.insert_or_update(a, 4.0)
    ol.insert_or_update(a, 6.0)
    before = (a.k, a.h, len(ol))
    ol.insert_or_update(a, 6.0)
    assert (a.k, a.h, len(ol)) == before


def test_costs_are_clamped(nodes):
    ol = OpenList()
    a = nodes[0]
    ol.insert_or_update(a, INFINITY * 3)
    assert a.h == INFINITY and a.k == INFINITY


def test_min_key_tracks_decrease_key(nodes):
    ol = OpenList()
    a, b, c = nodes[0], nodes[1], nodes[2]
    ol.insert_or_update(a, 5.0)
    ol.insert_or_update(b, 3.0)
    ol.insert_or_update(c, 4.0)
    assert ol.peek() is b
    ol.insert_or_update(a, 1.0)
    assert ol.peek() is a
    assert ol.min_key() == 1.0
    assert [n.index for n in ol.nodes()] == [a.index, b.index, c.index]
    assert len(ol) == 3


def test_ties_go_to_first_inserted(nodes):
    ol = OpenList()
    a, b, c = nodes[0], nodes[1], nodes[2]
    ol.insert_or_update(b, 2.00001)
    ol.insert_or_update(a, 2.0)
    ol.insert_or_update(c, 2.0)
    assert ol.peek() is b
    ol.remove(b)
    assert ol.peek() is a


def test_peek_does_not_remove(nodes):
    ol = OpenList()
    a = nodes[0]
    ol.insert_or_update(a, 1.0)
    assert ol.peek() is a
    assert ol.peek() is a
    assert a.tag is Tag.OPEN and len(ol) == 1


def test_empty_list(nodes):
    ol = OpenList()
    assert ol.peek() is None
    assert ol.min_key() == NO_KEY
    a = nodes[0]
    ol.insert_or_update(a, 1.0)
    ol.remove(a)
    assert len(ol) == 0
    assert ol.peek() is None
    assert ol.min_key() == NO_KEY
    assert list(ol.nodes()) == []


def test_superseded_entries_do_not_pile_up():
    nodes = GridWorld.parse(open_row(40)).nodes
    ol = OpenList()
    for n in nodes:
        ol.insert_or_update(n, 100.0)
    for round_ in range(50):
        for n in nodes:
            ol.insert_or_update(n, 99.0 - round_ - n.index / 100)
        assert len(ol._heap) <= 2 * len(ol) + 1
    for n in nodes[::2]:
        ol.remove(n)
    assert len(ol._heap) <= 2 * len(ol) + 1
    assert ol.peek() is nodes[-1]
    assert [n.index for n in ol.nodes()] == [n.index for n in reversed(nodes[1::2])]
