# dstar/open_list.py
from __future__ import annotations
from typing import Dict, Iterator, List, Optional
import heapq, itertools

from .grid import Node
from .types import Tag, NO_KEY, clamp_cost

_KEY_DIGITS = 4  # keys closer than EPSILON order as equal; ties go to the earlier insert


def _sort_key(k: float) -> float:
    return round(k, _KEY_DIGITS)


class OpenList:
    """
    OPEN nodes ordered by k.
    Heap entries are [sort_key, seq, k, node]; an entry superseded by a later
    insert or a remove has its node slot cleared and is skipped when it surfaces.
    Once cleared entries outnumber half the live ones the heap is rebuilt.
    """
    def __init__(self) -> None:
        self._heap: List[list] = []
        self._entries: Dict[int, list] = {}
        self._seq = itertools.count()
        self._stale = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node: Node) -> bool:
        return node.index in self._entries

    def insert_or_update(self, node: Node, h_new: float) -> None:
        if node.tag is Tag.NEW:
            k = h_new
        elif node.tag is Tag.OPEN:
            k = min(node.k, h_new)
        else:
            k = min(node.h, h_new)
        node.k = clamp_cost(k)
        node.h = clamp_cost(h_new)
        node.tag = Tag.OPEN

        old = self._entries.get(node.index)
        if old is not None:
            if old[2] == node.k:
                return
            self._discard(old)
        entry = [_sort_key(node.k), next(self._seq), node.k, node]
        self._entries[node.index] = entry
        heapq.heappush(self._heap, entry)

    def _discard(self, entry: list) -> None:
        entry[3] = None
        self._stale += 1
        if self._stale > len(self._entries) // 2:
            self._heap = [e for e in self._heap if e[3] is not None]
            heapq.heapify(self._heap)
            self._stale = 0

    def _top(self) -> Optional[list]:
        while self._heap and self._heap[0][3] is None:
            heapq.heappop(self._heap)
            self._stale -= 1
        return self._heap[0] if self._heap else None

    def peek(self) -> Optional[Node]:
        """The node with the smallest key, left in place."""
        top = self._top()
        return top[3] if top is not None else None

    def min_key(self) -> float:
        top = self._top()
        return top[2] if top is not None else NO_KEY

    def remove(self, node: Node) -> None:
        entry = self._entries.pop(node.index, None)
        if entry is not None:
            self._discard(entry)
        node.tag = Tag.CLOSED

    def nodes(self) -> Iterator[Node]:
        for entry in sorted(e for e in self._heap if e[3] is not None):
            yield entry[3]
