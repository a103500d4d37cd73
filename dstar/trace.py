# dstar/trace.py
from __future__ import annotations
from typing import List, Optional, TextIO
import os

from .engine import Snapshot

BLOCK_WIDTH = 15
SEPARATOR = "*" * 100


def _block(text: str) -> str:
    return text.ljust(BLOCK_WIDTH)


def format_world(snap: Snapshot) -> str:
    """One block per grid row: name, h, k, b, tag, terrain and a ROBOT marker row."""
    out: List[str] = []
    for r in range(snap.rows):
        row = [snap.cell((r, c)) for c in range(snap.cols)]
        out.append("".join(_block(v.name) for v in row))
        out.append("".join(_block(f"h: {v.h}") for v in row))
        out.append("".join(_block(f"k: {v.k}") for v in row))
        out.append("".join(
            _block(f"b: ({v.backpointer[0]},{v.backpointer[1]})" if v.backpointer is not None else "b:")
            for v in row))
        out.append("".join(_block(v.tag.value) for v in row))
        out.append("".join(_block(v.terrain.symbol) for v in row))
        if any(v.is_agent for v in row):
            out.append("".join(_block("ROBOT" if v.is_agent else "") for v in row))
        out.append("\n")
    return "\n".join(out) + SEPARATOR + "\n\n"


class TraceWriter:
    """Appends every snapshot it is called with to a text file."""
    def __init__(self, path: str):
        self.path = path
        self.steps = 0
        self._f: Optional[TextIO] = None

    def __enter__(self) -> "TraceWriter":
        d = os.path.dirname(self.path)
        if d:
            os.makedirs(d, exist_ok=True)
        self._f = open(self.path, "w")
        return self

    def __exit__(self, *exc) -> None:
        if self._f is not None:
            self._f.close()
            self._f = None

    def __call__(self, snap: Snapshot) -> None:
        if self._f is None:
            raise RuntimeError("TraceWriter used outside of its with-block")
        self._f.write(format_world(snap))
        self.steps += 1
