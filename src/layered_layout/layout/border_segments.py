"""Left and right cluster borders, one pair per rank the cluster spans."""

from __future__ import annotations

from collections.abc import Hashable

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import BorderType, DummyKind, EdgeLabel, NodeLabel
from layered_layout.layout.util import add_dummy_node

_DONE = object()


def add_border_segments(g: Graph) -> None:
    for top in g.children():
        stack = [(top, iter(g.children(top)))]
        while stack:
            v, pending = stack[-1]
            child = next(pending, _DONE)
            if child is not _DONE:
                stack.append((child, iter(g.children(child))))
                continue
            stack.pop()
            node = g.node(v)
            if node.min_rank is None:
                continue
            node.border_left = {}
            node.border_right = {}
            for rank in range(node.min_rank, node.max_rank + 1):
                _add_border_node(g, BorderType.LEFT, "_bl", v, node.border_left, rank)
                _add_border_node(g, BorderType.RIGHT, "_br", v, node.border_right, rank)


def _add_border_node(
    g: Graph,
    border_type: BorderType,
    prefix: str,
    cluster: Hashable,
    borders: dict[int, Hashable],
    rank: int,
) -> None:
    prev = borders.get(rank - 1)
    curr = add_dummy_node(g, DummyKind.BORDER, NodeLabel(rank=rank, border_type=border_type), prefix)
    borders[rank] = curr
    g.set_parent(curr, cluster)
    if prev is not None:
        g.set_edge(prev, curr, EdgeLabel(weight=1))
