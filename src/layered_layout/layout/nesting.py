"""Nesting graph for compound layouts.

Adds a top and bottom border node to every cluster and links them to the
cluster's contents so that, once ranked, each cluster's children sit strictly
between its borders. A synthetic root is linked to every top-level node, which
also makes the graph connected. ``minlen`` of ordinary edges is scaled by
``node_rank_factor`` so real nodes never share a rank with border nodes.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterator

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import DummyKind, EdgeLabel, NodeLabel
from layered_layout.layout.util import add_dummy_node

_DONE = object()


def run(g: Graph) -> None:
    root = add_dummy_node(g, DummyKind.ROOT, NodeLabel(), "_root")
    depths = tree_depths(g)
    height = max(depths.values()) - 1
    node_sep = 2 * height + 1

    graph_label = g.graph()
    graph_label.nesting_root = root

    for e in g.edges():
        g.edge(e).minlen *= node_sep

    weight = sum(g.edge(e).weight for e in g.edges()) + 1

    for child in g.children():
        _link_borders(g, root, node_sep, weight, height, depths, child)

    graph_label.node_rank_factor = node_sep


def cleanup(g: Graph) -> None:
    graph_label = g.graph()
    g.remove_node(graph_label.nesting_root)
    graph_label.nesting_root = None
    for e in g.edges():
        if g.edge(e).nesting_edge:
            g.remove_edge(e)


def tree_depths(g: Graph) -> dict[Hashable, int]:
    """Hierarchy depth of every node, 1 for top-level nodes."""
    depths: dict[Hashable, int] = {}
    stack = [(v, 1) for v in g.children()]
    while stack:
        v, depth = stack.pop()
        depths[v] = depth
        stack.extend((child, depth + 1) for child in g.children(v))
    return depths


def _link_borders(
    g: Graph,
    root: Hashable,
    node_sep: int,
    weight: float,
    height: int,
    depths: dict[Hashable, int],
    start: Hashable,
) -> None:
    frames: list[tuple[Hashable, Iterator[Hashable]]] = []

    def enter(v: Hashable) -> bool:
        children = g.children(v)
        if not children:
            if v != root:
                g.set_edge(root, v, EdgeLabel(weight=0, minlen=node_sep))
            return False
        label = g.node(v)
        top = add_dummy_node(g, DummyKind.BORDER, NodeLabel(), "_bt")
        bottom = add_dummy_node(g, DummyKind.BORDER, NodeLabel(), "_bb")
        g.set_parent(top, v)
        label.border_top = top
        g.set_parent(bottom, v)
        label.border_bottom = bottom
        frames.append((v, iter(children)))
        return True

    def link(v: Hashable, child: Hashable) -> None:
        label = g.node(v)
        child_label = g.node(child)
        child_top = child_label.border_top or child
        child_bottom = child_label.border_bottom or child
        this_weight = weight if child_label.border_top else 2 * weight
        minlen = 1 if child_top != child_bottom else height - depths[v] + 1
        g.set_edge(label.border_top, child_top, EdgeLabel(weight=this_weight, minlen=minlen, nesting_edge=True))
        g.set_edge(child_bottom, label.border_bottom, EdgeLabel(weight=this_weight, minlen=minlen, nesting_edge=True))

    enter(start)
    while frames:
        v, pending = frames[-1]
        child = next(pending, _DONE)
        if child is _DONE:
            frames.pop()
            if g.parent(v) is None:
                g.set_edge(root, g.node(v).border_top, EdgeLabel(weight=0, minlen=height + depths[v]))
            if frames:
                link(frames[-1][0], v)
        elif not enter(child):
            link(v, child)
