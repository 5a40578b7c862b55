"""Long-edge normalization.

``run`` breaks every edge that spans more than one rank into a chain of unit
edges through ``edge`` dummies, one per intermediate rank. The dummy on the
edge's label rank becomes an ``edge-label`` dummy sized like the label. The
first dummy of each chain is recorded in ``GraphLabel.dummy_chains``;
``undo`` walks those chains to rebuild the edge and collect its route points.
"""

from __future__ import annotations

from collections.abc import Hashable

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import DummyKind, EdgeLabel, NodeLabel, Point
from layered_layout.layout.util import add_dummy_node

_DONE = object()


def run(g: Graph) -> None:
    graph_label = g.graph()
    graph_label.dummy_chains = []
    for e in g.edges():
        v = e.v
        v_rank = g.node(v).rank
        w = e.w
        w_rank = g.node(w).rank
        if w_rank == v_rank + 1:
            continue

        edge_label = g.edge(e)
        label_rank = edge_label.label_rank
        g.remove_edge(e)
        edge_label.points = []

        first = True
        v_rank += 1
        while v_rank < w_rank:
            attrs = NodeLabel(rank=v_rank, edge_label=edge_label, edge_obj=e)
            dummy = add_dummy_node(g, DummyKind.EDGE, attrs, "_d")
            if v_rank == label_rank:
                attrs.width = edge_label.width
                attrs.height = edge_label.height
                attrs.dummy = DummyKind.EDGE_LABEL
                attrs.label_pos = edge_label.label_pos
            g.set_edge(v, dummy, EdgeLabel(weight=edge_label.weight), e.name)
            if first:
                graph_label.dummy_chains.append(dummy)
                first = False
            v = dummy
            v_rank += 1
        g.set_edge(v, w, EdgeLabel(weight=edge_label.weight), e.name)


def undo(g: Graph) -> None:
    for v in g.graph().dummy_chains:
        node = g.node(v)
        orig_label = node.edge_label
        e = node.edge_obj
        g.set_edge(e.v, e.w, orig_label, e.name)
        while node.dummy is not None:
            w = g.successors(v)[0]
            g.remove_node(v)
            orig_label.points.append(Point(node.x, node.y))
            if node.dummy is DummyKind.EDGE_LABEL:
                orig_label.x = node.x
                orig_label.y = node.y
                orig_label.width = node.width
                orig_label.height = node.height
            v = w
            node = g.node(v)


def parent_dummy_chains(g: Graph) -> None:
    """Move each chain's dummies into the cluster they pass through.

    The chain climbs from the tail's cluster towards the lowest common
    ancestor of both endpoints, then descends towards the head's cluster,
    choosing at every rank the innermost cluster whose rank span contains it.
    """
    postorder_nums = _hierarchy_postorder(g)

    for v in g.graph().dummy_chains:
        edge_obj = g.node(v).edge_obj
        path, lca = _find_path(g, postorder_nums, edge_obj.v, edge_obj.w)
        path_idx = 0
        path_v = path[path_idx]
        ascending = True

        while v != edge_obj.w:
            node = g.node(v)
            if ascending:
                while True:
                    path_v = path[path_idx]
                    if path_v == lca or g.node(path_v).max_rank >= node.rank:
                        break
                    path_idx += 1
                if path_v == lca:
                    ascending = False
            if not ascending:
                while path_idx < len(path) - 1 and g.node(path[path_idx + 1]).min_rank <= node.rank:
                    path_idx += 1
                path_v = path[path_idx]
            g.set_parent(v, path_v)
            v = g.successors(v)[0]


def _find_path(
    g: Graph,
    postorder_nums: dict[Hashable, tuple[int, int]],
    v: Hashable,
    w: Hashable,
) -> tuple[list[Hashable | None], Hashable | None]:
    """Clusters on the way from ``v`` up to the LCA and down to ``w``, plus the LCA."""
    low = min(postorder_nums[v][0], postorder_nums[w][0])
    lim = max(postorder_nums[v][1], postorder_nums[w][1])

    v_path: list[Hashable | None] = []
    parent: Hashable | None = v
    while True:
        parent = g.parent(parent)
        v_path.append(parent)
        if parent is None:
            break
        parent_low, parent_lim = postorder_nums[parent]
        if parent_low <= low and lim <= parent_lim:
            break
    lca = parent

    w_path: list[Hashable] = []
    parent = g.parent(w)
    while parent != lca:
        w_path.append(parent)
        parent = g.parent(parent)

    return v_path + w_path[::-1], lca


def _hierarchy_postorder(g: Graph) -> dict[Hashable, tuple[int, int]]:
    """``(low, lim)`` for every node of the cluster hierarchy."""
    result: dict[Hashable, tuple[int, int]] = {}
    lim = 0
    for top in g.children():
        stack = [(top, lim, iter(g.children(top)))]
        while stack:
            v, low, pending = stack[-1]
            child = next(pending, _DONE)
            if child is _DONE:
                stack.pop()
                result[v] = (low, lim)
                lim += 1
            else:
                stack.append((child, lim, iter(g.children(child))))
    return result
