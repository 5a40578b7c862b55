"""Rank assignment.

Gives every node an integer ``rank`` such that, for each edge, ``rank(w) -
rank(v) >= minlen``. Ranks are not normalized here and may start anywhere,
including below zero.

Three strategies are available, selected by ``GraphLabel.ranker``:

  - ``longest-path``: push every node as low as its successors allow. Fast
    but leaves long edges.
  - ``tight-tree``: longest path, then shift subtrees until a spanning tree
    of tight (zero-slack) edges exists.
  - ``network-simplex``: tight tree, then pivot tree edges with negative cut
    values until the total weighted edge length is locally minimal.

The structure follows Gansner et al., "A Technique for Drawing Directed
Graphs". Preconditions: the graph is a connected DAG whose edges carry
``minlen`` and ``weight``.
"""

from __future__ import annotations

import math
from collections.abc import Hashable
from dataclasses import dataclass

from layered_layout.ir.graph import Edge, Graph
from layered_layout.ir.traversal import postorder, preorder
from layered_layout.layout.types import EdgeLabel
from layered_layout.types import Ranker


@dataclass
class TreeNodeLabel:
    low: int | None = None
    lim: int | None = None
    parent: Hashable | None = None


@dataclass
class TreeEdgeLabel:
    cutvalue: float = 0.0


def rank(g: Graph) -> None:
    if not g.node_count():
        return
    ranker = g.graph().ranker
    if ranker is Ranker.TIGHT_TREE:
        longest_path(g)
        feasible_tree(g)
    elif ranker is Ranker.LONGEST_PATH:
        longest_path(g)
    else:
        network_simplex(g)


def slack(g: Graph, e: Edge) -> float:
    """How much longer ``e`` is than its ``minlen``; zero means tight."""
    return g.node(e.w).rank - g.node(e.v).rank - g.edge(e).minlen


# ─── Longest path ────────────────────────────────────────────────────────────


def longest_path(g: Graph) -> None:
    """Rank each node at the minimum over its out-edges of ``rank(w) - minlen``; sinks get 0."""
    visited: set[Hashable] = set()
    for start in g.sources():
        if start in visited:
            continue
        visited.add(start)
        stack = [(start, iter(g.out_edges(start)))]
        while stack:
            v, pending = stack[-1]
            for e in pending:
                if e.w not in visited:
                    visited.add(e.w)
                    stack.append((e.w, iter(g.out_edges(e.w))))
                    break
            else:
                stack.pop()
                g.node(v).rank = min(
                    (g.node(e.w).rank - g.edge(e).minlen for e in g.out_edges(v)),
                    default=0,
                )


# ─── Feasible tree ───────────────────────────────────────────────────────────


def feasible_tree(g: Graph) -> Graph:
    """Build a spanning tree of tight edges, shifting ranks as needed.

    Starts from the first node and grows the tree along zero-slack edges. When
    it cannot grow, the minimum-slack edge leaving the tree is made tight by
    moving every tree node by that slack.

    Returns:
        An undirected Graph whose edges are the tree edges.
    """
    t = Graph(directed=False)
    start = g.nodes()[0]
    size = g.node_count()
    t.set_node(start, TreeNodeLabel())

    while _tight_tree(t, g) < size:
        edge = _find_min_slack_edge(t, g)
        delta = slack(g, edge) if t.has_node(edge.v) else -slack(g, edge)
        for v in t.nodes():
            g.node(v).rank += delta
    return t


def _tight_tree(t: Graph, g: Graph) -> int:
    stack = list(reversed(t.nodes()))
    while stack:
        v = stack.pop()
        for e in g.node_edges(v):
            w = e.w if v == e.v else e.v
            if not t.has_node(w) and not slack(g, e):
                t.set_node(w, TreeNodeLabel())
                t.set_edge(v, w, TreeEdgeLabel())
                stack.append(w)
    return t.node_count()


def _find_min_slack_edge(t: Graph, g: Graph) -> Edge | None:
    best: Edge | None = None
    best_slack = math.inf
    for e in g.edges():
        if t.has_node(e.v) != t.has_node(e.w):
            candidate = slack(g, e)
            if candidate < best_slack:
                best_slack = candidate
                best = e
    return best


# ─── Network simplex ─────────────────────────────────────────────────────────


def network_simplex(g: Graph) -> None:
    g = simplify(g)
    longest_path(g)
    tree = feasible_tree(g)
    init_low_lim_values(tree)
    init_cut_values(tree, g)

    while True:
        e = leave_edge(tree)
        if e is None:
            break
        f = enter_edge(tree, g, e)
        exchange_edges(tree, g, e, f)


def simplify(g: Graph) -> Graph:
    """Collapse parallel edges: weights are summed, the largest minlen wins.

    Node labels are shared with ``g`` so ranks written here land on ``g``.
    """
    simple = Graph()
    simple.set_graph(g.graph())
    for v in g.nodes():
        simple.set_node(v, g.node(v))
    for e in g.edges():
        current = simple.edge(e.v, e.w) or EdgeLabel(weight=0, minlen=1)
        label = g.edge(e)
        simple.set_edge(
            e.v,
            e.w,
            EdgeLabel(weight=current.weight + label.weight, minlen=max(current.minlen, label.minlen)),
        )
    return simple


def init_low_lim_values(tree: Graph, root: Hashable | None = None) -> None:
    """Number the tree in postorder so ``low <= lim(v) <= lim`` tests descent."""
    if root is None:
        root = tree.nodes()[0]
    next_lim = 1
    visited = {root}
    stack = [(root, None, next_lim, iter(tree.neighbors(root)))]
    while stack:
        v, parent, low, pending = stack[-1]
        for w in pending:
            if w not in visited:
                visited.add(w)
                stack.append((w, v, next_lim, iter(tree.neighbors(w))))
                break
        else:
            stack.pop()
            label = tree.node(v)
            label.low = low
            label.lim = next_lim
            label.parent = parent
            next_lim += 1


def init_cut_values(t: Graph, g: Graph) -> None:
    vs = postorder(t, t.nodes())
    for v in vs[:-1]:
        parent = t.node(v).parent
        t.edge(v, parent).cutvalue = calc_cut_value(t, g, v)


def calc_cut_value(t: Graph, g: Graph, child: Hashable) -> float:
    """Cut value of the tree edge between ``child`` and its tree parent.

    Relies on the cut values of the child's other tree edges being known,
    which holds when children are visited in postorder.
    """
    parent = t.node(child).parent
    # True when child is the tail of the tree edge in g.
    child_is_tail = True
    graph_edge = g.edge(child, parent)
    if graph_edge is None:
        child_is_tail = False
        graph_edge = g.edge(parent, child)

    cut_value = graph_edge.weight
    for e in g.node_edges(child):
        is_out_edge = e.v == child
        other = e.w if is_out_edge else e.v
        if other == parent:
            continue
        points_to_head = is_out_edge == child_is_tail
        other_weight = g.edge(e).weight
        cut_value += other_weight if points_to_head else -other_weight
        if t.has_edge(child, other):
            other_cut_value = t.edge(child, other).cutvalue
            cut_value += -other_cut_value if points_to_head else other_cut_value
    return cut_value


def leave_edge(tree: Graph) -> Edge | None:
    """The first tree edge with a negative cut value, if any."""
    for e in tree.edges():
        if tree.edge(e).cutvalue < 0:
            return e
    return None


def enter_edge(t: Graph, g: Graph, edge: Edge) -> Edge | None:
    """The minimum-slack graph edge reconnecting the two halves left by ``edge``."""
    v, w = edge.v, edge.w
    # Orient so v is the tail in g.
    if not g.has_edge(v, w):
        v, w = w, v

    v_label = t.node(v)
    w_label = t.node(w)
    tail_label = v_label
    # The root is on the tail side, so head/tail membership flips.
    flip = False
    if v_label.lim > w_label.lim:
        tail_label = w_label
        flip = True

    best: Edge | None = None
    best_slack = math.inf
    for candidate in g.edges():
        if (
            flip == _is_descendant(t.node(candidate.v), tail_label)
            and flip != _is_descendant(t.node(candidate.w), tail_label)
        ):
            candidate_slack = slack(g, candidate)
            if candidate_slack < best_slack:
                best_slack = candidate_slack
                best = candidate
    return best


def exchange_edges(t: Graph, g: Graph, e: Edge, f: Edge) -> None:
    t.remove_edge(e)
    t.set_edge(f.v, f.w, TreeEdgeLabel())
    init_low_lim_values(t)
    init_cut_values(t, g)
    update_ranks(t, g)


def update_ranks(t: Graph, g: Graph) -> None:
    """Re-derive every rank from the tree root by walking tight tree edges."""
    root = next(v for v in t.nodes() if t.node(v).parent is None)
    for v in preorder(t, root)[1:]:
        parent = t.node(v).parent
        edge = g.edge(v, parent)
        flipped = False
        if edge is None:
            edge = g.edge(parent, v)
            flipped = True
        g.node(v).rank = g.node(parent).rank + (edge.minlen if flipped else -edge.minlen)


def _is_descendant(label: TreeNodeLabel, root_label: TreeNodeLabel) -> bool:
    return root_label.low <= label.lim <= root_label.lim
