"""Rank clean-up between ranking and normalization."""

from __future__ import annotations

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import DummyKind, NodeLabel
from layered_layout.layout.util import add_dummy_node


def inject_edge_label_proxies(g: Graph) -> None:
    """Pin a placeholder at the mid rank of every labelled edge.

    The placeholder keeps that rank occupied while empty ranks are removed,
    so the label still has a rank to sit on afterwards.
    """
    for e in g.edges():
        edge = g.edge(e)
        if edge.width and edge.height:
            v_rank = g.node(e.v).rank
            w_rank = g.node(e.w).rank
            proxy = NodeLabel(rank=(w_rank - v_rank) / 2 + v_rank, edge_obj=e)
            add_dummy_node(g, DummyKind.EDGE_PROXY, proxy, "_ep")


def remove_edge_label_proxies(g: Graph) -> None:
    for v in g.nodes():
        label = g.node(v)
        if label.dummy is DummyKind.EDGE_PROXY:
            g.edge(label.edge_obj).label_rank = label.rank
            g.remove_node(v)


def remove_empty_ranks(g: Graph) -> None:
    """Close up empty ranks, except those at multiples of ``node_rank_factor``.

    Ranks at multiples of the factor are where cluster borders may live, so
    they are kept even when empty. With a factor of 1 nothing is removed.
    """
    ranks = [label.rank for label in map(g.node, g.nodes()) if label.rank is not None]
    if not ranks:
        return
    min_rank = min(ranks)
    size = max(ranks) - min_rank
    if size <= 0:
        return

    layers: dict[float, list] = {}
    for v in g.nodes():
        label = g.node(v)
        if label.rank is not None:
            layers.setdefault(label.rank - min_rank, []).append(v)

    delta = 0
    node_rank_factor = g.graph().node_rank_factor
    for i in range(int(size) + 1):
        vs = layers.get(i)
        if vs is None and i % node_rank_factor != 0:
            delta -= 1
        elif delta and vs:
            for v in vs:
                g.node(v).rank += delta


def normalize_ranks(g: Graph) -> None:
    """Shift ranks so the smallest is 0."""
    labels = [label for label in map(g.node, g.nodes()) if label.rank is not None]
    if not labels:
        return
    lowest = min(label.rank for label in labels)
    for label in labels:
        label.rank -= lowest


def assign_rank_min_max(g: Graph) -> None:
    max_rank = 0
    for v in g.nodes():
        label = g.node(v)
        if label.border_top is not None:
            label.min_rank = g.node(label.border_top).rank
            label.max_rank = g.node(label.border_bottom).rank
            max_rank = max(max_rank, label.max_rank)
    g.graph().max_rank = max_rank
