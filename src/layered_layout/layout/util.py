"""Helpers shared by several layout stages."""

from __future__ import annotations

from collections.abc import Hashable

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import DummyKind, NodeLabel


def add_dummy_node(g: Graph, kind: DummyKind, label: NodeLabel, prefix: str) -> str:
    """Insert a synthetic node with a fresh key and return the key."""
    ids = g.graph().ids
    v = ids(prefix)
    while g.has_node(v):
        v = ids(prefix)
    label.dummy = kind
    g.set_node(v, label)
    return v


def as_non_compound_graph(g: Graph) -> Graph:
    """A flat view of ``g``: leaf nodes and all edges, sharing the same labels."""
    flat = Graph()
    flat.set_graph(g.graph())
    for v in g.nodes():
        if not g.children(v):
            flat.set_node(v, g.node(v))
    for e in g.edges():
        flat.set_edge(e.v, e.w, g.edge(e), e.name)
    return flat


def max_rank(g: Graph) -> int | None:
    ranks = [label.rank for label in map(g.node, g.nodes()) if label.rank is not None]
    return max(ranks) if ranks else None


def build_layer_matrix(g: Graph) -> list[list[Hashable]]:
    """Node keys grouped by rank, each layer sorted by ``order``."""
    top = max_rank(g)
    if top is None:
        return []
    layers: list[list[tuple[int, Hashable]]] = [[] for _ in range(int(top) + 1)]
    for v in g.nodes():
        label = g.node(v)
        if label.rank is not None:
            layers[int(label.rank)].append((label.order or 0, v))
    return [[v for _, v in sorted(layer, key=lambda item: item[0])] for layer in layers]
