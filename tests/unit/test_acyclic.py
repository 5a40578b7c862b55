"""Tests for layout/acyclic.py — self-loop parking and cycle breaking."""

from __future__ import annotations

import networkx as nx

from layered_layout.ir.graph import Edge, Graph
from layered_layout.layout import acyclic
from layered_layout.layout.types import EdgeLabel, GraphLabel, NodeLabel


def make_graph(*edges: tuple) -> Graph:
    """Layout-ready graph; an edge is (v, w) or (v, w, name)."""
    g = Graph(compound=True)
    g.set_graph(GraphLabel())
    g.set_default_node_label(lambda v: NodeLabel())
    for edge in edges:
        v, w, *name = edge
        g.set_edge(v, w, EdgeLabel(), name[0] if name else None)
    return g


def is_dag(g: Graph) -> bool:
    return nx.is_directed_acyclic_graph(nx.MultiDiGraph([(e.v, e.w) for e in g.edges()]))


def edge_set(g: Graph) -> set[tuple]:
    return {(e.v, e.w, e.name) for e in g.edges()}


class TestRun:
    def test_dag_untouched(self):
        g = make_graph(("a", "b"), ("b", "c"), ("a", "c"))
        before = edge_set(g)
        acyclic.run(g)
        assert edge_set(g) == before

    def test_two_cycle(self):
        g = make_graph(("a", "b"), ("b", "a"))
        acyclic.run(g)
        assert is_dag(g)
        assert g.edge_count() == 2

    def test_reversed_edge_is_tagged(self):
        g = make_graph(("a", "b"), ("b", "c"), ("c", "a", "back"))
        label = g.edge("c", "a", "back")
        acyclic.run(g)
        assert is_dag(g)
        reversed_edges = [e for e in g.edges() if g.edge(e).reversed]
        assert len(reversed_edges) == 1
        e = reversed_edges[0]
        assert (e.v, e.w) == ("a", "c")
        assert g.edge(e) is label
        assert label.forward_name == "back"

    def test_complex_cycle(self):
        """a → b → c → a plus d → b — result is a DAG."""
        g = make_graph(("a", "b"), ("b", "c"), ("c", "a"), ("d", "b"))
        acyclic.run(g)
        assert is_dag(g)


class TestUndo:
    def test_round_trip_restores_edges(self):
        g = make_graph(("a", "b"), ("b", "c"), ("c", "a", "back"), ("c", "b"))
        before = edge_set(g)
        acyclic.run(g)
        acyclic.undo(g)
        assert edge_set(g) == before
        assert not any(g.edge(e).reversed for e in g.edges())

    def test_reversal_next_to_existing_edge(self):
        """A reversed b → a must not overwrite the existing a → b."""
        g = make_graph(("a", "b"), ("b", "a"))
        acyclic.run(g)
        assert len(g.out_edges("a", "b")) == 2
        acyclic.undo(g)
        assert edge_set(g) == {("a", "b", None), ("b", "a", None)}

    def test_reversal_skips_names_already_taken(self):
        g = make_graph(("a", "b", "rev1"), ("b", "a"))
        kept = g.edge("a", "b", "rev1")
        acyclic.run(g)
        assert g.edge("a", "b", "rev1") is kept
        assert not kept.reversed
        assert g.edge_count() == 2
        acyclic.undo(g)
        assert edge_set(g) == {("a", "b", "rev1"), ("b", "a", None)}


class TestSelfEdges:
    def test_parked_on_node(self):
        g = make_graph(("a", "a"), ("a", "b"))
        label = g.edge("a", "a")
        acyclic.remove_self_edges(g)
        assert not g.has_edge("a", "a")
        parked = g.node("a").self_edges
        assert len(parked) == 1
        assert parked[0].edge == Edge("a", "a")
        assert parked[0].label is label


class TestFeedbackArcSet:
    def test_empty_for_dag(self):
        assert acyclic.feedback_arc_set(make_graph(("a", "b"), ("b", "c"))) == []

    def test_back_edge_found(self):
        g = make_graph(("a", "b"), ("b", "c"), ("c", "a"))
        assert acyclic.feedback_arc_set(g) == [Edge("c", "a")]
