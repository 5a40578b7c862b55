"""Tests for layout/nesting.py and layout/ranks.py — cluster borders and rank clean-up."""

from __future__ import annotations

from layered_layout.ir.graph import Edge, Graph
from layered_layout.layout import nesting, rank, ranks
from layered_layout.layout.types import DummyKind, EdgeLabel, GraphLabel, NodeLabel
from layered_layout.layout.util import as_non_compound_graph


def make_graph() -> Graph:
    g = Graph(compound=True)
    g.set_graph(GraphLabel())
    g.set_default_node_label(lambda v: NodeLabel())
    return g


def with_ranks(**node_ranks: int) -> Graph:
    g = make_graph()
    for v, r in node_ranks.items():
        g.set_node(v, NodeLabel(rank=r))
    return g


def cluster_graph() -> Graph:
    """Cluster sg holding a → b, plus a top-level c."""
    g = make_graph()
    g.set_edge("a", "b", EdgeLabel())
    g.set_parent("a", "sg")
    g.set_parent("b", "sg")
    g.set_node("c")
    return g


# ─── Nesting graph ────────────────────────────────────────────────────────────


class TestTreeDepths:
    def test_depths(self):
        g = cluster_graph()
        g.set_parent("sg", "outer")
        assert nesting.tree_depths(g) == {"outer": 1, "sg": 2, "a": 3, "b": 3, "c": 1}


class TestNestingRun:
    def test_flat_graph_factor_is_one(self):
        g = make_graph()
        g.set_edge("a", "b", EdgeLabel(minlen=2))
        nesting.run(g)
        assert g.graph().node_rank_factor == 1
        assert g.edge("a", "b").minlen == 2

    def test_root_links_every_leaf(self):
        g = make_graph()
        g.set_edge("a", "b", EdgeLabel())
        nesting.run(g)
        root = g.graph().nesting_root
        assert g.node(root).dummy is DummyKind.ROOT
        assert sorted(g.successors(root)) == ["a", "b"]
        assert g.edge(root, "a").weight == 0

    def test_cluster_gets_border_nodes(self):
        g = cluster_graph()
        nesting.run(g)
        label = g.node("sg")
        assert g.parent(label.border_top) == "sg"
        assert g.parent(label.border_bottom) == "sg"
        assert g.node(label.border_top).dummy is DummyKind.BORDER
        assert g.graph().node_rank_factor == 3
        assert g.edge("a", "b").minlen == 3

    def test_nesting_edges_are_tagged(self):
        g = cluster_graph()
        nesting.run(g)
        label = g.node("sg")
        assert g.edge(label.border_top, "a").nesting_edge
        assert g.edge("b", label.border_bottom).nesting_edge
        assert not g.edge("a", "b").nesting_edge

    def test_ranked_children_sit_between_borders(self):
        g = cluster_graph()
        nesting.run(g)
        rank.rank(as_non_compound_graph(g))
        label = g.node("sg")
        r = {v: g.node(v).rank for v in [label.border_top, "a", "b", label.border_bottom]}
        assert r[label.border_top] < r["a"] < r["b"] < r[label.border_bottom]

    def test_cleanup(self):
        g = cluster_graph()
        nesting.run(g)
        root = g.graph().nesting_root
        nesting.cleanup(g)
        assert not g.has_node(root)
        assert g.graph().nesting_root is None
        assert g.edges() == [Edge("a", "b")]


# ─── Rank clean-up ────────────────────────────────────────────────────────────


class TestNormalizeRanks:
    def test_shift_to_zero(self):
        g = with_ranks(a=-2, b=0, c=3)
        ranks.normalize_ranks(g)
        assert [g.node(v).rank for v in "abc"] == [0, 2, 5]

    def test_unranked_nodes_ignored(self):
        g = with_ranks(a=4)
        g.set_node("sg", NodeLabel())
        ranks.normalize_ranks(g)
        assert g.node("a").rank == 0
        assert g.node("sg").rank is None


class TestRemoveEmptyRanks:
    def test_factor_one_keeps_everything(self):
        g = with_ranks(a=0, b=4)
        ranks.remove_empty_ranks(g)
        assert g.node("b").rank == 4

    def test_keeps_multiples_of_factor(self):
        g = with_ranks(a=0, b=4, c=6)
        g.graph().node_rank_factor = 3
        ranks.remove_empty_ranks(g)
        assert [g.node(v).rank for v in "abc"] == [0, 2, 3]

    def test_offset_from_minimum(self):
        g = with_ranks(a=-3, b=1)
        g.graph().node_rank_factor = 2
        ranks.remove_empty_ranks(g)
        assert g.node("b").rank == -1


class TestEdgeLabelProxies:
    def test_proxy_on_mid_rank(self):
        g = with_ranks(a=0, b=2)
        g.set_edge("a", "b", EdgeLabel(width=10, height=5))
        ranks.inject_edge_label_proxies(g)
        proxies = [v for v in g.nodes() if g.node(v).dummy is DummyKind.EDGE_PROXY]
        assert len(proxies) == 1
        assert g.node(proxies[0]).rank == 1

        ranks.remove_edge_label_proxies(g)
        assert g.node_count() == 2
        assert g.edge("a", "b").label_rank == 1

    def test_unlabelled_edge_has_no_proxy(self):
        g = with_ranks(a=0, b=2)
        g.set_edge("a", "b", EdgeLabel(width=10))
        ranks.inject_edge_label_proxies(g)
        assert g.node_count() == 2


class TestAssignRankMinMax:
    def test_cluster_span(self):
        g = with_ranks(top=1, bottom=5, a=3)
        g.set_node("sg", NodeLabel(border_top="top", border_bottom="bottom"))
        ranks.assign_rank_min_max(g)
        assert (g.node("sg").min_rank, g.node("sg").max_rank) == (1, 5)
        assert g.graph().max_rank == 5
