"""End-to-end tests for layered_layout.layout — full pipeline on small graphs.

Node boxes are W x H unless stated otherwise; with the default options ranks
are 50 apart and neighbouring real nodes 50 apart.
"""

from __future__ import annotations

import pytest

from layered_layout import Graph, LayoutConfig, RankDir, layout, layout_document
from layered_layout.errors import ConfigurationError, DocumentError

W = 50
H = 100

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str], nodes: tuple[str, ...] = (), **options) -> Graph:
    """Compound graph of W x H nodes; ``options`` become the graph label."""
    g = Graph(compound=True)
    g.set_graph(dict(options))
    for v in nodes:
        g.set_node(v, {"width": W, "height": H})
    for v, w in edges:
        for u in (v, w):
            if not g.has_node(u):
                g.set_node(u, {"width": W, "height": H})
        g.set_edge(v, w, {})
    return g


def xy(g: Graph, v: str) -> tuple[float, float]:
    label = g.node(v)
    return label["x"], label["y"]


# ─── Basic shapes ─────────────────────────────────────────────────────────────


class TestSingleNode:
    def test_single_node_at_origin_corner(self):
        g = make_graph(nodes=("a",))
        layout(g)
        assert xy(g, "a") == (pytest.approx(W / 2), pytest.approx(H / 2))
        assert g.graph()["width"] == pytest.approx(W)
        assert g.graph()["height"] == pytest.approx(H)

    def test_margins(self):
        g = make_graph(nodes=("a",), marginx=10, marginy=20)
        layout(g)
        assert xy(g, "a") == (pytest.approx(W / 2 + 10), pytest.approx(H / 2 + 20))
        assert g.graph()["width"] == pytest.approx(W + 20)
        assert g.graph()["height"] == pytest.approx(H + 40)

    def test_empty_graph(self):
        g = Graph(compound=True)
        layout(g)
        assert g.graph() == {"width": 0, "height": 0}


class TestSingleEdge:
    def test_ranks_are_stacked(self):
        g = make_graph(("a", "b"))
        layout(g)
        ax, ay = xy(g, "a")
        bx, by = xy(g, "b")
        assert bx == pytest.approx(ax)
        assert by - ay == pytest.approx(H + 50)
        assert g.graph()["width"] == pytest.approx(W)
        assert g.graph()["height"] == pytest.approx(2 * H + 50)

    def test_points_run_from_border_to_border(self):
        """Route: exit a's bottom side, one bend on the half rank, enter b's top side."""
        g = make_graph(("a", "b"))
        layout(g)
        points = g.edge("a", "b")["points"]
        assert [p["y"] for p in points] == [pytest.approx(H), pytest.approx(H + 25), pytest.approx(H + 50)]
        assert all(p["x"] == pytest.approx(W / 2) for p in points)

    def test_unlabelled_edge_has_no_label_position(self):
        g = make_graph(("a", "b"))
        layout(g)
        assert "x" not in g.edge("a", "b")
        assert "y" not in g.edge("a", "b")

    def test_missing_labels_are_created(self):
        """Bare nodes have zero size; every label becomes a dict."""
        g = Graph()
        g.set_edge("a", "b")
        layout(g)
        assert set(g.node("a")) == {"x", "y"}
        assert g.node("b")["y"] - g.node("a")["y"] == pytest.approx(50)
        assert len(g.edge("a", "b")["points"]) == 3
        assert g.graph()["height"] == pytest.approx(50)

    def test_explicit_config_wins_over_graph_label(self):
        g = make_graph(("a", "b"), rankdir="TB")
        layout(g, LayoutConfig(rankdir=RankDir.LR))
        ax, ay = xy(g, "a")
        bx, by = xy(g, "b")
        assert by == pytest.approx(ay)
        assert bx - ax == pytest.approx(W + 50)


class TestDiamond:
    def test_middle_rank_is_spread(self):
        g = make_graph(("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"))
        layout(g)
        bx, by = xy(g, "b")
        cx, cy = xy(g, "c")
        assert by == pytest.approx(cy)
        assert abs(cx - bx) == pytest.approx(W + 50)

    def test_ends_are_centred(self):
        g = make_graph(("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"))
        layout(g)
        middle = (g.node("b")["x"] + g.node("c")["x"]) / 2
        assert g.node("a")["x"] == pytest.approx(middle)
        assert g.node("d")["x"] == pytest.approx(middle)

    def test_rank_heights(self):
        g = make_graph(("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"))
        layout(g)
        assert g.node("a")["y"] == pytest.approx(H / 2)
        assert g.node("b")["y"] == pytest.approx(H + 50 + H / 2)
        assert g.node("d")["y"] == pytest.approx(2 * H + 100 + H / 2)


# ─── Rank directions ──────────────────────────────────────────────────────────


class TestRankDir:
    def test_lr_spaces_ranks_by_width(self):
        g = make_graph(("a", "b"), rankdir="LR")
        layout(g)
        ax, ay = xy(g, "a")
        bx, by = xy(g, "b")
        assert by == pytest.approx(ay)
        assert bx - ax == pytest.approx(W + 50)
        assert g.graph()["width"] == pytest.approx(2 * W + 50)
        assert g.graph()["height"] == pytest.approx(H)

    def test_bt_puts_source_at_bottom(self):
        g = make_graph(("a", "b"), rankdir="bt")
        layout(g)
        assert g.node("a")["y"] - g.node("b")["y"] == pytest.approx(H + 50)
        assert g.node("b")["y"] == pytest.approx(H / 2)

    def test_rl_puts_source_on_the_right(self):
        g = make_graph(("a", "b"), rankdir="RL")
        layout(g)
        assert g.node("a")["x"] - g.node("b")["x"] == pytest.approx(W + 50)

    def test_unknown_rankdir(self):
        g = make_graph(("a", "b"), rankdir="diagonal")
        with pytest.raises(ConfigurationError, match="TB, BT, LR, RL"):
            layout(g)


# ─── Edge labels ──────────────────────────────────────────────────────────────


class TestEdgeLabels:
    def test_centred_label_sits_between_ranks(self):
        g = make_graph(("a", "b"))
        g.set_edge("a", "b", {"width": 20, "height": 10, "labelpos": "c"})
        layout(g)
        edge = g.edge("a", "b")
        assert edge["x"] == pytest.approx(g.node("a")["x"])
        assert edge["y"] == pytest.approx((g.node("a")["y"] + g.node("b")["y"]) / 2)
        assert g.node("b")["y"] - g.node("a")["y"] == pytest.approx(H + 60)

    def test_right_label_is_offset(self):
        g = make_graph(("a", "b"))
        g.set_edge("a", "b", {"width": 20, "height": 10})
        layout(g)
        edge = g.edge("a", "b")
        assert edge["x"] == pytest.approx(g.node("a")["x"] + 20)
        assert edge["width"] == 20
        assert g.graph()["width"] == pytest.approx(W + 5)

    def test_left_label_is_offset(self):
        g = make_graph(("a", "b"))
        g.set_edge("a", "b", {"width": 20, "height": 10, "labelpos": "L"})
        layout(g)
        assert g.edge("a", "b")["x"] == pytest.approx(g.node("a")["x"] - 20)

    def test_unknown_labelpos(self):
        g = make_graph(("a", "b"))
        g.set_edge("a", "b", {"labelpos": "top"})
        with pytest.raises(ConfigurationError):
            layout(g)


# ─── Self-loops and cycles ────────────────────────────────────────────────────


class TestSelfLoop:
    def test_loop_bulges_to_the_right(self):
        g = make_graph(("a", "a"))
        layout(g)
        ax, ay = xy(g, "a")
        points = g.edge("a", "a")["points"]
        assert len(points) == 7
        curve = points[1:6]
        assert all(p["x"] > ax + W / 2 for p in curve)
        assert curve[2]["x"] == pytest.approx(ax + W / 2 + 40)
        assert [p["y"] for p in curve] == [
            pytest.approx(ay - H / 2),
            pytest.approx(ay - H / 2),
            pytest.approx(ay),
            pytest.approx(ay + H / 2),
            pytest.approx(ay + H / 2),
        ]

    def test_loop_does_not_shift_node(self):
        g = make_graph(("a", "a"))
        layout(g)
        assert xy(g, "a") == (pytest.approx(W / 2), pytest.approx(H / 2))


class TestCycle:
    def test_two_cycle_keeps_both_edges(self):
        g = make_graph(("a", "b"), ("b", "a"))
        layout(g)
        assert g.has_edge("a", "b")
        assert g.has_edge("b", "a")
        assert g.node("a")["y"] < g.node("b")["y"]

    def test_back_edge_points_follow_original_direction(self):
        g = make_graph(("a", "b"), ("b", "a"))
        layout(g)
        forward = g.edge("a", "b")["points"]
        backward = g.edge("b", "a")["points"]
        assert forward[0]["y"] < forward[-1]["y"]
        assert backward[0]["y"] > backward[-1]["y"]

    def test_named_parallel_edges_both_routed(self):
        g = make_graph(nodes=("a", "b"))
        g.set_edge("a", "b", {}, "x")
        g.set_edge("a", "b", {}, "y")
        layout(g)
        assert len(g.edge("a", "b", "x")["points"]) == 3
        assert len(g.edge("a", "b", "y")["points"]) == 3

    def test_back_edge_next_to_edge_named_like_a_reversal(self):
        g = make_graph(nodes=("a", "b"))
        g.set_edge("a", "b", {}, "rev1")
        g.set_edge("b", "a", {})
        layout(g)
        assert g.edge_count() == 2
        assert len(g.edge("a", "b", "rev1")["points"]) == 3
        backward = g.edge("b", "a")["points"]
        assert backward[0]["y"] > backward[-1]["y"]


# ─── Clusters ─────────────────────────────────────────────────────────────────


class TestCluster:
    def _cluster_graph(self) -> Graph:
        g = make_graph(("a", "b"))
        g.set_node("sg", {})
        g.set_parent("a", "sg")
        g.set_parent("b", "sg")
        return g

    def test_cluster_gets_a_box(self):
        g = self._cluster_graph()
        layout(g)
        cluster = g.node("sg")
        assert {"x", "y", "width", "height"} <= set(cluster)
        assert cluster["width"] > 0
        assert cluster["height"] > 0

    def test_cluster_contains_children_vertically(self):
        g = self._cluster_graph()
        layout(g)
        cluster = g.node("sg")
        top = cluster["y"] - cluster["height"] / 2
        bottom = cluster["y"] + cluster["height"] / 2
        assert top < g.node("a")["y"] - H / 2
        assert g.node("b")["y"] + H / 2 < bottom

    def test_only_caller_nodes_remain(self):
        g = self._cluster_graph()
        layout(g)
        assert sorted(g.nodes()) == ["a", "b", "sg"]
        assert g.parent("a") == "sg"


# ─── Documents ────────────────────────────────────────────────────────────────


class TestLayoutDocument:
    def _doc(self) -> dict:
        return {
            "graph": {"rankdir": "TB"},
            "nodes": [
                {"id": "a", "width": W, "height": H},
                {"id": "b", "width": W, "height": H},
            ],
            "edges": [{"v": "a", "w": "b"}],
        }

    def test_coordinates_filled_in(self):
        result = layout_document(self._doc())
        nodes = {node["id"]: node for node in result["nodes"]}
        assert nodes["b"]["y"] - nodes["a"]["y"] == pytest.approx(H + 50)
        assert len(result["edges"][0]["points"]) == 3
        assert result["graph"]["height"] == pytest.approx(2 * H + 50)

    def test_rankdir_override(self):
        result = layout_document(self._doc(), rankdir="LR")
        nodes = {node["id"]: node for node in result["nodes"]}
        assert nodes["a"]["y"] == pytest.approx(nodes["b"]["y"])
        assert result["graph"]["rankdir"] == "LR"

    def test_input_document_untouched(self):
        doc = self._doc()
        layout_document(doc, rankdir="LR")
        assert doc["graph"] == {"rankdir": "TB"}
        assert "x" not in doc["nodes"][0]

    def test_not_a_mapping(self):
        with pytest.raises(DocumentError):
            layout_document(["a", "b"])

    def test_node_without_id(self):
        with pytest.raises(DocumentError, match="node #0"):
            layout_document({"nodes": [{"width": 10}]})
