"""Stages that turn positioned scaffolding back into the caller's nodes and edges."""

from __future__ import annotations

import math

from layered_layout.ir.graph import Graph
from layered_layout.layout.geometry import intersect_rect
from layered_layout.layout.types import DummyKind, LabelPos, NodeLabel, Point
from layered_layout.layout.util import add_dummy_node, build_layer_matrix


# ─── Self-edges ──────────────────────────────────────────────────────────────


def insert_self_edges(g: Graph) -> None:
    """Give every parked self-loop a placeholder right after its node in the rank."""
    for layer in build_layer_matrix(g):
        order_shift = 0
        for i, v in enumerate(layer):
            node = g.node(v)
            node.order = i + order_shift
            for self_edge in node.self_edges:
                order_shift += 1
                placeholder = NodeLabel(
                    width=self_edge.label.width,
                    height=self_edge.label.height,
                    rank=node.rank,
                    order=i + order_shift,
                    edge_obj=self_edge.edge,
                    edge_label=self_edge.label,
                )
                add_dummy_node(g, DummyKind.SELF_EDGE, placeholder, "_se")
            node.self_edges = []


def position_self_edges(g: Graph) -> None:
    """Restore each self-loop as a five-point bulge towards its placeholder."""
    for v in g.nodes():
        node = g.node(v)
        if node.dummy is not DummyKind.SELF_EDGE:
            continue
        e = node.edge_obj
        self_node = g.node(e.v)
        x = self_node.x + self_node.width / 2
        y = self_node.y
        dx = node.x - x
        dy = self_node.height / 2
        label = node.edge_label
        g.set_edge(e.v, e.w, label, e.name)
        g.remove_node(v)
        label.points = [
            Point(x + 2 * dx / 3, y - dy),
            Point(x + 5 * dx / 6, y - dy),
            Point(x + dx, y),
            Point(x + 5 * dx / 6, y + dy),
            Point(x + 2 * dx / 3, y + dy),
        ]
        label.x = node.x
        label.y = node.y


# ─── Scaffolding removal ─────────────────────────────────────────────────────


def remove_border_nodes(g: Graph) -> None:
    """Size each cluster from its borders on the last rank, then drop all border nodes."""
    for v in g.nodes():
        if not g.children(v):
            continue
        node = g.node(v)
        top = g.node(node.border_top)
        bottom = g.node(node.border_bottom)
        left = g.node(node.border_left[max(node.border_left)])
        right = g.node(node.border_right[max(node.border_right)])
        node.width = abs(right.x - left.x)
        node.height = abs(bottom.y - top.y)
        node.x = left.x + node.width / 2
        node.y = top.y + node.height / 2

    for v in g.nodes():
        if g.node(v).dummy is DummyKind.BORDER:
            g.remove_node(v)


def fixup_edge_label_coords(g: Graph) -> None:
    """Move side labels off the edge by ``label_offset`` and drop the padding from their width."""
    for e in g.edges():
        edge = g.edge(e)
        if edge.x is None:
            continue
        if edge.label_pos in (LabelPos.LEFT, LabelPos.RIGHT):
            edge.width -= edge.label_offset
        if edge.label_pos is LabelPos.LEFT:
            edge.x -= edge.width / 2 + edge.label_offset
        elif edge.label_pos is LabelPos.RIGHT:
            edge.x += edge.width / 2 + edge.label_offset


# ─── Final geometry ──────────────────────────────────────────────────────────


def translate_graph(g: Graph) -> None:
    """Move the drawing so its top-left corner (less the margins) is the origin."""
    graph_label = g.graph()
    margin_x = graph_label.marginx or 0
    margin_y = graph_label.marginy or 0
    min_x = math.inf
    max_x = 0.0
    min_y = math.inf
    max_y = 0.0

    boxes = [g.node(v) for v in g.nodes()]
    boxes.extend(label for label in map(g.edge, g.edges()) if label.x is not None)
    for box in boxes:
        min_x = min(min_x, box.x - box.width / 2)
        max_x = max(max_x, box.x + box.width / 2)
        min_y = min(min_y, box.y - box.height / 2)
        max_y = max(max_y, box.y + box.height / 2)

    min_x -= margin_x
    min_y -= margin_y

    for v in g.nodes():
        node = g.node(v)
        node.x -= min_x
        node.y -= min_y
    for e in g.edges():
        edge = g.edge(e)
        for point in edge.points:
            point.x -= min_x
            point.y -= min_y
        if edge.x is not None:
            edge.x -= min_x
        if edge.y is not None:
            edge.y -= min_y

    graph_label.width = max_x - min_x + margin_x
    graph_label.height = max_y - min_y + margin_y


def assign_node_intersects(g: Graph) -> None:
    """Clip every edge route to the boundaries of its end nodes."""
    for e in g.edges():
        edge = g.edge(e)
        node_v = g.node(e.v)
        node_w = g.node(e.w)
        if not edge.points:
            p1, p2 = node_w, node_v
        else:
            p1, p2 = edge.points[0], edge.points[-1]
        edge.points.insert(0, intersect_rect(node_v, p1))
        edge.points.append(intersect_rect(node_w, p2))


def reverse_points_for_reversed_edges(g: Graph) -> None:
    for e in g.edges():
        edge = g.edge(e)
        if edge.reversed:
            edge.points.reverse()
