"""Layout pipeline driver.

``layout`` copies the recognised attributes of the caller's graph into a
private layout graph, runs every stage over it in order, and writes the
resulting coordinates back. Stages mutate the layout graph in place; each
relies on what the previous ones left behind.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from layered_layout.config import LayoutConfig, parse_enum
from layered_layout.ir.graph import Graph
from layered_layout.layout import (
    acyclic,
    border_segments,
    coordinate_system,
    finalize,
    nesting,
    normalize,
    order,
    position,
    rank,
    ranks,
)
from layered_layout.layout.types import EdgeLabel, GraphLabel, LabelPos, NodeLabel
from layered_layout.layout.util import as_non_compound_graph
from layered_layout.types import RankDir

logger = logging.getLogger(__name__)

Stage = Callable[[Graph], None]


def layout(graph: Graph, config: LayoutConfig | None = None) -> None:
    """Lay out ``graph`` in place.

    Node labels are mappings with ``width``/``height``; edge labels are
    mappings with ``minlen``, ``weight``, ``width``, ``height``,
    ``labeloffset`` and ``labelpos``. Missing labels are created as empty
    dicts. Options come from ``config`` or, when omitted, from the graph label.

    On return node labels carry ``x``/``y`` (clusters also ``width``/
    ``height``), edge labels carry ``points`` and, for labelled edges,
    ``x``/``y``, and the graph label carries ``width``/``height``.

    Raises:
        ConfigurationError: If an option value is not recognised.
    """
    config = config or LayoutConfig.from_mapping(graph.graph())
    logger.info("layout: %d nodes, %d edges", graph.node_count(), graph.edge_count())
    layout_graph = build_layout_graph(graph, config)
    if layout_graph.node_count():
        run_layout(layout_graph)
    update_input_graph(graph, layout_graph)


def build_layout_graph(graph: Graph, config: LayoutConfig | None = None) -> Graph:
    """Copy only the attributes that influence layout, applying defaults for falsy values."""
    g = Graph(compound=True)
    g.set_graph(GraphLabel.from_config(config or LayoutConfig.from_mapping(graph.graph())))

    for v in graph.nodes():
        attrs = _attrs(graph.node(v))
        g.set_node(v, NodeLabel(width=attrs.get("width") or 0.0, height=attrs.get("height") or 0.0))
    for v in graph.nodes():
        g.set_parent(v, graph.parent(v))

    for e in graph.edges():
        attrs = _attrs(graph.edge(e))
        label = EdgeLabel(
            minlen=attrs.get("minlen") or 1,
            weight=attrs.get("weight") or 1,
            width=attrs.get("width") or 0.0,
            height=attrs.get("height") or 0.0,
            label_offset=attrs.get("labeloffset") or 10.0,
            label_pos=parse_enum(LabelPos, attrs.get("labelpos"), "labelpos", LabelPos.RIGHT),
        )
        g.set_edge(e.v, e.w, label, e.name)
    return g


def run_layout(g: Graph) -> None:
    stages: list[tuple[str, Stage]] = [
        ("make_space_for_edge_labels", make_space_for_edge_labels),
        ("remove_self_edges", acyclic.remove_self_edges),
        ("acyclic", acyclic.run),
        ("nesting", nesting.run),
        ("rank", lambda g: rank.rank(as_non_compound_graph(g))),
        ("inject_edge_label_proxies", ranks.inject_edge_label_proxies),
        ("remove_empty_ranks", ranks.remove_empty_ranks),
        ("nesting_cleanup", nesting.cleanup),
        ("normalize_ranks", ranks.normalize_ranks),
        ("assign_rank_min_max", ranks.assign_rank_min_max),
        ("remove_edge_label_proxies", ranks.remove_edge_label_proxies),
        ("normalize", normalize.run),
        ("parent_dummy_chains", normalize.parent_dummy_chains),
        ("add_border_segments", border_segments.add_border_segments),
        ("order", order.order),
        ("insert_self_edges", finalize.insert_self_edges),
        ("coordinate_system_adjust", coordinate_system.adjust),
        ("position", position.position),
        ("position_self_edges", finalize.position_self_edges),
        ("remove_border_nodes", finalize.remove_border_nodes),
        ("denormalize", normalize.undo),
        ("fixup_edge_label_coords", finalize.fixup_edge_label_coords),
        ("coordinate_system_undo", coordinate_system.undo),
        ("translate_graph", finalize.translate_graph),
        ("assign_node_intersects", finalize.assign_node_intersects),
        ("reverse_points_for_reversed_edges", finalize.reverse_points_for_reversed_edges),
        ("acyclic_undo", acyclic.undo),
    ]
    for name, stage in stages:
        logger.debug("stage %s (%d nodes, %d edges)", name, g.node_count(), g.edge_count())
        stage(g)


def make_space_for_edge_labels(g: Graph) -> None:
    """Split every rank in two so labels can sit on the half ranks.

    Halves ``ranksep`` and doubles every ``minlen``. Side labels are padded
    by ``label_offset`` across the rank direction to keep them off the edge.
    """
    graph_label = g.graph()
    graph_label.ranksep /= 2
    vertical = graph_label.rankdir in (RankDir.TB, RankDir.BT)
    for e in g.edges():
        edge = g.edge(e)
        edge.minlen *= 2
        if edge.label_pos is not LabelPos.CENTER:
            if vertical:
                edge.width += edge.label_offset
            else:
                edge.height += edge.label_offset


def update_input_graph(graph: Graph, layout_graph: Graph) -> None:
    """Copy coordinates, sizes of clusters, routes and the drawing size back."""
    for v in graph.nodes():
        input_label = _writable(graph.node(v))
        graph.set_node(v, input_label)
        layout_label = layout_graph.node(v)
        input_label["x"] = layout_label.x
        input_label["y"] = layout_label.y
        if layout_graph.children(v):
            input_label["width"] = layout_label.width
            input_label["height"] = layout_label.height

    for e in graph.edges():
        input_label = _writable(graph.edge(e))
        graph.set_edge(e.v, e.w, input_label, e.name)
        layout_label = layout_graph.edge(e)
        input_label["points"] = [{"x": p.x, "y": p.y} for p in layout_label.points]
        if layout_label.x is not None:
            input_label["x"] = layout_label.x
            input_label["y"] = layout_label.y

    graph_label = _writable(graph.graph())
    graph.set_graph(graph_label)
    layout_label = layout_graph.graph()
    graph_label["width"] = layout_label.width
    graph_label["height"] = layout_label.height


def _attrs(label: Any) -> Mapping[str, Any]:
    return label if isinstance(label, Mapping) else {}


def _writable(label: Any) -> Any:
    return {} if label is None or isinstance(label, LayoutConfig) else label
