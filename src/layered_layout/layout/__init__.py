"""Layered layout pipeline and its label types."""

from __future__ import annotations

from layered_layout.layout.engine import build_layout_graph, layout, run_layout, update_input_graph
from layered_layout.layout.geometry import intersect_rect
from layered_layout.layout.types import (
    BorderType,
    DummyKind,
    EdgeLabel,
    GraphLabel,
    NodeLabel,
    Point,
    SelfEdge,
    UniqueIds,
)

__all__ = [
    "BorderType",
    "DummyKind",
    "EdgeLabel",
    "GraphLabel",
    "NodeLabel",
    "Point",
    "SelfEdge",
    "UniqueIds",
    "build_layout_graph",
    "intersect_rect",
    "layout",
    "run_layout",
    "update_input_graph",
]
