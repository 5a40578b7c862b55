"""layered-layout: hierarchical (Sugiyama-style) layout for compound directed graphs."""

from __future__ import annotations

from typing import Any

from layered_layout.config import LayoutConfig
from layered_layout.errors import (
    ConfigurationError,
    DegenerateGeometryError,
    DocumentError,
    InvalidOperationError,
    LayoutError,
    PreconditionError,
    StructuralViolationError,
)
from layered_layout.ir.document import graph_from_document, graph_to_document
from layered_layout.ir.graph import Edge, Graph
from layered_layout.layout import layout
from layered_layout.types import Align, LabelPos, Ranker, RankDir

__all__ = [
    "Align",
    "ConfigurationError",
    "DegenerateGeometryError",
    "DocumentError",
    "Edge",
    "Graph",
    "InvalidOperationError",
    "LabelPos",
    "LayoutConfig",
    "LayoutError",
    "PreconditionError",
    "RankDir",
    "Ranker",
    "StructuralViolationError",
    "graph_from_document",
    "graph_to_document",
    "layout",
    "layout_document",
]


def _apply_overrides(doc: dict[str, Any], **overrides: str | None) -> dict[str, Any]:
    """Return a copy of ``doc`` whose graph options include the non-None overrides."""
    options = dict(doc.get("graph") or {})
    options.update({key: value for key, value in overrides.items() if value is not None})
    return {**doc, "graph": options}


def layout_document(
    doc: dict[str, Any],
    rankdir: str | None = None,
    ranker: str | None = None,
    align: str | None = None,
) -> dict[str, Any]:
    """Lay out a JSON graph document and return the laid-out document.

    Args:
        doc: Mapping with ``graph`` options, ``nodes`` and ``edges`` lists.
        rankdir: Override rank direction ('TB', 'BT', 'LR', 'RL'); None keeps the document's.
        ranker: Override ranker ('network-simplex', 'tight-tree', 'longest-path').
        align: Override alignment ('UL', 'UR', 'DL', 'DR').

    Returns:
        A new document with node ``x``/``y``, edge ``points`` and the graph's
        ``width``/``height`` filled in.

    Raises:
        DocumentError: If a node has no id or an edge lacks an endpoint.
        ConfigurationError: If an option value is not recognised.
    """
    if not isinstance(doc, dict):
        raise DocumentError(f"graph document must be an object, got {type(doc).__name__}")
    graph = graph_from_document(_apply_overrides(doc, rankdir=rankdir, ranker=ranker, align=align))
    layout(graph)
    return graph_to_document(graph)
