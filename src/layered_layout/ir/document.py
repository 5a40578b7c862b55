"""JSON-compatible graph documents.

A document is a mapping::

    {
        "graph": {"rankdir": "LR", ...},
        "nodes": [{"id": "a", "width": 40, "height": 20, "parent": "cluster"}, ...],
        "edges": [{"v": "a", "w": "b", "name": "x", "minlen": 1, ...}, ...],
    }

Everything besides the identifying keys (``id``/``parent`` for nodes,
``v``/``w``/``name`` for edges) is carried as the node or edge label.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from layered_layout.errors import DocumentError
from layered_layout.ir.graph import Graph

_NODE_KEYS = ("id", "parent")
_EDGE_KEYS = ("v", "w", "name")


def graph_from_document(doc: Mapping[str, Any]) -> Graph:
    """Build a compound Graph from a document.

    Raises:
        DocumentError: If the document is not a mapping, or a node lacks
            ``id`` or an edge lacks ``v``/``w``.
    """
    if not isinstance(doc, Mapping):
        raise DocumentError(f"graph document must be an object, got {type(doc).__name__}")

    graph = Graph(compound=True)
    graph.set_graph(dict(doc.get("graph") or {}))

    nodes = doc.get("nodes") or []
    for i, node in enumerate(nodes):
        if not isinstance(node, Mapping) or "id" not in node:
            raise DocumentError(f"node #{i} has no 'id'")
        graph.set_node(node["id"], {k: v for k, v in node.items() if k not in _NODE_KEYS})
    for node in nodes:
        if node.get("parent") is not None:
            graph.set_parent(node["id"], node["parent"])

    for i, edge in enumerate(doc.get("edges") or []):
        if not isinstance(edge, Mapping) or "v" not in edge or "w" not in edge:
            raise DocumentError(f"edge #{i} needs both 'v' and 'w'")
        graph.set_edge(edge["v"], edge["w"], {k: v for k, v in edge.items() if k not in _EDGE_KEYS}, edge.get("name"))
    return graph


def graph_to_document(graph: Graph) -> dict[str, Any]:
    nodes = []
    for v in graph.nodes():
        node: dict[str, Any] = {"id": v}
        parent = graph.parent(v)
        if parent is not None:
            node["parent"] = parent
        node.update(graph.node(v) or {})
        nodes.append(node)

    edges = []
    for e in graph.edges():
        edge: dict[str, Any] = {"v": e.v, "w": e.w}
        if e.name is not None:
            edge["name"] = e.name
        edge.update(graph.edge(e) or {})
        edges.append(edge)

    return {"graph": dict(graph.graph() or {}), "nodes": nodes, "edges": edges}
