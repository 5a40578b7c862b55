"""Intermediate representation: compound multigraph, traversals, JSON documents."""

from layered_layout.ir.document import graph_from_document, graph_to_document
from layered_layout.ir.graph import Edge, Graph
from layered_layout.ir.traversal import postorder, preorder

__all__ = [
    "Edge",
    "Graph",
    "graph_from_document",
    "graph_to_document",
    "postorder",
    "preorder",
]
