"""Compound multigraph — the data structure every layout phase operates on.

Adjacency and labels live in a networkx MultiDiGraph (or MultiGraph when the
graph is undirected). Edge names are the networkx edge keys, with ``""``
standing for an unnamed edge. On top of that this module keeps:

  - an insertion-ordered edge index, so ``edges()`` enumerates edges in the
    order they were created (several phases break ties by that order);
  - for compound graphs, a parent map and ordered child sets rooted at a
    sentinel, so "no parent" never needs special casing during traversal.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

import networkx as nx

from layered_layout.errors import InvalidOperationError, StructuralViolationError

_GRAPH_NODE = "\x00"
_UNNAMED = ""


@dataclass(frozen=True)
class Edge:
    """Identity of an edge: endpoints plus an optional name."""

    v: Hashable
    w: Hashable
    name: Hashable | None = None


def _default_node_label(_v: Hashable) -> Any:
    return None


def _edge_key(name: Hashable | None) -> Hashable:
    return _UNNAMED if name is None or name == _UNNAMED else name


def _order_key(v: Hashable) -> tuple[str, str]:
    # Keys of mixed types (user ints, synthetic strings) still order consistently.
    return (type(v).__name__, str(v))


class Graph:
    """A mutable, optionally directed, optionally compound multigraph."""

    def __init__(self, directed: bool = True, compound: bool = False) -> None:
        self._directed = directed
        self._compound = compound
        self._label: Any = None
        self._default_node_label: Callable[[Hashable], Any] = _default_node_label
        self._nx: nx.MultiDiGraph | nx.MultiGraph = nx.MultiDiGraph() if directed else nx.MultiGraph()
        self._edges: dict[tuple[Hashable, Hashable, Hashable], Edge] = {}
        if compound:
            self._parent: dict[Hashable, Hashable] = {}
            self._children: dict[Hashable, dict[Hashable, None]] = {_GRAPH_NODE: {}}

    @classmethod
    def from_networkx(cls, nx_graph: nx.Graph, compound: bool = False) -> Graph:
        """Build a Graph from a networkx graph.

        Node and edge attribute dicts become the labels, the networkx graph
        attributes become the graph label. With ``compound=True`` a node
        attribute named ``parent`` sets the hierarchy. Multigraph edge keys
        become edge names.
        """
        graph = cls(directed=nx_graph.is_directed(), compound=compound)
        graph.set_graph(dict(nx_graph.graph))
        for node_id, attrs in nx_graph.nodes(data=True):
            graph.set_node(node_id, dict(attrs))
        if compound:
            for node_id, attrs in nx_graph.nodes(data=True):
                if attrs.get("parent") is not None:
                    graph.set_parent(node_id, attrs["parent"])
        if nx_graph.is_multigraph():
            for src, tgt, key, attrs in nx_graph.edges(keys=True, data=True):
                graph.set_edge(src, tgt, dict(attrs), str(key))
        else:
            for src, tgt, attrs in nx_graph.edges(data=True):
                graph.set_edge(src, tgt, dict(attrs))
        return graph

    # ─── Graph-level ─────────────────────────────────────────────────────────

    @property
    def is_directed(self) -> bool:
        return self._directed

    @property
    def is_compound(self) -> bool:
        return self._compound

    def set_graph(self, label: Any) -> None:
        self._label = label

    def graph(self) -> Any:
        return self._label

    def set_default_node_label(self, factory: Callable[[Hashable], Any]) -> None:
        """Set the factory used for labels of implicitly created nodes."""
        self._default_node_label = factory

    # ─── Nodes ───────────────────────────────────────────────────────────────

    def nodes(self) -> list[Hashable]:
        return list(self._nx.nodes)

    def node_count(self) -> int:
        return self._nx.number_of_nodes()

    def sources(self) -> list[Hashable]:
        """Nodes without incoming edges, in insertion order."""
        if self._directed:
            return [v for v in self._nx.nodes if self._nx.in_degree(v) == 0]
        return [v for v in self._nx.nodes if not self.in_edges(v)]

    def set_node(self, v: Hashable, label: Any = None) -> None:
        """Insert ``v``, or replace its label when one is given."""
        if v in self._nx:
            if label is not None:
                self._nx.nodes[v]["label"] = label
            return
        self._nx.add_node(v, label=label if label is not None else self._default_node_label(v))
        if self._compound:
            self._parent[v] = _GRAPH_NODE
            self._children[v] = {}
            self._children[_GRAPH_NODE][v] = None

    def node(self, v: Hashable) -> Any:
        if v not in self._nx:
            return None
        return self._nx.nodes[v]["label"]

    def has_node(self, v: Hashable) -> bool:
        return v in self._nx

    def remove_node(self, v: Hashable) -> None:
        """Remove ``v`` and its incident edges; its children move to its parent."""
        if v not in self._nx:
            return
        if self._compound:
            parent = self._parent.pop(v)
            del self._children[parent][v]
            for child in self._children.pop(v):
                self._parent[child] = parent
                self._children[parent][child] = None
        for e in self.node_edges(v):
            self._edges.pop(self._edge_id(e.v, e.w, e.name), None)
        self._nx.remove_node(v)

    # ─── Hierarchy ───────────────────────────────────────────────────────────

    def set_parent(self, v: Hashable, parent: Hashable | None = None) -> None:
        """Move ``v`` under ``parent`` (or to the top level when None).

        Raises:
            InvalidOperationError: If the graph is not compound.
            StructuralViolationError: If ``parent`` is ``v`` or a descendant of it.
        """
        if not self._compound:
            raise InvalidOperationError("Cannot set parent in a non-compound graph")
        if parent is None:
            parent = _GRAPH_NODE
        else:
            ancestor: Hashable | None = parent
            while ancestor is not None:
                if ancestor == v:
                    raise StructuralViolationError(f"Setting {parent} as parent of {v} would create a cycle")
                ancestor = self.parent(ancestor)
            self.set_node(parent)
        self.set_node(v)
        del self._children[self._parent[v]][v]
        self._parent[v] = parent
        self._children[parent][v] = None

    def parent(self, v: Hashable) -> Hashable | None:
        if not self._compound:
            return None
        parent = self._parent.get(v)
        if parent is None or parent == _GRAPH_NODE:
            return None
        return parent

    def children(self, v: Hashable | None = None) -> list[Hashable]:
        """Children of ``v``, or the top-level nodes when ``v`` is None."""
        if not self._compound:
            return self.nodes() if v is None else []
        children = self._children.get(_GRAPH_NODE if v is None else v)
        return list(children) if children is not None else []

    # ─── Adjacency ───────────────────────────────────────────────────────────

    def predecessors(self, v: Hashable) -> list[Hashable]:
        if v not in self._nx:
            return []
        if not self._directed:
            return self.neighbors(v)
        return list(self._nx.predecessors(v))

    def successors(self, v: Hashable) -> list[Hashable]:
        if v not in self._nx:
            return []
        if not self._directed:
            return self.neighbors(v)
        return list(self._nx.successors(v))

    def neighbors(self, v: Hashable) -> list[Hashable]:
        if v not in self._nx:
            return []
        if not self._directed:
            return list(self._nx.neighbors(v))
        return list(dict.fromkeys([*self._nx.predecessors(v), *self._nx.successors(v)]))

    # ─── Edges ───────────────────────────────────────────────────────────────

    def edges(self) -> list[Edge]:
        return list(self._edges.values())

    def edge_count(self) -> int:
        return len(self._edges)

    def set_edge(self, v: Hashable, w: Hashable, label: Any = None, name: Hashable | None = None) -> None:
        """Insert the edge (creating missing endpoints) or replace its label."""
        v, w = self._canonical(v, w)
        key = _edge_key(name)
        edge_id = (v, w, key)
        if edge_id in self._edges:
            if label is not None:
                self._nx.edges[v, w, key]["label"] = label
            return
        self.set_node(v)
        self.set_node(w)
        self._nx.add_edge(v, w, key=key, label=label)
        self._edges[edge_id] = Edge(v, w, None if key == _UNNAMED else key)

    def edge(self, v: Hashable | Edge, w: Hashable | None = None, name: Hashable | None = None) -> Any:
        if isinstance(v, Edge):
            v, w, name = v.v, v.w, v.name
        v, w = self._canonical(v, w)
        data = self._nx.get_edge_data(v, w, _edge_key(name))
        return None if data is None else data["label"]

    def has_edge(self, v: Hashable | Edge, w: Hashable | None = None, name: Hashable | None = None) -> bool:
        if isinstance(v, Edge):
            v, w, name = v.v, v.w, v.name
        return self._edge_id(v, w, name) in self._edges

    def remove_edge(self, v: Hashable | Edge, w: Hashable | None = None, name: Hashable | None = None) -> None:
        if isinstance(v, Edge):
            v, w, name = v.v, v.w, v.name
        edge_id = self._edge_id(v, w, name)
        if self._edges.pop(edge_id, None) is not None:
            self._nx.remove_edge(edge_id[0], edge_id[1], key=edge_id[2])

    def in_edges(self, v: Hashable, u: Hashable | None = None) -> list[Edge]:
        """Edges into ``v``, optionally only those coming from ``u``."""
        if v not in self._nx:
            return []
        if not self._directed:
            return [e for e in self.node_edges(v) if e.w == v and (u is None or e.v == u)]
        return [
            Edge(src, v, key or None)
            for src, _, key in self._nx.in_edges(v, keys=True)
            if u is None or src == u
        ]

    def out_edges(self, v: Hashable, w: Hashable | None = None) -> list[Edge]:
        """Edges out of ``v``, optionally only those going to ``w``."""
        if v not in self._nx:
            return []
        if not self._directed:
            return [e for e in self.node_edges(v) if e.v == v and (w is None or e.w == w)]
        return [
            Edge(v, tgt, key or None)
            for _, tgt, key in self._nx.out_edges(v, keys=True)
            if w is None or tgt == w
        ]

    def node_edges(self, v: Hashable, w: Hashable | None = None) -> list[Edge]:
        """All edges incident on ``v``, optionally only those shared with ``w``."""
        if v not in self._nx:
            return []
        if self._directed:
            return self.in_edges(v, w) + self.out_edges(v, w)
        edges = []
        for _, other, key in self._nx.edges(v, keys=True):
            if w is None or other == w:
                src, tgt = self._canonical(v, other)
                edges.append(Edge(src, tgt, key or None))
        return edges

    # ─── Internals ───────────────────────────────────────────────────────────

    def _canonical(self, v: Hashable, w: Hashable) -> tuple[Hashable, Hashable]:
        if not self._directed and _order_key(v) > _order_key(w):
            return w, v
        return v, w

    def _edge_id(self, v: Hashable, w: Hashable, name: Hashable | None) -> tuple[Hashable, Hashable, Hashable]:
        v, w = self._canonical(v, w)
        return (v, w, _edge_key(name))
