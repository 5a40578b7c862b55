"""Cycle breaking.

Self-loops are parked on their node until ordering is done. Remaining cycles
are broken by reversing the back edges of a depth-first spanning forest; the
reversed edges are tagged so ``undo`` can restore them once coordinates exist.
"""

from __future__ import annotations

from layered_layout.ir.graph import Edge, Graph
from layered_layout.layout.types import SelfEdge


def remove_self_edges(g: Graph) -> None:
    for e in g.edges():
        if e.v == e.w:
            g.node(e.v).self_edges.append(SelfEdge(e, g.edge(e)))
            g.remove_edge(e)


def run(g: Graph) -> None:
    """Reverse a feedback arc set so ``g`` becomes acyclic."""
    ids = g.graph().ids
    for e in feedback_arc_set(g):
        label = g.edge(e)
        g.remove_edge(e)
        label.forward_name = e.name
        label.reversed = True
        name = ids("rev")
        while g.has_edge(e.w, e.v, name):
            name = ids("rev")
        g.set_edge(e.w, e.v, label, name)


def undo(g: Graph) -> None:
    for e in g.edges():
        label = g.edge(e)
        if label.reversed:
            g.remove_edge(e)
            forward_name = label.forward_name
            label.reversed = False
            label.forward_name = None
            g.set_edge(e.w, e.v, label, forward_name)


def feedback_arc_set(g: Graph) -> list[Edge]:
    """Edges that point back into the active DFS path, visiting nodes in insertion order."""
    fas: list[Edge] = []
    on_stack: set = set()
    visited: set = set()

    for start in g.nodes():
        if start in visited:
            continue
        visited.add(start)
        on_stack.add(start)
        stack = [(start, iter(g.out_edges(start)))]
        while stack:
            v, pending = stack[-1]
            for e in pending:
                if e.w in on_stack:
                    fas.append(e)
                elif e.w not in visited:
                    visited.add(e.w)
                    on_stack.add(e.w)
                    stack.append((e.w, iter(g.out_edges(e.w))))
                    break
            else:
                stack.pop()
                on_stack.discard(v)
    return fas
