"""Depth-first pre- and post-order walks over a Graph."""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from layered_layout.errors import PreconditionError
from layered_layout.ir.graph import Graph


def preorder(g: Graph, vs: Hashable | Iterable[Hashable]) -> list[Hashable]:
    """Nodes reachable from ``vs`` in the order they are first visited."""
    return _dfs(g, vs, postorder=False)


def postorder(g: Graph, vs: Hashable | Iterable[Hashable]) -> list[Hashable]:
    """Nodes reachable from ``vs`` in the order their subtrees finish."""
    return _dfs(g, vs, postorder=True)


def _dfs(g: Graph, vs: Hashable | Iterable[Hashable], postorder: bool) -> list[Hashable]:
    roots = list(vs) if isinstance(vs, (list, tuple)) else [vs]
    navigate = g.successors if g.is_directed else g.neighbors
    acc: list[Hashable] = []
    visited: set[Hashable] = set()

    for root in roots:
        if not g.has_node(root):
            raise PreconditionError(f"Graph does not have node: {root}")
        if root in visited:
            continue
        visited.add(root)
        if not postorder:
            acc.append(root)
        stack = [(root, iter(navigate(root)))]
        while stack:
            v, pending = stack[-1]
            for w in pending:
                if w not in visited:
                    visited.add(w)
                    if not postorder:
                        acc.append(w)
                    stack.append((w, iter(navigate(w))))
                    break
            else:
                stack.pop()
                if postorder:
                    acc.append(v)
    return acc
