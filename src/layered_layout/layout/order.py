"""Crossing minimization.

Assigns every node an ``order`` within its rank. Starting from a BFS order,
the orderer sweeps the ranks alternately upward and downward; each sweep
sorts one rank at a time by the barycenter of its neighbours in the rank just
fixed, keeping every cluster's members contiguous between its left and right
border nodes. The layering with the fewest weighted crossings wins.

Heuristics follow Gansner et al. for the sweeps, Forster ("A Fast and Simple
Heuristic for Constrained Two-Level Crossing Reduction") for conflict
resolution and Barth et al. ("Bilayer Cross Counting") for counting.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Hashable
from dataclasses import dataclass, field

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import BorderType, EdgeLabel
from layered_layout.layout.util import build_layer_matrix, max_rank

logger = logging.getLogger(__name__)

# Sweeps without improvement before giving up.
MAX_STALE_SWEEPS = 4

_BORDER_SLOT = {BorderType.LEFT: 0, BorderType.RIGHT: 2}


@dataclass
class LayerGraphLabel:
    """Graph label of a layer graph: its synthetic root and each cluster's borders on that rank."""

    root: Hashable
    borders: dict[Hashable, tuple[Hashable, Hashable]] = field(default_factory=dict)


@dataclass
class BarycenterEntry:
    v: Hashable
    barycenter: float | None = None
    weight: float | None = None


@dataclass
class ConflictEntry:
    vs: list[Hashable]
    i: int
    barycenter: float | None = None
    weight: float | None = None
    indegree: int = 0
    in_: list[ConflictEntry] = field(default_factory=list, repr=False)
    out: list[ConflictEntry] = field(default_factory=list, repr=False)
    merged: bool = False


@dataclass
class SortResult:
    vs: list[Hashable]
    barycenter: float | None = None
    weight: float | None = None


def order(g: Graph) -> None:
    """Set ``order`` on every ranked node to the best layering found."""
    top = max_rank(g)
    layering = init_order(g)
    assign_order(g, layering)
    if top is None:
        return

    down_layer_graphs = [build_layer_graph(g, rank, "in_edges") for rank in range(1, top + 1)]
    up_layer_graphs = [build_layer_graph(g, rank, "out_edges") for rank in range(top - 1, -1, -1)]

    best_cc = cross_count(g, layering)
    best = [list(layer) for layer in layering]

    i = 0
    last_best = 0
    while last_best < MAX_STALE_SWEEPS:
        sweep_layer_graphs(down_layer_graphs if i % 2 else up_layer_graphs, i % 4 >= 2)
        layering = build_layer_matrix(g)
        cc = cross_count(g, layering)
        if cc < best_cc:
            last_best = 0
            best = [list(layer) for layer in layering]
            best_cc = cc
        i += 1
        last_best += 1

    logger.debug("ordering settled after %d sweeps with %s crossings", i, best_cc)
    assign_order(g, best)


def assign_order(g: Graph, layering: list[list[Hashable]]) -> None:
    for layer in layering:
        for i, v in enumerate(layer):
            g.node(v).order = i


def init_order(g: Graph) -> list[list[Hashable]]:
    """Initial layering by breadth-first search from the lowest-ranked nodes.

    Each layer is then grouped by cluster so every cluster's members are
    contiguous, bracketed by its left and right border nodes.
    """
    simple_nodes = [v for v in g.nodes() if not g.children(v)]
    ranks = [g.node(v).rank for v in simple_nodes if g.node(v).rank is not None]
    if not ranks:
        return []
    layers: list[list[Hashable]] = [[] for _ in range(int(max(ranks)) + 1)]
    visited: set[Hashable] = set()
    for start in sorted(simple_nodes, key=lambda v: g.node(v).rank):
        queue = deque([start])
        while queue:
            v = queue.popleft()
            if v in visited:
                continue
            visited.add(v)
            layers[int(g.node(v).rank)].append(v)
            queue.extend(g.successors(v))
    return _group_by_cluster(g, layers)


def _group_by_cluster(g: Graph, layers: list[list[Hashable]]) -> list[list[Hashable]]:
    # Clusters rank by their first member in layer-major order, so sibling
    # clusters keep the same relative order on every rank.
    first_seen: dict[Hashable, int] = {}
    for layer in layers:
        for v in layer:
            u = v
            while u is not None and u not in first_seen:
                first_seen[u] = len(first_seen)
                u = g.parent(u)

    def key(v: Hashable) -> list[tuple[int, int]]:
        path = [(_BORDER_SLOT.get(g.node(v).border_type, 1), first_seen[v])]
        u = g.parent(v)
        while u is not None:
            path.append((1, first_seen[u]))
            u = g.parent(u)
        return path[::-1]

    return [sorted(layer, key=key) for layer in layers]


def build_layer_graph(g: Graph, rank: int, relationship: str) -> Graph:
    """The nodes of one rank with their cluster hierarchy and adjacent-rank edges.

    ``relationship`` is ``"in_edges"`` (edges from the rank above) or
    ``"out_edges"`` (edges from the rank below, turned to point at the movable
    node). Top-level nodes of the rank hang under a fresh root recorded on the
    graph label; neighbours in the fixed rank are added flat. Parallel edges
    are merged by summing their weights. Node labels are shared with ``g``.
    """
    ids = g.graph().ids
    root = ids("_root")
    while g.has_node(root):
        root = ids("_root")

    lg = Graph(compound=True)
    lg.set_graph(LayerGraphLabel(root))
    lg.set_default_node_label(g.node)

    for v in g.nodes():
        node = g.node(v)
        in_span = node.min_rank is not None and node.min_rank <= rank <= node.max_rank
        if node.rank != rank and not in_span:
            continue
        lg.set_node(v)
        parent = g.parent(v)
        lg.set_parent(v, parent if parent is not None else root)

        if relationship == "in_edges":
            neighbours = [(e.v, g.edge(e).weight) for e in g.in_edges(v)]
        else:
            neighbours = [(e.w, g.edge(e).weight) for e in g.out_edges(v)]
        for u, weight in neighbours:
            existing = lg.edge(u, v)
            lg.set_edge(u, v, EdgeLabel(weight=weight + (existing.weight if existing is not None else 0)))

        if node.min_rank is not None:
            lg.graph().borders[v] = (node.border_left[rank], node.border_right[rank])
    return lg


def sweep_layer_graphs(layer_graphs: list[Graph], bias_right: bool) -> None:
    cg = Graph()
    for lg in layer_graphs:
        result = sort_subgraph(lg, lg.graph().root, cg, bias_right)
        for i, v in enumerate(result.vs):
            lg.node(v).order = i
        add_subgraph_constraints(lg, cg, result.vs)


def add_subgraph_constraints(g: Graph, cg: Graph, vs: list[Hashable]) -> None:
    """Record in ``cg`` the left-to-right order of sibling clusters seen in ``vs``."""
    prev: dict[Hashable, Hashable] = {}
    root_prev: Hashable | None = None
    for v in vs:
        child = g.parent(v)
        while child is not None:
            parent = g.parent(child)
            if parent is not None:
                prev_child = prev.get(parent)
                prev[parent] = child
            else:
                prev_child = root_prev
                root_prev = child
            if prev_child is not None and prev_child != child:
                cg.set_edge(prev_child, child)
                break
            child = parent


# ─── Subgraph sorting ────────────────────────────────────────────────────────


def sort_subgraph(g: Graph, v: Hashable, cg: Graph, bias_right: bool) -> SortResult:
    """Order the children of ``v`` in layer graph ``g``, recursing into clusters."""
    movable = g.children(v)
    borders = g.graph().borders.get(v)
    if borders is not None:
        bl, br = borders
        movable = [w for w in movable if w != bl and w != br]

    barycenters = barycenter(g, movable)
    subgraphs: dict[Hashable, SortResult] = {}
    for entry in barycenters:
        if g.children(entry.v):
            subgraph_result = sort_subgraph(g, entry.v, cg, bias_right)
            subgraphs[entry.v] = subgraph_result
            if subgraph_result.barycenter is not None:
                _merge_barycenters(entry, subgraph_result)

    entries = resolve_conflicts(barycenters, cg)
    for conflict_entry in entries:
        conflict_entry.vs = [w for u in conflict_entry.vs for w in (subgraphs[u].vs if u in subgraphs else [u])]

    result = sort(entries, bias_right)

    if borders is not None:
        result.vs = [bl, *result.vs, br]
        bl_preds = g.predecessors(bl)
        if bl_preds:
            bl_pred = g.node(bl_preds[0])
            br_pred = g.node(g.predecessors(br)[0])
            if result.barycenter is None:
                result.barycenter = 0.0
                result.weight = 0.0
            result.barycenter = (result.barycenter * result.weight + bl_pred.order + br_pred.order) / (
                result.weight + 2
            )
            result.weight += 2
    return result


def barycenter(g: Graph, movable: list[Hashable]) -> list[BarycenterEntry]:
    """Weighted mean ``order`` of each node's in-neighbours; None when it has none."""
    entries = []
    for v in movable:
        in_edges = g.in_edges(v)
        if not in_edges:
            entries.append(BarycenterEntry(v))
            continue
        total = 0.0
        weight = 0.0
        for e in in_edges:
            edge_weight = g.edge(e).weight
            total += edge_weight * g.node(e.v).order
            weight += edge_weight
        entries.append(BarycenterEntry(v, total / weight, weight))
    return entries


def _merge_barycenters(target: BarycenterEntry, other: SortResult) -> None:
    if target.barycenter is not None:
        target.barycenter = (target.barycenter * target.weight + other.barycenter * other.weight) / (
            target.weight + other.weight
        )
        target.weight += other.weight
    else:
        target.barycenter = other.barycenter
        target.weight = other.weight


def resolve_conflicts(entries: list[BarycenterEntry], cg: Graph) -> list[ConflictEntry]:
    """Coalesce entries whose barycenters contradict the constraint graph.

    Walks the constraints in topological order; whenever an entry that must
    come first has a barycenter at or after its successor's, the two are
    merged into one entry with their weighted-average barycenter.

    Returns:
        Entries with ``vs`` (nodes in constraint order), ``i`` (lowest
        original index) and, when known, ``barycenter`` and ``weight``.
    """
    mapped: dict[Hashable, ConflictEntry] = {}
    for i, entry in enumerate(entries):
        mapped_entry = ConflictEntry(vs=[entry.v], i=i)
        if entry.barycenter is not None:
            mapped_entry.barycenter = entry.barycenter
            mapped_entry.weight = entry.weight
        mapped[entry.v] = mapped_entry

    for e in cg.edges():
        entry_v = mapped.get(e.v)
        entry_w = mapped.get(e.w)
        if entry_v is not None and entry_w is not None:
            entry_w.indegree += 1
            entry_v.out.append(entry_w)

    source_set = [entry for entry in mapped.values() if not entry.indegree]
    results: list[ConflictEntry] = []
    while source_set:
        entry = source_set.pop()
        results.append(entry)
        for u_entry in reversed(entry.in_):
            if u_entry.merged:
                continue
            if (
                u_entry.barycenter is None
                or entry.barycenter is None
                or u_entry.barycenter >= entry.barycenter
            ):
                _merge_entries(entry, u_entry)
        for w_entry in entry.out:
            w_entry.in_.append(entry)
            w_entry.indegree -= 1
            if w_entry.indegree == 0:
                source_set.append(w_entry)

    return [entry for entry in results if not entry.merged]


def _merge_entries(target: ConflictEntry, source: ConflictEntry) -> None:
    total = 0.0
    weight = 0.0
    if target.weight:
        total += target.barycenter * target.weight
        weight += target.weight
    if source.weight:
        total += source.barycenter * source.weight
        weight += source.weight
    target.vs = source.vs + target.vs
    target.barycenter = total / weight if weight else None
    target.weight = weight or None
    target.i = min(source.i, target.i)
    source.merged = True


def sort(entries: list[ConflictEntry], bias_right: bool) -> SortResult:
    """Sort entries by barycenter, keeping entries without one at their original index.

    Ties keep original order, or reverse it when ``bias_right`` is set.
    """
    sortable = [entry for entry in entries if entry.barycenter is not None]
    unsortable = sorted((entry for entry in entries if entry.barycenter is None), key=lambda entry: -entry.i)
    sortable.sort(key=lambda entry: (entry.barycenter, -entry.i if bias_right else entry.i))

    vs: list[Hashable] = []
    total = 0.0
    weight = 0.0
    vs_index = _consume_unsortable(vs, unsortable, 0)
    for entry in sortable:
        vs_index += len(entry.vs)
        vs.extend(entry.vs)
        total += entry.barycenter * entry.weight
        weight += entry.weight
        vs_index = _consume_unsortable(vs, unsortable, vs_index)

    result = SortResult(vs=vs)
    if weight:
        result.barycenter = total / weight
        result.weight = weight
    return result


def _consume_unsortable(vs: list[Hashable], unsortable: list[ConflictEntry], index: int) -> int:
    while unsortable and unsortable[-1].i <= index:
        vs.extend(unsortable.pop().vs)
        index += 1
    return index


# ─── Crossing count ──────────────────────────────────────────────────────────


def cross_count(g: Graph, layering: list[list[Hashable]]) -> float:
    """Weighted number of edge crossings between consecutive layers."""
    count = 0.0
    for north, south in zip(layering, layering[1:]):
        south_pos = {v: i for i, v in enumerate(south)}
        south_entries: list[tuple[int, float]] = []
        for v in north:
            entries = [(south_pos[e.w], g.edge(e).weight) for e in g.out_edges(v) if e.w in south_pos]
            south_entries.extend(sorted(entries, key=lambda entry: entry[0]))

        # Accumulator tree over south positions.
        first_index = 1
        while first_index < len(south):
            first_index <<= 1
        tree_size = 2 * first_index - 1
        first_index -= 1
        tree = [0.0] * tree_size

        for pos, weight in south_entries:
            index = pos + first_index
            tree[index] += weight
            weight_sum = 0.0
            while index > 0:
                if index % 2:
                    weight_sum += tree[index + 1]
                index = (index - 1) >> 1
                tree[index] += weight
            count += weight * weight_sum
    return count
