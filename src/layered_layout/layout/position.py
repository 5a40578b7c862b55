"""Coordinate assignment.

``y`` comes from stacking ranks, each as tall as its tallest node, separated
by ``ranksep``. ``x`` follows Brandes and Köpf, "Fast and Simple Horizontal
Coordinate Assignment": four alignments (up/down x left/right) are built by
aligning nodes with their median neighbours into vertical blocks, each block
is compacted horizontally, and the four results are aligned to the narrowest
one and balanced.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Hashable

from layered_layout.ir.graph import Graph
from layered_layout.layout.types import BorderType, DummyKind, LabelPos
from layered_layout.layout.util import as_non_compound_graph, build_layer_matrix
from layered_layout.types import Align

Layering = list[list[Hashable]]
Conflicts = set[frozenset]
Alignments = dict[str, dict[Hashable, float]]


def position(g: Graph) -> None:
    g = as_non_compound_graph(g)
    position_y(g)
    for v, x in position_x(g).items():
        g.node(v).x = x


def position_y(g: Graph) -> None:
    rank_sep = g.graph().ranksep
    prev_y = 0.0
    for layer in build_layer_matrix(g):
        max_height = max((g.node(v).height for v in layer), default=0)
        for v in layer:
            g.node(v).y = prev_y + max_height / 2
        prev_y += max_height + rank_sep


def position_x(g: Graph) -> dict[Hashable, float]:
    layering = build_layer_matrix(g)
    conflicts = find_type1_conflicts(g, layering) | find_type2_conflicts(g, layering)

    xss: Alignments = {}
    for vert in ("u", "d"):
        adjusted = layering if vert == "u" else layering[::-1]
        for horiz in ("l", "r"):
            if horiz == "r":
                adjusted = [layer[::-1] for layer in adjusted]
            neighbor_fn = g.predecessors if vert == "u" else g.successors
            root, align = vertical_alignment(g, adjusted, conflicts, neighbor_fn)
            xs = horizontal_compaction(g, adjusted, root, align, horiz == "r")
            if horiz == "r":
                xs = {v: -x for v, x in xs.items()}
            xss[vert + horiz] = xs

    smallest = find_smallest_width_alignment(g, xss)
    align_coordinates(xss, smallest)
    return balance(xss, g.graph().align)


# ─── Conflicts ───────────────────────────────────────────────────────────────


def add_conflict(conflicts: Conflicts, v: Hashable, w: Hashable) -> None:
    conflicts.add(frozenset((v, w)))


def has_conflict(conflicts: Conflicts, v: Hashable, w: Hashable) -> bool:
    return frozenset((v, w)) in conflicts


def find_type1_conflicts(g: Graph, layering: Layering) -> Conflicts:
    """Non-inner segments that cross an inner (dummy-to-dummy) segment.

    Scans each layer left to right; at every node on an inner segment, and at
    the last node, it checks the segments of the nodes scanned since the
    previous stop against the span bounded by the two inner segments.
    """
    conflicts: Conflicts = set()
    for prev, layer in zip(layering, layering[1:]):
        # Order of the upper end of the last inner segment seen.
        k0 = 0
        scan_pos = 0
        prev_layer_length = len(prev)
        last_node = layer[-1] if layer else None
        for i, v in enumerate(layer):
            w = _inner_predecessor(g, v)
            if w is None and v != last_node:
                continue
            k1 = g.node(w).order if w is not None else prev_layer_length
            for scan_node in layer[scan_pos : i + 1]:
                scan_is_dummy = g.node(scan_node).dummy is not None
                for u in g.predecessors(scan_node):
                    u_label = g.node(u)
                    u_pos = u_label.order
                    if (u_pos < k0 or k1 < u_pos) and not (u_label.dummy is not None and scan_is_dummy):
                        add_conflict(conflicts, u, scan_node)
            scan_pos = i + 1
            k0 = k1
    return conflicts


def find_type2_conflicts(g: Graph, layering: Layering) -> Conflicts:
    """Inner segments that cross each other between cluster borders."""
    conflicts: Conflicts = set()

    def scan(south: list, south_pos: int, south_end: int, prev_north_border, next_north_border) -> None:
        for v in south[south_pos:south_end]:
            if g.node(v).dummy is None:
                continue
            for u in g.predecessors(v):
                u_node = g.node(u)
                if u_node.dummy is None:
                    continue
                before = prev_north_border is not None and u_node.order < prev_north_border
                after = next_north_border is not None and u_node.order > next_north_border
                if before or after:
                    add_conflict(conflicts, u, v)

    for north, south in zip(layering, layering[1:]):
        prev_north_pos = -1
        next_north_pos = None
        south_pos = 0
        for south_lookahead, v in enumerate(south):
            if g.node(v).dummy is DummyKind.BORDER:
                predecessors = g.predecessors(v)
                if predecessors:
                    next_north_pos = g.node(predecessors[0]).order
                    scan(south, south_pos, south_lookahead, prev_north_pos, next_north_pos)
                    south_pos = south_lookahead
                    prev_north_pos = next_north_pos
            scan(south, south_pos, len(south), next_north_pos, len(north))
    return conflicts


def _inner_predecessor(g: Graph, v: Hashable) -> Hashable | None:
    if g.node(v).dummy is None:
        return None
    return next((u for u in g.predecessors(v) if g.node(u).dummy is not None), None)


# ─── Alignment and compaction ────────────────────────────────────────────────


def vertical_alignment(
    g: Graph,
    layering: Layering,
    conflicts: Conflicts,
    neighbor_fn: Callable[[Hashable], list[Hashable]],
) -> tuple[dict[Hashable, Hashable], dict[Hashable, Hashable]]:
    """Group nodes into blocks by aligning each with a median neighbour.

    A candidate is skipped when the segment is in conflict, or when an
    earlier node of the layer already aligned with a neighbour further right.

    Returns:
        ``(root, align)``: each node's block root, and the next node in its
        block (cyclic).
    """
    root: dict[Hashable, Hashable] = {}
    align: dict[Hashable, Hashable] = {}
    # Positions come from the layering, which may be a mirrored copy of the graph's order.
    pos: dict[Hashable, int] = {}
    for layer in layering:
        for order, v in enumerate(layer):
            root[v] = v
            align[v] = v
            pos[v] = order

    for layer in layering:
        prev_idx = -1
        for v in layer:
            ws = neighbor_fn(v)
            if not ws:
                continue
            ws = sorted(ws, key=pos.__getitem__)
            mp = (len(ws) - 1) / 2
            for i in range(math.floor(mp), math.ceil(mp) + 1):
                w = ws[i]
                if align[v] == v and prev_idx < pos[w] and not has_conflict(conflicts, v, w):
                    align[w] = v
                    align[v] = root[v] = root[w]
                    prev_idx = pos[w]
    return root, align


def horizontal_compaction(
    g: Graph,
    layering: Layering,
    root: dict[Hashable, Hashable],
    align: dict[Hashable, Hashable],
    reverse_sep: bool,
) -> dict[Hashable, float]:
    """Place blocks as far left as separations allow, then pull them right into unused space."""
    xs: dict[Hashable, float] = {}
    block_g = build_block_graph(g, layering, root, reverse_sep)
    border_type = BorderType.LEFT if reverse_sep else BorderType.RIGHT

    def iterate(set_xs: Callable[[Hashable], None], next_nodes: Callable[[Hashable], list[Hashable]]) -> None:
        stack = block_g.nodes()
        visited: set[Hashable] = set()
        while stack:
            elem = stack.pop()
            if elem in visited:
                set_xs(elem)
            else:
                visited.add(elem)
                stack.append(elem)
                stack.extend(next_nodes(elem))

    def pass1(elem: Hashable) -> None:
        xs[elem] = max([0.0, *(xs[e.v] + block_g.edge(e) for e in block_g.in_edges(elem))])

    def pass2(elem: Hashable) -> None:
        lowest = min((xs[e.w] - block_g.edge(e) for e in block_g.out_edges(elem)), default=math.inf)
        if lowest != math.inf and g.node(elem).border_type is not border_type:
            xs[elem] = max(xs[elem], lowest)

    iterate(pass1, block_g.predecessors)
    iterate(pass2, block_g.successors)

    for v in align:
        xs[v] = xs[root[v]]
    return xs


def build_block_graph(
    g: Graph,
    layering: Layering,
    root: dict[Hashable, Hashable],
    reverse_sep: bool,
) -> Graph:
    """One node per block; each edge carries the minimum gap between two neighbouring blocks."""
    block_graph = Graph()
    graph_label = g.graph()
    for layer in layering:
        u = None
        for v in layer:
            v_root = root[v]
            block_graph.set_node(v_root)
            if u is not None:
                u_root = root[u]
                prev_max = block_graph.edge(u_root, v_root)
                gap = separation(g, v, u, graph_label.nodesep, graph_label.edgesep, reverse_sep)
                block_graph.set_edge(u_root, v_root, max(gap, prev_max or 0))
            u = v
    return block_graph


def separation(g: Graph, v: Hashable, w: Hashable, node_sep: float, edge_sep: float, reverse_sep: bool) -> float:
    """Distance required between the centres of horizontally adjacent ``v`` and ``w``."""
    v_label = g.node(v)
    w_label = g.node(w)

    total = v_label.width / 2
    delta = 0.0
    if v_label.label_pos is LabelPos.LEFT:
        delta = -v_label.width / 2
    elif v_label.label_pos is LabelPos.RIGHT:
        delta = v_label.width / 2
    total += delta if reverse_sep else -delta

    total += (edge_sep if v_label.dummy is not None else node_sep) / 2
    total += (edge_sep if w_label.dummy is not None else node_sep) / 2

    total += w_label.width / 2
    delta = 0.0
    if w_label.label_pos is LabelPos.LEFT:
        delta = w_label.width / 2
    elif w_label.label_pos is LabelPos.RIGHT:
        delta = -w_label.width / 2
    total += delta if reverse_sep else -delta
    return total


# ─── Combining the four alignments ───────────────────────────────────────────


def find_smallest_width_alignment(g: Graph, xss: Alignments) -> dict[Hashable, float]:
    best: dict[Hashable, float] = {}
    best_width = math.inf
    for xs in xss.values():
        max_x = -math.inf
        min_x = math.inf
        for v, x in xs.items():
            half_width = g.node(v).width / 2
            max_x = max(x + half_width, max_x)
            min_x = min(x - half_width, min_x)
        if max_x - min_x < best_width:
            best_width = max_x - min_x
            best = xs
    return best


def align_coordinates(xss: Alignments, align_to: dict[Hashable, float]) -> None:
    """Shift left-biased alignments to share ``align_to``'s minimum, right-biased its maximum."""
    align_to_min = min(align_to.values())
    align_to_max = max(align_to.values())
    for vert in ("u", "d"):
        for horiz in ("l", "r"):
            key = vert + horiz
            xs = xss[key]
            if xs is align_to:
                continue
            if horiz == "l":
                delta = align_to_min - min(xs.values())
            else:
                delta = align_to_max - max(xs.values())
            if delta:
                xss[key] = {v: x + delta for v, x in xs.items()}


def balance(xss: Alignments, align: Align | None) -> dict[Hashable, float]:
    """Use the requested alignment, or the mean of the two median candidates per node."""
    if align is not None:
        xs = xss[align.value]
        return {v: xs[v] for v in xss["ul"]}
    balanced = {}
    for v in xss["ul"]:
        candidates = sorted((xss["ul"][v], xss["ur"][v], xss["dl"][v], xss["dr"][v]))
        balanced[v] = (candidates[1] + candidates[2]) / 2
    return balanced
