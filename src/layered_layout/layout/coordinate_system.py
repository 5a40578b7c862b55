"""Rank direction transforms.

The pipeline always lays out top to bottom. For LR/RL, ``adjust`` swaps node
and edge sizes first so ranks are spaced by widths; ``undo`` then mirrors
BT/RL vertically and swaps the axes back for LR/RL.
"""

from __future__ import annotations

from layered_layout.ir.graph import Graph
from layered_layout.types import RankDir


def adjust(g: Graph) -> None:
    if g.graph().rankdir.is_horizontal:
        _swap_width_height(g)


def undo(g: Graph) -> None:
    rankdir = g.graph().rankdir
    if rankdir in (RankDir.BT, RankDir.RL):
        _reverse_y(g)
    if rankdir.is_horizontal:
        _swap_xy(g)
        _swap_width_height(g)


def _reverse_y(g: Graph) -> None:
    for v in g.nodes():
        node = g.node(v)
        node.y = -node.y
    for e in g.edges():
        edge = g.edge(e)
        for point in edge.points:
            point.y = -point.y
        if edge.y is not None:
            edge.y = -edge.y


def _swap_xy(g: Graph) -> None:
    for v in g.nodes():
        node = g.node(v)
        node.x, node.y = node.y, node.x
    for e in g.edges():
        edge = g.edge(e)
        for point in edge.points:
            point.x, point.y = point.y, point.x
        if edge.x is not None:
            edge.x, edge.y = edge.y, edge.x


def _swap_width_height(g: Graph) -> None:
    for v in g.nodes():
        node = g.node(v)
        node.width, node.height = node.height, node.width
    for e in g.edges():
        edge = g.edge(e)
        edge.width, edge.height = edge.height, edge.width
