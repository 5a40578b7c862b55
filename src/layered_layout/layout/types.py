"""Label records attached to nodes, edges and the graph while a layout runs.

Every pipeline stage reads and writes fields on these records in place. Fields
start out as ``None`` (or empty) and are filled in by the stage that owns them,
e.g. ``rank`` by the ranker, ``order`` by the orderer, ``x``/``y`` by the
positioner.
"""

from __future__ import annotations

import itertools
from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from layered_layout.config import LayoutConfig
from layered_layout.types import Align, LabelPos, Ranker, RankDir


class DummyKind(Enum):
    """Why a synthetic node exists."""

    EDGE = "edge"
    EDGE_LABEL = "edge-label"
    BORDER = "border"
    ROOT = "root"
    EDGE_PROXY = "edge-proxy"
    SELF_EDGE = "selfedge"


class BorderType(Enum):
    LEFT = "borderLeft"
    RIGHT = "borderRight"


@dataclass
class Point:
    """A route vertex in layout coordinates."""

    x: float
    y: float


@dataclass
class SelfEdge:
    """A self-loop parked on its node between cycle breaking and ordering."""

    edge: Any  # ir.graph.Edge
    label: EdgeLabel


@dataclass
class NodeLabel:
    width: float = 0.0
    height: float = 0.0
    rank: float | None = None
    order: int | None = None
    x: float | None = None
    y: float | None = None
    dummy: DummyKind | None = None

    # Clusters
    border_top: Hashable | None = None
    border_bottom: Hashable | None = None
    border_left: dict[int, Hashable] | None = None
    border_right: dict[int, Hashable] | None = None
    min_rank: int | None = None
    max_rank: int | None = None

    # Border segment dummies
    border_type: BorderType | None = None

    # Edge dummies, label proxies and self-edge placeholders
    edge_label: EdgeLabel | None = None
    edge_obj: Any = None
    label_pos: LabelPos | None = None

    self_edges: list[SelfEdge] = field(default_factory=list)


@dataclass
class EdgeLabel:
    minlen: int = 1
    weight: float = 1.0
    width: float = 0.0
    height: float = 0.0
    label_offset: float = 10.0
    label_pos: LabelPos = LabelPos.RIGHT
    points: list[Point] = field(default_factory=list)
    x: float | None = None
    y: float | None = None
    label_rank: float | None = None
    reversed: bool = False
    forward_name: Hashable | None = None
    nesting_edge: bool = False


class UniqueIds:
    """Monotonic id source owned by a single layout call."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}{next(self._counter)}"


@dataclass
class GraphLabel:
    """Resolved options plus the state stages hand to one another."""

    rankdir: RankDir = RankDir.TB
    ranksep: float = 50.0
    nodesep: float = 50.0
    edgesep: float = 20.0
    marginx: float = 0.0
    marginy: float = 0.0
    align: Align | None = None
    ranker: Ranker = Ranker.NETWORK_SIMPLEX

    nesting_root: Hashable | None = None
    node_rank_factor: int = 1
    max_rank: int = 0
    dummy_chains: list[Hashable] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    ids: UniqueIds = field(default_factory=UniqueIds, repr=False)

    @classmethod
    def from_config(cls, config: LayoutConfig) -> GraphLabel:
        return cls(
            rankdir=config.rankdir,
            ranksep=config.ranksep,
            nodesep=config.nodesep,
            edgesep=config.edgesep,
            marginx=config.marginx,
            marginy=config.marginy,
            align=config.align,
            ranker=config.ranker,
        )
