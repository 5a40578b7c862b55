"""Shared enums for layout options.

Each enum parses the case-insensitive spelling accepted on input graphs.
"""

from __future__ import annotations

from enum import Enum


class RankDir(Enum):
    TB = "tb"  # top to bottom
    BT = "bt"  # bottom to top
    LR = "lr"  # left to right
    RL = "rl"  # right to left

    @classmethod
    def default(cls) -> RankDir:
        return cls.TB

    @property
    def is_horizontal(self) -> bool:
        return self in (RankDir.LR, RankDir.RL)


class Ranker(Enum):
    NETWORK_SIMPLEX = "network-simplex"
    TIGHT_TREE = "tight-tree"
    LONGEST_PATH = "longest-path"

    @classmethod
    def default(cls) -> Ranker:
        return cls.NETWORK_SIMPLEX


class Align(Enum):
    UL = "ul"
    UR = "ur"
    DL = "dl"
    DR = "dr"


class LabelPos(Enum):
    LEFT = "l"
    CENTER = "c"
    RIGHT = "r"

    @classmethod
    def default(cls) -> LabelPos:
        return cls.RIGHT
