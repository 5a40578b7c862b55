"""Centralized configuration for layered-layout."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from layered_layout.errors import ConfigurationError
from layered_layout.types import Align, Ranker, RankDir

_E = TypeVar("_E", bound=Enum)


@dataclass
class LayoutConfig:
    """Graph-level options recognised by the layout pipeline."""

    rankdir: RankDir = RankDir.TB
    ranksep: float = 50.0
    nodesep: float = 50.0
    edgesep: float = 20.0
    marginx: float = 0.0
    marginy: float = 0.0
    align: Align | None = None
    ranker: Ranker = Ranker.NETWORK_SIMPLEX

    @classmethod
    def from_mapping(cls, attrs: Mapping[str, Any] | None) -> LayoutConfig:
        """Build a config from a graph label mapping, falling back to defaults.

        Raises:
            ConfigurationError: If rankdir, align or ranker is not recognised.
        """
        if isinstance(attrs, LayoutConfig):
            return attrs
        attrs = attrs or {}
        defaults = cls()

        def number(key: str, default: float) -> float:
            value = attrs.get(key)
            return default if value is None else float(value)

        return cls(
            rankdir=parse_enum(RankDir, attrs.get("rankdir"), "rankdir", defaults.rankdir),
            ranksep=number("ranksep", defaults.ranksep),
            nodesep=number("nodesep", defaults.nodesep),
            edgesep=number("edgesep", defaults.edgesep),
            marginx=number("marginx", defaults.marginx),
            marginy=number("marginy", defaults.marginy),
            align=parse_enum(Align, attrs.get("align"), "align", None),
            ranker=parse_enum(Ranker, attrs.get("ranker"), "ranker", defaults.ranker),
        )


def parse_enum(enum_cls: type[_E], value: Any, option: str, default: _E | None) -> _E | None:
    """Parse a case-insensitive option value; empty values give ``default``."""
    if value is None or value == "":
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        accepted = ", ".join(
            member.value.upper() if option in ("rankdir", "align") else member.value for member in enum_cls
        )
        raise ConfigurationError(f"Unknown {option} '{value}'; use {accepted}") from None
