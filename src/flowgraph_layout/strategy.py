"""Layout strategy parsing.

A strategy is produced by an external collaborator (framework detection) and
consumed here as opaque configuration. Parsing is total: every unknown or
missing value falls back to a default instead of failing the layout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any

from flowgraph_layout.types import Algorithm, Direction

logger = logging.getLogger(__name__)

DEFAULT_RANKSEP: float = 150.0
DEFAULT_NODESEP: float = 100.0
MIN_SPACING: float = 20.0

_ALGORITHM_MAP: dict[str, Algorithm] = {
    "layered": Algorithm.Layered,
    "dagre": Algorithm.Layered,
    "constraint-layered": Algorithm.ConstraintLayered,
    "elk-layered": Algorithm.ConstraintLayered,
    "elk-box": Algorithm.ConstraintLayered,
    "force-directed": Algorithm.ForceDirected,
    "force": Algorithm.ForceDirected,
    "elk-force": Algorithm.ForceDirected,
    "d3-force": Algorithm.ForceDirected,
}

_DIRECTION_MAP: dict[str, Direction] = {
    "TB": Direction.TB,
    "TD": Direction.TB,
    "DOWN": Direction.TB,
    "BT": Direction.BT,
    "UP": Direction.BT,
    "LR": Direction.LR,
    "RIGHT": Direction.LR,
    "RL": Direction.RL,
    "LEFT": Direction.RL,
}


def parse_algorithm(value: Any) -> Algorithm:
    if isinstance(value, Algorithm):
        return value
    if isinstance(value, str):
        found = _ALGORITHM_MAP.get(value.strip().lower())
        if found is not None:
            return found
    if value is not None:
        logger.debug("unknown layout algorithm %r, using layered", value)
    return Algorithm.default()


def parse_direction(value: Any) -> Direction:
    if isinstance(value, Direction):
        return value
    if isinstance(value, str):
        found = _DIRECTION_MAP.get(value.strip().upper())
        if found is not None:
            return found
    if value is not None:
        logger.debug("unknown layout direction %r, using TB", value)
    return Direction.default()


def _spacing(value: Any, default: float) -> float:
    """Coerce a spacing value to a finite float no smaller than MIN_SPACING."""
    if value is None:
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(number, MIN_SPACING)


@dataclass(frozen=True)
class LayoutStrategy:
    """Algorithm choice, direction and spacing for one layout request."""

    algorithm: Algorithm = field(default_factory=Algorithm.default)
    direction: Direction = field(default_factory=Direction.default)
    ranksep: float = DEFAULT_RANKSEP
    nodesep: float = DEFAULT_NODESEP
    edge_type: str = "default"
    description: str = "Default Layout"

    @classmethod
    def default(cls) -> LayoutStrategy:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> LayoutStrategy:
        """Build a strategy from the host's JSON shape, filling every gap."""
        if not data:
            return cls.default()
        return cls(
            algorithm=parse_algorithm(data.get("algorithm")),
            direction=parse_direction(data.get("direction")),
            ranksep=_spacing(data.get("ranksep"), DEFAULT_RANKSEP),
            nodesep=_spacing(data.get("nodesep"), DEFAULT_NODESEP),
            edge_type=str(data.get("edgeType") or data.get("edge_type") or "default"),
            description=str(data.get("description") or "Default Layout"),
        )

    def normalized(self) -> LayoutStrategy:
        """Return a copy whose spacing values respect MIN_SPACING."""
        return replace(
            self,
            ranksep=_spacing(self.ranksep, DEFAULT_RANKSEP),
            nodesep=_spacing(self.nodesep, DEFAULT_NODESEP),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm.value,
            "direction": self.direction.value,
            "ranksep": self.ranksep,
            "nodesep": self.nodesep,
            "edgeType": self.edge_type,
            "description": self.description,
        }
