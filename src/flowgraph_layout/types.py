"""Shared type definitions for flowgraph-layout.

Enums used across graph ingestion, strategy parsing, and the layout engines.
"""

from __future__ import annotations

from enum import Enum


class EntityKind(Enum):
    Callable = "callable"  # function / method
    Declaration = "declaration"  # type / struct / interface / enum / alias


class RelationKind(Enum):
    Calls = "calls"
    Uses = "uses"  # callable -> declaration reference
    Implements = "implements"
    Returns = "returns"
    Receives = "receives"


class Algorithm(Enum):
    Layered = "layered"
    ConstraintLayered = "constraint-layered"
    ForceDirected = "force-directed"

    @classmethod
    def default(cls) -> Algorithm:
        return cls.Layered


class Direction(Enum):
    TB = "TB"
    BT = "BT"
    LR = "LR"
    RL = "RL"

    @classmethod
    def default(cls) -> Direction:
        return cls.TB

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LR, Direction.RL)

    @property
    def is_reversed(self) -> bool:
        return self in (Direction.BT, Direction.RL)


# Raw node "type" values coming from the extractor.
CALLABLE_TYPES: frozenset[str] = frozenset({"function", "method", "constructor"})
DECLARATION_TYPES: frozenset[str] = frozenset({"class", "struct", "interface", "enum", "type", "alias"})
