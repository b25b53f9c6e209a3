"""Graph IR: converts the extractor's JSON payload into a networkx DiGraph.

This module owns the canonical graph data structure used by every layout
phase. Ingestion sizes each entity, drops entities the diagram never draws,
and drops relationships whose endpoints are missing. Everything else is kept
in input order so the renderer can rely on a stable edge list.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

import networkx as nx

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.types import CALLABLE_TYPES, DECLARATION_TYPES, EntityKind, RelationKind

logger = logging.getLogger(__name__)


@dataclass
class Entity:
    id: str
    kind: EntityKind
    file: str
    label: str
    width: float
    height: float
    code: str = ""
    line: int | None = None
    end_line: int | None = None
    raw_type: str = ""
    used_by: list[str] = field(default_factory=list)

    @property
    def is_callable(self) -> bool:
        return self.kind is EntityKind.Callable

    @property
    def is_declaration(self) -> bool:
        return self.kind is EntityKind.Declaration


@dataclass
class Relationship:
    source: str
    target: str
    kind: str
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_use(self) -> bool:
        return self.kind == RelationKind.Uses.value


def callable_height(code: str, line: int | None, end_line: int | None, config: LayoutConfig) -> float:
    """Height of a callable box: grows with the body, clamped to [floor, default]."""
    if code:
        line_count = code.count("\n") + 1
    elif line is not None and end_line is not None and end_line >= line:
        line_count = end_line - line + 1
    else:
        return config.callable_height
    height = config.callable_header_height + line_count * config.callable_line_height
    return min(max(height, config.callable_min_height), config.callable_height)


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def _finite_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def entity_from_dict(raw: dict[str, Any], config: LayoutConfig) -> Entity | None:
    """Build an Entity from one node payload. Returns None for undrawn kinds."""
    if not isinstance(raw, dict) or "id" not in raw:
        raise ValueError(f"entity payload must be a mapping with an 'id': {raw!r}")

    raw_type = str(raw.get("type") or raw.get("kind") or "").lower()
    entity_id = str(raw["id"])
    file = str(raw.get("file") or "")
    label = str(raw.get("label") or entity_id)
    code = str(raw.get("code") or "")
    line = _optional_int(raw.get("line"))
    end_line = _optional_int(raw.get("endLine", raw.get("end_line")))

    if raw_type in CALLABLE_TYPES or raw_type == EntityKind.Callable.value:
        height = callable_height(code, line, end_line, config)
        explicit = _finite_float(raw.get("height"))
        if explicit is not None:
            height = max(explicit, config.callable_min_height)
        return Entity(
            id=entity_id,
            kind=EntityKind.Callable,
            file=file,
            label=label,
            width=config.callable_width,
            height=height,
            code=code,
            line=line,
            end_line=end_line,
            raw_type=raw_type,
        )

    if raw_type in DECLARATION_TYPES or raw_type == EntityKind.Declaration.value:
        used_by = [str(u) for u in raw.get("usedBy", raw.get("used_by")) or []]
        return Entity(
            id=entity_id,
            kind=EntityKind.Declaration,
            file=file,
            label=label,
            width=config.declaration_width,
            height=config.declaration_height,
            code=code,
            line=line,
            end_line=end_line,
            raw_type=raw_type,
            used_by=used_by,
        )

    logger.debug("skipping entity %s with undrawn type %r", entity_id, raw_type)
    return None


def relationship_from_dict(raw: dict[str, Any]) -> Relationship | None:
    if not isinstance(raw, dict) or "source" not in raw or "target" not in raw:
        return None
    extra = {k: v for k, v in raw.items() if k not in ("source", "target", "type", "kind")}
    kind = str(raw.get("type") or raw.get("kind") or RelationKind.Calls.value)
    return Relationship(source=str(raw["source"]), target=str(raw["target"]), kind=kind, extra=extra)


class GraphIR:
    """Validated call graph: ordered entities, ordered relationships, topology.

    Wraps a networkx DiGraph (node attribute ``data`` holds the Entity) and
    keeps the input relationship list, including parallel edges, for
    pass-through to the renderer.
    """

    def __init__(self, entities: list[Entity], relationships: list[Relationship]) -> None:
        self.digraph: nx.DiGraph = nx.DiGraph()
        self.entities: list[Entity] = []
        for entity in entities:
            if entity.id in self.digraph:
                continue
            self.digraph.add_node(entity.id, data=entity)
            self.entities.append(entity)

        self.relationships: list[Relationship] = []
        for rel in relationships:
            if rel.source not in self.digraph or rel.target not in self.digraph:
                logger.debug("dropping edge %s -> %s: unknown endpoint", rel.source, rel.target)
                continue
            self.relationships.append(rel)
            if not self.digraph.has_edge(rel.source, rel.target):
                self.digraph.add_edge(rel.source, rel.target, data=rel)

    @classmethod
    def from_dict(cls, payload: dict[str, Any], config: LayoutConfig | None = None) -> GraphIR:
        """Build a GraphIR from ``{"nodes": [...], "edges": [...]}``."""
        if not isinstance(payload, dict):
            raise ValueError("graph payload must be a JSON object")
        config = config or LayoutConfig()
        entities: list[Entity] = []
        for raw in payload.get("nodes") or []:
            entity = entity_from_dict(raw, config)
            if entity is not None:
                entities.append(entity)
        relationships: list[Relationship] = []
        for raw in payload.get("edges") or []:
            rel = relationship_from_dict(raw)
            if rel is None:
                logger.debug("dropping malformed edge payload %r", raw)
                continue
            relationships.append(rel)
        return cls(entities, relationships)

    def callables(self) -> list[Entity]:
        return [e for e in self.entities if e.is_callable]

    def declarations(self) -> list[Entity]:
        return [e for e in self.entities if e.is_declaration]

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

    def edge_count(self) -> int:
        return len(self.relationships)

    def is_empty(self) -> bool:
        return not self.entities
