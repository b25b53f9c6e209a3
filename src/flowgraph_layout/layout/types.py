"""Layout types shared across layout engines and the output layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from flowgraph_layout.types import Direction, EntityKind


@dataclass
class Point:
    """A 2D point in canvas pixels (top-left origin)."""

    x: float
    y: float


@dataclass
class NodeBox:
    """Input to a layout algorithm: an id and the box it occupies."""

    id: str
    width: float
    height: float


@dataclass
class LayoutNode:
    """A positioned entity in the final layout."""

    id: str
    kind: EntityKind
    file: str
    group: str
    x: float
    y: float
    width: float
    height: float
    label: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "file": self.file,
            "group": self.group,
            "label": self.label,
            "position": {"x": self.x, "y": self.y},
            "dimensions": {"width": self.width, "height": self.height},
        }


@dataclass
class LayoutEdge:
    """A relationship passed through the layout, annotated for rendering."""

    source: str
    target: str
    kind: str
    edge_type: str
    cross_group: bool
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out = dict(self.extra)
        out["source"] = self.source
        out["target"] = self.target
        out["type"] = self.kind
        out["edgeType"] = self.edge_type
        out["crossGroup"] = self.cross_group
        return out


@dataclass
class GroupContainer:
    """The visual box drawn around one file's entities."""

    file_name: str
    x: float
    y: float
    width: float
    height: float
    member_ids: list[str] = field(default_factory=list)
    callable_count: int = 0
    declaration_count: int = 0

    @property
    def id(self) -> str:
        return f"{CONTAINER_PREFIX}{self.file_name}"

    @property
    def entity_count(self) -> int:
        return len(self.member_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "fileName": self.file_name,
            "entityCount": self.entity_count,
            "callableCount": self.callable_count,
            "declarationCount": self.declaration_count,
            "position": {"x": self.x, "y": self.y},
            "width": self.width,
            "height": self.height,
        }


@dataclass
class LayoutResult:
    """Self-contained layout output: everything the renderer needs."""

    nodes: list[LayoutNode]
    edges: list[LayoutEdge]
    containers: list[GroupContainer]
    direction: Direction = field(default_factory=Direction.default)

    @classmethod
    def empty(cls, direction: Direction | None = None) -> LayoutResult:
        return cls(nodes=[], edges=[], containers=[], direction=direction or Direction.default())

    def node(self, node_id: str) -> LayoutNode | None:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.direction.value,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "containers": [c.to_dict() for c in self.containers],
        }


# Prefix constants
DUMMY_PREFIX = "__dummy_"
CONTAINER_PREFIX = "container-"
