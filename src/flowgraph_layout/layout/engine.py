"""Hierarchical layout engine: algorithm registry and the two-level pipeline.

  1. Group entities by file
  2. Lay out each group's callables (concurrently)
  3. Bound each group
  4. Lay out groups as super-nodes over the collapsed cross-group edges
  5. Translate local coordinates into the global frame
  6. Place declarations beside their callers
  7. Build file containers and repair their spacing
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import GraphIR
from flowgraph_layout.layout.base import LayoutAlgorithm, Positions
from flowgraph_layout.layout.constraint import ConstraintLayeredLayout
from flowgraph_layout.layout.containers import build_containers, repair_spacing
from flowgraph_layout.layout.declarations import DeclarationPlacer
from flowgraph_layout.layout.force import ForceDirectedLayout
from flowgraph_layout.layout.geometry import Rect, bounding_rect, finite_coord, sanitize_positions
from flowgraph_layout.layout.grouping import (
    FileGroup,
    anchor_callables,
    cross_group_edges,
    group_by_file,
    group_index,
    super_edges,
)
from flowgraph_layout.layout.sugiyama import SugiyamaLayout
from flowgraph_layout.layout.types import GroupContainer, LayoutEdge, LayoutNode, LayoutResult, NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy
from flowgraph_layout.types import Algorithm

logger = logging.getLogger(__name__)

SUPER_LAYOUT_KEY = "__groups__"

_ENGINES: dict[Algorithm, Callable[[LayoutConfig, str], LayoutAlgorithm]] = {
    Algorithm.Layered: lambda config, key: SugiyamaLayout(),
    Algorithm.ConstraintLayered: lambda config, key: ConstraintLayeredLayout(config),
    Algorithm.ForceDirected: lambda config, key: ForceDirectedLayout(config, key=key),
}


def get_algorithm(algorithm: Algorithm, config: LayoutConfig | None = None, key: str = "") -> LayoutAlgorithm:
    """Instantiate the engine for ``algorithm``; unknown values get the layered engine."""
    factory = _ENGINES.get(algorithm)
    if factory is None:
        logger.debug("no engine registered for %r, using layered", algorithm)
        factory = _ENGINES[Algorithm.Layered]
    return factory(config or LayoutConfig(), key)


async def run_algorithm(
    algorithm: LayoutAlgorithm,
    nodes: list[NodeBox],
    edges: list[tuple[str, str]],
    strategy: LayoutStrategy,
) -> Positions:
    """Run an engine, awaiting it if it is asynchronous, and sanitize the output."""
    result = algorithm.layout(nodes, edges, strategy)
    if inspect.isawaitable(result):
        result = await result
    positions = sanitize_positions(result)
    for box in nodes:
        if box.id not in positions:
            logger.debug("engine returned no position for %s, using origin", box.id)
            positions[box.id] = Point(x=0.0, y=0.0)
    return positions


async def layout_group(group: FileGroup, strategy: LayoutStrategy, config: LayoutConfig) -> Positions:
    """Local (origin-agnostic) positions for one group's callables."""
    boxes = [NodeBox(id=e.id, width=e.width, height=e.height) for e in group.callables]
    algorithm = get_algorithm(strategy.algorithm, config, key=group.file_name)
    return await run_algorithm(algorithm, boxes, group.callable_edges(), strategy)


def group_bounds(group: FileGroup, positions: Positions) -> Rect:
    """Min/max box over a group's positioned callables."""
    rects = [Rect(positions[e.id].x, positions[e.id].y, e.width, e.height) for e in group.callables]
    bounds = bounding_rect(rects)
    return bounds if bounds is not None else Rect(0.0, 0.0, 0.0, 0.0)


async def layout_super_nodes(
    groups: list[FileGroup],
    bounds: dict[str, Rect],
    edges: list[tuple[str, str]],
    strategy: LayoutStrategy,
    config: LayoutConfig,
) -> Positions:
    """Position each group as one super-node sized to its padded bounds."""
    pad = config.group_padding
    boxes = [
        NodeBox(id=g.file_name, width=bounds[g.file_name].width + 2 * pad, height=bounds[g.file_name].height + 2 * pad)
        for g in groups
    ]
    algorithm = get_algorithm(strategy.algorithm, config, key=SUPER_LAYOUT_KEY)
    return await run_algorithm(algorithm, boxes, edges, strategy)


def translate(local: Point, bounds: Rect, origin: Point, padding: float) -> Point:
    """global = local - group min + super-node position + padding."""
    return Point(x=local.x - bounds.x + origin.x + padding, y=local.y - bounds.y + origin.y + padding)


class HierarchicalLayout:
    """Two-level (per-file, then across files) layout of a call graph."""

    def __init__(self, strategy: LayoutStrategy | None = None, config: LayoutConfig | None = None) -> None:
        self.strategy = (strategy or LayoutStrategy.default()).normalized()
        self.config = config or LayoutConfig()

    async def layout(self, gir: GraphIR) -> LayoutResult:
        strategy = self.strategy
        config = self.config
        if gir.is_empty():
            return LayoutResult.empty(strategy.direction)

        groups = group_by_file(gir)
        owner = group_index(groups)
        cross = cross_group_edges(gir, groups)
        placed_groups = [g for g in groups if g.callables]
        logger.debug(
            "laying out %d entities and %d relationships in %d file groups (%d cross-group edges)",
            gir.node_count(),
            gir.edge_count(),
            len(groups),
            len(cross),
        )

        local_results = await asyncio.gather(*(layout_group(g, strategy, config) for g in placed_groups))
        local: dict[str, Positions] = {g.file_name: pos for g, pos in zip(placed_groups, local_results)}
        bounds = {g.file_name: group_bounds(g, local[g.file_name]) for g in placed_groups}

        placed_names = {g.file_name for g in placed_groups}
        group_edges = [(a, b) for a, b in super_edges(cross, groups) if a in placed_names and b in placed_names]
        origins = await layout_super_nodes(placed_groups, bounds, group_edges, strategy, config)

        positions: dict[str, Point] = {}
        callable_rects: dict[str, Rect] = {}
        for group in placed_groups:
            for entity in group.callables:
                p = translate(
                    local[group.file_name][entity.id],
                    bounds[group.file_name],
                    origins[group.file_name],
                    config.group_padding,
                )
                positions[entity.id] = p
                callable_rects[entity.id] = Rect(p.x, p.y, entity.width, entity.height)

        placer = DeclarationPlacer(strategy.direction, config)
        positions.update(placer.place(gir.declarations(), anchor_callables(gir), callable_rects))

        nodes = [
            LayoutNode(
                id=e.id,
                kind=e.kind,
                file=e.file,
                group=owner[e.id],
                x=finite_coord(positions[e.id].x),
                y=finite_coord(positions[e.id].y),
                width=e.width,
                height=e.height,
                label=e.label,
            )
            for e in gir.entities
        ]

        containers = build_containers(nodes, config.group_padding)
        repair_spacing(containers, nodes, config.container_spacing)
        _shift_into_view(nodes, containers)

        edges = [
            LayoutEdge(
                source=rel.source,
                target=rel.target,
                kind=rel.kind,
                edge_type=strategy.edge_type,
                cross_group=owner[rel.source] != owner[rel.target],
                extra=dict(rel.extra),
            )
            for rel in gir.relationships
        ]
        return LayoutResult(nodes=nodes, edges=edges, containers=containers, direction=strategy.direction)


def _shift_into_view(nodes: list[LayoutNode], containers: list[GroupContainer]) -> None:
    """Translate everything so no container starts at a negative coordinate."""
    if not containers:
        return
    dx = max(0.0, -min(c.x for c in containers))
    dy = max(0.0, -min(c.y for c in containers))
    if dx == 0 and dy == 0:
        return
    for item in [*nodes, *containers]:
        item.x += dx
        item.y += dy
