"""Constraint-layered layout engine.

Shares ranking and ordering with the Sugiyama engine but solves the
across-rank coordinate iteratively: every pass pulls each node towards the
mean centre of its neighbours in adjacent ranks, then projects the layer back
onto its separation constraints

    pos[i + 1] >= pos[i] + size[i] + nodesep

The solver yields to the event loop between passes, so callers must await it.
"""

from __future__ import annotations

import asyncio
import logging

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.layout.geometry import normalize_positions
from flowgraph_layout.layout.sugiyama import (
    AugmentedGraph,
    across_extent,
    node_box,
    pack_layers,
    place_ranks,
    rank_and_order,
)
from flowgraph_layout.layout.types import NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy

logger = logging.getLogger(__name__)


def project_layer(layer_nodes: list[str], across: dict[str, float], sizes: dict[str, float], gap: float) -> None:
    """Enforce left-to-right separation inside one layer, in place.

    A forward sweep pushes overlapping nodes right; a backward sweep then
    pulls the layer back towards its desired centre without violating any
    constraint.
    """
    if not layer_nodes:
        return
    desired_center = sum(across[n] + sizes[n] / 2 for n in layer_nodes) / len(layer_nodes)

    for prev, cur in zip(layer_nodes, layer_nodes[1:]):
        minimum = across[prev] + sizes[prev] + gap
        if across[cur] < minimum:
            across[cur] = minimum

    actual_center = sum(across[n] + sizes[n] / 2 for n in layer_nodes) / len(layer_nodes)
    shift = desired_center - actual_center
    for n in layer_nodes:
        across[n] += shift


def _neighbour_target(node_id: str, aug: AugmentedGraph, across: dict[str, float], sizes: dict[str, float]) -> float | None:
    layer = aug.layers[node_id]
    centers: list[float] = []
    for nb in aug.graph.predecessors(node_id):
        if aug.layers[nb] == layer - 1:
            centers.append(across[nb] + sizes[nb] / 2)
    for nb in aug.graph.successors(node_id):
        if aug.layers[nb] == layer + 1:
            centers.append(across[nb] + sizes[nb] / 2)
    if not centers:
        return None
    return sum(centers) / len(centers) - sizes[node_id] / 2


async def solve_across(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    strategy: LayoutStrategy,
    config: LayoutConfig,
) -> dict[str, float]:
    sizes = {nid: across_extent(node_box(aug, nid), strategy) for layer in ordering for nid in layer}
    across = pack_layers(ordering, aug, strategy)

    for pass_idx in range(config.constraint_max_passes):
        movement = 0.0
        for layer_nodes in ordering:
            before = {n: across[n] for n in layer_nodes}
            for n in layer_nodes:
                target = _neighbour_target(n, aug, across, sizes)
                if target is not None:
                    across[n] = (across[n] + target) / 2
            project_layer(layer_nodes, across, sizes, strategy.nodesep)
            movement = max([movement] + [abs(across[n] - before[n]) for n in layer_nodes])
        await asyncio.sleep(0)
        if movement < config.constraint_tolerance:
            logger.debug("constraint solver converged after %d passes", pass_idx + 1)
            break

    return across


class ConstraintLayeredLayout:
    """Layered layout with an iterative, awaitable coordinate solver."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    async def layout(
        self, nodes: list[NodeBox], edges: list[tuple[str, str]], strategy: LayoutStrategy
    ) -> dict[str, Point]:
        if not nodes:
            return {}
        aug, ordering = rank_and_order(nodes, edges)
        across = await solve_across(ordering, aug, strategy, self.config)
        positions = normalize_positions(place_ranks(ordering, aug, across, strategy))
        return {box.id: positions[box.id] for box in nodes}
