"""flowgraph-layout: hierarchical multi-strategy layout for call-graph diagrams."""

from __future__ import annotations

import asyncio
from typing import Any

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import GraphIR
from flowgraph_layout.layout.engine import HierarchicalLayout
from flowgraph_layout.layout.types import LayoutResult
from flowgraph_layout.strategy import LayoutStrategy


def _coerce_strategy(strategy: LayoutStrategy | dict[str, Any] | None) -> LayoutStrategy:
    if isinstance(strategy, LayoutStrategy):
        return strategy
    return LayoutStrategy.from_dict(strategy)


async def layout_graph_async(
    graph: GraphIR | dict[str, Any],
    strategy: LayoutStrategy | dict[str, Any] | None = None,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Lay out a call graph.

    Args:
        graph: A GraphIR, or the extractor's ``{"nodes": [...], "edges": [...]}`` payload.
        strategy: A LayoutStrategy, the host's strategy mapping, or None for the default.
        config: Geometry/tuning overrides; None uses LayoutConfig defaults.

    Returns:
        The positioned nodes, annotated edges and file containers. An empty
        graph yields an empty result.

    Raises:
        ValueError: If the graph payload is structurally invalid.
    """
    config = config or LayoutConfig()
    gir = graph if isinstance(graph, GraphIR) else GraphIR.from_dict(graph, config)
    engine = HierarchicalLayout(_coerce_strategy(strategy), config)
    return await engine.layout(gir)


def layout_graph(
    graph: GraphIR | dict[str, Any],
    strategy: LayoutStrategy | dict[str, Any] | None = None,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Synchronous wrapper around :func:`layout_graph_async`."""
    return asyncio.run(layout_graph_async(graph, strategy, config))


__all__ = [
    "GraphIR",
    "LayoutConfig",
    "LayoutResult",
    "LayoutStrategy",
    "layout_graph",
    "layout_graph_async",
]
