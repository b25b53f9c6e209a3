"""Layout engine registry and public API."""

from __future__ import annotations

from flowgraph_layout.layout.constraint import ConstraintLayeredLayout
from flowgraph_layout.layout.containers import build_containers, repair_spacing
from flowgraph_layout.layout.declarations import DeclarationPlacer, find_free_slot, spiral_offsets
from flowgraph_layout.layout.engine import HierarchicalLayout, get_algorithm, layout_group
from flowgraph_layout.layout.force import ForceDirectedLayout
from flowgraph_layout.layout.grouping import FileGroup, cross_group_edges, group_by_file, super_edges
from flowgraph_layout.layout.occupancy import OccupancyIndex
from flowgraph_layout.layout.sugiyama import (
    AugmentedGraph,
    LayerAssignment,
    SugiyamaLayout,
    count_crossings,
    greedy_fas_ordering,
    insert_dummy_nodes,
    minimise_crossings,
    remove_cycles,
)
from flowgraph_layout.layout.types import (
    CONTAINER_PREFIX,
    DUMMY_PREFIX,
    GroupContainer,
    LayoutEdge,
    LayoutNode,
    LayoutResult,
    NodeBox,
    Point,
)

__all__ = [
    "CONTAINER_PREFIX",
    "DUMMY_PREFIX",
    "AugmentedGraph",
    "ConstraintLayeredLayout",
    "DeclarationPlacer",
    "FileGroup",
    "ForceDirectedLayout",
    "GroupContainer",
    "HierarchicalLayout",
    "LayerAssignment",
    "LayoutEdge",
    "LayoutNode",
    "LayoutResult",
    "NodeBox",
    "OccupancyIndex",
    "Point",
    "SugiyamaLayout",
    "build_containers",
    "count_crossings",
    "cross_group_edges",
    "find_free_slot",
    "get_algorithm",
    "greedy_fas_ordering",
    "group_by_file",
    "insert_dummy_nodes",
    "layout_group",
    "minimise_crossings",
    "remove_cycles",
    "repair_spacing",
    "spiral_offsets",
    "super_edges",
]
