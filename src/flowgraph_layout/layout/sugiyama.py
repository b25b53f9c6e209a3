"""Sugiyama-style layered graph layout engine.

Phases:
  1. Cycle removal (greedy-FAS)
  2. Layer assignment (longest path from sources)
  3. Dummy node insertion
  4. Crossing minimization (barycenter)
  5. Coordinate assignment (ranksep between ranks, nodesep within a rank)

Phases 1-4 are shared with the constraint-layered engine; only the
across-rank coordinate differs between the two.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

import networkx as nx

from flowgraph_layout.layout.geometry import normalize_positions
from flowgraph_layout.layout.types import DUMMY_PREFIX, NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy

# ─── Cycle Removal (Greedy-FAS) ─────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Compute a node ordering using the greedy-FAS heuristic.

    Active nodes are kept in insertion order so the result does not depend on
    string hashing.
    """
    active: dict[str, None] = dict.fromkeys(graph.nodes)
    out_deg: dict[str, int] = {}
    in_deg: dict[str, int] = {}
    for node in graph.nodes:
        out_deg[node] = graph.out_degree(node)
        in_deg[node] = graph.in_degree(node)

    s1: list[str] = []
    s2: list[str] = []

    while active:
        changed = True
        while changed:
            changed = False
            sinks = [n for n in active if out_deg[n] == 0]
            if sinks:
                changed = True
                for sink in sinks:
                    del active[sink]
                    s2.append(sink)
                    for pred in graph.predecessors(sink):
                        if pred in active:
                            out_deg[pred] -= 1

        changed = True
        while changed:
            changed = False
            sources = [n for n in active if in_deg[n] == 0]
            if sources:
                changed = True
                for source in sources:
                    del active[source]
                    s1.append(source)
                    for succ in graph.successors(source):
                        if succ in active:
                            in_deg[succ] -= 1

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            del active[best]
            s1.append(best)
            for succ in graph.successors(best):
                if succ in active:
                    in_deg[succ] -= 1
            for pred in graph.predecessors(best):
                if pred in active:
                    out_deg[pred] -= 1

    s2.reverse()
    s1.extend(s2)
    return s1


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Remove cycles using greedy-FAS. Returns (dag, reversed_edges)."""
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    ordering = greedy_fas_ordering(graph)
    position: dict[str, int] = {node: pos for pos, node in enumerate(ordering)}

    reversed_edges: set[tuple[str, str]] = set()
    for src, tgt in graph.edges():
        if src == tgt or position[src] > position[tgt]:
            reversed_edges.add((src, tgt))

    new_graph: nx.DiGraph = nx.DiGraph()
    for node_id in graph.nodes:
        new_graph.add_node(node_id, **graph.nodes[node_id])

    for src, tgt, edge_attrs in graph.edges(data=True):
        if src == tgt:
            continue
        if (src, tgt) in reversed_edges:
            new_graph.add_edge(tgt, src, **edge_attrs)
        else:
            new_graph.add_edge(src, tgt, **edge_attrs)

    return new_graph, reversed_edges


# ─── Layer Assignment ────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(self, layers: dict[str, int], layer_count: int, dag: nx.DiGraph) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.dag = dag

    @classmethod
    def assign(cls, graph: nx.DiGraph) -> LayerAssignment:
        """Longest path from sources over the cycle-free graph; isolated nodes get rank 0."""
        dag, _ = remove_cycles(graph)
        layers: dict[str, int] = {node_id: 0 for node_id in graph.nodes}

        for node_id in nx.topological_sort(dag):
            for succ in dag.successors(node_id):
                if layers[succ] < layers[node_id] + 1:
                    layers[succ] = layers[node_id] + 1

        layer_count = (max(layers.values()) + 1) if layers else 0
        return cls(layers=layers, layer_count=layer_count, dag=dag)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class AugmentedGraph:
    graph: nx.DiGraph
    layers: dict[str, int]
    layer_count: int


def insert_dummy_nodes(dag: nx.DiGraph, la: LayerAssignment) -> AugmentedGraph:
    """Insert zero-size dummy nodes for edges spanning multiple layers."""
    g: nx.DiGraph = nx.DiGraph()
    for node_id in dag.nodes:
        g.add_node(node_id, **dag.nodes[node_id])

    layers: dict[str, int] = copy.copy(la.layers)
    chain_count = 0

    for src_id, tgt_id in list(dag.edges()):
        src_layer = layers[src_id]
        tgt_layer = layers[tgt_id]
        layer_diff = tgt_layer - src_layer if tgt_layer > src_layer else 1

        if layer_diff <= 1:
            g.add_edge(src_id, tgt_id)
            continue

        chain_prev = src_id
        for i in range(layer_diff - 1):
            dummy_id = f"{DUMMY_PREFIX}{chain_count}_{i}"
            g.add_node(dummy_id, box=NodeBox(id=dummy_id, width=0.0, height=0.0))
            layers[dummy_id] = src_layer + i + 1
            g.add_edge(chain_prev, dummy_id)
            chain_prev = dummy_id
        g.add_edge(chain_prev, tgt_id)
        chain_count += 1

    layer_count = (max(layers.values()) + 1) if layers else 0
    return AugmentedGraph(graph=g, layers=layers, layer_count=layer_count)


# ─── Crossing Minimization ───────────────────────────────────────────────────


def minimise_crossings(aug: AugmentedGraph) -> list[list[str]]:
    """Minimise edge crossings using the barycenter heuristic.

    The initial order inside each layer follows graph insertion order, which
    is the caller's entity order for real nodes.
    """
    layer_count = aug.layer_count
    ordering: list[list[str]] = [[] for _ in range(layer_count)]
    for node_id in aug.graph.nodes:
        ordering[aug.layers[node_id]].append(node_id)

    max_passes = 24
    best = count_crossings(ordering, aug.graph)
    best_ordering = [list(layer) for layer in ordering]

    for _pass in range(max_passes):
        for layer_idx in range(1, layer_count):
            prev: dict[str, float] = {nid: float(i) for i, nid in enumerate(ordering[layer_idx - 1])}
            ordering[layer_idx].sort(key=lambda a, p=prev: _barycenter(a, aug.graph, p, "incoming"))

        for layer_idx in range(layer_count - 2, -1, -1):
            nxt: dict[str, float] = {nid: float(i) for i, nid in enumerate(ordering[layer_idx + 1])}
            ordering[layer_idx].sort(key=lambda a, n=nxt: _barycenter(a, aug.graph, n, "outgoing"))

        new = count_crossings(ordering, aug.graph)
        if new >= best:
            break
        best = new
        best_ordering = [list(layer) for layer in ordering]

    return best_ordering


def _barycenter(node_id: str, graph: nx.DiGraph, neighbor_pos: dict[str, float], direction: str) -> float:
    if node_id not in graph:
        return float("inf")
    neighbors = graph.predecessors(node_id) if direction == "incoming" else graph.successors(node_id)
    positions = [neighbor_pos[nb] for nb in neighbors if nb in neighbor_pos]
    if not positions:
        return float("inf")
    return sum(positions) / len(positions)


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[str, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            if src_id in graph:
                for nb in graph.successors(src_id):
                    if nb in tgt_pos:
                        edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def node_box(aug: AugmentedGraph, node_id: str) -> NodeBox:
    box: NodeBox | None = aug.graph.nodes[node_id].get("box")
    if box is None:
        return NodeBox(id=node_id, width=0.0, height=0.0)
    return box


def rank_extent(box: NodeBox, strategy: LayoutStrategy) -> float:
    """Size of a box along the rank axis."""
    return box.width if strategy.direction.is_horizontal else box.height


def across_extent(box: NodeBox, strategy: LayoutStrategy) -> float:
    """Size of a box along the within-rank axis."""
    return box.height if strategy.direction.is_horizontal else box.width


def pack_layers(ordering: list[list[str]], aug: AugmentedGraph, strategy: LayoutStrategy) -> dict[str, float]:
    """Pack each layer with nodesep gaps, centred against the widest layer."""
    layer_total: list[float] = []
    for layer_nodes in ordering:
        w_sum = sum(across_extent(node_box(aug, nid), strategy) for nid in layer_nodes)
        gaps = (len(layer_nodes) - 1) * strategy.nodesep if len(layer_nodes) > 1 else 0.0
        layer_total.append(w_sum + gaps)

    center = max(layer_total, default=0.0) / 2
    across: dict[str, float] = {}
    for layer_idx, layer_nodes in enumerate(ordering):
        pos = max(0.0, center - layer_total[layer_idx] / 2)
        for nid in layer_nodes:
            across[nid] = pos
            pos += across_extent(node_box(aug, nid), strategy) + strategy.nodesep
    return across


def place_ranks(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    across: dict[str, float],
    strategy: LayoutStrategy,
) -> dict[str, Point]:
    """Combine across-rank coordinates with rank bands into (x, y) per node.

    Each rank is a band as thick as its largest member, separated by ranksep.
    BT and RL mirror the rank axis.
    """
    thickness: list[float] = []
    for layer_nodes in ordering:
        thickness.append(max((rank_extent(node_box(aug, nid), strategy) for nid in layer_nodes), default=0.0))

    band_start: list[float] = []
    pos = 0.0
    for t in thickness:
        band_start.append(pos)
        pos += t + strategy.ranksep
    total = pos - strategy.ranksep if thickness else 0.0

    positions: dict[str, Point] = {}
    for layer_idx, layer_nodes in enumerate(ordering):
        for nid in layer_nodes:
            box = node_box(aug, nid)
            rank_coord = band_start[layer_idx]
            if strategy.direction.is_reversed:
                rank_coord = total - band_start[layer_idx] - rank_extent(box, strategy)
            if strategy.direction.is_horizontal:
                positions[nid] = Point(x=rank_coord, y=across[nid])
            else:
                positions[nid] = Point(x=across[nid], y=rank_coord)
    return positions


def _refine_layers(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    across: dict[str, float],
    strategy: LayoutStrategy,
) -> None:
    """Shift whole layers towards their neighbours' barycenter.

    A layer moves as a unit, so spacing inside it is untouched. Shifts larger
    than nodesep are skipped to keep the layout compact.
    """

    def center(nid: str) -> float:
        return across[nid] + across_extent(node_box(aug, nid), strategy) / 2

    for layer_idx in range(1, len(ordering)):
        total_shift = 0.0
        count = 0
        for node_id in ordering[layer_idx]:
            for src in aug.graph.predecessors(node_id):
                if src.startswith(DUMMY_PREFIX) or aug.layers[src] + 1 != layer_idx:
                    continue
                total_shift += center(src) - center(node_id)
                count += 1
        if count == 0:
            continue
        shift = total_shift / count
        if abs(shift) > strategy.nodesep:
            continue
        for node_id in ordering[layer_idx]:
            across[node_id] += shift

    for layer_idx in range(max(0, len(ordering) - 2), -1, -1):
        total_shift = 0.0
        count = 0
        for node_id in ordering[layer_idx]:
            for tgt in aug.graph.successors(node_id):
                if tgt.startswith(DUMMY_PREFIX) or aug.layers[tgt] != layer_idx + 1:
                    continue
                total_shift += center(tgt) - center(node_id)
                count += 1
        if count == 0:
            continue
        shift = total_shift / count
        if abs(shift) > strategy.nodesep:
            continue
        for node_id in ordering[layer_idx]:
            across[node_id] += shift


def assign_coordinates(ordering: list[list[str]], aug: AugmentedGraph, strategy: LayoutStrategy) -> dict[str, Point]:
    """Assign top-left pixel coordinates to every node, dummies included."""
    across = pack_layers(ordering, aug, strategy)
    _refine_layers(ordering, aug, across, strategy)
    return normalize_positions(place_ranks(ordering, aug, across, strategy))


# ─── Graph Construction ─────────────────────────────────────────────────────


def build_digraph(nodes: list[NodeBox], edges: list[tuple[str, str]]) -> nx.DiGraph:
    """Build the layout DiGraph; edges with unknown endpoints are ignored."""
    g: nx.DiGraph = nx.DiGraph()
    for box in nodes:
        g.add_node(box.id, box=box)
    for src, tgt in edges:
        if src in g and tgt in g:
            g.add_edge(src, tgt)
    return g


def rank_and_order(nodes: list[NodeBox], edges: list[tuple[str, str]]) -> tuple[AugmentedGraph, list[list[str]]]:
    """Phases 1-4: cycle removal, layering, dummy insertion, ordering."""
    graph = build_digraph(nodes, edges)
    la = LayerAssignment.assign(graph)
    aug = insert_dummy_nodes(la.dag, la)
    ordering = minimise_crossings(aug)
    return aug, ordering


# ─── SugiyamaLayout Engine ───────────────────────────────────────────────────


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def layout(self, nodes: list[NodeBox], edges: list[tuple[str, str]], strategy: LayoutStrategy) -> dict[str, Point]:
        if not nodes:
            return {}
        aug, ordering = rank_and_order(nodes, edges)
        positions = assign_coordinates(ordering, aug, strategy)
        return {box.id: positions[box.id] for box in nodes}
