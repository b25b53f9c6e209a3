"""Tests for the constraint-layered and force-directed engines."""

from __future__ import annotations

import asyncio
import math

import pytest

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.layout.constraint import ConstraintLayeredLayout, project_layer
from flowgraph_layout.layout.engine import get_algorithm, run_algorithm
from flowgraph_layout.layout.force import ForceDirectedLayout, make_rng
from flowgraph_layout.layout.geometry import Rect
from flowgraph_layout.layout.sugiyama import SugiyamaLayout
from flowgraph_layout.layout.types import NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy
from flowgraph_layout.types import Algorithm, Direction

# ─── Helpers ──────────────────────────────────────────────────────────────────


def boxes(*ids: str, width: float = 650.0, height: float = 320.0) -> list[NodeBox]:
    return [NodeBox(id=i, width=width, height=height) for i in ids]


def assert_disjoint(positions: dict[str, Point], nodes: list[NodeBox]) -> None:
    rects = [Rect(positions[b.id].x, positions[b.id].y, b.width, b.height) for b in nodes]
    for i, a in enumerate(rects):
        for b in rects[i + 1 :]:
            assert not a.intersects(b), (a, b)


def assert_finite(positions: dict[str, Point]) -> None:
    for p in positions.values():
        assert math.isfinite(p.x) and math.isfinite(p.y)
        assert p.x >= 0 and p.y >= 0


DIAMOND = [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]


# ─── Constraint-Layered Tests ─────────────────────────────────────────────────


class TestProjectLayer:
    def test_enforces_separation(self):
        across = {"a": 0.0, "b": 10.0, "c": 20.0}
        sizes = {"a": 100.0, "b": 100.0, "c": 100.0}
        project_layer(["a", "b", "c"], across, sizes, 50.0)
        assert across["b"] - across["a"] >= 150.0
        assert across["c"] - across["b"] >= 150.0

    def test_keeps_centre(self):
        across = {"a": 0.0, "b": 0.0}
        sizes = {"a": 100.0, "b": 100.0}
        project_layer(["a", "b"], across, sizes, 50.0)
        centre = (across["a"] + 50 + across["b"] + 50) / 2
        assert centre == pytest.approx(50.0)

    def test_empty_layer(self):
        across: dict[str, float] = {}
        project_layer([], across, {}, 50.0)
        assert across == {}


class TestConstraintLayeredLayout:
    def test_is_awaitable(self):
        result = ConstraintLayeredLayout().layout(boxes("a"), [], LayoutStrategy())
        assert asyncio.iscoroutine(result)
        assert asyncio.run(result) == {"a": Point(0.0, 0.0)}

    def test_chain_ranks(self):
        pos = asyncio.run(ConstraintLayeredLayout().layout(boxes("a", "b", "c"), [("a", "b"), ("b", "c")], LayoutStrategy()))
        assert pos["a"].y < pos["b"].y < pos["c"].y

    def test_diamond_no_overlap(self):
        nodes = boxes("a", "b", "c", "d")
        pos = asyncio.run(ConstraintLayeredLayout().layout(nodes, DIAMOND, LayoutStrategy()))
        assert_disjoint(pos, nodes)
        assert_finite(pos)

    def test_left_to_right(self):
        strategy = LayoutStrategy(direction=Direction.LR)
        pos = asyncio.run(ConstraintLayeredLayout().layout(boxes("a", "b"), [("a", "b")], strategy))
        assert pos["a"].x < pos["b"].x

    def test_empty(self):
        assert asyncio.run(ConstraintLayeredLayout().layout([], [], LayoutStrategy())) == {}


# ─── Force-Directed Tests ─────────────────────────────────────────────────────


class TestForceDirectedLayout:
    def test_seeded_runs_identical(self):
        config = LayoutConfig(seed=7)
        nodes = boxes("a", "b", "c", "d")
        first = ForceDirectedLayout(config, key="a.go").layout(nodes, DIAMOND, LayoutStrategy())
        second = ForceDirectedLayout(config, key="a.go").layout(nodes, DIAMOND, LayoutStrategy())
        assert first == second

    def test_rng_streams_keyed(self):
        assert make_rng(1, "a.go").random() == make_rng(1, "a.go").random()
        assert make_rng(1, "a.go").random() != make_rng(1, "b.go").random()

    def test_no_overlap(self):
        nodes = boxes("a", "b", "c", "d", "e", "f")
        edges = [("a", "b"), ("a", "c"), ("c", "d"), ("d", "e")]
        pos = ForceDirectedLayout(LayoutConfig(seed=1)).layout(nodes, edges, LayoutStrategy())
        assert_disjoint(pos, nodes)
        assert_finite(pos)

    def test_unseeded_still_valid(self):
        nodes = boxes("a", "b", "c")
        pos = ForceDirectedLayout(LayoutConfig(force_iterations=30)).layout(nodes, [("a", "b")], LayoutStrategy())
        assert_disjoint(pos, nodes)
        assert_finite(pos)

    def test_mixed_sizes(self):
        nodes = [NodeBox("big", 900.0, 600.0), NodeBox("small", 50.0, 40.0), NodeBox("mid", 350.0, 200.0)]
        pos = ForceDirectedLayout(LayoutConfig(seed=3)).layout(nodes, [], LayoutStrategy())
        assert_disjoint(pos, nodes)

    def test_empty(self):
        assert ForceDirectedLayout().layout([], [], LayoutStrategy()) == {}


# ─── Registry Tests ───────────────────────────────────────────────────────────


class TestRegistry:
    def test_engines_by_algorithm(self):
        assert isinstance(get_algorithm(Algorithm.Layered), SugiyamaLayout)
        assert isinstance(get_algorithm(Algorithm.ConstraintLayered), ConstraintLayeredLayout)
        assert isinstance(get_algorithm(Algorithm.ForceDirected), ForceDirectedLayout)

    def test_run_algorithm_handles_sync_and_async(self):
        nodes = boxes("a", "b")
        for algorithm in Algorithm:
            engine = get_algorithm(algorithm, LayoutConfig(seed=0))
            pos = asyncio.run(run_algorithm(engine, nodes, [("a", "b")], LayoutStrategy()))
            assert set(pos) == {"a", "b"}
            assert_finite(pos)
