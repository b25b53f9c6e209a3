"""Tests for layout/declarations.py: preferred slots, spiral search, fallback."""

from __future__ import annotations

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import Entity
from flowgraph_layout.layout.declarations import (
    DeclarationPlacer,
    find_free_slot,
    grid_slot,
    preferred_position,
    spiral_offsets,
)
from flowgraph_layout.layout.geometry import Rect
from flowgraph_layout.layout.occupancy import OccupancyIndex
from flowgraph_layout.layout.types import Point
from flowgraph_layout.types import Direction, EntityKind

# ─── Helpers ──────────────────────────────────────────────────────────────────


def declaration(entity_id: str) -> Entity:
    return Entity(id=entity_id, kind=EntityKind.Declaration, file="a.go", label=entity_id, width=350.0, height=200.0)


def callable_entity(entity_id: str) -> Entity:
    return Entity(id=entity_id, kind=EntityKind.Callable, file="a.go", label=entity_id, width=650.0, height=320.0)


def rects_of(positions: dict[str, Point], w: float = 350.0, h: float = 200.0) -> list[Rect]:
    return [Rect(p.x, p.y, w, h) for p in positions.values()]


def pairwise_disjoint(rects: list[Rect]) -> bool:
    return all(not a.intersects(b) for i, a in enumerate(rects) for b in rects[i + 1 :])


# ─── Grid Tests ───────────────────────────────────────────────────────────────


class TestGrid:
    def test_grid_slot(self):
        assert [grid_slot(i, 2) for i in range(5)] == [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)]

    def test_grid_slot_clamps_columns(self):
        assert grid_slot(3, 0) == (0, 3)

    def test_forward_side_per_direction(self):
        caller = Rect(1000, 1000, 650, 320)
        config = LayoutConfig()
        below = preferred_position(caller, 0, 350, 200, Direction.TB, config)
        above = preferred_position(caller, 0, 350, 200, Direction.BT, config)
        right = preferred_position(caller, 0, 350, 200, Direction.LR, config)
        left = preferred_position(caller, 0, 350, 200, Direction.RL, config)
        assert below.y == caller.bottom + 40
        assert above.y + 200 == caller.y - 40
        assert right.x == caller.right + 40
        assert left.x + 350 == caller.x - 40


# ─── Spiral Tests ─────────────────────────────────────────────────────────────


class TestSpiral:
    def test_first_ring(self):
        offsets = list(spiral_offsets(1, 1, 8))
        assert offsets == [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)]

    def test_respects_budget(self):
        assert len(list(spiral_offsets(10, 10, 64))) == 64
        assert list(spiral_offsets(10, 10, 0)) == []

    def test_offsets_unique(self):
        offsets = list(spiral_offsets(1, 1, 48))
        assert len(set(offsets)) == 48


class TestFindFreeSlot:
    def test_preferred_slot_when_free(self):
        pos, found = find_free_slot(OccupancyIndex(), Point(100, 100), 350, 200, LayoutConfig())
        assert found
        assert pos == Point(100, 100)

    def test_spiral_escapes_collision(self):
        index = OccupancyIndex()
        index.mark(Rect(100, 100, 350, 200))
        pos, found = find_free_slot(index, Point(100, 100), 350, 200, LayoutConfig())
        assert found
        assert index.is_free(Rect(pos.x, pos.y, 350, 200), margin=40)

    def test_fallback_right_of_everything(self):
        index = OccupancyIndex()
        index.mark(Rect(0, 0, 100000, 100000))
        pos, found = find_free_slot(index, Point(500, 500), 350, 200, LayoutConfig(max_placement_attempts=4))
        assert not found
        assert pos.x == 100000 + 40
        assert index.is_free(Rect(pos.x, pos.y, 350, 200), margin=40)

    def test_degenerate_preference_sanitised(self):
        pos, found = find_free_slot(OccupancyIndex(), Point(float("nan"), -5), 350, 200, LayoutConfig())
        assert found
        assert pos == Point(0.0, -5.0)


# ─── DeclarationPlacer Tests ──────────────────────────────────────────────────


class TestDeclarationPlacer:
    def test_five_declarations_in_two_columns(self):
        caller = callable_entity("f")
        caller_rect = Rect(60, 60, 650, 320)
        decls = [declaration(f"T{i}") for i in range(5)]
        anchors = {d.id: caller for d in decls}
        positions = DeclarationPlacer(Direction.TB).place(decls, anchors, {"f": caller_rect})

        rects = rects_of(positions)
        assert pairwise_disjoint(rects + [caller_rect])
        assert len({p.x for p in positions.values()}) == 2
        assert all(p.y >= caller_rect.bottom for p in positions.values())

    def test_orphans_do_not_overlap_callables(self):
        caller_rect = Rect(0, 0, 650, 320)
        decls = [declaration("A"), declaration("B"), declaration("C")]
        anchors = {d.id: None for d in decls}
        positions = DeclarationPlacer(Direction.TB).place(decls, anchors, {"f": caller_rect})
        assert pairwise_disjoint(rects_of(positions) + [caller_rect])

    def test_columns_configurable(self):
        caller = callable_entity("f")
        decls = [declaration(f"T{i}") for i in range(3)]
        config = LayoutConfig(declaration_columns=3)
        positions = DeclarationPlacer(Direction.TB, config).place(
            decls, {d.id: caller for d in decls}, {"f": Rect(0, 0, 650, 320)}
        )
        assert len({p.y for p in positions.values()}) == 1
        assert len({p.x for p in positions.values()}) == 3

    def test_crowded_layout_uses_fallback(self):
        wall = {f"w{i}": Rect(i * 400.0, 0, 400, 5000) for i in range(8)}
        decls = [declaration("T")]
        config = LayoutConfig(max_placement_attempts=2)
        positions = DeclarationPlacer(Direction.TB, config).place(decls, {"T": None}, wall)
        assert positions["T"].x == 3200 + 40
