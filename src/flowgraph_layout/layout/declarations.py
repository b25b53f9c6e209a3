"""Declaration placement: pack declarations beside their callers.

Runs after every callable has its final global position. Each declaration
gets a preferred slot in a small grid on the forward side of its anchor
callable (below for TB, above for BT, right for LR, left for RL). A slot that
collides with anything already placed is repaired by a bounded square-spiral
search; when the budget runs out the declaration goes to the right of
everything placed so far.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.ir.graph import Entity
from flowgraph_layout.layout.geometry import Rect, finite_coord
from flowgraph_layout.layout.occupancy import OccupancyIndex
from flowgraph_layout.layout.types import Point
from flowgraph_layout.types import Direction

logger = logging.getLogger(__name__)

# right, down, left, up
_SPIRAL_DIRS: list[tuple[int, int]] = [(1, 0), (0, 1), (-1, 0), (0, -1)]


def grid_slot(index: int, columns: int) -> tuple[int, int]:
    """(column, row) of the ``index``-th cell in a grid of ``columns`` columns."""
    columns = max(1, columns)
    return index % columns, index // columns


def preferred_position(
    caller: Rect,
    index: int,
    width: float,
    height: float,
    direction: Direction,
    config: LayoutConfig,
) -> Point:
    """Grid slot ``index`` on the forward side of ``caller``."""
    col, row = grid_slot(index, config.declaration_columns)
    margin = config.declaration_margin
    step_x = width + margin
    step_y = height + margin

    if direction is Direction.LR:
        return Point(x=caller.right + margin + col * step_x, y=caller.y + row * step_y)
    if direction is Direction.RL:
        return Point(x=caller.x - margin - width - col * step_x, y=caller.y + row * step_y)
    if direction is Direction.BT:
        return Point(x=caller.x + col * step_x, y=caller.y - margin - height - row * step_y)
    return Point(x=caller.x + col * step_x, y=caller.bottom + margin + row * step_y)


def orphan_position(index: int, width: float, height: float, config: LayoutConfig) -> Point:
    """Grid slot ``index`` of the fallback grid for declarations without a caller."""
    col, row = grid_slot(index, config.declaration_columns)
    margin = config.declaration_margin
    return Point(
        x=config.orphan_origin_x + col * (width + margin),
        y=config.orphan_origin_y + row * (height + margin),
    )


def spiral_offsets(step_x: float, step_y: float, attempts: int) -> Iterator[tuple[float, float]]:
    """Yield up to ``attempts`` offsets along an expanding square spiral.

    Legs alternate horizontal and vertical; the leg length grows by one step
    every two legs (1, 1, 2, 2, 3, 3, ...).
    """
    x = y = 0.0
    produced = 0
    leg = 0
    while produced < attempts:
        dx, dy = _SPIRAL_DIRS[leg % 4]
        length = leg // 2 + 1
        for _ in range(length):
            x += dx * step_x
            y += dy * step_y
            yield x, y
            produced += 1
            if produced >= attempts:
                return
        leg += 1


def find_free_slot(
    index: OccupancyIndex,
    preferred: Point,
    width: float,
    height: float,
    config: LayoutConfig,
) -> tuple[Point, bool]:
    """Return a collision-free top-left corner and whether the spiral found it.

    ``False`` means the attempt budget ran out and the fallback column right
    of every occupied rectangle was used.
    """
    margin = config.declaration_margin
    start = Point(x=finite_coord(preferred.x), y=finite_coord(preferred.y))
    if index.is_free(Rect(start.x, start.y, width, height), margin):
        return start, True

    step_x = (width + margin) / 2
    step_y = (height + margin) / 2
    for dx, dy in spiral_offsets(step_x, step_y, config.max_placement_attempts):
        candidate = Point(x=finite_coord(start.x + dx), y=finite_coord(start.y + dy))
        if index.is_free(Rect(candidate.x, candidate.y, width, height), margin):
            return candidate, True

    return Point(x=index.rightmost() + margin, y=start.y), False


class DeclarationPlacer:
    """Places declaration entities around already-positioned callables."""

    def __init__(self, direction: Direction, config: LayoutConfig | None = None) -> None:
        self.direction = direction
        self.config = config or LayoutConfig()

    def place(
        self,
        declarations: list[Entity],
        anchors: dict[str, Entity | None],
        callable_rects: dict[str, Rect],
    ) -> dict[str, Point]:
        """Position every declaration; returns top-left corners by id."""
        index = OccupancyIndex()
        for rect in callable_rects.values():
            index.mark(rect)

        positions: dict[str, Point] = {}
        per_caller: dict[str, int] = {}
        orphans = 0
        exhausted = 0

        for decl in declarations:
            anchor = anchors.get(decl.id)
            caller_rect = callable_rects.get(anchor.id) if anchor is not None else None
            if caller_rect is not None:
                slot = per_caller.get(anchor.id, 0)
                per_caller[anchor.id] = slot + 1
                preferred = preferred_position(
                    caller_rect, slot, decl.width, decl.height, self.direction, self.config
                )
            else:
                preferred = orphan_position(orphans, decl.width, decl.height, self.config)
                orphans += 1

            position, found = find_free_slot(index, preferred, decl.width, decl.height, self.config)
            if not found:
                exhausted += 1
                logger.debug(
                    "no free slot near %s after %d attempts, placed right of the layout",
                    decl.id,
                    self.config.max_placement_attempts,
                )
            index.mark(Rect(position.x, position.y, decl.width, decl.height))
            positions[decl.id] = position

        if exhausted:
            logger.debug("%d of %d declarations used the fallback column", exhausted, len(declarations))
        return positions
