"""Rectangle geometry and numeric guards shared by every layout phase."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from flowgraph_layout.layout.types import NodeBox, Point

logger = logging.getLogger(__name__)

SAFE_ORIGIN: float = 0.0


@dataclass
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inflate(self, margin: float) -> Rect:
        return Rect(self.x - margin, self.y - margin, self.width + 2 * margin, self.height + 2 * margin)

    def intersects(self, other: Rect) -> bool:
        """Strict intersection: rectangles that only touch do not overlap."""
        return self.x < other.right and other.x < self.right and self.y < other.bottom and other.y < self.bottom


def safe_coord(value: float, default: float = SAFE_ORIGIN) -> float:
    """Replace non-finite or negative coordinates with ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return number


def finite_coord(value: float, default: float = SAFE_ORIGIN) -> float:
    """Replace non-finite coordinates with ``default``; negatives are kept."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def safe_point(point: Point) -> Point:
    return Point(x=safe_coord(point.x), y=safe_coord(point.y))


def sanitize_positions(positions: dict[str, Point]) -> dict[str, Point]:
    """Clamp every position to finite, non-negative values."""
    clean: dict[str, Point] = {}
    for node_id, p in positions.items():
        fixed = safe_point(p)
        if fixed != p:
            logger.debug("replaced degenerate position %r for %s", p, node_id)
        clean[node_id] = fixed
    return clean


def normalize_positions(positions: dict[str, Point]) -> dict[str, Point]:
    """Shift positions so the minimum x and y are zero, then sanitize."""
    finite = [p for p in positions.values() if math.isfinite(p.x) and math.isfinite(p.y)]
    if not finite:
        return sanitize_positions(positions)
    min_x = min(p.x for p in finite)
    min_y = min(p.y for p in finite)
    shifted = {nid: Point(x=p.x - min_x, y=p.y - min_y) for nid, p in positions.items()}
    return sanitize_positions(shifted)


def bounding_rect(rects: list[Rect]) -> Rect | None:
    if not rects:
        return None
    min_x = min(r.x for r in rects)
    min_y = min(r.y for r in rects)
    max_x = max(r.right for r in rects)
    max_y = max(r.bottom for r in rects)
    return Rect(min_x, min_y, max_x - min_x, max_y - min_y)


def separation_push(fixed: Rect, moving: Rect, spacing: float) -> tuple[float, float]:
    """Smallest right-or-down move that clears ``moving`` from ``fixed`` plus spacing."""
    dx = fixed.right + spacing - moving.x
    dy = fixed.bottom + spacing - moving.y
    if dx <= dy:
        return (dx, 0.0)
    return (0.0, dy)


def legalize_boxes(
    order: list[str],
    boxes: dict[str, NodeBox],
    positions: dict[str, Point],
    spacing: float,
) -> dict[str, Point]:
    """Remove residual rectangle overlaps, keeping ``spacing`` between boxes.

    Boxes are fixed one at a time in ``order``; each new box is pushed right or
    down (whichever is the smaller move) until it clears every box already
    fixed. Moves are strictly positive, so the loop ends once the box passes
    the extent of the fixed set.
    """
    placed: list[Rect] = []
    result: dict[str, Point] = {}
    for node_id in order:
        box = boxes[node_id]
        p = positions[node_id]
        rect = Rect(safe_coord(p.x), safe_coord(p.y), box.width, box.height)
        moves = 0
        while True:
            hit = next((r for r in placed if rect.inflate(spacing / 2).intersects(r.inflate(spacing / 2))), None)
            if hit is None:
                break
            moves += 1
            if moves > 4 * len(placed) + 8:
                extent = bounding_rect(placed)
                rect.x = extent.right + spacing if extent else rect.x
                break
            dx, dy = separation_push(hit, rect, spacing)
            rect.x += dx
            rect.y += dy
        placed.append(rect)
        result[node_id] = Point(x=rect.x, y=rect.y)
    return result
