"""Occupancy index for collision tests during declaration placement."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from flowgraph_layout.layout.geometry import Rect, finite_coord

_CELL_SIZE: float = 400.0


def _clean(rect: Rect) -> Rect:
    """Finite position and finite, non-negative size."""
    return Rect(
        finite_coord(rect.x),
        finite_coord(rect.y),
        max(finite_coord(rect.width), 0.0),
        max(finite_coord(rect.height), 0.0),
    )


@dataclass
class OccupancyIndex:
    """Bucketed set of occupied rectangles.

    Rectangles are binned into square cells so a collision test only looks at
    rectangles sharing a cell with the candidate. Non-finite coordinates and sizes
    are replaced on insert, so a degenerate value can never poison the index.
    """

    cell_size: float = _CELL_SIZE
    rects: list[Rect] = field(default_factory=list)
    cells: dict[tuple[int, int], list[int]] = field(default_factory=dict)

    def _cell_range(self, rect: Rect) -> tuple[range, range]:
        x0 = math.floor(rect.x / self.cell_size)
        y0 = math.floor(rect.y / self.cell_size)
        x1 = math.floor(rect.right / self.cell_size)
        y1 = math.floor(rect.bottom / self.cell_size)
        return range(x0, x1 + 1), range(y0, y1 + 1)

    def mark(self, rect: Rect) -> None:
        """Mark a rectangle as occupied."""
        clean = _clean(rect)
        idx = len(self.rects)
        self.rects.append(clean)
        cols, rows = self._cell_range(clean)
        for cx in cols:
            for cy in rows:
                self.cells.setdefault((cx, cy), []).append(idx)

    def collides(self, rect: Rect, margin: float = 0.0) -> bool:
        """True if ``rect`` inflated by ``margin`` intersects an occupied rectangle."""
        candidate = _clean(rect).inflate(finite_coord(margin))
        cols, rows = self._cell_range(candidate)
        checked: set[int] = set()
        for cx in cols:
            for cy in rows:
                for idx in self.cells.get((cx, cy), ()):
                    if idx in checked:
                        continue
                    checked.add(idx)
                    if candidate.intersects(self.rects[idx]):
                        return True
        return False

    def is_free(self, rect: Rect, margin: float = 0.0) -> bool:
        return not self.collides(rect, margin)

    def rightmost(self) -> float:
        """Right edge of the right-most occupied rectangle (0 when empty)."""
        return max((r.right for r in self.rects), default=0.0)

    def __len__(self) -> int:
        return len(self.rects)
