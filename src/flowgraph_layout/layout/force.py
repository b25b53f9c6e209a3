"""Force-directed layout engine.

Entities are point masses at their box centres. Each tick applies

  * link springs along internal edges (rest length = link distance + radii),
  * many-body repulsion between every pair,
  * pairwise collision keeping centre distance >= r_a + r_b + margin,

with an alpha that decays over a fixed number of ticks. Circles do not cover
rectangle corners, so the snapshot goes through a rectangle legalisation pass
before it is returned.
"""

from __future__ import annotations

import logging
import math
import random

from flowgraph_layout.config import LayoutConfig
from flowgraph_layout.layout.geometry import legalize_boxes, normalize_positions
from flowgraph_layout.layout.types import NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy

logger = logging.getLogger(__name__)

_ALPHA_MIN: float = 0.001
_INITIAL_RADIUS: float = 10.0
_INITIAL_ANGLE: float = math.pi * (3 - math.sqrt(5))
_COLLIDE_STRENGTH: float = 0.7
_INITIAL_JITTER: float = 1.0


def make_rng(seed: int | None, key: str = "") -> random.Random:
    """Per-call RNG; seeded runs derive a stable stream from ``key``."""
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{key}")


class ForceSimulation:
    """A small d3-force style simulation over NodeBoxes."""

    def __init__(
        self,
        nodes: list[NodeBox],
        edges: list[tuple[str, str]],
        config: LayoutConfig,
        rng: random.Random,
    ) -> None:
        self.nodes = nodes
        self.config = config
        self.rng = rng
        self.index: dict[str, int] = {box.id: i for i, box in enumerate(nodes)}
        self.links: list[tuple[int, int]] = [
            (self.index[s], self.index[t]) for s, t in edges if s in self.index and t in self.index and s != t
        ]
        self.radius: list[float] = [max(box.width, box.height) / 2 for box in nodes]

        degree = [0] * len(nodes)
        for a, b in self.links:
            degree[a] += 1
            degree[b] += 1
        self.degree = degree

        # Phyllotaxis seed positions with a little jitter.
        spread = max(self.radius, default=0.0)
        self.x: list[float] = []
        self.y: list[float] = []
        for i in range(len(nodes)):
            r = (_INITIAL_RADIUS + spread) * math.sqrt(0.5 + i)
            angle = i * _INITIAL_ANGLE
            self.x.append(r * math.cos(angle) + (rng.random() - 0.5) * _INITIAL_JITTER)
            self.y.append(r * math.sin(angle) + (rng.random() - 0.5) * _INITIAL_JITTER)
        self.vx: list[float] = [0.0] * len(nodes)
        self.vy: list[float] = [0.0] * len(nodes)

        self.alpha = 1.0
        iterations = max(1, config.force_iterations)
        self.alpha_decay = 1 - _ALPHA_MIN ** (1 / iterations)

    def _jiggle(self) -> float:
        return (self.rng.random() - 0.5) * 1e-6

    def _apply_links(self) -> None:
        for a, b in self.links:
            dx = self.x[b] + self.vx[b] - self.x[a] - self.vx[a]
            dy = self.y[b] + self.vy[b] - self.y[a] - self.vy[a]
            if dx == 0 and dy == 0:
                dx, dy = self._jiggle(), self._jiggle()
            dist = math.hypot(dx, dy)
            rest = self.config.link_distance + self.radius[a] + self.radius[b]
            strength = 1 / max(1, min(self.degree[a], self.degree[b]))
            k = (dist - rest) / dist * self.alpha * strength
            dx *= k
            dy *= k
            bias = self.degree[a] / (self.degree[a] + self.degree[b])
            self.vx[b] -= dx * bias
            self.vy[b] -= dy * bias
            self.vx[a] += dx * (1 - bias)
            self.vy[a] += dy * (1 - bias)

    def _apply_charge(self) -> None:
        n = len(self.nodes)
        for i in range(n):
            for j in range(i + 1, n):
                dx = self.x[j] - self.x[i]
                dy = self.y[j] - self.y[i]
                if dx == 0 and dy == 0:
                    dx, dy = self._jiggle(), self._jiggle()
                dist2 = max(dx * dx + dy * dy, 1.0)
                w = self.config.charge_strength * self.alpha / dist2
                self.vx[i] += dx * w
                self.vy[i] += dy * w
                self.vx[j] -= dx * w
                self.vy[j] -= dy * w

    def _apply_collision(self) -> None:
        n = len(self.nodes)
        margin = self.config.collision_margin
        for i in range(n):
            for j in range(i + 1, n):
                xi, yi = self.x[i] + self.vx[i], self.y[i] + self.vy[i]
                xj, yj = self.x[j] + self.vx[j], self.y[j] + self.vy[j]
                dx, dy = xi - xj, yi - yj
                reach = self.radius[i] + self.radius[j] + margin
                dist2 = dx * dx + dy * dy
                if dist2 >= reach * reach:
                    continue
                if dist2 == 0:
                    dx, dy = self._jiggle(), self._jiggle()
                    dist2 = dx * dx + dy * dy
                dist = math.sqrt(dist2)
                push = (reach - dist) / dist * _COLLIDE_STRENGTH
                ri2 = self.radius[i] ** 2
                rj2 = self.radius[j] ** 2
                share = rj2 / (ri2 + rj2) if ri2 + rj2 > 0 else 0.5
                self.vx[i] += dx * push * share
                self.vy[i] += dy * push * share
                self.vx[j] -= dx * push * (1 - share)
                self.vy[j] -= dy * push * (1 - share)

    def tick(self) -> None:
        self.alpha += (0.0 - self.alpha) * self.alpha_decay
        self._apply_links()
        self._apply_charge()
        self._apply_collision()
        keep = 1 - self.config.velocity_decay
        for i in range(len(self.nodes)):
            self.vx[i] *= keep
            self.vy[i] *= keep
            self.x[i] += self.vx[i]
            self.y[i] += self.vy[i]

    def run(self) -> None:
        for _ in range(self.config.force_iterations):
            self.tick()

    def top_left_positions(self) -> dict[str, Point]:
        return {
            box.id: Point(x=self.x[i] - box.width / 2, y=self.y[i] - box.height / 2) for i, box in enumerate(self.nodes)
        }


class ForceDirectedLayout:
    """Spring/repulsion/collision layout with a rectangle legalisation pass."""

    def __init__(self, config: LayoutConfig | None = None, key: str = "") -> None:
        self.config = config or LayoutConfig()
        self.key = key

    def layout(self, nodes: list[NodeBox], edges: list[tuple[str, str]], strategy: LayoutStrategy) -> dict[str, Point]:
        if not nodes:
            return {}
        sim = ForceSimulation(nodes, edges, self.config, make_rng(self.config.seed, self.key))
        sim.run()
        raw = normalize_positions(sim.top_left_positions())

        boxes = {box.id: box for box in nodes}
        order = sorted(boxes, key=lambda nid: (raw[nid].y, raw[nid].x))
        spacing = max(self.config.collision_margin, strategy.nodesep)
        legal = legalize_boxes(order, boxes, raw, spacing)
        logger.debug("force layout settled %d nodes after %d ticks", len(nodes), self.config.force_iterations)
        return normalize_positions({box.id: legal[box.id] for box in nodes})
