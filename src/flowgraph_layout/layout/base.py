"""Base layout algorithm protocol."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import Protocol

from flowgraph_layout.layout.types import NodeBox, Point
from flowgraph_layout.strategy import LayoutStrategy

Positions = dict[str, Point]


class LayoutAlgorithm(Protocol):
    """Protocol that all per-group layout algorithms must implement.

    Implementations return positions directly or an awaitable resolving to
    them; the engine awaits whichever it gets. Positions are top-left corners,
    finite and non-negative, relative to an arbitrary origin.
    """

    def layout(
        self,
        nodes: list[NodeBox],
        edges: list[tuple[str, str]],
        strategy: LayoutStrategy,
    ) -> Positions | Awaitable[Positions]:
        """Position every node in ``nodes`` using only ``edges`` between them."""
        ...
