"""File-group containers and the spacing repair pass."""

from __future__ import annotations

import logging

from flowgraph_layout.layout.geometry import Rect, bounding_rect, separation_push
from flowgraph_layout.layout.types import GroupContainer, LayoutNode
from flowgraph_layout.types import EntityKind

logger = logging.getLogger(__name__)


def container_rect(container: GroupContainer) -> Rect:
    return Rect(container.x, container.y, container.width, container.height)


def build_containers(nodes: list[LayoutNode], padding: float) -> list[GroupContainer]:
    """One container per group, wrapping its members' final bounds plus padding."""
    by_group: dict[str, list[LayoutNode]] = {}
    for node in nodes:
        by_group.setdefault(node.group, []).append(node)

    containers: list[GroupContainer] = []
    for group, members in by_group.items():
        bounds = bounding_rect([Rect(n.x, n.y, n.width, n.height) for n in members])
        if bounds is None:
            continue
        containers.append(
            GroupContainer(
                file_name=group,
                x=bounds.x - padding,
                y=bounds.y - padding,
                width=bounds.width + 2 * padding,
                height=bounds.height + 2 * padding,
                member_ids=[n.id for n in members],
                callable_count=sum(1 for n in members if n.kind is EntityKind.Callable),
                declaration_count=sum(1 for n in members if n.kind is EntityKind.Declaration),
            )
        )
    return containers


def repair_spacing(
    containers: list[GroupContainer],
    nodes: list[LayoutNode],
    spacing: float,
) -> int:
    """Push overlapping containers apart, moving their members along.

    Containers are settled in order: while a container overlaps any earlier
    one it moves right or down, whichever clears the overlap with less
    movement, by the overlap plus ``spacing``. Earlier containers never move
    again, so one pass leaves the whole set separated and a second pass is a
    no-op. Returns the number of moves made.
    """
    members: dict[str, list[LayoutNode]] = {}
    by_id = {n.id: n for n in nodes}
    for container in containers:
        members[container.file_name] = [by_id[m] for m in container.member_ids if m in by_id]

    moves = 0
    for j, moving in enumerate(containers):
        while True:
            rect = container_rect(moving)
            hit = next((container_rect(c) for c in containers[:j] if container_rect(c).intersects(rect)), None)
            if hit is None:
                break
            dx, dy = separation_push(hit, rect, spacing)
            moving.x += dx
            moving.y += dy
            for node in members[moving.file_name]:
                node.x += dx
                node.y += dy
            moves += 1

    if moves:
        logger.debug("spacing repair moved containers %d times", moves)
    return moves
