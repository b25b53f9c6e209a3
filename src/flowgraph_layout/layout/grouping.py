"""File grouping: partition entities into per-file clusters.

Callables belong to the file that owns them. A declaration is drawn next to
the first callable (in input order) that references it, so it joins that
callable's file; a declaration nobody references falls back to its own file.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flowgraph_layout.ir.graph import Entity, GraphIR, Relationship


@dataclass
class FileGroup:
    file_name: str
    callables: list[Entity] = field(default_factory=list)
    declarations: list[Entity] = field(default_factory=list)
    internal_edges: list[Relationship] = field(default_factory=list)

    @property
    def entities(self) -> list[Entity]:
        return self.callables + self.declarations

    def member_ids(self) -> set[str]:
        return {e.id for e in self.callables} | {e.id for e in self.declarations}

    def callable_edges(self) -> list[tuple[str, str]]:
        """Internal edges between callables, the only ones the group layout sees."""
        ids = {e.id for e in self.callables}
        return [(r.source, r.target) for r in self.internal_edges if r.source in ids and r.target in ids]


def declaration_referrers(gir: GraphIR) -> dict[str, list[Entity]]:
    """Map each declaration id to the callables referencing it, in input order."""
    users: dict[str, set[str]] = {}
    for rel in gir.relationships:
        if rel.is_use:
            users.setdefault(rel.target, set()).add(rel.source)
    for decl in gir.declarations():
        users.setdefault(decl.id, set()).update(decl.used_by)

    referrers: dict[str, list[Entity]] = {}
    for decl in gir.declarations():
        wanted = users.get(decl.id, set())
        referrers[decl.id] = [c for c in gir.callables() if c.id in wanted]
    return referrers


def anchor_callables(gir: GraphIR) -> dict[str, Entity | None]:
    """The callable each declaration is placed next to, or None."""
    return {decl_id: (callers[0] if callers else None) for decl_id, callers in declaration_referrers(gir).items()}


def group_by_file(gir: GraphIR) -> list[FileGroup]:
    """Partition the graph into FileGroups ordered by first appearance."""
    anchors = anchor_callables(gir)
    groups: dict[str, FileGroup] = {}

    def group_for(file_name: str) -> FileGroup:
        if file_name not in groups:
            groups[file_name] = FileGroup(file_name=file_name)
        return groups[file_name]

    for entity in gir.entities:
        if entity.is_callable:
            group_for(entity.file).callables.append(entity)
        else:
            anchor = anchors.get(entity.id)
            group_for(anchor.file if anchor is not None else entity.file).declarations.append(entity)

    owner = group_index(list(groups.values()))
    for rel in gir.relationships:
        if owner[rel.source] == owner[rel.target]:
            groups[owner[rel.source]].internal_edges.append(rel)

    return list(groups.values())


def group_index(groups: list[FileGroup]) -> dict[str, str]:
    """Map entity id -> owning group's file name."""
    owner: dict[str, str] = {}
    for group in groups:
        for entity in group.entities:
            owner[entity.id] = group.file_name
    return owner


def cross_group_edges(gir: GraphIR, groups: list[FileGroup]) -> list[Relationship]:
    """Relationships whose endpoints sit in two different groups, in input order."""
    owner = group_index(groups)
    return [rel for rel in gir.relationships if owner[rel.source] != owner[rel.target]]


def super_edges(cross_edges: list[Relationship], groups: list[FileGroup]) -> list[tuple[str, str]]:
    """Collapse cross-group edges to one directed edge per ordered group pair."""
    owner = group_index(groups)
    seen: dict[tuple[str, str], None] = {}
    for rel in cross_edges:
        pair = (owner[rel.source], owner[rel.target])
        if pair[0] != pair[1]:
            seen.setdefault(pair, None)
    return list(seen)
