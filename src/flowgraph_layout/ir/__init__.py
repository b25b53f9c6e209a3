"""Intermediate representation: validated entities, relationships, GraphIR."""

from flowgraph_layout.ir.graph import Entity, GraphIR, Relationship

__all__ = [
    "Entity",
    "GraphIR",
    "Relationship",
]
