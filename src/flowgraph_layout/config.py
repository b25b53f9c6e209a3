"""Centralized configuration for flowgraph-layout."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class LayoutConfig:
    """Geometry and tuning knobs for the layout pipeline."""

    # Entity sizes
    callable_width: float = 650.0
    callable_height: float = 320.0
    callable_min_height: float = 206.0
    callable_header_height: float = 86.0
    callable_line_height: float = 18.0
    declaration_width: float = 350.0
    declaration_height: float = 200.0

    # Spacing
    group_padding: float = 60.0
    container_spacing: float = 40.0

    # Declaration placement
    declaration_margin: float = 40.0
    declaration_columns: int = 2
    max_placement_attempts: int = 64
    orphan_origin_x: float = 0.0
    orphan_origin_y: float = 0.0

    # Force-directed simulation
    force_iterations: int = 300
    link_distance: float = 150.0
    charge_strength: float = -1000.0
    collision_margin: float = 40.0
    velocity_decay: float = 0.4
    seed: int | None = None

    # Constraint-layered solver
    constraint_max_passes: int = 50
    constraint_tolerance: float = 0.5
