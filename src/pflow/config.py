#!/usr/bin/env python3
"""
pflow configuration.

A single dataclass carries the tunables used by the builder, the runtime and
the declaration loaders. It is always passed explicitly; ``None`` anywhere a
config is accepted means ``DEFAULT_CONFIG``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PflowConfig:
    """
    Engine configuration.

    Attributes:
        proximity_threshold: Max distance on each axis for get_nearby_node
        size_margin: Padding added to the furthest node by get_size
        validate_capacity: Reject places declared with initial > capacity
        grid: Pixel size of one grid unit for pos()
    """
    proximity_threshold: float = 24.0
    size_margin: float = 100.0
    validate_capacity: bool = True
    grid: float = 60.0

    def pos(self, x: float, y: float) -> "Position":
        """Convert grid coordinates to a pixel Position."""
        from .core.specs import Position
        return Position(x * self.grid, y * self.grid)


DEFAULT_CONFIG = PflowConfig()


def resolve_config(config: Optional[PflowConfig]) -> PflowConfig:
    return config if config is not None else DEFAULT_CONFIG
