#!/usr/bin/env python3
"""
pflow - Specification Layer

Core data structures representing a declared place/transition net.
These are built by the NetBuilder (or a declaration loader), compiled by the
indexer, and read by the runtime. Every marking, delta and guard vector is a
plain list of ints indexed by place offset.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from ..exceptions import DeclarationError

logger = logging.getLogger(__name__)


class NetType(str, Enum):
    """Firing discipline applied after the vector arithmetic"""
    PETRI_NET = "petriNet"
    WORKFLOW = "workflow"
    STATE_MACHINE = "stateMachine"


@dataclass
class Position:
    """Layout coordinates; never consulted by the firing rules"""
    x: float = 0
    y: float = 0

    @classmethod
    def coerce(cls, value: Any) -> "Position":
        if value is None:
            return cls()
        if isinstance(value, Position):
            return value
        if isinstance(value, dict):
            return cls(value.get("x", 0), value.get("y", 0))
        try:
            x, y = value
        except (TypeError, ValueError):
            raise DeclarationError(f"position must be an (x, y) pair, got {value!r}") from None
        return cls(x, y)


@dataclass
class RoleSpec:
    """Access-control tag carried by transitions"""
    label: str


@dataclass(eq=False)
class PlaceSpec:
    """Specification for a place in the net"""
    label: str
    offset: int  # Index into every marking/delta vector
    initial: int = 0
    capacity: int = 0  # 0 means unbounded
    position: Position = field(default_factory=Position)


@dataclass
class GuardSpec:
    """Inhibitor compiled from an inhibitor arc.

    ``delta`` holds a single ``-weight`` at the inhibiting place's offset, so
    adding it to a marking succeeds exactly when the place holds enough
    tokens to block the transition.
    """
    label: str
    delta: List[int]


@dataclass(eq=False)
class TransitionSpec:
    """Specification for a transition in the net"""
    label: str
    role: Optional[RoleSpec] = None
    position: Position = field(default_factory=Position)
    delta: List[int] = field(default_factory=list)  # Filled in by the indexer
    guards: Dict[str, GuardSpec] = field(default_factory=dict)


Node = Union[PlaceSpec, TransitionSpec]


@dataclass
class ArcSpec:
    """Directed, weighted connection between a place and a transition"""
    source: Any
    target: Any
    weight: int = 1
    inhibit: bool = False


def is_valid_weight(weight: Any) -> bool:
    return isinstance(weight, int) and not isinstance(weight, bool) and weight > 0


def _mermaid_id(prefix: str, label: str) -> str:
    return f"{prefix}_{re.sub(r'[^0-9A-Za-z_]', '_', label)}"


@dataclass
class NetSpec:
    """Complete specification of a net"""
    schema: str
    type: NetType = NetType.PETRI_NET
    places: Dict[str, PlaceSpec] = field(default_factory=dict)  # Offset order
    transitions: Dict[str, TransitionSpec] = field(default_factory=dict)
    arcs: List[ArcSpec] = field(default_factory=list)
    roles: Dict[str, RoleSpec] = field(default_factory=dict)
    indexed: bool = False
    # False when loaded from precomputed deltas; arcs then stay empty
    arcs_reconstructed: bool = True

    def has_place(self, node: Any) -> bool:
        return isinstance(node, PlaceSpec) and self.places.get(node.label) is node

    def has_transition(self, node: Any) -> bool:
        return isinstance(node, TransitionSpec) and self.transitions.get(node.label) is node

    # ------------------------------------------------------------------
    # Vectors
    # ------------------------------------------------------------------

    def empty_vector(self) -> List[int]:
        return [0] * len(self.places)

    def initial_vector(self) -> List[int]:
        v = self.empty_vector()
        for p in self.places.values():
            v[p.offset] = p.initial
        return v

    def capacity_vector(self) -> List[int]:
        v = self.empty_vector()
        for p in self.places.values():
            v[p.offset] = p.capacity
        return v

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_node(self, label: str) -> Optional[Node]:
        """Look up a node by label, transitions first"""
        if label in self.transitions:
            return self.transitions[label]
        return self.places.get(label)

    def get_nearby_node(self, x: float, y: float, threshold: Optional[float] = None) -> Optional[Node]:
        """Return the first node within ``threshold`` of (x, y) on both axes.

        Places are searched before transitions, each in declaration order.
        """
        if threshold is None:
            from ..config import DEFAULT_CONFIG
            threshold = DEFAULT_CONFIG.proximity_threshold

        def close(node: Node) -> bool:
            return abs(x - node.position.x) < threshold and abs(y - node.position.y) < threshold

        for p in self.places.values():
            if close(p):
                return p
        for t in self.transitions.values():
            if close(t):
                return t
        return None

    def get_size(self, margin: Optional[float] = None) -> Tuple[float, float]:
        """Width and height needed to draw every node, plus a margin"""
        if margin is None:
            from ..config import DEFAULT_CONFIG
            margin = DEFAULT_CONFIG.size_margin
        limit_x: float = 0
        limit_y: float = 0
        for node in [*self.places.values(), *self.transitions.values()]:
            limit_x = max(limit_x, node.position.x)
            limit_y = max(limit_y, node.position.y)
        return limit_x + margin, limit_y + margin

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_object(self) -> Dict[str, Any]:
        """Export the net as a plain dict, loadable by pflow.declaration.

        Nets loaded from precomputed deltas have no arcs to export; the
        deltas and guards still round-trip through ``load_object``.
        """
        if not self.arcs_reconstructed:
            logger.warning(
                "[export] %s was loaded from precomputed deltas; arcs are not reconstructed",
                self.schema,
            )

        places = {
            p.label: {
                "offset": p.offset,
                "initial": p.initial,
                "capacity": p.capacity,
                "position": {"x": p.position.x, "y": p.position.y},
            }
            for p in self.places.values()
        }
        transitions = {
            t.label: {
                "role": t.role.label if t.role else None,
                "position": {"x": t.position.x, "y": t.position.y},
                "delta": list(t.delta),
                "guards": {
                    label: {"label": g.label, "delta": list(g.delta)}
                    for label, g in t.guards.items()
                },
            }
            for t in self.transitions.values()
        }
        arcs = [
            {
                "source": arc.source.label,
                "target": arc.target.label,
                "weight": arc.weight,
                "inhibit": arc.inhibit,
            }
            for arc in self.arcs
        ]
        return {
            "schema": self.schema,
            "type": self.type.value,
            "version": "v0",
            "places": places,
            "transitions": transitions,
            "arcs": arcs,
        }

    def to_mermaid(self) -> str:
        """Generate a Mermaid diagram from the compiled deltas and guards"""
        lines = ["graph LR"]

        by_offset = {p.offset: p for p in self.places.values()}

        for p in self.places.values():
            cap = f"/{p.capacity}" if p.capacity else ""
            lines.append(f"    {_mermaid_id('p', p.label)}((\"{p.label}<br/>{p.initial}{cap}\"))")

        for t in self.transitions.values():
            role = f"<br/>{t.role.label}" if t.role else ""
            lines.append(f"    {_mermaid_id('t', t.label)}[\"{t.label}{role}\"]")

        for t in self.transitions.values():
            t_id = _mermaid_id('t', t.label)
            for offset, v in enumerate(t.delta):
                if v == 0:
                    continue
                p_id = _mermaid_id('p', by_offset[offset].label)
                weight_label = f"|{abs(v)}|" if abs(v) > 1 else ""
                if v > 0:
                    lines.append(f"    {t_id} -->{weight_label} {p_id}")
                else:
                    lines.append(f"    {p_id} -->{weight_label} {t_id}")
            for label, g in t.guards.items():
                weight = abs(sum(g.delta))
                lines.append(f"    {_mermaid_id('p', label)} --o|{weight}| {t_id}")

        return "\n".join(lines)
