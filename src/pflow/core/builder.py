#!/usr/bin/env python3
"""
pflow - Builder Layer

NetBuilder provides the API for declaratively constructing net specifications.
A declaration is a function that receives a NetBuilder and calls its three
primitives: ``place``, ``transition`` and ``role``. Connections made through
the returned refs are recorded as arcs; the indexer compiles them on build().
"""

import logging
from typing import Any, Callable, Optional, Union

from ..config import PflowConfig, resolve_config
from ..exceptions import DeclarationError, IndexingError, InvalidArcError
from .indexer import index
from .specs import (
    ArcSpec,
    NetSpec,
    NetType,
    PlaceSpec,
    Position,
    RoleSpec,
    TransitionSpec,
    is_valid_weight,
)

logger = logging.getLogger(__name__)


class PlaceRef:
    """Handle returned by NetBuilder.place for wiring arcs"""

    def __init__(self, builder: "NetBuilder", place: PlaceSpec):
        self.builder = builder
        self.place = place

    @property
    def label(self) -> str:
        return self.place.label

    @property
    def offset(self) -> int:
        return self.place.offset

    def tx(self, target: Any, weight: int = 1) -> "PlaceRef":
        """Connect this place as an input of ``target`` (consumes ``weight``)"""
        self.builder.arc(self, target, weight)
        return self

    def guard(self, target: Any, weight: int = 1) -> "PlaceRef":
        """Inhibit ``target`` while this place holds at least ``weight`` tokens"""
        self.builder.arc(self, target, weight, inhibit=True)
        return self

    def __repr__(self):
        return f"PlaceRef({self.place.label})"


class TransitionRef:
    """Handle returned by NetBuilder.transition for wiring arcs"""

    def __init__(self, builder: "NetBuilder", transition: TransitionSpec):
        self.builder = builder
        self.transition = transition

    @property
    def label(self) -> str:
        return self.transition.label

    def tx(self, target: Any, weight: int = 1) -> "TransitionRef":
        """Connect this transition to output place ``target`` (produces ``weight``)"""
        self.builder.arc(self, target, weight)
        return self

    def __repr__(self):
        return f"TransitionRef({self.transition.label})"


def _unwrap(node: Any) -> Any:
    if isinstance(node, PlaceRef):
        return node.place
    if isinstance(node, TransitionRef):
        return node.transition
    return node


class NetBuilder:
    """Builder for constructing net specifications"""

    def __init__(
        self,
        schema: str,
        type: Union[NetType, str] = NetType.PETRI_NET,
        config: Optional[PflowConfig] = None,
    ):
        self.spec = NetSpec(schema, NetType(type))
        self.config = resolve_config(config)

    def _check_label(self, label: str):
        if not isinstance(label, str) or not label:
            raise DeclarationError(f"label must be a non-empty string, got {label!r}")
        if label in self.spec.places or label in self.spec.transitions:
            raise DeclarationError(f"{self.spec.schema}: node '{label}' already declared")

    def place(
        self,
        label: str,
        initial: int = 0,
        capacity: int = 0,
        position: Any = None,
    ) -> PlaceRef:
        """Declare a place and assign it the next offset.

        ``capacity`` of 0 means unbounded. With ``validate_capacity`` enabled
        (the default) an initial count above a non-zero capacity is rejected.
        """
        self._check_label(label)
        initial = 0 if initial is None else initial
        capacity = 0 if capacity is None else capacity
        for name, value in (("initial", initial), ("capacity", capacity)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise DeclarationError(
                    f"{self.spec.schema}: place '{label}' {name} must be an int, got {value!r}"
                )
        if initial < 0 or capacity < 0:
            raise DeclarationError(
                f"{self.spec.schema}: place '{label}' has negative initial/capacity "
                f"({initial}/{capacity})"
            )
        if self.config.validate_capacity and capacity > 0 and initial > capacity:
            raise DeclarationError(
                f"{self.spec.schema}: place '{label}' initial {initial} exceeds capacity {capacity}"
            )

        place = PlaceSpec(
            label,
            offset=len(self.spec.places),
            initial=initial,
            capacity=capacity,
            position=Position.coerce(position),
        )
        self.spec.places[label] = place
        return PlaceRef(self, place)

    def transition(
        self,
        label: str,
        role: Union[RoleSpec, str, None] = None,
        position: Any = None,
    ) -> TransitionRef:
        """Declare a transition; ``role`` may be a RoleSpec or a role label"""
        self._check_label(label)
        if isinstance(role, str):
            role = self.role(role)
        transition = TransitionSpec(label, role=role, position=Position.coerce(position))
        self.spec.transitions[label] = transition
        return TransitionRef(self, transition)

    def role(self, label: str) -> RoleSpec:
        """Return the role named ``label``, declaring it on first use"""
        if label not in self.spec.roles:
            self.spec.roles[label] = RoleSpec(label)
        return self.spec.roles[label]

    def arc(self, source: Any, target: Any, weight: int = 1, inhibit: bool = False) -> ArcSpec:
        """Record an arc after checking both endpoints belong to this net.

        Normal arcs alternate between places and transitions; inhibitor arcs
        always run from a place to a transition.
        """
        source, target = _unwrap(source), _unwrap(target)

        if not is_valid_weight(weight):
            raise InvalidArcError(f"arc weight must be a positive int, got {weight!r}")

        if self.spec.has_place(source):
            if not self.spec.has_transition(target):
                raise InvalidArcError(
                    f"{self.spec.schema}: target of '{source.label}' must be a transition, got {target!r}"
                )
        elif self.spec.has_transition(source):
            if inhibit:
                raise InvalidArcError(
                    f"{self.spec.schema}: inhibitor arcs must start at a place, got '{source.label}'"
                )
            if not self.spec.has_place(target):
                raise InvalidArcError(
                    f"{self.spec.schema}: target of '{source.label}' must be a place, got {target!r}"
                )
        else:
            raise InvalidArcError(f"{self.spec.schema}: unknown arc source {source!r}")

        arc_spec = ArcSpec(source, target, weight, inhibit)
        self.spec.arcs.append(arc_spec)
        return arc_spec

    def build(self) -> NetSpec:
        """Index the recorded arcs and return the finished spec"""
        if not index(self.spec):
            raise IndexingError(f"{self.spec.schema}: invalid declaration")
        return self.spec


def build_net(
    declaration: Callable[[NetBuilder], Any],
    schema: str,
    type: Union[NetType, str] = NetType.PETRI_NET,
    config: Optional[PflowConfig] = None,
) -> NetSpec:
    """Run a declaration function against a fresh builder and build the net"""
    builder = NetBuilder(schema, type, config)
    declaration(builder)
    spec = builder.build()
    logger.debug("[build] %s (%s) built", spec.schema, spec.type.value)
    return spec


class PetriNetDSL:
    """Module-level API for net definition"""

    @staticmethod
    def net(
        func: Optional[Callable] = None,
        *,
        schema: Optional[str] = None,
        type: Union[NetType, str] = NetType.PETRI_NET,
        config: Optional[PflowConfig] = None,
    ) -> Callable:
        """
        Decorator for defining a net.

        The decorated function receives a NetBuilder as its parameter. The
        schema defaults to the function name. Usable bare (``@pn.net``) or
        with options (``@pn.net(type=NetType.WORKFLOW)``).
        """
        def decorate(f: Callable) -> Callable:
            spec = build_net(f, schema or f.__name__, type, config)
            f._spec = spec
            f.to_mermaid = spec.to_mermaid
            return f

        if func is None:
            return decorate
        return decorate(func)


pn = PetriNetDSL()
