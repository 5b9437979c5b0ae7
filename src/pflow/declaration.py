#!/usr/bin/env python3
"""
pflow - Data-only declarations

Pydantic models describing a net as plain data, and loaders turning them
into NetSpecs. Two shapes are accepted:

- arc form (``load_declaration``): places, transitions and label-based arcs,
  built through the NetBuilder and indexed like any DSL declaration.
- object form (``load_object``): places and transitions carrying
  precomputed deltas and guards. Arcs are not reconstructed, so such a net
  cannot be re-exported to arc form.

Both accept the dict produced by ``NetSpec.to_object()``.

Example:
    ```python
    spec = load_declaration({
        "schema": "counter",
        "places": {"p1": {"initial": 1}, "p2": {}},
        "transitions": {"t": {"role": "default"}},
        "arcs": [
            {"source": "p1", "target": "t"},
            {"source": "t", "target": "p2"},
        ],
    })
    ```
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .config import PflowConfig
from .core.builder import NetBuilder
from .core.indexer import index
from .core.specs import GuardSpec, NetSpec, NetType
from .exceptions import DeclarationError, IndexingError

logger = logging.getLogger(__name__)


# ============================================================================
# Models
# ============================================================================

class PositionModel(BaseModel):
    x: float = 0
    y: float = 0


class PlaceModel(BaseModel):
    label: Optional[str] = None
    initial: int = Field(default=0, ge=0)
    capacity: int = Field(default=0, ge=0)
    position: PositionModel = Field(default_factory=PositionModel)
    offset: Optional[int] = Field(default=None, ge=0)


class GuardModel(BaseModel):
    label: Optional[str] = None
    delta: List[int]


class TransitionModel(BaseModel):
    label: Optional[str] = None
    role: Optional[str] = None
    position: PositionModel = Field(default_factory=PositionModel)
    delta: Optional[List[int]] = None
    guards: Dict[str, GuardModel] = Field(default_factory=dict)


class ArcModel(BaseModel):
    source: str
    target: str
    weight: int = Field(default=1, gt=0)
    inhibit: bool = False


class NetDeclaration(BaseModel):
    """A whole net as data; ``modelType`` is accepted for ``type``"""
    model_config = ConfigDict(populate_by_name=True)

    schema_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("schema", "schema_name")
    )
    type: NetType = Field(
        default=NetType.PETRI_NET, validation_alias=AliasChoices("type", "modelType")
    )
    version: str = "v0"
    places: Dict[str, PlaceModel] = Field(default_factory=dict)
    transitions: Dict[str, TransitionModel] = Field(default_factory=dict)
    arcs: List[ArcModel] = Field(default_factory=list)


# ============================================================================
# Helpers
# ============================================================================

def _parse(data: Union[NetDeclaration, Dict[str, Any], str, bytes]) -> NetDeclaration:
    if isinstance(data, NetDeclaration):
        return data
    try:
        if isinstance(data, (str, bytes)):
            return NetDeclaration.model_validate_json(data)
        return NetDeclaration.model_validate(data)
    except ValidationError as e:
        raise DeclarationError(f"invalid declaration: {e}") from e


def _ordered_places(decl: NetDeclaration) -> List[Tuple[str, PlaceModel]]:
    """Places in offset order; offsets must be all given (and dense) or all absent"""
    items = list(decl.places.items())
    for label, place in items:
        if place.label is not None and place.label != label:
            raise DeclarationError(f"place key '{label}' does not match label '{place.label}'")

    offsets = [place.offset for _, place in items]
    if all(o is None for o in offsets):
        return items
    if any(o is None for o in offsets):
        raise DeclarationError("place offsets must be given for every place or for none")
    if sorted(offsets) != list(range(len(items))):
        raise DeclarationError(f"place offsets must be dense from 0, got {sorted(offsets)}")
    return sorted(items, key=lambda item: item[1].offset)


def _resolve_schema(decl: NetDeclaration, schema: Optional[str]) -> str:
    resolved = schema or decl.schema_name
    if not resolved:
        raise DeclarationError("declaration has no schema")
    return resolved


def _declare_nodes(builder: NetBuilder, decl: NetDeclaration):
    for label, place in _ordered_places(decl):
        builder.place(label, place.initial, place.capacity, place.position.model_dump())
    for label, transition in decl.transitions.items():
        if transition.label is not None and transition.label != label:
            raise DeclarationError(
                f"transition key '{label}' does not match label '{transition.label}'"
            )
        builder.transition(label, transition.role, transition.position.model_dump())


# ============================================================================
# Loaders
# ============================================================================

def load_declaration(
    data: Union[NetDeclaration, Dict[str, Any], str, bytes],
    schema: Optional[str] = None,
    type: Union[NetType, str, None] = None,
    config: Optional[PflowConfig] = None,
) -> NetSpec:
    """Build and index a net from its arc-form data (dict, JSON or model).

    ``schema`` and ``type`` override the values carried by the data.
    """
    decl = _parse(data)
    builder = NetBuilder(_resolve_schema(decl, schema), type or decl.type, config)
    _declare_nodes(builder, decl)

    for arc in decl.arcs:
        source = builder.spec.get_node(arc.source)
        target = builder.spec.get_node(arc.target)
        if source is None or target is None:
            missing = arc.source if source is None else arc.target
            raise DeclarationError(f"{builder.spec.schema}: arc references unknown node '{missing}'")
        builder.arc(source, target, arc.weight, arc.inhibit)

    return builder.build()


def load_object(
    data: Union[NetDeclaration, Dict[str, Any], str, bytes],
    schema: Optional[str] = None,
    type: Union[NetType, str, None] = None,
    config: Optional[PflowConfig] = None,
) -> NetSpec:
    """Load a net whose transitions already carry deltas and guards.

    Any arcs in the data are ignored and the resulting spec is flagged with
    ``arcs_reconstructed = False``.
    """
    decl = _parse(data)
    builder = NetBuilder(_resolve_schema(decl, schema), type or decl.type, config)
    _declare_nodes(builder, decl)
    spec = builder.spec
    spec.arcs_reconstructed = False

    if decl.arcs:
        logger.warning("[load] %s: ignoring %d arcs in object form", spec.schema, len(decl.arcs))

    for label, transition in decl.transitions.items():
        if transition.delta is None:
            raise DeclarationError(f"{spec.schema}: transition '{label}' has no delta")
        t = spec.transitions[label]
        t.delta = list(transition.delta)
        t.guards = {
            place_label: GuardSpec(guard.label or place_label, list(guard.delta))
            for place_label, guard in transition.guards.items()
        }

    if not index(spec):
        raise IndexingError(f"{spec.schema}: precomputed vectors do not match the places")
    return spec


def loads_declaration(text: Union[str, bytes], **kwargs) -> NetSpec:
    """JSON wrapper around load_declaration"""
    return load_declaration(_parse(text), **kwargs)


def dump_declaration(spec: NetSpec, indent: Optional[int] = 2) -> str:
    """Serialize a net to the JSON form read by the loaders"""
    return json.dumps(spec.to_object(), indent=indent)
