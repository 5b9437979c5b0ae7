#!/usr/bin/env python3
"""
pflow.core - place/transition net marking and firing engine

Public API for declaring nets, indexing them and firing transitions.
"""

from .specs import (
    NetType,
    Position,
    RoleSpec,
    PlaceSpec,
    GuardSpec,
    TransitionSpec,
    ArcSpec,
    NetSpec,
)

from .vectors import VectorResult, vector_add

from .indexer import index

from .builder import (
    NetBuilder,
    PlaceRef,
    TransitionRef,
    PetriNetDSL,
    build_net,
    pn,
)

from .runtime import FireResult, NetRuntime

from .stream import (
    DispatchEvent,
    DispatchResult,
    HistoryEntry,
    ReloadEvent,
    MarkingStream,
)

__all__ = [
    # Specification types
    'NetType',
    'Position',
    'RoleSpec',
    'PlaceSpec',
    'GuardSpec',
    'TransitionSpec',
    'ArcSpec',
    'NetSpec',

    # Vector algebra
    'VectorResult',
    'vector_add',

    # Indexer
    'index',

    # Builder
    'NetBuilder',
    'PlaceRef',
    'TransitionRef',
    'PetriNetDSL',
    'build_net',
    'pn',

    # Runtime
    'FireResult',
    'NetRuntime',

    # Stream
    'DispatchEvent',
    'DispatchResult',
    'HistoryEntry',
    'ReloadEvent',
    'MarkingStream',
]
