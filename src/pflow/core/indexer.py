#!/usr/bin/env python3
"""
pflow - Indexer

Compiles a NetSpec's arc list into per-transition delta vectors (normal arcs)
and guards (inhibitor arcs). Malformed arcs are all reported before the
result is returned; a net whose index fails must not be used for firing.
"""

import logging

from .specs import NetSpec, GuardSpec, is_valid_weight

logger = logging.getLogger(__name__)


def _is_valid_guard(spec: NetSpec, key: str, guard: GuardSpec) -> bool:
    """A single negative entry at the inhibiting place's offset, zero elsewhere"""
    place = spec.places.get(guard.label)
    if key != guard.label or place is None or len(guard.delta) != len(spec.places):
        return False
    return all(
        (v < 0) if i == place.offset else (v == 0)
        for i, v in enumerate(guard.delta)
    )


def _index_precomputed(spec: NetSpec) -> bool:
    """Nets loaded from deltas have no arcs; check the vectors they carry"""
    size = len(spec.places)
    ok = True
    for t in spec.transitions.values():
        if len(t.delta) != size:
            logger.warning(
                "[index] %s: delta of %s has %d entries, expected %d",
                spec.schema, t.label, len(t.delta), size,
            )
            ok = False
        for key, g in t.guards.items():
            if not _is_valid_guard(spec, key, g):
                logger.warning("[index] %s: bad guard %s on %s", spec.schema, key, t.label)
                ok = False
    return ok


def index(spec: NetSpec) -> bool:
    """Compile arcs into deltas and guards.

    Re-running resets and recomputes every delta and guard from the current
    arc list. Sets ``spec.indexed`` to the returned value.
    """
    if not spec.arcs_reconstructed:
        ok = _index_precomputed(spec)
        spec.indexed = ok
        return ok

    for transition in spec.transitions.values():
        transition.delta = spec.empty_vector()
        transition.guards = {}

    ok = True
    for i, arc in enumerate(spec.arcs):
        source, target = arc.source, arc.target

        if not is_valid_weight(arc.weight):
            logger.warning("[index] %s: arc #%d has invalid weight %r", spec.schema, i, arc.weight)
            ok = False
        elif arc.inhibit and spec.has_place(source) and spec.has_transition(target):
            delta = spec.empty_vector()
            delta[source.offset] = -arc.weight
            target.guards[source.label] = GuardSpec(source.label, delta)
        elif not arc.inhibit and spec.has_transition(source) and spec.has_place(target):
            source.delta[target.offset] = arc.weight
        elif not arc.inhibit and spec.has_place(source) and spec.has_transition(target):
            target.delta[source.offset] = -arc.weight
        else:
            logger.warning(
                "[index] %s: arc #%d is malformed (%r -> %r, inhibit=%s)",
                spec.schema, i, source, target, arc.inhibit,
            )
            ok = False

    spec.indexed = ok
    logger.debug(
        "[index] %s: places=%d transitions=%d arcs=%d ok=%s",
        spec.schema, len(spec.places), len(spec.transitions), len(spec.arcs), ok,
    )
    return ok
