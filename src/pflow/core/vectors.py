#!/usr/bin/env python3
"""
pflow - Vector Algebra

Integer-vector addition with underflow and capacity checks. Markings,
deltas, guards and capacities are all lists of ints indexed by place offset.
"""

from typing import List, NamedTuple, Sequence


class VectorResult(NamedTuple):
    """Outcome of vector_add; ``result`` is kept even when ``ok`` is False"""
    result: List[int]
    ok: bool


def vector_add(
    state: Sequence[int],
    delta: Sequence[int],
    multiplier: int,
    capacity: Sequence[int],
) -> VectorResult:
    """Compute ``state + delta * multiplier`` and check it against bounds.

    ``ok`` is False when any entry is negative (underflow) or exceeds a
    non-zero capacity (overflow). A capacity of 0 means unbounded.
    """
    if not (len(state) == len(delta) == len(capacity)):
        raise ValueError(
            f"vector length mismatch: state={len(state)} delta={len(delta)} capacity={len(capacity)}"
        )

    result: List[int] = []
    ok = True
    for value, change, cap in zip(state, delta, capacity):
        out = value + change * multiplier
        if out < 0:
            ok = False  # underflow
        elif cap > 0 and out > cap:
            ok = False  # overflow
        result.append(out)
    return VectorResult(result, ok)
