#!/usr/bin/env python3
"""
pflow - Runtime Layer

Firing engine for an indexed net. Each call is a pure test phase followed by
an optional commit that overwrites the caller's marking in place. Firing
rejections are returned as results, never raised; only programmer errors
(unknown actions, bad multipliers, unindexed nets) raise.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..config import PflowConfig, resolve_config
from ..exceptions import InvalidMultiplierError, NotIndexedError, UnknownTransitionError
from .specs import NetSpec, NetType, Node, RoleSpec, TransitionSpec
from .vectors import VectorResult, vector_add

logger = logging.getLogger(__name__)


@dataclass
class FireResult:
    """Outcome of a test or fire; ``result`` is None when a guard blocked"""
    result: Optional[List[int]]
    ok: bool
    role: Optional[RoleSpec] = None


FireCallback = Callable[[FireResult], Any]


def _is_elementary(vector: Sequence[int]) -> bool:
    """At most one marked place, and no place above 1"""
    marked = 0
    for v in vector:
        if v > 1:
            return False
        if v > 0:
            marked += 1
    return marked < 2


class NetRuntime:
    """Runtime execution of a net against caller-owned markings"""

    def __init__(self, spec: NetSpec, config: Optional[PflowConfig] = None):
        if not spec.indexed:
            raise NotIndexedError(f"{spec.schema}: net must be indexed before firing")
        self.spec = spec
        self.config = resolve_config(config)
        self.capacity = spec.capacity_vector()

    @property
    def schema(self) -> str:
        return self.spec.schema

    @property
    def type(self) -> NetType:
        return self.spec.type

    def _transition(self, action: str) -> TransitionSpec:
        if not action:
            raise UnknownTransitionError("action is empty")
        try:
            return self.spec.transitions[action]
        except KeyError:
            raise UnknownTransitionError(f"{self.schema}: action not found: {action}") from None

    @staticmethod
    def _check_multiplier(multiplier: Any):
        if not isinstance(multiplier, int) or isinstance(multiplier, bool) or multiplier < 1:
            raise InvalidMultiplierError(f"multiplier must be a positive int, got {multiplier!r}")

    # ------------------------------------------------------------------
    # Test phase
    # ------------------------------------------------------------------

    def vector_add(self, state: Sequence[int], delta: Sequence[int], multiplier: int = 1) -> VectorResult:
        return vector_add(state, delta, multiplier, self.capacity)

    def guard_check(self, marking: Sequence[int], action: str, multiplier: int = 1) -> bool:
        """True if any inhibitor on ``action`` is currently active"""
        self._check_multiplier(multiplier)
        t = self._transition(action)
        for guard in t.guards.values():
            if self.vector_add(marking, guard.delta, multiplier).ok:
                return True
        return False

    def tx_fails(self, marking: Sequence[int], action: str, multiplier: int = 1) -> FireResult:
        """Check the arithmetic alone, ignoring guards; ``ok`` means it fails"""
        self._check_multiplier(multiplier)
        t = self._transition(action)
        res = self.vector_add(marking, t.delta, multiplier)
        return FireResult(res.result, not res.ok, t.role)

    def test_fire(self, marking: Sequence[int], action: str, multiplier: int = 1) -> FireResult:
        """Evaluate guards then the delta, without touching ``marking``"""
        t = self._transition(action)
        if self.guard_check(marking, action, multiplier):
            return FireResult(None, False, t.role)
        res = self.vector_add(marking, t.delta, multiplier)
        return FireResult(res.result, res.ok, t.role)

    def _apply_mode(self, res: FireResult) -> FireResult:
        if self.spec.type is NetType.STATE_MACHINE:
            if res.ok:
                res.ok = _is_elementary(res.result)
        elif self.spec.type is NetType.WORKFLOW:
            # guard-blocked results carry no vector and stay rejected
            if res.result is not None:
                res.ok = _is_elementary(res.result)
                res.result = [v if v > 0 else 0 for v in res.result]
        return res

    # ------------------------------------------------------------------
    # Commit phase
    # ------------------------------------------------------------------

    def fire(
        self,
        marking: List[int],
        action: str,
        multiplier: int = 1,
        resolve: Optional[FireCallback] = None,
        reject: Optional[FireCallback] = None,
    ) -> FireResult:
        """Fire ``action`` against ``marking``, committing in place on success.

        Exactly one of ``resolve``/``reject`` is called (when given).
        """
        res = self._apply_mode(self.test_fire(marking, action, multiplier))

        if res.ok:
            marking[:] = res.result
            logger.debug("[fire] %s.%s x%d -> %s", self.schema, action, multiplier, res.result)
            if resolve:
                resolve(res)
        else:
            logger.debug("[fire] %s.%s x%d rejected (%s)", self.schema, action, multiplier, res.result)
            if reject:
                reject(res)
        return res

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def empty_vector(self) -> List[int]:
        return self.spec.empty_vector()

    def initial_vector(self) -> List[int]:
        return self.spec.initial_vector()

    def capacity_vector(self) -> List[int]:
        return list(self.capacity)

    def get_node(self, label: str) -> Optional[Node]:
        return self.spec.get_node(label)

    def get_nearby_node(self, x: float, y: float) -> Optional[Node]:
        return self.spec.get_nearby_node(x, y, self.config.proximity_threshold)

    def get_size(self) -> Tuple[float, float]:
        return self.spec.get_size(self.config.size_margin)
