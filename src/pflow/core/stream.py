#!/usr/bin/env python3
"""
pflow - Marking Stream

Stateful wrapper around a set of nets: keeps the current marking of each
net, dispatches named actions, records an append-only history and notifies
observers synchronously.

Observers are called as ``handler(stream, result)``. Each slot holds a
single handler; registering again replaces it. Observers must not dispatch
back into the same schema.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import PflowConfig
from ..common.timebase import Timebase, WallClock
from ..exceptions import UnknownSchemaError
from .runtime import FireResult, NetRuntime
from .specs import NetSpec, RoleSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchEvent:
    """Request to fire ``action`` on the net registered as ``schema``"""
    schema: str
    action: str
    multiplier: int = 1


@dataclass
class DispatchResult:
    """Record handed to observers and returned from dispatch"""
    action: str
    multiplier: int
    marking: Optional[List[int]]
    role: Optional[RoleSpec]
    ok: bool


@dataclass(frozen=True)
class ReloadEvent:
    schema: str
    action: str = "reload"


@dataclass(frozen=True)
class HistoryEntry:
    seq: int
    event: DispatchEvent
    marking: Tuple[int, ...]
    ts: float


Handler = Callable[["MarkingStream", Any], Any]


class MarkingStream:
    """Current markings, history and observers for a collection of nets"""

    def __init__(
        self,
        nets: Iterable[Union[NetRuntime, NetSpec]] = (),
        timebase: Optional[Timebase] = None,
        config: Optional[PflowConfig] = None,
    ):
        self.config = config
        self.timebase = timebase or WallClock()
        self.nets: Dict[str, NetRuntime] = {}
        self.markings: Dict[str, List[int]] = {}
        self.seq = 0
        self.history: List[HistoryEntry] = []

        self._handlers: Dict[str, Handler] = {}
        self._on_every: Optional[Handler] = None
        self._on_fail: Optional[Handler] = None
        self._on_reload: Optional[Handler] = None

        for net in nets:
            runtime = self._as_runtime(net)
            self.nets[runtime.schema] = runtime

    def _as_runtime(self, net: Union[NetRuntime, NetSpec]) -> NetRuntime:
        if isinstance(net, NetSpec):
            return NetRuntime(net, self.config)
        return net

    def _net(self, schema: str) -> NetRuntime:
        try:
            return self.nets[schema]
        except KeyError:
            raise UnknownSchemaError(f"model not found: {schema}") from None

    # ------------------------------------------------------------------
    # Observer registration
    # ------------------------------------------------------------------

    def on(self, action: str, handler: Handler):
        self._handlers[action] = handler

    def off(self, action: str):
        self._handlers.pop(action, None)

    def on_every(self, handler: Optional[Handler]):
        self._on_every = handler

    def on_fail(self, handler: Optional[Handler]):
        self._on_fail = handler

    def on_reload(self, handler: Optional[Handler]):
        self._on_reload = handler

    # ------------------------------------------------------------------
    # Net registration and state
    # ------------------------------------------------------------------

    def update(self, net: Union[NetRuntime, NetSpec]):
        """Replace (or add) a net by schema and drop its current marking"""
        runtime = self._as_runtime(net)
        self.nets[runtime.schema] = runtime
        self.markings.pop(runtime.schema, None)
        logger.debug("[stream] replaced net %s", runtime.schema)

    def marking(self, schema: str) -> List[int]:
        """Copy of the current marking, or the initial one if none is held yet"""
        net = self._net(schema)
        current = self.markings.get(schema)
        return list(current) if current is not None else net.initial_vector()

    def reload(self, schema: str):
        if self._on_reload:
            self._on_reload(self, ReloadEvent(schema))

    def restart(self):
        """Reset the sequence, clear history and forget every marking"""
        self.seq = 0
        self.history = []
        self.markings.clear()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        event: Union[DispatchEvent, Mapping[str, Any], str],
        action: Optional[str] = None,
        multiplier: int = 1,
    ) -> DispatchResult:
        """Fire an action and run the observers for its outcome.

        Accepts a DispatchEvent, a mapping with ``schema``/``action``/``multiplier``
        keys, or ``(schema, action, multiplier)``.
        """
        if isinstance(event, Mapping):
            event = DispatchEvent(**event)
        elif isinstance(event, str):
            event = DispatchEvent(event, action, multiplier)
        elif not isinstance(event, DispatchEvent):
            raise TypeError(f"cannot dispatch {type(event).__name__}: {event!r}")

        net = self._net(event.schema)
        state = self.markings.get(event.schema)
        if state is None:
            state = net.initial_vector()

        res: FireResult = net.fire(state, event.action, event.multiplier)

        if not res.ok:
            failed = DispatchResult(event.action, event.multiplier, res.result, res.role, False)
            logger.debug("[dispatch] %s.%s failed", event.schema, event.action)
            if self._on_fail:
                self._on_fail(self, failed)
            return failed

        self.markings[event.schema] = state
        self.history.append(HistoryEntry(self.seq, event, tuple(state), self.timebase.now()))
        self.seq += 1

        result = DispatchResult(event.action, event.multiplier, list(state), res.role, True)
        logger.debug("[dispatch] %s.%s seq=%d -> %s", event.schema, event.action, self.seq - 1, state)

        if self._on_every:
            self._on_every(self, result)
        callback = self._handlers.get(event.action)
        if callback:
            callback(self, result)
        self.reload(event.schema)
        return result
