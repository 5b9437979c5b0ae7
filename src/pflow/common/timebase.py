from abc import ABC, abstractmethod
from datetime import datetime, timezone
from time import monotonic


class Timebase(ABC):
    """Clock used to stamp marking history entries."""

    @abstractmethod
    def now(self) -> float:
        pass

    def advance(self):
        pass

    def reset(self):
        pass


class WallClock(Timebase):
    def now(self) -> float:
        return datetime.now(timezone.utc).timestamp()


class MonotonicClock(Timebase):
    def now(self) -> float:
        return monotonic()


class CycleClock(Timebase):
    """Manually stepped clock; only moves when advance() is called."""

    def __init__(self, stepsize: float = 1):
        super().__init__()
        self.cycles: float = 0
        self._stepsize = stepsize

    def now(self) -> float:
        return self.cycles

    def advance(self):
        self.cycles += self._stepsize

    def reset(self):
        self.cycles = 0
