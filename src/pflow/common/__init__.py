from .timebase import Timebase, WallClock, MonotonicClock, CycleClock

__all__ = ["Timebase", "WallClock", "MonotonicClock", "CycleClock"]
