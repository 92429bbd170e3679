"""Smoothed event-rate estimate shared by the pipeline and the engine."""

from __future__ import annotations

import time
from collections.abc import Callable


class RateMeter:
    """Exponential moving average of events per second.

    The first `tick()` only records a timestamp; every later tick folds the
    instantaneous rate into the average with weight `alpha`.
    """

    def __init__(self, alpha: float = 0.1, clock: Callable[[], float] = time.perf_counter) -> None:
        if not 0.0 < alpha <= 1.0:
            raise ValueError("alpha must be in (0, 1]")
        self.alpha = float(alpha)
        self._clock = clock
        self._last: float | None = None
        self._rate = 0.0

    @property
    def rate(self) -> float:
        return self._rate

    def tick(self) -> float:
        now = self._clock()
        if self._last is not None:
            dt = now - self._last
            if dt > 0:
                instant = 1.0 / dt
                self._rate = instant if self._rate == 0.0 else self._rate + self.alpha * (instant - self._rate)
        self._last = now
        return self._rate

    def reset(self) -> None:
        self._last = None
        self._rate = 0.0
