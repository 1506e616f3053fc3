"""
Cymatics - Auto Driver
Slow autonomous sweep through frequency space.

frequency_n swings 1 -> 20 -> 1 once per 2*pi of scaled time while
frequency_m drifts upward as a sawtooth across the same range.
"""

import math
import time
from typing import Callable, Optional, Tuple

FREQ_MIN = 1.0
FREQ_MAX = 20.0
N_CENTER = 10.5
N_SWING = 9.5
M_SPAN = 19.0
DEFAULT_BASE_SPEED = 0.2


def _clamp_frequency(value: float) -> float:
    return max(FREQ_MIN, min(FREQ_MAX, value))


def sweep_frequency_n(t: float) -> float:
    return _clamp_frequency(N_CENTER - N_SWING * math.cos(t))


def sweep_frequency_m(t: float) -> float:
    return _clamp_frequency(1.0 + (t / (2.0 * math.pi)) % M_SPAN)


class AutoDriver:
    """Accumulates scaled elapsed time from a monotonic clock.

    Only deltas between ticks are accumulated, so the sweep rate does not
    depend on how often tick() is called, and time spent disabled is skipped.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter,
                 base_speed: float = DEFAULT_BASE_SPEED):
        self.clock = clock
        self.base_speed = base_speed
        self.elapsed = 0.0                # Scaled time accumulator
        self.enabled = False
        self._last_time: Optional[float] = None

    def enable(self) -> None:
        if self.enabled:
            return
        self.enabled = True
        self._last_time = self.clock()

    def disable(self) -> None:
        self.enabled = False
        self._last_time = None

    def set_enabled(self, enabled: bool) -> None:
        if enabled:
            self.enable()
        else:
            self.disable()

    def current(self) -> Tuple[float, float]:
        """(frequency_n, frequency_m) at the current accumulated time."""
        return sweep_frequency_n(self.elapsed), sweep_frequency_m(self.elapsed)

    def tick(self) -> Optional[Tuple[float, float]]:
        """Advance by the real time since the last tick. None while disabled."""
        if not self.enabled:
            return None
        now = self.clock()
        if self._last_time is not None:
            self.elapsed += max(0.0, now - self._last_time) * self.base_speed
        self._last_time = now
        return self.current()
