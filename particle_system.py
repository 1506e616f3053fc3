"""
Cymatics - Particle System
Sand particles on the plate. Each step shakes every particle by a random
amount proportional to the local field magnitude, so sand drains away from
antinodes and collects on the nodal lines.
"""

from typing import Optional

import numpy as np

from config import SimulationParams
from field_function import evaluate_array

# Max displacement per frame at 100% amplitude, as a fraction of plate width
MAX_MOVE = 0.02


def vibration_strength(amplitude: float) -> float:
    """Quadratic amplitude response: 100% -> MAX_MOVE, 0% -> 0."""
    try:
        amp = float(amplitude)
    except (TypeError, ValueError):
        return 0.0
    if not np.isfinite(amp):
        return 0.0
    normalized = max(0.0, min(100.0, amp)) / 100.0
    return normalized * normalized * MAX_MOVE


class ParticleSystem:
    """Fixed-size particle collection stored as parallel numpy arrays.

    x, y are normalized plate coordinates in [0, 1]. vx, vy are allocated for
    forward compatibility but the displacement model is memoryless and never
    integrates them.
    """

    def __init__(self, count: int = 0, rng: Optional[np.random.Generator] = None):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.x = np.empty(0)
        self.y = np.empty(0)
        self.vx = np.empty(0)
        self.vy = np.empty(0)
        self.total_respawns = 0
        self._allocate(max(0, int(count)))

    def __len__(self) -> int:
        return int(self.x.shape[0])

    @property
    def count(self) -> int:
        return len(self)

    def _allocate(self, count: int) -> None:
        self.x = self.rng.random(count)
        self.y = self.rng.random(count)
        self.vx = np.zeros(count)
        self.vy = np.zeros(count)
        # Scratch buffers reused every step
        self._nx = np.empty(count)
        self._ny = np.empty(count)
        self._shake = np.empty(count)
        self._jitter = np.empty(count)
        self._outside = np.empty(count, dtype=bool)

    def resize(self, count: int) -> bool:
        """Replace the collection with `count` fresh uniform-random particles.
        Returns False when the size is already correct."""
        count = max(0, int(count))
        if count == len(self):
            return False
        self._allocate(count)
        return True

    def step(self, params: SimulationParams) -> int:
        """Advance one frame. Returns how many particles were respawned."""
        count = len(self)
        if count == 0:
            return 0

        strength = vibration_strength(params.amplitude)

        np.multiply(self.x, 2, out=self._nx)
        self._nx -= 1
        np.multiply(self.y, 2, out=self._ny)
        self._ny -= 1

        value = evaluate_array(params.mode, self._nx, self._ny,
                               params.frequency_n, params.frequency_m)
        np.abs(value, out=self._shake)
        self._shake *= strength
        # Out-of-range frequencies must never poison positions
        np.nan_to_num(self._shake, copy=False, nan=0.0, posinf=0.0, neginf=0.0)

        self.rng.random(out=self._jitter)
        self._jitter -= 0.5
        self._jitter *= self._shake
        self.x += self._jitter

        self.rng.random(out=self._jitter)
        self._jitter -= 0.5
        self._jitter *= self._shake
        self.y += self._jitter

        return self._respawn_escaped()

    def _respawn_escaped(self) -> int:
        # Written as "not inside" so NaN coordinates also count as escaped
        inside = (self.x >= 0.0) & (self.x <= 1.0) & (self.y >= 0.0) & (self.y <= 1.0)
        np.logical_not(inside, out=self._outside)
        escaped = int(np.count_nonzero(self._outside))
        if escaped:
            self.x[self._outside] = self.rng.random(escaped)
            self.y[self._outside] = self.rng.random(escaped)
            self.total_respawns += escaped
        return escaped
