"""
Cymatics - Field Function
Closed-form standing-wave displacement for the square plate and the
dual-source interference modes.

Coordinates are plate-centered: nx, ny in [-1, 1] with nx = 2x - 1.
"""

import math

import numpy as np

from config import FieldMode

# Point sources for the interference mode (plate-centered coordinates)
SOURCE_LEFT = (-0.5, 0.0)
SOURCE_RIGHT = (0.5, 0.0)
# Spatial wavenumber scale applied to frequency_m in interference mode
WAVENUMBER_SCALE = 10.0


def to_plate_coords(value):
    """Map normalized [0, 1] coordinates to plate-centered [-1, 1]."""
    return value * 2 - 1


def evaluate(mode: FieldMode, nx: float, ny: float, freq_n: float, freq_m: float) -> float:
    """Displacement of the plate at one plate-centered point."""
    if mode == FieldMode.CHLADNI:
        n_pi = freq_n * math.pi
        m_pi = freq_m * math.pi
        return (math.cos(n_pi * nx) * math.cos(m_pi * ny)
                - math.cos(m_pi * nx) * math.cos(n_pi * ny))

    if mode == FieldMode.INTERFERENCE:
        d1 = math.sqrt((nx - SOURCE_LEFT[0]) ** 2 + (ny - SOURCE_LEFT[1]) ** 2)
        d2 = math.sqrt((nx - SOURCE_RIGHT[0]) ** 2 + (ny - SOURCE_RIGHT[1]) ** 2)
        k = freq_m * WAVENUMBER_SCALE
        # freq_n is a phase offset between the sources here, not a mode index
        return math.sin(d1 * k) + math.sin(d2 * k + freq_n)

    raise ValueError(f"Unknown field mode: {mode!r}")


def evaluate_array(mode: FieldMode, nx: np.ndarray, ny: np.ndarray,
                   freq_n: float, freq_m: float) -> np.ndarray:
    """Vectorized evaluate() over arrays of plate-centered coordinates."""
    if mode == FieldMode.CHLADNI:
        n_pi = freq_n * math.pi
        m_pi = freq_m * math.pi
        return (np.cos(n_pi * nx) * np.cos(m_pi * ny)
                - np.cos(m_pi * nx) * np.cos(n_pi * ny))

    if mode == FieldMode.INTERFERENCE:
        d1 = np.sqrt((nx - SOURCE_LEFT[0]) ** 2 + (ny - SOURCE_LEFT[1]) ** 2)
        d2 = np.sqrt((nx - SOURCE_RIGHT[0]) ** 2 + (ny - SOURCE_RIGHT[1]) ** 2)
        k = freq_m * WAVENUMBER_SCALE
        return np.sin(d1 * k) + np.sin(d2 * k + freq_n)

    raise ValueError(f"Unknown field mode: {mode!r}")
