"""
Cymatics - Field Visualizer
Coarse node/antinode overlay for the "See Force" toggle. Purely visual:
the particle system evaluates the field continuously and never reads this grid.
"""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import FieldMode
from field_function import evaluate_array

NODE_THRESHOLD = 0.1
NODE_RGBA = (16, 185, 129, 0.3)        # Emerald, fixed alpha
ANTINODE_RGB = (239, 68, 68)           # Red, alpha scales with intensity
ANTINODE_ALPHA_GAIN = 0.2
ANTINODE_ALPHA_MAX = 0.5


@dataclass
class FieldOverlay:
    """Classified overlay grid. Arrays are indexed [row=y, column=x]."""
    mode: FieldMode
    freq_n: float
    freq_m: float
    grid_resolution: int
    intensity: np.ndarray
    node_mask: np.ndarray
    alpha: np.ndarray

    def to_rgba(self) -> np.ndarray:
        """Return a (res, res, 4) uint8 RGBA image of the overlay."""
        res = self.grid_resolution
        rgba = np.empty((res, res, 4), dtype=np.uint8)
        rgba[..., 0] = np.where(self.node_mask, NODE_RGBA[0], ANTINODE_RGB[0])
        rgba[..., 1] = np.where(self.node_mask, NODE_RGBA[1], ANTINODE_RGB[1])
        rgba[..., 2] = np.where(self.node_mask, NODE_RGBA[2], ANTINODE_RGB[2])
        rgba[..., 3] = np.round(self.alpha * 255).astype(np.uint8)
        return rgba


def cell_centers(grid_resolution: int) -> np.ndarray:
    """Normalized [0, 1] coordinates of the cell centers along one axis."""
    return (np.arange(grid_resolution) + 0.5) / grid_resolution


def render_overlay(mode: FieldMode, freq_n: float, freq_m: float,
                   grid_resolution: int = 100) -> FieldOverlay:
    """Sample the field at every cell center and classify node vs antinode."""
    res = max(1, int(grid_resolution))
    centers = cell_centers(res) * 2 - 1
    nx, ny = np.meshgrid(centers, centers)

    intensity = np.abs(evaluate_array(mode, nx, ny, freq_n, freq_m))
    intensity = np.nan_to_num(intensity, nan=0.0, posinf=0.0, neginf=0.0)
    node_mask = intensity < NODE_THRESHOLD
    alpha = np.where(
        node_mask,
        NODE_RGBA[3],
        np.minimum(intensity * ANTINODE_ALPHA_GAIN, ANTINODE_ALPHA_MAX),
    )
    return FieldOverlay(
        mode=mode,
        freq_n=freq_n,
        freq_m=freq_m,
        grid_resolution=res,
        intensity=intensity,
        node_mask=node_mask,
        alpha=alpha,
    )


class FieldVisualizer:
    """Caches the last overlay and recomputes only when its inputs change."""

    def __init__(self, grid_resolution: int = 100):
        self.grid_resolution = grid_resolution
        self._key: Optional[tuple] = None
        self._overlay: Optional[FieldOverlay] = None
        self._rgba: Optional[np.ndarray] = None
        self.recompute_count = 0

    def overlay(self, mode: FieldMode, freq_n: float, freq_m: float) -> FieldOverlay:
        key = (mode, freq_n, freq_m, self.grid_resolution)
        if self._overlay is None or key != self._key:
            self._overlay = render_overlay(mode, freq_n, freq_m, self.grid_resolution)
            self._rgba = None
            self._key = key
            self.recompute_count += 1
        return self._overlay

    def overlay_rgba(self, mode: FieldMode, freq_n: float, freq_m: float) -> np.ndarray:
        overlay = self.overlay(mode, freq_n, freq_m)
        if self._rgba is None:
            self._rgba = overlay.to_rgba()
        return self._rgba
