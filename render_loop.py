"""
Cymatics - Render Loop
Per-frame orchestration: background -> optional field overlay -> particles.

The loop draws onto any object implementing the surface protocol:
    width, height                          pixel size of the drawable
    fill(color)                            clear the whole surface
    fill_rect(x, y, w, h, color)
    draw_image(rgba, x, y, w, h)           (rows, cols, 4) uint8, scaled into the rect
    draw_points(xs, ys, size, color)       square points at pixel coordinates
Qt lives in plate_canvas.py; this module stays importable without a display.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from config import RenderConfig, SimulationParams
from field_visualizer import FieldVisualizer
from logging_utils import log_event
from particle_system import ParticleSystem


@dataclass(frozen=True)
class PlateGeometry:
    """Centered square plate inside the surface."""
    offset_x: float
    offset_y: float
    scale: float


def plate_geometry(width: float, height: float) -> PlateGeometry:
    scale = min(width, height)
    return PlateGeometry(
        offset_x=(width - scale) / 2,
        offset_y=(height - scale) / 2,
        scale=scale,
    )


class RenderLoop:
    def __init__(self, particles: Optional[ParticleSystem] = None,
                 visualizer: Optional[FieldVisualizer] = None,
                 render_config: Optional[RenderConfig] = None,
                 clock: Callable[[], float] = time.perf_counter):
        self.config = render_config if render_config is not None else RenderConfig()
        self.particles = particles if particles is not None else ParticleSystem(0)
        self.visualizer = visualizer if visualizer is not None else FieldVisualizer(self.config.field_resolution)
        self.clock = clock
        self.surface_size: Optional[tuple[int, int]] = None
        self.running = True
        self._reset_frame_stats()

    def _reset_frame_stats(self) -> None:
        self._last_frame_time: Optional[float] = None
        self._started_at = self.clock()
        self._frame_count = 0
        self._skipped_frames = 0
        self._frame_dt_sum = 0.0
        self._frame_dt_min: Optional[float] = None
        self._frame_dt_max: Optional[float] = None
        self._respawn_sum = 0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def skipped_frames(self) -> int:
        return self._skipped_frames

    def notify_resize(self, width: int, height: int) -> None:
        """Record a new surface size; picked up by the next frame."""
        self.surface_size = (int(width), int(height))
        log_event("DEBUG", "Render", "Surface resized", width=width, height=height)

    def sync_particles(self, params: SimulationParams) -> bool:
        """Reallocate the particle collection when particle_count changed."""
        if self.particles.resize(params.particle_count):
            log_event("INFO", "Render", "Particles reallocated", count=self.particles.count)
            return True
        return False

    def _record_frame_time(self) -> None:
        now = self.clock()
        if self._last_frame_time is not None:
            dt = max(0.0, now - self._last_frame_time)
            self._frame_dt_sum += dt
            if self._frame_dt_min is None or dt < self._frame_dt_min:
                self._frame_dt_min = dt
            if self._frame_dt_max is None or dt > self._frame_dt_max:
                self._frame_dt_max = dt
        self._last_frame_time = now

    def render_frame(self, surface, params: SimulationParams, show_field: bool) -> bool:
        """Draw one frame. Returns False when the frame was skipped."""
        if not self.running:
            return False
        if surface is None:
            self._skipped_frames += 1
            return False
        width, height = surface.width, surface.height
        if width <= 0 or height <= 0:
            self._skipped_frames += 1
            return False
        if self.surface_size != (width, height):
            self.notify_resize(width, height)

        self._record_frame_time()
        geometry = plate_geometry(width, height)
        cfg = self.config

        # 1. Background and plate
        surface.fill(cfg.background_color)
        surface.fill_rect(geometry.offset_x, geometry.offset_y,
                          geometry.scale, geometry.scale, cfg.plate_color)

        # 2. Field overlay
        if show_field:
            rgba = self.visualizer.overlay_rgba(params.mode, params.frequency_n, params.frequency_m)
            surface.draw_image(rgba, geometry.offset_x, geometry.offset_y,
                               geometry.scale, geometry.scale)

        # 3. Particle physics and drawing
        self.sync_particles(params)
        self._respawn_sum += self.particles.step(params)
        screen_x = geometry.offset_x + self.particles.x * geometry.scale
        screen_y = geometry.offset_y + self.particles.y * geometry.scale
        surface.draw_points(screen_x, screen_y, cfg.particle_size, cfg.particle_color)

        self._frame_count += 1
        return True

    def stop(self) -> None:
        """Stop rendering and log a frame timing summary."""
        self.running = False
        self._log_shutdown_summary()

    def _log_shutdown_summary(self) -> None:
        if self._frame_count <= 0:
            return

        elapsed_s = max(0.0, self.clock() - self._started_at)
        intervals = max(1, self._frame_count - 1)
        dt_mean = self._frame_dt_sum / intervals
        dt_min = float(self._frame_dt_min or 0.0)
        dt_max = float(self._frame_dt_max or 0.0)
        fps = (1.0 / dt_mean) if dt_mean > 0 else 0.0

        log_event(
            "INFO",
            "Render",
            "Shutdown frame summary",
            frames=self._frame_count,
            skipped=self._skipped_frames,
            seconds=f"{elapsed_s:.1f}",
            fps_mean=f"{fps:.1f}",
            dt_min_ms=f"{dt_min * 1000:.1f}",
            dt_max_ms=f"{dt_max * 1000:.1f}",
            respawns=self._respawn_sum,
        )
