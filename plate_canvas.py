"""
Cymatics - Plate Canvas
Qt drawable surface for the render loop, plus the widget that hosts it.
"""

import math
from typing import Optional

import numpy as np
import pyqtgraph as pg
pg.setConfigOptions(antialias=False, useOpenGL=False)  # Disable for compatibility
from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter
from PyQt6.QtWidgets import QSizePolicy, QWidget

from logging_utils import log_event
from parameter_store import ParameterStore
from render_loop import RenderLoop


def _rgba_to_bgra(rgba: np.ndarray) -> np.ndarray:
    # pyqtgraph's makeQImage expects (b, g, r, a) channel order
    return np.ascontiguousarray(rgba[..., [2, 1, 0, 3]])


class QtPainterSurface:
    """Adapts a QPainter to the render loop's surface protocol.

    One surface lives as long as its canvas; attach() hands it the painter for
    the current paint event so the point layer buffer is reused across frames.
    """

    def __init__(self, painter: Optional[QPainter] = None, width: int = 0, height: int = 0):
        self.painter = painter
        self.width = width
        self.height = height
        self._point_layer: Optional[np.ndarray] = None

    def attach(self, painter: Optional[QPainter], width: int, height: int) -> None:
        self.painter = painter
        self.width = width
        self.height = height

    def fill(self, color) -> None:
        self.painter.fillRect(0, 0, self.width, self.height, QColor(color))

    def fill_rect(self, x, y, w, h, color) -> None:
        self.painter.fillRect(QRectF(x, y, w, h), QColor(color))

    def draw_image(self, rgba: np.ndarray, x, y, w, h) -> None:
        image = pg.functions.makeQImage(_rgba_to_bgra(rgba), transpose=False)
        self.painter.drawImage(QRectF(x, y, w, h), image)

    def draw_points(self, xs: np.ndarray, ys: np.ndarray, size: float, color) -> None:
        """Rasterize all points into one transparent layer and blit it."""
        if self._point_layer is None or self._point_layer.shape[:2] != (self.height, self.width):
            self._point_layer = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        layer = self._point_layer
        layer[...] = 0

        qcolor = QColor(color)
        bgra = (qcolor.blue(), qcolor.green(), qcolor.red(), qcolor.alpha())
        span = max(1, int(math.ceil(size)))
        ix = np.clip(xs.astype(np.intp), 0, self.width - 1)
        iy = np.clip(ys.astype(np.intp), 0, self.height - 1)
        for oy in range(span):
            for ox in range(span):
                layer[np.minimum(iy + oy, self.height - 1),
                      np.minimum(ix + ox, self.width - 1)] = bgra

        image = pg.functions.makeQImage(layer, transpose=False)
        self.painter.drawImage(0, 0, image)


class PlateCanvas(QWidget):
    """Widget that runs one render-loop frame per repaint."""

    def __init__(self, store: ParameterStore, render_loop: RenderLoop, parent=None):
        super().__init__(parent)
        self.store = store
        self.render_loop = render_loop
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMinimumSize(200, 200)
        self.setAttribute(Qt.WidgetAttribute.WA_OpaquePaintEvent)
        self._title_font = QFont()
        self._title_font.setPointSize(28)
        self._title_font.setBold(True)
        self._surface = QtPainterSurface()

    def resizeEvent(self, event):
        self.render_loop.notify_resize(self.width(), self.height())
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        if not painter.isActive():
            # Paint device unavailable; try again on the next timer tick
            return
        try:
            surface = self._surface
            surface.attach(painter, self.width(), self.height())
            snapshot = self.store.snapshot()
            if self.render_loop.render_frame(surface, snapshot.params, snapshot.flags.show_field):
                painter.setFont(self._title_font)
                painter.setPen(QColor(255, 255, 255, 77))
                painter.drawText(16, 48, "CYMATICS")
        except Exception as e:
            log_event("ERROR", "Render", "Frame failed", error=e)
        finally:
            self._surface.painter = None
            painter.end()
