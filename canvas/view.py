"""
canvas/view.py

QGraphicsView with wheel zoom and image file drag & drop.
"""

from __future__ import annotations

from typing import Callable, Optional

from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import PlanScene
from settings import get_settings

# File types that can be imported as a box
IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg")


class PlanView(QGraphicsView):
    """
    Graphics view for the situation plan.

    Zooming is owned by the situation plan view; the wheel only reports the
    requested factor through ``on_wheel_zoom``.
    """

    def __init__(self, scene: PlanScene, on_drop_file_cb: Optional[Callable[[str], None]] = None, parent=None):
        super().__init__(scene, parent)
        self.setAcceptDrops(True)
        self.on_drop_file_cb = on_drop_file_cb
        self.on_wheel_zoom: Optional[Callable[[float], None]] = None
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)

    def wheelEvent(self, event):
        """Zoom with mouse wheel."""
        if self.on_wheel_zoom is None:
            super().wheelEvent(event)
            return
        delta = event.angleDelta().y()
        # Zoom factor from settings. Default: 1.15 (15% per scroll step)
        zoom_factor = get_settings().settings.canvas.zoom.wheel_factor
        self.on_wheel_zoom(zoom_factor if delta > 0 else 1 / zoom_factor)
        event.accept()

    def dragEnterEvent(self, event):
        """Accept image file drops."""
        if self.on_drop_file_cb is not None and event.mimeData().hasUrls():
            for u in event.mimeData().urls():
                if u.toLocalFile().lower().endswith(IMAGE_SUFFIXES):
                    event.acceptProposedAction()
                    return
        event.ignore()

    def dragMoveEvent(self, event):
        event.acceptProposedAction()

    def dropEvent(self, event):
        """Import the first dropped image file."""
        if self.on_drop_file_cb is not None and event.mimeData().hasUrls():
            for u in event.mimeData().urls():
                path = u.toLocalFile()
                if path.lower().endswith(IMAGE_SUFFIXES):
                    self.on_drop_file_cb(path)
                    event.acceptProposedAction()
                    return
        event.ignore()
