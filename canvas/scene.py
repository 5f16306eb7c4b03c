"""
canvas/scene.py

QGraphicsScene the situation plan is drawn into.
"""

from __future__ import annotations

from typing import Optional, Tuple

from PyQt6.QtCore import QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QPen, QTransform
from PyQt6.QtWidgets import QGraphicsRectItem, QGraphicsScene

from canvas.events import MOUSE_DOWN, InputEvent
from canvas.items import BoxItem, LabelItem
from canvas.mixins import RenderTreeMixin, VisualNodeMixin
from settings import AppSettings, get_settings


class PlanScene(QGraphicsScene, RenderTreeMixin):
    """
    Scene holding the paper, the boxes and their labels.

    A press that no box accepts is dispatched on ``surface`` so the view can
    clear the selection.
    """

    def __init__(self, settings: Optional[AppSettings] = None, parent=None):
        QGraphicsScene.__init__(self, parent)
        RenderTreeMixin.__init__(self)
        self.settings = settings if settings is not None else get_settings().settings

        paper = self.settings.paper
        self._paper_item = QGraphicsRectItem(QRectF(0, 0, paper.width, paper.height))
        self._paper_item.setBrush(QBrush(QColor(Qt.GlobalColor.white)))
        self._paper_item.setPen(QPen(QColor("#999999"), 0))
        self._paper_item.setZValue(-1e9)
        self._paper_item.setAcceptedMouseButtons(Qt.MouseButton.NoButton)
        self.addItem(self._paper_item)
        self.setSceneRect(QRectF(0, 0, paper.width, paper.height))

    # ---- node factory ----

    def create_box(self, element_id: str) -> BoxItem:
        selection = self.settings.canvas.selection
        return BoxItem(element_id, selection.padding, selection.outline_color)

    def create_label(self, element_id: str) -> LabelItem:
        labels = self.settings.labels
        return LabelItem(element_id, labels.font_family, labels.default_font_size)

    def _attach_node(self, node: VisualNodeMixin) -> None:
        self.addItem(node)

    def remove(self, node: VisualNodeMixin) -> None:
        if node.scene() is self:
            self.removeItem(node)

    # ---- zoom and sizes ----

    def set_zoom(self, factor: float) -> None:
        for view in self.views():
            view.setTransform(QTransform.fromScale(factor, factor))

    def viewport_size(self) -> Tuple[float, float]:
        views = self.views()
        if not views:
            return self.paper_size()
        viewport = views[0].viewport()
        return float(viewport.width()), float(viewport.height())

    def paper_size(self) -> Tuple[float, float]:
        return float(self.settings.paper.width), float(self.settings.paper.height)

    # ---- input ----

    def mousePressEvent(self, event):
        super().mousePressEvent(event)
        if not event.isAccepted():
            pos = event.screenPos()
            self.surface.dispatch(InputEvent(MOUSE_DOWN, float(pos.x()), float(pos.y())))
