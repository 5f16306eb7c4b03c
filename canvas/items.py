"""
canvas/items.py

PyQt6 graphics items for boxes and labels of the situation plan.
"""

from __future__ import annotations

from typing import Any, Optional

from PyQt6.QtCore import QByteArray, QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPen, QTransform
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtWidgets import QGraphicsItem, QGraphicsRectItem, QGraphicsSimpleTextItem

from canvas.events import MOUSE_DOWN, MOUSE_MOVE, MOUSE_UP, EventTarget, InputEvent
from canvas.geometry import RotationTransform
from canvas.mixins import HIDDEN, SELECTED, VisualNodeMixin
from debug_trace import trace


def _qt_transform(transform: Optional[RotationTransform], width: float, height: float) -> QTransform:
    """Rotate (and mirror) around the center of a width x height box."""
    if transform is None:
        return QTransform()
    cx, cy = width / 2, height / 2
    t = QTransform()
    t.translate(cx, cy)
    t.rotate(transform.angle)
    t.scale(-1.0 if transform.mirror else 1.0, 1.0)
    t.translate(-cx, -cy)
    return t


class BoxItem(QGraphicsRectItem, VisualNodeMixin, EventTarget):
    """
    Draggable box showing the SVG content of one element.

    The element content is drawn inside the selection padding; the dashed
    selection outline follows the full box.
    """

    NODE_KIND = "box"

    def __init__(self, element_id: str, padding: float = 0.0, outline_color: str = "#0078d7"):
        QGraphicsRectItem.__init__(self, QRectF(0, 0, 0, 0))
        VisualNodeMixin.__init__(self, element_id)
        EventTarget.__init__(self)

        self.padding = padding
        self.outline_color = QColor(outline_color)
        self._renderer = QSvgRenderer()

        self.setPen(QPen(Qt.PenStyle.NoPen))
        self.setAcceptedMouseButtons(Qt.MouseButton.LeftButton)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable, False)

    # ---- toolkit hooks ----

    def _apply_attr(self, name: str, value: Any) -> None:
        if name in ("left", "top"):
            self.setPos(QPointF(float(self.attr("left", 0.0)), float(self.attr("top", 0.0))))
        elif name in ("width", "height"):
            self.setRect(QRectF(0, 0, float(self.attr("width", 0.0)), float(self.attr("height", 0.0))))
            self._update_transform()
        elif name == "transform":
            self._update_transform()
        elif name == "z":
            self.setZValue(float(value))

    def _apply_class(self, name: str, present: bool) -> None:
        if name == HIDDEN:
            self.setVisible(not present)
        elif name == SELECTED:
            self.update()

    def _apply_content(self, markup: Optional[str]) -> None:
        if markup:
            self._renderer.load(QByteArray(markup.encode("utf-8")))
        else:
            self._renderer.load(QByteArray())
        self.update()

    def _update_transform(self) -> None:
        r = self.rect()
        self.setTransform(_qt_transform(self.attr("transform"), r.width(), r.height()))

    # ---- painting ----

    def paint(self, painter: QPainter, option, widget=None):
        r = self.rect()
        if self._renderer.isValid():
            content = r.adjusted(self.padding, self.padding, -self.padding, -self.padding)
            if content.width() > 0 and content.height() > 0:
                self._renderer.render(painter, content)
        if self.has_class(SELECTED):
            pen = QPen(self.outline_color, 1, Qt.PenStyle.DashLine)
            pen.setCosmetic(True)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(r.adjusted(0.5, 0.5, -0.5, -0.5))

    # ---- input ----

    def _forward(self, kind: str, event) -> None:
        pos = event.screenPos()
        ev = InputEvent(kind, float(pos.x()), float(pos.y()), target=self)
        self.dispatch(ev)
        scene = self.scene()
        # Unhandled events bubble up to the canvas surface
        if not ev.propagation_stopped and scene is not None and hasattr(scene, "surface"):
            scene.surface.dispatch(ev)

    def mousePressEvent(self, event):
        if event.button() != Qt.MouseButton.LeftButton:
            event.ignore()
            return
        trace(f"press on box {self.element_id}", "DRAG")
        # Accepting the press makes this item the mouse grabber
        event.accept()
        self._forward(MOUSE_DOWN, event)

    def mouseMoveEvent(self, event):
        self._forward(MOUSE_MOVE, event)

    def mouseReleaseEvent(self, event):
        self._forward(MOUSE_UP, event)


class LabelItem(QGraphicsSimpleTextItem, VisualNodeMixin, EventTarget):
    """Address text shown next to a box."""

    NODE_KIND = "label"

    def __init__(self, element_id: str, font_family: str = "Arial", font_size: float = 11):
        QGraphicsSimpleTextItem.__init__(self)
        VisualNodeMixin.__init__(self, element_id)
        EventTarget.__init__(self)

        self.setFont(QFont(font_family))
        self._apply_font_size(font_size)
        self.setAcceptedMouseButtons(Qt.MouseButton.NoButton)

    def _apply_attr(self, name: str, value: Any) -> None:
        if name in ("left", "top"):
            self.setPos(QPointF(float(self.attr("left", 0.0)), float(self.attr("top", 0.0))))
        elif name == "z":
            self.setZValue(float(value))

    def _apply_class(self, name: str, present: bool) -> None:
        if name == HIDDEN:
            self.setVisible(not present)

    def _apply_text(self, text: str) -> None:
        self.setText(text)

    def _apply_font_size(self, size: Optional[float]) -> None:
        if size is None:
            return
        font = self.font()
        font.setPixelSize(max(1, int(round(size))))
        self.setFont(font)

    def measured_width(self) -> float:
        return self.boundingRect().width()

    def measured_height(self) -> float:
        return self.boundingRect().height()
