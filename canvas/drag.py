"""
canvas/drag.py

Pointer drag session for moving a single box.
"""

from __future__ import annotations

from typing import NamedTuple, Optional


class DragOffset(NamedTuple):
    left: float
    top: float


class DragSession:
    """
    Converts pointer positions into a new top-left offset for the dragged box.

    Pointer coordinates are in screen pixels; the offset is in canvas units,
    so pointer deltas are divided by the zoom factor captured at start.
    Starting a new session while one is active simply replaces it.
    """

    def __init__(self):
        self.active = False
        self.start_x = 0.0
        self.start_y = 0.0
        self.origin_left = 0.0
        self.origin_top = 0.0
        self.zoom = 1.0
        self.width = 0.0
        self.height = 0.0

    def start(
        self,
        pointer_x: float,
        pointer_y: float,
        origin_left: float,
        origin_top: float,
        zoom: float,
        width: float = 0.0,
        height: float = 0.0,
    ) -> None:
        """
        Begin a drag.

        Args:
            pointer_x, pointer_y: Pointer position at press
            origin_left, origin_top: Box offset at press
            zoom: Active zoom factor
            width, height: Size of the dragged box, used to clamp the offset
        """
        self.active = True
        self.start_x = pointer_x
        self.start_y = pointer_y
        self.origin_left = origin_left
        self.origin_top = origin_top
        self.zoom = zoom if zoom else 1.0
        self.width = width
        self.height = height

    def update(self, pointer_x: float, pointer_y: float) -> Optional[DragOffset]:
        """
        New box offset for the current pointer position.

        A box may leave the canvas to the right and bottom, but not more than
        half of its own size to the left or top.
        """
        if not self.active:
            return None
        left = self.origin_left + (pointer_x - self.start_x) / self.zoom
        top = self.origin_top + (pointer_y - self.start_y) / self.zoom
        return DragOffset(
            max(-self.width / 2, left),
            max(-self.height / 2, top),
        )

    def end(self) -> None:
        self.active = False
