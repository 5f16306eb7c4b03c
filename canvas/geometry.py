"""
canvas/geometry.py

Placement of boxes and labels on the situation plan.

All functions are pure: they read an element (or plain numbers) and return
the geometry to apply, they never touch the render tree.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from models import LabelAnchor


class BoxGeometry(NamedTuple):
    """Top-left corner and size of a box node, selection padding included."""
    left: float
    top: float
    width: float
    height: float


class RotationTransform(NamedTuple):
    """Rotation (degrees) applied around the box center, optionally mirrored horizontally."""
    angle: float
    mirror: bool = False

    def to_css(self) -> str:
        return f"rotate({self.angle:g}deg)" + (" scaleX(-1)" if self.mirror else "")


class RectSize(NamedTuple):
    width: float
    height: float


class LabelPlacement(NamedTuple):
    """Label node position (left/top) and the label center kept on the element."""
    left: float
    top: float
    center_x: float
    center_y: float


def box_geometry(element, padding: float) -> BoxGeometry:
    """
    Compute the box of an element so that (posx, posy) is its visual center.

    Args:
        element: Object with posx, posy, sizex, sizey and get_scale()
        padding: Selection padding added on every side

    Returns:
        BoxGeometry in canvas units
    """
    scale = element.get_scale()
    content_width = element.sizex * scale
    content_height = element.sizey * scale
    return BoxGeometry(
        left=element.posx - content_width / 2 - padding,
        top=element.posy - content_height / 2 - padding,
        width=content_width + padding * 2,
        height=content_height + padding * 2,
    )


def rotation_transform(rotate: float, rotates_360: bool, is_schema_symbol: bool) -> RotationTransform:
    """
    Rotation to apply to a box.

    Between 90 and 270 degrees boxes that may spin through 360 degrees are
    mirrored, and schema symbols are turned back by 180 degrees so they are
    never drawn upside down.
    """
    rotation = rotate % 360
    mirror = False
    if 90 <= rotation < 270:
        if rotates_360:
            mirror = True
        if is_schema_symbol:
            rotation -= 180
    return RotationTransform(rotation, mirror)


def element_transform(element) -> RotationTransform:
    return rotation_transform(
        element.rotate,
        element.rotates_360_degrees(),
        element.is_eendraadschema_symbool(),
    )


def rotated_rectangle_size(width: float, height: float, degrees: float) -> RectSize:
    """Axis-aligned size of a width x height rectangle rotated by degrees."""
    rad = math.radians(degrees)
    c = abs(math.cos(rad))
    s = abs(math.sin(rad))
    return RectSize(width * c + height * s, width * s + height * c)


def forbidden_label_zone(element, padding: float) -> RectSize:
    """Rotated, padded area around a box that its label must stay clear of."""
    scale = element.get_scale()
    return rotated_rectangle_size(
        element.sizex * scale + padding,
        element.sizey * scale + padding,
        element.rotate,
    )


def label_placement(
    anchor: LabelAnchor,
    posx: float,
    posy: float,
    zone: RectSize,
    label_width: float,
    label_height: float,
) -> LabelPlacement:
    """
    Position a label of the given measured size next to a box.

    The vertical offsets differ from a plain half-height so the label lines
    up the same on screen and in print.
    """
    if anchor == LabelAnchor.LEFT:
        center_x = posx - zone.width / 2 - label_width / 2
    elif anchor == LabelAnchor.RIGHT:
        center_x = posx + zone.width / 2 + label_width / 2
    else:
        center_x = posx

    if anchor == LabelAnchor.ABOVE:
        top = posy - zone.height / 2 - label_height * 0.8
        center_y = posy - zone.height / 2 - label_height * 0.25
    elif anchor == LabelAnchor.BELOW:
        top = posy + zone.height / 2 - label_height * 0.2
        center_y = posy + zone.height / 2 + label_height * 0.35
    else:
        top = posy - label_height / 2
        center_y = posy + 1

    return LabelPlacement(
        left=center_x - label_width / 2,
        top=top,
        center_x=center_x,
        center_y=center_y,
    )
