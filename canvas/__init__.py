"""
canvas package

Render tree, layout and interaction for the situation plan editor.
"""

from canvas.mixins import RenderTreeMixin, VisualNodeMixin
from canvas.items import BoxItem, LabelItem
from canvas.scene import PlanScene
from canvas.view import PlanView
from canvas.synchronizer import SituationPlanView

__all__ = [
    "RenderTreeMixin",
    "VisualNodeMixin",
    "BoxItem",
    "LabelItem",
    "PlanScene",
    "PlanView",
    "SituationPlanView",
]
