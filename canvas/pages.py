"""
canvas/pages.py

Shows only the boxes and labels of the active page.
"""

from __future__ import annotations

from canvas.mixins import HIDDEN


def is_visible(element, active_page: int) -> bool:
    return element.page == active_page


def apply_visibility(node, visible: bool) -> bool:
    """
    Toggle the hidden class of a node when it does not match yet.

    Returns:
        True if the node was changed
    """
    if node is None:
        return False
    if visible and node.has_class(HIDDEN):
        node.remove_class(HIDDEN)
        return True
    if not visible and not node.has_class(HIDDEN):
        node.add_class(HIDDEN)
        return True
    return False


def show_page(plan, registry, page: int) -> None:
    """Hide every box and label that is not on the given page."""
    for element in plan.elements:
        visible = is_visible(element, page)
        apply_visibility(registry.box(element.id), visible)
        apply_visibility(registry.label(element.id), visible)
