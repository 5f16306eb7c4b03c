"""
canvas/registry.py

Id-indexed lookup between situation plan elements and their render nodes.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from canvas.mixins import VisualNodeMixin


class NodeRegistry:
    """
    Owns the element id -> (box, label) table of the view.

    Going from a node back to its element uses the node's ``element_id``
    and the plan, so neither side stores a direct reference to the other.
    """

    def __init__(self, plan):
        self.plan = plan
        self._boxes: Dict[str, VisualNodeMixin] = {}
        self._labels: Dict[str, VisualNodeMixin] = {}

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._boxes

    def __len__(self) -> int:
        return len(self._boxes)

    def register(self, element_id: str, box: VisualNodeMixin, label: VisualNodeMixin) -> None:
        self._boxes[element_id] = box
        self._labels[element_id] = label

    def box(self, element_id: Optional[str]) -> Optional[VisualNodeMixin]:
        if element_id is None:
            return None
        return self._boxes.get(element_id)

    def label(self, element_id: Optional[str]) -> Optional[VisualNodeMixin]:
        if element_id is None:
            return None
        return self._labels.get(element_id)

    def element_for(self, node: Optional[VisualNodeMixin]):
        """The plan element drawn by a registered node, or None."""
        if node is None:
            return None
        element_id = getattr(node, "element_id", None)
        registered = self._boxes.get(element_id) is node or self._labels.get(element_id) is node
        if not registered:
            return None
        return self.plan.find(element_id)

    def ids(self) -> Iterator[str]:
        return iter(list(self._boxes))

    def boxes(self) -> Iterator[VisualNodeMixin]:
        return iter(list(self._boxes.values()))

    def discard(self, element_id: str) -> Tuple[Optional[VisualNodeMixin], Optional[VisualNodeMixin]]:
        """Forget the nodes of an element and return them for removal."""
        return self._boxes.pop(element_id, None), self._labels.pop(element_id, None)
