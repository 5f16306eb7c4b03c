"""
canvas/zorder.py

Stacking order of boxes on the situation plan.

The rank of a box is the ``z`` attribute of its node.  After every change
the plan's element list is re-sorted by rank and the ranks are rewritten as
list positions, so the list order stays the one source of truth for saving
and printing.
"""

from __future__ import annotations

from typing import Dict

from debug_trace import trace


def _rank(node) -> int:
    try:
        return int(node.attr("z", 0) or 0)
    except (TypeError, ValueError):
        return 0


def _set_rank(node, rank: int) -> None:
    if node is not None and node.attr("z") != rank:
        node.set_attr("z", rank)


class ZOrderManager:
    """Sends boxes to the back or brings them to the front."""

    def __init__(self, plan, registry):
        self.plan = plan
        self.registry = registry

    def send_to_back(self, target_id: str) -> bool:
        """
        Put a box below all others.

        Every other box moves one rank up and the target gets rank 0.

        Returns:
            False when the target has no node
        """
        if self.registry.box(target_id) is None:
            return False

        ranks: Dict[str, int] = {}
        for element in self.plan.elements:
            box = self.registry.box(element.id)
            if box is None:
                continue
            ranks[element.id] = 0 if element.id == target_id else _rank(box) + 1

        self._apply(ranks)
        trace(f"send_to_back {target_id}", "ZORDER")
        return True

    def bring_to_front(self, target_id: str) -> bool:
        """
        Put a box above all others.

        Returns:
            False when the target has no node or its element is gone; in the
            latter case the plan is re-synced with the schema.
        """
        target_box = self.registry.box(target_id)
        if target_box is None:
            return False

        top = 0
        for element in self.plan.elements:
            box = self.registry.box(element.id)
            if box is not None and element.id != target_id:
                top = max(top, _rank(box))

        element = self.registry.element_for(target_box)
        if element is None or not element.has_valid_source():
            self.plan.sync_to_eendraadschema()
            return False

        ranks = {
            element.id: _rank(self.registry.box(element.id))
            for element in self.plan.elements
            if self.registry.box(element.id) is not None
        }
        ranks[target_id] = top + 1

        self._apply(ranks)
        trace(f"bring_to_front {target_id}", "ZORDER")
        return True

    def _apply(self, ranks: Dict[str, int]) -> None:
        for element_id, rank in ranks.items():
            _set_rank(self.registry.box(element_id), rank)
            _set_rank(self.registry.label(element_id), rank)
        self.plan.order_by_z_index(ranks)
        self.restack()

    def restack(self) -> None:
        """Rewrite node ranks as positions in the plan's element list."""
        for index, element in enumerate(self.plan.elements):
            _set_rank(self.registry.box(element.id), index)
            _set_rank(self.registry.label(element.id), index)
