"""
symbols/schema.py

Registry of the one-line diagram items the situation plan can refer to.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional

from symbols.items import ElectroItem


class ElectroSchema:
    """Id-indexed collection of schema items."""

    def __init__(self):
        self._items: Dict[int, ElectroItem] = {}

    def __contains__(self, item_id) -> bool:
        return self.get_item(item_id) is not None

    def __iter__(self) -> Iterator[ElectroItem]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def add_item(self, item: ElectroItem) -> ElectroItem:
        self._items[item.id] = item
        return item

    def remove_item(self, item_id: int) -> None:
        self._items.pop(item_id, None)

    def get_item(self, item_id) -> Optional[ElectroItem]:
        """Look up an item, accepting ids as int or numeric string."""
        if item_id is None:
            return None
        try:
            key = int(item_id)
        except (TypeError, ValueError):
            return None
        return self._items.get(key)

    def next_id(self) -> int:
        return max(self._items, default=0) + 1
