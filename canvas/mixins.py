"""
canvas/mixins.py

Mixin classes describing the render tree the situation plan view draws into.

``VisualNodeMixin`` keeps the last applied value of every attribute and
class so callers can compare before writing; subclasses push the values to
the actual graphics toolkit through the ``_apply_*`` hooks.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set, Tuple

from canvas.events import EventTarget

HIDDEN = "hidden"
SELECTED = "selected"


class VisualNodeMixin:
    """
    A box or label node in the render tree.

    Nodes only know the id of the element they draw; the lookup from id to
    element lives with the view synchronizer.
    """

    NODE_KIND = "node"

    def __init__(self, element_id: str = ""):
        self.element_id = element_id
        self._attrs: Dict[str, Any] = {}
        self._classes: Set[str] = set()
        self._content: Optional[str] = None
        self._text = ""
        self._font_size: Optional[float] = None
        # Content version the node was last rendered from
        self.content_key: Any = None

    # ---- attributes ----

    def attr(self, name: str, default: Any = None) -> Any:
        return self._attrs.get(name, default)

    def set_attr(self, name: str, value: Any) -> None:
        self._attrs[name] = value
        self._apply_attr(name, value)

    # ---- classes ----

    def has_class(self, name: str) -> bool:
        return name in self._classes

    def add_class(self, name: str) -> None:
        self._classes.add(name)
        self._apply_class(name, True)

    def remove_class(self, name: str) -> None:
        self._classes.discard(name)
        self._apply_class(name, False)

    # ---- content ----

    @property
    def content(self) -> Optional[str]:
        return self._content

    def set_content(self, markup: Optional[str]) -> None:
        self._content = markup
        self._apply_content(markup)

    @property
    def label_text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text
        self._apply_text(text)

    @property
    def font_size(self) -> Optional[float]:
        return self._font_size

    def set_font_size(self, size: Optional[float]) -> None:
        self._font_size = size
        self._apply_font_size(size)

    # ---- measurement ----

    def measured_width(self) -> float:
        return float(self.attr("width", 0.0))

    def measured_height(self) -> float:
        return float(self.attr("height", 0.0))

    # ---- toolkit hooks ----

    def _apply_attr(self, name: str, value: Any) -> None:
        pass

    def _apply_class(self, name: str, present: bool) -> None:
        pass

    def _apply_content(self, markup: Optional[str]) -> None:
        pass

    def _apply_text(self, text: str) -> None:
        pass

    def _apply_font_size(self, size: Optional[float]) -> None:
        pass


class RenderTreeMixin:
    """
    The surface boxes and labels are attached to.

    New nodes are collected in a fragment (a plain list) and attached in one
    go, so a redraw that creates many boxes only triggers one layout.
    """

    def __init__(self):
        self.surface = EventTarget()

    def create_box(self, element_id: str) -> VisualNodeMixin:
        raise NotImplementedError

    def create_label(self, element_id: str) -> VisualNodeMixin:
        raise NotImplementedError

    def create_fragment(self) -> List[VisualNodeMixin]:
        return []

    def attach(self, fragment: List[VisualNodeMixin]) -> None:
        for node in fragment:
            self._attach_node(node)
        fragment.clear()

    def _attach_node(self, node: VisualNodeMixin) -> None:
        raise NotImplementedError

    def remove(self, node: VisualNodeMixin) -> None:
        raise NotImplementedError

    def set_zoom(self, factor: float) -> None:
        raise NotImplementedError

    def viewport_size(self) -> Tuple[float, float]:
        raise NotImplementedError

    def paper_size(self) -> Tuple[float, float]:
        raise NotImplementedError
