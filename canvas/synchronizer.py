"""
canvas/synchronizer.py

Keeps the render tree in sync with the situation plan.

A box is a draggable node that draws either a symbol of the one-line
diagram or an imported image; every box has a label node next to it.
Attributes are only written when their computed value differs from the
applied one, so a redraw without model changes touches nothing.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from canvas.drag import DragSession
from canvas.events import (
    FOLLOW_UP_KINDS,
    MOVE_KINDS,
    PRESS_KINDS,
    RELEASE_KINDS,
    TOUCH_END,
    CallbackHandler,
    Disposer,
    EventManager,
    InputEvent,
    InputHandler,
)
from canvas.geometry import box_geometry, element_transform, forbidden_label_zone, label_placement
from canvas.mixins import SELECTED
from canvas.pages import apply_visibility, is_visible, show_page
from canvas.registry import NodeRegistry
from canvas.zorder import ZOrderManager
from debug_trace import trace, trace_timing
from models import ElementProperties, SituationPlanElement, resolve_anchor

log = logging.getLogger(__name__)


class StartDragHandler(InputHandler):
    """Press on a box: select it and start dragging."""

    def __init__(self, view: "SituationPlanView"):
        self.view = view

    def handle(self, event: InputEvent) -> None:
        self.view._start_drag(event)


class ProcessDragHandler(InputHandler):
    """Pointer move on the canvas surface while a box is dragged."""

    def __init__(self, view: "SituationPlanView"):
        self.view = view

    def handle(self, event: InputEvent) -> None:
        self.view._process_drag(event)


class StopDragHandler(InputHandler):
    """Release: end the drag and store a checkpoint."""

    def __init__(self, view: "SituationPlanView"):
        self.view = view

    def handle(self, event: InputEvent) -> None:
        self.view._stop_drag(event)


class SituationPlanView:
    """
    Draws a situation plan into a render tree and handles box interaction.

    Args:
        render_tree: Surface implementing RenderTreeMixin
        plan: The SituationPlan to show
        context: EditorContext with history, settings and user prompts
    """

    def __init__(self, render_tree, plan, context):
        self.render_tree = render_tree
        self.plan = plan
        self.context = context
        self.zoomfactor = 1.0

        self.registry = NodeRegistry(plan)
        self.zorder = ZOrderManager(plan, self.registry)
        self.mousedrag = DragSession()
        self.event_manager = EventManager()

        self.selected_id: Optional[str] = None  # element id of the selected box
        self.dragged_id: Optional[str] = None   # element id of the box being dragged
        self._drag_disposers: List[Disposer] = []

        self._start_drag_handler = StartDragHandler(self)
        self._process_drag_handler = ProcessDragHandler(self)
        self._stop_drag_handler = StopDragHandler(self)

        # Called whenever toolbar state (undo/redo, pages) may have changed
        self.on_ribbon_update: Optional[Callable[[], None]] = None

        # Clicking anywhere but on a box clears the selection
        clear = CallbackHandler(self.clear_selection)
        for kind in PRESS_KINDS:
            self.event_manager.add_listener(render_tree.surface, kind, clear)

    @property
    def padding(self) -> float:
        return self.context.settings.canvas.selection.padding

    def dispose(self) -> None:
        """Revoke all listeners and remove every node this view created."""
        self.event_manager.dispose()
        self._drag_disposers = []
        for element_id in self.registry.ids():
            self._remove_nodes(element_id)
        self.selected_id = None
        self.dragged_id = None

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def sync_to_sitplan(self) -> None:
        """
        Drop elements whose schema item is gone, and nodes whose element is gone.

        This does not create nodes for new elements; reconcile() does that.
        """
        self.plan.sync_to_eendraadschema()
        for element_id in self.registry.ids():
            if self.plan.find(element_id) is None:
                self._remove_nodes(element_id)

    def reconcile(self) -> None:
        """
        Bring the render tree in line with the plan.

        Creates missing boxes (attached in one batch), shows only the active
        page, refreshes changed content, and recomputes box and label
        geometry for the elements on the active page.
        """
        with trace_timing("Redraw", "SYNC"):
            self.sync_to_sitplan()

            fragment = self.render_tree.create_fragment()
            for index, element in enumerate(self.plan.elements):
                if element.id not in self.registry:
                    self._make_box(element, fragment, index)
            # Labels can only be measured once they are attached
            if fragment:
                self.render_tree.attach(fragment)

            show_page(self.plan, self.registry, self.plan.active_page)
            for element in self.plan.elements:
                if element.page == self.plan.active_page:
                    self._update_box_content(element)
                    self._update_symbol_and_label_position(element)

            self.update_ribbon()

    redraw = reconcile

    def rebuild(self) -> None:
        """Throw away all nodes and redraw, e.g. after undo replaced the plan."""
        self._release_drag_listeners()
        self.mousedrag.end()
        for element_id in self.registry.ids():
            self._remove_nodes(element_id)
        self.selected_id = None
        self.dragged_id = None
        self.reconcile()

    def _make_box(self, element: SituationPlanElement, fragment: list, index: int) -> None:
        box = self.render_tree.create_box(element.id)
        label = self.render_tree.create_label(element.id)
        self.registry.register(element.id, box, label)

        # Content first, the box size depends on it
        self._update_box_content(element)
        box.set_attr("z", index)
        label.set_attr("z", index)
        fragment.extend([box, label])

        for kind in PRESS_KINDS:
            self.event_manager.add_listener(box, kind, self._start_drag_handler)
        self.event_manager.add_listener(box, TOUCH_END, self._stop_drag_handler)

    def _remove_nodes(self, element_id: str) -> None:
        box, label = self.registry.discard(element_id)
        for node in (box, label):
            if node is not None:
                self.event_manager.remove_target(node)
                self.render_tree.remove(node)
        if self.selected_id == element_id:
            self.selected_id = None
        if self.dragged_id == element_id:
            self._release_drag_listeners()
            self.mousedrag.end()
            self.dragged_id = None

    # ------------------------------------------------------------------
    # Content and geometry
    # ------------------------------------------------------------------

    def has_content_changed(self, element: SituationPlanElement) -> bool:
        """True when the box of an element shows outdated content or label text."""
        box = self.registry.box(element.id)
        if box is None:
            return False
        return element.needs_view_update or box.content_key != element.content_key()

    def _update_box_content(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        if not self.has_content_changed(element):
            return
        self._apply_content(element)

    def _apply_content(self, element: SituationPlanElement) -> None:
        box = self.registry.box(element.id)
        label = self.registry.label(element.id)
        element.needs_view_update = False
        box.content_key = element.content_key()

        element.update_size()
        svg = element.get_scaled_svg() or ""
        if box.content != svg:
            box.set_content(svg)

        if label is not None:
            font_size = element.labelfontsize
            if font_size is None:
                font_size = self.context.settings.labels.default_font_size
            if label.font_size != font_size:
                label.set_font_size(font_size)
            adres = element.get_adres() or ""
            if label.label_text != adres:
                label.set_text(adres)

    def _update_symbol_position(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        box = self.registry.box(element.id)
        if box is None:
            return

        geom = box_geometry(element, self.padding)
        for name, value in zip(("left", "top", "width", "height"), geom):
            if box.attr(name) != value:
                box.set_attr(name, value)

        transform = element_transform(element)
        if box.attr("transform") != transform:
            box.set_attr("transform", transform)

        apply_visibility(box, is_visible(element, self.plan.active_page))

    def _update_label_position(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        label = self.registry.label(element.id)
        if label is None:
            return

        zone = forbidden_label_zone(element, self.padding)
        placement = label_placement(
            element.get_adres_location(),
            element.posx,
            element.posy,
            zone,
            label.measured_width(),
            label.measured_height(),
        )
        element.labelposx = placement.center_x
        element.labelposy = placement.center_y

        if label.attr("left") != placement.left:
            label.set_attr("left", placement.left)
        if label.attr("top") != placement.top:
            label.set_attr("top", placement.top)

        apply_visibility(label, is_visible(element, self.plan.active_page))

    def _update_symbol_and_label_position(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        self._update_symbol_position(element)
        self._update_label_position(element)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, box) -> None:
        """Make the given box node the only selected one."""
        if box is None:
            return
        self.clear_selection()
        box.add_class(SELECTED)
        self.selected_id = box.element_id

    def select_element(self, element: Optional[SituationPlanElement]) -> None:
        if element is None:
            return
        self.select(self.registry.box(element.id))

    def clear_selection(self) -> None:
        for box in self.registry.boxes():
            if box.has_class(SELECTED):
                box.remove_class(SELECTED)
        self.selected_id = None

    def selected_element(self) -> Optional[SituationPlanElement]:
        return self.registry.element_for(self.registry.box(self.selected_id))

    def delete_selected(self) -> bool:
        """
        Remove the selected box, its label and its element.

        Returns:
            False when nothing was selected
        """
        element = self.selected_element()
        if element is None:
            return False
        self._remove_nodes(element.id)
        self.plan.remove_element(element)
        self.selected_id = None
        self.context.history.store("Delete element")
        self.update_ribbon()
        return True

    # ------------------------------------------------------------------
    # Stacking order
    # ------------------------------------------------------------------

    def send_to_back(self) -> bool:
        """Send the selected box to the back, also in the plan's element order."""
        if self.selected_id is None:
            return False
        if not self.zorder.send_to_back(self.selected_id):
            return False
        self.context.history.store("Send to back")
        self.update_ribbon()
        return True

    def bring_to_front(self) -> bool:
        """Bring the selected box to the front, also in the plan's element order."""
        if self.selected_id is None:
            return False
        if not self.zorder.bring_to_front(self.selected_id):
            return False
        self.context.history.store("Bring to front")
        self.update_ribbon()
        return True

    # ------------------------------------------------------------------
    # Dragging
    # ------------------------------------------------------------------

    def _start_drag(self, event: InputEvent) -> None:
        event.stop_propagation()
        if event.kind not in PRESS_KINDS:
            log.error("Invalid event for start drag: %s", event.kind)
            return

        box = event.target
        element = self.registry.element_for(box)
        if element is None:
            return

        self.select(box)
        self.dragged_id = element.id
        self.mousedrag.start(
            event.x,
            event.y,
            box.attr("left", 0.0),
            box.attr("top", 0.0),
            self.zoomfactor,
            box.measured_width(),
            box.measured_height(),
        )

        move_kind, release_kind = FOLLOW_UP_KINDS[event.kind]
        self._release_drag_listeners()
        surface = self.render_tree.surface
        self._drag_disposers = [
            self.event_manager.add_listener(surface, move_kind, self._process_drag_handler),
            self.event_manager.add_listener(surface, release_kind, self._stop_drag_handler),
        ]
        trace(f"start drag {element.id} at ({event.x}, {event.y})", "DRAG")

    def _process_drag(self, event: InputEvent) -> None:
        if self.dragged_id is None:
            return
        if event.kind not in MOVE_KINDS:
            log.error("Invalid event for process drag: %s", event.kind)
            return
        event.prevent_default()

        box = self.registry.box(self.dragged_id)
        element = self.plan.find(self.dragged_id)
        if box is None or element is None:
            return

        offset = self.mousedrag.update(event.x, event.y)
        if offset is None:
            return
        element.posx = offset.left + box.measured_width() / 2
        element.posy = offset.top + box.measured_height() / 2
        self._update_symbol_and_label_position(element)
        trace(f"drag {element.id} -> ({element.posx}, {element.posy})", "DRAG")

    def _stop_drag(self, event: InputEvent) -> None:
        event.stop_propagation()
        if event.kind not in RELEASE_KINDS:
            log.error("Invalid event for stop drag: %s", event.kind)
            return

        self._release_drag_listeners()
        self.dragged_id = None
        self.mousedrag.end()
        self.context.history.store("Move element")
        self.update_ribbon()

    def _release_drag_listeners(self) -> None:
        for disposer in self._drag_disposers:
            disposer.dispose()
        self._drag_disposers = []

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------

    def set_zoom(self, factor: float = 1.0) -> None:
        self.zoomfactor = factor
        self.render_tree.set_zoom(factor)

    def zoom_increment(self, increment: float = 0.0) -> None:
        """Change the zoom factor by increment, clamped to the configured interval."""
        z = self.context.settings.canvas.zoom
        self.set_zoom(min(z.max, max(z.min, self.zoomfactor + increment)))

    def zoom_to_fit(self, paper_padding: Optional[float] = None) -> None:
        """Zoom so the whole paper fits in the viewport."""
        if paper_padding is None:
            paper_padding = self.context.settings.canvas.zoom.paper_padding
        viewport_w, viewport_h = self.render_tree.viewport_size()
        paper_w, paper_h = self.render_tree.paper_size()
        if paper_w <= 0 or paper_h <= 0:
            return
        scale = min(
            (viewport_w - paper_padding * 2) / paper_w,
            (viewport_h - paper_padding * 2) / paper_h,
        )
        if scale > 0:
            self.set_zoom(scale)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def select_page(self, page: int) -> None:
        if not 1 <= page <= self.plan.num_pages:
            return
        self.plan.active_page = page
        self.reconcile()

    def change_page(self, page: int) -> None:
        """Page chosen in the page selector."""
        self.select_page(page)
        self.context.history.store("Change page")
        self.update_ribbon()

    def show_page(self, page: int) -> None:
        """Show only the elements of a page without recomputing geometry."""
        show_page(self.plan, self.registry, page)
        self.update_ribbon()

    def add_page(self) -> None:
        self.plan.add_page()
        self.select_page(self.plan.num_pages)
        self.context.history.store("Add page")
        self.update_ribbon()

    def delete_page(self) -> bool:
        """Delete the active page and its elements after asking the user."""
        page = self.plan.active_page
        if self.plan.num_pages <= 1:
            return False
        if not self.context.confirm(f"Delete page {page} completely?"):
            return False
        for element in list(self.plan.elements):
            if element.page == page:
                self._remove_nodes(element.id)
        self.plan.delete_page(page)
        self.select_page(min(page, self.plan.num_pages))
        self.context.history.store("Delete page")
        self.update_ribbon()
        return True

    # ------------------------------------------------------------------
    # Adding and editing elements
    # ------------------------------------------------------------------

    def add_element_from_file(self, path) -> Optional[SituationPlanElement]:
        """Import an image file as a new box on the active page."""
        placement = self.context.settings.placement
        try:
            element = self.plan.add_element_from_file(
                path, self.plan.active_page, placement.insert_x, placement.insert_y)
        except ValueError as e:
            self.context.alert(str(e))
            return None
        self._place_new_element(element)
        return element

    def add_electro_item(self, properties: Optional[ElementProperties]) -> Optional[SituationPlanElement]:
        """Place a symbol of the one-line diagram as a new box on the active page."""
        if properties is None or properties.electro_id is None:
            self.context.alert("No valid ID entered!")
            return None
        placement = self.context.settings.placement
        element = self.plan.add_element_from_electro_item(
            properties.electro_id,
            self.plan.active_page,
            placement.insert_x,
            placement.insert_y,
            properties.adrestype,
            properties.adres,
            properties.adreslocation,
            properties.labelfontsize,
            properties.scale,
            properties.rotate,
        )
        if element is None:
            self.context.alert(f"No schema item with ID {properties.electro_id}!")
            return None
        self._place_new_element(element)
        return element

    def _place_new_element(self, element: SituationPlanElement) -> None:
        self.sync_to_sitplan()
        self.clear_selection()
        element.needs_view_update = True
        self.reconcile()
        # The box only exists after the redraw
        self.select_element(element)
        self.zorder.bring_to_front(element.id)
        self.context.history.store("Add element")
        self.update_ribbon()

    def edit_selected(self, properties: ElementProperties) -> bool:
        """Apply values from the properties dialog to the selected element."""
        element = self.selected_element()
        if element is None or properties is None:
            return False

        if properties.electro_id is not None:
            element.set_electro_item_id(properties.electro_id)
            element.set_adres(properties.adrestype, properties.adres, properties.adreslocation)
        else:
            element.adreslocation = resolve_anchor(properties.adreslocation)
        element.set_label_font_size(properties.labelfontsize)
        element.set_scale(properties.scale)
        element.rotate = properties.rotate

        # Content first, the box size depends on it
        self._update_box_content(element)
        self._update_symbol_and_label_position(element)
        self.context.history.store("Edit element")
        self.update_ribbon()
        return True

    # ------------------------------------------------------------------
    # Toolbar state
    # ------------------------------------------------------------------

    def ribbon_state(self) -> Dict[str, Any]:
        """Enabled state of the toolbar controls."""
        history = self.context.history
        return {
            "can_undo": history.undo_stack_size() > 0,
            "can_redo": history.redo_stack_size() > 0,
            "active_page": self.plan.active_page,
            "num_pages": self.plan.num_pages,
            "can_add_page": self.plan.active_page == self.plan.num_pages,
            "can_delete_page": self.plan.num_pages > 1,
            "has_selection": self.selected_id is not None,
        }

    def update_ribbon(self) -> None:
        if self.on_ribbon_update:
            self.on_ribbon_update()
