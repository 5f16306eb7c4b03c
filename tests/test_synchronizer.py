"""Tests for SituationPlanView against the recording render tree."""
from __future__ import annotations

import logging

import pytest
from PIL import Image

from canvas.events import (
    MOUSE_DOWN,
    MOUSE_MOVE,
    MOUSE_UP,
    TOUCH_END,
    TOUCH_MOVE,
    TOUCH_START,
    InputEvent,
)
from canvas.geometry import RotationTransform
from canvas.mixins import HIDDEN, SELECTED
from canvas.synchronizer import ProcessDragHandler, StartDragHandler, StopDragHandler
from conftest import add_symbol
from models import AdresType, ElementProperties, LabelAnchor


def box_of(view, element):
    return view.registry.box(element.id)


def label_of(view, element):
    return view.registry.label(element.id)


class TestReconcile:
    def test_creates_nodes_in_one_batch(self, view, tree, plan):
        for _ in range(3):
            add_symbol(plan, 1)
        view.reconcile()
        assert len(tree.attached) == 6
        assert tree.attach_calls == 1

    def test_box_geometry(self, view, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        box = box_of(view, element)
        assert (box.attr("left"), box.attr("top"), box.attr("width"), box.attr("height")) == (520, 270, 60, 60)
        assert box.attr("transform") == RotationTransform(0, False)
        assert box.content.startswith("<svg")

    def test_label_text_and_position(self, view, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        label = label_of(view, element)
        assert label.label_text == "V1"
        assert label.font_size == 11
        # fake measurement: width = 2 chars * 11 * 0.5, height = 11 * 1.2
        assert label.attr("left") == pytest.approx(550 - 5.5)
        assert label.attr("top") == pytest.approx(300 - 6.6)
        assert element.labelposx == pytest.approx(550)
        assert element.labelposy == pytest.approx(301)

    def test_second_pass_writes_nothing(self, view, tree, plan):
        add_symbol(plan, 1)
        add_symbol(plan, 2, rotate=180, adreslocation=LabelAnchor.BELOW)
        plan.add_page()
        add_symbol(plan, 1, page=2)
        view.reconcile()
        before = tree.total_writes()
        view.reconcile()
        assert tree.total_writes() == before
        assert tree.attach_calls == 1

    def test_schema_change_updates_label_only(self, view, plan, schema):
        element = add_symbol(plan, 1)
        view.reconcile()
        box, label = box_of(view, element), label_of(view, element)
        content_writes = [w for w in box.writes if w[0] == "content"]
        schema.get_item(1).set_adres("K9")
        view.reconcile()
        assert label.label_text == "K9"
        # the drawing itself did not change, so the markup is not rewritten
        assert [w for w in box.writes if w[0] == "content"] == content_writes

    def test_direct_field_assignment_refreshes_label(self, view, plan):
        element = add_symbol(plan, 1, adrestype=AdresType.MANUAL, adres="A1")
        view.reconcile()
        label = label_of(view, element)
        element.adres = "B2"
        element.labelfontsize = 20
        view.reconcile()
        assert label.label_text == "B2"
        assert label.font_size == 20

    def test_direct_schema_assignment_refreshes_label(self, view, plan, schema):
        element = add_symbol(plan, 1)
        view.reconcile()
        schema.get_item(1).nr = "V7"
        view.reconcile()
        assert label_of(view, element).label_text == "V7"

    def test_prunes_elements_without_schema_item(self, view, tree, plan, schema):
        gone = add_symbol(plan, 1)
        kept = add_symbol(plan, 2)
        view.reconcile()
        box, label = box_of(view, gone), label_of(view, gone)
        schema.remove_item(1)
        view.reconcile()
        assert plan.elements == [kept]
        assert gone.id not in view.registry
        assert box in tree.removed and label in tree.removed

    def test_other_page_hidden_and_not_laid_out(self, view, plan):
        plan.add_page()
        element = add_symbol(plan, 1, page=2)
        view.reconcile()
        box = box_of(view, element)
        assert box.has_class(HIDDEN)
        assert box.attr("left") is None

    def test_ribbon_callback(self, view, plan):
        calls = []
        view.on_ribbon_update = lambda: calls.append(1)
        view.reconcile()
        assert calls == [1]

    def test_rebuild_replaces_nodes(self, view, tree, plan):
        element = add_symbol(plan, 1)
        view.reconcile()
        old = box_of(view, element)
        view.rebuild()
        assert box_of(view, element) is not old
        assert old in tree.removed
        assert len(tree.attached) == 2

    def test_dispose(self, view, tree, plan):
        add_symbol(plan, 1)
        view.reconcile()
        view.dispose()
        assert tree.attached == []
        assert len(view.event_manager) == 0
        assert not tree.surface.has_listener(MOUSE_DOWN)


class TestSelection:
    def test_select_is_exclusive(self, view, plan):
        a, b = add_symbol(plan, 1), add_symbol(plan, 2)
        view.reconcile()
        view.select(box_of(view, a))
        view.select(box_of(view, b))
        assert not box_of(view, a).has_class(SELECTED)
        assert box_of(view, b).has_class(SELECTED)
        assert view.selected_element() is b

    def test_clear_selection(self, view, plan):
        a = add_symbol(plan, 1)
        view.reconcile()
        view.select(box_of(view, a))
        view.clear_selection()
        assert view.selected_element() is None
        assert not box_of(view, a).has_class(SELECTED)

    def test_press_on_surface_clears(self, view, tree, plan):
        a = add_symbol(plan, 1)
        view.reconcile()
        view.select(box_of(view, a))
        tree.surface.dispatch(InputEvent(MOUSE_DOWN, 5, 5))
        assert view.selected_element() is None

    def test_select_none_is_noop(self, view):
        view.select(None)
        assert view.selected_id is None

    def test_delete_selected(self, view, tree, plan, history):
        a, b = add_symbol(plan, 1), add_symbol(plan, 2)
        view.reconcile()
        box = box_of(view, a)
        view.select(box)
        assert view.delete_selected()
        assert plan.elements == [b]
        assert box in tree.removed
        assert view.selected_id is None
        assert history.stored == ["Delete element"]

    def test_delete_without_selection(self, view, plan, history):
        add_symbol(plan, 1)
        view.reconcile()
        assert not view.delete_selected()
        assert len(plan.elements) == 1
        assert history.stored == []


class TestStacking:
    def test_send_to_back(self, view, plan, history):
        a, b = add_symbol(plan, 1), add_symbol(plan, 2)
        view.reconcile()
        view.select(box_of(view, b))
        assert view.send_to_back()
        assert plan.elements == [b, a]
        assert box_of(view, b).attr("z") == 0
        assert box_of(view, a).attr("z") == 1
        assert history.stored == ["Send to back"]

    def test_bring_to_front(self, view, plan, history):
        a, b = add_symbol(plan, 1), add_symbol(plan, 2)
        view.reconcile()
        view.select(box_of(view, a))
        assert view.bring_to_front()
        assert plan.elements == [b, a]
        assert label_of(view, a).attr("z") == 1

    def test_without_selection(self, view, plan):
        add_symbol(plan, 1)
        view.reconcile()
        assert not view.send_to_back()
        assert not view.bring_to_front()


class TestDrag:
    def test_mouse_drag_moves_element(self, view, tree, plan, history):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        box = box_of(view, element)

        press = box.dispatch(InputEvent(MOUSE_DOWN, 100, 100))
        assert press.propagation_stopped
        assert view.selected_element() is element
        assert tree.surface.has_listener(MOUSE_MOVE)

        move = tree.surface.dispatch(InputEvent(MOUSE_MOVE, 130, 90))
        assert move.default_prevented
        assert (element.posx, element.posy) == (580, 290)
        assert box.attr("left") == 550
        assert box.attr("top") == 260

        tree.surface.dispatch(InputEvent(MOUSE_UP, 130, 90))
        assert history.stored == ["Move element"]
        assert not tree.surface.has_listener(MOUSE_MOVE)
        assert not tree.surface.has_listener(MOUSE_UP)
        assert view.dragged_id is None

    def test_drag_respects_zoom(self, view, tree, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        view.set_zoom(2.0)
        box_of(view, element).dispatch(InputEvent(MOUSE_DOWN, 0, 0))
        tree.surface.dispatch(InputEvent(MOUSE_MOVE, 40, 20))
        assert (element.posx, element.posy) == (570, 310)

    def test_drag_clamped(self, view, tree, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        box_of(view, element).dispatch(InputEvent(MOUSE_DOWN, 100, 100))
        tree.surface.dispatch(InputEvent(MOUSE_MOVE, -5000, -5000))
        assert (element.posx, element.posy) == (0, 0)
        assert box_of(view, element).attr("left") == -30

    def test_label_follows_box(self, view, tree, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        label = label_of(view, element)
        left = label.attr("left")
        box_of(view, element).dispatch(InputEvent(MOUSE_DOWN, 0, 0))
        tree.surface.dispatch(InputEvent(MOUSE_MOVE, 10, 0))
        assert label.attr("left") == pytest.approx(left + 10)

    def test_touch_drag(self, view, tree, plan, history):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        box = box_of(view, element)
        box.dispatch(InputEvent(TOUCH_START, 0, 0))
        assert tree.surface.has_listener(TOUCH_MOVE)
        assert not tree.surface.has_listener(MOUSE_MOVE)
        tree.surface.dispatch(InputEvent(TOUCH_MOVE, 5, 5))
        box.dispatch(InputEvent(TOUCH_END, 5, 5))
        assert (element.posx, element.posy) == (555, 305)
        assert history.stored == ["Move element"]
        assert not tree.surface.has_listener(TOUCH_END)

    def test_move_without_press_is_ignored(self, view, plan):
        element = add_symbol(plan, 1, posx=550, posy=300)
        view.reconcile()
        ProcessDragHandler(view).handle(InputEvent(MOUSE_MOVE, 50, 50))
        assert (element.posx, element.posy) == (550, 300)

    def test_unexpected_event_kind_is_logged(self, view, plan, caplog):
        element = add_symbol(plan, 1)
        view.reconcile()
        box = box_of(view, element)
        with caplog.at_level(logging.ERROR, logger="canvas.synchronizer"):
            StartDragHandler(view).handle(InputEvent("keydown", target=box))
            StopDragHandler(view).handle(InputEvent("keydown", target=box))
        assert "Invalid event for start drag: keydown" in caplog.text
        assert "Invalid event for stop drag: keydown" in caplog.text
        assert view.selected_id is None
        assert view.dragged_id is None

    def test_removed_element_ends_drag(self, view, tree, plan, schema):
        element = add_symbol(plan, 1)
        view.reconcile()
        box_of(view, element).dispatch(InputEvent(MOUSE_DOWN, 0, 0))
        schema.remove_item(1)
        view.reconcile()
        assert view.dragged_id is None
        assert not tree.surface.has_listener(MOUSE_MOVE)


class TestZoom:
    def test_increment_clamped(self, view, tree):
        view.zoom_increment(10)
        assert tree.zoom == 5.0
        view.zoom_increment(-100)
        assert tree.zoom == pytest.approx(0.1)

    def test_increment(self, view):
        view.zoom_increment(0.5)
        assert view.zoomfactor == pytest.approx(1.5)

    def test_zoom_to_fit(self, view, tree):
        view.zoom_to_fit()
        assert tree.zoom == pytest.approx(min(760 / 1123, 560 / 794))

    def test_zoom_to_fit_custom_padding(self, view, tree):
        view.zoom_to_fit(paper_padding=0)
        assert tree.zoom == pytest.approx(800 / 1123)


class TestPages:
    def test_add_page(self, view, plan, history):
        view.add_page()
        assert plan.num_pages == 2
        assert plan.active_page == 2
        assert history.stored == ["Add page"]

    def test_select_page_switches_visibility(self, view, plan):
        plan.add_page()
        one = add_symbol(plan, 1, page=1)
        two = add_symbol(plan, 2, page=2)
        view.reconcile()
        view.select_page(2)
        assert box_of(view, one).has_class(HIDDEN)
        assert not box_of(view, two).has_class(HIDDEN)
        assert box_of(view, two).attr("left") == 520

    def test_change_page_checkpoints(self, view, plan, history):
        plan.add_page()
        view.change_page(2)
        assert plan.active_page == 2
        assert history.stored == ["Change page"]

    def test_show_page_only_toggles_visibility(self, view, plan):
        plan.add_page()
        element = add_symbol(plan, 1, page=1)
        view.reconcile()
        view.show_page(2)
        assert box_of(view, element).has_class(HIDDEN)
        assert plan.active_page == 1

    def test_select_page_out_of_range(self, view, plan):
        view.select_page(5)
        assert plan.active_page == 1

    def test_delete_last_page_refused(self, view, plan, prompts):
        assert not view.delete_page()
        assert prompts.questions == []

    def test_delete_page_needs_confirmation(self, view, plan, prompts):
        plan.add_page()
        add_symbol(plan, 1, page=2)
        view.select_page(2)
        prompts.answer = False
        assert not view.delete_page()
        assert plan.num_pages == 2
        assert prompts.questions == ["Delete page 2 completely?"]

    def test_delete_page(self, view, tree, plan, history):
        plan.add_page()
        keep = add_symbol(plan, 1, page=1)
        drop = add_symbol(plan, 2, page=2)
        view.select_page(2)
        box = box_of(view, drop)
        assert view.delete_page()
        assert plan.num_pages == 1
        assert plan.active_page == 1
        assert plan.elements == [keep]
        assert box in tree.removed
        assert not box_of(view, keep).has_class(HIDDEN)
        assert history.stored == ["Delete page"]

    def test_ribbon_state(self, view, plan):
        state = view.ribbon_state()
        assert state["can_add_page"]
        assert not state["can_delete_page"]
        view.add_page()
        view.select_page(1)
        state = view.ribbon_state()
        assert not state["can_add_page"]
        assert state["can_delete_page"]
        assert state["can_undo"]


class TestElementCommands:
    def test_add_electro_item(self, view, plan, history):
        existing = add_symbol(plan, 1)
        view.reconcile()
        element = view.add_electro_item(ElementProperties(electro_id=2, adreslocation=LabelAnchor.ABOVE))
        assert element is not None
        assert (element.posx, element.posy) == (550, 300)
        assert plan.elements == [existing, element]
        assert view.selected_element() is element
        assert box_of(view, element).attr("z") == 1
        assert label_of(view, element).label_text == "K2"
        assert history.stored == ["Add element"]

    def test_add_electro_item_without_id(self, view, plan, prompts):
        assert view.add_electro_item(ElementProperties()) is None
        assert prompts.alerts == ["No valid ID entered!"]
        assert plan.elements == []

    def test_add_electro_item_unknown_id(self, view, plan, prompts):
        assert view.add_electro_item(ElementProperties(electro_id=42)) is None
        assert len(prompts.alerts) == 1
        assert plan.elements == []

    def test_add_on_active_page(self, view, plan):
        view.add_page()
        element = view.add_electro_item(ElementProperties(electro_id=1))
        assert element.page == 2

    def test_add_from_file(self, view, plan, tmp_path):
        path = tmp_path / "photo.png"
        Image.new("RGB", (40, 20), "blue").save(path)
        element = view.add_element_from_file(path)
        box = box_of(view, element)
        assert (box.attr("width"), box.attr("height")) == (50, 30)
        assert label_of(view, element).label_text == ""

    def test_add_from_bad_file(self, view, plan, prompts, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"garbage")
        assert view.add_element_from_file(path) is None
        assert len(prompts.alerts) == 1
        assert plan.elements == []

    def test_edit_selected(self, view, plan, history):
        element = add_symbol(plan, 1)
        view.reconcile()
        view.select(box_of(view, element))
        assert view.edit_selected(ElementProperties(
            electro_id=1,
            adrestype=AdresType.MANUAL,
            adres="X9",
            adreslocation=LabelAnchor.RIGHT,
            labelfontsize=14,
            scale=2.0,
            rotate=180,
        ))
        box, label = box_of(view, element), label_of(view, element)
        assert label.label_text == "X9"
        assert label.font_size == 14
        assert box.attr("width") == 110
        assert box.attr("transform") == RotationTransform(0, True)
        assert history.stored == ["Edit element"]

    def test_edit_image_applies_label_anchor(self, view, plan, tmp_path):
        path = tmp_path / "photo.png"
        Image.new("RGB", (40, 20), "blue").save(path)
        element = view.add_element_from_file(path)
        assert view.edit_selected(ElementProperties(adreslocation=LabelAnchor.ABOVE))
        assert element.get_adres_location() == LabelAnchor.ABOVE
        assert element.labelposy < element.posy

    def test_edit_without_selection(self, view, plan):
        add_symbol(plan, 1)
        view.reconcile()
        assert not view.edit_selected(ElementProperties(electro_id=1))
