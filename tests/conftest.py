"""Shared fixtures: a recording in-memory render tree and a small plan."""
from __future__ import annotations

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from canvas.events import EventTarget
from canvas.mixins import RenderTreeMixin, VisualNodeMixin
from context import EditorContext
from models import SituationPlan, SituationPlanElement
from settings import AppSettings
from symbols import ElectroSchema, Ventilator


# ---------------------------------------------------------------------------
# Fake render tree
# ---------------------------------------------------------------------------

class FakeNode(VisualNodeMixin, EventTarget):
    """Node that records every write pushed to the toolkit."""

    def __init__(self, element_id: str, kind: str):
        VisualNodeMixin.__init__(self, element_id)
        EventTarget.__init__(self)
        self.NODE_KIND = kind
        self.writes = []

    def _apply_attr(self, name, value):
        self.writes.append(("attr", name, value))

    def _apply_class(self, name, present):
        self.writes.append(("class", name, present))

    def _apply_content(self, markup):
        self.writes.append(("content", markup))

    def _apply_text(self, text):
        self.writes.append(("text", text))

    def _apply_font_size(self, size):
        self.writes.append(("font_size", size))

    def measured_width(self):
        if self.NODE_KIND == "label":
            return len(self.label_text) * (self.font_size or 0) * 0.5
        return super().measured_width()

    def measured_height(self):
        if self.NODE_KIND == "label":
            return (self.font_size or 0) * 1.2
        return super().measured_height()


class FakeRenderTree(RenderTreeMixin):
    def __init__(self, viewport=(800.0, 600.0), paper=(1123.0, 794.0)):
        super().__init__()
        self.attached = []
        self.removed = []
        self.attach_calls = 0
        self.zoom = 1.0
        self._viewport = viewport
        self._paper = paper

    def create_box(self, element_id):
        return FakeNode(element_id, "box")

    def create_label(self, element_id):
        return FakeNode(element_id, "label")

    def attach(self, fragment):
        self.attach_calls += 1
        super().attach(fragment)

    def _attach_node(self, node):
        self.attached.append(node)

    def remove(self, node):
        if node in self.attached:
            self.attached.remove(node)
        self.removed.append(node)

    def set_zoom(self, factor):
        self.zoom = factor

    def viewport_size(self):
        return self._viewport

    def paper_size(self):
        return self._paper

    def total_writes(self):
        return sum(len(n.writes) for n in self.attached)


class FakeHistory:
    def __init__(self):
        self.stored = []

    def store(self, text="Change"):
        self.stored.append(text)
        return True

    def undo_stack_size(self):
        return len(self.stored)

    def redo_stack_size(self):
        return 0


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def schema():
    s = ElectroSchema()
    s.add_item(Ventilator(1, nr="V1"))
    s.add_item(Ventilator(2, nr="V2", adres="K2"))
    return s


@pytest.fixture
def plan(schema):
    return SituationPlan(schema)


@pytest.fixture
def history():
    return FakeHistory()


@pytest.fixture
def prompts():
    """Records alerts and answers confirmations with ``prompts.answer``."""
    class Prompts:
        def __init__(self):
            self.alerts = []
            self.questions = []
            self.answer = True

        def alert(self, message):
            self.alerts.append(message)

        def confirm(self, message):
            self.questions.append(message)
            return self.answer

    return Prompts()


@pytest.fixture
def context(history, prompts):
    return EditorContext(history=history, settings=AppSettings(),
                         alert=prompts.alert, confirm=prompts.confirm)


@pytest.fixture
def tree():
    return FakeRenderTree()


@pytest.fixture
def view(tree, plan, context):
    from canvas.synchronizer import SituationPlanView
    v = SituationPlanView(tree, plan, context)
    yield v
    v.dispose()


def add_symbol(plan, item_id, posx=550.0, posy=300.0, page=1, **kwargs) -> SituationPlanElement:
    element = SituationPlanElement(page=page, posx=posx, posy=posy, electro_item_id=item_id, **kwargs)
    plan.add_element(element)
    element.update_size()
    return element


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)
    yield app
