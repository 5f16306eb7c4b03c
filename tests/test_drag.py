"""Tests for the pointer drag session in canvas/drag.py."""
from __future__ import annotations

import pytest

from canvas.drag import DragOffset, DragSession


class TestDragSession:
    def test_inactive_returns_none(self):
        assert DragSession().update(10, 10) is None

    def test_offset_follows_pointer(self):
        d = DragSession()
        d.start(100, 100, 520, 270, 1.0, 60, 60)
        assert d.update(130, 90) == DragOffset(550, 260)

    def test_zoom_divides_delta(self):
        d = DragSession()
        d.start(100, 100, 520, 270, 2.0, 60, 60)
        offset = d.update(140, 120)
        assert offset.left == pytest.approx(540)
        assert offset.top == pytest.approx(280)

    def test_clamped_to_half_size(self):
        d = DragSession()
        d.start(100, 100, 520, 270, 1.0, 60, 40)
        assert d.update(-5000, -5000) == DragOffset(-30, -20)

    def test_may_leave_canvas_right_and_bottom(self):
        d = DragSession()
        d.start(0, 0, 0, 0, 1.0, 60, 60)
        assert d.update(5000, 5000) == DragOffset(5000, 5000)

    def test_zero_zoom_treated_as_one(self):
        d = DragSession()
        d.start(0, 0, 10, 10, 0, 0, 0)
        assert d.update(5, 5) == DragOffset(15, 15)

    def test_end(self):
        d = DragSession()
        d.start(0, 0, 0, 0, 1.0)
        d.end()
        assert not d.active
        assert d.update(1, 1) is None

    def test_restart_replaces_session(self):
        d = DragSession()
        d.start(0, 0, 0, 0, 1.0)
        d.start(50, 50, 100, 100, 1.0)
        assert d.update(60, 60) == DragOffset(110, 110)
