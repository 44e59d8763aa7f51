"""
Unit tests for measurelab.features.navigation.

Tests:
- Document centering offset and its degenerate cases
- Device/document round trips
- Anchor-preserving zoom, clamping and fit-to-view
- Click versus drag and panning
"""

import math

import pytest

from measurelab.config import CanvasConfig
from measurelab.core.constants import MAX_SCALE, MIN_SCALE
from measurelab.core.model import Point, Tool, ViewportState
from measurelab.features.navigation.coordinates import (
    compute_document_offset,
    device_to_document,
    document_to_device,
    viewport_to_device,
    viewport_to_document,
)
from measurelab.features.navigation.pan import PressTracker
from measurelab.features.navigation.zoom import fit_viewport, zoom_viewport

from conftest import drag, press


def _viewport(scale=1.0, pan=(0.0, 0.0)) -> ViewportState:
    return ViewportState(scale=scale, pan_offset=Point(*pan), viewport_size=(800, 600),
                         document_size=(1000, 500))


class TestDocumentOffset:
    """Tests for compute_document_offset."""

    def test_centers_document(self):
        off = compute_document_offset((800, 600), (1000, 500), 0.8)
        assert off.x == pytest.approx(0)
        assert off.y == pytest.approx(125)

    @pytest.mark.parametrize("viewport, document, scale", [
        ((0, 0), (100, 100), 1.0),
        ((800, 600), (0, 500), 1.0),
        ((800, 600), (1000, 0), 1.0),
        ((800, 600), (1000, 500), 0.0),
    ])
    def test_degenerate_inputs_give_zero_offset(self, viewport, document, scale):
        """Zero sizes or scale never divide by zero."""
        off = compute_document_offset(viewport, document, scale)
        assert off == (0.0, 0.0)
        assert not any(math.isnan(v) for v in off)


class TestRoundTrip:
    """Tests for device -> document -> device conversions."""

    @pytest.mark.parametrize("scale", [MIN_SCALE, 0.37, 1.0, 2.5, MAX_SCALE])
    @pytest.mark.parametrize("pan", [(0, 0), (-120.5, 48.25), (300, -900)])
    def test_round_trip(self, scale, pan):
        vp = _viewport(scale, pan)
        for device in [(0, 0), (400, 300), (799.5, 12.25), (-50, 1200)]:
            back = viewport_to_device(vp, viewport_to_document(vp, device))
            assert back.x == pytest.approx(device[0])
            assert back.y == pytest.approx(device[1])

    def test_explicit_offset_round_trip(self):
        doc = device_to_document((10, 20), (3, 4), 2.0, (5, 6))
        assert doc == Point(-1.5, 2.0)
        assert document_to_device(doc, (3, 4), 2.0, (5, 6)) == Point(10, 20)


class TestZoom:
    """Tests for anchor-preserving zoom."""

    @pytest.mark.parametrize("start_scale, target", [
        (1.0, 1.1),
        (1.0, 0.9),
        (0.5, 3.0),
        (1.0, MAX_SCALE),
        (1.0, MIN_SCALE),
        (MAX_SCALE, MAX_SCALE * 1.1),
        (MIN_SCALE, MIN_SCALE * 0.9),
    ])
    @pytest.mark.parametrize("anchor", [(0, 0), (400, 300), (731.5, 17.25)])
    def test_anchor_stays_under_pointer(self, start_scale, target, anchor):
        """The document point under the anchor is unchanged by zooming."""
        before = _viewport(start_scale, (25.0, -40.0))
        doc_before = viewport_to_document(before, anchor)
        after = zoom_viewport(before, anchor, target)
        doc_after = viewport_to_document(after, anchor)
        assert doc_after.x == pytest.approx(doc_before.x)
        assert doc_after.y == pytest.approx(doc_before.y)

    def test_scale_is_clamped(self):
        canvas = CanvasConfig()
        assert zoom_viewport(_viewport(), (0, 0), 100).scale == canvas.max_scale
        assert zoom_viewport(_viewport(), (0, 0), 0.001).scale == canvas.min_scale

    def test_fit_viewport(self):
        fitted = fit_viewport(_viewport(2.0, (10, 10)))
        assert fitted.scale == pytest.approx(0.8)
        assert fitted.pan_offset == (0, 0)
        origin = viewport_to_device(fitted, (0, 0))
        assert origin.y == pytest.approx(100)

    def test_fit_viewport_degenerate(self):
        """Without sizes only the pan is reset."""
        vp = ViewportState(scale=2.0, pan_offset=Point(5, 5))
        fitted = fit_viewport(vp)
        assert fitted.scale == 2.0
        assert fitted.pan_offset == (0, 0)


class TestEngineNavigation:
    """Tests for navigation through the engine."""

    def test_wheel_direction(self, engine):
        engine.wheel((500, 250), 120)
        assert engine.viewport.scale == pytest.approx(0.9)
        engine.wheel((500, 250), -120)
        assert engine.viewport.scale == pytest.approx(0.99)

    def test_wheel_keeps_pointer_anchor(self, engine):
        before = engine.to_document((120, 80))
        engine.wheel((120, 80), -1)
        after = engine.to_document((120, 80))
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)

    def test_zoom_defaults_to_viewport_center(self, engine):
        center = engine.to_document((500, 250))
        engine.zoom_in()
        assert engine.to_document((500, 250)).x == pytest.approx(center.x)

    def test_fit_to_view(self, engine):
        engine.set_zoom(3.0, (0, 0))
        engine.pan_by(40, 40)
        engine.fit_to_view()
        assert engine.viewport.scale == pytest.approx(1.0)
        assert engine.viewport.pan_offset == (0, 0)

    def test_pan_drag(self, engine):
        engine.set_tool(Tool.PAN)
        drag(engine, (100, 100), (150, 130))
        assert engine.viewport.pan_offset == (pytest.approx(50), pytest.approx(30))
        assert engine.pan_origin is None

    def test_pan_below_threshold_does_not_move(self, engine):
        engine.set_tool(Tool.PAN)
        drag(engine, (100, 100), (103, 101))
        assert engine.viewport.pan_offset == (0, 0)


class TestPressTracker:
    """Tests for click/drag disambiguation."""

    def test_small_motion_is_click(self):
        tracker = PressTracker(Point(0, 0), Point(0, 0), 5.0)
        assert not tracker.move((3, 4))

    def test_exceeding_threshold_is_drag(self):
        tracker = PressTracker(Point(0, 0), Point(0, 0), 5.0)
        assert tracker.move((6, 0))

    def test_drag_is_sticky(self):
        """Returning to the start point does not undo a drag."""
        tracker = PressTracker(Point(0, 0), Point(0, 0), 5.0)
        tracker.move((10, 0))
        assert tracker.move((0, 0))

    def test_engine_press_starts_tracker(self, engine):
        engine.pointer_down(press(10, 10))
        assert engine.press is not None
        assert engine.press.threshold == engine.config.canvas.drag_threshold
