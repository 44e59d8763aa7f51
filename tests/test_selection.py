"""
Unit tests for selection and rectangle-drag hit-testing.

Tests:
- Modifier rules for direct clicks and empty-space clicks
- Rectangle intersection per measurement type
- Rectangle drag through the engine (visual tier and commit)
"""

import pytest

from measurelab.core.model import Rect
from measurelab.features.editing.drag import MarqueeDrag
from measurelab.features.editing.selection import (
    add_to_selection,
    empty_click_selection,
    measurement_intersects_rect,
    measurements_in_rect,
    remove_from_selection,
    toggle_selection,
    update_selection_with_modifiers,
)

from conftest import click, drag, make_count, make_line, make_surface, press, secondary


class TestSelectionRules:
    """Tests for pure selection set operations."""

    def test_plain_click_replaces(self):
        assert update_selection_with_modifiers({'a', 'b'}, 'c') == {'c'}

    @pytest.mark.parametrize("mods", [{'shift': True}, {'ctrl': True}, {'meta': True}])
    def test_modifier_toggles(self, mods):
        assert update_selection_with_modifiers({'a'}, 'b', **mods) == {'a', 'b'}
        assert update_selection_with_modifiers({'a', 'b'}, 'b', **mods) == {'a'}

    def test_empty_click(self):
        assert empty_click_selection({'a'}, shift=False) == set()
        assert empty_click_selection({'a'}, shift=True) == {'a'}

    def test_set_helpers_do_not_mutate(self):
        current = frozenset({'a'})
        assert toggle_selection(current, 'a') == set()
        assert add_to_selection(current, ['b']) == {'a', 'b'}
        assert remove_from_selection(current, ['a', 'z']) == set()
        assert current == {'a'}


class TestRectIntersection:
    """Tests for measurement_intersects_rect and measurements_in_rect."""

    def test_count_inside_and_outside(self):
        inside = make_count(5, 5)
        outside = make_count(20, 20)
        rect = Rect(0, 0, 10, 10)
        assert measurements_in_rect([inside, outside], rect, 0) == [inside.id]

    def test_count_box_shrinks_with_zoom(self):
        """The marker box is fixed in device pixels."""
        near = make_count(15, 5)
        rect = Rect(0, 0, 10, 10)
        assert measurement_intersects_rect(near, rect, scale=1.0)
        assert not measurement_intersects_rect(near, rect, scale=4.0)

    def test_line_crossing_rect(self):
        line = make_line((-10, 5), (30, 5))
        assert measurement_intersects_rect(line, Rect(0, 0, 10, 10))

    def test_line_outside(self):
        line = make_line((-10, -10), (-10, 30))
        assert not measurement_intersects_rect(line, Rect(0, 0, 10, 10))

    def test_surface_vertex_or_bounds(self):
        surface = make_surface([(20, 20), (40, 20), (40, 40)])
        assert measurement_intersects_rect(surface, Rect(35, 25, 10, 10))
        assert not measurement_intersects_rect(surface, Rect(0, 0, 10, 10))

    def test_negative_rect(self):
        assert measurement_intersects_rect(make_count(5, 5), Rect(10, 10, -10, -10))

    def test_page_filter(self):
        here = make_count(5, 5)
        elsewhere = make_count(5, 5, page_index=1)
        everywhere = make_count(5, 5, page_index=None)
        ids = measurements_in_rect([here, elsewhere, everywhere], Rect(0, 0, 10, 10), 0)
        assert ids == [here.id, everywhere.id]


class TestMarqueeDrag:
    """Tests for the two-tier rectangle drag."""

    def test_hidden_until_dragging(self):
        marquee = MarqueeDrag((0, 0))
        assert marquee.update((2, 2), dragging=False) is None
        assert marquee.update((10, 10), dragging=True) == Rect(0, 0, 10, 10)
        assert marquee.visible

    def test_rect_is_normalized(self):
        marquee = MarqueeDrag((10, 10))
        marquee.update((0, 5), dragging=True)
        assert marquee.rect == Rect(0, 5, 10, 5)


@pytest.fixture
def scene(engine):
    """Two count markers on the active page."""
    a = make_count(50, 50, name='Count 1')
    b = make_count(200, 200, name='Count 2')
    engine.set_measurements([a, b])
    return engine, a, b


class TestEngineSelection:
    """Tests for selection through CanvasEngine."""

    def test_rectangle_replaces(self, scene, recorder):
        engine, a, b = scene
        engine.set_selection({b.id})
        drag(engine, (0, 0), (100, 100))
        assert engine.selection == {a.id}
        marquee_calls = recorder.named('marquee')
        assert marquee_calls[-1] == (None,)
        assert all(rect is not None for (rect,) in marquee_calls[:-1])

    def test_rectangle_with_shift_unions(self, scene):
        engine, a, b = scene
        engine.set_selection({b.id})
        drag(engine, (0, 0), (100, 100), shift=True)
        assert engine.selection == {a.id, b.id}

    def test_click_without_drag_clears(self, scene, recorder):
        engine, a, b = scene
        engine.set_selection({a.id})
        click(engine, 500, 400)
        assert engine.selection == set()
        assert recorder.named('marquee') == []

    def test_small_motion_is_still_a_click(self, scene, recorder):
        engine, a, b = scene
        engine.set_selection({a.id})
        drag(engine, (500, 400), (503, 402), shift=True)
        assert engine.selection == {a.id}
        assert recorder.named('marquee') == []

    def test_direct_click_and_toggle(self, scene):
        engine, a, b = scene
        click(engine, 50, 50)
        assert engine.selection == {a.id}
        click(engine, 200, 200, shift=True)
        assert engine.selection == {a.id, b.id}
        click(engine, 50, 50, ctrl=True)
        assert engine.selection == {b.id}
        click(engine, 50, 50)
        assert engine.selection == {a.id}

    def test_drag_from_measurement_starts_no_rectangle(self, scene):
        engine, a, b = scene
        drag(engine, (50, 50), (300, 300))
        assert engine.marquee is None
        assert engine.selection == set()

    def test_topmost_wins(self, engine):
        below = make_count(50, 50)
        above = make_count(52, 52)
        engine.set_measurements([below, above])
        click(engine, 51, 51)
        assert engine.selection == {above.id}

    def test_secondary_click_selects_first(self, scene, recorder):
        engine, a, b = scene
        engine.set_selection({a.id})
        engine.pointer_down(secondary(200, 200))
        assert engine.selection == {b.id}
        (point, hit), = recorder.named('context')
        assert hit == b.id
        assert point == (200, 200)

    def test_secondary_click_keeps_existing_multi_selection(self, scene):
        engine, a, b = scene
        engine.set_selection({a.id, b.id})
        engine.pointer_down(secondary(50, 50))
        assert engine.selection == {a.id, b.id}

    def test_escape_aborts_rectangle(self, scene, recorder):
        engine, a, b = scene
        engine.pointer_down(press(0, 0))
        engine.pointer_move(press(100, 100))
        assert engine.key_press('Escape')
        assert engine.marquee is None
        assert recorder.named('marquee')[-1] == (None,)

    def test_select_all_is_page_scoped(self, scene):
        engine, a, b = scene
        other = make_count(10, 10, page_index=1)
        engine.set_measurements([a, b, other])
        assert engine.key_press('a', ctrl=True)
        assert engine.selection == {a.id, b.id}
        engine.clear_selection()
        assert engine.selection == set()

    def test_other_page_not_hit(self, engine):
        other = make_count(50, 50, page_index=1)
        engine.set_measurements([other])
        click(engine, 50, 50)
        assert engine.selection == set()

    def test_set_page_clears_selection(self, scene):
        engine, a, b = scene
        engine.select_all()
        engine.set_page(1)
        assert engine.selection == set()
        assert engine.page_measurements() == []

    def test_selection_callback_only_on_change(self, scene, recorder):
        engine, a, b = scene
        engine.set_selection({a.id})
        engine.set_selection({a.id})
        assert recorder.named('selection') == [({a.id},)]
