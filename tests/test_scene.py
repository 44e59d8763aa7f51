"""
Unit tests for measurelab.ui.scene.

Tests:
- Per-type point hit-testing with zoom-scaled tolerance
- Topmost lookup across pages and draw order
- Endpoint lookup for snapping
"""

from measurelab.config import CanvasConfig
from measurelab.core.model import Point
from measurelab.ui.scene import HitTester, SceneHitTester, hit_measurement, nearest_endpoint

from conftest import make_count, make_line, make_surface, press

CANVAS = CanvasConfig()


class TestHitMeasurement:
    """Tests for hit_measurement."""

    def test_count_box(self):
        m = make_count(10, 10)
        assert hit_measurement(m, (17, 17), 1.0, CANVAS)
        assert not hit_measurement(m, (19, 10), 1.0, CANVAS)

    def test_line_tolerance_scales_with_zoom(self):
        m = make_line((0, 0), (100, 0))
        assert hit_measurement(m, (50, 5), 1.0, CANVAS)
        assert not hit_measurement(m, (50, 5), 2.0, CANVAS)

    def test_surface_interior_and_closing_edge(self):
        m = make_surface([(0, 0), (100, 0), (100, 100)])
        assert hit_measurement(m, (80, 40), 1.0, CANVAS)
        # Closing edge runs from (100, 100) back to (0, 0)
        assert hit_measurement(m, (48, 52), 1.0, CANVAS)
        assert not hit_measurement(m, (10, 60), 1.0, CANVAS)


class TestSceneHitTester:
    """Tests for SceneHitTester.topmost_measurement_at."""

    def test_topmost_is_last_drawn(self):
        first, second = make_count(10, 10), make_count(12, 12)
        tester = SceneHitTester(lambda: [first, second], lambda: 1.0, lambda: 0)
        assert tester.topmost_measurement_at((11, 11)) == second.id

    def test_skips_other_pages(self):
        other = make_count(10, 10, page_index=3)
        tester = SceneHitTester(lambda: [other], lambda: 1.0, lambda: 0)
        assert tester.topmost_measurement_at((10, 10)) is None

    def test_empty_space(self):
        tester = SceneHitTester(lambda: [make_count(10, 10)], lambda: 1.0, lambda: 0)
        assert tester.topmost_measurement_at((500, 500)) is None

    def test_follows_engine_state(self, engine):
        m = make_count(10, 10)
        engine.set_measurements([m])
        assert engine.hit_tester.topmost_measurement_at((10, 10)) == m.id
        engine.set_page(2)
        assert engine.hit_tester.topmost_measurement_at((10, 10)) is None

    def test_custom_hit_tester(self, clock):
        """Any object with topmost_measurement_at can drive selection."""
        from measurelab.core.engine import CanvasEngine

        class Always:
            def topmost_measurement_at(self, point):
                return target.id

            def endpoint_at(self, point):
                return None

        target = make_count(900, 900)
        tester: HitTester = Always()
        engine = CanvasEngine((100, 100), (100, 100), measurements=[target],
                              hit_tester=tester, clock=clock)
        engine.pointer_down(press(1, 1))
        engine.pointer_up(press(1, 1))
        assert engine.selection == {target.id}


class TestNearestEndpoint:
    """Tests for nearest_endpoint and SceneHitTester.endpoint_at."""

    def test_returns_vertex_within_radius(self):
        line = make_line((100, 100), (200, 100))
        assert nearest_endpoint([line], (202, 101), 1.0, 0, CANVAS) == Point(200, 100)

    def test_outside_radius(self):
        line = make_line((100, 100), (200, 100))
        assert nearest_endpoint([line], (150, 100), 1.0, 0, CANVAS) is None

    def test_radius_scales_with_zoom(self):
        line = make_line((0, 0), (100, 0))
        assert nearest_endpoint([line], (103, 0), 1.0, 0, CANVAS) == Point(100, 0)
        assert nearest_endpoint([line], (103, 0), 2.0, 0, CANVAS) is None

    def test_counts_are_not_endpoints(self):
        assert nearest_endpoint([make_count(10, 10)], (10, 10), 1.0, 0, CANVAS) is None

    def test_custom_radius(self):
        line = make_line((0, 0), (100, 0))
        wide = CanvasConfig(endpoint_radius=12)
        assert nearest_endpoint([line], (110, 0), 1.0, 0, wide) == Point(100, 0)

    def test_tester_respects_page(self):
        surface = make_surface([(0, 0), (50, 0), (50, 50)], page_index=1)
        tester = SceneHitTester(lambda: [surface], lambda: 1.0, lambda: 0)
        assert tester.endpoint_at((50, 50)) is None
        tester = SceneHitTester(lambda: [surface], lambda: 1.0, lambda: 1)
        assert tester.endpoint_at((51, 49)) == Point(50, 50)
