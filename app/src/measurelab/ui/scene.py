from __future__ import annotations

from typing import Callable, Iterable, Optional, Protocol, Tuple

from ..config import CanvasConfig
from ..core.geometry import centered_rect, distance, point_in_polygon, point_in_rect, point_segment_distance
from ..core.model import Measurement, MeasurementType, Point


class HitTester(Protocol):
    """Anything that can tell which measurement is drawn under a document point."""

    def topmost_measurement_at(self, point: Tuple[float, float]) -> Optional[str]:
        ...

    def endpoint_at(self, point: Tuple[float, float]) -> Optional[Point]:
        ...


def _segments(points, closed: bool):
    n = len(points)
    for i in range(1, n):
        yield points[i - 1], points[i]
    if closed and n >= 3:
        yield points[-1], points[0]


def hit_measurement(measurement: Measurement, point: Tuple[float, float], scale: float,
                    canvas: CanvasConfig) -> bool:
    scale = scale if scale > 0 else 1.0
    tolerance = canvas.hit_tolerance / scale
    pts = measurement.points

    if measurement.type is MeasurementType.COUNT:
        return point_in_rect(point, centered_rect(pts[0], canvas.count_size / scale))

    closed = measurement.type is MeasurementType.SURFACE
    if closed and point_in_polygon(point, pts):
        return True
    return any(point_segment_distance(point, a, b) <= tolerance for a, b in _segments(pts, closed))


def nearest_endpoint(measurements: Iterable[Measurement], point: Tuple[float, float], scale: float,
                     page_index: Optional[int], canvas: CanvasConfig) -> Optional[Point]:
    """Closest length or area vertex within the endpoint marker radius, if any."""
    scale = scale if scale > 0 else 1.0
    radius = canvas.endpoint_radius / scale
    best: Optional[Point] = None
    best_dist = radius
    for measurement in measurements:
        if measurement.type is MeasurementType.COUNT:
            continue
        if page_index is not None and not measurement.on_page(page_index):
            continue
        for vertex in measurement.points:
            d = distance(point, vertex)
            if d <= best_dist:
                best, best_dist = vertex, d
    return best


class SceneHitTester:
    """Manual z-order walk over the measurements of the active page.

    Later measurements are drawn on top, so the walk runs newest first.
    """

    def __init__(self, measurements: Callable[[], Iterable[Measurement]],
                 scale: Callable[[], float],
                 page_index: Callable[[], Optional[int]],
                 canvas: Optional[CanvasConfig] = None) -> None:
        self._measurements = measurements
        self._scale = scale
        self._page_index = page_index
        self.canvas = canvas or CanvasConfig()

    @classmethod
    def for_engine(cls, engine) -> "SceneHitTester":
        return cls(
            lambda: engine.measurements,
            lambda: engine.viewport.scale,
            lambda: engine.page_index,
            engine.config.canvas,
        )

    def topmost_measurement_at(self, point: Tuple[float, float]) -> Optional[str]:
        page = self._page_index()
        scale = self._scale()
        for measurement in reversed(list(self._measurements())):
            if page is not None and not measurement.on_page(page):
                continue
            if hit_measurement(measurement, point, scale, self.canvas):
                return measurement.id
        return None

    def endpoint_at(self, point: Tuple[float, float]) -> Optional[Point]:
        return nearest_endpoint(self._measurements(), point, self._scale(), self._page_index(), self.canvas)
