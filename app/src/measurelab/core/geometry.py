from __future__ import annotations

import math
from typing import Sequence, Tuple

from .constants import COLINEAR_TOLERANCE, PARALLEL_TOLERANCE
from .model import Rect

PointLike = Tuple[float, float]


def _bounds(rect: Rect) -> Tuple[float, float, float, float]:
    x, y, w, h = rect
    return min(x, x + w), min(y, y + h), max(x, x + w), max(y, y + h)


def normalize_rect(rect: Rect) -> Rect:
    return Rect(*rect).normalized()


def rect_from_corners(a: PointLike, b: PointLike) -> Rect:
    return Rect(a[0], a[1], b[0] - a[0], b[1] - a[1])


def point_in_rect(pt: PointLike, rect: Rect) -> bool:
    """Inclusive containment test; rectangles may have negative width/height."""
    min_x, min_y, max_x, max_y = _bounds(rect)
    x, y = pt
    return min_x <= x <= max_x and min_y <= y <= max_y


def distance(p1: PointLike, p2: PointLike) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])


def is_near(pt: PointLike, target: PointLike, threshold: float) -> bool:
    return distance(pt, target) <= threshold


def segments_intersect(p1: PointLike, p2: PointLike, p3: PointLike, p4: PointLike) -> bool:
    """Parametric segment intersection that also reports colinear overlap."""
    denom = (p4[1] - p3[1]) * (p2[0] - p1[0]) - (p4[0] - p3[0]) * (p2[1] - p1[1])

    if abs(denom) < PARALLEL_TOLERANCE:
        length = distance(p1, p2)
        if length < PARALLEL_TOLERANCE:
            # p1-p2 is a point: overlap only if it lies on p3-p4
            return point_segment_distance(p1, p3, p4) < COLINEAR_TOLERANCE
        dx, dy = p2[0] - p1[0], p2[1] - p1[1]
        dist3 = abs(dy * p3[0] - dx * p3[1] + p2[0] * p1[1] - p2[1] * p1[0]) / length
        dist4 = abs(dy * p4[0] - dx * p4[1] + p2[0] * p1[1] - p2[1] * p1[0]) / length
        if dist3 >= COLINEAR_TOLERANCE or dist4 >= COLINEAR_TOLERANCE:
            return False
        # Colinear: compare intervals on the axis with more spread
        if abs(dx) >= abs(dy):
            a_lo, a_hi = sorted((p1[0], p2[0]))
            b_lo, b_hi = sorted((p3[0], p4[0]))
        else:
            a_lo, a_hi = sorted((p1[1], p2[1]))
            b_lo, b_hi = sorted((p3[1], p4[1]))
        return not (a_hi < b_lo or b_hi < a_lo)

    ua = ((p4[0] - p3[0]) * (p1[1] - p3[1]) - (p4[1] - p3[1]) * (p1[0] - p3[0])) / denom
    ub = ((p2[0] - p1[0]) * (p1[1] - p3[1]) - (p2[1] - p1[1]) * (p1[0] - p3[0])) / denom
    tol = PARALLEL_TOLERANCE
    return -tol <= ua <= 1 + tol and -tol <= ub <= 1 + tol


def _on_edge(fixed_a: float, fixed_b: float, edge: float,
             lo: float, hi: float, free_a: float, free_b: float) -> bool:
    """Both fixed coordinates sit on ``edge`` and the free span overlaps [lo, hi]."""
    if abs(fixed_a - edge) >= COLINEAR_TOLERANCE or abs(fixed_b - edge) >= COLINEAR_TOLERANCE:
        return False
    span_lo, span_hi = sorted((free_a, free_b))
    return not (span_hi < lo or span_lo > hi)


def segment_intersects_rect(a: PointLike, b: PointLike, rect: Rect) -> bool:
    if point_in_rect(a, rect) or point_in_rect(b, rect):
        return True

    min_x, min_y, max_x, max_y = _bounds(rect)
    # Segment lying along an edge
    if (_on_edge(a[1], b[1], min_y, min_x, max_x, a[0], b[0])
            or _on_edge(a[1], b[1], max_y, min_x, max_x, a[0], b[0])
            or _on_edge(a[0], b[0], min_x, min_y, max_y, a[1], b[1])
            or _on_edge(a[0], b[0], max_x, min_y, max_y, a[1], b[1])):
        return True

    corners = [(min_x, min_y), (max_x, min_y), (max_x, max_y), (min_x, max_y)]
    for i in range(4):
        if segments_intersect(a, b, corners[i], corners[(i + 1) % 4]):
            return True
    return False


def bounding_box(points: Sequence[PointLike]) -> Rect:
    if not points:
        return Rect(0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    min_x, min_y = min(xs), min(ys)
    return Rect(min_x, min_y, max(xs) - min_x, max(ys) - min_y)


def rects_intersect(r1: Rect, r2: Rect) -> bool:
    """True unless the rectangles are fully separated along either axis."""
    a_min_x, a_min_y, a_max_x, a_max_y = _bounds(r1)
    b_min_x, b_min_y, b_max_x, b_max_y = _bounds(r2)
    return not (a_max_x < b_min_x or b_max_x < a_min_x
                or a_max_y < b_min_y or b_max_y < a_min_y)


def centered_rect(center: PointLike, size: float) -> Rect:
    half = size / 2.0
    return Rect(center[0] - half, center[1] - half, size, size)


def signed_polygon_area(points: Sequence[PointLike]) -> float:
    """Shoelace sum halved; positive for counter-clockwise winding in y-up axes."""
    if len(points) < 3:
        return 0.0
    area = 0.0
    n = len(points)
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def polygon_area(points: Sequence[PointLike]) -> float:
    """Return the absolute area of a polygon using the shoelace formula."""
    return abs(signed_polygon_area(points))


def polyline_length(points: Sequence[PointLike]) -> float:
    if len(points) < 2:
        return 0.0
    return sum(distance(points[i - 1], points[i]) for i in range(1, len(points)))


def point_segment_distance(pt: PointLike, a: PointLike, b: PointLike) -> float:
    ax, ay = a
    abx, aby = b[0] - ax, b[1] - ay
    len2 = abx * abx + aby * aby
    if len2 < 1e-12:
        return distance(pt, a)
    t = ((pt[0] - ax) * abx + (pt[1] - ay) * aby) / len2
    t = max(0.0, min(1.0, t))
    return distance(pt, (ax + t * abx, ay + t * aby))


def point_in_polygon(pt: PointLike, polygon: Sequence[PointLike]) -> bool:
    """Ray casting algorithm to determine if a point lies within a polygon."""
    x, y = pt
    inside = False
    n = len(polygon)
    if n < 3:
        return False
    p1x, p1y = polygon[0]
    for i in range(n + 1):
        p2x, p2y = polygon[i % n]
        if min(p1y, p2y) < y <= max(p1y, p2y) and x <= max(p1x, p2x):
            xinters = p1x
            if p1y != p2y:
                xinters = (y - p1y) * (p2x - p1x) / (p2y - p1y) + p1x
            if p1x == p2x or x <= xinters:
                inside = not inside
        p1x, p1y = p2x, p2y
    return inside
