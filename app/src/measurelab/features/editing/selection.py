from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional, Set

from ...core.geometry import (
    bounding_box,
    centered_rect,
    normalize_rect,
    point_in_rect,
    rects_intersect,
    segment_intersects_rect,
)
from ...core.model import Measurement, MeasurementType, Rect


def toggle_selection(current: AbstractSet[str], measurement_id: str) -> Set[str]:
    selection = set(current)
    if measurement_id in selection:
        selection.discard(measurement_id)
    else:
        selection.add(measurement_id)
    return selection


def update_selection_with_modifiers(current: AbstractSet[str], measurement_id: str,
                                    shift: bool = False, ctrl: bool = False,
                                    meta: bool = False) -> Set[str]:
    """Shift/Ctrl/Cmd toggle membership; no modifier replaces the selection."""
    if shift or ctrl or meta:
        return toggle_selection(current, measurement_id)
    return {measurement_id}


def add_to_selection(current: AbstractSet[str], measurement_ids: Iterable[str]) -> Set[str]:
    return set(current) | set(measurement_ids)


def remove_from_selection(current: AbstractSet[str], measurement_ids: Iterable[str]) -> Set[str]:
    return set(current) - set(measurement_ids)


def empty_click_selection(current: AbstractSet[str], shift: bool) -> Set[str]:
    """Clicking empty space clears the selection unless Shift is held."""
    return set(current) if shift else set()


def measurement_intersects_rect(measurement: Measurement, rect: Rect, scale: float = 1.0,
                                count_size: float = 16.0) -> bool:
    rect = normalize_rect(rect)
    points = measurement.points

    if measurement.type is MeasurementType.COUNT:
        size = count_size / scale if scale > 0 else count_size
        return rects_intersect(centered_rect(points[0], size), rect)

    if measurement.type is MeasurementType.LINEAR:
        if point_in_rect(points[0], rect) or point_in_rect(points[-1], rect):
            return True
        return any(segment_intersects_rect(points[i - 1], points[i], rect)
                   for i in range(1, len(points)))

    if any(point_in_rect(p, rect) for p in points):
        return True
    return rects_intersect(bounding_box(points), rect)


def measurements_in_rect(measurements: Iterable[Measurement], rect: Rect, page_index: Optional[int],
                         scale: float = 1.0, count_size: float = 16.0) -> List[str]:
    """Ids of measurements on ``page_index`` touched by ``rect``, in input order."""
    hits = []
    for m in measurements:
        if page_index is not None and not m.on_page(page_index):
            continue
        if measurement_intersects_rect(m, rect, scale, count_size):
            hits.append(m.id)
    return hits
