from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple

from ...config import MeasurementDefaults
from ...core.constants import COUNT_UNIT, PIXEL_UNIT
from ...core.geometry import is_near
from ...core.model import (
    MIN_POINTS,
    CalibrationRecord,
    DrawDraft,
    Measurement,
    MeasurementType,
    Point,
    Tool,
)
from ...core.units import calculate_area, calculate_length

if TYPE_CHECKING:
    from ...core.engine import CanvasEngine

logger = logging.getLogger(__name__)

DEFAULT_NAMES = {
    MeasurementType.LINEAR: 'Length',
    MeasurementType.SURFACE: 'Area',
    MeasurementType.COUNT: 'Count',
}

DRAW_TOOLS = (Tool.LINEAR, Tool.SURFACE, Tool.COUNT)
# Tools whose capture spans several clicks
DRAFT_TOOLS = (Tool.LINEAR, Tool.SURFACE)

_ORDINAL_RE = re.compile(r'\s+(\d+)$')


def next_default_name(mtype: MeasurementType, existing: Iterable[Measurement]) -> str:
    """``"<Base> N"`` with N one past the highest ordinal in use for ``mtype``."""
    base = DEFAULT_NAMES[mtype]
    highest = 0
    for m in existing:
        if m.type is not mtype:
            continue
        match = _ORDINAL_RE.search(m.name)
        if match and m.name[:match.start()] == base:
            highest = max(highest, int(match.group(1)))
    return f"{base} {highest + 1}"


def compute_value(mtype: MeasurementType, points: Sequence[Tuple[float, float]],
                  calibration: Optional[CalibrationRecord], display_unit: str) -> Tuple[float, str]:
    """Return (value, unit) for a finished capture."""
    if mtype is MeasurementType.COUNT:
        return 1.0, COUNT_UNIT
    calibrated = calibration is not None and calibration.is_calibrated
    unit = display_unit if calibrated else PIXEL_UNIT
    if mtype is MeasurementType.LINEAR:
        return calculate_length(points, calibration, display_unit), unit
    return calculate_area(points, calibration, display_unit), unit


def build_measurement(mtype: MeasurementType, points: Sequence[Tuple[float, float]],
                      calibration: Optional[CalibrationRecord],
                      defaults: MeasurementDefaults,
                      existing: Iterable[Measurement],
                      page_index: Optional[int]) -> Measurement:
    value, unit = compute_value(mtype, points, calibration, defaults.display_unit)
    return Measurement(
        name=next_default_name(mtype, existing),
        type=mtype,
        value=value,
        unit=unit,
        points=tuple(points),
        page_index=page_index,
        color=defaults.color_for(mtype),
        category=defaults.default_category,
    )


def close_threshold(engine: "CanvasEngine") -> float:
    """Closing radius in document units; shrinks as the user zooms in."""
    return engine.config.canvas.close_polygon_threshold / engine.viewport.scale


def is_near_first_point(points: List[Point], point: Tuple[float, float], threshold: float) -> bool:
    """True when a click should close the polygon instead of adding a vertex."""
    return len(points) >= 3 and is_near(point, points[0], threshold)


def draw_on_motion(engine: "CanvasEngine", point: Optional[Tuple[float, float]]) -> None:
    if engine.draft is None:
        return
    engine.draft.preview_point = None if point is None else Point(*point)


def start_draft(engine: "CanvasEngine", tool: Tool, point: Tuple[float, float]) -> DrawDraft:
    engine.draft = DrawDraft(tool=tool, points=[Point(*point)])
    logger.debug("Draft opened for %s", tool.value)
    return engine.draft


def draw_on_canvas_click(engine: "CanvasEngine", point: Tuple[float, float]) -> bool:
    """Capture a click for the active draw tool. Return True if handled."""
    tool = engine.tool
    if tool not in DRAW_TOOLS:
        return False
    point = Point(float(point[0]), float(point[1]))

    if tool is Tool.COUNT:
        _commit(engine, MeasurementType.COUNT, [point])
        return True

    # Clicks on an existing endpoint marker reuse that exact vertex
    snapped = engine.hit_tester.endpoint_at(point)
    if snapped is not None:
        logger.debug("Snapped %s to endpoint %s", tuple(point), tuple(snapped))
        point = Point(*snapped)

    draft = engine.draft
    if draft is None or draft.tool is not tool:
        start_draft(engine, tool, point)
        return True

    if tool is Tool.SURFACE and is_near_first_point(draft.points, point, close_threshold(engine)):
        finish_measurement(engine)
        return True

    draft.points.append(point)
    if tool is Tool.LINEAR and len(draft.points) >= MIN_POINTS[MeasurementType.LINEAR]:
        finish_measurement(engine)
    return True


def finish_measurement(engine: "CanvasEngine") -> Optional[Measurement]:
    """Finalize the open draft; with too few points the draft stays open."""
    draft = engine.draft
    if draft is None:
        return None
    mtype = draft.tool.measurement_type
    if len(draft.points) < MIN_POINTS[mtype]:
        logger.debug("Not finalizing %s draft with %d points", mtype.value, len(draft.points))
        return None
    points = list(draft.points)
    engine.draft = None
    return _commit(engine, mtype, points)


def cancel_draft(engine: "CanvasEngine") -> None:
    if engine.draft is not None:
        logger.debug("Draft for %s discarded", engine.draft.tool.value)
    engine.draft = None
    engine.preview_throttle.reset()


def _commit(engine: "CanvasEngine", mtype: MeasurementType, points: List[Point]) -> Measurement:
    measurement = build_measurement(
        mtype,
        points,
        engine.calibration,
        engine.defaults,
        engine.measurements,
        engine.page_index,
    )
    engine.add_measurement(measurement)
    return measurement
