from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, List, Optional, Tuple, Union

from ...core.geometry import polyline_length
from ...core.model import CalibrationRecord, Point, Tool
from ...core.units import validate_unit

if TYPE_CHECKING:
    from ...core.engine import CanvasEngine

logger = logging.getLogger(__name__)


class CalibrationState(enum.Enum):
    AWAITING_FIRST_POINT = 'awaiting_first_point'
    AWAITING_SECOND_POINT = 'awaiting_second_point'
    AWAITING_USER_DISTANCE = 'awaiting_user_distance'
    COMMITTED = 'committed'


def parse_real_distance(value: Union[str, float, int]) -> float:
    """Validate a user-entered real distance; raise ValueError with a user-facing message."""
    try:
        real_len = float(value)
    except (TypeError, ValueError):
        raise ValueError("Enter a numeric value for the length.") from None
    if real_len != real_len or real_len in (float('inf'), float('-inf')):
        raise ValueError("Enter a numeric value for the length.")
    if real_len <= 0:
        raise ValueError("Length must be greater than zero.")
    return real_len


class CalibrationProtocol:
    """Two clicks, then a user-entered distance, then a committed record.

    A cancel or a confirmed record returns the protocol to idle
    (awaiting the first point); an existing calibration is never touched
    until ``confirm`` succeeds.
    """

    def __init__(self) -> None:
        self.points: List[Point] = []
        self.state = CalibrationState.AWAITING_FIRST_POINT
        self.pixel_distance: Optional[float] = None

    @property
    def is_pending(self) -> bool:
        return bool(self.points)

    def click(self, point: Tuple[float, float]) -> CalibrationState:
        if self.state in (CalibrationState.AWAITING_USER_DISTANCE, CalibrationState.COMMITTED):
            # A fresh click after commit starts over; while waiting for a distance it is ignored
            if self.state is CalibrationState.AWAITING_USER_DISTANCE:
                return self.state
            self.reset()
        self.points.append(Point(float(point[0]), float(point[1])))
        if len(self.points) == 1:
            self.state = CalibrationState.AWAITING_SECOND_POINT
            return self.state
        pixel_dist = polyline_length(self.points)
        if pixel_dist <= 0:
            logger.warning("Calibration points coincide; select two distinct points")
            self.reset()
            return self.state
        self.pixel_distance = pixel_dist
        self.state = CalibrationState.AWAITING_USER_DISTANCE
        return self.state

    def confirm(self, real_distance: Union[str, float, int], unit: str) -> CalibrationRecord:
        if self.state is not CalibrationState.AWAITING_USER_DISTANCE or self.pixel_distance is None:
            raise RuntimeError("Calibration is not waiting for a distance")
        real_len = parse_real_distance(real_distance)
        validate_unit(unit)
        record = CalibrationRecord(
            pixel_distance=self.pixel_distance,
            real_distance=real_len,
            unit=unit,
            is_calibrated=True,
        )
        self.points.clear()
        self.pixel_distance = None
        self.state = CalibrationState.COMMITTED
        return record

    def cancel(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.points.clear()
        self.pixel_distance = None
        self.state = CalibrationState.AWAITING_FIRST_POINT


def cancel_scale_mode(engine: "CanvasEngine") -> None:
    if engine.calibration_protocol.is_pending:
        logger.debug("Calibration points discarded")
    engine.calibration_protocol.cancel()


def scale_on_canvas_click(engine: "CanvasEngine", point: Tuple[float, float]) -> bool:
    """Handle a click in calibration mode. Return True if handled."""
    if engine.tool is not Tool.CALIBRATE:
        return False
    state = engine.calibration_protocol.click(point)
    if state is CalibrationState.AWAITING_USER_DISTANCE:
        _prompt_scale_distance(engine)
    return True


def _prompt_scale_distance(engine: "CanvasEngine") -> None:
    prompt = engine.distance_prompt
    if prompt is None:
        return
    answer = prompt(engine.calibration_protocol.pixel_distance)
    if answer is None:
        cancel_scale_mode(engine)
        return
    real_len, unit = answer
    submit_scale_distance(engine, real_len, unit)


def submit_scale_distance(engine: "CanvasEngine", real_distance: Union[str, float, int],
                          unit: str) -> Optional[CalibrationRecord]:
    """Commit the pending calibration; return None and stay waiting on invalid input."""
    try:
        record = engine.calibration_protocol.confirm(real_distance, unit)
    except ValueError as e:
        logger.warning("Rejected calibration input %r %s: %s", real_distance, unit, e)
        return None
    engine.calibration = record
    logger.info("Calibration committed: %.4f %s/pixel", record.scale_factor, record.unit)
    engine.emit_calibration(record)
    return record
