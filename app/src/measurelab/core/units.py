from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .constants import DEFAULT_DISPLAY_UNIT, UNIT_TO_FEET
from .geometry import polygon_area, polyline_length
from .model import CalibrationRecord, MeasurementType

SQUARED = '²'

LINEAR_UNITS: Tuple[str, ...] = tuple(UNIT_TO_FEET)


def square_unit(unit: str) -> str:
    return unit + SQUARED


def validate_unit(unit: str) -> str:
    if unit not in UNIT_TO_FEET:
        raise ValueError(f"Unknown unit {unit!r}; expected one of {', '.join(LINEAR_UNITS)}")
    return unit


def _factor_to_base(unit: str) -> float:
    if unit.endswith(SQUARED):
        return UNIT_TO_FEET[validate_unit(unit[:-len(SQUARED)])] ** 2
    return UNIT_TO_FEET[validate_unit(unit)]


def convert_units(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a length (``ft``) or an area (``ft²``) between supported units."""
    if from_unit.endswith(SQUARED) != to_unit.endswith(SQUARED):
        raise ValueError(f"Cannot convert {from_unit} to {to_unit}")
    return value * _factor_to_base(from_unit) / _factor_to_base(to_unit)


def _calibrated(calibration: Optional[CalibrationRecord]) -> bool:
    return calibration is not None and calibration.is_calibrated


def calculate_length(points: Sequence[Tuple[float, float]],
                     calibration: Optional[CalibrationRecord],
                     display_unit: str = DEFAULT_DISPLAY_UNIT) -> float:
    """Polyline length in ``display_unit``, or in pixels when uncalibrated."""
    if len(points) < 2:
        return 0.0
    total_px = polyline_length(points)
    if not _calibrated(calibration):
        return total_px
    real = total_px * calibration.scale_factor
    return convert_units(real, calibration.unit, display_unit)


def calculate_area(points: Sequence[Tuple[float, float]],
                   calibration: Optional[CalibrationRecord],
                   display_unit: str = DEFAULT_DISPLAY_UNIT) -> float:
    """Polygon area in squared ``display_unit``, or in squared pixels when uncalibrated."""
    if len(points) < 3:
        return 0.0
    area_px = polygon_area(points)
    if not _calibrated(calibration):
        return area_px
    factor = calibration.scale_factor
    real = area_px * factor * factor
    return convert_units(real, square_unit(calibration.unit), square_unit(display_unit))


def format_measurement_value(value: float, unit: str, mtype: MeasurementType) -> str:
    if mtype is MeasurementType.SURFACE:
        return f"{value:.2f} {square_unit(unit)}"
    if mtype is MeasurementType.COUNT:
        return f"{int(value)}"
    return f"{value:.2f} {unit}"
