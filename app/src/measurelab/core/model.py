from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field, replace
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .constants import UNIT_TO_FEET


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    def normalized(self) -> "Rect":
        """Return the same rectangle with non-negative width and height."""
        min_x = min(self.x, self.x + self.width)
        min_y = min(self.y, self.y + self.height)
        return Rect(min_x, min_y, abs(self.width), abs(self.height))


class MeasurementType(enum.Enum):
    LINEAR = 'linear'
    SURFACE = 'surface'
    COUNT = 'count'


class Tool(enum.Enum):
    LINEAR = 'linear'
    SURFACE = 'surface'
    COUNT = 'count'
    CALIBRATE = 'calibrate'
    SELECT = 'select'
    PAN = 'pan'

    @property
    def measurement_type(self) -> Optional[MeasurementType]:
        try:
            return MeasurementType(self.value)
        except ValueError:
            return None


class PointerButton(enum.Enum):
    PRIMARY = 'primary'
    SECONDARY = 'secondary'


# Minimum number of points per measurement type
MIN_POINTS = {
    MeasurementType.LINEAR: 2,
    MeasurementType.SURFACE: 3,
    MeasurementType.COUNT: 1,
}


def new_measurement_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Measurement:
    name: str
    type: MeasurementType
    value: float
    unit: str
    points: Tuple[Point, ...]
    page_index: Optional[int] = 0
    color: Optional[str] = None
    category: Optional[str] = None
    notes: str = ''
    id: str = field(default_factory=new_measurement_id)

    def __post_init__(self) -> None:
        self.points = tuple(Point(float(x), float(y)) for x, y in self.points)
        n = len(self.points)
        if self.type is MeasurementType.COUNT:
            if n != 1:
                raise ValueError(f"Count measurement needs exactly one point, got {n}")
        elif n < MIN_POINTS[self.type]:
            raise ValueError(
                f"{self.type.value} measurement needs at least {MIN_POINTS[self.type]} points, got {n}"
            )

    @property
    def point(self) -> Point:
        """Location of a count marker (first point for other types)."""
        return self.points[0]

    def on_page(self, page_index: int) -> bool:
        return self.page_index is None or self.page_index == page_index


@dataclass(frozen=True)
class CalibrationRecord:
    pixel_distance: float
    real_distance: float
    unit: str
    is_calibrated: bool = True

    def __post_init__(self) -> None:
        if self.is_calibrated:
            if not self.pixel_distance > 0:
                raise ValueError("Calibration pixel distance must be greater than zero.")
            if not self.real_distance > 0:
                raise ValueError("Calibration real distance must be greater than zero.")
            if self.unit not in UNIT_TO_FEET:
                raise ValueError(
                    f"Unknown calibration unit {self.unit!r}; expected one of {', '.join(UNIT_TO_FEET)}"
                )

    @property
    def scale_factor(self) -> float:
        """Real units per document pixel."""
        return self.real_distance / self.pixel_distance


@dataclass
class ViewportState:
    scale: float = 1.0
    pan_offset: Point = Point(0.0, 0.0)
    viewport_size: Tuple[float, float] = (0.0, 0.0)
    document_size: Tuple[float, float] = (0.0, 0.0)

    def with_scale(self, scale: float) -> "ViewportState":
        return replace(self, scale=scale)

    def with_pan(self, pan_offset: Sequence[float]) -> "ViewportState":
        return replace(self, pan_offset=Point(*pan_offset))


@dataclass
class DrawDraft:
    tool: Tool
    points: List[Point] = field(default_factory=list)
    preview_point: Optional[Point] = None


@dataclass
class PointerEvent:
    """Pointer input in device space."""
    x: float
    y: float
    button: PointerButton = PointerButton.PRIMARY
    shift: bool = False
    ctrl: bool = False
    meta: bool = False

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)
