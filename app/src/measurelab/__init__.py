"""Interactive measurement canvas: scale calibration, length/area/count capture and selection."""

__version__ = "0.1.0"

from .config import CanvasConfig, EngineConfig, MeasurementDefaults, load_config, save_config
from .core.engine import CanvasEngine
from .core.model import (
    CalibrationRecord,
    Measurement,
    MeasurementType,
    Point,
    PointerButton,
    PointerEvent,
    Rect,
    Tool,
    ViewportState,
)

__all__ = [
    "CalibrationRecord",
    "CanvasConfig",
    "CanvasEngine",
    "EngineConfig",
    "Measurement",
    "MeasurementDefaults",
    "MeasurementType",
    "Point",
    "PointerButton",
    "PointerEvent",
    "Rect",
    "Tool",
    "ViewportState",
    "load_config",
    "save_config",
]
