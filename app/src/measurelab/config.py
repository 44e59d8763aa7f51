"""
JSON-backed configuration for the measurement canvas.

Example config.json:
{
    "canvas": {
        "drag_threshold": 5,
        "min_scale": 0.1,
        "max_scale": 5.0,
        "close_polygon_threshold": 10,
        "endpoint_radius": 4
    },
    "measurement": {
        "display_unit": "m",
        "colors": {"linear": "#06B6D4", "surface": "#10B981", "count": "#F59E0B"},
        "default_category": null
    }
}
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .core import constants as C
from .core.model import MeasurementType
from .core.units import validate_unit

logger = logging.getLogger(__name__)


@dataclass
class CanvasConfig:
    drag_threshold: float = C.DRAG_THRESHOLD
    min_scale: float = C.MIN_SCALE
    max_scale: float = C.MAX_SCALE
    zoom_factor_in: float = C.ZOOM_FACTOR_IN
    zoom_factor_out: float = C.ZOOM_FACTOR_OUT
    count_size: float = C.COUNT_SIZE
    close_polygon_threshold: float = C.CLOSE_POLYGON_THRESHOLD
    endpoint_radius: float = C.ENDPOINT_RADIUS
    hit_tolerance: float = C.HIT_TOLERANCE
    frame_interval_ms: float = C.FRAME_INTERVAL_MS

    def clamp_scale(self, scale: float) -> float:
        return max(self.min_scale, min(scale, self.max_scale))


@dataclass
class MeasurementDefaults:
    """Colors and category handed to the capture state machine at finalize time."""
    display_unit: str = C.DEFAULT_DISPLAY_UNIT
    colors: Dict[str, str] = field(default_factory=lambda: dict(C.TOOL_COLORS))
    default_category: Optional[str] = None

    def color_for(self, mtype: MeasurementType) -> Optional[str]:
        return self.colors.get(mtype.value)


@dataclass
class EngineConfig:
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    measurement: MeasurementDefaults = field(default_factory=MeasurementDefaults)

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        cv = self.canvas
        if cv.min_scale <= 0:
            raise ValueError("min_scale must be greater than zero.")
        if cv.min_scale > cv.max_scale:
            raise ValueError("min_scale must not exceed max_scale.")
        for name in ('drag_threshold', 'count_size', 'close_polygon_threshold',
                     'endpoint_radius', 'hit_tolerance', 'zoom_factor_in', 'zoom_factor_out'):
            if getattr(cv, name) <= 0:
                raise ValueError(f"{name} must be greater than zero.")
        validate_unit(self.measurement.display_unit)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        return cls(
            canvas=_section(CanvasConfig, data.get('canvas', {}), 'canvas'),
            measurement=_section(MeasurementDefaults, data.get('measurement', {}), 'measurement'),
        )


def _section(section_cls, values: Dict[str, Any], name: str):
    known = {f.name for f in fields(section_cls)}
    unknown = set(values) - known
    if unknown:
        logger.warning("Ignoring unknown %s config keys: %s", name, ", ".join(sorted(unknown)))
    return section_cls(**{k: v for k, v in values.items() if k in known})


def load_config(path: Union[str, Path]) -> EngineConfig:
    path = Path(path)
    if not path.exists():
        logger.warning("Config not found: %s; using defaults", path)
        return EngineConfig()
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    config = EngineConfig.from_dict(data)
    logger.info("Configuration loaded from %s", path)
    return config


def save_config(config: EngineConfig, path: Union[str, Path]) -> None:
    path = Path(path)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.info("Configuration saved to %s", path)
