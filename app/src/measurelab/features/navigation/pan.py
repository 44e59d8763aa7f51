from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple

from ...core.geometry import distance
from ...core.model import Point

if TYPE_CHECKING:
    from ...core.engine import CanvasEngine


@dataclass
class PressTracker:
    """Tracks one pointer press and decides between click and drag.

    Once the pointer has travelled more than ``threshold`` device pixels
    from where it went down, the press stays a drag until release.
    """
    down_device: Point
    down_document: Point
    threshold: float
    dragging: bool = False

    def move(self, device_point: Tuple[float, float]) -> bool:
        """Update with a pointer position; return True if this press is a drag."""
        if not self.dragging and distance(self.down_device, device_point) > self.threshold:
            self.dragging = True
        return self.dragging


def pan_canvas(engine: "CanvasEngine", dx: float, dy: float) -> None:
    pan = engine.viewport.pan_offset
    engine.viewport = engine.viewport.with_pan((pan[0] + dx, pan[1] + dy))


def on_pan_start(engine: "CanvasEngine") -> None:
    engine.pan_origin = engine.viewport.pan_offset


def on_pan_move(engine: "CanvasEngine", press: PressTracker, device_point: Tuple[float, float]) -> None:
    origin = engine.pan_origin
    if origin is None:
        return
    engine.viewport = engine.viewport.with_pan((
        origin[0] + device_point[0] - press.down_device[0],
        origin[1] + device_point[1] - press.down_device[1],
    ))


def on_pan_end(engine: "CanvasEngine") -> None:
    engine.pan_origin = None
