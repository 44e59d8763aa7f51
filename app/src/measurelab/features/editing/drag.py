from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Set, Tuple

from ...core.geometry import normalize_rect, rect_from_corners
from ...core.model import Point, Rect
from .selection import add_to_selection, measurements_in_rect

if TYPE_CHECKING:
    from ...core.engine import CanvasEngine

logger = logging.getLogger(__name__)


class MarqueeDrag:
    """Rectangle-drag selection split into a visual and a committed tier.

    ``update`` only moves the candidate rectangle and reports it for drawing;
    hit-testing happens once, in ``commit``, at pointer-up.
    """

    def __init__(self, anchor: Tuple[float, float]) -> None:
        self.anchor = Point(*anchor)
        self.current = Point(*anchor)
        self.visible = False

    @property
    def rect(self) -> Rect:
        return normalize_rect(rect_from_corners(self.anchor, self.current))

    def update(self, point: Tuple[float, float], dragging: bool) -> Optional[Rect]:
        """Move the free corner; return the rectangle to draw, or None while hidden."""
        self.current = Point(*point)
        if dragging:
            self.visible = True
        return self.rect if self.visible else None

    def commit(self, engine: "CanvasEngine", shift: bool) -> Set[str]:
        canvas = engine.config.canvas
        hits = measurements_in_rect(
            engine.measurements,
            self.rect,
            engine.page_index,
            engine.viewport.scale,
            canvas.count_size,
        )
        logger.debug("Rectangle %s selected %d measurement(s)", tuple(self.rect), len(hits))
        if shift:
            return add_to_selection(engine.selection, hits)
        return set(hits)


def on_drag_start(engine: "CanvasEngine", point: Tuple[float, float]) -> MarqueeDrag:
    engine.marquee = MarqueeDrag(point)
    return engine.marquee


def on_drag_move(engine: "CanvasEngine", point: Tuple[float, float], dragging: bool) -> None:
    marquee = engine.marquee
    if marquee is None:
        return
    was_visible = marquee.visible
    rect = marquee.update(point, dragging)
    if rect is not None or was_visible:
        engine.emit_marquee(rect)


def on_drag_end(engine: "CanvasEngine", shift: bool) -> bool:
    """Finish a rectangle drag. Return True if a rectangle was shown and committed."""
    marquee = engine.marquee
    engine.marquee = None
    if marquee is None:
        return False
    if not marquee.visible:
        return False
    engine.emit_marquee(None)
    engine.set_selection(marquee.commit(engine, shift))
    return True


def cancel_drag(engine: "CanvasEngine") -> None:
    marquee = engine.marquee
    engine.marquee = None
    if marquee is not None and marquee.visible:
        engine.emit_marquee(None)
