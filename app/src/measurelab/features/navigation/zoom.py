from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from ...config import CanvasConfig
from ...core.model import Point, ViewportState
from .coordinates import compute_document_offset, viewport_to_document

if TYPE_CHECKING:
    from ...core.engine import CanvasEngine

logger = logging.getLogger(__name__)


def zoom_viewport(viewport: ViewportState, anchor: Tuple[float, float], scale: float,
                  canvas: Optional[CanvasConfig] = None) -> ViewportState:
    """Return ``viewport`` at ``scale`` keeping the document point under ``anchor`` fixed.

    The anchor is resolved with the old scale and offset; the new pan is solved
    against the offset recomputed for the new scale, since the centering
    offset itself depends on scale.
    """
    canvas = canvas or CanvasConfig()
    new_scale = canvas.clamp_scale(scale)
    doc_x, doc_y = viewport_to_document(viewport, anchor)
    off_x, off_y = compute_document_offset(viewport.viewport_size, viewport.document_size, new_scale)
    pan = Point(
        anchor[0] - (doc_x + off_x) * new_scale,
        anchor[1] - (doc_y + off_y) * new_scale,
    )
    return viewport.with_scale(new_scale).with_pan(pan)


def fit_viewport(viewport: ViewportState, canvas: Optional[CanvasConfig] = None) -> ViewportState:
    canvas = canvas or CanvasConfig()
    vw, vh = viewport.viewport_size
    dw, dh = viewport.document_size
    if vw <= 0 or vh <= 0 or dw <= 0 or dh <= 0:
        return viewport.with_pan((0.0, 0.0))
    scale = canvas.clamp_scale(min(vw / dw, vh / dh))
    return viewport.with_scale(scale).with_pan((0.0, 0.0))


def _viewport_center(viewport: ViewportState) -> Tuple[float, float]:
    vw, vh = viewport.viewport_size
    return (vw / 2.0, vh / 2.0)


def set_zoom(engine: "CanvasEngine", zoom: float,
             anchor: Optional[Tuple[float, float]] = None) -> None:
    old = engine.viewport
    if anchor is None:
        anchor = _viewport_center(old)
    engine.viewport = zoom_viewport(old, anchor, zoom, engine.config.canvas)
    if engine.viewport.scale != old.scale:
        logger.debug("Zoom %.3f -> %.3f", old.scale, engine.viewport.scale)


def zoom_in(engine: "CanvasEngine", anchor: Optional[Tuple[float, float]] = None) -> None:
    set_zoom(engine, engine.viewport.scale * engine.config.canvas.zoom_factor_in, anchor)


def zoom_out(engine: "CanvasEngine", anchor: Optional[Tuple[float, float]] = None) -> None:
    set_zoom(engine, engine.viewport.scale * engine.config.canvas.zoom_factor_out, anchor)


def on_wheel(engine: "CanvasEngine", device_point: Tuple[float, float], delta_y: float) -> None:
    """Wheel down zooms out, wheel up zooms in, around the pointer."""
    if delta_y > 0:
        zoom_out(engine, device_point)
    elif delta_y < 0:
        zoom_in(engine, device_point)


def fit_to_view(engine: "CanvasEngine") -> None:
    engine.viewport = fit_viewport(engine.viewport, engine.config.canvas)
    logger.debug("Fit to view at scale %.3f", engine.viewport.scale)
