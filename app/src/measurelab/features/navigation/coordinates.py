"""
Conversions between the three coordinate spaces of the canvas.

device    raw pointer pixels from the input surface
canvas    device pixels with pan and zoom inverted (the renderer's space)
document  fixed page/image space, centered within canvas space
"""
from __future__ import annotations

from typing import Sequence, Tuple

from ...core.model import Point, ViewportState

PointLike = Tuple[float, float]


def compute_document_offset(viewport_size: Sequence[float], document_size: Sequence[float],
                            scale: float) -> Point:
    """Top-left of the document in canvas units (already divided by scale)."""
    vw, vh = viewport_size
    dw, dh = document_size
    if scale <= 0 or vw <= 0 or vh <= 0 or dw <= 0 or dh <= 0:
        return Point(0.0, 0.0)
    return Point(
        (vw - dw * scale) / 2 / scale,
        (vh - dh * scale) / 2 / scale,
    )


def device_to_canvas(device_point: PointLike, pan_offset: PointLike, scale: float) -> Point:
    if scale <= 0:
        return Point(device_point[0] - pan_offset[0], device_point[1] - pan_offset[1])
    return Point(
        (device_point[0] - pan_offset[0]) / scale,
        (device_point[1] - pan_offset[1]) / scale,
    )


def canvas_to_device(canvas_point: PointLike, pan_offset: PointLike, scale: float) -> Point:
    return Point(
        canvas_point[0] * scale + pan_offset[0],
        canvas_point[1] * scale + pan_offset[1],
    )


def device_to_document(device_point: PointLike, pan_offset: PointLike, scale: float,
                       document_offset: PointLike) -> Point:
    cx, cy = device_to_canvas(device_point, pan_offset, scale)
    return Point(cx - document_offset[0], cy - document_offset[1])


def document_to_canvas(document_point: PointLike, document_offset: PointLike) -> Point:
    return Point(document_point[0] + document_offset[0], document_point[1] + document_offset[1])


def document_to_device(document_point: PointLike, pan_offset: PointLike, scale: float,
                       document_offset: PointLike) -> Point:
    return canvas_to_device(document_to_canvas(document_point, document_offset), pan_offset, scale)


def viewport_document_offset(viewport: ViewportState) -> Point:
    return compute_document_offset(viewport.viewport_size, viewport.document_size, viewport.scale)


def viewport_to_document(viewport: ViewportState, device_point: PointLike) -> Point:
    return device_to_document(device_point, viewport.pan_offset, viewport.scale,
                              viewport_document_offset(viewport))


def viewport_to_device(viewport: ViewportState, document_point: PointLike) -> Point:
    return document_to_device(document_point, viewport.pan_offset, viewport.scale,
                              viewport_document_offset(viewport))
