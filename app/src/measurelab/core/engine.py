"""
Interactive measurement canvas engine.

Pointer and keyboard input arrive already disambiguated by the host
(primary / secondary button, modifier flags) in device pixels. The engine
converts them to document space and routes them to calibration, capture or
selection depending on the active tool. Results leave through the callbacks
given at construction; nothing here renders or persists anything.
"""
from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple, Union

from ..config import EngineConfig
from . import facade
from .model import (
    CalibrationRecord,
    DrawDraft,
    Measurement,
    Point,
    PointerButton,
    PointerEvent,
    Tool,
    ViewportState,
)
from .throttle import FrameThrottle

logger = logging.getLogger(__name__)

# Attributes an external update may change; geometry is never among them
EDITABLE_FIELDS = ('name', 'color', 'category', 'notes', 'value', 'unit')

DistancePrompt = Callable[[float], Optional[Tuple[Union[str, float], str]]]


class CanvasEngine:
    """Owns viewport, draft, calibration and selection state for one page."""

    def __init__(
        self,
        document_size: Tuple[float, float] = (0.0, 0.0),
        viewport_size: Tuple[float, float] = (0.0, 0.0),
        measurements: Optional[Iterable[Measurement]] = None,
        calibration: Optional[CalibrationRecord] = None,
        page_index: int = 0,
        config: Optional[EngineConfig] = None,
        hit_tester=None,
        distance_prompt: Optional[DistancePrompt] = None,
        on_measurement_added: Optional[Callable[[Measurement], Any]] = None,
        on_calibration_committed: Optional[Callable[[CalibrationRecord], Any]] = None,
        on_selection_changed: Optional[Callable[[Set[str]], Any]] = None,
        on_delete_requested: Optional[Callable[[Set[str]], Any]] = None,
        on_marquee_changed: Optional[Callable[[Any], Any]] = None,
        on_preview_changed: Optional[Callable[[Optional[Point]], Any]] = None,
        on_context_menu: Optional[Callable[[Point, Optional[str]], Any]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or EngineConfig()
        self.viewport = ViewportState(
            scale=1.0,
            pan_offset=Point(0.0, 0.0),
            viewport_size=tuple(viewport_size),
            document_size=tuple(document_size),
        )
        self.tool: Tool = Tool.SELECT
        self.draft: Optional[DrawDraft] = None
        self.calibration = calibration
        self.calibration_protocol = facade.CalibrationProtocol()
        self.measurements: List[Measurement] = list(measurements or [])
        self.selection: Set[str] = set()
        self.page_index = page_index
        self.marquee: Optional[facade.MarqueeDrag] = None
        self.press: Optional[facade.PressTracker] = None
        self.press_hit: Optional[str] = None
        self.pan_origin: Optional[Point] = None
        self.preview_throttle: FrameThrottle[Point] = FrameThrottle(
            self.config.canvas.frame_interval_ms, clock)
        self.hit_tester = hit_tester or facade.SceneHitTester.for_engine(self)
        self.distance_prompt = distance_prompt

        self.on_measurement_added = on_measurement_added
        self.on_calibration_committed = on_calibration_committed
        self.on_selection_changed = on_selection_changed
        self.on_delete_requested = on_delete_requested
        self.on_marquee_changed = on_marquee_changed
        self.on_preview_changed = on_preview_changed
        self.on_context_menu = on_context_menu

    # ----- Configuration -----
    @property
    def defaults(self):
        return self.config.measurement

    # ----- Coordinates -----
    @property
    def document_offset(self) -> Point:
        return facade.viewport_document_offset(self.viewport)

    def to_document(self, device_point: Tuple[float, float]) -> Point:
        return facade.viewport_to_document(self.viewport, device_point)

    def to_device(self, document_point: Tuple[float, float]) -> Point:
        return facade.viewport_to_device(self.viewport, document_point)

    # ----- Viewport -----
    def set_viewport_size(self, size: Tuple[float, float]) -> None:
        self.viewport = replace(self.viewport, viewport_size=tuple(size))

    def set_document_size(self, size: Tuple[float, float]) -> None:
        self.viewport = replace(self.viewport, document_size=tuple(size))

    def fit_to_view(self) -> None:
        facade.fit_to_view(self)

    def zoom_in(self, anchor: Optional[Tuple[float, float]] = None) -> None:
        facade.zoom_in(self, anchor)

    def zoom_out(self, anchor: Optional[Tuple[float, float]] = None) -> None:
        facade.zoom_out(self, anchor)

    def set_zoom(self, zoom: float, anchor: Optional[Tuple[float, float]] = None) -> None:
        facade.zoom_set(self, zoom, anchor)

    def pan_by(self, dx: float, dy: float) -> None:
        facade.pan_canvas(self, dx, dy)

    def wheel(self, device_point: Tuple[float, float], delta_y: float) -> None:
        facade.zoom_on_wheel(self, device_point, delta_y)

    # ----- Tools and pages -----
    def set_tool(self, tool: Tool) -> None:
        if tool is self.tool:
            return
        if self.draft is not None and self.draft.tool is not tool:
            facade.draw_cancel(self)
        if self.tool is Tool.CALIBRATE:
            facade.scale_cancel_mode(self)
        self._abort_press()
        logger.debug("Tool %s -> %s", self.tool.value, tool.value)
        self.tool = tool

    def set_page(self, page_index: int) -> None:
        if page_index == self.page_index:
            return
        facade.draw_cancel(self)
        facade.scale_cancel_mode(self)
        self._abort_press()
        self.page_index = page_index
        self.set_selection(set())

    def open_document(self, document_size: Tuple[float, float], page_index: int = 0,
                      measurements: Iterable[Measurement] = (),
                      calibration: Optional[CalibrationRecord] = None) -> None:
        """Replace the document; drafts, pending calibration points and selection do not carry over."""
        facade.draw_cancel(self)
        facade.scale_cancel_mode(self)
        self._abort_press()
        self.page_index = page_index
        self.measurements = list(measurements)
        self.calibration = calibration
        self.set_selection(set())
        self.set_document_size(document_size)
        self.fit_to_view()
        logger.info("Document opened at page %d (%gx%g)", page_index, *document_size)

    def page_measurements(self) -> List[Measurement]:
        return [m for m in self.measurements if m.on_page(self.page_index)]

    # ----- Measurement store -----
    def find_measurement(self, measurement_id: str) -> Optional[Measurement]:
        for m in self.measurements:
            if m.id == measurement_id:
                return m
        return None

    def set_measurements(self, measurements: Iterable[Measurement]) -> None:
        self.measurements = list(measurements)
        self.set_selection(self.selection)

    def add_measurement(self, measurement: Measurement) -> None:
        self.measurements.append(measurement)
        logger.info("Measurement finalized: %s = %.4g %s", measurement.name,
                    measurement.value, measurement.unit)
        if self.on_measurement_added is not None:
            self.on_measurement_added(measurement)

    def update_measurement(self, measurement_id: str, **changes: Any) -> Optional[Measurement]:
        """Apply attribute changes (rename, recategorize, ...) without touching geometry."""
        bad = set(changes) - set(EDITABLE_FIELDS)
        if bad:
            raise ValueError(f"Cannot update measurement fields: {', '.join(sorted(bad))}")
        measurement = self.find_measurement(measurement_id)
        if measurement is None:
            logger.warning("Update ignored for unknown measurement %s", measurement_id)
            return None
        for key, value in changes.items():
            setattr(measurement, key, value)
        return measurement

    def delete_measurements(self, measurement_ids: Iterable[str]) -> Set[str]:
        ids = set(measurement_ids)
        removed = {m.id for m in self.measurements if m.id in ids}
        if ids - removed:
            logger.warning("Delete ignored for %d unknown measurement id(s)", len(ids - removed))
        if not removed:
            return removed
        self.measurements = [m for m in self.measurements if m.id not in removed]
        logger.info("Deleted %d measurement(s)", len(removed))
        if self.on_delete_requested is not None:
            self.on_delete_requested(set(removed))
        self.set_selection(facade.selection_remove(self.selection, removed))
        return removed

    def delete_selected(self) -> Set[str]:
        return self.delete_measurements(self.selection)

    # ----- Selection -----
    def set_selection(self, ids: Iterable[str]) -> None:
        known = {m.id for m in self.measurements}
        selection = {i for i in ids if i in known}
        if selection == self.selection:
            return
        self.selection = selection
        if self.on_selection_changed is not None:
            self.on_selection_changed(set(selection))

    def update_selection(self, measurement_id: Optional[str], shift: bool = False,
                         ctrl: bool = False, meta: bool = False) -> None:
        """Apply a direct click on ``measurement_id`` (None for empty space)."""
        if measurement_id is None:
            self.set_selection(facade.selection_empty_click(self.selection, shift))
            return
        if self.find_measurement(measurement_id) is None:
            logger.warning("Selection update ignored for unknown measurement %s", measurement_id)
            return
        self.set_selection(facade.selection_update(self.selection, measurement_id, shift, ctrl, meta))

    def select_all(self) -> None:
        self.set_selection(m.id for m in self.page_measurements())

    def clear_selection(self) -> None:
        self.set_selection(set())

    # ----- Calibration -----
    def submit_calibration(self, real_distance: Union[str, float], unit: str) -> Optional[CalibrationRecord]:
        if self.calibration_protocol.state is not facade.CalibrationState.AWAITING_USER_DISTANCE:
            return None
        return facade.scale_submit(self, real_distance, unit)

    def cancel_calibration(self) -> None:
        facade.scale_cancel_mode(self)

    # ----- Pointer input -----
    def pointer_down(self, event: PointerEvent) -> None:
        doc = self.to_document(event.position)
        if event.button is PointerButton.SECONDARY:
            self._secondary_click(doc)
            return
        self.press = facade.PressTracker(event.position, doc, self.config.canvas.drag_threshold)
        self.press_hit = None
        if self.tool is Tool.SELECT:
            self.press_hit = self.hit_tester.topmost_measurement_at(doc)
            if self.press_hit is None:
                facade.drag_start(self, doc)
        elif self.tool is Tool.PAN:
            facade.pan_on_start(self)

    def pointer_move(self, event: PointerEvent) -> None:
        press = self.press
        if press is not None:
            dragging = press.move(event.position)
            if self.tool is Tool.PAN and dragging:
                facade.pan_on_move(self, press, event.position)
            if self.marquee is not None:
                facade.drag_move(self, self.to_document(event.position), dragging)
        doc = self.to_document(event.position)
        if self.draft is not None and self.preview_throttle.offer(doc):
            self._apply_preview(self.preview_throttle.take())

    def pointer_up(self, event: PointerEvent) -> None:
        if event.button is PointerButton.SECONDARY:
            return
        press = self.press
        self.press = None
        if press is None:
            return
        press.move(event.position)
        doc = self.to_document(event.position)

        if self.tool is Tool.PAN:
            facade.pan_on_end(self)
            return

        if self.tool is Tool.SELECT:
            if self.marquee is not None:
                facade.drag_move(self, doc, press.dragging)
                if not facade.drag_end(self, event.shift):
                    self.update_selection(None, shift=event.shift)
            elif not press.dragging:
                self.update_selection(self.press_hit, event.shift, event.ctrl, event.meta)
            self.press_hit = None
            return

        if press.dragging:
            return
        if facade.scale_on_canvas_click(self, doc):
            return
        if facade.draw_on_canvas_click(self, doc):
            if self.draft is not None:
                self._apply_preview(doc)

    def _secondary_click(self, doc: Point) -> None:
        hit = self.hit_tester.topmost_measurement_at(doc)
        if hit is not None and hit not in self.selection:
            self.set_selection({hit})
        if self.on_context_menu is not None:
            self.on_context_menu(doc, hit)

    def _abort_press(self) -> None:
        self.press = None
        self.press_hit = None
        facade.drag_cancel(self)
        facade.pan_on_end(self)

    # ----- Keyboard input -----
    def key_press(self, key: str, ctrl: bool = False, meta: bool = False) -> bool:
        """Handle a key; return True if it changed engine state."""
        if key == 'Escape':
            if self.draft is not None:
                facade.draw_cancel(self)
                return True
            if self.calibration_protocol.is_pending:
                facade.scale_cancel_mode(self)
                return True
            if self.marquee is not None:
                self._abort_press()
                return True
            return False
        if key in ('Enter', 'Return'):
            return facade.draw_finish(self) is not None
        if key in ('Delete', 'BackSpace', 'Backspace'):
            if self.draft is not None:
                return False
            return bool(self.delete_selected())
        if key.lower() == 'a' and (ctrl or meta):
            before = set(self.selection)
            self.select_all()
            return self.selection != before
        return False

    # ----- Preview -----
    def _apply_preview(self, point: Optional[Point]) -> None:
        if self.draft is None:
            return
        facade.draw_on_motion(self, point)
        if self.on_preview_changed is not None:
            self.on_preview_changed(self.draft.preview_point)

    def flush_preview(self) -> None:
        """Deliver a preview position held back by frame coalescing."""
        if self.preview_throttle.has_pending:
            self._apply_preview(self.preview_throttle.flush())

    # ----- Outputs -----
    def emit_calibration(self, record: CalibrationRecord) -> None:
        if self.on_calibration_committed is not None:
            self.on_calibration_committed(record)

    def emit_marquee(self, rect) -> None:
        if self.on_marquee_changed is not None:
            self.on_marquee_changed(rect)
