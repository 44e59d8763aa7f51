"""
Unified facade that re-exports feature functions from the modular packages,
so the engine and the host talk to one module instead of each feature.
"""
from __future__ import annotations

# Coordinates
from ..features.navigation.coordinates import (
    viewport_document_offset as viewport_document_offset,
    viewport_to_document as viewport_to_document,
    viewport_to_device as viewport_to_device,
)

# Navigation
from ..features.navigation.pan import (
    PressTracker as PressTracker,
    pan_canvas as pan_canvas,
    on_pan_start as pan_on_start,
    on_pan_move as pan_on_move,
    on_pan_end as pan_on_end,
)
from ..features.navigation.zoom import (
    zoom_in as zoom_in,
    zoom_out as zoom_out,
    set_zoom as zoom_set,
    on_wheel as zoom_on_wheel,
    fit_to_view as fit_to_view,
)

# Scale
from ..features.scale.scale import (
    CalibrationProtocol as CalibrationProtocol,
    CalibrationState as CalibrationState,
    cancel_scale_mode as scale_cancel_mode,
    scale_on_canvas_click as scale_on_canvas_click,
    submit_scale_distance as scale_submit,
)

# Draw
from ..features.editing.draw import (
    draw_on_canvas_click as draw_on_canvas_click,
    draw_on_motion as draw_on_motion,
    finish_measurement as draw_finish,
    cancel_draft as draw_cancel,
)

# Selection
from ..features.editing.selection import (
    update_selection_with_modifiers as selection_update,
    empty_click_selection as selection_empty_click,
    remove_from_selection as selection_remove,
)
from ..features.editing.drag import (
    MarqueeDrag as MarqueeDrag,
    on_drag_start as drag_start,
    on_drag_move as drag_move,
    on_drag_end as drag_end,
    cancel_drag as drag_cancel,
)

# Hit-testing
from ..ui.scene import SceneHitTester as SceneHitTester

# Export
from ..app_io.export_mod import export_csv as export_csv
