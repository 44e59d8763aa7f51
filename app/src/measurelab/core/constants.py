from __future__ import annotations

from typing import Dict

# ---------- Canvas interaction ----------
# Minimum pointer travel (device pixels) before a press becomes a drag
DRAG_THRESHOLD: float = 5.0
# Zoom limits (fraction of the document's natural size)
MIN_SCALE: float = 0.1
MAX_SCALE: float = 5.0
# Wheel step factors
ZOOM_FACTOR_IN: float = 1.1
ZOOM_FACTOR_OUT: float = 0.9
# Count marker size in device pixels
COUNT_SIZE: float = 16.0
# Radius around the first vertex that closes a surface polygon (device pixels)
CLOSE_POLYGON_THRESHOLD: float = 10.0
# Endpoint marker radius; clicks inside it snap to the endpoint (device pixels)
ENDPOINT_RADIUS: float = 4.0
# Pointer tolerance for hitting a line or an outline (device pixels)
HIT_TOLERANCE: float = 6.0
# Preview updates are coalesced to one per frame
FRAME_INTERVAL_MS: float = 16.0

# ---------- Numeric tolerances ----------
COLINEAR_TOLERANCE: float = 1e-3
PARALLEL_TOLERANCE: float = 1e-4

# ---------- Measurements ----------
DEFAULT_DISPLAY_UNIT: str = 'ft'
PIXEL_UNIT: str = 'px'
COUNT_UNIT: str = 'ea'

# Length of one unit expressed in feet
UNIT_TO_FEET: Dict[str, float] = {
    'ft': 1.0,
    'in': 1.0 / 12.0,
    'm': 3.28084,
    'cm': 0.0328084,
    'mm': 0.00328084,
}

TOOL_COLORS: Dict[str, str] = {
    'linear': '#06B6D4',   # cyan
    'surface': '#10B981',  # green
    'count': '#F59E0B',    # amber
}
