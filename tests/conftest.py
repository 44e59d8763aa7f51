"""
Pytest configuration and fixtures for the measurement canvas engine.

Provides:
- A controllable clock for frame throttling
- A callback recorder wired into every engine output
- An engine whose device space equals document space (scale 1, no pan)
- Measurement factories
"""

import logging
from typing import List, Tuple

import pytest

from measurelab.config import EngineConfig
from measurelab.core.engine import CanvasEngine
from measurelab.core.model import Measurement, MeasurementType, PointerButton, PointerEvent


class FakeClock:
    """Monotonic clock advanced by hand, in seconds."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class Recorder:
    """Collects every callback the engine fires, by name."""

    def __init__(self):
        self.calls: List[Tuple[str, tuple]] = []

    def hook(self, name: str):
        def _record(*args):
            self.calls.append((name, args))
        return _record

    def named(self, name: str) -> List[tuple]:
        return [args for n, args in self.calls if n == name]


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handler and propagation changes made by setup_logging."""
    logger = logging.getLogger("measurelab")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def engine(clock, recorder) -> CanvasEngine:
    """Engine whose 1000x500 document exactly fills a 1000x500 viewport."""
    return CanvasEngine(
        document_size=(1000, 500),
        viewport_size=(1000, 500),
        config=EngineConfig(),
        on_measurement_added=recorder.hook('added'),
        on_calibration_committed=recorder.hook('calibration'),
        on_selection_changed=recorder.hook('selection'),
        on_delete_requested=recorder.hook('delete'),
        on_marquee_changed=recorder.hook('marquee'),
        on_preview_changed=recorder.hook('preview'),
        on_context_menu=recorder.hook('context'),
        clock=clock,
    )


def make_count(x: float, y: float, name: str = 'Count 1', page_index=0) -> Measurement:
    return Measurement(name, MeasurementType.COUNT, 1.0, 'ea', [(x, y)], page_index=page_index)


def make_line(a, b, name: str = 'Length 1', page_index=0) -> Measurement:
    return Measurement(name, MeasurementType.LINEAR, 0.0, 'px', [a, b], page_index=page_index)


def make_surface(points, name: str = 'Area 1', page_index=0) -> Measurement:
    return Measurement(name, MeasurementType.SURFACE, 0.0, 'px', points, page_index=page_index)


def press(x: float, y: float, **mods) -> PointerEvent:
    return PointerEvent(x, y, **mods)


def secondary(x: float, y: float) -> PointerEvent:
    return PointerEvent(x, y, button=PointerButton.SECONDARY)


def click(engine: CanvasEngine, x: float, y: float, **mods) -> None:
    engine.pointer_down(press(x, y, **mods))
    engine.pointer_up(press(x, y, **mods))


def drag(engine: CanvasEngine, start, end, steps: int = 4, **mods) -> None:
    engine.pointer_down(press(*start, **mods))
    for i in range(1, steps + 1):
        t = i / steps
        engine.pointer_move(press(start[0] + (end[0] - start[0]) * t,
                                  start[1] + (end[1] - start[1]) * t, **mods))
    engine.pointer_up(press(*end, **mods))
