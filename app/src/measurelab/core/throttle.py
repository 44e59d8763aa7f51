from __future__ import annotations

import time
from typing import Callable, Generic, Optional, TypeVar

from .constants import FRAME_INTERVAL_MS

T = TypeVar('T')


class FrameThrottle(Generic[T]):
    """Coalesce high-frequency updates to at most one per frame.

    ``offer`` keeps only the latest value; it is released immediately when a
    frame interval has elapsed since the last release, otherwise it stays
    pending until the next ``offer`` or an explicit ``flush``.
    """

    def __init__(self, interval_ms: float = FRAME_INTERVAL_MS,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.interval = interval_ms / 1000.0
        self._clock = clock
        self._last: Optional[float] = None
        self._pending: Optional[T] = None
        self._has_pending = False

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def offer(self, value: T) -> bool:
        """Queue ``value``; return True when it should be delivered now."""
        self._pending = value
        self._has_pending = True
        now = self._clock()
        if self._last is None or now - self._last >= self.interval:
            self._last = now
            return True
        return False

    def take(self) -> Optional[T]:
        value = self._pending
        self._pending = None
        self._has_pending = False
        return value

    def flush(self) -> Optional[T]:
        """Release the pending value regardless of timing."""
        if self._has_pending:
            self._last = self._clock()
        return self.take()

    def reset(self) -> None:
        self._pending = None
        self._has_pending = False
        self._last = None
