"""Frame scheduler - "call me on the next frame" for cooperative animations.

The host calls ``tick()`` once per frame. Callbacks posted during a tick run
on a later tick, never reentrantly.
"""

from __future__ import annotations
from typing import Callable, List, Tuple

from .config import FRAME_TIME_MS
from .logging import now, log

FrameCallback = Callable[[], None]


class FrameScheduler:
    """Delayed callbacks driven by host frame ticks."""

    def __init__(self, clock: Callable[[], float] = now):
        self.clock = clock
        self._pending: List[Tuple[float, FrameCallback]] = []

    @property
    def has_pending(self) -> bool:
        return len(self._pending) > 0

    def is_pending(self, callback: FrameCallback) -> bool:
        return any(cb == callback for _, cb in self._pending)

    def post(self, callback: FrameCallback, delay_ms: float = FRAME_TIME_MS) -> None:
        """Schedule callback, replacing an earlier posting of the same callback."""
        self.remove(callback)
        self._pending.append((self.clock() + delay_ms / 1000.0, callback))

    def remove(self, callback: FrameCallback) -> None:
        self._pending = [(t, cb) for t, cb in self._pending if cb != callback]

    def clear(self) -> None:
        self._pending.clear()

    def tick(self) -> int:
        """Run every callback that is due. Returns how many ran."""
        if not self._pending:
            return 0
        t = self.clock()
        due = [cb for when, cb in self._pending if when <= t]
        if not due:
            return 0
        self._pending = [(when, cb) for when, cb in self._pending if when > t]
        for callback in due:
            try:
                callback()
            except Exception as e:
                log(f"[SCHED][ERR] Frame callback failed: {e!r}")
                raise
        return len(due)
