"""Engine log: one timestamped line per event, tagged with the frame number."""

from __future__ import annotations
import os
import sys
import time
from typing import Optional, TextIO

QUIET_ENV = "FOLDABLE_QUIET"


def _quiet_from_env() -> bool:
    return os.environ.get(QUIET_ENV, "").lower() in ("1", "true", "yes")


class Logger:
    """Writes ``[elapsed F<frame>] message`` lines; stderr if stdout fails."""

    def __init__(self, enabled: Optional[bool] = None, stream: Optional[TextIO] = None):
        self._start_time: float = time.perf_counter()
        self._frame: int = 0
        self.enabled: bool = (not _quiet_from_env()) if enabled is None else enabled
        self.stream = stream

    def increment_frame(self) -> None:
        self._frame += 1

    def log(self, msg: str) -> None:
        if not self.enabled:
            return
        elapsed = time.perf_counter() - self._start_time
        line = f"[{elapsed:7.3f}s F{self._frame:06d}] {msg}\n"
        out = self.stream if self.stream is not None else sys.stdout
        try:
            out.write(line)
            out.flush()
        except (OSError, ValueError):
            # Closed or detached stdout, e.g. under a windowed launcher
            sys.stderr.write(line)


_logger: Optional[Logger] = None


def get_logger() -> Logger:
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def log(msg: str) -> None:
    get_logger().log(msg)


def set_enabled(enabled: bool) -> None:
    get_logger().enabled = enabled


def increment_frame() -> None:
    get_logger().increment_frame()


def now() -> float:
    """Monotonic seconds, the clock every frame task runs on."""
    return time.perf_counter()
