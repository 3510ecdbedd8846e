"""Fold animations - tween and fling, both cooperative frame tasks."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional

from .config import FRAME_TIME_MS
from .math_utils import clamp, lerp
from .scheduler import FrameScheduler
from .logging import log


@dataclass
class Animation:
    """Base class for timed animations."""
    start_time: float = 0.0
    duration_ms: float = 0.0

    def progress_at(self, t: float) -> float:
        """Animation progress (0.0 to 1.0) at time t."""
        if self.duration_ms <= 0:
            return 1.0
        elapsed = (t - self.start_time) * 1000.0
        return clamp(elapsed / self.duration_ms, 0.0, 1.0)

    def is_complete_at(self, t: float) -> bool:
        return self.progress_at(t) >= 1.0


@dataclass
class FoldAnimation(Animation):
    """Linear-in-time tween between two fold rotations."""
    from_rotation: float = 0.0
    to_rotation: float = 0.0

    def rotation_at(self, t: float) -> float:
        return lerp(self.from_rotation, self.to_rotation, self.progress_at(t))


class FoldAnimator:
    """Runs a FoldAnimation, applying the rotation once per frame."""

    def __init__(self, scheduler: FrameScheduler, apply: Callable[[float], None]):
        self.scheduler = scheduler
        self._apply = apply
        self.animation: Optional[FoldAnimation] = None

    @property
    def is_running(self) -> bool:
        return self.animation is not None

    def start(self, from_rotation: float, to_rotation: float, duration_ms: float) -> None:
        self.cancel()
        self.animation = FoldAnimation(
            start_time=self.scheduler.clock(),
            duration_ms=duration_ms,
            from_rotation=from_rotation,
            to_rotation=to_rotation,
        )
        log(f"[ANIM] Fold {from_rotation:.1f} -> {to_rotation:.1f} duration={duration_ms}ms")
        self.scheduler.post(self._run, 0)

    def cancel(self) -> None:
        if self.animation is None:
            return
        self.scheduler.remove(self._run)
        self.animation = None

    def _run(self) -> None:
        animation = self.animation
        if animation is None:
            return
        t = self.scheduler.clock()
        complete = animation.is_complete_at(t)
        if complete:
            self.animation = None
        else:
            self.scheduler.post(self._run, 0)
        self._apply(animation.rotation_at(t))


class FlingAnimation:
    """Integrates angular velocity until the rotation hits a page boundary."""

    def __init__(self, scheduler: FrameScheduler,
                 get_rotation: Callable[[], float], apply: Callable[[float], None]):
        self.scheduler = scheduler
        self._get_rotation = get_rotation
        self._apply = apply

        self.is_animating = False
        self.velocity = 0.0
        self.min_rotation = 0.0
        self.max_rotation = 0.0
        self._last_time = 0.0

    def fling(self, velocity: float, min_rotation: float, max_rotation: float) -> None:
        """Start moving at ``velocity`` degrees/s within [min_rotation, max_rotation]."""
        self._last_time = self.scheduler.clock()
        self.velocity = velocity
        self.min_rotation = min_rotation
        self.max_rotation = max_rotation
        log(f"[FLING] Start velocity={velocity:.1f} bounds=[{min_rotation:.0f}, {max_rotation:.0f}]")
        self._start_internal()

    def stop(self) -> None:
        self.scheduler.remove(self._run)
        if self.is_animating:
            log("[FLING] Stop")
        self.is_animating = False

    def _start_internal(self) -> None:
        # Small delay, the callback must not run within the same frame
        self.scheduler.post(self._run, FRAME_TIME_MS)
        self.is_animating = True

    def _run(self) -> None:
        if not self.is_animating:
            return
        t = self.scheduler.clock()
        delta = self.velocity * (t - self._last_time)
        self._last_time = t

        rotation = clamp(self._get_rotation() + delta, self.min_rotation, self.max_rotation)
        self._apply(rotation)

        if rotation != self.min_rotation and rotation != self.max_rotation:
            self._start_internal()
        else:
            self.stop()
