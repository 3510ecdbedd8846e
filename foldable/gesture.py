"""Gesture layer - turns pointer drags and flings into fold rotation.

``GestureDetector`` recognises scroll, fling and tap from raw pointer
events. ``GestureFold`` maps them onto a fold list: drags rotate it, flings
run up to the next page, releases snap to the nearest page.
"""

from __future__ import annotations
from collections import deque
from typing import TYPE_CHECKING, Deque, Optional, Tuple

from .animation import FlingAnimation, FoldAnimator
from .config import (
    ANIMATION_DURATION_PER_ITEM_MS, DEFAULT_SCROLL_FACTOR, DEFAULT_TOUCH_SLOP,
    MAX_GESTURE_FLING_VELOCITY, MIN_FLING_VELOCITY, MIN_GESTURE_FLING_VELOCITY,
    SNAP_EPSILON, VELOCITY_WINDOW_MS,
)
from .math_utils import clamp, is_page_angle, round_half_up, sign
from .scheduler import FrameScheduler
from .state import GestureState, TouchEventCache
from .types import PointerAction, PointerEvent
from .logging import log

if TYPE_CHECKING:
    from .fold_list import FoldableList


class VelocityTracker:
    """Estimates pointer velocity (px/s) over a short trailing window."""

    def __init__(self, window_ms: int = VELOCITY_WINDOW_MS):
        self.window_ms = window_ms
        self._samples: Deque[Tuple[int, float, float]] = deque()

    def clear(self) -> None:
        self._samples.clear()

    def add_movement(self, event: PointerEvent) -> None:
        self._samples.append((event.event_time, event.x, event.y))
        while self._samples and event.event_time - self._samples[0][0] > self.window_ms:
            self._samples.popleft()

    def compute_velocity(self) -> Tuple[float, float]:
        if len(self._samples) < 2:
            return 0.0, 0.0
        t0, x0, y0 = self._samples[0]
        t1, x1, y1 = self._samples[-1]
        dt = (t1 - t0) / 1000.0
        if dt <= 0.0:
            return 0.0, 0.0
        return (x1 - x0) / dt, (y1 - y0) / dt


class GestureDetector:
    """Scroll/fling/tap recognition. Long press is not supported."""

    def __init__(self, listener: "GestureFold", touch_slop: float = DEFAULT_TOUCH_SLOP,
                 min_fling_velocity: float = MIN_GESTURE_FLING_VELOCITY,
                 max_fling_velocity: float = MAX_GESTURE_FLING_VELOCITY):
        self.listener = listener
        self.touch_slop = touch_slop
        self.min_fling_velocity = min_fling_velocity
        self.max_fling_velocity = max_fling_velocity
        self.is_longpress_enabled = False

        self.velocity_tracker = VelocityTracker()
        self._down: Optional[PointerEvent] = None
        self._last_x = 0.0
        self._last_y = 0.0
        self._in_tap_region = False

    def on_touch_event(self, event: PointerEvent) -> bool:
        action = event.action

        if action == PointerAction.DOWN:
            self.velocity_tracker.clear()
            self.velocity_tracker.add_movement(event)
            self._down = event
            self._last_x, self._last_y = event.x, event.y
            self._in_tap_region = True
            return self.listener.on_down(event)

        if self._down is None:
            return False

        if action == PointerAction.MOVE:
            self.velocity_tracker.add_movement(event)
            dx = self._last_x - event.x
            dy = self._last_y - event.y
            if self._in_tap_region:
                tx = event.x - self._down.x
                ty = event.y - self._down.y
                if tx * tx + ty * ty > self.touch_slop * self.touch_slop:
                    self._in_tap_region = False
            if dx == 0.0 and dy == 0.0:
                return False
            self._last_x, self._last_y = event.x, event.y
            return self.listener.on_scroll(self._down, event, dx, dy)

        if action == PointerAction.UP:
            down = self._down
            self._down = None
            self.velocity_tracker.add_movement(event)
            if self._in_tap_region:
                return self.listener.on_single_tap_up(event)
            vx, vy = self.velocity_tracker.compute_velocity()
            if event.velocity_x is not None:
                vx = event.velocity_x
            if event.velocity_y is not None:
                vy = event.velocity_y
            vx = clamp(vx, -self.max_fling_velocity, self.max_fling_velocity)
            vy = clamp(vy, -self.max_fling_velocity, self.max_fling_velocity)
            if abs(vy) > self.min_fling_velocity or abs(vx) > self.min_fling_velocity:
                return self.listener.on_fling(down, event, vx, vy)
            return False

        # CANCEL
        self._down = None
        self.velocity_tracker.clear()
        return False


class GestureFold:
    """Drives a fold list's rotation from pointer input, tweens and flings."""

    def __init__(self, fold_list: "FoldableList", scheduler: FrameScheduler,
                 touch_slop: float = DEFAULT_TOUCH_SLOP):
        self.fold_list = fold_list
        self.scheduler = scheduler
        self.scroll_factor = DEFAULT_SCROLL_FACTOR
        self.touch_slop = touch_slop

        self.state = GestureState()
        self.event_cache = TouchEventCache()
        self.detector = GestureDetector(self, touch_slop)

        self.animator = FoldAnimator(scheduler, self._apply_animated)
        self.fling = FlingAnimation(scheduler, self._current_rotation, self._apply_animated)

    @property
    def is_scrolling(self) -> bool:
        return self.state.is_scrolling

    @property
    def is_animating(self) -> bool:
        return self.animator.is_running or self.fling.is_animating

    def _current_rotation(self) -> float:
        return self.fold_list.fold_rotation

    def _apply_animated(self, rotation: float) -> None:
        self.fold_list.set_fold_rotation(rotation)

    def cancel_animations(self) -> None:
        self.animator.cancel()
        self.fling.stop()

    # ─── Pointer pipeline ──────────────────────────────────────────────────

    def process_touch(self, event: PointerEvent) -> bool:
        """Feed one pointer event. Exact repeats return the cached result."""
        cached = self.event_cache.lookup(event)
        if cached is not None:
            return cached
        self.event_cache.remember(event)

        if self.fold_list.count > 0:
            # Measure against the list's untranslated frame
            result = self.detector.on_touch_event(event.offset(0.0, self.fold_list.translation_y))
        else:
            result = False

        if event.action in (PointerAction.UP, PointerAction.CANCEL):
            if not self.fling.is_animating:
                self.fold_list.scroll_to_nearest_position()

        return self.event_cache.store(result)

    def on_down(self, event: PointerEvent) -> bool:
        self.state.reset()
        self.cancel_animations()
        return False

    def on_single_tap_up(self, event: PointerEvent) -> bool:
        return False

    def on_scroll(self, down: PointerEvent, event: PointerEvent, dx: float, dy: float) -> bool:
        h = self.fold_list.height
        distance = down.y - event.y

        if not self.state.is_scrolling and abs(distance) > self.touch_slop and h != 0:
            self.state.start_scroll(self.fold_list.fold_rotation, event.y)
            log(f"[GESTURE] Scroll started at rotation={self.fold_list.fold_rotation:.1f}")

        if self.state.is_scrolling:
            delta = 180.0 * self.scroll_factor * self.state.get_scroll_delta(event.y) / h
            self.fold_list.set_fold_rotation(self.state.scroll_start_rotation + delta, True)

        return self.state.is_scrolling

    def on_fling(self, down: PointerEvent, event: PointerEvent, vx: float, vy: float) -> bool:
        h = self.fold_list.height
        if h == 0:
            return False
        velocity = -vy / h * 180.0
        velocity = max(MIN_FLING_VELOCITY, abs(velocity)) * sign(velocity)
        return self.start_fling(velocity)

    # ─── Motion ────────────────────────────────────────────────────────────

    def start_fling(self, velocity: float) -> bool:
        """Fling toward the next page boundary. False when already on a page."""
        rotation = self.fold_list.fold_rotation
        if velocity == 0.0 or is_page_angle(rotation, SNAP_EPSILON):
            return False

        self.animator.cancel()
        position = int(rotation // 180.0)
        low = position * 180.0
        self.fling.fling(velocity, low, low + 180.0)
        return True

    def animate_fold(self, to_rotation: float) -> None:
        """Tween the list to ``to_rotation``, cancelling any motion in flight."""
        current = self.fold_list.fold_rotation
        duration = round_half_up(abs(ANIMATION_DURATION_PER_ITEM_MS * (to_rotation - current) / 180.0))
        self.fling.stop()
        self.animator.start(current, to_rotation, duration)
