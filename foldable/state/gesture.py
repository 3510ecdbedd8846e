"""Gesture state - drag tracking and the last-event cache."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..types import PointerAction, PointerEvent


@dataclass
class GestureState:
    """State of the current drag."""
    is_scrolling: bool = False
    scroll_start_rotation: float = 0.0
    scroll_start_y: float = 0.0

    def start_scroll(self, rotation: float, y: float) -> None:
        """Start scrolling from the given rotation and pointer y."""
        self.is_scrolling = True
        self.scroll_start_rotation = rotation
        self.scroll_start_y = y

    def reset(self) -> None:
        self.is_scrolling = False

    def get_scroll_delta(self, y: float) -> float:
        """Pointer travel since the scroll started, positive upwards."""
        return self.scroll_start_y - y


@dataclass
class TouchEventCache:
    """Remembers the last processed event so repeats return the same result.

    Hosts may route one event through both an interception hook and the
    main handler.
    """
    last_event_time: Optional[int] = None
    last_action: Optional[PointerAction] = None
    last_result: bool = False

    def lookup(self, event: PointerEvent) -> Optional[bool]:
        """Cached result for an exact repeat, else None."""
        if self.last_event_time == event.event_time and self.last_action == event.action:
            return self.last_result
        return None

    def remember(self, event: PointerEvent) -> None:
        self.last_event_time = event.event_time
        self.last_action = event.action

    def store(self, result: bool) -> bool:
        self.last_result = result
        return result
