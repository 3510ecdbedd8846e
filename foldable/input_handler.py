"""Input Handler - maps raylib mouse and keyboard state to engine input.

Polls once per frame and returns pointer events in window coordinates plus
the keys that were pressed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .rl_compat import rl
from .types import PointerAction, PointerEvent
from .logging import now


@dataclass
class MouseState:
    """Current mouse state snapshot."""
    x: float = 0.0
    y: float = 0.0
    left_pressed: bool = False
    left_released: bool = False
    left_down: bool = False


@dataclass
class InputSnapshot:
    """Everything polled in one frame."""
    events: List[PointerEvent] = field(default_factory=list)
    escape: bool = False
    next_page: bool = False
    prev_page: bool = False


@dataclass
class InputHandler:
    """Turns polled mouse state into DOWN/MOVE/UP pointer events."""

    key_next: List[int] = field(default_factory=lambda: [rl.KEY_DOWN, rl.KEY_S])
    key_prev: List[int] = field(default_factory=lambda: [rl.KEY_UP, rl.KEY_W])
    key_close: int = rl.KEY_ESCAPE

    _last_pos: Optional[tuple] = None
    _dragging: bool = False

    def poll_mouse(self) -> MouseState:
        """Get current mouse state."""
        pos = rl.GetMousePosition()
        return MouseState(
            x=pos.x,
            y=pos.y,
            left_pressed=rl.IsMouseButtonPressed(rl.MOUSE_BUTTON_LEFT),
            left_released=rl.IsMouseButtonReleased(rl.MOUSE_BUTTON_LEFT),
            left_down=rl.IsMouseButtonDown(rl.MOUSE_BUTTON_LEFT),
        )

    def events_for(self, mouse: MouseState, event_time: int) -> List[PointerEvent]:
        """Pointer events implied by a mouse snapshot."""
        events: List[PointerEvent] = []
        pos = (mouse.x, mouse.y)

        if mouse.left_pressed:
            self._dragging = True
            events.append(PointerEvent(PointerAction.DOWN, mouse.x, mouse.y, event_time))
        elif self._dragging and mouse.left_down and pos != self._last_pos:
            events.append(PointerEvent(PointerAction.MOVE, mouse.x, mouse.y, event_time))

        if mouse.left_released and self._dragging:
            self._dragging = False
            events.append(PointerEvent(PointerAction.UP, mouse.x, mouse.y, event_time + 1))

        self._last_pos = pos
        return events

    def poll(self) -> InputSnapshot:
        """Poll input for this frame."""
        mouse = self.poll_mouse()
        snapshot = InputSnapshot(events=self.events_for(mouse, int(now() * 1000)))
        snapshot.escape = rl.IsKeyPressed(self.key_close)
        snapshot.next_page = any(rl.IsKeyPressed(k) for k in self.key_next)
        snapshot.prev_page = any(rl.IsKeyPressed(k) for k in self.key_prev)
        return snapshot


# Singleton instance
_input_handler: Optional[InputHandler] = None


def get_input_handler() -> InputHandler:
    """Get the input handler instance."""
    global _input_handler
    if _input_handler is None:
        _input_handler = InputHandler()
    return _input_handler
