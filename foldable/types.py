"""Core data types for the fold engine."""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, IntEnum, auto
from typing import Optional


class Gravity(IntEnum):
    """Which half of a foldable item a part draws."""
    TOP = 0
    BOTTOM = 1


class Visibility(IntEnum):
    """Part visibility; INVISIBLE dominates when combined."""
    VISIBLE = 0
    INVISIBLE = 1

    def combine(self, other: Visibility) -> Visibility:
        """Effective visibility of two flags."""
        if self == Visibility.VISIBLE:
            return other
        return self


class PointerAction(Enum):
    """Pointer event kinds delivered by the host."""
    DOWN = auto()
    MOVE = auto()
    UP = auto()
    CANCEL = auto()


class FoldState(Enum):
    """Cover/details transition state."""
    FOLDED = auto()
    UNFOLDING = auto()
    UNFOLDED = auto()
    FOLDING = auto()


@dataclass
class PointerEvent:
    """A single pointer sample. Times are in milliseconds."""
    action: PointerAction
    x: float
    y: float
    event_time: int = 0
    velocity_x: Optional[float] = None
    velocity_y: Optional[float] = None

    def offset(self, dx: float, dy: float) -> PointerEvent:
        """Copy of this event moved by (dx, dy)."""
        return PointerEvent(self.action, self.x + dx, self.y + dy, self.event_time,
                            self.velocity_x, self.velocity_y)


@dataclass
class Rect:
    """Integer rectangle, right and bottom exclusive."""
    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2.0

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def is_empty(self) -> bool:
        """True if the rectangle covers no pixels."""
        return self.left >= self.right or self.top >= self.bottom

    def copy(self) -> Rect:
        """Create a copy of this Rect."""
        return Rect(self.left, self.top, self.right, self.bottom)

    def set(self, left: int, top: int, right: int, bottom: int) -> None:
        """Assign all four edges."""
        self.left, self.top, self.right, self.bottom = left, top, right, bottom

    def intersect(self, other: Rect) -> bool:
        """Shrink to the overlap with other. Unchanged and False if they don't overlap."""
        if (self.left < other.right and other.left < self.right
                and self.top < other.bottom and other.top < self.bottom):
            self.left = max(self.left, other.left)
            self.top = max(self.top, other.top)
            self.right = min(self.right, other.right)
            self.bottom = min(self.bottom, other.bottom)
            return True
        return False

    def contains(self, x: float, y: float) -> bool:
        """Check if a point lies inside."""
        return self.left <= x < self.right and self.top <= y < self.bottom

    def as_box(self) -> tuple:
        """Pillow box tuple (left, top, right, bottom)."""
        return (self.left, self.top, self.right, self.bottom)
