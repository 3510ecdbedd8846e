"""Pure math utilities - no external dependencies."""

from __future__ import annotations
import math


def clamp(v: float, a: float, b: float) -> float:
    """Clamp value v to range [a, b]."""
    return a if v < a else b if v > b else v


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation from a to b by factor t (clamped to [0, 1])."""
    t = clamp(t, 0.0, 1.0)
    return a + (b - a) * t


def round_half_up(v: float) -> int:
    """Round to nearest integer, halves going up (no banker's rounding)."""
    return int(math.floor(v + 0.5))


def sign(v: float) -> float:
    """Sign of v as -1.0, 0.0 or 1.0."""
    if v > 0.0:
        return 1.0
    if v < 0.0:
        return -1.0
    return 0.0


def normalize_rotation(rotation: float) -> float:
    """Bring an angle in degrees into (-180, 180]."""
    position = rotation % 360.0
    if position > 180.0:
        position -= 360.0
    return position


def is_page_angle(rotation: float, epsilon: float = 0.0) -> bool:
    """Check if rotation sits on a multiple of 180 degrees."""
    rest = rotation % 180.0
    return rest <= epsilon or 180.0 - rest <= epsilon
