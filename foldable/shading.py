"""Fold shading: overlays drawn on top of each fold half."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Tuple

from PIL import Image

from .canvas import Canvas
from .config import SHADOW_COLOR, SHADOW_MAX_ALPHA
from .math_utils import round_half_up
from .types import Gravity, Rect


class FoldShading(ABC):
    """Hooks called around the bitmap blit of every visible half.

    ``rotation`` is the item's local fold angle in (-180, 180].
    """

    @abstractmethod
    def on_pre_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        pass

    @abstractmethod
    def on_post_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        pass


def shadow_alpha(intensity: float) -> int:
    """Shadow alpha for an intensity in [0, 1]."""
    return round_half_up(SHADOW_MAX_ALPHA * intensity)


class SimpleFoldShading(FoldShading):
    """Solid black shadow that darkens a half as it rotates away."""

    def on_pre_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        pass

    def on_post_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        intensity = self.get_shadow_intensity(rotation, gravity)
        if intensity > 0.0:
            canvas.draw_rect(bounds, SHADOW_COLOR + (shadow_alpha(intensity),))

    @staticmethod
    def get_shadow_intensity(rotation: float, gravity: Gravity) -> float:
        if gravity == Gravity.TOP:
            if -90.0 < rotation < 0.0:  # rotation is applied
                return -rotation / 90.0
        else:
            if 0.0 < rotation < 90.0:
                return rotation / 90.0
        return 0.0


class GlanceFoldShading(FoldShading):
    """Shadow on the top half, a light "glance" sweeping the bottom half."""

    def __init__(self, glance: Image.Image):
        self.glance = glance if glance.mode == "RGBA" else glance.convert("RGBA")
        self.glance_from = Rect()
        self.glance_to = Rect()

    def on_pre_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        pass

    def on_post_draw(self, canvas: Canvas, bounds: Rect, rotation: float, gravity: Gravity) -> None:
        intensity = self.get_shadow_intensity(rotation, gravity)
        if intensity > 0.0:
            canvas.draw_rect(bounds, SHADOW_COLOR + (shadow_alpha(intensity),))

        if self.compute_glance(bounds, rotation, gravity):
            canvas.draw_bitmap(self.glance, self.glance_from, self.glance_to)

    @staticmethod
    def get_shadow_intensity(rotation: float, gravity: Gravity) -> float:
        if gravity == Gravity.TOP and -90.0 < rotation < 0.0:
            return -rotation / 90.0
        return 0.0

    def compute_glance(self, bounds: Rect, rotation: float, gravity: Gravity) -> bool:
        """Fill ``glance_from``/``glance_to``. False when nothing is visible."""
        if gravity != Gravity.BOTTOM or not (0.0 < rotation < 90.0) or bounds.width <= 0:
            return False

        gw, gh = self.glance.size
        aspect = gw / bounds.width

        # Glance slides down the half as the rotation grows
        distance = int(bounds.height * ((rotation - 60.0) / 15.0))
        distance_on_glance = int(distance * aspect)

        scaled_glance_height = int(gh / aspect)
        self.glance_to.set(bounds.left, bounds.top + distance,
                           bounds.right, bounds.top + distance + scaled_glance_height)
        if not self.glance_to.intersect(bounds):
            return False

        scaled_bounds_height = int(bounds.height * aspect)
        self.glance_from.set(0, -distance_on_glance, gw, -distance_on_glance + scaled_bounds_height)
        return self.glance_from.intersect(Rect(0, 0, gw, gh))

    def glance_regions(self) -> Tuple[Rect, Rect]:
        return self.glance_from.copy(), self.glance_to.copy()
