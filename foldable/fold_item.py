"""Foldable item - the fold primitive.

An item owns one content view. While folded (rotation != 0) the content is
captured into an offscreen bitmap and drawn as two halves, each clipped to
its part of the bitmap and transformed on its own: rotation about the X axis
with perspective, scale, and a vertical "rolling" translation.
"""

from __future__ import annotations
import math
import weakref
from typing import Callable, Optional

from PIL import Image

from .canvas import Canvas, ImageCanvas, TRANSPARENT
from .config import CAMERA_DISTANCE, CAMERA_DISTANCE_MAGIC_FACTOR, DEFAULT_DENSITY_DPI
from .content import ContentView
from .matrix import Matrix
from .math_utils import clamp, normalize_rotation, round_half_up
from .shading import FoldShading
from .types import Gravity, PointerEvent, Rect, Visibility
from .logging import log


def create_bitmap(width: int, height: int) -> Image.Image:
    """Allocate a transparent ARGB capture bitmap."""
    return Image.new("RGBA", (width, height), TRANSPARENT)


class FoldPart:
    """One half of a foldable item.

    Draws the top or bottom part of the item's capture bitmap and overlays
    shading. Holds only a weak handle to its item.
    """

    def __init__(self, item: "FoldableItem", gravity: Gravity):
        self._item_ref = weakref.ref(item)
        self.gravity = gravity

        self.clipping_factor = 0.5
        self.bitmap_bounds = Rect()
        self.visible_bounds: Optional[Rect] = None

        self.internal_visibility = Visibility.VISIBLE
        self.external_visibility = Visibility.VISIBLE

        self.rotation_x = 0.0
        self.translation_y = 0
        self.scale_x = 1.0
        self.scale_y = 1.0
        self.camera_distance = float(CAMERA_DISTANCE * item.density_dpi)

        self.local_fold_rotation = 0.0
        self.shading: Optional[FoldShading] = None

    @property
    def item(self) -> Optional["FoldableItem"]:
        return self._item_ref()

    @property
    def visibility(self) -> Visibility:
        return self.external_visibility.combine(self.internal_visibility)

    @property
    def is_visible(self) -> bool:
        return self.visibility == Visibility.VISIBLE

    def set_visibility(self, visibility: Visibility) -> None:
        self.external_visibility = visibility

    def set_visible_bounds(self, visible_bounds: Optional[Rect]) -> None:
        self.visible_bounds = visible_bounds
        self.calculate_bitmap_bounds()

    def calculate_bitmap_bounds(self) -> None:
        item = self.item
        if item is None or item.width <= 0 or item.height <= 0:
            self.bitmap_bounds.set(0, 0, 0, 0)
            return

        w, h = item.width, item.height
        if self.gravity == Gravity.TOP:
            top, bottom = 0, round_half_up(h * self.clipping_factor)
        else:
            top, bottom = round_half_up(h * (1.0 - self.clipping_factor)), h

        self.bitmap_bounds.set(0, top, w, bottom)
        if self.visible_bounds is not None:
            if not self.bitmap_bounds.intersect(self.visible_bounds):
                self.bitmap_bounds.set(0, 0, 0, 0)  # no intersection

    def apply_fold_rotation(self, rotation: float) -> None:
        position = normalize_rotation(rotation)

        rotation_x = 0.0
        visible = True
        if self.gravity == Gravity.TOP:
            if position <= -90.0 or position == 180.0:  # (-180, -90] or {180}
                visible = False
            elif position < 0.0:  # (-90, 0)
                rotation_x = position
            # [0, 180) holds still
        else:
            if position >= 90.0:  # [90, 180]
                visible = False
            elif position > 0.0:  # (0, 90)
                rotation_x = position
            # (-180, 0] holds still

        self.rotation_x = rotation_x
        self.internal_visibility = Visibility.VISIBLE if visible else Visibility.INVISIBLE
        self.local_fold_rotation = position

    def apply_rolling_distance(self, distance: float, scale_y: float) -> None:
        self.translation_y = round_half_up(distance * scale_y)

        # Bottom clipping mirrors the top one so both halves share a seam
        item = self.item
        h = item.height // 2 if item is not None else 0
        top_clipping = 0.5 if h == 0 else clamp(0.5 * (h - distance) / h, 0.0, 1.0)
        self.clipping_factor = top_clipping if self.gravity == Gravity.TOP else 1.0 - top_clipping

        self.calculate_bitmap_bounds()

    def get_matrix(self) -> Matrix:
        """Part transform: scale, then rotate about the centerline, then translate."""
        item = self.item
        if item is None:
            return Matrix()
        px, py = item.width / 2.0, item.height / 2.0
        m = Matrix.translation(0.0, self.translation_y)
        m.pre_concat(Matrix.rotation_x(self.rotation_x, self.camera_distance, item.density_dpi, px, py))
        m.pre_scale(self.scale_x, self.scale_y, px, py)
        return m

    def draw(self, canvas: Canvas) -> None:
        if not self.is_visible or self.bitmap_bounds.is_empty():
            return
        item = self.item
        bitmap = item.capture_bitmap if item is not None else None

        count = canvas.save()
        canvas.concat(self.get_matrix())
        if self.shading is not None:
            self.shading.on_pre_draw(canvas, self.bitmap_bounds, self.local_fold_rotation, self.gravity)
        if bitmap is not None:
            canvas.draw_bitmap(bitmap, self.bitmap_bounds, self.bitmap_bounds)
        if self.shading is not None:
            self.shading.on_post_draw(canvas, self.bitmap_bounds, self.local_fold_rotation, self.gravity)
        canvas.restore_to_count(count)


class FoldableItem:
    """Fold primitive: splits its content in two halves and rotates them."""

    def __init__(self, density_dpi: int = DEFAULT_DENSITY_DPI):
        self.density_dpi = density_dpi
        self.width = 0
        self.height = 0

        self.content: Optional[ContentView] = None
        self.capture_bitmap: Optional[Image.Image] = None
        self.in_transformation = False

        self.fold_rotation = 0.0
        self.scale = 1.0
        self.scale_factor = 1.0
        self.scale_factor_y = 1.0
        self.rolling_distance = 0.0
        self.auto_scale_enabled = False
        self.visible_bounds: Optional[Rect] = None
        self.shading: Optional[FoldShading] = None

        self.top_part = FoldPart(self, Gravity.TOP)
        self.bottom_part = FoldPart(self, Gravity.BOTTOM)

        self.on_invalidate: Optional[Callable[[], None]] = None
        self.dirty = False

        self._apply_transformation_visibility()

    @property
    def parts(self):
        return (self.top_part, self.bottom_part)

    def invalidate(self) -> None:
        self.dirty = True
        if self.on_invalidate is not None:
            self.on_invalidate()

    # ─── Content ───────────────────────────────────────────────────────────

    def attach_content(self, view: ContentView) -> None:
        if self.content is view:
            return
        if self.content is not None:
            self.detach_content()
        self.content = view
        view.layout(self.width, self.height)
        view.on_attached(self)
        self.invalidate()

    def detach_content(self) -> Optional[ContentView]:
        view = self.content
        if view is None:
            return None
        self.content = None
        view.on_detached()
        self.invalidate()
        return view

    def set_size(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Negative item size {width}x{height}")
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        # Bitmap no longer matches, it will be reallocated on next draw
        self.release_bitmap()
        if self.content is not None:
            self.content.layout(width, height)
            self.content.on_attached(self)
        self.set_rolling_distance(self.rolling_distance)

    # ─── Transformations ───────────────────────────────────────────────────

    def set_fold_rotation(self, rotation: float) -> None:
        """Fold rotation in degrees, normalized into (-180, 180]."""
        rotation = normalize_rotation(rotation)
        self.fold_rotation = rotation

        for part in self.parts:
            part.apply_fold_rotation(rotation)

        self._set_in_transformation(rotation != 0.0)

        self.scale_factor = 1.0
        if self.auto_scale_enabled and self.width > 0:
            sin = abs(math.sin(math.radians(rotation)))
            dw = self.height * sin * CAMERA_DISTANCE_MAGIC_FACTOR
            self.scale_factor = self.width / (self.width + dw)

        self.set_scale(self.scale)

    def set_scale(self, scale: float) -> None:
        self.scale = scale

        scale_x = scale * self.scale_factor
        scale_y = scale * self.scale_factor * self.scale_factor_y
        for part in self.parts:
            part.scale_x = scale_x
            part.scale_y = scale_y

        self._apply_rolling_distance()
        self.invalidate()

    def set_scale_factor_y(self, scale_factor_y: float) -> None:
        self.scale_factor_y = scale_factor_y
        self.set_scale(self.scale)

    def set_rolling_distance(self, distance: float) -> None:
        """Vertical translation that keeps both halves meeting at the seam."""
        self.rolling_distance = distance
        self._apply_rolling_distance()
        self.invalidate()

    def _apply_rolling_distance(self) -> None:
        scale_y = self.scale * self.scale_factor * self.scale_factor_y
        for part in self.parts:
            part.apply_rolling_distance(self.rolling_distance, scale_y)

    def set_auto_scale_enabled(self, enabled: bool) -> None:
        if self.auto_scale_enabled == enabled:
            return
        self.auto_scale_enabled = enabled
        self.set_fold_rotation(self.fold_rotation)

    def set_visible_bounds(self, visible_bounds: Optional[Rect]) -> None:
        self.visible_bounds = visible_bounds.copy() if visible_bounds is not None else None
        for part in self.parts:
            part.set_visible_bounds(self.visible_bounds)
        self.invalidate()

    def set_fold_shading(self, shading: Optional[FoldShading]) -> None:
        self.shading = shading
        for part in self.parts:
            part.shading = shading
        self.invalidate()

    def _set_in_transformation(self, in_transformation: bool) -> None:
        if self.in_transformation == in_transformation:
            return
        self.in_transformation = in_transformation
        self._apply_transformation_visibility()

    def _apply_transformation_visibility(self) -> None:
        visibility = Visibility.VISIBLE if self.in_transformation else Visibility.INVISIBLE
        for part in self.parts:
            part.set_visibility(visibility)

    # ─── Capture bitmap ────────────────────────────────────────────────────

    def ensure_capture_bitmap(self) -> Optional[Image.Image]:
        """Make sure the capture bitmap matches the current size."""
        bitmap = self.capture_bitmap
        if bitmap is not None and bitmap.size == (self.width, self.height):
            return bitmap

        self.release_bitmap()
        if self.width > 0 and self.height > 0:
            try:
                self.capture_bitmap = create_bitmap(self.width, self.height)
                log(f"[ITEM] Capture bitmap {self.width}x{self.height}")
            except (MemoryError, ValueError) as e:
                self.capture_bitmap = None
                log(f"[ITEM][ERR] Capture bitmap {self.width}x{self.height} failed: {e!r}")
        for part in self.parts:
            part.calculate_bitmap_bounds()
        return self.capture_bitmap

    def release_bitmap(self) -> None:
        if self.capture_bitmap is not None:
            self.capture_bitmap.close()
            self.capture_bitmap = None

    def clear(self) -> Optional[ContentView]:
        """Drop content and bitmap. Returns the detached content view."""
        view = self.detach_content()
        self.release_bitmap()
        return view

    # ─── Drawing and input ─────────────────────────────────────────────────

    def draw(self, canvas: Canvas) -> None:
        self.dirty = False
        if self.content is None:
            return

        if not self.in_transformation:
            self._draw_content(canvas)
            return

        bitmap = self.ensure_capture_bitmap()
        if bitmap is None:
            self._draw_content(canvas)
            return

        cache_canvas = ImageCanvas(bitmap)
        cache_canvas.clear()
        self.content.draw(cache_canvas)

        for part in self.parts:
            part.draw(canvas)

    def _draw_content(self, canvas: Canvas) -> None:
        count = canvas.save()
        if self.scale_factor_y != 1.0:
            canvas.scale(1.0, self.scale_factor_y, self.width / 2.0, self.height / 2.0)
        self.content.draw(canvas)
        canvas.restore_to_count(count)

    def dispatch_pointer_event(self, event: PointerEvent) -> bool:
        """Forward to content unless the item is folded."""
        if self.in_transformation or self.content is None:
            return False
        return self.content.on_pointer_event(event)
