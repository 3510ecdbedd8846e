"""Drawing surfaces.

``Canvas`` is the contract the fold engine draws through: a stack of
projective transforms plus three drawing operations. ``ImageCanvas`` is the
Pillow implementation used for capture bitmaps and for the host frame.
"""

from __future__ import annotations
import math
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

from .matrix import Matrix
from .types import Rect

Color = Tuple[int, int, int, int]
TRANSPARENT: Color = (0, 0, 0, 0)


class Canvas(ABC):
    """Base canvas: transform stack shared by all implementations."""

    def __init__(self):
        self._matrix = Matrix()
        self._stack: List[Matrix] = []

    @property
    def matrix(self) -> Matrix:
        """Current transform (read-only copy)."""
        return self._matrix.copy()

    @property
    @abstractmethod
    def width(self) -> int:
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        pass

    def save(self) -> int:
        """Push current transform. Returns the save depth before the push."""
        self._stack.append(self._matrix.copy())
        return len(self._stack) - 1

    def restore(self) -> None:
        """Pop the last saved transform."""
        if self._stack:
            self._matrix = self._stack.pop()

    def restore_to_count(self, count: int) -> None:
        while len(self._stack) > count:
            self.restore()

    def translate(self, dx: float, dy: float) -> None:
        self._matrix.pre_translate(dx, dy)

    def scale(self, sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> None:
        self._matrix.pre_scale(sx, sy, px, py)

    def concat(self, matrix: Matrix) -> None:
        self._matrix.pre_concat(matrix)

    @abstractmethod
    def draw_bitmap(self, bitmap: Image.Image, src: Rect, dst: Rect, alpha: int = 255) -> None:
        """Draw ``src`` region of ``bitmap`` into ``dst`` under the current transform."""
        pass

    @abstractmethod
    def draw_rect(self, rect: Rect, color: Color) -> None:
        """Fill ``rect`` with an RGBA color under the current transform."""
        pass

    @abstractmethod
    def clear(self, color: Color = TRANSPARENT) -> None:
        """Replace every pixel with ``color``, ignoring the transform."""
        pass


class ImageCanvas(Canvas):
    """Canvas drawing into a Pillow RGBA image."""

    def __init__(self, image: Image.Image, resample: Optional[int] = None):
        super().__init__()
        if image.mode != "RGBA":
            raise ValueError(f"ImageCanvas needs an RGBA image, got {image.mode}")
        self.image = image
        self.resample = Image.Resampling.BILINEAR if resample is None else resample

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def _clip_box(self, points: List[Tuple[float, float]]) -> Optional[Tuple[int, int, int, int]]:
        """Integer bounding box of points clipped to the image, or None."""
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        if not all(math.isfinite(v) for v in xs + ys):
            return None
        x0 = max(0, int(math.floor(min(xs))))
        y0 = max(0, int(math.floor(min(ys))))
        x1 = min(self.width, int(math.ceil(max(xs))))
        y1 = min(self.height, int(math.ceil(max(ys))))
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, y0, x1, y1

    def draw_bitmap(self, bitmap: Image.Image, src: Rect, dst: Rect, alpha: int = 255) -> None:
        if src.is_empty() or dst.is_empty() or alpha <= 0:
            return
        if bitmap.mode != "RGBA":
            bitmap = bitmap.convert("RGBA")

        # src-local pixel space -> dst rect -> canvas
        full = self._matrix.copy()
        full.pre_translate(dst.left, dst.top)
        full.pre_scale(dst.width / src.width, dst.height / src.height)
        try:
            inverse = full.inverted()
        except ValueError:
            return

        box = self._clip_box(full.map_quad(0, 0, src.width, src.height))
        if box is None:
            return
        x0, y0, x1, y1 = box

        source = bitmap
        if src.as_box() != (0, 0, bitmap.width, bitmap.height):
            source = bitmap.crop(src.as_box())

        inverse.pre_translate(x0, y0)
        layer = source.transform(
            (x1 - x0, y1 - y0),
            Image.Transform.PERSPECTIVE,
            inverse.perspective_coefficients(),
            resample=self.resample,
        )
        if alpha < 255:
            a = layer.getchannel("A").point(lambda v: v * alpha // 255)
            layer.putalpha(a)
        self.image.alpha_composite(layer, dest=(x0, y0))

    def draw_rect(self, rect: Rect, color: Color) -> None:
        if rect.is_empty() or color[3] <= 0:
            return
        quad = self._matrix.map_quad(rect.left, rect.top, rect.right, rect.bottom)
        box = self._clip_box(quad)
        if box is None:
            return
        x0, y0, x1, y1 = box
        overlay = Image.new("RGBA", (x1 - x0, y1 - y0), TRANSPARENT)
        ImageDraw.Draw(overlay).polygon([(x - x0, y - y0) for x, y in quad], fill=tuple(color))
        self.image.alpha_composite(overlay, dest=(x0, y0))

    def clear(self, color: Color = TRANSPARENT) -> None:
        self.image.paste(tuple(color), (0, 0, self.width, self.height))
