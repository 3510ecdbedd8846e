"""3x3 projective matrix used for part transforms and canvas state.

Points are column vectors: ``p' = M * p``. ``pre_concat(other)`` yields
``self * other`` (``other`` applies first), the same convention canvases use
when a child transform is pushed on top of the current one.
"""

from __future__ import annotations
import math
from typing import List, Sequence, Tuple

from .config import CAMERA_INCH_PIXELS

Row = List[float]


class Matrix:
    """Mutable 3x3 matrix with projective support."""

    __slots__ = ("m",)

    def __init__(self, values: Sequence[Sequence[float]] = None):
        if values is None:
            self.m: List[Row] = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        else:
            self.m = [[float(v) for v in row] for row in values]

    def __repr__(self) -> str:
        return f"Matrix({self.m!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return all(
            math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-9)
            for ra, rb in zip(self.m, other.m) for a, b in zip(ra, rb)
        )

    def copy(self) -> Matrix:
        return Matrix(self.m)

    @property
    def is_identity(self) -> bool:
        return self == Matrix()

    # ─── Construction ──────────────────────────────────────────────────────

    @staticmethod
    def translation(dx: float, dy: float) -> Matrix:
        return Matrix([[1, 0, dx], [0, 1, dy], [0, 0, 1]])

    @staticmethod
    def scaling(sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> Matrix:
        """Scale around pivot (px, py)."""
        return Matrix([[sx, 0, px - sx * px], [0, sy, py - sy * py], [0, 0, 1]])

    @staticmethod
    def rotation_x(degrees: float, camera_distance: float, density_dpi: float,
                   px: float = 0.0, py: float = 0.0) -> Matrix:
        """Perspective rotation about the horizontal line y = py.

        ``camera_distance`` is expressed like a view's camera distance:
        pixels scaled by density. The eye sits ``camera_distance / dpi``
        inches away, at ``CAMERA_INCH_PIXELS`` pixels per inch, so the
        projection looks the same on every density.

        Screen y grows downward while the camera's y grows upward, so a
        positive angle brings the edge below the pivot toward the eye and a
        negative angle brings the edge above it.
        """
        if degrees == 0.0:
            return Matrix()
        rad = math.radians(degrees)
        eye = abs(camera_distance) / density_dpi * CAMERA_INCH_PIXELS
        cos_a = math.cos(rad)
        sin_a = math.sin(rad)
        rot = Matrix([[1, 0, 0], [0, cos_a, 0], [0, -sin_a / eye, 1]])
        return Matrix.translation(px, py).pre_concat(rot).pre_concat(Matrix.translation(-px, -py))

    # ─── Composition ───────────────────────────────────────────────────────

    def multiply(self, other: Matrix) -> Matrix:
        """Return ``self * other`` without modifying either."""
        a, b = self.m, other.m
        return Matrix([
            [sum(a[i][k] * b[k][j] for k in range(3)) for j in range(3)]
            for i in range(3)
        ])

    def pre_concat(self, other: Matrix) -> Matrix:
        """In place ``self = self * other``. Returns self for chaining."""
        self.m = self.multiply(other).m
        return self

    def pre_translate(self, dx: float, dy: float) -> Matrix:
        return self.pre_concat(Matrix.translation(dx, dy))

    def pre_scale(self, sx: float, sy: float, px: float = 0.0, py: float = 0.0) -> Matrix:
        return self.pre_concat(Matrix.scaling(sx, sy, px, py))

    # ─── Mapping ───────────────────────────────────────────────────────────

    def map_point(self, x: float, y: float) -> Tuple[float, float]:
        m = self.m
        w = m[2][0] * x + m[2][1] * y + m[2][2]
        if w == 0.0:
            w = 1e-12
        return ((m[0][0] * x + m[0][1] * y + m[0][2]) / w,
                (m[1][0] * x + m[1][1] * y + m[1][2]) / w)

    def map_quad(self, left: float, top: float, right: float, bottom: float
                 ) -> List[Tuple[float, float]]:
        """Map rectangle corners clockwise from top-left."""
        return [
            self.map_point(left, top),
            self.map_point(right, top),
            self.map_point(right, bottom),
            self.map_point(left, bottom),
        ]

    def determinant(self) -> float:
        (a, b, c), (d, e, f), (g, h, i) = self.m
        return a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)

    def inverted(self) -> Matrix:
        """Return the inverse. Raises ValueError for singular matrices."""
        det = self.determinant()
        if abs(det) < 1e-12:
            raise ValueError("Matrix is not invertible")
        (a, b, c), (d, e, f), (g, h, i) = self.m
        inv = [
            [e * i - f * h, c * h - b * i, b * f - c * e],
            [f * g - d * i, a * i - c * g, c * d - a * f],
            [d * h - e * g, b * g - a * h, a * e - b * d],
        ]
        return Matrix([[v / det for v in row] for row in inv])

    def perspective_coefficients(self) -> Tuple[float, ...]:
        """Eight coefficients for Pillow's PERSPECTIVE transform, normalised on m[2][2]."""
        m = self.m
        k = m[2][2] if m[2][2] != 0.0 else 1e-12
        return (m[0][0] / k, m[0][1] / k, m[0][2] / k,
                m[1][0] / k, m[1][1] / k, m[1][2] / k,
                m[2][0] / k, m[2][1] / k)
