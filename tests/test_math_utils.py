import pytest

from foldable.math_utils import clamp, is_page_angle, lerp, normalize_rotation, round_half_up, sign
from foldable.types import Rect, Visibility


def test_clamp_and_lerp():
    assert clamp(-5, 0, 10) == 0
    assert clamp(15, 0, 10) == 10
    assert clamp(3, 0, 10) == 3
    assert lerp(0.0, 180.0, 0.5) == 90.0
    assert lerp(0.0, 180.0, 2.0) == 180.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(266.666) == 267
    assert round_half_up(-0.5) == 0


def test_sign():
    assert sign(3.0) == 1.0
    assert sign(-0.1) == -1.0
    assert sign(0.0) == 0.0


@pytest.mark.parametrize("raw, expected", [
    (0.0, 0.0),
    (180.0, 180.0),
    (-180.0, 180.0),
    (190.0, -170.0),
    (360.0, 0.0),
    (-45.0, -45.0),
    (-135.0, -135.0),
])
def test_normalize_rotation(raw, expected):
    assert normalize_rotation(raw) == pytest.approx(expected)


def test_is_page_angle():
    assert is_page_angle(0.0)
    assert is_page_angle(360.0)
    assert not is_page_angle(90.0)
    assert is_page_angle(179.9995, 1e-3)
    assert not is_page_angle(179.9, 1e-3)


def test_rect_intersect_keeps_rect_when_disjoint():
    r = Rect(0, 0, 10, 10)
    assert not r.intersect(Rect(20, 20, 30, 30))
    assert r == Rect(0, 0, 10, 10)
    assert r.intersect(Rect(5, -5, 15, 5))
    assert r == Rect(5, 0, 10, 5)


def test_visibility_invisible_dominates():
    assert Visibility.VISIBLE.combine(Visibility.VISIBLE) == Visibility.VISIBLE
    assert Visibility.VISIBLE.combine(Visibility.INVISIBLE) == Visibility.INVISIBLE
    assert Visibility.INVISIBLE.combine(Visibility.VISIBLE) == Visibility.INVISIBLE
