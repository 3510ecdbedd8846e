"""Raylib compatibility layer - abstracts differences between raylibpy and python-raylib."""

from __future__ import annotations
import ctypes
from typing import Any

from PIL import Image

# Try to import raylib
try:
    import raylibpy as rl
    RL_VERSION = "raylibpy"
except ImportError:
    import raylib as rl
    RL_VERSION = "python-raylib"


def make_color(r: int, g: int, b: int, a: int) -> Any:
    """Create a raylib Color compatible with the current binding."""
    ctor = getattr(rl, "Color", None)
    if ctor:
        try:
            return ctor(int(r), int(g), int(b), int(a))
        except TypeError:
            pass
    if hasattr(rl, 'ffi'):
        c = rl.ffi.new("Color *")
        c[0].r, c[0].g, c[0].b, c[0].a = int(r), int(g), int(b), int(a)
        return c[0]
    return rl.BLACK


def draw_text(text: str, x: int, y: int, size: int, color: Any) -> None:
    """Draw text with encoding fallback."""
    try:
        rl.DrawText(text, x, y, size, color)
    except TypeError:
        rl.DrawText(text.encode('utf-8'), x, y, size, color)


def init_window(width: int, height: int, title: str) -> None:
    """Open the window with encoding fallback."""
    try:
        rl.InitWindow(width, height, title)
    except TypeError:
        rl.InitWindow(width, height, title.encode('utf-8'))


def create_texture(width: int, height: int) -> Any:
    """Create an RGBA8 texture of the given size."""
    img = rl.GenImageColor(width, height, make_color(0, 0, 0, 0))
    try:
        return rl.LoadTextureFromImage(img)
    finally:
        rl.UnloadImage(img)


def update_texture(tex: Any, image: Image.Image) -> None:
    """Upload an RGBA Pillow image of the texture's size."""
    data = image.tobytes("raw", "RGBA")
    if hasattr(rl, 'ffi'):
        rl.UpdateTexture(tex, rl.ffi.from_buffer(data))
        return
    buf = ctypes.create_string_buffer(data, len(data))
    rl.UpdateTexture(tex, ctypes.cast(buf, ctypes.c_void_p))


def get_texture_id(tex: Any) -> int:
    """Safely get texture ID."""
    return getattr(tex, 'id', 0) or 0


def is_texture_valid(tex: Any) -> bool:
    """Check if texture is valid and loaded."""
    return get_texture_id(tex) > 0


__all__ = [
    'rl',
    'RL_VERSION',
    'make_color',
    'draw_text',
    'init_window',
    'create_texture',
    'update_texture',
    'get_texture_id',
    'is_texture_valid',
]
