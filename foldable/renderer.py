"""Renderer - presents composited frames through raylib.

The fold engine draws into a Pillow frame; the renderer only uploads that
frame to a window-sized texture and draws the HUD on top. It does not modify
engine state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from PIL import Image

from .rl_compat import (
    rl, make_color as RL_Color, draw_text as RL_DrawText,
    create_texture, update_texture, is_texture_valid,
)
from .config import BG_COLOR
from .logging import log


@dataclass
class Renderer:
    """
    Uploads frames and draws them.

    Usage:
        renderer = Renderer()
        renderer.draw_frame(frame, hud_lines)
        renderer.unload()
    """

    texture: Any = None
    size: Tuple[int, int] = (0, 0)

    def ensure_texture(self, width: int, height: int) -> None:
        """(Re)create the frame texture when the window size changes."""
        if self.texture is not None and self.size == (width, height):
            return
        self.unload()
        self.texture = create_texture(width, height)
        self.size = (width, height)
        log(f"[RENDER] Frame texture {width}x{height}")

    def draw_frame(self, frame: Image.Image, hud: Optional[list] = None) -> None:
        """Present one composited frame."""
        self.ensure_texture(frame.width, frame.height)
        update_texture(self.texture, frame)

        rl.BeginDrawing()
        rl.ClearBackground(RL_Color(*BG_COLOR, 255))
        rl.DrawTexture(self.texture, 0, 0, RL_Color(255, 255, 255, 255))
        if hud:
            self.draw_hud(hud)
        rl.EndDrawing()

    def draw_hud(self, lines: list) -> None:
        y = 8
        for line in lines:
            RL_DrawText(line, 10, y, 18, RL_Color(255, 255, 255, 200))
            y += 22

    def unload(self) -> None:
        if self.texture is not None and is_texture_valid(self.texture):
            rl.UnloadTexture(self.texture)
        self.texture = None
        self.size = (0, 0)


# Singleton instance
_renderer: Optional[Renderer] = None


def get_renderer() -> Renderer:
    """Get the renderer instance."""
    global _renderer
    if _renderer is None:
        _renderer = Renderer()
    return _renderer
