"""Image utilities - listing, loading and generating card images."""

from __future__ import annotations
import os
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps

from .config import CARD_COLORS, FONT_SIZE, IMG_EXTS
from .logging import log


def list_images(dirpath: str) -> List[str]:
    """List all supported image files in directory, sorted by name.

    Args:
        dirpath: Directory path to scan.

    Returns:
        List of full paths to image files.
    """
    try:
        names = sorted(os.listdir(dirpath))
    except OSError:
        return []

    result = []
    for name in names:
        path = os.path.join(dirpath, name)
        ext = os.path.splitext(name)[1].lower()
        if os.path.isfile(path) and ext in IMG_EXTS:
            result.append(path)
    return result


def is_supported_image(filepath: str) -> bool:
    """Check if file has a supported image extension."""
    ext = os.path.splitext(filepath)[1].lower()
    return ext in IMG_EXTS


def load_card(path: str, size: Tuple[int, int]) -> Optional[Image.Image]:
    """Load an image cropped to fill ``size``. None if it can't be decoded."""
    try:
        with Image.open(path) as img:
            img = ImageOps.exif_transpose(img)
            return ImageOps.fit(img.convert("RGBA"), size, Image.Resampling.LANCZOS)
    except (OSError, ValueError) as e:
        log(f"[IMG][ERR] Failed to load {os.path.basename(path)}: {e!r}")
        return None


def load_cards(paths: List[str], size: Tuple[int, int]) -> List[Image.Image]:
    cards = []
    for path in paths:
        card = load_card(path, size)
        if card is not None:
            cards.append(card)
    log(f"[IMG] Loaded {len(cards)}/{len(paths)} cards at {size[0]}x{size[1]}")
    return cards


def _font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default()


def make_card(index: int, size: Tuple[int, int], title: Optional[str] = None) -> Image.Image:
    """Generate a numbered, striped card."""
    w, h = size
    color = CARD_COLORS[index % len(CARD_COLORS)]
    img = Image.new("RGBA", size, color + (255,))
    draw = ImageDraw.Draw(img)

    stripe = max(1, h // 12)
    for y in range(0, h, stripe * 2):
        draw.rectangle((0, y, w, y + stripe - 1), fill=tuple(min(255, c + 24) for c in color) + (255,))

    text = title if title is not None else f"Card {index + 1}"
    font = _font(FONT_SIZE)
    box = draw.textbbox((0, 0), text, font=font)
    tw, th = box[2] - box[0], box[3] - box[1]
    draw.text(((w - tw) / 2, (h - th) / 2), text, fill=(255, 255, 255, 255), font=font)
    draw.rectangle((0, 0, w - 1, h - 1), outline=(255, 255, 255, 160), width=2)
    return img


def make_cards(count: int, size: Tuple[int, int]) -> List[Image.Image]:
    return [make_card(i, size) for i in range(count)]


def make_glance(width: int, height: int, max_alpha: int = 96) -> Image.Image:
    """White vertical gradient strip, brightest in the middle."""
    glance = Image.new("RGBA", (width, height), (255, 255, 255, 0))
    alpha = Image.new("L", (1, height))
    mid = (height - 1) / 2.0 or 1.0
    for y in range(height):
        alpha.putpixel((0, y), int(max_alpha * (1.0 - abs(y - mid) / mid)))
    glance.putalpha(alpha.resize((width, height)))
    return glance
