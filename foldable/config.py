"""Fold engine configuration constants."""

from __future__ import annotations

# Performance
TARGET_FPS = 60
FRAME_TIME_MS = 10  # fallback delay when the host has no vsync hook

# Animation
ANIMATION_DURATION_PER_ITEM_MS = 600
MIN_FLING_VELOCITY = 600.0  # degrees per second
SNAP_EPSILON = 1e-3         # degrees; fling is rejected this close to a page

# Scrolling
DEFAULT_SCROLL_FACTOR = 1.33
UNFOLD_SCROLL_FACTOR = 2.0

# Fold geometry
CAMERA_DISTANCE = 48
CAMERA_DISTANCE_MAGIC_FACTOR = 8.0 / CAMERA_DISTANCE
CAMERA_INCH_PIXELS = 72.0   # camera location unit, pixels per inch
DEFAULT_DENSITY_DPI = 160
FRONT_SPLIT_ANGLE = 90.0

# Shading
SHADOW_COLOR = (0, 0, 0)
SHADOW_MAX_ALPHA = 192

# Item binding
CACHED_ITEMS_OFFSET = 2     # bound items farther than this from a request are evicted
IGNORE_ITEM_VIEW_TYPE = -1

# Input
DEFAULT_TOUCH_SLOP = 16           # pixels before a drag becomes a scroll
MIN_GESTURE_FLING_VELOCITY = 50.0  # pixels per second
MAX_GESTURE_FLING_VELOCITY = 8000.0
VELOCITY_WINDOW_MS = 100

# Demo host
WINDOW_WIDTH = 480
WINDOW_HEIGHT = 800
WINDOW_TITLE = "Foldable"
LIST_MARGIN = 40
CARD_COLORS = [
    (231, 76, 60),
    (46, 204, 113),
    (52, 152, 219),
    (155, 89, 182),
    (241, 196, 15),
    (26, 188, 156),
    (230, 126, 34),
    (52, 73, 94),
]
BG_COLOR = (24, 24, 28)
FONT_SIZE = 28
GLANCE_HEIGHT_FRAC = 0.6

# Supported image extensions
IMG_EXTS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"})
