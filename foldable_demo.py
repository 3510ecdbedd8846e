"""Foldable demo - paged fold list with cover to details unfolding.

Usage:
    python foldable_demo.py [image_dir]

Drag vertically or fling to fold between cards, Up/Down to page, click a
card to unfold it, Escape to fold back or quit.
"""

from __future__ import annotations
import sys

from foldable.app import Application, resolve_image_dir
from foldable.logging import log


def main() -> int:
    log("[MAIN] Starting application")
    image_dir = resolve_image_dir(sys.argv[1:])
    if image_dir is None:
        log("[ARGS] No image directory provided, using generated cards")

    app = Application()
    if not app.initialize(image_dir):
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
