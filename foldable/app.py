"""Application - host main loop for the fold demo.

Coordinates, once per frame:
- Input polling (via InputHandler) and pointer dispatch
- Frame tick (animations run on the FrameScheduler)
- Compositing into a Pillow frame and presenting it (via Renderer)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional
import os
import traceback

from PIL import Image

from .canvas import ImageCanvas
from .config import (
    BG_COLOR, GLANCE_HEIGHT_FRAC, LIST_MARGIN, TARGET_FPS,
    WINDOW_HEIGHT, WINDOW_TITLE, WINDOW_WIDTH,
)
from .content import ImageContentView, ImageListProvider
from .fold_list import FoldableList
from .image_utils import list_images, load_cards, make_cards, make_glance
from .input_handler import InputHandler, InputSnapshot, get_input_handler
from .renderer import Renderer, get_renderer
from .rl_compat import rl, init_window, RL_VERSION
from .scheduler import FrameScheduler
from .shading import GlanceFoldShading, SimpleFoldShading
from .types import FoldState, Rect
from .unfoldable import SimpleFoldingListener, UnfoldableView
from .logging import log, increment_frame

DEMO_CARD_COUNT = 12


class _LoggingFoldingListener(SimpleFoldingListener):
    def on_unfolded(self, view: UnfoldableView) -> None:
        log("[APP] Details open")

    def on_folded_back(self, view: UnfoldableView) -> None:
        log("[APP] Details closed")


@dataclass
class Application:
    """
    Fold demo host.

    Usage:
        app = Application()
        if app.initialize(image_dir):
            app.run()
    """

    width: int = WINDOW_WIDTH
    height: int = WINDOW_HEIGHT
    scheduler: FrameScheduler = field(default_factory=FrameScheduler)
    renderer: Renderer = field(default_factory=get_renderer)
    input_handler: InputHandler = field(default_factory=get_input_handler)
    running: bool = False

    fold_list: Optional[FoldableList] = None
    unfoldable: Optional[UnfoldableView] = None
    provider: Optional[ImageListProvider] = None
    details_images: List[Image.Image] = field(default_factory=list)

    _frame_image: Optional[Image.Image] = None
    _last_page: int = 0

    @property
    def list_rect(self) -> Rect:
        m = LIST_MARGIN
        return Rect(m * 2, m * 3, self.width - m * 2, self.height - m * 3)

    @property
    def details_rect(self) -> Rect:
        m = LIST_MARGIN // 2
        return Rect(m, m, self.width - m, self.height - m)

    def initialize(self, image_dir: Optional[str] = None) -> bool:
        """Open the window and build the fold list. True on success."""
        try:
            log("[INIT] Creating window")
            init_window(self.width, self.height, WINDOW_TITLE)
            rl.SetTargetFPS(TARGET_FPS)
            log(f"[INIT] RL_VER={RL_VERSION} window={self.width}x{self.height}")
        except Exception as e:
            log(f"[INIT][CRITICAL] Failed to initialize window: {e!r}")
            log(f"[INIT][CRITICAL] Traceback:\n{traceback.format_exc()}")
            return False

        self.build(image_dir)
        return True

    def build(self, image_dir: Optional[str] = None) -> None:
        """Create the fold list and the details view, no window needed."""
        lr, dr = self.list_rect, self.details_rect
        card_size = (lr.width, lr.height)

        paths = list_images(image_dir) if image_dir else []
        cards = load_cards(paths, card_size) if paths else []
        if not cards:
            log("[INIT] No images found, generating cards")
            cards = make_cards(DEMO_CARD_COUNT, card_size)
        self.details_images = [c.resize((dr.width, dr.height), Image.Resampling.BILINEAR) for c in cards]

        self.fold_list = FoldableList(self.scheduler)
        self.fold_list.layout(lr.left, lr.top, lr.width, lr.height)
        self.fold_list.set_fold_shading(SimpleFoldShading())
        self.fold_list.set_auto_scale_enabled(True)
        self.fold_list.set_on_fold_rotation_listener(self._on_fold_rotation)
        self.provider = ImageListProvider(cards, on_click=self.open_details)
        self.fold_list.set_content_provider(self.provider)

        glance = make_glance(dr.width, int(dr.height * GLANCE_HEIGHT_FRAC))
        self.unfoldable = UnfoldableView(self.scheduler)
        self.unfoldable.set_fold_shading(GlanceFoldShading(glance))
        self.unfoldable.set_on_folding_listener(_LoggingFoldingListener())

    def _on_fold_rotation(self, rotation: float, from_user: bool) -> None:
        page = self.fold_list.position
        if page != self._last_page:
            self._last_page = page
            log(f"[APP] Page {page + 1}/{self.fold_list.count} user={from_user}")

    @property
    def details_active(self) -> bool:
        return self.unfoldable is not None and self.unfoldable.state != FoldState.FOLDED

    def open_details(self, view: ImageContentView) -> None:
        """Unfold the clicked card into the details rectangle."""
        index = view.tag if view.tag is not None else 0
        cover = ImageContentView(view.image)
        cover.screen_rect = self.list_rect
        details = ImageContentView(self.details_images[index])
        details.screen_rect = self.details_rect
        log(f"[APP] Open details for card {index}")
        self.unfoldable.unfold(cover, details)

    def run(self) -> None:
        """Run the main loop until the window closes."""
        self.running = True
        log("[APP] Starting main loop")

        try:
            while self.running:
                self._frame()
        except Exception as e:
            log(f"[APP][CRITICAL] Unhandled exception: {e!r}")
            log(f"[APP][CRITICAL] Traceback:\n{traceback.format_exc()}")
        finally:
            self._cleanup()

    def _frame(self) -> None:
        """Execute a single frame."""
        if rl.WindowShouldClose():
            self.running = False
            return

        # 1. Input
        self.handle_input(self.input_handler.poll())

        # 2. Animations
        self.scheduler.tick()

        # 3. Render
        self.renderer.draw_frame(self.compose(), self.hud_lines())

        # 4. Frame bookkeeping
        increment_frame()

    def handle_input(self, snapshot: InputSnapshot) -> None:
        target = self.unfoldable if self.details_active else self.fold_list
        for event in snapshot.events:
            target.dispatch_touch_event(event)

        if snapshot.escape:
            if self.details_active:
                self.unfoldable.fold_back()
            else:
                self.running = False
        elif not self.details_active:
            if snapshot.next_page:
                self.fold_list.scroll_to_position(self.fold_list.position + 1)
            elif snapshot.prev_page:
                self.fold_list.scroll_to_position(self.fold_list.position - 1)

    def compose(self) -> Image.Image:
        """Composite the current state. Reuses the last frame when nothing changed."""
        dirty = self.fold_list.needs_redraw or self.unfoldable.needs_redraw
        if self._frame_image is not None and not dirty:
            return self._frame_image

        frame = Image.new("RGBA", (self.width, self.height), BG_COLOR + (255,))
        canvas = ImageCanvas(frame)
        self.fold_list.draw(canvas)
        if self.details_active:
            self.unfoldable.draw(canvas)
        else:
            self.unfoldable.needs_redraw = False
        self._frame_image = frame
        return frame

    def hud_lines(self) -> List[str]:
        fl = self.fold_list
        return [
            f"{fl.position + 1}/{fl.count}  rotation {fl.fold_rotation:6.1f}",
            f"details: {self.unfoldable.state.name.lower()}",
        ]

    def _cleanup(self) -> None:
        """Clean up resources."""
        log("[APP] Starting cleanup")
        if self.fold_list is not None:
            self.fold_list.detach()
        if self.unfoldable is not None:
            self.unfoldable.detach()
        self.scheduler.clear()
        try:
            self.renderer.unload()
        except Exception as e:
            log(f"[APP][ERR] Texture unload failed: {e!r}")
        try:
            log("[APP] Closing window")
            rl.CloseWindow()
        except Exception as e:
            log(f"[APP][ERR] Close window failed: {e!r}")
        log("[APP] Cleanup complete")

    def stop(self) -> None:
        """Stop the main loop."""
        self.running = False


def resolve_image_dir(args: List[str]) -> Optional[str]:
    """First existing directory among the arguments."""
    for a in args:
        p = os.path.abspath(a)
        log(f"[ARGS] Checking argument: {a} -> {p}")
        if os.path.isdir(p):
            return p
    return None
