"""Unfoldable view - cover to details transition.

A two-item fold list: position 0 shows the cover inside a holder, position 1
shows the details. While unfolding the whole list is translated from the
cover's screen position to the details position and each item is scaled so
the cover grows into the details width.
"""

from __future__ import annotations
from typing import List, Optional

from .canvas import Canvas
from .config import (
    DEFAULT_DENSITY_DPI, DEFAULT_TOUCH_SLOP, IGNORE_ITEM_VIEW_TYPE, UNFOLD_SCROLL_FACTOR,
)
from .content import ContentProvider, ContentView
from .fold_item import FoldableItem
from .fold_list import FoldableList
from .scheduler import FrameScheduler
from .types import FoldState, PointerEvent, Rect
from .logging import log


def fold_state_transitions(state: FoldState, last_rotation: float,
                           rotation: float) -> List[FoldState]:
    """States entered, in order, when the rotation moves from last_rotation."""
    entered: List[FoldState] = []

    def enter(new_state: FoldState) -> None:
        nonlocal state
        if new_state != state:
            state = new_state
            entered.append(new_state)

    if rotation > last_rotation:
        enter(FoldState.UNFOLDING)
    if rotation < last_rotation:
        enter(FoldState.FOLDING)
    if rotation == 180.0:
        enter(FoldState.UNFOLDED)
    if rotation == 0.0 and state == FoldState.FOLDING:
        enter(FoldState.FOLDED)
    return entered


class FoldingListener:
    """Callbacks for the cover/details transition. All default to no-ops."""

    def on_unfolding(self, view: "UnfoldableView") -> None:
        pass

    def on_unfolded(self, view: "UnfoldableView") -> None:
        pass

    def on_folding_back(self, view: "UnfoldableView") -> None:
        pass

    def on_folded_back(self, view: "UnfoldableView") -> None:
        pass

    def on_fold_progress(self, view: "UnfoldableView", progress: float) -> None:
        pass


SimpleFoldingListener = FoldingListener


class CoverHolder(ContentView):
    """Holds the cover at the top of the item's bottom half.

    A cover taller than half the slot is squeezed vertically to fit and the
    item stretches its halves back by the inverse factor.
    """

    def __init__(self):
        super().__init__()
        self.view: Optional[ContentView] = None
        self.view_width = 0
        self.view_height = 0
        self.view_scale_y = 1.0
        self.visible_bounds = Rect()

    def set_view(self, view: ContentView, width: int, height: int) -> None:
        self.view = view
        self.view_width, self.view_height = width, height
        view.layout(width, height)
        self._update_placement()

    def clear_view(self) -> Optional[ContentView]:
        view = self.view
        self.view = None
        self.view_width = self.view_height = 0
        self._update_placement()
        return view

    def layout(self, width: int, height: int) -> None:
        super().layout(width, height)
        self._update_placement()

    def _update_placement(self) -> None:
        half = self.height // 2
        if self.view_height > half > 0:
            self.view_scale_y = half / self.view_height
        else:
            self.view_scale_y = 1.0
        left = (self.width - self.view_width) // 2
        shown_height = int(self.view_height * self.view_scale_y + 0.5)
        self.visible_bounds = Rect(left, half, left + self.view_width, half + shown_height)
        if self.item is not None:
            self._apply_to_item(self.item)

    def _apply_to_item(self, item: FoldableItem) -> None:
        item.set_scale_factor_y(1.0 / self.view_scale_y)
        item.set_visible_bounds(self.visible_bounds)

    def on_attached(self, item: FoldableItem) -> None:
        super().on_attached(item)
        self._apply_to_item(item)

    def on_detached(self) -> None:
        item = self.item
        if item is not None:
            item.set_visible_bounds(None)
            item.set_scale_factor_y(1.0)
        super().on_detached()

    def draw(self, canvas: Canvas) -> None:
        if self.view is None:
            return
        count = canvas.save()
        canvas.translate(self.visible_bounds.left, self.visible_bounds.top)
        canvas.scale(1.0, self.view_scale_y)
        self.view.draw(canvas)
        canvas.restore_to_count(count)

    def on_pointer_event(self, event: PointerEvent) -> bool:
        if self.view is None or not self.visible_bounds.contains(event.x, event.y):
            return False
        local = event.offset(-self.visible_bounds.left, -self.visible_bounds.top)
        local.y /= self.view_scale_y
        return self.view.on_pointer_event(local)


class _CoverDetailsProvider(ContentProvider):
    """Alternates between the cover holder and the details view."""

    def __init__(self, owner: "UnfoldableView"):
        super().__init__()
        self.owner = owner

    def get_count(self) -> int:
        return 2

    def get_view(self, position: int, recycled: Optional[ContentView]) -> ContentView:
        return self.owner.cover_holder if position == 0 else self.owner.details_view

    def get_view_type(self, position: int) -> int:
        return IGNORE_ITEM_VIEW_TYPE


class UnfoldableView(FoldableList):
    """Unfolds a cover rectangle into a details rectangle and back."""

    def __init__(self, scheduler: Optional[FrameScheduler] = None,
                 density_dpi: int = DEFAULT_DENSITY_DPI,
                 touch_slop: float = DEFAULT_TOUCH_SLOP):
        super().__init__(scheduler, density_dpi, touch_slop)
        self.set_scroll_factor(UNFOLD_SCROLL_FACTOR)

        self.cover_holder = CoverHolder()
        self._provider = _CoverDetailsProvider(self)

        self.cover_view: Optional[ContentView] = None
        self.details_view: Optional[ContentView] = None
        self.cover_rect: Optional[Rect] = None
        self.details_rect: Optional[Rect] = None
        self.scheduled_cover_view: Optional[ContentView] = None
        self.scheduled_details_view: Optional[ContentView] = None

        self.state = FoldState.FOLDED
        self.last_fold_rotation = 0.0
        self._pending_states: List[FoldState] = []
        self._silent = False

        self.folding_listener: Optional[FoldingListener] = None

    def set_on_folding_listener(self, listener: Optional[FoldingListener]) -> None:
        self.folding_listener = listener

    # ─── Public API ────────────────────────────────────────────────────────

    def unfold(self, cover: ContentView, details: ContentView) -> None:
        """Start unfolding ``cover`` into ``details``."""
        if self.cover_view is cover and self.details_view is details:
            self.scroll_to_position(1)
            return

        if ((self.cover_view is not None and self.cover_view is not cover)
                or (self.details_view is not None and self.details_view is not details)):
            # Another pair is open: close it and reopen with the new one
            self.scheduled_cover_view = cover
            self.scheduled_details_view = details
            self.fold_back()
            return

        if cover.screen_rect is None or details.screen_rect is None:
            raise ValueError("Cover and details views need a screen_rect to unfold")

        self._set_cover_view(cover)
        self._set_details_view(details)

        d = self.details_rect
        self.layout(d.left, d.top, d.width, d.height)
        self.set_content_provider(self._provider)

        log(f"[UNFOLD] Unfolding cover={self.cover_rect} details={self.details_rect}")
        self._set_state(FoldState.UNFOLDING)
        self.scroll_to_position(1)

    def fold_back(self) -> None:
        self.scroll_to_position(0)

    def change_cover_view(self, cover: ContentView) -> None:
        """Swap the cover while a transition is open."""
        if self.cover_view is None or self.cover_view is cover:
            return
        self._clear_cover_view()
        self._set_cover_view(cover)
        self.set_fold_rotation(self.fold_rotation)

    @property
    def is_unfolding(self) -> bool:
        return self.state == FoldState.UNFOLDING

    @property
    def is_unfolded(self) -> bool:
        return self.state == FoldState.UNFOLDED

    @property
    def is_folding_back(self) -> bool:
        return self.state == FoldState.FOLDING

    @property
    def stage(self) -> float:
        """0 shows only the cover, 1 only the details."""
        return self.fold_rotation / 180.0

    # ─── Rotation hooks ────────────────────────────────────────────────────

    def _after_fold_rotation(self, rotation: float) -> None:
        if self.cover_rect is None or self.details_rect is None:
            return

        stage = rotation / 180.0
        c, d = self.cover_rect, self.details_rect
        self.translation_x = (c.center_x - d.center_x) * (1.0 - stage)
        self.translation_y = (c.top - d.center_y) * (1.0 - stage)

        last_rotation = self.last_fold_rotation
        self.last_fold_rotation = rotation
        self._pending_states = fold_state_transitions(self.state, last_rotation, rotation)

    def _dispatch_fold_rotation(self, rotation: float, from_user: bool) -> None:
        if self._silent:
            return
        super()._dispatch_fold_rotation(rotation, from_user)
        if self.cover_rect is None or self.details_rect is None:
            return

        if self.folding_listener is not None:
            self.folding_listener.on_fold_progress(self, rotation / 180.0)

        pending, self._pending_states = self._pending_states, []
        for state in pending:
            self._set_state(state)

    def on_fold_rotation_changed(self, item: FoldableItem, position: int) -> None:
        super().on_fold_rotation_changed(item, position)
        if self.cover_rect is None or self.details_rect is None:
            return

        stage = self.fold_rotation / 180.0
        c, d = self.cover_rect, self.details_rect
        scale = d.width / c.width

        if position == 0:
            # Cover grows from its own size to the details width
            item.set_scale(1.0 - (1.0 - scale) * stage)
        else:
            # Details shrink to the cover size at the start
            item.set_scale(1.0 - (1.0 - 1.0 / scale) * (1.0 - stage))
            dh = c.height * scale - 0.5 * d.height
            item.set_rolling_distance(dh * (1.0 - 2.0 * stage) if stage < 0.5 else 0.0)

    def animate_fold(self, to_rotation: float) -> None:
        super().animate_fold(to_rotation)
        if to_rotation <= self.fold_rotation and self.state != FoldState.FOLDED:
            self._set_state(FoldState.FOLDING)

    # ─── State ─────────────────────────────────────────────────────────────

    def _set_state(self, state: FoldState) -> None:
        if self.state == state:
            return
        log(f"[UNFOLD] {self.state.name} -> {state.name}")
        self.state = state

        if state == FoldState.FOLDED:
            self._on_folded_back()

        listener = self.folding_listener
        if listener is None or not self.is_attached:
            return
        if state == FoldState.UNFOLDING:
            listener.on_unfolding(self)
        elif state == FoldState.FOLDING:
            listener.on_folding_back(self)
        elif state == FoldState.UNFOLDED:
            listener.on_unfolded(self)
        elif state == FoldState.FOLDED:
            listener.on_folded_back(self)

    def _on_folded_back(self) -> None:
        """Drop both views and return to the initial state."""
        self._clear_cover_view()
        self._clear_details_view()

        self._silent = True
        try:
            self.set_content_provider(None)
        finally:
            self._silent = False
        self.last_fold_rotation = 0.0
        self.set_translation(0.0, 0.0)

        if self.scheduled_cover_view is not None and self.scheduled_details_view is not None:
            self.scheduler.post(self._open_scheduled)

    def _open_scheduled(self) -> None:
        cover, details = self.scheduled_cover_view, self.scheduled_details_view
        self.scheduled_cover_view = self.scheduled_details_view = None
        if not self.is_attached or cover is None or details is None:
            return
        if cover.screen_rect is not None and details.screen_rect is not None:
            self.unfold(cover, details)

    # ─── Views ─────────────────────────────────────────────────────────────

    def _set_cover_view(self, cover: ContentView) -> None:
        self.cover_view = cover
        self.cover_rect = cover.screen_rect.copy()
        self.cover_holder.set_view(cover, self.cover_rect.width, self.cover_rect.height)

    def _clear_cover_view(self) -> None:
        if self.cover_view is None:
            return
        self.cover_holder.clear_view()
        self.cover_view = None
        self.cover_rect = None

    def _set_details_view(self, details: ContentView) -> None:
        self.details_view = details
        self.details_rect = details.screen_rect.copy()

    def _clear_details_view(self) -> None:
        if self.details_view is None:
            return
        self.details_view = None
        self.details_rect = None

    def detach(self) -> None:
        self.scheduled_cover_view = self.scheduled_details_view = None
        self.scheduler.remove(self._open_scheduled)
        super().detach()
