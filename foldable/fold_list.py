"""Foldable list - paged fold controller.

Keeps a continuous fold rotation over items ``0..N-1`` (each page is 180
degrees), binds at most two items around it, and recycles both the item
shells and their content views.
"""

from __future__ import annotations
from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from .canvas import Canvas
from .config import (
    CACHED_ITEMS_OFFSET, DEFAULT_DENSITY_DPI, DEFAULT_TOUCH_SLOP,
    FRONT_SPLIT_ANGLE, IGNORE_ITEM_VIEW_TYPE,
)
from .content import ContentProvider, ContentView
from .fold_item import FoldableItem
from .gesture import GestureFold
from .math_utils import clamp
from .scheduler import FrameScheduler
from .shading import FoldShading, SimpleFoldShading
from .types import PointerAction, PointerEvent, Rect
from .logging import log

FoldRotationListener = Callable[[float, bool], None]


class FoldableList:
    """Scrolls among provider items by folding one out and the next in."""

    def __init__(self, scheduler: Optional[FrameScheduler] = None,
                 density_dpi: int = DEFAULT_DENSITY_DPI,
                 touch_slop: float = DEFAULT_TOUCH_SLOP):
        self.scheduler = scheduler if scheduler is not None else FrameScheduler()
        self.density_dpi = density_dpi

        # Host placement; translation moves the whole list on top of it
        self.frame = Rect()
        self.translation_x = 0.0
        self.translation_y = 0.0

        self.provider: Optional[ContentProvider] = None
        self.fold_rotation = 0.0
        self.min_rotation = 0.0
        self.max_rotation = 0.0
        self._known_count = 0

        self.fold_shading: Optional[FoldShading] = SimpleFoldShading()
        self.auto_scale_enabled = False

        self.bound_items: Dict[int, FoldableItem] = {}
        self._bound_view_types: Dict[int, int] = {}
        self.free_items: Deque[FoldableItem] = deque()
        self.recycled_views: Dict[int, Deque[ContentView]] = {}
        self.children: List[FoldableItem] = []

        self.front_item: Optional[FoldableItem] = None
        self.back_item: Optional[FoldableItem] = None

        self.fold_rotation_listener: Optional[FoldRotationListener] = None
        self.gestures_enabled = True
        self.gestures = GestureFold(self, self.scheduler, touch_slop)
        self._touch_target: Optional[FoldableItem] = None

        self.is_attached = True
        self.needs_redraw = False
        self.on_invalidate: Optional[Callable[[], None]] = None

    # ─── Geometry ──────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self.frame.width

    @property
    def height(self) -> int:
        return self.frame.height

    def layout(self, left: int, top: int, width: int, height: int) -> None:
        """Place the list in host coordinates and size every item to it."""
        if width < 0 or height < 0:
            raise ValueError(f"Negative list size {width}x{height}")
        self.frame.set(left, top, left + width, top + height)
        for item in self.children:
            item.set_size(width, height)
        self.invalidate()

    def set_translation(self, x: float, y: float) -> None:
        self.translation_x = x
        self.translation_y = y
        self.invalidate()

    def invalidate(self) -> None:
        self.needs_redraw = True
        if self.on_invalidate is not None:
            self.on_invalidate()

    # ─── Settings ──────────────────────────────────────────────────────────

    def set_on_fold_rotation_listener(self, listener: Optional[FoldRotationListener]) -> None:
        self.fold_rotation_listener = listener

    def set_fold_shading(self, shading: Optional[FoldShading]) -> None:
        """Shading for items created from now on; set it before the provider."""
        self.fold_shading = shading

    def set_auto_scale_enabled(self, enabled: bool) -> None:
        self.auto_scale_enabled = enabled
        for item in self.children:
            item.set_auto_scale_enabled(enabled)

    def set_gestures_enabled(self, enabled: bool) -> None:
        """Disable to let scrollable content take pointer events."""
        self.gestures_enabled = enabled

    def set_scroll_factor(self, scroll_factor: float) -> None:
        self.gestures.scroll_factor = scroll_factor

    # ─── Provider ──────────────────────────────────────────────────────────

    @property
    def count(self) -> int:
        return 0 if self.provider is None else self.provider.get_count()

    def set_content_provider(self, provider: Optional[ContentProvider]) -> None:
        if self.provider is not None:
            self.provider.unregister_observer(self._on_data_changed)
        self.provider = provider
        if provider is not None:
            provider.register_observer(self._on_data_changed)
        log(f"[LIST] Provider set, count={self.count}")
        self._update_provider_data()

    def _on_data_changed(self) -> None:
        self._update_provider_data()

    def _update_provider_data(self) -> None:
        self._update_bounds(self.count)
        self._free_all_items()
        self.set_fold_rotation(self.fold_rotation)

    def _update_bounds(self, count: int) -> None:
        self._known_count = count
        self.min_rotation = 0.0
        self.max_rotation = 0.0 if count == 0 else 180.0 * (count - 1)

    # ─── Rotation ──────────────────────────────────────────────────────────

    def set_fold_rotation(self, rotation: float, from_user: bool = False) -> None:
        """Set the global fold rotation, clamped to [0, 180 * (count - 1)]."""
        if from_user:
            self.gestures.cancel_animations()

        if not self.is_attached:
            self.fold_rotation = rotation
            return

        count = self.count
        if count != self._known_count:
            log(f"[LIST][WARN] Provider count changed {self._known_count} -> {count} without notification")
            self._update_bounds(count)

        rotation = clamp(rotation, self.min_rotation, self.max_rotation)
        self.fold_rotation = rotation

        first = int(rotation // 180.0)
        local_rotation = rotation % 180.0

        self._release_far_items(first, count)

        has_first = first < count
        has_second = first + 1 < count

        first_item = self.get_item_for_position(first) if has_first else None
        second_item = self.get_item_for_position(first + 1) if has_second else None

        if first_item is not None:
            first_item.set_fold_rotation(local_rotation)
            self.on_fold_rotation_changed(first_item, first)

        if second_item is not None:
            second_item.set_fold_rotation(local_rotation - 180.0)
            self.on_fold_rotation_changed(second_item, first + 1)

        # Front item is drawn last and tested first for hits
        if local_rotation <= FRONT_SPLIT_ANGLE:
            self.front_item, self.back_item = first_item, second_item
        else:
            self.front_item, self.back_item = second_item, first_item

        self._after_fold_rotation(rotation)
        self._dispatch_fold_rotation(rotation, from_user)
        self.invalidate()

    def on_fold_rotation_changed(self, item: FoldableItem, position: int) -> None:
        """Subclasses can apply their own per-item transformations here."""

    def _after_fold_rotation(self, rotation: float) -> None:
        """Subclass hook, runs once all items reflect ``rotation``."""

    def _dispatch_fold_rotation(self, rotation: float, from_user: bool) -> None:
        if self.fold_rotation_listener is not None:
            self.fold_rotation_listener(rotation, from_user)

    @property
    def position(self) -> int:
        """Index of the page nearest to the current rotation."""
        return int((self.fold_rotation + 90.0) // 180.0)

    def scroll_to_position(self, index: int) -> None:
        index = max(0, min(index, self.count - 1))
        self.animate_fold(index * 180.0)

    def scroll_to_nearest_position(self) -> None:
        self.scroll_to_position(self.position)

    def animate_fold(self, to_rotation: float) -> None:
        self.gestures.animate_fold(to_rotation)

    # ─── Binding ───────────────────────────────────────────────────────────

    def get_item_for_position(self, position: int) -> FoldableItem:
        """Return the item bound to ``position``, binding one if needed."""
        item = self.bound_items.get(position)
        if item is not None:
            return item

        # Reuse the bound item farthest from the request if it is far enough
        if self.bound_items:
            farthest = max(self.bound_items, key=lambda p: abs(p - position))
            if abs(farthest - position) > CACHED_ITEMS_OFFSET:
                item = self._unbind(farthest)
                log(f"[LIST] Evicted position {farthest} for {position}")

        if item is None and self.free_items:
            item = self.free_items.popleft()

        if item is None:
            item = self._create_item()

        view_type = self.provider.get_view_type(position)
        recycled = self._pop_recycled_view(view_type)
        view = self.provider.get_view(position, recycled)
        item.attach_content(view)

        self.bound_items[position] = item
        self._bound_view_types[position] = view_type
        return item

    def _create_item(self) -> FoldableItem:
        item = FoldableItem(self.density_dpi)
        item.set_fold_shading(self.fold_shading)
        item.set_auto_scale_enabled(self.auto_scale_enabled)
        item.on_invalidate = self.invalidate
        item.set_size(self.width, self.height)
        self.children.append(item)
        log(f"[LIST] Created item #{len(self.children)}")
        return item

    def _unbind(self, position: int) -> FoldableItem:
        """Remove a binding, recycle its content view and return the item shell."""
        item = self.bound_items.pop(position)
        view_type = self._bound_view_types.pop(position, IGNORE_ITEM_VIEW_TYPE)
        view = item.detach_content()
        if view is not None and view_type != IGNORE_ITEM_VIEW_TYPE:
            self.recycled_views.setdefault(view_type, deque()).append(view)
        return item

    def _pop_recycled_view(self, view_type: int) -> Optional[ContentView]:
        if view_type == IGNORE_ITEM_VIEW_TYPE:
            return None
        queue = self.recycled_views.get(view_type)
        if queue:
            return queue.popleft()
        return None

    def _release_far_items(self, first: int, count: int) -> None:
        """Free bindings that can't be reached from ``first`` without a rebind."""
        for position in list(self.bound_items):
            if position >= count or abs(position - first) > CACHED_ITEMS_OFFSET:
                self.free_items.append(self._unbind(position))

    def _free_all_items(self) -> None:
        for item in self.bound_items.values():
            item.detach_content()
            self.free_items.append(item)
        self.bound_items.clear()
        self._bound_view_types.clear()
        self.recycled_views.clear()
        self.front_item = self.back_item = None

    # ─── Drawing and input ─────────────────────────────────────────────────

    def draw(self, canvas: Canvas) -> None:
        """Draw only the two visible items, front one last."""
        self.needs_redraw = False
        if not self.is_attached:
            return
        count = canvas.save()
        canvas.translate(self.frame.left + self.translation_x, self.frame.top + self.translation_y)
        for item in (self.back_item, self.front_item):
            if item is not None:
                item.draw(canvas)
        canvas.restore_to_count(count)

    def _to_local(self, event: PointerEvent) -> PointerEvent:
        return event.offset(-(self.frame.left + self.translation_x),
                            -(self.frame.top + self.translation_y))

    def on_intercept_touch_event(self, event: PointerEvent) -> bool:
        """Watch events on their way to children; True once a scroll is detected."""
        return self.gestures_enabled and self.gestures.process_touch(event)

    def on_touch_event(self, event: PointerEvent) -> bool:
        return self.gestures_enabled and self.gestures.process_touch(event)

    def dispatch_touch_event(self, event: PointerEvent) -> bool:
        """Route a host-coordinate pointer event. True if the list consumed it."""
        if not self.is_attached:
            return False
        local = self._to_local(event)

        if event.action == PointerAction.DOWN:
            self._touch_target = None

        intercepted = self.on_intercept_touch_event(local)

        handled = False
        if intercepted:
            if self._touch_target is not None:
                cancel = PointerEvent(PointerAction.CANCEL, local.x, local.y, local.event_time)
                self._touch_target.dispatch_pointer_event(cancel)
                self._touch_target = None
        elif event.action == PointerAction.DOWN:
            for item in (self.front_item, self.back_item):
                if item is not None and item.dispatch_pointer_event(local):
                    self._touch_target = item
                    handled = True
                    break
        elif self._touch_target is not None:
            handled = self._touch_target.dispatch_pointer_event(local)

        if not handled:
            self.on_touch_event(local)

        if event.action in (PointerAction.UP, PointerAction.CANCEL):
            self._touch_target = None

        return self.count > 0

    # ─── Lifecycle ─────────────────────────────────────────────────────────

    def detach(self) -> None:
        """Stop animations, free bitmaps and pools. No listener fires afterwards."""
        self.gestures.cancel_animations()
        self.is_attached = False
        if self.provider is not None:
            self.provider.unregister_observer(self._on_data_changed)
        for item in self.children:
            item.clear()
            item.on_invalidate = None
        self.children.clear()
        self.bound_items.clear()
        self._bound_view_types.clear()
        self.free_items.clear()
        self.recycled_views.clear()
        self.front_item = self.back_item = None
        self._touch_target = None
        log("[LIST] Detached")

    def attach(self) -> None:
        """Re-attach after ``detach`` and rebind at the stored rotation."""
        if self.is_attached:
            return
        self.is_attached = True
        if self.provider is not None:
            self.provider.register_observer(self._on_data_changed)
        self._update_provider_data()
