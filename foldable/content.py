"""Content views and providers.

A content view is whatever a foldable item captures: it knows its size,
draws itself on a canvas and may react to pointer events. Providers hand out
views by position and recycle them per view type.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, List, Optional

from PIL import Image

from .canvas import Canvas
from .config import DEFAULT_TOUCH_SLOP, IGNORE_ITEM_VIEW_TYPE
from .types import PointerAction, PointerEvent, Rect
from .logging import log

if TYPE_CHECKING:
    from .fold_item import FoldableItem


class ContentView:
    """Base content view. Subclasses override ``draw``."""

    def __init__(self, width: int = 0, height: int = 0):
        self.width = width
        self.height = height
        # Position in host coordinates, used by the cover/details transition
        self.screen_rect: Optional[Rect] = None
        self.item: Optional["FoldableItem"] = None

    def layout(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"Negative size {width}x{height}")
        self.width = width
        self.height = height

    def draw(self, canvas: Canvas) -> None:
        pass

    def on_pointer_event(self, event: PointerEvent) -> bool:
        return False

    def on_attached(self, item: "FoldableItem") -> None:
        """Called when the view becomes an item's content."""
        self.item = item

    def on_detached(self) -> None:
        self.item = None


class ImageContentView(ContentView):
    """Draws a Pillow image stretched over its bounds. Optionally clickable."""

    def __init__(self, image: Optional[Image.Image] = None, width: int = 0, height: int = 0,
                 on_click: Optional[Callable[["ImageContentView"], None]] = None):
        super().__init__(width, height)
        self.image = image
        self.on_click = on_click
        self.tag = None
        self._down: Optional[PointerEvent] = None

    def set_image(self, image: Optional[Image.Image]) -> None:
        self.image = image

    def draw(self, canvas: Canvas) -> None:
        if self.image is None or self.width <= 0 or self.height <= 0:
            return
        src = Rect(0, 0, self.image.width, self.image.height)
        canvas.draw_bitmap(self.image, src, Rect(0, 0, self.width, self.height))

    def on_pointer_event(self, event: PointerEvent) -> bool:
        if self.on_click is None:
            return False
        if event.action == PointerAction.DOWN:
            self._down = event
            return True
        if event.action == PointerAction.UP and self._down is not None:
            dx = event.x - self._down.x
            dy = event.y - self._down.y
            self._down = None
            if dx * dx + dy * dy <= DEFAULT_TOUCH_SLOP * DEFAULT_TOUCH_SLOP:
                self.on_click(self)
                return True
        if event.action == PointerAction.CANCEL:
            self._down = None
        return self._down is not None


DataSetObserver = Callable[[], None]


class ContentProvider(ABC):
    """Supplies content views by position.

    ``get_view`` receives a recycled view of the same view type when one is
    available; implementations rebind and return it instead of building a
    new one.
    """

    def __init__(self):
        self._observers: List[DataSetObserver] = []

    @abstractmethod
    def get_count(self) -> int:
        pass

    @abstractmethod
    def get_view(self, position: int, recycled: Optional[ContentView]) -> ContentView:
        pass

    def get_view_type(self, position: int) -> int:
        """View type key; ``IGNORE_ITEM_VIEW_TYPE`` disables recycling."""
        return 0

    def register_observer(self, observer: DataSetObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unregister_observer(self, observer: DataSetObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def notify_data_set_changed(self) -> None:
        log(f"[PROVIDER] Data changed, count={self.get_count()}")
        for observer in list(self._observers):
            observer()

    def notify_data_set_invalidated(self) -> None:
        log("[PROVIDER] Data invalidated")
        for observer in list(self._observers):
            observer()


class ImageListProvider(ContentProvider):
    """Provider over a list of images, one view type."""

    def __init__(self, images: List[Image.Image],
                 on_click: Optional[Callable[[ImageContentView], None]] = None):
        super().__init__()
        self.images = list(images)
        self.on_click = on_click
        self.created_views = 0

    def get_count(self) -> int:
        return len(self.images)

    def get_view(self, position: int, recycled: Optional[ContentView]) -> ContentView:
        if isinstance(recycled, ImageContentView):
            view = recycled
        else:
            view = ImageContentView(on_click=self.on_click)
            self.created_views += 1
        view.set_image(self.images[position])
        view.tag = position
        return view

    def set_images(self, images: List[Image.Image]) -> None:
        self.images = list(images)
        self.notify_data_set_changed()


__all__ = [
    'ContentView',
    'ImageContentView',
    'ContentProvider',
    'ImageListProvider',
    'DataSetObserver',
    'IGNORE_ITEM_VIEW_TYPE',
]
