import os

os.environ.setdefault("FOLDABLE_QUIET", "1")

import pytest

from foldable.canvas import Canvas
from foldable.content import ContentProvider, ContentView
from foldable.fold_list import FoldableList
from foldable.logging import set_enabled
from foldable.scheduler import FrameScheduler
from foldable.types import Rect

set_enabled(False)


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, t=100.0):
        self.t = t

    def __call__(self):
        return self.t

    def advance(self, seconds):
        self.t += seconds


class RecordingCanvas(Canvas):
    """Canvas that records draw calls with the transform in effect."""

    def __init__(self, width=400, height=400):
        super().__init__()
        self._width = width
        self._height = height
        self.ops = []

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    def draw_bitmap(self, bitmap, src, dst, alpha=255):
        self.ops.append(("bitmap", src.copy(), dst.copy(), self.matrix))

    def draw_rect(self, rect, color):
        self.ops.append(("rect", rect.copy(), tuple(color), self.matrix))

    def clear(self, color=(0, 0, 0, 0)):
        self.ops.append(("clear", tuple(color)))

    def kinds(self):
        return [op[0] for op in self.ops]


class RecordingView(ContentView):
    def __init__(self, position=None):
        super().__init__()
        self.position = position
        self.draws = 0
        self.events = []
        self.consume = False

    def draw(self, canvas):
        self.draws += 1
        canvas.draw_rect(Rect(0, 0, self.width, self.height), (255, 0, 0, 255))

    def on_pointer_event(self, event):
        self.events.append(event)
        return self.consume


class CountingProvider(ContentProvider):
    """Provider with one view type that counts fresh and recycled binds."""

    def __init__(self, count, view_type=0):
        super().__init__()
        self.count = count
        self.view_type = view_type
        self.created = 0
        self.recycled = 0
        self.binds = []

    def get_count(self):
        return self.count

    def get_view(self, position, recycled):
        if recycled is not None:
            self.recycled += 1
            view = recycled
        else:
            self.created += 1
            view = RecordingView()
        view.position = position
        self.binds.append((position, recycled is not None))
        return view

    def get_view_type(self, position):
        return self.view_type


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(clock)


@pytest.fixture
def make_list(scheduler):
    def _make(count, width=200, height=200, **kwargs):
        fold_list = FoldableList(scheduler, **kwargs)
        fold_list.layout(0, 0, width, height)
        provider = CountingProvider(count)
        fold_list.set_content_provider(provider)
        return fold_list, provider
    return _make


def run_until_idle(scheduler, clock, step=0.05, limit=500):
    """Advance the clock and tick until nothing is pending."""
    ticks = 0
    while scheduler.has_pending and ticks < limit:
        clock.advance(step)
        scheduler.tick()
        ticks += 1
    return ticks
