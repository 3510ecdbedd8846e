import pytest

from foldable.content import ContentView
from foldable.types import FoldState, PointerAction, PointerEvent, Rect
from foldable.unfoldable import CoverHolder, FoldingListener, UnfoldableView, fold_state_transitions

from conftest import RecordingCanvas, RecordingView, run_until_idle

FOLDED, UNFOLDING, UNFOLDED, FOLDING = (
    FoldState.FOLDED, FoldState.UNFOLDING, FoldState.UNFOLDED, FoldState.FOLDING)


class RecordingListener(FoldingListener):
    def __init__(self):
        self.calls = []

    def on_unfolding(self, view):
        self.calls.append("unfolding")

    def on_unfolded(self, view):
        self.calls.append("unfolded")

    def on_folding_back(self, view):
        self.calls.append("folding_back")

    def on_folded_back(self, view):
        self.calls.append("folded_back")

    def on_fold_progress(self, view, progress):
        self.calls.append(("progress", progress))

    def names(self):
        return [c for c in self.calls if isinstance(c, str)]


def make_pair(cover_rect=Rect(100, 100, 200, 200), details_rect=Rect(0, 0, 400, 600)):
    cover = RecordingView()
    cover.screen_rect = cover_rect.copy()
    details = RecordingView()
    details.screen_rect = details_rect.copy()
    return cover, details


@pytest.fixture
def unfoldable(scheduler):
    view = UnfoldableView(scheduler)
    listener = RecordingListener()
    view.set_on_folding_listener(listener)
    return view, listener


@pytest.mark.parametrize("state, last, rotation, expected", [
    (FOLDED, 0.0, 10.0, [UNFOLDING]),
    (UNFOLDING, 10.0, 90.0, []),
    (UNFOLDING, 170.0, 180.0, [UNFOLDED]),
    (FOLDED, 0.0, 180.0, [UNFOLDING, UNFOLDED]),
    (UNFOLDED, 180.0, 170.0, [FOLDING]),
    (FOLDING, 90.0, 0.0, [FOLDED]),
    (UNFOLDING, 90.0, 0.0, [FOLDING, FOLDED]),
    (FOLDED, 0.0, 0.0, []),
    (FOLDING, 50.0, 60.0, [UNFOLDING]),
])
def test_fold_state_transitions(state, last, rotation, expected):
    assert fold_state_transitions(state, last, rotation) == expected


def test_unfold_and_fold_back(unfoldable, scheduler, clock):
    view, listener = unfoldable
    cover, details = make_pair()
    view.unfold(cover, details)
    assert view.state == UNFOLDING
    assert view.is_unfolding
    assert view.frame == Rect(0, 0, 400, 600)
    assert view.fold_rotation == 0.0

    run_until_idle(scheduler, clock)
    assert view.fold_rotation == 180.0
    assert view.is_unfolded
    assert view.stage == 1.0
    assert (view.translation_x, view.translation_y) == (0.0, 0.0)
    assert listener.names() == ["unfolding", "unfolded"]

    view.fold_back()
    assert view.is_folding_back
    run_until_idle(scheduler, clock)
    assert view.state == FOLDED
    assert listener.names() == ["unfolding", "unfolded", "folding_back", "folded_back"]
    assert view.cover_view is None and view.details_view is None
    assert view.provider is None
    assert (view.translation_x, view.translation_y) == (0.0, 0.0)
    assert cover.item is None and details.item is None


def test_progress_precedes_state_change(unfoldable, scheduler, clock):
    view, listener = unfoldable
    view.unfold(*make_pair())
    listener.calls.clear()
    run_until_idle(scheduler, clock)
    assert listener.calls[-2:] == [("progress", 1.0), "unfolded"]
    progresses = [c[1] for c in listener.calls if isinstance(c, tuple)]
    assert progresses == sorted(progresses)


def test_cover_starts_on_its_screen_rect(unfoldable):
    view, _ = unfoldable
    cover, details = make_pair()
    view.unfold(cover, details)
    holder = view.cover_holder
    left = view.frame.left + view.translation_x + holder.visible_bounds.left
    top = view.frame.top + view.translation_y + holder.visible_bounds.top
    assert (left, top) == (100, 100)
    assert holder.visible_bounds.width == 100
    assert view.bound_items[0].scale == 1.0


def test_item_scales_follow_stage(unfoldable):
    view, _ = unfoldable
    view.unfold(*make_pair())
    view.set_fold_rotation(45.0)
    cover_item = view.bound_items[0]
    details_item = view.bound_items[1]
    stage = 0.25
    assert cover_item.scale == pytest.approx(1.0 - (1.0 - 4.0) * stage)
    assert details_item.scale == pytest.approx(1.0 - (1.0 - 0.25) * (1.0 - stage))
    assert details_item.rolling_distance == pytest.approx((100 * 4.0 - 300) * (1.0 - 2.0 * stage))
    assert view.translation_x == pytest.approx((150 - 200) * (1.0 - stage))
    assert view.translation_y == pytest.approx((100 - 300) * (1.0 - stage))

    view.set_fold_rotation(120.0)
    assert details_item.rolling_distance == 0.0


def test_unfold_same_pair_resumes(unfoldable, scheduler, clock):
    view, listener = unfoldable
    cover, details = make_pair()
    view.unfold(cover, details)
    run_until_idle(scheduler, clock)
    view.fold_back()
    clock.advance(0.1)
    scheduler.tick()
    clock.advance(0.1)
    scheduler.tick()
    assert view.is_folding_back
    view.unfold(cover, details)
    run_until_idle(scheduler, clock)
    assert view.is_unfolded
    assert view.cover_view is cover


def test_unfold_other_pair_is_scheduled(unfoldable, scheduler, clock):
    view, listener = unfoldable
    first = make_pair()
    second = make_pair(Rect(50, 300, 150, 350))
    view.unfold(*first)
    run_until_idle(scheduler, clock)

    view.unfold(*second)
    assert view.scheduled_cover_view is second[0]
    assert view.is_folding_back

    run_until_idle(scheduler, clock)
    assert view.is_unfolded
    assert view.cover_view is second[0]
    assert view.cover_rect == Rect(50, 300, 150, 350)
    assert view.scheduled_cover_view is None
    assert listener.names() == [
        "unfolding", "unfolded", "folding_back", "folded_back", "unfolding", "unfolded"]


def test_unfold_requires_screen_rects(unfoldable):
    view, _ = unfoldable
    cover, details = make_pair()
    details.screen_rect = None
    with pytest.raises(ValueError):
        view.unfold(cover, details)
    assert view.state == FOLDED


def test_user_drag_folds_back(unfoldable, scheduler, clock):
    view, listener = unfoldable
    view.unfold(*make_pair())
    run_until_idle(scheduler, clock)
    view.set_fold_rotation(170.0, True)
    assert view.is_folding_back
    view.set_fold_rotation(175.0, True)
    assert view.is_unfolding
    view.set_fold_rotation(0.0, True)
    assert view.state == FOLDED
    assert view.cover_view is None


def test_change_cover_view(unfoldable):
    view, _ = unfoldable
    cover, details = make_pair()
    view.unfold(cover, details)
    replacement = RecordingView()
    replacement.screen_rect = Rect(0, 0, 80, 40)
    view.change_cover_view(replacement)
    assert view.cover_view is replacement
    assert view.cover_rect == Rect(0, 0, 80, 40)
    assert view.cover_holder.view is replacement


def test_detach_silences_listener(unfoldable, scheduler, clock):
    view, listener = unfoldable
    view.unfold(*make_pair())
    view.unfold(*make_pair(Rect(0, 0, 50, 50)))
    listener.calls.clear()
    view.detach()
    run_until_idle(scheduler, clock)
    assert listener.calls == []
    assert view.scheduled_cover_view is None
    assert not scheduler.has_pending


def test_draw_composes_both_items(unfoldable):
    view, _ = unfoldable
    cover, details = make_pair()
    view.unfold(cover, details)
    view.set_fold_rotation(60.0)
    canvas = RecordingCanvas(400, 600)
    view.draw(canvas)
    assert cover.draws == 1
    assert details.draws == 1
    assert "bitmap" in canvas.kinds()


def test_cover_holder_squeezes_tall_cover():
    holder = CoverHolder()
    holder.layout(200, 100)
    cover = ContentView()
    holder.set_view(cover, 100, 80)
    assert holder.view_scale_y == pytest.approx(50 / 80)
    assert holder.visible_bounds == Rect(50, 50, 150, 100)
    assert (cover.width, cover.height) == (100, 80)
    assert holder.clear_view() is cover
    assert holder.view is None


def test_cover_holder_routes_pointer_into_cover():
    holder = CoverHolder()
    holder.layout(200, 200)
    cover = RecordingView()
    cover.consume = True
    holder.set_view(cover, 100, 50)
    assert not holder.on_pointer_event(PointerEvent(PointerAction.DOWN, 10, 10, 0))
    assert holder.on_pointer_event(PointerEvent(PointerAction.DOWN, 60, 110, 0))
    assert (cover.events[0].x, cover.events[0].y) == (10, 10)
