import pytest

from foldable.gesture import GestureDetector, VelocityTracker
from foldable.state import GestureState, TouchEventCache
from foldable.types import PointerAction, PointerEvent

from conftest import run_until_idle

DOWN, MOVE, UP, CANCEL = PointerAction.DOWN, PointerAction.MOVE, PointerAction.UP, PointerAction.CANCEL


def ev(action, y, t, x=100.0, **kwargs):
    return PointerEvent(action, x, y, t, **kwargs)


def test_small_drag_snaps_to_nearest_page(make_list, scheduler, clock):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(100.0)
    fold_list.dispatch_touch_event(ev(DOWN, 100, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 105, 10))
    fold_list.dispatch_touch_event(ev(UP, 105, 20))

    assert fold_list.fold_rotation == 100.0
    assert fold_list.gestures.animator.animation.to_rotation == 180.0
    assert fold_list.gestures.animator.animation.duration_ms == 267
    run_until_idle(scheduler, clock)
    assert fold_list.fold_rotation == 180.0


def test_drag_past_slop_rotates(make_list):
    fold_list, _ = make_list(3)
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 140, 10))
    assert not fold_list.gestures.is_scrolling
    fold_list.dispatch_touch_event(ev(MOVE, 100, 20))
    assert fold_list.gestures.is_scrolling
    assert fold_list.fold_rotation == 0.0
    fold_list.dispatch_touch_event(ev(MOVE, 50, 30))
    assert fold_list.fold_rotation == pytest.approx(180.0 * 1.33 * 50 / 200)


def test_drag_down_stays_clamped(make_list):
    fold_list, _ = make_list(3)
    fold_list.dispatch_touch_event(ev(DOWN, 20, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 60, 10))
    fold_list.dispatch_touch_event(ev(MOVE, 180, 20))
    assert fold_list.fold_rotation == 0.0


def test_scroll_factor_is_configurable(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_scroll_factor(2.0)
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 100, 10))
    fold_list.dispatch_touch_event(ev(MOVE, 50, 20))
    assert fold_list.fold_rotation == pytest.approx(90.0)


def test_release_after_drag_snaps(make_list, scheduler, clock):
    fold_list, _ = make_list(3)
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 100, 500))
    fold_list.dispatch_touch_event(ev(MOVE, -20, 1000))
    fold_list.dispatch_touch_event(ev(UP, -20, 1001, velocity_y=0.0))
    assert not fold_list.gestures.fling.is_animating
    run_until_idle(scheduler, clock)
    assert fold_list.fold_rotation == 180.0


def test_fling_runs_to_page_bound(make_list, scheduler, clock):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(50.0)
    h = fold_list.height
    assert fold_list.gestures.on_fling(ev(DOWN, 150, 0), ev(UP, 50, 10), 0.0, -h * 10.0)
    fling = fold_list.gestures.fling
    assert fling.velocity == pytest.approx(1800.0)
    assert (fling.min_rotation, fling.max_rotation) == (0.0, 180.0)

    clock.advance(0.1)
    scheduler.tick()
    assert fold_list.fold_rotation == 180.0
    assert not fling.is_animating
    assert not scheduler.has_pending


def test_fling_from_pointer_release(make_list, scheduler, clock):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(50.0)
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 100, 10))
    fold_list.dispatch_touch_event(ev(UP, 100, 20, velocity_y=-2000.0))
    assert fold_list.gestures.fling.is_animating
    assert not fold_list.gestures.animator.is_running
    run_until_idle(scheduler, clock)
    assert fold_list.fold_rotation == 180.0


def test_fling_velocity_floor(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(200.0)
    assert fold_list.gestures.on_fling(ev(DOWN, 0, 0), ev(UP, 0, 1), 0.0, 10.0)
    fling = fold_list.gestures.fling
    assert fling.velocity == -600.0
    assert (fling.min_rotation, fling.max_rotation) == (180.0, 360.0)


def test_fling_rejected_on_page(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(180.0)
    assert not fold_list.gestures.start_fling(900.0)
    fold_list.set_fold_rotation(90.0)
    assert not fold_list.gestures.start_fling(0.0)
    assert not fold_list.gestures.fling.is_animating


def test_tween_cancels_fling(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_fold_rotation(50.0)
    gestures = fold_list.gestures
    gestures.start_fling(900.0)
    fold_list.scroll_to_position(2)
    assert not gestures.fling.is_animating
    assert gestures.animator.is_running
    gestures.start_fling(900.0)
    assert gestures.fling.is_animating
    assert not gestures.animator.is_running


def test_down_cancels_motion(make_list):
    fold_list, _ = make_list(3)
    fold_list.scroll_to_position(2)
    fold_list.dispatch_touch_event(ev(DOWN, 100, 0))
    assert not fold_list.gestures.is_animating


def test_duplicate_events_processed_once(make_list):
    fold_list, _ = make_list(3)
    gestures = fold_list.gestures
    seen = []
    original = gestures.detector.on_touch_event

    def spy(event):
        seen.append(event.action)
        return original(event)

    gestures.detector.on_touch_event = spy
    down = ev(DOWN, 100, 7)
    first = gestures.process_touch(down)
    assert gestures.process_touch(down) == first
    gestures.process_touch(ev(MOVE, 100, 7))
    assert seen == [DOWN, MOVE]


def test_events_ignored_without_items(make_list):
    fold_list, _ = make_list(0)
    assert not fold_list.dispatch_touch_event(ev(DOWN, 100, 0))


def test_gestures_disabled(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_gestures_enabled(False)
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 20, 10))
    assert fold_list.fold_rotation == 0.0


def test_content_receives_taps_and_cancel_on_scroll(make_list):
    fold_list, _ = make_list(3)
    view = fold_list.bound_items[0].content
    view.consume = True
    fold_list.dispatch_touch_event(ev(DOWN, 150, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 148, 10))
    fold_list.dispatch_touch_event(ev(MOVE, 80, 20))
    assert [e.action for e in view.events] == [DOWN, MOVE, CANCEL]
    fold_list.dispatch_touch_event(ev(MOVE, 40, 30))
    assert len(view.events) == 3


def test_translated_list_measures_untranslated_frame(make_list):
    fold_list, _ = make_list(3)
    fold_list.set_translation(0.0, 300.0)
    fold_list.dispatch_touch_event(ev(DOWN, 450, 0))
    fold_list.dispatch_touch_event(ev(MOVE, 400, 10))
    fold_list.dispatch_touch_event(ev(MOVE, 350, 20))
    assert fold_list.fold_rotation == pytest.approx(180.0 * 1.33 * 50 / 200)


def test_gesture_state_and_cache():
    state = GestureState()
    state.start_scroll(90.0, 120.0)
    assert state.is_scrolling
    assert state.get_scroll_delta(100.0) == 20.0
    state.reset()
    assert not state.is_scrolling

    cache = TouchEventCache()
    e = ev(UP, 0, 5)
    assert cache.lookup(e) is None
    cache.remember(e)
    cache.store(True)
    assert cache.lookup(ev(UP, 10, 5)) is True
    assert cache.lookup(ev(DOWN, 0, 5)) is None


def test_velocity_tracker_window():
    tracker = VelocityTracker(window_ms=100)
    tracker.add_movement(ev(MOVE, 0, 0))
    tracker.add_movement(ev(MOVE, 500, 200))
    tracker.add_movement(ev(MOVE, 400, 250))
    assert tracker.compute_velocity() == (0.0, pytest.approx(-2000.0))


class _Listener:
    def __init__(self):
        self.calls = []

    def on_down(self, e):
        self.calls.append("down")
        return False

    def on_scroll(self, down, e, dx, dy):
        self.calls.append(("scroll", dy))
        return True

    def on_fling(self, down, e, vx, vy):
        self.calls.append(("fling", vy))
        return True

    def on_single_tap_up(self, e):
        self.calls.append("tap")
        return False


def test_detector_tap_and_fling():
    listener = _Listener()
    detector = GestureDetector(listener, touch_slop=10)
    detector.on_touch_event(ev(DOWN, 100, 0))
    detector.on_touch_event(ev(MOVE, 104, 10))
    detector.on_touch_event(ev(UP, 104, 20))
    assert listener.calls == ["down", ("scroll", -4.0), "tap"]

    listener.calls.clear()
    detector.on_touch_event(ev(DOWN, 200, 100))
    detector.on_touch_event(ev(MOVE, 150, 110))
    detector.on_touch_event(ev(UP, 100, 120))
    assert listener.calls[-1] == ("fling", pytest.approx(-5000.0))


def test_detector_slow_release_is_not_fling():
    listener = _Listener()
    detector = GestureDetector(listener, touch_slop=10)
    detector.on_touch_event(ev(DOWN, 200, 0))
    detector.on_touch_event(ev(MOVE, 150, 90))
    detector.on_touch_event(ev(UP, 150, 2000))
    assert listener.calls[-1] == ("scroll", 50.0)
