"""Device events -> normalized pointer samples."""

from types import SimpleNamespace

import cv2
import pytest

import config
from input_adapters import INDEX_FINGER_TIP, THUMB_TIP, MouseAdapter, PinchAdapter, ViewTransform
from models import Point
from tracing_session import PointerPhase, TracingSession


def hand(tip, thumb):
    """21 landmarks with only the index tip and thumb tip placed."""
    lms = [SimpleNamespace(x=0.5, y=0.9) for _ in range(21)]
    lms[INDEX_FINGER_TIP] = SimpleNamespace(x=tip[0], y=tip[1])
    lms[THUMB_TIP] = SimpleNamespace(x=thumb[0], y=thumb[1])
    return lms


def pinched(x, y):
    return hand((x, y), (x + 0.01, y))


def open_hand(x, y):
    return hand((x, y), (x + 0.2, y))


def test_view_transform_scales_offsets_and_mirrors() -> None:
    t = ViewTransform(200, 100, 100, 100, offset_x=10, offset_y=20)
    assert t.to_canvas(110, 70) == Point(50.0, 50.0)

    mirrored = ViewTransform(1.0, 1.0, 300, 300, mirror=True)
    p = mirrored.to_canvas(0.25, 0.5)
    assert p.x == pytest.approx(225.0)
    assert p.y == pytest.approx(150.0)


def test_mouse_adapter_translates_left_button_drag() -> None:
    mouse = MouseAdapter(ViewTransform(100, 100, 200, 200))

    assert mouse.translate(cv2.EVENT_MOUSEMOVE, 10, 10) is None

    down = mouse.translate(cv2.EVENT_LBUTTONDOWN, 10, 20)
    move = mouse.translate(cv2.EVENT_MOUSEMOVE, 30, 20, cv2.EVENT_FLAG_LBUTTON)
    up = mouse.translate(cv2.EVENT_LBUTTONUP, 30, 20)

    assert [s.phase for s in (down, move, up)] == [PointerPhase.DOWN, PointerPhase.MOVE, PointerPhase.UP]
    assert all(s.pointer_id == config.MOUSE_POINTER_ID for s in (down, move, up))
    assert (down.x, down.y) == (20.0, 40.0)
    assert (move.x, move.y) == (60.0, 40.0)

    assert mouse.translate(cv2.EVENT_MOUSEMOVE, 40, 40) is None
    assert mouse.translate(cv2.EVENT_LBUTTONUP, 40, 40) is None


def test_button_released_outside_window_ends_the_stroke() -> None:
    mouse = MouseAdapter(ViewTransform(100, 100, 100, 100))
    mouse.translate(cv2.EVENT_LBUTTONDOWN, 10, 50)
    mouse.translate(cv2.EVENT_MOUSEMOVE, 50, 50, cv2.EVENT_FLAG_LBUTTON)

    # Pointer comes back over the canvas with the button already up
    up = mouse.translate(cv2.EVENT_MOUSEMOVE, 90, 90, 0)

    assert up.phase is PointerPhase.UP
    assert not mouse.pressed
    assert mouse.translate(cv2.EVENT_MOUSEMOVE, 10, 90, 0) is None


def test_hover_after_outside_release_adds_no_ink(cross_template) -> None:
    session = TracingSession(cross_template)
    mouse = MouseAdapter(ViewTransform(100, 100, 100, 100))

    session.handle(mouse.translate(cv2.EVENT_LBUTTONDOWN, 10, 50))
    session.handle(mouse.translate(cv2.EVENT_MOUSEMOVE, 50, 50, cv2.EVENT_FLAG_LBUTTON))
    session.handle(mouse.translate(cv2.EVENT_MOUSEMOVE, 90, 90, 0))
    session.handle(mouse.translate(cv2.EVENT_MOUSEMOVE, 10, 90, 0))

    assert not session.is_drawing
    assert session.strokes == ((Point(10.0, 50.0), Point(50.0, 50.0)),)

    # The next press starts a fresh stroke
    session.handle(mouse.translate(cv2.EVENT_LBUTTONDOWN, 50, 10))
    assert session.is_drawing
    assert session.active_stroke == (Point(50.0, 10.0),)


def test_mouse_adapter_ignores_other_buttons() -> None:
    mouse = MouseAdapter(ViewTransform(100, 100, 100, 100))
    assert mouse.translate(cv2.EVENT_RBUTTONDOWN, 5, 5) is None
    assert mouse.translate(cv2.EVENT_MBUTTONUP, 5, 5) is None


def test_mouse_drag_draws_a_stroke(cross_template) -> None:
    session = TracingSession(cross_template)
    mouse = MouseAdapter(ViewTransform(100, 100, 100, 100))

    session.handle(mouse.translate(cv2.EVENT_LBUTTONDOWN, 10, 50))
    session.handle(mouse.translate(cv2.EVENT_MOUSEMOVE, 50, 50, cv2.EVENT_FLAG_LBUTTON))
    session.handle(mouse.translate(cv2.EVENT_MOUSEMOVE, 90, 50, cv2.EVENT_FLAG_LBUTTON))
    session.handle(mouse.translate(cv2.EVENT_LBUTTONUP, 90, 50))

    assert len(session.strokes) == 1
    assert session.summary.coverage == 1.0


def test_pinch_adapter_down_move_up() -> None:
    pinch = PinchAdapter(ViewTransform(1.0, 1.0, 100, 100))

    assert pinch.update([open_hand(0.1, 0.5)]) == []

    down = pinch.update([pinched(0.1, 0.5)])
    move = pinch.update([pinched(0.5, 0.5)])
    up = pinch.update([open_hand(0.9, 0.5)])

    assert [s.phase for s in down + move + up] == [PointerPhase.DOWN, PointerPhase.MOVE, PointerPhase.UP]
    assert down[0].pointer_id == config.HAND_POINTER_BASE
    assert down[0].x == pytest.approx(10.0)
    assert move[0].x == pytest.approx(50.0)
    assert pinch.active_hands == []


def test_pinch_adapter_cancels_when_hand_is_lost() -> None:
    pinch = PinchAdapter(ViewTransform(1.0, 1.0, 100, 100))
    pinch.update([pinched(0.2, 0.5)])
    pinch.update([pinched(0.4, 0.5)])

    lost = pinch.update([])

    assert len(lost) == 1
    assert lost[0].phase is PointerPhase.CANCEL
    assert lost[0].x == pytest.approx(40.0)
    assert pinch.active_hands == []


def test_single_hand_keeps_its_pointer_id_after_reacquire() -> None:
    pinch = PinchAdapter(ViewTransform(1.0, 1.0, 100, 100))
    pinch.update([pinched(0.2, 0.5)])
    pinch.update([])

    again = pinch.update([pinched(0.6, 0.5)])

    assert [s.phase for s in again] == [PointerPhase.DOWN]
    assert again[0].pointer_id == config.HAND_POINTER_BASE


def test_lost_hand_still_commits_the_stroke(cross_template) -> None:
    session = TracingSession(cross_template)
    pinch = PinchAdapter(ViewTransform(1.0, 1.0, 100, 100))

    for frame in ([pinched(0.1, 0.5)], [pinched(0.5, 0.5)], [pinched(0.9, 0.5)], []):
        for sample in pinch.update(frame):
            session.handle(sample)

    assert len(session.strokes) == 1
    assert session.summary.coverage == 1.0
