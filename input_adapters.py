"""
Input Adapters
- Convert device-specific events (OpenCV mouse, hand-pinch landmarks)
  into PointerSample values in canvas coordinates
"""

import math
from typing import Dict, List, Optional, Sequence

import cv2

import config
from models import Point
from tracing_session import PointerPhase, PointerSample

# MediaPipe hand landmark indices
INDEX_FINGER_TIP = 8
THUMB_TIP = 4


class ViewTransform:
    """Maps view/device coordinates onto the tracing canvas."""

    def __init__(
        self,
        view_width: float,
        view_height: float,
        canvas_width: float,
        canvas_height: float,
        offset_x: float = 0.0,
        offset_y: float = 0.0,
        mirror: bool = False,
    ):
        self.view_width = view_width
        self.view_height = view_height
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.offset_x = offset_x
        self.offset_y = offset_y
        self.mirror = mirror

    def to_canvas(self, x: float, y: float) -> Point:
        vx = x - self.offset_x
        vy = y - self.offset_y
        if self.mirror:
            vx = self.view_width - vx
        return Point(
            vx * self.canvas_width / self.view_width,
            vy * self.canvas_height / self.view_height,
        )


class MouseAdapter:
    """OpenCV mouse callback arguments -> pointer samples (left button only)."""

    def __init__(self, transform: ViewTransform, pointer_id: int = config.MOUSE_POINTER_ID):
        self.transform = transform
        self.pointer_id = pointer_id
        self.pressed = False

    def translate(self, event: int, x: int, y: int, flags: int = 0) -> Optional[PointerSample]:
        if event == cv2.EVENT_LBUTTONDOWN:
            self.pressed = True
            phase = PointerPhase.DOWN
        elif event == cv2.EVENT_MOUSEMOVE:
            if not self.pressed:
                return None
            if not flags & cv2.EVENT_FLAG_LBUTTON:
                # Button released outside the window: no LBUTTONUP was delivered
                self.pressed = False
                phase = PointerPhase.UP
            else:
                phase = PointerPhase.MOVE
        elif event == cv2.EVENT_LBUTTONUP:
            if not self.pressed:
                return None
            self.pressed = False
            phase = PointerPhase.UP
        else:
            return None

        p = self.transform.to_canvas(x, y)
        return PointerSample(self.pointer_id, phase, p.x, p.y)


class PinchAdapter:
    """
    Hand landmarks -> pointer samples.

    A thumb/index pinch is "pen down", releasing it is "pen up". A hand that
    vanishes from tracking mid-stroke produces a cancel.

    Pointer ids follow the hand's position in the detector's result list,
    which is only a stable identity with a single tracked hand
    (config.MAX_HANDS = 1). With more hands, losing hand 0 shifts hand 1 into
    its slot and it continues hand 0's stroke.
    """

    def __init__(
        self,
        transform: ViewTransform,
        pinch_threshold: float = config.PINCH_THRESHOLD_NORM,
        pointer_base: int = config.HAND_POINTER_BASE,
    ):
        self.transform = transform
        self.pinch_threshold = pinch_threshold
        self.pointer_base = pointer_base
        self._last: Dict[int, Point] = {}

    @property
    def active_hands(self) -> List[int]:
        return sorted(self._last)

    def update(self, hands: Sequence[Sequence]) -> List[PointerSample]:
        """Feed the landmarks of every detected hand for one frame."""
        samples = []

        for idx, landmarks in enumerate(hands):
            tip = landmarks[INDEX_FINGER_TIP]
            thumb = landmarks[THUMB_TIP]
            pinching = math.hypot(tip.x - thumb.x, tip.y - thumb.y) < self.pinch_threshold
            p = self.transform.to_canvas(tip.x, tip.y)
            pid = self.pointer_base + idx

            if pinching:
                phase = PointerPhase.MOVE if idx in self._last else PointerPhase.DOWN
                self._last[idx] = p
                samples.append(PointerSample(pid, phase, p.x, p.y))
            elif idx in self._last:
                del self._last[idx]
                samples.append(PointerSample(pid, PointerPhase.UP, p.x, p.y))

        for idx in [i for i in self._last if i >= len(hands)]:
            p = self._last.pop(idx)
            samples.append(
                PointerSample(self.pointer_base + idx, PointerPhase.CANCEL, p.x, p.y)
            )

        return samples
