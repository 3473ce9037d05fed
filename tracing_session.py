"""
Tracing Session
- Accumulates normalized pointer samples into strokes
- Re-evaluates the drawing whenever the strokes change
- Undo / reset / template switching
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Tuple

import config
from models import EvaluationSummary, LetterTemplate, Point, StrokeEvaluation
from stroke_engine import (
    distance,
    evaluate_strokes,
    scale_template,
    smooth,
    summarize,
    threshold_for_canvas,
)

logger = logging.getLogger(__name__)

Stroke = Tuple[Point, ...]
SummaryListener = Callable[[Optional[EvaluationSummary]], None]


class PointerPhase(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


class PointerSample(NamedTuple):
    """One input event from any device, already in canvas coordinates."""
    pointer_id: int
    phase: PointerPhase
    x: float
    y: float
    pressure: Optional[float] = None

    @property
    def point(self) -> Point:
        return Point(self.x, self.y, self.pressure)


@dataclass(frozen=True)
class RenderState:
    """Everything the display needs for one frame."""
    template: Optional[LetterTemplate]
    strokes: Tuple[Stroke, ...]
    active_stroke: Optional[Stroke]
    evaluations: Tuple[StrokeEvaluation, ...]
    summary: Optional[EvaluationSummary]
    threshold: float
    version: int


class TracingSession:
    """
    Stroke capture state machine: Idle -> StrokeActive -> Idle per stroke.

    Only the pointer that opened a stroke can extend or end it; other
    pointers are ignored until it commits. Pointer-cancel commits like
    pointer-up.
    """

    def __init__(
        self,
        template: Optional[LetterTemplate] = None,
        width: Optional[float] = None,
        height: Optional[float] = None,
        smoothing: bool = True,
        live_feedback: bool = True,
        coalesce_distance: float = config.COALESCE_DISTANCE,
    ):
        self._fixed_size = (width, height) if width and height else None
        self.smoothing = smoothing
        self.live_feedback = live_feedback
        self.coalesce_distance = coalesce_distance

        self._listeners: List[SummaryListener] = []
        self._strokes: List[Stroke] = []
        self._smoothed: List[Stroke] = []
        self._active: Optional[List[Point]] = None
        self._pointer_id: Optional[int] = None

        self._evaluations: Tuple[StrokeEvaluation, ...] = ()
        self._summary: Optional[EvaluationSummary] = None
        self.version = 0

        self.template: Optional[LetterTemplate] = None
        self.width, self.height = self._fixed_size or (config.CANVAS_SIZE, config.CANVAS_SIZE)
        self.threshold = threshold_for_canvas(self.width, self.height)
        self.set_template(template)

    # ----------------------------
    # Listeners
    # ----------------------------

    def add_listener(self, callback: SummaryListener):
        self._listeners.append(callback)

    def remove_listener(self, callback: SummaryListener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    # ----------------------------
    # State
    # ----------------------------

    @property
    def strokes(self) -> Tuple[Stroke, ...]:
        """Committed strokes, oldest first."""
        return tuple(self._strokes)

    @property
    def active_stroke(self) -> Optional[Stroke]:
        return tuple(self._active) if self._active is not None else None

    @property
    def is_drawing(self) -> bool:
        return self._active is not None

    @property
    def summary(self) -> Optional[EvaluationSummary]:
        return self._summary

    @property
    def evaluations(self) -> Tuple[StrokeEvaluation, ...]:
        return self._evaluations

    def render_state(self) -> RenderState:
        return RenderState(
            template=self.template,
            strokes=self.strokes,
            active_stroke=self.active_stroke,
            evaluations=self._evaluations,
            summary=self._summary,
            threshold=self.threshold,
            version=self.version,
        )

    # ----------------------------
    # Commands
    # ----------------------------

    def set_template(self, template: Optional[LetterTemplate]):
        """Switch the letter being traced; always clears the drawing."""
        if template is not None:
            width, height = self._fixed_size or (template.width, template.height)
            self.width, self.height = width, height
            self.threshold = threshold_for_canvas(width, height)
            template = scale_template(template, width, height)
            logger.info(
                "Tracing %s (%d strokes) on %gx%g canvas, threshold %.1f px",
                template.label, template.stroke_count, width, height, self.threshold,
            )
        self.template = template
        self.reset()

    def reset(self):
        """Clear committed strokes and any stroke in progress."""
        self._strokes = []
        self._smoothed = []
        self._active = None
        self._pointer_id = None
        self._changed()

    def undo(self):
        """Remove the most recently committed stroke; an active stroke is kept."""
        if not self._strokes:
            return
        self._strokes.pop()
        self._smoothed.pop()
        self._changed()

    # ----------------------------
    # Pointer input
    # ----------------------------

    def handle(self, sample: Optional[PointerSample]):
        """Dispatch one normalized pointer sample."""
        if sample is None:
            return
        if sample.phase is PointerPhase.DOWN:
            self.pointer_down(sample.pointer_id, sample.point)
        elif sample.phase is PointerPhase.MOVE:
            self.pointer_move(sample.pointer_id, sample.point)
        elif sample.phase is PointerPhase.UP:
            self.pointer_up(sample.pointer_id)
        elif sample.phase is PointerPhase.CANCEL:
            self.pointer_cancel(sample.pointer_id)

    def pointer_down(self, pointer_id: int, point: Point):
        if self.template is None or self._active is not None:
            return
        self._pointer_id = pointer_id
        self._active = [point]
        self._changed(live=True)

    def pointer_move(self, pointer_id: int, point: Point):
        if self._active is None or pointer_id != self._pointer_id:
            return
        if distance(self._active[-1], point) < self.coalesce_distance:
            return
        self._active.append(point)
        self._changed(live=True)

    def pointer_up(self, pointer_id: int):
        if self._active is None or pointer_id != self._pointer_id:
            return
        stroke = tuple(self._active)
        self._strokes.append(stroke)
        self._smoothed.append(self._prepare(stroke))
        self._active = None
        self._pointer_id = None
        logger.debug("Committed stroke %d (%d points)", len(self._strokes), len(stroke))
        self._changed()

    def pointer_cancel(self, pointer_id: int):
        self.pointer_up(pointer_id)

    # ----------------------------
    # Evaluation
    # ----------------------------

    def _prepare(self, stroke) -> Stroke:
        return tuple(smooth(stroke)) if self.smoothing else tuple(stroke)

    def _scored_strokes(self) -> List[Stroke]:
        # Committed strokes are smoothed once, in pointer_up
        strokes = list(self._smoothed)
        if self.live_feedback and self._active is not None:
            strokes.append(self._prepare(self._active))
        return strokes

    def _changed(self, live: bool = False):
        self.version += 1
        if live and not self.live_feedback:
            return

        if self.template is None:
            self._evaluations = ()
            self._summary = None
        else:
            strokes = self._scored_strokes()
            references = self.template.reference_strokes
            self._evaluations = tuple(evaluate_strokes(strokes, references, self.threshold))
            self._summary = summarize(
                self._evaluations[:len(references)], self.threshold, stroke_count=len(strokes),
            )

        for listener in list(self._listeners):
            listener(self._summary)
