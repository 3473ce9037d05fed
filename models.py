"""
Data model shared by the stroke engine, the tracing session and the renderer.

All coordinates inside the core are canvas pixels of the active template.
"""

import math
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional, Tuple

import config


class Point(NamedTuple):
    """A 2D point; pressure is optional telemetry and never scored."""
    x: float
    y: float
    pressure: Optional[float] = None


@dataclass(frozen=True)
class ReferenceStroke:
    """The ideal path of one pen stroke of a letter."""
    path: Tuple[Point, ...]
    id: Optional[str] = None
    weight: float = 1.0

    def __len__(self) -> int:
        return len(self.path)


@dataclass(frozen=True)
class LetterTemplate:
    """A letter to trace: reference strokes in drawing order plus canvas size."""
    id: str
    label: str
    width: float
    height: float
    reference_strokes: Tuple[ReferenceStroke, ...] = ()
    image: Optional[str] = None
    alphabet_id: Optional[str] = None
    alphabet_name: Optional[str] = None

    @property
    def stroke_count(self) -> int:
        return len(self.reference_strokes)

    def scaled(self, width: float, height: float) -> "LetterTemplate":
        """Return a copy mapped onto a canvas of the given size."""
        sx = width / self.width
        sy = height / self.height
        strokes = tuple(
            replace(stroke, path=tuple(Point(p.x * sx, p.y * sy) for p in stroke.path))
            for stroke in self.reference_strokes
        )
        return replace(self, width=width, height=height, reference_strokes=strokes)


@dataclass(frozen=True)
class Segment:
    """One piece of a resampled freehand stroke, classified for feedback."""
    start: Point
    end: Point
    hit: bool

    @property
    def color(self) -> Tuple[int, int, int]:
        return config.UI_COLORS["hit"] if self.hit else config.UI_COLORS["miss"]


@dataclass(frozen=True)
class StrokeEvaluation:
    coverage: float
    average_deviation: float
    segments: Tuple[Segment, ...] = ()

    @classmethod
    def empty(cls) -> "StrokeEvaluation":
        """Sentinel for strokes that cannot be scored."""
        return cls(coverage=0.0, average_deviation=math.inf, segments=())

    @property
    def scored(self) -> bool:
        return math.isfinite(self.average_deviation)


@dataclass(frozen=True)
class EvaluationSummary:
    """Whole-letter result; score is an integer percentage."""
    score: int
    coverage: float
    average_deviation: float
    stroke_count: int
    message: str

    @property
    def accuracy(self) -> float:
        return self.score / 100.0
