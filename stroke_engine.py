"""
Stroke Evaluation Engine
- Resamples and smooths freehand strokes
- Scores one stroke against one reference stroke (coverage, deviation, hit/miss)
- Aggregates a whole letter attempt into a single score and message
"""

import math
from typing import List, Optional, Sequence

import numpy as np

import config
from models import EvaluationSummary, LetterTemplate, Point, Segment, StrokeEvaluation

# ===============================
# Geometry Utils
# ===============================


def _as_array(pts) -> np.ndarray:
    """(n, 2) float array from Points or plain (x, y) pairs; pressure is dropped."""
    if len(pts) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(p[0], p[1]) for p in pts], dtype=np.float64)


def _to_points(arr: np.ndarray) -> List[Point]:
    return [Point(float(x), float(y)) for x, y in arr]


def distance(a, b) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def polyline_length(pts) -> float:
    """Total length of a polyline."""
    arr = _as_array(pts)
    if len(arr) < 2:
        return 0.0
    diffs = np.diff(arr, axis=0)
    return float(np.hypot(diffs[:, 0], diffs[:, 1]).sum())


def resample(pts, sample_count: int = config.STROKE_SAMPLES) -> list:
    """
    Resample a polyline to exactly sample_count points spaced by arc-length.

    Empty input gives an empty list. A polyline with zero length (all points
    coincide) is returned unchanged.
    """
    pts = list(pts)
    if not pts or sample_count <= 0:
        return []

    arr = _as_array(pts)
    diffs = np.diff(arr, axis=0)
    seg_lens = np.hypot(diffs[:, 0], diffs[:, 1])
    if seg_lens.sum() <= 0.0:
        return pts

    if sample_count == 1:
        return _to_points(arr[:1])

    # Drop repeated points so the cumulative length is strictly increasing
    moving = seg_lens > 0
    arr = arr[np.concatenate([[True], moving])]
    cum_len = np.concatenate([[0.0], np.cumsum(seg_lens[moving])])

    targets = np.linspace(0.0, cum_len[-1], sample_count)
    xs = np.interp(targets, cum_len, arr[:, 0])
    ys = np.interp(targets, cum_len, arr[:, 1])
    return _to_points(np.column_stack([xs, ys]))


def smooth(
    pts,
    tension: float = config.SPLINE_TENSION,
    segments: int = config.SPLINE_SEGMENTS,
) -> list:
    """
    Cardinal (Catmull-Rom family) spline through the stroke points.

    The first and last points are repeated as phantom control points so the
    curve starts and ends on the stroke's real endpoints. Strokes with fewer
    than 3 points have nothing to smooth and are returned unchanged.
    """
    pts = list(pts)
    if len(pts) < 3:
        return pts

    arr = _as_array(pts)
    ctrl = np.vstack([arr[:1], arr, arr[-1:]])

    t = np.arange(segments, dtype=np.float64) / segments
    tt = t * t
    ttt = tt * t
    s = tension
    basis = np.column_stack([
        -s * ttt + 2 * s * tt - s * t,
        (2 - s) * ttt + (s - 3) * tt + 1,
        (s - 2) * ttt + (3 - 2 * s) * tt + s * t,
        s * ttt - s * tt,
    ])

    spans = [basis @ ctrl[i:i + 4] for i in range(len(ctrl) - 3)]
    spans.append(arr[-1:])
    return _to_points(np.vstack(spans))


def threshold_for_canvas(width: float, height: float, ratio: float = config.THRESHOLD_RATIO) -> float:
    """Hit radius for a canvas; scales with resolution."""
    return min(width, height) * ratio


def scale_template(template: LetterTemplate, width: float, height: float) -> LetterTemplate:
    """Map a template's reference strokes onto a canvas of another size."""
    if template.width == width and template.height == height:
        return template
    return template.scaled(width, height)


def _path_of(reference) -> Sequence:
    return getattr(reference, "path", reference)


# ===============================
# Stroke Evaluation
# ===============================

def evaluate_stroke(
    stroke,
    reference_path,
    threshold: float,
    stroke_samples: int = config.STROKE_SAMPLES,
    reference_samples: int = config.REFERENCE_SAMPLES,
) -> StrokeEvaluation:
    """
    Compare one freehand stroke with one reference path.

    coverage: share of reference samples with a stroke sample within threshold.
    average_deviation: mean distance from each stroke sample to the reference.
    segments: consecutive stroke-sample pairs, hit when the start sample lies
    within threshold of the reference.

    Strokes or references with fewer than 2 points return the empty sentinel.
    """
    if threshold <= 0:
        raise ValueError(f"threshold must be positive, got {threshold}")

    if len(stroke) < 2 or len(reference_path) < 2:
        return StrokeEvaluation.empty()

    stroke_rs = _as_array(resample(stroke, stroke_samples))
    ref_rs = _as_array(resample(reference_path, reference_samples))

    # (stroke samples x reference samples) distance matrix
    dists = np.linalg.norm(stroke_rs[:, None, :] - ref_rs[None, :, :], axis=2)
    ref_nearest = dists.min(axis=0)
    stroke_nearest = dists.min(axis=1)

    coverage = float(np.count_nonzero(ref_nearest <= threshold)) / len(ref_nearest)
    average_deviation = float(stroke_nearest.mean())

    points = _to_points(stroke_rs)
    hits = stroke_nearest <= threshold
    segments = tuple(
        Segment(points[i], points[i + 1], bool(hits[i]))
        for i in range(len(points) - 1)
    )

    return StrokeEvaluation(
        coverage=coverage,
        average_deviation=average_deviation,
        segments=segments,
    )


def evaluate_strokes(strokes, reference_strokes, threshold: float) -> List[StrokeEvaluation]:
    """
    Per-stroke evaluations for rendering: stroke i against reference i.
    Strokes without a matching reference get the empty sentinel.
    """
    results = []
    for i, stroke in enumerate(strokes):
        if i >= len(reference_strokes):
            results.append(StrokeEvaluation.empty())
            continue
        results.append(evaluate_stroke(stroke, _path_of(reference_strokes[i]), threshold))
    return results


# ===============================
# Drawing Evaluation
# ===============================

def score_message(score: Optional[float]) -> str:
    """Feedback line for a score; more positive as the score increases."""
    if score is None:
        return config.PROMPT_MESSAGE
    for upper, message in config.SCORE_MESSAGES:
        if upper is None or score < upper:
            return message
    return config.SCORE_MESSAGES[-1][1]


def empty_summary(stroke_count: int = 0) -> EvaluationSummary:
    """Initial state: nothing to score yet."""
    return EvaluationSummary(
        score=0,
        coverage=0.0,
        average_deviation=math.inf,
        stroke_count=stroke_count,
        message=config.PROMPT_MESSAGE,
    )


def evaluate_drawing(strokes, reference_strokes, threshold: float) -> EvaluationSummary:
    """
    Score a whole letter attempt.

    Stroke i is compared with reference i for the first min(len) pairs only;
    extra strokes and unattempted references do not change the score.
    Returns the prompt summary when either list is empty.
    """
    strokes = list(strokes)
    references = list(reference_strokes)

    if not strokes or not references:
        return empty_summary(len(strokes))

    n = min(len(strokes), len(references))
    evaluations = [
        evaluate_stroke(strokes[i], _path_of(references[i]), threshold)
        for i in range(n)
    ]
    return summarize(evaluations, threshold, stroke_count=len(strokes))


def summarize(evaluations, threshold: float, stroke_count: Optional[int] = None) -> EvaluationSummary:
    """
    Score already-computed pairwise evaluations (stroke i vs reference i).
    stroke_count defaults to the number of evaluations.
    """
    evaluations = list(evaluations)
    if stroke_count is None:
        stroke_count = len(evaluations)
    if not evaluations:
        return empty_summary(stroke_count)

    n = len(evaluations)
    coverage = sum(e.coverage for e in evaluations) / n
    average_deviation = sum(e.average_deviation for e in evaluations) / n

    normalized_deviation = max(average_deviation / threshold, config.DEVIATION_EPSILON)
    raw_score = coverage * 100 - normalized_deviation * config.PENALTY_WEIGHT
    score = int(round(max(0.0, min(100.0, raw_score))))

    return EvaluationSummary(
        score=score,
        coverage=coverage,
        average_deviation=average_deviation,
        stroke_count=stroke_count,
        message=score_message(score),
    )


if __name__ == "__main__":
    # Test
    reference = [(0.0, 0.0), (100.0, 0.0)]
    traced = [(0.0, 1.0), (50.0, 2.0), (100.0, 1.0)]
    result = evaluate_stroke(traced, reference, threshold=5.0)
    print(f"Coverage: {result.coverage:.2f}")
    print(f"Deviation: {result.average_deviation:.2f}")
    print(evaluate_drawing([traced], [reference], threshold=5.0))
