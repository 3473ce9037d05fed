"""
UI and Rendering Layer
- Draws the tracing canvas from a session RenderState
- Reference guide, hit/miss feedback segments, live ink
- Score panel
"""

import logging
import math
import os
from typing import Dict, Optional, Sequence, Tuple

import cv2
import numpy as np

import config
from models import EvaluationSummary, LetterTemplate, StrokeEvaluation
from tracing_session import RenderState

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]


def _pixel(p) -> Tuple[int, int]:
    return int(round(p[0])), int(round(p[1]))


class UIRenderer:
    """Main UI rendering class."""

    def __init__(self, width: int = config.CANVAS_SIZE, height: int = config.CANVAS_SIZE):
        self.width = int(width)
        self.height = int(height)
        self._images: Dict[str, Optional[np.ndarray]] = {}

    @property
    def line_width(self) -> int:
        return max(config.MIN_LINE_WIDTH, int(min(self.width, self.height) * config.LINE_WIDTH_RATIO))

    def blank_canvas(self) -> np.ndarray:
        canvas = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        canvas[:] = config.UI_COLORS["background"]
        return canvas

    # ----------------------------
    # Template
    # ----------------------------

    def load_template_image(self, path: Optional[str]) -> Optional[np.ndarray]:
        """Template preview scaled to the canvas, or None if unavailable."""
        if not path:
            return None
        if path not in self._images:
            image = cv2.imread(path) if os.path.exists(path) else None
            if image is None:
                logger.warning("Template image %s could not be loaded", path)
            else:
                image = cv2.resize(image, (self.width, self.height))
            self._images[path] = image
        return self._images[path]

    def draw_template_image(self, canvas: np.ndarray, image: Optional[np.ndarray],
                            alpha: float = config.TEMPLATE_ALPHA) -> np.ndarray:
        if image is None:
            return canvas
        cv2.addWeighted(image, alpha, canvas, 1 - alpha, 0, canvas)
        return canvas

    def draw_reference_guide(
        self,
        canvas: np.ndarray,
        template: LetterTemplate,
        color: Color = config.UI_COLORS["guide"],
        thickness: int = config.GUIDE_THICKNESS,
    ) -> np.ndarray:
        """Faint reference strokes with a numbered start marker."""
        for i, stroke in enumerate(template.reference_strokes):
            if len(stroke.path) < 2:
                continue
            pts = np.array([_pixel(p) for p in stroke.path], dtype=np.int32)
            cv2.polylines(canvas, [pts], False, color, thickness, cv2.LINE_AA)

            start = _pixel(stroke.path[0])
            cv2.circle(canvas, start, thickness * 3, config.UI_COLORS["guide_start"], -1)
            cv2.putText(canvas, str(i + 1), (start[0] + 8, start[1] - 8),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.5, config.UI_COLORS["guide_start"], 1)
        return canvas

    # ----------------------------
    # Ink
    # ----------------------------

    def draw_evaluation_segments(
        self,
        canvas: np.ndarray,
        evaluations: Sequence[StrokeEvaluation],
        thickness: Optional[int] = None,
    ) -> np.ndarray:
        """Colour each resampled stroke segment by hit/miss."""
        thickness = thickness or self.line_width
        for evaluation in evaluations:
            for segment in evaluation.segments:
                cv2.line(canvas, _pixel(segment.start), _pixel(segment.end),
                         segment.color, thickness, cv2.LINE_AA)
        return canvas

    def draw_stroke(
        self,
        canvas: np.ndarray,
        stroke: Sequence,
        color: Color = config.UI_COLORS["active_stroke"],
        thickness: Optional[int] = None,
    ) -> np.ndarray:
        """Draw a raw stroke in canvas coordinates."""
        if not stroke or len(stroke) < 2:
            return canvas
        pts = np.array([_pixel(p) for p in stroke], dtype=np.int32)
        cv2.polylines(canvas, [pts], False, color, thickness or self.line_width, cv2.LINE_AA)
        return canvas

    # ----------------------------
    # Feedback
    # ----------------------------

    def draw_progress_bar(
        self,
        canvas: np.ndarray,
        progress: float,
        x: int,
        y: int,
        width: int = 200,
        height: int = 16
    ) -> np.ndarray:
        """Draw progress bar (0.0 to 1.0)."""
        progress = max(0.0, min(1.0, progress))

        # Background
        cv2.rectangle(canvas, (x, y), (x + width, y + height), config.UI_COLORS["progress_bg"], -1)

        # Progress
        filled_width = int(width * progress)
        cv2.rectangle(canvas, (x, y), (x + filled_width, y + height), config.UI_COLORS["hit"], -1)

        # Border
        cv2.rectangle(canvas, (x, y), (x + width, y + height), (100, 100, 100), 1)

        # Text
        text = f"{int(progress * 100)}%"
        cv2.putText(canvas, text, (x + width // 2 - 15, y + height - 3),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, (255, 255, 255), 1)

        return canvas

    def draw_feedback_panel(self, canvas: np.ndarray, summary: Optional[EvaluationSummary],
                            title: str = "") -> np.ndarray:
        """Semi-transparent score panel along the bottom edge."""
        h, w = canvas.shape[:2]
        panel_h = 96

        overlay = canvas.copy()
        cv2.rectangle(overlay, (0, h - panel_h), (w, h), config.UI_COLORS["panel"], -1)
        cv2.addWeighted(overlay, 0.7, canvas, 0.3, 0, canvas)

        if title:
            cv2.putText(canvas, title, (12, 24),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.7, config.UI_COLORS["panel"], 2)

        if summary is None:
            cv2.putText(canvas, "No template loaded", (12, h - panel_h + 30),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, config.UI_COLORS["text_dim"], 1)
            return canvas

        cv2.putText(canvas, f"Score: {summary.score}%", (12, h - panel_h + 28),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.75, config.UI_COLORS["text_white"], 2)
        cv2.putText(canvas, summary.message, (12, h - panel_h + 54),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.45, config.UI_COLORS["text_white"], 1)

        deviation = (
            f"{summary.average_deviation:.1f} px"
            if math.isfinite(summary.average_deviation) else "-"
        )
        cv2.putText(canvas, f"Deviation: {deviation}  Strokes: {summary.stroke_count}",
                    (12, h - 14), cv2.FONT_HERSHEY_SIMPLEX, 0.45,
                    config.UI_COLORS["text_dim"], 1)

        bar_w = min(200, w // 3)
        self.draw_progress_bar(canvas, summary.coverage, w - bar_w - 12, h - panel_h + 14, width=bar_w)
        return canvas

    # ----------------------------
    # Frame
    # ----------------------------

    def render(self, state: RenderState) -> np.ndarray:
        """Compose one frame from the session state."""
        canvas = self.blank_canvas()
        template = state.template
        if template is None:
            return self.draw_feedback_panel(canvas, None)

        self.draw_template_image(canvas, self.load_template_image(template.image))
        self.draw_reference_guide(canvas, template)
        self.draw_evaluation_segments(canvas, state.evaluations)
        if state.active_stroke is not None:
            self.draw_stroke(canvas, state.active_stroke)
        return self.draw_feedback_panel(canvas, state.summary, title=template.label)
