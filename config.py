"""
Configuration file for Calligraphy Tracing Tutor
Tune scoring strictness, input handling and appearance
"""

# ===============================
# WINDOW & DISPLAY
# ===============================

# Default tracing canvas (square, pixels)
CANVAS_SIZE = 540

WINDOW_NAME = "Calligraphy Tracing Tutor"

# Redraw rate of the app loop (one redraw per frame tick)
TARGET_FPS = 60

# UI Color scheme (B, G, R in OpenCV)
UI_COLORS = {
    "background": (211, 233, 245),
    "panel": (20, 30, 44),
    "text_white": (230, 245, 253),
    "text_dim": (180, 190, 200),
    "guide": (170, 170, 170),
    "guide_start": (120, 120, 120),
    "hit": (94, 197, 34),
    "miss": (68, 68, 239),
    "active_stroke": (246, 130, 59),
    "progress_bg": (50, 50, 50),
}

# Opacity of the template preview image under the ink
TEMPLATE_ALPHA = 0.22

# Ink thickness as a fraction of the smaller canvas side
LINE_WIDTH_RATIO = 0.02
MIN_LINE_WIDTH = 2

GUIDE_THICKNESS = 2

# ===============================
# STROKE CAPTURE
# ===============================

# Move samples closer than this to the previous point are coalesced (pixels)
COALESCE_DISTANCE = 0.5

# Pointer identity used for the mouse
MOUSE_POINTER_ID = 1

# Hand pointers are HAND_POINTER_BASE + hand index
HAND_POINTER_BASE = 100

# Thumb/index distance (normalized) that counts as "pen down"
PINCH_THRESHOLD_NORM = 0.06

# Camera settings for the optional hand-tracking input
CAMERA_INDEX = 0
HAND_DETECTION_CONFIDENCE = 0.7
HAND_TRACKING_CONFIDENCE = 0.7
MAX_HANDS = 1  # PinchAdapter pointer ids are list positions, stable for one hand only
HAND_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/hand_landmarker/"
    "hand_landmarker/float16/1/hand_landmarker.task"
)

# ===============================
# SMOOTHING
# ===============================

# Cardinal spline tension (0.5 = Catmull-Rom) and subdivisions per span
SPLINE_TENSION = 0.5
SPLINE_SEGMENTS = 16

# ===============================
# STROKE EVALUATION
# ===============================

# Resampling resolution (reference is denser: it is the ground truth)
STROKE_SAMPLES = 90
REFERENCE_SAMPLES = 160

# Hit radius as a fraction of min(canvas width, canvas height)
THRESHOLD_RATIO = 0.05

# Score = coverage * 100 - max(deviation / threshold, EPSILON) * PENALTY_WEIGHT
PENALTY_WEIGHT = 35
DEVIATION_EPSILON = 0.01

# ===============================
# FEEDBACK MESSAGES
# ===============================

PROMPT_MESSAGE = "Start drawing to get a score."

# (upper bound exclusive, message); the last entry catches everything else
SCORE_MESSAGES = [
    (30, "Try again - keep your line on the template."),
    (60, "Not bad! Watch the parts marked in red."),
    (85, "Very good! A few spots need polishing."),
    (None, "Excellent! Your strokes cover the template closely."),
]

# ===============================
# TEMPLATES
# ===============================

TEMPLATE_MANIFEST = "letters/manifest.json"

# ===============================
# KEYBOARD LAYOUT
# ===============================

KEYBOARD_LAYOUT = {
    "undo": "u",
    "reset": "c",
    "next_letter": "n",
    "previous_letter": "p",
    "quit": "q",
}

# ===============================
# LOGGING
# ===============================

LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# ===============================
# SYSTEM SETTINGS
# ===============================

APP_NAME = "Calligraphy Tracing Tutor"
APP_VERSION = "1.0.0"


def get_config(key: str, default=None):
    """Get configuration value by key."""
    parts = key.split(".")
    obj = globals()

    for part in parts:
        if isinstance(obj, dict):
            obj = obj.get(part, default)
        else:
            return default

    return obj if obj is not None else default


if __name__ == "__main__":
    # Print all configuration
    print("Calligraphy Tracing Tutor Configuration")
    print("=" * 50)
    print(f"Canvas: {CANVAS_SIZE}x{CANVAS_SIZE} @ {TARGET_FPS} FPS")
    print(f"Samples: stroke={STROKE_SAMPLES} reference={REFERENCE_SAMPLES}")
    print(f"Threshold ratio: {THRESHOLD_RATIO}")
    print(f"Penalty weight: {PENALTY_WEIGHT}")
    print(f"Template manifest: {TEMPLATE_MANIFEST}")
