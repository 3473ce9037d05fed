"""
Hand Tracking (optional camera input)

Wraps the MediaPipe Tasks HandLandmarker so the app can feed per-frame hand
landmarks into a PinchAdapter. Requires the `camera` extra (mediapipe).
"""

import logging
import os
import urllib.request
from typing import List

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

import config

logger = logging.getLogger(__name__)

MODELS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "models")
MODEL_PATH = os.path.join(MODELS_DIR, "hand_landmarker.task")


def ensure_model(path: str = MODEL_PATH, url: str = config.HAND_MODEL_URL) -> str:
    """Download the hand_landmarker model on first use."""
    if os.path.exists(path):
        return path
    os.makedirs(os.path.dirname(path), exist_ok=True)
    logger.info("Downloading hand_landmarker model to %s", path)
    urllib.request.urlretrieve(url, path)
    return path


class HandTracker:
    """Per-frame hand landmark detection in VIDEO running mode."""

    def __init__(self, max_hands: int = config.MAX_HANDS, model_path: str = MODEL_PATH):
        base_options = python.BaseOptions(model_asset_path=ensure_model(model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            num_hands=max_hands,
            min_hand_detection_confidence=config.HAND_DETECTION_CONFIDENCE,
            min_hand_presence_confidence=config.HAND_TRACKING_CONFIDENCE,
            running_mode=vision.RunningMode.VIDEO,
        )
        self.landmarker = vision.HandLandmarker.create_from_options(options)
        self.frame_count = 0

    def detect(self, frame: np.ndarray, timestamp_ms: int = None) -> List:
        """Landmark lists (normalized x/y) of every hand in a BGR frame."""
        self.frame_count += 1
        if timestamp_ms is None:
            timestamp_ms = self.frame_count * 33

        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = self.landmarker.detect_for_video(mp_image, timestamp_ms)
        return list(result.hand_landmarks or [])

    def close(self):
        self.landmarker.close()

