"""
Calligraphy Tracing Tutor - Main Application

Trace the reference strokes of a letter with the mouse (or, with --camera,
by pinching thumb and index finger in front of the webcam). Every stroke is
smoothed and scored against the template; green segments are on the path,
red ones drift too far.

Keys: U undo, C clear, N/P next/previous letter, Q quit.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

import cv2

import config
from input_adapters import MouseAdapter, PinchAdapter, ViewTransform
from models import EvaluationSummary, LetterTemplate
from templates import TemplateLibrary
from tracing_session import TracingSession
from ui_renderer import UIRenderer

logger = logging.getLogger(__name__)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=config.APP_NAME)
    parser.add_argument("--templates", default=os.path.join(BASE_DIR, config.TEMPLATE_MANIFEST),
                        help="path to the template manifest JSON")
    parser.add_argument("--alphabet", default=None, help="alphabet id to start with")
    parser.add_argument("--letter", default=None, help="letter id to start with")
    parser.add_argument("--size", type=int, default=config.CANVAS_SIZE,
                        help="canvas size in pixels (square)")
    parser.add_argument("--camera", action="store_true",
                        help="also draw with a thumb/index pinch seen by the webcam")
    parser.add_argument("--log-level", default=config.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


class TracingApp:
    def __init__(self, library: TemplateLibrary, size: int = config.CANVAS_SIZE,
                 use_camera: bool = False):
        self.library = library
        self.letters: List[LetterTemplate] = list(library.iter_letters())
        self.letter_idx = 0
        self.size = size

        self.session = TracingSession(width=size, height=size)
        self.session.add_listener(self.on_evaluation)
        self.renderer = UIRenderer(size, size)
        self.mouse = MouseAdapter(ViewTransform(size, size, size, size))

        self.last_committed = 0

        self.cap = None
        self.tracker = None
        self.pinch = None
        if use_camera:
            self._open_camera()

    # ----------------------------
    # Letter Management
    # ----------------------------

    def select_letter(self, idx: int):
        if not self.letters:
            self.session.set_template(None)
            return
        self.letter_idx = idx % len(self.letters)
        template = self.letters[self.letter_idx]
        self.session.set_template(template)
        print(f"Letter {template.label} ({self.letter_idx + 1}/{len(self.letters)}), "
              f"{template.stroke_count} strokes")

    def select_by_id(self, alphabet_id: Optional[str], letter_id: Optional[str]):
        for i, template in enumerate(self.letters):
            if alphabet_id and template.alphabet_id != alphabet_id:
                continue
            if letter_id and template.id != letter_id:
                continue
            self.select_letter(i)
            return
        logger.warning("No letter matches alphabet=%s letter=%s", alphabet_id, letter_id)
        self.select_letter(0)

    # ----------------------------
    # Input
    # ----------------------------

    def on_mouse(self, event, x, y, flags, param=None):
        self.session.handle(self.mouse.translate(event, x, y, flags))

    def on_evaluation(self, summary: Optional[EvaluationSummary]):
        if summary is None:
            return
        committed = len(self.session.strokes)
        if committed > self.last_committed:
            print(f"Stroke {committed}: {summary.score}% - {summary.message}")
        self.last_committed = committed

    def _open_camera(self):
        from hand_tracking import HandTracker

        self.cap = cv2.VideoCapture(config.CAMERA_INDEX)
        if not self.cap.isOpened():
            print("Error: Camera failed to initialize.")
            print("Check camera permissions in system settings.")
            sys.exit(1)
        self.tracker = HandTracker()
        self.pinch = PinchAdapter(ViewTransform(1.0, 1.0, self.size, self.size, mirror=True))

    def poll_camera(self):
        ret, frame = self.cap.read()
        if not ret:
            logger.warning("Failed to read camera frame")
            return
        for sample in self.pinch.update(self.tracker.detect(frame)):
            self.session.handle(sample)

    def handle_key(self, key: int) -> bool:
        """Handle keyboard input. Returns False to quit."""
        keys = config.get_config("KEYBOARD_LAYOUT", {})
        if key == ord(keys["undo"]):
            self.session.undo()
        elif key == ord(keys["reset"]):
            self.session.reset()
        elif key == ord(keys["next_letter"]):
            self.select_letter(self.letter_idx + 1)
        elif key == ord(keys["previous_letter"]):
            self.select_letter(self.letter_idx - 1)
        elif key == ord(keys["quit"]):
            return False
        return True

    # ----------------------------
    # Main Loop
    # ----------------------------

    def run(self):
        """Main application loop: one redraw per frame tick."""
        cv2.namedWindow(config.WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
        cv2.setMouseCallback(config.WINDOW_NAME, self.on_mouse)
        frame_delay = max(1, int(1000 / config.TARGET_FPS))

        running = True
        while running:
            if self.cap is not None:
                self.poll_camera()

            cv2.imshow(config.WINDOW_NAME, self.renderer.render(self.session.render_state()))

            key = cv2.waitKey(frame_delay) & 0xFF
            if key != 255:
                running = self.handle_key(key)

        if self.cap is not None:
            self.cap.release()
            self.tracker.close()
        cv2.destroyAllWindows()


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format=config.LOG_FORMAT)

    library = TemplateLibrary(args.templates)
    app = TracingApp(library, size=args.size, use_camera=args.camera)
    if args.alphabet or args.letter:
        app.select_by_id(args.alphabet, args.letter)
    else:
        app.select_letter(0)
    app.run()


if __name__ == "__main__":
    main()
