"""
Letter Template Library
- Loads the alphabet manifest and per-letter template JSON from disk
- Validates and converts them into LetterTemplate values
- Caches parsed templates by path
"""

import json
import logging
import os
from dataclasses import replace
from typing import Dict, Iterator, List, Optional

from models import LetterTemplate, Point, ReferenceStroke

logger = logging.getLogger(__name__)


class TemplateError(ValueError):
    """A template or manifest file is malformed."""


# ===============================
# Parsing
# ===============================

def _parse_point(raw) -> Point:
    if isinstance(raw, dict):
        try:
            return Point(float(raw["x"]), float(raw["y"]), raw.get("pressure"))
        except (KeyError, TypeError, ValueError) as e:
            raise TemplateError(f"Invalid point {raw!r}") from e
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        try:
            return Point(float(raw[0]), float(raw[1]))
        except (TypeError, ValueError) as e:
            raise TemplateError(f"Invalid point {raw!r}") from e
    raise TemplateError(f"Invalid point {raw!r}")


def _parse_stroke(raw, index: int) -> ReferenceStroke:
    if isinstance(raw, dict):
        if "path" not in raw:
            raise TemplateError(f"Stroke {index} has no 'path'")
        path = raw["path"]
        stroke_id = raw.get("id", str(index))
        weight = float(raw.get("weight", 1.0))
    else:
        path = raw
        stroke_id = str(index)
        weight = 1.0

    if not isinstance(path, list):
        raise TemplateError(f"Stroke {index} path must be a list")
    return ReferenceStroke(
        path=tuple(_parse_point(p) for p in path),
        id=stroke_id,
        weight=weight,
    )


def parse_template(data: Dict, alphabet_id: Optional[str] = None,
                   alphabet_name: Optional[str] = None) -> LetterTemplate:
    """Build a LetterTemplate from decoded template JSON."""
    if not isinstance(data, dict):
        raise TemplateError("Template must be a JSON object")

    if "id" not in data:
        raise TemplateError("Template has no 'id'")

    canvas = data.get("canvas", {})
    width = data.get("width", canvas.get("width"))
    height = data.get("height", canvas.get("height"))
    if width is None or height is None:
        raise TemplateError(f"Template {data['id']} has no canvas size")
    try:
        width, height = float(width), float(height)
    except (TypeError, ValueError) as e:
        raise TemplateError(f"Template {data['id']} has an invalid canvas size") from e
    if width <= 0 or height <= 0:
        raise TemplateError(f"Template {data['id']} has an empty canvas")

    raw_strokes = data.get("strokes", data.get("referenceStrokes"))
    if raw_strokes is None:
        raise TemplateError(f"Template {data['id']} has no strokes")

    return LetterTemplate(
        id=str(data["id"]),
        label=str(data.get("name", data.get("label", data["id"]))),
        width=width,
        height=height,
        reference_strokes=tuple(_parse_stroke(s, i) for i, s in enumerate(raw_strokes)),
        image=data.get("preview", data.get("image")),
        alphabet_id=data.get("alphabetId", alphabet_id),
        alphabet_name=data.get("alphabetName", alphabet_name),
    )


def _read_json(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise TemplateError(f"{path} is not valid JSON: {e}") from e


# ===============================
# Library
# ===============================

class TemplateLibrary:
    """Alphabets and their letter templates, read from a manifest file."""

    def __init__(self, manifest_path: str = "letters/manifest.json"):
        self.manifest_path = manifest_path
        self.base_dir = os.path.dirname(os.path.abspath(manifest_path))
        self._alphabets: List[Dict] = []
        self._cache: Dict[str, LetterTemplate] = {}
        self.load_manifest()

    def load_manifest(self):
        """Load the alphabet manifest."""
        if not os.path.exists(self.manifest_path):
            logger.warning("Template manifest %s not found", self.manifest_path)
            return

        data = _read_json(self.manifest_path)
        alphabets = data.get("alphabets") if isinstance(data, dict) else None
        if not isinstance(alphabets, list):
            raise TemplateError(f"{self.manifest_path} has no 'alphabets' list")

        for alphabet in alphabets:
            if "id" not in alphabet or not isinstance(alphabet.get("letters"), list):
                raise TemplateError(f"Malformed alphabet entry {alphabet!r}")
            for letter in alphabet["letters"]:
                if "id" not in letter or "template" not in letter:
                    raise TemplateError(f"Malformed letter entry {letter!r}")
        self._alphabets = alphabets
        logger.info(
            "Loaded %d alphabets from %s", len(alphabets), self.manifest_path
        )

    def alphabets(self) -> List[Dict]:
        return [{"id": a["id"], "name": a.get("name", a["id"])} for a in self._alphabets]

    def _alphabet(self, alphabet_id: str) -> Optional[Dict]:
        for alphabet in self._alphabets:
            if alphabet["id"] == alphabet_id:
                return alphabet
        return None

    def letters(self, alphabet_id: str) -> List[Dict]:
        alphabet = self._alphabet(alphabet_id)
        return list(alphabet["letters"]) if alphabet else []

    def resolve(self, template_path: str) -> str:
        if os.path.isabs(template_path):
            return template_path
        return os.path.normpath(os.path.join(self.base_dir, template_path))

    def load_template(self, template_path: str, alphabet: Optional[Dict] = None) -> LetterTemplate:
        """Load one letter template, served from cache after the first read."""
        path = self.resolve(template_path)
        if path in self._cache:
            return self._cache[path]

        alphabet = alphabet or {}
        template = parse_template(
            _read_json(path),
            alphabet_id=alphabet.get("id"),
            alphabet_name=alphabet.get("name"),
        )
        if template.image and not os.path.isabs(template.image):
            template = replace(template, image=self.resolve(template.image))
        self._cache[path] = template
        logger.debug("Loaded template %s (%d strokes)", template.id, template.stroke_count)
        return template

    def get_letter(self, alphabet_id: str, letter_id: str) -> Optional[LetterTemplate]:
        """Template of a letter by alphabet and letter id, or None if unknown."""
        alphabet = self._alphabet(alphabet_id)
        if alphabet is None:
            return None
        for letter in alphabet["letters"]:
            if letter.get("id") == letter_id:
                return self.load_template(letter["template"], alphabet)
        return None

    def iter_letters(self) -> Iterator[LetterTemplate]:
        """All letter templates in manifest order."""
        for alphabet in self._alphabets:
            for letter in alphabet["letters"]:
                yield self.load_template(letter["template"], alphabet)

    def __len__(self) -> int:
        return sum(len(a["letters"]) for a in self._alphabets)
