"""pytest configuration.

The project uses a flat layout (modules at the repository root). Put the root
on sys.path so `python -m pytest` works from a fresh checkout without
installing the package first.
"""

import sys
from pathlib import Path

import pytest


def _ensure_root_on_syspath() -> None:
    repo_root = str(Path(__file__).resolve().parents[1])
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


_ensure_root_on_syspath()

from models import LetterTemplate, Point, ReferenceStroke  # noqa: E402

MANIFEST_PATH = Path(__file__).resolve().parents[1] / "letters" / "manifest.json"


@pytest.fixture
def cross_template() -> LetterTemplate:
    """100x100 template: a horizontal stroke, then a vertical one."""
    return LetterTemplate(
        id="plus",
        label="+",
        width=100,
        height=100,
        reference_strokes=(
            ReferenceStroke(path=(Point(10, 50), Point(90, 50)), id="h"),
            ReferenceStroke(path=(Point(50, 10), Point(50, 90)), id="v"),
        ),
    )


@pytest.fixture
def manifest_path() -> str:
    return str(MANIFEST_PATH)
