"""Template parsing and the on-disk template library."""

import json

import pytest

from models import Point
from templates import TemplateError, TemplateLibrary, parse_template


def test_parse_template_with_stroke_objects() -> None:
    template = parse_template({
        "id": "L",
        "name": "L",
        "width": 300,
        "height": 200,
        "preview": "L.png",
        "strokes": [
            {"id": "a", "path": [{"x": 1, "y": 2}, {"x": 3, "y": 4, "pressure": 0.5}], "weight": 2},
        ],
    })

    assert template.label == "L"
    assert (template.width, template.height) == (300.0, 200.0)
    assert template.image == "L.png"
    stroke = template.reference_strokes[0]
    assert stroke.id == "a"
    assert stroke.weight == 2.0
    assert stroke.path == (Point(1.0, 2.0), Point(3.0, 4.0, 0.5))


def test_parse_template_with_bare_point_lists() -> None:
    template = parse_template({
        "id": "T",
        "label": "Tee",
        "image": "t.png",
        "canvas": {"width": 100, "height": 100},
        "referenceStrokes": [[[0, 0], [10, 0]], [[5, 0], [5, 10]]],
    }, alphabet_id="latin")

    assert template.label == "Tee"
    assert template.image == "t.png"
    assert template.alphabet_id == "latin"
    assert template.stroke_count == 2
    assert template.reference_strokes[1].path[1] == Point(5.0, 10.0)


@pytest.mark.parametrize("data", [
    [],
    {"width": 10, "height": 10, "strokes": []},
    {"id": "x", "strokes": []},
    {"id": "x", "width": 0, "height": 10, "strokes": []},
    {"id": "x", "width": "wide", "height": 10, "strokes": []},
    {"id": "x", "width": 10, "height": 10},
    {"id": "x", "width": 10, "height": 10, "strokes": [{"points": []}]},
    {"id": "x", "width": 10, "height": 10, "strokes": [[{"x": 1}]]},
    {"id": "x", "width": 10, "height": 10, "strokes": [["a", "b"]]},
])
def test_parse_template_rejects_malformed_data(data) -> None:
    with pytest.raises(TemplateError):
        parse_template(data)


def test_bundled_library_loads(manifest_path) -> None:
    library = TemplateLibrary(manifest_path)

    assert len(library) == 4
    assert library.alphabets() == [{"id": "latin", "name": "Latin capitals"}]
    assert [letter["id"] for letter in library.letters("latin")] == ["L", "T", "A", "O"]

    a = library.get_letter("latin", "A")
    assert a.stroke_count == 3
    assert a.alphabet_name == "Latin capitals"
    assert library.get_letter("latin", "A") is a
    assert library.get_letter("latin", "Z") is None
    assert library.get_letter("cyrillic", "A") is None

    letters = list(library.iter_letters())
    assert [t.id for t in letters] == ["L", "T", "A", "O"]
    assert all(len(s.path) >= 2 for t in letters for s in t.reference_strokes)


def test_missing_manifest_gives_empty_library(tmp_path) -> None:
    library = TemplateLibrary(str(tmp_path / "nope.json"))
    assert len(library) == 0
    assert list(library.iter_letters()) == []


def test_malformed_manifest_raises(tmp_path) -> None:
    bad_json = tmp_path / "bad.json"
    bad_json.write_text("{not json", encoding="utf-8")
    with pytest.raises(TemplateError):
        TemplateLibrary(str(bad_json))

    no_letters = tmp_path / "manifest.json"
    no_letters.write_text(json.dumps({"alphabets": [{"id": "x"}]}), encoding="utf-8")
    with pytest.raises(TemplateError):
        TemplateLibrary(str(no_letters))


def test_relative_paths_resolve_against_manifest(tmp_path) -> None:
    (tmp_path / "glyphs").mkdir()
    (tmp_path / "glyphs" / "i.json").write_text(json.dumps({
        "id": "i",
        "width": 50,
        "height": 50,
        "preview": "i.png",
        "strokes": [[[25, 5], [25, 45]]],
    }), encoding="utf-8")
    (tmp_path / "manifest.json").write_text(json.dumps({
        "alphabets": [{"id": "mini", "name": "Mini", "letters": [{"id": "i", "template": "glyphs/i.json"}]}],
    }), encoding="utf-8")

    library = TemplateLibrary(str(tmp_path / "manifest.json"))
    template = library.get_letter("mini", "i")

    assert template.alphabet_id == "mini"
    assert template.image == str(tmp_path / "i.png")
