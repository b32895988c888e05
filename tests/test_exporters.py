"""Tests for assembling the font and its companion files."""
import io
import json
import logging
import re
from pathlib import Path

import pytest
from fontTools.ttLib import TTFont

from glyphwerk.core.errors import CorruptStateError, SourceNotFoundError
from glyphwerk.core.exporters import build_webfont
from glyphwerk.core.models import FontSettings

SQUARE = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24"><path d="M2 2h20v20H2z"/></svg>'


class RecordingCompiler:
    def __init__(self) -> None:
        self.glyphs = []
        self.finished = False

    def add_glyph(self, source, character, name) -> None:
        self.glyphs.append((Path(source).name, ord(character), name))

    def finish(self) -> bytes:
        self.finished = True
        return b"container"


class LabelTranscoder:
    def transcode(self, container: bytes, fmt: str) -> bytes:
        return container + b":" + fmt.encode("ascii")


def _make_icons(root: Path, *names: str) -> None:
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(SQUARE)


def _settings(tmp_path: Path, **kwargs) -> FontSettings:
    options = {
        "source_dir": tmp_path / "icons",
        "out_dir": tmp_path / "dist",
        "font_name": "Demo Icons",
        "prefix": "icon-",
    }
    options.update(kwargs)
    (tmp_path / "icons").mkdir(exist_ok=True)
    return FontSettings(**options)


def _build(settings: FontSettings, compiler=None):
    return build_webfont(settings, compiler or RecordingCompiler(), LabelTranscoder())


def _mapping(settings: FontSettings) -> dict:
    text = settings.mapping_path().read_text()
    assert text.startswith("export default ")
    assert text.endswith(";\n")
    return json.loads(text[len("export default "):-2])


def test_build_writes_every_artifact(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "home.svg", "nav/left.svg")

    result = _build(settings)

    assert result.ok
    dist = tmp_path / "dist"
    assert sorted(path.name for path in result.written) == sorted(
        [
            "Demo Icons-chars.json",
            "Demo Icons.ttf",
            "Demo Icons.woff",
            "Demo Icons.woff2",
            "Demo Icons.css",
            "Demo Icons.js",
            "Demo Icons.html",
        ]
    )
    assert (dist / "Demo Icons.woff2").read_bytes() == b"container:woff2"
    assert json.loads((dist / "Demo Icons-chars.json").read_text()) == {
        "home.svg": 0xF000,
        "nav/left.svg": 0xF001,
    }


def test_glyphs_are_submitted_in_resolved_order(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "icon10.svg", "icon2.svg", "icon1.svg")
    compiler = RecordingCompiler()

    _build(settings, compiler)

    assert compiler.finished
    assert compiler.glyphs == [
        ("icon1.svg", 0xF000, "icon1"),
        ("icon2.svg", 0xF001, "icon2"),
        ("icon10.svg", 0xF002, "icon10"),
    ]


def test_existing_code_points_survive_new_icons(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "a.svg", "b.svg")
    settings.out_dir.mkdir()
    settings.registry_path().write_text(json.dumps({"a.svg": 61440}))

    _build(settings)

    registry = json.loads(settings.registry_path().read_text())
    assert registry["a.svg"] == 61440
    assert registry["b.svg"] > 61440


def test_reordering_and_removal_keep_assignments(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "b.svg", "c.svg")
    _build(settings)
    first = json.loads(settings.registry_path().read_text())

    (settings.source_dir / "b.svg").unlink()
    _make_icons(settings.source_dir, "a.svg")
    compiler = RecordingCompiler()
    _build(settings, compiler)
    second = json.loads(settings.registry_path().read_text())

    assert second["c.svg"] == first["c.svg"]
    assert second["b.svg"] == first["b.svg"]
    assert second["a.svg"] == max(first.values()) + 1
    assert [glyph[2] for glyph in compiler.glyphs] == ["a", "c"]


def test_second_run_is_idempotent(tmp_path: Path) -> None:
    settings = _settings(tmp_path, base="icon")
    _make_icons(settings.source_dir, "x.svg", "deep/er/y.svg", "z2.svg", "z10.svg")

    _build(settings)
    outputs = [settings.registry_path(), settings.mapping_path(), settings.stylesheet_path()]
    before = [path.read_bytes() for path in outputs]
    _build(settings)
    after = [path.read_bytes() for path in outputs]

    assert before == after


def test_stylesheet_rules(tmp_path: Path) -> None:
    settings = _settings(tmp_path, formats=["woff2", "ttf"])
    _make_icons(settings.source_dir, "home.svg")

    _build(settings)
    css = settings.stylesheet_path().read_text()

    assert "font-family: 'Demo Icons';" in css
    assert "url('Demo Icons.woff2') format('woff2')" in css
    assert "url('Demo Icons.ttf') format('truetype')" in css
    assert "format('woff')" not in css
    assert '[class^="icon-"], [class*=" icon-"] {' in css
    assert ".icon-home:before {\n  content: '\\F000'\n}" in css


def test_base_class_without_prefix(tmp_path: Path) -> None:
    settings = _settings(tmp_path, prefix="", base="glyph")
    _make_icons(settings.source_dir, "home.svg")

    _build(settings)

    css = settings.stylesheet_path().read_text()
    assert ".glyph {\n  font-family" in css
    assert ".glyph.home:before" in css
    assert _mapping(settings) == {"home": "glyph home"}
    assert '<i class="glyph home"></i>' in settings.preview_path().read_text()


@pytest.mark.parametrize(
    "icons",
    [
        (),
        ("solo.svg",),
        ("one/two/three/deep.svg", "one/shallow.svg", "top.svg"),
    ],
)
def test_artifacts_list_the_same_icons(tmp_path: Path, icons) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, *icons)

    result = _build(settings)

    assert result.ok
    mapped = [value[len("icon-"):] for value in _mapping(settings).values()]
    css = settings.stylesheet_path().read_text()
    styled = re.findall(r"^\.icon-(.+?):before \{$", css, re.MULTILINE)
    page = settings.preview_path().read_text()
    previewed = re.findall(r'<span class="gw__classname">icon-(.+?)</span>', page)

    assert mapped == styled == previewed
    assert sorted(mapped) == sorted(record.name for record in result.records)
    assert len(mapped) == len(icons)
    assert "</html>" in page
    assert css.startswith("@font-face {")


def test_nested_icons_join_every_directory_level(tmp_path: Path) -> None:
    settings = _settings(tmp_path, directory_separator="_")
    _make_icons(settings.source_dir, "a/b/c/arrow-up.svg")

    _build(settings)

    assert _mapping(settings) == {"aBCArrowUp": "icon-a_b_c_arrow-up"}


def test_colliding_mapping_keys_get_numeric_suffix(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "a-b-2.svg", "a-b.svg", "a_b.svg")

    with caplog.at_level(logging.WARNING, logger="glyphwerk.core.exporters"):
        result = _build(settings)

    assert _mapping(settings) == {
        "aB2": "icon-a-b-2",
        "aB": "icon-a-b",
        "aB3": "icon-a_b",
    }
    assert len(_mapping(settings)) == len(result.records)
    assert "using 'aB3'" in caplog.text


def test_corrupt_registry_aborts_before_writing(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "a.svg")
    settings.out_dir.mkdir()
    settings.registry_path().write_text("not json")
    compiler = RecordingCompiler()

    with pytest.raises(CorruptStateError):
        _build(settings, compiler)

    assert compiler.glyphs == []
    assert sorted(path.name for path in settings.out_dir.iterdir()) == ["Demo Icons-chars.json"]
    assert settings.registry_path().read_text() == "not json"


def test_missing_source_aborts(tmp_path: Path) -> None:
    settings = FontSettings(source_dir=tmp_path / "missing", out_dir=tmp_path / "dist", prefix="i-")

    with pytest.raises(SourceNotFoundError):
        _build(settings)

    assert not (tmp_path / "dist").exists()


def test_failed_artifact_is_reported_and_others_written(tmp_path: Path) -> None:
    settings = _settings(tmp_path)
    _make_icons(settings.source_dir, "a.svg")
    settings.stylesheet_path().mkdir(parents=True)

    result = _build(settings)

    assert not result.ok
    assert [failure.artifact for failure in result.failures] == ["stylesheet"]
    assert result.failures[0].path == settings.stylesheet_path()
    assert settings.mapping_path().exists()
    assert settings.preview_path().exists()
    assert settings.registry_path().exists()


def test_invalid_settings_are_rejected(tmp_path: Path) -> None:
    settings = _settings(tmp_path, prefix="")

    with pytest.raises(ValueError):
        _build(settings)


def test_build_with_real_font_compiler(tmp_path: Path) -> None:
    settings = _settings(tmp_path, formats=["ttf", "woff"])
    _make_icons(settings.source_dir, "home.svg", "nav/left.svg")

    result = build_webfont(settings)

    assert result.ok
    font = TTFont(io.BytesIO(settings.font_path("ttf").read_bytes()))
    assert font.getBestCmap() == {0xF000: "home", 0xF001: "nav_left"}
    assert TTFont(io.BytesIO(settings.font_path("woff").read_bytes())).flavor == "woff"
    assert not settings.font_path("woff2").exists()
