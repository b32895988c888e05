"""Glyph outline packing and font format conversion helpers."""
from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

from fontTools.fontBuilder import FontBuilder
from fontTools.misc.transform import Transform
from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.cu2quPen import Cu2QuPen
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.transformPen import TransformPen
from fontTools.pens.ttGlyphPen import TTGlyphPen
from fontTools.svgLib import SVGPath
from fontTools.ttLib import TTFont

from .errors import CompilerError

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_GLYPH_NAME_RE = re.compile(r"[^A-Za-z0-9_.]")
# Maximum deviation (font units) when approximating cubic curves with quadratics.
_CURVE_TOLERANCE = 1.0


@dataclass(slots=True)
class _PendingGlyph:
    name: str
    code_point: int
    outline: RecordingPen
    width: float
    bounds: Tuple[float, float, float, float] | None


class FontCompiler:
    """Collect SVG glyphs and pack them into a TrueType font.

    Every outline is scaled so the height of its viewBox matches the font
    height and flipped into the y-up font coordinate system.
    """

    def __init__(
        self,
        font_name: str,
        *,
        font_height: int = 1000,
        descent: int = 0,
        fixed_width: bool = False,
        center_horizontally: bool = True,
    ) -> None:
        self.font_name = font_name
        self.font_height = font_height
        self.descent = descent
        self.fixed_width = fixed_width
        self.center_horizontally = center_horizontally
        self._glyphs: List[_PendingGlyph] = []
        self._code_points: Dict[int, str] = {}
        self._finished = False

    def __len__(self) -> int:
        return len(self._glyphs)

    def add_glyph(self, source: Path, character: str, name: str) -> None:
        """Queue the outline in ``source`` as the glyph for ``character``."""
        if self._finished:
            raise CompilerError("Cannot add glyphs after the font was finished")
        code_point = ord(character)
        if code_point in self._code_points:
            raise CompilerError(
                f"U+{code_point:04X} is already used by glyph '{self._code_points[code_point]}'"
            )
        try:
            data = Path(source).read_bytes()
        except OSError as exc:
            raise CompilerError(f"Cannot read glyph source {source}: {exc}") from exc

        outline, width = self._record_outline(data, source)
        bounds_pen = BoundsPen(None)
        outline.replay(bounds_pen)
        self._code_points[code_point] = name
        self._glyphs.append(
            _PendingGlyph(
                name=name,
                code_point=code_point,
                outline=outline,
                width=width,
                bounds=bounds_pen.bounds,
            )
        )

    def finish(self) -> bytes:
        """Build the font from every queued glyph and return it as TTF bytes."""
        self._finished = True
        try:
            font = self._build()
            buffer = io.BytesIO()
            font.save(buffer)
        except CompilerError:
            raise
        except Exception as exc:
            raise CompilerError(f"Font compilation failed: {exc}") from exc
        logger.debug("Compiled %d glyphs into %s", len(self._glyphs), self.font_name)
        return buffer.getvalue()

    def _record_outline(self, data: bytes, source: Path) -> Tuple[RecordingPen, float]:
        try:
            svg = SVGPath.fromstring(data)
        except Exception as exc:
            raise CompilerError(f"Cannot parse SVG {source}: {exc}") from exc

        min_x, min_y, width, height = _view_box(svg.root, source)
        scale = self.font_height / height
        ascent = self.font_height + self.descent
        transform = Transform(scale, 0, 0, -scale, -min_x * scale, ascent + min_y * scale)

        outline = RecordingPen()
        try:
            svg.draw(TransformPen(outline, transform))
        except Exception as exc:
            raise CompilerError(f"Cannot read outlines of {source}: {exc}") from exc
        return outline, width * scale

    def _build(self) -> TTFont:
        advance = self.font_height
        if self.fixed_width and self._glyphs:
            advance = max(round(glyph.width) for glyph in self._glyphs)

        glyph_order = [".notdef"]
        cmap: Dict[int, str] = {}
        glyphs = {".notdef": TTGlyphPen(None).glyph()}
        advances = {".notdef": advance}
        used = {".notdef"}

        for glyph in self._glyphs:
            glyph_name = _unique_glyph_name(glyph.name, glyph.code_point, used)
            width = advance if self.fixed_width else round(glyph.width)
            shift = 0.0
            if self.center_horizontally and glyph.bounds is not None:
                x_min, _, x_max, _ = glyph.bounds
                shift = (width - (x_max - x_min)) / 2 - x_min

            tt_pen = TTGlyphPen(None)
            glyph.outline.replay(
                TransformPen(
                    Cu2QuPen(tt_pen, _CURVE_TOLERANCE, reverse_direction=True),
                    Transform().translate(shift, 0),
                )
            )
            glyph_order.append(glyph_name)
            glyphs[glyph_name] = tt_pen.glyph()
            advances[glyph_name] = width
            cmap[glyph.code_point] = glyph_name

        ascent = self.font_height + self.descent
        builder = FontBuilder(self.font_height, isTTF=True)
        builder.setupGlyphOrder(glyph_order)
        builder.setupCharacterMap(cmap)
        builder.setupGlyf(glyphs)

        glyf = builder.font["glyf"]
        metrics = {
            name: (advances[name], getattr(glyf[name], "xMin", 0)) for name in glyph_order
        }
        builder.setupHorizontalMetrics(metrics)
        builder.setupHorizontalHeader(ascent=ascent, descent=self.descent)
        builder.setupNameTable(
            {
                "familyName": self.font_name,
                "styleName": "Regular",
                "psName": _GLYPH_NAME_RE.sub("", self.font_name) or "Icons",
            }
        )
        builder.setupOS2(
            sTypoAscender=ascent,
            sTypoDescender=self.descent,
            sTypoLineGap=0,
            usWinAscent=ascent,
            usWinDescent=abs(self.descent),
        )
        builder.setupPost(isFixedPitch=1 if self.fixed_width else 0)
        return builder.font


class FormatTranscoder:
    """Turn the compiled TrueType container into each web font format."""

    _FLAVORS = {"ttf": None, "woff": "woff", "woff2": "woff2"}

    def transcode(self, container: bytes, fmt: str) -> bytes:
        if fmt not in self._FLAVORS:
            raise CompilerError(f"Unsupported font format: {fmt}")
        flavor = self._FLAVORS[fmt]
        if flavor is None:
            return container
        try:
            font = TTFont(io.BytesIO(container))
            font.flavor = flavor
            buffer = io.BytesIO()
            font.save(buffer)
        except Exception as exc:
            raise CompilerError(f"Converting font to {fmt} failed: {exc}") from exc
        return buffer.getvalue()


def _view_box(root, source: Path) -> Tuple[float, float, float, float]:
    view_box = root.get("viewBox")
    if view_box:
        values = [float(value) for value in _NUMBER_RE.findall(view_box)]
        if len(values) == 4 and values[2] > 0 and values[3] > 0:
            return values[0], values[1], values[2], values[3]
        raise CompilerError(f"{source}: invalid viewBox '{view_box}'")

    width = _length(root.get("width"))
    height = _length(root.get("height"))
    if width and height:
        return 0.0, 0.0, width, height
    raise CompilerError(f"{source}: neither viewBox nor width/height attributes found")


def _length(value: str | None) -> float | None:
    if not value:
        return None
    match = _NUMBER_RE.match(value.strip())
    if not match:
        return None
    number = float(match.group(0))
    return number if number > 0 else None


def _unique_glyph_name(name: str, code_point: int, used: set[str]) -> str:
    candidate = _GLYPH_NAME_RE.sub("_", name)[:63] or f"uni{code_point:04X}"
    if candidate[0].isdigit() or candidate[0] == "." or candidate in used:
        candidate = f"uni{code_point:04X}"
    used.add(candidate)
    return candidate
