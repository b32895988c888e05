"""Data models for Glyphwerk icon fonts."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .utils import camel_case, css_identifier, sanitize_filename

DEFAULT_START_CODE_POINT = 0xF000
FONT_FORMATS = ("ttf", "woff", "woff2")


@dataclass(frozen=True, slots=True)
class IconSource:
    """A single SVG file discovered below the source directory."""

    path: Path
    relative_path: str
    logical_name: str


@dataclass(frozen=True, slots=True)
class IconRecord:
    """An icon joined with its code point and the names derived for it."""

    source: IconSource
    code_point: int
    class_name: str
    css_selector: str
    html_class: str

    @property
    def name(self) -> str:
        return self.source.logical_name

    @property
    def character(self) -> str:
        return chr(self.code_point)

    @property
    def mapping_key(self) -> str:
        return camel_case(self.source.logical_name)


@dataclass(slots=True)
class FontSettings:
    """Options for one font build."""

    source_dir: Path
    out_dir: Path = field(default_factory=lambda: Path("."))
    font_name: str | None = None
    file_name: str | None = None
    prefix: str = ""
    base: str | None = None
    directory_separator: str = "-"
    fixed_width: bool = False
    start_code_point: int = DEFAULT_START_CODE_POINT
    font_height: int = 1000
    descent: int = 0
    center_horizontally: bool = True
    formats: List[str] = field(default_factory=lambda: list(FONT_FORMATS))

    def validate(self) -> None:
        """Raise ValueError when the settings cannot produce a usable font."""
        if not self.prefix and not self.base:
            raise ValueError("Either a class prefix, a base class or both must be provided")
        unknown = [fmt for fmt in self.formats if fmt not in FONT_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported font formats: {', '.join(unknown)}")
        if not self.formats:
            raise ValueError("At least one font format must be selected")
        if self.font_height <= 0:
            raise ValueError(f"Font height must be positive, got {self.font_height}")

    def resolved_font_name(self) -> str:
        return self.font_name or Path(self.source_dir).resolve().name

    def resolved_file_name(self) -> str:
        return self.file_name or sanitize_filename(self.resolved_font_name())

    def artifact_path(self, suffix: str) -> Path:
        """Return ``<out_dir>/<file name><suffix>``."""
        return self.out_dir / f"{self.resolved_file_name()}{suffix}"

    def font_path(self, fmt: str) -> Path:
        return self.artifact_path(f".{fmt}")

    def stylesheet_path(self) -> Path:
        return self.artifact_path(".css")

    def preview_path(self) -> Path:
        return self.artifact_path(".html")

    def mapping_path(self) -> Path:
        return self.artifact_path(".js")

    def registry_path(self) -> Path:
        return self.artifact_path("-chars.json")

    def make_record(self, icon: IconSource, code_point: int) -> IconRecord:
        """Derive the class names for ``icon`` and bundle them with its code point."""
        class_name = f"{self.prefix}{icon.logical_name}"
        selector = f".{css_identifier(class_name)}"
        if not self.prefix:
            selector = f".{css_identifier(self.base or '')}{selector}"
        html_class = f"{self.base} {class_name}" if self.base else class_name
        return IconRecord(
            source=icon,
            code_point=code_point,
            class_name=class_name,
            css_selector=selector,
            html_class=html_class,
        )
