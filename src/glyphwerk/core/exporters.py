"""Assemble an icon font and its companion files from a directory of SVGs."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Sequence, Tuple

from .compiler import FontCompiler, FormatTranscoder
from .errors import ArtifactWriteError
from .models import FontSettings, IconRecord
from .registry import CodePointRegistry
from .resolver import discover_icons
from .templates import mapping_keys, render_mapping, render_preview, render_stylesheet
from .utils import ensure_directory

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BuildResult:
    """Outcome of a font build."""

    out_dir: Path
    records: List[IconRecord]
    written: List[Path] = field(default_factory=list)
    failures: List[ArtifactWriteError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def build_webfont(
    settings: FontSettings,
    compiler: FontCompiler | None = None,
    transcoder: FormatTranscoder | None = None,
) -> BuildResult:
    """Build the font, stylesheet, preview, mapping and registry files.

    Discovery and registry errors abort before anything is written. Failing
    artifact writes are collected in the result; files written before a
    failure stay in place.
    """
    settings.validate()
    icons = discover_icons(settings.source_dir, settings.directory_separator)
    registry = CodePointRegistry.load(settings.registry_path(), base=settings.start_code_point)

    if compiler is None:
        compiler = FontCompiler(
            settings.resolved_font_name(),
            font_height=settings.font_height,
            descent=settings.descent,
            fixed_width=settings.fixed_width,
            center_horizontally=settings.center_horizontally,
        )
    transcoder = transcoder or FormatTranscoder()

    records: List[IconRecord] = []
    for icon in icons:
        record = settings.make_record(icon, registry.resolve(icon.relative_path))
        compiler.add_glyph(icon.path, record.character, record.name)
        records.append(record)

    _report_registry_changes(registry, records)
    _warn_mapping_collisions(records)

    container = compiler.finish()
    fonts = [(fmt, transcoder.transcode(container, fmt)) for fmt in settings.formats]

    try:
        ensure_directory(settings.out_dir)
    except OSError as exc:
        raise ArtifactWriteError("output directory", settings.out_dir, str(exc)) from exc
    result = BuildResult(out_dir=settings.out_dir, records=records)
    registry_path = settings.registry_path()
    _write_artifact(result, "registry", registry_path, lambda: registry.save(registry_path))
    for fmt, payload in fonts:
        path = settings.font_path(fmt)
        _write_artifact(result, f"{fmt} font", path, _bytes_writer(path, payload))
    for artifact, path, render in _text_artifacts(settings):
        _write_artifact(result, artifact, path, _text_writer(path, render(records)))
    return result


def _text_artifacts(
    settings: FontSettings,
) -> Sequence[Tuple[str, Path, Callable[[Sequence[IconRecord]], str]]]:
    return (
        ("stylesheet", settings.stylesheet_path(), lambda records: render_stylesheet(records, settings)),
        ("mapping", settings.mapping_path(), render_mapping),
        ("preview", settings.preview_path(), lambda records: render_preview(records, settings)),
    )


def _bytes_writer(path: Path, payload: bytes) -> Callable[[], None]:
    return lambda: path.write_bytes(payload)


def _text_writer(path: Path, content: str) -> Callable[[], None]:
    return lambda: path.write_text(content, encoding="utf-8")


def _write_artifact(
    result: BuildResult, artifact: str, path: Path, write: Callable[[], None]
) -> None:
    try:
        write()
    except OSError as exc:
        failure = ArtifactWriteError(artifact, path, exc.strerror or str(exc))
        logger.error("%s", failure)
        result.failures.append(failure)
        return
    logger.info("Wrote %s", path)
    result.written.append(path)


def _report_registry_changes(registry: CodePointRegistry, records: Sequence[IconRecord]) -> None:
    if registry.new_paths:
        logger.info("Assigned %d new code points", len(registry.new_paths))
    for path in registry.orphaned(record.source.relative_path for record in records):
        logger.debug("Keeping code point of removed icon %s", path)


def _warn_mapping_collisions(records: Sequence[IconRecord]) -> None:
    for record, key in zip(records, mapping_keys(records)):
        if key != record.mapping_key:
            logger.warning(
                "Mapping key '%s' of icon '%s' is already taken; using '%s'",
                record.mapping_key,
                record.name,
                key,
            )
