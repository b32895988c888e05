"""Helpers for reading and writing Glyphwerk project files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

import yaml

from .errors import ConfigError
from .models import FontSettings

_PROJECT_HEADER = "# Icon font project for Glyphwerk\n"


def parse_code_point(value: Any) -> int:
    """Accept ``61440``, ``"61440"``, ``"0xF000"`` or ``"U+F000"``."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid code point: {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text[:2].upper() == "U+":
        return int(text[2:], 16)
    return int(text, 0)


def _format_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = value.split(",")
    return [str(item).strip().lower() for item in value if str(item).strip()]


def _text(value: Any) -> str:
    return str(value)


# Project file key -> (FontSettings field, converter)
_FIELDS: Dict[str, tuple[str, Callable[[Any], Any]]] = {
    "source_dir": ("source_dir", Path),
    "out_dir": ("out_dir", Path),
    "font_name": ("font_name", _text),
    "file": ("file_name", _text),
    "prefix": ("prefix", _text),
    "base": ("base", _text),
    "directory_separator": ("directory_separator", _text),
    "fixed_width": ("fixed_width", bool),
    "start_code_point": ("start_code_point", parse_code_point),
    "font_height": ("font_height", int),
    "descent": ("descent", int),
    "center_horizontally": ("center_horizontally", bool),
    "formats": ("formats", _format_list),
}


def load_settings(path: Path | None = None, **overrides: Any) -> FontSettings:
    """Build settings from an optional project file plus explicit overrides.

    Overrides that are ``None`` are ignored, so command line flags only win
    when they were actually given. Relative paths in the project file are
    resolved against the directory containing it.
    """
    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_read_project(Path(path)))
    values.update({key: value for key, value in overrides.items() if value is not None})
    if "source_dir" not in values:
        raise ConfigError("No source directory given")
    return FontSettings(**values)


def save_settings(path: Path, settings: FontSettings) -> None:
    """Persist the settings as a YAML project file."""
    payload = {
        "source_dir": str(settings.source_dir),
        "out_dir": str(settings.out_dir),
        "font_name": settings.resolved_font_name(),
        "file": settings.resolved_file_name(),
        "prefix": settings.prefix,
        **({"base": settings.base} if settings.base else {}),
        "directory_separator": settings.directory_separator,
        "fixed_width": settings.fixed_width,
        "start_code_point": f"0x{settings.start_code_point:X}",
        "font_height": settings.font_height,
        "descent": settings.descent,
        "center_horizontally": settings.center_horizontally,
        "formats": list(settings.formats),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    yaml_text = yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)
    path.write_text(f"{_PROJECT_HEADER}{yaml_text}", encoding="utf-8")


def _read_project(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read project file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Project file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project file {path} must contain a mapping")

    unknown = sorted(set(data) - set(_FIELDS))
    if unknown:
        raise ConfigError(f"Unknown keys in project file {path}: {', '.join(unknown)}")

    values: Dict[str, Any] = {}
    for key, raw in data.items():
        if raw is None:
            continue
        field_name, convert = _FIELDS[key]
        try:
            values[field_name] = convert(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid value for '{key}' in {path}: {raw!r}") from exc

    for field_name in ("source_dir", "out_dir"):
        if field_name in values and not values[field_name].is_absolute():
            values[field_name] = path.parent / values[field_name]
    return values
