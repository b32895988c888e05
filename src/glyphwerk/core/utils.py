"""Utility helpers used across the Glyphwerk core modules."""
from __future__ import annotations

from pathlib import Path
import re
import unicodedata
from typing import Tuple, Union


_DIGITS_RE = re.compile(r"(\d+)")
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[^\W\dA-Z_]+|\d+")
_CSS_SINGLE_ESCAPE_RE = re.compile(r"[ -,./:-@\[-^`{-~]")
_CSS_EXCESS_SPACE_RE = re.compile(r"(^|\\+)?(\\[A-F0-9]{1,6}) (?![a-fA-F0-9 ])")
_FILENAME_ILLEGAL_RE = re.compile(r'[/?<>\\:*|"\x00-\x1f\x80-\x9f]')
_FILENAME_RESERVED_RE = re.compile(r"^\.+$")
_FILENAME_WINDOWS_RE = re.compile(r"^(con|prn|aux|nul|com\d|lpt\d)(\..*)?$", re.IGNORECASE)
_FILENAME_TRAILING_RE = re.compile(r"[. ]+$")


def fold_case(value: str) -> str:
    """Return ``value`` without accents and in case-folded form."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold()


def natural_key(value: str) -> Tuple[Tuple[Union[str, int], ...], str]:
    """Sort key comparing digit runs by value and letters case-insensitively.

    ``icon2`` sorts before ``icon10``. The raw string is the final tie-breaker
    so two different strings never compare equal.
    """
    parts = _DIGITS_RE.split(fold_case(value))
    chunks = tuple(int(part) if index % 2 else part for index, part in enumerate(parts))
    return chunks, value


def camel_case(value: str) -> str:
    """Join the words of ``value`` as camelCase (``arrow-left`` -> ``arrowLeft``)."""
    words = _WORD_RE.findall(value)
    if not words:
        return ""
    head, *tail = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in tail)


def _css_escape(value: str, *, identifier: bool, quote: str = "'") -> str:
    pieces = []
    for char in value:
        code = ord(char)
        if code < 0x20 or code > 0x7E:
            pieces.append(f"\\{code:X} ")
        elif char == "\\" or (identifier and _CSS_SINGLE_ESCAPE_RE.match(char)) or (
            not identifier and char == quote
        ):
            pieces.append("\\" + char)
        else:
            pieces.append(char)
    escaped = "".join(pieces)

    if identifier:
        if re.match(r"-[-\d]", escaped):
            escaped = "\\-" + escaped[1:]
        elif escaped[:1].isdigit():
            escaped = f"\\3{escaped[0]} {escaped[1:]}"

    def _trim(match: re.Match) -> str:
        backslashes = match.group(1)
        if backslashes and len(backslashes) % 2:
            return match.group(0)
        return (backslashes or "") + match.group(2)

    return _CSS_EXCESS_SPACE_RE.sub(_trim, escaped)


def css_string(value: str) -> str:
    """Return ``value`` as a quoted CSS string literal."""
    return f"'{_css_escape(value, identifier=False)}'"


def css_identifier(value: str) -> str:
    """Escape ``value`` so it can be used as a CSS class name or identifier."""
    return _css_escape(value, identifier=True)


def sanitize_filename(value: str, fallback: str = "icons") -> str:
    """Strip characters that are not allowed in file names on common platforms."""
    cleaned = _FILENAME_ILLEGAL_RE.sub("", value)
    cleaned = _FILENAME_RESERVED_RE.sub("", cleaned)
    cleaned = _FILENAME_WINDOWS_RE.sub("", cleaned)
    cleaned = _FILENAME_TRAILING_RE.sub("", cleaned)
    cleaned = cleaned.encode("utf-8")[:255].decode("utf-8", "ignore")
    return cleaned or fallback


def ensure_directory(path: Path) -> None:
    """Create the directory (and parents) if it does not already exist."""
    path.mkdir(parents=True, exist_ok=True)
