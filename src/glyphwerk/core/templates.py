"""Text rendering for the stylesheet, preview page and mapping module."""
from __future__ import annotations

import html
import json
import os
from pathlib import Path
from typing import Dict, Iterable, List, Sequence

from .models import FontSettings, IconRecord
from .utils import css_identifier, css_string

# Web font formats in the order browsers should try them.
_CSS_FORMATS = (("woff2", "woff2"), ("woff", "woff"), ("ttf", "truetype"))


def _relative_url(target: Path, start: Path) -> str:
    return Path(os.path.relpath(target, start)).as_posix()


def render_stylesheet(records: Sequence[IconRecord], settings: FontSettings) -> str:
    font_name = css_string(settings.resolved_font_name())
    css_dir = settings.stylesheet_path().parent
    sources = [
        f"url({css_string(_relative_url(settings.font_path(fmt), css_dir))}) format('{css_format}')"
        for fmt, css_format in _CSS_FORMATS
        if fmt in settings.formats
    ]
    src = ",\n    ".join(sources)
    if settings.base:
        base_selector = f".{css_identifier(settings.base)}"
    else:
        prefix = css_identifier(settings.prefix)
        base_selector = f'[class^="{prefix}"], [class*=" {prefix}"]'

    content = (
        "@font-face {\n"
        f"  font-family: {font_name};\n"
        f"  src: {src};\n"
        "  font-weight: normal;\n"
        "  font-style: normal;\n"
        "}\n"
        f"{base_selector} {{\n"
        f"  font-family: {font_name} !important;\n"
        "  speak: none;\n"
        "  font-style: normal;\n"
        "  font-weight: normal;\n"
        "  font-variant: normal;\n"
        "  text-transform: none;\n"
        "  line-height: 1;\n"
        "  text-rendering: optimizeSpeed;\n"
        "  -webkit-font-smoothing: antialiased;\n"
        "  -moz-osx-font-smoothing: grayscale;\n"
        "}\n"
    )
    for record in records:
        content += (
            f"{record.css_selector}:before {{\n"
            f"  content: {css_string(record.character)}\n"
            "}\n"
        )
    return content


def mapping_keys(records: Sequence[IconRecord]) -> List[str]:
    """Unique mapping key per record, in record order.

    The first icon keeps its camelCased name. Later icons with the same name get
    the lowest numeric suffix that no other icon uses.
    """
    taken = {record.mapping_key for record in records}
    keys: List[str] = []
    used = set()
    for record in records:
        key = record.mapping_key
        if key in used:
            suffix = 2
            while f"{key}{suffix}" in taken:
                suffix += 1
            key = f"{key}{suffix}"
            taken.add(key)
        used.add(key)
        keys.append(key)
    return keys


def icon_mapping(records: Iterable[IconRecord]) -> Dict[str, str]:
    """Mapping key -> HTML class string."""
    records = list(records)
    return {key: record.html_class for key, record in zip(mapping_keys(records), records)}


def render_mapping(records: Iterable[IconRecord]) -> str:
    payload = json.dumps(icon_mapping(records), indent=4, ensure_ascii=False)
    return f"export default {payload};\n"


_PREVIEW_STYLE = """\
        .gw__page-title {
            font-family: Helvetica, Arial, Sans-Serif;
            margin: 20px 0 10px 0;
        }
        .gw__page-wrap {
            margin: 0 auto;
            max-width: 1000px;
            padding: 0 1rem;
        }
        .gw__container {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(100px, 1fr));
            grid-gap: 3px;
        }
        .gw__icon-link {
            display: block;
            text-align: center;
            border: 1px solid #ccc;
            padding: 5px;
            text-decoration: none;
            color: black;
            overflow: hidden;
        }
        .gw__icon-link:hover {
            background-color: #3af;
            color: white;
            border-color: #2e99e6;
        }
        .gw__icon-link > i {
            font-size: 32px;
            background-color: #e8e8e8;
        }
        .gw__icon-link:hover > i {
            background-color: #2e99e6;
        }
        .gw__classname {
            display: block;
            font-family: monospace;
            font-size: 10px;
            white-space: nowrap;
            max-width: 100%;
            overflow: hidden;
            text-overflow: ellipsis;
        }
"""

_PREVIEW_SCRIPT = """\
        document.querySelectorAll('.gw__icon-link').forEach(function (link) {
            link.addEventListener('click', function (event) {
                event.preventDefault();
                var classname = link.querySelector('.gw__classname');
                if (!classname) {
                    return;
                }
                var range = document.createRange();
                range.selectNodeContents(classname);
                var selection = window.getSelection();
                selection.removeAllRanges();
                selection.addRange(range);
                document.execCommand('copy');
            });
        });
"""


def render_preview(records: Iterable[IconRecord], settings: FontSettings) -> str:
    title = html.escape(settings.resolved_font_name())
    stylesheet = html.escape(
        _relative_url(settings.stylesheet_path(), settings.preview_path().parent)
    )
    tiles = "\n            ".join(
        '<a href="" class="gw__icon-link">'
        f'<i class="{html.escape(record.html_class)}"></i>'
        f'<span class="gw__classname">{html.escape(record.html_class)}</span>'
        "</a>"
        for record in records
    )
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8">\n'
        f"    <title>{title} Preview</title>\n"
        f'    <link rel="stylesheet" href="{stylesheet}">\n'
        "    <style>\n"
        f"{_PREVIEW_STYLE}"
        "    </style>\n"
        "  </head>\n"
        "  <body>\n"
        '    <div class="gw__page-wrap">\n'
        f'        <h1 class="gw__page-title">{title}</h1>\n'
        '        <div class="gw__container">\n'
        f"            {tiles}\n"
        "        </div>\n"
        "    </div>\n"
        "    <script>\n"
        f"{_PREVIEW_SCRIPT}"
        "    </script>\n"
        "  </body>\n"
        "</html>\n"
    )
