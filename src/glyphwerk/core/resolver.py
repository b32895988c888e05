"""Turn a raw file listing into the ordered set of icons to build."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List

from .lister import list_files
from .models import IconSource
from .utils import natural_key

logger = logging.getLogger(__name__)

ICON_SUFFIX = ".svg"
_SEPARATOR_RUN_RE = re.compile(r"/+")


def discover_icons(
    root: Path,
    directory_separator: str = "-",
    suffix: str = ICON_SUFFIX,
) -> List[IconSource]:
    """List ``root`` recursively and return its icons in build order."""
    return resolve_icons(root, list_files(root), directory_separator, suffix)


def resolve_icons(
    root: Path,
    paths: Iterable[Path],
    directory_separator: str = "-",
    suffix: str = ICON_SUFFIX,
) -> List[IconSource]:
    """Keep the icon files among ``paths`` and sort them naturally.

    The order only depends on the relative paths, never on the order in
    which the filesystem returned them.
    """
    root = Path(root)
    wanted = suffix.lower()
    icons: List[IconSource] = []
    for path in paths:
        path = Path(path)
        if path.suffix.lower() != wanted:
            continue
        relative = path.relative_to(root).as_posix()
        icons.append(
            IconSource(
                path=path,
                relative_path=relative,
                logical_name=logical_name(relative, directory_separator),
            )
        )
    icons.sort(key=lambda icon: natural_key(icon.relative_path))
    logger.debug("Resolved %d icons below %s", len(icons), root)
    return icons


def logical_name(relative_path: str, directory_separator: str = "-") -> str:
    """``arrows/left.svg`` -> ``arrows-left``."""
    stem = relative_path[: -len(Path(relative_path).suffix) or None]
    return _SEPARATOR_RUN_RE.sub(directory_separator, stem.replace("\\", "/"))
