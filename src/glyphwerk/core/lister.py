"""Recursive, concurrent listing of every file below a directory."""
from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Tuple

from .errors import SourceNotFoundError, SourcePermissionError

logger = logging.getLogger(__name__)


def list_files(root: Path) -> List[Path]:
    """Return every regular file reachable from ``root``.

    Sibling order is unspecified; callers sort the result themselves.
    """
    return asyncio.run(list_files_async(root))


async def list_files_async(root: Path) -> List[Path]:
    root = Path(root)
    try:
        files = await _walk(root)
    except FileNotFoundError as exc:
        raise SourceNotFoundError(f"Source directory not found: {exc.filename or root}") from exc
    except NotADirectoryError as exc:
        raise SourceNotFoundError(f"Source is not a directory: {exc.filename or root}") from exc
    except PermissionError as exc:
        raise SourcePermissionError(f"Permission denied: {exc.filename or root}") from exc
    logger.debug("Found %d files below %s", len(files), root)
    return files


async def _walk(directory: Path) -> List[Path]:
    entries = await asyncio.to_thread(_scan_directory, directory)
    files = [path for path, is_dir in entries if not is_dir]
    subdirectories = [path for path, is_dir in entries if is_dir]
    for nested in await asyncio.gather(*(_walk(child) for child in subdirectories)):
        files.extend(nested)
    return files


def _scan_directory(directory: Path) -> List[Tuple[Path, bool]]:
    entries: List[Tuple[Path, bool]] = []
    with os.scandir(directory) as iterator:
        for entry in iterator:
            if entry.is_dir():
                entries.append((directory / entry.name, True))
            elif entry.is_file():
                entries.append((directory / entry.name, False))
    return entries
