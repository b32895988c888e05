"""Persistent assignment of code points to icon paths.

The registry file maps each icon's relative path to the code point it was
given the first time it was seen. Existing entries are never changed, new
icons get the next free value, and values of removed icons are not reused,
so characters in a rebuilt font keep pointing at the same icons.
"""
from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Mapping

from .errors import CorruptStateError, RegistryExhaustedError, RegistryPermissionError
from .models import DEFAULT_START_CODE_POINT

logger = logging.getLogger(__name__)

MAX_CODE_POINT = 0x10FFFF
_SURROGATES = range(0xD800, 0xE000)


class CodePointRegistry:
    """Path to code point table for a single build."""

    def __init__(
        self,
        assignments: Mapping[str, int] | None = None,
        base: int = DEFAULT_START_CODE_POINT,
    ) -> None:
        self._assignments: Dict[str, int] = dict(assignments or {})
        self._new_paths: List[str] = []
        highest = max(self._assignments.values(), default=base - 1)
        self._next = _skip_surrogates(max(base, highest + 1))

    @classmethod
    def load(cls, path: Path, base: int = DEFAULT_START_CODE_POINT) -> "CodePointRegistry":
        """Read the registry at ``path``; a missing file gives an empty registry."""
        try:
            raw = Path(path).read_bytes()
        except FileNotFoundError:
            logger.info("'%s' not found, generating new code points", path)
            return cls(base=base)
        except PermissionError as exc:
            raise RegistryPermissionError(f"Cannot read code point registry {path}: {exc}") from exc
        except OSError as exc:
            raise CorruptStateError(f"Cannot read code point registry {path}: {exc}") from exc

        try:
            data = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise CorruptStateError(f"Code point registry {path} is not valid UTF-8: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise CorruptStateError(f"Code point registry {path} is not valid JSON: {exc}") from exc
        return cls(_validate(data, path), base=base)

    @property
    def assignments(self) -> Dict[str, int]:
        return dict(self._assignments)

    @property
    def next_available(self) -> int:
        return self._next

    @property
    def new_paths(self) -> List[str]:
        """Paths that were given a code point by this registry instance."""
        return list(self._new_paths)

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self._assignments

    def __len__(self) -> int:
        return len(self._assignments)

    def resolve(self, relative_path: str) -> int:
        """Return the code point of ``relative_path``, allocating one if needed."""
        existing = self._assignments.get(relative_path)
        if existing is not None:
            return existing
        if self._next > MAX_CODE_POINT:
            raise RegistryExhaustedError(f"No code points left to assign to {relative_path}")
        code_point = self._next
        self._assignments[relative_path] = code_point
        self._new_paths.append(relative_path)
        self._next = _skip_surrogates(code_point + 1)
        return code_point

    def orphaned(self, present: Iterable[str]) -> List[str]:
        """Registered paths that are not among ``present``."""
        keep = set(present)
        return [path for path in self._assignments if path not in keep]

    def save(self, path: Path) -> None:
        """Write the whole table to ``path`` atomically.

        The file keeps the permissions of the one it replaces; a new file gets
        the usual ``0o666`` minus the process umask.
        """
        path = Path(path)
        payload = json.dumps(self._assignments, indent=4, ensure_ascii=False) + "\n"
        mode = _file_mode(path)
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        try:
            with handle:
                handle.write(payload)
            # NamedTemporaryFile always creates 0o600.
            os.chmod(handle.name, mode)
            os.replace(handle.name, path)
        except BaseException:
            Path(handle.name).unlink(missing_ok=True)
            raise


def _file_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _skip_surrogates(code_point: int) -> int:
    if code_point in _SURROGATES:
        return _SURROGATES.stop
    return code_point


def _validate(data: object, path: Path) -> Dict[str, int]:
    if not isinstance(data, dict):
        raise CorruptStateError(f"Code point registry {path} must contain a JSON object")

    seen: Dict[int, str] = {}
    for key, value in data.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise CorruptStateError(
                f"Code point registry {path}: value for '{key}' is not an integer: {value!r}"
            )
        if not 0 <= value <= MAX_CODE_POINT or value in _SURROGATES:
            raise CorruptStateError(
                f"Code point registry {path}: {value} for '{key}' is not a Unicode scalar value"
            )
        if value in seen:
            raise CorruptStateError(
                f"Code point registry {path}: '{key}' and '{seen[value]}' share code point {value}"
            )
        seen[value] = key
    return data
