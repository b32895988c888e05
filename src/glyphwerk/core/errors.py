"""Exceptions raised by the Glyphwerk core."""
from __future__ import annotations

from pathlib import Path


class GlyphwerkError(Exception):
    """Base class for every error the pipeline reports."""


class ConfigError(GlyphwerkError):
    """The project file could not be read or has invalid values."""


class SourceNotFoundError(GlyphwerkError):
    """The icon source directory does not exist."""


class SourcePermissionError(GlyphwerkError):
    """A file or directory below the source root cannot be read."""


class CorruptStateError(GlyphwerkError):
    """The persisted code point registry is not a valid mapping."""


class RegistryPermissionError(GlyphwerkError):
    """The persisted code point registry exists but cannot be read."""


class RegistryExhaustedError(GlyphwerkError):
    """No Unicode scalar value is left to allocate."""


class CompilerError(GlyphwerkError):
    """The font compiler or a format transcoder rejected its input."""


class ArtifactWriteError(GlyphwerkError):
    """Writing one generated output file failed."""

    def __init__(self, artifact: str, path: Path, reason: str) -> None:
        super().__init__(f"Failed to write {artifact} ({path}): {reason}")
        self.artifact = artifact
        self.path = path
        self.reason = reason
