"""Data models for manifest discovery."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Codebase:
    """One independently versioned project root (e.g. backend, frontend, mobile)."""

    name: str
    root: Path


@dataclass(frozen=True)
class Manifest:
    """A dependency-declaration file found under a codebase root."""

    codebase: str
    path: Path  # absolute
    relpath: str  # POSIX, relative to the codebase root
    manifest_type: str  # recognized filename, e.g. "package.json"

    @property
    def depth(self) -> int:
        return self.relpath.count("/")


@dataclass(frozen=True)
class LocatedCodebase:
    """A codebase together with every manifest the locator found in it."""

    codebase: Codebase
    manifests: tuple[Manifest, ...]
