"""Data models for cross-codebase version drift."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class Reason(str, enum.Enum):
    FOUND = "FOUND"
    ABSENT = "ABSENT"
    PARSE_ERROR = "PARSE_ERROR"


class Verdict(str, enum.Enum):
    MATCHED = "MATCHED"
    MISMATCHED = "MISMATCHED"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


@dataclass(frozen=True)
class TrackedPackage:
    """A dependency name, or a name family when ``prefix`` is set."""

    name: str
    prefix: bool = False

    @property
    def label(self) -> str:
        return f"{self.name}*" if self.prefix else self.name

    def matches(self, dependency: str) -> bool:
        if self.prefix:
            return dependency.startswith(self.name)
        return dependency == self.name


@dataclass(frozen=True)
class VersionEntry:
    """The declared version of one tracked package in one codebase."""

    codebase: str
    package: str  # tracked label, e.g. "firebase*"
    reason: Reason
    version: str | None = None
    matched_name: str | None = None  # actual dependency name (prefix mode)
    manifest: str | None = None  # relative path the value came from
    detail: str | None = None  # parse error message

    def to_dict(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "codebase": self.codebase,
            "version": self.version,
            "reason": self.reason.value,
            "matched": self.matched_name,
            "manifest": self.manifest,
        }
        if self.detail is not None:
            row["detail"] = self.detail
        return row


@dataclass(frozen=True)
class PackageDrift:
    package: str
    verdict: Verdict
    entries: tuple[VersionEntry, ...] = ()

    @property
    def found(self) -> tuple[VersionEntry, ...]:
        return tuple(e for e in self.entries if e.reason is Reason.FOUND)

    def to_dict(self) -> dict[str, Any]:
        return {
            "package": self.package,
            "verdict": self.verdict.value,
            "entries": [e.to_dict() for e in self.entries],
        }


@dataclass(frozen=True)
class DriftReport:
    """Result of one reconciliation run."""

    codebases: tuple[str, ...]
    packages: tuple[PackageDrift, ...] = field(default_factory=tuple)

    @property
    def has_drift(self) -> bool:
        return any(p.verdict is Verdict.MISMATCHED for p in self.packages)

    def to_dict(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.packages]
