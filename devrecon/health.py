"""Health check — which recognized manifests each codebase has (presence only, nothing is parsed)."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from devrecon.manifests.locator import RECOGNIZED_MANIFESTS, primary_manifests
from devrecon.manifests.models import LocatedCodebase


@dataclass(frozen=True)
class HealthEntry:
    codebase: str
    manifest_type: str
    present: bool
    path: str | None = None  # primary manifest, relative to the codebase root
    count: int = 0  # how many manifests of this type (monorepo subpackages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "codebase": self.codebase,
            "manifest": self.manifest_type,
            "present": self.present,
            "path": self.path,
            "count": self.count,
        }


def health_check(located: Iterable[LocatedCodebase]) -> list[HealthEntry]:
    """One entry per (codebase, recognized manifest type)."""
    entries: list[HealthEntry] = []
    for lc in located:
        primaries = primary_manifests(lc.manifests)
        counts = Counter(m.manifest_type for m in lc.manifests)
        for manifest_type in RECOGNIZED_MANIFESTS:
            primary = primaries.get(manifest_type)
            entries.append(
                HealthEntry(
                    codebase=lc.codebase.name,
                    manifest_type=manifest_type,
                    present=primary is not None,
                    path=primary.relpath if primary else None,
                    count=counts.get(manifest_type, 0),
                )
            )
    return entries
