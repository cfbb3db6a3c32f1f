"""Version reconciler — compare tracked package versions across codebases."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

import structlog

from devrecon.drift.models import (
    DriftReport,
    PackageDrift,
    Reason,
    TrackedPackage,
    Verdict,
    VersionEntry,
)
from devrecon.exceptions import ManifestParseError
from devrecon.manifests.locator import RECOGNIZED_MANIFESTS, primary_manifests
from devrecon.manifests.models import LocatedCodebase, Manifest
from devrecon.manifests.registry import get_extractor

log = structlog.get_logger("devrecon.reconciler")


def parse_tracked(spec: str) -> TrackedPackage:
    """``"firebase*"`` -> prefix family, anything else -> exact name."""
    spec = spec.strip()
    if not spec or spec == "*":
        raise ValueError(f"invalid tracked package spec: {spec!r}")
    if spec.endswith("*"):
        return TrackedPackage(name=spec[:-1], prefix=True)
    return TrackedPackage(name=spec)


def match_dependency(
    deps: Mapping[str, str], tracked: TrackedPackage
) -> tuple[str, str] | None:
    """Find *tracked* in a ``{name: version}`` map.

    In prefix mode several names can match; the lexically-first one wins.
    """
    if not tracked.prefix:
        version = deps.get(tracked.name)
        return (tracked.name, version) if version is not None else None
    candidates = sorted(name for name in deps if tracked.matches(name))
    if not candidates:
        return None
    if len(candidates) > 1:
        log.debug(
            "reconciler.prefix_multiple",
            package=tracked.label,
            candidates=candidates,
            selected=candidates[0],
        )
    return candidates[0], deps[candidates[0]]


def _consult_order(primaries: Mapping[str, Manifest]) -> list[Manifest]:
    """Declaration files first, then lockfiles, each in recognized order."""
    ordered = [primaries[t] for t in RECOGNIZED_MANIFESTS if t in primaries]
    declared = [m for m in ordered if not _is_lockfile(m)]
    locked = [m for m in ordered if _is_lockfile(m)]
    return declared + locked


def _is_lockfile(manifest: Manifest) -> bool:
    extractor = get_extractor(manifest.manifest_type)
    return bool(extractor and extractor.lockfile)


class _ManifestCache:
    """Read and parse each manifest at most once per reconciliation."""

    def __init__(self) -> None:
        self._parsed: dict[Path, dict[str, str] | ManifestParseError] = {}

    def load(self, manifest: Manifest) -> dict[str, str] | ManifestParseError:
        if manifest.path not in self._parsed:
            self._parsed[manifest.path] = self._parse(manifest)
        return self._parsed[manifest.path]

    @staticmethod
    def _parse(manifest: Manifest) -> dict[str, str] | ManifestParseError:
        extractor = get_extractor(manifest.manifest_type)
        if extractor is None:
            return {}
        try:
            content = manifest.path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            err = ManifestParseError(manifest.manifest_type, f"cannot read file: {e}")
            log.warning("reconciler.read_error", manifest=str(manifest.path), error=str(e))
            return err
        try:
            return extractor.extract(content)
        except ManifestParseError as e:
            log.warning("reconciler.parse_error", manifest=str(manifest.path), error=str(e))
            return e


def _entry_for(
    codebase: str,
    primaries: Mapping[str, Manifest],
    tracked: TrackedPackage,
    cache: _ManifestCache,
) -> VersionEntry:
    errors: list[tuple[Manifest, ManifestParseError]] = []
    for manifest in _consult_order(primaries):
        loaded = cache.load(manifest)
        if isinstance(loaded, ManifestParseError):
            errors.append((manifest, loaded))
            continue
        hit = match_dependency(loaded, tracked)
        if hit is not None:
            name, version = hit
            return VersionEntry(
                codebase=codebase,
                package=tracked.label,
                reason=Reason.FOUND,
                version=version,
                matched_name=name,
                manifest=manifest.relpath,
            )

    if errors:
        manifest, err = errors[0]
        return VersionEntry(
            codebase=codebase,
            package=tracked.label,
            reason=Reason.PARSE_ERROR,
            manifest=manifest.relpath,
            detail=str(err),
        )
    return VersionEntry(codebase=codebase, package=tracked.label, reason=Reason.ABSENT)


def compute_verdict(entries: Iterable[VersionEntry]) -> Verdict:
    """Exact string comparison; no semver normalization."""
    found = [e.version for e in entries if e.reason is Reason.FOUND]
    distinct = set(found)
    if len(distinct) >= 2:
        return Verdict.MISMATCHED
    if len(found) >= 2:
        return Verdict.MATCHED
    return Verdict.INSUFFICIENT_DATA


def reconcile(
    primaries_by_codebase: Mapping[str, Mapping[str, Manifest]],
    tracked: Iterable[TrackedPackage],
) -> DriftReport:
    """Build the drift report.

    *primaries_by_codebase* maps codebase name -> {manifest type: primary
    manifest}.  Every (codebase, tracked package) pair gets exactly one
    entry; failures are reported as ``PARSE_ERROR`` and never raised.
    """
    cache = _ManifestCache()
    packages: list[PackageDrift] = []
    for pkg in tracked:
        entries = tuple(
            _entry_for(name, primaries, pkg, cache)
            for name, primaries in primaries_by_codebase.items()
        )
        verdict = compute_verdict(entries)
        log.debug("reconciler.verdict", package=pkg.label, verdict=verdict.value)
        packages.append(PackageDrift(package=pkg.label, verdict=verdict, entries=entries))
    return DriftReport(codebases=tuple(primaries_by_codebase), packages=tuple(packages))


def detect_drift(
    located: Iterable[LocatedCodebase], tracked: Iterable[TrackedPackage]
) -> DriftReport:
    """Locator output -> primary manifests -> drift report."""
    primaries = {
        lc.codebase.name: primary_manifests(lc.manifests) for lc in located
    }
    return reconcile(primaries, list(tracked))
