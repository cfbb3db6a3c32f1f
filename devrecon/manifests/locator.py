"""Manifest locator — find dependency manifests under a codebase root."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import structlog

from devrecon.manifests.models import Codebase, LocatedCodebase, Manifest

log = structlog.get_logger("devrecon.locator")

# Recognized manifest filenames; also the order used by health reports
RECOGNIZED_MANIFESTS: tuple[str, ...] = (
    "package.json",
    "pnpm-lock.yaml",
    "yarn.lock",
    "requirements.txt",
    "Pipfile",
    "composer.json",
    "pubspec.yaml",
    "Cargo.toml",
)

# Dependency caches, build output and VCS metadata: nested third-party
# manifests in here are not the codebase's own declarations.
SKIP_DIRS = {
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "bower_components",
    "__pycache__",
    ".tox",
    ".venv",
    "venv",
    ".eggs",
    "build",
    "dist",
    "target",
    "vendor",
    "coverage",
    ".next",
    ".nuxt",
    ".dart_tool",
    "Pods",
    ".gradle",
}


def locate_manifests(codebase: Codebase, max_depth: int | None = None) -> list[Manifest]:
    """Return every recognized manifest under *codebase*.

    Ordered by path depth, then by relative path, so the first manifest of
    each type is the shallowest and alphabetically first one.  A missing
    root yields an empty list instead of an error.  With *max_depth* the
    walk does not descend below that many directory levels (0 = root only).
    """
    root = codebase.root
    if not root.is_dir():
        log.info("locator.root_missing", codebase=codebase.name, root=str(root))
        return []

    wanted = set(RECOGNIZED_MANIFESTS)
    found: list[Manifest] = []

    def _on_error(err: OSError) -> None:
        log.debug("locator.walk_error", codebase=codebase.name, error=str(err))

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        if max_depth is not None and len(Path(dirpath).relative_to(root).parts) >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS]
        for name in filenames:
            if name not in wanted:
                continue
            path = Path(dirpath) / name
            if not path.is_file():
                continue
            found.append(
                Manifest(
                    codebase=codebase.name,
                    path=path,
                    relpath=path.relative_to(root).as_posix(),
                    manifest_type=name,
                )
            )

    found.sort(key=lambda m: (m.depth, m.relpath))
    log.debug("locator.done", codebase=codebase.name, count=len(found))
    return found


def primary_manifests(manifests: list[Manifest] | tuple[Manifest, ...]) -> dict[str, Manifest]:
    """Pick the first manifest of each type (input must be in locator order)."""
    primaries: dict[str, Manifest] = {}
    for manifest in manifests:
        primaries.setdefault(manifest.manifest_type, manifest)
    return primaries


def locate_all(codebases: list[Codebase], max_workers: int | None = None) -> list[LocatedCodebase]:
    """Locate manifests for every codebase.

    With ``max_workers > 1`` the walks run in a thread pool.  The result is
    always in *codebases* order, whatever order the walks finish in.
    """
    if max_workers and max_workers > 1 and len(codebases) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(locate_manifests, codebases))
    else:
        results = [locate_manifests(cb) for cb in codebases]
    return [
        LocatedCodebase(codebase=cb, manifests=tuple(found))
        for cb, found in zip(codebases, results)
    ]
