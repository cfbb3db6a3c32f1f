"""Extractor for pnpm-lock.yaml files (lockfile v5 through v9)."""

from __future__ import annotations

import yaml

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

_DEP_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


def _strip_peer_suffix(version: str) -> str:
    """``1.2.3(react@18.2.0)`` (v6+) and ``1.2.3_react@18.2.0`` (v5) -> ``1.2.3``."""
    version = version.split("(", 1)[0]
    if "_" in version and not version.startswith(("link:", "file:")):
        version = version.split("_", 1)[0]
    return version


def _importer(data: dict) -> dict:
    """The root project's dependency tables.

    v6+ workspaces nest them under ``importers['.']``; single-project
    lockfiles keep them at the top level.
    """
    importers = data.get("importers")
    if isinstance(importers, dict):
        root = importers.get(".")
        return root if isinstance(root, dict) else {}
    return data


class PnpmLockExtractor:
    manifest_type = "pnpm-lock.yaml"
    lockfile = True

    def extract(self, content: str) -> dict[str, str]:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ManifestParseError(self.manifest_type, "top-level value is not a mapping")

        project = _importer(data)
        deps: dict[str, str] = {}
        for section in _DEP_SECTIONS:
            table = project.get(section)
            if not isinstance(table, dict):
                continue
            for name, spec in table.items():
                if isinstance(spec, dict):
                    spec = spec.get("version")
                if spec is None:
                    continue
                deps.setdefault(str(name), _strip_peer_suffix(str(spec)))
        return deps


register_extractor(PnpmLockExtractor())
