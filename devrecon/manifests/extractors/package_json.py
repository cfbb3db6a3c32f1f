"""Extractor for npm package.json files."""

from __future__ import annotations

import json

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

# Earlier sections win when a name is declared twice
_DEP_SECTIONS = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)


class PackageJsonExtractor:
    manifest_type = "package.json"
    lockfile = False

    def extract(self, content: str) -> dict[str, str]:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        if not isinstance(data, dict):
            raise ManifestParseError(self.manifest_type, "top-level value is not an object")

        deps: dict[str, str] = {}
        for section in _DEP_SECTIONS:
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, version in table.items():
                if isinstance(version, str):
                    deps.setdefault(name, version)
        return deps


register_extractor(PackageJsonExtractor())
