"""Extractor for PHP composer.json files."""

from __future__ import annotations

import json

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

_DEP_SECTIONS = ("require", "require-dev")


class ComposerJsonExtractor:
    manifest_type = "composer.json"
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
            # composer writes an empty array instead of an empty object
            if not isinstance(table, dict):
                continue
            for name, version in table.items():
                if isinstance(version, str):
                    deps.setdefault(name, version)
        return deps


register_extractor(ComposerJsonExtractor())
