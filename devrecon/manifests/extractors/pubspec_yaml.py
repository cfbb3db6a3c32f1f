"""Extractor for Dart/Flutter pubspec.yaml files."""

from __future__ import annotations

import yaml

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

_DEP_SECTIONS = ("dependencies", "dev_dependencies")

# `foo:` with no constraint means any version in pub
_ANY = "any"


def _parse_version(spec: object) -> str | None:
    if spec is None:
        return _ANY
    if isinstance(spec, (str, int, float)):
        return str(spec)
    if isinstance(spec, dict) and spec.get("version") is not None:
        return str(spec["version"])
    # sdk / path / git dependencies without a version
    return None


class PubspecYamlExtractor:
    manifest_type = "pubspec.yaml"
    lockfile = False

    def extract(self, content: str) -> dict[str, str]:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ManifestParseError(self.manifest_type, "top-level value is not a mapping")

        deps: dict[str, str] = {}
        for section in _DEP_SECTIONS:
            table = data.get(section)
            if not isinstance(table, dict):
                continue
            for name, spec in table.items():
                version = _parse_version(spec)
                if version is not None:
                    deps.setdefault(str(name), version)
        return deps


register_extractor(PubspecYamlExtractor())
