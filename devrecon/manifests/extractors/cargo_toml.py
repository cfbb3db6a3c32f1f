"""Extractor for Rust Cargo.toml files."""

from __future__ import annotations

import sys

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

_DEP_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")


def _parse_version(spec: object) -> str | None:
    """Extract version constraint from a dependency spec."""
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        version = spec.get("version")
        return version if isinstance(version, str) else None
    return None


class CargoTomlExtractor:
    manifest_type = "Cargo.toml"
    lockfile = False

    def extract(self, content: str) -> dict[str, str]:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e

        tables = [data.get(section, {}) for section in _DEP_SECTIONS]
        workspace = data.get("workspace", {})
        if isinstance(workspace, dict):
            tables.append(workspace.get("dependencies", {}))

        deps: dict[str, str] = {}
        for table in tables:
            if not isinstance(table, dict):
                continue
            for name, spec in table.items():
                # `{ workspace = true }` entries carry no version of their own
                version = _parse_version(spec)
                if version is not None:
                    deps.setdefault(name, version)
        return deps


register_extractor(CargoTomlExtractor())
