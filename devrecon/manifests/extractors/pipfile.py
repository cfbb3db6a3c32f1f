"""Extractor for pipenv Pipfile files."""

from __future__ import annotations

import sys

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

_DEP_SECTIONS = ("packages", "dev-packages")


def _parse_version(spec: object) -> str | None:
    """Version from ``"==1.0"``, ``"*"`` or ``{version = "..."}``; git/path deps have none."""
    if isinstance(spec, dict):
        spec = spec.get("version")
    if not isinstance(spec, str):
        return None
    spec = spec.strip()
    if spec.startswith("==") and "," not in spec:
        return spec[2:].strip()
    return spec


class PipfileExtractor:
    manifest_type = "Pipfile"
    lockfile = False

    def extract(self, content: str) -> dict[str, str]:
        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ManifestParseError(self.manifest_type, str(e)) from e

        deps: dict[str, str] = {}
        for section in _DEP_SECTIONS:
            table = data.get(section, {})
            if not isinstance(table, dict):
                continue
            for name, spec in table.items():
                version = _parse_version(spec)
                if version is not None:
                    deps.setdefault(name, version)
        return deps


register_extractor(PipfileExtractor())
