"""Extractor for yarn.lock files (classic v1 and berry)."""

from __future__ import annotations

import re

from devrecon.exceptions import ManifestParseError
from devrecon.manifests.registry import register_extractor

# classic: `  version "1.2.3"`   berry: `  version: 1.2.3`
_VERSION_RE = re.compile(r'^\s+version:?\s+"?([^"\s]+)"?\s*$')


def _descriptor_name(descriptor: str) -> str:
    """``@scope/pkg@^1.0.0`` -> ``@scope/pkg``; ``pkg@npm:^1.0.0`` -> ``pkg``."""
    descriptor = descriptor.strip().strip('"')
    if descriptor.startswith("@"):
        return "@" + descriptor[1:].partition("@")[0]
    return descriptor.partition("@")[0]


class YarnLockExtractor:
    manifest_type = "yarn.lock"
    lockfile = True

    def extract(self, content: str) -> dict[str, str]:
        deps: dict[str, str] = {}
        current: list[str] = []

        for lineno, raw_line in enumerate(content.splitlines(), start=1):
            if not raw_line.strip() or raw_line.lstrip().startswith("#"):
                continue

            if not raw_line[0].isspace():
                line = raw_line.rstrip()
                if not line.endswith(":"):
                    raise ManifestParseError(
                        self.manifest_type, f"line {lineno}: expected an entry header"
                    )
                names = [_descriptor_name(d) for d in line[:-1].split(",")]
                current = [n for n in names if n and n != "__metadata"]
                continue

            m = _VERSION_RE.match(raw_line)
            if m and current:
                for name in current:
                    deps.setdefault(name, m.group(1))
                current = []

        return deps


register_extractor(YarnLockExtractor())
