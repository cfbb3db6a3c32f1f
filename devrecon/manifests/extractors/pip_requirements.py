"""Extractor for pip requirements.txt files."""

from __future__ import annotations

import re

from devrecon.manifests.registry import register_extractor

# package name, optional [extras], everything after = version specifier
_REQ_RE = re.compile(
    r"^([A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?)"  # package name
    r"(\[[^\]]*\])?"  # optional extras
    r"\s*"
    r"(.*)?$",
)

_EXACT_VERSION_RE = re.compile(r"^==\s*([^\s,]+)$")

# Declared without a version specifier
UNPINNED = "*"


class PipRequirementsExtractor:
    manifest_type = "requirements.txt"
    lockfile = False

    def extract(self, content: str) -> dict[str, str]:
        deps: dict[str, str] = {}

        for raw_line in content.splitlines():
            line = raw_line.split(" #", 1)[0].strip()
            if not line or line.startswith("#"):
                continue
            if line.startswith(("-r", "-c", "-e", "--")):
                continue
            # VCS / URL requirements carry no comparable version
            if "://" in line:
                continue

            # Strip environment markers
            marker_pos = line.find(";")
            if marker_pos != -1:
                line = line[:marker_pos].strip()

            m = _REQ_RE.match(line)
            if not m:
                continue

            name = m.group(1)
            constraint = (m.group(4) or "").strip()
            if constraint.startswith("@"):
                continue
            if not constraint:
                version = UNPINNED
            else:
                exact = _EXACT_VERSION_RE.match(constraint)
                version = exact.group(1) if exact else constraint
            deps.setdefault(name, version)

        return deps


register_extractor(PipRequirementsExtractor())
