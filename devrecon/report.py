"""Human-readable renderers for command output.

JSON output goes through each model's ``to_dict()``; this module only
produces the plain-text form.
"""

from __future__ import annotations

from collections.abc import Iterable
from itertools import groupby
from pathlib import Path

from devrecon.drift.models import DriftReport, Reason, Verdict, VersionEntry
from devrecon.health import HealthEntry


def header(title: str) -> str:
    return f"{title}\n{'=' * 60}"


def _describe(entry: VersionEntry) -> str:
    if entry.reason is Reason.FOUND:
        return f"{entry.matched_name} {entry.version}  ({entry.manifest})"
    if entry.reason is Reason.PARSE_ERROR:
        return f"parse error: {entry.detail}"
    return "not found"


def render_drift(report: DriftReport) -> str:
    lines = [header("CROSS-PLATFORM DEPENDENCY MAPPING")]
    if not report.codebases:
        lines.append("No codebases found.")
        return "\n".join(lines)

    width = max(len(name) for name in report.codebases)
    for pkg in report.packages:
        lines.append("")
        lines.append(f"{pkg.package}  [{pkg.verdict.value}]")
        for entry in pkg.entries:
            lines.append(f"  {entry.codebase:<{width}}  {_describe(entry)}")

    mismatched = sum(1 for p in report.packages if p.verdict is Verdict.MISMATCHED)
    lines.append("")
    lines.append(
        f"{len(report.packages)} package(s) tracked across "
        f"{len(report.codebases)} codebase(s): {mismatched} mismatched"
    )
    return "\n".join(lines)


def _preview(path: Path, max_lines: int) -> list[str]:
    try:
        with path.open(encoding="utf-8-sig", errors="replace") as fh:
            return [line.rstrip("\n") for _, line in zip(range(max_lines), fh)]
    except OSError as e:
        return [f"(cannot read: {e.strerror or e})"]


def render_health(
    entries: Iterable[HealthEntry],
    roots: dict[str, Path] | None = None,
    preview: int = 0,
) -> str:
    """One block per codebase; ``preview`` > 0 shows the head of each present manifest."""
    lines = [header("PROJECT HEALTH CHECK")]
    entries = list(entries)
    if not any(e.present for e in entries):
        lines.append("No dependency manifests found.")

    for codebase, group in groupby(entries, key=lambda e: e.codebase):
        lines.append("")
        lines.append(codebase)
        for entry in group:
            if not entry.present:
                lines.append(f"  [-] {entry.manifest_type}")
                continue
            extra = f" (+{entry.count - 1} more)" if entry.count > 1 else ""
            lines.append(f"  [+] {entry.manifest_type}  {entry.path}{extra}")
            if preview > 0 and roots and codebase in roots and entry.path:
                for text in _preview(roots[codebase] / entry.path, preview):
                    lines.append(f"      | {text}")
    return "\n".join(lines)


def render_line_counts(root: Path, files: int, languages: dict[str, dict[str, int]]) -> str:
    lines = [
        header("PROJECT CHEATSHEET"),
        f"Project   : {root.name}",
        f"Directory : {root}",
        f"Files     : {files}",
    ]
    if languages:
        lines.append("Languages :")
        ranked = sorted(languages.items(), key=lambda kv: (-kv[1]["code"], kv[0]))
        for language, stats in ranked:
            lines.append(f"  {language} ({stats['code']} lines, {stats['files']} files)")
    else:
        lines.append("Languages : none detected")
    return "\n".join(lines)
