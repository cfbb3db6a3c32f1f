"""External collaborators — tokei, tree and eza, each with a built-in fallback.

None of this feeds the drift or health checks.  Every tool call is bounded
by a short timeout; a missing, failing or slow tool means the built-in
implementation answers instead.
"""

from __future__ import annotations

import json
import os
import shutil
import subprocess
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from devrecon.exceptions import ExternalToolUnavailable
from devrecon.manifests.locator import SKIP_DIRS

log = structlog.get_logger("devrecon.tools")

BUILTIN = "builtin"

# Rough tokei-style language names for the built-in line counter
_EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".c": "C",
    ".h": "C Header",
    ".cc": "C++",
    ".cpp": "C++",
    ".hpp": "C++ Header",
    ".cs": "C#",
    ".css": "CSS",
    ".dart": "Dart",
    ".go": "Go",
    ".html": "HTML",
    ".java": "Java",
    ".js": "JavaScript",
    ".jsx": "JSX",
    ".json": "JSON",
    ".kt": "Kotlin",
    ".md": "Markdown",
    ".php": "PHP",
    ".py": "Python",
    ".rb": "Ruby",
    ".rs": "Rust",
    ".scss": "Sass",
    ".sh": "Shell",
    ".swift": "Swift",
    ".toml": "TOML",
    ".ts": "TypeScript",
    ".tsx": "TSX",
    ".vue": "Vue",
    ".yaml": "YAML",
    ".yml": "YAML",
}


def _tool_timeout() -> float:
    return float(os.environ.get("DEVRECON_TOOL_TIMEOUT", "10"))


@dataclass
class ToolOutput:
    value: Any
    source: str  # tool name, or "builtin"
    fallback_reason: str | None = None


def which(tool: str) -> str | None:
    return shutil.which(tool)


def run_tool(cmd: list[str], timeout: float | None = None) -> str:
    """Run an external tool and return its stdout.

    Raises ``ExternalToolUnavailable`` when the binary is missing, times
    out, or exits non-zero.
    """
    tool = cmd[0]
    if which(tool) is None:
        raise ExternalToolUnavailable(tool, "not installed")
    timeout = _tool_timeout() if timeout is None else timeout
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ExternalToolUnavailable(tool, f"timed out after {timeout}s") from e
    except OSError as e:
        raise ExternalToolUnavailable(tool, str(e)) from e
    if result.returncode != 0:
        raise ExternalToolUnavailable(
            tool, f"exit {result.returncode}: {result.stderr.strip()[:200]}"
        )
    return result.stdout


def _walk(root: Path, skip: set[str]):
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in skip)
        for name in sorted(filenames):
            yield Path(dirpath) / name


# ── file and line counts ─────────────────────────────────────────────────


def count_files(root: Path) -> int:
    """Number of files under *root*, ignoring .git."""
    return sum(1 for _ in _walk(root, {".git"}))


def _tokei_counts(root: Path) -> dict[str, dict[str, int]]:
    raw = run_tool(["tokei", str(root), "--output", "json"])
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ExternalToolUnavailable("tokei", f"unparseable output: {e}") from e

    counts: dict[str, dict[str, int]] = {}
    for language, stats in data.items():
        if language == "Total" or not isinstance(stats, dict):
            continue
        counts[language] = {
            "files": len(stats.get("reports", [])),
            "code": int(stats.get("code", 0)),
            "comments": int(stats.get("comments", 0)),
            "blanks": int(stats.get("blanks", 0)),
        }
    return counts


def _builtin_counts(root: Path) -> dict[str, dict[str, int]]:
    """Extension-based count; comment lines are not told apart from code."""
    counts: dict[str, dict[str, int]] = defaultdict(
        lambda: {"files": 0, "code": 0, "comments": 0, "blanks": 0}
    )
    for path in _walk(root, SKIP_DIRS):
        language = _EXTENSION_TO_LANGUAGE.get(path.suffix.lower())
        if language is None:
            continue
        try:
            lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
        except OSError:
            continue
        stats = counts[language]
        stats["files"] += 1
        blanks = sum(1 for line in lines if not line.strip())
        stats["blanks"] += blanks
        stats["code"] += len(lines) - blanks
    return dict(sorted(counts.items()))


def count_lines(root: Path) -> ToolOutput:
    """Per-language counts: ``{language: {"files", "code", "comments", "blanks"}}``."""
    try:
        return ToolOutput(value=_tokei_counts(root), source="tokei")
    except ExternalToolUnavailable as e:
        log.info("tools.fallback", tool=e.tool, reason=e.reason)
        return ToolOutput(value=_builtin_counts(root), source=BUILTIN, fallback_reason=str(e))


# ── directory tree ───────────────────────────────────────────────────────


def _entries(directory: Path) -> list[Path]:
    try:
        children = [p for p in directory.iterdir() if p.name != ".git"]
    except OSError:
        return []
    return sorted(children, key=lambda p: (not p.is_dir(), p.name))


def tree_json(root: Path, depth: int) -> dict[str, Any]:
    """Nested ``{"type", "name", "contents"}`` nodes, directories first."""

    def _node(path: Path, level: int) -> dict[str, Any]:
        if not path.is_dir():
            return {"type": "file", "name": path.name}
        contents = [_node(c, level + 1) for c in _entries(path)] if level < depth else []
        return {"type": "directory", "name": path.name, "contents": contents}

    node = _node(root, 0)
    node["name"] = str(root)
    return node


def _builtin_tree(root: Path, depth: int) -> str:
    lines = [str(root)]

    def _render(directory: Path, prefix: str, level: int) -> None:
        if level >= depth:
            return
        children = _entries(directory)
        for i, child in enumerate(children):
            last = i == len(children) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{child.name}")
            if child.is_dir():
                _render(child, prefix + ("    " if last else "│   "), level + 1)

    _render(root, "", 0)
    return "\n".join(lines) + "\n"


def render_tree(root: Path, depth: int) -> ToolOutput:
    """Text tree: ``tree``, then ``eza``, then the built-in renderer."""
    attempts = [
        ["tree", "-L", str(depth), "-I", ".git", "--dirsfirst", "--noreport", str(root)],
        ["eza", "-T", "--level", str(depth), str(root)],
    ]
    reasons: list[str] = []
    for cmd in attempts:
        try:
            return ToolOutput(value=run_tool(cmd), source=cmd[0])
        except ExternalToolUnavailable as e:
            log.info("tools.fallback", tool=e.tool, reason=e.reason)
            reasons.append(str(e))
    return ToolOutput(
        value=_builtin_tree(root, depth), source=BUILTIN, fallback_reason="; ".join(reasons)
    )
