"""Project configuration and codebase discovery.

Precedence (highest first): CLI options, ``devrecon.toml`` at the project
root, environment variables, built-in defaults.

Example ``devrecon.toml``::

    tracked = ["firebase*", "typescript"]

    [codebases]
    backend = "adaptive-backend"
    frontend = "web"
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import structlog

from devrecon.exceptions import ConfigError, RootUnreadableError
from devrecon.manifests.locator import SKIP_DIRS, locate_all, locate_manifests
from devrecon.manifests.models import Codebase, LocatedCodebase

log = structlog.get_logger("devrecon.config")

CONFIG_FILENAME = "devrecon.toml"

# A shared SDK family and a shared compiler
_DEFAULT_TRACKED = "firebase*,typescript"


def default_tracked() -> list[str]:
    """Tracked package specs from DEVRECON_TRACKED (comma separated)."""
    raw = os.environ.get("DEVRECON_TRACKED", _DEFAULT_TRACKED)
    return [s.strip() for s in raw.split(",") if s.strip()]


@dataclass(frozen=True)
class ReconConfig:
    tracked: tuple[str, ...] = ()
    codebases: dict[str, str] = field(default_factory=dict)  # name -> path


def check_root(root: Path) -> Path:
    """Resolve *root* and make sure it can be listed; raise otherwise."""
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise RootUnreadableError(str(root), "no such directory")
    if not resolved.is_dir():
        raise RootUnreadableError(str(root), "not a directory")
    try:
        with os.scandir(resolved):
            pass
    except OSError as e:
        raise RootUnreadableError(str(root), e.strerror or str(e)) from e
    return resolved


def load_config(root: Path) -> ReconConfig:
    """Read ``devrecon.toml`` from *root*; a missing file yields an empty config."""
    path = root / CONFIG_FILENAME
    if not path.is_file():
        return ReconConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    tracked = data.get("tracked", [])
    if not isinstance(tracked, list) or not all(isinstance(t, str) for t in tracked):
        raise ConfigError(f"{path}: 'tracked' must be a list of strings")

    codebases = data.get("codebases", {})
    if not isinstance(codebases, dict) or not all(
        isinstance(v, str) for v in codebases.values()
    ):
        raise ConfigError(f"{path}: 'codebases' must be a table of name = \"path\"")

    log.debug("config.loaded", path=str(path), tracked=tracked, codebases=list(codebases))
    return ReconConfig(tracked=tuple(tracked), codebases=dict(codebases))


def parse_codebase_option(value: str) -> tuple[str, str]:
    """``"backend=services/api"`` -> ``("backend", "services/api")``."""
    name, sep, path = value.partition("=")
    name, path = name.strip(), path.strip()
    if not sep or not name or not path:
        raise ValueError(f"expected NAME=PATH, got {value!r}")
    return name, path


def configured_codebases(root: Path, mapping: Mapping[str, str]) -> list[Codebase]:
    """Turn ``{name: path}`` into codebases; relative paths are under *root*."""
    return [Codebase(name=name, root=(root / path).resolve()) for name, path in mapping.items()]


def discover_codebases(root: Path, max_workers: int | None = None) -> list[LocatedCodebase]:
    """Every immediate subdirectory holding a recognized manifest is a codebase.

    Manifests sitting directly in *root* make the root a codebase too,
    listed first and limited to those root-level files so it does not
    repeat the subdirectories.  When no subdirectory qualifies, the root
    is the single codebase and is walked in full.
    """
    children = sorted(
        (
            p
            for p in root.iterdir()
            if p.is_dir() and not p.name.startswith(".") and p.name not in SKIP_DIRS
        ),
        key=lambda p: p.name,
    )
    located = locate_all([Codebase(name=p.name, root=p) for p in children], max_workers)
    located = [lc for lc in located if lc.manifests]
    root_codebase = Codebase(name=root.name or str(root), root=root)
    if not located:
        log.debug("config.root_as_codebase", root=str(root))
        return locate_all([root_codebase])

    top_level = locate_manifests(root_codebase, max_depth=0)
    if top_level:
        log.debug("config.root_manifests", root=str(root), count=len(top_level))
        located.insert(0, LocatedCodebase(codebase=root_codebase, manifests=tuple(top_level)))
    return located


def resolve_codebases(
    root: Path,
    mapping: Mapping[str, str] | None = None,
    max_workers: int | None = None,
) -> list[LocatedCodebase]:
    """Configured codebases when any are given, directory discovery otherwise."""
    if mapping:
        return locate_all(configured_codebases(root, mapping), max_workers)
    return discover_codebases(root, max_workers)
