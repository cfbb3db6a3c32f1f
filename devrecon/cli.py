"""CLI entry point: devrecon.

Subcommands:
    devrecon health [ROOT]            # Which dependency manifests each codebase has
    devrecon drift [ROOT]             # Version drift of tracked packages across codebases
    devrecon cross-platform [ROOT]    # Alias of drift
    devrecon cheatsheet [ROOT]        # File and per-language line counts
    devrecon analyze [ROOT]           # Directory tree
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from devrecon import __version__
from devrecon.config import (
    ReconConfig,
    check_root,
    default_tracked,
    load_config,
    parse_codebase_option,
    resolve_codebases,
)
from devrecon.core.logging import setup_logging
from devrecon.drift.reconciler import detect_drift, parse_tracked
from devrecon.exceptions import ReconError
from devrecon.health import health_check
from devrecon.manifests.models import LocatedCodebase
from devrecon.report import header, render_drift, render_health, render_line_counts
from devrecon.tools import count_files, count_lines, render_tree, tree_json

_ROOT_ARG = click.Path(file_okay=False, path_type=Path)


def _emit_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2))


def _warn(message: str) -> None:
    click.echo(f"Warning: {message}", err=True)


def _open_root(root: Path) -> tuple[Path, ReconConfig]:
    """Validate the project root and load its config, exiting 1 on failure."""
    try:
        resolved = check_root(root)
        return resolved, load_config(resolved)
    except ReconError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _codebases(
    root: Path, config: ReconConfig, options: tuple[str, ...], jobs: int
) -> list[LocatedCodebase]:
    mapping = dict(config.codebases)
    if options:
        mapping = {}
        for value in options:
            try:
                name, path = parse_codebase_option(value)
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="'--codebase'") from e
            mapping[name] = path

    located = resolve_codebases(root, mapping, max_workers=jobs)
    for lc in located:
        if not lc.codebase.root.is_dir():
            _warn(f"codebase '{lc.codebase.name}' root {lc.codebase.root} does not exist")
    return located


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="devrecon")
def main(verbose: bool) -> None:
    """devrecon: project reconnaissance for humans and LLMs."""
    setup_logging(verbose)


@main.command("health")
@click.argument("root", type=_ROOT_ARG, default=".")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-p", "--preview", default=0, type=click.IntRange(min=0), help="Show the first N lines of each manifest")
@click.option("-c", "--codebase", "codebase_opts", multiple=True, metavar="NAME=PATH", help="Codebase to inspect (repeatable)")
@click.option("-j", "--jobs", default=1, type=click.IntRange(min=1), help="Parallel directory walks")
def health(root: Path, as_json: bool, preview: int, codebase_opts: tuple[str, ...], jobs: int) -> None:
    """Report which dependency manifests each codebase has."""
    root, config = _open_root(root)
    located = _codebases(root, config, codebase_opts, jobs)
    entries = health_check(located)

    if as_json:
        _emit_json([e.to_dict() for e in entries])
        return
    roots = {lc.codebase.name: lc.codebase.root for lc in located}
    click.echo(render_health(entries, roots=roots, preview=preview))


@main.command("drift")
@click.argument("root", type=_ROOT_ARG, default=".")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-t", "--track", "tracked_opts", multiple=True, metavar="SPEC", help="Tracked package; trailing '*' matches a name family (repeatable)")
@click.option("-c", "--codebase", "codebase_opts", multiple=True, metavar="NAME=PATH", help="Codebase to compare (repeatable)")
@click.option("-j", "--jobs", default=1, type=click.IntRange(min=1), help="Parallel directory walks")
def drift(
    root: Path,
    as_json: bool,
    tracked_opts: tuple[str, ...],
    codebase_opts: tuple[str, ...],
    jobs: int,
) -> None:
    """Compare tracked package versions across codebases.

    Mismatches are findings, not failures: the exit status stays 0.
    """
    root, config = _open_root(root)
    specs = list(tracked_opts) or list(config.tracked) or default_tracked()
    try:
        tracked = [parse_tracked(s) for s in specs]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="'--track'") from e

    located = _codebases(root, config, codebase_opts, jobs)
    report = detect_drift(located, tracked)

    if as_json:
        _emit_json(report.to_dict())
        return
    click.echo(render_drift(report))


main.add_command(drift, "cross-platform")


@main.command("cheatsheet")
@click.argument("root", type=_ROOT_ARG, default=".")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def cheatsheet(root: Path, as_json: bool) -> None:
    """Quick project overview: file count and lines per language."""
    root, _ = _open_root(root)
    files = count_files(root)
    counts = count_lines(root)
    if counts.fallback_reason:
        _warn(f"{counts.fallback_reason}; using built-in line counter (install tokei for accurate counts)")

    if as_json:
        _emit_json({"files": files, "source": counts.source, "languages": counts.value})
        return
    click.echo(render_line_counts(root, files, counts.value))


@main.command("analyze")
@click.argument("root", type=_ROOT_ARG, default=".")
@click.option("-d", "--depth", default=2, type=click.IntRange(min=1), help="Tree depth")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def analyze(root: Path, depth: int, as_json: bool) -> None:
    """Show the project structure as a tree."""
    root, _ = _open_root(root)
    if as_json:
        _emit_json(tree_json(root, depth))
        return

    output = render_tree(root, depth)
    if output.fallback_reason:
        _warn(f"{output.fallback_reason}; using built-in tree renderer")
    click.echo(header(f"PROJECT STRUCTURE ANALYSIS (depth {depth})"))
    click.echo(output.value, nl=False)


if __name__ == "__main__":
    main()
