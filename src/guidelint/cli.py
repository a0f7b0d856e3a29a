"""guidelint CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from guidelint import __version__


@click.group()
@click.version_option(version=__version__, prog_name="guidelint")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """guidelint - SQL and Elm style-guide linter."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.WARNING
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain", "github"]),
    default=None,
    help="Output format (default: rich if TTY, porcelain if piped).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file (default: .guidelint.yml in the project root).",
)
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Worker threads (default: chosen by the executor).",
)
@click.option(
    "--fail-on-warn",
    is_flag=True,
    default=False,
    help="Exit 1 when warnings are found, too.",
)
def lint(
    *,
    paths: tuple[Path, ...],
    fmt: str | None,
    config_path: Path | None,
    project: Path | None,
    jobs: int | None,
    fail_on_warn: bool,
) -> None:
    """Check SQL and Elm files against the style guides.

    PATHS are files or directories (default: the project root).
    Exit codes: 0 = no errors, 1 = errors found (or warnings with
    --fail-on-warn), 2 = configuration or file-read error.
    """
    from guidelint.errors import LintError
    from guidelint.linter import FORMATTERS
    from guidelint.linter import lint as run_lint

    project_root = project or Path.cwd()

    # Resolve output format: explicit flag > TTY detection.
    if fmt is None:
        fmt = "rich" if sys.stdout.isatty() else "porcelain"

    try:
        result = run_lint(
            list(paths) or [project_root],
            project_root=project_root,
            config_path=config_path,
            jobs=jobs,
        )
    except LintError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    output = FORMATTERS[fmt](result)
    if output:
        click.echo(output)

    if not result.passed or (fail_on_warn and result.warning_count):
        sys.exit(1)


@main.command("rules")
@click.option(
    "--language",
    type=click.Choice(["sql", "elm"]),
    default=None,
    help="Only list rules for this language.",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json"]),
    default="rich",
    help="Output format.",
)
def list_rules(*, language: str | None, fmt: str) -> None:
    """List the rule catalog, including advisory (unchecked) rules."""
    from guidelint.rules import build_default_registry

    registry = build_default_registry()
    rules = [rule for rule in registry if language is None or rule.language == language]

    if fmt == "json":
        payload = [
            {
                "id": rule.id,
                "language": rule.language,
                "severity": rule.severity,
                "kind": rule.kind,
                "automatable": rule.automatable,
                "description": rule.description,
            }
            for rule in rules
        ]
        click.echo(json.dumps(payload, indent=2))
        return

    from rich.console import Console
    from rich.table import Table

    table = Table(title="guidelint rules")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Lang")
    table.add_column("Severity")
    table.add_column("Checked", justify="center")
    table.add_column("Description")
    for rule in rules:
        table.add_row(
            rule.id,
            rule.language,
            rule.severity,
            "yes" if rule.enforced else "no",
            rule.description,
        )
    Console().print(table)
