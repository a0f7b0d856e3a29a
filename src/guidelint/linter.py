"""Linter orchestrator: discover files, scan, evaluate in parallel, aggregate, format."""

from __future__ import annotations

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from guidelint.config import LintConfig, find_config, load_config
from guidelint.core.evaluator import Violation, evaluate
from guidelint.core.report import Report, aggregate
from guidelint.core.scanner import normalize_text, scan
from guidelint.core.tokens import EXTENSION_LANGUAGES, SourceFile, language_for_path
from guidelint.errors import ConfigError, LintError, UnsupportedLanguageError
from guidelint.rules import build_default_registry
from guidelint.rules.common import UNSUPPORTED_LANGUAGE

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from guidelint.core.registry import RuleRegistry

logger = logging.getLogger(__name__)

# Directories never descended into during discovery
_EXCLUDE_DIRS = frozenset(
    {".git", "node_modules", "elm-stuff", "__pycache__", ".venv", "venv", ".tox"}
)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceInput:
    """An already-read file handed to the core."""

    path: str
    language: str
    text: str | bytes


@dataclass
class LintResult:
    """Result of a lint run."""

    report: Report = field(default_factory=Report)
    rules_evaluated: int = 0
    elapsed_ms: float = 0.0

    @property
    def violations(self) -> tuple[Violation, ...]:
        return self.report.violations

    @property
    def files_checked(self) -> int:
        return self.report.files_checked

    @property
    def error_count(self) -> int:
        return self.report.error_count

    @property
    def warning_count(self) -> int:
        return self.report.warning_count

    @property
    def passed(self) -> bool:
        return self.report.passed


# ---------------------------------------------------------------------------
# Per-file pipeline
# ---------------------------------------------------------------------------


def lint_source(
    source: SourceInput, registry: RuleRegistry, config: LintConfig
) -> tuple[SourceFile, list[Violation]]:
    """Scan and evaluate one file.  Never raises for linting-domain problems."""
    text = normalize_text(source.text)
    tokens = scan(text, source.language)
    source_file = SourceFile(
        path=source.path, language=source.language, text=text, tokens=tuple(tokens)
    )

    try:
        rules = registry.rules_for(source.language)
    except UnsupportedLanguageError as exc:
        logger.warning("%s: %s", source.path, exc)
        if not config.is_enabled(UNSUPPORTED_LANGUAGE.id):
            return source_file, []
        severity = config.severity_overrides.get(
            UNSUPPORTED_LANGUAGE.id, UNSUPPORTED_LANGUAGE.severity
        )
        label = source.language or "unknown"
        return source_file, [
            Violation(
                rule_id=UNSUPPORTED_LANGUAGE.id,
                path=source.path,
                line=1,
                column=1,
                message=f"No rules for language '{label}'; file was not checked",
                severity=severity,
            )
        ]

    violations = evaluate(
        tokens,
        config.select(rules),
        context=config.match_context(source.path),
        severity_overrides=config.severity_overrides,
    )
    if any(tok.kind == "unknown" for tok in tokens):
        logger.warning("%s: scanner skipped unrecognised input", source.path)
    logger.debug("%s: %d tokens, %d violations", source.path, len(tokens), len(violations))
    return source_file, violations


def enforced_rule_ids(registry: RuleRegistry, config: LintConfig) -> list[str]:
    """Ids of rules that can fire under *config*, in registration order."""
    return list(
        dict.fromkeys(
            rule.id for rule in registry if rule.enforced and config.is_enabled(rule.id)
        )
    )


def lint_sources(
    sources: Sequence[SourceInput],
    *,
    registry: RuleRegistry | None = None,
    config: LintConfig | None = None,
    jobs: int | None = None,
) -> Report:
    """Lint already-read sources and aggregate the report.

    Files are independent, so they run on a thread pool of *jobs* workers
    (``1`` runs inline, ``None`` lets the executor pick).  The aggregator
    sorts the merged result, so completion order does not matter.
    """
    if registry is None:
        registry = build_default_registry()
    if config is None:
        config = LintConfig()

    if jobs == 1 or len(sources) <= 1:
        per_file = [lint_source(source, registry, config)[1] for source in sources]
    else:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            per_file = list(
                pool.map(lambda source: lint_source(source, registry, config)[1], sources)
            )

    return aggregate(
        per_file,
        rule_ids=enforced_rule_ids(registry, config),
        files_checked=len(sources),
    )


# ---------------------------------------------------------------------------
# File discovery and reading
# ---------------------------------------------------------------------------


def discover_files(paths: Iterable[Path]) -> list[Path]:
    """Expand directories into the ``.sql``/``.elm`` files beneath them.

    Explicit file arguments are kept whatever their extension, so an
    unsupported file named on the command line is reported, not dropped.
    """
    found: set[Path] = set()
    for path in paths:
        if path.is_file():
            found.add(path)
            continue
        if not path.is_dir():
            msg = f"No such file or directory: {path}"
            raise LintError(msg)
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames[:] = sorted(d for d in dirnames if d not in _EXCLUDE_DIRS)
            for filename in filenames:
                if Path(filename).suffix.lower() in EXTENSION_LANGUAGES:
                    found.add(Path(dirpath) / filename)
    return sorted(found)


def _display_path(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def read_sources(files: Iterable[Path], root: Path) -> list[SourceInput]:
    """Read files as bytes; a read failure is fatal for the run."""
    sources: list[SourceInput] = []
    for path in files:
        try:
            data = path.read_bytes()
        except OSError as exc:
            msg = f"Cannot read {path}: {exc}"
            raise LintError(msg) from exc
        display = _display_path(path, root)
        sources.append(SourceInput(path=display, language=language_for_path(display), text=data))
    return sources


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def lint(
    paths: Sequence[Path],
    *,
    project_root: Path | None = None,
    config_path: Path | None = None,
    jobs: int | None = None,
) -> LintResult:
    """Run the whole pipeline over *paths*.

    Parameters
    ----------
    paths:
        Files and directories to check.  Directories are searched
        recursively for ``.sql`` and ``.elm`` files.
    project_root:
        Where ``.guidelint.yml`` is looked up and what reported paths are
        relative to.  Defaults to the current directory.
    config_path:
        Explicit configuration file; overrides the lookup.
    jobs:
        Worker threads for the per-file pipeline.

    Raises
    ------
    LintError
        When the configuration is invalid or a file cannot be read.
    """
    start = time.monotonic()
    root = project_root or Path.cwd()
    registry = build_default_registry()

    if config_path is None:
        config_path = find_config(root)
    try:
        config = load_config(config_path)
        config.validate(registry)
    except ConfigError as exc:
        msg = f"Invalid configuration: {exc}"
        raise LintError(msg) from exc
    if config_path is not None:
        logger.debug("Loaded configuration from %s", config_path)

    files = discover_files(paths)
    sources = read_sources(files, root)
    report = lint_sources(sources, registry=registry, config=config, jobs=jobs)

    elapsed = (time.monotonic() - start) * 1000
    return LintResult(
        report=report,
        rules_evaluated=len(report.counts_by_rule),
        elapsed_ms=elapsed,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: LintResult) -> str:
    """Format a LintResult for the terminal with Rich.

    Violations are grouped by file, followed by a per-rule summary table of
    the rules that fired and a closing status line.
    """
    from io import StringIO

    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    buf = StringIO()
    console = Console(file=buf, force_terminal=False, width=100, highlight=False)

    current_path: str | None = None
    for v in result.violations:
        if v.path != current_path:
            if current_path is not None:
                console.print()
            console.print(f"[bold]{escape(v.path)}[/bold]")
            current_path = v.path
        marker = "[red]✗[/red]" if v.severity == "error" else "[yellow]![/yellow]"
        console.print(
            f"  {marker} {v.line}:{v.column} [dim]{v.rule_id}[/dim] {escape(v.message)}"
        )

    fired = {rule_id: count for rule_id, count in result.report.counts_by_rule.items() if count}
    if fired:
        console.print()
        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Rule", style="cyan")
        table.add_column("Count", justify="right")
        for rule_id in sorted(fired):
            table.add_row(rule_id, str(fired[rule_id]))
        console.print(table)

    console.print()
    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"
    files = result.files_checked
    if result.violations:
        console.print(
            f"{result.error_count} errors, {result.warning_count} warnings "
            f"in {files} files ({result.rules_evaluated} rules, {elapsed_str})"
        )
    else:
        console.print(
            f"✓ No violations found in {files} files "
            f"({result.rules_evaluated} rules, {elapsed_str})"
        )
    return buf.getvalue().rstrip("\n")


def format_json(result: LintResult) -> str:
    """Format a LintResult as structured JSON with ``violations`` and ``summary``."""
    violations_list: list[dict[str, object]] = [
        {
            "rule_id": v.rule_id,
            "severity": v.severity,
            "path": v.path,
            "line": v.line,
            "column": v.column,
            "message": v.message,
        }
        for v in result.violations
    ]

    output: dict[str, object] = {
        "violations": violations_list,
        "summary": {
            "passed": result.passed,
            "files_checked": result.files_checked,
            "rules_evaluated": result.rules_evaluated,
            "violations_count": len(result.violations),
            "error_count": result.error_count,
            "warning_count": result.warning_count,
            "counts_by_rule": dict(result.report.counts_by_rule),
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_porcelain(result: LintResult) -> str:
    """One line per violation: ``path:line:column:severity:rule_id:message``.

    Returns an empty string when there are no violations.
    """
    return "\n".join(
        f"{v.path}:{v.line}:{v.column}:{v.severity}:{v.rule_id}:{v.message}"
        for v in result.violations
    )


def _escape_annotation(value: str, *, property_value: bool = False) -> str:
    escaped = value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    if property_value:
        escaped = escaped.replace(":", "%3A").replace(",", "%2C")
    return escaped


def format_github(result: LintResult) -> str:
    """GitHub Actions workflow commands, one annotation per violation."""
    lines: list[str] = []
    for v in result.violations:
        level = "error" if v.severity == "error" else "warning"
        path = _escape_annotation(v.path, property_value=True)
        title = _escape_annotation(v.rule_id, property_value=True)
        lines.append(
            f"::{level} file={path},line={v.line},col={v.column},title={title}::"
            f"{_escape_annotation(v.message)}"
        )
    return "\n".join(lines)


FORMATTERS = {
    "rich": format_rich,
    "json": format_json,
    "porcelain": format_porcelain,
    "github": format_github,
}
