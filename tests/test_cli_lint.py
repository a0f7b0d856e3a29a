"""Tests for the `guidelint lint` and `guidelint rules` CLI commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from click.testing import CliRunner, Result

from guidelint import __version__
from guidelint.cli import main

if TYPE_CHECKING:
    from pathlib import Path


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _add_bad_sql(project: Path) -> Path:
    path = project / "db" / "report.sql"
    path.write_text("select u.name from users u;\n")
    return path


def _lint(project: Path, *args: str) -> Result:
    runner = CliRunner()
    return runner.invoke(main, ["lint", "--project", str(project), *args])


# ---------------------------------------------------------------------------
# TestLintCommand
# ---------------------------------------------------------------------------


class TestLintCommand:
    def test_clean_project_exits_zero(self, tmp_project: Path) -> None:
        result = _lint(tmp_project, "--format", "porcelain", str(tmp_project))
        assert result.exit_code == 0, result.output
        assert result.output.strip() == ""

    def test_violations_exit_one(self, tmp_project: Path) -> None:
        _add_bad_sql(tmp_project)
        result = _lint(tmp_project, "--format", "porcelain", str(tmp_project))
        assert result.exit_code == 1
        lines = result.output.strip().splitlines()
        assert "db/report.sql:1:1:error:sql-keyword-case:Keyword 'select' should be upper-case ('SELECT')" in lines
        assert any(":sql-explicit-as:" in line for line in lines)

    def test_default_format_when_piped_is_porcelain(self, tmp_project: Path) -> None:
        _add_bad_sql(tmp_project)
        result = _lint(tmp_project, str(tmp_project))
        assert result.exit_code == 1
        assert "db/report.sql:1:1:error:sql-keyword-case:" in result.output

    def test_json_format(self, tmp_project: Path) -> None:
        _add_bad_sql(tmp_project)
        result = _lint(tmp_project, "--format", "json", str(tmp_project))
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["summary"]["files_checked"] == 3
        assert data["summary"]["passed"] is False
        assert {v["path"] for v in data["violations"]} == {"db/report.sql"}

    def test_rich_format(self, tmp_project: Path) -> None:
        result = _lint(tmp_project, "--format", "rich", str(tmp_project))
        assert result.exit_code == 0
        assert "No violations found in 2 files" in result.output

    def test_warnings_pass_unless_fail_on_warn(self, tmp_project: Path) -> None:
        (tmp_project / "db" / "sorted.sql").write_text("SELECT a FROM t AS t ORDER BY a;\n")
        result = _lint(tmp_project, "--format", "porcelain", str(tmp_project))
        assert result.exit_code == 0
        assert ":warning:sql-explicit-sort-direction:" in result.output

        result = _lint(tmp_project, "--format", "porcelain", "--fail-on-warn", str(tmp_project))
        assert result.exit_code == 1

    def test_single_file_and_jobs(self, tmp_project: Path) -> None:
        bad = _add_bad_sql(tmp_project)
        result = _lint(tmp_project, "--format", "porcelain", "-j", "2", str(bad))
        assert result.exit_code == 1
        assert all(line.startswith("db/report.sql:") for line in result.output.strip().splitlines())

    def test_invalid_config_exits_two(self, tmp_project: Path) -> None:
        (tmp_project / ".guidelint.yml").write_text("version: 7\n")
        result = _lint(tmp_project, str(tmp_project))
        assert result.exit_code == 2
        assert "Invalid configuration" in result.output

    def test_config_option(self, tmp_project: Path) -> None:
        _add_bad_sql(tmp_project)
        config = tmp_project / "lenient.yml"
        config.write_text("rules:\n  disable: [sql-keyword-case, sql-explicit-as]\n")
        result = _lint(tmp_project, "--config", str(config), "--format", "porcelain", str(tmp_project))
        assert result.exit_code == 0, result.output


# ---------------------------------------------------------------------------
# TestRulesCommand
# ---------------------------------------------------------------------------


class TestRulesCommand:
    def test_json_catalog(self) -> None:
        result = CliRunner().invoke(main, ["rules", "--format", "json"])
        assert result.exit_code == 0
        rules = json.loads(result.output)
        ids = {rule["id"] for rule in rules}
        assert {"sql-keyword-case", "elm-module-namespace", "sql-river-alignment"} <= ids
        river = next(rule for rule in rules if rule["id"] == "sql-river-alignment")
        assert river["kind"] == "advisory"
        assert river["automatable"] is False

    def test_language_filter(self) -> None:
        result = CliRunner().invoke(main, ["rules", "--language", "elm", "--format", "json"])
        assert result.exit_code == 0
        assert {rule["language"] for rule in json.loads(result.output)} == {"elm"}

    def test_rich_table(self) -> None:
        result = CliRunner().invoke(main, ["rules", "--language", "sql"])
        assert result.exit_code == 0
        assert "sql-keyword-case" in result.output


class TestMainGroup:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output
