"""Tests for guidelint.core.evaluator: rule isolation, overrides, determinism."""

from __future__ import annotations

from typing import TYPE_CHECKING

from guidelint.core.evaluator import Violation, evaluate
from guidelint.core.registry import Finding, MatchContext, Rule, advisory
from guidelint.core.scanner import scan
from guidelint.rules.sql import SQL_RULES

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from guidelint.core.tokens import Token


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _flag_every_keyword(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    for tok in tokens:
        if tok.kind == "keyword":
            yield Finding(line=tok.line, column=tok.column, message=f"saw {tok.text}")


def _explode(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    msg = "boom"
    raise RuntimeError(msg)


_KEYWORDS = Rule(id="t-keywords", language="sql", description="", matcher=_flag_every_keyword)
_BROKEN = Rule(id="t-broken", language="sql", description="", matcher=_explode)
_BROKEN_WARNING = Rule(
    id="t-broken-warning",
    language="sql",
    description="",
    severity="warning",
    matcher=_explode,
)

_MESSY_SQL = (
    "select u.name, count(*) total\n"
    "from users u\n"
    "join orders o on u.user_id = o.user_id\n"
    "order by total;\n"
    "create table Orders (id serial, userId int);\n"
)


# ---------------------------------------------------------------------------
# TestEvaluate
# ---------------------------------------------------------------------------


class TestEvaluate:
    def test_empty_token_stream(self) -> None:
        assert evaluate([], SQL_RULES) == []

    def test_violation_fields(self) -> None:
        tokens = scan("SELECT 1", "sql")
        violations = evaluate(tokens, [_KEYWORDS], context=MatchContext(path="a.sql"))
        assert violations == [
            Violation(
                rule_id="t-keywords",
                path="a.sql",
                line=1,
                column=1,
                message="saw SELECT",
                severity="error",
            )
        ]

    def test_deterministic(self) -> None:
        tokens = scan(_MESSY_SQL, "sql")
        first = evaluate(tokens, SQL_RULES)
        second = evaluate(tokens, SQL_RULES)
        assert first
        assert first == second

    def test_severity_override(self) -> None:
        tokens = scan("SELECT 1", "sql")
        violations = evaluate(tokens, [_KEYWORDS], severity_overrides={"t-keywords": "warning"})
        assert [v.severity for v in violations] == ["warning"]

    def test_advisory_rules_are_skipped(self) -> None:
        note = advisory("t-note", "sql", "Documented only.")
        assert evaluate(scan("select 1", "sql"), [note]) == []


# ---------------------------------------------------------------------------
# TestRuleIsolation
# ---------------------------------------------------------------------------


class TestRuleIsolation:
    def test_broken_rule_becomes_violation(self) -> None:
        tokens = scan("SELECT 1", "sql")
        violations = evaluate(tokens, [_BROKEN, _KEYWORDS], context=MatchContext(path="x.sql"))
        assert [v.rule_id for v in violations] == ["t-broken", "t-keywords"]
        broken = violations[0]
        assert broken.severity == "error"
        assert broken.message.startswith("RuleInternalError:")
        assert "boom" in broken.message
        assert broken.path == "x.sql"

    def test_removing_a_rule_only_removes_its_violations(self) -> None:
        tokens = scan(_MESSY_SQL, "sql")
        full = evaluate(tokens, SQL_RULES)
        fired = {v.rule_id for v in full}
        assert len(fired) > 3
        for removed in fired:
            remaining = [rule for rule in SQL_RULES if rule.id != removed]
            partial = evaluate(tokens, remaining)
            assert partial == [v for v in full if v.rule_id != removed]

    def test_broken_rule_keeps_its_severity(self) -> None:
        tokens = scan("SELECT 1", "sql")
        (violation,) = evaluate(tokens, [_BROKEN_WARNING])
        assert violation.severity == "warning"
        assert violation.message.startswith("RuleInternalError:")

    def test_broken_rule_honours_override(self) -> None:
        tokens = scan("SELECT 1", "sql")
        violations = evaluate(
            tokens, [_BROKEN_WARNING], severity_overrides={"t-broken-warning": "error"}
        )
        assert [v.severity for v in violations] == ["error"]
