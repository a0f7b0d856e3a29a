"""Rule evaluator: run each rule's matcher over a token stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from guidelint.core.registry import MatchContext
from guidelint.errors import RuleInternalError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from guidelint.core.registry import Rule
    from guidelint.core.tokens import Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """A single rule violation at a file location."""

    rule_id: str
    path: str
    line: int
    column: int
    message: str
    severity: str  # "error" | "warning"

    @property
    def sort_key(self) -> tuple[str, int, int, str, str]:
        return (self.path, self.line, self.column, self.rule_id, self.message)


def _run_rule(
    rule: Rule, tokens: Sequence[Token], context: MatchContext, severity: str
) -> list[Violation]:
    """Run one matcher; a failing matcher becomes a single violation.

    That violation carries the rule's resolved severity, so a broken
    warning-level rule never fails the run on its own.
    """
    try:
        findings = list(rule.matcher(tokens, context))
    except Exception as exc:  # noqa: BLE001
        error = RuleInternalError(rule.id, exc)
        logger.warning("%s (file %s)", error, context.path or "<memory>")
        return [
            Violation(
                rule_id=rule.id,
                path=context.path,
                line=1,
                column=1,
                message=f"RuleInternalError: {error}",
                severity=severity,
            )
        ]
    return [
        Violation(
            rule_id=rule.id,
            path=context.path,
            line=finding.line,
            column=finding.column,
            message=finding.message,
            severity=severity,
        )
        for finding in findings
    ]


def evaluate(
    tokens: Sequence[Token],
    rules: Iterable[Rule],
    *,
    context: MatchContext | None = None,
    severity_overrides: Mapping[str, str] | None = None,
) -> list[Violation]:
    """Evaluate *rules* against *tokens* and return violations.

    Rules run independently: no matcher sees another's output, and one
    matcher raising never stops the others.  Advisory rules are skipped.
    The result is ordered by rule order, then by the order each matcher
    reports its findings, so repeated calls give identical lists.
    """
    if context is None:
        context = MatchContext()
    overrides = severity_overrides or {}
    token_view = tuple(tokens)

    violations: list[Violation] = []
    for rule in rules:
        if not rule.enforced:
            continue
        severity = overrides.get(rule.id, rule.severity)
        violations.extend(_run_rule(rule, token_view, context, severity))
    return violations
