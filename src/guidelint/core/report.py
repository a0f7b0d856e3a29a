"""Report aggregator: merge per-file violations into one sorted report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from guidelint.core.evaluator import Violation


@dataclass(frozen=True)
class Report:
    """The terminal artifact of a run."""

    violations: tuple[Violation, ...] = ()
    counts_by_rule: dict[str, int] = field(default_factory=dict)
    counts_by_severity: dict[str, int] = field(
        default_factory=lambda: {"error": 0, "warning": 0}
    )
    files_checked: int = 0

    @property
    def error_count(self) -> int:
        return self.counts_by_severity.get("error", 0)

    @property
    def warning_count(self) -> int:
        return self.counts_by_severity.get("warning", 0)

    @property
    def passed(self) -> bool:
        """Only errors fail a run; warnings merely annotate it."""
        return self.error_count == 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0


def aggregate(
    per_file_violations: Iterable[Iterable[Violation]],
    *,
    rule_ids: Iterable[str] = (),
    files_checked: int = 0,
) -> Report:
    """Build a :class:`Report` from per-file violation lists.

    The merge is order-independent: exact duplicates are dropped and the
    result is sorted by path, line, column, then rule id.  Every id in
    *rule_ids* appears in ``counts_by_rule`` even when it never fired.
    """
    unique: set[Violation] = set()
    for violations in per_file_violations:
        unique.update(violations)

    ordered = tuple(sorted(unique, key=lambda v: v.sort_key))

    by_rule: dict[str, int] = dict.fromkeys(rule_ids, 0)
    rule_counter = Counter(v.rule_id for v in ordered)
    for rule_id in sorted(rule_counter):
        by_rule[rule_id] = rule_counter[rule_id]

    by_severity: dict[str, int] = {"error": 0, "warning": 0}
    for violation in ordered:
        by_severity[violation.severity] = by_severity.get(violation.severity, 0) + 1

    return Report(
        violations=ordered,
        counts_by_rule=by_rule,
        counts_by_severity=by_severity,
        files_checked=files_checked,
    )
