"""Linting core: tokens, scanner, rule registry, evaluator, report aggregator."""

from guidelint.core.evaluator import Violation, evaluate
from guidelint.core.registry import (
    ANY_LANGUAGE,
    DEFAULT_NAMESPACE_PREFIXES,
    DEFAULT_TOP_LEVEL_NAMES,
    SUPPORTED_LANGUAGES,
    Finding,
    MatchContext,
    Rule,
    RuleRegistry,
    advisory,
)
from guidelint.core.report import Report, aggregate
from guidelint.core.scanner import scan
from guidelint.core.tokens import SourceFile, Token, language_for_path

__all__ = [
    "ANY_LANGUAGE",
    "DEFAULT_NAMESPACE_PREFIXES",
    "DEFAULT_TOP_LEVEL_NAMES",
    "SUPPORTED_LANGUAGES",
    "Finding",
    "MatchContext",
    "Report",
    "Rule",
    "RuleRegistry",
    "SourceFile",
    "Token",
    "Violation",
    "advisory",
    "aggregate",
    "evaluate",
    "language_for_path",
    "scan",
]
