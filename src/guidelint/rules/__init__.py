"""Rule catalog: SQL and Elm conventions plus engine-level rules."""

from __future__ import annotations

from guidelint.core.registry import SUPPORTED_LANGUAGES, RuleRegistry
from guidelint.rules.common import UNSUPPORTED_LANGUAGE, scan_recovery_rule
from guidelint.rules.elm import ELM_RULES
from guidelint.rules.sql import SQL_RULES


def build_default_registry() -> RuleRegistry:
    """Register the full catalog and freeze it.

    Call once at start-up; the returned registry is read-only and can be
    shared by worker threads.
    """
    registry = RuleRegistry()
    for rule in SQL_RULES:
        registry.register(rule)
    for rule in ELM_RULES:
        registry.register(rule)
    for language in sorted(SUPPORTED_LANGUAGES):
        registry.register(scan_recovery_rule(language))
    registry.register(UNSUPPORTED_LANGUAGE)
    return registry.freeze()


__all__ = [
    "ELM_RULES",
    "SQL_RULES",
    "UNSUPPORTED_LANGUAGE",
    "build_default_registry",
]
