"""Exception hierarchy shared by the registry, scanner, evaluator and driver."""

from __future__ import annotations


class GuidelintError(Exception):
    """Base class for every error raised by guidelint."""


class DuplicateRuleError(GuidelintError):
    """Raised when a rule id is registered twice for the same language."""

    def __init__(self, rule_id: str, language: str) -> None:
        self.rule_id = rule_id
        self.language = language
        super().__init__(f"Rule '{rule_id}' is already registered for language '{language}'")


class RegistryFrozenError(GuidelintError):
    """Raised when registering into a registry that has been frozen."""


class UnsupportedLanguageError(GuidelintError):
    """Raised when a language has no registered rules."""

    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(f"No rules registered for language '{language}'")


class RuleInternalError(GuidelintError):
    """A rule matcher failed while evaluating a file.

    Never propagated out of the evaluator: it is rendered into a violation
    tagged with the failing rule so the remaining rules still run.
    """

    def __init__(self, rule_id: str, cause: BaseException) -> None:
        self.rule_id = rule_id
        self.cause = cause
        super().__init__(f"internal error in rule '{rule_id}': {type(cause).__name__}: {cause}")


class ConfigError(GuidelintError):
    """Raised when the configuration file is invalid."""


class LintError(GuidelintError):
    """Raised when a lint run cannot start (bad config, unreadable file)."""
