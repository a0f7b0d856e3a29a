"""Rule registry: the catalog of checkable conventions keyed by id and language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from guidelint.errors import DuplicateRuleError, RegistryFrozenError, UnsupportedLanguageError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Sequence

    from guidelint.core.tokens import Token

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SUPPORTED_LANGUAGES: frozenset[str] = frozenset({"sql", "elm"})
ANY_LANGUAGE = "*"
VALID_SEVERITIES: frozenset[str] = frozenset({"error", "warning"})
VALID_RULE_KINDS: frozenset[str] = frozenset({"check", "advisory"})

DEFAULT_NAMESPACE_PREFIXES: tuple[str, ...] = (
    "Views.",
    "Util.",
    "Types.",
    "Pages.",
    "Api.",
    "Routes.",
)
DEFAULT_TOP_LEVEL_NAMES: tuple[str, ...] = (
    "Main",
    "Api",
    "Routes",
    "Types",
    "Ports",
    "Flags",
    "Model",
    "Msg",
    "Update",
    "View",
)

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Finding:
    """A location a matcher flagged; the evaluator turns it into a Violation."""

    line: int
    column: int
    message: str


@dataclass(frozen=True)
class MatchContext:
    """Per-file settings a matcher may consult."""

    path: str = ""
    namespace_prefixes: tuple[str, ...] = DEFAULT_NAMESPACE_PREFIXES
    top_level_names: tuple[str, ...] = DEFAULT_TOP_LEVEL_NAMES


def _never(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Matcher for advisory rules: documented, never enforced."""
    return iter(())


@dataclass(frozen=True)
class Rule:
    """A single checkable convention."""

    id: str
    language: str  # "sql" | "elm" | "*"
    description: str
    severity: str = "error"  # "error" | "warning"
    matcher: Callable[[Sequence[Token], MatchContext], Iterable[Finding]] = field(
        default=_never, compare=False, repr=False
    )
    kind: str = "check"  # "check" | "advisory"
    automatable: bool = True

    def __post_init__(self) -> None:
        if self.severity not in VALID_SEVERITIES:
            msg = (
                f"Rule '{self.id}': invalid severity '{self.severity}', "
                f"must be one of {sorted(VALID_SEVERITIES)}"
            )
            raise ValueError(msg)
        if self.kind not in VALID_RULE_KINDS:
            msg = (
                f"Rule '{self.id}': invalid kind '{self.kind}', "
                f"must be one of {sorted(VALID_RULE_KINDS)}"
            )
            raise ValueError(msg)

    @property
    def enforced(self) -> bool:
        """True when the rule can emit violations."""
        return self.kind == "check" and self.automatable


def advisory(rule_id: str, language: str, description: str) -> Rule:
    """Build a documented-only rule that never produces violations."""
    return Rule(
        id=rule_id,
        language=language,
        description=description,
        severity="warning",
        kind="advisory",
        automatable=False,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RuleRegistry:
    """Holds rules in registration order.

    Build it once with :func:`guidelint.rules.build_default_registry` (or by
    calling :meth:`register` then :meth:`freeze`).  A frozen registry is
    read-only and safe to share between worker threads.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[tuple[str, str], Rule] = {}
        self._frozen = False
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if self._frozen:
            msg = f"Cannot register rule '{rule.id}': registry is frozen"
            raise RegistryFrozenError(msg)
        key = (rule.id, rule.language)
        if key in self._rules:
            raise DuplicateRuleError(rule.id, rule.language)
        self._rules[key] = rule

    def freeze(self) -> RuleRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def rules_for(self, language: str) -> list[Rule]:
        """Rules for *language* in registration order.

        Raises :class:`UnsupportedLanguageError` when no rule targets it.
        Engine-level (``"*"``) rules are not included.
        """
        rules = [rule for (_, lang), rule in self._rules.items() if lang == language]
        if not rules or language == ANY_LANGUAGE:
            raise UnsupportedLanguageError(language)
        return rules

    def get(self, rule_id: str, language: str | None = None) -> Rule | None:
        """Look a rule up by id, optionally narrowed to one language."""
        if language is not None:
            return self._rules.get((rule_id, language))
        for (rid, _), rule in self._rules.items():
            if rid == rule_id:
                return rule
        return None

    def all_rules(self) -> list[Rule]:
        return list(self._rules.values())

    def rule_ids(self) -> list[str]:
        """Distinct rule ids in registration order."""
        return list(dict.fromkeys(rid for rid, _ in self._rules))

    def languages(self) -> list[str]:
        return sorted({lang for _, lang in self._rules if lang != ANY_LANGUAGE})

    def __contains__(self, rule_id: object) -> bool:
        return any(rid == rule_id for rid, _ in self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules.values()))
