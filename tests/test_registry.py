"""Tests for guidelint.core.registry and the default rule catalog."""

from __future__ import annotations

import pytest

from guidelint.core.registry import Rule, RuleRegistry, advisory
from guidelint.errors import DuplicateRuleError, RegistryFrozenError, UnsupportedLanguageError


def _rule(rule_id: str, language: str = "sql", severity: str = "error") -> Rule:
    return Rule(id=rule_id, language=language, description=f"{rule_id} rule", severity=severity)


# ---------------------------------------------------------------------------
# TestRegister
# ---------------------------------------------------------------------------


class TestRegister:
    def test_duplicate_id_and_language_raises(self) -> None:
        registry = RuleRegistry([_rule("a")])
        with pytest.raises(DuplicateRuleError, match="'a'"):
            registry.register(_rule("a"))

    def test_same_id_other_language_is_allowed(self) -> None:
        registry = RuleRegistry([_rule("a", "sql"), _rule("a", "elm")])
        assert len(registry) == 2
        assert registry.rule_ids() == ["a"]

    def test_frozen_registry_rejects_rules(self) -> None:
        registry = RuleRegistry([_rule("a")]).freeze()
        assert registry.frozen is True
        with pytest.raises(RegistryFrozenError):
            registry.register(_rule("b"))

    def test_invalid_severity_rejected(self) -> None:
        with pytest.raises(ValueError, match="invalid severity"):
            Rule(id="x", language="sql", description="", severity="fatal")

    def test_invalid_kind_rejected(self) -> None:
        with pytest.raises(ValueError, match="invalid kind"):
            Rule(id="x", language="sql", description="", kind="magic")


# ---------------------------------------------------------------------------
# TestLookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_rules_for_keeps_registration_order(self) -> None:
        registry = RuleRegistry([_rule("c"), _rule("a"), _rule("x", "elm"), _rule("b")])
        assert [rule.id for rule in registry.rules_for("sql")] == ["c", "a", "b"]

    def test_rules_for_unknown_language(self) -> None:
        registry = RuleRegistry([_rule("a")])
        with pytest.raises(UnsupportedLanguageError, match="'python'"):
            registry.rules_for("python")

    def test_any_language_rules_are_not_a_language(self) -> None:
        registry = RuleRegistry([_rule("a", "*")])
        with pytest.raises(UnsupportedLanguageError):
            registry.rules_for("*")

    def test_get(self) -> None:
        registry = RuleRegistry([_rule("a", "sql"), _rule("b", "elm")])
        assert registry.get("b") is not None
        assert registry.get("b", "sql") is None
        assert registry.get("missing") is None
        assert "a" in registry
        assert "missing" not in registry

    def test_languages(self) -> None:
        registry = RuleRegistry([_rule("a", "sql"), _rule("b", "elm"), _rule("c", "*")])
        assert registry.languages() == ["elm", "sql"]


# ---------------------------------------------------------------------------
# TestDefaultRegistry
# ---------------------------------------------------------------------------


class TestDefaultRegistry:
    def test_is_frozen(self, registry: RuleRegistry) -> None:
        assert registry.frozen is True

    def test_catalog_contents(self, registry: RuleRegistry) -> None:
        sql_ids = [rule.id for rule in registry.rules_for("sql")]
        elm_ids = [rule.id for rule in registry.rules_for("elm")]
        assert sql_ids[0] == "sql-keyword-case"
        for rule_id in (
            "sql-explicit-inner-join",
            "sql-explicit-as",
            "sql-explicit-sort-direction",
            "sql-explicit-nullability",
            "sql-join-order",
            "sql-table-singular",
            "sql-no-bare-id",
            "sql-river-alignment",
            "scan-recovery",
        ):
            assert rule_id in sql_ids
        for rule_id in (
            "elm-module-namespace",
            "elm-decoder-naming",
            "elm-no-plural-decoder",
            "elm-port-documentation",
            "elm-prefer-case-of",
            "scan-recovery",
        ):
            assert rule_id in elm_ids
        assert "unsupported-language" in registry

    def test_advisory_rules_are_not_enforced(self, registry: RuleRegistry) -> None:
        rule = registry.get("elm-prefer-case-of")
        assert rule is not None
        assert rule.kind == "advisory"
        assert rule.automatable is False
        assert rule.enforced is False
        assert list(rule.matcher((), None)) == []  # type: ignore[arg-type]

    def test_advisory_helper(self) -> None:
        rule = advisory("x-note", "sql", "Just a note.")
        assert rule.severity == "warning"
        assert not rule.enforced

    def test_rule_ids_are_unique_per_language(self, registry: RuleRegistry) -> None:
        keys = [(rule.id, rule.language) for rule in registry]
        assert len(keys) == len(set(keys))
