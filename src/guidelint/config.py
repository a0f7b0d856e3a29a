"""Configuration: parse ``.guidelint.yml`` into a validated :class:`LintConfig`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import yaml

from guidelint.core.registry import (
    DEFAULT_NAMESPACE_PREFIXES,
    DEFAULT_TOP_LEVEL_NAMES,
    VALID_SEVERITIES,
    MatchContext,
)
from guidelint.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from guidelint.core.registry import Rule, RuleRegistry

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CONFIG_FILENAMES: tuple[str, ...] = (".guidelint.yml", ".guidelint.yaml")
SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})
_SEVERITY_ALIASES: dict[str, str] = {"warn": "warning"}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LintConfig:
    """The enabled-rule set, severity overrides and Elm namespace settings."""

    enabled_rules: frozenset[str] | None = None  # None = every rule
    disabled_rules: frozenset[str] = frozenset()
    severity_overrides: dict[str, str] = field(default_factory=dict)
    namespace_prefixes: tuple[str, ...] = DEFAULT_NAMESPACE_PREFIXES
    top_level_names: tuple[str, ...] = DEFAULT_TOP_LEVEL_NAMES

    def is_enabled(self, rule_id: str) -> bool:
        if rule_id in self.disabled_rules:
            return False
        return self.enabled_rules is None or rule_id in self.enabled_rules

    def select(self, rules: Iterable[Rule]) -> list[Rule]:
        """Keep the enabled rules, preserving order."""
        return [rule for rule in rules if self.is_enabled(rule.id)]

    def match_context(self, path: str) -> MatchContext:
        return MatchContext(
            path=path,
            namespace_prefixes=self.namespace_prefixes,
            top_level_names=self.top_level_names,
        )

    def validate(self, registry: RuleRegistry) -> None:
        """Raise :class:`ConfigError` for rule ids the registry does not know."""
        referenced: dict[str, Iterable[str]] = {
            "rules.enable": sorted(self.enabled_rules or ()),
            "rules.disable": sorted(self.disabled_rules),
            "rules.severity": sorted(self.severity_overrides),
        }
        for key, rule_ids in referenced.items():
            for rule_id in rule_ids:
                if rule_id not in registry:
                    msg = f"{key}: unknown rule '{rule_id}'"
                    raise ConfigError(msg)


# ---------------------------------------------------------------------------
# YAML parsing
# ---------------------------------------------------------------------------


def _string_list(value: object, context: str) -> list[str]:
    if not isinstance(value, list):
        msg = f"{context} must be a list"
        raise ConfigError(msg)
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            msg = f"{context}[{idx}] must be a non-empty string"
            raise ConfigError(msg)
        items.append(item.strip())
    return items


def _parse_severity_overrides(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        msg = "rules.severity must be a mapping of rule id to severity"
        raise ConfigError(msg)
    overrides: dict[str, str] = {}
    for rule_id, severity_raw in value.items():
        severity = str(severity_raw).strip().lower()
        severity = _SEVERITY_ALIASES.get(severity, severity)
        if severity not in VALID_SEVERITIES:
            msg = (
                f"rules.severity: rule '{rule_id}' has invalid severity '{severity_raw}', "
                f"must be one of {sorted(VALID_SEVERITIES)}"
            )
            raise ConfigError(msg)
        overrides[str(rule_id)] = severity
    return overrides


def _normalize_prefix(prefix: str) -> str:
    return prefix if prefix.endswith(".") else f"{prefix}."


def parse_config(data: object) -> LintConfig:
    """Build a :class:`LintConfig` from already-loaded YAML data.

    ``None`` (an empty file) yields the defaults.
    """
    if data is None:
        return LintConfig()
    if not isinstance(data, dict):
        msg = "config must be a YAML mapping"
        raise ConfigError(msg)

    version = data.get("version", 1)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"unsupported config version {version!r}, expected one of {expected}"
        raise ConfigError(msg)

    rules_data = data.get("rules") or {}
    if not isinstance(rules_data, dict):
        msg = "'rules' must be a mapping"
        raise ConfigError(msg)

    enabled: frozenset[str] | None = None
    if "enable" in rules_data:
        enabled = frozenset(_string_list(rules_data["enable"], "rules.enable"))
    disabled = frozenset(_string_list(rules_data.get("disable", []), "rules.disable"))
    overrides = _parse_severity_overrides(rules_data.get("severity", {}))

    elm_data = data.get("elm") or {}
    if not isinstance(elm_data, dict):
        msg = "'elm' must be a mapping"
        raise ConfigError(msg)

    prefixes = DEFAULT_NAMESPACE_PREFIXES
    if "namespace_prefixes" in elm_data:
        raw = _string_list(elm_data["namespace_prefixes"], "elm.namespace_prefixes")
        prefixes = tuple(_normalize_prefix(prefix) for prefix in raw)

    top_level = DEFAULT_TOP_LEVEL_NAMES
    if "top_level_names" in elm_data:
        top_level = tuple(_string_list(elm_data["top_level_names"], "elm.top_level_names"))

    return LintConfig(
        enabled_rules=enabled,
        disabled_rules=disabled,
        severity_overrides=overrides,
        namespace_prefixes=prefixes,
        top_level_names=top_level,
    )


def find_config(project_root: Path) -> Path | None:
    """Return the first config file present in *project_root*."""
    for filename in CONFIG_FILENAMES:
        candidate = project_root / filename
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path | None) -> LintConfig:
    """Read and parse *config_path*; ``None`` means defaults.

    Raises :class:`ConfigError` for unreadable files, YAML syntax errors
    and schema errors.
    """
    if config_path is None:
        return LintConfig()
    try:
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        msg = f"cannot read config {config_path}: {exc}"
        raise ConfigError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"invalid YAML in {config_path}: {exc}"
        raise ConfigError(msg) from exc
    return parse_config(data)
