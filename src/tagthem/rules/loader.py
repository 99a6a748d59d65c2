"""Load rules and extractor definitions from YAML files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tagthem.extractors import (
    ExtractorDefinition,
    ExtractorRegistry,
    register_builtin_extractors,
)
from tagthem.rules.engine import RuleEngine
from tagthem.tagger import Tagger


@dataclass
class RulesConfig:
    """A tagthem configuration document.

    Attributes:
        rules: Rule name -> DSL expressions
        extractors: Extractor definitions, in declaration order
        case_sensitive: Only accept lowercase DSL keywords
        include_paths: Default field path prefixes to tag
        exclude_paths: Default field path prefixes to skip
    """

    rules: dict[str, list[str]] = field(default_factory=dict)
    extractors: list[ExtractorDefinition] = field(default_factory=list)
    case_sensitive: bool = False
    include_paths: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RulesConfig":
        """Create RulesConfig from a YAML/JSON dict."""
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a mapping")

        settings = data.get("settings") or {}
        if not isinstance(settings, dict):
            raise ValueError("'settings' must be a mapping")

        return cls(
            rules=_resolve_rules(data.get("rules") or {}),
            extractors=[
                ExtractorDefinition.from_dict(e) for e in data.get("extractors") or []
            ],
            case_sensitive=bool(settings.get("caseSensitive", False)),
            include_paths=_string_list(settings, "includePaths"),
            exclude_paths=_string_list(settings, "excludePaths"),
        )


def _resolve_rules(raw_rules: Any) -> dict[str, list[str]]:
    """Normalize the rules section; a single expression may be a string."""
    if not isinstance(raw_rules, dict):
        raise ValueError("'rules' must be a mapping of rule name to expressions")

    rules: dict[str, list[str]] = {}
    for name, expressions in raw_rules.items():
        if isinstance(expressions, str):
            expressions = [expressions]
        if not isinstance(expressions, list) or not all(
            isinstance(e, str) for e in expressions
        ):
            raise ValueError(f"Rule '{name}' must be a list of expression strings")
        rules[str(name)] = expressions
    return rules


def _string_list(settings: dict[str, Any], key: str) -> list[str]:
    values = settings.get(key) or []
    if isinstance(values, str):
        values = [values]
    if not isinstance(values, list):
        raise ValueError(f"'settings.{key}' must be a list of field paths")
    return [str(v) for v in values]


def load_rules_config(path: Path) -> RulesConfig:
    """Read a YAML configuration file."""
    with open(path) as f:
        data = yaml.safe_load(f)
    return RulesConfig.from_dict(data or {})


def build_tagger(config: RulesConfig) -> Tagger:
    """Instantiate the configured extractors and attach them by kind."""
    register_builtin_extractors()
    tagger = Tagger()
    for definition in config.extractors:
        extractor = ExtractorRegistry.create(definition)
        for kind in definition.kinds or ExtractorRegistry.default_kinds(definition.type):
            tagger.add_extractor(extractor, kind)
    return tagger


def build_engine(config: RulesConfig, case_sensitive: bool | None = None) -> RuleEngine:
    """Build a RuleEngine with the configured extractors and rules.

    Args:
        config: Loaded configuration
        case_sensitive: Overrides the configuration's keyword casing when set
    """
    if case_sensitive is None:
        case_sensitive = config.case_sensitive
    return RuleEngine.with_rules(
        config.rules,
        tagger=build_tagger(config),
        case_sensitive=case_sensitive,
    )
