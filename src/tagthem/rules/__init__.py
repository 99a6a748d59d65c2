"""Named tag rules for tagthem.

- RuleEngine: registers rules and evaluates them against tag evidence
- RulesConfig / load_rules_config: YAML configuration of rules and extractors
"""

from tagthem.rules.engine import CompiledExpression, RuleEngine
from tagthem.rules.loader import (
    RulesConfig,
    build_engine,
    build_tagger,
    load_rules_config,
)

__all__ = [
    "CompiledExpression",
    "RuleEngine",
    "RulesConfig",
    "build_engine",
    "build_tagger",
    "load_rules_config",
]
