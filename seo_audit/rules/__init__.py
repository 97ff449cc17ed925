from .define import RuleDefinitionError, define_rule, fail, pass_, rule, validate_rule, warn
from .patterns import filter_rules, is_rule_enabled, matches_any_pattern, matches_pattern
from .registry import DuplicateRuleError, RuleRegistry

__all__ = [
    "DuplicateRuleError",
    "RuleDefinitionError",
    "RuleRegistry",
    "define_rule",
    "fail",
    "filter_rules",
    "is_rule_enabled",
    "matches_any_pattern",
    "matches_pattern",
    "pass_",
    "rule",
    "validate_rule",
    "warn",
]
