"""Weighted, rule-based SEO auditing for single pages and bounded crawls."""

__version__ = "1.0.0"

from .auditor import Auditor
from .config import AuditConfig, ConfigError, load_config
from .context import PageContext, build_page_context
from .rules.define import RuleDefinitionError, define_rule, fail, pass_, rule, warn
from .rules.manifest import BUILTIN_RULES, build_registry
from .rules.patterns import filter_rules, is_rule_enabled
from .rules.registry import DuplicateRuleError, RuleRegistry
from .session import AuditSession
from .types import AuditResult, CategoryResult, Rule, RuleResult, RuleStatus

__all__ = [
    "BUILTIN_RULES",
    "AuditConfig",
    "AuditResult",
    "AuditSession",
    "Auditor",
    "CategoryResult",
    "ConfigError",
    "DuplicateRuleError",
    "PageContext",
    "Rule",
    "RuleDefinitionError",
    "RuleRegistry",
    "RuleResult",
    "RuleStatus",
    "build_page_context",
    "build_registry",
    "define_rule",
    "fail",
    "filter_rules",
    "is_rule_enabled",
    "load_config",
    "pass_",
    "rule",
    "warn",
]
