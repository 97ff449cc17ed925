from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable, Sequence

from ..types import Rule

WILDCARD = "*"
_GLOB_CHARS = ("*", "?", "[")


def matches_pattern(rule: Rule, pattern: str) -> bool:
    pattern = pattern.strip()
    if not pattern:
        return False
    if pattern == WILDCARD:
        return True
    if pattern.endswith("/*"):
        return rule.category == pattern[:-2]
    if any(ch in pattern for ch in _GLOB_CHARS):
        return fnmatchcase(rule.id, pattern)
    return rule.id == pattern


def matches_any_pattern(rule: Rule, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(rule, pattern) for pattern in patterns)


def is_rule_enabled(rule: Rule, enable: Sequence[str], disable: Sequence[str]) -> bool:
    # disable wins regardless of how specific the enable match is
    if matches_any_pattern(rule, disable):
        return False
    return matches_any_pattern(rule, enable)


def filter_rules(rules: Iterable[Rule], enable: Sequence[str], disable: Sequence[str]) -> list[Rule]:
    return [item for item in rules if is_rule_enabled(item, enable, disable)]
