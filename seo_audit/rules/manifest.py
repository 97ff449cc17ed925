"""
The built-in rule manifest.

Rule modules are imported explicitly and in a fixed order so registry order, and
therefore report order, is stable.
"""

from __future__ import annotations

from typing import Iterable

from ..types import Rule
from .builtin import a11y, content, core, images, js, links, perf, schema, security, social, technical
from .registry import RuleRegistry

BUILTIN_MODULES = (core, technical, content, links, images, security, perf, schema, social, js, a11y)

BUILTIN_RULES: tuple[Rule, ...] = tuple(item for module in BUILTIN_MODULES for item in module.RULES)


def builtin_manifest() -> dict[str, Rule]:
    return {item.id: item for item in BUILTIN_RULES}


def build_registry(extra: Iterable[Rule] = ()) -> RuleRegistry:
    """Registry holding every built-in rule followed by extra; duplicate ids raise."""
    registry = RuleRegistry()
    registry.register_all(BUILTIN_RULES)
    registry.register_all(extra)
    return registry
