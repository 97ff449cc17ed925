from __future__ import annotations

from typing import Iterable, Iterator

from ..types import Rule


class DuplicateRuleError(ValueError):
    pass


class RuleRegistry:
    """In-memory catalogue of rules keyed by id, in registration order.

    Registering an id twice raises DuplicateRuleError and keeps the first rule.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: dict[str, Rule] = {}
        self.register_all(rules)

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise DuplicateRuleError(
                f'Duplicate rule ID: "{rule.id}" is already registered. Each rule must have a unique identifier.'
            )
        self._rules[rule.id] = rule

    def register_all(self, rules: Iterable[Rule]) -> None:
        for item in rules:
            self.register(item)

    def all(self) -> list[Rule]:
        return list(self._rules.values())

    def by_category(self, category: str) -> list[Rule]:
        return [item for item in self._rules.values() if item.category == category]

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def categories(self) -> list[str]:
        return list(dict.fromkeys(item.category for item in self._rules.values()))

    def clear(self) -> None:
        self._rules.clear()

    def count(self) -> int:
        return len(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(list(self._rules.values()))
