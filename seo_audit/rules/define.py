"""
Rule contract: validation of rule definitions and the result helpers every check returns.
"""

from __future__ import annotations

from dataclasses import fields
from numbers import Real
from typing import Any, Callable, Mapping

from ..types import STATUS_SCORES, Rule, RuleResult, RuleStatus

_RULE_FIELDS = tuple(f.name for f in fields(Rule))


class RuleDefinitionError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid rule definition:\n  - " + "\n  - ".join(self.errors))


def _candidate_fields(candidate: Rule | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(candidate, Rule):
        return {name: getattr(candidate, name) for name in _RULE_FIELDS}
    if isinstance(candidate, Mapping):
        return dict(candidate)
    raise RuleDefinitionError([f"Rule must be a Rule or a mapping, got {type(candidate).__name__}"])


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_rule(candidate: Rule | Mapping[str, Any]) -> list[str]:
    data = _candidate_fields(candidate)
    errors: list[str] = []

    if not _is_text(data.get("id")):
        errors.append('Rule must have a non-empty string "id"')
    if not _is_text(data.get("name")):
        errors.append('Rule must have a string "name"')
    if not _is_text(data.get("description")):
        errors.append('Rule must have a string "description"')
    if not _is_text(data.get("category")):
        errors.append('Rule must have a string "category"')

    weight = data.get("weight")
    if isinstance(weight, bool) or not isinstance(weight, Real) or not 0 <= weight <= 100:
        errors.append('Rule must have a "weight" number between 0 and 100')

    if not callable(data.get("check")):
        errors.append('Rule must have a callable "check"')

    if not isinstance(data.get("stateful", False), bool):
        errors.append('Rule "stateful" must be a boolean')

    timeout = data.get("timeout")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, Real) or timeout <= 0):
        errors.append('Rule "timeout" must be a positive number of seconds')

    unknown = sorted(set(data) - set(_RULE_FIELDS))
    if unknown:
        errors.append(f"Unknown rule field(s): {', '.join(unknown)}")

    return errors


def define_rule(candidate: Rule | Mapping[str, Any]) -> Rule:
    errors = validate_rule(candidate)
    if errors:
        raise RuleDefinitionError(errors)
    if isinstance(candidate, Rule):
        return candidate
    return Rule(**dict(candidate))


def rule(
    *,
    id: str,
    name: str,
    description: str,
    category: str,
    weight: float,
    stateful: bool = False,
    timeout: float | None = None,
) -> Callable[[Callable[..., Any]], Rule]:
    def decorate(check: Callable[..., Any]) -> Rule:
        return define_rule(
            {
                "id": id,
                "name": name,
                "description": description,
                "category": category,
                "weight": weight,
                "check": check,
                "stateful": stateful,
                "timeout": timeout,
            }
        )

    return decorate


def _result(status: RuleStatus, rule_id: str, message: str, details: dict[str, Any] | None) -> RuleResult:
    return RuleResult(
        rule_id=rule_id,
        status=status,
        score=STATUS_SCORES[status],
        message=message,
        details=details,
    )


def pass_(rule_id: str, message: str, details: dict[str, Any] | None = None) -> RuleResult:
    return _result(RuleStatus.PASS, rule_id, message, details)


def warn(rule_id: str, message: str, details: dict[str, Any] | None = None) -> RuleResult:
    return _result(RuleStatus.WARN, rule_id, message, details)


def fail(rule_id: str, message: str, details: dict[str, Any] | None = None) -> RuleResult:
    return _result(RuleStatus.FAIL, rule_id, message, details)
