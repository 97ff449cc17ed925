from __future__ import annotations

from datetime import UTC, datetime
from typing import Iterable, Mapping, Sequence

from .categories import CATEGORIES, DEFAULT_CATEGORY_WEIGHT
from .types import STATUS_SCORES, AuditResult, CategoryDefinition, CategoryResult, RuleResult, RuleStatus


def calculate_category_score(results: Sequence[RuleResult], weights: Mapping[str, float]) -> float:
    if not results:
        return 0.0
    weighted_sum = 0.0
    used_weights = 0.0
    for result in results:
        weight = float(weights.get(result.rule_id, 0.0))
        weighted_sum += STATUS_SCORES[result.status] * weight
        used_weights += weight
    if used_weights == 0:
        return round(sum(STATUS_SCORES[r.status] for r in results) / len(results), 1)
    return round(weighted_sum / used_weights, 1)


def build_category_result(
    category_id: str, results: Sequence[RuleResult], weights: Mapping[str, float]
) -> CategoryResult:
    return CategoryResult(
        category_id=category_id,
        score=calculate_category_score(results, weights),
        pass_count=sum(1 for r in results if r.status is RuleStatus.PASS),
        warn_count=sum(1 for r in results if r.status is RuleStatus.WARN),
        fail_count=sum(1 for r in results if r.status is RuleStatus.FAIL),
        results=list(results),
    )


def group_by_category(
    results: Iterable[RuleResult], categories_by_rule: Mapping[str, str], weights: Mapping[str, float]
) -> list[CategoryResult]:
    grouped: dict[str, list[RuleResult]] = {}
    for result in results:
        grouped.setdefault(categories_by_rule[result.rule_id], []).append(result)
    return [build_category_result(category_id, items, weights) for category_id, items in grouped.items()]


def calculate_overall_score(
    category_results: Sequence[CategoryResult],
    categories: Sequence[CategoryDefinition] = CATEGORIES,
) -> float:
    known = {category.id: float(category.weight) for category in categories}
    weighted_sum = 0.0
    used_weights = 0.0
    for item in category_results:
        weight = known.get(item.category_id, DEFAULT_CATEGORY_WEIGHT)
        weighted_sum += item.score * weight
        used_weights += weight
    if used_weights == 0:
        return 0.0
    return round(weighted_sum / used_weights, 1)


def order_categories(
    category_results: Sequence[CategoryResult], categories: Sequence[CategoryDefinition] = CATEGORIES
) -> list[CategoryResult]:
    rank = {category.id: idx for idx, category in enumerate(categories)}
    return sorted(category_results, key=lambda item: rank.get(item.category_id, len(rank)))


def build_audit_result(
    url: str,
    category_results: Sequence[CategoryResult],
    categories: Sequence[CategoryDefinition] = CATEGORIES,
    timestamp: str | None = None,
    crawled_pages: int = 1,
) -> AuditResult:
    ordered = order_categories(category_results, categories)
    return AuditResult(
        url=url,
        overall_score=calculate_overall_score(ordered, categories),
        category_results=ordered,
        timestamp=timestamp or datetime.now(UTC).isoformat(),
        crawled_pages=crawled_pages,
    )


def score_band(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Strong"
    if score >= 70:
        return "Good"
    if score >= 60:
        return "Needs Improvement"
    return "At Risk"


def score_grade(score: float) -> str:
    if score >= 90:
        return "A"
    if score >= 80:
        return "B"
    if score >= 70:
        return "C"
    if score >= 60:
        return "D"
    return "F"
