from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable


class RuleStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


STATUS_SCORES: dict[RuleStatus, int] = {
    RuleStatus.PASS: 100,
    RuleStatus.WARN: 50,
    RuleStatus.FAIL: 0,
}


@dataclass(frozen=True)
class Rule:
    id: str
    name: str
    description: str
    category: str
    weight: float
    check: Callable[..., Any]
    stateful: bool = False
    timeout: float | None = None


@dataclass(frozen=True)
class RuleResult:
    rule_id: str
    status: RuleStatus
    score: int
    message: str
    details: dict[str, Any] | None = None
    page_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "rule_id": self.rule_id,
            "status": self.status.value,
            "score": self.score,
            "message": self.message,
        }
        if self.details is not None:
            payload["details"] = self.details
        if self.page_url is not None:
            payload["page_url"] = self.page_url
        return payload


@dataclass(frozen=True)
class CategoryDefinition:
    id: str
    name: str
    description: str
    weight: float


@dataclass
class CategoryResult:
    category_id: str
    score: float
    pass_count: int
    warn_count: int
    fail_count: int
    results: list[RuleResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_id": self.category_id,
            "score": self.score,
            "pass_count": self.pass_count,
            "warn_count": self.warn_count,
            "fail_count": self.fail_count,
            "results": [result.to_dict() for result in self.results],
        }


@dataclass
class AuditResult:
    url: str
    overall_score: float
    category_results: list[CategoryResult]
    timestamp: str
    crawled_pages: int = 1
    page_results: list[AuditResult] = field(default_factory=list)
    crawl_info: dict[str, Any] = field(default_factory=dict)

    def category(self, category_id: str) -> CategoryResult | None:
        for item in self.category_results:
            if item.category_id == category_id:
                return item
        return None

    def result_for(self, rule_id: str) -> RuleResult | None:
        for item in self.category_results:
            for result in item.results:
                if result.rule_id == rule_id:
                    return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "overall_score": self.overall_score,
            "timestamp": self.timestamp,
            "crawled_pages": self.crawled_pages,
            "category_results": [item.to_dict() for item in self.category_results],
            "page_results": [item.to_dict() for item in self.page_results],
            "crawl_info": dict(self.crawl_info),
        }
