"""
Cross-page meta description uniqueness.

Same shape as the title registry: normalized description -> URLs in visit order.
Short descriptions are still registered, so a short duplicate reports both problems.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..rules.define import fail, pass_, warn
from ..types import RuleResult

DUPLICATE_DESCRIPTION_ID = "content-duplicate-description"

SHORT_DESCRIPTION_CHARS = 50
OPTIMAL_DESCRIPTION_RANGE = (120, 160)


def normalize_description(description: str) -> str:
    return re.sub(r"\s+", " ", description.lower().strip())


@dataclass(frozen=True)
class DescriptionRegistryStats:
    total_descriptions: int
    duplicate_groups: int


class DescriptionRegistry:
    def __init__(self) -> None:
        self._descriptions: dict[str, list[str]] = {}

    def reset(self) -> None:
        self._descriptions.clear()

    def stats(self) -> DescriptionRegistryStats:
        groups = sum(1 for urls in self._descriptions.values() if len(urls) > 1)
        return DescriptionRegistryStats(total_descriptions=len(self._descriptions), duplicate_groups=groups)

    def urls_for(self, description: str) -> list[str]:
        return list(self._descriptions.get(normalize_description(description), []))

    def record(self, description: str, url: str) -> list[str]:
        urls = self._descriptions.setdefault(normalize_description(description), [])
        urls.append(url)
        return list(urls)


def evaluate_description(registry: DescriptionRegistry, url: str, description: str | None) -> RuleResult:
    description = (description or "").strip()
    if not description:
        return fail(
            DUPLICATE_DESCRIPTION_ID,
            "Page has no meta description",
            {
                "description": None,
                "url": url,
                "recommendation": "Add a unique, compelling meta description between 120-160 characters",
            },
        )

    normalized = normalize_description(description)
    urls = registry.record(description, url)
    too_short = len(description) < SHORT_DESCRIPTION_CHARS
    if len(urls) > 1:
        suffix = " (also too short)" if too_short else ""
        return warn(
            DUPLICATE_DESCRIPTION_ID,
            f"Duplicate description found on {len(urls)} pages{suffix}",
            {
                "description": description,
                "normalized_description": normalized,
                "length": len(description),
                "duplicate_urls": urls,
                "impact": "Duplicate descriptions confuse search engines and reduce click-through rates",
                "recommendation": "Write a meta description for each page that summarizes its specific content",
            },
        )
    if too_short:
        return warn(
            DUPLICATE_DESCRIPTION_ID,
            "Meta description is too short",
            {
                "description": description,
                "length": len(description),
                "url": url,
                "recommendation": "Expand description to 120-160 characters for optimal display in search results",
            },
        )
    low, high = OPTIMAL_DESCRIPTION_RANGE
    return pass_(
        DUPLICATE_DESCRIPTION_ID,
        "Meta description is unique",
        {
            "description": description,
            "normalized_description": normalized,
            "length": len(description),
            "url": url,
            "optimal_length": low <= len(description) <= high,
        },
    )
