"""
Cross-page title uniqueness.

The registry maps a normalized title to every URL that produced it, in visit order.
It only grows; the owning session clears it before a new crawl.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..rules.define import fail, pass_, warn
from ..types import RuleResult

TITLE_UNIQUE_ID = "core-title-unique"


def normalize_title(title: str) -> str:
    return re.sub(r"\s+", " ", title.lower().strip())


@dataclass(frozen=True)
class TitleRegistryStats:
    total_titles: int
    duplicate_groups: int


class TitleRegistry:
    def __init__(self) -> None:
        self._titles: dict[str, list[str]] = {}

    def reset(self) -> None:
        self._titles.clear()

    def stats(self) -> TitleRegistryStats:
        groups = sum(1 for urls in self._titles.values() if len(urls) > 1)
        return TitleRegistryStats(total_titles=len(self._titles), duplicate_groups=groups)

    def urls_for(self, title: str) -> list[str]:
        return list(self._titles.get(normalize_title(title), []))

    def record(self, title: str, url: str) -> list[str]:
        """Append url under the normalized title and return a copy of the group."""
        urls = self._titles.setdefault(normalize_title(title), [])
        urls.append(url)
        return list(urls)


def evaluate_title(registry: TitleRegistry, url: str, title: str | None) -> RuleResult:
    if not title or not title.strip():
        return fail(TITLE_UNIQUE_ID, "Page has no title tag", {"title": None, "url": url})

    normalized = normalize_title(title)
    urls = registry.record(title, url)
    if len(urls) > 1:
        return warn(
            TITLE_UNIQUE_ID,
            f"Duplicate title found on {len(urls)} pages",
            {
                "title": title,
                "normalized_title": normalized,
                "duplicate_urls": urls,
                "impact": "Duplicate titles confuse search engines about which page to prioritize",
                "recommendation": 'Create unique, descriptive titles for each page (e.g., "Page Topic | Brand Name")',
            },
        )
    return pass_(TITLE_UNIQUE_ID, "Page title is unique", {"title": title, "normalized_title": normalized, "url": url})
