from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .analyzers.descriptions import DescriptionRegistry
from .analyzers.duplicates import ContentHashRegistry, NearDuplicateRegistry
from .analyzers.titles import TitleRegistry


@dataclass
class AuditSession:
    """Cross-page state for one crawl, handed to every stateful rule.

    The registries only grow while pages are processed. Call reset() before the
    session is reused for an unrelated crawl; nothing expires on its own.
    """

    titles: TitleRegistry = field(default_factory=TitleRegistry)
    descriptions: DescriptionRegistry = field(default_factory=DescriptionRegistry)
    near_duplicates: NearDuplicateRegistry = field(default_factory=NearDuplicateRegistry)
    content_hashes: ContentHashRegistry = field(default_factory=ContentHashRegistry)

    def reset(self) -> None:
        self.titles.reset()
        self.descriptions.reset()
        self.near_duplicates.reset()
        self.content_hashes.reset()

    def stats(self) -> dict[str, Any]:
        titles = self.titles.stats()
        descriptions = self.descriptions.stats()
        return {
            "total_titles": titles.total_titles,
            "duplicate_title_groups": titles.duplicate_groups,
            "total_descriptions": descriptions.total_descriptions,
            "duplicate_description_groups": descriptions.duplicate_groups,
            "near_duplicate_pages": self.near_duplicates.stats().total_pages,
            "content_hashes": self.content_hashes.stats().total_hashes,
        }
