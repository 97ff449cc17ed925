"""
Cross-page duplicate content detection.

Near duplicates compare word-trigram sets with Jaccard similarity against every page
registered earlier in the session, so a crawl of N qualifying pages costs O(N^2)
set intersections. Exact duplicates compare an md5 of the collapsed body text.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import AbstractSet

from ..rules.define import fail, pass_, warn
from ..types import RuleResult

NEAR_DUPLICATE_ID = "content-duplicate-near"
EXACT_DUPLICATE_ID = "content-duplicate-exact"

MIN_TEXT_LENGTH = 100
MIN_TRIGRAMS = 5
MAX_WORDS = 500
DUPLICATE_THRESHOLD = 0.8
SIMILAR_THRESHOLD = 0.6
MIN_EXACT_TEXT_LENGTH = 50


def normalize_body_text(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip().lower()


def extract_trigrams(text: str, max_words: int = MAX_WORDS) -> frozenset[str]:
    cleaned = re.sub(r"[^a-z0-9\s]", "", (text or "").lower())
    words = cleaned.split()[:max_words]
    return frozenset(" ".join(words[i : i + 3]) for i in range(len(words) - 2))


def jaccard_similarity(a: AbstractSet[str], b: AbstractSet[str]) -> float:
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    smaller, larger = (a, b) if len(a) <= len(b) else (b, a)
    intersection = sum(1 for item in smaller if item in larger)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0


@dataclass(frozen=True)
class StoredPage:
    url: str
    trigrams: frozenset[str]


@dataclass(frozen=True)
class NearDuplicateStats:
    total_pages: int


class NearDuplicateRegistry:
    def __init__(self) -> None:
        self._pages: list[StoredPage] = []

    def reset(self) -> None:
        self._pages.clear()

    def stats(self) -> NearDuplicateStats:
        return NearDuplicateStats(total_pages=len(self._pages))

    def add(self, url: str, trigrams: frozenset[str]) -> None:
        self._pages.append(StoredPage(url=url, trigrams=trigrams))

    def most_similar(self, trigrams: frozenset[str]) -> tuple[float, str | None]:
        best = 0.0
        best_url: str | None = None
        for stored in self._pages:
            similarity = jaccard_similarity(trigrams, stored.trigrams)
            if similarity > best:
                best = similarity
                best_url = stored.url
        return best, best_url


def evaluate_near_duplicate(registry: NearDuplicateRegistry, url: str, body_text: str) -> RuleResult:
    text = normalize_body_text(body_text)
    if len(text) < MIN_TEXT_LENGTH:
        return pass_(
            NEAR_DUPLICATE_ID,
            "Page has insufficient content for near-duplicate detection",
            {"url": url, "text_length": len(text), "reason": "skipped"},
        )

    trigrams = extract_trigrams(text)
    if len(trigrams) < MIN_TRIGRAMS:
        registry.add(url, trigrams)
        return pass_(
            NEAR_DUPLICATE_ID,
            "Page has too few word trigrams for reliable comparison",
            {"url": url, "trigram_count": len(trigrams), "reason": "skipped"},
        )

    similarity, similar_url = registry.most_similar(trigrams)
    registry.add(url, trigrams)

    percent = round(similarity * 100)
    details = {
        "url": url,
        "trigram_count": len(trigrams),
        "highest_similarity": round(similarity, 2),
        "most_similar_url": similar_url,
        "thresholds": {"duplicate": DUPLICATE_THRESHOLD, "similar": SIMILAR_THRESHOLD},
    }
    if similarity > DUPLICATE_THRESHOLD:
        return fail(
            NEAR_DUPLICATE_ID,
            f"Near-duplicate content detected: {percent}% similar to {similar_url}",
            {
                **details,
                "impact": "Near-duplicate pages cause keyword cannibalization and confuse search engines about which page to rank",
                "recommendation": "Consolidate similar pages, differentiate their content, or point a canonical tag at the preferred version.",
            },
        )
    if similarity > SIMILAR_THRESHOLD:
        return warn(
            NEAR_DUPLICATE_ID,
            f"Similar content detected: {percent}% similar to {similar_url}",
            {
                **details,
                "impact": "Highly similar content may compete with itself in search rankings",
                "recommendation": "Differentiate content, titles and meta descriptions to target different search intents.",
            },
        )
    message = (
        f"Content is sufficiently unique (highest similarity: {percent}%)"
        if similar_url
        else "First page analyzed (no comparison available yet)"
    )
    return pass_(NEAR_DUPLICATE_ID, message, details)


@dataclass(frozen=True)
class ContentHashStats:
    total_hashes: int


class ContentHashRegistry:
    def __init__(self) -> None:
        self._hashes: dict[str, str] = {}

    def reset(self) -> None:
        self._hashes.clear()

    def stats(self) -> ContentHashStats:
        return ContentHashStats(total_hashes=len(self._hashes))

    def first_seen(self, digest: str, url: str) -> str | None:
        """Return the URL that first produced digest, registering url if it is new."""
        existing = self._hashes.get(digest)
        if existing is None:
            self._hashes[digest] = url
        return existing


def evaluate_exact_duplicate(registry: ContentHashRegistry, url: str, body_text: str) -> RuleResult:
    text = re.sub(r"\s+", " ", body_text or "").strip()
    if len(text) < MIN_EXACT_TEXT_LENGTH:
        return pass_(
            EXACT_DUPLICATE_ID,
            "Page has insufficient content for duplicate detection",
            {"url": url, "text_length": len(text), "reason": "skipped"},
        )

    digest = hashlib.md5(text.encode("utf-8")).hexdigest()
    original = registry.first_seen(digest, url)
    if original is not None:
        return fail(
            EXACT_DUPLICATE_ID,
            f"Exact duplicate content detected (matches {original})",
            {
                "url": url,
                "duplicate_of": original,
                "content_hash": digest,
                "text_length": len(text),
                "recommendation": "Consolidate duplicates with canonical tags or 301 redirects so each URL serves unique content.",
            },
        )
    return pass_(
        EXACT_DUPLICATE_ID,
        "Content is unique (no exact duplicates detected)",
        {"url": url, "content_hash": digest, "text_length": len(text)},
    )
