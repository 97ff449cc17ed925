from __future__ import annotations

import re

from ...analyzers.descriptions import DUPLICATE_DESCRIPTION_ID, evaluate_description
from ...analyzers.duplicates import (
    EXACT_DUPLICATE_ID,
    NEAR_DUPLICATE_ID,
    evaluate_exact_duplicate,
    evaluate_near_duplicate,
)
from ...context import PageContext
from ...session import AuditSession
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

THIN_CONTENT_WORDS = 300
MIN_CONTENT_WORDS = 100


@rule(
    id="content-word-count",
    name="Word count",
    description=f"Page has at least {THIN_CONTENT_WORDS} words of visible text",
    category="content",
    weight=20,
)
def word_count(context: PageContext) -> RuleResult:
    words = len(re.findall(r"\b\w+\b", context.body_text()))
    details = {"word_count": words, "minimum": THIN_CONTENT_WORDS}
    if words < MIN_CONTENT_WORDS:
        return fail("content-word-count", f"Only {words} words detected", details)
    if words < THIN_CONTENT_WORDS:
        return warn("content-word-count", f"Thin content risk: {words} words", details)
    return pass_("content-word-count", f"Page has {words} words", details)


@rule(
    id="content-heading-hierarchy",
    name="Heading hierarchy",
    description="Heading levels do not skip (e.g. H2 followed by H4)",
    category="content",
    weight=10,
)
def heading_hierarchy(context: PageContext) -> RuleResult:
    levels = [int(tag.name[1]) for tag in context.soup.find_all(re.compile(r"^h[1-6]$"))]
    skips = [
        f"h{previous}->h{current}"
        for previous, current in zip(levels, levels[1:])
        if current > previous + 1
    ]
    if skips:
        return warn(
            "content-heading-hierarchy",
            f"Heading hierarchy skips {len(skips)} level(s)",
            {"skips": skips, "recommendation": "Avoid skipped heading levels (e.g., H2->H4)."},
        )
    return pass_("content-heading-hierarchy", "Heading hierarchy is sequential", {"heading_count": len(levels)})


@rule(
    id=EXACT_DUPLICATE_ID,
    name="Exact duplicate content",
    description="Body text is not identical to another page of the crawl",
    category="content",
    weight=15,
    stateful=True,
)
def duplicate_exact(context: PageContext, session: AuditSession) -> RuleResult:
    return evaluate_exact_duplicate(session.content_hashes, context.url, context.body_text())


@rule(
    id=NEAR_DUPLICATE_ID,
    name="Near-duplicate content",
    description="Body text is not highly similar to another page of the crawl",
    category="content",
    weight=15,
    stateful=True,
)
def duplicate_near(context: PageContext, session: AuditSession) -> RuleResult:
    return evaluate_near_duplicate(session.near_duplicates, context.url, context.body_text())


@rule(
    id=DUPLICATE_DESCRIPTION_ID,
    name="Duplicate description",
    description="Meta description is not shared with another page of the crawl",
    category="content",
    weight=5,
    stateful=True,
)
def duplicate_description(context: PageContext, session: AuditSession) -> RuleResult:
    return evaluate_description(session.descriptions, context.url, context.meta(name="description"))


RULES = (word_count, heading_hierarchy, duplicate_exact, duplicate_near, duplicate_description)
