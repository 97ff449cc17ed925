"""
Raw versus rendered DOM checks. Both pass as skipped when no rendered snapshot
was captured for the page.
"""

from __future__ import annotations

import re

from ...context import PageContext, visible_text
from ...types import RuleResult
from ..define import pass_, rule, warn

RENDERED_CONTENT_RATIO = 0.5


def _skipped(rule_id: str) -> RuleResult:
    return pass_(rule_id, "No rendered DOM available", {"skipped": True, "reason": "not rendered"})


@rule(
    id="js-title-modified",
    name="Title changed by JavaScript",
    description="Rendered title matches the title in the raw HTML",
    category="js",
    weight=40,
)
def title_modified(context: PageContext) -> RuleResult:
    if context.rendered_soup is None:
        return _skipped("js-title-modified")
    tag = context.rendered_soup.find("title")
    rendered = tag.get_text(strip=True) if tag else None
    raw = context.title()
    if (rendered or None) != raw:
        return warn(
            "js-title-modified",
            "Title is changed by JavaScript",
            {"raw_title": raw, "rendered_title": rendered, "impact": "Crawlers that do not render may index a different title."},
        )
    return pass_("js-title-modified", "Title is the same before and after rendering")


@rule(
    id="js-rendered-content",
    name="Content depends on JavaScript",
    description="Most visible text is present without executing JavaScript",
    category="js",
    weight=60,
)
def rendered_content(context: PageContext) -> RuleResult:
    if context.rendered_soup is None:
        return _skipped("js-rendered-content")
    raw_words = len(re.findall(r"\b\w+\b", context.body_text()))
    rendered_words = len(re.findall(r"\b\w+\b", visible_text(context.rendered_soup)))
    details = {"raw_words": raw_words, "rendered_words": rendered_words}
    if rendered_words and raw_words < rendered_words * RENDERED_CONTENT_RATIO:
        return warn(
            "js-rendered-content",
            f"Only {raw_words} of {rendered_words} rendered words are in the raw HTML",
            {**details, "recommendation": "Server-render primary content so it is indexable without JavaScript."},
        )
    return pass_("js-rendered-content", "Primary content is present in the raw HTML", details)


RULES = (title_modified, rendered_content)
