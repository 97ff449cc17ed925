from __future__ import annotations

import asyncio

from ...context import PageContext
from ...crawler import probe_status
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

MAX_PROBED_LINKS = 20
PROBE_TIMEOUT = 10
GENERIC_ANCHORS = {"click here", "here", "read more", "more", "learn more", "link"}


@rule(
    id="links-internal-present",
    name="Internal links",
    description="Page links to at least one other page of the same site",
    category="links",
    weight=25,
)
def internal_present(context: PageContext) -> RuleResult:
    internal = [link.url for link in context.links() if link.is_internal]
    if not internal:
        return warn(
            "links-internal-present",
            "Page has no internal links",
            {"impact": "Orphaned pages are harder to discover and receive no internal link equity."},
        )
    return pass_("links-internal-present", f"{len(internal)} internal link(s)", {"internal_count": len(internal)})


@rule(
    id="links-anchor-text",
    name="Descriptive anchor text",
    description="Links use descriptive, non-empty anchor text",
    category="links",
    weight=15,
)
def anchor_text(context: PageContext) -> RuleResult:
    links = context.links()
    empty = [link.href for link in links if not link.text]
    generic = [link.href for link in links if link.text.lower() in GENERIC_ANCHORS]
    details = {"empty": empty[:8], "generic": generic[:8]}
    if empty:
        return warn("links-anchor-text", f"{len(empty)} link(s) have no anchor text", details)
    if generic:
        return warn("links-anchor-text", f"{len(generic)} link(s) use generic anchor text", details)
    return pass_("links-anchor-text", "Anchor text is descriptive")


@rule(
    id="links-external-valid",
    name="External links resolve",
    description="External link targets respond without an HTTP error",
    category="links",
    weight=20,
    timeout=30,
)
async def external_valid(context: PageContext) -> RuleResult:
    urls = list(dict.fromkeys(link.url for link in context.links() if not link.is_internal))
    if not urls:
        return pass_("links-external-valid", "No external links to check")
    checked = urls[:MAX_PROBED_LINKS]
    statuses = await asyncio.gather(*(asyncio.to_thread(probe_status, url, PROBE_TIMEOUT) for url in checked))
    broken = [url for url, status in zip(checked, statuses) if status is not None and status >= 400]
    details = {
        "checked": len(checked),
        "broken": broken,
        "unreachable": sum(1 for status in statuses if status is None),
    }
    if len(broken) > 2:
        return fail("links-external-valid", f"{len(broken)} broken external link(s)", details)
    if broken:
        return warn("links-external-valid", f"{len(broken)} broken external link(s)", details)
    return pass_("links-external-valid", f"Checked {len(checked)} external link(s), none broken", details)


RULES = (internal_present, anchor_text, external_valid)
