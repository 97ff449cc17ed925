from __future__ import annotations

from ...analyzers.titles import TITLE_UNIQUE_ID, evaluate_title
from ...context import PageContext
from ...session import AuditSession
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

TITLE_MIN_CHARS = 30
TITLE_MAX_CHARS = 60
DESCRIPTION_MIN_CHARS = 70
DESCRIPTION_MAX_CHARS = 160


@rule(
    id="core-title-present",
    name="Title tag present",
    description="Page has a non-empty <title> element",
    category="core",
    weight=15,
)
def title_present(context: PageContext) -> RuleResult:
    title = context.title()
    if not title:
        return fail(
            "core-title-present",
            "Page has no title tag",
            {"recommendation": "Set unique, intent-matched titles (30-60 chars) for all indexable pages."},
        )
    return pass_("core-title-present", "Title tag present", {"title": title})


@rule(
    id="core-title-length",
    name="Title length",
    description=f"Title is between {TITLE_MIN_CHARS} and {TITLE_MAX_CHARS} characters",
    category="core",
    weight=8,
)
def title_length(context: PageContext) -> RuleResult:
    title = context.title()
    if not title:
        return fail("core-title-length", "Page has no title tag")
    length = len(title)
    details = {"title": title, "length": length, "min": TITLE_MIN_CHARS, "max": TITLE_MAX_CHARS}
    if length < TITLE_MIN_CHARS:
        return warn("core-title-length", f"Title is too short ({length} chars)", details)
    if length > TITLE_MAX_CHARS:
        return warn("core-title-length", f"Title is too long ({length} chars), may be truncated in results", details)
    return pass_("core-title-length", f"Title length is good ({length} chars)", details)


@rule(
    id="core-description-present",
    name="Meta description present",
    description="Page has a non-empty meta description",
    category="core",
    weight=12,
)
def description_present(context: PageContext) -> RuleResult:
    description = context.meta(name="description")
    if not description:
        return fail(
            "core-description-present",
            "Page is missing a meta description",
            {"recommendation": "Add a compelling 140-160 char description."},
        )
    return pass_("core-description-present", "Meta description present")


@rule(
    id="core-description-length",
    name="Meta description length",
    description=f"Meta description is between {DESCRIPTION_MIN_CHARS} and {DESCRIPTION_MAX_CHARS} characters",
    category="core",
    weight=6,
)
def description_length(context: PageContext) -> RuleResult:
    description = context.meta(name="description")
    if not description:
        return fail("core-description-length", "Page is missing a meta description")
    length = len(description)
    details = {"length": length, "min": DESCRIPTION_MIN_CHARS, "max": DESCRIPTION_MAX_CHARS}
    if length < DESCRIPTION_MIN_CHARS:
        return warn("core-description-length", f"Meta description is too short ({length} chars)", details)
    if length > DESCRIPTION_MAX_CHARS:
        return warn("core-description-length", f"Meta description is too long ({length} chars)", details)
    return pass_("core-description-length", f"Meta description length is good ({length} chars)", details)


@rule(
    id="core-canonical-present",
    name="Canonical link",
    description="Page declares a rel=canonical URL",
    category="core",
    weight=10,
)
def canonical_present(context: PageContext) -> RuleResult:
    tag = context.soup.find("link", rel="canonical")
    href = str(tag.get("href") or "").strip() if tag else ""
    if not href:
        return warn("core-canonical-present", "Missing canonical tag", {"recommendation": "Add rel=canonical."})
    return pass_("core-canonical-present", "Canonical tag present", {"canonical": href})


@rule(
    id="core-h1-single",
    name="Single H1",
    description="Page has exactly one H1 heading",
    category="core",
    weight=10,
)
def h1_single(context: PageContext) -> RuleResult:
    count = len(context.soup.find_all("h1"))
    if count == 0:
        return fail("core-h1-single", "Page has no H1 heading", {"h1_count": 0})
    if count > 1:
        return warn("core-h1-single", f"Detected {count} H1 tags; use exactly one", {"h1_count": count})
    return pass_("core-h1-single", "Page has a single H1 heading")


@rule(
    id="core-robots-meta",
    name="Indexable",
    description="Page is not blocked by a noindex robots directive",
    category="core",
    weight=15,
)
def robots_meta(context: PageContext) -> RuleResult:
    directives = ", ".join(
        value for value in (context.meta(name="robots"), context.header("x-robots-tag")) if value
    )
    if "noindex" in directives.lower():
        return fail(
            "core-robots-meta",
            "Page marked noindex",
            {"directives": directives, "recommendation": "Remove noindex if page should rank."},
        )
    return pass_("core-robots-meta", "Page is indexable")


@rule(
    id=TITLE_UNIQUE_ID,
    name="Unique title",
    description="Page title is not shared with another page of the crawl",
    category="core",
    weight=8,
    stateful=True,
)
def title_unique(context: PageContext, session: AuditSession) -> RuleResult:
    return evaluate_title(session.titles, context.url, context.title())


@rule(
    id="mobile-viewport",
    name="Viewport meta tag",
    description="Page declares a responsive viewport",
    category="mobile",
    weight=20,
)
def viewport_present(context: PageContext) -> RuleResult:
    viewport = context.meta(name="viewport")
    if not viewport:
        return fail("mobile-viewport", "Missing viewport meta tag")
    if "width=device-width" not in viewport.replace(" ", "").lower():
        return warn("mobile-viewport", "Viewport does not use width=device-width", {"viewport": viewport})
    return pass_("mobile-viewport", "Responsive viewport declared", {"viewport": viewport})


RULES = (
    title_present,
    title_length,
    description_present,
    description_length,
    canonical_present,
    h1_single,
    robots_meta,
    title_unique,
    viewport_present,
)
