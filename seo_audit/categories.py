from __future__ import annotations

from .types import CategoryDefinition

CATEGORIES: tuple[CategoryDefinition, ...] = (
    CategoryDefinition("core", "Core", "Meta tags, canonical, H1, indexing directives, title uniqueness", 12),
    CategoryDefinition("technical", "Technical SEO", "Status codes, robots.txt, sitemap and crawl signals", 7),
    CategoryDefinition("perf", "Performance", "Response time, page weight and Core Web Vitals", 12),
    CategoryDefinition("links", "Links", "Internal and external links, anchor text and broken links", 8),
    CategoryDefinition("images", "Images", "Alt attributes, dimensions and broken images", 8),
    CategoryDefinition("security", "Security", "HTTPS, security headers and mixed content", 8),
    CategoryDefinition("crawl", "Crawlability", "Pagination, indexability signals and crawl configuration", 5),
    CategoryDefinition("schema", "Structured Data", "JSON-LD validity and Schema.org markup", 5),
    CategoryDefinition("a11y", "Accessibility", "Language, labels and screen reader support", 4),
    CategoryDefinition("content", "Content", "Word count, headings and duplicate content", 5),
    CategoryDefinition("social", "Social", "Open Graph and Twitter Card metadata", 3),
    CategoryDefinition("eeat", "E-E-A-T", "Experience, expertise, authority and trust signals", 3),
    CategoryDefinition("url", "URL Structure", "URL length, parameters and slug quality", 3),
    CategoryDefinition("mobile", "Mobile", "Viewport, font size and tap targets", 2),
    CategoryDefinition("i18n", "Internationalization", "Language declarations and hreflang", 2),
    CategoryDefinition("legal", "Legal Compliance", "Privacy policy and cookie consent signals", 1),
    CategoryDefinition("js", "JavaScript Rendering", "Raw versus rendered DOM consistency", 5),
    CategoryDefinition("redirect", "Redirects", "Redirect chains, loops and meta refresh", 3),
    CategoryDefinition("htmlval", "HTML Validation", "Doctype, charset and head integrity", 2),
    CategoryDefinition("geo", "AI/GEO Readiness", "Semantic HTML and AI crawler access", 2),
)

DEFAULT_CATEGORY_WEIGHT = 1.0


def get_category(category_id: str) -> CategoryDefinition | None:
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def category_ids() -> list[str]:
    return [category.id for category in CATEGORIES]


def validate_category_weights(categories: tuple[CategoryDefinition, ...] = CATEGORIES) -> bool:
    return sum(category.weight for category in categories) == 100
