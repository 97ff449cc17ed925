from __future__ import annotations

from urllib.parse import urlparse

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

MAX_REDIRECT_HOPS = 1


@rule(
    id="technical-status-code",
    name="HTTP status",
    description="Page responds with a 2xx status",
    category="technical",
    weight=40,
)
def status_code(context: PageContext) -> RuleResult:
    code = context.status_code
    if 200 <= code < 300:
        return pass_("technical-status-code", f"Page returned {code}", {"status_code": code})
    if 300 <= code < 400:
        return warn("technical-status-code", f"Page returned redirect status {code}", {"status_code": code})
    return fail(
        "technical-status-code",
        f"Page returned error status {code}",
        {"status_code": code, "recommendation": "Repair broken URLs and eliminate server-side failures."},
    )


@rule(
    id="redirect-chain",
    name="Redirect chain",
    description=f"Page is reached in at most {MAX_REDIRECT_HOPS} redirect hop",
    category="redirect",
    weight=30,
)
def redirect_chain(context: PageContext) -> RuleResult:
    hops = context.redirect_hops
    if hops > MAX_REDIRECT_HOPS:
        return warn(
            "redirect-chain",
            f"Page reached through {hops} redirects",
            {"hops": hops, "final_url": context.final_url, "recommendation": "Link directly to the final URL."},
        )
    return pass_("redirect-chain", "No redirect chain", {"hops": hops})


@rule(
    id="crawl-robots-txt",
    name="robots.txt",
    description="Site publishes a robots.txt that does not block everything",
    category="crawl",
    weight=30,
)
def robots_txt(context: PageContext) -> RuleResult:
    text = context.robots_txt
    if text is None:
        return warn("crawl-robots-txt", "robots.txt not found or unavailable")
    agent_all = False
    for raw_line in text.splitlines():
        line = raw_line.split("#", 1)[0].strip()
        key, _, value = line.partition(":")
        key, value = key.strip().lower(), value.strip()
        if key == "user-agent":
            agent_all = value == "*"
        elif key == "disallow" and agent_all and value == "/":
            return fail("crawl-robots-txt", "robots.txt disallows the whole site for all crawlers")
    return pass_("crawl-robots-txt", "robots.txt present")


@rule(
    id="crawl-sitemap",
    name="XML sitemap",
    description="Site publishes an XML sitemap listing its URLs",
    category="crawl",
    weight=25,
)
def sitemap(context: PageContext) -> RuleResult:
    urls = context.sitemap_urls
    if urls is None:
        return warn("crawl-sitemap", "No XML sitemap found", {"recommendation": "Publish /sitemap.xml and reference it in robots.txt."})
    if not urls:
        return warn("crawl-sitemap", "Sitemap lists no URLs")
    path = urlparse(context.url).path or "/"
    listed = any((urlparse(item).path or "/") == path for item in urls)
    details = {"sitemap_url_count": len(urls), "page_listed": listed}
    return pass_("crawl-sitemap", f"Sitemap lists {len(urls)} URL(s)", details)


RULES = (status_code, redirect_chain, robots_txt, sitemap)
