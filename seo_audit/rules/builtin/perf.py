from __future__ import annotations

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

RESPONSE_GOOD_MS = 800
RESPONSE_POOR_MS = 2000
PAGE_WEIGHT_WARN_BYTES = 500_000
PAGE_WEIGHT_FAIL_BYTES = 1_500_000
LCP_GOOD_MS = 2500
LCP_POOR_MS = 4000
MAX_BLOCKING_SCRIPTS = 3


@rule(
    id="perf-response-time",
    name="Server response time",
    description=f"Document responds within {RESPONSE_GOOD_MS} ms",
    category="perf",
    weight=30,
)
def response_time(context: PageContext) -> RuleResult:
    ms = context.response_time_ms
    if ms is None:
        return pass_("perf-response-time", "Response time not measured", {"skipped": True})
    details = {"response_time_ms": ms, "good": RESPONSE_GOOD_MS, "poor": RESPONSE_POOR_MS}
    if ms > RESPONSE_POOR_MS:
        return fail("perf-response-time", f"Slow response ({ms:.0f} ms)", details)
    if ms > RESPONSE_GOOD_MS:
        return warn("perf-response-time", f"Response time could improve ({ms:.0f} ms)", details)
    return pass_("perf-response-time", f"Fast response ({ms:.0f} ms)", details)


@rule(
    id="perf-page-weight",
    name="HTML weight",
    description="Document HTML stays below 500 KB",
    category="perf",
    weight=20,
)
def page_weight(context: PageContext) -> RuleResult:
    size = len(context.html.encode("utf-8"))
    details = {"bytes": size}
    if size > PAGE_WEIGHT_FAIL_BYTES:
        return fail("perf-page-weight", f"HTML is very large ({size // 1024} KB)", details)
    if size > PAGE_WEIGHT_WARN_BYTES:
        return warn("perf-page-weight", f"HTML is large ({size // 1024} KB)", details)
    return pass_("perf-page-weight", f"HTML size is {size // 1024} KB", details)


@rule(
    id="perf-lcp",
    name="Largest Contentful Paint",
    description=f"LCP is at most {LCP_GOOD_MS} ms",
    category="perf",
    weight=35,
)
def lcp(context: PageContext) -> RuleResult:
    value = context.cwv.get("lcp")
    if value is None:
        return pass_("perf-lcp", "LCP not measured", {"skipped": True})
    details = {"lcp_ms": value, "good": LCP_GOOD_MS, "poor": LCP_POOR_MS}
    if value > LCP_POOR_MS:
        return fail("perf-lcp", f"LCP is poor ({value:.0f} ms)", details)
    if value > LCP_GOOD_MS:
        return warn("perf-lcp", f"LCP needs improvement ({value:.0f} ms)", details)
    return pass_("perf-lcp", f"LCP is good ({value:.0f} ms)", details)


@rule(
    id="perf-render-blocking",
    name="Render-blocking scripts",
    description="Few synchronous scripts in the document head",
    category="perf",
    weight=15,
)
def render_blocking(context: PageContext) -> RuleResult:
    head = context.soup.head
    if head is None:
        return pass_("perf-render-blocking", "No document head")
    blocking = [
        str(script.get("src"))
        for script in head.find_all("script", src=True)
        if not script.has_attr("async") and not script.has_attr("defer") and script.get("type") != "module"
    ]
    if len(blocking) > MAX_BLOCKING_SCRIPTS:
        return warn(
            "perf-render-blocking",
            f"{len(blocking)} render-blocking scripts in <head>",
            {"scripts": blocking[:8], "recommendation": "Add async or defer to non-critical scripts."},
        )
    return pass_("perf-render-blocking", "No excessive render-blocking scripts", {"blocking_count": len(blocking)})


RULES = (response_time, page_weight, lcp, render_blocking)
