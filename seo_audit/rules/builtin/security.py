from __future__ import annotations

from urllib.parse import urlparse

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

SECURITY_HEADERS = [
    "content-security-policy",
    "strict-transport-security",
    "x-frame-options",
    "x-content-type-options",
    "referrer-policy",
]

_SUBRESOURCE_ATTRS = (("img", "src"), ("script", "src"), ("iframe", "src"), ("source", "src"))
# rel values whose href the browser fetches while loading the page
_SUBRESOURCE_LINK_RELS = frozenset({"stylesheet", "preload", "modulepreload", "icon", "apple-touch-icon", "manifest"})


@rule(
    id="security-https",
    name="HTTPS",
    description="Page is served over HTTPS",
    category="security",
    weight=40,
)
def https(context: PageContext) -> RuleResult:
    scheme = urlparse(context.final_url or context.url).scheme
    if scheme != "https":
        return fail("security-https", "Page is not served over HTTPS", {"scheme": scheme})
    return pass_("security-https", "Page is served over HTTPS")


@rule(
    id="security-headers",
    name="Security headers",
    description="Response carries the recommended security headers",
    category="security",
    weight=30,
)
def security_headers(context: PageContext) -> RuleResult:
    present = [name for name in SECURITY_HEADERS if context.header(name)]
    missing = [name for name in SECURITY_HEADERS if not context.header(name)]
    details = {"present": present, "missing": missing}
    if not missing:
        return pass_("security-headers", "All recommended security headers present", details)
    if len(missing) <= 2:
        return warn("security-headers", f"Missing {len(missing)} security header(s)", details)
    return fail("security-headers", f"Missing {len(missing)} security header(s)", details)


@rule(
    id="security-mixed-content",
    name="Mixed content",
    description="HTTPS page loads no subresources over plain HTTP",
    category="security",
    weight=30,
)
def mixed_content(context: PageContext) -> RuleResult:
    if urlparse(context.final_url or context.url).scheme != "https":
        return pass_("security-mixed-content", "Page is not served over HTTPS, mixed content not applicable")
    insecure: list[str] = []
    for tag_name, attr in _SUBRESOURCE_ATTRS:
        for tag in context.soup.find_all(tag_name):
            value = str(tag.get(attr) or "").strip()
            if value.lower().startswith("http://"):
                insecure.append(value)
    for tag in context.soup.find_all("link", href=True):
        rel = tag.get("rel") or []
        rels = {str(item).lower() for item in (rel.split() if isinstance(rel, str) else rel)}
        href = str(tag.get("href") or "").strip()
        if rels & _SUBRESOURCE_LINK_RELS and href.lower().startswith("http://"):
            insecure.append(href)
    if insecure:
        return fail(
            "security-mixed-content",
            f"{len(insecure)} subresource(s) loaded over HTTP",
            {"examples": insecure[:8]},
        )
    return pass_("security-mixed-content", "No mixed content detected")


RULES = (https, security_headers, mixed_content)
