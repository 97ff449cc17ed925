from __future__ import annotations

import asyncio

from ...context import PageContext
from ...crawler import probe_status
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

MAX_PROBED_IMAGES = 20
PROBE_TIMEOUT = 10


@rule(
    id="images-alt",
    name="Image alt text",
    description="Every <img> has a non-empty alt attribute",
    category="images",
    weight=30,
)
def images_alt(context: PageContext) -> RuleResult:
    images = context.images()
    if not images:
        return pass_("images-alt", "No images on page")
    missing = [img.src or "(inline)" for img in images if img.alt is None or not img.alt.strip()]
    details = {"image_count": len(images), "missing_alt": len(missing), "examples": missing[:8]}
    if not missing:
        return pass_("images-alt", "All images have alt text", details)
    if len(missing) / len(images) > 0.5:
        return fail("images-alt", f"{len(missing)}/{len(images)} images missing alt text", details)
    return warn("images-alt", f"{len(missing)}/{len(images)} images missing alt text", details)


@rule(
    id="images-dimensions",
    name="Image dimensions",
    description="Images declare width and height to avoid layout shift",
    category="images",
    weight=15,
)
def images_dimensions(context: PageContext) -> RuleResult:
    images = context.images()
    missing = [img.src or "(inline)" for img in images if not img.width or not img.height]
    if not missing:
        return pass_("images-dimensions", "All images declare dimensions", {"image_count": len(images)})
    return warn(
        "images-dimensions",
        f"{len(missing)}/{len(images)} images missing width/height",
        {
            "missing_dimensions": len(missing),
            "examples": missing[:8],
            "impact": "Images missing dimensions can shift layout.",
        },
    )


@rule(
    id="images-broken",
    name="Broken images",
    description="Image URLs respond without an HTTP error",
    category="images",
    weight=25,
    timeout=30,
)
async def images_broken(context: PageContext) -> RuleResult:
    urls = list(dict.fromkeys(img.url for img in context.images() if img.url.startswith(("http://", "https://"))))
    if not urls:
        return pass_("images-broken", "No remote images to check")
    checked = urls[:MAX_PROBED_IMAGES]
    statuses = await asyncio.gather(*(asyncio.to_thread(probe_status, url, PROBE_TIMEOUT) for url in checked))
    broken = [url for url, status in zip(checked, statuses) if status is not None and status >= 400]
    unreachable = [url for url, status in zip(checked, statuses) if status is None]
    details = {"checked": len(checked), "broken": broken, "unreachable": len(unreachable)}
    if broken:
        return fail("images-broken", f"{len(broken)} broken image(s) found", details)
    return pass_("images-broken", f"Checked {len(checked)} image(s), none broken", details)


RULES = (images_alt, images_dimensions, images_broken)
