from __future__ import annotations

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

OPEN_GRAPH_TAGS = ("og:title", "og:description", "og:image", "og:url")
TWITTER_TAGS = ("twitter:card", "twitter:title", "twitter:description")


@rule(
    id="social-open-graph",
    name="Open Graph",
    description="Page declares og:title, og:description, og:image and og:url",
    category="social",
    weight=60,
)
def open_graph(context: PageContext) -> RuleResult:
    missing = [tag for tag in OPEN_GRAPH_TAGS if not context.meta(prop=tag)]
    if not missing:
        return pass_("social-open-graph", "Open Graph complete")
    if len(missing) == len(OPEN_GRAPH_TAGS):
        return fail("social-open-graph", "No Open Graph tags", {"missing": missing})
    return warn("social-open-graph", "Open Graph incomplete", {"missing": missing})


@rule(
    id="social-twitter-card",
    name="Twitter Card",
    description="Page declares twitter:card, twitter:title and twitter:description",
    category="social",
    weight=40,
)
def twitter_card(context: PageContext) -> RuleResult:
    # some sites publish twitter tags with property= instead of name=
    missing = [tag for tag in TWITTER_TAGS if not (context.meta(name=tag) or context.meta(prop=tag))]
    if not missing:
        return pass_("social-twitter-card", "Twitter Card complete")
    return warn("social-twitter-card", "Twitter Card incomplete", {"missing": missing})


RULES = (open_graph, twitter_card)
