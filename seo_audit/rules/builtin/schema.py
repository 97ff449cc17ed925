from __future__ import annotations

import json
from typing import Any, Iterator

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

DEPRECATED_TYPES = {"HowTo"}


def extract_jsonld_blocks(context: PageContext) -> tuple[list[Any], list[str]]:
    blocks: list[Any] = []
    errors: list[str] = []
    for script in context.soup.find_all("script", type="application/ld+json"):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue
        try:
            blocks.append(json.loads(raw))
        except json.JSONDecodeError as exc:
            errors.append(str(exc))
    return blocks, errors


def _nodes(value: Any) -> Iterator[dict[str, Any]]:
    if isinstance(value, list):
        for item in value:
            yield from _nodes(item)
    elif isinstance(value, dict):
        if "@graph" in value:
            yield from _nodes(value["@graph"])
        else:
            yield value


def _types(node: dict[str, Any]) -> list[str]:
    raw = node.get("@type")
    if isinstance(raw, str):
        return [raw]
    if isinstance(raw, list):
        return [item for item in raw if isinstance(item, str)]
    return []


@rule(
    id="schema-jsonld-present",
    name="Structured data present",
    description="Page embeds JSON-LD structured data",
    category="schema",
    weight=40,
)
def jsonld_present(context: PageContext) -> RuleResult:
    blocks, errors = extract_jsonld_blocks(context)
    if not blocks and not errors:
        return warn("schema-jsonld-present", "No schema detected", {"recommendation": "Add schema for page type."})
    return pass_("schema-jsonld-present", f"{len(blocks) + len(errors)} JSON-LD block(s) found")


@rule(
    id="schema-jsonld-valid",
    name="Structured data valid",
    description="JSON-LD blocks parse and declare an @type",
    category="schema",
    weight=60,
)
def jsonld_valid(context: PageContext) -> RuleResult:
    blocks, errors = extract_jsonld_blocks(context)
    if errors:
        return fail(
            "schema-jsonld-valid",
            f"{len(errors)} JSON-LD block(s) failed to parse",
            {"errors": errors, "recommendation": "Fix JSON-LD syntax/structure."},
        )
    if not blocks:
        return pass_("schema-jsonld-valid", "No JSON-LD to validate")
    nodes = list(_nodes(blocks))
    untyped = sum(1 for node in nodes if not _types(node))
    found = sorted({t for node in nodes for t in _types(node)})
    deprecated = sorted(set(found) & DEPRECATED_TYPES)
    details = {"types": found, "untyped_nodes": untyped, "deprecated": deprecated}
    if untyped:
        return warn("schema-jsonld-valid", f"{untyped} JSON-LD node(s) missing @type", details)
    if deprecated:
        return warn("schema-jsonld-valid", f"Deprecated schema type(s): {', '.join(deprecated)}", details)
    return pass_("schema-jsonld-valid", f"JSON-LD valid ({', '.join(found)})", details)


RULES = (jsonld_present, jsonld_valid)
