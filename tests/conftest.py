from __future__ import annotations

from typing import Any, Callable

import pytest

from seo_audit.context import PageContext, build_page_context
from seo_audit.rules.define import pass_
from seo_audit.types import Rule


def html_doc(title: str | None = "Acme Widgets | Durable Industrial Widgets", body: str = "", head: str = "") -> str:
    title_tag = f"<title>{title}</title>" if title is not None else ""
    return f"<!doctype html><html lang=\"en\"><head>{title_tag}{head}</head><body>{body}</body></html>"


def words(prefix: str, count: int, start: int = 0) -> str:
    return " ".join(f"{prefix}{i}" for i in range(start, start + count))


@pytest.fixture
def make_page() -> Callable[..., PageContext]:
    def factory(url: str = "https://example.com/", html: str | None = None, **kwargs: Any) -> PageContext:
        return build_page_context(url, html if html is not None else html_doc(), **kwargs)

    return factory


def make_rule(rule_id: str, category: str = "core", weight: float = 10, check: Callable[..., Any] | None = None, **kwargs: Any) -> Rule:
    return Rule(
        id=rule_id,
        name=rule_id,
        description=rule_id,
        category=category,
        weight=weight,
        check=check or (lambda context: pass_(rule_id, "ok")),
        **kwargs,
    )
