from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Mapping
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

NON_VISIBLE_TAGS = ["script", "style", "noscript", "template"]


def soup_of(html: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(html, "lxml")
    except Exception:
        return BeautifulSoup(html, "html.parser")


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def visible_text(soup: BeautifulSoup) -> str:
    region = soup.body or soup
    clone = BeautifulSoup(str(region), "html.parser")
    for node in clone(NON_VISIBLE_TAGS):
        node.decompose()
    return collapse_whitespace(clone.get_text(" "))


@dataclass(frozen=True)
class LinkInfo:
    href: str
    url: str
    text: str
    is_internal: bool
    is_nofollow: bool


@dataclass(frozen=True)
class ImageInfo:
    src: str
    url: str
    alt: str | None
    width: str | None
    height: str | None
    is_lazy: bool


@dataclass
class PageContext:
    """Everything a rule may look at for one page. Rules must treat it as read-only."""

    url: str
    html: str
    soup: BeautifulSoup
    headers: dict[str, str] = field(default_factory=dict)
    status_code: int = 200
    response_time_ms: float | None = None
    cwv: dict[str, float] = field(default_factory=dict)
    rendered_html: str | None = None
    rendered_soup: BeautifulSoup | None = None
    robots_txt: str | None = None
    sitemap_urls: list[str] | None = None
    final_url: str | None = None
    redirect_hops: int = 0

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    def title(self) -> str | None:
        tag = self.soup.find("title")
        if tag is None:
            return None
        text = tag.get_text(strip=True)
        return text or None

    def meta(self, name: str | None = None, prop: str | None = None) -> str | None:
        tag = None
        if name:
            tag = self.soup.find("meta", attrs={"name": re.compile(f"^{re.escape(name)}$", re.I)})
        elif prop:
            tag = self.soup.find("meta", attrs={"property": re.compile(f"^{re.escape(prop)}$", re.I)})
        if tag and tag.get("content"):
            return str(tag.get("content")).strip()
        return None

    def body_text(self) -> str:
        return visible_text(self.soup)

    def links(self) -> list[LinkInfo]:
        host = (urlparse(self.url).hostname or "").lower()
        found: list[LinkInfo] = []
        for anchor in self.soup.find_all("a", href=True):
            href = str(anchor.get("href") or "").strip()
            if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
                continue
            full = urljoin(self.url, href)
            if not full.startswith(("http://", "https://")):
                continue
            rel = " ".join(anchor.get("rel") or []).lower()
            found.append(
                LinkInfo(
                    href=href,
                    url=full,
                    text=anchor.get_text(" ", strip=True),
                    is_internal=(urlparse(full).hostname or "").lower() == host,
                    is_nofollow="nofollow" in rel,
                )
            )
        return found

    def images(self) -> list[ImageInfo]:
        found: list[ImageInfo] = []
        for img in self.soup.find_all("img"):
            src = str(img.get("src") or "").strip()
            alt = img.get("alt")
            found.append(
                ImageInfo(
                    src=src,
                    url=urljoin(self.url, src) if src else "",
                    alt=None if alt is None else str(alt),
                    width=img.get("width"),
                    height=img.get("height"),
                    is_lazy=str(img.get("loading") or "").lower() == "lazy",
                )
            )
        return found


def build_page_context(
    url: str,
    html: str,
    *,
    headers: Mapping[str, Any] | None = None,
    status_code: int = 200,
    response_time_ms: float | None = None,
    cwv: Mapping[str, float] | None = None,
    rendered_html: str | None = None,
    robots_txt: str | None = None,
    sitemap_urls: list[str] | None = None,
    final_url: str | None = None,
    redirect_hops: int = 0,
) -> PageContext:
    return PageContext(
        url=url,
        html=html or "",
        soup=soup_of(html or ""),
        headers={str(key).lower(): str(value) for key, value in (headers or {}).items()},
        status_code=status_code,
        response_time_ms=response_time_ms,
        cwv=dict(cwv or {}),
        rendered_html=rendered_html,
        rendered_soup=soup_of(rendered_html) if rendered_html else None,
        robots_txt=robots_txt,
        sitemap_urls=list(sitemap_urls) if sitemap_urls is not None else None,
        final_url=final_url,
        redirect_hops=redirect_hops,
    )
