"""
Bounded same-site crawler and fetch helpers used to build page contexts.

Every request follows redirects by hand so each hop can be checked against
non-public hosts before it is fetched.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any
from urllib import robotparser
from urllib.parse import urljoin, urlparse, urlunparse

import requests

from .context import PageContext, build_page_context, soup_of

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; SEOAudit/1.0; +https://github.com/seo-audit/seo-audit)"
HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
    "Connection": "keep-alive",
}
MAX_REDIRECT_HOPS = 10
MAX_PAGES_CAP = 500


@dataclass
class CrawledPage:
    url: str
    status_code: int | None = None
    headers: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    response_ms: float | None = None
    redirect_hops: int = 0
    final_url: str | None = None
    error: str | None = None

    @property
    def is_html(self) -> bool:
        content_type = str(self.headers.get("Content-Type") or self.headers.get("content-type") or "").lower()
        if "text/html" in content_type or "application/xhtml+xml" in content_type:
            return True
        # Content-Type can be wrong or absent; fall back to document sniffing.
        return "<html" in (self.text or "").lower()


def normalize_url(raw: str) -> str:
    value = raw.strip()
    parsed = urlparse(value)
    if not parsed.scheme:
        value = f"https://{value}"
        parsed = urlparse(value)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"Unsupported URL scheme: {parsed.scheme}")
    netloc = parsed.netloc or (parsed.hostname or "")
    clean_path = parsed.path or "/"
    return urlunparse((parsed.scheme, netloc, clean_path, "", parsed.query, ""))


def is_public_target(url: str) -> bool:
    host = urlparse(url).hostname
    if not host:
        return False
    try:
        info = socket.getaddrinfo(host, None)
    except socket.gaierror:
        return False
    for _, _, _, _, sockaddr in info:
        ip_text = sockaddr[0]
        try:
            ip = ipaddress.ip_address(ip_text)
        except ValueError:
            continue
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local or ip.is_multicast:
            continue
        return True
    return False


def normalize_host(host: str) -> str:
    lowered = host.lower().strip(".")
    if lowered.startswith("www."):
        return lowered[4:]
    return lowered


def same_site(url_a: str, url_b: str) -> bool:
    a = normalize_host(urlparse(url_a).hostname or "")
    b = normalize_host(urlparse(url_b).hostname or "")
    if not a or not b:
        return False
    return a == b or a.endswith("." + b) or b.endswith("." + a)


def strip_fragment(url: str) -> str:
    p = urlparse(url)
    return urlunparse((p.scheme, p.netloc, p.path, p.params, p.query, ""))


def request_public(
    session: requests.Session | None, method: str, url: str, timeout: float
) -> tuple[requests.Response, str, int]:
    """Issue method against url, following redirects only to public hosts."""
    send = session.request if session is not None else requests.request
    current_url = url
    hops = 0
    while True:
        if not is_public_target(current_url):
            raise requests.exceptions.InvalidURL("target URL resolves to non-public or invalid host")
        response = send(method, current_url, headers=HEADERS, timeout=timeout, allow_redirects=False)
        if 300 <= response.status_code < 400:
            location = (response.headers.get("Location") or "").strip()
            if not location:
                return response, current_url, hops
            if hops >= MAX_REDIRECT_HOPS:
                raise requests.exceptions.TooManyRedirects(f"Too many redirects (>{MAX_REDIRECT_HOPS})")
            try:
                current_url = normalize_url(urljoin(current_url, location))
            except ValueError as exc:
                raise requests.exceptions.InvalidURL(f"Invalid redirect URL: {exc}") from exc
            hops += 1
            continue
        return response, current_url, hops


def fetch_page(session: requests.Session | None, url: str, timeout: float) -> CrawledPage:
    page = CrawledPage(url=url, final_url=url)
    started = time.perf_counter()
    try:
        resp, final_url, hops = request_public(session, "GET", url, timeout)
    except requests.exceptions.RequestException as exc:
        page.error = str(exc)
        page.response_ms = round((time.perf_counter() - started) * 1000.0, 2)
        return page
    page.status_code = resp.status_code
    page.text = resp.text
    page.headers = dict(resp.headers)
    page.redirect_hops = hops
    page.final_url = final_url
    page.response_ms = round((time.perf_counter() - started) * 1000.0, 2)
    return page


def probe_status(url: str, timeout: float) -> int | None:
    """Return the final HTTP status for url, or None when it cannot be reached."""
    try:
        response, _, _ = request_public(None, "HEAD", url, timeout)
        if response.status_code in (405, 501):
            response, _, _ = request_public(None, "GET", url, timeout)
    except requests.exceptions.RequestException as exc:
        logger.debug("probe of %s failed: %s", url, exc)
        return None
    return response.status_code


def extract_internal_links(html: str, base_url: str) -> list[str]:
    soup = soup_of(html)
    internal_links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor.get("href") or ""
        if href.startswith("#") or href.startswith("javascript:") or href.startswith("mailto:"):
            continue
        full = strip_fragment(urljoin(base_url, href))
        if full.startswith("http") and same_site(base_url, full):
            internal_links.append(full)
    return list(dict.fromkeys(internal_links))


def build_robots(start_url: str, timeout: float) -> tuple[robotparser.RobotFileParser | None, str | None]:
    robots_url = urljoin(start_url, "/robots.txt")
    try:
        response, final_url, _ = request_public(None, "GET", robots_url, timeout)
    except requests.exceptions.RequestException as exc:
        logger.info("robots.txt unavailable for %s: %s", start_url, exc)
        return None, None
    if response.status_code >= 400:
        return None, None
    text = response.text or ""
    rp = robotparser.RobotFileParser()
    rp.set_url(final_url)
    rp.parse(text.splitlines())
    return rp, text


def fetch_sitemap_urls(start_url: str, robots_txt: str | None, timeout: float) -> list[str] | None:
    sitemap_url = urljoin(start_url, "/sitemap.xml")
    if robots_txt:
        match = re.search(r"^\s*Sitemap:\s*(\S+)", robots_txt, re.I | re.M)
        if match:
            sitemap_url = match.group(1).strip()
    try:
        response, _, _ = request_public(None, "GET", sitemap_url, timeout)
    except requests.exceptions.RequestException as exc:
        logger.info("sitemap unavailable at %s: %s", sitemap_url, exc)
        return None
    if response.status_code >= 400:
        return None
    return re.findall(r"<loc>\s*(.*?)\s*</loc>", response.text or "", re.I)


def fetch_rendered_html(url: str, timeout: float) -> tuple[str | None, str]:
    try:
        from playwright.sync_api import sync_playwright
    except Exception:
        return None, "Playwright unavailable. Install with: pip install playwright && playwright install chromium"
    try:
        with sync_playwright() as p:
            browser = p.chromium.launch(headless=True)
            try:
                page = browser.new_page()
                page.goto(url, wait_until="networkidle", timeout=int(timeout * 1000))
                return page.content(), ""
            finally:
                browser.close()
    except Exception as exc:
        return None, str(exc)


def crawl_site(
    start_url: str,
    max_pages: int,
    timeout: float,
    delay: float = 0.0,
    respect_robots: bool = True,
) -> tuple[list[CrawledPage], dict[str, Any]]:
    session = requests.Session()
    queue = deque([start_url])
    seen: set[str] = set()
    pages: list[CrawledPage] = []
    crawl_info: dict[str, Any] = {
        "skipped_by_robots": 0,
        "fetch_errors": 0,
        "visited": 0,
        "redirect_duplicates": 0,
    }
    audited: set[str] = set()
    max_pages = max(1, min(max_pages, MAX_PAGES_CAP))

    rp, robots_txt = build_robots(start_url, timeout)
    crawl_info["robots_txt"] = robots_txt
    if not respect_robots:
        rp = None

    while queue and len(pages) < max_pages:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)

        if rp is not None and not rp.can_fetch(USER_AGENT, current):
            crawl_info["skipped_by_robots"] += 1
            continue

        fetched = fetch_page(session, current, timeout)
        if fetched.error:
            pages.append(fetched)
            crawl_info["fetch_errors"] += 1
            logger.warning("fetch failed for %s: %s", current, fetched.error)
            continue

        final_url = normalize_url(fetched.final_url or current)
        seen.add(final_url)
        # each final URL is audited once, however many links redirect to it
        if final_url in audited:
            crawl_info["redirect_duplicates"] += 1
            logger.info("skipping %s: redirects to already crawled %s", current, final_url)
            continue
        audited.add(final_url)
        pages.append(fetched)
        if fetched.is_html:
            for link in extract_internal_links(fetched.text or "", final_url):
                if link not in seen and same_site(start_url, link):
                    queue.append(link)

        crawl_info["visited"] = len(pages)
        if delay > 0:
            time.sleep(delay)

    return pages, crawl_info


def page_context_from_crawl(
    page: CrawledPage,
    *,
    robots_txt: str | None = None,
    sitemap_urls: list[str] | None = None,
    rendered_html: str | None = None,
) -> PageContext:
    return build_page_context(
        page.final_url or page.url,
        page.text or "",
        headers=page.headers,
        status_code=page.status_code or 0,
        response_time_ms=page.response_ms,
        rendered_html=rendered_html,
        robots_txt=robots_txt,
        sitemap_urls=sitemap_urls,
        final_url=page.final_url,
        redirect_hops=page.redirect_hops,
    )


def collect_page_contexts(
    start_url: str,
    *,
    max_pages: int = 1,
    timeout: float = 30,
    delay: float = 0.0,
    respect_robots: bool = True,
    render: str = "off",
    follow_links: bool = True,
) -> tuple[list[PageContext], dict[str, Any]]:
    """Fetch start_url (and, with follow_links, its same-site pages) into page contexts.

    Blocking; callers on an event loop run it in a worker thread. Fetch errors and
    non-HTML responses are counted in the returned crawl info and produce no context.
    """
    if follow_links:
        pages, crawl_info = crawl_site(start_url, max_pages, timeout, delay=delay, respect_robots=respect_robots)
        robots_txt = crawl_info.pop("robots_txt", None)
    else:
        _, robots_txt = build_robots(start_url, timeout)
        pages = [fetch_page(requests.Session(), start_url, timeout)]
        crawl_info = {"skipped_by_robots": 0, "fetch_errors": 0, "visited": 1, "redirect_duplicates": 0}
        if pages[0].error:
            crawl_info["fetch_errors"] = 1
            logger.warning("fetch failed for %s: %s", start_url, pages[0].error)

    sitemap_urls = fetch_sitemap_urls(start_url, robots_txt, timeout)
    crawl_info["robots_txt_found"] = robots_txt is not None
    crawl_info["sitemap_url_count"] = len(sitemap_urls) if sitemap_urls is not None else None
    crawl_info["non_html"] = 0
    crawl_info["render"] = render

    contexts: list[PageContext] = []
    for page in pages:
        if page.error:
            continue
        if not page.is_html:
            crawl_info["non_html"] += 1
            continue
        rendered_html = None
        if render in ("auto", "on"):
            rendered_html, reason = fetch_rendered_html(page.final_url or page.url, timeout)
            if rendered_html is None:
                crawl_info["render_reason"] = reason
                if render == "on":
                    logger.warning("rendering %s failed: %s", page.url, reason)
                else:
                    logger.info("rendering skipped: %s", reason)
                    # auto mode stops trying once Playwright is known to be unusable
                    render = "off"
        contexts.append(
            page_context_from_crawl(page, robots_txt=robots_txt, sitemap_urls=sitemap_urls, rendered_html=rendered_html)
        )
    return contexts, crawl_info
