import asyncio

from seo_audit.rules.builtin import a11y, content, core, images, js, links, perf, schema, security, social, technical
from seo_audit.session import AuditSession
from seo_audit.types import RuleStatus
from tests.conftest import html_doc, words

GOOD_HEAD = (
    '<meta name="description" content="'
    + "Durable industrial widgets built for heavy workloads, shipped worldwide with support."
    + '">'
    '<meta name="viewport" content="width=device-width, initial-scale=1">'
    '<link rel="canonical" href="https://example.com/">'
    '<meta property="og:title" content="t"><meta property="og:description" content="d">'
    '<meta property="og:image" content="https://example.com/i.png"><meta property="og:url" content="https://example.com/">'
    '<meta name="twitter:card" content="summary"><meta name="twitter:title" content="t">'
    '<meta name="twitter:description" content="d">'
    '<script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Acme"}</script>'
)


def status(rule, context, *args):
    return rule.check(context, *args).status


def test_core_rules_on_a_well_formed_page(make_page) -> None:
    page = make_page(html=html_doc(body="<h1>Widgets</h1>", head=GOOD_HEAD))
    for rule in (
        core.title_present,
        core.title_length,
        core.description_present,
        core.description_length,
        core.canonical_present,
        core.h1_single,
        core.robots_meta,
        core.viewport_present,
    ):
        assert status(rule, page) is RuleStatus.PASS, rule.id


def test_core_rules_on_a_bare_page(make_page) -> None:
    page = make_page(html=html_doc(title=None, body="<h1>a</h1><h1>b</h1>", head='<meta name="robots" content="noindex">'))
    assert status(core.title_present, page) is RuleStatus.FAIL
    assert status(core.description_present, page) is RuleStatus.FAIL
    assert status(core.canonical_present, page) is RuleStatus.WARN
    assert status(core.h1_single, page) is RuleStatus.WARN
    assert status(core.robots_meta, page) is RuleStatus.FAIL
    assert status(core.viewport_present, page) is RuleStatus.FAIL


def test_noindex_header_is_detected(make_page) -> None:
    page = make_page(headers={"X-Robots-Tag": "noindex, nofollow"})
    assert status(core.robots_meta, page) is RuleStatus.FAIL


def test_title_length_bounds(make_page) -> None:
    assert status(core.title_length, make_page(html=html_doc(title="Short"))) is RuleStatus.WARN
    assert status(core.title_length, make_page(html=html_doc(title="x" * 61))) is RuleStatus.WARN
    assert status(core.title_length, make_page(html=html_doc(title="x" * 30))) is RuleStatus.PASS


def test_stateful_core_rule_uses_session(make_page) -> None:
    session = AuditSession()
    first = make_page("https://example.com/a")
    second = make_page("https://example.com/b")
    assert status(core.title_unique, first, session) is RuleStatus.PASS
    assert status(core.title_unique, second, session) is RuleStatus.WARN


def test_duplicate_description_rule_uses_session(make_page) -> None:
    session = AuditSession()
    first = make_page("https://example.com/a", html_doc(head=GOOD_HEAD))
    second = make_page("https://example.com/b", html_doc(head=GOOD_HEAD))
    assert status(content.duplicate_description, first, session) is RuleStatus.PASS
    result = content.duplicate_description.check(second, session)
    assert result.status is RuleStatus.WARN
    assert result.details["duplicate_urls"] == ["https://example.com/a", "https://example.com/b"]
    assert session.stats()["duplicate_description_groups"] == 1
    session.reset()
    assert session.stats()["total_descriptions"] == 0


def test_content_rules(make_page) -> None:
    thin = make_page(html=html_doc(body=f"<p>{words('w', 150)}</p>"))
    rich = make_page(html=html_doc(body=f"<p>{words('w', 320)}</p>"))
    empty = make_page(html=html_doc(body="<p>tiny</p><script>var x = 'ignored words here';</script>"))
    assert status(content.word_count, thin) is RuleStatus.WARN
    assert status(content.word_count, rich) is RuleStatus.PASS
    assert status(content.word_count, empty) is RuleStatus.FAIL

    skipping = make_page(html=html_doc(body="<h1>a</h1><h2>b</h2><h4>c</h4>"))
    result = content.heading_hierarchy.check(skipping)
    assert result.status is RuleStatus.WARN
    assert result.details["skips"] == ["h2->h4"]
    assert status(content.heading_hierarchy, make_page(html=html_doc(body="<h1>a</h1><h2>b</h2><h3>c</h3>"))) is RuleStatus.PASS


def test_image_rules(make_page) -> None:
    page = make_page(
        html=html_doc(body='<img src="/a.png" alt="A" width="10" height="10"><img src="/b.png"><img src="/c.png" alt="">')
    )
    alt = images.images_alt.check(page)
    assert alt.status is RuleStatus.FAIL
    assert alt.details["missing_alt"] == 2
    assert status(images.images_dimensions, page) is RuleStatus.WARN
    assert status(images.images_alt, make_page(html=html_doc(body=""))) is RuleStatus.PASS


def test_broken_image_probe_is_async_and_absorbs_unreachable(make_page, monkeypatch) -> None:
    statuses = {"https://example.com/a.png": 200, "https://example.com/b.png": 404, "https://example.com/c.png": None}
    monkeypatch.setattr(images, "probe_status", lambda url, timeout: statuses[url])
    page = make_page(html=html_doc(body='<img src="/a.png"><img src="/b.png"><img src="/c.png">'))
    result = asyncio.run(images.images_broken.check(page))
    assert result.status is RuleStatus.FAIL
    assert result.details["broken"] == ["https://example.com/b.png"]
    assert result.details["unreachable"] == 1

    statuses["https://example.com/b.png"] = 200
    assert asyncio.run(images.images_broken.check(page)).status is RuleStatus.PASS


def test_link_rules(make_page, monkeypatch) -> None:
    page = make_page(
        html=html_doc(
            body='<a href="/about">About us</a><a href="https://other.test/x">click here</a>'
            '<a href="https://other.test/y">Partner</a><a href="#top">Top</a>'
        )
    )
    assert status(links.internal_present, page) is RuleStatus.PASS
    assert status(links.anchor_text, page) is RuleStatus.WARN
    assert status(links.internal_present, make_page(html=html_doc(body="<p>none</p>"))) is RuleStatus.WARN

    monkeypatch.setattr(links, "probe_status", lambda url, timeout: 404 if url.endswith("/x") else 200)
    result = asyncio.run(links.external_valid.check(page))
    assert result.status is RuleStatus.WARN
    assert result.details["broken"] == ["https://other.test/x"]


def test_security_rules(make_page) -> None:
    headers = {name: "1" for name in security.SECURITY_HEADERS}
    secure = make_page("https://example.com/", headers=headers)
    assert status(security.https, secure) is RuleStatus.PASS
    assert status(security.security_headers, secure) is RuleStatus.PASS
    assert status(security.mixed_content, secure) is RuleStatus.PASS

    plain = make_page("http://example.com/")
    assert status(security.https, plain) is RuleStatus.FAIL
    assert status(security.security_headers, plain) is RuleStatus.FAIL

    mixed = make_page(html=html_doc(body='<img src="http://cdn.example.com/a.png">'))
    assert status(security.mixed_content, mixed) is RuleStatus.FAIL

    stylesheet = make_page(html=html_doc(head='<link rel="stylesheet" href="http://cdn.example.com/site.css">'))
    result = security.mixed_content.check(stylesheet)
    assert result.status is RuleStatus.FAIL
    assert result.details["examples"] == ["http://cdn.example.com/site.css"]

    navigational = make_page(
        html=html_doc(
            head='<link rel="canonical" href="http://example.com/">'
            '<link rel="alternate" hreflang="de" href="http://example.com/de/">'
        )
    )
    assert status(security.mixed_content, navigational) is RuleStatus.PASS


def test_technical_rules(make_page) -> None:
    assert status(technical.status_code, make_page(status_code=200)) is RuleStatus.PASS
    assert status(technical.status_code, make_page(status_code=301)) is RuleStatus.WARN
    assert status(technical.status_code, make_page(status_code=404)) is RuleStatus.FAIL
    assert status(technical.redirect_chain, make_page(redirect_hops=3)) is RuleStatus.WARN

    assert status(technical.robots_txt, make_page()) is RuleStatus.WARN
    assert status(technical.robots_txt, make_page(robots_txt="User-agent: *\nDisallow: /admin\n")) is RuleStatus.PASS
    assert status(technical.robots_txt, make_page(robots_txt="User-agent: *\nDisallow: /\n")) is RuleStatus.FAIL

    listed = technical.sitemap.check(make_page(sitemap_urls=["https://example.com/", "https://example.com/b"]))
    assert listed.status is RuleStatus.PASS
    assert listed.details["page_listed"] is True
    assert status(technical.sitemap, make_page()) is RuleStatus.WARN


def test_perf_rules(make_page) -> None:
    assert status(perf.response_time, make_page()) is RuleStatus.PASS
    assert status(perf.response_time, make_page(response_time_ms=300)) is RuleStatus.PASS
    assert status(perf.response_time, make_page(response_time_ms=1200)) is RuleStatus.WARN
    assert status(perf.response_time, make_page(response_time_ms=2500)) is RuleStatus.FAIL
    assert status(perf.lcp, make_page(cwv={"lcp": 4500})) is RuleStatus.FAIL
    assert perf.lcp.check(make_page()).details == {"skipped": True}
    assert status(perf.page_weight, make_page(html=html_doc(body="x" * 600_000))) is RuleStatus.WARN
    blocking = "".join(f'<script src="/{i}.js"></script>' for i in range(4))
    assert status(perf.render_blocking, make_page(html=html_doc(head=blocking))) is RuleStatus.WARN


def test_schema_rules(make_page) -> None:
    good = make_page(html=html_doc(head=GOOD_HEAD))
    assert status(schema.jsonld_present, good) is RuleStatus.PASS
    assert status(schema.jsonld_valid, good) is RuleStatus.PASS
    broken = make_page(html=html_doc(head='<script type="application/ld+json">{"@type": </script>'))
    assert status(schema.jsonld_valid, broken) is RuleStatus.FAIL
    untyped = make_page(html=html_doc(head='<script type="application/ld+json">{"name": "x"}</script>'))
    assert status(schema.jsonld_valid, untyped) is RuleStatus.WARN
    assert status(schema.jsonld_present, make_page()) is RuleStatus.WARN


def test_social_rules(make_page) -> None:
    good = make_page(html=html_doc(head=GOOD_HEAD))
    assert status(social.open_graph, good) is RuleStatus.PASS
    assert status(social.twitter_card, good) is RuleStatus.PASS
    partial = make_page(html=html_doc(head='<meta property="og:title" content="t">'))
    assert status(social.open_graph, partial) is RuleStatus.WARN
    assert status(social.open_graph, make_page()) is RuleStatus.FAIL


def test_js_rules_compare_raw_and_rendered(make_page) -> None:
    raw = html_doc(title="Raw", body="<div id=app></div>")
    rendered = html_doc(title="Rendered", body=f"<div id=app><p>{words('r', 200)}</p></div>")
    page = make_page(html=raw, rendered_html=rendered)
    assert status(js.title_modified, page) is RuleStatus.WARN
    assert status(js.rendered_content, page) is RuleStatus.WARN

    unrendered = make_page(html=raw)
    assert js.title_modified.check(unrendered).details["skipped"] is True
    assert status(js.rendered_content, unrendered) is RuleStatus.PASS


def test_a11y_rules(make_page) -> None:
    assert status(a11y.html_lang, make_page()) is RuleStatus.PASS
    assert status(a11y.html_lang, make_page(html="<html><body>x</body></html>")) is RuleStatus.FAIL

    form = (
        '<label for="email">Email</label><input id="email" name="email">'
        '<label>Name <input name="name"></label>'
        '<input type="hidden" name="csrf"><input name="q" aria-label="Search">'
    )
    assert status(a11y.form_labels, make_page(html=html_doc(body=form))) is RuleStatus.PASS
    result = a11y.form_labels.check(make_page(html=html_doc(body='<input name="phone">')))
    assert result.status is RuleStatus.WARN
    assert result.details["controls"] == ["phone"]

    assert status(a11y.image_links, make_page(html=html_doc(body='<a href="/x"><img src="/i.png"></a>'))) is RuleStatus.WARN
