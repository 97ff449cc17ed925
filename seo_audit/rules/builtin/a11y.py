from __future__ import annotations

from ...context import PageContext
from ...types import RuleResult
from ..define import fail, pass_, rule, warn

LABELLED_INPUT_SKIP = {"hidden", "submit", "button", "reset", "image"}


@rule(
    id="a11y-html-lang",
    name="Document language",
    description="<html> declares a lang attribute",
    category="a11y",
    weight=35,
)
def html_lang(context: PageContext) -> RuleResult:
    html = context.soup.find("html")
    lang = str(html.get("lang") or "").strip() if html else ""
    if not lang:
        return fail("a11y-html-lang", "Missing lang attribute on <html>")
    return pass_("a11y-html-lang", f"Document language is {lang}", {"lang": lang})


@rule(
    id="a11y-form-labels",
    name="Form labels",
    description="Form controls have an associated label or aria-label",
    category="a11y",
    weight=35,
)
def form_labels(context: PageContext) -> RuleResult:
    label_targets = {str(label.get("for")) for label in context.soup.find_all("label") if label.get("for")}
    unlabelled: list[str] = []
    for control in context.soup.find_all(["input", "select", "textarea"]):
        if control.name == "input" and str(control.get("type") or "text").lower() in LABELLED_INPUT_SKIP:
            continue
        if control.get("aria-label") or control.get("aria-labelledby") or control.get("title"):
            continue
        if control.get("id") and str(control.get("id")) in label_targets:
            continue
        if control.find_parent("label") is not None:
            continue
        unlabelled.append(str(control.get("name") or control.get("id") or control.name))
    if unlabelled:
        return warn("a11y-form-labels", f"{len(unlabelled)} form control(s) without a label", {"controls": unlabelled[:8]})
    return pass_("a11y-form-labels", "Form controls are labelled")


@rule(
    id="a11y-image-links",
    name="Image link names",
    description="Links whose only content is an image have alt text",
    category="a11y",
    weight=30,
)
def image_links(context: PageContext) -> RuleResult:
    nameless = []
    for anchor in context.soup.find_all("a", href=True):
        if anchor.get_text(strip=True) or anchor.get("aria-label"):
            continue
        images = anchor.find_all("img")
        if images and not any(str(img.get("alt") or "").strip() for img in images):
            nameless.append(str(anchor.get("href")))
    if nameless:
        return warn("a11y-image-links", f"{len(nameless)} image link(s) have no accessible name", {"links": nameless[:8]})
    return pass_("a11y-image-links", "Image links have accessible names")


RULES = (html_lang, form_labels, image_links)
