from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any

from . import __version__
from .auditor import Auditor
from .categories import category_ids, get_category
from .config import ConfigError, load_config, parse_config_file, validate_config
from .crawler import MAX_PAGES_CAP, is_public_target, normalize_url
from .logging_config import configure_logging
from .rules.define import RuleDefinitionError
from .rules.manifest import build_registry
from .rules.registry import DuplicateRuleError
from .scoring import score_band, score_grade
from .types import AuditResult, RuleStatus

EXIT_OK = 0
EXIT_NO_PAGES = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="seo-audit", description="Audit web pages against weighted SEO rules.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    audit = sub.add_parser("audit", help="Audit a page or crawl a site")
    audit.add_argument("url", help="Target URL")
    audit.add_argument("--crawl", action="store_true", help="Crawl same-site pages instead of auditing one page")
    audit.add_argument("--max-pages", type=int, default=None, help=f"Crawl page cap (max {MAX_PAGES_CAP})")
    audit.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    audit.add_argument("--delay", type=float, default=None, help="Delay between requests in seconds")
    audit.add_argument("--concurrency", type=int, default=None, help="Pages audited concurrently")
    audit.add_argument(
        "--render",
        choices=["auto", "on", "off"],
        default=None,
        help="Capture a rendered DOM with Playwright (auto=run if available).",
    )
    audit.add_argument("--config", default=None, help="Path to seo-audit.yaml")
    audit.add_argument("--enable", nargs="+", default=None, metavar="PATTERN", help="Rule patterns to enable")
    audit.add_argument("--disable", nargs="+", default=None, metavar="PATTERN", help="Rule patterns to disable")
    audit.add_argument("--category", nargs="+", default=None, help="Only run rules from these categories")
    audit.add_argument("--json", action="store_true", help="Print the result as JSON")
    audit.add_argument("--output", default=None, help="Write the JSON result to this file")
    audit.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    audit.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines")

    rules = sub.add_parser("rules", help="List built-in rules")
    rules.add_argument("--category", default=None, help="Only list rules from this category")
    rules.add_argument("--json", action="store_true", help="Print as JSON")

    check = sub.add_parser("check-config", help="Validate a configuration file")
    check.add_argument("path", nargs="?", default=None, help="Config file (default: search for seo-audit.yaml)")
    return parser


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        "rules": {"enable": args.enable, "disable": args.disable},
        "crawler": {
            "max_pages": args.max_pages,
            "timeout": args.timeout,
            "delay": args.delay,
            "concurrency": args.concurrency,
            "render": args.render,
        },
        "categories": args.category,
        "output": {"format": "json" if args.json or args.output else None, "path": args.output},
    }


def print_summary(result: AuditResult) -> None:
    print(f"Audit target: {result.url}")
    print(f"Pages audited: {result.crawled_pages}")
    for item in result.category_results:
        category = get_category(item.category_id)
        name = category.name if category else item.category_id
        print(
            f"  {name:<24} {item.score:>5.1f}  "
            f"(pass {item.pass_count}, warn {item.warn_count}, fail {item.fail_count})"
        )
    print(f"Health score: {result.overall_score}/100 ({score_band(result.overall_score)}, grade {score_grade(result.overall_score)})")

    failures = [
        r for item in result.category_results for r in item.results if r.status is RuleStatus.FAIL
    ]
    if failures:
        print("Failures:")
        for r in failures[:20]:
            print(f"  [{r.rule_id}] {r.page_url}: {r.message}")
        if len(failures) > 20:
            print(f"  ... and {len(failures) - 20} more")


def run_audit(args: argparse.Namespace) -> int:
    configure_logging(verbose=args.verbose, json_logs=args.log_json)
    try:
        config, config_path = load_config(args.config, overrides=_overrides(args))
    except ConfigError as exc:
        print(f"Error: {exc}")
        return EXIT_USAGE

    try:
        target_url = normalize_url(args.url)
    except ValueError as exc:
        print(f"Error: {exc}")
        return EXIT_USAGE
    if not is_public_target(target_url):
        print("Error: target URL resolves to non-public or invalid host")
        return EXIT_USAGE

    try:
        registry = build_registry()
    except (RuleDefinitionError, DuplicateRuleError) as exc:
        print(f"Error: {exc}")
        return EXIT_USAGE

    auditor = Auditor(registry, config=config)
    quiet = config.output.format == "json" and not config.output.path
    if not quiet:
        if config_path:
            print(f"Config: {config_path}")
        print(f"Audit target: {target_url}")
        print(f"Active rules: {len(auditor.active_rules())}")
        if args.crawl:
            print(f"Crawl max pages: {min(config.crawler.max_pages, MAX_PAGES_CAP)}")
            print("Crawling...")
        else:
            print("Fetching...")

    if args.crawl:
        result = asyncio.run(auditor.audit_site(target_url))
    else:
        result = asyncio.run(auditor.audit_url(target_url))

    if result.crawled_pages == 0:
        print("Error: crawl returned no pages")
        return EXIT_NO_PAGES

    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)
    if config.output.path:
        output = Path(config.output.path).resolve()
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + "\n", encoding="utf-8")
        print_summary(result)
        print(f"Report: {output}")
    elif config.output.format == "json":
        print(payload)
    else:
        print_summary(result)
    return EXIT_OK


def run_rules(args: argparse.Namespace) -> int:
    registry = build_registry()
    rules = registry.by_category(args.category) if args.category else registry.all()
    if args.json:
        print(
            json.dumps(
                [
                    {
                        "id": item.id,
                        "name": item.name,
                        "description": item.description,
                        "category": item.category,
                        "weight": item.weight,
                        "stateful": item.stateful,
                    }
                    for item in rules
                ],
                indent=2,
            )
        )
        return EXIT_OK
    known = category_ids()
    for category_id in sorted(registry.categories(), key=lambda c: known.index(c) if c in known else len(known)):
        if args.category and category_id != args.category:
            continue
        print(f"{category_id}:")
        for item in registry.by_category(category_id):
            marker = " (stateful)" if item.stateful else ""
            print(f"  {item.id:<28} w={item.weight:<4g} {item.name}{marker}")
    print(f"{len(rules)} rule(s)")
    return EXIT_OK


def run_check_config(args: argparse.Namespace) -> int:
    try:
        if args.path:
            data = parse_config_file(args.path)
            path = Path(args.path)
        else:
            _, path = load_config()
            if path is None:
                print("No seo-audit.yaml found; defaults apply.")
                return EXIT_OK
            data = parse_config_file(path)
    except ConfigError as exc:
        print(f"Error: {exc}")
        return EXIT_USAGE

    validation = validate_config(data)
    for message in validation.warnings:
        print(f"Warning: {message}")
    for message in validation.errors:
        print(f"Error: {message}")
    if not validation.valid:
        return EXIT_USAGE
    print(f"Config OK: {path}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "audit":
        return run_audit(args)
    if args.command == "rules":
        return run_rules(args)
    return run_check_config(args)


if __name__ == "__main__":
    raise SystemExit(main())
