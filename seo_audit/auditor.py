"""
Audit orchestration.

Every check is invoked the same way and awaited when it returns an awaitable, under
a per-rule timeout. Stateless rules of different pages run concurrently; stateful
rules run one page at a time in the order the pages were discovered, so the cross
page registries see pages in crawl order.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import replace
from typing import Any, Callable, Iterable, Sequence

from .categories import CATEGORIES
from .config import AuditConfig
from .context import PageContext
from .logging_config import page_url_ctx_var
from .crawler import collect_page_contexts, normalize_url
from .rules.define import fail, pass_
from .rules.patterns import filter_rules
from .rules.registry import RuleRegistry
from .scoring import build_audit_result, group_by_category
from .session import AuditSession
from .types import AuditResult, CategoryDefinition, Rule, RuleResult

logger = logging.getLogger(__name__)

RuleCallback = Callable[[Rule, RuleResult], None]
PageCallback = Callable[[PageContext, AuditResult], None]


class Auditor:
    def __init__(
        self,
        registry: RuleRegistry,
        config: AuditConfig | None = None,
        categories: Sequence[CategoryDefinition] = CATEGORIES,
        session: AuditSession | None = None,
        on_rule_complete: RuleCallback | None = None,
        on_page_complete: PageCallback | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or AuditConfig()
        self.categories = categories
        self.session = session or AuditSession()
        self.on_rule_complete = on_rule_complete
        self.on_page_complete = on_page_complete

    def active_rules(self) -> list[Rule]:
        active = filter_rules(self.registry.all(), self.config.rules.enable, self.config.rules.disable)
        if self.config.categories:
            wanted = set(self.config.categories)
            active = [item for item in active if item.category in wanted]
        return active

    def start_session(self) -> None:
        self.session.reset()

    async def run_rule(self, rule: Rule, context: PageContext) -> RuleResult:
        timeout = rule.timeout if rule.timeout is not None else self.config.rule_timeout
        token = page_url_ctx_var.set(context.url)
        try:
            async with asyncio.timeout(timeout):
                outcome = rule.check(context, self.session) if rule.stateful else rule.check(context)
                if inspect.isawaitable(outcome):
                    outcome = await outcome
        except TimeoutError:
            logger.info("rule %s timed out after %ss on %s", rule.id, timeout, context.url)
            result = pass_(
                rule.id,
                f"Check skipped: timed out after {timeout}s",
                {"skipped": True, "reason": "timeout", "timeout": timeout},
            )
        except Exception as exc:
            logger.warning("rule %s failed on %s: %s", rule.id, context.url, exc)
            logger.debug("rule %s traceback", rule.id, exc_info=True)
            result = fail(rule.id, f"Rule execution failed: {exc}")
        else:
            if isinstance(outcome, RuleResult):
                result = outcome
            else:
                logger.warning("rule %s returned %s instead of a RuleResult", rule.id, type(outcome).__name__)
                result = fail(
                    rule.id, f"Rule execution failed: check returned {type(outcome).__name__}, expected RuleResult"
                )
        finally:
            page_url_ctx_var.reset(token)

        result = replace(result, rule_id=rule.id, page_url=context.url)
        if self.on_rule_complete is not None:
            self.on_rule_complete(rule, result)
        return result

    async def _run_stateless(self, rules: Sequence[Rule], context: PageContext) -> list[RuleResult]:
        return list(await asyncio.gather(*(self.run_rule(item, context) for item in rules)))

    async def _run_stateful(self, rules: Sequence[Rule], context: PageContext) -> list[RuleResult]:
        return [await self.run_rule(item, context) for item in rules]

    def _page_result(self, context: PageContext, results: list[RuleResult]) -> AuditResult:
        rules = {item.id: item for item in self.registry.all()}
        weights = {rule_id: item.weight for rule_id, item in rules.items()}
        categories_by_rule = {rule_id: item.category for rule_id, item in rules.items()}
        return build_audit_result(
            context.url,
            group_by_category(results, categories_by_rule, weights),
            self.categories,
        )

    @staticmethod
    def _in_rule_order(rules: Sequence[Rule], results: Iterable[RuleResult]) -> list[RuleResult]:
        by_id = {result.rule_id: result for result in results}
        return [by_id[item.id] for item in rules if item.id in by_id]

    async def run_page(self, context: PageContext) -> AuditResult:
        """Run the active rules for one page inside the current session."""
        rules = self.active_rules()
        stateless = [item for item in rules if not item.stateful]
        stateful = [item for item in rules if item.stateful]
        results = await self._run_stateless(stateless, context)
        results += await self._run_stateful(stateful, context)
        page_result = self._page_result(context, self._in_rule_order(rules, results))
        if self.on_page_complete is not None:
            self.on_page_complete(context, page_result)
        return page_result

    async def audit_pages(
        self,
        contexts: Sequence[PageContext],
        url: str | None = None,
        crawl_info: dict[str, Any] | None = None,
    ) -> AuditResult:
        """Audit contexts as one crawl session, given in crawl-discovery order."""
        self.start_session()
        rules = self.active_rules()
        stateless = [item for item in rules if not item.stateful]
        stateful = [item for item in rules if item.stateful]
        semaphore = asyncio.Semaphore(max(1, int(self.config.crawler.concurrency)))

        async def stateless_for(context: PageContext) -> list[RuleResult]:
            async with semaphore:
                return await self._run_stateless(stateless, context)

        tasks = [asyncio.create_task(stateless_for(context)) for context in contexts]
        page_results: list[AuditResult] = []
        try:
            for context, task in zip(contexts, tasks):
                ordered = await self._run_stateful(stateful, context)
                results = self._in_rule_order(rules, (await task) + ordered)
                page_result = self._page_result(context, results)
                page_results.append(page_result)
                if self.on_page_complete is not None:
                    self.on_page_complete(context, page_result)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        pooled = [result for page in page_results for category in page.category_results for result in category.results]
        rule_map = {item.id: item for item in self.registry.all()}
        audit = build_audit_result(
            url or (contexts[0].url if contexts else ""),
            group_by_category(
                pooled,
                {rule_id: item.category for rule_id, item in rule_map.items()},
                {rule_id: item.weight for rule_id, item in rule_map.items()},
            ),
            self.categories,
            crawled_pages=len(contexts),
        )
        audit.page_results = page_results
        audit.crawl_info = dict(crawl_info or {})
        audit.crawl_info["session"] = self.session.stats()
        logger.info("audited %d page(s) with %d rule(s), score %.1f", len(contexts), len(rules), audit.overall_score)
        return audit

    async def audit_page(self, context: PageContext) -> AuditResult:
        audit = await self.audit_pages([context])
        return audit.page_results[0]

    async def audit_url(self, url: str) -> AuditResult:
        return await self._audit_fetched(url, max_pages=1, follow_links=False)

    async def audit_site(self, url: str, max_pages: int | None = None) -> AuditResult:
        return await self._audit_fetched(url, max_pages=max_pages or self.config.crawler.max_pages, follow_links=True)

    async def _audit_fetched(self, url: str, max_pages: int, follow_links: bool) -> AuditResult:
        target = normalize_url(url)
        crawler = self.config.crawler
        contexts, crawl_info = await asyncio.to_thread(
            collect_page_contexts,
            target,
            max_pages=max_pages,
            timeout=crawler.timeout,
            delay=crawler.delay,
            respect_robots=crawler.respect_robots,
            render=crawler.render,
            follow_links=follow_links,
        )
        return await self.audit_pages(contexts, url=target, crawl_info=crawl_info)
