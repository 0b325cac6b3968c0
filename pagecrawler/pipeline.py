"""Crawl loop orchestration: frontier -> fetch -> persist -> admit links."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Iterable

from .config import CrawlConfig
from .constants import FETCH_ERROR_ABORT
from .errors import FetchFailedError, HookError, RequestBuildError
from .fetcher import Fetcher
from .frontier import Frontier
from .stats import StatsCollector
from .storage import Storage
from .types import Page
from .url import canonicalize_url, domain_of, has_allowed_scheme, host_from_url


logger = logging.getLogger(__name__)

# Receives the URL about to be fetched, returns the URL to fetch instead.
BeforeFetchHook = Callable[[str], str]
# Receives the fetched page, returns extra URLs to admit.
AfterFetchHook = Callable[[Page], Iterable[str] | None]


class Pipeline:
    """Drive the frontier and fetcher until no unvisited URL remains.

    One fetch is in flight at a time and the frontier is only touched from
    the calling thread. Hooks that raise end the crawl with HookError.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        frontier: Frontier | None = None,
        storage: Storage | None = None,
        fetcher: Fetcher | None = None,
        stats: StatsCollector | None = None,
        before_fetch: BeforeFetchHook | None = None,
        after_fetch: AfterFetchHook | None = None,
    ) -> None:
        self.config = config

        self.frontier = frontier or Frontier()
        self.storage = storage or Storage(config.storage_dir)
        self.fetcher = fetcher or Fetcher(config)
        self.stats = stats or StatsCollector()

        self.before_fetch = before_fetch
        self.after_fetch = after_fetch

        self._owns_fetcher = fetcher is None

    @property
    def page_count(self) -> int:
        return self.stats.pages_fetched

    def run(self, seed_url: str) -> dict[str, Any]:
        """Crawl everything reachable from `seed_url` within its domain."""

        seed = self._resolve_seed(seed_url)
        self.frontier.seed([seed])

        offer_seed = not self.frontier.is_visited(seed)
        if not offer_seed:
            logger.info("Seed %s is already crawled, skipping it", seed)

        try:
            while True:
                if offer_seed:
                    url: str | None = seed
                    offer_seed = False
                else:
                    url = self.frontier.next()

                if url is None:
                    logger.info("No more links, crawled %d page(s)", self.page_count)
                    break

                self._crawl_one(url, scope_base=seed)
        finally:
            if self._owns_fetcher:
                self.fetcher.close()
            self.stats.record_frontier_snapshot(self.frontier.snapshot())

        self.stats.finish()
        return {
            "seed": seed,
            "pages_fetched": self.page_count,
            "paths": self.storage.paths,
            "stats": self.stats.to_json(),
        }

    def resume_from_storage(self, scope_base: str) -> int:
        """Rehydrate the frontier from persisted pages.

        Stored page URLs become visited, their hyperlinks are admitted, and
        everything outside the scope base's domain is pruned. Returns the
        number of pages read.
        """

        loaded = 0
        for page in self.storage.iter_pages():
            self.frontier.mark_visited(canonicalize_url(page.url) or page.url)
            self.frontier.seed(_canonical_urls(page.info.hrefs))
            loaded += 1

        removed = self.frontier.prune_outside_scope(scope_base)
        logger.info(
            "Loaded %d stored page(s), pruned %d out-of-scope URL(s), %d left to crawl",
            loaded,
            removed,
            self.frontier.unvisited_count(),
        )
        return loaded

    @staticmethod
    def _resolve_seed(seed_url: str) -> str:
        seed = canonicalize_url(seed_url)
        if seed is None or not host_from_url(seed) or domain_of(seed) is None:
            raise ValueError(f"Invalid seed URL: {seed_url!r}")
        return seed

    def _crawl_one(self, url: str, *, scope_base: str) -> None:
        requested = url
        if self.before_fetch is not None:
            try:
                url = self.before_fetch(url)
            except Exception as exc:
                raise HookError("before_fetch", requested) from exc

        # Mark before fetching so rediscovered links are not queued again.
        self.frontier.mark_visited(requested)
        self.frontier.mark_visited(url)

        if not has_allowed_scheme(url, self.config.allowed_schemes) or not host_from_url(url):
            logger.info("Scheme invalid, skipping url: %s", url)
            self.stats.record_skipped_scheme()
            return

        logger.info("Fetching site: %s", url)
        try:
            page = self.fetcher.fetch(url)
        except RequestBuildError as exc:
            logger.warning("%s", exc)
            self.stats.record_build_error()
            return

        extra_links: list[str] = []
        if self.after_fetch is not None:
            try:
                extra_links = _canonical_urls(self.after_fetch(page) or [])
            except Exception as exc:
                raise HookError("after_fetch", url) from exc

        self.storage.save_page(page)
        self.stats.record_page(page)

        if page.failed and self.config.fetch_error_policy == FETCH_ERROR_ABORT:
            raise FetchFailedError(url, page.error or "unknown error")

        admitted = self.frontier.admit_if_scoped(page.info.hrefs, scope_base)
        admitted += self.frontier.admit_if_scoped(extra_links, scope_base)
        self.stats.record_admitted(admitted)

        time.sleep(self.config.request_delay_seconds)


def _canonical_urls(urls: Iterable[str]) -> list[str]:
    canonical = (canonicalize_url(url) for url in urls)
    return [url for url in canonical if url is not None]


__all__ = ["AfterFetchHook", "BeforeFetchHook", "Pipeline"]
