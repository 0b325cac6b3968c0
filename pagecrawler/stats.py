"""Crawl statistics aggregation."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping

from .types import JSONDict, Page


def utc_now_iso() -> str:
    """Return an RFC3339-like UTC timestamp string for summaries."""

    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(slots=True)
class CrawlStats:
    """Simple mutable counters used for crawl summary reporting."""

    pages_fetched: int = 0
    fetched_ok: int = 0
    fetched_error: int = 0
    parse_errors: int = 0
    redirects: int = 0
    skipped_scheme: int = 0
    skipped_build_error: int = 0
    links_admitted: int = 0

    started_at: str = field(default_factory=utc_now_iso)
    finished_at: str | None = None

    def finish(self) -> None:
        self.finished_at = utc_now_iso()

    def to_json(self) -> JSONDict:
        return {
            "pages_fetched": self.pages_fetched,
            "fetched_ok": self.fetched_ok,
            "fetched_error": self.fetched_error,
            "parse_errors": self.parse_errors,
            "redirects": self.redirects,
            "skipped_scheme": self.skipped_scheme,
            "skipped_build_error": self.skipped_build_error,
            "links_admitted": self.links_admitted,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
        }


class StatsCollector:
    """Collect and summarize crawl loop statistics.

    Not thread-safe; the crawl loop is the only writer.
    """

    def __init__(self, base: CrawlStats | None = None) -> None:
        self._core = base or CrawlStats()
        self._status_code_counts: dict[str, int] = defaultdict(int)
        self._error_type_counts: dict[str, int] = defaultdict(int)
        self._mime_counts: dict[str, int] = defaultdict(int)
        self._duration_ms_total = 0
        self._bytes_total = 0
        self._frontier_snapshot: dict[str, int] = {}

    @property
    def pages_fetched(self) -> int:
        return self._core.pages_fetched

    def record_page(self, page: Page) -> None:
        """Record one persisted page."""

        self._core.pages_fetched += 1
        self._duration_ms_total += page.duration_ms
        self._bytes_total += len(page.body)

        if page.failed:
            self._core.fetched_error += 1
            err_type = (page.error or "").split(":", maxsplit=1)[0].strip() or "Unknown"
            self._error_type_counts[err_type] += 1
        else:
            self._core.fetched_ok += 1

        if page.parse_error:
            self._core.parse_errors += 1
        if page.redirect_url:
            self._core.redirects += 1

        if page.response is not None:
            self._status_code_counts[str(page.response.status_code)] += 1
            self._mime_counts[page.response.content_mime] += 1

    def record_skipped_scheme(self) -> None:
        self._core.skipped_scheme += 1

    def record_build_error(self) -> None:
        self._core.skipped_build_error += 1

    def record_admitted(self, count: int) -> None:
        self._core.links_admitted += count

    def record_frontier_snapshot(self, snapshot: Mapping[str, int]) -> None:
        self._frontier_snapshot = dict(snapshot)

    def finish(self) -> None:
        self._core.finish()

    def to_json(self) -> JSONDict:
        summary = self._core.to_json()
        pages = self._core.pages_fetched
        summary.update(
            {
                "status_codes": dict(sorted(self._status_code_counts.items())),
                "error_types": dict(sorted(self._error_type_counts.items())),
                "mime_types": dict(sorted(self._mime_counts.items())),
                "bytes_total": self._bytes_total,
                "avg_duration_ms": round(self._duration_ms_total / pages, 1) if pages else None,
                "frontier": dict(self._frontier_snapshot),
            }
        )
        return summary


__all__ = ["CrawlStats", "StatsCollector", "utc_now_iso"]
