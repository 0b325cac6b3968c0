"""Crawl frontier: every known URL with its visited flag, plus domain scoping."""

from __future__ import annotations

from typing import Iterable

from .url import domain_of


def _scope_domain(scope_base: str) -> str:
    domain = domain_of(scope_base)
    if domain is None:
        raise ValueError(f"Invalid scope base URL: {scope_base!r}")
    return domain


class Frontier:
    """Map of admitted URLs to a visited flag.

    - A URL present in the map has been admitted; the flag tells whether a
      fetch was attempted.
    - Admitting a known URL never changes its flag.
    - Not thread-safe: the crawl loop owns the frontier for the whole crawl.
    """

    def __init__(self) -> None:
        self._links: dict[str, bool] = {}
        # Insertion-ordered set of unvisited URLs so next() is O(1).
        self._pending: dict[str, None] = {}

        self._admitted_count = 0
        self._skipped_out_of_scope_count = 0
        self._skipped_invalid_count = 0

    def __contains__(self, url: object) -> bool:
        return url in self._links

    def __len__(self) -> int:
        return len(self._links)

    def _admit(self, url: str) -> bool:
        if url in self._links:
            return False
        self._links[url] = False
        self._pending[url] = None
        self._admitted_count += 1
        return True

    def seed(self, urls: Iterable[str]) -> int:
        """Admit URLs as unvisited unless already known.

        Returns how many URLs were new.
        """

        return sum(1 for url in urls if self._admit(url))

    def mark_visited(self, url: str) -> None:
        """Force `url` to visited, admitting it if unknown."""

        self._links[url] = True
        self._pending.pop(url, None)

    def mark_visited_many(self, urls: Iterable[str]) -> None:
        for url in urls:
            self.mark_visited(url)

    def is_visited(self, url: str) -> bool:
        return self._links.get(url, False)

    def admit_if_scoped(self, urls: Iterable[str], scope_base: str) -> int:
        """Admit candidates that share the scope base's registrable domain.

        Unparseable candidates are dropped silently. Returns how many URLs were
        newly admitted.
        """

        scope_domain = _scope_domain(scope_base)
        admitted = 0

        for url in urls:
            candidate_domain = domain_of(url)
            if candidate_domain is None:
                self._skipped_invalid_count += 1
                continue
            if candidate_domain != scope_domain:
                self._skipped_out_of_scope_count += 1
                continue
            if self._admit(url):
                admitted += 1

        return admitted

    def next(self) -> str | None:
        """Return an unvisited URL without marking it, or `None` when drained."""

        for url in self._pending:
            return url
        return None

    def prune_outside_scope(self, scope_base: str) -> int:
        """Drop every entry whose registrable domain differs from the scope base.

        Returns the number of removed entries.
        """

        scope_domain = _scope_domain(scope_base)
        outside = [url for url in self._links if domain_of(url) != scope_domain]
        for url in outside:
            del self._links[url]
            self._pending.pop(url, None)
        return len(outside)

    def unvisited_count(self) -> int:
        return len(self._pending)

    def visited_urls(self) -> set[str]:
        return {url for url, visited in self._links.items() if visited}

    def snapshot(self) -> dict[str, int]:
        """Return frontier counters for logs/stats reporting."""

        return {
            "known_urls": len(self._links),
            "unvisited": len(self._pending),
            "visited": len(self._links) - len(self._pending),
            "admitted": self._admitted_count,
            "skipped_out_of_scope": self._skipped_out_of_scope_count,
            "skipped_invalid": self._skipped_invalid_count,
        }


__all__ = ["Frontier"]
