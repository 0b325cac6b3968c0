"""Exception types raised by the crawler."""

from __future__ import annotations


class CrawlerError(Exception):
    """Base class for crawler failures."""


class RequestBuildError(CrawlerError, ValueError):
    """The request for a URL could not be constructed (malformed URL/method)."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Cannot build request for {url!r}: {reason}")
        self.url = url
        self.reason = reason


class FetchFailedError(CrawlerError):
    """A transport error ended the crawl (fetch_error_policy='abort')."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"Fetching {url} failed: {message}")
        self.url = url
        self.message = message


class HookError(CrawlerError):
    """A before/after fetch hook aborted the crawl."""

    def __init__(self, hook: str, url: str) -> None:
        super().__init__(f"{hook} hook aborted crawl at {url}")
        self.hook = hook
        self.url = url


__all__ = [
    "CrawlerError",
    "FetchFailedError",
    "HookError",
    "RequestBuildError",
]
