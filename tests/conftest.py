"""Fixtures: canned HTTP session, crawl config rooted in tmp_path."""

from __future__ import annotations

from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from pagecrawler.config import CrawlConfig
from pagecrawler.fetcher import Fetcher


def make_response(
    url: str,
    *,
    status: int = 200,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.url = url
    response.encoding = "utf-8"
    return response


class FakeSession(requests.Session):
    """Session whose `send` answers from a URL -> response table.

    Unknown URLs get an empty 404. A route holding an exception raises it.
    """

    def __init__(self) -> None:
        super().__init__()
        self.routes: dict[str, Any] = {}
        self.sent: list[requests.PreparedRequest] = []
        self.send_kwargs: list[dict[str, Any]] = []

    def add(
        self,
        url: str,
        body: bytes | str = b"",
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = (status, body, headers)

    def fail(self, url: str, exc: Exception) -> None:
        self.routes[url] = exc

    @property
    def sent_urls(self) -> list[str]:
        return [request.url for request in self.sent]

    def send(self, request, **kwargs):  # type: ignore[override]
        self.sent.append(request)
        self.send_kwargs.append(kwargs)

        route = self.routes.get(request.url)
        if route is None:
            return make_response(request.url, status=404)
        if isinstance(route, Exception):
            raise route

        status, body, headers = route
        return make_response(request.url, status=status, body=body, headers=headers)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def config(tmp_path) -> CrawlConfig:
    return CrawlConfig(storage_dir=str(tmp_path / "storage"), request_delay_seconds=0)


@pytest.fixture
def fetcher(config: CrawlConfig, session: FakeSession) -> Fetcher:
    return Fetcher(config, session=session)
