"""Single fetches against a canned session."""

import pytest
import requests

from pagecrawler.config import CrawlConfig
from pagecrawler.constants import DEFAULT_USER_AGENT
from pagecrawler.errors import RequestBuildError
from pagecrawler.fetcher import Fetcher, content_mime, redirect_target
from pagecrawler.url import url_hash


def test_redirect_target_is_added_to_hrefs_once(fetcher, session):
    url = "http://host.com/q/qe/t?m=5"
    session.add(
        url,
        '<a href="/test/test3">again</a>',
        status=301,
        headers={"Location": "/test/test3", "Content-Type": "text/html"},
    )

    page = fetcher.fetch(url)

    assert page.redirect_url == "http://host.com/test/test3"
    assert page.info.hrefs == ("http://host.com/test/test3",)
    assert page.status_code == 301
    assert session.send_kwargs[0]["allow_redirects"] is False


def test_redirect_without_body(fetcher, session):
    session.add("http://host.com/old", status=302, headers={"Location": "https://host.com/new"})

    page = fetcher.fetch("http://host.com/old")

    assert page.info.hrefs == ("https://host.com/new",)


def test_location_outside_redirect_range_is_ignored(fetcher, session):
    session.add("http://host.com/", status=200, headers={"Location": "/elsewhere"})
    session.add("http://host.com/perm", status=308, headers={"Location": "/elsewhere"})

    assert fetcher.fetch("http://host.com/").redirect_url is None
    assert fetcher.fetch("http://host.com/perm").redirect_url is None


def test_successful_fetch_records_request_and_response(fetcher, session, config):
    body = '<html><body><a href="/next">n</a></body></html>'
    session.add(
        "http://a.com/",
        body,
        headers={"Content-Type": "text/html; charset=utf-8", "Content-Length": "999"},
    )

    page = fetcher.fetch("http://a.com/")

    assert not page.failed
    assert page.url == "http://a.com/"
    assert page.uid == url_hash("http://a.com/")
    assert page.body == body.encode("utf-8")
    assert page.info.hrefs == ("http://a.com/next",)

    assert page.request.method == "GET"
    assert page.request.headers["User-Agent"] == DEFAULT_USER_AGENT
    assert page.response.content_mime == "text/html"
    assert page.response.content_length == 999
    assert session.send_kwargs[0]["timeout"] == config.timeout_seconds


def test_missing_content_type_defaults_to_html(fetcher, session):
    session.add("http://a.com/", '<a href="b">b</a>')

    page = fetcher.fetch("http://a.com/")

    assert page.response.content_mime == "text/html"
    assert page.response.content_length == len(b'<a href="b">b</a>')
    assert page.info.hrefs == ("http://a.com/b",)


def test_non_html_body_is_not_parsed(fetcher, session):
    session.add(
        "http://a.com/data.json",
        '{"next": "http://a.com/x"}',
        headers={"Content-Type": "application/json"},
    )

    page = fetcher.fetch("http://a.com/data.json")

    assert page.info.hrefs == ()
    assert page.info.text_urls == ()
    assert page.body


def test_transport_error_returns_failed_page(fetcher, session):
    session.fail("http://down.com/", requests.ConnectionError("connection refused"))

    page = fetcher.fetch("http://down.com/")

    assert page.failed
    assert page.error == "ConnectionError: connection refused"
    assert page.response is None
    assert page.status_code is None
    assert page.body == b""


def test_unbuildable_request_raises(fetcher, session):
    with pytest.raises(RequestBuildError) as excinfo:
        fetcher.fetch("http://")

    assert excinfo.value.url == "http://"
    assert session.sent == []


def test_request_cookies_and_crawler_id(session, tmp_path):
    config = CrawlConfig(
        storage_dir=str(tmp_path),
        headers={"Cookie": "a=1; b=2"},
        crawler_id=7,
    )
    session.add("http://a.com/", "ok", headers={"Content-Type": "text/plain"})

    page = Fetcher(config, session=session).fetch("http://a.com/")

    assert [(c.name, c.value) for c in page.request.cookies] == [("a", "1"), ("b", "2")]
    assert page.crawler_id == 7


def test_explicit_method_overrides_config(fetcher, session):
    session.add("http://a.com/", "")

    page = fetcher.fetch("http://a.com/", method="head")

    assert page.request.method == "HEAD"
    assert session.sent[0].method == "HEAD"


def test_content_mime():
    assert content_mime({"Content-Type": "Text/HTML; charset=utf-8"}) == "text/html"
    assert content_mime({}) == "text/html"


def test_redirect_target_bounds():
    headers = {"Location": "/x"}
    assert redirect_target(300, headers, "http://a.com/") == "http://a.com/x"
    assert redirect_target(307, headers, "http://a.com/") == "http://a.com/x"
    assert redirect_target(308, headers, "http://a.com/") is None
    assert redirect_target(301, {}, "http://a.com/") is None
