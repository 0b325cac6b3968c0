"""Single-request fetch pipeline: dispatch, capture, extract, resolve redirects."""

from __future__ import annotations

import logging
import time
from typing import Mapping

import requests
from bs4 import ParserRejectedMarkup

from .config import CrawlConfig
from .constants import DEFAULT_MIME_TYPE
from .errors import RequestBuildError
from .parsers import HTMLExtractor, HTMLExtractorConfig, HTMLValidator, is_html_mime, load_valid_tags
from .types import Cookie, Page, PageRequest, PageResponse, ResponseInfo
from .url import to_abs_url, url_hash


logger = logging.getLogger(__name__)

REQUEST_PROTOCOL = "HTTP/1.1"
_PROTOCOL_BY_RAW_VERSION = {9: "HTTP/0.9", 10: "HTTP/1.0", 11: "HTTP/1.1", 20: "HTTP/2"}


def content_mime(headers: Mapping[str, str]) -> str:
    """MIME type from Content-Type without parameters; text/html when unset."""

    mime = (headers.get("Content-Type") or "").split(";", maxsplit=1)[0].strip().lower()
    return mime or DEFAULT_MIME_TYPE


def redirect_target(status_code: int, headers: Mapping[str, str], base_url: str) -> str | None:
    """Absolute `Location` target for 3xx responses in [300, 308), else None."""

    if not 300 <= status_code < 308:
        return None
    location = headers.get("Location")
    if not location:
        return None
    return to_abs_url(base_url, location)


def build_extractor(config: CrawlConfig) -> HTMLExtractor:
    """Create the HTML extractor described by a crawl config."""

    validator = None
    if config.validate_html and config.valid_tags_path:
        validator = HTMLValidator(load_valid_tags(config.valid_tags_path))
    return HTMLExtractor(
        HTMLExtractorConfig(
            include_hidden_links=config.include_hidden_links,
            text_url_limit=config.text_url_limit,
        ),
        validator=validator,
    )


class Fetcher:
    """Fetch one URL per call without following redirects.

    The session is created on demand unless one is injected; an injected
    session is left open by `close()`.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        session: requests.Session | None = None,
        extractor: HTMLExtractor | None = None,
    ) -> None:
        self.config = config
        self.extractor = extractor or build_extractor(config)

        self._session = session or requests.Session()
        self._owns_session = session is None

    def fetch(self, url: str, method: str | None = None) -> Page:
        """Fetch `url` and return the resulting Page.

        Raises RequestBuildError when the request cannot be constructed.
        Transport failures do not raise: they come back as a Page whose
        `error` is set and whose `response` is None.
        """

        request = requests.Request(
            method=(method or self.config.method).upper(),
            url=url,
            headers=self.config.request_headers,
        )
        try:
            prepared = self._session.prepare_request(request)
        except (requests.RequestException, ValueError) as exc:
            raise RequestBuildError(url, str(exc)) from exc

        started = time.perf_counter()
        try:
            response = self._session.send(
                prepared,
                timeout=self.config.timeout_seconds,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.warning("Fetching %s failed after %d ms: %s", url, elapsed_ms, exc)
            return self._build_page(
                prepared,
                None,
                elapsed_ms,
                error=f"{exc.__class__.__name__}: {exc}",
            )

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.debug("Fetched %s -> %s in %d ms", url, response.status_code, elapsed_ms)
        return self._build_page(prepared, response, elapsed_ms)

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _build_page(
        self,
        prepared: requests.PreparedRequest,
        response: requests.Response | None,
        elapsed_ms: int,
        *,
        error: str | None = None,
    ) -> Page:
        page_url = prepared.url or ""
        page_request = PageRequest(
            method=prepared.method or "",
            headers=dict(prepared.headers),
            protocol=REQUEST_PROTOCOL,
            content_length=_body_length(prepared.body),
            cookies=_request_cookies(prepared.headers.get("Cookie")),
        )

        page_response = None
        body = b""
        info = ResponseInfo()
        parse_error = None
        redirect_url = None

        if response is not None:
            body = response.content or b""
            headers = dict(response.headers)
            mime = content_mime(response.headers)
            page_response = PageResponse(
                status_code=response.status_code,
                headers=headers,
                protocol=_response_protocol(response),
                content_length=_content_length(response.headers, body),
                content_mime=mime,
                cookies=_response_cookies(response),
            )

            if body and is_html_mime(mime):
                try:
                    info = self.extractor.extract(body, page_url)
                except ParserRejectedMarkup as exc:
                    parse_error = f"{exc.__class__.__name__}: {exc}"
                    logger.warning("Could not parse HTML from %s: %s", page_url, exc)

            redirect_url = redirect_target(response.status_code, response.headers, page_url)
            if redirect_url:
                info = info.with_href(redirect_url)

        return Page(
            url=page_url,
            crawl_time=int(time.time()),
            duration_ms=elapsed_ms,
            uid=url_hash(page_url),
            crawler_id=self.config.crawler_id,
            request=page_request,
            response=page_response,
            info=info,
            redirect_url=redirect_url,
            error=error,
            parse_error=parse_error,
            body=body,
        )


def _body_length(body: bytes | str | None) -> int:
    if body is None:
        return 0
    if isinstance(body, str):
        return len(body.encode("utf-8"))
    return len(body)


def _content_length(headers: Mapping[str, str], body: bytes) -> int:
    raw = headers.get("Content-Length")
    if raw is not None:
        try:
            return int(raw)
        except ValueError:
            pass
    return len(body)


def _response_protocol(response: requests.Response) -> str:
    version = getattr(response.raw, "version", None)
    return _PROTOCOL_BY_RAW_VERSION.get(version, "")


def _request_cookies(header: str | None) -> tuple[Cookie, ...]:
    if not header:
        return ()
    cookies = []
    for chunk in header.split(";"):
        name, sep, value = chunk.strip().partition("=")
        if sep and name:
            cookies.append(Cookie(name=name, value=value))
    return tuple(cookies)


def _response_cookies(response: requests.Response) -> tuple[Cookie, ...]:
    return tuple(
        Cookie(
            name=cookie.name,
            value=cookie.value or "",
            domain=cookie.domain or "",
            http_only=cookie.has_nonstandard_attr("HttpOnly")
            or cookie.has_nonstandard_attr("httponly"),
        )
        for cookie in response.cookies
    )


__all__ = ["Fetcher", "build_extractor", "content_mime", "redirect_target"]
