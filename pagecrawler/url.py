"""URL resolution, canonicalization, and same-site scoping helpers."""

from __future__ import annotations

import hashlib
import ipaddress
from typing import Sequence
from urllib.parse import SplitResult, quote, urljoin, urlsplit, urlunsplit

from requests import PreparedRequest

from .constants import DEFAULT_ALLOWED_SCHEMES


def _has_default_port(scheme: str, port: int | None) -> bool:
    if port is None:
        return False
    return (scheme == "http" and port == 80) or (scheme == "https" and port == 443)


def _normalize_netloc(parsed_url: SplitResult) -> str:
    host = (parsed_url.hostname or "").lower()
    if not host:
        return parsed_url.netloc.lower()
    if ":" in host:
        host = f"[{host}]"

    userinfo = ""
    if parsed_url.username:
        userinfo = quote(parsed_url.username, safe="")
        if parsed_url.password:
            userinfo += ":" + quote(parsed_url.password, safe="")
        userinfo += "@"

    port = parsed_url.port
    if port is not None and not _has_default_port(parsed_url.scheme.lower(), port):
        return f"{userinfo}{host}:{port}"
    return f"{userinfo}{host}"


def canonicalize_url(url: str) -> str | None:
    """Canonicalize an absolute URL.

    Lowercases scheme and host, drops default ports and the fragment, and uses
    `/` for an empty path on hierarchical URLs. Query strings are kept
    because they are part of a page's identity.

    HTTP(S) URLs are then prepared the way requests prepares them before
    sending (IDNA host, requoted path and query), so the result equals the
    URL that goes on the wire. Returns `None` when the URL cannot be parsed.
    """

    try:
        parsed = urlsplit(url.strip())
        if not parsed.netloc:
            return urlunsplit((parsed.scheme.lower(), "", parsed.path, parsed.query, ""))
        netloc = _normalize_netloc(parsed)
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    canonical = urlunsplit((scheme, netloc, parsed.path or "/", parsed.query, ""))
    if scheme not in ("http", "https"):
        return canonical
    return _prepared_url(canonical)


def _prepared_url(url: str) -> str | None:
    prepared = PreparedRequest()
    try:
        prepared.prepare_url(url, None)
    except ValueError:
        # InvalidURL and MissingSchema are ValueErrors.
        return None
    return prepared.url


def to_abs_url(base_url: str, href: str) -> str | None:
    """Resolve a possibly relative `href` against `base_url`.

    Returns the canonical absolute URL, or `None` when either side is malformed.
    """

    try:
        joined = urljoin(base_url, href.strip())
    except ValueError:
        return None
    return canonicalize_url(joined)


def host_from_url(url: str) -> str | None:
    """Return the lowercased host of `url`, or `None` if it cannot be parsed."""

    try:
        parsed = urlsplit(url.strip())
        # Accessing .port validates the netloc.
        parsed.port
    except ValueError:
        return None
    return (parsed.hostname or "").strip(".").lower()


def registrable_domain(host: str) -> str:
    """Return the registrable-domain heuristic for `host`.

    The last two dot-separated labels (`mail.example.com` -> `example.com`);
    single-label hosts and IP literals are returned whole. Multi-part public
    suffixes such as `.co.uk` are not recognised.
    """

    host = host.strip(".").lower()
    try:
        ipaddress.ip_address(host)
        return host
    except ValueError:
        pass

    labels = host.split(".")
    if len(labels) >= 2:
        return ".".join(labels[-2:])
    return host


def domain_of(url: str) -> str | None:
    """Registrable domain of a URL, `None` when the URL does not parse."""

    host = host_from_url(url)
    if host is None:
        return None
    return registrable_domain(host)


def is_same_domain(base_url: str, candidate_url: str) -> bool:
    """True when both URLs parse and share a registrable domain."""

    base_domain = domain_of(base_url)
    candidate_domain = domain_of(candidate_url)
    if base_domain is None or candidate_domain is None:
        return False
    return base_domain == candidate_domain


def has_allowed_scheme(url: str, allowed_schemes: Sequence[str] = DEFAULT_ALLOWED_SCHEMES) -> bool:
    try:
        scheme = urlsplit(url.strip()).scheme.lower()
    except ValueError:
        return False
    return scheme in {item.lower() for item in allowed_schemes}


def url_hash(url: str) -> str:
    """Stable page identifier: SHA-1 hex digest of the URL string."""

    return hashlib.sha1(url.encode("utf-8")).hexdigest()


__all__ = [
    "canonicalize_url",
    "domain_of",
    "has_allowed_scheme",
    "host_from_url",
    "is_same_domain",
    "registrable_domain",
    "to_abs_url",
    "url_hash",
]
