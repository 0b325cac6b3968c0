"""Records for fetched pages and what was extracted from them.

Only the standard library is imported here; every other module builds on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONDict = dict[str, JSONValue]


class ResourceTag(str, Enum):
    """Element kinds reported as embedded resources."""

    LINK = "link"
    IMG = "img"
    SCRIPT = "script"
    STYLE = "style"


class FindingKind(str, Enum):
    """HTML validation finding categories."""

    INVALID_TAG = "invalid_tag"
    INVALID_ATTRIBUTE = "invalid_attribute"
    NOT_SELF_CLOSING = "not_self_closing"


def _str_dict(value: Any) -> dict[str, str]:
    return {str(k): str(v) for k, v in dict(value or {}).items()}


@dataclass(frozen=True, slots=True)
class FormInput:
    name: str = ""
    type: str = ""
    value: str = ""

    def to_json(self) -> JSONDict:
        return {"name": self.name, "type": self.type, "value": self.value}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "FormInput":
        return cls(
            name=str(payload.get("name", "")),
            type=str(payload.get("type", "")),
            value=str(payload.get("value", "")),
        )


@dataclass(frozen=True, slots=True)
class Form:
    """A form element: resolved action URL, raw method, and its inputs."""

    url: str = ""
    method: str = ""
    inputs: tuple[FormInput, ...] = ()

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "method": self.method,
            "inputs": [item.to_json() for item in self.inputs],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Form":
        return cls(
            url=str(payload.get("url", "")),
            method=str(payload.get("method", "")),
            inputs=tuple(FormInput.from_json(item) for item in payload.get("inputs") or []),
        )


@dataclass(frozen=True, slots=True)
class Resource:
    """A stylesheet link, image, or sourced script/style element."""

    tag: ResourceTag
    url: str = ""
    type: str = ""
    rel: str = ""

    def to_json(self) -> JSONDict:
        return {"tag": self.tag.value, "url": self.url, "type": self.type, "rel": self.rel}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Resource":
        return cls(
            tag=ResourceTag(str(payload["tag"])),
            url=str(payload.get("url", "")),
            type=str(payload.get("type", "")),
            rel=str(payload.get("rel", "")),
        )


@dataclass(frozen=True, slots=True)
class TextURL:
    """URL-shaped substring found by scanning the raw body."""

    value: str
    start: int

    def to_json(self) -> JSONDict:
        return {"value": self.value, "start": self.start}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "TextURL":
        return cls(value=str(payload["value"]), start=int(payload.get("start", 0)))


@dataclass(frozen=True, slots=True)
class Cookie:
    name: str
    value: str = ""
    domain: str = ""
    http_only: bool = False

    def to_json(self) -> JSONDict:
        return {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "http_only": self.http_only,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "Cookie":
        return cls(
            name=str(payload["name"]),
            value=str(payload.get("value", "")),
            domain=str(payload.get("domain", "")),
            http_only=bool(payload.get("http_only", False)),
        )


@dataclass(frozen=True, slots=True)
class ValidationFinding:
    """One HTML allow-list violation."""

    kind: FindingKind
    tag: str
    attribute: str | None = None
    message: str = ""

    def to_json(self) -> JSONDict:
        return {
            "kind": self.kind.value,
            "tag": self.tag,
            "attribute": self.attribute,
            "message": self.message,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ValidationFinding":
        return cls(
            kind=FindingKind(str(payload["kind"])),
            tag=str(payload["tag"]),
            attribute=payload.get("attribute"),
            message=str(payload.get("message", "")),
        )


@dataclass(frozen=True, slots=True)
class ResponseInfo:
    """Structural data extracted from one response body."""

    hrefs: tuple[str, ...] = ()
    forms: tuple[Form, ...] = ()
    resources: tuple[Resource, ...] = ()
    text_urls: tuple[TextURL, ...] = ()
    validation: tuple[ValidationFinding, ...] = ()

    def with_href(self, url: str) -> "ResponseInfo":
        """Return a copy with `url` appended to hrefs unless already present."""

        if url in self.hrefs:
            return self
        return ResponseInfo(
            hrefs=self.hrefs + (url,),
            forms=self.forms,
            resources=self.resources,
            text_urls=self.text_urls,
            validation=self.validation,
        )

    def to_json(self) -> JSONDict:
        return {
            "hrefs": list(self.hrefs),
            "forms": [form.to_json() for form in self.forms],
            "resources": [resource.to_json() for resource in self.resources],
            "text_urls": [item.to_json() for item in self.text_urls],
            "validation": [finding.to_json() for finding in self.validation],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "ResponseInfo":
        return cls(
            hrefs=tuple(str(url) for url in payload.get("hrefs") or []),
            forms=tuple(Form.from_json(item) for item in payload.get("forms") or []),
            resources=tuple(Resource.from_json(item) for item in payload.get("resources") or []),
            text_urls=tuple(TextURL.from_json(item) for item in payload.get("text_urls") or []),
            validation=tuple(
                ValidationFinding.from_json(item) for item in payload.get("validation") or []
            ),
        )


@dataclass(frozen=True, slots=True)
class PageRequest:
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    protocol: str = ""
    content_length: int = 0
    cookies: tuple[Cookie, ...] = ()

    def to_json(self) -> JSONDict:
        return {
            "method": self.method,
            "headers": dict(self.headers),
            "protocol": self.protocol,
            "content_length": self.content_length,
            "cookies": [cookie.to_json() for cookie in self.cookies],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "PageRequest":
        return cls(
            method=str(payload.get("method", "")),
            headers=_str_dict(payload.get("headers")),
            protocol=str(payload.get("protocol", "")),
            content_length=int(payload.get("content_length", 0)),
            cookies=tuple(Cookie.from_json(item) for item in payload.get("cookies") or []),
        )


@dataclass(frozen=True, slots=True)
class PageResponse:
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    protocol: str = ""
    content_length: int = 0
    content_mime: str = ""
    cookies: tuple[Cookie, ...] = ()

    def to_json(self) -> JSONDict:
        return {
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "protocol": self.protocol,
            "content_length": self.content_length,
            "content_mime": self.content_mime,
            "cookies": [cookie.to_json() for cookie in self.cookies],
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> "PageResponse":
        return cls(
            status_code=int(payload["status_code"]),
            headers=_str_dict(payload.get("headers")),
            protocol=str(payload.get("protocol", "")),
            content_length=int(payload.get("content_length", 0)),
            content_mime=str(payload.get("content_mime", "")),
            cookies=tuple(Cookie.from_json(item) for item in payload.get("cookies") or []),
        )


@dataclass(frozen=True, slots=True)
class Page:
    """Complete record of one fetch attempt.

    `body` holds the raw response bytes and is never part of `to_json()`;
    storage writes it to its own artifact.
    """

    url: str
    crawl_time: int
    duration_ms: int
    uid: str
    request: PageRequest
    response: PageResponse | None = None
    info: ResponseInfo = field(default_factory=ResponseInfo)
    redirect_url: str | None = None
    error: str | None = None
    parse_error: str | None = None
    crawler_id: int = 0
    body: bytes = field(default=b"", repr=False)

    @property
    def failed(self) -> bool:
        """True when the transport failed before a response was obtained."""

        return self.error is not None

    @property
    def status_code(self) -> int | None:
        return None if self.response is None else self.response.status_code

    def to_json(self) -> JSONDict:
        return {
            "url": self.url,
            "crawl_time": self.crawl_time,
            "duration_ms": self.duration_ms,
            "uid": self.uid,
            "crawler_id": self.crawler_id,
            "request": self.request.to_json(),
            "response": None if self.response is None else self.response.to_json(),
            "info": self.info.to_json(),
            "redirect_url": self.redirect_url,
            "error": self.error,
            "parse_error": self.parse_error,
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any], *, body: bytes = b"") -> "Page":
        response_payload = payload.get("response")
        return cls(
            url=str(payload["url"]),
            crawl_time=int(payload["crawl_time"]),
            duration_ms=int(payload.get("duration_ms", 0)),
            uid=str(payload["uid"]),
            crawler_id=int(payload.get("crawler_id", 0)),
            request=PageRequest.from_json(payload.get("request") or {}),
            response=None if response_payload is None else PageResponse.from_json(response_payload),
            info=ResponseInfo.from_json(payload.get("info") or {}),
            redirect_url=payload.get("redirect_url"),
            error=payload.get("error"),
            parse_error=payload.get("parse_error"),
            body=body,
        )


__all__ = [
    "Cookie",
    "FindingKind",
    "Form",
    "FormInput",
    "JSONDict",
    "JSONPrimitive",
    "JSONValue",
    "Page",
    "PageRequest",
    "PageResponse",
    "Resource",
    "ResourceTag",
    "ResponseInfo",
    "TextURL",
    "ValidationFinding",
]
