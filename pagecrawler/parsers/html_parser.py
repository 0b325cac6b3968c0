"""HTML structural extraction: links, resources, forms, and raw-text URLs."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from ..constants import DEFAULT_INCLUDE_HIDDEN_LINKS, DEFAULT_TEXT_URL_LIMIT
from ..types import Form, FormInput, Resource, ResourceTag, ResponseInfo
from ..url import to_abs_url
from .html_check import HTMLValidator
from .text_urls import find_text_urls


ANCHOR_TAGS = ["a", "area"]


def parse_inline_style(style: str) -> dict[str, str]:
    """Split an inline `prop:value;prop:value` declaration list."""

    declarations: dict[str, str] = {}
    for chunk in style.split(";"):
        key, sep, value = chunk.partition(":")
        if not sep:
            continue
        declarations[key.strip()] = value.strip()
    return declarations


def is_hidden_style(style: str) -> bool:
    """True when the inline style sets `display:none` or `visibility:hidden`."""

    declarations = parse_inline_style(style)
    return declarations.get("display") == "none" or declarations.get("visibility") == "hidden"


def is_html_mime(mime: str) -> bool:
    return "html" in mime.lower()


@dataclass(slots=True)
class HTMLExtractorConfig:
    """Config for HTML extraction."""

    include_hidden_links: bool = DEFAULT_INCLUDE_HIDDEN_LINKS
    text_url_limit: int = DEFAULT_TEXT_URL_LIMIT
    parser_features: str = "lxml"


class HTMLExtractor:
    """Extract hyperlinks, resources, forms, and text URLs from an HTML body."""

    def __init__(
        self,
        config: HTMLExtractorConfig | None = None,
        *,
        validator: HTMLValidator | None = None,
    ) -> None:
        self.config = config or HTMLExtractorConfig()
        self.validator = validator

    def parse(self, body: bytes | str) -> BeautifulSoup:
        # Keep attributes such as rel/class as raw strings.
        return BeautifulSoup(body, self.config.parser_features, multi_valued_attributes=None)

    def extract(self, body: bytes | str, base_url: str) -> ResponseInfo:
        soup = self.parse(body)
        return ResponseInfo(
            hrefs=tuple(self.extract_hrefs(soup, base_url)),
            forms=tuple(self.extract_forms(soup, base_url)),
            resources=tuple(self.extract_resources(soup, base_url)),
            text_urls=tuple(find_text_urls(body, self.config.text_url_limit)),
            validation=tuple(self.validator.validate(soup)) if self.validator else (),
        )

    def extract_hrefs(self, soup: BeautifulSoup, base_url: str) -> list[str]:
        """Resolved anchor targets in document order, duplicates removed."""

        out: list[str] = []
        seen: set[str] = set()

        for element in soup.find_all(ANCHOR_TAGS):
            href = element.get("href")
            if href is None:
                continue

            style = element.get("style")
            if not self.config.include_hidden_links and style and is_hidden_style(style):
                continue

            resolved = to_abs_url(base_url, href)
            if resolved is None or resolved in seen:
                continue

            seen.add(resolved)
            out.append(resolved)

        return out

    @staticmethod
    def extract_resources(soup: BeautifulSoup, base_url: str) -> list[Resource]:
        resources: list[Resource] = []

        for element in soup.find_all("link"):
            resources.append(
                Resource(
                    tag=ResourceTag.LINK,
                    url=_resolved_attr(element, "href", base_url),
                    type=element.get("type") or "",
                    rel=element.get("rel") or "",
                )
            )

        for element in soup.find_all("img"):
            resources.append(
                Resource(tag=ResourceTag.IMG, url=_resolved_attr(element, "src", base_url))
            )

        # Inline scripts/styles carry no source URL and are not resources.
        for tag in (ResourceTag.SCRIPT, ResourceTag.STYLE):
            for element in soup.find_all(tag.value):
                if element.get("src") is None:
                    continue
                resources.append(
                    Resource(
                        tag=tag,
                        url=_resolved_attr(element, "src", base_url),
                        type=element.get("type") or "",
                    )
                )

        return resources

    @staticmethod
    def extract_forms(soup: BeautifulSoup, base_url: str) -> list[Form]:
        forms: list[Form] = []

        for element in soup.find_all("form"):
            inputs = tuple(
                FormInput(
                    name=field.get("name") or "",
                    type=field.get("type") or "",
                    value=field.get("value") or "",
                )
                for field in element.find_all("input")
            )
            forms.append(
                Form(
                    url=_resolved_attr(element, "action", base_url),
                    method=element.get("method") or "",
                    inputs=inputs,
                )
            )

        return forms


def _resolved_attr(element: Tag, attribute: str, base_url: str) -> str:
    value = element.get(attribute)
    if value is None:
        return ""
    return to_abs_url(base_url, value) or ""


__all__ = [
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "is_hidden_style",
    "is_html_mime",
    "parse_inline_style",
]
