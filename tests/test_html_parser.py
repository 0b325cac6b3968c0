"""HTML extraction: hyperlinks, resources, forms, inline styles."""

import pytest

from pagecrawler.parsers import (
    HTMLExtractor,
    HTMLExtractorConfig,
    is_hidden_style,
    is_html_mime,
    parse_inline_style,
)
from pagecrawler.types import Form, FormInput, Resource, ResourceTag


BASE_URL = "http://example.com/dir/index.html"

PAGE = """<html><head>
<link rel="stylesheet" type="text/css" href="/static/site.css">
<script src="/js/app.js" type="text/javascript"></script>
<script>var api = "http://inline.example.com/path";</script>
<style>body { margin: 0; }</style>
</head><body>
<a href="/a">A</a>
<a href="/a#frag">A again</a>
<a href="/hidden" style="display: none">Hidden</a>
<a href="/invisible" style="color: red; visibility:hidden">Invisible</a>
<a name="anchor-without-href">No href</a>
<map><area href="b.html"></map>
<img src="img/logo.png">
<form action="/login" method="post">
  <input name="user" type="text" value="bob">
  <input type="submit">
</form>
</body></html>"""


@pytest.fixture
def extractor():
    return HTMLExtractor()


def test_hrefs_are_resolved_deduplicated_and_skip_hidden(extractor):
    soup = extractor.parse(PAGE)

    assert extractor.extract_hrefs(soup, BASE_URL) == [
        "http://example.com/a",
        "http://example.com/dir/b.html",
    ]


def test_hidden_links_included_when_enabled():
    extractor = HTMLExtractor(HTMLExtractorConfig(include_hidden_links=True))
    soup = extractor.parse(PAGE)

    assert extractor.extract_hrefs(soup, BASE_URL) == [
        "http://example.com/a",
        "http://example.com/hidden",
        "http://example.com/invisible",
        "http://example.com/dir/b.html",
    ]


def test_resources_skip_inline_scripts_and_styles(extractor):
    soup = extractor.parse(PAGE)

    assert extractor.extract_resources(soup, BASE_URL) == [
        Resource(
            tag=ResourceTag.LINK,
            url="http://example.com/static/site.css",
            type="text/css",
            rel="stylesheet",
        ),
        Resource(tag=ResourceTag.IMG, url="http://example.com/dir/img/logo.png"),
        Resource(
            tag=ResourceTag.SCRIPT,
            url="http://example.com/js/app.js",
            type="text/javascript",
        ),
    ]


def test_forms_capture_action_method_and_inputs(extractor):
    soup = extractor.parse(PAGE)

    assert extractor.extract_forms(soup, BASE_URL) == [
        Form(
            url="http://example.com/login",
            method="post",
            inputs=(
                FormInput(name="user", type="text", value="bob"),
                FormInput(type="submit"),
            ),
        )
    ]


def test_form_without_action_has_empty_url(extractor):
    soup = extractor.parse("<form><input name='q'></form>")

    [form] = extractor.extract_forms(soup, BASE_URL)
    assert form.url == ""
    assert form.method == ""
    assert form.inputs == (FormInput(name="q"),)


def test_extract_collects_text_urls_from_inline_script(extractor):
    info = extractor.extract(PAGE.encode("utf-8"), BASE_URL)

    assert [item.value for item in info.text_urls] == ["http://inline.example.com/path"]
    assert len(info.hrefs) == 2
    assert len(info.forms) == 1
    assert info.validation == ()


def test_parse_inline_style():
    assert parse_inline_style("display: none; color:red;;junk") == {
        "display": "none",
        "color": "red",
    }


@pytest.mark.parametrize(
    "style, hidden",
    [
        ("display:none", True),
        ("visibility: hidden", True),
        ("display:block", False),
        ("visibility:visible; color:red", False),
        ("", False),
    ],
)
def test_is_hidden_style(style, hidden):
    assert is_hidden_style(style) is hidden


def test_is_html_mime():
    assert is_html_mime("text/html")
    assert is_html_mime("application/xhtml+xml")
    assert not is_html_mime("application/json")
