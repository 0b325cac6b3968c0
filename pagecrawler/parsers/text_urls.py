"""Loose URL scanning over raw response bodies.

DOM extraction only sees URLs in markup attributes. This scan also catches
URLs inside inline scripts, comments, and JSON blobs.
"""

from __future__ import annotations

import re
from itertools import islice

from ..types import TextURL


_HOST = r"[a-zA-Z0-9.-]+"
_PATH = r"[a-zA-Z0-9+&@#/%?=~_|!:,.;-]*"

TEXT_URL_PATTERN = re.compile(
    rf"(?<![\w/:.-])(?:file:///{_PATH}|(?:(?:https?|ftp|file):)?//{_HOST}/?{_PATH})",
    re.IGNORECASE,
)


def find_text_urls(text: str | bytes, limit: int = -1) -> list[TextURL]:
    """Return URL-shaped substrings of `text` in order of appearance.

    At most `limit` matches are returned; a non-positive limit means unlimited.
    """

    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")

    matches = TEXT_URL_PATTERN.finditer(text)
    if limit > 0:
        matches = islice(matches, limit)
    return [TextURL(value=match.group(0), start=match.start()) for match in matches]


__all__ = ["TEXT_URL_PATTERN", "find_text_urls"]
