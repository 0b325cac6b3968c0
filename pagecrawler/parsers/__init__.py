"""Parser package exports."""

from .html_check import HTMLValidator, ValidTag, load_valid_tags, save_valid_tags
from .html_parser import (
    HTMLExtractor,
    HTMLExtractorConfig,
    is_hidden_style,
    is_html_mime,
    parse_inline_style,
)
from .text_urls import find_text_urls

__all__ = [
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "HTMLValidator",
    "ValidTag",
    "find_text_urls",
    "is_hidden_style",
    "is_html_mime",
    "load_valid_tags",
    "parse_inline_style",
    "save_valid_tags",
]
