"""Crawler package: config, shared types, and pipeline components."""

from .config import CrawlConfig, DNSScanConfig, PortScanConfig, load_config, save_config
from .dns_scan import DNSScanner, load_wordlist
from .errors import CrawlerError, FetchFailedError, HookError, RequestBuildError
from .fetcher import Fetcher, content_mime, redirect_target
from .frontier import Frontier
from .parsers import (
    HTMLExtractor,
    HTMLExtractorConfig,
    HTMLValidator,
    ValidTag,
    find_text_urls,
    is_hidden_style,
)
from .pipeline import Pipeline
from .portscan import PortInfo, PortScanner, parse_port_spec
from .stats import StatsCollector
from .storage import Storage
from .types import (
    Cookie,
    Form,
    FormInput,
    Page,
    PageRequest,
    PageResponse,
    Resource,
    ResourceTag,
    ResponseInfo,
    TextURL,
    ValidationFinding,
)
from .url import canonicalize_url, is_same_domain, registrable_domain, to_abs_url, url_hash

__all__ = [
    "Cookie",
    "CrawlConfig",
    "CrawlerError",
    "DNSScanConfig",
    "DNSScanner",
    "FetchFailedError",
    "Fetcher",
    "Form",
    "FormInput",
    "Frontier",
    "HTMLExtractor",
    "HTMLExtractorConfig",
    "HTMLValidator",
    "HookError",
    "Page",
    "PageRequest",
    "PageResponse",
    "Pipeline",
    "PortInfo",
    "PortScanConfig",
    "PortScanner",
    "RequestBuildError",
    "Resource",
    "ResourceTag",
    "ResponseInfo",
    "StatsCollector",
    "Storage",
    "TextURL",
    "ValidTag",
    "ValidationFinding",
    "canonicalize_url",
    "content_mime",
    "find_text_urls",
    "is_hidden_style",
    "is_same_domain",
    "load_config",
    "load_wordlist",
    "parse_port_spec",
    "redirect_target",
    "registrable_domain",
    "save_config",
    "to_abs_url",
    "url_hash",
]
