"""Default values shared by crawler config, fetcher, storage, and scanners."""

from __future__ import annotations


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 6.3; WOW64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/47.0.2526.106 Safari/537.36"
)
DEFAULT_HTTP_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

DEFAULT_METHOD = "GET"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_REQUEST_DELAY_SECONDS = 1.0
DEFAULT_ALLOWED_SCHEMES: tuple[str, ...] = ("http", "https")
DEFAULT_INCLUDE_HIDDEN_LINKS = False
DEFAULT_TEXT_URL_LIMIT = -1
DEFAULT_VALIDATE_HTML = False
DEFAULT_CRAWLER_ID = 0

FETCH_ERROR_CONTINUE = "continue"
FETCH_ERROR_ABORT = "abort"
FETCH_ERROR_POLICIES: tuple[str, ...] = (FETCH_ERROR_CONTINUE, FETCH_ERROR_ABORT)
DEFAULT_FETCH_ERROR_POLICY = FETCH_ERROR_CONTINUE

DEFAULT_STORAGE_DIR = "storage"
PAGE_INFO_SUFFIX = ".httpi"
PAGE_BODY_SUFFIX = ".respbin"
LOG_SUBDIR = "logs"
LOG_FILE_NAME = "crawl.log"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MIME_TYPE = "text/html"

SUPPORTED_CONFIG_SUFFIXES: tuple[str, ...] = (".json", ".yaml", ".yml")
JSON_INDENT = 2

DEFAULT_CONNECT_TIMEOUT_SECONDS = 20.0
DEFAULT_READ_TIMEOUT_SECONDS = 10.0
PROBE_READ_BYTES = 1024

DEFAULT_RESOLV_CONF = "/etc/resolv.conf"
DEFAULT_DNS_PORT = 53
DEFAULT_DNS_TIMEOUT_SECONDS = 5.0
