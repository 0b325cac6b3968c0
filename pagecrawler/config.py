"""Crawl and scanner settings, loadable from JSON or YAML files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml  # type: ignore

from .constants import (
    DEFAULT_ALLOWED_SCHEMES,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_CRAWLER_ID,
    DEFAULT_DNS_PORT,
    DEFAULT_DNS_TIMEOUT_SECONDS,
    DEFAULT_FETCH_ERROR_POLICY,
    DEFAULT_HTTP_HEADERS,
    DEFAULT_INCLUDE_HIDDEN_LINKS,
    DEFAULT_METHOD,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DEFAULT_REQUEST_DELAY_SECONDS,
    DEFAULT_RESOLV_CONF,
    DEFAULT_STORAGE_DIR,
    DEFAULT_TEXT_URL_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    DEFAULT_VALIDATE_HTML,
    FETCH_ERROR_POLICIES,
    JSON_INDENT,
    SUPPORTED_CONFIG_SUFFIXES,
)
from .types import JSONDict


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid float for '{key}': {value!r}") from exc


def _as_int(value: Any, key: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid int for '{key}': {value!r}") from exc


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValueError(f"Invalid bool for '{key}': {value!r}")


def _as_headers(value: Any, key: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError(f"Invalid mapping for '{key}': {value!r}")
    return {str(k): str(v) for k, v in value.items()}


@dataclass(slots=True)
class CrawlConfig:
    """Settings for one crawl run."""

    headers: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_HTTP_HEADERS))
    user_agent: str = DEFAULT_USER_AGENT
    method: str = DEFAULT_METHOD

    include_hidden_links: bool = DEFAULT_INCLUDE_HIDDEN_LINKS
    request_delay_seconds: float = DEFAULT_REQUEST_DELAY_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    allowed_schemes: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_SCHEMES))

    storage_dir: str = DEFAULT_STORAGE_DIR
    text_url_limit: int = DEFAULT_TEXT_URL_LIMIT

    validate_html: bool = DEFAULT_VALIDATE_HTML
    valid_tags_path: str | None = None

    fetch_error_policy: str = DEFAULT_FETCH_ERROR_POLICY
    crawler_id: int = DEFAULT_CRAWLER_ID

    def __post_init__(self) -> None:
        self.method = self.method.strip().upper()
        if not self.method:
            raise ValueError("method cannot be empty")
        if self.request_delay_seconds < 0:
            raise ValueError("request_delay_seconds must be >= 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self.allowed_schemes = [
            scheme.strip().lower() for scheme in self.allowed_schemes if scheme and scheme.strip()
        ]
        if not self.allowed_schemes:
            raise ValueError("allowed_schemes cannot be empty")

        self.fetch_error_policy = self.fetch_error_policy.strip().lower()
        if self.fetch_error_policy not in FETCH_ERROR_POLICIES:
            raise ValueError(
                f"fetch_error_policy must be one of {FETCH_ERROR_POLICIES}, "
                f"got {self.fetch_error_policy!r}"
            )

        if self.validate_html and not self.valid_tags_path:
            raise ValueError("validate_html requires valid_tags_path")

    @property
    def request_headers(self) -> dict[str, str]:
        """Headers sent with every request; explicit headers win over user_agent."""

        merged = dict(self.headers)
        merged.setdefault("User-Agent", self.user_agent)
        return merged

    def to_dict(self) -> JSONDict:
        """Plain-dict form, the inverse of `from_dict`."""

        return {
            "headers": dict(self.headers),
            "user_agent": self.user_agent,
            "method": self.method,
            "include_hidden_links": self.include_hidden_links,
            "request_delay_seconds": self.request_delay_seconds,
            "timeout_seconds": self.timeout_seconds,
            "allowed_schemes": list(self.allowed_schemes),
            "storage_dir": self.storage_dir,
            "text_url_limit": self.text_url_limit,
            "validate_html": self.validate_html,
            "valid_tags_path": self.valid_tags_path,
            "fetch_error_policy": self.fetch_error_policy,
            "crawler_id": self.crawler_id,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CrawlConfig":
        """Coerce a loaded mapping; missing keys take their defaults."""

        valid_tags_path = payload.get("valid_tags_path")
        return cls(
            headers=_as_headers(payload.get("headers", DEFAULT_HTTP_HEADERS), "headers"),
            user_agent=str(payload.get("user_agent", DEFAULT_USER_AGENT)),
            method=str(payload.get("method", DEFAULT_METHOD)),
            include_hidden_links=_as_bool(
                payload.get("include_hidden_links", DEFAULT_INCLUDE_HIDDEN_LINKS),
                "include_hidden_links",
            ),
            request_delay_seconds=_as_float(
                payload.get("request_delay_seconds", DEFAULT_REQUEST_DELAY_SECONDS),
                "request_delay_seconds",
            ),
            timeout_seconds=_as_float(
                payload.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                "timeout_seconds",
            ),
            allowed_schemes=[
                str(scheme) for scheme in payload.get("allowed_schemes", DEFAULT_ALLOWED_SCHEMES)
            ],
            storage_dir=str(payload.get("storage_dir", DEFAULT_STORAGE_DIR)),
            text_url_limit=_as_int(
                payload.get("text_url_limit", DEFAULT_TEXT_URL_LIMIT),
                "text_url_limit",
            ),
            validate_html=_as_bool(
                payload.get("validate_html", DEFAULT_VALIDATE_HTML),
                "validate_html",
            ),
            valid_tags_path=None if valid_tags_path is None else str(valid_tags_path),
            fetch_error_policy=str(payload.get("fetch_error_policy", DEFAULT_FETCH_ERROR_POLICY)),
            crawler_id=_as_int(payload.get("crawler_id", DEFAULT_CRAWLER_ID), "crawler_id"),
        )


@dataclass(slots=True)
class PortScanConfig:
    """Timeouts and probe behaviour for the TCP port prober."""

    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    read_timeout_seconds: float = DEFAULT_READ_TIMEOUT_SECONDS
    send_probe: bool = True

    def __post_init__(self) -> None:
        if self.connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        if self.read_timeout_seconds <= 0:
            raise ValueError("read_timeout_seconds must be > 0")


@dataclass(slots=True)
class DNSScanConfig:
    """Resolver settings for subdomain scanning.

    `nameserver` overrides the first server listed in `resolv_conf`.
    """

    resolv_conf: str = DEFAULT_RESOLV_CONF
    nameserver: str | None = None
    port: int = DEFAULT_DNS_PORT
    timeout_seconds: float = DEFAULT_DNS_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError("port must be in 1..65535")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"YAML config at {path} must be a mapping at top level")
    return data


def load_config(path: str | Path) -> CrawlConfig:
    """Read a `.json`, `.yaml` or `.yml` crawl config."""

    config_path = Path(path)
    suffix = config_path.suffix.lower()
    if suffix not in SUPPORTED_CONFIG_SUFFIXES:
        raise ValueError(
            f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
        )

    if suffix == ".json":
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    else:
        payload = _load_yaml(config_path)

    if not isinstance(payload, dict):
        raise ValueError(f"Config at {config_path} must be a mapping")

    return CrawlConfig.from_dict(payload)


def save_config(config: CrawlConfig, path: str | Path) -> None:
    """Write `config` in the format named by the file suffix."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = out_path.suffix.lower()
    payload = config.to_dict()

    if suffix == ".json":
        out_path.write_text(
            json.dumps(payload, indent=JSON_INDENT, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        return

    if suffix in {".yaml", ".yml"}:
        out_path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        return

    raise ValueError(
        f"Unsupported config suffix '{suffix}'. Supported: {SUPPORTED_CONFIG_SUFFIXES}"
    )


__all__ = [
    "CrawlConfig",
    "DNSScanConfig",
    "PortScanConfig",
    "load_config",
    "save_config",
]
