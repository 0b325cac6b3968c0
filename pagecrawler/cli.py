"""CLI entrypoint: crawl a site, enumerate subdomains, or probe ports."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys
from typing import Any

from tqdm import tqdm

from .config import CrawlConfig, DNSScanConfig, PortScanConfig, load_config
from .constants import (
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_DNS_PORT,
    DEFAULT_DNS_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DEFAULT_RESOLV_CONF,
    FETCH_ERROR_POLICIES,
    LOG_DATE_FORMAT,
    LOG_FILE_NAME,
    LOG_FORMAT,
    LOG_SUBDIR,
)
from .dns_scan import DNSScanner, load_wordlist
from .errors import CrawlerError
from .pipeline import Pipeline
from .portscan import PortInfo, PortScanner, parse_port_spec


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl linked pages from a seed URL and store every fetch result.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl = subparsers.add_parser("crawl", help="Crawl a site starting from a seed URL.")
    crawl.add_argument("seed_url", help="Seed URL (e.g. https://example.com).")
    crawl.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to JSON/YAML crawl config.",
    )
    crawl.add_argument("--storage_dir", type=str, default=None)
    crawl.add_argument("--request_delay_seconds", type=float, default=None)
    crawl.add_argument("--timeout_seconds", type=float, default=None)
    crawl.add_argument("--user_agent", type=str, default=None)
    crawl.add_argument(
        "--header",
        action="append",
        default=[],
        help="Extra request header as 'Name: value' (repeatable).",
    )
    crawl.add_argument(
        "--include_hidden_links",
        action="store_true",
        help="Also follow links hidden with display:none / visibility:hidden.",
    )
    crawl.add_argument(
        "--allowed_scheme",
        action="append",
        default=[],
        help="URL scheme allowed to be fetched (repeatable). Default: http, https.",
    )
    crawl.add_argument(
        "--text_url_limit",
        type=int,
        default=None,
        help="Max URLs scanned from raw text per page; 0 or negative is unlimited.",
    )
    crawl.add_argument(
        "--valid_tags",
        type=str,
        default=None,
        help="JSON tag allow-list; enables HTML validation.",
    )
    crawl.add_argument(
        "--fetch_error_policy",
        choices=list(FETCH_ERROR_POLICIES),
        default=None,
        help="Whether a transport error ends the crawl (abort) or not (continue).",
    )
    crawl.add_argument("--crawler_id", type=int, default=None)
    crawl.add_argument(
        "--resume",
        action="store_true",
        help="Load previously stored pages into the frontier before crawling.",
    )
    crawl.add_argument(
        "--print_stats_json",
        action="store_true",
        help="Print full stats JSON in stdout after run.",
    )

    dns_cmd = subparsers.add_parser("dns", help="Resolve wordlist subdomains of a domain.")
    dns_cmd.add_argument("domain")
    dns_cmd.add_argument("--wordlist", type=Path, required=True)
    dns_cmd.add_argument("--resolv_conf", type=str, default=DEFAULT_RESOLV_CONF)
    dns_cmd.add_argument("--nameserver", type=str, default=None)
    dns_cmd.add_argument("--port", type=int, default=DEFAULT_DNS_PORT)
    dns_cmd.add_argument("--timeout_seconds", type=float, default=DEFAULT_DNS_TIMEOUT_SECONDS)

    ports = subparsers.add_parser("ports", help="Probe TCP ports of a host.")
    ports.add_argument("host")
    ports.add_argument(
        "--ports",
        type=str,
        default="80,443",
        help="Comma-separated ports and ranges, e.g. 22,80,8000-8010.",
    )
    ports.add_argument("--connect_timeout_seconds", type=float, default=DEFAULT_CONNECT_TIMEOUT_SECONDS)
    ports.add_argument("--read_timeout_seconds", type=float, default=DEFAULT_READ_TIMEOUT_SECONDS)
    ports.add_argument(
        "--no_probe",
        action="store_true",
        help="Only connect; do not send the HTTP probe line.",
    )

    return parser.parse_args(argv)


def _parse_headers(specs: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for spec in specs:
        name, sep, value = spec.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid --header '{spec}'. Use 'Name: value'.")
        headers[name.strip()] = value.strip()
    return headers


def build_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config is not None:
        payload: dict[str, Any] = load_config(args.config).to_dict()
    else:
        payload = CrawlConfig().to_dict()

    if args.storage_dir is not None:
        payload["storage_dir"] = args.storage_dir
    if args.request_delay_seconds is not None:
        payload["request_delay_seconds"] = args.request_delay_seconds
    if args.timeout_seconds is not None:
        payload["timeout_seconds"] = args.timeout_seconds
    if args.user_agent is not None:
        payload["user_agent"] = args.user_agent
    if args.header:
        payload["headers"] = {**payload["headers"], **_parse_headers(args.header)}
    if args.include_hidden_links:
        payload["include_hidden_links"] = True
    if args.allowed_scheme:
        payload["allowed_schemes"] = list(args.allowed_scheme)
    if args.text_url_limit is not None:
        payload["text_url_limit"] = args.text_url_limit
    if args.valid_tags is not None:
        payload["validate_html"] = True
        payload["valid_tags_path"] = args.valid_tags
    if args.fetch_error_policy is not None:
        payload["fetch_error_policy"] = args.fetch_error_policy
    if args.crawler_id is not None:
        payload["crawler_id"] = args.crawler_id

    return CrawlConfig.from_dict(payload)


def setup_logging(log_dir: Path | None, verbose: bool) -> None:
    """Send all module loggers to stdout, and to `<log_dir>/crawl.log` when given."""

    level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / LOG_FILE_NAME, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Connection-pool chatter drowns the crawl log at DEBUG.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


SUMMARY_KEYS = (
    "pages_fetched",
    "fetched_ok",
    "fetched_error",
    "parse_errors",
    "redirects",
    "skipped_scheme",
    "skipped_build_error",
    "links_admitted",
    "avg_duration_ms",
)


def print_summary(result: dict[str, Any], *, print_stats_json: bool) -> None:
    stats = result.get("stats", {})
    frontier = stats.get("frontier", {})

    print(f"\nCrawled {result.get('seed')} into {result.get('paths', {}).get('storage_dir')}")
    for key in SUMMARY_KEYS:
        if key in stats:
            print(f"  {key}: {stats[key]}")
    if frontier:
        print(f"  known_urls: {frontier.get('known_urls')}")

    if print_stats_json:
        print(json.dumps(stats, indent=2, sort_keys=True))


def run_crawl(args: argparse.Namespace) -> int:
    try:
        config = build_config(args)
    except Exception as exc:
        setup_logging(None, verbose=args.verbose)
        logging.error("Failed to build config: %s", exc)
        return 2

    setup_logging(Path(config.storage_dir) / LOG_SUBDIR, verbose=args.verbose)
    logging.info(
        "Starting crawl: seed=%s, storage_dir=%s, delay=%.2fs",
        args.seed_url,
        config.storage_dir,
        config.request_delay_seconds,
    )

    try:
        pipeline = Pipeline(config)
        if args.resume:
            pipeline.resume_from_storage(args.seed_url)
        result = pipeline.run(args.seed_url)
    except KeyboardInterrupt:
        logging.error("Interrupted by user")
        return 130
    except CrawlerError as exc:
        logging.error("Crawl aborted: %s", exc)
        return 1
    except ValueError as exc:
        logging.error("Invalid crawl input: %s", exc)
        return 2
    except Exception:
        logging.exception("Crawl failed")
        return 1

    print_summary(result, print_stats_json=args.print_stats_json)
    return 0


def run_dns(args: argparse.Namespace) -> int:
    setup_logging(None, verbose=args.verbose)
    try:
        config = DNSScanConfig(
            resolv_conf=args.resolv_conf,
            nameserver=args.nameserver,
            port=args.port,
            timeout_seconds=args.timeout_seconds,
        )
        scanner = DNSScanner.from_config(config)
        words = load_wordlist(args.wordlist)
    except Exception as exc:
        logging.error("Failed to set up DNS scan: %s", exc)
        return 2

    logging.info("Scanning %d subdomain(s) of %s via %s", len(words), args.domain, scanner.nameserver)
    results = scanner.scan(tqdm(words, desc="Resolving subdomains", unit="name"), args.domain)
    print(json.dumps(results, indent=2, sort_keys=True))
    return 0


def run_ports(args: argparse.Namespace) -> int:
    setup_logging(None, verbose=args.verbose)
    try:
        ports = parse_port_spec(args.ports)
        config = PortScanConfig(
            connect_timeout_seconds=args.connect_timeout_seconds,
            read_timeout_seconds=args.read_timeout_seconds,
            send_probe=not args.no_probe,
        )
    except ValueError as exc:
        logging.error("Invalid port scan arguments: %s", exc)
        return 2

    def report(info: PortInfo) -> None:
        if info.open:
            logging.info("%s:%d open (%d bytes)", args.host, info.port, info.size)

    scanner = PortScanner(config, after_scan=report)
    results = scanner.scan_ports(args.host, tqdm(ports, desc="Scanning ports", unit="port"))
    print(json.dumps([info.to_json() for info in results if info.open], indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.command == "crawl":
        return run_crawl(args)
    if args.command == "dns":
        return run_dns(args)
    return run_ports(args)


if __name__ == "__main__":
    raise SystemExit(main())
