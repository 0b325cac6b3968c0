"""Subdomain enumeration by querying a configured DNS server."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

import dns.exception
import dns.message
import dns.name
import dns.query
import dns.rdatatype
import dns.resolver

from .config import DNSScanConfig
from .constants import DEFAULT_DNS_PORT, DEFAULT_DNS_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)

# Same call shape as dns.query.udp(query, where, timeout=..., port=...).
QueryFn = Callable[..., dns.message.Message]


def load_wordlist(path: str | Path) -> list[str]:
    """Read subdomain labels, one per line; blank lines and `#` comments skipped."""

    words: list[str] = []
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        word = line.strip()
        if word and not word.startswith("#"):
            words.append(word)
    return words


class DNSScanner:
    """Resolve names against one nameserver and return answer records as text."""

    def __init__(
        self,
        nameserver: str,
        *,
        port: int = DEFAULT_DNS_PORT,
        timeout_seconds: float = DEFAULT_DNS_TIMEOUT_SECONDS,
        query_fn: QueryFn | None = None,
    ) -> None:
        self.nameserver = nameserver
        self.port = port
        self.timeout_seconds = timeout_seconds
        self._query = query_fn or dns.query.udp

    @classmethod
    def from_config(cls, config: DNSScanConfig, *, query_fn: QueryFn | None = None) -> "DNSScanner":
        """Use `config.nameserver`, or the first server listed in `config.resolv_conf`."""

        nameserver = config.nameserver
        if not nameserver:
            resolver = dns.resolver.Resolver(filename=config.resolv_conf, configure=True)
            if not resolver.nameservers:
                raise ValueError(f"No nameserver configured in {config.resolv_conf}")
            # dnspython >= 2.4 may hand back Nameserver objects instead of strings.
            first = resolver.nameservers[0]
            nameserver = getattr(first, "address", None) or str(first)

        return cls(
            nameserver,
            port=config.port,
            timeout_seconds=config.timeout_seconds,
            query_fn=query_fn,
        )

    def resolve(self, name: str) -> list[str]:
        """ANY query with recursion desired; one text line per answer record.

        Raises dns.exception.DNSException or OSError on failure.
        """

        query = dns.message.make_query(dns.name.from_text(name), dns.rdatatype.ANY)
        response = self._query(
            query,
            self.nameserver,
            timeout=self.timeout_seconds,
            port=self.port,
        )

        records: list[str] = []
        for rrset in response.answer:
            records.extend(line for line in rrset.to_text().splitlines() if line)
        return records

    def scan(self, subdomains: Iterable[str], domain: str) -> dict[str, list[str]]:
        """Resolve `<sub>.<domain>` for every label.

        Failed lookups are logged and reported as an empty record list.
        """

        results: dict[str, list[str]] = {}
        for subdomain in subdomains:
            label = subdomain.strip()
            if not label:
                continue
            name = f"{label}.{domain.strip('.')}"
            try:
                results[label] = self.resolve(name)
            except (dns.exception.DNSException, OSError) as exc:
                logger.debug("Lookup of %s failed: %s", name, exc)
                results[label] = []
        return results


__all__ = ["DNSScanner", "load_wordlist"]
