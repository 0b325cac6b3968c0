"""Subdomain enumeration against a stubbed DNS transport."""

import dns.exception
import dns.message
import dns.rdatatype
import dns.rrset
import pytest

from pagecrawler.config import DNSScanConfig
from pagecrawler.dns_scan import DNSScanner, load_wordlist


class StubTransport:
    """Stands in for dns.query.udp; answers from a name -> A-record table."""

    def __init__(self, records, failing=()):
        self.records = records
        self.failing = set(failing)
        self.calls = []

    def __call__(self, query, where, timeout=None, port=None):
        question = query.question[0]
        name = question.name.to_text()
        self.calls.append((name, question.rdtype, where, port, timeout))

        if name in self.failing:
            raise dns.exception.Timeout()

        response = dns.message.make_response(query)
        if name in self.records:
            response.answer.append(
                dns.rrset.from_text(question.name, 300, "IN", "A", self.records[name])
            )
        return response


@pytest.fixture
def transport():
    return StubTransport(
        {"www.example.com.": "93.184.216.34"},
        failing={"down.example.com."},
    )


def test_resolve_sends_any_query(transport):
    scanner = DNSScanner("10.0.0.53", port=5353, timeout_seconds=2.0, query_fn=transport)

    records = scanner.resolve("www.example.com")

    assert records == ["www.example.com. 300 IN A 93.184.216.34"]
    assert transport.calls == [("www.example.com.", dns.rdatatype.ANY, "10.0.0.53", 5353, 2.0)]


def test_scan_maps_failures_to_empty_lists(transport):
    scanner = DNSScanner("10.0.0.53", query_fn=transport)

    results = scanner.scan(["www", "mail", "down", "  "], "example.com.")

    assert results == {
        "www": ["www.example.com. 300 IN A 93.184.216.34"],
        "mail": [],
        "down": [],
    }


def test_resolve_propagates_failures(transport):
    scanner = DNSScanner("10.0.0.53", query_fn=transport)

    with pytest.raises(dns.exception.Timeout):
        scanner.resolve("down.example.com")


def test_from_config_prefers_explicit_nameserver(transport):
    config = DNSScanConfig(nameserver="1.1.1.1", port=53, timeout_seconds=3.0)

    scanner = DNSScanner.from_config(config, query_fn=transport)

    assert scanner.nameserver == "1.1.1.1"
    assert scanner.timeout_seconds == 3.0


def test_from_config_reads_resolv_conf(tmp_path, transport):
    resolv_conf = tmp_path / "resolv.conf"
    resolv_conf.write_text("# test\nnameserver 10.1.2.3\nnameserver 10.1.2.4\n", encoding="utf-8")

    scanner = DNSScanner.from_config(DNSScanConfig(resolv_conf=str(resolv_conf)), query_fn=transport)

    assert scanner.nameserver == "10.1.2.3"


def test_load_wordlist_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "words.txt"
    path.write_text("www\n\n# mail servers\nmail\n  ftp  \n", encoding="utf-8")

    assert load_wordlist(path) == ["www", "mail", "ftp"]
