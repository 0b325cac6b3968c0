"""Command-line entrypoint."""

import json
import logging
import socket

import pytest
import requests

from pagecrawler import cli
from pagecrawler import pipeline as pipeline_module
from pagecrawler.fetcher import Fetcher


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Drop the handlers setup_logging installs on the root logger."""

    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_build_config_merges_file_and_flags(tmp_path):
    config_path = tmp_path / "crawl.yaml"
    config_path.write_text(
        "request_delay_seconds: 2.5\nheaders:\n  Accept: '*/*'\n",
        encoding="utf-8",
    )
    args = cli.parse_args(
        [
            "crawl",
            "http://a.com",
            "--config",
            str(config_path),
            "--storage_dir",
            str(tmp_path / "out"),
            "--header",
            "X-Test: yes",
            "--allowed_scheme",
            "https",
            "--fetch_error_policy",
            "abort",
            "--crawler_id",
            "4",
        ]
    )

    config = cli.build_config(args)

    assert config.request_delay_seconds == 2.5
    assert config.headers == {"Accept": "*/*", "X-Test": "yes"}
    assert config.allowed_schemes == ["https"]
    assert config.storage_dir == str(tmp_path / "out")
    assert config.fetch_error_policy == "abort"
    assert config.crawler_id == 4


def test_bad_header_flag_is_config_error(tmp_path):
    code = cli.main(["crawl", "http://a.com", "--storage_dir", str(tmp_path), "--header", "nocolon"])

    assert code == 2


def test_negative_delay_is_config_error(tmp_path):
    code = cli.main(
        ["crawl", "http://a.com", "--storage_dir", str(tmp_path), "--request_delay_seconds", "-1"]
    )

    assert code == 2


def test_crawl_command_runs_pipeline(tmp_path, monkeypatch, session, capsys):
    session.add("http://a.com/", '<a href="/b">b</a>', headers={"Content-Type": "text/html"})
    monkeypatch.setattr(
        pipeline_module,
        "Fetcher",
        lambda config: Fetcher(config, session=session),
    )
    storage_dir = tmp_path / "out"

    code = cli.main(
        [
            "crawl",
            "http://a.com",
            "--storage_dir",
            str(storage_dir),
            "--request_delay_seconds",
            "0",
            "--print_stats_json",
        ]
    )

    assert code == 0
    assert session.sent_urls == ["http://a.com/", "http://a.com/b"]
    assert len(list(storage_dir.glob("*.httpi"))) == 2
    assert (storage_dir / "logs" / "crawl.log").exists()
    out = capsys.readouterr().out
    assert f"Crawled http://a.com/ into {storage_dir}" in out
    assert "pages_fetched: 2" in out


def test_crawl_abort_exit_code(tmp_path, monkeypatch, session):
    session.fail("http://a.com/", requests.ConnectionError("down"))
    monkeypatch.setattr(
        pipeline_module,
        "Fetcher",
        lambda config: Fetcher(config, session=session),
    )

    code = cli.main(
        [
            "crawl",
            "http://a.com",
            "--storage_dir",
            str(tmp_path),
            "--request_delay_seconds",
            "0",
            "--fetch_error_policy",
            "abort",
        ]
    )

    assert code == 1


def test_dns_command_prints_results(tmp_path, monkeypatch, capsys):
    wordlist = tmp_path / "words.txt"
    wordlist.write_text("www\nmail\n", encoding="utf-8")
    monkeypatch.setattr(
        cli.DNSScanner,
        "scan",
        lambda self, words, domain: {word: [] for word in words},
    )

    code = cli.main(["dns", "example.com", "--wordlist", str(wordlist), "--nameserver", "10.0.0.1"])

    assert code == 0
    out = capsys.readouterr().out
    assert json.loads(out[out.index("{"):]) == {"www": [], "mail": []}


def test_dns_command_missing_wordlist(tmp_path):
    code = cli.main(
        ["dns", "example.com", "--wordlist", str(tmp_path / "none.txt"), "--nameserver", "10.0.0.1"]
    )

    assert code == 2


def test_ports_command(capsys):
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    code = cli.main(["ports", "127.0.0.1", "--ports", str(port), "--connect_timeout_seconds", "1"])

    assert code == 0
    out = capsys.readouterr().out
    assert out.strip().splitlines()[-1] == "[]"


def test_ports_command_bad_spec():
    assert cli.main(["ports", "127.0.0.1", "--ports", "x-y"]) == 2


def test_invalid_seed_is_input_error(tmp_path):
    assert cli.main(["crawl", "not a url", "--storage_dir", str(tmp_path)]) == 2
