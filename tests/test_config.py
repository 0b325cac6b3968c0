"""Config validation and JSON/YAML persistence."""

import pytest

from pagecrawler.config import (
    CrawlConfig,
    DNSScanConfig,
    PortScanConfig,
    load_config,
    save_config,
)
from pagecrawler.constants import DEFAULT_USER_AGENT


@pytest.mark.parametrize("name", ["crawl.json", "crawl.yaml", "crawl.yml"])
def test_save_and_load_round_trip(tmp_path, name):
    config = CrawlConfig(
        headers={"Accept": "*/*", "X-Trace": "1"},
        include_hidden_links=True,
        request_delay_seconds=0.5,
        allowed_schemes=["https"],
        storage_dir="out",
        text_url_limit=5,
        fetch_error_policy="abort",
        crawler_id=3,
    )

    save_config(config, tmp_path / name)

    assert load_config(tmp_path / name) == config


def test_missing_keys_fall_back_to_defaults(tmp_path):
    path = tmp_path / "crawl.yaml"
    path.write_text("storage_dir: pages\n", encoding="utf-8")

    config = load_config(path)

    assert config.storage_dir == "pages"
    assert config.method == "GET"
    assert config.fetch_error_policy == "continue"


def test_empty_yaml_is_default_config(tmp_path):
    path = tmp_path / "crawl.yml"
    path.write_text("", encoding="utf-8")

    assert load_config(path) == CrawlConfig()


def test_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError):
        load_config(tmp_path / "crawl.toml")
    with pytest.raises(ValueError):
        save_config(CrawlConfig(), tmp_path / "crawl.ini")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"method": "  "},
        {"request_delay_seconds": -1},
        {"timeout_seconds": 0},
        {"allowed_schemes": []},
        {"fetch_error_policy": "retry"},
        {"validate_html": True},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        CrawlConfig(**kwargs)


def test_from_dict_type_errors():
    with pytest.raises(ValueError):
        CrawlConfig.from_dict({"include_hidden_links": "yes"})
    with pytest.raises(ValueError):
        CrawlConfig.from_dict({"timeout_seconds": "soon"})
    with pytest.raises(ValueError):
        CrawlConfig.from_dict({"headers": ["Accept"]})


def test_normalisation():
    config = CrawlConfig(method="post", allowed_schemes=[" HTTP ", ""], fetch_error_policy="ABORT")

    assert config.method == "POST"
    assert config.allowed_schemes == ["http"]
    assert config.fetch_error_policy == "abort"


def test_request_headers_user_agent():
    assert CrawlConfig().request_headers["User-Agent"] == DEFAULT_USER_AGENT
    assert CrawlConfig(user_agent="bot/1.0").request_headers["User-Agent"] == "bot/1.0"

    explicit = CrawlConfig(headers={"User-Agent": "custom"}, user_agent="bot/1.0")
    assert explicit.request_headers["User-Agent"] == "custom"


def test_scanner_configs_validate():
    with pytest.raises(ValueError):
        PortScanConfig(connect_timeout_seconds=0)
    with pytest.raises(ValueError):
        DNSScanConfig(port=70000)
    assert DNSScanConfig().port == 53
