import pytest

from config.config import Config
from tools.web.factory import create_crawler, create_search_provider
from tools.web.serper_client import SerperSearchProvider


def test_defaults(monkeypatch):
    for name in ("MAX_STEPS", "SEARCH_RESULTS_COUNT", "CACHE_TTL_SECONDS", "RATE_LIMIT_WINDOW_MS",
                 "RATE_LIMIT_MAX_REQUESTS", "RATE_LIMIT_MAX_RETRIES", "CRAWL_MAX_CONCURRENCY"):
        monkeypatch.delenv(name, raising=False)

    config = Config()

    assert config.MAX_STEPS == 10
    assert config.SEARCH_RESULTS_COUNT == 3
    assert config.CACHE_TTL_SECONDS == 6 * 60 * 60
    assert config.RATE_LIMIT_MAX_REQUESTS == 1
    assert config.RATE_LIMIT_WINDOW_MS == 20_000
    assert config.RATE_LIMIT_MAX_RETRIES == 3
    assert config.CRAWL_MAX_CONCURRENCY == 5


def test_invalid_integer_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("MAX_STEPS", "lots")
    assert Config().MAX_STEPS == 10


def test_validate_requires_search_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SEARCH_PROVIDER", "serper")
    monkeypatch.delenv("SERPER_API_KEY", raising=False)
    assert Config().validate() is False

    monkeypatch.setenv("SERPER_API_KEY", "serper-key")
    assert Config().validate() is True


def test_factory_builds_configured_provider(monkeypatch):
    monkeypatch.setenv("SEARCH_PROVIDER", "serper")
    monkeypatch.setenv("SERPER_API_KEY", "serper-key")
    monkeypatch.setenv("CRAWL_TIMEOUT_S", "2.5")
    config = Config()

    assert isinstance(create_search_provider(config), SerperSearchProvider)
    assert create_crawler(config).timeout_s == 2.5


def test_factory_rejects_unknown_provider(monkeypatch):
    monkeypatch.setenv("SEARCH_PROVIDER", "bing")
    with pytest.raises(ValueError):
        create_search_provider(Config())
