"""Tests for the scrape pipeline and strategy selection."""

import json

import httpx
import pytest
from playwright.async_api import Error as PlaywrightError

from architect.config import Settings
from architect.core.cache import cache_key
from architect.core.exceptions import ConfigurationError, FetchError, ValidationError
from architect.schemas.scrape import normalize_url
from architect.services.scraper import (
    BrowserScrapeStrategy,
    HostedScrapeStrategy,
    build_scrape_strategy,
    scrape_url,
)

from tests.conftest import FakeBrowserManager, FakePage, make_hosted_strategy


class TestNormalizeUrl:
    def test_adds_https(self):
        assert normalize_url("example.com") == "https://example.com"

    def test_keeps_existing_scheme(self):
        assert normalize_url("http://example.com") == "http://example.com"
        assert normalize_url("https://example.com/a") == "https://example.com/a"

    def test_uppercase_scheme_kept(self):
        assert normalize_url("HTTPS://example.com") == "HTTPS://example.com"
        assert normalize_url("Http://example.com/a") == "Http://example.com/a"

    def test_protocol_relative(self):
        assert normalize_url("//example.com") == "https://example.com"

    def test_strips_whitespace(self):
        assert normalize_url("  example.com ") == "https://example.com"


class TestLocalScrape:
    @pytest.mark.asyncio
    async def test_miss_fetches_and_caches(self, local_strategy, cache, page):
        result = await scrape_url("example.com", local_strategy)

        assert result.provider == "playwright"
        assert result.used_auth is False
        assert result.from_cache is None
        assert "Example Domain" in result.content
        assert page.goto_calls[0][0] == "https://example.com"
        assert cache.get(cache_key("https://example.com")) == result.content

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, local_strategy, page):
        first = await scrape_url("example.com", local_strategy)
        second = await scrape_url("https://example.com", local_strategy)

        assert second.provider == "cache"
        assert second.from_cache is True
        assert second.used_auth is False
        assert second.content == first.content
        assert len(page.goto_calls) == 1

    @pytest.mark.asyncio
    async def test_use_cache_false_bypasses_lookup(self, local_strategy, cache, page):
        cache.set(cache_key("https://example.com"), "stale")
        result = await scrape_url("example.com", local_strategy, use_cache=False)

        assert result.provider == "playwright"
        assert result.content != "stale"
        assert len(page.goto_calls) == 1
        # Fresh content replaces the stale entry
        assert cache.get(cache_key("https://example.com")) == result.content

    @pytest.mark.asyncio
    async def test_saved_session_is_used(self, local_strategy, browser, session):
        session.path.write_text(json.dumps({"cookies": [], "origins": []}))
        result = await scrape_url("example.com", local_strategy)

        assert result.used_auth is True
        assert browser.storage_states == [str(session.path)]

    @pytest.mark.asyncio
    async def test_invalid_session_file_is_ignored(self, local_strategy, browser, session):
        session.path.write_text("not json")
        result = await scrape_url("example.com", local_strategy)

        assert result.used_auth is False
        assert browser.storage_states == [None]

    @pytest.mark.asyncio
    async def test_empty_extraction_not_cached(self, cache, session):
        page = FakePage(html="<html><body></body></html>")
        strategy = BrowserScrapeStrategy(FakeBrowserManager(page), cache, session)
        result = await scrape_url("example.com", strategy)

        assert result.content == ""
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_browser_error_becomes_fetch_error(self, cache, session):
        page = FakePage(error=PlaywrightError("net::ERR_CONNECTION_REFUSED"))
        browser = FakeBrowserManager(page)
        strategy = BrowserScrapeStrategy(browser, cache, session)

        with pytest.raises(FetchError) as exc_info:
            await scrape_url("example.com", strategy)
        assert "ERR_CONNECTION_REFUSED" in exc_info.value.message
        assert browser.closed_sessions == 1
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_navigation_exhaustion_closes_session(self, cache, session):
        page = FakePage(timeouts={"networkidle", "domcontentloaded", "load"})
        browser = FakeBrowserManager(page)
        strategy = BrowserScrapeStrategy(browser, cache, session, settle_delay_ms=0)

        with pytest.raises(FetchError):
            await scrape_url("example.com", strategy)
        assert browser.closed_sessions == 1

    @pytest.mark.asyncio
    async def test_close_flushes_and_shuts_down(self, local_strategy, browser, cache):
        await local_strategy.close()
        assert browser.shutdown_called is True
        assert cache.path.exists()


class TestValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", "   ", None, 42])
    async def test_invalid_url_rejected(self, local_strategy, page, url):
        with pytest.raises(ValidationError) as exc_info:
            await scrape_url(url, local_strategy)
        assert exc_info.value.message == "A valid URL is required"
        assert page.goto_calls == []


class TestHostedScrape:
    @pytest.mark.asyncio
    async def test_returns_markdown_as_api_provider(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": True, "data": {"markdown": "# Hi"}})

        strategy = make_hosted_strategy("fc-key", handler)
        result = await scrape_url("example.com", strategy)

        assert result.content == "# Hi"
        assert result.provider == "api"
        assert result.used_auth is False
        await strategy.close()

    @pytest.mark.asyncio
    async def test_missing_key_makes_no_request(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"success": True, "data": {"markdown": "x"}})

        strategy = make_hosted_strategy("", handler)
        with pytest.raises(ConfigurationError) as exc_info:
            await scrape_url("example.com", strategy)
        assert "FIRECRAWL_API_KEY" in exc_info.value.message
        assert calls == []


class TestBuildStrategy:
    def test_hosted_mode(self):
        settings = Settings(DEPLOYMENT_MODE="hosted", FIRECRAWL_API_KEY="k", _env_file=None)
        strategy = build_scrape_strategy(settings)
        assert isinstance(strategy, HostedScrapeStrategy)
        assert strategy.client.configured is True

    def test_local_mode(self, tmp_path):
        settings = Settings(
            DEPLOYMENT_MODE="local",
            CACHE_FILE=str(tmp_path / "c.json"),
            AUTH_STATE_FILE=str(tmp_path / "auth.json"),
            NAVIGATION_WAIT_STRATEGIES=["load:5000"],
            SETTLE_DELAY_MS=0,
            _env_file=None,
        )
        strategy = build_scrape_strategy(settings)
        assert isinstance(strategy, BrowserScrapeStrategy)
        assert strategy.wait_strategies[0].wait_until == "load"
        assert strategy.settle_delay_ms == 0
        assert strategy.cache.path == tmp_path / "c.json"
        assert strategy.browser.is_running is False

    def test_local_mode_uses_given_cache(self, cache):
        settings = Settings(DEPLOYMENT_MODE="local", _env_file=None)
        strategy = build_scrape_strategy(settings, cache=cache)
        assert strategy.cache is cache
