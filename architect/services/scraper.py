"""Scrape pipeline.

Two interchangeable strategies implement ``scrape(url) -> ScrapeResult``:

- ``HostedScrapeStrategy`` delegates the whole fetch to the hosted API.
- ``BrowserScrapeStrategy`` consults the file cache, and on a miss drives a
  local Chromium session through the navigation fallback chain, extracts
  the page text, and caches it.

The strategy is picked once at startup from ``DEPLOYMENT_MODE``;
``scrape_url`` is the request-level entry point shared by the API and CLI.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from playwright.async_api import Error as PlaywrightError

from architect.config import Settings
from architect.core.cache import ScrapeCache, cache_key
from architect.core.exceptions import ArchitectError, FetchError, ValidationError
from architect.core.metrics import scrape_duration_seconds
from architect.schemas.scrape import INVALID_URL_MESSAGE, ScrapeResult, normalize_url
from architect.services.browser import BrowserManager
from architect.services.content import extract_page_text
from architect.services.hosted import HostedScrapeClient
from architect.services.navigation import (
    DEFAULT_SETTLE_DELAY_MS,
    DEFAULT_WAIT_STRATEGIES,
    WaitStrategy,
    navigate_with_fallback,
    parse_wait_strategies,
)
from architect.services.session import SessionArtifact

logger = logging.getLogger(__name__)

# Thread pool for CPU-bound content extraction
_extraction_executor = ThreadPoolExecutor(max_workers=4)


class ScrapeStrategy(Protocol):
    name: str

    async def scrape(self, url: str, use_cache: bool = True) -> ScrapeResult: ...

    async def close(self) -> None: ...


class HostedScrapeStrategy:
    name = "hosted"

    def __init__(self, client: HostedScrapeClient):
        self.client = client

    async def scrape(self, url: str, use_cache: bool = True) -> ScrapeResult:
        logger.info(f"Scraping {url} via hosted API")
        content = await self.client.scrape_markdown(url)
        return ScrapeResult(content=content, used_auth=False, provider="api")

    async def close(self) -> None:
        await self.client.aclose()


class BrowserScrapeStrategy:
    name = "local"

    def __init__(
        self,
        browser: BrowserManager,
        cache: ScrapeCache,
        session: SessionArtifact,
        wait_strategies: tuple[WaitStrategy, ...] = DEFAULT_WAIT_STRATEGIES,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
    ):
        self.browser = browser
        self.cache = cache
        self.session = session
        self.wait_strategies = wait_strategies
        self.settle_delay_ms = settle_delay_ms

    async def scrape(self, url: str, use_cache: bool = True) -> ScrapeResult:
        key = cache_key(url)
        if use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info(f"Cache hit for {url}")
                return ScrapeResult(
                    content=cached, used_auth=False, provider="cache", from_cache=True
                )
            logger.info(f"Cache miss for {url}, fetching with browser")

        storage_state = self.session.storage_state()
        used_auth = storage_state is not None
        if used_auth:
            logger.info(f"Using saved session from {self.session.path}")

        html = await self._fetch_html(url, storage_state)

        loop = asyncio.get_running_loop()
        content = await loop.run_in_executor(_extraction_executor, extract_page_text, html)

        if content:
            self.cache.set(key, content)
        else:
            logger.warning(f"No text extracted from {url}; result not cached")

        return ScrapeResult(content=content, used_auth=used_auth, provider="playwright")

    async def _fetch_html(self, url: str, storage_state: str | None) -> str:
        try:
            async with self.browser.session(storage_state=storage_state) as page:
                await navigate_with_fallback(
                    page, url, self.wait_strategies, self.settle_delay_ms
                )
                return await page.content()
        except ArchitectError:
            raise
        except PlaywrightError as e:
            logger.warning(f"Browser fetch of {url} failed: {e}")
            raise FetchError(f"Failed to load {url}: {e.message}") from e

    async def close(self) -> None:
        self.cache.flush()
        await self.browser.shutdown()


def build_scrape_strategy(settings: Settings, cache: ScrapeCache | None = None) -> ScrapeStrategy:
    """Pick the scrape strategy for this process from settings."""
    if settings.DEPLOYMENT_MODE == "hosted":
        logger.info("Scrape strategy: hosted API")
        client = HostedScrapeClient(
            api_key=settings.FIRECRAWL_API_KEY,
            base_url=settings.FIRECRAWL_API_URL,
            timeout=settings.HOSTED_SCRAPE_TIMEOUT,
        )
        return HostedScrapeStrategy(client)

    logger.info("Scrape strategy: local browser")
    if cache is None:
        cache = ScrapeCache(
            settings.CACHE_FILE,
            ttl=settings.CACHE_TTL_SECONDS,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
    return BrowserScrapeStrategy(
        browser=BrowserManager(
            headless=settings.BROWSER_HEADLESS,
            block_trackers=settings.BLOCK_TRACKERS,
        ),
        cache=cache,
        session=SessionArtifact(settings.AUTH_STATE_FILE),
        wait_strategies=parse_wait_strategies(settings.NAVIGATION_WAIT_STRATEGIES),
        settle_delay_ms=settings.SETTLE_DELAY_MS,
    )


async def scrape_url(url, strategy: ScrapeStrategy, use_cache: bool = True) -> ScrapeResult:
    """Validate and normalize ``url``, then scrape it with ``strategy``.

    Raises:
        ValidationError: ``url`` is not a non-empty string.
        ConfigurationError: hosted mode without an API key.
        FetchError: the page could not be fetched.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValidationError(INVALID_URL_MESSAGE)

    url = normalize_url(url)
    start_time = time.time()
    result = await strategy.scrape(url, use_cache=use_cache)
    scrape_duration_seconds.labels(provider=result.provider).observe(time.time() - start_time)
    logger.info(f"Scraped {url} via {result.provider} ({len(result.content)} chars)")
    return result
