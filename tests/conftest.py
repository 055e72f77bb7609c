"""Shared fixtures: a tmp-path cache, a scripted fake page, and an API client."""

from contextlib import asynccontextmanager

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from architect.core.cache import ScrapeCache
from architect.main import app
from architect.services.hosted import HostedScrapeClient
from architect.services.scraper import BrowserScrapeStrategy, HostedScrapeStrategy
from architect.services.session import SessionArtifact

SAMPLE_HTML = """
<html>
<head><title>Example Domain</title><script>var tracking = 1;</script></head>
<body>
<nav><a href="/home">Home</a></nav>
<h1>Example Domain</h1>
<p>This domain is for use in illustrative examples.</p>
<div class="advertisement-slot">Buy now!</div>
<ul><li>First point</li><li>Second point</li></ul>
<p><a href="https://www.iana.org/domains/example">More information</a></p>
<footer>Copyright</footer>
</body>
</html>
"""


class FakePage:
    """Stands in for a Playwright Page.

    ``timeouts`` lists wait conditions whose navigation should time out;
    ``error`` is raised from every ``goto`` instead.
    """

    def __init__(self, html: str = SAMPLE_HTML, timeouts=(), error: Exception | None = None):
        self.html = html
        self.timeouts = set(timeouts)
        self.error = error
        self.goto_calls: list[tuple[str, str, int]] = []
        self.waits: list[int] = []

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if self.error is not None:
            raise self.error
        if wait_until in self.timeouts:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        return None

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def content(self):
        return self.html


class FakeBrowserManager:
    """Stands in for BrowserManager; records sessions opened and closed."""

    def __init__(self, page: FakePage):
        self.page = page
        self.storage_states: list[str | None] = []
        self.closed_sessions = 0
        self.shutdown_called = False
        self.is_running = False

    @asynccontextmanager
    async def session(self, storage_state=None):
        self.storage_states.append(storage_state)
        try:
            yield self.page
        finally:
            self.closed_sessions += 1

    async def shutdown(self):
        self.shutdown_called = True


@pytest.fixture
def cache(tmp_path) -> ScrapeCache:
    return ScrapeCache(tmp_path / ".scrape-cache.json")


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def browser(page) -> FakeBrowserManager:
    return FakeBrowserManager(page)


@pytest.fixture
def session(tmp_path) -> SessionArtifact:
    return SessionArtifact(tmp_path / ".auth.json")


@pytest.fixture
def local_strategy(browser, cache, session) -> BrowserScrapeStrategy:
    return BrowserScrapeStrategy(browser=browser, cache=cache, session=session)


def make_hosted_strategy(api_key: str, handler) -> HostedScrapeStrategy:
    client = HostedScrapeClient(
        api_key=api_key,
        base_url="https://hosted.test/v1",
        transport=httpx.MockTransport(handler),
    )
    return HostedScrapeStrategy(client)


@asynccontextmanager
async def api_client(strategy, cache=None):
    """AsyncClient against the app with the given strategy installed."""
    app.state.scrape_strategy = strategy
    app.state.scrape_cache = cache
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
    finally:
        del app.state.scrape_strategy
        del app.state.scrape_cache


@pytest_asyncio.fixture
async def client(local_strategy, cache):
    async with api_client(local_strategy, cache) as ac:
        yield ac
