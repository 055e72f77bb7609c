import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Route

logger = logging.getLogger(__name__)

# Analytics and ad networks keep long-polling connections open, which would
# stall "networkidle" until its timeout. Requests to these hosts are aborted.
TRACKER_DOMAINS = frozenset(
    {
        "doubleclick.net",
        "googlesyndication.com",
        "googletagmanager.com",
        "google-analytics.com",
        "adservice.google.com",
        "amazon-adsystem.com",
        "adnxs.com",
        "criteo.com",
        "outbrain.com",
        "taboola.com",
        "scorecardresearch.com",
        "hotjar.com",
        "fullstory.com",
        "segment.io",
        "newrelic.com",
        "nr-data.net",
    }
)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)

_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-extensions",
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-gpu",
]


def _is_tracker(url: str) -> bool:
    try:
        host = url.split("//", 1)[1].split("/", 1)[0].split(":")[0].lower()
    except IndexError:
        return False
    return any(host == d or host.endswith(f".{d}") for d in TRACKER_DOMAINS)


async def _block_trackers(route: Route) -> None:
    if _is_tracker(route.request.url):
        await route.abort()
    else:
        await route.continue_()


class BrowserManager:
    """Owns one Chromium process and hands out isolated sessions.

    The browser is launched on first use. Every ``session()`` gets its own
    context and page, which are closed when the block exits, whether it
    exits normally, with an error, or by cancellation.
    """

    def __init__(self, headless: bool = True, block_trackers: bool = True):
        self.headless = headless
        self.block_trackers = block_trackers
        self._playwright = None
        self._browser: Browser | None = None
        self._lock: asyncio.Lock | None = None

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def initialize(self) -> Browser:
        if self.is_running:
            return self._browser

        async with self._get_lock():
            if self.is_running:
                return self._browser

            if self._browser is not None:
                logger.warning("Chromium disconnected, relaunching")
            if self._playwright is None:
                self._playwright = await async_playwright().start()

            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=_CHROMIUM_ARGS,
            )
            logger.info(f"Chromium launched (headless={self.headless})")
            return self._browser

    async def shutdown(self) -> None:
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"Browser close failed: {e}")
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("Browser manager shut down")

    @asynccontextmanager
    async def session(self, storage_state: str | None = None):
        """Yield a fresh page in its own context.

        Args:
            storage_state: Path to a saved Playwright storage state to load
                into the context (read-only).
        """
        browser = await self.initialize()

        context_kwargs = dict(
            user_agent=USER_AGENT,
            viewport={"width": 1366, "height": 900},
            locale="en-US",
            ignore_https_errors=True,
        )
        if storage_state:
            context_kwargs["storage_state"] = storage_state

        context: BrowserContext = await browser.new_context(**context_kwargs)
        try:
            if self.block_trackers:
                await context.route("**/*", _block_trackers)
            page: Page = await context.new_page()
            yield page
        finally:
            # Shielded so a cancelled request still releases its context
            try:
                await asyncio.shield(context.close())
            except (asyncio.CancelledError, Exception) as e:
                logger.debug(f"Context close interrupted: {e!r}")

    async def capture_session(self, path: str | Path, start_url: str | None, wait_for_user) -> None:
        """Open a visible browser, let the user sign in, then save the storage state.

        Args:
            path: Where to write the storage state JSON.
            start_url: Optional page to open first.
            wait_for_user: Coroutine function that returns once the user is done.
        """
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=False)
            try:
                context = await browser.new_context()
                page = await context.new_page()
                if start_url:
                    await page.goto(start_url, wait_until="domcontentloaded")
                await wait_for_user()
                Path(path).parent.mkdir(parents=True, exist_ok=True)
                await context.storage_state(path=str(path))
                logger.info(f"Session saved to {path}")
            finally:
                await browser.close()
