"""Client for the hosted scraping API (Firecrawl v1 ``/scrape``)."""

import asyncio
import logging

import httpx

from architect.core.exceptions import ConfigurationError, FetchError

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "FIRECRAWL_API_KEY is not set in hosted mode."


class HostedScrapeClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.firecrawl.dev/v1",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._loop_id: int | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self) -> httpx.AsyncClient:
        # httpx clients are bound to the loop they were first used on
        loop_id = id(asyncio.get_running_loop())
        if self._client is None or self._client.is_closed or self._loop_id != loop_id:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
            self._loop_id = loop_id
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def scrape_markdown(self, url: str) -> str:
        """Scrape ``url`` remotely and return its markdown.

        Raises:
            ConfigurationError: no API key; no request is made.
            FetchError: transport failure, timeout, or the API reported failure.
        """
        if not self.configured:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        client = self._get_client()
        try:
            resp = await client.post(
                "/scrape",
                json={"url": url, "formats": ["markdown"]},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.TimeoutException as e:
            raise FetchError(f"Hosted scrape failed: timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise FetchError(f"Hosted scrape failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if resp.status_code >= 400 or not body.get("success"):
            reason = body.get("error") or f"HTTP {resp.status_code}"
            logger.warning(f"Hosted scrape of {url} failed: {reason}")
            raise FetchError(f"Hosted scrape failed: {reason}")

        data = body.get("data") or {}
        markdown = data.get("markdown") if isinstance(data, dict) else None
        return markdown or body.get("markdown") or ""
