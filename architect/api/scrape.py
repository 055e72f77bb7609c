import logging

from fastapi import APIRouter, Depends

from architect.api.deps import get_scrape_cache, get_scrape_strategy
from architect.core.cache import ScrapeCache
from architect.core.exceptions import ArchitectError, FetchError, ValidationError
from architect.core.metrics import scrape_requests_total
from architect.schemas.scrape import CacheStatsResponse, ScrapeRequest, ScrapeResult
from architect.services.scraper import ScrapeStrategy, scrape_url

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    response_model=ScrapeResult,
    response_model_exclude_none=True,
    summary="Scrape a single URL",
    description="Fetch a page and return its text. In hosted mode the hosted scraping API "
    "returns markdown; in local mode a headless browser loads the page (with a saved "
    "session when present) and results are cached on disk.",
)
async def scrape(
    request: ScrapeRequest,
    strategy: ScrapeStrategy = Depends(get_scrape_strategy),
):
    try:
        result = await scrape_url(request.url, strategy)
    except ArchitectError as e:
        logger.error(f"Scrape of {request.url} failed: {e.message}")
        scrape_requests_total.labels(provider=strategy.name, status="error").inc()
        raise
    except Exception as e:
        logger.exception(f"Unexpected error scraping {request.url}")
        scrape_requests_total.labels(provider=strategy.name, status="error").inc()
        raise FetchError(str(e) or "An error occurred while scraping the URL.") from e

    scrape_requests_total.labels(provider=result.provider, status="success").inc()
    return result


@router.get(
    "/cache",
    response_model=CacheStatsResponse,
    summary="Scrape cache statistics",
    description="Entry count, expired entries still on disk, capacity, and keys. "
    "Only available in local mode.",
)
async def cache_stats(cache: ScrapeCache | None = Depends(get_scrape_cache)):
    if cache is None:
        raise ValidationError("The scrape cache is only used in local mode.")
    stats = cache.stats()
    return CacheStatsResponse(
        size=stats.size,
        expired_count=stats.expired_count,
        max_size=stats.max_size,
        entries=stats.entries,
    )
