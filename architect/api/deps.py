from fastapi import Request

from architect.core.cache import ScrapeCache
from architect.services.scraper import ScrapeStrategy


def get_scrape_strategy(request: Request) -> ScrapeStrategy:
    """Strategy built by the application lifespan."""
    return request.app.state.scrape_strategy


def get_scrape_cache(request: Request) -> ScrapeCache | None:
    """The scrape cache, or None in hosted mode."""
    return getattr(request.app.state, "scrape_cache", None)
