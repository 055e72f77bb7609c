import logging
from typing import List, Literal

from pydantic_settings import BaseSettings

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Architect Prime"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # "local" drives a Playwright browser; "hosted" delegates to the scraping API
    DEPLOYMENT_MODE: Literal["local", "hosted"] = "local"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Hosted scraping API (Firecrawl-compatible)
    FIRECRAWL_API_KEY: str = ""
    FIRECRAWL_API_URL: str = "https://api.firecrawl.dev/v1"
    HOSTED_SCRAPE_TIMEOUT: float = 60.0  # seconds

    # Local browser
    BROWSER_HEADLESS: bool = True
    BLOCK_TRACKERS: bool = True
    AUTH_STATE_FILE: str = ".auth.json"
    # Tried in order; each entry is "<wait_until>:<timeout_ms>"
    NAVIGATION_WAIT_STRATEGIES: List[str] = [
        "networkidle:30000",
        "domcontentloaded:20000",
        "load:15000",
    ]
    SETTLE_DELAY_MS: int = 2000

    # Cache
    CACHE_FILE: str = ".scrape-cache.json"
    CACHE_TTL_SECONDS: float = 600
    CACHE_MAX_ENTRIES: int = 100

    # Chat
    OPENAI_API_KEY: str = ""
    CHAT_MODEL: str = "gpt-4o"
    CHAT_TEMPERATURE: float = 0.85
    CHAT_MAX_TOKENS: int = 3000
    CHAT_TIMEOUT: float = 120.0  # seconds

    # Sentry
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2
    SENTRY_ENVIRONMENT: str = "development"

    # Logging
    LOG_FORMAT: str = "text"  # "json" for production, "text" for development
    LOG_LEVEL: str = "INFO"

    # Metrics
    METRICS_ENABLED: bool = True

    def model_post_init(self, __context) -> None:
        if self.DEPLOYMENT_MODE == "hosted" and not self.FIRECRAWL_API_KEY:
            _logger.warning(
                "DEPLOYMENT_MODE=hosted but FIRECRAWL_API_KEY is not set; "
                "scrape requests will fail until it is configured."
            )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
