from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

INVALID_URL_MESSAGE = "A valid URL is required"

Provider = Literal["api", "playwright", "cache"]


def normalize_url(url: str) -> str:
    """Prepend https:// if no protocol is present."""
    url = url.strip()
    # Schemes are case-insensitive
    if url and not url.lower().startswith(("http://", "https://", "//")):
        url = f"https://{url}"
    elif url.startswith("//"):
        url = f"https:{url}"
    return url


class ScrapeRequest(BaseModel):
    url: str = Field(default=None, validate_default=True)

    @field_validator("url", mode="before")
    @classmethod
    def _require_url(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError(INVALID_URL_MESSAGE)
        return normalize_url(v)


class ScrapeResult(BaseModel):
    """Response body of POST /api/scrape (camelCase on the wire)."""

    model_config = {"populate_by_name": True}

    content: str
    used_auth: bool = Field(default=False, alias="usedAuth")
    provider: Provider
    from_cache: bool | None = Field(default=None, alias="fromCache")


class CacheStatsResponse(BaseModel):
    size: int
    expired_count: int
    max_size: int
    entries: list[str]
