from prometheus_client import (
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

# ---------------------------------------------------------------------------
# Scrape pipeline
# ---------------------------------------------------------------------------
scrape_requests_total = Counter(
    "scrape_requests_total",
    "Total number of scrape requests",
    ["provider", "status"],
)
scrape_duration_seconds = Histogram(
    "scrape_duration_seconds",
    "End-to-end duration of scrape requests in seconds",
    ["provider"],
    buckets=[0.05, 0.25, 0.5, 1, 2.5, 5, 10, 20, 30, 60, 90],
)
navigation_attempts_total = Counter(
    "navigation_attempts_total",
    "Browser navigation attempts by wait condition and outcome",
    ["wait_until", "outcome"],
)

# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------
cache_lookups_total = Counter(
    "scrape_cache_lookups_total",
    "Scrape cache lookups by result",
    ["result"],  # hit, miss, expired
)
cache_evictions_total = Counter(
    "scrape_cache_evictions_total",
    "Scrape cache entries removed by reason",
    ["reason"],  # expired, capacity
)

# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------
chat_requests_total = Counter(
    "chat_requests_total",
    "Total chat completion requests",
    ["status"],
)


def get_metrics() -> bytes:
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
