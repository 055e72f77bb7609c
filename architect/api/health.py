import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response

from architect.config import settings
from architect.core.metrics import get_metrics, get_metrics_content_type

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get(
    "/health",
    summary="Liveness check",
    description="Returns HTTP 200 while the application process is running.",
)
async def liveness():
    return {"status": "healthy"}


@router.get(
    "/health/ready",
    summary="Readiness check",
    description="Verifies that the scrape pipeline can serve requests: the hosted API "
    "credential in hosted mode, or the browser and cache in local mode. Returns HTTP 503 "
    "if a required check fails.",
)
async def readiness(request: Request):
    """Readiness probe. The browser is launched lazily, so 'idle' counts as ready."""
    checks: dict[str, str] = {}
    ok = True

    strategy = getattr(request.app.state, "scrape_strategy", None)
    if strategy is None:
        checks["scrape_strategy"] = "not initialized"
        ok = False
    elif strategy.name == "hosted":
        checks["mode"] = "hosted"
        if strategy.client.configured:
            checks["hosted_api"] = "ok"
        else:
            checks["hosted_api"] = "missing FIRECRAWL_API_KEY"
            ok = False
    else:
        checks["mode"] = "local"
        checks["browser"] = "running" if strategy.browser.is_running else "idle"
        checks["session"] = "present" if strategy.session.exists() else "absent"
        stats = strategy.cache.stats()
        checks["cache"] = f"{stats.size}/{stats.max_size} entries"

    return JSONResponse(
        content={"status": "ready" if ok else "not ready", "checks": checks},
        status_code=200 if ok else 503,
    )


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Application metrics in Prometheus exposition format. Returns HTTP 404 "
    "if metrics are disabled.",
)
async def metrics():
    if not settings.METRICS_ENABLED:
        return Response(status_code=404)
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
