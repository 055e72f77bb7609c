import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from architect.api.health import router as health_router
from architect.api.router import api_router
from architect.config import settings
from architect.core.cache import ScrapeCache
from architect.core.exceptions import ArchitectError
from architect.core.logging_config import configure_logging
from architect.middleware.request_id import RequestIDMiddleware
from architect.services.scraper import build_scrape_strategy

# Configure logging before any logger is used
configure_logging(log_format=settings.LOG_FORMAT, log_level=settings.LOG_LEVEL)

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        environment=settings.SENTRY_ENVIRONMENT,
        release=f"architect@{settings.APP_VERSION}",
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the cache and scrape strategy at startup; flush and close them at shutdown."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} ({settings.DEPLOYMENT_MODE} mode)")

    cache = None
    if settings.DEPLOYMENT_MODE == "local":
        cache = ScrapeCache(
            settings.CACHE_FILE,
            ttl=settings.CACHE_TTL_SECONDS,
            max_entries=settings.CACHE_MAX_ENTRIES,
        )
    app.state.scrape_cache = cache
    app.state.scrape_strategy = build_scrape_strategy(settings, cache=cache)

    yield

    logger.info("Shutting down...")
    await app.state.scrape_strategy.close()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    description="Architect Prime backend: chat completion passthrough and a cached, "
    "multi-strategy page scraper that feeds page text into the conversation.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.exception_handler(ArchitectError)
async def architect_error_handler(request: Request, exc: ArchitectError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        ctx_error = (first.get("ctx") or {}).get("error")
        if ctx_error is not None:
            message = str(ctx_error)
        else:
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", message)
    logger.info(f"Rejected {request.method} {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


app.add_middleware(RequestIDMiddleware)

app.add_middleware(GZipMiddleware, minimum_size=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)

# Health & metrics routes (no /api prefix)
app.include_router(health_router)


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "mode": settings.DEPLOYMENT_MODE,
        "docs": "/docs",
        "status": "running",
    }
