"""
ProspectIntel - SEC filing intelligence for sales prospecting

Main FastAPI application entry point.
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
import structlog
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.cache import create_redis
from app.core.config import get_settings
from app.core.database import create_engine, create_session_maker, create_tables
from app.services.sec_cache import DatabaseSecCacheStore, RedisSecCacheStore
from app.services.sec_client import SECEdgarClient

settings = get_settings()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Open the EDGAR client and cache store for the app's lifetime."""
    logger.info("Starting ProspectIntel API", version=settings.api_version, cache_backend=settings.cache_backend)

    app.state.edgar = SECEdgarClient()
    engine = None
    redis_client = None

    if settings.cache_backend == "redis":
        if not settings.has_redis:
            raise RuntimeError("cache_backend=redis requires REDIS_URL")
        redis_client = create_redis(settings.redis_url)
        app.state.cache_store = RedisSecCacheStore(redis_client, settings.cache_ttl_days)
    else:
        engine = create_engine(settings.database_url, echo=settings.debug)
        if settings.database_url.startswith("sqlite"):
            await create_tables(engine)
        app.state.cache_store = DatabaseSecCacheStore(create_session_maker(engine), settings.cache_ttl_days)

    yield

    logger.info("Shutting down ProspectIntel API")
    await app.state.edgar.close()
    if redis_client is not None:
        await redis_client.aclose()
    if engine is not None:
        await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    default_response_class=ORJSONResponse,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Add middleware
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    """Log all requests with timing."""
    request_id = str(uuid.uuid4())[:8]
    start = time.perf_counter()

    response = await call_next(request)

    duration_ms = (time.perf_counter() - start) * 1000

    logger.info(
        "request",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round(duration_ms, 2),
    )

    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(api_router, prefix="/v1")


@app.get("/", include_in_schema=False)
async def root():
    return {
        "name": "ProspectIntel",
        "description": settings.api_description,
        "version": settings.api_version,
        "docs": "/docs",
        "endpoints": {
            "sec_filings": "POST /v1/sec-filings",
            "cache_stats": "GET /v1/sec-filings/cache/stats",
            "invalidate": "DELETE /v1/sec-filings/cache/{cik}",
            "health": "/v1/health",
        },
    }


# Error handlers
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    codes = {400: "bad_request", 404: "not_found"}
    return ORJSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": codes.get(exc.status_code, "http_error"),
                "message": str(exc.detail),
            }
        },
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    logger.error("internal_error", path=request.url.path, error=str(exc))
    return ORJSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_error",
                "message": "Failed to fetch SEC filings",
            }
        },
    )
