"""
API routes for ProspectIntel

Core endpoints:
- POST   /v1/sec-filings
- DELETE /v1/sec-filings/cache/{cik}
- GET    /v1/sec-filings/cache/stats
- GET    /v1/ping
- GET    /v1/health
"""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.config import get_settings
from app.models.sec_data import ApiModel
from app.services.intelligence import get_intelligence
from app.services.sec_cache import SecCacheStore
from app.services.sec_client import SECEdgarClient

logger = structlog.get_logger()

router = APIRouter()


class SecFilingsRequest(ApiModel):
    company: str = ""
    force_refresh: bool = False


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_edgar_client(request: Request) -> SECEdgarClient:
    """EDGAR client opened by the application lifespan."""
    return request.app.state.edgar


def get_cache_store(request: Request) -> SecCacheStore:
    """Cache store opened by the application lifespan."""
    return request.app.state.cache_store


# =============================================================================
# HEALTH CHECK
# =============================================================================


@router.get("/ping", tags=["System"])
async def ping():
    """Simple ping endpoint for load balancer health checks.

    Does not touch the cache backend - just confirms the app is running.
    """
    return {"status": "ok"}


@router.get("/health", tags=["System"])
async def health_check(cache: SecCacheStore = Depends(get_cache_store)):
    """Health check including the cache backend."""
    settings = get_settings()
    success, message = await cache.ping()

    return {
        "status": "healthy" if success else "degraded",
        "checks": {
            "cache": "healthy" if success else f"unhealthy: {message}",
            "cache_backend": settings.cache_backend,
        },
        "version": settings.api_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# =============================================================================
# SEC FILINGS
# =============================================================================


@router.post("/sec-filings", tags=["SEC Filings"])
async def sec_filings(
    body: SecFilingsRequest,
    client: SECEdgarClient = Depends(get_edgar_client),
    cache: SecCacheStore = Depends(get_cache_store),
):
    """
    SEC filing intelligence for a company name or ticker.

    Served from cache when a fresh entry exists, unless forceRefresh is set.
    """
    company = body.company.strip()
    if not company:
        raise HTTPException(status_code=400, detail="Company name or ticker is required")

    data = await get_intelligence(company, body.force_refresh, client=client, cache=cache)
    if data is None:
        raise HTTPException(
            status_code=404,
            detail="Company not found in SEC database or no filings available",
        )

    return data.dump()


@router.delete("/sec-filings/cache/{cik}", tags=["SEC Filings"])
async def invalidate_cache(cik: str, cache: SecCacheStore = Depends(get_cache_store)):
    """Drop the cached entry for a CIK so the next request rebuilds it."""
    if not cik.isdigit() or len(cik) > 10:
        raise HTTPException(status_code=400, detail=f"Invalid CIK: {cik}")

    cik = cik.zfill(10)
    removed = await cache.invalidate(cik)
    return {"cik": cik, "invalidated": removed}


@router.get("/sec-filings/cache/stats", tags=["SEC Filings"])
async def cache_stats(cache: SecCacheStore = Depends(get_cache_store)):
    """Entry counts: total, expired, per dominant filing type."""
    stats = await cache.stats()
    return stats.dump()
