"""
SEC Filing Cache
================

Write-through cache of composed SECData, one entry per CIK, with a TTL
chosen from the dominant filing type:

    10-K     365 days
    10-Q      90 days
    8-K        7 days (no periodic filing, executive changes only)
    default   30 days

Two interchangeable stores implement SecCacheStore:

- DatabaseSecCacheStore: sec_filings_cache table via SQLAlchemy async
- RedisSecCacheStore: one SETEX key per CIK ("sec:cache:{cik}")

An entry is either fresh (returned) or treated as a miss. Entries read back
are marked is_cached with their cached_at / expires_at, and both executive
change timing and the fiscal-year budget cycle are recomputed against
today. An entry that cannot be parsed is logged and treated as a miss.
"""

import json
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Protocol

import redis.asyncio as redis
import structlog
from pydantic import ValidationError
from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.cache import cache_ping
from app.models import CacheStats, SECData, SecFilingsCache
from app.services.executive_changes import refresh_executive_changes
from app.services.financial_metrics import process_fiscal_year_info

logger = structlog.get_logger()


DEFAULT_TTL_DAYS = {
    "10-K": 365,
    "10-Q": 90,
    "8-K": 7,
    "default": 30,
}

# Cache metadata is attached on read, never stored with the payload
_METADATA_FIELDS = {"cached_at", "expires_at", "is_cached"}

# Raised by entries that are corrupt or were written by an older schema
_UNREADABLE_ENTRY_ERRORS = (ValueError, KeyError, TypeError, ValidationError)


class SecCacheStore(Protocol):
    async def get(self, cik: str, today: Optional[date] = None) -> Optional[SECData]:
        ...

    async def put(self, data: SECData) -> None:
        ...

    async def invalidate(self, cik: str) -> bool:
        ...

    async def clean_expired(self) -> int:
        ...

    async def stats(self) -> CacheStats:
        ...

    async def ping(self) -> tuple[bool, str]:
        ...


# =============================================================================
# HELPERS
# =============================================================================

def primary_filing_type(data: SECData) -> str:
    """The filing type that decides the entry's TTL."""
    if data.latest_10k:
        return "10-K"
    if data.latest_10q:
        return "10-Q"
    if data.executive_changes:
        return "8-K"
    return "default"


def calculate_expiration(
    filing_type: str,
    ttl_days: dict[str, int],
    now: Optional[datetime] = None,
) -> datetime:
    days = ttl_days.get(filing_type, ttl_days["default"])
    return (now or _utcnow()) + timedelta(days=days)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def serialize_payload(data: SECData) -> str:
    return data.model_dump_json(by_alias=True, exclude_none=True, exclude=_METADATA_FIELDS)


def restore_entry(
    payload: str,
    cached_at: datetime,
    expires_at: datetime,
    today: Optional[date] = None,
) -> SECData:
    data = SECData.model_validate_json(payload)

    financials = data.financials
    if financials and financials.fiscal_year:
        financials = financials.model_copy(update={
            "fiscal_year": process_fiscal_year_info(financials.fiscal_year.fiscal_year_end, today),
        })

    return data.model_copy(update={
        "cached_at": _as_utc(cached_at),
        "expires_at": _as_utc(expires_at),
        "is_cached": True,
        "executive_changes": refresh_executive_changes(data.executive_changes, today),
        "financials": financials,
    })


# =============================================================================
# DATABASE STORE
# =============================================================================

class DatabaseSecCacheStore:
    """Cache entries in the sec_filings_cache table."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        ttl_days: Optional[dict[str, int]] = None,
    ):
        self.session_maker = session_maker
        self.ttl_days = ttl_days or DEFAULT_TTL_DAYS

    async def get(self, cik: str, today: Optional[date] = None) -> Optional[SECData]:
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(SecFilingsCache).where(
                        SecFilingsCache.cik == cik,
                        SecFilingsCache.expires_at > _utcnow(),
                    )
                )
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.warning("sec.cache.read_failed", cik=cik, error=str(e))
            return None

        if row is None:
            logger.info("sec.cache.miss", cik=cik)
            return None

        try:
            data = restore_entry(row.data, row.cached_at, row.expires_at, today)
        except _UNREADABLE_ENTRY_ERRORS as e:
            logger.warning("sec.cache.read_failed", cik=cik, error=str(e))
            return None

        logger.info("sec.cache.hit", cik=cik, filing_type=row.filing_type, cached_at=str(row.cached_at))
        return data

    async def put(self, data: SECData) -> None:
        filing_type = primary_filing_type(data)
        cached_at = _utcnow()
        expires_at = calculate_expiration(filing_type, self.ttl_days, cached_at)

        try:
            async with self.session_maker() as session:
                await session.merge(SecFilingsCache(
                    cik=data.cik,
                    company_name=data.company_name,
                    data=serialize_payload(data),
                    filing_type=filing_type,
                    cached_at=cached_at,
                    expires_at=expires_at,
                ))
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning("sec.cache.write_failed", cik=data.cik, error=str(e))
            return

        logger.info("sec.cache.stored", cik=data.cik, filing_type=filing_type, expires_at=expires_at.isoformat())

    async def invalidate(self, cik: str) -> bool:
        async with self.session_maker() as session:
            result = await session.execute(delete(SecFilingsCache).where(SecFilingsCache.cik == cik))
            await session.commit()

        removed = result.rowcount > 0
        if removed:
            logger.info("sec.cache.invalidated", cik=cik)
        return removed

    async def clean_expired(self) -> int:
        async with self.session_maker() as session:
            result = await session.execute(
                delete(SecFilingsCache).where(SecFilingsCache.expires_at <= _utcnow())
            )
            await session.commit()

        if result.rowcount:
            logger.info("sec.cache.cleaned", removed=result.rowcount)
        return result.rowcount

    async def stats(self) -> CacheStats:
        async with self.session_maker() as session:
            total = await session.scalar(select(func.count()).select_from(SecFilingsCache))
            expired = await session.scalar(
                select(func.count())
                .select_from(SecFilingsCache)
                .where(SecFilingsCache.expires_at <= _utcnow())
            )
            rows = await session.execute(
                select(SecFilingsCache.filing_type, func.count()).group_by(SecFilingsCache.filing_type)
            )
            by_type = rows.all()

        return CacheStats(
            total=total or 0,
            expired=expired or 0,
            by_filing_type={filing_type or "default": count for filing_type, count in by_type},
        )

    async def ping(self) -> tuple[bool, str]:
        try:
            async with self.session_maker() as session:
                await session.execute(text("SELECT 1"))
            return True, "connected"
        except SQLAlchemyError as e:
            return False, str(e)


# =============================================================================
# REDIS STORE
# =============================================================================

class RedisSecCacheStore:
    """
    Cache entries as Redis keys with a native TTL.

    Expired keys vanish on their own, so clean_expired() has nothing to do
    and stats() never reports expired entries.
    """

    KEY_PREFIX = "sec:cache:"

    def __init__(self, client: redis.Redis, ttl_days: Optional[dict[str, int]] = None):
        self.client = client
        self.ttl_days = ttl_days or DEFAULT_TTL_DAYS

    def _key(self, cik: str) -> str:
        return f"{self.KEY_PREFIX}{cik}"

    async def get(self, cik: str, today: Optional[date] = None) -> Optional[SECData]:
        try:
            raw = await self.client.get(self._key(cik))
        except redis.RedisError as e:
            logger.warning("sec.cache.read_failed", cik=cik, error=str(e))
            return None

        if raw is None:
            logger.info("sec.cache.miss", cik=cik)
            return None

        try:
            entry = json.loads(raw)
            expires_at = _as_utc(datetime.fromisoformat(entry["expiresAt"]))
            if expires_at <= _utcnow():
                logger.info("sec.cache.miss", cik=cik, reason="expired")
                return None
            data = restore_entry(entry["data"], datetime.fromisoformat(entry["cachedAt"]), expires_at, today)
        except _UNREADABLE_ENTRY_ERRORS as e:
            logger.warning("sec.cache.read_failed", cik=cik, error=str(e))
            return None

        logger.info("sec.cache.hit", cik=cik, filing_type=entry.get("filingType"), cached_at=entry["cachedAt"])
        return data

    async def put(self, data: SECData) -> None:
        filing_type = primary_filing_type(data)
        cached_at = _utcnow()
        expires_at = calculate_expiration(filing_type, self.ttl_days, cached_at)
        entry = {
            "companyName": data.company_name,
            "filingType": filing_type,
            "cachedAt": cached_at.isoformat(),
            "expiresAt": expires_at.isoformat(),
            "data": serialize_payload(data),
        }

        try:
            await self.client.setex(
                self._key(data.cik),
                int((expires_at - cached_at).total_seconds()),
                json.dumps(entry),
            )
        except redis.RedisError as e:
            logger.warning("sec.cache.write_failed", cik=data.cik, error=str(e))
            return

        logger.info("sec.cache.stored", cik=data.cik, filing_type=filing_type, expires_at=expires_at.isoformat())

    async def invalidate(self, cik: str) -> bool:
        removed = await self.client.delete(self._key(cik)) > 0
        if removed:
            logger.info("sec.cache.invalidated", cik=cik)
        return removed

    async def clean_expired(self) -> int:
        return 0

    async def stats(self) -> CacheStats:
        by_filing_type: dict[str, int] = {}
        total = 0
        async for key in self.client.scan_iter(match=f"{self.KEY_PREFIX}*"):
            raw = await self.client.get(key)
            if raw is None:
                continue
            try:
                filing_type = json.loads(raw).get("filingType") or "default"
            except _UNREADABLE_ENTRY_ERRORS + (AttributeError,):
                filing_type = "default"
            by_filing_type[filing_type] = by_filing_type.get(filing_type, 0) + 1
            total += 1

        return CacheStats(total=total, expired=0, by_filing_type=by_filing_type)

    async def ping(self) -> tuple[bool, str]:
        return await cache_ping(self.client)
