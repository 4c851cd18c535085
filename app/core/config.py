"""Application configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = "development"  # development, staging, production
    debug: bool = False

    # ==========================================================================
    # API
    # ==========================================================================
    api_title: str = "ProspectIntel"
    api_version: str = "1.0.0"
    api_description: str = "SEC filing intelligence for sales prospecting"
    allowed_origins: str = "*"

    # ==========================================================================
    # Cache storage
    # ==========================================================================
    # "database" stores entries in sec_filings_cache, "redis" uses SETEX keys
    cache_backend: str = "database"
    database_url: str = "sqlite+aiosqlite:///./sec-cache.db"
    redis_url: Optional[str] = None

    # Cache TTL in days, keyed by the dominant filing type
    cache_ttl_10k_days: int = 365
    cache_ttl_10q_days: int = 90
    cache_ttl_8k_days: int = 7
    cache_ttl_default_days: int = 30

    # ==========================================================================
    # SEC EDGAR
    # ==========================================================================
    # SEC requires a descriptive User-Agent with contact info
    sec_user_agent: str = "ProspectIntel contact@example.com"
    sec_timeout_seconds: float = 60.0
    sec_max_concurrency: int = 4
    sec_request_delay_seconds: float = 0.15  # SEC allows 10 requests/second
    ticker_directory_ttl_seconds: int = 24 * 3600

    class Config:
        env_file = ".env"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_redis(self) -> bool:
        return self.redis_url is not None

    @property
    def cache_ttl_days(self) -> dict[str, int]:
        return {
            "10-K": self.cache_ttl_10k_days,
            "10-Q": self.cache_ttl_10q_days,
            "8-K": self.cache_ttl_8k_days,
            "default": self.cache_ttl_default_days,
        }


@lru_cache
def get_settings() -> Settings:
    return Settings()
