"""
ProspectIntel - Database Schema

Persistent cache of composed SEC intelligence, one row per filer (CIK).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SecFilingsCache(Base):
    """Serialized SECData keyed by CIK. Overwritten on refresh, never merged."""

    __tablename__ = "sec_filings_cache"

    cik: Mapped[str] = mapped_column(String(10), primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # JSON-encoded SECData (camelCase, collaborator contract)
    data: Mapped[str] = mapped_column(Text, nullable=False)

    # Dominant filing type used to compute expires_at: 10-K, 10-Q, 8-K, default
    filing_type: Mapped[Optional[str]] = mapped_column(String(20))

    cached_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (Index("idx_sec_cache_expires_at", "expires_at"),)
