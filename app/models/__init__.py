"""Database and API models for ProspectIntel"""

from .schema import Base, SecFilingsCache
from .sec_data import (
    CacheStats,
    CapExTrend,
    CompanyIdentity,
    ExecutiveChange,
    FinancialMetrics,
    FiscalYearInfo,
    LegalExposureSummary,
    LegalProceeding,
    ProcessedRisk,
    SECData,
    SECFiling,
    StrategicPriority,
)

__all__ = [
    "Base",
    "CacheStats",
    "CapExTrend",
    "CompanyIdentity",
    "ExecutiveChange",
    "FinancialMetrics",
    "FiscalYearInfo",
    "LegalExposureSummary",
    "LegalProceeding",
    "ProcessedRisk",
    "SECData",
    "SECFiling",
    "SecFilingsCache",
    "StrategicPriority",
]
