"""
SEC intelligence data model.

Pydantic models for the composed SECData aggregate and its parts. Field
names are snake_case in Python and camelCase on the wire (the JSON contract
the UI and API consumers read), e.g. ``amount_in_dollars`` <-> ``amountInDollars``.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


LegalType = Literal["litigation", "settlement", "fine", "investigation"]
LegalCategory = Literal["Regulatory", "Class Action", "Commercial", "Employment", "Other"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
RiskCategory = Literal["Legacy Tech", "Security", "Compliance", "Integration", "Cloud", "Resilience"]
ChangeType = Literal["appointment", "departure", "transition"]
ExecutivePriority = Literal["HOT", "WARM", "MONITOR"]
PriorityCategory = Literal[
    "Cloud",
    "Legacy Modernization",
    "Cybersecurity",
    "AI/Automation",
    "Digital Transformation",
    "Infrastructure",
]
ServiceAlignment = Literal["DIRECT MATCH", "ADJACENT OPPORTUNITY", "MONITOR"]
FiscalQuarter = Literal["Q1", "Q2", "Q3", "Q4"]
BudgetCyclePhase = Literal["PLANNING", "EXECUTION", "BUDGET FLUSH", "NEW YEAR SETUP"]


class ApiModel(BaseModel):
    """Base model: camelCase aliases, construction by field name allowed."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        """JSON-ready dict in wire format, unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CompanyIdentity(ApiModel):
    """Resolved filer identity. CIK is zero-padded to 10 digits."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    cik: str
    name: str
    ticker: Optional[str] = None


class SECFiling(ApiModel):
    form_type: str
    filing_date: str
    accession_number: str
    report_date: Optional[str] = None


class LegalProceeding(ApiModel):
    description: str
    amount: Optional[str] = None
    amount_in_dollars: Optional[float] = None
    type: LegalType = "litigation"
    category: LegalCategory = "Other"
    is_it_related: bool = Field(False, alias="isITRelated")
    filed_date: Optional[str] = None


class LegalExposureSummary(ApiModel):
    total_cases: int
    total_exposure: float
    total_exposure_formatted: str
    it_related_cases: int
    regulatory_cases: int
    risk_level: RiskLevel
    is_material_risk: bool
    revenue_percentage: Optional[float] = None
    # "revenue" when thresholds were applied to % of revenue, "absolute" for the
    # coarser dollar-threshold fallback
    revenue_basis: Literal["revenue", "absolute"] = "absolute"


class ProcessedRisk(ApiModel):
    category: RiskCategory
    excerpt: str
    keywords: list[str]
    sales_angle: str
    relevance_score: int
    filing_date: str


class ExecutiveChange(ApiModel):
    name: str
    previous_title: Optional[str] = None
    new_title: Optional[str] = None
    change_type: ChangeType
    effective_date: str
    filing_date: str
    reason: Optional[str] = None
    priority: ExecutivePriority
    days_in_role: int
    sales_implication: str


class StrategicPriority(ApiModel):
    statement: str
    category: PriorityCategory
    budget_mentioned: Optional[str] = None
    filing_type: Literal["10-K", "10-Q"]
    filing_date: str
    service_alignment: ServiceAlignment
    service_category: str


class FiscalYearInfo(ApiModel):
    fiscal_year_end: str  # as written in the filing, e.g. "December 31, 2024"
    fiscal_year_end_date: str  # ISO date of the next occurrence
    month_day: str  # e.g. "Dec 31"
    days_until_fye: int = Field(alias="daysUntilFYE")
    quarter: FiscalQuarter
    budget_cycle_phase: BudgetCyclePhase


class CapExTrend(ApiModel):
    year: str
    amount: Optional[str] = None
    mention: str


class FinancialMetrics(ApiModel):
    total_assets: Optional[str] = None
    total_liabilities: Optional[str] = None
    cash_and_equivalents: Optional[str] = None
    total_debt: Optional[str] = None
    revenue: Optional[str] = None
    revenue_in_dollars: Optional[float] = None
    net_income: Optional[str] = None
    report_period: Optional[str] = None
    filing_date: Optional[str] = None
    fiscal_year: Optional[FiscalYearInfo] = None
    capex_trend: Optional[list[CapExTrend]] = Field(None, alias="capExTrend")
    capex_yoy_change: Optional[float] = Field(None, alias="capExYoYChange")


class SECData(ApiModel):
    """Composed intelligence for one filer. This is the cached unit."""

    company_name: str
    cik: str
    ticker: Optional[str] = None
    latest_10k: Optional[SECFiling] = Field(None, alias="latest10K")
    latest_10q: Optional[SECFiling] = Field(None, alias="latest10Q")
    legal_proceedings: list[LegalProceeding] = Field(default_factory=list)
    legal_exposure: Optional[LegalExposureSummary] = None
    risk_factors: list[str] = Field(default_factory=list)
    processed_risks: Optional[list[ProcessedRisk]] = None
    executive_changes: Optional[list[ExecutiveChange]] = None
    strategic_priorities: Optional[list[StrategicPriority]] = None
    pain_signals: list[str] = Field(default_factory=list)
    financials: Optional[FinancialMetrics] = None

    # Cache metadata, populated when served from cache
    cached_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_cached: bool = False


class CacheStats(ApiModel):
    total: int
    expired: int
    by_filing_type: dict[str, int] = Field(default_factory=dict)
