"""
Financial Metrics
=================

Headline balance-sheet / income figures from the SEC XBRL Company Facts API
(``facts.us-gaap``), enriched with filing-text signals:

- fiscal_year: days until the next fiscal year end and the budget-cycle
  phase that implies (from the 10-K cover page date)
- capex_trend: capital expenditure / technology spend mentions in MD&A
- capex_yoy_change: year-over-year change in annual PP&E purchases

CONCEPT FALLBACKS
-----------------
Each metric tries its XBRL concepts in order and takes the first one the
filer reports. The latest value is the USD fact with the greatest ``end``.
"""

import re
from datetime import date
from typing import Optional

import httpx
import structlog

from app.models import CapExTrend, FinancialMetrics, FiscalYearInfo
from app.services.sec_client import SECEdgarClient
from app.services.utils import format_currency, parse_date

logger = structlog.get_logger()


CONCEPTS = {
    "assets": ["Assets"],
    "liabilities": ["Liabilities", "LiabilitiesAndStockholdersEquity"],
    "cash": ["CashAndCashEquivalentsAtCarryingValue", "Cash"],
    "debt": ["LongTermDebt", "DebtCurrent"],
    "revenue": [
        "Revenues",
        "RevenueFromContractWithCustomerExcludingAssessedTax",
        "SalesRevenueNet",
    ],
    "net_income": ["NetIncomeLoss", "ProfitLoss"],
}

CAPEX_CONCEPT = "PaymentsToAcquirePropertyPlantAndEquipment"

MAX_CAPEX_TRENDS = 3


# =============================================================================
# XBRL FACTS
# =============================================================================

def _usd_units(facts: dict, concept: str) -> list[dict]:
    fact = facts.get(concept) or {}
    units = fact.get("units") or {}
    return units.get("USD") or units.get("usd") or []


def latest_fact(facts: dict, concept: str) -> Optional[dict]:
    """Most recent USD fact (by period end) for one concept, or None."""
    values = [v for v in _usd_units(facts, concept) if v.get("end") and v.get("val") is not None]
    if not values:
        return None
    return max(values, key=lambda v: v["end"])


def latest_metric(facts: dict, metric: str) -> Optional[dict]:
    for concept in CONCEPTS[metric]:
        fact = latest_fact(facts, concept)
        if fact is not None:
            return fact
    return None


def capex_yoy_change(facts: dict) -> Optional[float]:
    """
    Percent change between the two latest annual PP&E purchase totals.

    Only full-year 10-K facts count; a period reported in several filings
    keeps its most recently filed value. None with fewer than two years or
    a zero prior year.
    """
    annual: dict[str, dict] = {}
    for value in _usd_units(facts, CAPEX_CONCEPT):
        if value.get("form") != "10-K" or value.get("fp") != "FY":
            continue
        start, end = parse_date(value.get("start")), parse_date(value.get("end"))
        if start is None or end is None or not 350 <= (end - start).days <= 380:
            continue
        current = annual.get(value["end"])
        if current is None or value.get("filed", "") >= current.get("filed", ""):
            annual[value["end"]] = value

    if len(annual) < 2:
        return None

    ends = sorted(annual)
    latest, prior = annual[ends[-1]]["val"], annual[ends[-2]]["val"]
    if not prior:
        return None
    return round((latest - prior) / abs(prior) * 100, 1)


# =============================================================================
# FISCAL YEAR
# =============================================================================

def _next_occurrence(month: int, day: int, today: date) -> date:
    for year in (today.year, today.year + 1):
        try:
            candidate = date(year, month, day)
        except ValueError:
            # Feb 29 outside a leap year
            candidate = date(year, month, 28)
        if candidate >= today:
            return candidate
    return candidate


def process_fiscal_year_info(
    fiscal_year_end: Optional[str],
    today: Optional[date] = None,
) -> Optional[FiscalYearInfo]:
    """
    Budget-cycle position relative to the next fiscal year end.

    days until FYE    quarter  phase
    > 270             Q1       NEW YEAR SETUP
    > 180             Q2       EXECUTION
    > 90              Q3       EXECUTION
    > 45              Q4       PLANNING
    otherwise         Q4       BUDGET FLUSH
    """
    fye = parse_date(fiscal_year_end)
    if fye is None:
        return None

    today = today or date.today()
    next_fye = _next_occurrence(fye.month, fye.day, today)
    days_until = (next_fye - today).days

    if days_until > 270:
        quarter, phase = "Q1", "NEW YEAR SETUP"
    elif days_until > 180:
        quarter, phase = "Q2", "EXECUTION"
    elif days_until > 90:
        quarter, phase = "Q3", "EXECUTION"
    elif days_until > 45:
        quarter, phase = "Q4", "PLANNING"
    else:
        quarter, phase = "Q4", "BUDGET FLUSH"

    return FiscalYearInfo(
        fiscal_year_end=fiscal_year_end,
        fiscal_year_end_date=next_fye.isoformat(),
        month_day=f"{fye.strftime('%b')} {fye.day}",
        days_until_fye=days_until,
        quarter=quarter,
        budget_cycle_phase=phase,
    )


# =============================================================================
# CAPEX MENTIONS
# =============================================================================

_AMOUNT = r"\$[\d,]+\.?\d*\s*(?:million|billion|M|B)"

CAPEX_PATTERNS = [
    re.compile(rf"capital expenditures?.*?{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"technology investments?.*?{_AMOUNT}", re.IGNORECASE),
    re.compile(rf"IT spending.*?{_AMOUNT}", re.IGNORECASE),
    re.compile(
        rf"(?:spent|investing?|allocated?)\s+{_AMOUNT}\s+(?:on|in|for)\s+(?:capital|technology|IT|infrastructure)",
        re.IGNORECASE,
    ),
]
CAPEX_AMOUNT_RE = re.compile(_AMOUNT, re.IGNORECASE)
CAPEX_YEAR_RE = re.compile(r"20\d{2}|FY\s*\d{2}")


def parse_capex_trends(mda_text: Optional[str]) -> list[CapExTrend]:
    """Up to 3 capital-spend mentions, each with ~100 chars of context either side."""
    if not mda_text:
        return []

    trends: list[CapExTrend] = []
    for pattern in CAPEX_PATTERNS:
        for match in pattern.finditer(mda_text):
            excerpt = match.group(0)
            year = CAPEX_YEAR_RE.search(excerpt)
            amount = CAPEX_AMOUNT_RE.search(excerpt)

            context = mda_text[max(0, match.start() - 100):match.end() + 100].strip()
            if len(context) > 200:
                context = context[:200] + "..."

            trends.append(CapExTrend(
                year=year.group(0) if year else "Current Year",
                amount=amount.group(0) if amount else None,
                mention=context,
            ))
            if len(trends) >= MAX_CAPEX_TRENDS:
                return trends

    return trends


# =============================================================================
# ASSEMBLY
# =============================================================================

def build_financial_metrics(
    company_facts: dict,
    fiscal_year_end: Optional[str] = None,
    mda_text: Optional[str] = None,
    today: Optional[date] = None,
) -> FinancialMetrics:
    """FinancialMetrics from a companyfacts payload plus filing-text signals."""
    facts = (company_facts.get("facts") or {}).get("us-gaap") or {}
    found = {metric: latest_metric(facts, metric) for metric in CONCEPTS}

    def formatted(metric: str) -> Optional[str]:
        fact = found[metric]
        return format_currency(fact["val"]) if fact else None

    period_source = found["assets"] or found["liabilities"] or found["revenue"] or {}
    revenue = found["revenue"]

    trends = parse_capex_trends(mda_text)
    return FinancialMetrics(
        total_assets=formatted("assets"),
        total_liabilities=formatted("liabilities"),
        cash_and_equivalents=formatted("cash"),
        total_debt=formatted("debt"),
        revenue=formatted("revenue"),
        revenue_in_dollars=float(revenue["val"]) if revenue else None,
        net_income=formatted("net_income"),
        report_period=period_source.get("end"),
        filing_date=period_source.get("filed"),
        fiscal_year=process_fiscal_year_info(fiscal_year_end, today),
        capex_trend=trends or None,
        capex_yoy_change=capex_yoy_change(facts),
    )


async def extract_financial_metrics(
    client: SECEdgarClient,
    cik: str,
    fiscal_year_end: Optional[str] = None,
    mda_text: Optional[str] = None,
    today: Optional[date] = None,
) -> Optional[FinancialMetrics]:
    """Fetch company facts and build metrics. None when the facts API is unavailable."""
    try:
        company_facts = await client.get_company_facts(cik)
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("sec.facts.fetch_failed", cik=cik, error=str(e))
        return None

    metrics = build_financial_metrics(company_facts, fiscal_year_end, mda_text, today)
    logger.info(
        "sec.facts.extracted",
        cik=cik,
        revenue=metrics.revenue,
        report_period=metrics.report_period,
        capex_yoy_change=metrics.capex_yoy_change,
    )
    return metrics
