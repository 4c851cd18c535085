"""
SEC Intelligence Pipeline
=========================

Composes everything the service knows about one company from its SEC
filings into a single SECData record.

STEPS
-----
1. Resolve the name/ticker to a CIK (company_tickers.json)
2. Cache lookup, skipped when force_refresh is set
3. Submission history -> latest 10-K, latest 10-Q, 8-Ks from the last year
4. Section text from the 10-K; the 10-Q only when the 10-K is missing or
   could not be fetched
5. Legal proceedings, risk factors, pain signals from those sections
6. XBRL financials, the 8-K executive-change scan and the 10-Q MD&A
   fetch, concurrently
7. Strategic priorities from the 10-Q MD&A when there is one (more
   current), else from the 10-K MD&A
8. Legal exposure relative to revenue
9. Write-through to the cache

RETURNS
-------
SECData, or None when the company is unknown or its submission history
cannot be fetched. Every other upstream failure only blanks the affected
part of the record.

USAGE
-----
    async with SECEdgarClient() as client:
        data = await get_intelligence("AAPL", client=client, cache=store)
"""

import asyncio
from datetime import date
from typing import Optional

import httpx
import structlog

from app.models import SECData
from app.services.company_resolver import Disambiguator, resolve_company
from app.services.executive_changes import scan_executive_changes
from app.services.filing_locator import LocatedFilings, locate_filings
from app.services.financial_metrics import extract_financial_metrics
from app.services.legal_proceedings import parse_legal_proceedings
from app.services.risk_aggregator import calculate_legal_exposure, generate_pain_signals
from app.services.risk_factors import extract_risk_factors, process_risk_factors
from app.services.sec_cache import SecCacheStore
from app.services.sec_client import SECEdgarClient
from app.services.section_extraction import FilingSections, fetch_filing_sections
from app.services.strategic_priorities import parse_strategic_priorities

logger = structlog.get_logger()


async def _fetch_sections(
    client: SECEdgarClient,
    cik: str,
    located: LocatedFilings,
) -> Optional[FilingSections]:
    sections = None
    if located.latest_10k:
        sections = await fetch_filing_sections(client, cik, located.latest_10k)
    if sections is None and located.latest_10q:
        sections = await fetch_filing_sections(client, cik, located.latest_10q)
    return sections


async def _priority_sections(
    client: SECEdgarClient,
    cik: str,
    located: LocatedFilings,
    sections: Optional[FilingSections],
) -> Optional[FilingSections]:
    """Sections whose MD&A feeds strategic priorities: the 10-Q when it has one."""
    if located.latest_10q is None or (sections is not None and sections.form_type == "10-Q"):
        return sections

    quarterly = await fetch_filing_sections(client, cik, located.latest_10q)
    if quarterly is not None and quarterly.mda:
        return quarterly
    return sections


async def get_intelligence(
    company: str,
    force_refresh: bool = False,
    *,
    client: SECEdgarClient,
    cache: SecCacheStore,
    disambiguate: Optional[Disambiguator] = None,
    today: Optional[date] = None,
) -> Optional[SECData]:
    """Build (or serve from cache) the SECData record for a company."""
    logger.info("sec.intelligence.start", company=company, force_refresh=force_refresh)

    identity = await resolve_company(client, company, disambiguate)
    if identity is None:
        logger.info("sec.company.not_found", company=company)
        return None

    cik = identity.cik
    if not force_refresh:
        cached = await cache.get(cik, today)
        if cached is not None:
            return cached

    try:
        submissions = await client.get_company_filings(cik)
    except (httpx.HTTPError, ValueError) as e:
        logger.error("sec.submissions.fetch_failed", cik=cik, error=str(e))
        return None

    located = locate_filings(submissions, today)
    logger.info(
        "sec.filings.located",
        cik=cik,
        latest_10k=located.latest_10k.filing_date if located.latest_10k else None,
        latest_10q=located.latest_10q.filing_date if located.latest_10q else None,
        recent_8ks=len(located.recent_8ks),
    )

    sections = await _fetch_sections(client, cik, located)
    risk_text = sections.risk_factors if sections else None
    legal_text = sections.legal_proceedings if sections else None
    mda_text = sections.mda if sections else None

    periodic = located.latest_10k or located.latest_10q
    filing_date = periodic.filing_date if periodic else ""

    legal_proceedings = parse_legal_proceedings(legal_text)
    risk_factors = extract_risk_factors(risk_text)
    processed_risks = process_risk_factors(risk_text, filing_date)
    pain_signals = generate_pain_signals(legal_proceedings, risk_factors)

    financials, executive_changes, priority_sections = await asyncio.gather(
        extract_financial_metrics(
            client,
            cik,
            fiscal_year_end=sections.fiscal_year_end if sections else None,
            mda_text=mda_text,
            today=today,
        ),
        scan_executive_changes(client, cik, located.recent_8ks, today),
        _priority_sections(client, cik, located, sections),
    )

    strategic_priorities = []
    if priority_sections and priority_sections.mda:
        strategic_priorities = parse_strategic_priorities(
            priority_sections.mda, priority_sections.form_type, priority_sections.filing.filing_date
        )

    legal_exposure = None
    if legal_proceedings:
        revenue = financials.revenue_in_dollars if financials else None
        legal_exposure = calculate_legal_exposure(legal_proceedings, revenue)

    data = SECData(
        company_name=identity.name,
        cik=cik,
        ticker=identity.ticker,
        latest_10k=located.latest_10k,
        latest_10q=located.latest_10q,
        legal_proceedings=legal_proceedings,
        legal_exposure=legal_exposure,
        risk_factors=risk_factors,
        processed_risks=processed_risks or None,
        executive_changes=executive_changes or None,
        strategic_priorities=strategic_priorities or None,
        pain_signals=pain_signals,
        financials=financials,
    )

    logger.info(
        "sec.intelligence.complete",
        cik=cik,
        company=identity.name,
        source_filing=sections.form_type if sections else None,
        legal_proceedings=len(legal_proceedings),
        risk_level=legal_exposure.risk_level if legal_exposure else None,
        risk_factors=len(risk_factors),
        executive_changes=len(executive_changes),
        strategic_priorities=len(strategic_priorities),
    )

    await cache.put(data)
    return data
