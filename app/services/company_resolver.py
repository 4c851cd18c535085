"""
Company resolution: free-text name or ticker -> CIK.

Match policy against the SEC ticker directory:
1. An exact ticker match (case-insensitive) anywhere in the directory wins.
2. Otherwise the first company, in directory order, whose title contains
   the search term (case-insensitive substring).

There is no fuzzy matching or ranking, so ambiguous names resolve to
whichever entry comes first. Callers that need something smarter can pass a
``disambiguate`` hook, which receives every candidate and picks one.
"""

from typing import Callable, Optional

import httpx
import structlog

from app.models import CompanyIdentity
from app.services.sec_client import SECEdgarClient

logger = structlog.get_logger()

Disambiguator = Callable[[str, list[CompanyIdentity]], Optional[CompanyIdentity]]


def _to_identity(entry: dict) -> CompanyIdentity:
    return CompanyIdentity(
        cik=str(entry.get("cik_str", "")).zfill(10),
        name=entry.get("title", ""),
        ticker=entry.get("ticker") or None,
    )


def match_company(
    directory: list[dict],
    company_name_or_ticker: str,
    disambiguate: Optional[Disambiguator] = None,
) -> Optional[CompanyIdentity]:
    """Pick the directory entry for a search term. Pure function, no I/O."""
    search_term = (company_name_or_ticker or "").lower().strip()
    if not search_term:
        return None

    ticker_matches = [
        entry for entry in directory
        if (entry.get("ticker") or "").lower() == search_term
    ]
    name_matches = [
        entry for entry in directory
        if search_term in (entry.get("title") or "").lower()
    ]

    if disambiguate is not None:
        candidates = [_to_identity(e) for e in ticker_matches]
        candidates += [
            _to_identity(e) for e in name_matches if e not in ticker_matches
        ]
        return disambiguate(search_term, candidates) if candidates else None

    if ticker_matches:
        return _to_identity(ticker_matches[0])
    if name_matches:
        return _to_identity(name_matches[0])
    return None


async def resolve_company(
    client: SECEdgarClient,
    company_name_or_ticker: str,
    disambiguate: Optional[Disambiguator] = None,
) -> Optional[CompanyIdentity]:
    """
    Resolve a company name or ticker to its SEC identity.

    Returns None when nothing matches or the directory cannot be fetched;
    either way the company is treated as not an SEC filer.
    """
    try:
        directory = await client.get_company_tickers()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("sec.resolve.directory_failed", error=str(e))
        return None

    identity = match_company(directory, company_name_or_ticker, disambiguate)
    if identity is None:
        logger.info("sec.resolve.not_found", query=company_name_or_ticker)
    else:
        logger.info("sec.resolve.found", query=company_name_or_ticker, cik=identity.cik, name=identity.name)
    return identity
