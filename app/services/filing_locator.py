"""
Filing selection from an EDGAR submissions payload.

The ``filings.recent`` block is a set of parallel arrays (form, filingDate,
accessionNumber, reportDate, ...) sorted most recent first.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Optional

from app.models import SECFiling

EIGHT_K_LOOKBACK_DAYS = 365
MAX_EIGHT_K_FILINGS = 10


@dataclass
class LocatedFilings:
    """Filings selected for one company."""
    latest_10k: Optional[SECFiling] = None
    latest_10q: Optional[SECFiling] = None
    recent_8ks: list[SECFiling] = field(default_factory=list)


def _filing_at(recent: dict, i: int) -> SECFiling:
    report_dates = recent.get("reportDate") or []
    return SECFiling(
        form_type=recent["form"][i],
        filing_date=recent["filingDate"][i],
        accession_number=recent["accessionNumber"][i],
        report_date=(report_dates[i] or None) if i < len(report_dates) else None,
    )


def extract_latest_filings(submissions: dict) -> tuple[Optional[SECFiling], Optional[SECFiling]]:
    """Return the first (most recent) 10-K and 10-Q in the submission list."""
    recent = (submissions or {}).get("filings", {}).get("recent")
    if not recent:
        return None, None

    latest_10k = None
    latest_10q = None
    for i, form in enumerate(recent.get("form", [])):
        if latest_10k is None and form == "10-K":
            latest_10k = _filing_at(recent, i)
        if latest_10q is None and form == "10-Q":
            latest_10q = _filing_at(recent, i)
        if latest_10k and latest_10q:
            break

    return latest_10k, latest_10q


def extract_recent_8ks(
    submissions: dict,
    today: Optional[date] = None,
    lookback_days: int = EIGHT_K_LOOKBACK_DAYS,
    max_filings: int = MAX_EIGHT_K_FILINGS,
) -> list[SECFiling]:
    """8-K filings dated within the trailing window, most recent first."""
    recent = (submissions or {}).get("filings", {}).get("recent")
    if not recent:
        return []

    cutoff = (today or date.today()) - timedelta(days=lookback_days)
    filings = []
    for i, form in enumerate(recent.get("form", [])):
        if form != "8-K":
            continue
        try:
            filed = datetime.strptime(recent["filingDate"][i], "%Y-%m-%d").date()
        except (ValueError, IndexError):
            continue
        if filed >= cutoff:
            filings.append(_filing_at(recent, i))
        if len(filings) >= max_filings:
            break

    return filings


def locate_filings(submissions: dict, today: Optional[date] = None) -> LocatedFilings:
    latest_10k, latest_10q = extract_latest_filings(submissions)
    return LocatedFilings(
        latest_10k=latest_10k,
        latest_10q=latest_10q,
        recent_8ks=extract_recent_8ks(submissions, today=today),
    )
