"""
Executive Change Parser (8-K Item 5.02).

Scans recent 8-K filings for officer appointments and departures and
classifies each for sales timing:

    HOT      technology leadership (CIO / CTO / CDO / CISO)
    WARM     CEO / CFO
    MONITOR  any other officer

Days-in-role and the HOT timing narrative depend on "today", so they are
recomputed whenever an entry is read back (see refresh_executive_changes).
"""

import asyncio
import re
from datetime import date
from typing import Optional

import httpx
import structlog

from app.models import ExecutiveChange, SECFiling
from app.services.section_extraction import extract_item_502
from app.services.sec_client import SECEdgarClient
from app.services.utils import parse_date

logger = structlog.get_logger()

MAX_EXECUTIVE_CHANGES = 5

# Proper-cased person name; case-sensitive even inside IGNORECASE patterns
_NAME = r"(?-i:[A-Z][a-z'\-]+(?:\s+[A-Z]\.)?(?:\s+[A-Z][a-z'\-]+){1,2})"
_TITLE = r"(Chief\s+(?:\w+\s+){1,2}Officer|C(?:[IEOTFD]|IS)O|President|Chairman)"
_COMPANY = r"(?:the\s+)?(?:Company['’]s\s+)?"

APPOINTMENT_PATTERNS = [
    re.compile(
        rf"(?:appointed|elected|named|designated)\s+(?:as\s+)?({_NAME}),?\s+(?:as\s+|to\s+serve\s+as\s+)?{_COMPANY}{_TITLE}",
        re.IGNORECASE,
    ),
    re.compile(
        rf"({_NAME}),?\s+(?:has\s+been|was)\s+(?:appointed|elected|named)\s+(?:as\s+)?{_COMPANY}{_TITLE}",
        re.IGNORECASE,
    ),
]

DEPARTURE_PATTERNS = [
    re.compile(
        rf"({_NAME}),?\s+{_COMPANY}{_TITLE}[,\s]+(?:has\s+|will\s+)?(?:resigned|retired|departed|stepped\s+down|step\s+down|resign|retire)",
        re.IGNORECASE,
    ),
    re.compile(
        rf"(?:resignation|retirement|departure)\s+of\s+({_NAME})[,\s]+(?:as\s+)?{_COMPANY}{_TITLE}",
        re.IGNORECASE,
    ),
]

EFFECTIVE_DATE_RE = re.compile(r"effective\s+(?:as\s+of\s+)?(\w+\s+\d{1,2},\s+\d{4})", re.IGNORECASE)
REASON_RE = re.compile(r"\b(retired|retirement|resignation|terminated|personal reasons|pursue other|health)", re.IGNORECASE)

TECH_LEADER_RE = re.compile(
    r"\bc[itd]o\b|\bciso\b|chief\s+(?:information|technology|data|digital)\s+officer"
    r"|chief\s+(?:information\s+)?security\s+officer",
    re.IGNORECASE,
)
EXECUTIVE_RE = re.compile(r"\bceo\b|chief\s+executive|\bcfo\b|chief\s+financial", re.IGNORECASE)

WARM_IMPLICATION = (
    "New CEO/CFO often drives strategic shifts and budget reallocation - monitor for tech priorities"
)
MONITOR_IMPLICATION = "C-suite change may influence departmental budgets and priorities"


def _tech_leader_implication(days_in_role: int) -> str:
    if days_in_role <= 30:
        return "PRIME TIMING: Honeymoon period - building team and establishing priorities"
    if days_in_role <= 90:
        return "GOOD TIMING: Evaluating current tech stack and vendor relationships"
    if days_in_role <= 180:
        return "MONITOR: Likely finalizing initial vendor selections"
    return "LATE STAGE: Most vendor relationships established, harder to displace"


def days_since(date_str: str, today: Optional[date] = None) -> int:
    """Whole days from date_str to today; 0 when the date cannot be parsed."""
    parsed = parse_date(date_str)
    if parsed is None:
        return 0
    return ((today or date.today()) - parsed).days


def classify_executive_change(
    title: str,
    effective_date: str,
    today: Optional[date] = None,
) -> tuple[str, int, str]:
    """Return (priority, days_in_role, sales_implication) for a title."""
    days_in_role = days_since(effective_date, today)

    if TECH_LEADER_RE.search(title):
        return "HOT", days_in_role, _tech_leader_implication(days_in_role)
    if EXECUTIVE_RE.search(title):
        return "WARM", days_in_role, WARM_IMPLICATION
    return "MONITOR", days_in_role, MONITOR_IMPLICATION


def _clean_title(title: str) -> str:
    return " ".join(title.split())


def _merge_transitions(changes: list[ExecutiveChange]) -> list[ExecutiveChange]:
    """Same person departing one role and appointed to another -> one transition."""
    departures = {c.name: c for c in changes if c.change_type == "departure"}
    merged: list[ExecutiveChange] = []
    consumed: set[str] = set()

    for change in changes:
        if change.change_type == "appointment" and change.name in departures:
            departure = departures[change.name]
            if departure.previous_title != change.new_title:
                merged.append(change.model_copy(update={
                    "change_type": "transition",
                    "previous_title": departure.previous_title,
                    "reason": departure.reason,
                }))
                consumed.add(change.name)
                continue
        merged.append(change)

    return [c for c in merged if not (c.change_type == "departure" and c.name in consumed)]


def parse_executive_changes(
    text: Optional[str],
    filing_date: str,
    today: Optional[date] = None,
) -> list[ExecutiveChange]:
    """Parse appointments and departures out of Item 5.02 text."""
    if not text:
        return []

    changes: list[ExecutiveChange] = []
    seen: set[tuple[str, str]] = set()

    for pattern in APPOINTMENT_PATTERNS:
        for match in pattern.finditer(text):
            name, title = match.group(1).strip(), _clean_title(match.group(2))
            if (name, "appointment") in seen:
                continue
            seen.add((name, "appointment"))

            window = text[max(0, match.start() - 200):match.start() + 200]
            date_match = EFFECTIVE_DATE_RE.search(window)
            effective_date = date_match.group(1) if date_match else filing_date

            priority, days_in_role, implication = classify_executive_change(title, effective_date, today)
            changes.append(ExecutiveChange(
                name=name,
                new_title=title,
                change_type="appointment",
                effective_date=effective_date,
                filing_date=filing_date,
                priority=priority,
                days_in_role=days_in_role,
                sales_implication=implication,
            ))

    for pattern in DEPARTURE_PATTERNS:
        for match in pattern.finditer(text):
            name, title = match.group(1).strip(), _clean_title(match.group(2))
            if (name, "departure") in seen:
                continue
            seen.add((name, "departure"))

            reason_match = REASON_RE.search(text[match.start():match.start() + 300])
            priority, days_in_role, implication = classify_executive_change(title, filing_date, today)
            changes.append(ExecutiveChange(
                name=name,
                previous_title=title,
                change_type="departure",
                effective_date=filing_date,
                filing_date=filing_date,
                reason=reason_match.group(1) if reason_match else None,
                priority=priority,
                days_in_role=days_in_role,
                sales_implication=implication,
            ))

    return _merge_transitions(changes)


def refresh_executive_changes(
    changes: Optional[list[ExecutiveChange]],
    today: Optional[date] = None,
) -> Optional[list[ExecutiveChange]]:
    """Recompute days_in_role, priority and narrative relative to today."""
    if not changes:
        return changes

    refreshed = []
    for change in changes:
        title = change.new_title or change.previous_title or ""
        priority, days_in_role, implication = classify_executive_change(title, change.effective_date, today)
        refreshed.append(change.model_copy(update={
            "priority": priority,
            "days_in_role": days_in_role,
            "sales_implication": implication,
        }))
    return refreshed


async def _changes_from_filing(
    client: SECEdgarClient,
    cik: str,
    filing: SECFiling,
    today: Optional[date],
) -> list[ExecutiveChange]:
    try:
        raw = await client.download_filing_text(cik, filing.accession_number)
    except httpx.HTTPError as e:
        logger.warning("sec.8k.fetch_failed", cik=cik, accession=filing.accession_number, error=str(e))
        return []

    return parse_executive_changes(extract_item_502(raw), filing.filing_date, today)


async def scan_executive_changes(
    client: SECEdgarClient,
    cik: str,
    filings: list[SECFiling],
    today: Optional[date] = None,
) -> list[ExecutiveChange]:
    """
    Parse Item 5.02 across recent 8-Ks.

    Filings are fetched concurrently (the client throttles); results keep
    filing order, most recent first, and are capped at 5.
    """
    if not filings:
        return []

    results = await asyncio.gather(
        *[_changes_from_filing(client, cik, f, today) for f in filings]
    )
    changes = [change for filing_changes in results for change in filing_changes]
    return changes[:MAX_EXECUTIVE_CHANGES]
