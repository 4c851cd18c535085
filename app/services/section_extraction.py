"""
Section Extraction Service.

Isolates named Item sections from raw SEC filing text:
- risk_factors: 10-K Item 1A
- legal_proceedings: 10-K Item 3, 10-Q Part II Item 1
- mda: 10-K Item 7, 10-Q Part I Item 2
- item_502: 8-K Item 5.02 (officer departures/appointments)

Plus the fiscal-year-end date from the 10-K cover page boilerplate.

A section that cannot be located is returned as None, which is different
from a section that was found but is empty ("").
"""

import re
from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from app.models import SECFiling
from app.services.sec_client import SECEdgarClient

logger = structlog.get_logger()


MAX_SECTION_LENGTH = 50000
MAX_ITEM_502_LENGTH = 3000


@dataclass
class FilingSections:
    """Sections extracted from one filing. None = not found."""
    form_type: str
    filing: SECFiling
    risk_factors: Optional[str] = None
    legal_proceedings: Optional[str] = None
    mda: Optional[str] = None
    fiscal_year_end: Optional[str] = None


# =============================================================================
# SECTION HEADER PATTERNS
# =============================================================================

# Apostrophe in MANAGEMENT'S may be ', ’, ‘, ` or lost to a space
_APOS = r"(?:['‘’`]\s*|\s)?"

RISK_FACTORS_10K = r"ITEM\s+1A[\.\:\s\-—–]+RISK\s+FACTORS"
LEGAL_PROCEEDINGS_10K = r"ITEM\s+3[\.\:\s\-—–]+LEGAL\s+PROCEEDINGS"
MDA_10K = rf"ITEM\s+7[\.\:\s\-—–]+MANAGEMENT{_APOS}S\s+DISCUSSION\s+AND\s+ANALYSIS"

LEGAL_PROCEEDINGS_10Q = r"PART\s+(?:II|2)[\s\S]{0,500}?ITEM\s+1[\.\:\s\-—–]+LEGAL\s+PROCEEDINGS"
MDA_10Q = rf"PART\s+(?:I|1)[\s\S]{{0,500}}?ITEM\s+2[\.\:\s\-—–]+MANAGEMENT{_APOS}S\s+DISCUSSION\s+AND\s+ANALYSIS"

ITEM_502_8K = r"ITEM\s+5\.02"

# Start of the next Item/Part header ends a section
NEXT_SECTION = r"(?:ITEM|PART)\s+\d+[A-Z]?[\.\s]"
NEXT_8K_ITEM = r"ITEM\s+\d+\.\d+|SIGNATURES?\b|</TEXT>"

FISCAL_YEAR_END_PATTERNS = [
    r"for\s+the\s+fiscal\s+year\s+ended\s+([A-Z][a-z]+\s+\d{1,2},\s+\d{4})",
    r"fiscal\s+year\s+end(?:ed)?\s+([A-Z][a-z]+\s+\d{1,2},\s+\d{4})",
    r"year\s+ended\s+([A-Z][a-z]+\s+\d{1,2},\s+\d{4})",
]


# =============================================================================
# TEXT CLEANING
# =============================================================================

_DOCUMENT_RE = re.compile(r"<DOCUMENT>(.*?)</DOCUMENT>", re.IGNORECASE | re.DOTALL)
_TABLE_RE = re.compile(r"<table\b[^>]*>.*?</table>", re.IGNORECASE | re.DOTALL)
_HEADER_HINT_RE = re.compile(r"\b(?:ITEM|PART)\s+\d", re.IGNORECASE)
_BLOCK_END_RE = re.compile(r"<br\s*/?>|</(?:p|div|li|h[1-6]|tr)\s*>", re.IGNORECASE)

_ENTITIES = {
    "&nbsp;": " ", "&amp;": "&", "&lt;": "<", "&gt;": ">",
    "&quot;": '"', "&#39;": "'", "&apos;": "'",
}


def _drop_table(match: re.Match) -> str:
    # Layout tables sometimes hold the Item headers themselves; keep those as text
    block = match.group(0)
    if _HEADER_HINT_RE.search(re.sub(r"<[^>]+>", " ", block)):
        return block
    return " "


def primary_document(raw: str) -> str:
    """First <DOCUMENT> of a full-submission .txt file (the filing body, not exhibits)."""
    match = _DOCUMENT_RE.search(raw)
    return match.group(1) if match else raw


def clean_filing_text(raw: str) -> str:
    """
    Strip markup from filing content.

    Drops tables, script/style and iXBRL hidden blocks, removes remaining
    tags, decodes entities and collapses whitespace. Paragraph breaks are
    kept as blank lines so downstream parsers can split on them.
    """
    if not raw:
        return ""

    content = re.sub(r"<script[^>]*>[\s\S]*?</script>", " ", raw, flags=re.IGNORECASE)
    content = re.sub(r"<style[^>]*>[\s\S]*?</style>", " ", content, flags=re.IGNORECASE)
    content = re.sub(r"<ix:hidden[^>]*>[\s\S]*?</ix:hidden>", " ", content, flags=re.IGNORECASE)
    content = _TABLE_RE.sub(_drop_table, content)
    content = _BLOCK_END_RE.sub("\n\n", content)
    content = re.sub(r"<[^>]+>", " ", content)

    for entity, char in _ENTITIES.items():
        content = content.replace(entity, char)
    content = re.sub(r"&#(\d+);", lambda m: chr(int(m.group(1))), content)
    content = re.sub(r"&#x([0-9a-fA-F]+);", lambda m: chr(int(m.group(1), 16)), content)

    paragraphs = re.split(r"\n\s*\n", content)
    paragraphs = [" ".join(p.split()) for p in paragraphs]
    return "\n\n".join(p for p in paragraphs if p)


# =============================================================================
# SECTION LOCATION
# =============================================================================

def extract_section(
    text: str,
    header_pattern: str,
    end_pattern: str = NEXT_SECTION,
    max_length: int = MAX_SECTION_LENGTH,
) -> Optional[str]:
    """
    Extract the text between a section header and the next header.

    Every header occurrence is tried and the longest body wins, so a table
    of contents entry ("Item 1A. Risk Factors ... 12") does not shadow the
    real section. Returns None when the header is not present at all.
    """
    best: Optional[str] = None
    for match in re.finditer(header_pattern, text, re.IGNORECASE):
        remaining = text[match.end():]
        next_match = re.search(end_pattern, remaining, re.IGNORECASE)
        end = next_match.start() if next_match else len(remaining)
        body = remaining[:min(end, max_length)].strip()
        if best is None or len(body) > len(best):
            best = body
    return best


def extract_fiscal_year_end(raw: str, cleaned: Optional[str] = None) -> Optional[str]:
    """
    Find the fiscal year end date ("December 31, 2024") in 10-K boilerplate.

    The raw text is searched first since the cover sentence sits near the
    top; markup often splits it, so the cleaned text is the fallback.
    """
    for source in (raw, cleaned):
        if not source:
            continue
        for pattern in FISCAL_YEAR_END_PATTERNS:
            match = re.search(pattern, source, re.IGNORECASE)
            if match:
                return match.group(1)
    return None


def extract_sections_from_filing(raw: str, filing: SECFiling) -> FilingSections:
    """Extract the sections relevant to the filing's form type."""
    body = primary_document(raw)
    text = clean_filing_text(body)
    sections = FilingSections(form_type=filing.form_type, filing=filing)

    if filing.form_type == "10-K":
        sections.fiscal_year_end = extract_fiscal_year_end(body, text)
        sections.risk_factors = extract_section(text, RISK_FACTORS_10K)
        sections.legal_proceedings = extract_section(text, LEGAL_PROCEEDINGS_10K)
        sections.mda = extract_section(text, MDA_10K)
    elif filing.form_type == "10-Q":
        sections.legal_proceedings = extract_section(text, LEGAL_PROCEEDINGS_10Q)
        sections.mda = extract_section(text, MDA_10Q)

    return sections


def extract_item_502(raw: str) -> Optional[str]:
    """Item 5.02 text from an 8-K, bounded to the next item or 3000 chars."""
    text = clean_filing_text(primary_document(raw))
    return extract_section(text, ITEM_502_8K, end_pattern=NEXT_8K_ITEM, max_length=MAX_ITEM_502_LENGTH)


async def fetch_filing_sections(
    client: SECEdgarClient,
    cik: str,
    filing: SECFiling,
) -> Optional[FilingSections]:
    """Download a 10-K/10-Q and extract its sections. None if the fetch fails."""
    try:
        raw = await client.download_filing_text(cik, filing.accession_number)
    except httpx.HTTPError as e:
        logger.warning(
            "sec.filing.fetch_failed",
            cik=cik,
            form_type=filing.form_type,
            accession=filing.accession_number,
            error=str(e),
        )
        return None

    sections = extract_sections_from_filing(raw, filing)
    logger.info(
        "sec.filing.sections",
        cik=cik,
        form_type=filing.form_type,
        risk_factors=sections.risk_factors is not None,
        legal_proceedings=sections.legal_proceedings is not None,
        mda=sections.mda is not None,
        fiscal_year_end=sections.fiscal_year_end,
    )
    return sections
