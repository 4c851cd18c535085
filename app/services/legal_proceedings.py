"""
Legal Proceedings Parser
========================

Turns the text of a Legal Proceedings section (10-K Item 3 / 10-Q Part II
Item 1) into LegalProceeding records.

STEPS
-----
1. Leading "no material proceedings" boilerplate -> empty result
2. Split into sentence-like chunks
3. Keep chunks >= 100 chars that contain a strong legal indicator
   (party to, defendant, lawsuit, litigation, settlement agreement, ...)
4. Per chunk: largest dollar amount, type, category, IT flag, filed date
5. Stop after 10 proceedings (text order, not severity)

Matches are heuristic; duplicates and false positives are expected.
"""

import re
from typing import Optional

from app.models import LegalProceeding

MAX_PROCEEDINGS = 10
MIN_CHUNK_LENGTH = 100

NO_PROCEEDINGS_RE = re.compile(r"there are no|no material|not applicable|\bnone\b", re.IGNORECASE)

STRONG_INDICATOR_RE = re.compile(
    r"\b(?:is|are|was|were)\s+(?:a\s+)?(?:party\s+to|involved\s+in|subject\s+to|defendant|plaintiff)"
    r"|lawsuit|litigation|complaint|action\s+was\s+filed|legal\s+proceeding|settlement\s+agreement|consent\s+decree",
    re.IGNORECASE,
)

DOLLAR_AMOUNT_RE = re.compile(
    r"\$\s?\d[\d,]*(?:\.\d+)?(?:\s?(?:million|billion|thousand)\b|\s?[MBK]\b)?"
    r"|\d[\d,]*(?:\.\d+)?\s*million\s+dollars",
    re.IGNORECASE,
)
_AMOUNT_PARTS_RE = re.compile(
    r"\$?\s?(\d[\d,]*(?:\.\d+)?)\s*(million|billion|thousand|[MBK](?![a-z]))?",
    re.IGNORECASE,
)

# Sentence end; a period after a lone letter ("U.S.", "v.") is an abbreviation
_FIRST_SENTENCE_RE = re.compile(r"^.+?(?<!\b[A-Za-z])\.(?=\s|$)", re.DOTALL)
_SENTENCE_BREAK_RE = re.compile(r"(?<!\b[A-Za-z])\.\s+(?=[A-Z])")

# Type, highest priority first
SETTLEMENT_RE = re.compile(r"settlement|settled|agree[ds]?\s+to\s+pay|consent\s+decree", re.IGNORECASE)
FINE_RE = re.compile(r"\bfine[sd]?\b|penalt(?:y|ies)|sanction|civil\s+money\s+penalty", re.IGNORECASE)
INVESTIGATION_RE = re.compile(
    r"investigation|subpoena|inquiry|examining|\b(?:SEC|DOJ)\b.*investigating",
    re.IGNORECASE,
)

# Category, highest priority first. Agency acronyms are case-sensitive so
# "SEC" does not fire on "second" or "securities".
REGULATORY_ACRONYM_RE = re.compile(r"\b(?:SEC|CFPB|OCC|FTC|DOJ)\b")
REGULATORY_RE = re.compile(
    r"Department\s+of\s+Justice|Securities\s+and\s+Exchange|Federal\s+Trade\s+Commission"
    r"|Office\s+of\s+the\s+Comptroller|Consumer\s+Financial\s+Protection",
    re.IGNORECASE,
)
CLASS_ACTION_RE = re.compile(
    r"class\s+action|securities\s+fraud|shareholder.*lawsuit|derivative\s+action|consumer\s+protection.*class",
    re.IGNORECASE,
)
EMPLOYMENT_RE = re.compile(
    r"employment|discrimination|wrongful\s+termination|\bEEOC\b|Equal\s+Employment|labor\s+dispute|wage\s+and\s+hour",
    re.IGNORECASE,
)
COMMERCIAL_RE = re.compile(
    r"breach\s+of\s+contract|intellectual\s+property|patent|trademark|copyright|licensing\s+dispute|vendor\s+dispute",
    re.IGNORECASE,
)

IT_RELATED_RE = re.compile(
    r"data\s+breach|cybersecurity|cyber.attack|system\s+failure|technology|software|IT\s+infrastructure"
    r"|network|database|server|cloud|ransomware|hacking|phishing|information\s+security",
    re.IGNORECASE,
)

CASE_DATE_PATTERNS = [
    r"filed\s+(?:in|on)\s+([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})",
    r"filed\s+(?:in|on)\s+(\d{4})",
    r"in\s+(Q[1-4]\s+\d{4})",
]

_SUFFIXES = {
    "b": (1e9, "B"),
    "m": (1e6, "M"),
    "k": (1e3, "K"),
    "t": (1e3, "K"),  # thousand
}


def _format_number(num: float, thousands: bool) -> str:
    if num == int(num):
        num = int(num)
    return f"{num:,}" if thousands else f"{num}"


def parse_monetary_amount(amount_str: str) -> tuple[str, float]:
    """
    Normalize a dollar amount string.

    Returns (formatted, dollars):
        "$1.5 million" -> ("$1.5M", 1500000.0)
        "$2B"          -> ("$2B", 2000000000.0)
        "$1,250"       -> ("$1,250", 1250.0)
    """
    match = _AMOUNT_PARTS_RE.search(amount_str or "")
    if not match:
        return "$0", 0.0

    num = float(match.group(1).replace(",", ""))
    suffix_word = (match.group(2) or "").lower()
    if not suffix_word:
        return f"${_format_number(num, thousands=True)}", num

    multiplier, suffix = _SUFFIXES[suffix_word[0]]
    return f"${_format_number(num, thousands=False)}{suffix}", num * multiplier


def categorize_legal_case(text: str) -> str:
    """First matching category group wins."""
    if REGULATORY_ACRONYM_RE.search(text) or REGULATORY_RE.search(text):
        return "Regulatory"
    if CLASS_ACTION_RE.search(text):
        return "Class Action"
    if EMPLOYMENT_RE.search(text):
        return "Employment"
    if COMMERCIAL_RE.search(text):
        return "Commercial"
    return "Other"


def classify_legal_type(text: str) -> str:
    if SETTLEMENT_RE.search(text):
        return "settlement"
    if FINE_RE.search(text):
        return "fine"
    if INVESTIGATION_RE.search(text):
        return "investigation"
    return "litigation"


def is_it_related_case(text: str) -> bool:
    return bool(IT_RELATED_RE.search(text))


def extract_case_date(text: str) -> Optional[str]:
    """'filed on January 15, 2023', 'filed in 2023', 'in Q4 2022'."""
    for pattern in CASE_DATE_PATTERNS:
        match = re.search(pattern, text, re.IGNORECASE)
        if match:
            return match.group(1)
    return None


def _largest_amount(text: str) -> tuple[Optional[str], Optional[float]]:
    amounts = [parse_monetary_amount(m.group(0)) for m in DOLLAR_AMOUNT_RE.finditer(text)]
    if not amounts:
        return None, None
    formatted, dollars = max(amounts, key=lambda a: a[1])
    return formatted, dollars


def _describe(chunk: str) -> str:
    first = _FIRST_SENTENCE_RE.match(chunk)
    sentence = first.group(0) if first else chunk[:250]
    if len(sentence) < len(chunk):
        sentence += "..."
    return sentence.strip()


def parse_legal_proceedings(text: Optional[str]) -> list[LegalProceeding]:
    """Parse a legal proceedings section. None or boilerplate -> []."""
    if not text:
        return []

    if NO_PROCEEDINGS_RE.search(text[:200]):
        return []

    proceedings: list[LegalProceeding] = []
    for chunk in _SENTENCE_BREAK_RE.split(text):
        cleaned = chunk.strip()
        if len(cleaned) < MIN_CHUNK_LENGTH:
            continue
        if not STRONG_INDICATOR_RE.search(cleaned):
            continue

        amount, amount_in_dollars = _largest_amount(cleaned)
        proceedings.append(LegalProceeding(
            description=_describe(cleaned),
            amount=amount,
            amount_in_dollars=amount_in_dollars,
            type=classify_legal_type(cleaned),
            category=categorize_legal_case(cleaned),
            is_it_related=is_it_related_case(cleaned),
            filed_date=extract_case_date(cleaned),
        ))

        if len(proceedings) >= MAX_PROCEEDINGS:
            break

    return proceedings
