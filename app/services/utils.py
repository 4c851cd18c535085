"""
Shared helpers
==============

Small, dependency-free helpers used by several filing parsers.

USAGE
-----
    from app.services.utils import (
        parse_date,        # SEC date strings -> date
        format_currency,   # 2.5e9 -> "$2.50B"
        format_compact,    # 2.5e9 -> "$2.5B"
    )
"""

import re
from datetime import date, datetime
from typing import Optional

__all__ = [
    'parse_date',
    'format_currency',
    'format_compact',
]


# =============================================================================
# DATE PARSING
# =============================================================================

_DATE_FORMATS = [
    "%Y-%m-%d",      # 2025-12-31 (EDGAR JSON)
    "%Y/%m/%d",      # 2025/12/31
    "%m/%d/%Y",      # 12/31/2025
    "%m-%d-%Y",      # 12-31-2025
    "%B %d, %Y",     # December 31, 2025 (filing prose)
    "%b %d, %Y",     # Dec 31, 2025
    "%B %d %Y",      # December 31 2025
    "%d %B %Y",      # 31 December 2025
    "%Y%m%d",        # 20251231
]


def parse_date(date_str: Optional[str]) -> Optional[date]:
    """
    Parse a date string from EDGAR JSON or filing prose.

    RETURNS
    -------
    date or None
        None when no known format matches. A bare year ("2025") maps to
        December 31 of that year.

    EXAMPLES
    --------
        parse_date("2025-12-31")         # date(2025, 12, 31)
        parse_date("December 31, 2025")  # date(2025, 12, 31)
        parse_date("sometime")           # None
    """
    if not date_str:
        return None

    date_str = " ".join(str(date_str).split())

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue

    year_match = re.match(r'^(\d{4})$', date_str)
    if year_match:
        return date(int(year_match.group(1)), 12, 31)

    return None


# =============================================================================
# MONEY FORMATTING
# =============================================================================

_SCALES = [
    (1e12, "T"),
    (1e9, "B"),
    (1e6, "M"),
    (1e3, "K"),
]


def format_currency(value: float) -> str:
    """Two-decimal scaled dollars: 394328000000 -> "$394.33B", 950 -> "$950.00"."""
    sign = "-" if value < 0 else ""
    magnitude = abs(value)
    for threshold, suffix in _SCALES:
        if magnitude >= threshold:
            return f"{sign}${magnitude / threshold:.2f}{suffix}"
    return f"{sign}${magnitude:.2f}"


def format_compact(value: float) -> str:
    """One-decimal scaled dollars for exposure totals: 1.5e9 -> "$1.5B"."""
    for threshold, suffix in _SCALES[1:]:
        if value >= threshold:
            return f"${value / threshold:.1f}{suffix}"
    return f"${value:.0f}"
