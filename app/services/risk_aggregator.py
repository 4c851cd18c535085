"""
Risk aggregation.

Roll-ups computed from already-parsed filing signals:

- calculate_legal_exposure(): totals and a risk level for a list of legal
  proceedings, relative to annual revenue when known
- generate_pain_signals(): short human-readable pain points for sellers

Both are pure functions of their inputs, so re-running them on the same
proceedings yields the same summary.
"""

import re
from typing import Optional

from app.models import LegalExposureSummary, LegalProceeding
from app.services.utils import format_compact

MAX_PAIN_SIGNALS = 5

# Dollar thresholds used when revenue is unknown
ABSOLUTE_HIGH = 100e6
ABSOLUTE_MEDIUM = 10e6


def calculate_legal_exposure(
    proceedings: list[LegalProceeding],
    annual_revenue: Optional[float] = None,
) -> LegalExposureSummary:
    """
    Aggregate legal exposure.

    With revenue: > 5% CRITICAL, > 2% HIGH, > 1% MEDIUM, else LOW; material
    above 1%. Without revenue: > $100M HIGH, > $10M MEDIUM, else LOW; never
    CRITICAL or material.
    """
    total_exposure = sum(p.amount_in_dollars or 0 for p in proceedings)

    risk_level = "LOW"
    is_material = False
    revenue_percentage = None

    if annual_revenue and annual_revenue > 0:
        basis = "revenue"
        revenue_percentage = total_exposure / annual_revenue * 100
        is_material = revenue_percentage > 1
        if revenue_percentage > 5:
            risk_level = "CRITICAL"
        elif revenue_percentage > 2:
            risk_level = "HIGH"
        elif revenue_percentage > 1:
            risk_level = "MEDIUM"
    else:
        basis = "absolute"
        if total_exposure > ABSOLUTE_HIGH:
            risk_level = "HIGH"
        elif total_exposure > ABSOLUTE_MEDIUM:
            risk_level = "MEDIUM"

    return LegalExposureSummary(
        total_cases=len(proceedings),
        total_exposure=total_exposure,
        total_exposure_formatted=format_compact(total_exposure),
        it_related_cases=sum(1 for p in proceedings if p.is_it_related),
        regulatory_cases=sum(1 for p in proceedings if p.category == "Regulatory"),
        risk_level=risk_level,
        is_material_risk=is_material,
        revenue_percentage=revenue_percentage,
        revenue_basis=basis,
    )


TECH_SIGNAL_RE = re.compile(
    r"cybersecurity|technology|(?-i:\bIT\b)|infrastructure|digital|data breach|system",
    re.IGNORECASE,
)
REGULATORY_SIGNAL_RE = re.compile(
    r"regulatory|compliance|(?-i:\bSEC\b)|government|\blaws?\b|regulation",
    re.IGNORECASE,
)


def generate_pain_signals(
    legal_proceedings: list[LegalProceeding],
    risk_factors: list[str],
) -> list[str]:
    """Up to 5 pain signals, legal first, then risk-factor based."""
    signals: list[str] = []

    amounts = [p.amount for p in legal_proceedings if p.amount]
    if amounts:
        signals.append(f"Active legal exposure: {', '.join(amounts)} in disclosed proceedings")

    investigations = sum(1 for p in legal_proceedings if p.type == "investigation")
    if investigations:
        signals.append(f"{investigations} active regulatory investigation(s) disclosed")

    settlements = sum(1 for p in legal_proceedings if p.type == "settlement")
    if settlements:
        signals.append(f"{settlements} recent settlement(s) - compliance remediation likely needed")

    if risk_factors:
        signals.append(f"{len(risk_factors)} material risk factors disclosed in latest filing")
        if any(TECH_SIGNAL_RE.search(r) for r in risk_factors):
            signals.append("Technology risk identified: Cybersecurity/IT infrastructure concerns disclosed")
        if any(REGULATORY_SIGNAL_RE.search(r) for r in risk_factors):
            signals.append("Regulatory compliance risk: Active monitoring of evolving regulations required")

    return signals[:MAX_PAIN_SIGNALS]
