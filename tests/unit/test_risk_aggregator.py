"""
Unit tests for legal exposure aggregation and pain signals.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.models import LegalProceeding
from app.services.risk_aggregator import calculate_legal_exposure, generate_pain_signals


def _proceeding(dollars=None, amount=None, type="litigation", category="Other", it=False):
    return LegalProceeding(
        description="A proceeding.",
        amount=amount,
        amount_in_dollars=dollars,
        type=type,
        category=category,
        is_it_related=it,
    )


class TestLegalExposure:
    """Tests for calculate_legal_exposure."""

    @pytest.mark.unit
    def test_revenue_relative_high(self):
        summary = calculate_legal_exposure([_proceeding(50_000_000)], annual_revenue=2_000_000_000)

        assert summary.total_cases == 1
        assert summary.total_exposure == 50_000_000
        assert summary.total_exposure_formatted == "$50.0M"
        assert summary.revenue_percentage == 2.5
        assert summary.risk_level == "HIGH"
        assert summary.is_material_risk is True
        assert summary.revenue_basis == "revenue"

    @pytest.mark.unit
    @pytest.mark.parametrize("exposure,revenue,level,material", [
        (60_000_000, 1_000_000_000, "CRITICAL", True),
        (50_000_000, 10_000_000_000, "LOW", False),
    ])
    def test_critical_and_low(self, exposure, revenue, level, material):
        summary = calculate_legal_exposure([_proceeding(exposure)], annual_revenue=revenue)
        assert summary.risk_level == level
        assert summary.is_material_risk is material

    @pytest.mark.unit
    @pytest.mark.parametrize("percent,level", [
        (5, "HIGH"),
        (2, "MEDIUM"),
        (1, "LOW"),
    ])
    def test_thresholds_are_strict(self, percent, level):
        summary = calculate_legal_exposure([_proceeding(percent * 1_000_000)], annual_revenue=100_000_000)
        assert summary.risk_level == level

    @pytest.mark.unit
    def test_one_percent_is_not_material(self):
        summary = calculate_legal_exposure([_proceeding(1_000_000)], annual_revenue=100_000_000)
        assert summary.is_material_risk is False

    @pytest.mark.unit
    @pytest.mark.parametrize("exposure,level", [
        (150_000_000, "HIGH"),
        (100_000_000, "MEDIUM"),
        (50_000_000, "MEDIUM"),
        (10_000_000, "LOW"),
    ])
    def test_absolute_fallback(self, exposure, level):
        summary = calculate_legal_exposure([_proceeding(exposure)])
        assert summary.risk_level == level
        assert summary.is_material_risk is False
        assert summary.revenue_percentage is None
        assert summary.revenue_basis == "absolute"

    @pytest.mark.unit
    def test_zero_revenue_uses_absolute(self):
        summary = calculate_legal_exposure([_proceeding(150_000_000)], annual_revenue=0)
        assert summary.revenue_basis == "absolute"
        assert summary.risk_level == "HIGH"

    @pytest.mark.unit
    def test_counts(self):
        proceedings = [
            _proceeding(1_000_000, category="Regulatory", it=True),
            _proceeding(None, category="Regulatory"),
            _proceeding(2_000_000, it=True),
        ]
        summary = calculate_legal_exposure(proceedings)

        assert summary.total_cases == 3
        assert summary.total_exposure == 3_000_000
        assert summary.it_related_cases == 2
        assert summary.regulatory_cases == 2

    @pytest.mark.unit
    def test_no_proceedings(self):
        summary = calculate_legal_exposure([], annual_revenue=1_000_000_000)
        assert summary.total_cases == 0
        assert summary.total_exposure_formatted == "$0"
        assert summary.risk_level == "LOW"

    @pytest.mark.unit
    def test_recomputation_is_stable(self):
        proceedings = [_proceeding(50_000_000), _proceeding(5_000_000)]
        first = calculate_legal_exposure(proceedings, 2_000_000_000)
        second = calculate_legal_exposure(proceedings, 2_000_000_000)
        assert first == second


class TestPainSignals:
    """Tests for generate_pain_signals."""

    @pytest.mark.unit
    def test_legal_and_risk_signals(self):
        signals = generate_pain_signals(
            [_proceeding(50_000_000, amount="$50M")],
            ["Cybersecurity risks.", "Economic conditions."],
        )
        assert signals == [
            "Active legal exposure: $50M in disclosed proceedings",
            "2 material risk factors disclosed in latest filing",
            "Technology risk identified: Cybersecurity/IT infrastructure concerns disclosed",
        ]

    @pytest.mark.unit
    def test_investigations_and_settlements(self):
        proceedings = [
            _proceeding(type="investigation"),
            _proceeding(type="investigation"),
            _proceeding(2_000_000, amount="$2M", type="settlement"),
        ]
        signals = generate_pain_signals(proceedings, [])
        assert signals == [
            "Active legal exposure: $2M in disclosed proceedings",
            "2 active regulatory investigation(s) disclosed",
            "1 recent settlement(s) - compliance remediation likely needed",
        ]

    @pytest.mark.unit
    def test_capped_at_five(self):
        proceedings = [
            _proceeding(1_000_000, amount="$1M", type="investigation"),
            _proceeding(2_000_000, amount="$2M", type="settlement"),
        ]
        risks = ["Cybersecurity threats.", "New regulation may apply."]
        signals = generate_pain_signals(proceedings, risks)

        assert len(signals) == 5
        assert signals[0] == "Active legal exposure: $1M, $2M in disclosed proceedings"
        assert not any(s.startswith("Regulatory compliance risk") for s in signals)

    @pytest.mark.unit
    def test_regulatory_signal(self):
        signals = generate_pain_signals([], ["Changes in laws may affect our margins."])
        assert signals[-1] == "Regulatory compliance risk: Active monitoring of evolving regulations required"

    @pytest.mark.unit
    def test_acronyms_are_case_sensitive(self):
        """'it' and 'second' are ordinary words, not IT or the SEC."""
        signals = generate_pain_signals([], ["If it rains in the second half, sales fall."])
        assert signals == ["1 material risk factors disclosed in latest filing"]

    @pytest.mark.unit
    def test_nothing_to_report(self):
        assert generate_pain_signals([], []) == []
