"""
Unit tests for risk factor extraction and categorization.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.services.risk_factors import categorize_paragraph, extract_risk_factors, process_risk_factors


CYBER = (
    "Cybersecurity risks. A breach of our information systems could disrupt operations, expose "
    "customer data and subject us to liability."
)
ECONOMY = (
    "Economic conditions. Declines in customer spending may adversely affect demand for our "
    "products and reduce our revenue in future periods."
)
SOFTWARE = (
    "Third-party software. We license software from vendors whose products may contain defects "
    "that we are unable to detect before deployment."
)


class TestExtractRiskFactors:
    """Short risk statements, technology risks first."""

    @pytest.mark.unit
    def test_header_sentence_used_as_statement(self):
        assert extract_risk_factors(ECONOMY) == ["Economic conditions."]

    @pytest.mark.unit
    def test_technology_risks_move_to_front(self):
        text = "\n\n".join([CYBER, ECONOMY, SOFTWARE])
        assert extract_risk_factors(text) == [
            "Third-party software.",
            "Cybersecurity risks.",
            "Economic conditions.",
        ]

    @pytest.mark.unit
    def test_chunk_length_bounds(self):
        too_short = "Short risk. It may adversely affect us."
        too_long = "Long risk. " + "This may adversely affect results. " * 40
        assert extract_risk_factors("\n\n".join([too_short, too_long])) == []

    @pytest.mark.unit
    def test_chunks_without_risk_language_ignored(self):
        text = (
            "Company history. We were incorporated in Delaware and our headquarters are located in "
            "Seattle, Washington, where we lease office space."
        )
        assert extract_risk_factors(text) == []

    @pytest.mark.unit
    def test_returns_at_most_five(self):
        paragraphs = [
            f"Risk number {n}. Changes in market conditions may adversely affect our results of "
            f"operations and financial condition in period {n}."
            for n in range(10)
        ]
        risks = extract_risk_factors("\n\n".join(paragraphs))
        assert len(risks) == 5
        assert risks[0] == "Risk number 0."

    @pytest.mark.unit
    def test_empty_input(self):
        assert extract_risk_factors(None) == []


class TestProcessRiskFactors:
    """Categorized, scored risk paragraphs."""

    @pytest.mark.unit
    def test_first_category_in_order_wins(self):
        """Security is tested before Cloud, so a paragraph with both is Security."""
        paragraph = (
            "A cybersecurity lapse during our cloud migration could expose sensitive data and "
            "interrupt service to our largest customers for an extended period."
        )
        category, hits = categorize_paragraph(paragraph)
        assert category.name == "Security"
        assert hits == ["cybersecurity"]

    @pytest.mark.unit
    def test_excerpt_starts_at_first_keyword_sentence(self):
        paragraph = (
            "Our results depend on many factors. Ransomware attacks and hacking attempts against our "
            "systems are increasing. A successful attack could disrupt operations. We may incur "
            "significant costs. Other sentence here."
        )
        risks = process_risk_factors(paragraph, "2026-02-20")

        assert len(risks) == 1
        risk = risks[0]
        assert risk.category == "Security"
        assert risk.keywords == ["ransomware", "hacking"]
        assert risk.relevance_score == 20
        assert risk.excerpt == (
            "Ransomware attacks and hacking attempts against our systems are increasing. "
            "A successful attack could disrupt operations. We may incur significant costs."
        )
        assert risk.sales_angle == "Enhanced cybersecurity solutions and threat protection"
        assert risk.filing_date == "2026-02-20"

    @pytest.mark.unit
    def test_long_paragraph_bonus(self):
        paragraph = "Our legacy systems require ongoing maintenance. " + "Costs may rise over time. " * 12
        assert len(paragraph) > 300
        risk = process_risk_factors(paragraph, "2026-02-20")[0]
        assert risk.category == "Legacy Tech"
        assert risk.relevance_score == 15

    @pytest.mark.unit
    def test_sorted_by_score_and_capped(self):
        filler = " This could adversely affect our business and results of operations."
        paragraphs = [
            "We depend on disaster recovery procedures." + filler,
            "Data privacy and GDPR obligations apply. Regulatory changes add CCPA duties." + filler,
            "Interoperability gaps create data silos across our acquired businesses." + filler,
            "Downtime at our data centers hurts customers." + filler,
            "Outdated technology and obsolete hardware limit us." + filler,
            "Cloud computing adoption is slower than expected." + filler,
        ]
        risks = process_risk_factors("\n\n".join(paragraphs), "2026-02-20")

        assert len(risks) == 5
        assert risks[0].category == "Compliance"
        assert risks[0].relevance_score == 40
        scores = [r.relevance_score for r in risks]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.unit
    def test_short_and_unmatched_paragraphs_skipped(self):
        text = "Cybersecurity matters.\n\n" + (
            "General competition in our markets is intense and pricing pressure may reduce margins "
            "over the coming years."
        )
        assert process_risk_factors(text, "2026-02-20") == []

    @pytest.mark.unit
    def test_empty_input(self):
        assert process_risk_factors("", "2026-02-20") == []
