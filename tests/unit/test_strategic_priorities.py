"""
Unit tests for MD&A strategic priority detection.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from app.services.strategic_priorities import extract_budget, match_priority, parse_strategic_priorities


class TestMatchPriority:

    @pytest.mark.unit
    def test_needs_intent_and_technology(self):
        """A descriptive mention of cloud is not a priority."""
        assert match_priority("Our cloud revenue grew 20% year over year driven by new customers in Europe") is None

    @pytest.mark.unit
    def test_first_category_wins(self):
        pattern = match_priority("We are investing in cybersecurity tooling to protect our cloud workloads")
        assert pattern.category == "Cloud"

    @pytest.mark.unit
    def test_legacy_modernization(self):
        pattern = match_priority("We are replacing our mainframe billing platform over the next two years")
        assert pattern.category == "Legacy Modernization"

    @pytest.mark.unit
    def test_ai_acronym_is_case_sensitive(self):
        assert match_priority("We are implementing new AI capabilities across our contact centers").category == "AI/Automation"
        assert match_priority("We are implementing new retail capabilities across our stores") is None

    @pytest.mark.unit
    def test_infrastructure_is_adjacent(self):
        pattern = match_priority("We are expanding our network capacity in the Midwest to support new stores")
        assert pattern.category == "Infrastructure"
        assert pattern.alignment == "ADJACENT OPPORTUNITY"


class TestExtractBudget:

    @pytest.mark.unit
    @pytest.mark.parametrize("sentence,expected", [
        ("investing $250 million in cloud", "$250M"),
        ("a $1.2 billion program", "$1.2B"),
        ("budget of $40M for tooling", "$40M"),
        ("spending $1,500 million overall", "$1,500M"),
        ("no amount disclosed", None),
    ])
    def test_budget(self, sentence, expected):
        assert extract_budget(sentence) == expected


class TestParseStrategicPriorities:

    @pytest.mark.unit
    def test_cloud_priority_with_budget(self):
        mda = (
            "We are investing $250 million in our cloud migration initiative to move core workloads to AWS "
            "during 2026. Capital expenditures were $1.2 billion in 2025, primarily for data center capacity."
        )
        priorities = parse_strategic_priorities(mda, "10-K", "2026-02-20")

        assert len(priorities) == 1
        priority = priorities[0]
        assert priority.category == "Cloud"
        assert priority.statement == (
            "We are investing $250 million in our cloud migration initiative to move core workloads to AWS during 2026"
        )
        assert priority.budget_mentioned == "$250M"
        assert priority.filing_type == "10-K"
        assert priority.filing_date == "2026-02-20"
        assert priority.service_alignment == "DIRECT MATCH"
        assert priority.service_category == "Cloud Services"

    @pytest.mark.unit
    def test_sentence_length_bounds(self):
        short = "We plan cloud work"
        long = "We plan to expand cloud adoption " + "across every business unit " * 20
        assert parse_strategic_priorities(f"{short}. {long}", "10-K", "2026-02-20") == []

    @pytest.mark.unit
    def test_statement_truncated(self):
        sentence = "We are investing in cloud platforms " + "for every regional business unit " * 10
        assert 300 < len(sentence) <= 500
        statement = parse_strategic_priorities(sentence, "10-Q", "2026-08-01")[0].statement
        assert statement.endswith("...")
        assert len(statement) == 303

    @pytest.mark.unit
    def test_duplicates_collapse(self):
        sentence = "We are investing in our cloud migration initiative across all regions"
        priorities = parse_strategic_priorities(f"{sentence}. {sentence}","10-K", "2026-02-20")
        assert len(priorities) == 1

    @pytest.mark.unit
    def test_returns_at_most_five(self):
        mda = ". ".join(
            f"Initiative {n} is investing in cloud capabilities for business unit number {n}"
            for n in range(8)
        )
        assert len(parse_strategic_priorities(mda, "10-K", "2026-02-20")) == 5

    @pytest.mark.unit
    def test_empty_input(self):
        assert parse_strategic_priorities(None, "10-K", "2026-02-20") == []
