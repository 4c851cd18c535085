"""
Strategic Priority Parser.

Finds forward-looking technology investment statements in MD&A text. A
sentence counts for a category only when it carries BOTH an intent phrase
(investing, planning, modernizing, ...) and a technology phrase for that
category; a purely descriptive mention of "cloud" does not qualify. The
first category (in the order below) that matches a sentence wins.
"""

import re
from dataclasses import dataclass
from typing import Optional

from app.models import StrategicPriority

MAX_COLLECTED = 8
MAX_RETURNED = 5
MIN_SENTENCE = 50
MAX_SENTENCE = 500
MAX_STATEMENT = 300


@dataclass(frozen=True)
class PriorityPattern:
    category: str
    intent: re.Pattern
    tech: re.Pattern
    service: str
    alignment: str


def _re(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


PRIORITY_PATTERNS: tuple[PriorityPattern, ...] = (
    PriorityPattern(
        "Cloud",
        _re(r"invest(?:ing|ment)?|plan(?:ning)?|initiative|focus|priority|commitment"),
        _re(r"cloud|\bAWS\b|\bAzure\b|\bGCP\b|cloud.?based|cloud.?native|cloud.?migration|\bSaaS\b"),
        "Cloud Services",
        "DIRECT MATCH",
    ),
    PriorityPattern(
        "Legacy Modernization",
        _re(r"moderniz(?:e|ing|ation)|upgrad(?:e|ing)|replac(?:e|ing)|transform(?:ing|ation)?|migrat(?:e|ing|ion)"),
        _re(r"legacy|mainframe|outdated|aging.?systems|on.?premise|monolithic"),
        "Legacy Modernization",
        "DIRECT MATCH",
    ),
    PriorityPattern(
        "Cybersecurity",
        _re(r"invest(?:ing|ment)?|enhanc(?:e|ing)|strengthen(?:ing)?|improv(?:e|ing)|priority"),
        _re(r"cybersecurity|security|threat|breach|protection|zero.?trust|security.?posture"),
        "Security Services",
        "DIRECT MATCH",
    ),
    PriorityPattern(
        "AI/Automation",
        _re(r"implement(?:ing)?|deploy(?:ing)?|adopt(?:ing)?|invest(?:ing|ment)?|initiative"),
        _re(r"artificial.?intelligence|machine.?learning|(?-i:\bAI\b)|automation|\bRPA\b|intelligent.?automation"),
        "AI/Automation Services",
        "DIRECT MATCH",
    ),
    PriorityPattern(
        "Digital Transformation",
        _re(r"transform(?:ing|ation)?|digital(?:iz)?(?:e|ing|ation)?|moderniz(?:e|ing|ation)"),
        _re(r"digital|platform|\bAPIs?\b|microservices|agile|DevOps"),
        "Digital Transformation",
        "DIRECT MATCH",
    ),
    PriorityPattern(
        "Infrastructure",
        _re(r"invest(?:ing|ment)?|upgrad(?:e|ing)|expand(?:ing)?|enhanc(?:e|ing)"),
        _re(r"infrastructure|data.?center|network|connectivity|bandwidth"),
        "Infrastructure Services",
        "ADJACENT OPPORTUNITY",
    ),
)

BUDGET_RE = re.compile(r"\$\s*(\d+(?:,\d{3})*(?:\.\d+)?)\s*(million|billion|M\b|B\b)", re.IGNORECASE)


def extract_budget(sentence: str) -> Optional[str]:
    """'$250 million' -> '$250M', '$1.2 billion' -> '$1.2B'."""
    match = BUDGET_RE.search(sentence)
    if not match:
        return None
    return f"${match.group(1)}{match.group(2)[0].upper()}"


def match_priority(sentence: str) -> Optional[PriorityPattern]:
    for pattern in PRIORITY_PATTERNS:
        if pattern.intent.search(sentence) and pattern.tech.search(sentence):
            return pattern
    return None


def parse_strategic_priorities(
    mda_text: Optional[str],
    filing_type: str,
    filing_date: str,
) -> list[StrategicPriority]:
    """Up to 5 technology priorities from MD&A sentences of 50-500 chars."""
    if not mda_text:
        return []

    priorities: list[StrategicPriority] = []
    for sentence in re.split(r"\.\s+", mda_text):
        if len(sentence) < MIN_SENTENCE or len(sentence) > MAX_SENTENCE:
            continue

        pattern = match_priority(sentence)
        if pattern is None:
            continue

        statement = sentence.strip()
        if len(statement) > MAX_STATEMENT:
            statement = statement[:MAX_STATEMENT] + "..."

        duplicate = any(
            p.category == pattern.category and p.statement[:100] == statement[:100]
            for p in priorities
        )
        if not duplicate:
            priorities.append(StrategicPriority(
                statement=statement,
                category=pattern.category,
                budget_mentioned=extract_budget(sentence),
                filing_type=filing_type,
                filing_date=filing_date,
                service_alignment=pattern.alignment,
                service_category=pattern.service,
            ))

        if len(priorities) >= MAX_COLLECTED:
            break

    return priorities[:MAX_RETURNED]
