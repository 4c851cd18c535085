"""
Risk factor extraction and categorization (10-K Item 1A).

Two independent passes over the same section text:

- extract_risk_factors(): short risk statements for display, technology
  risks first.
- process_risk_factors(): paragraphs tagged with a technology-sales
  category, scored by keyword density, paired with a sales angle.

Category assignment is first-match in a fixed order, not best-match: a
paragraph mentioning both cybersecurity and cloud migration is Security
because Security is tested before Cloud.
"""

import re
from dataclasses import dataclass
from typing import Optional

from app.models import ProcessedRisk

MAX_RAW_COLLECTED = 8
MAX_RAW_RETURNED = 5
MAX_PROCESSED = 5

TECH_RISK_RE = re.compile(
    r"cybersecurity|cyber.attack|data breach|information security|IT systems|technology infrastructure"
    r"|system failure|network|software|digital|cloud|ransomware|hacking",
    re.IGNORECASE,
)
GENERAL_RISK_RE = re.compile(
    r"risk|may adversely|could adversely|failure to|unable to|depend on|reliance on|subject to|vulnerable|exposure",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RiskCategory:
    name: str
    patterns: tuple[re.Pattern, ...]
    sales_angle: str


def _patterns(*words: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(w, re.IGNORECASE) for w in words)


# Order matters: the first category with any hit claims the paragraph
RISK_CATEGORIES: tuple[RiskCategory, ...] = (
    RiskCategory(
        "Legacy Tech",
        _patterns(r"legacy system", r"outdated technology", r"legacy infrastructure", r"aging systems", r"obsolete"),
        "Legacy system modernization and migration services",
    ),
    RiskCategory(
        "Security",
        _patterns(r"cybersecurity", r"data breach", r"security incident", r"cyber.attack", r"ransomware",
                  r"hacking", r"information security"),
        "Enhanced cybersecurity solutions and threat protection",
    ),
    RiskCategory(
        "Cloud",
        _patterns(r"cloud migration", r"digital transformation", r"modernization", r"cloud computing", r"cloud.based"),
        "Cloud migration and digital transformation consulting",
    ),
    RiskCategory(
        "Integration",
        _patterns(r"system integration", r"technology integration", r"interoperability", r"data silos"),
        "System integration and data unification services",
    ),
    RiskCategory(
        "Compliance",
        _patterns(r"regulatory compliance", r"data privacy", r"GDPR", r"CCPA", r"compliance requirements",
                  r"regulatory changes"),
        "Compliance automation and regulatory tech solutions",
    ),
    RiskCategory(
        "Resilience",
        _patterns(r"operational resilience", r"system failure", r"downtime", r"business continuity",
                  r"disaster recovery"),
        "Business continuity and resilience infrastructure",
    ),
)


def _risk_statement(chunk: str) -> str:
    header = re.match(r"^([A-Z][^.]+\.)", chunk)
    if header:
        statement = header.group(1)
    else:
        statement = ". ".join(re.split(r"\.\s+", chunk)[:2]).rstrip(".") + "."

    if len(statement) > 400:
        statement = statement[:400] + "..."
    return statement.strip()


def extract_risk_factors(text: Optional[str]) -> list[str]:
    """
    Up to 5 short risk statements, technology risks first.

    Chunks are blank-line separated blocks of 100-1000 chars that contain a
    general or technology risk phrase. Collection stops at 8.
    """
    if not text:
        return []

    risks: list[str] = []
    for section in re.split(r"(?:\n\s*){2,}(?=[A-Z])", text):
        cleaned = section.strip()
        if len(cleaned) < 100 or len(cleaned) > 1000:
            continue

        is_tech_risk = bool(TECH_RISK_RE.search(cleaned))
        if not is_tech_risk and not GENERAL_RISK_RE.search(cleaned):
            continue

        statement = _risk_statement(cleaned)
        if is_tech_risk:
            risks.insert(0, statement)
        else:
            risks.append(statement)

        if len(risks) >= MAX_RAW_COLLECTED:
            break

    return risks[:MAX_RAW_RETURNED]


def _excerpt(paragraph: str, patterns: tuple[re.Pattern, ...]) -> str:
    sentences = re.split(r"\.\s+", paragraph)
    excerpt = ""
    for i, sentence in enumerate(sentences):
        if any(p.search(sentence) for p in patterns):
            excerpt = ". ".join(sentences[i:i + 3])
            break
    if not excerpt:
        excerpt = ". ".join(sentences[:3])
    excerpt = excerpt.rstrip(".") + "."

    if len(excerpt) > 500:
        excerpt = excerpt[:500] + "..."
    return excerpt


def categorize_paragraph(paragraph: str) -> Optional[tuple[RiskCategory, list[str]]]:
    """First category in RISK_CATEGORIES order with a keyword hit, plus every hit."""
    for category in RISK_CATEGORIES:
        hits = [m.group(0).lower() for p in category.patterns for m in p.finditer(paragraph)]
        if hits:
            return category, hits
    return None


def process_risk_factors(text: Optional[str], filing_date: str) -> list[ProcessedRisk]:
    """Categorize risk paragraphs; top 5 by relevance score."""
    if not text:
        return []

    paragraphs = [p.strip() for p in re.split(r"\n\s*\n+", text)]
    risks: list[ProcessedRisk] = []

    for paragraph in paragraphs:
        if len(paragraph) <= 100:
            continue

        result = categorize_paragraph(paragraph)
        if result is None:
            continue
        category, hits = result

        risks.append(ProcessedRisk(
            category=category.name,
            excerpt=_excerpt(paragraph, category.patterns),
            keywords=list(dict.fromkeys(hits)),
            sales_angle=category.sales_angle,
            relevance_score=len(hits) * 10 + (5 if len(paragraph) > 300 else 0),
            filing_date=filing_date,
        ))

    risks.sort(key=lambda r: r.relevance_score, reverse=True)
    return risks[:MAX_PROCESSED]
