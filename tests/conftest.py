"""
Pytest configuration and fixtures for ProspectIntel tests.

Fixtures provide:
- A fixed "today" so day counts are deterministic
- Sample EDGAR payloads (ticker directory, submissions, company facts)
- Sample filing documents (10-K, 10-Q, 8-K)
- A respx router serving all of the above at the real EDGAR URLs
"""

import os
import sys
from datetime import date

import httpx
import pytest
import respx

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.services.sec_client import SECEdgarClient  # noqa: E402


CIK = "0001234567"
ACCESSION_10K = "0001234567-26-000010"
ACCESSION_10Q = "0001234567-26-000040"
ACCESSION_8K_APPOINTMENT = "0001234567-26-000050"
ACCESSION_8K_DEPARTURE = "0001234567-26-000020"


def filing_url(accession_number: str, cik: str = CIK) -> str:
    return f"{SECEdgarClient.ARCHIVES_URL}/{int(cik)}/{accession_number.replace('-', '')}/{accession_number}.txt"


SUBMISSIONS_URL = f"{SECEdgarClient.BASE_URL}/submissions/CIK{CIK}.json"
FACTS_URL = f"{SECEdgarClient.BASE_URL}/api/xbrl/companyfacts/CIK{CIK}.json"


# =============================================================================
# Sample Filing Documents
# =============================================================================

TEN_K_TEXT = """<SEC-DOCUMENT>0001234567-26-000010.txt : 20260220
<DOCUMENT>
<TYPE>10-K
<TEXT>
<html><body>
<p>ANNUAL REPORT PURSUANT TO SECTION 13 OR 15(d) OF THE SECURITIES EXCHANGE ACT OF 1934</p>
<p>For the fiscal year ended December 31, 2025</p>
<p>NORTHWIND SYSTEMS INC.</p>
<table>
<tr><td>Item 1A.</td><td>Risk Factors</td><td>12</td></tr>
<tr><td>Item 3.</td><td>Legal Proceedings</td><td>25</td></tr>
<tr><td>Item 7.</td><td>Management&#8217;s Discussion and Analysis</td><td>30</td></tr>
</table>
<p>PART I</p>
<p>ITEM 1A. RISK FACTORS</p>
<p>Cybersecurity risks. We rely on information technology systems and a cyber-attack or data breach could disrupt our operations and harm our reputation. Our ransomware defenses may not be sufficient to protect customer data.</p>
<p>Our legacy systems are aging and may be difficult to maintain. Failure to modernize our outdated technology could adversely affect our ability to compete in the market.</p>
<p>Economic conditions. Changes in interest rates and general economic conditions may adversely affect demand for our products and services across our markets.</p>
<p>ITEM 1B. UNRESOLVED STAFF COMMENTS</p>
<p>None.</p>
<p>ITEM 3. LEGAL PROCEEDINGS</p>
<p>A class action lawsuit seeking $50 million in damages was filed on March 3, 2025 against the Company in the United States District Court, alleging violations of federal securities laws. The Company believes the claims are without merit.</p>
<p>ITEM 4. MINE SAFETY DISCLOSURES</p>
<p>Not applicable.</p>
<p>PART II</p>
<p>ITEM 7. MANAGEMENT&#8217;S DISCUSSION AND ANALYSIS OF FINANCIAL CONDITION AND RESULTS OF OPERATIONS.</p>
<p>We are investing $250 million in our cloud migration initiative to move core workloads to AWS during 2026. Capital expenditures were $1.2 billion in 2025, primarily for data center capacity.</p>
<p>ITEM 8. FINANCIAL STATEMENTS AND SUPPLEMENTARY DATA</p>
</body></html>
</TEXT>
</DOCUMENT>
<DOCUMENT>
<TYPE>EX-21
<TEXT>
<p>ITEM 1A. RISK FACTORS exhibit text that must be ignored because it lives in an exhibit rather than the main filing body.</p>
</TEXT>
</DOCUMENT>
</SEC-DOCUMENT>
"""

TEN_Q_TEXT = """<DOCUMENT>
<TYPE>10-Q
<TEXT>
<html><body>
<p>PART I - FINANCIAL INFORMATION</p>
<p>ITEM 1. FINANCIAL STATEMENTS</p>
<p>Condensed consolidated balance sheets follow.</p>
<p>ITEM 2. MANAGEMENT&#8217;S DISCUSSION AND ANALYSIS OF FINANCIAL CONDITION AND RESULTS OF OPERATIONS.</p>
<p>We are implementing machine learning and automation tools across our claims operations to reduce processing costs. Revenue grew 4% year over year.</p>
<p>ITEM 3. QUANTITATIVE AND QUALITATIVE DISCLOSURES ABOUT MARKET RISK</p>
<p>PART II - OTHER INFORMATION</p>
<p>ITEM 1. LEGAL PROCEEDINGS</p>
<p>There are no material pending legal proceedings to which the Company is a party.</p>
<p>ITEM 1A. RISK FACTORS</p>
</body></html>
</TEXT>
</DOCUMENT>
"""

EIGHT_K_APPOINTMENT_TEXT = """<DOCUMENT>
<TYPE>8-K
<TEXT>
<html><body>
<p>Item 5.02 Departure of Directors or Certain Officers; Election of Directors; Appointment of Certain Officers.</p>
<p>On September 10, 2026, the Board of Directors of Northwind Systems Inc. appointed Jane Doe as Chief Information Officer, effective as of September 14, 2026.</p>
<p>Item 9.01 Financial Statements and Exhibits.</p>
</body></html>
</TEXT>
</DOCUMENT>
"""

EIGHT_K_DEPARTURE_TEXT = """<DOCUMENT>
<TYPE>8-K
<TEXT>
<html><body>
<p>Item 5.02 Departure of Directors or Certain Officers; Election of Directors; Appointment of Certain Officers.</p>
<p>On March 5, 2026, John Smith, the Company&#8217;s Chief Financial Officer, resigned from the Company to pursue other opportunities.</p>
<p>SIGNATURES</p>
</body></html>
</TEXT>
</DOCUMENT>
"""


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def today():
    """Fixed reference date for day-count assertions."""
    return date(2026, 10, 19)


@pytest.fixture
def tickers_payload():
    """company_tickers.json shape: object keyed by position."""
    return {
        "0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."},
        "1": {"cik_str": 1234567, "ticker": "NWSY", "title": "Northwind Systems Inc."},
        "2": {"cik_str": 7654321, "ticker": "GLBX", "title": "Globex Corporation"},
        "3": {"cik_str": 1111111, "ticker": "APLE", "title": "Apple Hospitality REIT, Inc."},
    }


@pytest.fixture
def submissions_payload():
    return {
        "cik": "1234567",
        "name": "Northwind Systems Inc.",
        "filings": {
            "recent": {
                "form": ["8-K", "10-Q", "8-K", "10-K", "8-K", "10-K"],
                "filingDate": ["2026-09-15", "2026-08-01", "2026-03-10", "2026-02-20", "2025-06-01", "2025-02-21"],
                "accessionNumber": [
                    ACCESSION_8K_APPOINTMENT,
                    ACCESSION_10Q,
                    ACCESSION_8K_DEPARTURE,
                    ACCESSION_10K,
                    "0001234567-25-000030",
                    "0001234567-25-000005",
                ],
                "reportDate": ["2026-09-10", "2026-06-30", "2026-03-05", "2025-12-31", "2025-05-28", "2024-12-31"],
            }
        },
    }


def _annual(start, end, val, filed):
    return {"start": start, "end": end, "val": val, "filed": filed, "form": "10-K", "fp": "FY"}


@pytest.fixture
def company_facts_payload():
    return {
        "cik": 1234567,
        "entityName": "Northwind Systems Inc.",
        "facts": {
            "us-gaap": {
                "Assets": {"units": {"USD": [
                    {"end": "2024-12-31", "val": 4_000_000_000, "filed": "2025-02-21", "form": "10-K", "fp": "FY"},
                    {"end": "2025-12-31", "val": 5_000_000_000, "filed": "2026-02-20", "form": "10-K", "fp": "FY"},
                ]}},
                "Liabilities": {"units": {"USD": [
                    {"end": "2025-12-31", "val": 2_500_000_000, "filed": "2026-02-20", "form": "10-K", "fp": "FY"},
                ]}},
                "CashAndCashEquivalentsAtCarryingValue": {"units": {"USD": [
                    {"end": "2025-12-31", "val": 750_000_000, "filed": "2026-02-20", "form": "10-K", "fp": "FY"},
                ]}},
                "RevenueFromContractWithCustomerExcludingAssessedTax": {"units": {"USD": [
                    _annual("2024-01-01", "2024-12-31", 1_800_000_000, "2025-02-21"),
                    _annual("2025-01-01", "2025-12-31", 2_000_000_000, "2026-02-20"),
                ]}},
                "NetIncomeLoss": {"units": {"USD": [
                    _annual("2025-01-01", "2025-12-31", 300_000_000, "2026-02-20"),
                ]}},
                "PaymentsToAcquirePropertyPlantAndEquipment": {"units": {"USD": [
                    _annual("2023-01-01", "2023-12-31", 90_000_000, "2024-02-22"),
                    _annual("2024-01-01", "2024-12-31", 100_000_000, "2025-02-21"),
                    # Same period restated in the next 10-K
                    _annual("2024-01-01", "2024-12-31", 100_000_000, "2026-02-20"),
                    _annual("2025-01-01", "2025-12-31", 125_000_000, "2026-02-20"),
                    # Fourth-quarter figure tagged FY inside the 10-K
                    _annual("2025-10-01", "2025-12-31", 40_000_000, "2026-02-20"),
                ]}},
            }
        },
    }


@pytest.fixture
def ten_k_text():
    return TEN_K_TEXT


@pytest.fixture
def ten_q_text():
    return TEN_Q_TEXT


@pytest.fixture
def eight_k_appointment_text():
    return EIGHT_K_APPOINTMENT_TEXT


@pytest.fixture
def eight_k_departure_text():
    return EIGHT_K_DEPARTURE_TEXT


# =============================================================================
# EDGAR Mock Fixtures
# =============================================================================

@pytest.fixture
def edgar_mock(tickers_payload, submissions_payload, company_facts_payload):
    """respx router answering every EDGAR URL the pipeline reads for NWSY."""
    with respx.mock(assert_all_called=False) as router:
        router.get(SECEdgarClient.TICKERS_URL, name="tickers").mock(
            return_value=httpx.Response(200, json=tickers_payload)
        )
        router.get(SUBMISSIONS_URL, name="submissions").mock(
            return_value=httpx.Response(200, json=submissions_payload)
        )
        router.get(FACTS_URL, name="facts").mock(
            return_value=httpx.Response(200, json=company_facts_payload)
        )
        router.get(filing_url(ACCESSION_10K), name="10-K").mock(
            return_value=httpx.Response(200, text=TEN_K_TEXT)
        )
        router.get(filing_url(ACCESSION_10Q), name="10-Q").mock(
            return_value=httpx.Response(200, text=TEN_Q_TEXT)
        )
        router.get(filing_url(ACCESSION_8K_APPOINTMENT), name="8-K-appointment").mock(
            return_value=httpx.Response(200, text=EIGHT_K_APPOINTMENT_TEXT)
        )
        router.get(filing_url(ACCESSION_8K_DEPARTURE), name="8-K-departure").mock(
            return_value=httpx.Response(200, text=EIGHT_K_DEPARTURE_TEXT)
        )
        yield router


@pytest.fixture
def edgar_client_factory():
    """SECEdgarClient without request spacing, for mocked transports."""
    def _create():
        return SECEdgarClient(user_agent="ProspectIntel tests test@example.com", request_delay=0)
    return _create
