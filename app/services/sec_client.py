"""
SEC EDGAR Client
================

Async client for the public SEC EDGAR endpoints the intelligence pipeline
reads. No API key required; SEC only asks for a descriptive User-Agent and
at most 10 requests/second.

ENDPOINTS
---------
- company_tickers.json: ticker / name / CIK directory
- submissions/CIK##########.json: filing history
- api/xbrl/companyfacts/CIK##########.json: XBRL financial facts
- Archives/edgar/data/{cik}/{accession}/{accession}.txt: full filing text

USAGE
-----
    from app.services.sec_client import SECEdgarClient

    async with SECEdgarClient(user_agent="MyApp me@example.com") as edgar:
        submissions = await edgar.get_company_filings("0000320193")
        text = await edgar.download_filing_text("0000320193", "0000320193-24-000123")

Every method raises httpx.HTTPError (or ValueError for a non-JSON body) on
failure. Callers decide whether a failure is fatal.
"""

import asyncio
import time
from typing import Optional

import httpx
import structlog

from app.core.config import get_settings

logger = structlog.get_logger()


class SECEdgarClient:
    """
    Client for fetching data directly from SEC EDGAR.

    USAGE
    -----
        edgar = SECEdgarClient()
        tickers = await edgar.get_company_tickers()
        await edgar.close()

    Requests are throttled through a semaphore plus a short delay so that
    concurrent 8-K scans stay under the SEC rate limit.
    """

    BASE_URL = "https://data.sec.gov"
    ARCHIVES_URL = "https://www.sec.gov/Archives/edgar/data"
    TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: Optional[float] = None,
        max_concurrency: Optional[int] = None,
        request_delay: Optional[float] = None,
        ticker_ttl_seconds: Optional[int] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        settings = get_settings()
        self.user_agent = user_agent or settings.sec_user_agent
        self.request_delay = settings.sec_request_delay_seconds if request_delay is None else request_delay
        self.ticker_ttl_seconds = (
            settings.ticker_directory_ttl_seconds if ticker_ttl_seconds is None else ticker_ttl_seconds
        )
        self._owns_client = http is None
        self.client = http or httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=timeout or settings.sec_timeout_seconds,
            follow_redirects=True,
        )
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.sec_max_concurrency)
        self._tickers: Optional[list[dict]] = None
        self._tickers_loaded_at = 0.0

    async def __aenter__(self) -> "SECEdgarClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client (only if this instance created it)."""
        if self._owns_client:
            await self.client.aclose()

    async def _get(self, url: str, accept: str = "application/json") -> httpx.Response:
        async with self._semaphore:
            if self.request_delay:
                await asyncio.sleep(self.request_delay)
            response = await self.client.get(
                url, headers={"User-Agent": self.user_agent, "Accept": accept}
            )
        response.raise_for_status()
        return response

    async def get_company_tickers(self) -> list[dict]:
        """
        Get the ticker directory as a list of {cik_str, ticker, title} entries.

        The published JSON is an object keyed "0", "1", ...; entry order is
        preserved. The directory is memoized on the client instance.
        """
        now = time.monotonic()
        if self._tickers is not None and now - self._tickers_loaded_at < self.ticker_ttl_seconds:
            return self._tickers

        response = await self._get(self.TICKERS_URL)
        data = response.json()
        entries = list(data.values()) if isinstance(data, dict) else list(data)

        self._tickers = entries
        self._tickers_loaded_at = now
        logger.info("sec.tickers.loaded", count=len(entries))
        return entries

    async def get_company_filings(self, cik: str) -> dict:
        """Get the submission history for a company by CIK."""
        cik_padded = cik.zfill(10)
        response = await self._get(f"{self.BASE_URL}/submissions/CIK{cik_padded}.json")
        return response.json()

    async def get_company_facts(self, cik: str) -> dict:
        """Get XBRL company facts (financial statement values) by CIK."""
        cik_padded = cik.zfill(10)
        response = await self._get(f"{self.BASE_URL}/api/xbrl/companyfacts/CIK{cik_padded}.json")
        return response.json()

    async def download_filing_text(self, cik: str, accession_number: str) -> str:
        """Download the full submission text file for a filing."""
        accession_no_dashes = accession_number.replace("-", "")
        url = f"{self.ARCHIVES_URL}/{int(cik)}/{accession_no_dashes}/{accession_number}.txt"
        response = await self._get(url, accept="text/html")
        return response.text
