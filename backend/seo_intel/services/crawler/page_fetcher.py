"""
Page Fetcher — downloads crawled URLs and turns them into PageRecords.

Uses an ``asyncio.Semaphore`` to bound parallelism. Each page is fetched
once with ``httpx`` and handed to ``PageSignalExtractor``; failures are
logged and the page is skipped.
"""

import asyncio
import logging
from typing import Optional

import httpx

from seo_intel.models.crawl import PageRecord
from seo_intel.services.crawler.constants import (
    CONCURRENT_CRAWL_LIMIT,
    MAX_REDIRECTS,
    PAGE_TIMEOUT_SECONDS,
    USER_AGENT,
)
from seo_intel.services.crawler.page_extractor import PageSignalExtractor

logger = logging.getLogger(__name__)


class PageFetcher:
    """Bounded-concurrency fetch + extract for a list of URLs."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        concurrency: int = CONCURRENT_CRAWL_LIMIT,
        timeout: float = PAGE_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._client = client
        self.concurrency = concurrency
        self.timeout = timeout
        self.user_agent = user_agent
        self.extractor = PageSignalExtractor()

    async def fetch_pages(self, urls: list[str]) -> list[PageRecord]:
        """Fetch *urls* and return records for the HTML pages, in input order."""
        if not urls:
            return []

        if self._client is not None:
            return await self._fetch_all(self._client, urls)

        async with httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        ) as client:
            return await self._fetch_all(client, urls)

    async def _fetch_all(
        self, client: httpx.AsyncClient, urls: list[str]
    ) -> list[PageRecord]:
        sem = asyncio.Semaphore(self.concurrency)

        async def _fetch_one(url: str) -> Optional[PageRecord]:
            async with sem:
                try:
                    resp = await client.get(url, timeout=self.timeout)
                    if resp.status_code >= 400:
                        logger.warning(f"Failed to fetch {url}: HTTP {resp.status_code}")
                        return None
                    if "text/html" not in resp.headers.get("content-type", "").lower():
                        return None
                    page = self.extractor.extract(resp.text, url)
                    logger.info(
                        f"Extracted {url}: {page.word_count} words, "
                        f"{len(page.headings)} headings"
                    )
                    return page
                except httpx.TimeoutException:
                    logger.warning(f"Timeout fetching {url}")
                except Exception as e:
                    logger.warning(f"Error fetching {url}: {e}")
                return None

        results = await asyncio.gather(*(_fetch_one(url) for url in urls))
        return [page for page in results if page is not None]
