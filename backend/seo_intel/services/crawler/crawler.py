"""Priority-ordered, robots-aware site crawler.

Fetches pages in batches of ``concurrency`` URLs (issued together with
``asyncio.gather``), highest priority first, sleeping ``delay_ms`` between
batches. Each call to ``crawl()`` owns a fresh ``CrawlSession``; nothing is
shared between crawls.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

import httpx

from seo_intel.errors import CrawlCancelledError, NetworkError
from seo_intel.models.crawl import CrawlTarget, ProgressEvent
from seo_intel.services.crawler.constants import (
    AGENT_TOKEN,
    CONCURRENT_CRAWL_LIMIT,
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_PAGES,
    MAX_REDIRECTS,
    PAGE_TIMEOUT_SECONDS,
    ROOT_SEED_PRIORITY,
    START_URL_SEED_PRIORITY,
    USER_AGENT,
)
from seo_intel.services.crawler.page_extractor import (
    extract_links,
    parse_html,
    read_meta_robots,
)
from seo_intel.services.crawler.robots import fetch_robots_rules
from seo_intel.services.crawler.sitemap import fetch_sitemap_urls
from seo_intel.services.crawler.url_utils import (
    calculate_url_priority,
    is_url_allowed,
    normalize_url,
    site_root,
    url_host,
)
from seo_intel.services.ports import ProgressSink, emit_progress

logger = logging.getLogger(__name__)


@dataclass
class CrawlSession:
    """Mutable state of one crawl invocation."""

    base_host: str
    max_pages: int
    follow_external_links: bool
    disallowed_paths: set[str] = field(default_factory=set)
    discovered: set[str] = field(default_factory=set)
    crawled: set[str] = field(default_factory=set)
    queue: list[CrawlTarget] = field(default_factory=list)
    indexable: list[str] = field(default_factory=list)
    failed: int = 0

    def is_allowed(self, url: str) -> bool:
        if url_host(url) != self.base_host:
            return True
        return is_url_allowed(url, self.disallowed_paths)

    def seed(self, url: str, priority: int) -> None:
        if url in self.discovered or not self.is_allowed(url):
            return
        self.discovered.add(url)
        self.queue.append(CrawlTarget(url=url, priority=priority))

    def accept_link(self, link: str) -> None:
        """Filter a discovered link and enqueue it if it is new and allowed."""
        same_host = url_host(link) == self.base_host
        if not same_host and not self.follow_external_links:
            return
        if link in self.discovered or link in self.crawled:
            return
        if same_host and not is_url_allowed(link, self.disallowed_paths):
            return

        self.discovered.add(link)
        if len(self.discovered) <= self.max_pages:
            self.queue.append(
                CrawlTarget(url=link, priority=calculate_url_priority(link))
            )

    def next_batch(self, size: int) -> list[CrawlTarget]:
        self.queue.sort(key=lambda t: t.priority, reverse=True)
        batch = self.queue[:size]
        del self.queue[:size]
        return batch


class SiteCrawler:
    """Discovers and fetches a site's pages under a page and concurrency budget."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        concurrency: int = CONCURRENT_CRAWL_LIMIT,
        timeout: float = PAGE_TIMEOUT_SECONDS,
        user_agent: str = USER_AGENT,
        agent_token: str = AGENT_TOKEN,
    ) -> None:
        self._client = client
        self.concurrency = concurrency
        self.timeout = timeout
        self.user_agent = user_agent
        self.agent_token = agent_token

    @asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(
            headers={"User-Agent": self.user_agent},
            timeout=self.timeout,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        ) as client:
            yield client

    async def crawl(
        self,
        start_url: str,
        max_pages: int = DEFAULT_MAX_PAGES,
        delay_ms: int = DEFAULT_DELAY_MS,
        follow_external_links: bool = False,
        cancel_event: Optional[asyncio.Event] = None,
        on_progress: Optional[ProgressSink] = None,
        *,
        use_sitemap: bool = False,
    ) -> list[str]:
        """Crawl the site containing *start_url* and return indexable page URLs.

        Always starts from the site root. Pages carrying ``noindex`` are
        crawled for links but left out of the result.

        Raises:
            CrawlCancelledError: if *cancel_event* is set; no partial result.
        """
        if not start_url.startswith(("http://", "https://")):
            start_url = f"https://{start_url}"
        normalized_start = normalize_url(start_url)
        root_url = site_root(normalized_start)

        session = CrawlSession(
            base_host=url_host(root_url),
            max_pages=max_pages,
            follow_external_links=follow_external_links,
        )

        async with self._http_client() as client:
            rules = await fetch_robots_rules(client, root_url, self.agent_token)
            session.disallowed_paths = set(rules.disallowed_paths)

            session.seed(root_url, ROOT_SEED_PRIORITY)
            if normalized_start != root_url:
                session.seed(normalized_start, START_URL_SEED_PRIORITY)

            if use_sitemap:
                await self._seed_from_sitemaps(client, session, root_url, rules.sitemaps)

            while session.queue and len(session.crawled) < max_pages:
                if cancel_event is not None and cancel_event.is_set():
                    raise CrawlCancelledError()

                batch = session.next_batch(
                    min(self.concurrency, max_pages - len(session.crawled))
                )
                await asyncio.gather(
                    *(
                        self._crawl_one(client, target, session, on_progress)
                        for target in batch
                    )
                )

                if session.queue and delay_ms > 0:
                    await asyncio.sleep(delay_ms / 1000)

        if cancel_event is not None and cancel_event.is_set():
            raise CrawlCancelledError()

        logger.info(
            f"Crawling summary for {session.base_host}: discovered "
            f"{len(session.discovered)} URLs, crawled {len(session.crawled)}, "
            f"indexable {len(session.indexable)}, failed {session.failed}"
        )
        emit_progress(
            on_progress,
            ProgressEvent(
                pages_crawled=len(session.crawled),
                total_discovered=len(session.discovered),
                failed_pages=session.failed,
                message=f"Crawl complete: {len(session.indexable)} indexable pages",
            ),
        )
        return list(session.indexable)

    async def _seed_from_sitemaps(
        self,
        client: httpx.AsyncClient,
        session: CrawlSession,
        root_url: str,
        sitemaps: list[str],
    ) -> None:
        sitemap_urls = sitemaps or [root_url.rstrip("/") + "/sitemap.xml"]
        for sitemap_url in sitemap_urls:
            for url in await fetch_sitemap_urls(
                client, sitemap_url, max_urls=session.max_pages
            ):
                session.accept_link(normalize_url(url))
        logger.info(
            f"Seeded {len(session.queue)} URLs for {session.base_host} "
            f"(including sitemaps)"
        )

    async def _crawl_one(
        self,
        client: httpx.AsyncClient,
        target: CrawlTarget,
        session: CrawlSession,
        on_progress: Optional[ProgressSink],
    ) -> None:
        """Fetch one page, record it, and enqueue its outbound links."""
        url = target.url
        if url in session.crawled:
            return
        session.crawled.add(url)

        try:
            await self._process_page(client, url, session)
        except NetworkError as e:
            session.failed += 1
            logger.warning(str(e))
        except Exception as e:
            session.failed += 1
            logger.warning(f"Error crawling {url}: {e}")

        emit_progress(
            on_progress,
            ProgressEvent(
                pages_crawled=len(session.crawled),
                total_discovered=len(session.discovered),
                failed_pages=session.failed,
                current_url=url,
                message=f"Crawled {url}",
            ),
        )

    async def _process_page(
        self, client: httpx.AsyncClient, url: str, session: CrawlSession
    ) -> None:
        try:
            resp = await client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise NetworkError(url, "timeout") from e
        except httpx.HTTPError as e:
            raise NetworkError(url, str(e) or e.__class__.__name__) from e

        if resp.status_code >= 400:
            raise NetworkError(url, f"HTTP {resp.status_code}", resp.status_code)

        content_type = resp.headers.get("content-type", "")
        if "text/html" not in content_type.lower():
            logger.debug(f"Skipping non-HTML page {url} ({content_type})")
            return

        soup = parse_html(resp.text)
        noindex, nofollow = read_meta_robots(soup)

        if noindex:
            logger.info(f"Page has noindex directive: {url}")
        else:
            session.indexable.append(url)

        if nofollow:
            return

        for link in extract_links(soup, str(resp.url)):
            session.accept_link(link)
