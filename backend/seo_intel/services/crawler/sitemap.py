"""sitemap.xml parsing for crawl seeding.

Handles both regular sitemaps and sitemap index files (recursing one level).
Failures are non-fatal and yield fewer (or no) URLs.
"""

import logging
import re

import httpx

from seo_intel.services.crawler.constants import (
    MAX_CHILD_SITEMAPS,
    MAX_SITEMAP_URLS,
    ROBOTS_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

_SITEMAP_ENTRY_RE = re.compile(r"<sitemap>\s*<loc>\s*(.*?)\s*</loc>", re.DOTALL | re.I)
_LOC_RE = re.compile(r"<loc>\s*(.*?)\s*</loc>", re.DOTALL | re.I)


def parse_sitemap_xml(content: str) -> tuple[list[str], list[str]]:
    """Split sitemap XML into ``(child_sitemaps, page_urls)``."""
    children = _SITEMAP_ENTRY_RE.findall(content)
    if children:
        return children, []
    return [], _LOC_RE.findall(content)


async def fetch_sitemap_urls(
    client: httpx.AsyncClient,
    sitemap_url: str,
    *,
    max_urls: int = MAX_SITEMAP_URLS,
    _depth: int = 0,
) -> list[str]:
    """Fetch a sitemap and extract up to *max_urls* page URLs."""
    urls: list[str] = []

    try:
        resp = await client.get(sitemap_url, timeout=ROBOTS_TIMEOUT_SECONDS)
        if resp.status_code != 200:
            return urls
        children, locs = parse_sitemap_xml(resp.text)
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch sitemap {sitemap_url}: {e}")
        return urls

    if children:
        if _depth > 0:
            return urls
        for child_url in children[:MAX_CHILD_SITEMAPS]:
            urls.extend(
                await fetch_sitemap_urls(
                    client, child_url, max_urls=max_urls - len(urls), _depth=1
                )
            )
            if len(urls) >= max_urls:
                break
        return urls[:max_urls]

    urls.extend(locs[:max_urls])
    return urls
