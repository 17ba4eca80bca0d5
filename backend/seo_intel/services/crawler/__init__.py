"""Crawler package — robots-aware, priority-ordered site crawling.

Re-exports the public API so consumers can use::

    from seo_intel.services.crawler import SiteCrawler, PageFetcher
"""

from seo_intel.services.crawler.crawler import SiteCrawler
from seo_intel.services.crawler.page_extractor import PageSignalExtractor
from seo_intel.services.crawler.page_fetcher import PageFetcher
from seo_intel.services.crawler.robots import fetch_robots_rules, parse_robots_txt
from seo_intel.services.crawler.sitemap import fetch_sitemap_urls
from seo_intel.services.crawler.url_utils import (
    calculate_url_priority,
    is_url_allowed,
    normalize_url,
)

__all__ = [
    "PageFetcher",
    "PageSignalExtractor",
    "SiteCrawler",
    "calculate_url_priority",
    "fetch_robots_rules",
    "fetch_sitemap_urls",
    "is_url_allowed",
    "normalize_url",
    "parse_robots_txt",
]
