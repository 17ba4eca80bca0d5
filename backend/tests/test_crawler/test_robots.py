"""Tests for seo_intel.services.crawler.robots and sitemap parsing."""

import httpx
import pytest

from seo_intel.services.crawler.robots import fetch_robots_rules, parse_robots_txt
from seo_intel.services.crawler.sitemap import fetch_sitemap_urls, parse_sitemap_xml

ROBOTS_TXT = """\
# Example robots file
User-agent: *
Disallow: /admin
Disallow: /tmp/
Allow: /tmp/

User-agent: otherbot
Disallow: /everything

Sitemap: https://example.com/sitemap.xml
"""


class TestParseRobotsTxt:
    def test_wildcard_group_rules(self):
        rules = parse_robots_txt(ROBOTS_TXT)
        assert rules.disallowed_paths == {"/admin"}

    def test_other_agent_group_ignored(self):
        rules = parse_robots_txt(ROBOTS_TXT)
        assert "/everything" not in rules.disallowed_paths

    def test_sitemaps_collected(self):
        rules = parse_robots_txt(ROBOTS_TXT)
        assert rules.sitemaps == ["https://example.com/sitemap.xml"]

    def test_own_agent_token_applies(self):
        text = "User-agent: SEO-Optimizer-Bot\nDisallow: /private\n"
        assert parse_robots_txt(text).disallowed_paths == {"/private"}

    def test_grouped_user_agents(self):
        text = "User-agent: googlebot\nUser-agent: *\nDisallow: /x\n"
        assert parse_robots_txt(text).disallowed_paths == {"/x"}

    def test_empty_disallow_means_allow_all(self):
        text = "User-agent: *\nDisallow:\n"
        assert parse_robots_txt(text).disallowed_paths == set()

    def test_garbage_is_permissive(self):
        rules = parse_robots_txt("<html>not a robots file</html>")
        assert rules.disallowed_paths == set()
        assert rules.sitemaps == []


@pytest.mark.asyncio
class TestFetchRobotsRules:
    async def test_missing_robots_is_permissive(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            rules = await fetch_robots_rules(client, "https://example.com/")
        assert rules.disallowed_paths == set()

    async def test_network_error_is_permissive(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            rules = await fetch_robots_rules(client, "https://example.com/")
        assert rules.disallowed_paths == set()

    async def test_fetches_robots_at_site_root(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(200, text=ROBOTS_TXT)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            rules = await fetch_robots_rules(client, "https://example.com/")
        assert requested == ["https://example.com/robots.txt"]
        assert rules.disallowed_paths == {"/admin"}


SITEMAP_XML = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url><loc>https://example.com/about</loc></url>
  <url><loc> https://example.com/services </loc></url>
</urlset>
"""

SITEMAP_INDEX_XML = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/sitemap-pages.xml</loc></sitemap>
</sitemapindex>
"""


class TestParseSitemapXml:
    def test_url_set(self):
        children, urls = parse_sitemap_xml(SITEMAP_XML)
        assert children == []
        assert urls == ["https://example.com/about", "https://example.com/services"]

    def test_index(self):
        children, urls = parse_sitemap_xml(SITEMAP_INDEX_XML)
        assert children == ["https://example.com/sitemap-pages.xml"]
        assert urls == []


@pytest.mark.asyncio
class TestFetchSitemapUrls:
    async def test_follows_index_one_level(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/sitemap.xml":
                return httpx.Response(200, text=SITEMAP_INDEX_XML)
            return httpx.Response(200, text=SITEMAP_XML)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            urls = await fetch_sitemap_urls(client, "https://example.com/sitemap.xml")
        assert urls == ["https://example.com/about", "https://example.com/services"]

    async def test_respects_max_urls(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=SITEMAP_XML))
        async with httpx.AsyncClient(transport=transport) as client:
            urls = await fetch_sitemap_urls(
                client, "https://example.com/sitemap.xml", max_urls=1
            )
        assert urls == ["https://example.com/about"]

    async def test_missing_sitemap_yields_nothing(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            assert await fetch_sitemap_urls(client, "https://example.com/sitemap.xml") == []
