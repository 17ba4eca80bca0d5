"""Tests for seo_intel.services.crawler.page_fetcher."""

import asyncio

import httpx
import pytest

from seo_intel.services.crawler.page_fetcher import PageFetcher


def _handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/missing":
        return httpx.Response(404)
    if path == "/data.json":
        return httpx.Response(200, json={"a": 1})
    if path == "/slow":
        raise httpx.ReadTimeout("timed out", request=request)
    return httpx.Response(
        200,
        html=f"<html><head><title>Title {path}</title></head>"
        f"<body><h1>Heading {path}</h1><p>Some body text here.</p></body></html>",
    )


def _fetcher() -> PageFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(_handler))
    return PageFetcher(client)


@pytest.mark.asyncio
class TestPageFetcher:
    async def test_returns_records_in_input_order(self):
        pages = await _fetcher().fetch_pages(
            ["https://example.com/b", "https://example.com/a"]
        )
        assert [p.url for p in pages] == ["https://example.com/b", "https://example.com/a"]
        assert pages[0].title == "Title /b"
        assert pages[0].headings[0].text == "Heading /b"

    async def test_skips_failures_and_non_html(self):
        pages = await _fetcher().fetch_pages(
            [
                "https://example.com/",
                "https://example.com/missing",
                "https://example.com/data.json",
                "https://example.com/slow",
            ]
        )
        assert [p.url for p in pages] == ["https://example.com/"]

    async def test_empty_input(self):
        assert await _fetcher().fetch_pages([]) == []

    async def test_at_most_three_requests_in_flight(self):
        in_flight = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return _handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        urls = [f"https://example.com/p{i}" for i in range(7)]

        pages = await PageFetcher(client).fetch_pages(urls)

        assert len(pages) == 7
        assert peak == 3
