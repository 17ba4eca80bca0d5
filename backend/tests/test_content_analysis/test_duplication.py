"""Tests for seo_intel.services.content_analysis.duplication."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from seo_intel.models.content import DuplicateGroup
from seo_intel.models.crawl import Heading, PageRecord
from seo_intel.services.content_analysis.ai_enhancer import EnhancerOptions
from seo_intel.services.content_analysis.constants import (
    OVERALL_RECOMMENDATIONS,
    RECOMMENDATIONS,
    UNIQUE_CONTENT_MESSAGES,
)
from seo_intel.services.content_analysis.duplication import (
    ContentDuplicationAnalyzer,
    merge_groups,
)


def _make_page(url: str, title: str, description: str, h1: str, h2: str) -> PageRecord:
    return PageRecord(
        url=url,
        title=title,
        meta_description=description,
        headings=(Heading(level=1, text=h1), Heading(level=2, text=h2)),
    )


def _site() -> list[PageRecord]:
    return [
        _make_page(
            "https://a.com/",
            "Acme Plumbing Services",
            "Reliable plumbing for homes in the city",
            "Welcome to Acme",
            "Our Services",
        ),
        _make_page(
            "https://a.com/about",
            "Acme Plumbing Services",
            "Learn about our family plumbing business",
            "Welcome to Acme",
            "Meet The Team",
        ),
        _make_page(
            "https://a.com/contact",
            "Contact Acme Plumbing",
            "Call or email us for a free quote",
            "Get in touch",
            "Our Services",
        ),
    ]


def _group(content: str, *urls: str, kind: str = "exact") -> DuplicateGroup:
    return DuplicateGroup(
        content=content,
        urls=list(urls),
        similarity_score=100,
        impact_level="Low",
        duplication_type=kind,
    )


@pytest.mark.asyncio
class TestContentDuplicationAnalyzer:
    async def test_reports_per_content_type(self):
        analysis = await ContentDuplicationAnalyzer().analyze(_site())

        titles = analysis.title_repetition
        assert titles.repetitive_count == 1
        assert titles.total_count == 3
        assert titles.examples == ["Acme Plumbing Services"]
        assert titles.recommendations == RECOMMENDATIONS["titles"]
        assert titles.duplicate_groups[0].root_cause

        descriptions = analysis.description_repetition
        assert descriptions.repetitive_count == 0
        assert descriptions.recommendations == [UNIQUE_CONTENT_MESSAGES["descriptions"]]

        assert analysis.paragraph_repetition.total_count == 0
        assert analysis.overall_recommendations == OVERALL_RECOMMENDATIONS

    async def test_headings_reported_overall_and_by_level(self):
        analysis = await ContentDuplicationAnalyzer().analyze(_site())
        headings = analysis.heading_repetition

        assert headings.total_count == 6
        assert headings.repetitive_count == 2
        assert [g.content for g in headings.by_level["h1"]] == ["Welcome to Acme"]
        assert [g.content for g in headings.by_level["h2"]] == ["Our Services"]
        assert headings.by_level["h3"] == []

    async def test_no_pages(self):
        analysis = await ContentDuplicationAnalyzer().analyze([])
        assert analysis.title_repetition.total_count == 0
        assert analysis.title_repetition.recommendations == [UNIQUE_CONTENT_MESSAGES["titles"]]

    async def test_ai_groups_merged_without_duplicates(self):
        service = MagicMock()
        service.complete = AsyncMock(
            return_value=json.dumps({"patterns": [], "categories": [], "conflicts": []})
        )
        analyzer = ContentDuplicationAnalyzer(
            service, enhancer_options=EnhancerOptions(call_delay_ms=0)
        )

        analysis = await analyzer.analyze(_site())

        assert service.complete.await_count > 0
        assert analysis.title_repetition.repetitive_count == 1
        assert len(analysis.title_repetition.duplicate_groups) == 1

    async def test_ai_disabled(self):
        service = MagicMock()
        service.complete = AsyncMock()
        analyzer = ContentDuplicationAnalyzer(service, use_ai=False)

        await analyzer.analyze(_site())

        assert analyzer.enhancer is None
        service.complete.assert_not_awaited()


class TestMergeGroups:
    def test_skips_same_urls_and_text(self):
        primary = [_group("Acme Plumbing", "https://a.com/1", "https://a.com/2")]
        extra = [
            _group("acme plumbing!", "https://a.com/2", "https://a.com/1"),
            _group("Acme Plumbing", "https://a.com/1", "https://a.com/3"),
        ]
        merged = merge_groups(primary, extra)
        assert len(merged) == 2
        assert merged[1].urls == ["https://a.com/1", "https://a.com/3"]

    def test_primary_order_kept(self):
        primary = [_group("b text", "u1", "u2"), _group("a text", "u3", "u4")]
        assert merge_groups(primary, []) == primary
