"""Tests for seo_intel.services.content_analysis.preprocessor."""

from seo_intel.models.content import ContentItem
from seo_intel.models.crawl import Heading, PageRecord
from seo_intel.services.content_analysis.preprocessor import (
    calculate_content_stats,
    extract_page_content,
    sanitize_content,
)


def _make_page(url: str = "https://example.com/", **kwargs) -> PageRecord:
    defaults = dict(
        title="Acme Plumbing",
        meta_description="Reliable plumbing for homes",
        headings=(Heading(level=1, text="Welcome"), Heading(level=2, text="Our Services")),
        paragraphs=("We fix leaks, install boilers and unblock drains across the city.",),
    )
    defaults.update(kwargs)
    return PageRecord(url=url, **defaults)


class TestSanitizeContent:
    def test_collapses_whitespace(self):
        assert sanitize_content("  Hello \n\t world  ") == "Hello world"

    def test_strips_control_characters(self):
        assert sanitize_content("bad\x00text\x07") == "badtext"

    def test_keeps_unicode(self):
        assert sanitize_content("Café – déjà vu") == "Café – déjà vu"

    def test_caps_length(self):
        assert len(sanitize_content("a" * 800)) == 500


class TestExtractPageContent:
    def test_groups_by_kind(self):
        pages = [_make_page(), _make_page("https://example.com/about")]
        content = extract_page_content(pages)

        assert content.total_pages == 2
        assert [t.content for t in content.titles] == ["Acme Plumbing", "Acme Plumbing"]
        assert [t.page_index for t in content.titles] == [0, 1]
        assert len(content.descriptions) == 2
        assert [h.content for h in content.headings["h1"]] == ["Welcome", "Welcome"]
        assert [h.content for h in content.headings["h2"]] == ["Our Services"] * 2
        assert content.headings["h3"] == []
        assert len(content.paragraphs) == 2

    def test_skips_missing_and_blank_fields(self):
        page = _make_page(title=None, meta_description="   ", headings=(), paragraphs=())
        content = extract_page_content([page])
        assert content.titles == []
        assert content.descriptions == []
        assert content.all_headings() == []
        assert content.paragraphs == []

    def test_paragraphs_pass_through_sanitized(self):
        page = _make_page(paragraphs=("  Drain   cleaning and leak repair  ", "   "))
        content = extract_page_content([page])
        assert [p.content for p in content.paragraphs] == ["Drain cleaning and leak repair"]

    def test_all_headings_ordered_by_level(self):
        page = _make_page(
            headings=(Heading(level=3, text="Third"), Heading(level=1, text="First"))
        )
        content = extract_page_content([page])
        assert [h.content for h in content.all_headings()] == ["First", "Third"]


class TestCalculateContentStats:
    def test_empty(self):
        stats = calculate_content_stats([])
        assert stats.total_items == 0
        assert stats.complexity == "low"

    def test_medium_by_item_count(self):
        items = [ContentItem(content="a" * 40, url="https://x.com/") for _ in range(25)]
        stats = calculate_content_stats(items)
        assert stats.total_items == 25
        assert stats.average_length == 40
        assert stats.estimated_tokens == 250
        assert stats.complexity == "medium"

    def test_high_by_token_volume(self):
        items = [ContentItem(content="a" * 2500, url="https://x.com/") for _ in range(10)]
        assert calculate_content_stats(items).complexity == "high"
