"""Tests for seo_intel.services.crawler.page_extractor."""

import pytest
from pydantic import ValidationError

from seo_intel.services.crawler.page_extractor import (
    PageSignalExtractor,
    extract_keyword_density,
    extract_links,
    parse_html,
    read_meta_robots,
)

PAGE_HTML = """
<html>
<head>
  <title>  Acme   Plumbing </title>
  <meta name="description" content="Best plumbing in town">
  <meta name="robots" content="index, follow">
  <link rel="canonical" href="https://acme.com/">
  <script type="application/ld+json">{"@type": "Organization"}</script>
  <style>.hidden { display: none }</style>
</head>
<body>
  <h1>Acme Plumbing</h1>
  <h2>Our Services</h2>
  <h3>   </h3>
  <p>Short</p>
  <p>We provide reliable plumbing services to homes and businesses.</p>
  <img src="/logo.png" alt="Acme logo">
  <img data-src="/lazy.png">
  <img>
  <a href="/about">About</a>
  <a href="https://acme.com/about/">About again</a>
  <a href="https://other.com/">Other</a>
  <a href="mailto:hi@acme.com">Mail</a>
  <a href="#top">Top</a>
  <a href="/">Home</a>
</body>
</html>
"""


@pytest.fixture
def page():
    return PageSignalExtractor().extract(PAGE_HTML, "https://www.acme.com/")


class TestPageSignalExtractor:
    def test_url_normalized(self, page):
        assert page.url == "https://acme.com/"

    def test_title_whitespace_collapsed(self, page):
        assert page.title == "Acme Plumbing"

    def test_meta_tags(self, page):
        assert page.meta_description == "Best plumbing in town"
        assert page.meta_robots == "index, follow"
        assert page.canonical == "https://acme.com/"
        assert page.has_structured_data is True

    def test_empty_headings_skipped(self, page):
        assert [(h.level, h.text) for h in page.headings] == [
            (1, "Acme Plumbing"),
            (2, "Our Services"),
        ]

    def test_images_with_source_only(self, page):
        assert [(img.src, img.alt) for img in page.images] == [
            ("/logo.png", "Acme logo"),
            ("/lazy.png", None),
        ]

    def test_short_paragraphs_skipped(self, page):
        assert page.paragraphs == (
            "We provide reliable plumbing services to homes and businesses.",
        )

    def test_paragraph_count_and_length_capped(self):
        body = "".join(f"<p>{chr(97 + i) * 350}</p>" for i in range(12))
        page = PageSignalExtractor().extract(
            f"<html><body>{body}</body></html>", "https://acme.com/"
        )
        assert len(page.paragraphs) == 10
        assert page.paragraphs[0] == "a" * 300

    def test_internal_links_deduplicated_and_exclude_self(self, page):
        assert page.internal_links == ("https://acme.com/about",)

    def test_body_text_excludes_scripts(self, page):
        assert "display" not in page.raw_text_sample
        assert "Organization" not in page.raw_text_sample
        assert page.word_count > 0

    def test_record_is_immutable(self, page):
        with pytest.raises(ValidationError):
            page.title = "changed"

    def test_missing_everything(self):
        page = PageSignalExtractor().extract("<html><body></body></html>", "https://x.com/")
        assert page.title is None
        assert page.meta_description is None
        assert page.headings == ()
        assert page.word_count == 0

    def test_og_description_fallback(self):
        html = '<html><head><meta property="og:description" content="OG text"></head></html>'
        page = PageSignalExtractor().extract(html, "https://x.com/")
        assert page.meta_description == "OG text"


class TestReadMetaRobots:
    def test_noindex_nofollow(self):
        soup = parse_html('<meta name="robots" content="noindex, nofollow">')
        assert read_meta_robots(soup) == (True, True)

    def test_googlebot_tag_counts(self):
        soup = parse_html('<meta name="Googlebot" content="noindex">')
        assert read_meta_robots(soup) == (True, False)

    def test_no_tag(self):
        assert read_meta_robots(parse_html("<p>hi</p>")) == (False, False)


class TestExtractLinks:
    def test_resolves_relative_to_page(self):
        soup = parse_html('<a href="team">Team</a><a href="/jobs?utm_source=x">Jobs</a>')
        assert extract_links(soup, "https://example.com/about/") == [
            "https://example.com/about/team",
            "https://example.com/jobs",
        ]


class TestExtractKeywordDensity:
    def test_counts_long_repeated_words(self):
        text = "plumbing plumbing plumbing water water water water the the the"
        keywords = extract_keyword_density(text)
        assert [kw.keyword for kw in keywords] == ["water", "plumbing"]
        assert keywords[0].count == 4
        assert keywords[0].density == pytest.approx(4 / 7 * 100)

    def test_empty_text(self):
        assert extract_keyword_density("") == []
