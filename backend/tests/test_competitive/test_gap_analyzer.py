"""Tests for seo_intel.services.competitive.gap_analyzer."""

from seo_intel.models.competitive import KeywordGapEntry
from seo_intel.models.crawl import Heading, ImageRef, KeywordDensity, PageRecord
from seo_intel.services.competitive.constants import (
    AREA_CONTENT_DEPTH,
    AREA_HEADINGS,
    AREA_IMAGE_ALT,
    AREA_INTERNAL_LINKING,
)
from seo_intel.services.competitive.gap_analyzer import (
    GapThresholds,
    analyze_content_volume_gaps,
    analyze_gaps,
    analyze_keyword_gaps,
    analyze_topical_coverage,
    calculate_keyword_opportunity,
    calculate_opportunity_score,
    calculate_topic_strength,
    deduplicate_topics,
    estimate_keyword_difficulty,
    extract_key_phrases,
    extract_topics_from_page,
    extract_topics_from_url,
    identify_under_optimized_areas,
)


def _make_page(
    url: str,
    title: str = "",
    *,
    word_count: int = 100,
    optimized: bool = False,
    keywords: tuple[tuple[str, float], ...] = (),
    images: tuple[ImageRef, ...] = (),
    internal_links: tuple[str, ...] = (),
) -> PageRecord:
    return PageRecord(
        url=url,
        title=title or None,
        meta_description="A description" if optimized else None,
        headings=(Heading(level=1, text=title),) if optimized and title else (),
        word_count=word_count,
        keyword_density=tuple(
            KeywordDensity(keyword=kw, count=3, density=density) for kw, density in keywords
        ),
        images=images,
        internal_links=internal_links,
    )


def _main_site() -> list[PageRecord]:
    return [
        _make_page("https://a.com/drain-cleaning", "Drain Cleaning", optimized=True),
    ]


def _competitor_site() -> list[PageRecord]:
    return [
        _make_page(
            f"https://rival.com/water-heaters/{i}",
            "Water Heater Installation",
            word_count=600,
            optimized=True,
        )
        for i in range(3)
    ]


class TestTopicExtraction:
    def test_key_phrases(self):
        assert extract_key_phrases("Emergency Plumbing Repair Guide") == [
            "emergency plumbing",
            "emergency plumbing repair",
            "plumbing repair",
            "plumbing repair guide",
            "repair guide",
        ]

    def test_key_phrases_drop_stop_word_edges(self):
        assert extract_key_phrases("How to fix the sink") == ["fix the sink"]

    def test_topics_from_url(self):
        assert extract_topics_from_url("https://a.com/water-heater/install_guide/x") == [
            "water heater",
            "install guide",
        ]

    def test_topics_from_page_capped(self):
        page = _make_page(
            "https://a.com/services/drain-cleaning",
            "Emergency Plumbing Repair Guide",
        )
        topics = extract_topics_from_page(page)
        assert len(topics) == 5
        assert topics[0] == "emergency plumbing"


class TestTopicStrength:
    def test_empty(self):
        assert calculate_topic_strength([]) == 0

    def test_pages_depth_and_optimization(self):
        pages = [
            _make_page(f"https://a.com/{i}", "Title", word_count=600, optimized=True)
            for i in range(2)
        ]
        # 2 pages * 10 + 30 depth bonus + 20 fully optimized
        assert calculate_topic_strength(pages) == 70

    def test_page_count_capped(self):
        pages = [_make_page(f"https://a.com/{i}", word_count=50) for i in range(8)]
        assert calculate_topic_strength(pages) == 50


class TestTopicalCoverage:
    def test_identical_sites_fully_covered(self):
        coverage = analyze_topical_coverage(_competitor_site(), _competitor_site())
        assert coverage.coverage_score == 100
        assert coverage.unique_to_competitor == []

    def test_empty_main_site_has_zero_coverage(self):
        coverage = analyze_topical_coverage([], _competitor_site())
        assert coverage.coverage_score == 0
        assert coverage.main_topics == []

    def test_no_pages_at_all(self):
        assert analyze_topical_coverage([], []).coverage_score == 0

    def test_partial_coverage(self):
        coverage = analyze_topical_coverage(_main_site(), _competitor_site())
        assert coverage.shared_topics == []
        assert coverage.unique_to_main == ["drain cleaning"]
        # 1 main topic out of 5 distinct topics
        assert coverage.coverage_score == 20


class TestDeduplicateTopics:
    def test_containment_and_overlap(self):
        assert deduplicate_topics(
            ["water heater", "water heater installation", "heater installation", "Water Heaters"]
        ) == ["water heater", "heater installation"]


class TestKeywordScoring:
    def test_difficulty(self):
        assert estimate_keyword_difficulty("best emergency plumber near me", 3.0) == "low"
        assert estimate_keyword_difficulty("emergency plumber service", 3.0) == "medium"
        assert estimate_keyword_difficulty("plumbing", 2.5) == "high"
        assert estimate_keyword_difficulty("plumbing", 1.5) == "medium"
        assert estimate_keyword_difficulty("plumbing", 0.5) == "low"

    def test_opportunity(self):
        assert calculate_keyword_opportunity(3, 1.5) == 10
        assert calculate_keyword_opportunity(1, 5.0) == 3
        assert calculate_keyword_opportunity(0, 0.0) == 0

    def test_opportunity_score(self):
        def entry(opportunity: int) -> KeywordGapEntry:
            return KeywordGapEntry(
                keyword="k", competitor_pages=1, difficulty="low", opportunity=opportunity
            )

        assert calculate_opportunity_score([]) == 0
        assert calculate_opportunity_score([entry(10), entry(5), entry(2)]) == 15


class TestKeywordGaps:
    def test_missing_and_weak_keywords(self):
        main = [_make_page("https://a.com/", keywords=(("plumbing", 2.0),))]
        competitor = [
            _make_page(
                f"https://rival.com/{i}",
                keywords=(("plumbing", 2.0), ("boiler", 1.5)),
            )
            for i in range(3)
        ]

        gaps = analyze_keyword_gaps(main, competitor)

        assert gaps.missing_keywords == ["boiler"]
        assert gaps.weak_keywords == ["plumbing"]
        entry = gaps.competitor_keywords[0]
        assert (entry.keyword, entry.competitor_pages, entry.main_pages) == ("boiler", 3, 0)
        assert entry.difficulty == "medium"
        assert entry.opportunity == 10

    def test_zero_density_keywords_ignored(self):
        competitor = [_make_page("https://rival.com/", keywords=(("ghost", 0.0),))]
        assert analyze_keyword_gaps([], competitor).missing_keywords == []


class TestVolumeAndOptimization:
    def test_volume_gap_only_when_competitor_ahead(self):
        main = [_make_page("https://a.com/faq", "FAQ")] * 3
        competitor = [_make_page(f"https://rival.com/blog/{i}", f"Entry {i}") for i in range(6)]

        gaps = analyze_content_volume_gaps(main, competitor)

        assert [(g.area, g.gap, g.opportunity) for g in gaps] == [("blog", 6, "high")]

    def test_volume_gap_buckets_overridable(self):
        competitor = [_make_page(f"https://rival.com/blog/{i}") for i in range(2)]
        thresholds = GapThresholds(high_volume_gap=2)
        assert analyze_content_volume_gaps([], competitor, thresholds)[0].opportunity == "high"
        assert analyze_content_volume_gaps([], competitor)[0].opportunity == "medium"

    def test_under_optimized_areas(self):
        main = [_make_page("https://a.com/", images=(ImageRef(src="/a.png"),))]
        competitor = [
            _make_page(
                "https://rival.com/",
                "Title",
                word_count=400,
                optimized=True,
                images=(ImageRef(src="/b.png", alt="A boiler"),),
                internal_links=tuple(f"https://rival.com/{i}" for i in range(5)),
            )
        ]
        assert identify_under_optimized_areas(main, competitor) == [
            AREA_CONTENT_DEPTH,
            AREA_IMAGE_ALT,
            AREA_INTERNAL_LINKING,
            AREA_HEADINGS,
        ]

    def test_equal_sites_have_no_under_optimized_areas(self):
        pages = _competitor_site()
        assert identify_under_optimized_areas(pages, pages) == []


class TestAnalyzeGaps:
    def test_end_to_end(self):
        result = analyze_gaps(_main_site(), _competitor_site())

        assert result.missing_topics == ["water heater", "heater installation"]
        assert result.topical_coverage.coverage_score == 20
        assert AREA_CONTENT_DEPTH in result.under_optimized_areas
        assert result.content_volume_gaps == []

    def test_fresh_state_per_call(self):
        first = analyze_gaps(_main_site(), _competitor_site())
        second = analyze_gaps(_main_site(), _competitor_site())
        assert first == second
