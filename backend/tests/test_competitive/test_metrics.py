"""Tests for seo_intel.services.competitive.metrics."""

import pytest

from seo_intel.models.competitive import SiteMetrics
from seo_intel.models.crawl import Heading, ImageRef, PageRecord
from seo_intel.services.competitive.gap_analyzer import GapThresholds
from seo_intel.services.competitive.metrics import (
    compare_metric,
    compare_site_metrics,
    compute_site_metrics,
    count_critical_issues,
    page_content_quality,
    significance_level,
)


def _optimized_page() -> PageRecord:
    return PageRecord(
        url="https://a.com/drain-cleaning",
        title="T" * 40,
        meta_description="d" * 130,
        headings=(
            Heading(level=1, text="Drain Cleaning"),
            Heading(level=2, text="Blocked Sinks"),
            Heading(level=2, text="Pricing"),
        ),
        images=(ImageRef(src="/a.png", alt="Drain"), ImageRef(src="/b.png", alt="Van")),
        internal_links=("https://a.com/", "https://a.com/contact"),
        word_count=400,
    )


def _thin_page() -> PageRecord:
    return PageRecord(
        url="https://a.com/misc",
        title="Short",
        images=(ImageRef(src="/c.png"),),
        word_count=100,
    )


class TestPageScores:
    def test_critical_issues_counted(self):
        assert count_critical_issues(PageRecord(url="https://a.com/")) == 3
        assert count_critical_issues(_optimized_page()) == 0
        assert count_critical_issues(_thin_page()) == 2

    def test_blank_title_is_an_issue(self):
        page = _optimized_page().model_copy(update={"title": "   "})
        assert count_critical_issues(page) == 1

    def test_content_quality_uses_available_factors(self):
        assert page_content_quality(_optimized_page()) == 1.0
        assert page_content_quality(_thin_page()) == pytest.approx(0.4)
        assert page_content_quality(PageRecord(url="https://a.com/")) == 0.0


class TestComputeSiteMetrics:
    def test_empty_site(self):
        assert compute_site_metrics([]) == SiteMetrics()

    def test_shares_of_pages(self):
        metrics = compute_site_metrics([_optimized_page(), _thin_page()])

        assert metrics.title_optimization == 50
        assert metrics.description_optimization == 50
        assert metrics.headings_optimization == 50
        assert metrics.images_optimization == 50
        assert metrics.links_optimization == 50
        assert metrics.content_quality == 70
        assert metrics.critical_issues == 2

    def test_page_without_images_passes_alt_check(self):
        page = _optimized_page().model_copy(update={"images": ()})
        assert compute_site_metrics([page]).images_optimization == 100


class TestCompareMetric:
    def test_competitor_ahead_critically(self):
        m = compare_metric(50, 75)
        assert m.difference == -25
        assert m.percentage_diff == 33
        assert m.advantage == "competitor"
        assert m.significance == "critical"

    def test_important_by_absolute_difference(self):
        m = compare_metric(94, 100)
        assert m.percentage_diff == 6
        assert m.advantage == "competitor"
        assert m.significance == "important"

    def test_within_margin_is_neutral(self):
        m = compare_metric(51, 50)
        assert m.advantage == "neutral"
        assert m.significance == "minor"

    def test_main_ahead(self):
        assert compare_metric(80, 60).advantage == "main"

    def test_zero_competitor_value(self):
        assert compare_metric(10, 0).percentage_diff == 1000

    def test_lower_is_better(self):
        worse = compare_metric(5, 1, lower_is_better=True)
        assert worse.difference == 4
        assert worse.advantage == "competitor"

        better = compare_metric(0, 4, lower_is_better=True)
        assert better.advantage == "main"
        assert better.percentage_diff == 100

    def test_thresholds_overridable(self):
        thresholds = GapThresholds(
            critical_percent_diff=50, critical_absolute_diff=40, advantage_margin=30
        )
        m = compare_metric(50, 75, thresholds=thresholds)
        assert m.significance == "important"
        assert m.advantage == "neutral"

    @pytest.mark.parametrize(
        "pct, absolute, expected",
        [(30, 0, "critical"), (0, 10, "critical"), (15, 0, "important"), (14, 4, "minor")],
    )
    def test_significance_boundaries(self, pct, absolute, expected):
        assert significance_level(pct, absolute) == expected


class TestCompareSiteMetrics:
    def test_every_metric_compared(self):
        main = compute_site_metrics([PageRecord(url="https://a.com/")])
        competitor = compute_site_metrics([_optimized_page()])

        metrics = compare_site_metrics(main, competitor)

        assert set(metrics) == set(SiteMetrics.model_fields)
        assert metrics["title_optimization"].advantage == "competitor"
        assert metrics["critical_issues"].main == 3
        assert metrics["critical_issues"].advantage == "competitor"
