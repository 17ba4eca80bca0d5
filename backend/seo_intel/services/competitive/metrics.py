"""
Site metrics and metric-by-metric comparison against a competitor.

Each optimization score is the share of pages (0-100) meeting one on-page
rule. ``critical_issues`` counts missing titles, descriptions and H1s, so
lower is better there. Significance thresholds live in ``constants.py``
and are overridable through ``GapThresholds``.
"""

from typing import Optional

from seo_intel.models.competitive import Advantage, MetricComparison, Significance, SiteMetrics
from seo_intel.models.crawl import PageRecord
from seo_intel.services.competitive.constants import (
    LOWER_IS_BETTER_METRICS,
    MIN_ALT_TEXT_RATIO,
    MIN_HEADINGS_FOR_STRUCTURE,
    MIN_INTERNAL_LINKS,
    NEAR_OPTIMAL_CREDIT,
    OPTIMAL_DESCRIPTION_LENGTH,
    OPTIMAL_TITLE_LENGTH,
    SUBSTANTIAL_WORD_COUNT,
    THIN_CONTENT_CREDIT,
)
from seo_intel.services.competitive.gap_analyzer import GapThresholds


def _in_range(text: Optional[str], bounds: tuple[int, int]) -> bool:
    return bool(text) and bounds[0] <= len(text) <= bounds[1]


def _h1_count(page: PageRecord) -> int:
    return sum(1 for h in page.headings if h.level == 1)


def _has_structured_headings(page: PageRecord) -> bool:
    return _h1_count(page) == 1 and len(page.headings) >= MIN_HEADINGS_FOR_STRUCTURE


def _has_image_alts(page: PageRecord) -> bool:
    if not page.images:
        return True
    with_alt = sum(1 for img in page.images if img.alt and img.alt.strip())
    return with_alt / len(page.images) >= MIN_ALT_TEXT_RATIO


def count_critical_issues(page: PageRecord) -> int:
    """Missing title, missing meta description, and missing H1 each count once."""
    issues = 0
    if not (page.title or "").strip():
        issues += 1
    if not (page.meta_description or "").strip():
        issues += 1
    if _h1_count(page) == 0:
        issues += 1
    return issues


def page_content_quality(page: PageRecord) -> float:
    """0-1 average over the factors the page has data for."""
    scores = []
    if page.title:
        scores.append(1.0 if _in_range(page.title, OPTIMAL_TITLE_LENGTH) else NEAR_OPTIMAL_CREDIT)
    if page.meta_description:
        scores.append(
            1.0
            if _in_range(page.meta_description, OPTIMAL_DESCRIPTION_LENGTH)
            else NEAR_OPTIMAL_CREDIT
        )
    if page.word_count:
        scores.append(1.0 if page.word_count >= SUBSTANTIAL_WORD_COUNT else THIN_CONTENT_CREDIT)
    if page.headings:
        scores.append(1.0 if _h1_count(page) == 1 else NEAR_OPTIMAL_CREDIT)
    return sum(scores) / len(scores) if scores else 0.0


def compute_site_metrics(pages: list[PageRecord]) -> SiteMetrics:
    if not pages:
        return SiteMetrics()

    def share(predicate) -> int:
        return round(sum(1 for p in pages if predicate(p)) / len(pages) * 100)

    return SiteMetrics(
        title_optimization=share(lambda p: _in_range(p.title, OPTIMAL_TITLE_LENGTH)),
        description_optimization=share(
            lambda p: _in_range(p.meta_description, OPTIMAL_DESCRIPTION_LENGTH)
        ),
        headings_optimization=share(_has_structured_headings),
        images_optimization=share(_has_image_alts),
        links_optimization=share(lambda p: len(p.internal_links) >= MIN_INTERNAL_LINKS),
        content_quality=round(sum(page_content_quality(p) for p in pages) / len(pages) * 100),
        critical_issues=sum(count_critical_issues(p) for p in pages),
    )


def significance_level(
    percentage_diff: int, absolute_diff: float, thresholds: Optional[GapThresholds] = None
) -> Significance:
    t = thresholds or GapThresholds()
    if percentage_diff >= t.critical_percent_diff or absolute_diff >= t.critical_absolute_diff:
        return "critical"
    if percentage_diff >= t.important_percent_diff or absolute_diff >= t.important_absolute_diff:
        return "important"
    return "minor"


def compare_metric(
    main: float,
    competitor: float,
    *,
    lower_is_better: bool = False,
    thresholds: Optional[GapThresholds] = None,
) -> MetricComparison:
    """Compare one metric. ``percentage_diff`` is relative to the competitor."""
    t = thresholds or GapThresholds()
    difference = main - competitor
    percentage_diff = round(abs(difference) / max(competitor, 1) * 100)

    lead = -difference if lower_is_better else difference
    advantage: Advantage = "neutral"
    if lead > t.advantage_margin:
        advantage = "main"
    elif lead < -t.advantage_margin:
        advantage = "competitor"

    return MetricComparison(
        main=main,
        competitor=competitor,
        difference=difference,
        percentage_diff=percentage_diff,
        advantage=advantage,
        significance=significance_level(percentage_diff, abs(difference), t),
    )


def compare_site_metrics(
    main: SiteMetrics,
    competitor: SiteMetrics,
    thresholds: Optional[GapThresholds] = None,
) -> dict[str, MetricComparison]:
    main_values = main.model_dump()
    competitor_values = competitor.model_dump()
    return {
        name: compare_metric(
            main_values[name],
            competitor_values[name],
            lower_is_better=name in LOWER_IS_BETTER_METRICS,
            thresholds=thresholds,
        )
        for name in SiteMetrics.model_fields
    }
