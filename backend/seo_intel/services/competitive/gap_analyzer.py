"""
Competitive content gap analysis.

Compares the main site's pages against a competitor's: topic coverage,
keyword gaps, content volume per area, and on-page optimization margins.
Pure and synchronous; every call works on fresh state.
"""

import logging
import re
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel

from seo_intel.models.competitive import (
    ContentGapAnalysis,
    ContentVolumeGap,
    Difficulty,
    KeywordGapAnalysis,
    KeywordGapEntry,
    TopicalCoverage,
    TopicCluster,
)
from seo_intel.models.crawl import PageRecord
from seo_intel.services.competitive.constants import (
    ACTIVE_TARGETING_MIN_DENSITY,
    ACTIVE_TARGETING_MIN_PAGES,
    ADVANTAGE_MARGIN,
    ALT_TEXT_MARGIN,
    ANY_DENSITY_BONUS,
    AREA_CONTENT_DEPTH,
    AREA_HEADINGS,
    AREA_IMAGE_ALT,
    AREA_INTERNAL_LINKING,
    CONTENT_AREAS,
    CRITICAL_ABSOLUTE_DIFF,
    CRITICAL_PERCENT_DIFF,
    DEPTH_BONUSES,
    HEADING_USAGE_MARGIN,
    HIGH_OPPORTUNITY_MIN,
    HIGH_VOLUME_GAP,
    IDEAL_DENSITY_BONUS,
    IDEAL_DENSITY_RANGE,
    IMPORTANT_ABSOLUTE_DIFF,
    IMPORTANT_PERCENT_DIFF,
    INTERNAL_LINKS_RATIO,
    MAX_CLUSTER_KEYWORDS,
    MAX_MISSING_KEYWORDS,
    MAX_MISSING_TOPICS,
    MAX_OPPORTUNITY,
    MAX_OPPORTUNITY_KEYWORDS,
    MAX_PAGE_COUNT_SCORE,
    MAX_PAGE_STRENGTH,
    MAX_TOPIC_LENGTH,
    MAX_TOPICS_PER_PAGE,
    MAX_WEAK_KEYWORDS,
    MEDIUM_OPPORTUNITY_MIN,
    MEDIUM_VOLUME_GAP,
    MIN_PHRASE_WORD_LENGTH,
    MIN_TOPIC_LENGTH,
    MISSING_TOPIC_MIN_STRENGTH,
    OPPORTUNITY_KEYWORD_MIN,
    OPTIMIZED_RATIO_WEIGHT,
    PAGE_COUNT_SCORE_FACTOR,
    STOP_WORD_PATTERNS,
    STRENGTH_PER_PAGE,
    TOPIC_DEDUP_SIMILARITY,
    TOPIC_HEADING_MAX_LEVEL,
    WORD_COUNT_RATIO,
)

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^\w\s]")


class GapThresholds(BaseModel):
    """Overridable margins and cut-offs for gap reporting and metric comparison."""

    word_count_ratio: float = WORD_COUNT_RATIO
    alt_text_margin: float = ALT_TEXT_MARGIN
    internal_links_ratio: float = INTERNAL_LINKS_RATIO
    heading_usage_margin: float = HEADING_USAGE_MARGIN
    missing_topic_min_strength: int = MISSING_TOPIC_MIN_STRENGTH
    topic_dedup_similarity: float = TOPIC_DEDUP_SIMILARITY
    opportunity_keyword_min: int = OPPORTUNITY_KEYWORD_MIN
    high_volume_gap: int = HIGH_VOLUME_GAP
    medium_volume_gap: int = MEDIUM_VOLUME_GAP
    advantage_margin: float = ADVANTAGE_MARGIN
    critical_percent_diff: int = CRITICAL_PERCENT_DIFF
    critical_absolute_diff: float = CRITICAL_ABSOLUTE_DIFF
    important_percent_diff: int = IMPORTANT_PERCENT_DIFF
    important_absolute_diff: float = IMPORTANT_ABSOLUTE_DIFF


# =============================================================================
# Topics
# =============================================================================


def extract_key_phrases(text: str) -> list[str]:
    """2- and 3-word phrases, excluding ones that start or end on a stop word."""
    words = [
        w
        for w in _NON_WORD_RE.sub(" ", text.lower()).split()
        if len(w) >= MIN_PHRASE_WORD_LENGTH
    ]
    phrases = []
    for i in range(len(words) - 1):
        phrases.append(f"{words[i]} {words[i + 1]}")
        if i < len(words) - 2:
            phrases.append(f"{words[i]} {words[i + 1]} {words[i + 2]}")
    return [p for p in phrases if not any(rx.search(p) for rx in STOP_WORD_PATTERNS)]


def extract_topics_from_url(url: str) -> list[str]:
    try:
        path = urlparse(url).path
    except ValueError:
        return []
    parts = [re.sub(r"[-_]", " ", part) for part in path.split("/") if part]
    return [part for part in parts if len(part) >= MIN_TOPIC_LENGTH]


def extract_topics_from_page(page: PageRecord) -> list[str]:
    """Up to five topics from the title, H1/H2 headings, and URL path."""
    topics: dict[str, None] = {}
    if page.title:
        topics.update(dict.fromkeys(extract_key_phrases(page.title)))
    for heading in page.headings:
        if heading.level <= TOPIC_HEADING_MAX_LEVEL and heading.text:
            topics.update(dict.fromkeys(extract_key_phrases(heading.text)))
    topics.update(dict.fromkeys(extract_topics_from_url(page.url)))

    return [
        topic
        for topic in topics
        if MIN_TOPIC_LENGTH <= len(topic) <= MAX_TOPIC_LENGTH
    ][:MAX_TOPICS_PER_PAGE]


def _is_optimized(page: PageRecord) -> bool:
    return bool(page.title and page.meta_description and page.headings)


def calculate_topic_strength(pages: list[PageRecord]) -> int:
    if not pages:
        return 0
    strength = min(len(pages) * STRENGTH_PER_PAGE, MAX_PAGE_STRENGTH)

    avg_words = sum(p.word_count for p in pages) / len(pages)
    for min_words, bonus in DEPTH_BONUSES:
        if avg_words >= min_words:
            strength += bonus
            break

    optimized = sum(1 for p in pages if _is_optimized(p))
    strength += optimized / len(pages) * OPTIMIZED_RATIO_WEIGHT
    return round(strength)


def extract_topic_clusters(pages: list[PageRecord]) -> list[TopicCluster]:
    """Group pages by shared topic, strongest cluster first."""
    members: dict[str, list[PageRecord]] = {}
    for page in pages:
        for topic in extract_topics_from_page(page):
            members.setdefault(topic, []).append(page)

    clusters = []
    for topic, topic_pages in members.items():
        keywords: dict[str, None] = {}
        for page in topic_pages:
            keywords.update(dict.fromkeys(kw.keyword for kw in page.keyword_density))
        clusters.append(
            TopicCluster(
                topic=topic,
                page_count=len(topic_pages),
                avg_word_count=round(
                    sum(p.word_count for p in topic_pages) / len(topic_pages)
                ),
                keywords=list(keywords)[:MAX_CLUSTER_KEYWORDS],
                strength=calculate_topic_strength(topic_pages),
            )
        )

    clusters.sort(key=lambda c: c.strength, reverse=True)
    return clusters


def analyze_topical_coverage(
    main_pages: list[PageRecord], competitor_pages: list[PageRecord]
) -> TopicalCoverage:
    main_topics = extract_topic_clusters(main_pages)
    competitor_topics = extract_topic_clusters(competitor_pages)

    main_names = [t.topic for t in main_topics]
    competitor_names = [t.topic for t in competitor_topics]
    main_set, competitor_set = set(main_names), set(competitor_names)

    union = main_set | competitor_set
    coverage = round(len(main_set) / len(union) * 100) if union else 0

    return TopicalCoverage(
        main_topics=main_topics,
        competitor_topics=competitor_topics,
        shared_topics=[t for t in main_names if t in competitor_set],
        unique_to_main=[t for t in main_names if t not in competitor_set],
        unique_to_competitor=[t for t in competitor_names if t not in main_set],
        coverage_score=coverage,
    )


def topic_similarity(a: str, b: str) -> float:
    words_a = {w for w in a.split() if len(w) >= MIN_PHRASE_WORD_LENGTH}
    words_b = {w for w in b.split() if len(w) >= MIN_PHRASE_WORD_LENGTH}
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)


def deduplicate_topics(
    topics: list[str], similarity_threshold: float = TOPIC_DEDUP_SIMILARITY
) -> list[str]:
    """Drop topics that repeat, contain, or heavily overlap an earlier one."""
    kept: list[str] = []
    for topic in topics:
        normalized = topic.lower().strip()
        duplicate = False
        for existing in kept:
            other = existing.lower().strip()
            if normalized in other or other in normalized:
                duplicate = True
                break
            if topic_similarity(normalized, other) > similarity_threshold:
                duplicate = True
                break
        if not duplicate:
            kept.append(topic)
    return kept


def identify_missing_topics(
    coverage: TopicalCoverage, thresholds: Optional[GapThresholds] = None
) -> list[str]:
    t = thresholds or GapThresholds()
    strength = {c.topic: c.strength for c in coverage.competitor_topics}
    candidates = sorted(
        (
            topic
            for topic in coverage.unique_to_competitor
            if strength.get(topic, 0) >= t.missing_topic_min_strength
        ),
        key=lambda topic: strength[topic],
        reverse=True,
    )
    return deduplicate_topics(candidates, t.topic_dedup_similarity)[:MAX_MISSING_TOPICS]


# =============================================================================
# Keywords
# =============================================================================


class _KeywordStats(BaseModel):
    keyword: str
    page_count: int
    avg_density: float


def aggregate_keywords(pages: list[PageRecord]) -> list[_KeywordStats]:
    totals: dict[str, list[float]] = {}
    for page in pages:
        for kw in page.keyword_density:
            if not kw.keyword or not kw.density:
                continue
            totals.setdefault(kw.keyword.lower().strip(), []).append(kw.density)
    return [
        _KeywordStats(
            keyword=keyword,
            page_count=len(densities),
            avg_density=sum(densities) / len(densities),
        )
        for keyword, densities in totals.items()
    ]


def estimate_keyword_difficulty(keyword: str, avg_density: float) -> Difficulty:
    """Long-tail phrases are easier; short, dense keywords are contested."""
    word_count = len(keyword.split())
    if word_count >= 4:
        return "low"
    if word_count == 3:
        return "medium"
    if avg_density > 2:
        return "high"
    if avg_density > 1:
        return "medium"
    return "low"


def calculate_keyword_opportunity(page_count: int, avg_density: float) -> int:
    score = min(page_count * PAGE_COUNT_SCORE_FACTOR, MAX_PAGE_COUNT_SCORE)

    low, high = IDEAL_DENSITY_RANGE
    if low <= avg_density <= high:
        score += IDEAL_DENSITY_BONUS
    elif avg_density > 0:
        score += ANY_DENSITY_BONUS

    if (
        page_count >= ACTIVE_TARGETING_MIN_PAGES
        and avg_density >= ACTIVE_TARGETING_MIN_DENSITY
    ):
        score += 1

    return min(score, MAX_OPPORTUNITY)


def calculate_opportunity_score(entries: list[KeywordGapEntry]) -> int:
    if not entries:
        return 0
    high = sum(1 for e in entries if e.opportunity >= HIGH_OPPORTUNITY_MIN)
    medium = sum(
        1 for e in entries if MEDIUM_OPPORTUNITY_MIN <= e.opportunity < HIGH_OPPORTUNITY_MIN
    )
    return round((high * 10 + medium * 5) / max(len(entries) * 0.1, 1))


def analyze_keyword_gaps(
    main_pages: list[PageRecord], competitor_pages: list[PageRecord]
) -> KeywordGapAnalysis:
    main = {kw.keyword: kw for kw in aggregate_keywords(main_pages)}
    competitor = aggregate_keywords(competitor_pages)
    competitor_by_keyword = {kw.keyword: kw for kw in competitor}

    competitor_only = [kw for kw in competitor if kw.keyword not in main]
    weak = [
        keyword
        for keyword, kw in main.items()
        if keyword in competitor_by_keyword
        and competitor_by_keyword[keyword].page_count > kw.page_count
    ]

    entries = sorted(
        (
            KeywordGapEntry(
                keyword=kw.keyword,
                competitor_pages=kw.page_count,
                main_pages=0,
                difficulty=estimate_keyword_difficulty(kw.keyword, kw.avg_density),
                opportunity=calculate_keyword_opportunity(kw.page_count, kw.avg_density),
            )
            for kw in competitor_only
        ),
        key=lambda e: e.opportunity,
        reverse=True,
    )

    return KeywordGapAnalysis(
        competitor_keywords=entries,
        missing_keywords=[kw.keyword for kw in competitor_only[:MAX_MISSING_KEYWORDS]],
        weak_keywords=weak[:MAX_WEAK_KEYWORDS],
        opportunity_score=calculate_opportunity_score(entries),
    )


# =============================================================================
# Volume and optimization
# =============================================================================


def count_pages_by_area(pages: list[PageRecord], area: str) -> int:
    keywords = CONTENT_AREAS.get(area, ())
    count = 0
    for page in pages:
        url = page.url.lower()
        title = (page.title or "").lower()
        if any(k in url or k in title for k in keywords):
            count += 1
    return count


def analyze_content_volume_gaps(
    main_pages: list[PageRecord],
    competitor_pages: list[PageRecord],
    thresholds: Optional[GapThresholds] = None,
) -> list[ContentVolumeGap]:
    t = thresholds or GapThresholds()
    gaps = []
    for area in CONTENT_AREAS:
        main_count = count_pages_by_area(main_pages, area)
        competitor_count = count_pages_by_area(competitor_pages, area)
        gap = competitor_count - main_count
        if gap <= 0:
            continue
        gaps.append(
            ContentVolumeGap(
                area=area,
                main_count=main_count,
                competitor_count=competitor_count,
                gap=gap,
                opportunity=(
                    "high"
                    if gap >= t.high_volume_gap
                    else "medium" if gap >= t.medium_volume_gap else "low"
                ),
            )
        )
    gaps.sort(key=lambda g: g.gap, reverse=True)
    return gaps


def _average(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def alt_text_coverage(pages: list[PageRecord]) -> float:
    images = [img for page in pages for img in page.images]
    if not images:
        return 0.0
    with_alt = sum(1 for img in images if img.alt and img.alt.strip())
    return with_alt / len(images) * 100


def heading_usage_rate(pages: list[PageRecord]) -> float:
    if not pages:
        return 0.0
    return sum(1 for p in pages if p.headings) / len(pages) * 100


def identify_under_optimized_areas(
    main_pages: list[PageRecord],
    competitor_pages: list[PageRecord],
    thresholds: Optional[GapThresholds] = None,
) -> list[str]:
    t = thresholds or GapThresholds()
    areas = []

    main_words = _average([p.word_count for p in main_pages])
    competitor_words = _average([p.word_count for p in competitor_pages])
    if competitor_words > main_words * t.word_count_ratio:
        areas.append(AREA_CONTENT_DEPTH)

    if alt_text_coverage(competitor_pages) > alt_text_coverage(main_pages) + t.alt_text_margin:
        areas.append(AREA_IMAGE_ALT)

    main_links = _average([len(p.internal_links) for p in main_pages])
    competitor_links = _average([len(p.internal_links) for p in competitor_pages])
    if competitor_links > main_links * t.internal_links_ratio:
        areas.append(AREA_INTERNAL_LINKING)

    if (
        heading_usage_rate(competitor_pages)
        > heading_usage_rate(main_pages) + t.heading_usage_margin
    ):
        areas.append(AREA_HEADINGS)

    return areas


# =============================================================================
# Entry point
# =============================================================================


def analyze_gaps(
    main_pages: list[PageRecord],
    competitor_pages: list[PageRecord],
    thresholds: Optional[GapThresholds] = None,
) -> ContentGapAnalysis:
    """Compare the main site's pages against a competitor's pages."""
    t = thresholds or GapThresholds()
    logger.info(
        f"Starting gap analysis: {len(main_pages)} main pages vs "
        f"{len(competitor_pages)} competitor pages"
    )

    coverage = analyze_topical_coverage(main_pages, competitor_pages)
    keyword_gaps = analyze_keyword_gaps(main_pages, competitor_pages)

    opportunity_keywords = [
        e.keyword
        for e in keyword_gaps.competitor_keywords
        if e.opportunity >= t.opportunity_keyword_min and e.difficulty != "high"
    ][:MAX_OPPORTUNITY_KEYWORDS]

    result = ContentGapAnalysis(
        missing_topics=identify_missing_topics(coverage, t),
        under_optimized_areas=identify_under_optimized_areas(
            main_pages, competitor_pages, t
        ),
        opportunity_keywords=opportunity_keywords,
        content_volume_gaps=analyze_content_volume_gaps(main_pages, competitor_pages, t),
        topical_coverage=coverage,
        keyword_gaps=keyword_gaps,
    )
    logger.info(
        f"Gap analysis complete: coverage {coverage.coverage_score}%, "
        f"{len(result.missing_topics)} missing topics, "
        f"{len(opportunity_keywords)} opportunity keywords"
    )
    return result
