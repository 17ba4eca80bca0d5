"""Competitive gap analysis data models."""

from typing import Literal

from pydantic import BaseModel, Field

Difficulty = Literal["low", "medium", "high"]
Advantage = Literal["main", "competitor", "neutral"]
Significance = Literal["critical", "important", "minor"]
Priority = Literal["high", "medium", "low"]
GapDifficulty = Literal["easy", "medium", "hard"]


class TopicCluster(BaseModel):
    """Pages on one site sharing an extracted topic phrase."""

    topic: str
    page_count: int = Field(..., ge=0)
    avg_word_count: int = Field(default=0, ge=0)
    keywords: list[str] = Field(default_factory=list)
    strength: int = Field(default=0, ge=0, le=100)


class KeywordGapEntry(BaseModel):
    """A keyword the competitor uses and the main site does not."""

    keyword: str
    competitor_pages: int = Field(..., ge=0)
    main_pages: int = Field(default=0, ge=0)
    difficulty: Difficulty
    opportunity: int = Field(..., ge=0, le=10, description="1-10 opportunity score")


class ContentVolumeGap(BaseModel):
    area: str
    main_count: int
    competitor_count: int
    gap: int
    opportunity: Difficulty


class TopicalCoverage(BaseModel):
    main_topics: list[TopicCluster] = Field(default_factory=list)
    competitor_topics: list[TopicCluster] = Field(default_factory=list)
    shared_topics: list[str] = Field(default_factory=list)
    unique_to_main: list[str] = Field(default_factory=list)
    unique_to_competitor: list[str] = Field(default_factory=list)
    coverage_score: int = Field(default=0, ge=0, le=100)


class KeywordGapAnalysis(BaseModel):
    competitor_keywords: list[KeywordGapEntry] = Field(default_factory=list)
    missing_keywords: list[str] = Field(default_factory=list)
    weak_keywords: list[str] = Field(default_factory=list)
    opportunity_score: int = 0


class ContentGapAnalysis(BaseModel):
    """Result of comparing the main site against one competitor."""

    missing_topics: list[str] = Field(default_factory=list)
    under_optimized_areas: list[str] = Field(default_factory=list)
    opportunity_keywords: list[str] = Field(default_factory=list)
    content_volume_gaps: list[ContentVolumeGap] = Field(default_factory=list)
    topical_coverage: TopicalCoverage = Field(default_factory=TopicalCoverage)
    keyword_gaps: KeywordGapAnalysis = Field(default_factory=KeywordGapAnalysis)


# =============================================================================
# Metric comparison and insights
# =============================================================================


class SiteMetrics(BaseModel):
    """On-page scores for one site. Optimization scores are % of pages."""

    title_optimization: int = Field(default=0, ge=0, le=100)
    description_optimization: int = Field(default=0, ge=0, le=100)
    headings_optimization: int = Field(default=0, ge=0, le=100)
    images_optimization: int = Field(default=0, ge=0, le=100)
    links_optimization: int = Field(default=0, ge=0, le=100)
    content_quality: int = Field(default=0, ge=0, le=100)
    critical_issues: int = Field(default=0, ge=0, description="Missing title/description/H1 count")


class MetricComparison(BaseModel):
    main: float
    competitor: float
    difference: float = Field(..., description="main - competitor")
    percentage_diff: int = Field(..., ge=0)
    advantage: Advantage
    significance: Significance


class PerformanceGap(BaseModel):
    """A metric where the competitor is meaningfully ahead."""

    metric: str
    gap: float
    impact: Priority
    difficulty: GapDifficulty


class CompetitorInsight(BaseModel):
    category: str
    priority: Priority
    impact: int = Field(..., ge=1, le=10)
    recommendation: str
    evidence: list[str] = Field(default_factory=list)
    action_items: list[str] = Field(default_factory=list)


class CompetitiveSummary(BaseModel):
    overall_advantage: Advantage = "neutral"
    strength_areas: list[str] = Field(default_factory=list)
    weakness_areas: list[str] = Field(default_factory=list)
    quick_wins: list[str] = Field(default_factory=list)
    long_term_opportunities: list[str] = Field(default_factory=list)


class CompetitiveComparison(BaseModel):
    """Metric-by-metric comparison against one competitor, with insights."""

    main_metrics: SiteMetrics
    competitor_metrics: SiteMetrics
    metrics: dict[str, MetricComparison] = Field(default_factory=dict)
    performance_gaps: list[PerformanceGap] = Field(default_factory=list)
    insights: list[CompetitorInsight] = Field(default_factory=list)
    summary: CompetitiveSummary = Field(default_factory=CompetitiveSummary)
    ai_insights: bool = Field(default=False, description="Insights came from the completion service")
