from seo_intel.models.analysis import AnalysisRequest, AnalysisResult
from seo_intel.models.competitive import (
    CompetitiveComparison,
    CompetitiveSummary,
    CompetitorInsight,
    ContentGapAnalysis,
    ContentVolumeGap,
    KeywordGapAnalysis,
    KeywordGapEntry,
    MetricComparison,
    PerformanceGap,
    SiteMetrics,
    TopicalCoverage,
    TopicCluster,
)
from seo_intel.models.content import (
    AnalysisBatch,
    ContentCategory,
    ContentDuplicationAnalysis,
    ContentItem,
    ContentRepetition,
    ContentStats,
    DuplicateAnalysisResult,
    DuplicateGroup,
    EnhancedAnalysisResult,
    ExtractedContent,
    HeadingRepetition,
    IntentConflict,
    TemplatePattern,
    TokenBudget,
)
from seo_intel.models.crawl import (
    CrawlTarget,
    Heading,
    ImageRef,
    KeywordDensity,
    PageRecord,
    ProgressEvent,
    RobotsRules,
)

__all__ = [
    # Analysis
    "AnalysisRequest",
    "AnalysisResult",
    # Crawl
    "CrawlTarget",
    "Heading",
    "ImageRef",
    "KeywordDensity",
    "PageRecord",
    "ProgressEvent",
    "RobotsRules",
    # Content duplication
    "AnalysisBatch",
    "ContentCategory",
    "ContentDuplicationAnalysis",
    "ContentItem",
    "ContentRepetition",
    "ContentStats",
    "DuplicateAnalysisResult",
    "DuplicateGroup",
    "EnhancedAnalysisResult",
    "ExtractedContent",
    "HeadingRepetition",
    "IntentConflict",
    "TemplatePattern",
    "TokenBudget",
    # Competitive
    "CompetitiveComparison",
    "CompetitiveSummary",
    "CompetitorInsight",
    "ContentGapAnalysis",
    "ContentVolumeGap",
    "KeywordGapAnalysis",
    "KeywordGapEntry",
    "MetricComparison",
    "PerformanceGap",
    "SiteMetrics",
    "TopicalCoverage",
    "TopicCluster",
]
