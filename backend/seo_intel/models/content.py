"""Content duplication data models (detector, batcher, AI enhancer)."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ContentType = Literal["titles", "descriptions", "headings", "paragraphs"]
ImpactLevel = Literal["Critical", "High", "Medium", "Low"]
DuplicationType = Literal[
    "exact", "fuzzy", "semantic", "template", "intent", "boilerplate"
]
CategoryType = Literal["boilerplate", "navigation", "value", "cta", "template"]
BusinessImpact = Literal["high", "medium", "low"]


class ContentItem(BaseModel):
    """A single unit of content (one title, heading, paragraph...) on a page."""

    model_config = ConfigDict(frozen=True)

    content: str
    url: str
    page_index: int = Field(default=0, description="Index of the source page")


class ExtractedContent(BaseModel):
    """Content items grouped by kind, derived from a set of pages."""

    titles: list[ContentItem] = Field(default_factory=list)
    descriptions: list[ContentItem] = Field(default_factory=list)
    headings: dict[str, list[ContentItem]] = Field(
        default_factory=lambda: {f"h{i}": [] for i in range(1, 7)}
    )
    paragraphs: list[ContentItem] = Field(default_factory=list)
    total_pages: int = 0

    def all_headings(self) -> list[ContentItem]:
        return [item for level in sorted(self.headings) for item in self.headings[level]]


class ContentStats(BaseModel):
    total_items: int = 0
    average_length: int = 0
    estimated_tokens: int = 0
    complexity: Literal["low", "medium", "high"] = "low"


# =============================================================================
# Duplicate Groups
# =============================================================================


class DuplicateGroup(BaseModel):
    """A cluster of content judged similar enough to be one SEO issue."""

    content: str = Field(..., description="Representative content")
    urls: list[str] = Field(..., min_length=2, description="Affected page URLs")
    similarity_score: int = Field(..., ge=0, le=100)
    impact_level: ImpactLevel
    duplication_type: DuplicationType
    root_cause: Optional[str] = None
    improvement_strategy: Optional[str] = None
    template_pattern: Optional[str] = None


class DuplicateStats(BaseModel):
    exact_matches: int = 0
    fuzzy_matches: int = 0
    semantic_matches: int = 0


class DuplicateAnalysisResult(BaseModel):
    """Output of the three-tier similarity detector."""

    duplicate_groups: list[DuplicateGroup] = Field(default_factory=list)
    duplicate_count: int = Field(
        default=0, description="Sum over groups of (members - 1)"
    )
    total_analyzed: int = 0
    examples: list[str] = Field(default_factory=list)
    stats: DuplicateStats = Field(default_factory=DuplicateStats)


# =============================================================================
# Token Budgeting
# =============================================================================


class TokenBudget(BaseModel):
    max_input_tokens: int
    max_output_tokens: int
    reserved_tokens: int
    available_tokens: int


class AnalysisBatch(BaseModel):
    """A token-bounded slice of content for one completion request."""

    items: list[ContentItem]
    estimated_tokens: int
    priority: int = Field(..., ge=1, description="1 = highest priority")
    content_type: ContentType


# =============================================================================
# AI-Assisted Analysis
# =============================================================================


class TemplateInstance(BaseModel):
    content: str
    url: str
    extracted_variables: dict[str, str] = Field(default_factory=dict)


class TemplatePattern(BaseModel):
    """Content following one pattern where only variable slots change."""

    pattern: str
    variables: list[str]
    instances: list[TemplateInstance]
    business_impact: BusinessImpact = "medium"
    recommendation: str


class CompetingPage(BaseModel):
    url: str
    content: str
    intent_match: float = 0.0


class IntentConflict(BaseModel):
    """Pages competing for the same search intent."""

    intent: str
    confidence: float
    competing_pages: list[CompetingPage]
    consolidation_suggestion: Optional[str] = None


class ContentCategory(BaseModel):
    type: CategoryType
    confidence: float
    reason: str


class EnhancerStats(BaseModel):
    exact_matches: int = 0
    template_matches: int = 0
    intent_conflicts: int = 0
    boilerplate_content: int = 0
    fallbacks: list[str] = Field(
        default_factory=list, description="Analysis kinds that used the heuristic"
    )


class EnhancedAnalysisResult(BaseModel):
    duplicate_groups: list[DuplicateGroup] = Field(default_factory=list)
    template_patterns: list[TemplatePattern] = Field(default_factory=list)
    intent_conflicts: list[IntentConflict] = Field(default_factory=list)
    content_categories: dict[str, ContentCategory] = Field(default_factory=dict)
    strategic_insights: list[str] = Field(default_factory=list)
    duplicate_count: int = 0
    total_analyzed: int = 0
    stats: EnhancerStats = Field(default_factory=EnhancerStats)


# =============================================================================
# Site-Level Duplication Report
# =============================================================================


class ContentRepetition(BaseModel):
    repetitive_count: int = 0
    total_count: int = 0
    examples: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    duplicate_groups: list[DuplicateGroup] = Field(default_factory=list)


class HeadingRepetition(ContentRepetition):
    by_level: dict[str, list[DuplicateGroup]] = Field(
        default_factory=lambda: {f"h{i}": [] for i in range(1, 7)}
    )


class ContentDuplicationAnalysis(BaseModel):
    title_repetition: ContentRepetition = Field(default_factory=ContentRepetition)
    description_repetition: ContentRepetition = Field(
        default_factory=ContentRepetition
    )
    heading_repetition: HeadingRepetition = Field(default_factory=HeadingRepetition)
    paragraph_repetition: ContentRepetition = Field(default_factory=ContentRepetition)
    overall_recommendations: list[str] = Field(default_factory=list)
    strategic_insights: list[str] = Field(default_factory=list)
