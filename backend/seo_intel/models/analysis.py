"""End-to-end analysis request / result models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from seo_intel.models.competitive import CompetitiveComparison, ContentGapAnalysis
from seo_intel.models.content import ContentDuplicationAnalysis
from seo_intel.models.crawl import PageRecord


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AnalysisRequest(BaseModel):
    """Request to analyze a site, optionally against one competitor."""

    url: str = Field(..., description="Site URL or bare domain")
    user_id: str = Field(..., description="Owner of the analysis")
    competitor_url: Optional[str] = Field(None, description="Competitor site URL")
    max_pages: int = Field(default=20, ge=1, le=500)
    delay_ms: int = Field(default=500, ge=0)
    follow_external_links: bool = False
    use_sitemap: bool = Field(
        default=True, description="Seed the crawl from sitemaps listed in robots.txt"
    )


class AnalysisResult(BaseModel):
    """Complete result of one pipeline run; this is the stored record."""

    analysis_id: Optional[str] = Field(None, description="Assigned by storage")
    domain: str
    user_id: str
    crawled_urls: list[str] = Field(default_factory=list)
    pages: list[PageRecord] = Field(default_factory=list)
    failed_pages: int = Field(default=0, ge=0)
    content_duplication: Optional[ContentDuplicationAnalysis] = None
    competitor_domain: Optional[str] = None
    gap_analysis: Optional[ContentGapAnalysis] = None
    competitive_comparison: Optional[CompetitiveComparison] = None
    processing_time_ms: int = Field(default=0, ge=0)
    errors: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
