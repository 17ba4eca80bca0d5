"""Crawl and page-signal data models."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CrawlTarget(BaseModel):
    """A discovered URL waiting in the crawl queue."""

    url: str = Field(..., description="Normalized URL")
    priority: int = Field(..., description="Higher is crawled first")


class RobotsRules(BaseModel):
    """Rules from robots.txt that apply to this crawler."""

    disallowed_paths: set[str] = Field(
        default_factory=set, description="Disallowed path prefixes / wildcards"
    )
    sitemaps: list[str] = Field(default_factory=list, description="Sitemap URLs found")


# =============================================================================
# Page Signals
# =============================================================================


class Heading(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: int = Field(..., ge=1, le=6)
    text: str


class ImageRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    src: str
    alt: Optional[str] = None


class KeywordDensity(BaseModel):
    model_config = ConfigDict(frozen=True)

    keyword: str
    count: int = Field(..., ge=0)
    density: float = Field(..., ge=0.0, description="Percentage of words on the page")


class PageRecord(BaseModel):
    """
    Structured on-page signals for one fetched page.

    Validated once at the extractor boundary and immutable afterwards, so
    downstream analyzers can rely on its shape without re-checking.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Page URL")
    title: Optional[str] = Field(None, description="<title> text")
    meta_description: Optional[str] = Field(None, description="Meta description")
    headings: tuple[Heading, ...] = Field(default_factory=tuple)
    images: tuple[ImageRef, ...] = Field(default_factory=tuple)
    paragraphs: tuple[str, ...] = Field(
        default_factory=tuple, description="Substantial paragraph texts"
    )
    word_count: int = Field(default=0, ge=0)
    keyword_density: tuple[KeywordDensity, ...] = Field(default_factory=tuple)
    internal_links: tuple[str, ...] = Field(default_factory=tuple)
    raw_text_sample: str = Field(default="", description="Leading slice of body text")
    meta_robots: Optional[str] = None
    canonical: Optional[str] = None
    has_structured_data: bool = False


# =============================================================================
# Progress
# =============================================================================


class ProgressEvent(BaseModel):
    """Incremental progress emitted to a ``ProgressSink``."""

    pages_crawled: int = Field(default=0, ge=0)
    total_discovered: int = Field(default=0, ge=0)
    message: str = ""
    failed_pages: int = Field(default=0, ge=0)
    current_url: Optional[str] = None
