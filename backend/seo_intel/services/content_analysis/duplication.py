"""
Site-level content duplication report.

Runs the three-tier detector on each content kind (titles, descriptions,
headings, paragraphs) and, when a completion service is configured,
merges in the AI-assisted groups after the detector's own.
"""

import logging
from typing import Optional

from seo_intel.models.content import (
    ContentDuplicationAnalysis,
    ContentItem,
    ContentRepetition,
    ContentType,
    DuplicateGroup,
    HeadingRepetition,
)
from seo_intel.models.crawl import PageRecord
from seo_intel.services.content_analysis.ai_enhancer import (
    AIEnhancedDetector,
    EnhancerOptions,
    with_default_explanations,
)
from seo_intel.services.content_analysis.constants import (
    MAX_EXAMPLES,
    OVERALL_RECOMMENDATIONS,
    RECOMMENDATIONS,
    UNIQUE_CONTENT_MESSAGES,
)
from seo_intel.services.content_analysis.preprocessor import extract_page_content
from seo_intel.services.content_analysis.similarity import (
    SimilarityOptions,
    detect_duplicates,
    normalize_content,
)
from seo_intel.services.ports import TextCompletionService

logger = logging.getLogger(__name__)


def _group_key(group: DuplicateGroup) -> tuple[frozenset[str], str]:
    return frozenset(group.urls), normalize_content(group.content)


def merge_groups(
    primary: list[DuplicateGroup], extra: list[DuplicateGroup]
) -> list[DuplicateGroup]:
    """Append *extra* groups not already present in *primary* (same URLs + text)."""
    seen = {_group_key(g) for g in primary}
    merged = list(primary)
    for group in extra:
        key = _group_key(group)
        if key not in seen:
            seen.add(key)
            merged.append(group)
    return merged


class ContentDuplicationAnalyzer:
    """Builds a ``ContentDuplicationAnalysis`` from extracted page records."""

    def __init__(
        self,
        completion: Optional[TextCompletionService] = None,
        *,
        use_ai: bool = True,
        similarity_options: Optional[SimilarityOptions] = None,
        enhancer_options: Optional[EnhancerOptions] = None,
    ) -> None:
        self.similarity_options = similarity_options or SimilarityOptions()
        self.enhancer: Optional[AIEnhancedDetector] = None
        if completion is not None and use_ai:
            options = enhancer_options or EnhancerOptions(
                similarity=self.similarity_options
            )
            self.enhancer = AIEnhancedDetector(completion, options)

    async def analyze(self, pages: list[PageRecord]) -> ContentDuplicationAnalysis:
        logger.info(f"Analyzing content repetition across {len(pages)} pages")
        content = extract_page_content(pages)
        insights: list[str] = []

        titles = await self._analyze_kind(content.titles, "titles", insights)
        descriptions = await self._analyze_kind(
            content.descriptions, "descriptions", insights
        )
        paragraphs = await self._analyze_kind(content.paragraphs, "paragraphs", insights)

        all_headings = content.all_headings()
        headings = HeadingRepetition(
            **(await self._analyze_kind(all_headings, "headings", insights)).model_dump()
        )
        for level, items in content.headings.items():
            headings.by_level[level] = detect_duplicates(
                items, self.similarity_options
            ).duplicate_groups

        analysis = ContentDuplicationAnalysis(
            title_repetition=titles,
            description_repetition=descriptions,
            heading_repetition=headings,
            paragraph_repetition=paragraphs,
            overall_recommendations=list(OVERALL_RECOMMENDATIONS),
            strategic_insights=insights,
        )
        logger.info(
            f"Content repetition: titles={titles.repetitive_count}, "
            f"descriptions={descriptions.repetitive_count}, "
            f"headings={headings.repetitive_count}, "
            f"paragraphs={paragraphs.repetitive_count}"
        )
        return analysis

    async def _analyze_kind(
        self, items: list[ContentItem], content_type: ContentType, insights: list[str]
    ) -> ContentRepetition:
        detected = detect_duplicates(items, self.similarity_options)
        groups = [with_default_explanations(g) for g in detected.duplicate_groups]

        if self.enhancer is not None and items:
            enhanced = await self.enhancer.enhance(items, content_type)
            groups = merge_groups(groups, enhanced.duplicate_groups)
            insights.extend(enhanced.strategic_insights)

        return ContentRepetition(
            repetitive_count=sum(len(g.urls) - 1 for g in groups),
            total_count=len(items),
            examples=[g.content for g in groups[:MAX_EXAMPLES]],
            recommendations=list(
                RECOMMENDATIONS[content_type]
                if groups
                else [UNIQUE_CONTENT_MESSAGES[content_type]]
            ),
            duplicate_groups=groups,
        )
