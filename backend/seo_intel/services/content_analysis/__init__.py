"""Content analysis package — duplicate detection with optional AI enhancement.

Re-exports the public API so consumers can use::

    from seo_intel.services.content_analysis import detect_duplicates, AIEnhancedDetector
"""

from seo_intel.services.content_analysis.ai_enhancer import (
    AIEnhancedDetector,
    EnhancerOptions,
)
from seo_intel.services.content_analysis.completion import AnthropicCompletionService
from seo_intel.services.content_analysis.duplication import ContentDuplicationAnalyzer
from seo_intel.services.content_analysis.preprocessor import (
    calculate_content_stats,
    extract_page_content,
)
from seo_intel.services.content_analysis.similarity import (
    SimilarityOptions,
    detect_duplicates,
)
from seo_intel.services.content_analysis.token_budget import (
    BatchOptions,
    create_analysis_batches,
    create_token_budget,
    estimate_tokens,
)

__all__ = [
    "AIEnhancedDetector",
    "AnthropicCompletionService",
    "BatchOptions",
    "ContentDuplicationAnalyzer",
    "EnhancerOptions",
    "SimilarityOptions",
    "calculate_content_stats",
    "create_analysis_batches",
    "create_token_budget",
    "detect_duplicates",
    "estimate_tokens",
    "extract_page_content",
]
