"""
Token budgeting and batching for completion requests.

Token counts here are an approximation (about four characters per token
plus a 20% formatting margin), not a real tokenizer. Batches are sized
against that estimate, so the budget is deliberately conservative.
"""

import math
from typing import Literal, Optional

from pydantic import BaseModel, Field

from seo_intel.models.content import (
    AnalysisBatch,
    ContentItem,
    ContentStats,
    ContentType,
    TokenBudget,
)
from seo_intel.services.content_analysis.constants import (
    ABOUT_CONTACT_BOOST,
    CHARS_PER_TOKEN,
    CONTENT_TYPE_WEIGHTS,
    DEFAULT_BATCH_SIZE,
    HOME_PAGE_BOOST,
    MAX_INPUT_TOKENS_BY_COMPLEXITY,
    MAX_OUTPUT_TOKENS,
    MAX_PROMPT_ITEM_LENGTH,
    RECURRING_CONTENT_BOOST,
    RESERVED_TOKENS,
    TOKEN_ESTIMATE_BUFFER,
)

Complexity = Literal["low", "medium", "high"]


class BatchOptions(BaseModel):
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)
    prioritize_by_impact: bool = True


def estimate_tokens(text: str) -> int:
    """Approximate token count: ceil(chars / 4) plus a 20% buffer."""
    base = math.ceil(len(text) / CHARS_PER_TOKEN)
    return base + math.ceil(base * TOKEN_ESTIMATE_BUFFER)


def create_token_budget(
    complexity: Complexity | ContentStats = "medium",
    *,
    reserved_tokens: int = RESERVED_TOKENS,
    max_output_tokens: int = MAX_OUTPUT_TOKENS,
) -> TokenBudget:
    """Budget for one completion call, sized by content complexity tier."""
    if isinstance(complexity, ContentStats):
        complexity = complexity.complexity
    max_input = MAX_INPUT_TOKENS_BY_COMPLEXITY[complexity]
    return TokenBudget(
        max_input_tokens=max_input,
        max_output_tokens=max_output_tokens,
        reserved_tokens=reserved_tokens,
        available_tokens=max_input - reserved_tokens,
    )


def prioritize_content(
    items: list[ContentItem], content_type: ContentType
) -> list[ContentItem]:
    """Order items by likely SEO impact, highest first (stable for ties).

    Score = content type weight, +20 for home pages, +10 for about/contact
    pages, +15 when the same text (case-insensitive) appears more than once.
    """
    base = CONTENT_TYPE_WEIGHTS[content_type]
    occurrences: dict[str, int] = {}
    for item in items:
        key = item.content.lower()
        occurrences[key] = occurrences.get(key, 0) + 1

    def score(item: ContentItem) -> int:
        url = item.url.lower()
        priority = base
        if url.endswith("/") or "home" in url:
            priority += HOME_PAGE_BOOST
        if "about" in url or "contact" in url:
            priority += ABOUT_CONTACT_BOOST
        if occurrences[item.content.lower()] > 1:
            priority += RECURRING_CONTENT_BOOST
        return priority

    return sorted(items, key=score, reverse=True)


def create_analysis_batches(
    items: list[ContentItem],
    content_type: ContentType,
    budget: TokenBudget,
    options: Optional[BatchOptions] = None,
) -> list[AnalysisBatch]:
    """Greedily pack *items* into token-bounded batches.

    A batch closes when the next item would push it past
    ``budget.available_tokens`` or when it reaches ``batch_size`` items.
    An item that alone exceeds the budget becomes a batch of its own.
    Every input item lands in exactly one batch.
    """
    if not items:
        return []

    opts = options or BatchOptions()
    ordered = (
        prioritize_content(items, content_type) if opts.prioritize_by_impact else items
    )

    batches: list[AnalysisBatch] = []
    current: list[ContentItem] = []
    current_tokens = 0

    def close() -> None:
        nonlocal current, current_tokens
        batches.append(
            AnalysisBatch(
                items=current,
                estimated_tokens=current_tokens,
                priority=len(batches) + 1,
                content_type=content_type,
            )
        )
        current = []
        current_tokens = 0

    for item in ordered:
        item_tokens = estimate_tokens(item.content)
        if current and current_tokens + item_tokens > budget.available_tokens:
            close()
        current.append(item)
        current_tokens += item_tokens
        if len(current) >= opts.batch_size:
            close()

    if current:
        close()

    return batches


def sanitize_for_prompt(text: str, max_length: int = MAX_PROMPT_ITEM_LENGTH) -> str:
    """Escape quotes and control whitespace, then truncate."""
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return escaped[:max_length]
