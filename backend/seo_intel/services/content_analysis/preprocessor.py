"""Turns PageRecords into sanitized ContentItems grouped by kind."""

import math
import re

from seo_intel.models.content import ContentItem, ContentStats, ExtractedContent
from seo_intel.models.crawl import PageRecord
from seo_intel.services.content_analysis.constants import (
    CHARS_PER_TOKEN,
    HIGH_COMPLEXITY_ITEMS,
    HIGH_COMPLEXITY_TOKENS,
    MAX_ITEM_LENGTH,
    MEDIUM_COMPLEXITY_ITEMS,
    MEDIUM_COMPLEXITY_TOKENS,
)

_WHITESPACE_RE = re.compile(r"\s+")
_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\u00A0-\uFFFF]")


def sanitize_content(text: str) -> str:
    """Trim, collapse whitespace, drop non-printable characters, cap length."""
    text = _WHITESPACE_RE.sub(" ", text.strip())
    return _NON_PRINTABLE_RE.sub("", text)[:MAX_ITEM_LENGTH]


def extract_page_content(pages: list[PageRecord]) -> ExtractedContent:
    extracted = ExtractedContent(total_pages=len(pages))

    for index, page in enumerate(pages):
        if page.title and page.title.strip():
            extracted.titles.append(
                ContentItem(
                    content=sanitize_content(page.title), url=page.url, page_index=index
                )
            )

        if page.meta_description and page.meta_description.strip():
            extracted.descriptions.append(
                ContentItem(
                    content=sanitize_content(page.meta_description),
                    url=page.url,
                    page_index=index,
                )
            )

        for heading in page.headings:
            if heading.text.strip():
                extracted.headings[f"h{heading.level}"].append(
                    ContentItem(
                        content=sanitize_content(heading.text),
                        url=page.url,
                        page_index=index,
                    )
                )

        # PageSignalExtractor already limits paragraph count and length
        for paragraph in page.paragraphs:
            if not paragraph.strip():
                continue
            extracted.paragraphs.append(
                ContentItem(
                    content=sanitize_content(paragraph), url=page.url, page_index=index
                )
            )

    return extracted


def calculate_content_stats(items: list[ContentItem]) -> ContentStats:
    """Volume statistics used to pick a token budget tier."""
    if not items:
        return ContentStats()

    total_length = sum(len(item.content) for item in items)
    estimated_tokens = math.ceil(total_length / CHARS_PER_TOKEN)

    complexity = "low"
    if len(items) > HIGH_COMPLEXITY_ITEMS or estimated_tokens > HIGH_COMPLEXITY_TOKENS:
        complexity = "high"
    elif (
        len(items) > MEDIUM_COMPLEXITY_ITEMS
        or estimated_tokens > MEDIUM_COMPLEXITY_TOKENS
    ):
        complexity = "medium"

    return ContentStats(
        total_items=len(items),
        average_length=round(total_length / len(items)),
        estimated_tokens=estimated_tokens,
        complexity=complexity,
    )
