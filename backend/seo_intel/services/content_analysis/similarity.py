"""
Three-tier duplicate detection over content items.

Tier 1 (exact) groups items whose normalized text is identical. Tier 2
(fuzzy) and Tier 3 (semantic) cluster the remaining items greedily from a
seed: every later item scoring at or above the threshold against the seed
joins its group. This is single-link clustering against the seed only, so
borderline chains (A~B, B~C, A!~C) are not merged. That is intentional.

Pure functions, no network or AI dependency.
"""

import re
from typing import Callable, Optional

from pydantic import BaseModel, Field

from seo_intel.models.content import (
    ContentItem,
    DuplicateAnalysisResult,
    DuplicateGroup,
    DuplicateStats,
    DuplicationType,
    ImpactLevel,
)
from seo_intel.services.content_analysis.constants import (
    CRITICAL_IMPACT_MIN_PAGES,
    FUZZY_MATCH_THRESHOLD,
    FUZZY_WEIGHT_JACCARD,
    FUZZY_WEIGHT_LENGTH,
    FUZZY_WEIGHT_LEVENSHTEIN,
    HIGH_IMPACT_MIN_PAGES,
    MAX_EXAMPLES,
    MEDIUM_IMPACT_MIN_PAGES,
    MIN_CONTENT_LENGTH,
    MIN_SIGNIFICANT_WORD_LENGTH,
    SEMANTIC_MATCH_THRESHOLD,
    SEMANTIC_WEIGHT_JACCARD,
    SEMANTIC_WEIGHT_KEYPHRASE,
    SEMANTIC_WEIGHT_STRUCTURE,
)

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")


class SimilarityOptions(BaseModel):
    """Thresholds for the detector. Defaults are the tuned production values."""

    fuzzy_match_threshold: int = Field(default=FUZZY_MATCH_THRESHOLD, ge=0, le=100)
    semantic_threshold: int = Field(default=SEMANTIC_MATCH_THRESHOLD, ge=0, le=100)
    min_content_length: int = Field(default=MIN_CONTENT_LENGTH, ge=0)
    critical_min_pages: int = CRITICAL_IMPACT_MIN_PAGES
    high_min_pages: int = HIGH_IMPACT_MIN_PAGES
    medium_min_pages: int = MEDIUM_IMPACT_MIN_PAGES


# =============================================================================
# Text metrics (all return 0-100)
# =============================================================================


def normalize_content(text: str) -> str:
    """Case-fold, strip punctuation, and collapse whitespace."""
    text = _PUNCTUATION_RE.sub("", text.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def _significant_words(text: str) -> list[str]:
    return [w for w in text.lower().split() if len(w) >= MIN_SIGNIFICANT_WORD_LENGTH]


def _set_similarity(a: set, b: set) -> int:
    if not a and not b:
        return 100
    if not a or not b:
        return 0
    return round(len(a & b) / len(a | b) * 100)


def edit_distance(a: str, b: str) -> int:
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (ca != cb),
                )
            )
        previous = current
    return previous[-1]


def levenshtein_similarity(a: str, b: str) -> int:
    longest = max(len(a), len(b))
    if longest == 0:
        return 100
    return round((1 - edit_distance(a, b) / longest) * 100)


def jaccard_similarity(a: str, b: str) -> int:
    """Jaccard over the sets of words longer than two characters."""
    return _set_similarity(set(_significant_words(a)), set(_significant_words(b)))


def length_similarity(a: str, b: str) -> int:
    longest = max(len(a), len(b))
    if longest == 0:
        return 100
    return round(min(len(a), len(b)) / longest * 100)


def structural_pattern(text: str) -> str:
    """Replace every alphanumeric character with ``X``, keeping punctuation shape."""
    return _WHITESPACE_RE.sub(" ", _ALNUM_RE.sub("X", text))


def structural_similarity(a: str, b: str) -> int:
    return jaccard_similarity(structural_pattern(a), structural_pattern(b))


def extract_keyphrases(text: str) -> set[str]:
    """2- and 3-word shingles over the significant words of *text*."""
    words = _significant_words(text)
    phrases: set[str] = set()
    for i in range(len(words) - 1):
        phrases.add(f"{words[i]} {words[i + 1]}")
        if i < len(words) - 2:
            phrases.add(f"{words[i]} {words[i + 1]} {words[i + 2]}")
    return phrases


def keyphrase_similarity(a: str, b: str) -> int:
    return _set_similarity(extract_keyphrases(a), extract_keyphrases(b))


def fuzzy_similarity(a: str, b: str) -> int:
    """Tier 2 score: edit distance, word overlap, and length ratio."""
    return round(
        levenshtein_similarity(a, b) * FUZZY_WEIGHT_LEVENSHTEIN
        + jaccard_similarity(a, b) * FUZZY_WEIGHT_JACCARD
        + length_similarity(a, b) * FUZZY_WEIGHT_LENGTH
    )


def semantic_similarity(a: str, b: str) -> int:
    """Tier 3 score: word overlap, punctuation shape, and shared key phrases."""
    return round(
        jaccard_similarity(a, b) * SEMANTIC_WEIGHT_JACCARD
        + structural_similarity(a, b) * SEMANTIC_WEIGHT_STRUCTURE
        + keyphrase_similarity(a, b) * SEMANTIC_WEIGHT_KEYPHRASE
    )


def _fuzzy_upper_bound(a: str, b: str) -> float:
    # Edit distance is at least the length difference, so the Levenshtein
    # term can never exceed the length ratio.
    ratio = length_similarity(a, b)
    return round(
        ratio * (FUZZY_WEIGHT_LEVENSHTEIN + FUZZY_WEIGHT_LENGTH)
        + 100 * FUZZY_WEIGHT_JACCARD
    )


# =============================================================================
# Grouping
# =============================================================================


def determine_impact_level(
    member_count: int, options: Optional[SimilarityOptions] = None
) -> ImpactLevel:
    opts = options or SimilarityOptions()
    if member_count >= opts.critical_min_pages:
        return "Critical"
    if member_count >= opts.high_min_pages:
        return "High"
    if member_count >= opts.medium_min_pages:
        return "Medium"
    return "Low"


def find_exact_matches(items: list[ContentItem]) -> list[list[ContentItem]]:
    buckets: dict[str, list[ContentItem]] = {}
    for item in items:
        buckets.setdefault(normalize_content(item.content), []).append(item)
    return [members for members in buckets.values() if len(members) > 1]


def _cluster_from_seeds(
    items: list[ContentItem],
    threshold: int,
    score: Callable[[str, str], int],
    prefilter: Optional[Callable[[str, str], float]] = None,
) -> list[tuple[list[ContentItem], int]]:
    """Greedy seed clustering. Returns ``(members, lowest score vs seed)``."""
    groups: list[tuple[list[ContentItem], int]] = []
    taken = [False] * len(items)

    for i, seed in enumerate(items):
        if taken[i]:
            continue
        taken[i] = True
        members = [seed]
        lowest = 100

        for j in range(i + 1, len(items)):
            if taken[j]:
                continue
            other = items[j].content
            if prefilter is not None and prefilter(seed.content, other) < threshold:
                continue
            similarity = score(seed.content, other)
            if similarity >= threshold:
                taken[j] = True
                members.append(items[j])
                lowest = min(lowest, similarity)

        if len(members) > 1:
            groups.append((members, lowest))

    return groups


def find_fuzzy_matches(
    items: list[ContentItem], threshold: int = FUZZY_MATCH_THRESHOLD
) -> list[tuple[list[ContentItem], int]]:
    return _cluster_from_seeds(
        items, threshold, fuzzy_similarity, prefilter=_fuzzy_upper_bound
    )


def find_semantic_matches(
    items: list[ContentItem], threshold: int = SEMANTIC_MATCH_THRESHOLD
) -> list[tuple[list[ContentItem], int]]:
    return _cluster_from_seeds(items, threshold, semantic_similarity)


def _remaining(
    items: list[ContentItem], groups: list[list[ContentItem]]
) -> list[ContentItem]:
    grouped = {id(member) for members in groups for member in members}
    return [item for item in items if id(item) not in grouped]


def build_groups(
    clusters: list[tuple[list[ContentItem], int]],
    duplication_type: DuplicationType,
    options: SimilarityOptions,
) -> list[DuplicateGroup]:
    """Turn ``(members, score)`` clusters into groups spanning distinct pages.

    Repeated URLs are collapsed; a cluster confined to one page is dropped.
    """
    groups = []
    for members, score in clusters:
        urls = list(dict.fromkeys(m.url for m in members))
        if len(urls) < 2:
            continue
        groups.append(
            DuplicateGroup(
                content=members[0].content,
                urls=urls,
                similarity_score=score,
                impact_level=determine_impact_level(len(urls), options),
                duplication_type=duplication_type,
            )
        )
    return groups


def detect_duplicates(
    items: list[ContentItem], options: Optional[SimilarityOptions] = None
) -> DuplicateAnalysisResult:
    """Group duplicate and near-duplicate content across pages.

    Args:
        items: Content items (one title, heading, paragraph... each).
        options: Thresholds; defaults to ``SimilarityOptions()``.

    Returns:
        Groups from all three tiers (exact first), never singletons, with
        ``duplicate_count`` = sum over groups of (members - 1).
    """
    opts = options or SimilarityOptions()
    valid = [item for item in items if len(item.content) >= opts.min_content_length]
    if not valid:
        return DuplicateAnalysisResult()

    exact = find_exact_matches(valid)
    after_exact = _remaining(valid, exact)

    fuzzy = find_fuzzy_matches(after_exact, opts.fuzzy_match_threshold)
    after_fuzzy = _remaining(after_exact, [members for members, _ in fuzzy])

    semantic = find_semantic_matches(after_fuzzy, opts.semantic_threshold)

    exact_groups = build_groups([(members, 100) for members in exact], "exact", opts)
    fuzzy_groups = build_groups(fuzzy, "fuzzy", opts)
    semantic_groups = build_groups(semantic, "semantic", opts)
    groups = exact_groups + fuzzy_groups + semantic_groups

    return DuplicateAnalysisResult(
        duplicate_groups=groups,
        duplicate_count=sum(len(g.urls) - 1 for g in groups),
        total_analyzed=len(valid),
        examples=[g.content for g in groups[:MAX_EXAMPLES] if g.content.strip()],
        stats=DuplicateStats(
            exact_matches=len(exact_groups),
            fuzzy_matches=len(fuzzy_groups),
            semantic_matches=len(semantic_groups),
        ),
    )
